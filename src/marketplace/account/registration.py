"""Account registration — command and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.account.account import Account
from marketplace.domain import marketplace


@marketplace.command(part_of="Account")
class RegisterAccount:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    role = String(required=True, max_length=20)
    address = String(max_length=500)


@marketplace.command_handler(part_of=Account)
class RegisterAccountHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        account = Account.register(
            name=command.name,
            email=command.email,
            role=command.role,
            address=command.address,
        )
        current_domain.repository_for(Account).add(account)
        return str(account.id)
