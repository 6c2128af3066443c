"""Account aggregate — marketplace users and where they are.

Authentication lives upstream; the marketplace only keeps what checkout needs
to know about a user: whether they buy or sell, and their address for
delivery estimation.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, String

from marketplace.account.events import AccountRegistered
from marketplace.domain import marketplace


class AccountRole(Enum):
    CUSTOMER = "customer"
    STORE = "store"


@marketplace.aggregate
class Account:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254, unique=True)
    role = String(choices=AccountRole, default=AccountRole.CUSTOMER.value)
    address = String(max_length=500)
    registered_at = DateTime()

    @classmethod
    def register(cls, name, email, role=AccountRole.CUSTOMER.value, address=None):
        now = datetime.now(UTC)
        account = cls(
            name=name,
            email=email,
            role=role,
            address=address,
            registered_at=now,
        )
        account.raise_(
            AccountRegistered(
                account_id=str(account.id),
                name=name,
                email=email,
                role=role,
                registered_at=now,
            )
        )
        return account

    @property
    def has_address(self) -> bool:
        return bool(self.address and self.address.strip())


@marketplace.repository(part_of=Account)
class AccountRepository:
    def address_of(self, account_id) -> str | None:
        """Return the account's address, or None if unknown or blank."""
        try:
            account = self.get(account_id)
        except ObjectNotFoundError:
            return None
        return account.address if account.has_address else None
