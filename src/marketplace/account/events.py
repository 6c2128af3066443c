"""Domain events for the Account aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Account")
class AccountRegistered:
    """A customer or store owner joined the marketplace."""

    __version__ = 1

    account_id = Identifier(required=True)
    name = String(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)
