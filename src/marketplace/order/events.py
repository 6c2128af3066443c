"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    cart_id = Identifier()
    total = Float(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCompleted:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    completed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderWithdrawn:
    """A pending order was deleted by its owner and its stock handed back."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    status = String(required=True)
    withdrawn_at = DateTime(required=True)
