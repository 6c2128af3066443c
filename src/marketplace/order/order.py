"""Order aggregate — an immutable snapshot of what a customer bought.

Line items copy the product's name, price and store at the moment the order
is placed. Later price changes or product removals never touch an existing
order.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.errors import OrderOwnershipError, OrderStateError
from marketplace.order.events import OrderCompleted, OrderPlaced, OrderWithdrawn


class OrderStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
}


@marketplace.entity(part_of="Order")
class OrderLineItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    store_id = Identifier(required=True)

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)


@marketplace.aggregate
class Order:
    customer_id = Identifier(required=True)
    cart_id = Identifier()
    items = HasMany(OrderLineItem)
    total = Float(default=0.0, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()
    completed_at = DateTime()

    @classmethod
    def place(cls, customer_id, lines, cart_id=None):
        """Create a pending order from priced lines.

        Args:
            customer_id: The customer placing the order.
            lines: Iterable of dicts with product_id, product_name, quantity,
                   price and store_id.
            cart_id: The cart being converted, if any.
        """
        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            cart_id=cart_id,
            status=OrderStatus.PENDING.value,
            total=0.0,
            created_at=now,
        )

        for line in lines:
            order.add_items(
                OrderLineItem(
                    product_id=line["product_id"],
                    product_name=line["product_name"],
                    quantity=line["quantity"],
                    price=round(line["price"], 2),
                    store_id=line["store_id"],
                )
            )
        order.total = round(sum(item.subtotal for item in order.items), 2)

        if not order.items:
            raise ValidationError({"items": ["An order needs at least one line item"]})

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                cart_id=str(cart_id) if cart_id else None,
                total=order.total,
                item_count=len(order.items),
                placed_at=now,
            )
        )
        return order

    @property
    def store_ids(self) -> list[str]:
        """Distinct stores that supply this order, in line order."""
        seen = []
        for item in self.items:
            store_id = str(item.store_id)
            if store_id not in seen:
                seen.append(store_id)
        return seen

    def is_owned_by(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise OrderStateError(f"Cannot transition from {current.value} to {target_status.value}")

    def complete(self):
        self._assert_can_transition(OrderStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = OrderStatus.COMPLETED.value
        self.completed_at = now
        self.raise_(
            OrderCompleted(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                completed_at=now,
            )
        )

    def withdraw(self, customer_id):
        """Mark the order for deletion by its owner.

        Only the customer who placed the order may delete it, and only while
        it is still pending.
        """
        if not self.is_owned_by(customer_id):
            raise OrderOwnershipError()
        if self.status != OrderStatus.PENDING.value:
            raise OrderStateError(f"Cannot delete an order that is {self.status}")

        self.raise_(
            OrderWithdrawn(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                status=self.status,
                withdrawn_at=datetime.now(UTC),
            )
        )


@marketplace.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id) -> list[Order]:
        """All of a customer's orders, newest first."""
        records = self._dao.query.filter(customer_id=str(customer_id)).all().items
        orders = [self.get(record.id) for record in records]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def remove(self, order) -> None:
        self._dao.delete(order)
