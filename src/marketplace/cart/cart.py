"""Cart aggregate — a customer's in-progress selection of products.

A customer has at most one live cart. The cart keeps a cached running total
that is adjusted on every add and remove; it is a display convenience only.
Checkout recomputes the order total from current product prices.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from marketplace.cart.events import CartItemAdded, CartItemRemoved
from marketplace.domain import marketplace
from marketplace.errors import ProductNotInCartError


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.aggregate
class Cart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    total = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            total=0.0,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def add_item(self, product_id, quantity, unit_price):
        """Add ``quantity`` of a product, merging into an existing line if present."""
        existing = self.item_for(product_id)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity))

        self.total = round((self.total or 0.0) + unit_price * quantity, 2)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity=quantity,
                cart_total=self.total,
            )
        )

    def remove_item(self, product_id, unit_price):
        """Remove a product line, taking its contribution off the cached total.

        ``unit_price`` is the product's current price; the cached total never
        drops below zero even if the price moved since the line was added.
        """
        item = self.item_for(product_id)
        if item is None:
            raise ProductNotInCartError(product_id)

        contribution = unit_price * item.quantity
        self.total = max(0.0, round((self.total or 0.0) - contribution, 2))
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                cart_total=self.total,
            )
        )


@marketplace.repository(part_of=Cart)
class CartRepository:
    def get_by_customer(self, customer_id) -> Cart | None:
        """Return the customer's live cart, or None if they have none."""
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        if not carts:
            return None
        return self.get(carts[0].id)

    def remove(self, cart) -> None:
        self._dao.delete(cart)
