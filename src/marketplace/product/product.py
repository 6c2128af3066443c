"""Product aggregate — what a store sells and how many are left.

Stock is only ever taken through ``decrement_if_available``, which checks and
decrements in one step and reports a shortfall as a value rather than an
exception. Callers decide whether a shortfall means "reject the request" or
"roll back the unit of work".
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.errors import StockShortfall
from marketplace.product.events import (
    ProductListed,
    ProductPriceChanged,
    StockDecremented,
    StockRestored,
)


@dataclass(frozen=True)
class StockDecrement:
    """Outcome of a conditional stock decrement."""

    product_id: str
    product_name: str
    requested: int
    available: int
    applied: bool
    unit_price: float = 0.0
    store_id: str | None = None

    def shortfall(self) -> StockShortfall:
        return StockShortfall(
            product_id=self.product_id,
            product_name=self.product_name,
            requested=self.requested,
            available=self.available,
        )


@marketplace.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(required=True, min_value=0)
    store_id = Identifier(required=True)
    listed_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, price, stock, store_id):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=round(price, 2),
            stock=stock,
            store_id=store_id,
            listed_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                store_id=str(store_id),
                name=name,
                price=product.price,
                stock=stock,
                listed_at=now,
            )
        )
        return product

    def has_stock_for(self, quantity) -> bool:
        return self.stock >= quantity

    def change_price(self, new_price):
        if new_price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        previous_price = self.price
        self.price = round(new_price, 2)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=self.price,
            )
        )

    def decrement_if_available(self, quantity) -> StockDecrement:
        """Take ``quantity`` units if, and only if, that many are in stock."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        available = self.stock
        if available < quantity:
            return StockDecrement(
                product_id=str(self.id),
                product_name=self.name,
                requested=quantity,
                available=available,
                applied=False,
                unit_price=self.price,
                store_id=str(self.store_id),
            )

        self.stock = available - quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=available,
                new_stock=self.stock,
            )
        )
        return StockDecrement(
            product_id=str(self.id),
            product_name=self.name,
            requested=quantity,
            available=available,
            applied=True,
            unit_price=self.price,
            store_id=str(self.store_id),
        )

    def restock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous_stock = self.stock
        self.stock = previous_stock + quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous_stock,
                new_stock=self.stock,
            )
        )


@marketplace.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id) -> Product | None:
        """Point lookup that returns None instead of raising."""
        try:
            return self.get(product_id)
        except ObjectNotFoundError:
            return None

    def decrement_if_available(self, product_id, quantity) -> StockDecrement:
        """Conditionally take stock and persist the product when it was taken.

        Raises ``ObjectNotFoundError`` when the product no longer exists.
        """
        product = self.get(product_id)
        outcome = product.decrement_if_available(quantity)
        if outcome.applied:
            self.add(product)
        return outcome
