"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductListed:
    """A store owner put a new product on sale."""

    __version__ = 1

    product_id = Identifier(required=True)
    store_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    listed_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductPriceChanged:
    """The unit price of a product changed. Existing orders keep their price."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)


@marketplace.event(part_of="Product")
class StockDecremented:
    """Stock was taken by an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)


@marketplace.event(part_of="Product")
class StockRestored:
    """Stock was handed back, e.g. when a pending order is deleted."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
