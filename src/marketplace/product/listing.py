"""Product listing and pricing — commands and handler.

Store owners manage their catalogue elsewhere; these commands are the
minimal surface the marketplace needs to put products on sale and reprice
them.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.product.product import Product


@marketplace.command(part_of="Product")
class ListProduct:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(required=True, min_value=0)
    store_id = Identifier(required=True)


@marketplace.command(part_of="Product")
class ChangeProductPrice:
    product_id = Identifier(required=True)
    new_price = Float(required=True, min_value=0.0)


@marketplace.command_handler(part_of=Product)
class ProductListingHandler:
    @handle(ListProduct)
    def list_product(self, command):
        product = Product.create(
            name=command.name,
            price=command.price,
            stock=command.stock,
            store_id=command.store_id,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(ChangeProductPrice)
    def change_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_price(command.new_price)
        repo.add(product)
