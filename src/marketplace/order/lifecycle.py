"""Order lifecycle after placement — completion and deletion."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import OrderNotFoundError
from marketplace.order.order import Order
from marketplace.product.product import Product
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="Order")
class CompleteOrder:
    order_id = Identifier(required=True)


@marketplace.command(part_of="Order")
class DeleteOrder:
    """Delete a pending order on behalf of its owner and restore its stock.

    Restocking writes products, so callers hold the stock locks of the order's
    products while this runs (see ``CheckoutEngine.delete_order``).
    """

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


def _load(repo, order_id):
    try:
        return repo.get(order_id)
    except ObjectNotFoundError as exc:
        raise OrderNotFoundError(order_id) from exc


@marketplace.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(CompleteOrder)
    def complete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = _load(repo, command.order_id)
        order.complete()
        repo.add(order)

    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = _load(repo, command.order_id)
        order.withdraw(command.customer_id)

        products = current_domain.repository_for(Product)
        for item in order.items:
            product = products.find(item.product_id)
            if product is None:
                logger.warning(
                    "Skipping restock for removed product",
                    order_id=str(order.id),
                    product_id=str(item.product_id),
                )
                continue
            product.restock(item.quantity)
            products.add(product)

        repo.remove(order)
