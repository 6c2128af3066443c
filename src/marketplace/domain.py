"""Marketplace bounded context — Products, Carts, Orders and Checkout.

Store owners list products; customers build a cart and convert it into an
order. The checkout flow validates stock, snapshots prices, decrements
inventory and clears the cart as one unit of work.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
marketplace = Domain(name="marketplace")
