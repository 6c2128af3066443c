"""FastAPI routes for the Marketplace domain — carts and orders."""

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from protean.utils.globals import current_domain

from marketplace.api.dependencies import current_customer, get_checkout_engine
from marketplace.api.schemas import (
    AddToCartRequest,
    CartResponse,
    CheckoutResponse,
    MessageResponse,
    OrderSchema,
    PlaceOrderRequest,
    RemoveFromCartRequest,
    cart_response,
    order_schema,
)
from marketplace.cart.items import AddToCart, ClearCart, RemoveFromCart
from marketplace.cart.view import load_cart
from marketplace.checkout.engine import CheckoutEngine, CheckoutResult
from marketplace.domain import marketplace
from marketplace.order.lifecycle import CompleteOrder
from marketplace.order.order import Order


def _checkout_response(result: CheckoutResult) -> CheckoutResponse:
    return CheckoutResponse(
        order=order_schema(result.order),
        estimated_delivery_time=result.delivery.describe(),
    )


async def _run_blocking(func, *args):
    """Run a checkout engine call on the threadpool.

    The engine waits on stock locks and on the delivery estimator, neither of
    which may block the event loop. Worker threads get their own domain context.
    """

    def call():
        with marketplace.domain_context():
            return func(*args)

    return await run_in_threadpool(call)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(customer_id: str = Depends(current_customer)) -> CartResponse:
    return cart_response(load_cart(customer_id))


@cart_router.post("/add", response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, customer_id: str = Depends(current_customer)) -> CartResponse:
    command = AddToCart(
        customer_id=customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return cart_response(load_cart(customer_id))


@cart_router.post("/remove", response_model=CartResponse | MessageResponse)
async def remove_from_cart(
    body: RemoveFromCartRequest, customer_id: str = Depends(current_customer)
) -> CartResponse | MessageResponse:
    command = RemoveFromCart(customer_id=customer_id, product_id=body.product_id)
    cart_id = current_domain.process(command, asynchronous=False)
    if cart_id is None:
        return MessageResponse(message="Cart is now empty")
    return cart_response(load_cart(customer_id))


@cart_router.delete("/clear", response_model=MessageResponse)
async def clear_cart(customer_id: str = Depends(current_customer)) -> MessageResponse:
    current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
    return MessageResponse(message="Cart cleared successfully")


@cart_router.post("/order", status_code=201, response_model=CheckoutResponse)
async def convert_cart_to_order(
    customer_id: str = Depends(current_customer),
    engine: CheckoutEngine = Depends(get_checkout_engine),
) -> CheckoutResponse:
    """Check out the caller's cart.

    Stock is re-validated and decremented atomically with order creation and
    cart deletion. The delivery estimate is best-effort and always present.
    """
    result = await _run_blocking(engine.convert_cart_to_order, customer_id)
    return _checkout_response(result)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=CheckoutResponse)
async def place_order(
    body: PlaceOrderRequest,
    customer_id: str = Depends(current_customer),
    engine: CheckoutEngine = Depends(get_checkout_engine),
) -> CheckoutResponse:
    items = [{"product_id": i.product_id, "quantity": i.quantity} for i in body.items]
    result = await _run_blocking(engine.place_order, customer_id, items)
    return _checkout_response(result)


@order_router.get("", response_model=list[OrderSchema])
async def list_orders(customer_id: str = Depends(current_customer)) -> list[OrderSchema]:
    orders = current_domain.repository_for(Order).for_customer(customer_id)
    return [order_schema(order) for order in orders]


@order_router.delete("/{order_id}", response_model=MessageResponse)
async def delete_order(
    order_id: str,
    customer_id: str = Depends(current_customer),
    engine: CheckoutEngine = Depends(get_checkout_engine),
) -> MessageResponse:
    await _run_blocking(engine.delete_order, customer_id, order_id)
    return MessageResponse(message="Order deleted successfully")


@order_router.post("/{order_id}/complete", response_model=OrderSchema)
async def complete_order(order_id: str, customer_id: str = Depends(current_customer)) -> OrderSchema:
    current_domain.process(CompleteOrder(order_id=order_id), asynchronous=False)
    return order_schema(current_domain.repository_for(Order).get(order_id))
