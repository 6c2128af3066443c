"""Pydantic request/response schemas for the Marketplace API.

Wire names follow the storefront clients (``productId``, ``_id``,
``storeOwner``); Python attribute names stay snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    quantity: int = Field(ge=1, default=1)


class RemoveFromCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")


class OrderItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    quantity: int = Field(ge=1)


class PlaceOrderRequest(BaseModel):
    items: list[OrderItemRequest] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class MessageResponse(BaseModel):
    message: str


class ProductSchema(BaseModel):
    id: str = Field(serialization_alias="_id")
    name: str
    price: float
    stock: int
    store_owner: str = Field(serialization_alias="storeOwner")


class CartLineSchema(BaseModel):
    product: ProductSchema | None
    quantity: int


class CartResponse(BaseModel):
    products: list[CartLineSchema] = Field(default_factory=list)
    total: float = 0


class OrderLineSchema(BaseModel):
    product: str
    name: str
    quantity: int
    price: float
    store_owner: str = Field(serialization_alias="storeOwner")


class OrderSchema(BaseModel):
    id: str = Field(serialization_alias="_id")
    customer: str
    products: list[OrderLineSchema]
    total: float
    status: str
    created_at: str | None = Field(default=None, serialization_alias="createdAt")


class CheckoutResponse(BaseModel):
    message: str = "Order created successfully"
    order: OrderSchema
    estimated_delivery_time: str = Field(serialization_alias="estimatedDeliveryTime")


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------
def cart_response(details) -> CartResponse:
    """Render a ``CartDetails`` as the storefront cart view."""
    lines = [
        CartLineSchema(
            product=(
                ProductSchema(
                    id=str(line.product.id),
                    name=line.product.name,
                    price=line.product.price,
                    stock=line.product.stock,
                    store_owner=str(line.product.store_id),
                )
                if line.is_available
                else None
            ),
            quantity=line.quantity,
        )
        for line in details.lines
    ]
    return CartResponse(products=lines, total=details.total)


def order_schema(order) -> OrderSchema:
    return OrderSchema(
        id=str(order.id),
        customer=str(order.customer_id),
        products=[
            OrderLineSchema(
                product=str(item.product_id),
                name=item.product_name,
                quantity=item.quantity,
                price=item.price,
                store_owner=str(item.store_id),
            )
            for item in order.items
        ],
        total=order.total,
        status=order.status,
        created_at=order.created_at.isoformat() if order.created_at else None,
    )
