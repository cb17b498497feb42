from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from storefront.api.schemas.product import ProductOut


# productId / quantity are validated by the cart store so that a missing or
# malformed value answers 400 with a descriptive message instead of a 422
class AddItemRequest(BaseModel):
    product_id: Optional[str] = Field(None, alias="productId")
    quantity: Optional[Any] = 1

    model_config = ConfigDict(populate_by_name=True)


class UpdateItemRequest(BaseModel):
    product_id: Optional[str] = Field(None, alias="productId")
    quantity: Optional[Any] = None

    model_config = ConfigDict(populate_by_name=True)


class DecreaseItemRequest(BaseModel):
    product_id: Optional[str] = Field(None, alias="productId")

    model_config = ConfigDict(populate_by_name=True)


class CartLineOut(BaseModel):
    product_id: str = Field(..., alias="productId")
    quantity: int
    product: Optional[ProductOut] = Field(None, description="Current catalog entry, null if it no longer exists")

    model_config = ConfigDict(populate_by_name=True)


class CartOut(BaseModel):
    items: List[CartLineOut] = []


class CartRemovedOut(CartOut):
    message: str


class CartAddedOut(CartOut):
    message: str
    cart_id: Optional[str] = Field(None, alias="cartId")

    model_config = ConfigDict(populate_by_name=True)


class MessageOut(BaseModel):
    message: str


class PlaceOrderOut(BaseModel):
    message: str
    order_id: str = Field(..., alias="orderId")
    total_amount: float = Field(..., alias="totalAmount")

    model_config = ConfigDict(populate_by_name=True)
