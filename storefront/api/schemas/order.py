from typing import List, Optional
from pydantic import BaseModel, Field


class OrderLineOut(BaseModel):
    product_id: str = Field(..., description="Product identifier")
    title: Optional[str] = Field(None, description="Product name at time of ordering")
    unit_price: Optional[float] = Field(None, description="Unit price charged; null if the product could not be resolved")
    quantity: int


class OrderOut(BaseModel):
    id: str
    user_id: str
    items: List[OrderLineOut] = []
    total_amount: float
    status: str
    created_at: Optional[str] = None


class OrderListOut(BaseModel):
    orders: List[OrderOut] = []
