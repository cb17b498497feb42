from typing import Optional
from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    discount: float = Field(0.0, ge=0)
    category: str = "general"
    image: Optional[str] = None


class ProductOut(BaseModel):
    id: str
    name: str
    price: float
    discount: float = 0.0
    category: str = "general"
    image: Optional[str] = None
    created_at: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    image: Optional[str] = None
