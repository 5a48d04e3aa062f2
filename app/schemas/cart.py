from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional

VariantType = Literal["color", "model"]


def _normalize_size(value: str) -> str:
    value = str(value).strip().upper()
    if not value:
        raise ValueError("size is required")
    return value


class CartItemIn(BaseModel):
    productId: int
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    offerPrice: Optional[float] = Field(default=None, ge=0)
    quantity: int
    size: str
    image: str = ""
    stock: int = Field(ge=0)
    variantId: Optional[str] = None
    variantName: Optional[str] = None
    variantType: Optional[VariantType] = None

    check_size = field_validator("size")(_normalize_size)


class CartItemUpdate(BaseModel):
    productId: int
    size: str
    quantity: int
    variantId: Optional[str] = None

    check_size = field_validator("size")(_normalize_size)


class CartItemOut(BaseModel):
    productId: int
    name: str
    price: float
    offerPrice: Optional[float] = None
    quantity: int
    size: str
    image: Optional[str] = None
    stock: int
    variantId: Optional[str] = None
    variantName: Optional[str] = None
    variantType: Optional[VariantType] = None


class CartOut(BaseModel):
    items: List[CartItemOut]
    total: float
    itemCount: int
