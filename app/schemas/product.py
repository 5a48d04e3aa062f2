from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class SizeStock(BaseModel):
    size: str = Field(min_length=1)
    stock: int = Field(ge=0)


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    price: float = Field(ge=0)
    offerPrice: Optional[float] = Field(default=None, ge=0)
    images: List[str] = []
    sku: Optional[str] = None
    featured: bool = False
    isActive: bool = True


class ProductCreate(ProductBase):
    # Ignored when sizeStocks is given; the aggregate is derived from it
    stock: int = Field(default=0, ge=0)
    sizeStocks: Optional[List[SizeStock]] = None


class ProductUpdate(ProductCreate):
    pass


class ProductOut(ProductBase):
    id: int
    stock: int
    sizeStocks: Optional[List[SizeStock]] = None
    sizes: List[str] = []

    model_config = ConfigDict(from_attributes=True)
