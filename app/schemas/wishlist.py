from pydantic import BaseModel
from typing import List


class WishlistItemOut(BaseModel):
    productId: int
    addedAt: str


class WishlistOut(BaseModel):
    items: List[WishlistItemOut]
