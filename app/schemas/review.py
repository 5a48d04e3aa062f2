from pydantic import BaseModel, Field, field_validator
from typing import Dict, Literal, Optional

ReviewStatus = Literal["pending", "approved", "rejected"]


def _strip_comment(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Comment is required")
    return v


class ReviewCreate(BaseModel):
    productId: int
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1, max_length=2000)

    check_comment = field_validator("comment")(_strip_comment)


class ReviewUpdate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1, max_length=2000)

    check_comment = field_validator("comment")(_strip_comment)


class ReviewStatusUpdate(BaseModel):
    status: ReviewStatus
    adminResponse: Optional[str] = None


class ReviewOut(BaseModel):
    id: int
    productId: int
    userId: int
    orderId: int
    rating: int
    comment: str
    status: ReviewStatus
    helpful: int
    reviewerName: Optional[str] = None
    verifiedPurchase: bool
    adminResponse: Optional[str] = None
    createdAt: str
    updatedAt: str


class ReviewStatsOut(BaseModel):
    averageRating: float
    totalReviews: int
    ratingDistribution: Dict[int, int]


class PurchaseCheckOut(BaseModel):
    canReview: bool
    orderId: Optional[int] = None
