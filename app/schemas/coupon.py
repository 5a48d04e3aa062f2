from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal, Optional

CouponType = Literal["percentage", "fixed", "shipping"]


class CouponBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None
    type: CouponType = "percentage"
    value: float = Field(ge=0)
    minAmount: float = Field(default=0, ge=0)
    maxDiscount: Optional[float] = Field(default=None, ge=0)
    usageLimit: int = Field(default=100, ge=0)
    validFrom: datetime
    validUntil: datetime
    isActive: bool = True

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.strip().upper()


class CouponCreate(CouponBase):
    pass


class CouponUpdate(CouponBase):
    pass


class CouponOut(CouponBase):
    id: int
    usedCount: int

    model_config = ConfigDict(from_attributes=True)


class CouponValidateIn(BaseModel):
    code: str = Field(min_length=1)
    subtotal: float = Field(gt=0)


class CouponValidateOut(BaseModel):
    code: str
    discount: float
    type: CouponType
    description: Optional[str] = None
