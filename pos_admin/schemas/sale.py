# schemas/sale.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import List
from decimal import Decimal

class SaleItemCreate(BaseModel):
    product_id: int
    quantity: int

class SaleCreate(BaseModel):
    items: List[SaleItemCreate]
    payment_method: str = Field("cash", min_length=1, max_length=32)

    @field_validator("payment_method")
    @classmethod
    def normalize_payment_method(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("payment_method cannot be blank")
        return value

class SaleItemResponse(BaseModel):
    product_id: int
    product_name: str | None = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)

class SaleResponse(BaseModel):
    id: int
    total_amount: Decimal
    payment_method: str
    user_id: int | None
    created_at: datetime
    items: List[SaleItemResponse]

    model_config = ConfigDict(from_attributes=True)

class SaleSummaryResponse(BaseModel):
    id: int
    total_amount: Decimal
    payment_method: str
    user_id: int | None
    user_name: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class SaleDetailResponse(SaleSummaryResponse):
    items: List[SaleItemResponse]
