from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None

    price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        max_digits=10,
        decimal_places=2,
        description="Unit price, non-negative with two decimal places",
    )

    stock: int = Field(0, ge=0, description="Quantity on hand")
    category_id: int | None = None
    sku: str | None = Field(None, max_length=64)


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0, lt=100_000_000, max_digits=10, decimal_places=2)
    stock: int | None = Field(None, ge=0)
    category_id: int | None = None
    sku: str | None = Field(None, max_length=64)


class ProductResponse(BaseModel):
    id: int
    name: str
    description: str | None
    price: Decimal
    stock: int
    sku: str | None
    category_id: int | None
    category_name: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
