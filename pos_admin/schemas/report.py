# schemas/report.py

from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from decimal import Decimal
from typing import List

from pos_admin.schemas.product import ProductResponse
from pos_admin.schemas.sale import SaleSummaryResponse


class DailySalesRow(BaseModel):
    date: date
    total_transactions: int
    total_revenue: Decimal


class ProductReportRow(BaseModel):
    id: int
    name: str
    price: Decimal
    stock: int
    category_name: str | None
    total_sold: int
    total_revenue: Decimal


class BestSellerRow(BaseModel):
    product_id: int
    name: str
    price: Decimal
    total_sold: int
    revenue: Decimal


class DashboardStatsResponse(BaseModel):
    today_sales: Decimal
    monthly_sales: Decimal
    total_products: int
    low_stock_products: List[ProductResponse]
    best_selling: List[BestSellerRow]
    recent_sales: List[SaleSummaryResponse]
    generated_at: datetime

    model_config = ConfigDict(from_attributes=True)
