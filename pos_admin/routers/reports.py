# =========================================================
# REPORTS ROUTER
#
# Read-only projections over sales history and inventory.
# Always returns Decimal for money (never None).
# =========================================================

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import date
from decimal import Decimal
from typing import Optional

from pos_admin.database import get_db
from pos_admin.core.auth import get_current_user
from pos_admin.core.errors import InvalidRequest
from pos_admin.models.categories import Category
from pos_admin.models.sales import Sale
from pos_admin.models.sale_items import SaleItem
from pos_admin.models.products import Product
from pos_admin.schemas.report import DailySalesRow, ProductReportRow

router = APIRouter(prefix="/api/reports", tags=["Reports"])

CENT = Decimal("0.01")


def money(value) -> Decimal:
    # SQLite hands back floats for SUM over NUMERIC
    return Decimal(str(value or 0)).quantize(CENT)


# =========================================================
# DAILY SALES SUMMARY
# =========================================================
def daily_sales(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    sale_day = func.date(Sale.created_at)

    query = db.query(
        sale_day.label("date"),
        func.count(Sale.id).label("total_transactions"),
        func.coalesce(func.sum(Sale.total_amount), 0).label("total_revenue"),
    )

    if start_date and end_date:
        query = query.filter(sale_day.between(start_date.isoformat(), end_date.isoformat()))

    rows = query.group_by(sale_day).order_by(sale_day.desc()).all()

    return [
        DailySalesRow(
            date=row.date,
            total_transactions=row.total_transactions,
            total_revenue=money(row.total_revenue),
        )
        for row in rows
    ]


# =========================================================
# PER PRODUCT SUMMARY
# =========================================================
def product_sales(db: Session, order_by_sold: bool = True):
    total_sold = func.coalesce(func.sum(SaleItem.quantity), 0)

    query = (
        db.query(
            Product.id.label("id"),
            Product.name.label("name"),
            Product.price.label("price"),
            Product.stock.label("stock"),
            Category.name.label("category_name"),
            total_sold.label("total_sold"),
            func.coalesce(func.sum(SaleItem.total_price), 0).label("total_revenue"),
        )
        .outerjoin(Category, Product.category_id == Category.id)
        .outerjoin(SaleItem, SaleItem.product_id == Product.id)
        .group_by(Product.id, Product.name, Product.price, Product.stock, Category.name)
    )

    if order_by_sold:
        query = query.order_by(total_sold.desc(), Product.name)
    else:
        query = query.order_by(Product.name, Product.id)

    return [
        ProductReportRow(
            id=row.id,
            name=row.name,
            price=money(row.price),
            stock=row.stock,
            category_name=row.category_name,
            total_sold=int(row.total_sold or 0),
            total_revenue=money(row.total_revenue),
        )
        for row in query.all()
    ]


@router.get("/sales", response_model=list[DailySalesRow])
def sales_report(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
):
    if (start_date is None) != (end_date is None):
        raise InvalidRequest("start_date and end_date must be given together")

    if start_date and start_date > end_date:
        raise InvalidRequest("start_date cannot be after end_date")

    return daily_sales(db, start_date, end_date)


@router.get("/products", response_model=list[ProductReportRow])
def products_report(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return product_sales(db)
