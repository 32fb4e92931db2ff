# pos_admin/routers/dashboard.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from datetime import datetime, timedelta, timezone

from pos_admin.database import get_db
from pos_admin.core.auth import get_current_user
from pos_admin.core.config import settings
from pos_admin.models.products import Product
from pos_admin.models.sales import Sale
from pos_admin.models.sale_items import SaleItem
from pos_admin.routers.reports import money
from pos_admin.schemas.report import BestSellerRow, DashboardStatsResponse

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


# =========================================================
# DASHBOARD STATS (TODAY + ROLLING 30 DAYS)
# =========================================================
@router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    now = datetime.now(timezone.utc)
    today = now.date().isoformat()
    start_30 = (now.date() - timedelta(days=30)).isoformat()

    sale_day = func.date(Sale.created_at)

    today_sales = (
        db.query(func.coalesce(func.sum(Sale.total_amount), 0))
        .filter(sale_day == today)
        .scalar()
    )

    monthly_sales = (
        db.query(func.coalesce(func.sum(Sale.total_amount), 0))
        .filter(sale_day >= start_30)
        .scalar()
    )

    total_products = db.query(func.count(Product.id)).scalar()

    low_stock_products = (
        db.query(Product)
        .options(joinedload(Product.category))
        .filter(Product.stock < settings.LOW_STOCK_THRESHOLD)
        .order_by(Product.stock.asc(), Product.name)
        .all()
    )

    total_sold = func.sum(SaleItem.quantity)

    best_selling = (
        db.query(
            Product.id.label("product_id"),
            Product.name,
            Product.price,
            total_sold.label("total_sold"),
            func.sum(SaleItem.total_price).label("revenue"),
        )
        .join(SaleItem, SaleItem.product_id == Product.id)
        .join(Sale, SaleItem.sale_id == Sale.id)
        .filter(sale_day >= start_30)
        .group_by(Product.id, Product.name, Product.price)
        .order_by(total_sold.desc())
        .limit(5)
        .all()
    )

    recent_sales = (
        db.query(Sale)
        .options(joinedload(Sale.user))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(10)
        .all()
    )

    return {
        "today_sales": money(today_sales),
        "monthly_sales": money(monthly_sales),
        "total_products": total_products,
        "low_stock_products": low_stock_products,
        "best_selling": [
            BestSellerRow(
                product_id=row.product_id,
                name=row.name,
                price=money(row.price),
                total_sold=int(row.total_sold or 0),
                revenue=money(row.revenue),
            )
            for row in best_selling
        ],
        "recent_sales": recent_sales,
        "generated_at": now,
    }
