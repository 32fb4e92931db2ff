# =========================================================
# SALES ROUTER
#
# - POST posts a sale: stock check, line items and stock
#   decrement commit together or not at all
# - Sales are immutable once posted (no update/delete)
# =========================================================

from fastapi import APIRouter, Depends, Query, status, Request
from sqlalchemy.orm import Session, joinedload

from pos_admin.database import get_datastore, get_db
from pos_admin.core.auth import get_current_user
from pos_admin.core.errors import NotFound
from pos_admin.models.sales import Sale
from pos_admin.models.sale_items import SaleItem
from pos_admin.schemas.sale import (
    SaleCreate,
    SaleDetailResponse,
    SaleResponse,
    SaleSummaryResponse,
)
from pos_admin.services.sale_poster import SalePoster
from pos_admin.core.rate_limiter import limiter

router = APIRouter(prefix="/api/sales", tags=["Sales"])


def get_sale_poster(request: Request) -> SalePoster:
    return SalePoster(get_datastore(request))


# =========================================================
# CREATE SALE
# =========================================================
@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_sale(
    request: Request,
    sale_data: SaleCreate,
    poster: SalePoster = Depends(get_sale_poster),
    current_user=Depends(get_current_user),
):
    return poster.post(
        principal_id=current_user.id,
        items=[(item.product_id, item.quantity) for item in sale_data.items],
        payment_method=sale_data.payment_method,
    )


# =========================================================
# LIST SALES
# =========================================================
@router.get("", response_model=list[SaleSummaryResponse])
def list_sales(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    return (
        db.query(Sale)
        .options(joinedload(Sale.user))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


# =========================================================
# GET SINGLE SALE
# =========================================================
@router.get("/{sale_id}", response_model=SaleDetailResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    sale = (
        db.query(Sale)
        .options(
            joinedload(Sale.user),
            joinedload(Sale.items).joinedload(SaleItem.product),
        )
        .filter(Sale.id == sale_id)
        .first()
    )

    if not sale:
        raise NotFound("Sale not found")

    return sale
