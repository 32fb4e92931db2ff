# pos_admin/routers/products.py

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from pos_admin.database import get_datastore, get_db
from pos_admin.core.auth import get_current_user
from pos_admin.core.config import settings
from pos_admin.core.errors import InvalidRequest, NotFound
from pos_admin.services.inventory import InventoryStore
from pos_admin.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)

router = APIRouter(
    prefix="/api/products",
    tags=["Products"],
)


def get_inventory(request: Request) -> InventoryStore:
    return InventoryStore(get_datastore(request))


@router.get("", response_model=list[ProductResponse])
def list_products(
    db: Session = Depends(get_db),
    inventory: InventoryStore = Depends(get_inventory),
    current_user=Depends(get_current_user),
    search: str | None = Query(None, max_length=100),
    category_id: int | None = Query(None),
    low_stock: bool = Query(False, description="Only products below the low stock threshold"),
):
    return inventory.list(
        db,
        search=search,
        category_id=category_id,
        low_stock=settings.LOW_STOCK_THRESHOLD if low_stock else None,
    )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    inventory: InventoryStore = Depends(get_inventory),
    current_user=Depends(get_current_user),
):
    product = inventory.get(product_id)

    if not product:
        raise NotFound("Product not found")

    return product


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    inventory: InventoryStore = Depends(get_inventory),
    current_user=Depends(get_current_user),
):
    return inventory.create(product_data.model_dump())


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    inventory: InventoryStore = Depends(get_inventory),
    current_user=Depends(get_current_user),
):
    changes = product_data.model_dump(exclude_unset=True)

    # name, price and stock are required columns and cannot be cleared
    for field in ("name", "price", "stock"):
        if field in changes and changes[field] is None:
            raise InvalidRequest(f"{field} cannot be null")

    return inventory.update(product_id, changes)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    inventory: InventoryStore = Depends(get_inventory),
    current_user=Depends(get_current_user),
):
    inventory.delete(product_id)

    return {"message": "Product deleted successfully"}
