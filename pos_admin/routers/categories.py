# pos_admin/routers/categories.py

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pos_admin.database import Datastore, get_datastore, get_db
from pos_admin.core.auth import get_current_user
from pos_admin.core.errors import NotFound
from pos_admin.models.categories import Category
from pos_admin.models.products import Product
from pos_admin.schemas.category import CategoryCreate, CategoryResponse

router = APIRouter(
    prefix="/api/categories",
    tags=["Categories"],
)

logger = logging.getLogger("app")


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return db.query(Category).order_by(Category.name, Category.id).all()


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    category_data: CategoryCreate,
    datastore: Datastore = Depends(get_datastore),
    current_user=Depends(get_current_user),
):
    with datastore.transaction() as db:
        category = Category(
            name=category_data.name,
            description=category_data.description,
        )
        db.add(category)
        db.flush()
        db.refresh(category)

    return category


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_data: CategoryCreate,
    datastore: Datastore = Depends(get_datastore),
    current_user=Depends(get_current_user),
):
    with datastore.transaction() as db:
        category = db.get(Category, category_id)

        if not category:
            raise NotFound("Category not found")

        category.name = category_data.name
        category.description = category_data.description

    return category


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    datastore: Datastore = Depends(get_datastore),
    current_user=Depends(get_current_user),
):
    with datastore.transaction() as db:
        category = db.get(Category, category_id)

        if not category:
            raise NotFound("Category not found")

        # Products outlive their category
        db.query(Product).filter(Product.category_id == category_id).update(
            {Product.category_id: None},
            synchronize_session=False,
        )
        db.delete(category)

    logger.info(f"Category deleted id={category_id}")
    return {"message": "Category deleted successfully"}
