from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_admin_user
from storefront.api.responses import created, ok
from storefront.core.config import DEFAULT_PAGE_SIZE
from storefront.core.permissions import Identity
from storefront.db.session import get_db
from storefront.models.schemas import ProductIn, ProductOut, ProductUpdate
from storefront.services import catalog_service

router = APIRouter()


@router.get("")
def list_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    result = catalog_service.list_products(db, category=category, search=search, page=page, page_size=page_size)
    return ok(result, "Products fetched")


@router.post("", status_code=201)
def create_product(payload: ProductIn, admin: Identity = Depends(get_admin_user), db: Session = Depends(get_db)):
    product = catalog_service.create_product(db, admin.user_id, payload)
    return created(ProductOut.model_validate(product), "Product created successfully")


@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = catalog_service.get_product(db, product_id)
    return ok(ProductOut.model_validate(product), "Product fetched")


@router.patch("/{product_id}")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    admin: Identity = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    product = catalog_service.update_product(db, product_id, payload)
    return ok(ProductOut.model_validate(product), "Product updated successfully")


@router.delete("/{product_id}")
def delete_product(product_id: int, admin: Identity = Depends(get_admin_user), db: Session = Depends(get_db)):
    catalog_service.delete_product(db, product_id)
    return ok(None, "Product deleted successfully")
