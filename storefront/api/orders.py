from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_admin_user, get_current_user
from storefront.api.responses import created, ok
from storefront.core.config import DEFAULT_PAGE_SIZE
from storefront.core.permissions import Identity
from storefront.db.session import get_db
from storefront.models.schemas import OrderCreate, OrderOut
from storefront.services import orders_service

router = APIRouter()


@router.post("", status_code=201)
def place_order(payload: OrderCreate, user: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    # buyer is always the token holder; any user id in the body is ignored
    order = orders_service.place_order(db, user.user_id, payload.items, payload.description)
    return created(OrderOut.model_validate(order), "Order created successfully")


@router.get("")
def my_orders(
    status: Optional[str] = None,
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = orders_service.list_orders(db, user.user_id, status=status, page=page, page_size=page_size)
    return ok(result, "Orders fetched")


@router.get("/all")
def all_orders(
    status: Optional[str] = None,
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    admin: Identity = Depends(get_admin_user),
    db: Session = Depends(get_db),
):
    result = orders_service.list_all_orders(db, status=status, page=page, page_size=page_size)
    return ok(result, "Orders fetched")


@router.get("/{order_id}")
def get_order(order_id: int, user: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    order = orders_service.get_order(db, user.user_id, order_id)
    return ok(OrderOut.model_validate(order), "Order fetched")
