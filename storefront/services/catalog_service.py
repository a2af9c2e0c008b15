import logging
import math
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from storefront.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from storefront.core.errors import ConflictError, NotFoundError, ValidationError
from storefront.core.validators import (
    validate_price,
    validate_product_description,
    validate_product_name,
    validate_stock,
)
from storefront.db.models import OrderLine, Product
from storefront.db.session import unit_of_work
from storefront.models.schemas import Page, ProductIn, ProductOut, ProductUpdate

logger = logging.getLogger(__name__)

FIELD_VALIDATORS = {
    "name": validate_product_name,
    "description": validate_product_description,
    "price": validate_price,
    "stock": validate_stock,
}
REQUIRED_FIELDS = ("name", "description", "price", "stock")


def check_pagination(page: int, page_size: int):
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")


def paginate(query, page: int, page_size: int):
    """Run an ordered query for one page. Returns (rows, total, total_pages)."""
    check_pagination(page, page_size)
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return rows, total, math.ceil(total / page_size)


def _validate_fields(fields: dict):
    errors = []
    for name, value in fields.items():
        check = FIELD_VALIDATORS.get(name)
        if check is None:
            continue
        if value is None:
            errors.append(f"{name.capitalize()} cannot be null")
            continue
        result = check(value)
        if not result.valid:
            errors.append(result.message)
    if errors:
        raise ValidationError(errors[0], errors)


def _clean(fields: dict) -> dict:
    cleaned = dict(fields)
    for key in ("name", "description"):
        if cleaned.get(key) is not None:
            cleaned[key] = cleaned[key].strip()
    if "category" in cleaned:
        category = (cleaned["category"] or "").strip()
        cleaned["category"] = category or None
    if cleaned.get("price") is not None:
        cleaned["price"] = Decimal(str(cleaned["price"])).quantize(Decimal("0.01"))
    return cleaned


def create_product(db: Session, owner_id: Optional[int], data: ProductIn) -> Product:
    fields = data.model_dump()
    _validate_fields({k: fields.get(k) for k in REQUIRED_FIELDS})
    product = Product(user_id=owner_id, **_clean(fields))
    with unit_of_work(db):
        db.add(product)
    db.refresh(product)
    logger.info("Created product %s (%s) stock=%s", product.id, product.name, product.stock)
    return product


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def list_products(
    db: Session,
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page[ProductOut]:
    query = db.query(Product)
    if category:
        query = query.filter(Product.category == category)
    if search:
        query = query.filter(Product.name.icontains(search, autoescape=True))
    rows, total, total_pages = paginate(query.order_by(Product.id.desc()), page, page_size)
    return Page[ProductOut](
        items=[ProductOut.model_validate(p) for p in rows],
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
    )


def update_product(db: Session, product_id: int, changes: ProductUpdate) -> Product:
    fields = changes.model_dump(exclude_unset=True)
    _validate_fields(fields)
    product = get_product(db, product_id)
    with unit_of_work(db):
        for key, value in _clean(fields).items():
            setattr(product, key, value)
    db.refresh(product)
    logger.info("Updated product %s fields=%s", product_id, sorted(fields))
    return product


def delete_product(db: Session, product_id: int) -> None:
    with unit_of_work(db):
        product = (
            db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )
        if not product:
            raise NotFoundError("Product not found")
        # checked under the row lock so a concurrent order cannot slip in
        if db.query(OrderLine).filter(OrderLine.product_id == product_id).count():
            raise ConflictError("Product is referenced by existing orders and cannot be deleted")
        db.delete(product)
    logger.info("Deleted product %s", product_id)
