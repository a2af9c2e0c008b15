"""Order placement.

``place_order`` is the only writer that decrements stock. Each cart line
locks its product row (``SELECT ... FOR UPDATE``) and decrements through a
guarded update, so two buyers racing for the last unit cannot both win even
on backends that ignore row locks.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.core.config import DEFAULT_PAGE_SIZE
from storefront.core.errors import BusinessRuleError, InsufficientStockError, NotFoundError, ValidationError
from storefront.core.validators import validate_quantity
from storefront.db.models import Order, OrderLine, OrderStatus, Product
from storefront.db.session import unit_of_work
from storefront.models.schemas import CartLine, OrderOut, Page
from storefront.services.catalog_service import paginate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _check_cart(buyer_id: Optional[int], cart: List[CartLine]):
    if not buyer_id:
        raise BusinessRuleError("Order requires an authenticated buyer")
    if not cart:
        raise BusinessRuleError("Cart must contain at least one product")
    errors = []
    for line in cart:
        result = validate_quantity(line.quantity)
        if not result.valid:
            errors.append(f"Product {line.product_id}: {result.message}")
    if errors:
        raise ValidationError(errors[0], errors)


def _lock_product(db: Session, product_id: int) -> Optional[Product]:
    return (
        db.query(Product)
        .filter(Product.id == product_id)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )


def _take_stock(db: Session, product: Product, quantity: int):
    taken = (
        db.query(Product)
        .filter(Product.id == product.id, Product.stock >= quantity)
        .update({Product.stock: Product.stock - quantity}, synchronize_session=False)
    )
    if taken != 1:
        # another order committed first; report what is left now
        available = db.query(Product.stock).filter(Product.id == product.id).scalar()
        raise InsufficientStockError(product.id, product.name, available or 0, quantity)


def place_order(db: Session, buyer_id: int, cart: List[CartLine], description: Optional[str] = None) -> Order:
    _check_cart(buyer_id, cart)

    with unit_of_work(db):
        total = Decimal("0.00")
        lines = []
        for item in cart:
            product = _lock_product(db, item.product_id)
            if product is None:
                raise NotFoundError(f"Product with ID {item.product_id} not found")
            if product.stock < item.quantity:
                raise InsufficientStockError(product.id, product.name, product.stock, item.quantity)

            unit_price = Decimal(product.price).quantize(CENT)
            line_total = (unit_price * item.quantity).quantize(CENT)
            total += line_total
            _take_stock(db, product, item.quantity)
            lines.append(
                OrderLine(
                    product_id=product.id,
                    product_name=product.name,
                    unit_price=unit_price,
                    quantity=item.quantity,
                    line_total=line_total,
                )
            )

        order = Order(
            user_id=buyer_id,
            description=description.strip() if description else None,
            total_price=total,
            status=OrderStatus.PENDING.value,
            lines=lines,
        )
        db.add(order)
        db.flush()
        order_id = order.id

    logger.info("Order %s placed by user %s: %d line(s), total %s", order_id, buyer_id, len(lines), total)
    return get_order(db, buyer_id, order_id)


def get_order(db: Session, buyer_id: int, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id, Order.user_id == buyer_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def _orders_page(query, status: Optional[str], page: int, page_size: int) -> Page[OrderOut]:
    if status:
        if status not in {s.value for s in OrderStatus}:
            raise ValidationError(f"Unknown order status: {status}")
        query = query.filter(Order.status == status)
    rows, total, total_pages = paginate(query.order_by(Order.id.desc()), page, page_size)
    return Page[OrderOut](
        items=[OrderOut.model_validate(o) for o in rows],
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
    )


def list_orders(
    db: Session,
    buyer_id: int,
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page[OrderOut]:
    return _orders_page(db.query(Order).filter(Order.user_id == buyer_id), status, page, page_size)


def list_all_orders(
    db: Session,
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page[OrderOut]:
    return _orders_page(db.query(Order), status, page, page_size)
