import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from storefront.core.errors import ConflictError, InternalError, StoreUnavailableError, from_db_error
from storefront.db.models import OrderLine, Product, User
from storefront.db.session import unit_of_work
from storefront.models.schemas import CartLine
from storefront.services import orders_service


def test_commits_on_clean_exit(db):
    with unit_of_work(db):
        db.add(User(username="plain", email="plain@example.com", password="x"))
    assert db.query(User).filter(User.username == "plain").count() == 1


def test_rolls_back_on_any_exception(db):
    with pytest.raises(RuntimeError):
        with unit_of_work(db):
            db.add(User(username="ghost", email="ghost@example.com", password="x"))
            db.flush()
            raise RuntimeError("boom")
    assert db.query(User).filter(User.username == "ghost").count() == 0


def test_unique_violation_becomes_conflict(db, buyer):
    with pytest.raises(ConflictError) as exc:
        with unit_of_work(db):
            db.add(User(username="someoneelse", email="buyer@example.com", password="x"))
    assert exc.value.message == "Email already exists"
    assert exc.value.status_code == 409


def test_negative_stock_is_refused_by_the_store(db, widget):
    with pytest.raises(InternalError):
        with unit_of_work(db):
            db.execute(text("UPDATE products SET stock = -1 WHERE id = :id"), {"id": widget.id})
    assert db.query(Product.stock).filter(Product.id == widget.id).scalar() == 5


def test_operational_errors_mean_store_unavailable():
    exc = OperationalError("SELECT 1", {}, Exception("database is locked"))
    assert isinstance(from_db_error(exc), StoreUnavailableError)
    assert from_db_error(exc).status_code == 503


def test_foreign_keys_are_enforced(db):
    assert db.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_store_refuses_to_orphan_order_lines(db, widget, buyer):
    orders_service.place_order(db, buyer.id, [CartLine(product_id=widget.id, quantity=1)])
    with pytest.raises(ConflictError) as exc:
        with unit_of_work(db):
            db.execute(text("DELETE FROM products WHERE id = :id"), {"id": widget.id})
    assert exc.value.status_code == 409
    assert db.query(Product).filter(Product.id == widget.id).count() == 1
    orphans = (
        db.query(OrderLine)
        .outerjoin(Product, OrderLine.product_id == Product.id)
        .filter(Product.id.is_(None))
        .count()
    )
    assert orphans == 0
