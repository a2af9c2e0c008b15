import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("APP_ENV", "test")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from storefront.core.permissions import Role
from storefront.core.security import create_token
from storefront.db.session import get_db, init_db, make_engine
from storefront.main import app
from storefront.models.schemas import ProductIn
from storefront.services import catalog_service, users_service

PASSWORD = "Passw0rd"


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'storefront-test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def buyer(db):
    return users_service.register_user(db, "buyer", "buyer@example.com", PASSWORD)


@pytest.fixture
def other_buyer(db):
    return users_service.register_user(db, "otherbuyer", "other@example.com", PASSWORD)


@pytest.fixture
def admin(db):
    return users_service.register_user(db, "admin", "admin@example.com", PASSWORD, role=Role.ADMIN)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_token(user.id, user.role)}"}


@pytest.fixture
def buyer_headers(buyer):
    return auth_headers(buyer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_product(db, admin):
    def _make(name="Widget", price="10.00", stock=5, category=None, description="A simple widget for testing"):
        data = ProductIn(name=name, description=description, price=Decimal(price), stock=stock, category=category)
        return catalog_service.create_product(db, admin.id, data)

    return _make


@pytest.fixture
def widget(make_product):
    return make_product()
