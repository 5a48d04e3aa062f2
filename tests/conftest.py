import os

# Settings are read at import time, so the test database must be chosen first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAIL"] = "admin@stylehub.io"
os.environ["ADMIN_EMAILS"] = ""
os.environ["SHIPPING_FLAT_RATE"] = "99"
os.environ["FREE_SHIPPING_THRESHOLD"] = "999"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from app.main import app, create_tables
from app.models.coupon import Coupon
from app.models.product import Product
from app.models.user import Base, SessionLocal, User, engine
from app.services import stock as stock_service
from app.utils.security import hash_password

SHOPPER = ("shopper@stylehub.io", "secret123")
ADMIN = ("admin@stylehub.io", "admin-pass")


@pytest.fixture(autouse=True)
def database():
    create_tables()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def _create_user(email, password, role="user"):
    with SessionLocal() as session:
        user = User(name=email.split("@")[0], email=email, password=hash_password(password), role=role)
        session.add(user)
        session.commit()
        return user.id


@pytest.fixture
def shopper():
    _create_user(*SHOPPER)
    return SHOPPER


@pytest.fixture
def admin():
    _create_user(*ADMIN)
    return ADMIN


@pytest.fixture
def make_product():
    def _make(name="Linen Shirt", price=100.0, offer_price=None, size_stocks=None, stock=0, **extra):
        with SessionLocal() as session:
            product = Product(name=name, price=price, offer_price=offer_price, stock=stock, is_active=True, **extra)
            if size_stocks is not None:
                stock_service.apply_size_stocks(product, size_stocks)
            session.add(product)
            session.commit()
            return product.id

    return _make


@pytest.fixture
def make_coupon():
    def _make(code="SAVE10", type="percentage", value=10, **extra):
        now = datetime.utcnow()
        fields = dict(
            code=code,
            description=f"{code} coupon",
            type=type,
            value=value,
            min_amount=0,
            usage_limit=100,
            used_count=0,
            valid_from=now - timedelta(days=1),
            valid_until=now + timedelta(days=30),
            is_active=True,
        )
        fields.update(extra)
        with SessionLocal() as session:
            coupon = Coupon(**fields)
            session.add(coupon)
            session.commit()
            return coupon.id

    return _make


@pytest.fixture
def get_product():
    def _get(product_id):
        with SessionLocal() as session:
            return session.get(Product, product_id)

    return _get
