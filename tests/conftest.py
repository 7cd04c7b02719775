import os

# konfiguracja przed importem aplikacji: sqlite w pamieci, celery bez brokera
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CAPTCHA_ENABLED"] = "false"
os.environ["SESSION_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import (
    OrderItemModel,
    OrderModel,
    ProductModel,
    ProductSizeModel,
    UserModel,
)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, order_id, status, user_id=None, email=None):
        self.sent.append({"order_id": order_id, "status": status, "user_id": user_id, "email": email})


class StubVerifier:
    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def verify(self, token, remote_ip=None):
        self.calls.append(token)
        return self.result


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_product(db):
    def _make(article_number, sizes, price=10000, discount=0, is_active=True, name=None):
        product = ProductModel(
            article_number=article_number,
            name=name or f"Product {article_number}",
            price=price,
            discount=discount,
            image_urls=[],
            is_active=is_active,
        )
        product.sizes = [ProductSizeModel(size=s, stock=q) for s, q in sizes.items()]
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def make_user(db):
    def _make(user_id, name=None):
        user = UserModel(id=user_id, name=name or f"user-{user_id}")
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def stock_of(db):
    def _stock(article_number, size):
        # swiezy odczyt, bez cache sesji
        db.expire_all()
        value = db.execute(
            select(ProductSizeModel.stock).where(
                ProductSizeModel.article_number == article_number,
                ProductSizeModel.size == size,
            )
        ).scalar_one_or_none()
        db.rollback()
        return value

    return _stock


@pytest.fixture
def active_carts(db):
    def _carts(user_id):
        db.expire_all()
        rows = list(
            db.execute(
                select(OrderModel).where(OrderModel.user_id == user_id, OrderModel.status == 1)
            ).scalars()
        )
        result = [(o.id, [(i.article_number, i.size, i.quantity) for i in o.items]) for o in rows]
        db.rollback()
        return result

    return _carts


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client():
    from storefront.main import app

    with TestClient(app) as c:
        yield c
