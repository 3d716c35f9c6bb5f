"""
Pytest fixtures for the marketplace backend.

Every test gets a fresh in-memory sqlite database with the schema created
and default categories seeded. Services are built directly on a session;
API tests go through FastAPI's TestClient with get_db overridden.
"""
import os

# must be set before marketplace modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.data.database import Base, create_db_engine, get_db
from marketplace.data import models  # noqa: F401
from marketplace.data.models import CategoryModel, ProductModel, UserModel
from marketplace.data.seed import seed
from marketplace.main import create_app


class FakeNotifier:
    """Records notifications instead of enqueueing Celery tasks."""

    def __init__(self):
        self.placed = []
        self.status_changes = []

    def send_order_placed(self, user_id, order_id, total_amount):
        self.placed.append((user_id, order_id, total_amount))

    def send_status_changed(self, user_id, order_id, status):
        self.status_changes.append((user_id, order_id, status))


def count_rows(db: Session, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        seed(session)
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
def notifier():
    return FakeNotifier()


@pytest.fixture
def category(db):
    return db.execute(
        select(CategoryModel).where(CategoryModel.name == "Electronics")
    ).scalar_one()


@pytest.fixture
def make_user(db):
    def _make_user(username: str) -> UserModel:
        user = UserModel(email=f"{username}@example.com", username=username, full_name=username.title())
        db.add(user)
        db.commit()
        return user
    return _make_user


@pytest.fixture
def make_product(db, category):
    def _make_product(seller: UserModel, title: str = "Used bike", price: str = "10.00", available: bool = True):
        product = ProductModel(
            seller_id=seller.id,
            category_id=category.id,
            title=title,
            description=f"{title} in good condition",
            price=Decimal(price),
            condition="good",
            is_available=available,
        )
        db.add(product)
        db.commit()
        return product
    return _make_product


@pytest.fixture
def seller(make_user):
    return make_user("seller")


@pytest.fixture
def buyer(make_user):
    return make_user("buyer")


@pytest.fixture
def client(session_factory):
    app = create_app(init_database=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
