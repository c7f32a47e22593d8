import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from expiryguard.api.deps_auth import get_db
from expiryguard.core.database import Base
from expiryguard.core.security import hash_password
from expiryguard.main import app
from expiryguard.models.product import Product
from expiryguard.models.user import MANAGER, OPERATOR, User

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# fixed clock for service-level tests
NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
TODAY = NOW.date()


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_product(db):
    """Insert a product; ``days`` is the expiry offset from ``base``."""

    def _make(days=3, base=TODAY, **kw):
        fields = {
            "name": "Milk",
            "category": "Dairy",
            "quantity": 10,
            "avg_daily_sales": 1.0,
            "price": 1.5,
            "expiry_date": base + timedelta(days=days),
        }
        fields.update(kw)
        p = Product(**fields)
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make


@pytest.fixture
def users(db):
    manager = User(username="manager", name="Mara Manager", role=MANAGER, password_hash=hash_password("manager123"))
    operator = User(username="operator", name="Oto Operator", role=OPERATOR, password_hash=hash_password("operator123"))
    db.add_all([manager, operator])
    db.commit()
    return {"manager": manager, "operator": operator}


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _login(client, username, password):
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def manager_headers(client, users):
    return _login(client, "manager", "manager123")


@pytest.fixture
def operator_headers(client, users):
    return _login(client, "operator", "operator123")
