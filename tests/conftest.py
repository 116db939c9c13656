# tests/conftest.py
import os

# Settings are read at import time; configure before loading the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config.database import Base, get_db  # noqa: E402
from app.config.settings import settings  # noqa: E402
from app.core.auth.schemas import UserResponse  # noqa: E402
from app.main import app  # noqa: E402
from tests.factories import make_user, make_warehouse  # noqa: E402


# ==========================
# In-memory database per test
# ==========================

@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture(autouse=True)
def inventory_rules(monkeypatch):
    """Every test starts from the default inventory rules"""
    monkeypatch.setattr(settings, "ship_allow_partial", False)
    monkeypatch.setattr(settings, "enforce_bin_capacity", True)


# ==========================
# Common actors
# ==========================

@pytest.fixture()
def warehouse_a(db):
    return make_warehouse(db, name="Toronto Main", code="A")


@pytest.fixture()
def warehouse_b(db):
    return make_warehouse(db, name="Ottawa Depot", code="B")


@pytest.fixture()
def admin_user(db):
    """Head-office admin with no assigned warehouse"""
    return make_user(db, role="admin")


@pytest.fixture()
def admin(admin_user):
    return UserResponse.model_validate(admin_user)
