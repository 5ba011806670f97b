from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from safe_ledger.core.clock import FixedClock
from safe_ledger.core.config import Settings
from safe_ledger.db.session import Base, get_session, init_db
from safe_ledger.domains.employees.service import EmployeeService
from safe_ledger.domains.expenses.service import ExpenseService
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models.vendor import DEPOSIT_SOURCE, VENDOR

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    init_db(engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, store_retry_backoff_seconds=0)


@pytest.fixture
def session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(session, clock, test_settings) -> LedgerStore:
    return LedgerStore(session, clock, test_settings)


@pytest.fixture
def vendor(store):
    return ExpenseService(store).create_vendor("admin", "Produce Supplier", VENDOR)


@pytest.fixture
def deposit_source(store):
    return ExpenseService(store).create_vendor("admin", "Branch Deposit", DEPOSIT_SOURCE)


@pytest.fixture
def employee(store):
    return EmployeeService(store).create_employee("admin", "Ada Lovelace", Decimal("15.00"))


@pytest.fixture
def client(clock):
    from safe_ledger.api.deps import get_clock
    from safe_ledger.main import app

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def actor(role: str, actor_id: str = "alice") -> dict[str, str]:
    return {"X-Actor-Id": actor_id, "X-Actor-Role": role}


@pytest.fixture
def headers():
    return actor


@pytest.fixture
def cli_database(monkeypatch):
    from safe_ledger.db import session as db_session

    monkeypatch.setattr(db_session, "SessionLocal", TestingSessionLocal)
    monkeypatch.setattr(db_session, "engine", engine)
