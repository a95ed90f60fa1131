import os
from datetime import datetime, timedelta

# Must be set before the app (and its settings) are imported
os.environ["ADMIN_PASSWORD"] = "test-password"
os.environ["SEED_WORKERS"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from carwash import date_utils
from carwash.database import Base, get_db
from main import app

TEST_PASSWORD = "test-password"

# 10:00 in Cairo (UTC+2 in January)
START = datetime(2024, 1, 15, 8, 0, 0)


class Clock:
    """Stands in for date_utils.utcnow so entry/finish times are predictable."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock(monkeypatch):
    clock = Clock(START)
    monkeypatch.setattr(date_utils, "utcnow", clock)
    return clock


@pytest.fixture
def anon_client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def client(anon_client):
    response = anon_client.post("/api/auth/login", json={"password": TEST_PASSWORD})
    assert response.status_code == 200
    return anon_client


@pytest.fixture
def make_worker(client):
    def _make(name="Ahmed", role="CARWASH"):
        response = client.post("/api/workers", json={"name": name, "role": role})
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _make


@pytest.fixture
def make_record(client):
    def _make(**fields):
        payload = {"plateNumber": "ABC1234", "washType": "OUTER", "amountPaid": 90, "paymentType": "CASH"}
        payload.update(fields)
        response = client.post("/api/wash-records", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _make
