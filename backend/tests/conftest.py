import os
from datetime import datetime, timedelta, timezone

# Must be set before the app modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_REAPER_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_rate_limiter
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.models.api_key import ApiKey
from app.services.api_key_auth import generate_api_key, hash_api_key
from app.services.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock)


@pytest.fixture(autouse=True)
def reset_state():
    app.state.rate_limiter.reset()
    yield
    app.dependency_overrides.clear()
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(limiter):
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    return TestClient(app)


@pytest.fixture
def make_api_key(db):
    def _make(
        partner_name="Partner ABC",
        per_minute=100,
        per_hour=1000,
        is_active=True,
    ):
        raw_key = generate_api_key()
        record = ApiKey(
            partner_name=partner_name,
            api_key_hash=hash_api_key(raw_key),
            is_active=is_active,
            rate_limit_per_minute=per_minute,
            rate_limit_per_hour=per_hour,
        )
        db.add(record)
        db.commit()
        return raw_key, record.id

    return _make
