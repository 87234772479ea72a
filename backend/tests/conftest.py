"""
Pytest configuration and fixtures for the Aadhaar auth service tests.

Provides an isolated in-memory database per test, a controllable clock and
the simulated identity provider.
"""
import os
import sys
import pathlib

# Settings read the environment at import time; pin it before importing the app
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["COGNITO_USER_POOL_ID"] = ""
os.environ["COGNITO_CLIENT_ID"] = ""
os.environ["COGNITO_CLIENT_SECRET"] = ""
os.environ["REDIS_URL"] = ""
os.environ["SIMULATED_OTP_CODE"] = "123456"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aadhaar_auth.db import Base  # noqa: E402
from aadhaar_auth import models  # noqa: E402,F401

ACCOUNT_ID = "735269466602"
DIRECTORY_PHONE = "+918085745154"
VALID_CODE = "123456"
STRONG_PASSWORD = "Password1"


class FakeClock:
    """Callable clock the tests move by hand"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="function")
def engine():
    """
    Fresh in-memory SQLite database for each test.

    StaticPool keeps a single connection so every session (including the
    ones TestClient uses from its worker thread) sees the same tables.
    """
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    from aadhaar_auth.services.session_store import OTPSessionStore
    return OTPSessionStore(ttl_seconds=600, sweep_interval_seconds=300, clock=clock)


@pytest.fixture
def provider():
    from aadhaar_auth.services.identity import SimulatedIdentityProvider
    return SimulatedIdentityProvider(code=VALID_CODE)


@pytest.fixture
def rate_limiter(clock):
    from aadhaar_auth.services.rate_limit import RateLimitService
    return RateLimitService(
        start_limit=5,
        verify_limit=10,
        window_seconds=600,
        lockout_seconds=900,
        clock=clock,
    )


@pytest.fixture
def service(db, store, provider, rate_limiter):
    from aadhaar_auth.services.verification_service import VerificationService
    return VerificationService(db=db, store=store, provider=provider, rate_limiter=rate_limiter)


@pytest.fixture
def directory_entry(db):
    from aadhaar_auth.models import DirectoryEntry
    entry = DirectoryEntry(aadhaar=ACCOUNT_ID, phone=DIRECTORY_PHONE, full_name="Ravi Kumar")
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@pytest.fixture
def account(db, directory_entry):
    """Verified account whose stored username differs from the directory phone"""
    from aadhaar_auth.models import Account
    acct = Account(
        provider_id="sim_ravikumar",
        username="ravikumar",
        aadhaar_no=ACCOUNT_ID,
        phone=DIRECTORY_PHONE,
        display_name="Ravi Kumar",
        region="Madhya Pradesh",
        subregion="Indore",
        is_verified=True,
    )
    db.add(acct)
    db.commit()
    db.refresh(acct)
    return acct


def override_get_db(db_session):
    """Dependency override that hands every request the test session"""
    def _override():
        yield db_session
    return _override


@pytest.fixture(scope="function")
def client(db, store, provider, rate_limiter):
    """
    TestClient over a fresh app wired to the test database, store, simulated
    provider and rate limiter. The lifespan is not run; the store is attached
    directly.
    """
    from fastapi.testclient import TestClient
    from aadhaar_auth.main import create_app
    from aadhaar_auth.db import get_db
    from aadhaar_auth.services.identity import get_identity_provider
    from aadhaar_auth.services.rate_limit import get_rate_limit_service

    app = create_app()
    app.state.session_store = store
    app.dependency_overrides[get_db] = override_get_db(db)
    app.dependency_overrides[get_identity_provider] = lambda: provider
    app.dependency_overrides[get_rate_limit_service] = lambda: rate_limiter

    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
