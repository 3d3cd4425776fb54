"""Shared test fixtures.

This module contains pytest fixtures used across multiple test files.
"""

import os
import time

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from src.database.models import Base, Redemption, RedemptionStatus
from src.database.session import get_db
from src.auth_utils import create_access_token


NOW = 1_700_000_000


# ============================================================================
# Test Database Setup
# ============================================================================

@pytest.fixture(scope="function")
def test_db():
    """Create a test database for each test."""
    # Use in-memory SQLite for testing
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Create tables
    Base.metadata.create_all(bind=engine)

    # Override the get_db dependency
    def override_get_db():
        try:
            db = TestingSessionLocal()
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    db = TestingSessionLocal()
    yield db

    # Cleanup
    db.close()
    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(test_db):
    """Create a test client."""
    return TestClient(app)


@pytest.fixture(scope="function")
def auth_headers():
    """Bearer token headers for admin user 1."""
    token = create_access_token({"sub": "1"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def clock():
    """A fixed clock returning NOW."""
    return lambda: NOW


# ============================================================================
# Redemption Fixtures
# ============================================================================

def make_redemption(db, key, name="promo", quota=100, status=RedemptionStatus.UNUSED,
                    created_time=NOW, expired_time=0, user_id=1):
    """Insert a single redemption code directly."""
    redemption = Redemption(
        user_id=user_id,
        key=key,
        name=name,
        quota=quota,
        status=status,
        created_time=created_time,
        expired_time=expired_time,
    )
    db.add(redemption)
    db.commit()
    db.refresh(redemption)
    return redemption


@pytest.fixture(scope="function")
def redemption_factory(test_db):
    """Insert redemption codes directly into the test database."""
    def factory(key, **kwargs):
        return make_redemption(test_db, key, **kwargs)
    return factory


@pytest.fixture(scope="function")
def test_redemption(test_db):
    """Create an unused redemption code that never expires."""
    return make_redemption(test_db, key="a" * 32)


@pytest.fixture(scope="function")
def mixed_redemptions(test_db):
    """Create one code in each cleanup-relevant state."""
    now = int(time.time())
    return {
        "valid": make_redemption(test_db, key="1" * 32, name="valid"),
        "future": make_redemption(test_db, key="2" * 32, name="future", expired_time=now + 3600),
        "used": make_redemption(test_db, key="3" * 32, name="used", status=RedemptionStatus.USED),
        "disabled": make_redemption(test_db, key="4" * 32, name="disabled", status=RedemptionStatus.DISABLED),
        "expired": make_redemption(test_db, key="5" * 32, name="expired", expired_time=NOW),
    }
