"""
Pytest fixtures for testing
"""
import uuid
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.infrastructure.db.session import Base, ensure_schema
from app.infrastructure.subscriptions.repository import SubscriptionRepository
from app.domain.subscription import Subscription


@pytest.fixture
def db_engine():
    """In-memory SQLite engine; StaticPool so every thread sees the same database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    ensure_schema(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Create database session for tests"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def repo(db_session) -> SubscriptionRepository:
    return SubscriptionRepository(db_session)


@pytest.fixture
def user_id():
    return uuid.UUID("60601fee-2bf1-4721-ae6f-7636e79a0cba")


@pytest.fixture
def other_user_id():
    return uuid.UUID("0b4e8e0e-9c52-4c3c-8f43-1d1e1f0a2b3c")


@pytest.fixture
def reference_subscriptions(user_id, other_user_id):
    """
    S1: user, 100/month, from 07-2025, open-ended
    S2: user, 200/month, 06-2025..08-2025
    S3: other user, 1000/month, from 07-2025, open-ended
    """
    return [
        Subscription(
            service_name="S1", price=100, user_id=user_id,
            start_date=date(2025, 7, 1),
        ),
        Subscription(
            service_name="S2", price=200, user_id=user_id,
            start_date=date(2025, 6, 1), end_date=date(2025, 8, 1),
        ),
        Subscription(
            service_name="S3", price=1000, user_id=other_user_id,
            start_date=date(2025, 7, 1),
        ),
    ]


@pytest.fixture
def stored_reference_subscriptions(repo, reference_subscriptions):
    return [repo.create(sub) for sub in reference_subscriptions]
