"""
FastAPI dependencies (DB session, repository)
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from app.infrastructure.db.session import get_db as _get_db
from app.infrastructure.subscriptions.repository import SubscriptionRepository


# Re-export get_db для удобства
get_db = _get_db


def get_subscription_repository(db: Session = Depends(get_db)) -> SubscriptionRepository:
    """
    Repository bound to the request's session

    Usage:
        @router.get("/subscriptions/{subscription_id}")
        def get_subscription(repo: SubscriptionRepository = Depends(get_subscription_repository)):
            ...
    """
    return SubscriptionRepository(db)
