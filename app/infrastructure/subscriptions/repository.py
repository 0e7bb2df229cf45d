"""
Subscription Repository - SQLAlchemy implementation of the persistence boundary

ORM rows never leave this module: every method returns domain Subscription values.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import or_, text
from sqlalchemy.orm import Session

from app.domain.period import month_start, month_end
from app.domain.repository import BaseSubscriptionRepository
from app.domain.subscription import Subscription, SubscriptionNotFound, BillingWindow
from app.infrastructure.db.models import SubscriptionModel

logger = logging.getLogger(__name__)


def _to_domain(row: SubscriptionModel) -> Subscription:
    return Subscription(
        id=row.id,
        service_name=row.service_name,
        price=row.price,
        user_id=row.user_id,
        start_date=row.start_date,
        end_date=row.end_date,
    )


class SubscriptionRepository(BaseSubscriptionRepository):
    """
    Repository for the subscriptions table

    Write methods commit on success. Errors from the driver / SQLAlchemy
    (IntegrityError, OperationalError, ...) are propagated unchanged.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, subscription_id: uuid.UUID) -> SubscriptionModel:
        row = self.db.get(SubscriptionModel, subscription_id)
        if row is None:
            raise SubscriptionNotFound(subscription_id)
        return row

    def create(self, subscription: Subscription) -> Subscription:
        """
        Insert a subscription

        Args:
            subscription: record to store; a uuid4 id is assigned if it has none

        Returns:
            The stored record (with id)

        Raises:
            IntegrityError: on constraint violation (e.g. duplicate id)
        """
        subscription = subscription.ensure_id()
        row = SubscriptionModel(
            id=subscription.id,
            service_name=subscription.service_name,
            price=subscription.price,
            user_id=subscription.user_id,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
        )
        self.db.add(row)
        self.db.flush()
        self.db.commit()
        logger.info("Created subscription %s (%s, user=%s)", subscription.id, subscription.service_name, subscription.user_id)
        return subscription

    def get(self, subscription_id: uuid.UUID) -> Subscription:
        return _to_domain(self._get_row(subscription_id))

    def update(self, subscription: Subscription) -> Subscription:
        row = self._get_row(subscription.id)
        row.service_name = subscription.service_name
        row.price = subscription.price
        row.user_id = subscription.user_id
        row.start_date = subscription.start_date
        row.end_date = subscription.end_date
        self.db.commit()
        logger.info("Updated subscription %s", subscription.id)
        return subscription

    def delete(self, subscription_id: uuid.UUID) -> None:
        row = self._get_row(subscription_id)
        self.db.delete(row)
        self.db.commit()
        logger.info("Deleted subscription %s", subscription_id)

    def list(
        self,
        user_id: uuid.UUID | None = None,
        service_name: str | None = None,
    ) -> list[Subscription]:
        """
        List subscriptions

        Args:
            user_id: exact match (optional)
            service_name: case-insensitive substring match (optional)

        Returns:
            Records ordered by start_date, then id
        """
        query = self.db.query(SubscriptionModel)

        if user_id is not None:
            query = query.filter(SubscriptionModel.user_id == user_id)
        if service_name:
            query = query.filter(SubscriptionModel.service_name.ilike(f"%{service_name}%"))

        query = query.order_by(SubscriptionModel.start_date.asc(), SubscriptionModel.id.asc())
        return [_to_domain(row) for row in query.all()]

    def candidates_for_window(
        self,
        window: BillingWindow,
        user_id: uuid.UUID | None = None,
        service_name: str | None = None,
    ) -> list[Subscription]:
        query = self.db.query(SubscriptionModel).filter(
            or_(
                SubscriptionModel.end_date.is_(None),
                SubscriptionModel.end_date >= month_start(window.from_month),
            ),
            SubscriptionModel.start_date <= month_end(window.to_month),
        )

        if user_id is not None:
            query = query.filter(SubscriptionModel.user_id == user_id)
        if service_name is not None:
            query = query.filter(SubscriptionModel.service_name == service_name)

        return [_to_domain(row) for row in query.all()]

    @contextmanager
    def read_snapshot(self) -> Iterator["SubscriptionRepository"]:
        """
        Read-only transaction scope for one aggregation

        Always rolled back on exit. If the session already has a transaction
        open, reads join it and it is left as is.
        """
        if self.db.in_transaction():
            yield self
            return

        txn = self.db.begin()
        try:
            if self.db.get_bind().dialect.name == "postgresql":
                self.db.connection(execution_options={"isolation_level": "REPEATABLE READ"})
                self.db.execute(text("SET TRANSACTION READ ONLY"))
            yield self
        finally:
            txn.rollback()
