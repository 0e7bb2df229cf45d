"""
Base Subscription Repository - what the use cases need from persistence

The SQLAlchemy implementation lives in app/infrastructure/subscriptions/repository.py.
Storage failures are raised as-is by implementations; callers do not retry.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from app.domain.subscription import Subscription, BillingWindow


class BaseSubscriptionRepository(ABC):
    """
    Persistence boundary for subscriptions.

    CRUD methods serve the create/get/update/delete/list use cases;
    candidates_for_window + read_snapshot are the only methods the
    aggregation use case calls.
    """

    @abstractmethod
    def create(self, subscription: Subscription) -> Subscription:
        """Insert a subscription, assigning an id if it has none. Returns the stored record."""

    @abstractmethod
    def get(self, subscription_id: uuid.UUID) -> Subscription:
        """
        Raises:
            SubscriptionNotFound: if no such id
        """

    @abstractmethod
    def update(self, subscription: Subscription) -> Subscription:
        """
        Replace every mutable field of the record with subscription.id.

        Raises:
            SubscriptionNotFound: if no such id
        """

    @abstractmethod
    def delete(self, subscription_id: uuid.UUID) -> None:
        """
        Raises:
            SubscriptionNotFound: if no such id
        """

    @abstractmethod
    def list(
        self,
        user_id: uuid.UUID | None = None,
        service_name: str | None = None,
    ) -> list[Subscription]:
        """Exact user_id match, case-insensitive substring match on service_name."""

    @abstractmethod
    def candidates_for_window(
        self,
        window: BillingWindow,
        user_id: uuid.UUID | None = None,
        service_name: str | None = None,
    ) -> list[Subscription]:
        """
        Records whose active period overlaps window (by month), with exact
        user_id / service_name filters when given.
        """

    @abstractmethod
    def read_snapshot(self) -> AbstractContextManager:
        """Read-consistent scope for one aggregation, released on every exit path."""
