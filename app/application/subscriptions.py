"""
Subscription use cases — CRUD over the repository with input invariants enforced.

Dates coming in are normalized to the 1st of their month; the aggregation
code relies on that.
"""
import uuid
from datetime import date

from app.domain.period import month_key, month_start
from app.domain.repository import BaseSubscriptionRepository
from app.domain.subscription import Subscription, MAX_PRICE


class SubscriptionValidationError(ValueError):
    pass


def _build_subscription(
    service_name: str,
    price: int,
    user_id: uuid.UUID,
    start_date: date,
    end_date: date | None,
    subscription_id: uuid.UUID | None = None,
) -> Subscription:
    service_name = (service_name or "").strip()
    if not service_name:
        raise SubscriptionValidationError("service_name must not be empty")
    if price < 0:
        raise SubscriptionValidationError("price must be non-negative")
    if price > MAX_PRICE:
        raise SubscriptionValidationError(f"price must not exceed {MAX_PRICE}")
    if end_date is not None and month_key(end_date) < month_key(start_date):
        raise SubscriptionValidationError("end_date must not be before start_date")

    return Subscription(
        id=subscription_id,
        service_name=service_name,
        price=price,
        user_id=user_id,
        start_date=month_start(start_date),
        end_date=month_start(end_date) if end_date is not None else None,
    )


class CreateSubscriptionUseCase:
    def __init__(self, repo: BaseSubscriptionRepository):
        self.repo = repo

    def execute(
        self,
        service_name: str,
        price: int,
        user_id: uuid.UUID,
        start_date: date,
        end_date: date | None = None,
    ) -> Subscription:
        sub = _build_subscription(service_name, price, user_id, start_date, end_date)
        return self.repo.create(sub)


class GetSubscriptionUseCase:
    def __init__(self, repo: BaseSubscriptionRepository):
        self.repo = repo

    def execute(self, subscription_id: uuid.UUID) -> Subscription:
        return self.repo.get(subscription_id)


class UpdateSubscriptionUseCase:
    """Full replace: every field is overwritten, the id never changes."""

    def __init__(self, repo: BaseSubscriptionRepository):
        self.repo = repo

    def execute(
        self,
        subscription_id: uuid.UUID,
        service_name: str,
        price: int,
        user_id: uuid.UUID,
        start_date: date,
        end_date: date | None = None,
    ) -> Subscription:
        sub = _build_subscription(
            service_name, price, user_id, start_date, end_date,
            subscription_id=subscription_id,
        )
        return self.repo.update(sub)


class DeleteSubscriptionUseCase:
    def __init__(self, repo: BaseSubscriptionRepository):
        self.repo = repo

    def execute(self, subscription_id: uuid.UUID) -> None:
        self.repo.delete(subscription_id)


class ListSubscriptionsUseCase:
    def __init__(self, repo: BaseSubscriptionRepository):
        self.repo = repo

    def execute(
        self,
        user_id: uuid.UUID | None = None,
        service_name: str | None = None,
    ) -> list[Subscription]:
        return self.repo.list(user_id=user_id, service_name=service_name or None)
