"""
Subscription domain entity and the billing window it is aggregated over
"""
import uuid
from dataclasses import dataclass, replace
from datetime import date

from app.domain.period import month_key, month_start

# prices are stored in a 32-bit INTEGER column
MAX_PRICE = 2**31 - 1


class SubscriptionNotFound(LookupError):
    """No subscription with the given id"""

    def __init__(self, subscription_id: uuid.UUID):
        super().__init__(f"subscription {subscription_id} not found")
        self.subscription_id = subscription_id


@dataclass(frozen=True)
class Subscription:
    """
    A user's paid access to a named service for a contiguous month range.

    Dates are month-granularity and are expected on the 1st of the month.
    end_date=None means the subscription is still active (open-ended).

    Records are immutable values: "updating" produces a new instance with the
    same id. The aggregation code only reads them.
    """
    service_name: str
    price: int  # per calendar month, minor currency units
    user_id: uuid.UUID
    start_date: date
    end_date: date | None = None
    id: uuid.UUID | None = None

    @property
    def is_open_ended(self) -> bool:
        return self.end_date is None

    def with_id(self, subscription_id: uuid.UUID) -> "Subscription":
        return replace(self, id=subscription_id)

    def ensure_id(self) -> "Subscription":
        """Return self if it already has an id, otherwise a copy with a fresh uuid4."""
        if self.id is not None:
            return self
        return self.with_id(uuid.uuid4())


@dataclass(frozen=True)
class BillingWindow:
    """
    Query window [from_month, to_month], both ends inclusive, month granularity.
    """
    from_month: date
    to_month: date

    @classmethod
    def of(cls, from_month: date, to_month: date) -> "BillingWindow":
        """Build a window with both ends normalized to the 1st of their month."""
        return cls(from_month=month_start(from_month), to_month=month_start(to_month))

    @property
    def is_empty(self) -> bool:
        return month_key(self.from_month) > month_key(self.to_month)
