"""
Cost aggregation over a billing window.

aggregate_cost() is pure: it only looks at the records it is given, never
mutates them and holds no state between calls. AggregateCostUseCase wires it
to a repository.
"""
import logging
import uuid
from typing import Iterable

from app.domain.period import month_key, months_inclusive, later_of, earlier_of
from app.domain.repository import BaseSubscriptionRepository
from app.domain.subscription import Subscription, BillingWindow

logger = logging.getLogger(__name__)


def is_candidate(
    sub: Subscription,
    window: BillingWindow,
    user_id: uuid.UUID | None = None,
    service_name: str | None = None,
) -> bool:
    """Coarse overlap check plus exact-match filters."""
    if not sub.is_open_ended and month_key(sub.end_date) < month_key(window.from_month):
        return False
    if month_key(sub.start_date) > month_key(window.to_month):
        return False
    if user_id is not None and sub.user_id != user_id:
        return False
    # Exact match here; listing uses substring matching instead
    if service_name is not None and sub.service_name != service_name:
        return False
    return True


def overlap_months(sub: Subscription, window: BillingWindow) -> int:
    """Months of sub's active period inside window; 0 when the clipped interval is empty."""
    start = later_of(sub.start_date, window.from_month)
    end = earlier_of(sub.end_date or window.to_month, window.to_month)
    return months_inclusive(start, end)


def contribution(sub: Subscription, window: BillingWindow) -> int:
    months = overlap_months(sub, window)
    if months <= 0:
        return 0
    return months * sub.price


def aggregate_cost(
    records: Iterable[Subscription],
    window: BillingWindow,
    user_id: uuid.UUID | None = None,
    service_name: str | None = None,
) -> int:
    """
    Total cost of all subscriptions overlapping window.

    Every touched month is billed in full (no proration). Records that do not
    pass is_candidate() are ignored, so pre-filtered and unfiltered inputs
    give the same result.

    Example:
        open-ended sub from 2025-07 at 100/month, window 2025-07..2025-09 -> 300
    """
    return sum(
        contribution(sub, window)
        for sub in records
        if is_candidate(sub, window, user_id, service_name)
    )


class AggregateCostUseCase:
    def __init__(self, repo: BaseSubscriptionRepository):
        self.repo = repo

    def execute(
        self,
        window: BillingWindow,
        user_id: uuid.UUID | None = None,
        service_name: str | None = None,
    ) -> int:
        with self.repo.read_snapshot():
            candidates = self.repo.candidates_for_window(window, user_id, service_name)
            total = aggregate_cost(candidates, window, user_id, service_name)

        logger.debug(
            "Aggregated %d candidate(s) for %s..%s user=%s service=%r: total=%d",
            len(candidates), window.from_month, window.to_month, user_id, service_name, total,
        )
        return total
