"""Tests for cost aggregation — candidates, overlap, filters, use case."""
import itertools
import uuid
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from app.application.aggregation import (
    aggregate_cost, is_candidate, overlap_months, contribution, AggregateCostUseCase,
)
from app.domain.subscription import Subscription, BillingWindow
from app.infrastructure.db.session import Base

JUL_SEP = BillingWindow.of(date(2025, 7, 1), date(2025, 9, 1))


def _sub(price=100, start=date(2025, 7, 1), end=None, user_id=None, service_name="S"):
    return Subscription(
        service_name=service_name,
        price=price,
        user_id=user_id or uuid.uuid4(),
        start_date=start,
        end_date=end,
    )


# ======================================================================
# 1. Per-record overlap
# ======================================================================

class TestOverlap:
    def test_open_ended_inside_window(self):
        sub = _sub(price=100, start=date(2025, 7, 1))
        assert overlap_months(sub, JUL_SEP) == 3
        assert contribution(sub, JUL_SEP) == 300

    def test_open_ended_started_before_window(self):
        sub = _sub(price=100, start=date(2024, 1, 1))
        assert overlap_months(sub, JUL_SEP) == 3

    def test_ends_inside_window(self):
        sub = _sub(price=200, start=date(2025, 6, 1), end=date(2025, 8, 1))
        assert overlap_months(sub, JUL_SEP) == 2
        assert contribution(sub, JUL_SEP) == 400

    def test_starts_inside_window(self):
        sub = _sub(price=50, start=date(2025, 9, 1), end=date(2026, 3, 1))
        assert contribution(sub, JUL_SEP) == 50

    def test_single_month_window(self):
        window = BillingWindow.of(date(2025, 8, 1), date(2025, 8, 1))
        assert contribution(_sub(price=70, start=date(2025, 1, 1)), window) == 70

    def test_inverted_record_contributes_zero(self):
        sub = _sub(price=500, start=date(2025, 9, 1), end=date(2025, 7, 1))
        assert overlap_months(sub, JUL_SEP) == 0
        assert contribution(sub, JUL_SEP) == 0

    def test_zero_price(self):
        assert contribution(_sub(price=0), JUL_SEP) == 0


# ======================================================================
# 2. Candidate predicate
# ======================================================================

class TestIsCandidate:
    def test_ended_before_window(self):
        sub = _sub(start=date(2025, 1, 1), end=date(2025, 6, 1))
        assert not is_candidate(sub, JUL_SEP)

    def test_starts_after_window(self):
        assert not is_candidate(_sub(start=date(2025, 10, 1)), JUL_SEP)

    def test_touching_edges_are_candidates(self):
        assert is_candidate(_sub(start=date(2025, 1, 1), end=date(2025, 7, 1)), JUL_SEP)
        assert is_candidate(_sub(start=date(2025, 9, 1)), JUL_SEP)

    def test_day_of_month_is_ignored(self):
        sub = _sub(start=date(2025, 9, 30))
        window = BillingWindow(from_month=date(2025, 7, 15), to_month=date(2025, 9, 1))
        assert is_candidate(sub, window)
        assert contribution(sub, window) == sub.price

    def test_user_filter_exact(self):
        uid = uuid.uuid4()
        assert is_candidate(_sub(user_id=uid), JUL_SEP, user_id=uid)
        assert not is_candidate(_sub(), JUL_SEP, user_id=uid)

    def test_service_filter_is_exact_not_substring(self):
        sub = _sub(service_name="Yandex Plus")
        assert is_candidate(sub, JUL_SEP, service_name="Yandex Plus")
        assert not is_candidate(sub, JUL_SEP, service_name="Yandex")
        assert not is_candidate(sub, JUL_SEP, service_name="yandex plus")


# ======================================================================
# 3. aggregate_cost
# ======================================================================

class TestAggregateCost:
    def test_empty(self):
        assert aggregate_cost([], JUL_SEP) == 0

    def test_reference_scenario_by_user(self, reference_subscriptions, user_id):
        assert aggregate_cost(reference_subscriptions, JUL_SEP, user_id=user_id) == 700

    def test_reference_scenario_by_service(self, reference_subscriptions):
        assert aggregate_cost(reference_subscriptions, JUL_SEP, service_name="S1") == 300

    def test_reference_scenario_unfiltered(self, reference_subscriptions):
        assert aggregate_cost(reference_subscriptions, JUL_SEP) == 300 + 400 + 3000

    def test_user_and_service_filters_combine(self, reference_subscriptions, user_id, other_user_id):
        assert aggregate_cost(reference_subscriptions, JUL_SEP, user_id=user_id, service_name="S2") == 400
        assert aggregate_cost(reference_subscriptions, JUL_SEP, user_id=other_user_id, service_name="S1") == 0

    def test_records_outside_window_ignored(self):
        records = [
            _sub(price=100, start=date(2025, 1, 1), end=date(2025, 6, 1)),
            _sub(price=100, start=date(2025, 10, 1)),
        ]
        assert aggregate_cost(records, JUL_SEP) == 0

    def test_order_independent(self, reference_subscriptions):
        records = reference_subscriptions + [
            _sub(price=7, start=date(2025, 8, 1), end=date(2025, 12, 1)),
            _sub(price=11, start=date(2025, 9, 1), end=date(2025, 7, 1)),
        ]
        expected = aggregate_cost(records, JUL_SEP)
        for perm in itertools.permutations(records):
            assert aggregate_cost(perm, JUL_SEP) == expected

    def test_accepts_generator(self, reference_subscriptions, user_id):
        records = (s for s in reference_subscriptions)
        assert aggregate_cost(records, JUL_SEP, user_id=user_id) == 700

    def test_large_values_do_not_overflow(self):
        window = BillingWindow.of(date(1970, 1, 1), date(2069, 12, 1))
        records = [_sub(price=2**31 - 1, start=date(1970, 1, 1)) for _ in range(1000)]
        assert aggregate_cost(records, window) == (2**31 - 1) * 1200 * 1000

    def test_does_not_mutate_records(self, reference_subscriptions):
        before = list(reference_subscriptions)
        aggregate_cost(reference_subscriptions, JUL_SEP)
        assert reference_subscriptions == before


# ======================================================================
# 4. AggregateCostUseCase over the SQL repository
# ======================================================================

class TestAggregateCostUseCase:
    def test_reference_scenario(self, repo, stored_reference_subscriptions, user_id):
        use_case = AggregateCostUseCase(repo)
        assert use_case.execute(JUL_SEP, user_id=user_id) == 700
        assert use_case.execute(JUL_SEP, service_name="S1") == 300

    def test_window_with_no_subscriptions(self, repo, stored_reference_subscriptions):
        window = BillingWindow.of(date(2024, 1, 1), date(2024, 12, 1))
        assert AggregateCostUseCase(repo).execute(window) == 0

    def test_snapshot_released_after_call(self, repo, db_session, stored_reference_subscriptions):
        AggregateCostUseCase(repo).execute(JUL_SEP)
        assert not db_session.in_transaction()

    def test_storage_failure_propagates(self, repo, db_session, db_engine):
        Base.metadata.drop_all(db_engine)
        with pytest.raises(OperationalError):
            AggregateCostUseCase(repo).execute(JUL_SEP)
        assert not db_session.in_transaction()
