"""
Seed the reference subscriptions (S1, S2, S3) and print the aggregate totals.
Run against an empty database:  python seed_test_data.py
"""
import uuid
from datetime import date

# ── bootstrap ────────────────────────────────────────────────────
from app.infrastructure.db.session import ensure_schema, get_session_factory
from app.infrastructure.subscriptions.repository import SubscriptionRepository
from app.application.subscriptions import CreateSubscriptionUseCase
from app.application.aggregation import AggregateCostUseCase
from app.domain.subscription import BillingWindow

ensure_schema()
db = get_session_factory()()
repo = SubscriptionRepository(db)
create = CreateSubscriptionUseCase(repo)

user_id = uuid.uuid4()
other_user_id = uuid.uuid4()

# Jul-Sep 2025 at 100 -> 300
s1 = create.execute(service_name="S1", price=100, user_id=user_id, start_date=date(2025, 7, 1))
# Jun-Aug 2025 at 200, overlaps Jul-Aug -> 400
s2 = create.execute(
    service_name="S2", price=200, user_id=user_id,
    start_date=date(2025, 6, 1), end_date=date(2025, 8, 1),
)
# different user
s3 = create.execute(service_name="S3", price=1000, user_id=other_user_id, start_date=date(2025, 7, 1))

for sub in (s1, s2, s3):
    print(f"✓ {sub.service_name}: id={sub.id} user={sub.user_id}")

window = BillingWindow.of(date(2025, 7, 1), date(2025, 9, 1))
aggregate = AggregateCostUseCase(repo)
print(f"\nuser {user_id}, 07-2025..09-2025: {aggregate.execute(window, user_id=user_id)}  (expected 700)")
print(f"service S1, 07-2025..09-2025: {aggregate.execute(window, service_name='S1')}  (expected 300)")

db.close()
