"""
SQLAlchemy ORM models
"""
import uuid
from datetime import date as date_type
from sqlalchemy import String, Integer, Date, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.db.session import Base


class SubscriptionModel(Base):
    """User subscription to a paid service for a month range"""
    __tablename__ = "subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    service_name: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # per month, minor units
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    start_date: Mapped[date_type] = mapped_column(Date, nullable=False)  # 1st of month
    end_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)  # NULL = open-ended

    __table_args__ = (
        Index("idx_subscriptions_user", "user_id"),
    )
