"""
Subscription API endpoints
"""
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field, field_validator

from app.api.deps import get_subscription_repository
from app.application.aggregation import AggregateCostUseCase
from app.application.subscriptions import (
    CreateSubscriptionUseCase, GetSubscriptionUseCase, UpdateSubscriptionUseCase,
    DeleteSubscriptionUseCase, ListSubscriptionsUseCase, SubscriptionValidationError,
)
from app.domain.subscription import Subscription, SubscriptionNotFound, BillingWindow, MAX_PRICE
from app.infrastructure.subscriptions.repository import SubscriptionRepository
from app.utils.validation import parse_month_year, parse_uuid

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


# === Request/Response models ===

class SubscriptionRequest(BaseModel):
    service_name: str = Field(min_length=1)
    price: int = Field(ge=0, le=MAX_PRICE)  # per month, minor units
    user_id: uuid.UUID
    start_date: date  # "MM-YYYY" on the wire
    end_date: date | None = None  # "MM-YYYY", omitted = open-ended

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_month(cls, v):
        """MM-YYYY -> first day of month"""
        if v is None:
            return None
        return parse_month_year(v)


class SubscriptionResponse(BaseModel):
    id: uuid.UUID
    service_name: str
    price: int
    user_id: uuid.UUID
    start_date: date
    end_date: date | None = None

    @classmethod
    def from_domain(cls, sub: Subscription) -> "SubscriptionResponse":
        return cls(
            id=sub.id,
            service_name=sub.service_name,
            price=sub.price,
            user_id=sub.user_id,
            start_date=sub.start_date,
            end_date=sub.end_date,
        )


class AggregateResponse(BaseModel):
    total: int


# === Helpers ===

def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")


def _optional_user_id(raw: str | None) -> uuid.UUID | None:
    if not raw:
        return None
    try:
        return parse_uuid(raw, field="user_id")
    except ValueError as e:
        raise _bad_request(str(e))


# === Endpoints ===

@router.post(
    "/",
    response_model=SubscriptionResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def create_subscription(
    req: SubscriptionRequest,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    """Создать подписку"""
    try:
        sub = CreateSubscriptionUseCase(repo).execute(
            service_name=req.service_name,
            price=req.price,
            user_id=req.user_id,
            start_date=req.start_date,
            end_date=req.end_date,
        )
    except SubscriptionValidationError as e:
        raise _bad_request(str(e))

    return SubscriptionResponse.from_domain(sub)


@router.get("/", response_model=list[SubscriptionResponse], response_model_exclude_none=True)
def list_subscriptions(
    user_id: str | None = None,
    service_name: str | None = None,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    """Список подписок (user_id — точное совпадение, service_name — подстрока)"""
    subs = ListSubscriptionsUseCase(repo).execute(
        user_id=_optional_user_id(user_id),
        service_name=service_name or None,
    )
    return [SubscriptionResponse.from_domain(s) for s in subs]


@router.get("/aggregate", response_model=AggregateResponse)
def aggregate_subscriptions(
    from_month: str | None = Query(None, alias="from"),
    to_month: str | None = Query(None, alias="to"),
    user_id: str | None = None,
    service_name: str | None = None,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    """
    Суммарная стоимость подписок за период [from, to] (MM-YYYY, включительно)

    service_name here is an exact match, unlike the list endpoint.
    """
    if not from_month or not to_month:
        raise _bad_request("from and to are required in MM-YYYY format")
    try:
        start = parse_month_year(from_month)
    except ValueError:
        raise _bad_request("invalid from format")
    try:
        end = parse_month_year(to_month)
    except ValueError:
        raise _bad_request("invalid to format")
    window = BillingWindow.of(start, end)
    if window.is_empty:
        raise _bad_request("from must not be after to")

    total = AggregateCostUseCase(repo).execute(
        window,
        user_id=_optional_user_id(user_id),
        service_name=service_name or None,
    )
    return AggregateResponse(total=total)


@router.get("/{subscription_id}", response_model=SubscriptionResponse, response_model_exclude_none=True)
def get_subscription(
    subscription_id: uuid.UUID,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    try:
        sub = GetSubscriptionUseCase(repo).execute(subscription_id)
    except SubscriptionNotFound:
        raise _not_found()
    return SubscriptionResponse.from_domain(sub)


@router.put("/{subscription_id}", response_model=SubscriptionResponse, response_model_exclude_none=True)
def update_subscription(
    subscription_id: uuid.UUID,
    req: SubscriptionRequest,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    """Полная замена подписки (id не меняется)"""
    try:
        sub = UpdateSubscriptionUseCase(repo).execute(
            subscription_id=subscription_id,
            service_name=req.service_name,
            price=req.price,
            user_id=req.user_id,
            start_date=req.start_date,
            end_date=req.end_date,
        )
    except SubscriptionValidationError as e:
        raise _bad_request(str(e))
    except SubscriptionNotFound:
        raise _not_found()
    return SubscriptionResponse.from_domain(sub)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subscription(
    subscription_id: uuid.UUID,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
):
    try:
        DeleteSubscriptionUseCase(repo).execute(subscription_id)
    except SubscriptionNotFound:
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
