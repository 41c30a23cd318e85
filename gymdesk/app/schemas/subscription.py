"""Subscription schemas."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from gymdesk.app.schemas.common import CamelModel, UTCDateTime, bounded_number, fail

SubscriptionStatus = Literal["active", "cancelled", "frozen", "expired"]


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


def _price(value):
    return bounded_number(value, minimum=0, maximum=10000, below="Price cannot be negative", above="Price cannot exceed $10,000")


class SubscriptionCreate(CamelModel):
    member_id: str = Field(default="", validate_default=True)
    plan_id: str = Field(default="", validate_default=True)
    start_date: date
    # Derived from the plan duration when omitted.
    end_date: Optional[date] = None
    auto_renew: bool = False
    # Defaults to the plan price when omitted.
    price: Optional[float] = None
    status: SubscriptionStatus = "active"

    @field_validator("member_id", mode="before")
    @classmethod
    def _member(cls, value):
        if not value:
            fail("Invalid member ID")
        return value

    @field_validator("plan_id", mode="before")
    @classmethod
    def _plan(cls, value):
        if not value:
            fail("Invalid plan ID")
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _dates(cls, value):
        return _as_date(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value):
        return _price(value)

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_date is not None and self.end_date <= self.start_date:
            raise PydanticCustomError("value_error", "endDate: End date must be after start date")
        return self


class SubscriptionUpdate(CamelModel):
    status: Optional[SubscriptionStatus] = None
    end_date: Optional[date] = None
    auto_renew: Optional[bool] = None
    price: Optional[float] = None

    @field_validator("end_date", mode="before")
    @classmethod
    def _dates(cls, value):
        return _as_date(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value):
        return _price(value)


class SubscriptionFilters(CamelModel):
    status: Optional[str] = None
    member_id: Optional[str] = None
    plan_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search_term: Optional[str] = None


class SubscriptionMember(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None


class SubscriptionPlanSummary(CamelModel):
    id: str
    name: str
    duration: str
    price: float


class SubscriptionRead(CamelModel):
    id: str
    member_id: str
    plan_id: str
    status: str
    start_date: date
    end_date: date
    auto_renew: bool
    price: float
    created_at: UTCDateTime
    updated_at: UTCDateTime
    member: Optional[SubscriptionMember] = None
    plan: Optional[SubscriptionPlanSummary] = None


class SubscriptionStats(CamelModel):
    total_subscriptions: int = 0
    active_subscriptions: int = 0
    expiring_soon: int = 0
    total_revenue: float = 0
    status_distribution: dict[str, int] = Field(default_factory=dict)
    plan_distribution: dict[str, int] = Field(default_factory=dict)
