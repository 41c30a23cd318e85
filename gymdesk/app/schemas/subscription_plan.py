"""Membership plan schemas."""

from typing import Literal, Optional

from pydantic import Field, field_validator

from gymdesk.app.schemas.common import CamelModel, UTCDateTime, bounded_number, optional_text, required_text, string_list

PlanDuration = Literal["monthly", "quarterly", "annual"]


class PlanCreate(CamelModel):
    name: str = Field(default="", validate_default=True)
    description: Optional[str] = None
    price: float
    duration: PlanDuration
    features: list[str] = Field(default_factory=list, validate_default=True)
    max_sessions_per_month: Optional[int] = None
    includes_personal_training: bool = False
    is_active: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return required_text(value, "Plan name", 100)

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value):
        return optional_text(value, "Description", 500)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value):
        return bounded_number(value, minimum=0, maximum=10000, below="Price cannot be negative", above="Price cannot exceed $10,000")

    @field_validator("features", mode="before")
    @classmethod
    def _features(cls, value):
        return string_list(value, "Feature", min_items=1, max_items=20, plural="features")

    @field_validator("max_sessions_per_month", mode="before")
    @classmethod
    def _sessions(cls, value):
        return bounded_number(
            value, minimum=0, maximum=100, below="Sessions cannot be negative", above="Maximum 100 sessions per month"
        )


class PlanUpdate(PlanCreate):
    name: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[PlanDuration] = None
    features: Optional[list[str]] = None
    includes_personal_training: Optional[bool] = None
    is_active: Optional[bool] = None


class PlanFilters(CamelModel):
    is_active: Optional[bool] = None
    duration: Optional[str] = None
    price_min: Optional[float] = Field(default=None, ge=0)
    price_max: Optional[float] = Field(default=None, ge=0)
    includes_personal_training: Optional[bool] = None
    search_term: Optional[str] = None
    sort_by: Literal["name", "price", "duration", "createdAt"] = "name"
    sort_order: Literal["asc", "desc"] = "asc"


class PlanRead(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    duration: str
    features: list[str] = Field(default_factory=list)
    max_sessions_per_month: Optional[int] = None
    includes_personal_training: bool
    is_active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime
    subscriber_count: int = 0


class PlanStats(CamelModel):
    total_plans: int = 0
    active_plans: int = 0
    inactive_plans: int = 0
    total_subscribers: int = 0
    monthly_revenue: float = 0
    quarterly_revenue: float = 0
    annual_revenue: float = 0
