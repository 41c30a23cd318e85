"""Trainer and availability schemas."""

from datetime import date, time
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from gymdesk.app.schemas.common import (
    STAFF_PHONE_PATTERN,
    TIME_PATTERN,
    CamelModel,
    UTCDateTime,
    bounded_number,
    fail,
    optional_email,
    optional_phone,
    person_name,
    strong_password,
    string_list,
)


class AvailabilitySlot(CamelModel):
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def _clock(cls, value):
        if not TIME_PATTERN.match(value):
            fail("Invalid time format")
        return value


AvailabilityMap = dict[str, list[AvailabilitySlot]]


def _specializations(value):
    return string_list(value, "Specialization", min_items=1, max_items=10, plural="specializations")


def _certifications(value):
    return string_list(value, "Certification", max_items=15, plural="certifications")


def _hourly_rate(value):
    return bounded_number(
        value, minimum=0, maximum=1000, below="Hourly rate cannot be negative", above="Hourly rate seems too high"
    )


class TrainerCreate(CamelModel):
    first_name: str = Field(default="", validate_default=True)
    last_name: str = Field(default="", validate_default=True)
    email: str = Field(default="", validate_default=True)
    phone: Optional[str] = None
    specializations: list[str] = Field(default_factory=list, validate_default=True)
    certifications: list[str] = Field(default_factory=list)
    hourly_rate: float = 50
    availability: AvailabilityMap = Field(default_factory=dict)
    bio: Optional[str] = None
    years_experience: Optional[int] = Field(default=None, ge=0)
    password: str = Field(default="", validate_default=True)

    @field_validator("first_name", mode="before")
    @classmethod
    def _first_name(cls, value):
        return person_name(value, "First name")

    @field_validator("last_name", mode="before")
    @classmethod
    def _last_name(cls, value):
        return person_name(value, "Last name")

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value):
        email = optional_email(value)
        if email is None:
            fail("Email is required", "missing")
        return email

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, value):
        return optional_phone(value, STAFF_PHONE_PATTERN)

    @field_validator("specializations", mode="before")
    @classmethod
    def _specializations(cls, value):
        return _specializations(value)

    @field_validator("certifications", mode="before")
    @classmethod
    def _certifications(cls, value):
        return _certifications(value)

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def _hourly_rate(cls, value):
        return _hourly_rate(value)

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, value):
        return strong_password(value)


class TrainerUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    specializations: Optional[list[str]] = None
    certifications: Optional[list[str]] = None
    hourly_rate: Optional[float] = None
    availability: Optional[AvailabilityMap] = None
    bio: Optional[str] = None
    years_experience: Optional[int] = Field(default=None, ge=0)

    @field_validator("first_name", mode="before")
    @classmethod
    def _first_name(cls, value):
        return person_name(value, "First name")

    @field_validator("last_name", mode="before")
    @classmethod
    def _last_name(cls, value):
        return person_name(value, "Last name")

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value):
        return optional_email(value)

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, value):
        return optional_phone(value, STAFF_PHONE_PATTERN)

    @field_validator("specializations", mode="before")
    @classmethod
    def _specializations(cls, value):
        return _specializations(value)

    @field_validator("certifications", mode="before")
    @classmethod
    def _certifications(cls, value):
        return _certifications(value)

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def _hourly_rate(cls, value):
        return _hourly_rate(value)


class TrainerFilters(CamelModel):
    search_term: Optional[str] = None
    specialization: Optional[str] = None
    is_active: Optional[bool] = None
    hourly_rate_min: Optional[float] = None
    hourly_rate_max: Optional[float] = None
    sort_by: Literal["name", "email", "hourlyRate", "createdAt"] = "name"
    sort_order: Literal["asc", "desc"] = "asc"


class TrainerRead(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    role: str = "trainer"
    is_active: bool = True
    specializations: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    hourly_rate: float = 50
    availability: dict = Field(default_factory=dict)
    bio: Optional[str] = None
    years_experience: Optional[int] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class TrainerStats(CamelModel):
    total_trainers: int = 0
    active_trainers: int = 0
    average_hourly_rate: float = 0
    top_specializations: list[dict] = Field(default_factory=list)
    new_this_month: int = 0
    total_certifications: int = 0


class AvailabilityWindowCreate(CamelModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    is_available: bool = True
    effective_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _window_order(self):
        if self.end_time <= self.start_time:
            fail("End time must be after start time")
        if self.effective_date and self.end_date and self.end_date < self.effective_date:
            fail("End date must be after effective date")
        return self


class AvailabilityWindowRead(CamelModel):
    id: str
    trainer_id: str
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool
    effective_date: date
    end_date: Optional[date] = None
    created_at: UTCDateTime


class TrainerSummary(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
