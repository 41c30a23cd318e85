"""Member schemas."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from gymdesk.app.schemas.common import (
    CamelModel,
    UTCDateTime,
    optional_email,
    optional_phone,
    optional_text,
    person_name,
    required_text,
)

MembershipStatus = Literal["active", "inactive", "frozen", "cancelled"]


class EmergencyContact(CamelModel):
    name: str = Field(default="", validate_default=True)
    phone: str = Field(default="", validate_default=True)
    relationship: str = Field(default="", validate_default=True)

    @field_validator("name", "phone", "relationship", mode="before")
    @classmethod
    def _required(cls, value, info):
        return required_text(value, info.field_name.capitalize(), 100)


class MemberCreate(CamelModel):
    first_name: str = Field(default="", validate_default=True)
    last_name: str = Field(default="", validate_default=True)
    email: Optional[str] = None
    phone: Optional[str] = None
    membership_status: MembershipStatus = "active"
    emergency_contact: Optional[EmergencyContact] = None
    medical_conditions: Optional[str] = None
    fitness_goals: Optional[str] = None
    preferred_training_times: list[str] = Field(default_factory=list)
    join_date: Optional[date] = None

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
        return optional_phone(value)

    @field_validator("medical_conditions", mode="before")
    @classmethod
    def _medical(cls, value):
        return optional_text(value, "Medical conditions", 500)

    @field_validator("fitness_goals", mode="before")
    @classmethod
    def _goals(cls, value):
        return optional_text(value, "Fitness goals", 500)

    @field_validator("join_date", mode="before")
    @classmethod
    def _join_date(cls, value):
        # Accept full ISO timestamps as well as bare dates.
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        if isinstance(value, datetime):
            return value.date()
        return value


class MemberUpdate(MemberCreate):
    """Partial update; only fields present in the payload are written."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    membership_status: Optional[MembershipStatus] = None
    preferred_training_times: Optional[list[str]] = None


class MemberFilters(CamelModel):
    status: Optional[str] = None
    search_term: Optional[str] = None
    join_date_from: Optional[date] = None
    join_date_to: Optional[date] = None
    has_emergency_contact: Optional[bool] = None


class MemberRead(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    membership_status: MembershipStatus
    emergency_contact: Optional[dict] = None
    medical_conditions: Optional[str] = None
    fitness_goals: Optional[str] = None
    preferred_training_times: list[str] = Field(default_factory=list)
    join_date: date
    created_at: UTCDateTime
    updated_at: UTCDateTime


class MemberStats(CamelModel):
    total_members: int = 0
    active_members: int = 0
    inactive_members: int = 0
    frozen_members: int = 0
    cancelled_members: int = 0
    new_this_month: int = 0
    new_this_week: int = 0


class MemberDistribution(CamelModel):
    status: str
    count: int
    percentage: int


class Activity(CamelModel):
    type: str
    title: str
    description: str
    time: str
    timestamp: UTCDateTime
    member_name: Optional[str] = None
    status: Optional[str] = None
    session_title: Optional[str] = None
    trainer_name: Optional[str] = None
