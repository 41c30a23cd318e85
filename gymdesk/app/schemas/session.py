"""Training session schemas: create/update payloads, filters, lifecycle requests and reads."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from gymdesk.app.schemas.common import CamelModel, UTCDateTime, bounded_number, fail, optional_text, required_text

SessionType = Literal["personal", "group", "class", "assessment", "consultation", "rehabilitation"]
SessionStatus = Literal["scheduled", "confirmed", "in_progress", "completed", "cancelled", "no_show", "rescheduled"]


class RecurringPattern(CamelModel):
    frequency: Literal["daily", "weekly", "monthly"]
    interval: int = Field(ge=1, le=12)
    end_date: Optional[datetime] = None
    days_of_week: Optional[list[int]] = None

    @field_validator("days_of_week")
    @classmethod
    def _days(cls, value):
        if value and any(day < 0 or day > 6 for day in value):
            fail("Days of week must be between 0 and 6")
        return value


def _duration(value):
    return bounded_number(
        value,
        minimum=15,
        maximum=480,
        below="Duration must be at least 15 minutes",
        above="Duration cannot exceed 8 hours",
    )


def _rating(value):
    return bounded_number(value, minimum=1, maximum=5, below="Rating must be between 1 and 5", above="Rating must be between 1 and 5")


class _SessionFields(CamelModel):
    description: Optional[str] = None
    cost: Optional[float] = None
    session_room: Optional[str] = None
    session_goals: Optional[str] = None
    preparation_notes: Optional[str] = None
    recurring_pattern: Optional[RecurringPattern] = None

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value):
        return optional_text(value, "Description", 500)

    @field_validator("cost", mode="before")
    @classmethod
    def _cost(cls, value):
        if isinstance(value, (int, float)) and value < 0:
            fail("Cost cannot be negative")
        return value

    @field_validator("session_room", mode="before")
    @classmethod
    def _room(cls, value):
        return optional_text(value, "Room name", 50)

    @field_validator("session_goals", mode="before")
    @classmethod
    def _goals(cls, value):
        return optional_text(value, "Session goals", 500)

    @field_validator("preparation_notes", mode="before")
    @classmethod
    def _preparation(cls, value):
        return optional_text(value, "Preparation notes", 500)


class SessionCreate(_SessionFields):
    member_id: str = Field(default="", validate_default=True)
    trainer_id: str = Field(default="", validate_default=True)
    type: SessionType
    title: str = Field(default="", validate_default=True)
    scheduled_date: datetime
    duration: int
    equipment_needed: list[str] = Field(default_factory=list)

    @field_validator("member_id", mode="before")
    @classmethod
    def _member(cls, value):
        if not value:
            fail("Invalid member ID")
        return value

    @field_validator("trainer_id", mode="before")
    @classmethod
    def _trainer(cls, value):
        if not value:
            fail("Invalid trainer ID")
        return value

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value):
        return required_text(value, "Title", 100)

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, value):
        return _duration(value)


class SessionUpdate(_SessionFields):
    member_id: Optional[str] = None
    trainer_id: Optional[str] = None
    type: Optional[SessionType] = None
    title: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    duration: Optional[int] = None
    equipment_needed: Optional[list[str]] = None
    status: Optional[SessionStatus] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    completion_summary: Optional[str] = None
    member_rating: Optional[int] = None
    trainer_rating: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value):
        return required_text(value, "Title", 100)

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, value):
        return _duration(value)

    @field_validator("completion_summary", mode="before")
    @classmethod
    def _summary(cls, value):
        return optional_text(value, "Completion summary", 1000)

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, value):
        return optional_text(value, "Notes", 1000)

    @field_validator("member_rating", "trainer_rating", mode="before")
    @classmethod
    def _ratings(cls, value):
        return _rating(value)


class SessionFilters(CamelModel):
    member_id: Optional[str] = None
    trainer_id: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    session_room: Optional[str] = None


class CompleteSessionRequest(CamelModel):
    completion_summary: Optional[str] = None
    member_rating: Optional[int] = None
    trainer_rating: Optional[int] = None

    @field_validator("completion_summary", mode="before")
    @classmethod
    def _summary(cls, value):
        return optional_text(value, "Completion summary", 1000)

    @field_validator("member_rating", "trainer_rating", mode="before")
    @classmethod
    def _ratings(cls, value):
        return _rating(value)


class CancelSessionRequest(CamelModel):
    reason: Optional[str] = None


class RescheduleSessionRequest(CamelModel):
    new_date: datetime


class ConflictCheckRequest(CamelModel):
    trainer_id: str
    scheduled_date: datetime
    duration: int

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, value):
        return _duration(value)


class PersonSummary(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None


class SessionRead(CamelModel):
    id: str
    member_id: str
    trainer_id: str
    type: str
    title: str
    description: Optional[str] = None
    scheduled_date: UTCDateTime
    duration: int
    status: str
    notes: Optional[str] = None
    cost: Optional[float] = None
    session_room: Optional[str] = None
    equipment_needed: list[str] = Field(default_factory=list)
    session_goals: Optional[str] = None
    preparation_notes: Optional[str] = None
    completion_summary: Optional[str] = None
    member_rating: Optional[int] = None
    trainer_rating: Optional[int] = None
    actual_start_time: Optional[UTCDateTime] = None
    actual_end_time: Optional[UTCDateTime] = None
    recurring_pattern: Optional[dict[str, Any]] = None
    created_by: Optional[str] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime
    member: Optional[PersonSummary] = None
    trainer: Optional[PersonSummary] = None


class ConflictRead(CamelModel):
    type: str
    details: dict[str, Any]


class ConflictCheckRead(CamelModel):
    conflicts: list[ConflictRead] = Field(default_factory=list)
    check_failed: bool = False
    has_conflicts: bool = False


class SessionStats(CamelModel):
    total_sessions: int = 0
    completed_sessions: int = 0
    cancelled_sessions: int = 0
    no_show_sessions: int = 0
    upcoming_sessions: int = 0
    completion_rate: int = 0
    average_rating: float = 0
