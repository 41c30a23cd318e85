"""
Training session data access, conflict detection and lifecycle transitions.

Conflict detection is advisory and runs only when a session is created; the
check and the insert are not serialized across requests, so two concurrent
bookings for the same trainer slot can both succeed.
"""

import logging
from datetime import date, datetime, time
from typing import Any, NamedTuple, Optional

import pytz
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from gymdesk.app.core.cache import query_keys
from gymdesk.app.core.settings import get_settings
from gymdesk.app.core.time import ensure_utc, to_storage, to_studio_time, utc_now
from gymdesk.app.models.member import Member
from gymdesk.app.models.trainer_availability import TrainerAvailability
from gymdesk.app.models.training_session import TrainingSession
from gymdesk.app.models.user import User
from gymdesk.app.schemas.session import (
    CompleteSessionRequest,
    SessionCreate,
    SessionFilters,
    SessionRead,
    SessionStats,
    SessionUpdate,
)
from gymdesk.app.services.base import NOT_FOUND, BaseService, ServiceResponse, is_missing_schema_error, validate_payload
from gymdesk.app.utils.date_formatting import safe_parse_date
from gymdesk.app.utils.session_utils import calculate_session_end_time

logger = logging.getLogger(__name__)

DEFAULT_RANGE_START = "2020-01-01"
DEFAULT_RANGE_END = "2030-12-31"

ACTIVE_STATUSES = frozenset({"scheduled", "confirmed", "rescheduled"})

# Allowed target statuses for each current status.
STATUS_TRANSITIONS = {
    "scheduled": {"confirmed", "in_progress", "completed", "cancelled", "no_show", "rescheduled"},
    "confirmed": {"in_progress", "completed", "cancelled", "no_show", "rescheduled"},
    "rescheduled": {"confirmed", "in_progress", "completed", "cancelled", "no_show", "rescheduled"},
    "in_progress": {"completed", "cancelled", "no_show"},
    "completed": set(),
    "cancelled": set(),
    "no_show": set(),
}

CONFLICT_CHECK_UNAVAILABLE = "Conflict check unavailable"


def can_transition(current: str, target: str) -> bool:
    return target in STATUS_TRANSITIONS.get(current, set())


def invalid_transition_message(current: str, target: str) -> str:
    return f"Invalid status transition from {current} to {target}"


class ConflictCheck(NamedTuple):
    conflicts: list[dict]
    check_failed: bool = False

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def resolve_range_bound(value: Any, *, end_of_day: bool = False) -> Optional[datetime]:
    """Turn a bound into a storage instant; bare dates cover the whole studio-local day."""
    if value is None or value == "":
        return None
    date_only = isinstance(value, date) and not isinstance(value, datetime)
    date_only = date_only or (isinstance(value, str) and len(value.strip()) == 10)
    parsed = safe_parse_date(value)
    if parsed is None:
        return None
    if date_only and end_of_day:
        studio_tz = pytz.timezone(get_settings().STUDIO_TIMEZONE)
        parsed = studio_tz.localize(datetime.combine(parsed.date(), time.max))
    return to_storage(parsed)


class SessionService(BaseService):
    def __init__(self, db, cache=None, conflict_policy: Optional[str] = None):
        super().__init__(db, cache)
        self.conflict_policy = conflict_policy or get_settings().CONFLICT_CHECK_POLICY

    # Retrieval

    def get_sessions_by_date_range(
        self, start: Any, end: Any, filters: Optional[dict] = None
    ) -> ServiceResponse[list[SessionRead]]:
        parsed, error = validate_payload(SessionFilters, filters)
        if error:
            return ServiceResponse([], error)
        range_start = resolve_range_bound(start)
        range_end = resolve_range_bound(end, end_of_day=True)
        if range_start is None or range_end is None:
            return ServiceResponse([], "Invalid date range")

        key = query_keys.sessions_calendar(range_start, range_end, parsed.model_dump())
        return self._cached(key, lambda: self._load_range(range_start, range_end, parsed))

    def _load_range(self, start: datetime, end: datetime, filters: SessionFilters) -> ServiceResponse[list[SessionRead]]:
        try:
            query = (
                self._session_query()
                .filter(TrainingSession.scheduled_date >= start, TrainingSession.scheduled_date <= end)
            )
            if filters.member_id:
                query = query.filter(TrainingSession.member_id == filters.member_id)
            if filters.trainer_id:
                query = query.filter(TrainingSession.trainer_id == filters.trainer_id)
            if filters.status:
                query = query.filter(TrainingSession.status == filters.status)
            if filters.type:
                query = query.filter(TrainingSession.type == filters.type)
            if filters.session_room:
                query = query.filter(TrainingSession.session_room == filters.session_room)
            sessions = query.order_by(TrainingSession.scheduled_date.asc()).all()
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch sessions by date range")
        return ServiceResponse([SessionRead.model_validate(s) for s in sessions])

    def get_member_sessions(self, member_id: str, filters: Optional[dict] = None) -> ServiceResponse[list[SessionRead]]:
        filters = dict(filters or {})
        start = filters.pop("dateFrom", None) or DEFAULT_RANGE_START
        end = filters.pop("dateTo", None) or DEFAULT_RANGE_END
        filters["memberId"] = member_id
        return self.get_sessions_by_date_range(start, end, filters)

    def get_trainer_sessions(self, trainer_id: str, filters: Optional[dict] = None) -> ServiceResponse[list[SessionRead]]:
        filters = dict(filters or {})
        start = filters.pop("dateFrom", None) or DEFAULT_RANGE_START
        end = filters.pop("dateTo", None) or DEFAULT_RANGE_END
        filters["trainerId"] = trainer_id
        return self.get_sessions_by_date_range(start, end, filters)

    def get_session_by_id(self, session_id: str) -> ServiceResponse[SessionRead]:
        try:
            session = self._session_query().filter(TrainingSession.id == session_id).first()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch session", "Failed to fetch session")
        if session is None:
            return ServiceResponse(None, NOT_FOUND)
        return ServiceResponse(SessionRead.model_validate(session))

    def get_recently_created_sessions(self, limit: int = 10) -> ServiceResponse[list[SessionRead]]:
        try:
            sessions = self._session_query().order_by(TrainingSession.created_at.desc()).limit(limit).all()
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch recently created sessions")
        return ServiceResponse([SessionRead.model_validate(s) for s in sessions])

    def get_session_stats(self, filters: Optional[dict] = None) -> ServiceResponse[SessionStats]:
        parsed, error = validate_payload(SessionFilters, filters)
        if error:
            return ServiceResponse(None, error)
        return self._cached(query_keys.session_stats(parsed.model_dump()), lambda: self._load_stats(parsed))

    def _load_stats(self, filters: SessionFilters) -> ServiceResponse[SessionStats]:
        try:
            query = self.db.query(TrainingSession)
            if filters.member_id:
                query = query.filter(TrainingSession.member_id == filters.member_id)
            if filters.trainer_id:
                query = query.filter(TrainingSession.trainer_id == filters.trainer_id)
            counts = dict(
                query.with_entities(TrainingSession.status, func.count(TrainingSession.id))
                .group_by(TrainingSession.status)
                .all()
            )
            upcoming = (
                query.filter(
                    TrainingSession.scheduled_date > to_storage(utc_now()),
                    TrainingSession.status.in_(ACTIVE_STATUSES),
                )
                .with_entities(func.count(TrainingSession.id))
                .scalar()
            )
            average_rating = (
                query.filter(TrainingSession.member_rating.isnot(None))
                .with_entities(func.avg(TrainingSession.member_rating))
                .scalar()
            )
        except SQLAlchemyError as exc:
            if is_missing_schema_error(exc):
                self.db.rollback()
                return ServiceResponse(SessionStats())
            return self._store_failure(exc, "fetch session statistics", "Failed to fetch session statistics")

        total = sum(counts.values())
        completed = counts.get("completed", 0)
        return ServiceResponse(
            SessionStats(
                total_sessions=total,
                completed_sessions=completed,
                cancelled_sessions=counts.get("cancelled", 0),
                no_show_sessions=counts.get("no_show", 0),
                upcoming_sessions=upcoming or 0,
                completion_rate=round(completed / total * 100) if total else 0,
                average_rating=round(float(average_rating), 1) if average_rating is not None else 0,
            )
        )

    # Conflict detection

    def check_conflicts(self, trainer_id: str, start: datetime, duration: int) -> ConflictCheck:
        start = ensure_utc(start)
        end = calculate_session_end_time(start, duration)
        conflicts: list[dict] = []
        check_failed = False

        local_start = to_studio_time(start)
        # Python weekday() is Monday=0; stored windows use Sunday=0.
        day_of_week = (local_start.weekday() + 1) % 7
        clock = local_start.time().replace(second=0, microsecond=0)
        local_date = local_start.date()

        try:
            windows = (
                self.db.query(TrainerAvailability)
                .filter(
                    TrainerAvailability.trainer_id == trainer_id,
                    TrainerAvailability.day_of_week == day_of_week,
                    TrainerAvailability.is_available.is_(True),
                    TrainerAvailability.effective_date <= local_date,
                    or_(TrainerAvailability.end_date.is_(None), TrainerAvailability.end_date >= local_date),
                )
                .all()
            )
            if not any(window.start_time <= clock <= window.end_time for window in windows):
                conflicts.append(
                    {
                        "type": "trainer_unavailable",
                        "details": {
                            "trainerId": trainer_id,
                            "dayOfWeek": day_of_week,
                            "time": clock.strftime("%H:%M"),
                        },
                    }
                )
        except SQLAlchemyError as exc:
            self.db.rollback()
            check_failed = True
            logger.warning("Availability check failed for trainer %s: %s", trainer_id, exc)

        try:
            overlapping = (
                self.db.query(func.count(TrainingSession.id))
                .filter(
                    TrainingSession.trainer_id == trainer_id,
                    TrainingSession.scheduled_date >= to_storage(start),
                    TrainingSession.scheduled_date < to_storage(end),
                    TrainingSession.status != "cancelled",
                )
                .scalar()
            )
            if overlapping:
                conflicts.append({"type": "trainer_booked", "details": {"overlappingSessions": overlapping}})
        except SQLAlchemyError as exc:
            self.db.rollback()
            check_failed = True
            logger.warning("Overlap check failed for trainer %s: %s", trainer_id, exc)

        if check_failed:
            # A failed check reports nothing rather than a partial answer.
            return ConflictCheck([], True)
        return ConflictCheck(conflicts, False)

    # Mutations

    def create_session(self, payload: Any, created_by: Optional[str] = None) -> ServiceResponse[SessionRead]:
        data, error = validate_payload(SessionCreate, payload)
        if error:
            return ServiceResponse(None, error)

        try:
            if self.db.query(Member.id).filter(Member.id == data.member_id).first() is None:
                return ServiceResponse(None, "Member not found")
            if self.db.query(User.id).filter(User.id == data.trainer_id).first() is None:
                return ServiceResponse(None, "Trainer not found")
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "create session", "Failed to create session")

        check = self.check_conflicts(data.trainer_id, data.scheduled_date, data.duration)
        if check.check_failed:
            if self.conflict_policy == "fail_closed":
                return ServiceResponse(None, CONFLICT_CHECK_UNAVAILABLE)
            logger.warning("Conflict check unavailable, creating session for trainer %s anyway", data.trainer_id)
        if check.conflicts:
            kinds = ", ".join(conflict["type"] for conflict in check.conflicts)
            return ServiceResponse(None, f"Schedule conflict detected: {kinds}")

        values = data.model_dump(exclude_none=True)
        values["scheduled_date"] = to_storage(data.scheduled_date)
        values["status"] = "scheduled"
        values["created_by"] = created_by
        if data.recurring_pattern is not None:
            values["recurring_pattern"] = data.recurring_pattern.model_dump(mode="json", by_alias=True, exclude_none=True)
        session = TrainingSession(**values)
        try:
            self.db.add(session)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "create session", "Failed to create session")

        logger.info("Created session %s for trainer %s", session.id, session.trainer_id)
        self._invalidate_sessions()
        return self.get_session_by_id(session.id)

    def update_session(self, session_id: str, payload: Any) -> ServiceResponse[SessionRead]:
        data, error = validate_payload(SessionUpdate, payload)
        if error:
            return ServiceResponse(None, error)

        changes = data.model_dump(exclude_unset=True)
        if "recurring_pattern" in changes and data.recurring_pattern is not None:
            changes["recurring_pattern"] = data.recurring_pattern.model_dump(mode="json", by_alias=True, exclude_none=True)
        for field in ("scheduled_date", "actual_start_time", "actual_end_time"):
            if changes.get(field) is not None:
                changes[field] = to_storage(changes[field])
        return self._apply_changes(session_id, changes, "update session", strict=False)

    def delete_session(self, session_id: str) -> ServiceResponse[dict]:
        try:
            deleted = self.db.query(TrainingSession).filter(TrainingSession.id == session_id).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "delete session", "Failed to delete session")
        if not deleted:
            return ServiceResponse(None, NOT_FOUND)
        self._invalidate_sessions()
        return ServiceResponse({"success": True})

    # Lifecycle

    def confirm_session(self, session_id: str) -> ServiceResponse[SessionRead]:
        return self._apply_changes(session_id, {"status": "confirmed"}, "confirm session")

    def start_session(self, session_id: str) -> ServiceResponse[SessionRead]:
        changes = {"status": "in_progress", "actual_start_time": to_storage(utc_now())}
        return self._apply_changes(session_id, changes, "start session")

    def complete_session(self, session_id: str, payload: Any = None) -> ServiceResponse[SessionRead]:
        data, error = validate_payload(CompleteSessionRequest, payload)
        if error:
            return ServiceResponse(None, error)
        changes = {"status": "completed", "actual_end_time": to_storage(utc_now())}
        changes.update(data.model_dump(exclude_none=True))
        return self._apply_changes(session_id, changes, "complete session")

    def cancel_session(self, session_id: str, reason: Optional[str] = None) -> ServiceResponse[SessionRead]:
        changes: dict[str, Any] = {"status": "cancelled"}
        if reason:
            changes["notes"] = f"Cancelled: {reason}"
        return self._apply_changes(session_id, changes, "cancel session")

    def reschedule_session(self, session_id: str, new_date: Any) -> ServiceResponse[SessionRead]:
        parsed = new_date if isinstance(new_date, datetime) else safe_parse_date(new_date)
        if parsed is None:
            return ServiceResponse(None, "newDate: Invalid date format")
        changes = {"status": "rescheduled", "scheduled_date": to_storage(parsed)}
        return self._apply_changes(session_id, changes, "reschedule session")

    def mark_no_show(self, session_id: str) -> ServiceResponse[SessionRead]:
        return self._apply_changes(session_id, {"status": "no_show"}, "mark session no-show")

    def _apply_changes(
        self, session_id: str, changes: dict, operation: str, strict: bool = True
    ) -> ServiceResponse[SessionRead]:
        """Write ``changes`` if the status move is legal. Non-strict callers may resend the current status."""
        try:
            session = self.db.query(TrainingSession).filter(TrainingSession.id == session_id).first()
            if session is None:
                return ServiceResponse(None, NOT_FOUND)
            target = changes.get("status")
            unchanged = target == session.status and not strict
            if target is not None and not unchanged and not can_transition(session.status, target):
                return ServiceResponse(None, invalid_transition_message(session.status, target))
            for field, value in changes.items():
                setattr(session, field, value)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, operation, f"Failed to {operation}")

        logger.info("Session %s: %s", session_id, operation)
        self._invalidate_sessions()
        return self.get_session_by_id(session_id)

    # Helpers

    def _session_query(self):
        return self.db.query(TrainingSession).options(
            joinedload(TrainingSession.member), joinedload(TrainingSession.trainer)
        )

    def _invalidate_sessions(self) -> None:
        self._invalidate(("sessions",), ("dashboard",))

