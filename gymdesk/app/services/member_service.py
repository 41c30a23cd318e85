"""Member data access: CRUD, status changes, stats and export."""

import logging
from datetime import timedelta
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from gymdesk.app.core.cache import query_keys
from gymdesk.app.core.time import to_storage, utc_now
from gymdesk.app.models.member import Member
from gymdesk.app.schemas.member import (
    Activity,
    MemberCreate,
    MemberDistribution,
    MemberFilters,
    MemberRead,
    MemberStats,
    MemberUpdate,
)
from gymdesk.app.services.base import NOT_FOUND, BaseService, ServiceResponse, validate_payload
from gymdesk.app.utils.csv_export import CSVColumn, array_to_csv, format_array_for_csv, format_date_for_csv, format_object_for_csv
from gymdesk.app.utils.date_formatting import short_datetime

logger = logging.getLogger(__name__)

MEMBER_CSV_COLUMNS = [
    CSVColumn("id", "ID"),
    CSVColumn("first_name", "First Name"),
    CSVColumn("last_name", "Last Name"),
    CSVColumn("email", "Email"),
    CSVColumn("phone", "Phone"),
    CSVColumn("membership_status", "Status"),
    CSVColumn("join_date", "Join Date", format_date_for_csv),
    CSVColumn("emergency_contact", "Emergency Contact", format_object_for_csv),
    CSVColumn("medical_conditions", "Medical Conditions"),
    CSVColumn("fitness_goals", "Fitness Goals"),
    CSVColumn("preferred_training_times", "Preferred Training Times", format_array_for_csv),
    CSVColumn("created_at", "Created At", format_date_for_csv),
]


class MemberService(BaseService):
    def get_members(self, filters: Optional[dict] = None) -> ServiceResponse[list[MemberRead]]:
        parsed, error = validate_payload(MemberFilters, filters)
        if error:
            return ServiceResponse([], error)
        key = query_keys.members_list(parsed.model_dump())
        return self._cached(key, lambda: self._load_members(parsed))

    def _load_members(self, filters: MemberFilters) -> ServiceResponse[list[MemberRead]]:
        try:
            query = self.db.query(Member)
            if filters.status and filters.status != "all":
                query = query.filter(Member.membership_status == filters.status)
            if filters.search_term and filters.search_term.strip():
                pattern = f"%{filters.search_term.strip().lower()}%"
                query = query.filter(
                    or_(
                        func.lower(Member.first_name).like(pattern),
                        func.lower(Member.last_name).like(pattern),
                        func.lower(Member.email).like(pattern),
                        Member.phone.like(pattern),
                    )
                )
            if filters.join_date_from:
                query = query.filter(Member.join_date >= filters.join_date_from)
            if filters.join_date_to:
                query = query.filter(Member.join_date <= filters.join_date_to)
            if filters.has_emergency_contact is not None:
                if filters.has_emergency_contact:
                    query = query.filter(Member.emergency_contact.isnot(None))
                else:
                    query = query.filter(Member.emergency_contact.is_(None))
            members = query.order_by(Member.created_at.desc()).all()
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch members")
        return ServiceResponse([MemberRead.model_validate(m) for m in members])

    def search_members(self, search_term: str) -> ServiceResponse[list[MemberRead]]:
        return self.get_members({"searchTerm": search_term})

    def get_member_by_id(self, member_id: str) -> ServiceResponse[MemberRead]:
        if not member_id:
            return ServiceResponse(None, "Member ID is required")
        try:
            member = self.db.query(Member).filter(Member.id == member_id).first()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch member", "Failed to fetch member")
        if member is None:
            return ServiceResponse(None, NOT_FOUND)
        return ServiceResponse(MemberRead.model_validate(member))

    def create_member(self, payload: Any) -> ServiceResponse[MemberRead]:
        data, error = validate_payload(MemberCreate, payload)
        if error:
            return ServiceResponse(None, error)

        values = data.model_dump(exclude_none=True)
        values.setdefault("join_date", utc_now().date())
        member = Member(**values)
        try:
            self.db.add(member)
            self.db.commit()
            self.db.refresh(member)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "create member", "Failed to create member")

        logger.info("Created member %s", member.id)
        self._invalidate_members()
        return ServiceResponse(MemberRead.model_validate(member))

    def update_member(self, member_id: str, payload: Any) -> ServiceResponse[MemberRead]:
        if not member_id:
            return ServiceResponse(None, "Member ID is required")
        data, error = validate_payload(MemberUpdate, payload)
        if error:
            return ServiceResponse(None, error)

        changes = data.model_dump(exclude_unset=True)
        try:
            member = self.db.query(Member).filter(Member.id == member_id).first()
            if member is None:
                return ServiceResponse(None, NOT_FOUND)
            for field, value in changes.items():
                setattr(member, field, value)
            self.db.commit()
            self.db.refresh(member)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "update member", "Failed to update member")

        self._invalidate_members()
        return ServiceResponse(MemberRead.model_validate(member))

    def delete_member(self, member_id: str) -> ServiceResponse[dict]:
        if not member_id:
            return ServiceResponse(None, "Member ID is required")
        try:
            deleted = self.db.query(Member).filter(Member.id == member_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "delete member", "Failed to delete member")
        if not deleted:
            return ServiceResponse(None, NOT_FOUND)

        logger.info("Deleted member %s", member_id)
        self._invalidate_members()
        return ServiceResponse({"success": True})

    def delete_members(self, member_ids: list[str]) -> ServiceResponse[dict]:
        if not member_ids:
            return ServiceResponse(None, "Member IDs are required")
        try:
            deleted = self.db.query(Member).filter(Member.id.in_(member_ids)).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "bulk delete members", "Failed to delete members")

        self._invalidate_members()
        return ServiceResponse({"success": True, "deleted": deleted})

    def freeze_membership(self, member_id: str) -> ServiceResponse[dict]:
        return self._update_status(member_id, "frozen")

    def unfreeze_membership(self, member_id: str) -> ServiceResponse[dict]:
        return self._update_status(member_id, "active")

    def cancel_membership(self, member_id: str) -> ServiceResponse[dict]:
        return self._update_status(member_id, "cancelled")

    def reactivate_membership(self, member_id: str) -> ServiceResponse[dict]:
        return self._update_status(member_id, "active")

    def _update_status(self, member_id: str, status: str) -> ServiceResponse[dict]:
        if not member_id:
            return ServiceResponse(None, "Member ID is required")
        try:
            member = self.db.query(Member).filter(Member.id == member_id).first()
            if member is None:
                return ServiceResponse(None, NOT_FOUND)
            member.membership_status = status
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "update member status", "Failed to update member status")

        logger.info("Member %s status set to %s", member_id, status)
        self._invalidate_members()
        return ServiceResponse({"success": True, "membershipStatus": status})

    def get_member_stats(self) -> ServiceResponse[MemberStats]:
        return self._cached(query_keys.member_stats(), self._load_stats)

    def _load_stats(self) -> ServiceResponse[MemberStats]:
        now = utc_now()
        month_start = to_storage(now.replace(day=1, hour=0, minute=0, second=0, microsecond=0))
        week_ago = to_storage(now - timedelta(days=7))
        try:
            counts = dict(
                self.db.query(Member.membership_status, func.count(Member.id)).group_by(Member.membership_status).all()
            )
            new_this_month = self.db.query(func.count(Member.id)).filter(Member.created_at >= month_start).scalar()
            new_this_week = self.db.query(func.count(Member.id)).filter(Member.created_at >= week_ago).scalar()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch member statistics", "Failed to fetch member statistics")

        return ServiceResponse(
            MemberStats(
                total_members=sum(counts.values()),
                active_members=counts.get("active", 0),
                inactive_members=counts.get("inactive", 0),
                frozen_members=counts.get("frozen", 0),
                cancelled_members=counts.get("cancelled", 0),
                new_this_month=new_this_month or 0,
                new_this_week=new_this_week or 0,
            )
        )

    def get_member_distribution(self) -> ServiceResponse[list[MemberDistribution]]:
        stats, error = self.get_member_stats()
        if error or stats is None:
            return ServiceResponse(None, error or "Failed to fetch stats")
        total = stats.total_members
        if total == 0:
            return ServiceResponse([])

        buckets = [
            ("Active", stats.active_members),
            ("Frozen", stats.frozen_members),
            ("Inactive", stats.inactive_members),
            ("Cancelled", stats.cancelled_members),
        ]
        return ServiceResponse(
            [
                MemberDistribution(status=label, count=count, percentage=round(count / total * 100))
                for label, count in buckets
                if count > 0
            ]
        )

    def get_recent_member_activities(self, limit: int = 10) -> ServiceResponse[list[Activity]]:
        try:
            members = self.db.query(Member).order_by(Member.created_at.desc()).limit(limit).all()
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch recent member activities")

        activities = []
        for member in members:
            name = f"{member.first_name} {member.last_name}"
            activities.append(
                Activity(
                    type="member_joined",
                    title="New member registration",
                    description=f"{name} joined",
                    time=short_datetime(member.created_at),
                    timestamp=member.created_at,
                    member_name=name,
                    status=member.membership_status,
                )
            )
        return ServiceResponse(activities)

    def export_members_csv(self, filters: Optional[dict] = None) -> ServiceResponse[str]:
        members, error = self.get_members(filters)
        if error:
            return ServiceResponse(None, error)
        return ServiceResponse(array_to_csv(members, MEMBER_CSV_COLUMNS))

    def _invalidate_members(self) -> None:
        # Session and subscription listings embed member names.
        self._invalidate(("members",), ("sessions",), ("subscriptions",), ("dashboard",))
