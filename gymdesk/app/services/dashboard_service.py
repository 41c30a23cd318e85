"""Headline numbers and the recent-activity feed for the dashboard."""

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from gymdesk.app.core.cache import query_keys
from gymdesk.app.core.time import to_storage, to_studio_time, utc_now
from gymdesk.app.models.member import Member
from gymdesk.app.models.subscription import Subscription
from gymdesk.app.models.training_session import TrainingSession
from gymdesk.app.schemas.dashboard import DashboardStats
from gymdesk.app.schemas.member import Activity
from gymdesk.app.services.base import BaseService, ServiceResponse
from gymdesk.app.services.member_service import MemberService
from gymdesk.app.services.session_service import ACTIVE_STATUSES, SessionService, resolve_range_bound
from gymdesk.app.utils.date_formatting import short_datetime

logger = logging.getLogger(__name__)


class DashboardService(BaseService):
    def get_stats(self) -> ServiceResponse[DashboardStats]:
        return self._cached(query_keys.dashboard("stats"), self._load_stats)

    def _load_stats(self) -> ServiceResponse[DashboardStats]:
        studio_today = to_studio_time(utc_now()).date()
        day_start = resolve_range_bound(studio_today)
        day_end = resolve_range_bound(studio_today, end_of_day=True)
        try:
            total_members = self.db.query(func.count(Member.id)).scalar() or 0
            active_members = (
                self.db.query(func.count(Member.id)).filter(Member.membership_status == "active").scalar() or 0
            )
            active_subscriptions, revenue = (
                self.db.query(func.count(Subscription.id), func.coalesce(func.sum(Subscription.price), 0))
                .filter(Subscription.status == "active")
                .one()
            )
            daily_checkins = (
                self.db.query(func.count(TrainingSession.id))
                .filter(
                    TrainingSession.scheduled_date >= day_start,
                    TrainingSession.scheduled_date <= day_end,
                    TrainingSession.status != "cancelled",
                )
                .scalar()
                or 0
            )
            upcoming = (
                self.db.query(func.count(TrainingSession.id))
                .filter(
                    TrainingSession.scheduled_date > to_storage(utc_now()),
                    TrainingSession.status.in_(ACTIVE_STATUSES),
                )
                .scalar()
                or 0
            )
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch dashboard statistics", "Failed to fetch dashboard statistics")

        return ServiceResponse(
            DashboardStats(
                total_members=total_members,
                active_members=active_members,
                monthly_revenue=round(float(revenue), 2),
                active_subscriptions=active_subscriptions,
                daily_checkins=daily_checkins,
                upcoming_sessions=upcoming,
            )
        )

    def get_recent_activities(self, limit: int = 10) -> ServiceResponse[list[Activity]]:
        """Newest member sign-ups and session bookings, merged and trimmed to ``limit``."""
        members, error = MemberService(self.db).get_recent_member_activities(limit)
        if error:
            return ServiceResponse([], error)
        sessions, error = SessionService(self.db).get_recently_created_sessions(limit)
        if error:
            return ServiceResponse([], error)

        activities = list(members)
        for session in sessions:
            member_name = f"{session.member.first_name} {session.member.last_name}" if session.member else None
            trainer_name = f"{session.trainer.first_name} {session.trainer.last_name}" if session.trainer else None
            activities.append(
                Activity(
                    type="session_scheduled",
                    title="Session scheduled",
                    description=f"{session.title} with {member_name}" if member_name else session.title,
                    time=short_datetime(session.created_at),
                    timestamp=session.created_at,
                    member_name=member_name,
                    status=session.status,
                    session_title=session.title,
                    trainer_name=trainer_name,
                )
            )
        activities.sort(key=lambda activity: activity.timestamp, reverse=True)
        return ServiceResponse(activities[:limit])