"""Member subscriptions to membership plans."""

import logging
from collections import Counter
from datetime import date, timedelta
from typing import Any, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from gymdesk.app.core.cache import query_keys
from gymdesk.app.core.time import utc_now
from gymdesk.app.models.member import Member
from gymdesk.app.models.membership_plan import MembershipPlan
from gymdesk.app.models.subscription import Subscription
from gymdesk.app.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionFilters,
    SubscriptionRead,
    SubscriptionStats,
    SubscriptionUpdate,
)
from gymdesk.app.services.base import NOT_FOUND, BaseService, ServiceResponse, validate_payload
from gymdesk.app.utils.csv_export import CSVColumn, array_to_csv, format_date_for_csv

logger = logging.getLogger(__name__)

PLAN_DURATION_DELTAS = {
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
    "annual": relativedelta(years=1),
}

EXPIRING_WINDOW_DAYS = 30

SUBSCRIPTION_CSV_COLUMNS = [
    CSVColumn("id", "ID"),
    CSVColumn("member.first_name", "Member First Name"),
    CSVColumn("member.last_name", "Member Last Name"),
    CSVColumn("member.email", "Member Email"),
    CSVColumn("plan.name", "Plan"),
    CSVColumn("status", "Status"),
    CSVColumn("start_date", "Start Date", format_date_for_csv),
    CSVColumn("end_date", "End Date", format_date_for_csv),
    CSVColumn("auto_renew", "Auto Renew", lambda value: "Yes" if value else "No"),
    CSVColumn("price", "Price"),
]


def calculate_end_date(start_date: date, duration: str) -> date:
    """End date for a plan term starting on ``start_date``."""
    return start_date + PLAN_DURATION_DELTAS[duration]


class SubscriptionService(BaseService):
    def get_all_subscriptions(self, filters: Optional[dict] = None) -> ServiceResponse[list[SubscriptionRead]]:
        parsed, error = validate_payload(SubscriptionFilters, filters)
        if error:
            return ServiceResponse([], error)
        return self._cached(query_keys.subscriptions_list(parsed.model_dump()), lambda: self._load_all(parsed))

    def _load_all(self, filters: SubscriptionFilters) -> ServiceResponse[list[SubscriptionRead]]:
        try:
            query = self._subscription_query()
            if filters.status and filters.status != "all":
                query = query.filter(Subscription.status == filters.status)
            if filters.member_id:
                query = query.filter(Subscription.member_id == filters.member_id)
            if filters.plan_id:
                query = query.filter(Subscription.plan_id == filters.plan_id)
            if filters.start_date:
                query = query.filter(Subscription.start_date >= filters.start_date)
            if filters.end_date:
                query = query.filter(Subscription.end_date <= filters.end_date)
            subscriptions = query.order_by(Subscription.created_at.desc()).all()
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch subscriptions")

        results = [SubscriptionRead.model_validate(s) for s in subscriptions]
        if filters.search_term:
            needle = filters.search_term.lower()
            results = [
                sub
                for sub in results
                if any(
                    needle in (text or "").lower()
                    for text in (
                        sub.member.first_name if sub.member else None,
                        sub.member.last_name if sub.member else None,
                        sub.member.email if sub.member else None,
                        sub.plan.name if sub.plan else None,
                    )
                )
            ]
        return ServiceResponse(results)

    def get_member_subscriptions(self, member_id: str) -> ServiceResponse[list[SubscriptionRead]]:
        return self.get_all_subscriptions({"memberId": member_id})

    def get_subscription_by_id(self, subscription_id: str) -> ServiceResponse[SubscriptionRead]:
        try:
            subscription = self._subscription_query().filter(Subscription.id == subscription_id).first()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch subscription", "Failed to fetch subscription")
        if subscription is None:
            return ServiceResponse(None, NOT_FOUND)
        return ServiceResponse(SubscriptionRead.model_validate(subscription))

    def create_subscription(self, payload: Any) -> ServiceResponse[SubscriptionRead]:
        data, error = validate_payload(SubscriptionCreate, payload)
        if error:
            return ServiceResponse(None, error)
        try:
            if self.db.query(Member.id).filter(Member.id == data.member_id).first() is None:
                return ServiceResponse(None, "Member not found")
            plan = self.db.query(MembershipPlan).filter(MembershipPlan.id == data.plan_id).first()
            if plan is None:
                return ServiceResponse(None, "Plan not found")

            subscription = Subscription(
                member_id=data.member_id,
                plan_id=data.plan_id,
                status=data.status,
                start_date=data.start_date,
                end_date=data.end_date or calculate_end_date(data.start_date, plan.duration),
                auto_renew=data.auto_renew,
                price=data.price if data.price is not None else plan.price,
            )
            self.db.add(subscription)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "create subscription", "Failed to create subscription")

        logger.info("Created subscription %s for member %s", subscription.id, subscription.member_id)
        self._invalidate_subscriptions()
        return self.get_subscription_by_id(subscription.id)

    def update_subscription(self, subscription_id: str, payload: Any) -> ServiceResponse[SubscriptionRead]:
        data, error = validate_payload(SubscriptionUpdate, payload)
        if error:
            return ServiceResponse(None, error)
        changes = data.model_dump(exclude_unset=True)
        try:
            subscription = self.db.query(Subscription).filter(Subscription.id == subscription_id).first()
            if subscription is None:
                return ServiceResponse(None, NOT_FOUND)
            end_date = changes.get("end_date")
            if end_date is not None and end_date <= subscription.start_date:
                return ServiceResponse(None, "endDate: End date must be after start date")
            for field, value in changes.items():
                setattr(subscription, field, value)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "update subscription", "Failed to update subscription")

        self._invalidate_subscriptions()
        return self.get_subscription_by_id(subscription_id)

    def cancel_subscription(self, subscription_id: str) -> ServiceResponse[SubscriptionRead]:
        return self.update_subscription(subscription_id, {"status": "cancelled"})

    def freeze_subscription(self, subscription_id: str) -> ServiceResponse[SubscriptionRead]:
        return self.update_subscription(subscription_id, {"status": "frozen"})

    def reactivate_subscription(self, subscription_id: str) -> ServiceResponse[SubscriptionRead]:
        return self.update_subscription(subscription_id, {"status": "active"})

    def delete_subscription(self, subscription_id: str) -> ServiceResponse[dict]:
        try:
            deleted = self.db.query(Subscription).filter(Subscription.id == subscription_id).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "delete subscription", "Failed to delete subscription")
        if not deleted:
            return ServiceResponse(None, NOT_FOUND)
        self._invalidate_subscriptions()
        return ServiceResponse({"success": True})

    def get_subscription_stats(self) -> ServiceResponse[SubscriptionStats]:
        return self._cached(query_keys.subscription_stats(), self._load_stats)

    def _load_stats(self) -> ServiceResponse[SubscriptionStats]:
        try:
            subscriptions = self.db.query(Subscription).options(joinedload(Subscription.plan)).all()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch subscription statistics", "Failed to fetch subscription statistics")

        cutoff = utc_now().date() + timedelta(days=EXPIRING_WINDOW_DAYS)
        active = [s for s in subscriptions if s.status == "active"]
        return ServiceResponse(
            SubscriptionStats(
                total_subscriptions=len(subscriptions),
                active_subscriptions=len(active),
                expiring_soon=sum(1 for s in active if s.end_date <= cutoff),
                total_revenue=round(sum(float(s.price or 0) for s in active), 2),
                status_distribution=dict(Counter(s.status for s in subscriptions)),
                plan_distribution=dict(Counter(s.plan.name if s.plan else "Unknown Plan" for s in subscriptions)),
            )
        )

    def export_subscriptions_csv(self, filters: Optional[dict] = None) -> ServiceResponse[str]:
        subscriptions, error = self.get_all_subscriptions(filters)
        if error:
            return ServiceResponse(None, error)
        return ServiceResponse(array_to_csv(subscriptions, SUBSCRIPTION_CSV_COLUMNS))

    def _subscription_query(self):
        return self.db.query(Subscription).options(joinedload(Subscription.member), joinedload(Subscription.plan))

    def _invalidate_subscriptions(self) -> None:
        self._invalidate(("subscriptions",), ("plans",), ("dashboard",))
