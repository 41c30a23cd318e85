"""Membership plan catalogue."""

import logging
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from gymdesk.app.core.cache import query_keys
from gymdesk.app.models.membership_plan import MembershipPlan
from gymdesk.app.models.subscription import Subscription
from gymdesk.app.schemas.subscription_plan import PlanCreate, PlanFilters, PlanRead, PlanStats, PlanUpdate
from gymdesk.app.services.base import NOT_FOUND, BaseService, ServiceResponse, validate_payload

logger = logging.getLogger(__name__)

PLAN_IN_USE = "Cannot delete plan with active subscriptions. Please set it as inactive instead."

SORT_COLUMNS = {
    "name": MembershipPlan.name,
    "price": MembershipPlan.price,
    "duration": MembershipPlan.duration,
    "createdAt": MembershipPlan.created_at,
}


class SubscriptionPlanService(BaseService):
    def get_plans(self, filters: Optional[dict] = None) -> ServiceResponse[list[PlanRead]]:
        parsed, error = validate_payload(PlanFilters, filters)
        if error:
            return ServiceResponse([], error)
        return self._cached(query_keys.plans_list(parsed.model_dump()), lambda: self._load_plans(parsed))

    def get_active_plans(self) -> ServiceResponse[list[PlanRead]]:
        return self.get_plans({"isActive": True})

    def _load_plans(self, filters: PlanFilters) -> ServiceResponse[list[PlanRead]]:
        try:
            query = self.db.query(MembershipPlan)
            if filters.is_active is not None:
                query = query.filter(MembershipPlan.is_active.is_(filters.is_active))
            if filters.duration and filters.duration != "all":
                query = query.filter(MembershipPlan.duration == filters.duration)
            if filters.price_min is not None:
                query = query.filter(MembershipPlan.price >= filters.price_min)
            if filters.price_max is not None:
                query = query.filter(MembershipPlan.price <= filters.price_max)
            if filters.includes_personal_training is not None:
                query = query.filter(MembershipPlan.includes_personal_training.is_(filters.includes_personal_training))
            if filters.search_term and filters.search_term.strip():
                pattern = f"%{filters.search_term.strip().lower()}%"
                query = query.filter(
                    or_(func.lower(MembershipPlan.name).like(pattern), func.lower(MembershipPlan.description).like(pattern))
                )
            column = SORT_COLUMNS[filters.sort_by]
            query = query.order_by(column.desc() if filters.sort_order == "desc" else column.asc())
            plans = query.all()

            subscriber_counts = dict(
                self.db.query(Subscription.plan_id, func.count(Subscription.id))
                .filter(Subscription.status == "active")
                .group_by(Subscription.plan_id)
                .all()
            )
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch subscription plans")

        return ServiceResponse([self._to_read(plan, subscriber_counts.get(plan.id, 0)) for plan in plans])

    def get_plan_by_id(self, plan_id: str) -> ServiceResponse[PlanRead]:
        try:
            plan = self.db.query(MembershipPlan).filter(MembershipPlan.id == plan_id).first()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch subscription plan", "Failed to fetch subscription plan")
        if plan is None:
            return ServiceResponse(None, NOT_FOUND)
        return ServiceResponse(self._to_read(plan))

    def create_plan(self, payload: Any) -> ServiceResponse[PlanRead]:
        data, error = validate_payload(PlanCreate, payload)
        if error:
            return ServiceResponse(None, error)
        plan = MembershipPlan(**data.model_dump())
        try:
            self.db.add(plan)
            self.db.commit()
            self.db.refresh(plan)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "create subscription plan", "Failed to create subscription plan")

        logger.info("Created membership plan %s", plan.name)
        self._invalidate_plans()
        return ServiceResponse(self._to_read(plan))

    def update_plan(self, plan_id: str, payload: Any) -> ServiceResponse[PlanRead]:
        data, error = validate_payload(PlanUpdate, payload)
        if error:
            return ServiceResponse(None, error)
        changes = data.model_dump(exclude_unset=True)
        return self._write(plan_id, changes, "update subscription plan")

    def toggle_plan_status(self, plan_id: str, is_active: bool) -> ServiceResponse[PlanRead]:
        return self._write(plan_id, {"is_active": bool(is_active)}, "toggle subscription plan status")

    def delete_plan(self, plan_id: str) -> ServiceResponse[dict]:
        """Soft delete: the plan is deactivated, never removed, and only when nobody is actively on it."""
        try:
            in_use = (
                self.db.query(Subscription.id)
                .filter(Subscription.plan_id == plan_id, Subscription.status == "active")
                .first()
            )
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "delete subscription plan", "Failed to delete subscription plan")
        if in_use is not None:
            return ServiceResponse(None, PLAN_IN_USE)

        result = self._write(plan_id, {"is_active": False}, "delete subscription plan")
        if result.error:
            return ServiceResponse(None, result.error)
        return ServiceResponse({"success": True})

    def get_plan_stats(self) -> ServiceResponse[PlanStats]:
        return self._cached(query_keys.plan_stats(), self._load_stats)

    def _load_stats(self) -> ServiceResponse[PlanStats]:
        try:
            plans = self.db.query(MembershipPlan).all()
            active_subscriptions = (
                self.db.query(Subscription.price, MembershipPlan.duration)
                .join(MembershipPlan, MembershipPlan.id == Subscription.plan_id)
                .filter(Subscription.status == "active")
                .all()
            )
        except SQLAlchemyError as exc:
            return self._store_failure(
                exc, "fetch subscription plan statistics", "Failed to fetch subscription plan statistics"
            )

        revenue = {"monthly": 0.0, "quarterly": 0.0, "annual": 0.0}
        for price, duration in active_subscriptions:
            if duration in revenue:
                # Actual subscription price, not the plan's list price.
                revenue[duration] += float(price or 0)

        active_plans = sum(1 for plan in plans if plan.is_active)
        return ServiceResponse(
            PlanStats(
                total_plans=len(plans),
                active_plans=active_plans,
                inactive_plans=len(plans) - active_plans,
                total_subscribers=len(active_subscriptions),
                monthly_revenue=round(revenue["monthly"], 2),
                quarterly_revenue=round(revenue["quarterly"], 2),
                annual_revenue=round(revenue["annual"], 2),
            )
        )

    def _write(self, plan_id: str, changes: dict, operation: str) -> ServiceResponse[PlanRead]:
        try:
            plan = self.db.query(MembershipPlan).filter(MembershipPlan.id == plan_id).first()
            if plan is None:
                return ServiceResponse(None, NOT_FOUND)
            for field, value in changes.items():
                setattr(plan, field, value)
            self.db.commit()
            self.db.refresh(plan)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, operation, f"Failed to {operation}")

        self._invalidate_plans()
        return ServiceResponse(self._to_read(plan))

    @staticmethod
    def _to_read(plan: MembershipPlan, subscriber_count: int = 0) -> PlanRead:
        read = PlanRead.model_validate(plan)
        read.subscriber_count = subscriber_count
        return read

    def _invalidate_plans(self) -> None:
        self._invalidate(("plans",), ("subscriptions",))
