"""Subscription (membership) plan endpoints."""

from fastapi import APIRouter, Depends, Request, status

from gymdesk.app.api.responses import JsonBody, query_filters, unwrap
from gymdesk.app.dependencies.auth import get_current_user, require_admin
from gymdesk.app.dependencies.services import get_plan_service
from gymdesk.app.models.user import User
from gymdesk.app.services.subscription_plan_service import SubscriptionPlanService

router = APIRouter(prefix="/api/subscription-plans", tags=["subscription-plans"])


@router.get("")
async def list_plans(
    request: Request,
    plans: SubscriptionPlanService = Depends(get_plan_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(plans.get_plans(query_filters(request)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_plan(
    payload: JsonBody = None,
    plans: SubscriptionPlanService = Depends(get_plan_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(plans.create_plan(payload))


@router.get("/active")
async def list_active_plans(
    plans: SubscriptionPlanService = Depends(get_plan_service), current_user: User = Depends(get_current_user)
):
    return unwrap(plans.get_active_plans())


@router.get("/stats")
async def plan_stats(plans: SubscriptionPlanService = Depends(get_plan_service), current_user: User = Depends(get_current_user)):
    return unwrap(plans.get_plan_stats())


@router.get("/{plan_id}")
async def get_plan(
    plan_id: str, plans: SubscriptionPlanService = Depends(get_plan_service), current_user: User = Depends(get_current_user)
):
    return unwrap(plans.get_plan_by_id(plan_id))


@router.put("/{plan_id}")
async def update_plan(
    plan_id: str,
    payload: JsonBody = None,
    plans: SubscriptionPlanService = Depends(get_plan_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(plans.update_plan(plan_id, payload))


@router.patch("/{plan_id}/status")
async def toggle_plan_status(
    plan_id: str,
    payload: JsonBody = None,
    plans: SubscriptionPlanService = Depends(get_plan_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(plans.toggle_plan_status(plan_id, (payload or {}).get("isActive", False)))


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: str, plans: SubscriptionPlanService = Depends(get_plan_service), current_user: User = Depends(require_admin)
):
    return unwrap(plans.delete_plan(plan_id))
