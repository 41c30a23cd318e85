"""Member subscription endpoints."""

from fastapi import APIRouter, Depends, Request, status

from gymdesk.app.api.responses import JsonBody, query_filters, unwrap
from gymdesk.app.dependencies.auth import get_current_user, require_admin
from gymdesk.app.dependencies.services import get_subscription_service
from gymdesk.app.models.user import User
from gymdesk.app.services.subscription_service import SubscriptionService
from gymdesk.app.utils.csv_export import csv_download_response, export_filename

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


@router.get("")
async def list_subscriptions(
    request: Request,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(subscriptions.get_all_subscriptions(query_filters(request)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subscription(
    payload: JsonBody = None,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(subscriptions.create_subscription(payload))


@router.get("/stats")
async def subscription_stats(
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(subscriptions.get_subscription_stats())


@router.get("/export")
async def export_subscriptions(
    request: Request,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(get_current_user),
):
    content = unwrap(subscriptions.export_subscriptions_csv(query_filters(request)))
    return csv_download_response(content, export_filename("subscriptions"))


@router.get("/{subscription_id}")
async def get_subscription(
    subscription_id: str,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(subscriptions.get_subscription_by_id(subscription_id))


@router.put("/{subscription_id}")
async def update_subscription(
    subscription_id: str,
    payload: JsonBody = None,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(subscriptions.update_subscription(subscription_id, payload))


@router.delete("/{subscription_id}")
async def delete_subscription(
    subscription_id: str,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(subscriptions.delete_subscription(subscription_id))


@router.post("/{subscription_id}/cancel")
async def cancel_subscription(
    subscription_id: str,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(subscriptions.cancel_subscription(subscription_id))


@router.post("/{subscription_id}/freeze")
async def freeze_subscription(
    subscription_id: str,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(subscriptions.freeze_subscription(subscription_id))


@router.post("/{subscription_id}/reactivate")
async def reactivate_subscription(
    subscription_id: str,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(subscriptions.reactivate_subscription(subscription_id))
