"""Member endpoints."""

from fastapi import APIRouter, Depends, Request, status

from gymdesk.app.api.responses import JsonBody, query_filters, unwrap
from gymdesk.app.dependencies.auth import get_current_user, require_admin
from gymdesk.app.dependencies.services import get_member_service, get_session_service, get_subscription_service
from gymdesk.app.models.user import User
from gymdesk.app.services.member_service import MemberService
from gymdesk.app.services.session_service import SessionService
from gymdesk.app.services.subscription_service import SubscriptionService
from gymdesk.app.utils.csv_export import csv_download_response, export_filename

router = APIRouter(prefix="/api/members", tags=["members"])


@router.get("")
async def list_members(
    request: Request,
    members: MemberService = Depends(get_member_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(members.get_members(query_filters(request)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_member(
    payload: JsonBody = None,
    members: MemberService = Depends(get_member_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(members.create_member(payload))


@router.get("/stats")
async def member_stats(members: MemberService = Depends(get_member_service), current_user: User = Depends(get_current_user)):
    return unwrap(members.get_member_stats())


@router.get("/distribution")
async def member_distribution(
    members: MemberService = Depends(get_member_service), current_user: User = Depends(get_current_user)
):
    return unwrap(members.get_member_distribution())


@router.get("/export")
async def export_members(
    request: Request,
    members: MemberService = Depends(get_member_service),
    current_user: User = Depends(get_current_user),
):
    content = unwrap(members.export_members_csv(query_filters(request)))
    return csv_download_response(content, export_filename("members"))


@router.post("/bulk-delete")
async def bulk_delete_members(
    payload: JsonBody = None,
    members: MemberService = Depends(get_member_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(members.delete_members((payload or {}).get("ids") or []))


@router.get("/{member_id}")
async def get_member(
    member_id: str, members: MemberService = Depends(get_member_service), current_user: User = Depends(get_current_user)
):
    return unwrap(members.get_member_by_id(member_id))


@router.put("/{member_id}")
async def update_member(
    member_id: str,
    payload: JsonBody = None,
    members: MemberService = Depends(get_member_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(members.update_member(member_id, payload))


@router.delete("/{member_id}")
async def delete_member(
    member_id: str, members: MemberService = Depends(get_member_service), current_user: User = Depends(require_admin)
):
    return unwrap(members.delete_member(member_id))


@router.post("/{member_id}/freeze")
async def freeze_member(
    member_id: str, members: MemberService = Depends(get_member_service), current_user: User = Depends(get_current_user)
):
    return unwrap(members.freeze_membership(member_id))


@router.delete("/{member_id}/freeze")
async def unfreeze_member(
    member_id: str, members: MemberService = Depends(get_member_service), current_user: User = Depends(get_current_user)
):
    return unwrap(members.unfreeze_membership(member_id))


@router.post("/{member_id}/cancel")
async def cancel_member(
    member_id: str, members: MemberService = Depends(get_member_service), current_user: User = Depends(get_current_user)
):
    return unwrap(members.cancel_membership(member_id))


@router.post("/{member_id}/reactivate")
async def reactivate_member(
    member_id: str, members: MemberService = Depends(get_member_service), current_user: User = Depends(get_current_user)
):
    return unwrap(members.reactivate_membership(member_id))


@router.get("/{member_id}/sessions")
async def member_sessions(
    member_id: str,
    request: Request,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(sessions.get_member_sessions(member_id, query_filters(request)))


@router.get("/{member_id}/subscriptions")
async def member_subscriptions(
    member_id: str,
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(subscriptions.get_member_subscriptions(member_id))
