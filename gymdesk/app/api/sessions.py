"""Training session endpoints: calendar listing, booking, lifecycle and comments."""

from fastapi import APIRouter, Depends, Request, status

from gymdesk.app.api.responses import JsonBody, query_filters, unwrap
from gymdesk.app.dependencies.auth import get_current_user
from gymdesk.app.dependencies.services import get_comment_service, get_session_service
from gymdesk.app.models.user import User
from gymdesk.app.schemas.session import (
    CancelSessionRequest,
    ConflictCheckRead,
    ConflictCheckRequest,
    RescheduleSessionRequest,
)
from gymdesk.app.services.base import ServiceResponse, validate_payload
from gymdesk.app.services.comment_service import CommentService
from gymdesk.app.services.session_service import DEFAULT_RANGE_END, DEFAULT_RANGE_START, SessionService

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("")
async def list_sessions(
    request: Request,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    filters = query_filters(request)
    start = filters.pop("start", None) or DEFAULT_RANGE_START
    end = filters.pop("end", None) or DEFAULT_RANGE_END
    if not current_user.is_admin:
        # Trainers only see their own calendar.
        filters["trainerId"] = current_user.id
    return unwrap(sessions.get_sessions_by_date_range(start, end, filters))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: JsonBody = None,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(sessions.create_session(payload, created_by=current_user.id))


@router.get("/stats")
async def session_stats(
    request: Request,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(sessions.get_session_stats(query_filters(request)))


@router.post("/check-conflicts")
async def check_conflicts(
    payload: JsonBody = None,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    data, error = validate_payload(ConflictCheckRequest, payload)
    if error:
        return unwrap(ServiceResponse(None, error))
    check = sessions.check_conflicts(data.trainer_id, data.scheduled_date, data.duration)
    result = ConflictCheckRead(
        conflicts=check.conflicts,
        check_failed=check.check_failed,
        has_conflicts=check.has_conflicts,
    )
    return unwrap(ServiceResponse(result))


@router.get("/{session_id}")
async def get_session(
    session_id: str, sessions: SessionService = Depends(get_session_service), current_user: User = Depends(get_current_user)
):
    return unwrap(sessions.get_session_by_id(session_id))


@router.put("/{session_id}")
async def update_session(
    session_id: str,
    payload: JsonBody = None,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(sessions.update_session(session_id, payload))


@router.delete("/{session_id}")
async def delete_session(
    session_id: str, sessions: SessionService = Depends(get_session_service), current_user: User = Depends(get_current_user)
):
    return unwrap(sessions.delete_session(session_id))


@router.post("/{session_id}/confirm")
async def confirm_session(
    session_id: str, sessions: SessionService = Depends(get_session_service), current_user: User = Depends(get_current_user)
):
    return unwrap(sessions.confirm_session(session_id))


@router.post("/{session_id}/start")
async def start_session(
    session_id: str, sessions: SessionService = Depends(get_session_service), current_user: User = Depends(get_current_user)
):
    return unwrap(sessions.start_session(session_id))


@router.post("/{session_id}/complete")
async def complete_session(
    session_id: str,
    payload: JsonBody = None,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(sessions.complete_session(session_id, payload))


@router.post("/{session_id}/cancel")
async def cancel_session(
    session_id: str,
    payload: JsonBody = None,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    data, error = validate_payload(CancelSessionRequest, payload)
    if error:
        return unwrap(ServiceResponse(None, error))
    return unwrap(sessions.cancel_session(session_id, data.reason))


@router.post("/{session_id}/reschedule")
async def reschedule_session(
    session_id: str,
    payload: JsonBody = None,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    data, error = validate_payload(RescheduleSessionRequest, payload)
    if error:
        return unwrap(ServiceResponse(None, error))
    return unwrap(sessions.reschedule_session(session_id, data.new_date))


@router.post("/{session_id}/no-show")
async def mark_no_show(
    session_id: str, sessions: SessionService = Depends(get_session_service), current_user: User = Depends(get_current_user)
):
    return unwrap(sessions.mark_no_show(session_id))


@router.get("/{session_id}/comments")
async def list_comments(
    session_id: str, comments: CommentService = Depends(get_comment_service), current_user: User = Depends(get_current_user)
):
    return unwrap(comments.get_session_comments(session_id))


@router.post("/{session_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    session_id: str,
    payload: JsonBody = None,
    comments: CommentService = Depends(get_comment_service),
    current_user: User = Depends(get_current_user),
):
    body = dict(payload or {}, sessionId=session_id)
    return unwrap(comments.add_session_comment(body, current_user.id))
