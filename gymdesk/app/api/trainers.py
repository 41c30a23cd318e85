"""Trainer endpoints, including weekly availability windows."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from gymdesk.app.api.responses import JsonBody, query_filters, unwrap
from gymdesk.app.dependencies.auth import get_current_user, require_admin
from gymdesk.app.dependencies.services import get_session_service, get_trainer_service
from gymdesk.app.models.user import User
from gymdesk.app.services.base import FORBIDDEN
from gymdesk.app.services.session_service import SessionService
from gymdesk.app.services.trainer_service import TrainerService
from gymdesk.app.utils.csv_export import csv_download_response, export_filename

router = APIRouter(prefix="/api/trainers", tags=["trainers"])


def _ensure_self_or_admin(trainer_id: str, current_user: User) -> None:
    if not current_user.is_admin and current_user.id != trainer_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN)


@router.get("")
async def list_trainers(
    request: Request,
    trainers: TrainerService = Depends(get_trainer_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(trainers.get_trainers(query_filters(request)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_trainer(
    payload: JsonBody = None,
    trainers: TrainerService = Depends(get_trainer_service),
    current_user: User = Depends(require_admin),
):
    return unwrap(trainers.create_trainer(payload))


@router.get("/stats")
async def trainer_stats(trainers: TrainerService = Depends(get_trainer_service), current_user: User = Depends(get_current_user)):
    return unwrap(trainers.get_trainer_stats())


@router.get("/export")
async def export_trainers(
    request: Request,
    trainers: TrainerService = Depends(get_trainer_service),
    current_user: User = Depends(get_current_user),
):
    content = unwrap(trainers.export_trainers_csv(query_filters(request)))
    return csv_download_response(content, export_filename("trainers"))


@router.get("/{trainer_id}")
async def get_trainer(
    trainer_id: str, trainers: TrainerService = Depends(get_trainer_service), current_user: User = Depends(get_current_user)
):
    return unwrap(trainers.get_trainer_by_id(trainer_id))


@router.put("/{trainer_id}")
async def update_trainer(
    trainer_id: str,
    payload: JsonBody = None,
    trainers: TrainerService = Depends(get_trainer_service),
    current_user: User = Depends(get_current_user),
):
    _ensure_self_or_admin(trainer_id, current_user)
    return unwrap(trainers.update_trainer(trainer_id, payload))


@router.delete("/{trainer_id}")
async def delete_trainer(
    trainer_id: str, trainers: TrainerService = Depends(get_trainer_service), current_user: User = Depends(require_admin)
):
    return unwrap(trainers.delete_trainer(trainer_id))


@router.get("/{trainer_id}/availability")
async def list_availability(
    trainer_id: str, trainers: TrainerService = Depends(get_trainer_service), current_user: User = Depends(get_current_user)
):
    return unwrap(trainers.get_availability(trainer_id))


@router.post("/{trainer_id}/availability", status_code=status.HTTP_201_CREATED)
async def add_availability(
    trainer_id: str,
    payload: JsonBody = None,
    trainers: TrainerService = Depends(get_trainer_service),
    current_user: User = Depends(get_current_user),
):
    _ensure_self_or_admin(trainer_id, current_user)
    return unwrap(trainers.add_availability(trainer_id, payload))


@router.delete("/{trainer_id}/availability/{window_id}")
async def delete_availability(
    trainer_id: str,
    window_id: str,
    trainers: TrainerService = Depends(get_trainer_service),
    current_user: User = Depends(get_current_user),
):
    _ensure_self_or_admin(trainer_id, current_user)
    return unwrap(trainers.delete_availability(trainer_id, window_id))


@router.get("/{trainer_id}/sessions")
async def trainer_sessions(
    trainer_id: str,
    request: Request,
    sessions: SessionService = Depends(get_session_service),
    current_user: User = Depends(get_current_user),
):
    return unwrap(sessions.get_trainer_sessions(trainer_id, query_filters(request)))
