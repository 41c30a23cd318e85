"""One-time provisioning endpoints, callable only with the service role key."""

from fastapi import APIRouter, Depends

from gymdesk.app.api.responses import unwrap
from gymdesk.app.dependencies.auth import require_service_role
from gymdesk.app.dependencies.services import get_setup_service
from gymdesk.app.services.setup_service import SetupService

router = APIRouter(prefix="/api/setup", tags=["setup"], dependencies=[Depends(require_service_role)])


@router.post("/membership-plans")
async def setup_membership_plans(setup: SetupService = Depends(get_setup_service)):
    return unwrap(setup.seed_membership_plans())


@router.post("/training-sessions-schema")
async def setup_training_sessions_schema(setup: SetupService = Depends(get_setup_service)):
    return unwrap(setup.ensure_session_schema())
