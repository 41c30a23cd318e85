from fastapi import APIRouter, Depends, HTTPException, status

from gymdesk.app.api.responses import JsonBody, unwrap
from gymdesk.app.core.security import create_access_token
from gymdesk.app.dependencies.auth import get_current_user
from gymdesk.app.dependencies.services import get_user_service
from gymdesk.app.models.user import User
from gymdesk.app.schemas.user import LoginRequest, Token, UserRead
from gymdesk.app.services.user_service import REGISTRATION_CLOSED, UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(payload: JsonBody = None, users: UserService = Depends(get_user_service)):
    user, error = users.register_first_admin(payload)
    if error == REGISTRATION_CLOSED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error)
    return unwrap((user, error))


@router.post("/login", response_model=Token)
async def login(credentials: LoginRequest, users: UserService = Depends(get_user_service)):
    user, error = users.authenticate(credentials.email, credentials.password)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
    return Token(access_token=create_access_token(user.id, role=user.role))


@router.get("/me")
async def read_me(current_user: User = Depends(get_current_user)):
    return unwrap((UserRead.model_validate(current_user), None))
