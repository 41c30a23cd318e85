"""Authentication dependencies for retrieving the current user."""

import hmac

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from gymdesk.app.core.security import decode_access_token
from gymdesk.app.core.settings import get_settings
from gymdesk.app.db.session import get_db
from gymdesk.app.models.user import User


def get_current_user(db: Session = Depends(get_db), authorization: str | None = Header(default=None)) -> User:
    # Expect Authorization: Bearer <token>
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_access_token(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.query(User).filter(User.id == str(user_id)).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to perform this action",
        )
    return current_user


def require_service_role(x_service_role_key: str | None = Header(default=None)) -> None:
    """Setup endpoints accept only the server-side service role key."""
    expected = get_settings().SERVICE_ROLE_KEY
    if not x_service_role_key or not hmac.compare_digest(x_service_role_key, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid service role key")
