"""Staff accounts: registration bootstrap, authentication, profiles and role counts."""

import logging
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from gymdesk.app.core.security import get_password_hash, password_needs_rehash, verify_password
from gymdesk.app.models.user import User
from gymdesk.app.schemas.user import PasswordChange, UserProfileUpdate, UserRead, UserRegister, UserStats
from gymdesk.app.services.base import DUPLICATE, NOT_FOUND, BaseService, ServiceResponse, validate_payload

logger = logging.getLogger(__name__)

REGISTRATION_CLOSED = "Registration is closed"
INVALID_CREDENTIALS = "Invalid credentials"


class UserService(BaseService):
    def register_first_admin(self, payload: Any) -> ServiceResponse[UserRead]:
        """Create the bootstrap administrator. Only allowed while no account exists."""
        data, error = validate_payload(UserRegister, payload)
        if error:
            return ServiceResponse(None, error)
        try:
            if self.db.query(User.id).first() is not None:
                return ServiceResponse(None, REGISTRATION_CLOSED)
            user = User(
                email=data.email.lower(),
                role="admin",
                first_name=data.first_name,
                last_name=data.last_name,
                hashed_password=get_password_hash(data.password),
            )
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "register admin", "Failed to register user")

        logger.info("Registered bootstrap admin %s", user.id)
        return ServiceResponse(UserRead.model_validate(user))

    def authenticate(self, email: str, password: str) -> ServiceResponse[User]:
        try:
            user = self.db.query(User).filter(User.email == email.lower()).first()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "authenticate", "Failed to authenticate")
        if not user or not user.hashed_password:
            return ServiceResponse(None, INVALID_CREDENTIALS)
        if not user.is_active:
            return ServiceResponse(None, "User is inactive")
        if not verify_password(password, user.hashed_password):
            return ServiceResponse(None, INVALID_CREDENTIALS)
        if password_needs_rehash(user.hashed_password):
            user.hashed_password = get_password_hash(password)
            try:
                self.db.commit()
            except SQLAlchemyError as exc:
                return self._store_failure(exc, "authenticate", "Failed to authenticate")
        return ServiceResponse(user)

    def get_user_by_id(self, user_id: str) -> ServiceResponse[UserRead]:
        try:
            user = self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch user", "Failed to fetch user")
        if user is None:
            return ServiceResponse(None, NOT_FOUND)
        return ServiceResponse(UserRead.model_validate(user))

    def get_users(self, role: Optional[str] = None) -> ServiceResponse[list[UserRead]]:
        try:
            query = self.db.query(User)
            if role:
                query = query.filter(User.role == role)
            users = query.order_by(User.first_name.asc(), User.last_name.asc()).all()
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch users")
        return ServiceResponse([UserRead.model_validate(u) for u in users])

    def get_trainers(self) -> ServiceResponse[list[UserRead]]:
        return self.get_users(role="trainer")

    def update_profile(self, user_id: str, payload: Any) -> ServiceResponse[UserRead]:
        data, error = validate_payload(UserProfileUpdate, payload)
        if error:
            return ServiceResponse(None, error)
        changes = data.model_dump(exclude_unset=True)
        try:
            user = self.db.query(User).filter(User.id == user_id).first()
            if user is None:
                return ServiceResponse(None, NOT_FOUND)
            if "email" in changes and changes["email"] != user.email:
                taken = self.db.query(User.id).filter(User.email == changes["email"], User.id != user_id).first()
                if taken is not None:
                    return ServiceResponse(None, DUPLICATE)
            for field, value in changes.items():
                setattr(user, field, value)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "update profile", "Failed to update profile")

        # Trainer names also appear in session calendars and comment authors.
        self._invalidate(("trainers",), ("sessions",), ("dashboard",))
        return ServiceResponse(UserRead.model_validate(user))

    def change_password(self, user_id: str, payload: Any) -> ServiceResponse[dict]:
        data, error = validate_payload(PasswordChange, payload)
        if error:
            return ServiceResponse(None, error)
        try:
            user = self.db.query(User).filter(User.id == user_id).first()
            if user is None:
                return ServiceResponse(None, NOT_FOUND)
            if not user.hashed_password or not verify_password(data.current_password, user.hashed_password):
                return ServiceResponse(None, "currentPassword: Current password is incorrect")
            user.hashed_password = get_password_hash(data.new_password)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "change password", "Failed to change password")
        return ServiceResponse({"success": True})

    def get_user_stats(self) -> ServiceResponse[UserStats]:
        try:
            counts = dict(self.db.query(User.role, func.count(User.id)).group_by(User.role).all())
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch user statistics", "Failed to fetch user statistics")
        return ServiceResponse(
            UserStats(
                total_users=sum(counts.values()),
                admins=counts.get("admin", 0),
                trainers=counts.get("trainer", 0),
            )
        )
