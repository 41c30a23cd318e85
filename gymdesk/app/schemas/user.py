"""User, auth and profile schemas."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from gymdesk.app.schemas.common import (
    STAFF_PHONE_PATTERN,
    CamelModel,
    UTCDateTime,
    fail,
    optional_email,
    optional_phone,
    person_name,
    strong_password,
)


class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(default="", validate_default=True)
    first_name: str = Field(default="", validate_default=True)
    last_name: str = Field(default="", validate_default=True)

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, value):
        return strong_password(value)

    @field_validator("first_name", mode="before")
    @classmethod
    def _first_name(cls, value):
        return person_name(value, "First name")

    @field_validator("last_name", mode="before")
    @classmethod
    def _last_name(cls, value):
        return person_name(value, "Last name")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRead(CamelModel):
    id: str
    email: str
    role: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    is_active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class UserProfileUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("first_name", mode="before")
    @classmethod
    def _first_name(cls, value):
        return person_name(value, "First name")

    @field_validator("last_name", mode="before")
    @classmethod
    def _last_name(cls, value):
        return person_name(value, "Last name")

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value):
        email = optional_email(value)
        if email is None:
            fail("Email is required", "missing")
        return email

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, value):
        return optional_phone(value, STAFF_PHONE_PATTERN)

    @field_validator("avatar", mode="before")
    @classmethod
    def _avatar(cls, value):
        if value in (None, ""):
            return None
        if not str(value).startswith(("http://", "https://")):
            fail("Invalid avatar URL")
        return value


class PasswordChange(CamelModel):
    current_password: str = Field(default="", validate_default=True)
    new_password: str = Field(default="", validate_default=True)
    confirm_password: str = Field(default="", validate_default=True)

    @field_validator("current_password", mode="before")
    @classmethod
    def _current(cls, value):
        if not value:
            fail("Current password is required", "missing")
        return value

    @field_validator("new_password", mode="before")
    @classmethod
    def _new(cls, value):
        return strong_password(value)

    @field_validator("confirm_password", mode="before")
    @classmethod
    def _confirm(cls, value):
        if not value:
            fail("Password confirmation is required", "missing")
        return value

    @model_validator(mode="after")
    def _matches(self):
        if self.new_password != self.confirm_password:
            fail("confirmPassword: Passwords don't match")
        return self


class UserStats(CamelModel):
    total_users: int = 0
    admins: int = 0
    trainers: int = 0
