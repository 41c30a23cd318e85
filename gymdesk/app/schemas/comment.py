"""Session comment schemas."""

from typing import Literal

from pydantic import Field, field_validator

from gymdesk.app.schemas.common import CamelModel, UTCDateTime, required_text

CommentType = Literal["note", "progress", "issue", "goal", "equipment", "feedback", "reminder"]


class CommentCreate(CamelModel):
    session_id: str
    comment: str = Field(default="", validate_default=True)
    comment_type: CommentType = "note"
    is_private: bool = False

    @field_validator("comment", mode="before")
    @classmethod
    def _comment(cls, value):
        return required_text(value, "Comment", 1000)


class CommentAuthor(CamelModel):
    first_name: str
    last_name: str
    role: str


class CommentRead(CamelModel):
    id: str
    session_id: str
    user_id: str
    comment: str
    comment_type: str
    is_private: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime
    user: CommentAuthor
