"""Append-only comments on training sessions."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from gymdesk.app.core.cache import query_keys
from gymdesk.app.models.session_comment import SessionComment
from gymdesk.app.models.training_session import TrainingSession
from gymdesk.app.schemas.comment import CommentCreate, CommentRead
from gymdesk.app.services.base import NOT_FOUND, BaseService, ServiceResponse, validate_payload

logger = logging.getLogger(__name__)


class CommentService(BaseService):
    def add_session_comment(self, payload: Any, user_id: str) -> ServiceResponse[CommentRead]:
        data, error = validate_payload(CommentCreate, payload)
        if error:
            return ServiceResponse(None, error)
        try:
            if self.db.query(TrainingSession.id).filter(TrainingSession.id == data.session_id).first() is None:
                return ServiceResponse(None, NOT_FOUND)
            comment = SessionComment(
                session_id=data.session_id,
                user_id=user_id,
                comment=data.comment,
                comment_type=data.comment_type,
                is_private=data.is_private,
            )
            self.db.add(comment)
            self.db.commit()
            self.db.refresh(comment)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "add session comment", "Failed to add comment")

        self._invalidate(query_keys.session_comments(data.session_id))
        return ServiceResponse(CommentRead.model_validate(comment))

    def get_session_comments(self, session_id: str) -> ServiceResponse[list[CommentRead]]:
        return self._cached(query_keys.session_comments(session_id), lambda: self._load_comments(session_id))

    def _load_comments(self, session_id: str) -> ServiceResponse[list[CommentRead]]:
        try:
            comments = (
                self.db.query(SessionComment)
                .options(joinedload(SessionComment.user))
                .filter(SessionComment.session_id == session_id)
                .order_by(SessionComment.created_at.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch session comments")
        return ServiceResponse([CommentRead.model_validate(c) for c in comments])
