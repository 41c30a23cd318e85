"""Timestamped staff notes attached to a training session."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from gymdesk.app.core.time import utc_now
from gymdesk.app.db.base_class import Base, generate_uuid

COMMENT_TYPES = ("note", "progress", "issue", "goal", "equipment", "feedback", "reminder")


class SessionComment(Base):
    __tablename__ = "session_comments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    session_id = Column(String(36), ForeignKey("training_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    comment = Column(Text, nullable=False)
    comment_type = Column(String(20), nullable=False)
    is_private = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    session = relationship("TrainingSession", back_populates="comments")
    user = relationship("User", back_populates="comments")
