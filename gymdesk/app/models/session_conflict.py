"""Scheduling conflict log. The table is provisioned but nothing writes to it yet."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String

from gymdesk.app.core.time import utc_now
from gymdesk.app.db.base_class import Base, generate_uuid

CONFLICT_TYPES = ("trainer_unavailable", "member_booked", "room_occupied", "equipment_unavailable")


class SessionConflict(Base):
    __tablename__ = "session_conflicts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    session_id = Column(String(36), ForeignKey("training_sessions.id", ondelete="CASCADE"), nullable=False)
    conflict_type = Column(String(40), nullable=False)
    conflict_details = Column(JSON, nullable=True)
    resolved = Column(Boolean, nullable=False, default=False)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
