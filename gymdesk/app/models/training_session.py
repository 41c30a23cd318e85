"""Training session model."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from gymdesk.app.core.time import utc_now
from gymdesk.app.db.base_class import Base, generate_uuid

SESSION_TYPES = ("personal", "group", "class", "assessment", "consultation", "rehabilitation")
SESSION_STATUSES = ("scheduled", "confirmed", "in_progress", "completed", "cancelled", "no_show", "rescheduled")


class TrainingSession(Base):
    __tablename__ = "training_sessions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)
    trainer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    scheduled_date = Column(DateTime, nullable=False, index=True)
    duration = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="scheduled")
    notes = Column(Text, nullable=True)
    cost = Column(Numeric(10, 2), nullable=True)
    session_room = Column(String(50), nullable=True)
    equipment_needed = Column(JSON, nullable=False, default=list)
    session_goals = Column(Text, nullable=True)
    preparation_notes = Column(Text, nullable=True)
    completion_summary = Column(Text, nullable=True)
    member_rating = Column(Integer, nullable=True)
    trainer_rating = Column(Integer, nullable=True)
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time = Column(DateTime, nullable=True)
    # Stored as submitted; occurrences are never materialized.
    recurring_pattern = Column(JSON, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    member = relationship("Member", back_populates="sessions")
    trainer = relationship("User", back_populates="sessions", foreign_keys=[trainer_id])
    comments = relationship("SessionComment", back_populates="session", passive_deletes=True)
