"""Gym member model."""

from sqlalchemy import JSON, Column, Date, DateTime, String, Text
from sqlalchemy.orm import relationship

from gymdesk.app.core.time import utc_now
from gymdesk.app.db.base_class import Base, generate_uuid


class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String, unique=True, index=True, nullable=True)
    phone = Column(String(50), nullable=True)
    membership_status = Column(String(20), nullable=False, default="active", index=True)
    emergency_contact = Column(JSON, nullable=True)
    medical_conditions = Column(Text, nullable=True)
    fitness_goals = Column(Text, nullable=True)
    preferred_training_times = Column(JSON, nullable=False, default=list)
    join_date = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    sessions = relationship("TrainingSession", back_populates="member", passive_deletes=True)
    subscriptions = relationship("Subscription", back_populates="member", passive_deletes=True)
