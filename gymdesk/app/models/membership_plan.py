"""Membership (subscription) plan model."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from gymdesk.app.core.time import utc_now
from gymdesk.app.db.base_class import Base, generate_uuid

PLAN_DURATIONS = ("monthly", "quarterly", "annual")


class MembershipPlan(Base):
    __tablename__ = "membership_plans"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration = Column(String(20), nullable=False)
    features = Column(JSON, nullable=False, default=list)
    max_sessions_per_month = Column(Integer, nullable=True)
    includes_personal_training = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    subscriptions = relationship("Subscription", back_populates="plan", passive_deletes=True)
