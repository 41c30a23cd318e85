"""Member subscription to a membership plan."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from gymdesk.app.core.time import utc_now
from gymdesk.app.db.base_class import Base, generate_uuid

SUBSCRIPTION_STATUSES = ("active", "cancelled", "frozen", "expired")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)
    plan_id = Column(String(36), ForeignKey("membership_plans.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="active")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    auto_renew = Column(Boolean, nullable=False, default=False)
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    member = relationship("Member", back_populates="subscriptions")
    plan = relationship("MembershipPlan", back_populates="subscriptions")
