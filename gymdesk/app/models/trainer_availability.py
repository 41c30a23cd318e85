"""Recurring weekly availability windows for trainers."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Time, UniqueConstraint
from sqlalchemy.orm import relationship

from gymdesk.app.core.time import utc_now
from gymdesk.app.db.base_class import Base, generate_uuid


class TrainerAvailability(Base):
    __tablename__ = "trainer_availability"
    __table_args__ = (UniqueConstraint("trainer_id", "day_of_week", "start_time", "effective_date"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trainer_id = Column(String(36), ForeignKey("trainers.id", ondelete="CASCADE"), nullable=False, index=True)
    # 0 = Sunday
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    effective_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    trainer = relationship("Trainer", back_populates="availability_windows")
