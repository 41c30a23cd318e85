"""Trainer profile, one per trainer User and sharing its id."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from gymdesk.app.db.base_class import Base


class Trainer(Base):
    __tablename__ = "trainers"

    id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    specializations = Column(JSON, nullable=False, default=list)
    certifications = Column(JSON, nullable=False, default=list)
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=50)
    availability = Column(JSON, nullable=False, default=dict)
    bio = Column(Text, nullable=True)
    years_experience = Column(Integer, nullable=True)

    user = relationship("User", back_populates="trainer_profile")
    availability_windows = relationship(
        "TrainerAvailability",
        back_populates="trainer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
