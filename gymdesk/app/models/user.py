"""Staff account model: administrators and trainers."""

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from gymdesk.app.core.time import utc_now
from gymdesk.app.db.base_class import Base, generate_uuid


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default="trainer")
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    phone = Column(String(50), nullable=True)
    avatar = Column(String(512), nullable=True)
    hashed_password = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    trainer_profile = relationship("Trainer", back_populates="user", uselist=False)
    sessions = relationship("TrainingSession", back_populates="trainer", foreign_keys="TrainingSession.trainer_id")
    comments = relationship("SessionComment", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
