"""Trainer data access. A trainer is a User with role "trainer" plus a Trainer profile row sharing its id."""

import logging
from collections import Counter
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from gymdesk.app.core.cache import query_keys
from gymdesk.app.core.security import get_password_hash
from gymdesk.app.core.time import ensure_utc, utc_now
from gymdesk.app.models.trainer import Trainer
from gymdesk.app.models.trainer_availability import TrainerAvailability
from gymdesk.app.models.user import User
from gymdesk.app.schemas.trainer import (
    AvailabilityWindowCreate,
    AvailabilityWindowRead,
    TrainerCreate,
    TrainerFilters,
    TrainerRead,
    TrainerStats,
    TrainerUpdate,
)
from gymdesk.app.services.base import NOT_FOUND, BaseService, ServiceResponse, validate_payload
from gymdesk.app.utils.csv_export import CSVColumn, array_to_csv, format_array_for_csv, format_date_for_csv

logger = logging.getLogger(__name__)

USER_FIELDS = ("first_name", "last_name", "email", "phone")
PROFILE_FIELDS = ("specializations", "certifications", "hourly_rate", "availability", "bio", "years_experience")

TRAINER_CSV_COLUMNS = [
    CSVColumn("id", "ID"),
    CSVColumn("first_name", "First Name"),
    CSVColumn("last_name", "Last Name"),
    CSVColumn("email", "Email"),
    CSVColumn("phone", "Phone"),
    CSVColumn("specializations", "Specializations", format_array_for_csv),
    CSVColumn("certifications", "Certifications", format_array_for_csv),
    CSVColumn("hourly_rate", "Hourly Rate"),
    CSVColumn("years_experience", "Years Experience"),
    CSVColumn("created_at", "Created At", format_date_for_csv),
]


def to_trainer_read(user: User, profile: Optional[Trainer]) -> TrainerRead:
    """Flatten the account and profile rows into the single trainer shape clients see."""
    values = {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "avatar": user.avatar,
        "role": user.role,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }
    if profile is not None:
        values.update(
            specializations=profile.specializations or [],
            certifications=profile.certifications or [],
            hourly_rate=float(profile.hourly_rate if profile.hourly_rate is not None else 50),
            availability=profile.availability or {},
            bio=profile.bio,
            years_experience=profile.years_experience,
        )
    return TrainerRead.model_validate(values)


class TrainerService(BaseService):
    def get_trainers(self, filters: Optional[dict] = None) -> ServiceResponse[list[TrainerRead]]:
        parsed, error = validate_payload(TrainerFilters, filters)
        if error:
            return ServiceResponse([], error)
        key = query_keys.trainers_list(parsed.model_dump())
        return self._cached(key, lambda: self._load_trainers(parsed))

    def _load_trainers(self, filters: TrainerFilters) -> ServiceResponse[list[TrainerRead]]:
        try:
            query = self.db.query(User, Trainer).outerjoin(Trainer, Trainer.id == User.id).filter(User.role == "trainer")
            if filters.search_term and filters.search_term.strip():
                pattern = f"%{filters.search_term.strip().lower()}%"
                query = query.filter(
                    or_(
                        func.lower(User.first_name).like(pattern),
                        func.lower(User.last_name).like(pattern),
                        func.lower(User.email).like(pattern),
                    )
                )
            if filters.is_active is not None:
                query = query.filter(User.is_active.is_(filters.is_active))
            if filters.hourly_rate_min is not None:
                query = query.filter(Trainer.hourly_rate >= filters.hourly_rate_min)
            if filters.hourly_rate_max is not None:
                query = query.filter(Trainer.hourly_rate <= filters.hourly_rate_max)

            sort_columns = {
                "name": [User.first_name, User.last_name],
                "email": [User.email],
                "hourlyRate": [Trainer.hourly_rate],
                "createdAt": [User.created_at],
            }
            columns = sort_columns[filters.sort_by]
            if filters.sort_order == "desc":
                columns = [column.desc() for column in columns]
            rows = query.order_by(*columns).all()
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch trainers")

        trainers = [to_trainer_read(user, profile) for user, profile in rows]
        if filters.specialization:
            wanted = filters.specialization.lower()
            trainers = [t for t in trainers if any(wanted in s.lower() for s in t.specializations)]
        return ServiceResponse(trainers)

    def get_trainer_by_id(self, trainer_id: str) -> ServiceResponse[TrainerRead]:
        if not trainer_id:
            return ServiceResponse(None, "Trainer ID is required")
        try:
            user = self.db.query(User).filter(User.id == trainer_id, User.role == "trainer").first()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "fetch trainer", "Failed to fetch trainer")
        if user is None:
            return ServiceResponse(None, NOT_FOUND)
        return ServiceResponse(to_trainer_read(user, user.trainer_profile))

    def create_trainer(self, payload: Any) -> ServiceResponse[TrainerRead]:
        data, error = validate_payload(TrainerCreate, payload)
        if error:
            return ServiceResponse(None, error)

        values = data.model_dump()
        user = User(
            email=data.email,
            role="trainer",
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            hashed_password=get_password_hash(data.password),
        )
        try:
            self.db.add(user)
            self.db.flush()
            profile = Trainer(id=user.id, **{field: values[field] for field in PROFILE_FIELDS})
            self.db.add(profile)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "create trainer", "Failed to create trainer")

        logger.info("Created trainer %s", user.id)
        self._invalidate_trainers()
        return ServiceResponse(to_trainer_read(user, user.trainer_profile))

    def update_trainer(self, trainer_id: str, payload: Any) -> ServiceResponse[TrainerRead]:
        if not trainer_id:
            return ServiceResponse(None, "Trainer ID is required")
        data, error = validate_payload(TrainerUpdate, payload)
        if error:
            return ServiceResponse(None, error)

        changes = data.model_dump(exclude_unset=True)
        try:
            user = self.db.query(User).filter(User.id == trainer_id, User.role == "trainer").first()
            if user is None:
                return ServiceResponse(None, NOT_FOUND)
            profile = user.trainer_profile
            if profile is None:
                profile = Trainer(id=user.id)
                self.db.add(profile)
            for field, value in changes.items():
                if field in USER_FIELDS:
                    setattr(user, field, value)
                elif field in PROFILE_FIELDS:
                    setattr(profile, field, value)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "update trainer", "Failed to update trainer")

        self._invalidate_trainers()
        return ServiceResponse(to_trainer_read(user, user.trainer_profile))

    def delete_trainer(self, trainer_id: str) -> ServiceResponse[dict]:
        if not trainer_id:
            return ServiceResponse(None, "Trainer ID is required")
        try:
            exists = self.db.query(User.id).filter(User.id == trainer_id, User.role == "trainer").first()
            if exists is None:
                return ServiceResponse(None, NOT_FOUND)
            self.db.query(TrainerAvailability).filter(TrainerAvailability.trainer_id == trainer_id).delete(
                synchronize_session=False
            )
            self.db.query(Trainer).filter(Trainer.id == trainer_id).delete(synchronize_session=False)
            self.db.query(User).filter(User.id == trainer_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "delete trainer", "Failed to delete trainer")

        logger.info("Deleted trainer %s", trainer_id)
        self._invalidate_trainers()
        return ServiceResponse({"success": True})

    def get_trainer_stats(self) -> ServiceResponse[TrainerStats]:
        return self._cached(query_keys.trainer_stats(), self._load_stats)

    def _load_stats(self) -> ServiceResponse[TrainerStats]:
        trainers, error = self.get_trainers()
        if error:
            return ServiceResponse(None, error)

        specialization_counts = Counter(spec for trainer in trainers for spec in trainer.specializations)
        month_start = utc_now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        total = len(trainers)
        return ServiceResponse(
            TrainerStats(
                total_trainers=total,
                active_trainers=sum(1 for trainer in trainers if trainer.is_active),
                average_hourly_rate=(sum(t.hourly_rate for t in trainers) / total) if total else 0,
                top_specializations=[
                    {"name": name, "count": count} for name, count in specialization_counts.most_common(5)
                ],
                new_this_month=sum(1 for t in trainers if ensure_utc(t.created_at) >= month_start),
                total_certifications=sum(len(t.certifications) for t in trainers),
            )
        )

    def export_trainers_csv(self, filters: Optional[dict] = None) -> ServiceResponse[str]:
        trainers, error = self.get_trainers(filters)
        if error:
            return ServiceResponse(None, error)
        return ServiceResponse(array_to_csv(trainers, TRAINER_CSV_COLUMNS))

    def get_availability(self, trainer_id: str) -> ServiceResponse[list[AvailabilityWindowRead]]:
        try:
            windows = (
                self.db.query(TrainerAvailability)
                .filter(TrainerAvailability.trainer_id == trainer_id)
                .order_by(TrainerAvailability.day_of_week, TrainerAvailability.start_time)
                .all()
            )
        except SQLAlchemyError as exc:
            return self._list_failure(exc, "fetch trainer availability")
        return ServiceResponse([AvailabilityWindowRead.model_validate(w) for w in windows])

    def add_availability(self, trainer_id: str, payload: Any) -> ServiceResponse[AvailabilityWindowRead]:
        data, error = validate_payload(AvailabilityWindowCreate, payload)
        if error:
            return ServiceResponse(None, error)
        try:
            if self.db.query(Trainer.id).filter(Trainer.id == trainer_id).first() is None:
                return ServiceResponse(None, NOT_FOUND)
            window = TrainerAvailability(
                trainer_id=trainer_id,
                day_of_week=data.day_of_week,
                start_time=data.start_time,
                end_time=data.end_time,
                is_available=data.is_available,
                effective_date=data.effective_date or utc_now().date(),
                end_date=data.end_date,
            )
            self.db.add(window)
            self.db.commit()
            self.db.refresh(window)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "add trainer availability", "Failed to add availability")

        self._invalidate(("trainers",))
        return ServiceResponse(AvailabilityWindowRead.model_validate(window))

    def delete_availability(self, trainer_id: str, window_id: str) -> ServiceResponse[dict]:
        try:
            deleted = (
                self.db.query(TrainerAvailability)
                .filter(TrainerAvailability.id == window_id, TrainerAvailability.trainer_id == trainer_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "delete trainer availability", "Failed to delete availability")
        if not deleted:
            return ServiceResponse(None, NOT_FOUND)
        self._invalidate(("trainers",))
        return ServiceResponse({"success": True})

    def _invalidate_trainers(self) -> None:
        self._invalidate(("trainers",), ("sessions",), ("dashboard",))
