"""One-time provisioning: schema creation and the default membership plan catalogue."""

import logging

from sqlalchemy.exc import SQLAlchemyError

from gymdesk.app.db.base import Base
from gymdesk.app.models.membership_plan import MembershipPlan
from gymdesk.app.schemas.subscription_plan import PlanRead
from gymdesk.app.services.base import BaseService, ServiceResponse

logger = logging.getLogger(__name__)

SESSION_TABLES = ("training_sessions", "session_comments", "trainer_availability", "session_conflicts")

DEFAULT_MEMBERSHIP_PLANS = [
    {
        "name": "Basic Monthly",
        "description": "Perfect for getting started with your fitness journey",
        "price": 29.99,
        "duration": "monthly",
        "features": [
            "Gym access during regular hours",
            "Basic equipment use",
            "Locker room access",
            "Free initial fitness assessment",
        ],
    },
    {
        "name": "Premium Monthly",
        "description": "Enhanced experience with additional perks",
        "price": 59.99,
        "duration": "monthly",
        "features": [
            "24/7 gym access",
            "All equipment including premium machines",
            "Group fitness classes",
            "Locker room with towel service",
            "Free personal training consultation",
            "Guest passes (2/month)",
        ],
    },
    {
        "name": "Elite Monthly",
        "description": "Ultimate fitness experience with premium services",
        "price": 99.99,
        "duration": "monthly",
        "features": [
            "24/7 gym access",
            "VIP area access",
            "Unlimited group classes",
            "Premium locker room with amenities",
            "Monthly personal training session",
            "Nutritional consultation",
            "Priority booking",
            "Unlimited guest passes",
        ],
        "includes_personal_training": True,
    },
    {
        "name": "Basic Quarterly",
        "description": "Three months of basic access with savings",
        "price": 79.99,
        "duration": "quarterly",
        "features": [
            "Gym access during regular hours",
            "Basic equipment use",
            "Locker room access",
            "Free initial fitness assessment",
            "Quarterly progress review",
        ],
    },
    {
        "name": "Premium Quarterly",
        "description": "Three months of premium features at a discounted rate",
        "price": 159.99,
        "duration": "quarterly",
        "features": [
            "24/7 gym access",
            "All equipment including premium machines",
            "Group fitness classes",
            "Locker room with towel service",
            "Free personal training consultation",
            "Guest passes (2/month)",
            "Quarterly body composition analysis",
        ],
    },
    {
        "name": "Basic Annual",
        "description": "Full year of fitness with maximum savings",
        "price": 299.99,
        "duration": "annual",
        "features": [
            "Gym access during regular hours",
            "Basic equipment use",
            "Locker room access",
            "Free initial fitness assessment",
            "Quarterly progress reviews",
            "Annual health screening",
        ],
    },
    {
        "name": "Premium Annual",
        "description": "Complete yearly package with premium benefits",
        "price": 599.99,
        "duration": "annual",
        "features": [
            "24/7 gym access",
            "All equipment including premium machines",
            "Unlimited group fitness classes",
            "Locker room with towel service",
            "Monthly personal training session",
            "Guest passes (2/month)",
            "Quarterly body composition analysis",
            "Annual nutritional consultation",
        ],
        "includes_personal_training": True,
    },
    {
        "name": "Elite Annual",
        "description": "The ultimate yearly fitness package",
        "price": 999.99,
        "duration": "annual",
        "features": [
            "24/7 gym access",
            "VIP area access",
            "Unlimited group classes",
            "Premium locker room with amenities",
            "Bi-weekly personal training sessions",
            "Monthly nutritional consultation",
            "Priority booking",
            "Unlimited guest passes",
            "Annual health screening",
            "Fitness gear allowance",
        ],
        "includes_personal_training": True,
    },
]


class SetupService(BaseService):
    def seed_membership_plans(self) -> ServiceResponse[dict]:
        """Insert any default plan that is missing by name; existing plans are left untouched."""
        try:
            existing = {name for (name,) in self.db.query(MembershipPlan.name).all()}
            created = []
            for values in DEFAULT_MEMBERSHIP_PLANS:
                if values["name"] in existing:
                    continue
                plan = MembershipPlan(is_active=True, **values)
                self.db.add(plan)
                created.append(plan)
            self.db.commit()
            for plan in created:
                self.db.refresh(plan)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "seed membership plans", "Failed to create membership plans")

        if not created:
            return ServiceResponse({"message": "Membership plans already exist", "plans": []})
        logger.info("Seeded %s membership plans", len(created))
        self._invalidate(("plans",))
        return ServiceResponse(
            {
                "message": "Membership plans created successfully",
                "plans": [PlanRead.model_validate(plan) for plan in created],
            }
        )

    def ensure_session_schema(self) -> ServiceResponse[dict]:
        """Create any missing session-related table. Existing tables are not altered."""
        tables = [Base.metadata.tables[name] for name in SESSION_TABLES]
        try:
            Base.metadata.create_all(bind=self.db.get_bind(), tables=tables, checkfirst=True)
        except SQLAlchemyError as exc:
            return self._store_failure(exc, "create session schema", "Failed to create training session schema")
        return ServiceResponse({"message": "Training session schema is up to date", "tables": list(SESSION_TABLES)})
