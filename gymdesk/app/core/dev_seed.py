import logging
import os

from sqlalchemy.orm import Session

from gymdesk.app.core.security import get_password_hash
from gymdesk.app.core.settings import get_settings
from gymdesk.app.models.trainer import Trainer
from gymdesk.app.models.user import User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"
DEMO_ACCOUNTS = (
    ("admin@fitness.com", "admin", "Admin", "User"),
    ("trainer@fitness.com", "trainer", "Demo", "Trainer"),
)


def ensure_default_dev_accounts(db: Session) -> None:
    """Seed the demo admin and trainer logins outside production and test runs."""
    if os.getenv("PYTEST_CURRENT_TEST") or get_settings().ENVIRONMENT == "production":
        return

    known = {email for (email,) in db.query(User.email).filter(User.email.in_([a[0] for a in DEMO_ACCOUNTS]))}
    missing = [account for account in DEMO_ACCOUNTS if account[0] not in known]
    if not missing:
        return

    for email, role, first_name, last_name in missing:
        user = User(
            email=email,
            role=role,
            first_name=first_name,
            last_name=last_name,
            hashed_password=get_password_hash(DEMO_PASSWORD),
        )
        db.add(user)
        if role == "trainer":
            db.flush()
            db.add(Trainer(id=user.id, specializations=["Strength Training"], certifications=[]))
    db.commit()
    logger.info("Seeded demo accounts: %s", ", ".join(account[0] for account in missing))
