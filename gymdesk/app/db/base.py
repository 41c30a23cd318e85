from gymdesk.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from gymdesk.app.models.user import User  # noqa: F401
from gymdesk.app.models.member import Member  # noqa: F401
from gymdesk.app.models.trainer import Trainer  # noqa: F401
from gymdesk.app.models.trainer_availability import TrainerAvailability  # noqa: F401
from gymdesk.app.models.training_session import TrainingSession  # noqa: F401
from gymdesk.app.models.session_comment import SessionComment  # noqa: F401
from gymdesk.app.models.session_conflict import SessionConflict  # noqa: F401
from gymdesk.app.models.membership_plan import MembershipPlan  # noqa: F401
from gymdesk.app.models.subscription import Subscription  # noqa: F401
