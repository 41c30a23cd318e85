"""Per-request service factories sharing the request's store session and the process query cache."""

from fastapi import Depends
from sqlalchemy.orm import Session

from gymdesk.app.core.cache import QueryCache, get_query_cache
from gymdesk.app.db.session import get_db
from gymdesk.app.services.comment_service import CommentService
from gymdesk.app.services.dashboard_service import DashboardService
from gymdesk.app.services.member_service import MemberService
from gymdesk.app.services.session_service import SessionService
from gymdesk.app.services.setup_service import SetupService
from gymdesk.app.services.subscription_plan_service import SubscriptionPlanService
from gymdesk.app.services.subscription_service import SubscriptionService
from gymdesk.app.services.trainer_service import TrainerService
from gymdesk.app.services.user_service import UserService


def get_member_service(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)) -> MemberService:
    return MemberService(db, cache)


def get_trainer_service(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)) -> TrainerService:
    return TrainerService(db, cache)


def get_session_service(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)) -> SessionService:
    return SessionService(db, cache)


def get_comment_service(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)) -> CommentService:
    return CommentService(db, cache)


def get_subscription_service(
    db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)
) -> SubscriptionService:
    return SubscriptionService(db, cache)


def get_plan_service(
    db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)
) -> SubscriptionPlanService:
    return SubscriptionPlanService(db, cache)


def get_user_service(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)) -> UserService:
    return UserService(db, cache)


def get_dashboard_service(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)) -> DashboardService:
    return DashboardService(db, cache)


def get_setup_service(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)) -> SetupService:
    return SetupService(db, cache)
