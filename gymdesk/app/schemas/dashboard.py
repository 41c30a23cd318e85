from gymdesk.app.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_members: int = 0
    active_members: int = 0
    monthly_revenue: float = 0
    active_subscriptions: int = 0
    daily_checkins: int = 0
    upcoming_sessions: int = 0
