from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from app.models.api_models import ActivityEntry, AdminStats, TrendPoint
from app.models.db_models import BookingStatus
from app.services.db_service import db_service

# Confirmed bookings without a stored price still count towards revenue
FLAT_BOOKING_PRICE = 50
RECENT_ACTIVITY_LIMIT = 5
TREND_DAYS = 7


def compute_stats(rows: List[Dict[str, Any]], today: date) -> AdminStats:
    statuses = [BookingStatus.from_raw(r.get('status')) for r in rows]
    confirmed = [r for r, s in zip(rows, statuses) if s == BookingStatus.CONFIRMED]
    pending = sum(1 for s in statuses if s == BookingStatus.PENDING)

    revenue = sum((r.get('total_price') or FLAT_BOOKING_PRICE) for r in confirmed)

    newest = sorted(rows, key=lambda r: str(r.get('created_at') or ''), reverse=True)
    activity = [
        ActivityEntry(
            user=r.get('user_email') or 'User',
            target=r.get('facility_name'),
            time=r.get('created_at'),
        )
        for r in newest[:RECENT_ACTIVITY_LIMIT]
    ]

    trends = []
    for offset in range(TREND_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        iso = day.isoformat()
        trends.append(TrendPoint(
            date=iso,
            label=day.strftime("%a"),
            count=sum(1 for r in rows if str(r.get('date')) == iso),
        ))

    return AdminStats(
        active_bookings=len(confirmed),
        pending_requests=pending,
        monthly_revenue=revenue,
        recent_activity=activity,
        booking_trends=trends,
    )


class AdminService:
    def __init__(self, db=None):
        self.db = db or db_service

    async def get_stats(self, today: Optional[date] = None) -> AdminStats:
        rows = await self.db.list_bookings()
        return compute_stats(rows, today or date.today())
