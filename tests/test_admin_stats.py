from datetime import date

from app.services.admin_service import compute_stats


def test_stats_counts_revenue_activity_and_trends():
    rows = [
        {"status": "confirmed", "total_price": 120, "date": "2025-03-10", "user_email": "a@x.com",
         "facility_name": "Futsal Flex Arena", "created_at": "2025-03-01T09:00:00+00:00"},
        {"status": "Confirmed", "total_price": 0, "date": "2025-03-09", "user_email": "b@x.com",
         "facility_name": "SpinLab Studio", "created_at": "2025-03-02T09:00:00+00:00"},
        {"status": "pending", "total_price": 0, "date": "2025-03-10", "user_email": None,
         "facility_name": "SpinLab Studio", "created_at": "2025-03-03T09:00:00+00:00"},
        {"status": "cancelled", "total_price": 80, "date": "2025-02-01", "user_email": "c@x.com",
         "facility_name": "SpinLab Studio", "created_at": "2025-02-01T09:00:00+00:00"},
    ]

    stats = compute_stats(rows, today=date(2025, 3, 10))

    assert stats.active_bookings == 2
    assert stats.pending_requests == 1
    # Unpriced confirmed bookings count the flat rate
    assert stats.monthly_revenue == 170

    assert [a.user for a in stats.recent_activity] == ["User", "b@x.com", "a@x.com", "c@x.com"]
    assert stats.recent_activity[0].target == "SpinLab Studio"

    assert len(stats.booking_trends) == 7
    assert stats.booking_trends[0].date == "2025-03-04"
    assert stats.booking_trends[-1].date == "2025-03-10"
    assert stats.booking_trends[-1].label == "Mon"
    assert stats.booking_trends[-1].count == 2
    assert stats.booking_trends[-2].count == 1


def test_stats_with_no_bookings():
    stats = compute_stats([], today=date(2025, 3, 10))
    assert stats.active_bookings == 0
    assert stats.monthly_revenue == 0
    assert stats.recent_activity == []
    assert all(t.count == 0 for t in stats.booking_trends)
