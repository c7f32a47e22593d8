from datetime import date, datetime, timezone

from expiryguard.services.datemath import days_until, risk_window_end, utcnow

UTC = timezone.utc


class TestDaysUntil:
    def test_partial_day_counts_as_full_day(self):
        ref = datetime(2026, 1, 9, 15, 0, tzinfo=UTC)
        assert days_until(date(2026, 1, 10), ref) == 1

    def test_expires_today_is_zero(self):
        ref = datetime(2026, 1, 9, 10, 0, tzinfo=UTC)
        assert days_until(date(2026, 1, 9), ref) == 0

    def test_expired_is_negative(self):
        ref = datetime(2026, 1, 9, 15, 0, tzinfo=UTC)
        assert days_until(date(2026, 1, 8), ref) == -1
        assert days_until(date(2026, 1, 5), ref) == -4

    def test_exact_midnight_gives_whole_days(self):
        ref = datetime(2026, 1, 9, 0, 0, tzinfo=UTC)
        assert days_until(date(2026, 1, 14), ref) == 5
        assert days_until(date(2026, 1, 9), ref) == 0

    def test_plain_date_reference(self):
        assert days_until(date(2026, 1, 14), date(2026, 1, 9)) == 5

    def test_naive_reference(self):
        assert days_until(date(2026, 1, 12), datetime(2026, 1, 9, 23, 59)) == 3

    def test_crosses_month_boundary(self):
        ref = datetime(2026, 2, 27, 8, 0, tzinfo=UTC)
        assert days_until(date(2026, 3, 2), ref) == 3

    def test_same_now_gives_same_answer(self):
        ref = utcnow()
        assert days_until(date(2030, 1, 1), ref) == days_until(date(2030, 1, 1), ref)


class TestRiskWindowEnd:
    def test_adds_calendar_days(self):
        assert risk_window_end(datetime(2026, 1, 9, 15, 0, tzinfo=UTC), 5) == date(2026, 1, 14)

    def test_ignores_time_of_day(self):
        assert risk_window_end(datetime(2026, 1, 30, 23, 59, tzinfo=UTC), 3) == date(2026, 2, 2)

    def test_zero_horizon_is_today(self):
        assert risk_window_end(date(2026, 1, 9), 0) == date(2026, 1, 9)


def test_utcnow_is_timezone_aware():
    assert utcnow().tzinfo is not None
