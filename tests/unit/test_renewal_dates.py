"""Calendar month arithmetic used by renewals."""

from datetime import datetime, timezone

from inventorypro.subscriptions.service import add_months

UTC = timezone.utc


class TestAddMonths:
    def test_mid_month(self):
        assert add_months(datetime(2026, 3, 10, tzinfo=UTC), 1) == datetime(2026, 4, 10, tzinfo=UTC)

    def test_clamps_to_short_month(self):
        assert add_months(datetime(2026, 1, 31, tzinfo=UTC), 1) == datetime(2026, 2, 28, tzinfo=UTC)

    def test_leap_year(self):
        assert add_months(datetime(2028, 1, 31, tzinfo=UTC), 1) == datetime(2028, 2, 29, tzinfo=UTC)

    def test_year_rollover(self):
        assert add_months(datetime(2026, 12, 15, 8, 30, tzinfo=UTC), 1) == datetime(2027, 1, 15, 8, 30, tzinfo=UTC)

    def test_several_months(self):
        assert add_months(datetime(2026, 11, 30, tzinfo=UTC), 3) == datetime(2027, 2, 28, tzinfo=UTC)
