from datetime import date, datetime

import pytest

from src.core.dates import parse_date, week_dates, weekday_index


@pytest.mark.unit
class TestDates:
    def test_weekday_index_starts_on_sunday(self):
        assert weekday_index(date(2025, 1, 19)) == 0  # Sunday
        assert weekday_index(date(2025, 1, 15)) == 3  # Wednesday
        assert weekday_index(date(2025, 1, 18)) == 6  # Saturday

    def test_week_starts_on_monday(self):
        week = week_dates(date(2025, 1, 15))

        assert week[0] == date(2025, 1, 13)
        assert week[-1] == date(2025, 1, 19)
        assert len(week) == 7

    def test_sunday_closes_its_week(self):
        assert week_dates(date(2025, 1, 19))[0] == date(2025, 1, 13)

    def test_parse_date(self):
        assert parse_date("2025-02-01") == date(2025, 2, 1)
        assert parse_date(date(2025, 2, 1)) == date(2025, 2, 1)
        assert parse_date(datetime(2025, 2, 1, 23, 59)) == date(2025, 2, 1)

    def test_parse_date_rejects_garbage(self):
        with pytest.raises(ValueError, match="Invalid isoformat string"):
            parse_date("next tuesday")
