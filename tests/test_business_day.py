from datetime import date, datetime, timezone

from safe_ledger.core.config import Settings
from safe_ledger.ledger.business_day import BusinessCalendar, Window


def test_default_day_is_midnight_to_midnight_utc():
    window = BusinessCalendar().day_window(date(2024, 1, 10))

    assert window == Window(datetime(2024, 1, 10), datetime(2024, 1, 11))
    assert window.contains(datetime(2024, 1, 10, 23, 59, 59))
    assert not window.contains(datetime(2024, 1, 11))


def test_cutoff_hour_moves_late_night_sales_to_previous_day():
    calendar = BusinessCalendar(cutoff_hour=3)

    assert calendar.business_date(datetime(2024, 1, 11, 2, 30)) == date(2024, 1, 10)
    assert calendar.business_date(datetime(2024, 1, 11, 3, 0)) == date(2024, 1, 11)
    assert calendar.day_window(date(2024, 1, 10)) == Window(datetime(2024, 1, 10, 3), datetime(2024, 1, 11, 3))


def test_local_timezone_is_converted_to_utc_bounds():
    calendar = BusinessCalendar("America/New_York", cutoff_hour=0)
    window = calendar.day_window(date(2024, 1, 10))

    assert window.start == datetime(2024, 1, 10, 5)
    assert window.end == datetime(2024, 1, 11, 5)
    assert calendar.business_date(datetime(2024, 1, 11, 3, tzinfo=timezone.utc)) == date(2024, 1, 10)


def test_range_window_includes_last_day():
    window = BusinessCalendar().range_window(date(2024, 1, 8), date(2024, 1, 14))

    assert window.start == datetime(2024, 1, 8)
    assert window.end == datetime(2024, 1, 15)


def test_bounded_window_allows_open_ends():
    calendar = BusinessCalendar()

    assert calendar.bounded_window(None, None) is None
    since = calendar.bounded_window(date(2024, 1, 8), None)
    assert since.start == datetime(2024, 1, 8)
    assert since.contains(datetime(2030, 1, 1))


def test_calendar_reads_settings():
    calendar = BusinessCalendar.from_settings(
        Settings(_env_file=None, business_timezone="Europe/Berlin", business_day_cutoff_hour=4)
    )

    assert calendar.cutoff_hour == 4
    assert calendar.day_window(date(2024, 1, 10)).start == datetime(2024, 1, 10, 3)
