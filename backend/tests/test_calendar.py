"""
Tests for the month grid: cell layout, day states, and month navigation.
"""

from datetime import date

import pytest

from hall_booking.models.enums import DayState
from hall_booking.services.calendar_service import (
    GRID_CELLS,
    build_month_grid,
    classify_day,
    is_date_disabled,
    month_grid_dates,
    render_calendar,
    shift_month,
)

TODAY = date(2025, 3, 1)
BOOKED = [date(2025, 3, 10)]


def _states(days) -> dict:
    return {day.date: day.state for day in days}


def test_grid_always_has_six_weeks():
    for year, month in [(2025, 3), (2026, 2), (2024, 2), (2025, 12)]:
        assert len(month_grid_dates(year, month)) == GRID_CELLS == 42


def test_grid_starts_on_sunday_and_pads_with_neighbours():
    # 1 March 2025 is a Saturday
    dates = month_grid_dates(2025, 3)
    assert dates[0] == date(2025, 2, 23)
    assert dates[0].weekday() == 6
    assert dates[6] == date(2025, 3, 1)
    assert dates[-1] == date(2025, 4, 5)


def test_grid_for_four_week_month_is_padded_to_42():
    # February 2026 starts on a Sunday and fills exactly four rows
    dates = month_grid_dates(2026, 2)
    assert dates[0] == date(2026, 2, 1)
    assert dates[27] == date(2026, 2, 28)
    assert dates[-1] == date(2026, 3, 14)


def test_grid_dates_are_consecutive():
    dates = month_grid_dates(2025, 3)
    assert all((b - a).days == 1 for a, b in zip(dates, dates[1:]))


def test_past_and_booked_dates_are_disabled():
    states = _states(build_month_grid(BOOKED, TODAY, 2025, 3))
    assert states[date(2025, 2, 28)] == DayState.DISABLED
    assert states[date(2025, 3, 10)] == DayState.DISABLED
    assert states[date(2025, 3, 1)] == DayState.TODAY
    assert states[date(2025, 3, 11)] == DayState.NORMAL


def test_selected_date_is_marked():
    states = _states(build_month_grid(BOOKED, TODAY, 2025, 3, selected=date(2025, 3, 12)))
    assert states[date(2025, 3, 12)] == DayState.SELECTED


def test_disabled_wins_over_selected():
    states = _states(build_month_grid(BOOKED, TODAY, 2025, 3, selected=date(2025, 3, 10)))
    assert states[date(2025, 3, 10)] == DayState.DISABLED


def test_selected_wins_over_today():
    assert classify_day(TODAY, frozenset(), TODAY, selected=TODAY) == DayState.SELECTED


def test_booked_today_is_disabled():
    assert classify_day(TODAY, frozenset({TODAY}), TODAY) == DayState.DISABLED


def test_is_date_disabled():
    assert is_date_disabled(date(2025, 2, 1), [], TODAY)
    assert is_date_disabled(date(2025, 3, 10), BOOKED, TODAY)
    assert not is_date_disabled(TODAY, BOOKED, TODAY)
    assert not is_date_disabled(date(2025, 3, 11), BOOKED, TODAY)


def test_in_month_flags():
    days = build_month_grid([], TODAY, 2025, 3)
    in_month = [day.date for day in days if day.in_month]
    assert in_month[0] == date(2025, 3, 1)
    assert in_month[-1] == date(2025, 3, 31)
    assert len(in_month) == 31


def test_rendering_is_idempotent():
    first = render_calendar(1, True, BOOKED, TODAY, 2025, 3, date(2025, 3, 12))
    second = render_calendar(1, True, BOOKED, TODAY, 2025, 3, date(2025, 3, 12))
    assert first == second


def test_invalid_month_rejected():
    with pytest.raises(ValueError):
        build_month_grid([], TODAY, 2025, 13)


@pytest.mark.parametrize(
    "year,month,delta,expected",
    [
        (2025, 3, 1, (2025, 4)),
        (2025, 12, 1, (2026, 1)),
        (2025, 1, -1, (2024, 12)),
        (2025, 3, -15, (2023, 12)),
    ],
)
def test_shift_month(year, month, delta, expected):
    assert shift_month(year, month, delta) == expected


def test_render_calendar_links_neighbour_months():
    cal = render_calendar(7, False, [], TODAY, 2025, 1)
    assert cal.hall_id == 7
    assert cal.is_available is False
    assert (cal.previous.year, cal.previous.month) == (2024, 12)
    assert (cal.next.year, cal.next.month) == (2025, 2)
    # Navigating into the past is allowed; every day there is disabled
    assert all(day.state == DayState.DISABLED for day in cal.days)


def test_earliest_year_pads_into_previous_year():
    days = build_month_grid([], TODAY, 2, 1)
    assert len(days) == 42
    assert days[0].date.year == 1


@pytest.mark.parametrize("year", [1, 9999])
def test_years_without_neighbours_rejected(year):
    with pytest.raises(ValueError):
        build_month_grid([], TODAY, year, 1)
