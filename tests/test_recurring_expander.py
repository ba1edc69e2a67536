"""
Tests de la expansión de horarios recurrentes
"""
from datetime import date, time
from types import SimpleNamespace

from app.core.exceptions import CourtUnavailable, TimeSlotConflict
from app.enums.weekday import Weekday
from app.services import recurring_expander
from app.services.recurring_expander import (
    REASON_COURT_UNAVAILABLE,
    REASON_TIME_SLOT_CONFLICT,
    expand,
    occurrence_dates,
    resolve_horizon,
    schedule_occurrences,
)


def _schedule(**overrides):
    values = dict(
        id=1,
        days_of_week=["monday", "thursday"],
        start_time_of_day=time(18, 0),
        end_time_of_day=time(19, 30),
        effective_from=date(2026, 3, 9),
        effective_until=None,
        horizon_weeks=2,
        exceptions=[],
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_occurrence_dates_within_horizon():
    dates = occurrence_dates(date(2026, 3, 9), [Weekday.MONDAY, Weekday.THURSDAY], 2)

    assert dates == [
        date(2026, 3, 9),
        date(2026, 3, 12),
        date(2026, 3, 16),
        date(2026, 3, 19),
    ]


def test_occurrence_dates_skip_exceptions_and_stop_at_effective_until():
    dates = occurrence_dates(
        date(2026, 3, 9),
        ["monday"],
        10,
        effective_until=date(2026, 3, 30),
        exceptions=[date(2026, 3, 16)],
    )

    assert dates == [date(2026, 3, 9), date(2026, 3, 23), date(2026, 3, 30)]


def test_resolve_horizon_is_capped():
    """
    Test: Nunca se materializan más semanas que el horizonte configurado
    """
    assert resolve_horizon(None) == recurring_expander.RECURRING_HORIZON_WEEKS
    assert resolve_horizon(4) == 4
    assert (
        resolve_horizon(recurring_expander.RECURRING_HORIZON_WEEKS + 100)
        == recurring_expander.RECURRING_HORIZON_WEEKS
    )


def test_horizon_starts_today_when_schedule_began_in_the_past():
    schedule = _schedule(effective_from=date(2026, 1, 5), days_of_week=["monday"])

    assert schedule_occurrences(schedule, today=date(2026, 3, 9)) == [
        date(2026, 3, 9),
        date(2026, 3, 16),
    ]


def test_expand_is_not_all_or_nothing():
    """
    Test: Cada ocurrencia se acepta o rechaza por separado
    """
    schedule = _schedule()

    def accept(start, end):
        if start.date() == date(2026, 3, 12):
            raise CourtUnavailable("Court is not available on thursday")
        if start.date() == date(2026, 3, 16):
            raise TimeSlotConflict("Court is already booked")
        return (start, end)

    result = expand(schedule, accept, today=date(2026, 3, 2))

    assert [start.date() for start, _ in result.accepted] == [
        date(2026, 3, 9),
        date(2026, 3, 19),
    ]
    assert result.accepted[0][0].time() == time(18, 0)
    assert result.accepted[0][1].time() == time(19, 30)
    assert [(r.date, r.reason) for r in result.rejected] == [
        (date(2026, 3, 12), REASON_COURT_UNAVAILABLE),
        (date(2026, 3, 16), REASON_TIME_SLOT_CONFLICT),
    ]


def test_extension_continues_after_start_from():
    """
    Test: Al extender, las semanas nuevas empiezan después de las ya generadas
    """
    schedule = _schedule(days_of_week=["monday"], horizon_weeks=2)

    dates = schedule_occurrences(
        schedule,
        today=date(2026, 3, 2),
        start_from=date(2026, 3, 17),
        horizon_weeks=3,
    )

    assert dates == [date(2026, 3, 23), date(2026, 3, 30), date(2026, 4, 6)]
