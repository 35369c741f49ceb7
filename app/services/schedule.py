"""Chamber schedule arithmetic.

Pure functions over chamber mappings (rows or dicts with ``schedule_type``,
``week_days``, ``week_numbers``, ``start_time``, ``end_time``,
``slot_duration``, ``max_slots`` and ``fees``).
"""

import calendar
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from typing import Any

from app.schemas.chambers import ScheduleType, WeekDay, WeekNumber

MIN_SESSION_MINUTES = 30
WEEKS_PER_MONTH = 4

WEEKDAY_INDEX = {day.value: index for index, day in enumerate(WeekDay)}

WEEK_ORDINALS = {
    WeekNumber.FIRST.value: "1st",
    WeekNumber.SECOND.value: "2nd",
    WeekNumber.THIRD.value: "3rd",
    WeekNumber.FOURTH.value: "4th",
    WeekNumber.LAST.value: "Last",
}

SCHEDULE_TYPE_LABELS = {
    ScheduleType.WEEKLY_RECURRING.value: "Weekly Recurring",
    ScheduleType.MULTI_WEEKLY.value: "Multi-Weekly",
    ScheduleType.MONTHLY_SPECIFIC.value: "Monthly Specific",
}

_WEEKLY_TYPES = frozenset({ScheduleType.WEEKLY_RECURRING.value, ScheduleType.MULTI_WEEKLY.value})


def _value(item: Any) -> str:
    return item.value if hasattr(item, "value") else str(item)


def _values(items: Iterable[Any] | None) -> list[str]:
    return [_value(item) for item in items or []]


def _day_name(day: str) -> str:
    return day.capitalize()


def _join_and(parts: list[str]) -> str:
    if len(parts) <= 2:
        return " & ".join(parts)
    return f"{', '.join(parts[:-1])} & {parts[-1]}"


def is_weekly(schedule_type: Any) -> bool:
    return _value(schedule_type) in _WEEKLY_TYPES


def session_minutes(start_time: time, end_time: time) -> int:
    """Length of a session in whole minutes; negative when end precedes start."""
    start = datetime.combine(date.min, start_time)
    end = datetime.combine(date.min, end_time)
    return int((end - start).total_seconds() // 60)


def calculate_max_slots(start_time: time, end_time: time, slot_duration: int) -> int:
    """Number of whole slots that fit in the session window."""
    minutes = session_minutes(start_time, end_time)
    if minutes <= 0 or slot_duration <= 0:
        return 0
    return minutes // slot_duration


def validate_schedule(
    schedule_type: Any,
    week_days: Iterable[Any] | None,
    week_numbers: Iterable[Any] | None,
    start_time: time | None,
    end_time: time | None,
) -> list[str]:
    """
    Collect every problem with a proposed chamber schedule.

    Args:
        schedule_type: One of the ScheduleType values
        week_days: Days the chamber runs on
        week_numbers: Week occurrences, for monthly schedules
        start_time: Session start
        end_time: Session end

    Returns:
        Human readable error messages; empty when the schedule is valid
    """
    errors: list[str] = []
    days = _values(week_days)
    weeks = _values(week_numbers)
    kind = _value(schedule_type) if schedule_type else None

    if not kind:
        errors.append("Schedule type is required")

    if not days:
        errors.append("At least one week day is required")
    elif len(set(days)) != len(days):
        errors.append("Duplicate week days are not allowed")

    if kind == ScheduleType.WEEKLY_RECURRING.value and len(days) > 1:
        errors.append("Weekly recurring schedule can only have one day")

    if kind == ScheduleType.MONTHLY_SPECIFIC.value and not weeks:
        errors.append("Week numbers are required for monthly specific schedule")

    if start_time is None or end_time is None:
        errors.append("Start and end times are required")
    else:
        minutes = session_minutes(start_time, end_time)
        if minutes <= 0:
            errors.append("End time must be after start time")
        elif minutes < MIN_SESSION_MINUTES:
            errors.append(f"Chamber session must be at least {MIN_SESSION_MINUTES} minutes long")

    return errors


def times_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    """Half-open interval overlap; back-to-back sessions do not overlap."""
    return start1 < end2 and start2 < end1


def schedules_conflict(first: Mapping[str, Any], second: Mapping[str, Any]) -> bool:
    """
    Whether two chambers of the same doctor can be in session at once.

    They conflict when their times overlap on a shared week day and at
    least one of them runs every week, or both are monthly and share a
    week number.
    """
    if not times_overlap(
        first["start_time"], first["end_time"], second["start_time"], second["end_time"]
    ):
        return False

    if not set(_values(first["week_days"])) & set(_values(second["week_days"])):
        return False

    if is_weekly(first["schedule_type"]) or is_weekly(second["schedule_type"]):
        return True

    return bool(set(_values(first["week_numbers"])) & set(_values(second["week_numbers"])))


def find_conflicts(
    candidate: Mapping[str, Any],
    existing: Iterable[Mapping[str, Any]],
) -> list[Mapping[str, Any]]:
    return [chamber for chamber in existing if schedules_conflict(candidate, chamber)]


def format_time_range(start_time: time, end_time: time) -> str:
    return f"{start_time:%H:%M}-{end_time:%H:%M}"


def schedule_display(chamber: Mapping[str, Any]) -> str:
    """Describe a schedule, e.g. ``Every Monday & Thursday``."""
    days = [_day_name(day) for day in _values(chamber.get("week_days"))]
    if not days:
        return "Not configured"

    if is_weekly(chamber.get("schedule_type")):
        return f"Every {_join_and(days)}"

    weeks = [WEEK_ORDINALS[week] for week in _values(chamber.get("week_numbers"))]
    if weeks:
        return f"{' & '.join(weeks)} {' & '.join(days)} of every month"

    return "Not configured"


def schedule_type_display(chamber: Mapping[str, Any]) -> str:
    return SCHEDULE_TYPE_LABELS.get(_value(chamber.get("schedule_type")), "Unknown")


def sessions_per_month(chamber: Mapping[str, Any]) -> int:
    """Approximate number of sessions a chamber holds in a month."""
    day_count = len(_values(chamber.get("week_days")))
    if is_weekly(chamber.get("schedule_type")):
        return day_count * WEEKS_PER_MONTH
    week_count = len(_values(chamber.get("week_numbers")))
    return max(week_count * day_count, 1)


def monthly_revenue_estimate(chamber: Mapping[str, Any]) -> float:
    """Revenue if every slot of every session in a month is paid."""
    session_revenue = (chamber.get("max_slots") or 0) * float(chamber.get("fees") or 0)
    return session_revenue * sessions_per_month(chamber)


def nth_weekday_of_month(year: int, month: int, weekday: int, week_number: str) -> date | None:
    """
    Find the given occurrence of a weekday within a month.

    Args:
        year: Calendar year
        month: Calendar month (1-12)
        weekday: ``date.weekday()`` index, Monday is 0
        week_number: FIRST, SECOND, THIRD, FOURTH or LAST

    Returns:
        The date, or None if the month has no such occurrence
    """
    days_in_month = calendar.monthrange(year, month)[1]

    if week_number == WeekNumber.LAST.value:
        last = date(year, month, days_in_month)
        return last - timedelta(days=(last.weekday() - weekday) % 7)

    first = date(year, month, 1)
    first_occurrence = first + timedelta(days=(weekday - first.weekday()) % 7)
    offset = list(WEEK_ORDINALS).index(week_number)
    candidate = first_occurrence + timedelta(weeks=offset)
    return candidate if candidate.month == month else None


def _add_months(day: date, months: int) -> tuple[int, int]:
    index = day.year * 12 + (day.month - 1) + months
    return index // 12, index % 12 + 1


def next_session_dates(
    chamber: Mapping[str, Any],
    from_date: date,
    count: int = 5,
    months_ahead: int = 6,
) -> list[date]:
    """
    List the next session dates of a chamber, starting at ``from_date``.

    Args:
        chamber: Chamber mapping
        from_date: First date considered (inclusive)
        count: Maximum number of dates to return
        months_ahead: Search horizon for monthly schedules

    Returns:
        Ascending session dates
    """
    weekdays = {WEEKDAY_INDEX[day] for day in _values(chamber.get("week_days"))}
    if not weekdays or count <= 0:
        return []

    if is_weekly(chamber.get("schedule_type")):
        dates = []
        for offset in range(count * 7):
            day = from_date + timedelta(days=offset)
            if day.weekday() in weekdays:
                dates.append(day)
                if len(dates) == count:
                    break
        return dates

    found: set[date] = set()
    for month_offset in range(months_ahead):
        year, month = _add_months(from_date, month_offset)
        for week_number in _values(chamber.get("week_numbers")):
            for weekday in weekdays:
                day = nth_weekday_of_month(year, month, weekday, week_number)
                if day is not None and day >= from_date:
                    found.add(day)
    return sorted(found)[:count]


def doctor_chamber_summary(chambers: Iterable[Mapping[str, Any]]) -> str:
    """Summarize a doctor's sessions per day, e.g. ``Monday: 10:00-12:00``."""
    by_day: dict[str, list[str]] = {}
    for chamber in chambers:
        for day in _values(chamber.get("week_days")):
            by_day.setdefault(day, []).append(
                format_time_range(chamber["start_time"], chamber["end_time"])
            )

    if not by_day:
        return "No chambers"

    ordered = sorted(by_day, key=lambda day: WEEKDAY_INDEX.get(day, 7))
    return "; ".join(f"{_day_name(day)}: {', '.join(by_day[day])}" for day in ordered)
