from datetime import date, time
from decimal import Decimal

import pytest

from app.services import schedule


def weekly(days, start=time(10, 0), end=time(12, 0), schedule_type="MULTI_WEEKLY"):
    return {
        "schedule_type": schedule_type,
        "week_days": days,
        "week_numbers": [],
        "start_time": start,
        "end_time": end,
    }


def monthly(days, weeks, start=time(10, 0), end=time(12, 0)):
    return {
        "schedule_type": "MONTHLY_SPECIFIC",
        "week_days": days,
        "week_numbers": weeks,
        "start_time": start,
        "end_time": end,
    }


class TestValidateSchedule:
    """Tests for schedule validation."""

    def test_valid_weekly(self):
        errors = schedule.validate_schedule(
            "WEEKLY_RECURRING", ["MONDAY"], [], time(10, 0), time(12, 0)
        )
        assert errors == []

    def test_missing_type(self):
        errors = schedule.validate_schedule(None, ["MONDAY"], [], time(10, 0), time(12, 0))
        assert errors == ["Schedule type is required"]

    def test_no_days(self):
        errors = schedule.validate_schedule("MULTI_WEEKLY", [], [], time(10, 0), time(12, 0))
        assert errors == ["At least one week day is required"]

    def test_duplicate_days(self):
        errors = schedule.validate_schedule(
            "MULTI_WEEKLY", ["MONDAY", "MONDAY"], [], time(10, 0), time(12, 0)
        )
        assert errors == ["Duplicate week days are not allowed"]

    def test_weekly_recurring_single_day(self):
        errors = schedule.validate_schedule(
            "WEEKLY_RECURRING", ["MONDAY", "FRIDAY"], [], time(10, 0), time(12, 0)
        )
        assert errors == ["Weekly recurring schedule can only have one day"]

    def test_monthly_requires_weeks(self):
        errors = schedule.validate_schedule(
            "MONTHLY_SPECIFIC", ["FRIDAY"], [], time(10, 0), time(12, 0)
        )
        assert errors == ["Week numbers are required for monthly specific schedule"]

    def test_missing_times(self):
        errors = schedule.validate_schedule("MULTI_WEEKLY", ["MONDAY"], [], None, time(12, 0))
        assert errors == ["Start and end times are required"]

    @pytest.mark.parametrize("end", [time(10, 0), time(9, 0)])
    def test_end_before_start(self, end):
        errors = schedule.validate_schedule("MULTI_WEEKLY", ["MONDAY"], [], time(10, 0), end)
        assert errors == ["End time must be after start time"]

    def test_short_session(self):
        errors = schedule.validate_schedule(
            "MULTI_WEEKLY", ["MONDAY"], [], time(10, 0), time(10, 29)
        )
        assert errors == ["Chamber session must be at least 30 minutes long"]

    def test_thirty_minutes_is_enough(self):
        errors = schedule.validate_schedule(
            "MULTI_WEEKLY", ["MONDAY"], [], time(10, 0), time(10, 30)
        )
        assert errors == []

    def test_collects_every_error(self):
        errors = schedule.validate_schedule("MONTHLY_SPECIFIC", [], [], time(12, 0), time(11, 0))
        assert errors == [
            "At least one week day is required",
            "Week numbers are required for monthly specific schedule",
            "End time must be after start time",
        ]


class TestSlots:
    """Tests for slot arithmetic."""

    def test_calculate_max_slots(self):
        assert schedule.calculate_max_slots(time(10, 0), time(12, 0), 15) == 8
        assert schedule.calculate_max_slots(time(10, 0), time(12, 0), 25) == 4

    def test_calculate_max_slots_invalid(self):
        assert schedule.calculate_max_slots(time(12, 0), time(10, 0), 15) == 0
        assert schedule.calculate_max_slots(time(10, 0), time(12, 0), 0) == 0

    def test_format_time_range(self):
        assert schedule.format_time_range(time(9, 5), time(17, 30)) == "09:05-17:30"


class TestConflicts:
    """Tests for detecting overlapping chambers of one doctor."""

    def test_times_overlap_is_half_open(self):
        assert schedule.times_overlap(time(10, 0), time(12, 0), time(11, 0), time(13, 0))
        assert not schedule.times_overlap(time(10, 0), time(12, 0), time(12, 0), time(14, 0))

    def test_weekly_same_day_overlap(self):
        assert schedule.schedules_conflict(weekly(["MONDAY"]), weekly(["MONDAY", "FRIDAY"]))

    def test_weekly_different_days(self):
        assert not schedule.schedules_conflict(weekly(["MONDAY"]), weekly(["TUESDAY"]))

    def test_weekly_back_to_back(self):
        later = weekly(["MONDAY"], start=time(12, 0), end=time(13, 0))
        assert not schedule.schedules_conflict(weekly(["MONDAY"]), later)

    def test_monthly_shared_week(self):
        first = monthly(["FRIDAY"], ["FIRST", "THIRD"])
        second = monthly(["FRIDAY"], ["THIRD"])
        assert schedule.schedules_conflict(first, second)

    def test_monthly_disjoint_weeks(self):
        first = monthly(["FRIDAY"], ["FIRST", "THIRD"])
        second = monthly(["FRIDAY"], ["SECOND", "FOURTH"])
        assert not schedule.schedules_conflict(first, second)

    def test_weekly_against_monthly(self):
        assert schedule.schedules_conflict(weekly(["FRIDAY"]), monthly(["FRIDAY"], ["LAST"]))

    def test_find_conflicts(self):
        existing = [weekly(["MONDAY"]), weekly(["TUESDAY"])]
        conflicts = schedule.find_conflicts(weekly(["TUESDAY"]), existing)
        assert conflicts == [existing[1]]


class TestDisplay:
    """Tests for human readable schedule descriptions."""

    def test_single_day(self):
        assert schedule.schedule_display(weekly(["MONDAY"])) == "Every Monday"

    def test_two_days(self):
        assert schedule.schedule_display(weekly(["MONDAY", "THURSDAY"])) == "Every Monday & Thursday"

    def test_three_days(self):
        chamber = weekly(["MONDAY", "WEDNESDAY", "FRIDAY"])
        assert schedule.schedule_display(chamber) == "Every Monday, Wednesday & Friday"

    def test_monthly(self):
        chamber = monthly(["FRIDAY"], ["FIRST", "THIRD"])
        assert schedule.schedule_display(chamber) == "1st & 3rd Friday of every month"

    def test_monthly_last(self):
        chamber = monthly(["SUNDAY"], ["LAST"])
        assert schedule.schedule_display(chamber) == "Last Sunday of every month"

    def test_not_configured(self):
        assert schedule.schedule_display(weekly([])) == "Not configured"
        assert schedule.schedule_display(monthly(["FRIDAY"], [])) == "Not configured"

    def test_schedule_type_display(self):
        assert schedule.schedule_type_display({"schedule_type": "MULTI_WEEKLY"}) == "Multi-Weekly"
        assert schedule.schedule_type_display({"schedule_type": "BIWEEKLY"}) == "Unknown"

    def test_doctor_chamber_summary(self):
        chambers = [
            weekly(["THURSDAY"], start=time(17, 0), end=time(19, 0)),
            weekly(["MONDAY"]),
        ]
        assert schedule.doctor_chamber_summary(chambers) == (
            "Monday: 10:00-12:00; Thursday: 17:00-19:00"
        )

    def test_doctor_without_chambers(self):
        assert schedule.doctor_chamber_summary([]) == "No chambers"


class TestRevenue:
    """Tests for monthly session and revenue estimates."""

    def test_weekly_sessions(self):
        assert schedule.sessions_per_month(weekly(["MONDAY", "THURSDAY"])) == 8

    def test_monthly_sessions(self):
        assert schedule.sessions_per_month(monthly(["FRIDAY"], ["FIRST", "THIRD"])) == 2

    def test_monthly_sessions_never_zero(self):
        assert schedule.sessions_per_month(monthly(["FRIDAY"], [])) == 1

    def test_revenue_estimate(self):
        chamber = {**weekly(["MONDAY"]), "max_slots": 8, "fees": Decimal("500.00")}
        assert schedule.monthly_revenue_estimate(chamber) == 16000.0


class TestSessionDates:
    """Tests for calendar projection of chamber sessions."""

    def test_nth_weekday(self):
        # January 2024 starts on a Monday
        assert schedule.nth_weekday_of_month(2024, 1, 4, "FIRST") == date(2024, 1, 5)
        assert schedule.nth_weekday_of_month(2024, 1, 4, "THIRD") == date(2024, 1, 19)
        assert schedule.nth_weekday_of_month(2024, 1, 4, "LAST") == date(2024, 1, 26)
        assert schedule.nth_weekday_of_month(2024, 1, 0, "FIRST") == date(2024, 1, 1)

    def test_last_weekday_on_month_end(self):
        assert schedule.nth_weekday_of_month(2024, 3, 6, "LAST") == date(2024, 3, 31)

    def test_weekly_dates_include_start(self):
        dates = schedule.next_session_dates(weekly(["MONDAY", "THURSDAY"]), date(2024, 1, 1), 3)
        assert dates == [date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 8)]

    def test_monthly_dates(self):
        chamber = monthly(["FRIDAY"], ["FIRST", "THIRD"])
        dates = schedule.next_session_dates(chamber, date(2024, 1, 10), 5)
        assert dates == [
            date(2024, 1, 19),
            date(2024, 2, 2),
            date(2024, 2, 16),
            date(2024, 3, 1),
            date(2024, 3, 15),
        ]

    def test_monthly_dates_cross_year(self):
        chamber = monthly(["MONDAY"], ["FIRST"])
        dates = schedule.next_session_dates(chamber, date(2023, 12, 5), 2)
        assert dates == [date(2024, 1, 1), date(2024, 2, 5)]

    def test_no_days(self):
        assert schedule.next_session_dates(weekly([]), date(2024, 1, 1)) == []
