"""
Tests for the campaign calendar: lookups, date arithmetic and validated
updates.
"""

import pytest

from hexkeeper.data_models import GameDate
from hexkeeper.weather.calendar import (
    Calendar,
    CalendarConfigUpdate,
    CalendarValidationError,
    DEFAULT_MONTHS,
    Month,
    MonthUpdate,
    Season,
)


class TestCalendarLookups:

    def test_default_calendar_has_365_days(self, default_calendar):
        assert default_calendar.months_per_year() == 12
        assert default_calendar.days_per_year() == 365

    def test_months_are_ordered(self, default_calendar):
        assert [m.number for m in default_calendar.months()] == list(range(1, 13))

    def test_format_date(self, default_calendar):
        assert default_calendar.format_date(22, 8, 22) == "22 Panagion, 22 P.I."

    def test_format_game_date(self, default_calendar):
        assert default_calendar.format_game_date(GameDate(23, 1, 1)) == "1 Nikarion, 23 P.I."

    def test_unknown_month_falls_back(self, default_calendar):
        assert default_calendar.month_name(13) == "???"
        assert default_calendar.days_in_month(13) == 30
        assert default_calendar.season(13) == Season.SUMMER
        assert default_calendar.get_month(13) is None

    def test_seasons(self, default_calendar):
        assert default_calendar.season(1) == Season.WINTER
        assert default_calendar.season(4) == Season.SPRING
        assert default_calendar.season(8) == Season.SUMMER
        assert default_calendar.season(10) == Season.FALL
        assert default_calendar.season(12) == Season.WINTER

    def test_empty_calendar_defaults(self):
        calendar = Calendar(months=[])
        assert calendar.months_per_year() == 12
        assert calendar.month_name(1) == "???"


class TestAdvanceDate:

    def test_zero_days_is_identity(self, default_calendar):
        assert default_calendar.advance_date(22, 8, 22, 0) == GameDate(22, 8, 22)

    def test_within_month(self, default_calendar):
        assert default_calendar.advance_date(22, 8, 22, 5) == GameDate(22, 8, 27)

    def test_last_day_of_month(self, default_calendar):
        assert default_calendar.advance_date(22, 8, 22, 9) == GameDate(22, 8, 31)
        assert default_calendar.advance_date(22, 8, 31, 1) == GameDate(22, 9, 1)

    def test_crosses_months_of_different_length(self, default_calendar):
        assert default_calendar.advance_date(22, 8, 22, 40) == GameDate(22, 10, 1)

    def test_full_year(self, default_calendar):
        assert default_calendar.advance_date(22, 1, 1, 365) == GameDate(23, 1, 1)

    def test_year_end_rollover(self, default_calendar):
        assert default_calendar.advance_date(22, 12, 31, 1) == GameDate(23, 1, 1)

    def test_short_month(self, default_calendar):
        assert default_calendar.advance_date(22, 2, 28, 1) == GameDate(22, 3, 1)

    def test_negative_delta_rejected(self, default_calendar):
        with pytest.raises(ValueError):
            default_calendar.advance_date(22, 8, 22, -1)


class TestCalendarUpdates:

    def test_replace_renumbers_in_order(self, default_calendar):
        default_calendar.replace([
            Month(7, "Thaw", Season.SPRING, 20),
            Month(3, "Blaze", "summer", 40),
        ])
        months = default_calendar.months()
        assert [(m.number, m.name, m.season, m.days) for m in months] == [
            (1, "Thaw", Season.SPRING, 20),
            (2, "Blaze", Season.SUMMER, 40),
        ]
        assert default_calendar.advance_date(1, 2, 40, 1) == GameDate(2, 1, 1)

    def test_replace_with_era(self, default_calendar):
        default_calendar.replace(
            [Month(1, "Only", Season.WINTER, 10)],
            CalendarConfigUpdate(era_name="AR"),
        )
        assert default_calendar.format_date(3, 1, 5) == "3 Only, 5 AR"

    def test_replace_is_atomic(self, default_calendar):
        with pytest.raises(CalendarValidationError) as exc_info:
            default_calendar.replace([
                Month(1, "Good", Season.WINTER, 30),
                Month(2, "Bad", Season.WINTER, 0),
            ])
        assert exc_info.value.field_name == "days"
        assert default_calendar.months() == list(DEFAULT_MONTHS)

    def test_replace_rejects_empty(self, default_calendar):
        with pytest.raises(CalendarValidationError) as exc_info:
            default_calendar.replace([])
        assert exc_info.value.field_name == "months"

    def test_replace_rejects_bad_season(self, default_calendar):
        with pytest.raises(CalendarValidationError) as exc_info:
            default_calendar.replace([Month(1, "Odd", "monsoon", 30)])
        assert exc_info.value.field_name == "season"

    def test_patch_month(self, default_calendar):
        patched = default_calendar.patch_month(8, MonthUpdate(name="Harvestmoon", days=30))
        assert patched.name == "Harvestmoon"
        assert patched.days == 30
        assert patched.season == Season.SUMMER
        assert default_calendar.days_in_month(8) == 30

    @pytest.mark.parametrize(
        "update,field_name",
        [
            (MonthUpdate(name="  "), "name"),
            (MonthUpdate(days=-3), "days"),
            (MonthUpdate(days=True), "days"),
            (MonthUpdate(season="monsoon"), "season"),
        ],
    )
    def test_patch_month_validation(self, default_calendar, update, field_name):
        with pytest.raises(CalendarValidationError) as exc_info:
            default_calendar.patch_month(8, update)
        assert exc_info.value.field_name == field_name
        assert default_calendar.get_month(8) == DEFAULT_MONTHS[7]

    def test_patch_unknown_month(self, default_calendar):
        with pytest.raises(CalendarValidationError):
            default_calendar.patch_month(13, MonthUpdate(days=30))

    def test_patch_empty_update(self, default_calendar):
        with pytest.raises(CalendarValidationError):
            default_calendar.patch_month(8, MonthUpdate())

    def test_update_config(self, default_calendar):
        default_calendar.update_config(CalendarConfigUpdate(era_name=" AR "))
        assert default_calendar.era_label() == "AR"

    def test_empty_era_is_kept(self, default_calendar):
        default_calendar.update_config(CalendarConfigUpdate(era_name=""))
        assert default_calendar.to_dict()["era_name"] == ""
        assert default_calendar.format_date(22, 8, 22) == "22 Panagion, 22 "
        assert Calendar.from_dict(default_calendar.to_dict()).era_label() == ""

    def test_update_config_rejects_empty(self, default_calendar):
        with pytest.raises(CalendarValidationError):
            default_calendar.update_config(CalendarConfigUpdate())

    def test_serialization(self, default_calendar):
        default_calendar.patch_month(2, MonthUpdate(days=29))
        restored = Calendar.from_dict(default_calendar.to_dict())
        assert restored.months() == default_calendar.months()
        assert restored.era_label() == "P.I."
