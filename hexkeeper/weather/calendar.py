"""
Campaign Calendar System.

A configurable ordered list of named months, each with a day count and a
season, plus an era label appended to formatted dates. Months may have
different lengths, so date arithmetic walks month by month instead of
using a fixed modulus.

Lookups are forgiving: unknown months fall back to documented defaults
("???", 30 days, summer) so partially configured calendars still format.
"""

from dataclasses import dataclass, field, replace as dataclass_replace
from enum import Enum
from typing import Any, Iterable, Optional, Union
import logging

from hexkeeper.data_models import GameDate


logger = logging.getLogger(__name__)


class Season(str, Enum):
    """The four seasons a month can belong to."""

    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"


UNKNOWN_MONTH_NAME = "???"
DEFAULT_DAYS_IN_MONTH = 30
DEFAULT_MONTHS_PER_YEAR = 12
DEFAULT_SEASON = Season.SUMMER
DEFAULT_ERA_NAME = "P.I."


class CalendarValidationError(ValueError):
    """Raised when a calendar update would leave the calendar invalid."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name


@dataclass(frozen=True)
class Month:
    """
    A month in the campaign calendar.

    Attributes:
        number: 1-based position in the year
        name: Month name (e.g., "Panagion")
        season: The season this month belongs to
        days: Number of days, always positive
    """

    number: int
    name: str
    season: Season
    days: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "name": self.name,
            "season": self.season.value,
            "days": self.days,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Month":
        return cls(
            number=int(data["number"]),
            name=data["name"],
            season=Season(data["season"]),
            days=int(data["days"]),
        )


@dataclass
class CalendarConfig:
    """Calendar-wide settings."""

    era_name: str = DEFAULT_ERA_NAME


@dataclass(frozen=True)
class MonthUpdate:
    """Partial update for a single month. None means "leave unchanged"."""

    name: Optional[str] = None
    season: Optional[Union[Season, str]] = None
    days: Optional[int] = None

    def is_empty(self) -> bool:
        return self.name is None and self.season is None and self.days is None


@dataclass(frozen=True)
class CalendarConfigUpdate:
    """Partial update for the calendar settings."""

    era_name: Optional[str] = None

    def is_empty(self) -> bool:
        return self.era_name is None


# Default year: twelve months across four seasons, 365 days
DEFAULT_MONTHS: tuple[Month, ...] = (
    Month(1, "Nikarion", Season.WINTER, 31),
    Month(2, "Katharion", Season.WINTER, 28),
    Month(3, "Photarion", Season.SPRING, 31),
    Month(4, "Thalassion", Season.SPRING, 30),
    Month(5, "Antheion", Season.SPRING, 31),
    Month(6, "Melission", Season.SUMMER, 30),
    Month(7, "Heliarion", Season.SUMMER, 31),
    Month(8, "Panagion", Season.SUMMER, 31),
    Month(9, "Ouranion", Season.FALL, 30),
    Month(10, "Hieratarion", Season.FALL, 31),
    Month(11, "Koimarion", Season.FALL, 30),
    Month(12, "Hesperion", Season.WINTER, 31),
)


def _validate_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise CalendarValidationError("Month name must be a non-empty string", "name")
    return value.strip()


def _validate_season(value: Any) -> Season:
    try:
        return Season(value)
    except ValueError:
        allowed = ", ".join(s.value for s in Season)
        raise CalendarValidationError(
            f"Invalid season {value!r}; expected one of: {allowed}", "season"
        ) from None


def _validate_days(value: Any) -> int:
    # bool is an int subclass but never a day count
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise CalendarValidationError("Month days must be a positive integer", "days")
    return value


def _validate_era_name(value: Any) -> str:
    if not isinstance(value, str):
        raise CalendarValidationError("Era name must be a string", "era_name")
    return value.strip()


class Calendar:
    """
    The campaign calendar: era label plus months ordered by number.

    All lookup and arithmetic methods are pure functions of the current
    months and config. Mutation goes through replace(), patch_month() and
    update_config(), each of which validates before changing anything.
    """

    def __init__(
        self,
        months: Optional[Iterable[Month]] = None,
        config: Optional[CalendarConfig] = None,
    ):
        self.config = config or CalendarConfig()
        self._months: dict[int, Month] = {}
        for month in DEFAULT_MONTHS if months is None else months:
            self._months[month.number] = month

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def months(self) -> list[Month]:
        """All months ordered by month number."""
        return [self._months[n] for n in sorted(self._months)]

    def get_month(self, month_number: int) -> Optional[Month]:
        return self._months.get(month_number)

    def month_name(self, month_number: int) -> str:
        month = self._months.get(month_number)
        return month.name if month else UNKNOWN_MONTH_NAME

    def days_in_month(self, month_number: int) -> int:
        month = self._months.get(month_number)
        return month.days if month else DEFAULT_DAYS_IN_MONTH

    def months_per_year(self) -> int:
        return len(self._months) or DEFAULT_MONTHS_PER_YEAR

    def era_label(self) -> str:
        return DEFAULT_ERA_NAME if self.config.era_name is None else self.config.era_name

    def season(self, month_number: int) -> Season:
        month = self._months.get(month_number)
        return month.season if month else DEFAULT_SEASON

    def format_date(self, day: int, month: int, year: int) -> str:
        """Render a date as "<day> <month name>, <year> <era>"."""
        return f"{day} {self.month_name(month)}, {year} {self.era_label()}"

    def format_game_date(self, date: GameDate) -> str:
        return self.format_date(date.day, date.month, date.year)

    def days_per_year(self) -> int:
        return sum(m.days for m in self._months.values())

    # -------------------------------------------------------------------------
    # Date arithmetic
    # -------------------------------------------------------------------------

    def advance_date(self, year: int, month: int, day: int, delta_days: int) -> GameDate:
        """
        Move a date forward by delta_days.

        Each month boundary re-reads that month's length, so a single call
        may cross several months or years of differing length.

        Raises:
            ValueError: If delta_days is negative
        """
        if delta_days < 0:
            raise ValueError(f"Cannot move the calendar backwards ({delta_days} days)")

        running_day = day + delta_days
        while running_day > self.days_in_month(month):
            running_day -= self.days_in_month(month)
            month += 1
            if month > self.months_per_year():
                month = 1
                year += 1

        return GameDate(year=year, month=month, day=running_day)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def replace(
        self,
        months: Iterable[Month],
        config_update: Optional[CalendarConfigUpdate] = None,
    ) -> None:
        """
        Replace every month at once, renumbering them 1..N in the order given.

        Nothing changes unless the whole replacement validates.

        Raises:
            CalendarValidationError: On an empty list or any invalid month
        """
        validated: list[Month] = []
        for index, month in enumerate(months, start=1):
            validated.append(
                Month(
                    number=index,
                    name=_validate_name(month.name),
                    season=_validate_season(month.season),
                    days=_validate_days(month.days),
                )
            )
        if not validated:
            raise CalendarValidationError("A calendar needs at least one month", "months")

        era_name = None
        if config_update is not None and config_update.era_name is not None:
            era_name = _validate_era_name(config_update.era_name)

        self._months = {m.number: m for m in validated}
        if era_name is not None:
            self.config.era_name = era_name
        logger.info(f"Calendar replaced: {len(validated)} months, {self.days_per_year()} days per year")

    def patch_month(self, month_number: int, update: MonthUpdate) -> Month:
        """
        Apply a partial update to one month.

        Raises:
            CalendarValidationError: If the month is unknown, the update is
                empty, or any supplied field is invalid
        """
        month = self._months.get(month_number)
        if month is None:
            raise CalendarValidationError(f"No month numbered {month_number}", "number")
        if update.is_empty():
            raise CalendarValidationError("Month update has no fields to change")

        changes: dict[str, Any] = {}
        if update.name is not None:
            changes["name"] = _validate_name(update.name)
        if update.season is not None:
            changes["season"] = _validate_season(update.season)
        if update.days is not None:
            changes["days"] = _validate_days(update.days)

        patched = dataclass_replace(month, **changes)
        self._months[month_number] = patched
        logger.info(f"Month {month_number} updated: {sorted(changes)}")
        return patched

    def update_config(self, update: CalendarConfigUpdate) -> CalendarConfig:
        """
        Raises:
            CalendarValidationError: If the update is empty or invalid
        """
        if update.is_empty():
            raise CalendarValidationError("Calendar config update has no fields to change")
        self.config.era_name = _validate_era_name(update.era_name)
        logger.info(f"Calendar era set to {self.config.era_name!r}")
        return self.config

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "era_name": self.config.era_name,
            "months": [m.to_dict() for m in self.months()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Calendar":
        months = [Month.from_dict(m) for m in data.get("months", [])]
        config = CalendarConfig(era_name=data.get("era_name", DEFAULT_ERA_NAME))
        return cls(months=months or None, config=config)
