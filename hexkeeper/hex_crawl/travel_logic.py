"""
Travel time for hex-crawl movement.

Converts a terrain's speed modifier and the party's movement rate into
hours per hex, then advances the campaign clock one hex at a time:

1. Base miles per day = movement rate (feet) / 5
2. Terrain modifier scales that: 0 is full speed, +0.5 is 50% faster,
   -1 is impassable
3. Hexes are 6 miles across and a travel day is 8 hours
4. Past 8 hours in a day the party is on a forced march
"""

from dataclasses import dataclass, replace
from typing import Any, Optional
import logging
import math

from hexkeeper.data_models import (
    CampaignClock,
    DEFAULT_MOVEMENT_RATE,
    parse_chance_notation,
)
from hexkeeper.weather.calendar import Calendar


logger = logging.getLogger(__name__)


HEX_SIZE_MILES = 6
MAX_TRAVEL_HOURS = 8
HOURS_PER_DAY = 24


def round_hundredths(value: float) -> float:
    """
    Round to 2 decimal places, halves away from zero.

    Infinity passes through unchanged.
    """
    if not math.isfinite(value):
        return value
    scaled = abs(value) * 100
    return math.copysign(math.floor(scaled + 0.5), value) / 100


@dataclass(frozen=True)
class TravelSpeed:
    """Travel speed through one terrain at one movement rate."""

    miles_per_day: float
    hexes_per_day: float
    hours_per_hex: float  # math.inf when the terrain cannot be crossed

    @property
    def is_passable(self) -> bool:
        return math.isfinite(self.hours_per_hex) and self.hours_per_hex > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "miles_per_day": self.miles_per_day,
            "hexes_per_day": self.hexes_per_day,
            "hours_per_hex": self.hours_per_hex,
        }


def calculate_travel_speed(
    speed_modifier: Optional[float],
    movement_rate: float = DEFAULT_MOVEMENT_RATE,
) -> TravelSpeed:
    """
    Calculate travel speed for a terrain.

    Args:
        speed_modifier: Terrain travel speed modifier; None counts as 0
        movement_rate: Party movement rate in feet

    Returns:
        TravelSpeed with every figure rounded to 2 decimals. hours_per_hex
        is derived from the unrounded hexes per day.
    """
    base_miles_per_day = movement_rate / 5
    effective_miles = base_miles_per_day * (1 + (speed_modifier or 0))
    hexes_per_day = effective_miles / HEX_SIZE_MILES
    hours_per_hex = MAX_TRAVEL_HOURS / hexes_per_day if hexes_per_day else math.inf

    return TravelSpeed(
        miles_per_day=round_hundredths(effective_miles),
        hexes_per_day=round_hundredths(hexes_per_day),
        hours_per_hex=round_hundredths(hours_per_hex),
    )


def advance_time(
    clock: CampaignClock,
    hours: float,
    calendar: Optional[Calendar] = None,
) -> CampaignClock:
    """
    Advance the clock by the time taken to cross one hex.

    Every call counts as entering exactly one hex. Crossing midnight resets
    today's counters to just this hex, so callers must advance per hex and
    never pass a whole multi-day journey in one call.

    Args:
        clock: Current clock; left untouched
        hours: Hours needed to cross the hex
        calendar: Calendar used for month lengths; defaults to the standard one

    Returns:
        New CampaignClock

    Raises:
        ValueError: If hours is negative or not finite
    """
    if not math.isfinite(hours) or hours < 0:
        raise ValueError(f"Cannot advance the clock by {hours} hours")

    new_hour = clock.hour + hours
    hours_today = clock.hours_traveled_today + hours
    hexes_today = clock.hexes_traveled_today + 1

    days_to_advance = 0
    while new_hour >= HOURS_PER_DAY:
        new_hour -= HOURS_PER_DAY
        days_to_advance += 1
        hours_today = hours
        hexes_today = 1

    year, month, day = clock.year, clock.month, clock.day
    if days_to_advance:
        date = (calendar or Calendar()).advance_date(year, month, day, days_to_advance)
        year, month, day = date.year, date.month, date.day
        logger.debug(f"Clock rolled over {days_to_advance} day(s) to {date}")

    return replace(
        clock,
        year=year,
        month=month,
        day=day,
        hour=round_hundredths(new_hour),
        hours_traveled_today=round_hundredths(hours_today),
        hexes_traveled_today=hexes_today,
    )


def is_forced_march(hours_traveled_today: float) -> bool:
    """True once today's travel exceeds the 8-hour budget."""
    return hours_traveled_today > MAX_TRAVEL_HOURS


@dataclass(frozen=True)
class DirectionChance:
    """A losing-direction chance with the weather adjustment applied."""

    base_target: int
    adjusted_target: int  # Not clamped; may exceed sides
    sides: int

    def to_dict(self) -> dict[str, int]:
        return {
            "base_target": self.base_target,
            "adjusted_target": self.adjusted_target,
            "sides": self.sides,
        }


def parse_direction_chance(
    chance: Optional[str],
    weather_modifier: int = 0,
) -> Optional[DirectionChance]:
    """
    Parse a "target:sides" losing-direction chance and add the weather modifier.

    Returns:
        DirectionChance, or None if the chance is missing or malformed
    """
    parsed = parse_chance_notation(chance)
    if parsed is None:
        return None
    base_target, sides = parsed
    return DirectionChance(
        base_target=base_target,
        adjusted_target=base_target + weather_modifier,
        sides=sides,
    )


def is_lost(roll: int, chance: DirectionChance) -> bool:
    return roll <= chance.adjusted_target
