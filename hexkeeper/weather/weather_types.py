"""
Weather Types and Tables.

One 12-row table per season. A 1d12 roll picks the row directly; each row
gives the weather, the air movement and the day and night temperature
bands. The rows are fixed data and are not derived from anything.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union
import logging

from hexkeeper.data_models import DiceRoller
from hexkeeper.observability.run_log import get_run_log
from hexkeeper.weather.calendar import Season


logger = logging.getLogger(__name__)


class WeatherKind(str, Enum):
    CLEAR = "Clear"
    CLOUDS = "Clouds"
    FOG = "Fog"
    RAIN = "Rain"
    SNOW = "Snow"
    STORM = "Storm"
    BLIZZARD = "Blizzard"


class AirKind(str, Enum):
    CALM = "Calm"
    BREEZE = "Breeze"
    WIND = "Wind"
    GALE = "Gale"


class TemperatureBand(str, Enum):
    """Temperature bands, declared mildest first."""

    MILD = "Mild"
    COLD = "Cold"
    VERY_COLD = "Very Cold"
    SEVERE = "Severe"
    EXTREME = "Extreme"


@dataclass(frozen=True)
class WeatherRow:
    """A single weather table row."""

    weather: WeatherKind
    air: AirKind
    day_temp: TemperatureBand
    night_temp: TemperatureBand


@dataclass
class WeatherReading:
    """The result of rolling on a season's weather table."""

    roll: int
    weather: WeatherKind
    air: AirKind
    day_temp: TemperatureBand
    night_temp: TemperatureBand
    season: Season

    @property
    def direction_modifier(self) -> int:
        """Bonus to the losing-direction target caused by this weather."""
        return direction_modifier(self.weather)

    @property
    def effects(self) -> list[str]:
        return get_effect_description(self.weather, self.air)

    def to_dict(self) -> dict[str, Any]:
        return {
            "roll": self.roll,
            "weather": self.weather.value,
            "air": self.air.value,
            "day_temp": self.day_temp.value,
            "night_temp": self.night_temp.value,
            "season": self.season.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeatherReading":
        return cls(
            roll=data["roll"],
            weather=WeatherKind(data["weather"]),
            air=AirKind(data["air"]),
            day_temp=TemperatureBand(data["day_temp"]),
            night_temp=TemperatureBand(data["night_temp"]),
            season=Season(data["season"]),
        )

    def __str__(self) -> str:
        return (
            f"{self.weather.value}, {self.air.value}, "
            f"Day: {self.day_temp.value}, Night: {self.night_temp.value}"
        )


# =============================================================================
# WEATHER TABLES
# =============================================================================

CLEAR, CLOUDS, FOG, RAIN, SNOW, STORM, BLIZZARD = (
    WeatherKind.CLEAR,
    WeatherKind.CLOUDS,
    WeatherKind.FOG,
    WeatherKind.RAIN,
    WeatherKind.SNOW,
    WeatherKind.STORM,
    WeatherKind.BLIZZARD,
)
CALM, BREEZE, WIND, GALE = AirKind.CALM, AirKind.BREEZE, AirKind.WIND, AirKind.GALE
MILD, COLD, VERY_COLD, SEVERE, EXTREME = (
    TemperatureBand.MILD,
    TemperatureBand.COLD,
    TemperatureBand.VERY_COLD,
    TemperatureBand.SEVERE,
    TemperatureBand.EXTREME,
)

# Row index = roll - 1
SUMMER_TABLE: tuple[WeatherRow, ...] = (
    WeatherRow(CLEAR, CALM, MILD, MILD),
    WeatherRow(CLEAR, CALM, MILD, MILD),
    WeatherRow(CLEAR, CALM, MILD, MILD),
    WeatherRow(CLEAR, BREEZE, MILD, MILD),
    WeatherRow(CLEAR, BREEZE, MILD, MILD),
    WeatherRow(CLOUDS, CALM, MILD, MILD),
    WeatherRow(CLOUDS, BREEZE, MILD, MILD),
    WeatherRow(CLOUDS, BREEZE, MILD, MILD),
    WeatherRow(FOG, CALM, MILD, MILD),
    WeatherRow(RAIN, CALM, MILD, MILD),
    WeatherRow(RAIN, BREEZE, MILD, MILD),
    WeatherRow(STORM, GALE, MILD, COLD),
)

FALL_TABLE: tuple[WeatherRow, ...] = (
    WeatherRow(CLEAR, CALM, MILD, MILD),
    WeatherRow(CLEAR, CALM, MILD, MILD),
    WeatherRow(CLEAR, CALM, MILD, MILD),
    WeatherRow(CLEAR, BREEZE, MILD, MILD),
    WeatherRow(CLEAR, WIND, MILD, COLD),
    WeatherRow(CLOUDS, CALM, MILD, COLD),
    WeatherRow(CLOUDS, BREEZE, MILD, COLD),
    WeatherRow(CLOUDS, WIND, MILD, COLD),
    WeatherRow(RAIN, CALM, COLD, COLD),
    WeatherRow(RAIN, BREEZE, COLD, COLD),
    WeatherRow(RAIN, WIND, COLD, COLD),
    WeatherRow(STORM, GALE, COLD, SEVERE),
)

WINTER_TABLE: tuple[WeatherRow, ...] = (
    WeatherRow(CLEAR, CALM, VERY_COLD, SEVERE),
    WeatherRow(CLEAR, CALM, VERY_COLD, SEVERE),
    WeatherRow(CLEAR, BREEZE, VERY_COLD, SEVERE),
    WeatherRow(CLEAR, BREEZE, VERY_COLD, SEVERE),
    WeatherRow(CLOUDS, CALM, VERY_COLD, SEVERE),
    WeatherRow(CLOUDS, CALM, VERY_COLD, SEVERE),
    WeatherRow(CLOUDS, BREEZE, VERY_COLD, SEVERE),
    WeatherRow(CLOUDS, WIND, VERY_COLD, SEVERE),
    WeatherRow(SNOW, CALM, COLD, VERY_COLD),
    WeatherRow(SNOW, BREEZE, COLD, VERY_COLD),
    WeatherRow(BLIZZARD, CALM, SEVERE, EXTREME),
    WeatherRow(BLIZZARD, GALE, SEVERE, EXTREME),
)

SPRING_TABLE: tuple[WeatherRow, ...] = (
    WeatherRow(CLEAR, CALM, COLD, VERY_COLD),
    WeatherRow(CLEAR, CALM, COLD, COLD),
    WeatherRow(CLEAR, CALM, COLD, COLD),
    WeatherRow(CLEAR, BREEZE, COLD, COLD),
    WeatherRow(CLEAR, BREEZE, MILD, COLD),
    WeatherRow(CLEAR, WIND, MILD, COLD),
    WeatherRow(FOG, CALM, MILD, COLD),
    WeatherRow(CLOUDS, CALM, MILD, COLD),
    WeatherRow(CLOUDS, BREEZE, MILD, MILD),
    WeatherRow(RAIN, CALM, MILD, MILD),
    WeatherRow(RAIN, WIND, MILD, MILD),
    WeatherRow(STORM, GALE, MILD, MILD),
)

WEATHER_TABLES: dict[Season, tuple[WeatherRow, ...]] = {
    Season.WINTER: WINTER_TABLE,
    Season.SPRING: SPRING_TABLE,
    Season.SUMMER: SUMMER_TABLE,
    Season.FALL: FALL_TABLE,
}

WEATHER_EFFECTS: dict[WeatherKind, str] = {
    WeatherKind.FOG: "Visibility reduced to encounter distance. Missiles –1. Losing direction +1 on d6.",
    WeatherKind.RAIN: "Visibility reduced to encounter distance. Travellers get wet.",
    WeatherKind.SNOW: "Visibility reduced to encounter distance.",
    WeatherKind.STORM: "Visibility ½ encounter distance. Losing direction +1 on d6. Travellers get wet.",
    WeatherKind.BLIZZARD: "Visibility ½ encounter distance. Losing direction +1 on d6.",
}

AIR_EFFECTS: dict[AirKind, str] = {
    AirKind.BREEZE: "Missiles –1 penalty.",
    AirKind.WIND: "Missiles –2 penalty.",
    AirKind.GALE: "Missiles –3 penalty. Cannot fire at long range.",
}

# Weather that makes the party more likely to lose its way
_DISORIENTING_WEATHER = frozenset({WeatherKind.FOG, WeatherKind.STORM, WeatherKind.BLIZZARD})


def direction_modifier(weather: Union[WeatherKind, str, None]) -> int:
    """+1 to the losing-direction target in fog, storms and blizzards."""
    return 1 if weather in _DISORIENTING_WEATHER else 0


def get_effect_description(
    weather: Union[WeatherKind, str],
    air: Union[AirKind, str, None] = None,
) -> list[str]:
    """
    Get human-readable descriptions of weather and air effects.

    Returns:
        List of effect descriptions; empty for clear, calm conditions
    """
    descriptions = []
    if weather in WEATHER_EFFECTS:
        descriptions.append(WEATHER_EFFECTS[WeatherKind(weather)])
    if air is not None and air in AIR_EFFECTS:
        descriptions.append(AIR_EFFECTS[AirKind(air)])
    return descriptions


def get_weather_table(season: Union[Season, str]) -> Optional[tuple[WeatherRow, ...]]:
    """Get the table for a season, or None for an unknown season."""
    try:
        return WEATHER_TABLES[Season(season)]
    except ValueError:
        return None


def roll_weather(season: Union[Season, str]) -> Optional[WeatherReading]:
    """
    Roll 1d12 on the weather table for the given season.

    Args:
        season: One of winter, spring, summer, fall

    Returns:
        WeatherReading, or None when the season is unknown
    """
    table = get_weather_table(season)
    if table is None:
        logger.warning(f"No weather table for season {season!r}")
        return None

    season = Season(season)
    dice_result = DiceRoller.roll("1d12", f"weather roll ({season.value})")
    row = table[dice_result.total - 1]
    reading = WeatherReading(
        roll=dice_result.total,
        weather=row.weather,
        air=row.air,
        day_temp=row.day_temp,
        night_temp=row.night_temp,
        season=season,
    )

    get_run_log().log_table_lookup(
        table_id=f"weather_{season.value}",
        table_name=f"{season.value.title()} Weather",
        roll_total=reading.roll,
        result_text=str(reading),
    )
    logger.debug(f"Weather rolled ({season.value}, {reading.roll}): {reading}")
    return reading
