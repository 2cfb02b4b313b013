"""
Calendar, weather and cold exposure.

Configurable campaign calendar, per-season weather tables and the
hypothermia rules that depend on them.
"""

from hexkeeper.weather.calendar import (
    Calendar,
    CalendarConfig,
    CalendarConfigUpdate,
    CalendarValidationError,
    Month,
    MonthUpdate,
    Season,
    DEFAULT_MONTHS,
)
from hexkeeper.weather.weather_types import (
    WeatherKind,
    AirKind,
    TemperatureBand,
    WeatherRow,
    WeatherReading,
    WEATHER_TABLES,
    direction_modifier,
    get_effect_description,
    get_weather_table,
    roll_weather,
)
from hexkeeper.weather.exposure import (
    ClimateZone,
    ColdGear,
    ExposureAssessment,
    DEFAULT_COLD_GEAR,
    adjust_temperature,
    assess_exposure,
)

__all__ = [
    # Calendar
    "Calendar",
    "CalendarConfig",
    "CalendarConfigUpdate",
    "CalendarValidationError",
    "Month",
    "MonthUpdate",
    "Season",
    "DEFAULT_MONTHS",
    # Weather
    "WeatherKind",
    "AirKind",
    "TemperatureBand",
    "WeatherRow",
    "WeatherReading",
    "WEATHER_TABLES",
    "direction_modifier",
    "get_effect_description",
    "get_weather_table",
    "roll_weather",
    # Exposure
    "ClimateZone",
    "ColdGear",
    "ExposureAssessment",
    "DEFAULT_COLD_GEAR",
    "adjust_temperature",
    "assess_exposure",
]
