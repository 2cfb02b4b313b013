"""
Cold exposure and hypothermia.

Weather tables give a base temperature band. The climate zone shifts that
band harsher to give the actual temperature. Cold gear shifts it back
milder for the purpose of hypothermia only, and wet clothing negates gear
entirely and makes things worse.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from hexkeeper.weather.weather_types import TemperatureBand, WeatherReading


# Mildest first; shifting by +1 moves one step harsher
TEMPERATURE_SCALE: tuple[TemperatureBand, ...] = tuple(TemperatureBand)


@dataclass(frozen=True)
class TemperatureInfo:
    band: TemperatureBand
    range_label: str
    hypothermia_frequency: Optional[str]  # None: no save needed

    @property
    def causes_hypothermia(self) -> bool:
        return self.hypothermia_frequency is not None


TEMPERATURE_INFO: dict[TemperatureBand, TemperatureInfo] = {
    TemperatureBand.MILD: TemperatureInfo(TemperatureBand.MILD, "33–65°F", None),
    TemperatureBand.COLD: TemperatureInfo(TemperatureBand.COLD, "15–32°F", "1/day"),
    TemperatureBand.VERY_COLD: TemperatureInfo(TemperatureBand.VERY_COLD, "0–14°F", "1/hour"),
    TemperatureBand.SEVERE: TemperatureInfo(TemperatureBand.SEVERE, "–15 to –1°F", "1/turn"),
    TemperatureBand.EXTREME: TemperatureInfo(TemperatureBand.EXTREME, "–16°F or colder", "1/minute"),
}


class ClimateZone(str, Enum):
    """Climate zones, each colder than the last."""

    BOREAL = "boreal"
    TUNDRA = "tundra"
    POLAR = "polar"

    @property
    def label(self) -> str:
        return self.value.title()

    @property
    def temperature_shift(self) -> int:
        return _CLIMATE_SHIFTS[self][0]

    @property
    def save_modifier(self) -> int:
        """Modifier applied to hypothermia saves in this zone."""
        return _CLIMATE_SHIFTS[self][1]


_CLIMATE_SHIFTS: dict[ClimateZone, tuple[int, int]] = {
    ClimateZone.BOREAL: (0, 0),
    ClimateZone.TUNDRA: (1, -2),
    ClimateZone.POLAR: (2, -4),
}


@dataclass(frozen=True)
class ColdGear:
    """
    Clothing worn against the cold.

    temp_shift is how many bands milder the wearer experiences; negative
    values make things worse. negates_gear marks conditions such as being
    wet that cancel any protective clothing.
    """

    name: str
    temp_shift: int = 0
    negates_gear: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "temp_shift": self.temp_shift, "negates_gear": self.negates_gear}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ColdGear":
        return cls(
            name=data["name"],
            temp_shift=int(data.get("temp_shift", 0)),
            negates_gear=bool(data.get("negates_gear", False)),
        )


NO_COLD_GEAR = ColdGear("No cold gear", 0)
DEFAULT_COLD_GEAR: tuple[ColdGear, ...] = (
    NO_COLD_GEAR,
    ColdGear("Light cold gear", 1),
    ColdGear("Heavy cold gear", 2),
    ColdGear("Wet", -1, negates_gear=True),
)


def adjust_temperature(band: Union[TemperatureBand, str], shift: int) -> TemperatureBand:
    """Move a band along the scale, stopping at Mild and Extreme."""
    index = TEMPERATURE_SCALE.index(TemperatureBand(band))
    index = max(0, min(index + shift, len(TEMPERATURE_SCALE) - 1))
    return TEMPERATURE_SCALE[index]


@dataclass
class ExposureAssessment:
    """Temperatures a party actually faces, and what they must save against."""

    zone: ClimateZone
    gear: ColdGear
    actual_day: TemperatureBand
    actual_night: TemperatureBand
    effective_day: TemperatureBand
    effective_night: TemperatureBand

    @property
    def worst_effective(self) -> TemperatureBand:
        return max(
            self.effective_day,
            self.effective_night,
            key=TEMPERATURE_SCALE.index,
        )

    @property
    def hypothermia_frequency(self) -> Optional[str]:
        return TEMPERATURE_INFO[self.worst_effective].hypothermia_frequency

    @property
    def at_risk(self) -> bool:
        return TEMPERATURE_INFO[self.worst_effective].causes_hypothermia

    @property
    def save_modifier(self) -> int:
        return self.zone.save_modifier

    def describe(self) -> str:
        if not self.at_risk:
            return "No hypothermia risk."
        if self.effective_day == self.effective_night:
            temps = self.effective_day.value
        else:
            temps = f"{self.effective_day.value} (day) / {self.effective_night.value} (night)"
        text = f"Hypothermia: effective temp {temps}"
        if self.gear.negates_gear:
            text += f", {self.gear.name}, cold gear negated"
        elif self.gear.temp_shift:
            text += f", {self.gear.name}"
        text += f". Save vs. paralysis {self.hypothermia_frequency}"
        if self.save_modifier:
            text += f" ({self.save_modifier} to save, {self.zone.label})"
        return text + ". Failure advances one stage."

    def to_dict(self) -> dict[str, Any]:
        return {
            "zone": self.zone.value,
            "gear": self.gear.to_dict(),
            "actual_day": self.actual_day.value,
            "actual_night": self.actual_night.value,
            "effective_day": self.effective_day.value,
            "effective_night": self.effective_night.value,
            "worst_effective": self.worst_effective.value,
            "hypothermia_frequency": self.hypothermia_frequency,
            "save_modifier": self.save_modifier,
        }


def assess_exposure(
    reading: WeatherReading,
    zone: Union[ClimateZone, str] = ClimateZone.BOREAL,
    gear: Optional[ColdGear] = None,
) -> ExposureAssessment:
    """
    Work out actual and effective temperatures for a weather reading.

    Args:
        reading: Rolled weather
        zone: Climate zone; shifts both bands harsher
        gear: Cold gear worn; defaults to none

    Returns:
        ExposureAssessment with the worst effective band and save details
    """
    zone = ClimateZone(zone)
    gear = gear or NO_COLD_GEAR

    actual_day = adjust_temperature(reading.day_temp, zone.temperature_shift)
    actual_night = adjust_temperature(reading.night_temp, zone.temperature_shift)
    return ExposureAssessment(
        zone=zone,
        gear=gear,
        actual_day=actual_day,
        actual_night=actual_night,
        effective_day=adjust_temperature(actual_day, -gear.temp_shift),
        effective_night=adjust_temperature(actual_night, -gear.temp_shift),
    )
