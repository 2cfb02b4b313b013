"""
Hex-crawl travel: speed, clock advancement, and the terrain checks made
along the way.
"""

from hexkeeper.hex_crawl.travel_logic import (
    TravelSpeed,
    DirectionChance,
    HEX_SIZE_MILES,
    MAX_TRAVEL_HOURS,
    calculate_travel_speed,
    advance_time,
    is_forced_march,
    parse_direction_chance,
    is_lost,
    round_hundredths,
)
from hexkeeper.hex_crawl.terrain import (
    Terrain,
    EncounterEntry,
    EncounterTable,
    EncounterRoll,
    ProvisionActivity,
    ProvisionOutcome,
    ProvisionResult,
    WanderingMonsterCheck,
    STANDARD_TERRAINS,
    roll_on_encounter_table,
    resolve_provisioning,
    check_wandering_monster,
)

__all__ = [
    # Travel
    "TravelSpeed",
    "DirectionChance",
    "HEX_SIZE_MILES",
    "MAX_TRAVEL_HOURS",
    "calculate_travel_speed",
    "advance_time",
    "is_forced_march",
    "parse_direction_chance",
    "is_lost",
    "round_hundredths",
    # Terrain
    "Terrain",
    "EncounterEntry",
    "EncounterTable",
    "EncounterRoll",
    "ProvisionActivity",
    "ProvisionOutcome",
    "ProvisionResult",
    "WanderingMonsterCheck",
    "STANDARD_TERRAINS",
    "roll_on_encounter_table",
    "resolve_provisioning",
    "check_wandering_monster",
]
