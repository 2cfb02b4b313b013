"""
Terrain types and the daily checks made in them.

Each terrain carries chance strings for foraging, hunting, fishing, losing
direction and wandering monsters, plus an optional encounter table. The
functions here resolve those checks through the shared DiceRoller and
return plain result objects; recording them is the controller's job.

Chance strings follow "target:sides" notation. Foraging also accepts
"auto" (always succeeds), and an empty chance means the activity is not
possible in that terrain.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
import logging

from hexkeeper.data_models import (
    ChanceResult,
    DiceResult,
    DiceRoller,
    parse_chance_notation,
)
from hexkeeper.observability.run_log import get_run_log


logger = logging.getLogger(__name__)


AUTO_CHANCE = "auto"
DEFAULT_WANDERING_MONSTER_CHANCE = "1:6"
DEFAULT_ENCOUNTER_DISTANCE = "2d6 × 10"
DEFAULT_ENCOUNTER_DICE = "2d6"
NO_ENCOUNTER_DESCRIPTION = "No encounter (roll not on table)"


# =============================================================================
# ENCOUNTER TABLES
# =============================================================================


@dataclass(frozen=True)
class EncounterEntry:
    """A row on an encounter table covering roll_min..roll_max inclusive."""

    roll_min: int
    roll_max: int
    description: str
    number_appearing: Optional[str] = None  # Dice expression, e.g. "1d6"
    notes: Optional[str] = None

    def matches(self, roll: int) -> bool:
        return self.roll_min <= roll <= self.roll_max

    def to_dict(self) -> dict[str, Any]:
        return {
            "roll_min": self.roll_min,
            "roll_max": self.roll_max,
            "description": self.description,
            "number_appearing": self.number_appearing,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EncounterEntry":
        return cls(
            roll_min=int(data["roll_min"]),
            roll_max=int(data["roll_max"]),
            description=data["description"],
            number_appearing=data.get("number_appearing"),
            notes=data.get("notes"),
        )


@dataclass
class EncounterTable:
    """A terrain's wandering monster table."""

    name: str
    dice_expression: str = DEFAULT_ENCOUNTER_DICE
    entries: list[EncounterEntry] = field(default_factory=list)

    def find_entry(self, roll: int) -> Optional[EncounterEntry]:
        for entry in self.entries:
            if entry.matches(roll):
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dice_expression": self.dice_expression,
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EncounterTable":
        return cls(
            name=data["name"],
            dice_expression=data.get("dice_expression", DEFAULT_ENCOUNTER_DICE),
            entries=[EncounterEntry.from_dict(e) for e in data.get("entries", [])],
        )


@dataclass
class EncounterRoll:
    """The outcome of rolling on an encounter table."""

    table_name: str
    dice_result: DiceResult
    entry: Optional[EncounterEntry]  # None when the roll is not on the table
    number_appearing: Optional[DiceResult] = None

    @property
    def description(self) -> str:
        return self.entry.description if self.entry else NO_ENCOUNTER_DESCRIPTION

    def to_dict(self) -> dict[str, Any]:
        return {
            "table_name": self.table_name,
            "dice_result": self.dice_result.to_dict(),
            "entry": self.entry.to_dict() if self.entry else None,
            "description": self.description,
            "number_appearing": self.number_appearing.to_dict() if self.number_appearing else None,
        }


def roll_on_encounter_table(table: EncounterTable) -> Optional[EncounterRoll]:
    """
    Roll the table's dice and find the matching entry.

    Returns:
        EncounterRoll, or None if the table's dice expression is malformed
    """
    dice_result = DiceRoller.roll(table.dice_expression, f"encounter table ({table.name})")
    if dice_result is None:
        logger.warning(f"Encounter table {table.name!r} has invalid dice {table.dice_expression!r}")
        return None

    entry = table.find_entry(dice_result.total)
    number_appearing = None
    if entry and entry.number_appearing:
        number_appearing = DiceRoller.roll(entry.number_appearing, f"number appearing ({entry.description})")

    result = EncounterRoll(
        table_name=table.name,
        dice_result=dice_result,
        entry=entry,
        number_appearing=number_appearing,
    )
    get_run_log().log_table_lookup(
        table_id=f"encounter_{table.name.lower().replace(' ', '_')}",
        table_name=table.name,
        roll_total=dice_result.total,
        result_text=result.description,
    )
    return result


# =============================================================================
# TERRAIN
# =============================================================================


@dataclass
class Terrain:
    """A terrain type and its travel and survival properties."""

    id: str
    name: str
    description: str = ""
    travel_speed_modifier: float = 0.0
    travel_speed_notes: Optional[str] = None
    losing_direction_chance: Optional[str] = None
    foraging_chance: Optional[str] = None
    foraging_yield: Optional[str] = None
    foraging_notes: Optional[str] = None
    hunting_chance: Optional[str] = None
    hunting_yield: Optional[str] = None
    fishing_chance: Optional[str] = None
    fishing_yield: Optional[str] = None
    wandering_monster_chance: Optional[str] = DEFAULT_WANDERING_MONSTER_CHANCE
    encounter_distance: Optional[str] = DEFAULT_ENCOUNTER_DISTANCE
    special_rules: Optional[str] = None
    encounter_table: Optional[EncounterTable] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "travel_speed_modifier": self.travel_speed_modifier,
            "travel_speed_notes": self.travel_speed_notes,
            "losing_direction_chance": self.losing_direction_chance,
            "foraging_chance": self.foraging_chance,
            "foraging_yield": self.foraging_yield,
            "foraging_notes": self.foraging_notes,
            "hunting_chance": self.hunting_chance,
            "hunting_yield": self.hunting_yield,
            "fishing_chance": self.fishing_chance,
            "fishing_yield": self.fishing_yield,
            "wandering_monster_chance": self.wandering_monster_chance,
            "encounter_distance": self.encounter_distance,
            "special_rules": self.special_rules,
            "encounter_table": self.encounter_table.to_dict() if self.encounter_table else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Terrain":
        table_data = data.get("encounter_table")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            description=data.get("description", ""),
            travel_speed_modifier=data.get("travel_speed_modifier") or 0.0,
            travel_speed_notes=data.get("travel_speed_notes"),
            losing_direction_chance=data.get("losing_direction_chance"),
            foraging_chance=data.get("foraging_chance"),
            foraging_yield=data.get("foraging_yield"),
            foraging_notes=data.get("foraging_notes"),
            hunting_chance=data.get("hunting_chance"),
            hunting_yield=data.get("hunting_yield"),
            fishing_chance=data.get("fishing_chance"),
            fishing_yield=data.get("fishing_yield"),
            wandering_monster_chance=data.get("wandering_monster_chance", DEFAULT_WANDERING_MONSTER_CHANCE),
            encounter_distance=data.get("encounter_distance", DEFAULT_ENCOUNTER_DISTANCE),
            special_rules=data.get("special_rules"),
            encounter_table=EncounterTable.from_dict(table_data) if table_data else None,
        )


# Sample terrains for new campaigns
STANDARD_TERRAINS: tuple[Terrain, ...] = (
    Terrain(
        id="road",
        name="Road",
        description="Maintained road or well-travelled trade route",
        travel_speed_modifier=0.5,
        foraging_chance="1:6",
        foraging_yield="1d4",
        wandering_monster_chance="1:6",
    ),
    Terrain(
        id="farmland",
        name="Farmland",
        description="Cultivated fields and pasture",
        foraging_chance=AUTO_CHANCE,
        foraging_yield="1d6",
        foraging_notes="Taking crops may anger the locals.",
        hunting_chance="1:6",
        hunting_yield="1d4",
    ),
    Terrain(
        id="forest",
        name="Forest",
        description="Mixed woodland",
        travel_speed_modifier=-0.33,
        losing_direction_chance="2:6",
        foraging_chance="2:6",
        foraging_yield="1d6",
        hunting_chance="2:6",
        hunting_yield="1d8",
        fishing_chance="2:6",
        fishing_yield="1d6",
        wandering_monster_chance="2:6",
    ),
    Terrain(
        id="hills",
        name="Hills",
        description="Rolling hills and scrub",
        travel_speed_modifier=-0.25,
        losing_direction_chance="1:6",
        foraging_chance="1:6",
        foraging_yield="1d4",
        hunting_chance="2:6",
        hunting_yield="1d6",
        wandering_monster_chance="2:6",
    ),
    Terrain(
        id="swamp",
        name="Swamp",
        description="Bog, fen and marsh",
        travel_speed_modifier=-0.5,
        losing_direction_chance="3:6",
        foraging_chance="1:6",
        foraging_yield="1d4",
        fishing_chance="3:6",
        fishing_yield="1d6",
        wandering_monster_chance="3:6",
        encounter_distance="1d6 × 10",
    ),
    Terrain(
        id="mountains",
        name="Mountains",
        description="Steep slopes and high passes",
        travel_speed_modifier=-0.5,
        losing_direction_chance="2:6",
        hunting_chance="1:6",
        hunting_yield="1d4",
        wandering_monster_chance="3:6",
        encounter_distance="4d6 × 10",
    ),
)


# =============================================================================
# PROVISIONING (FORAGING, HUNTING, FISHING)
# =============================================================================


class ProvisionActivity(str, Enum):
    FORAGING = "foraging"
    HUNTING = "hunting"
    FISHING = "fishing"

    @property
    def found_verb(self) -> str:
        return "Found" if self is ProvisionActivity.FORAGING else "Caught"


class ProvisionOutcome(str, Enum):
    NOT_POSSIBLE = "not_possible"  # Terrain has no chance for this activity
    AUTO_SUCCESS = "auto_success"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class ProvisionResult:
    """The outcome of a foraging, hunting or fishing attempt."""

    activity: ProvisionActivity
    outcome: ProvisionOutcome
    chance: Optional[ChanceResult] = None  # None when no roll was made
    yield_roll: Optional[DiceResult] = None
    yield_expression: Optional[str] = None
    notes: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.outcome in (ProvisionOutcome.AUTO_SUCCESS, ProvisionOutcome.SUCCESS)

    @property
    def rations(self) -> int:
        return self.yield_roll.total if self.yield_roll else 0

    def describe(self) -> str:
        label = self.activity.value.capitalize()
        if self.outcome == ProvisionOutcome.NOT_POSSIBLE:
            return f"{label} is not possible in this terrain."
        if self.outcome == ProvisionOutcome.FAILURE:
            return (
                f"{label} failed (rolled {self.chance.roll}, needed "
                f"{self.chance.target} or less on d{self.chance.sides})."
            )

        headline = f"{label} automatic success!" if self.outcome == ProvisionOutcome.AUTO_SUCCESS else f"{label} successful!"
        if self.yield_roll:
            rolls = ", ".join(str(r) for r in self.yield_roll.rolls)
            text = f"{headline} {self.activity.found_verb} {self.rations} rations ({self.yield_expression}: [{rolls}])."
        else:
            text = headline
        if self.notes:
            text += f" Note: {self.notes}"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "activity": self.activity.value,
            "outcome": self.outcome.value,
            "success": self.success,
            "chance": self.chance.to_dict() if self.chance else None,
            "yield": self.yield_roll.to_dict() if self.yield_roll else None,
            "rations": self.rations,
        }


def resolve_provisioning(
    activity: ProvisionActivity,
    chance: Optional[str],
    yield_expression: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[ProvisionResult]:
    """
    Resolve a foraging, hunting or fishing attempt.

    Args:
        activity: Which activity is being attempted
        chance: "target:sides", "auto", or empty when not possible here
        yield_expression: Dice rolled for rations on success
        notes: Terrain notes appended to successful results

    Returns:
        ProvisionResult, or None if the chance string is malformed
    """
    if not chance:
        return ProvisionResult(activity=activity, outcome=ProvisionOutcome.NOT_POSSIBLE)

    if chance.strip().lower() == AUTO_CHANCE:
        yield_roll = DiceRoller.roll(yield_expression, f"{activity.value} yield") if yield_expression else None
        return ProvisionResult(
            activity=activity,
            outcome=ProvisionOutcome.AUTO_SUCCESS,
            yield_roll=yield_roll,
            yield_expression=yield_expression,
            notes=notes,
        )

    check = DiceRoller.roll_chance(chance, f"{activity.value} check")
    if check is None:
        logger.warning(f"Malformed {activity.value} chance: {chance!r}")
        return None

    if not check.success:
        return ProvisionResult(activity=activity, outcome=ProvisionOutcome.FAILURE, chance=check)

    yield_roll = DiceRoller.roll(yield_expression, f"{activity.value} yield") if yield_expression else None
    return ProvisionResult(
        activity=activity,
        outcome=ProvisionOutcome.SUCCESS,
        chance=check,
        yield_roll=yield_roll,
        yield_expression=yield_expression,
        notes=notes,
    )


# =============================================================================
# WANDERING MONSTERS
# =============================================================================


@dataclass
class WanderingMonsterCheck:
    """A wandering monster check and, if it fires, the encounter."""

    chance: ChanceResult
    encounter: Optional[EncounterRoll] = None
    distance: Optional[DiceResult] = None

    @property
    def encountered(self) -> bool:
        return self.chance.success

    def describe(self) -> str:
        if not self.encountered:
            return f"Manual wandering monster check: safe (rolled {self.chance.roll})."
        text = "Wandering monster!"
        if self.encounter:
            text += f" {self.encounter.description}"
            if self.encounter.number_appearing:
                text += f" ({self.encounter.number_appearing.total} appearing)"
        if self.distance:
            text += f" at {self.distance.total} yards"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "chance": self.chance.to_dict(),
            "encountered": self.encountered,
            "encounter": self.encounter.to_dict() if self.encounter else None,
            "distance": self.distance.to_dict() if self.distance else None,
        }


def check_wandering_monster(terrain: Terrain) -> Optional[WanderingMonsterCheck]:
    """
    Roll the terrain's wandering monster chance; on a hit, roll the
    encounter table and the encounter distance.

    Returns:
        WanderingMonsterCheck, or None if the chance is missing or malformed
    """
    chance = DiceRoller.roll_chance(terrain.wandering_monster_chance, f"wandering monsters ({terrain.name})")
    if chance is None:
        return None

    check = WanderingMonsterCheck(chance=chance)
    if chance.success:
        if terrain.encounter_table:
            check.encounter = roll_on_encounter_table(terrain.encounter_table)
        check.distance = DiceRoller.roll(terrain.encounter_distance, "encounter distance")
        logger.info(f"Wandering monster in {terrain.name}: {check.describe()}")
    return check


def is_valid_chance(chance: Optional[str], allow_auto: bool = False) -> bool:
    """Whether a stored chance string can be rolled (empty counts as valid)."""
    if not chance:
        return True
    if allow_auto and chance.strip().lower() == AUTO_CHANCE:
        return True
    return parse_chance_notation(chance) is not None
