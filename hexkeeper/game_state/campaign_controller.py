"""
Campaign Controller for Hexkeeper.

The application layer around the travel and chance engines. It owns the
single party's campaign state, the calendar, the terrain registry and the
session log, and turns each player action into engine calls:

1. Look up the terrain (explicit id, or the party's current terrain)
2. Validate anything that could make the action fail
3. Snapshot state for undo
4. Run the engine and store the new state
5. Append a session log entry

The engines stay stateless; everything mutable lives here.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional
import logging
import math

from hexkeeper.data_models import CampaignClock, DiceRoller, DEFAULT_START_HOUR
from hexkeeper.game_state.undo_history import UndoHistory, UndoSnapshot
from hexkeeper.hex_crawl.terrain import (
    ProvisionActivity,
    ProvisionOutcome,
    ProvisionResult,
    Terrain,
    WanderingMonsterCheck,
    check_wandering_monster,
    is_valid_chance,
    resolve_provisioning,
)
from hexkeeper.hex_crawl.travel_logic import (
    HOURS_PER_DAY,
    DirectionChance,
    TravelSpeed,
    advance_time,
    calculate_travel_speed,
    is_forced_march,
    is_lost,
    parse_direction_chance,
)
from hexkeeper.observability.run_log import get_run_log
from hexkeeper.weather.calendar import Calendar
from hexkeeper.weather.exposure import ClimateZone, ColdGear, ExposureAssessment, assess_exposure
from hexkeeper.weather.weather_types import WeatherReading, roll_weather


logger = logging.getLogger(__name__)


DEFAULT_LOG_LIMIT = 50


# =============================================================================
# ERRORS
# =============================================================================


class CampaignError(Exception):
    """Base class for campaign action failures."""

    pass


class TerrainNotFoundError(CampaignError):
    """Raised when no terrain is given or the id is unknown."""

    pass


class NothingToUndoError(CampaignError):
    pass


class ImpassableTerrainError(CampaignError):
    """Raised when a terrain's hours per hex is infinite."""

    pass


class InvalidChanceError(CampaignError):
    """Raised when a terrain stores a chance string that cannot be rolled."""

    pass


class InvalidUpdateError(CampaignError):
    """Raised when a state update fails validation."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name


# =============================================================================
# STATE AND LOG
# =============================================================================


class LogCategory(str, Enum):
    TRAVEL = "travel"
    ENCOUNTER = "encounter"
    FORAGING = "foraging"
    HUNTING = "hunting"
    FISHING = "fishing"
    NAVIGATION = "navigation"
    WEATHER = "weather"
    TIME = "time"


_PROVISION_CATEGORIES = {
    ProvisionActivity.FORAGING: LogCategory.FORAGING,
    ProvisionActivity.HUNTING: LogCategory.HUNTING,
    ProvisionActivity.FISHING: LogCategory.FISHING,
}


@dataclass(frozen=True)
class CampaignState:
    """Everything an undo restores."""

    clock: CampaignClock = field(default_factory=CampaignClock)
    current_hex_id: Optional[str] = None
    current_terrain_id: Optional[str] = None
    last_weather: Optional[WeatherReading] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "clock": self.clock.to_dict(),
            "current_hex_id": self.current_hex_id,
            "current_terrain_id": self.current_terrain_id,
            "last_weather": self.last_weather.to_dict() if self.last_weather else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CampaignState":
        weather = data.get("last_weather")
        return cls(
            clock=CampaignClock.from_dict(data.get("clock", {})),
            current_hex_id=data.get("current_hex_id"),
            current_terrain_id=data.get("current_terrain_id"),
            last_weather=WeatherReading.from_dict(weather) if weather else None,
        )


CLOCK_UPDATE_FIELDS = (
    "year",
    "month",
    "day",
    "hour",
    "hours_traveled_today",
    "hexes_traveled_today",
    "movement_rate",
)
STATE_UPDATE_FIELDS = ("current_hex_id", "current_terrain_id") + CLOCK_UPDATE_FIELDS


@dataclass(frozen=True)
class CampaignStateUpdate:
    """
    Explicit manual state update. None means "leave unchanged".

    Set clear_current_hex to forget the party's hex id.
    """

    current_hex_id: Optional[str] = None
    current_terrain_id: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    hour: Optional[float] = None
    hours_traveled_today: Optional[float] = None
    hexes_traveled_today: Optional[int] = None
    movement_rate: Optional[float] = None
    clear_current_hex: bool = False

    def changed_fields(self) -> dict[str, Any]:
        changes = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name in STATE_UPDATE_FIELDS and getattr(self, f.name) is not None
        }
        if self.clear_current_hex:
            changes["current_hex_id"] = None
        return changes


@dataclass
class SessionLogEntry:
    """One line of the player-facing session log."""

    id: int
    year: int
    month: int
    day: int
    hour: float
    category: LogCategory
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "hour": self.hour,
            "category": self.category.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionLogEntry":
        return cls(
            id=data["id"],
            year=data["year"],
            month=data["month"],
            day=data["day"],
            hour=data["hour"],
            category=LogCategory(data["category"]),
            message=data["message"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )

    def __str__(self) -> str:
        return f"[{self.year}/{self.month:02d}/{self.day:02d} {self.hour:05.2f}] {self.category.value}: {self.message}"


# =============================================================================
# ACTION RESULTS
# =============================================================================


@dataclass
class EnterHexResult:
    terrain: Terrain
    travel_speed: TravelSpeed
    hours_to_traverse: float
    clock: CampaignClock
    formatted_date: str
    forced_march: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "terrain": self.terrain.name,
            "travel_speed": self.travel_speed.to_dict(),
            "hours_to_traverse": self.hours_to_traverse,
            "time_advanced": {
                "year": self.clock.year,
                "month": self.clock.month,
                "day": self.clock.day,
                "hour": self.clock.hour,
                "formatted": self.formatted_date,
            },
            "forced_march": self.forced_march,
        }


@dataclass
class DirectionCheckResult:
    terrain_name: str
    lost: bool
    message: str
    roll: Optional[int] = None  # None when the terrain has no chance to lose direction
    chance: Optional[DirectionChance] = None
    weather_modifier: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "terrain": self.terrain_name,
            "lost": self.lost,
            "roll": self.roll,
            "chance": self.chance.to_dict() if self.chance else None,
            "weather_modifier": self.weather_modifier,
            "message": self.message,
        }


# =============================================================================
# CONTROLLER
# =============================================================================


class CampaignController:
    """
    Coordinates a single party's campaign.

    Every mutating action takes an undo snapshot after validation and
    before changing anything, so a failed action leaves no undo entry.
    """

    def __init__(
        self,
        calendar: Optional[Calendar] = None,
        terrains: Optional[Iterable[Terrain]] = None,
        state: Optional[CampaignState] = None,
        undo_history: Optional[UndoHistory] = None,
        log_entries: Optional[Iterable[SessionLogEntry]] = None,
    ):
        self.calendar = calendar or Calendar()
        self.state = state or CampaignState()
        self.undo_history = undo_history or UndoHistory()
        self._terrains: dict[str, Terrain] = {}
        for terrain in terrains or ():
            self.add_terrain(terrain)
        self._log: list[SessionLogEntry] = list(log_entries or ())
        self._last_log_id = max((e.id for e in self._log), default=0)
        logger.info(f"CampaignController initialized at {self.formatted_date}")

    # =========================================================================
    # TERRAIN REGISTRY
    # =========================================================================

    def add_terrain(self, terrain: Terrain) -> None:
        self._terrains[terrain.id] = terrain

    def get_terrain(self, terrain_id: str) -> Optional[Terrain]:
        return self._terrains.get(terrain_id)

    def terrains(self) -> list[Terrain]:
        return list(self._terrains.values())

    def _resolve_terrain(self, terrain_id: Optional[str]) -> Terrain:
        terrain_id = terrain_id or self.state.current_terrain_id
        if not terrain_id:
            raise TerrainNotFoundError("No terrain specified")
        terrain = self._terrains.get(terrain_id)
        if terrain is None:
            raise TerrainNotFoundError(f"Terrain not found: {terrain_id}")
        return terrain

    # =========================================================================
    # STATE QUERIES
    # =========================================================================

    @property
    def clock(self) -> CampaignClock:
        return self.state.clock

    @property
    def current_terrain(self) -> Optional[Terrain]:
        if not self.state.current_terrain_id:
            return None
        return self._terrains.get(self.state.current_terrain_id)

    @property
    def formatted_date(self) -> str:
        clock = self.state.clock
        return self.calendar.format_date(clock.day, clock.month, clock.year)

    def status(self) -> dict[str, Any]:
        """Current travel state, with speed through the current terrain if known."""
        clock = self.state.clock
        terrain = self.current_terrain
        speed = calculate_travel_speed(terrain.travel_speed_modifier, clock.movement_rate) if terrain else None
        return {
            "date": self.formatted_date,
            "season": self.calendar.season(clock.month).value,
            "hour": clock.hour,
            "hours_traveled_today": clock.hours_traveled_today,
            "hexes_traveled_today": clock.hexes_traveled_today,
            "forced_march": is_forced_march(clock.hours_traveled_today),
            "movement_rate": clock.movement_rate,
            "current_hex_id": self.state.current_hex_id,
            "terrain": terrain.name if terrain else None,
            "travel_speed": speed.to_dict() if speed else None,
            "weather": str(self.state.last_weather) if self.state.last_weather else None,
            "can_undo": self.can_undo(),
        }

    # =========================================================================
    # SESSION LOG
    # =========================================================================

    def _add_log(self, category: LogCategory, message: str) -> SessionLogEntry:
        clock = self.state.clock
        self._last_log_id += 1
        entry = SessionLogEntry(
            id=self._last_log_id,
            year=clock.year,
            month=clock.month,
            day=clock.day,
            hour=clock.hour,
            category=category,
            message=message,
        )
        self._log.append(entry)
        get_run_log().log_action(category.value, message)
        return entry

    def get_log(self, limit: int = DEFAULT_LOG_LIMIT) -> list[SessionLogEntry]:
        """The most recent log entries, oldest first."""
        if limit <= 0:
            return []
        return self._log[-limit:]

    def all_log_entries(self) -> list[SessionLogEntry]:
        return list(self._log)

    # =========================================================================
    # UNDO
    # =========================================================================

    def _snapshot(self) -> None:
        watermark = self._log[-1].id if self._log else 0
        self.undo_history.push(UndoSnapshot(state=self.state, log_watermark=watermark))

    def can_undo(self) -> bool:
        return self.undo_history.can_undo()

    def undo(self) -> CampaignState:
        """
        Restore the state from before the last action and drop its log entries.

        Raises:
            NothingToUndoError: If the history is empty
        """
        snapshot = self.undo_history.pop()
        if snapshot is None:
            raise NothingToUndoError("Nothing to undo")

        self.state = snapshot.state
        removed = [e for e in self._log if e.id > snapshot.log_watermark]
        self._log = [e for e in self._log if e.id <= snapshot.log_watermark]
        get_run_log().log_action("undo", f"Undid last action ({len(removed)} log entries removed)")
        logger.info(f"Undo: restored state at {self.formatted_date}")
        return self.state

    # =========================================================================
    # TRAVEL
    # =========================================================================

    def enter_hex(self, terrain_id: str, hex_id: Optional[str] = None) -> EnterHexResult:
        """
        Move the party into a hex of the given terrain.

        Raises:
            TerrainNotFoundError: If the terrain is unknown
            ImpassableTerrainError: If the terrain cannot be crossed
        """
        terrain = self._resolve_terrain(terrain_id)
        old_clock = self.state.clock
        speed = calculate_travel_speed(terrain.travel_speed_modifier, old_clock.movement_rate)
        if not speed.is_passable:
            raise ImpassableTerrainError(f"{terrain.name} cannot be traversed")

        hours = speed.hours_per_hex
        self._snapshot()
        new_clock = advance_time(old_clock, hours, self.calendar)
        self.state = replace(
            self.state,
            clock=new_clock,
            current_terrain_id=terrain.id,
            current_hex_id=hex_id or self.state.current_hex_id,
        )

        get_run_log().log_time_step(
            old_time=str(old_clock),
            new_time=str(new_clock),
            hours_advanced=hours,
            days_advanced=int((old_clock.hour + hours) // HOURS_PER_DAY),
            reason=f"entered {terrain.name}",
        )
        self._add_log(
            LogCategory.TRAVEL,
            f"Traversed hex {hex_id or '???'} ({terrain.name}). Travel time: {hours:.1f} hours.",
        )

        forced_march = is_forced_march(new_clock.hours_traveled_today)
        if forced_march:
            logger.info(f"Forced march: {new_clock.hours_traveled_today} hours traveled today")
        return EnterHexResult(
            terrain=terrain,
            travel_speed=speed,
            hours_to_traverse=hours,
            clock=new_clock,
            formatted_date=self.formatted_date,
            forced_march=forced_march,
        )

    def reset_day(self) -> CampaignState:
        """Start the next morning with today's travel counters cleared."""
        self._snapshot()
        clock = self.state.clock
        date = self.calendar.advance_date(clock.year, clock.month, clock.day, 1)
        new_clock = replace(
            clock,
            year=date.year,
            month=date.month,
            day=date.day,
            hour=DEFAULT_START_HOUR,
            hours_traveled_today=0.0,
            hexes_traveled_today=0,
        )
        self.state = replace(self.state, clock=new_clock)
        get_run_log().log_time_step(
            old_time=str(clock),
            new_time=str(new_clock),
            days_advanced=1,
            reason="new day",
        )
        self._add_log(LogCategory.TRAVEL, f"New day begins: {self.formatted_date}.")
        return self.state

    # =========================================================================
    # CHECKS
    # =========================================================================

    def wander_check(self, terrain_id: Optional[str] = None) -> Optional[WanderingMonsterCheck]:
        """
        Roll for wandering monsters in the given or current terrain.

        Returns:
            The check, or None when the terrain has no wandering monster chance

        Raises:
            InvalidChanceError: If the stored chance cannot be rolled
        """
        terrain = self._resolve_terrain(terrain_id)
        if not terrain.wandering_monster_chance:
            return None
        if not is_valid_chance(terrain.wandering_monster_chance):
            raise InvalidChanceError(
                f"Invalid wandering monster chance for {terrain.name}: {terrain.wandering_monster_chance!r}"
            )

        self._snapshot()
        check = check_wandering_monster(terrain)
        category = LogCategory.ENCOUNTER if check.encountered else LogCategory.TRAVEL
        self._add_log(category, check.describe())
        return check

    def forage(self, terrain_id: Optional[str] = None) -> ProvisionResult:
        terrain = self._resolve_terrain(terrain_id)
        return self._provision(
            terrain,
            ProvisionActivity.FORAGING,
            terrain.foraging_chance,
            terrain.foraging_yield,
            terrain.foraging_notes,
        )

    def hunt(self, terrain_id: Optional[str] = None) -> ProvisionResult:
        terrain = self._resolve_terrain(terrain_id)
        return self._provision(terrain, ProvisionActivity.HUNTING, terrain.hunting_chance, terrain.hunting_yield)

    def fish(self, terrain_id: Optional[str] = None) -> ProvisionResult:
        terrain = self._resolve_terrain(terrain_id)
        return self._provision(terrain, ProvisionActivity.FISHING, terrain.fishing_chance, terrain.fishing_yield)

    def _provision(
        self,
        terrain: Terrain,
        activity: ProvisionActivity,
        chance: Optional[str],
        yield_expression: Optional[str],
        notes: Optional[str] = None,
    ) -> ProvisionResult:
        if not is_valid_chance(chance, allow_auto=True):
            raise InvalidChanceError(f"Invalid {activity.value} chance for {terrain.name}: {chance!r}")
        if not chance:
            # Not possible here; nothing happened so nothing to undo or log
            return ProvisionResult(activity=activity, outcome=ProvisionOutcome.NOT_POSSIBLE)

        self._snapshot()
        result = resolve_provisioning(activity, chance, yield_expression, notes)
        self._add_log(_PROVISION_CATEGORIES[activity], result.describe())
        return result

    def direction_check(
        self,
        terrain_id: Optional[str] = None,
        weather_modifier: Optional[int] = None,
    ) -> DirectionCheckResult:
        """
        Check whether the party loses its way.

        Args:
            terrain_id: Terrain to check; defaults to the current terrain
            weather_modifier: Added to the target; defaults to the modifier
                of the last rolled weather

        Raises:
            InvalidChanceError: If the stored chance cannot be parsed
        """
        terrain = self._resolve_terrain(terrain_id)
        if weather_modifier is None:
            last_weather = self.state.last_weather
            weather_modifier = last_weather.direction_modifier if last_weather else 0

        if not terrain.losing_direction_chance:
            return DirectionCheckResult(
                terrain_name=terrain.name,
                lost=False,
                message="No chance of losing direction in this terrain.",
                weather_modifier=weather_modifier,
            )

        chance = parse_direction_chance(terrain.losing_direction_chance, weather_modifier)
        if chance is None:
            raise InvalidChanceError(
                f"Invalid losing direction chance for {terrain.name}: {terrain.losing_direction_chance!r}"
            )

        self._snapshot()
        roll = DiceRoller.roll_die(chance.sides, "losing direction")
        lost = is_lost(roll, chance)
        weather_note = f", weather +{weather_modifier}" if weather_modifier > 0 else ""
        detail = f"(rolled {roll}, needed {chance.adjusted_target} or less on d{chance.sides}{weather_note})"
        message = f"Lost direction! {detail}." if lost else f"Direction check passed {detail}."
        self._add_log(LogCategory.NAVIGATION, message)
        return DirectionCheckResult(
            terrain_name=terrain.name,
            lost=lost,
            message=message,
            roll=roll,
            chance=chance,
            weather_modifier=weather_modifier,
        )

    # =========================================================================
    # WEATHER
    # =========================================================================

    def roll_weather(self) -> WeatherReading:
        """Roll weather for the season of the current month."""
        clock = self.state.clock
        season = self.calendar.season(clock.month)
        self._snapshot()
        reading = roll_weather(season)
        self.state = replace(self.state, last_weather=reading)
        self._add_log(
            LogCategory.WEATHER,
            f"Weather: {reading.weather.value}, {reading.air.value}, Day: {reading.day_temp.value}, "
            f"Night: {reading.night_temp.value} ({season.value}, rolled {reading.roll}).",
        )
        return reading

    def assess_exposure(
        self,
        zone: ClimateZone = ClimateZone.BOREAL,
        gear: Optional[ColdGear] = None,
    ) -> Optional[ExposureAssessment]:
        """Hypothermia assessment for the last rolled weather, if any."""
        if self.state.last_weather is None:
            return None
        return assess_exposure(self.state.last_weather, zone, gear)

    # =========================================================================
    # MANUAL UPDATES
    # =========================================================================

    def set_state(
        self,
        update: CampaignStateUpdate,
        log_message: Optional[str] = None,
    ) -> CampaignState:
        """
        Apply a manual correction to the campaign state.

        Every supplied field is validated against the calendar before any
        change is made.

        Raises:
            InvalidUpdateError: If the update is empty or a field is invalid
        """
        if update.clear_current_hex and update.current_hex_id is not None:
            raise InvalidUpdateError("Cannot set and clear the hex id together", "current_hex_id")
        changes = update.changed_fields()
        if not changes:
            raise InvalidUpdateError("No valid fields to update")

        clock = self.state.clock
        year = changes.get("year", clock.year)
        month = changes.get("month", clock.month)
        day = changes.get("day", clock.day)

        if not _is_int(year) or year < 1:
            raise InvalidUpdateError(f"Invalid year: {year}", "year")
        if not _is_int(month) or not 1 <= month <= self.calendar.months_per_year():
            raise InvalidUpdateError(f"Invalid month: {month}", "month")
        if not _is_int(day) or not 1 <= day <= self.calendar.days_in_month(month):
            raise InvalidUpdateError(f"Invalid day {day} for {self.calendar.month_name(month)}", "day")
        if "hour" in changes and not (_is_number(update.hour) and 0 <= update.hour < 24):
            raise InvalidUpdateError(f"Invalid hour: {update.hour}", "hour")
        if "hours_traveled_today" in changes and not (
            _is_number(update.hours_traveled_today) and update.hours_traveled_today >= 0
        ):
            raise InvalidUpdateError(
                f"Invalid hours traveled today: {update.hours_traveled_today}", "hours_traveled_today"
            )
        if "hexes_traveled_today" in changes and not (
            _is_int(update.hexes_traveled_today) and update.hexes_traveled_today >= 0
        ):
            raise InvalidUpdateError(
                f"Invalid hexes traveled today: {update.hexes_traveled_today}", "hexes_traveled_today"
            )
        if "movement_rate" in changes and not (_is_number(update.movement_rate) and update.movement_rate > 0):
            raise InvalidUpdateError(f"Invalid movement rate: {update.movement_rate}", "movement_rate")
        if "current_terrain_id" in changes and update.current_terrain_id not in self._terrains:
            raise InvalidUpdateError(f"Unknown terrain: {update.current_terrain_id}", "current_terrain_id")

        clock_fields = {k: v for k, v in changes.items() if k in CLOCK_UPDATE_FIELDS}
        self._snapshot()
        self.state = replace(
            self.state,
            clock=replace(clock, **clock_fields),
            current_hex_id=changes.get("current_hex_id", self.state.current_hex_id),
            current_terrain_id=changes.get("current_terrain_id", self.state.current_terrain_id),
        )
        logger.info(f"Campaign state set: {sorted(changes)}")
        if log_message:
            self._add_log(LogCategory.TIME, log_message)
        return self.state


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
