"""
Run log for campaign event tracking.

Every dice draw, table lookup, clock advancement and campaign action is
appended here in sequence, stamped with the campaign time at which it
happened. The CLI's audit command reads it back.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    ROLL = "roll"
    TABLE_LOOKUP = "table_lookup"
    TIME_STEP = "time_step"
    ACTION = "action"


@dataclass
class LogEvent:
    """Base class for all logged events."""

    sequence_number: int = 0
    game_time: Optional[str] = None  # str(CampaignClock) when the event was logged

    # Set by each subclass
    event_type = EventType.ACTION

    def describe(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        when = f" @ {self.game_time}" if self.game_time else ""
        return f"[{self.sequence_number}]{when} {self.describe()}"


@dataclass
class RollEvent(LogEvent):
    """A dice or chance draw."""

    notation: str = ""  # "2d6", "4d6 × 10", "1d6"
    rolls: list[int] = field(default_factory=list)
    modifier: int = 0
    total: int = 0
    reason: str = ""

    event_type = EventType.ROLL

    def describe(self) -> str:
        reason = f" ({self.reason})" if self.reason else ""
        return f"ROLL {self.notation}: {self.rolls} = {self.total}{reason}"


@dataclass
class TableLookupEvent(LogEvent):
    """A weather or encounter table result."""

    table_id: str = ""
    table_name: str = ""
    roll_total: int = 0
    result_text: str = ""

    event_type = EventType.TABLE_LOOKUP

    def describe(self) -> str:
        return f"TABLE {self.table_name} [{self.roll_total}]: {self.result_text}"


@dataclass
class TimeStepEvent(LogEvent):
    """The campaign clock moving forward."""

    old_time: str = ""
    new_time: str = ""
    hours_advanced: float = 0.0
    days_advanced: int = 0
    reason: str = ""

    event_type = EventType.TIME_STEP

    def describe(self) -> str:
        return (
            f"TIME {self.old_time} -> {self.new_time} "
            f"(+{self.hours_advanced}h, +{self.days_advanced}d, {self.reason})"
        )


@dataclass
class ActionEvent(LogEvent):
    """A campaign action together with its player-facing message."""

    action: str = ""  # "travel", "forage", "undo", ...
    message: str = ""

    event_type = EventType.ACTION

    def describe(self) -> str:
        return f"ACTION {self.action}: {self.message}"


class RunLog:
    """
    Central run log for all campaign events.

    Singleton pattern - use get_run_log() to access.
    """

    _instance: Optional["RunLog"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self._events: list[LogEvent] = []
        self._seed: Optional[int] = None
        self._game_time_provider: Optional[Callable[[], str]] = None

    def reset(self) -> None:
        """Forget all events; the seed and time provider are kept."""
        self._events = []
        logger.info("RunLog reset")

    def set_seed(self, seed: int) -> None:
        self._seed = seed
        logger.info(f"RunLog seed set: {seed}")

    def get_seed(self) -> Optional[int]:
        return self._seed

    def set_game_time_provider(self, provider: Optional[Callable[[], str]]) -> None:
        """Set the callback that stamps events with campaign time. None clears it."""
        self._game_time_provider = provider

    def _append(self, event: LogEvent) -> LogEvent:
        event.sequence_number = len(self._events) + 1
        if self._game_time_provider:
            try:
                event.game_time = self._game_time_provider()
            except Exception as e:
                logger.debug(f"Game time provider failed: {e}")
        self._events.append(event)
        return event

    def log_roll(
        self,
        notation: str,
        rolls: list[int],
        modifier: int,
        total: int,
        reason: str = "",
    ) -> RollEvent:
        return self._append(
            RollEvent(notation=notation, rolls=rolls, modifier=modifier, total=total, reason=reason)
        )

    def log_table_lookup(
        self,
        table_id: str,
        table_name: str,
        roll_total: int,
        result_text: str,
    ) -> TableLookupEvent:
        return self._append(
            TableLookupEvent(
                table_id=table_id,
                table_name=table_name,
                roll_total=roll_total,
                result_text=result_text,
            )
        )

    def log_time_step(
        self,
        old_time: str,
        new_time: str,
        hours_advanced: float = 0.0,
        days_advanced: int = 0,
        reason: str = "",
    ) -> TimeStepEvent:
        return self._append(
            TimeStepEvent(
                old_time=old_time,
                new_time=new_time,
                hours_advanced=hours_advanced,
                days_advanced=days_advanced,
                reason=reason,
            )
        )

    def log_action(self, action: str, message: str) -> ActionEvent:
        return self._append(ActionEvent(action=action, message=message))

    def get_events(self, event_type: Optional[EventType] = None, limit: Optional[int] = None) -> list[LogEvent]:
        """
        Get logged events, oldest first.

        Args:
            event_type: Only events of this type (None = all)
            limit: Only the most recent N events
        """
        events = self._events
        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return list(events)

    def get_rolls(self) -> list[RollEvent]:
        return self.get_events(EventType.ROLL)

    def get_table_lookups(self) -> list[TableLookupEvent]:
        return self.get_events(EventType.TABLE_LOOKUP)

    def get_time_steps(self) -> list[TimeStepEvent]:
        return self.get_events(EventType.TIME_STEP)

    def get_actions(self) -> list[ActionEvent]:
        return self.get_events(EventType.ACTION)

    def counts(self) -> dict[str, int]:
        """Number of events of each type."""
        return {t.value: len(self.get_events(t)) for t in EventType}


def get_run_log() -> RunLog:
    """Get the global RunLog instance."""
    return RunLog()
