"""
Shared data structures for Hexkeeper.

Holds the centralized dice roller and the small value types that flow
between the engines and the campaign controller. None of these types
touch storage; persistence belongs to the game_state layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
import logging
import math
import random
import re

from hexkeeper.observability.run_log import get_run_log


logger = logging.getLogger(__name__)


# =============================================================================
# DICE AND RANDOMIZATION
# =============================================================================

# "4d6 × 10", "2d6 x 10", "2d6*10"
_MULTIPLY_PATTERN = re.compile(r"^(.+?)\s*[×x*]\s*(\d+)$", re.IGNORECASE)
# "2d6", "1D20+5", "3d6-2"
_DICE_PATTERN = re.compile(r"^(\d+)d(\d+)([+-]\d+)?$", re.IGNORECASE)
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
# "2:6" - success on 1-2 of a d6
_CHANCE_PATTERN = re.compile(r"^(\d+):(\d+)$")


def parse_chance_notation(chance: Optional[str]) -> Optional[tuple[int, int]]:
    """
    Parse "target:sides" chance notation.

    Returns:
        (target, sides) tuple, or None if the string is missing or malformed
    """
    if not isinstance(chance, str):
        return None
    match = _CHANCE_PATTERN.match(chance.strip())
    if not match:
        return None
    target, sides = int(match.group(1)), int(match.group(2))
    if target < 1 or sides < 1:
        return None
    return target, sides


class DiceRoller:
    """
    Centralized randomization interface.
    All dice rolls must go through this class for reproducibility and logging.

    Malformed expressions never raise: they yield None, and the caller
    decides whether that means "invalid input" or "not applicable".
    """

    _instance = None
    _seed: Optional[int] = None
    _roll_log: list = []

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def set_seed(cls, seed: int) -> None:
        """Set random seed for reproducibility."""
        cls._seed = seed
        random.seed(seed)
        get_run_log().set_seed(seed)

    @classmethod
    def get_seed(cls) -> Optional[int]:
        """Get the seed last passed to set_seed."""
        return cls._seed

    @classmethod
    def draw(cls, sides: int) -> int:
        """One uniform die result in [1, sides]: floor(random() * sides) + 1."""
        return math.floor(random.random() * sides) + 1

    @classmethod
    def roll(cls, expression: Optional[str], reason: str = "") -> Optional["DiceResult"]:
        """
        Roll dice using standard notation.

        Accepts, in order of precedence:
        - multiply form: '4d6 × 10', '2d6 x 10', '2d6*10'
        - dice form: '2d6', '1d20+5', '3d6-2'
        - a bare integer: '5'

        Args:
            expression: Dice notation string
            reason: Why this roll is being made (for logging)

        Returns:
            DiceResult with individual rolls and total, or None if the
            expression is empty or cannot be parsed
        """
        result = cls._evaluate(expression)
        if result is None:
            logger.debug(f"Unparseable dice expression: {expression!r}")
            return None

        result.reason = reason
        cls._roll_log.append(result)
        get_run_log().log_roll(
            notation=result.expression,
            rolls=list(result.rolls),
            modifier=result.modifier,
            total=result.total,
            reason=reason,
        )
        return result

    @classmethod
    def _evaluate(cls, expression: Optional[str]) -> Optional["DiceResult"]:
        if not isinstance(expression, str):
            return None
        text = expression.strip()
        if not text:
            return None

        multiply = _MULTIPLY_PATTERN.match(text)
        if multiply:
            inner_text, multiplier_text = multiply.groups()
            multiplier = int(multiplier_text)
            # Nested multipliers ('2d6 x 10 x 2') are not supported
            if multiplier < 1 or _MULTIPLY_PATTERN.match(inner_text):
                return None
            inner = cls._evaluate(inner_text)
            if inner is None:
                return None
            return DiceResult(
                expression=expression,
                rolls=inner.rolls,
                modifier=inner.modifier,
                total=inner.total * multiplier,
                subtotal=inner.total,
                multiplier=multiplier,
            )

        dice = _DICE_PATTERN.match(text)
        if dice:
            num_dice, die_size = int(dice.group(1)), int(dice.group(2))
            if num_dice < 1 or die_size < 1:
                return None
            modifier = int(dice.group(3)) if dice.group(3) else 0
            rolls = [cls.draw(die_size) for _ in range(num_dice)]
            return DiceResult(
                expression=expression,
                rolls=rolls,
                modifier=modifier,
                total=sum(rolls) + modifier,
            )

        if _INTEGER_PATTERN.match(text):
            return DiceResult(expression=expression, rolls=[], modifier=0, total=int(text))

        return None

    @classmethod
    def roll_chance(cls, chance: Optional[str], reason: str = "") -> Optional["ChanceResult"]:
        """
        Roll against "target:sides" chance notation (e.g. '2:6').

        Succeeds when a single roll of 1..sides is at or under the target.
        """
        parsed = parse_chance_notation(chance)
        if parsed is None:
            logger.debug(f"Unparseable chance expression: {chance!r}")
            return None

        target, sides = parsed
        roll = cls.roll_die(sides, reason)
        return ChanceResult(
            success=roll <= target,
            roll=roll,
            target=target,
            sides=sides,
            expression=chance,
            reason=reason,
        )

    @classmethod
    def roll_die(cls, sides: int, reason: str = "") -> int:
        """Roll a single die of the given size and log it."""
        value = cls.draw(sides)
        notation = f"1d{sides}"
        cls._roll_log.append(
            DiceResult(expression=notation, rolls=[value], modifier=0, total=value, reason=reason)
        )
        get_run_log().log_roll(notation=notation, rolls=[value], modifier=0, total=value, reason=reason)
        return value

    @classmethod
    def get_roll_log(cls) -> list:
        """Get the complete roll log for the session."""
        return cls._roll_log.copy()

    @classmethod
    def clear_roll_log(cls) -> None:
        """Clear the roll log."""
        cls._roll_log = []


@dataclass
class DiceResult:
    """Result of a dice roll with full information."""
    expression: str
    rolls: list[int]
    modifier: int
    total: int
    subtotal: Optional[int] = None  # Set only for multiply forms
    multiplier: Optional[int] = None
    reason: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_multiplied(self) -> bool:
        return self.multiplier is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the plain structure returned to API callers."""
        data: dict[str, Any] = {
            "expression": self.expression,
            "rolls": list(self.rolls),
            "modifier": self.modifier,
            "total": self.total,
        }
        if self.is_multiplied:
            data["subtotal"] = self.subtotal
            data["multiplier"] = self.multiplier
        return data

    def __str__(self) -> str:
        if self.is_multiplied:
            return f"{self.expression}: {self.rolls} = {self.subtotal} × {self.multiplier} = {self.total}"
        if self.modifier > 0:
            return f"{self.expression}: {self.rolls} + {self.modifier} = {self.total}"
        elif self.modifier < 0:
            return f"{self.expression}: {self.rolls} - {abs(self.modifier)} = {self.total}"
        return f"{self.expression}: {self.rolls} = {self.total}"


@dataclass
class ChanceResult:
    """Result of an X-in-Y chance roll."""
    success: bool
    roll: int
    target: int
    sides: int
    expression: str
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "roll": self.roll,
            "target": self.target,
            "sides": self.sides,
            "expression": self.expression,
        }

    def __str__(self) -> str:
        outcome = "success" if self.success else "failure"
        return f"{self.expression}: rolled {self.roll} on d{self.sides} (needed {self.target} or less) - {outcome}"


def roll_dice_expression(expression: Optional[str], reason: str = "") -> Optional[DiceResult]:
    """Roll a dice expression through the shared DiceRoller."""
    return DiceRoller.roll(expression, reason)


def roll_chance_expression(chance: Optional[str], reason: str = "") -> Optional[ChanceResult]:
    """Roll a chance expression through the shared DiceRoller."""
    return DiceRoller.roll_chance(chance, reason)


# =============================================================================
# TIME TRACKING
# =============================================================================

# Campaign start: 22nd day of the 8th month, year 22
DEFAULT_START_YEAR = 22
DEFAULT_START_MONTH = 8
DEFAULT_START_DAY = 22
DEFAULT_START_HOUR = 6.0

# Party movement rate in feet; overland miles/day = rate / 5
DEFAULT_MOVEMENT_RATE = 120


@dataclass(frozen=True)
class GameDate:
    """In-game calendar date."""
    year: int
    month: int  # 1-based, up to the calendar's months per year
    day: int    # 1-based, up to the month's day count

    def to_dict(self) -> dict[str, int]:
        return {"year": self.year, "month": self.month, "day": self.day}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameDate":
        return cls(year=int(data["year"]), month=int(data["month"]), day=int(data["day"]))

    def __str__(self) -> str:
        return f"Year {self.year}, Month {self.month}, Day {self.day}"


@dataclass(frozen=True)
class CampaignClock:
    """
    The party's position in time.

    hours_traveled_today and hexes_traveled_today only ever describe the
    current day; advancing past midnight resets them.
    """
    year: int = DEFAULT_START_YEAR
    month: int = DEFAULT_START_MONTH
    day: int = DEFAULT_START_DAY
    hour: float = DEFAULT_START_HOUR  # [0, 24)
    hours_traveled_today: float = 0.0
    hexes_traveled_today: int = 0
    movement_rate: int = DEFAULT_MOVEMENT_RATE

    @property
    def date(self) -> GameDate:
        return GameDate(year=self.year, month=self.month, day=self.day)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "hour": self.hour,
            "hours_traveled_today": self.hours_traveled_today,
            "hexes_traveled_today": self.hexes_traveled_today,
            "movement_rate": self.movement_rate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CampaignClock":
        return cls(
            year=data.get("year", DEFAULT_START_YEAR),
            month=data.get("month", DEFAULT_START_MONTH),
            day=data.get("day", DEFAULT_START_DAY),
            hour=data.get("hour", DEFAULT_START_HOUR),
            hours_traveled_today=data.get("hours_traveled_today", 0.0),
            hexes_traveled_today=data.get("hexes_traveled_today", 0),
            movement_rate=data.get("movement_rate", DEFAULT_MOVEMENT_RATE),
        )

    def __str__(self) -> str:
        return f"{self.date}, {self.hour:05.2f}h"
