"""
Pytest fixtures for the Hexkeeper test suite.

Provides dice, calendar and controller fixtures plus a helper for
forcing exact die results.
"""

import pytest
from unittest.mock import patch

from hexkeeper.data_models import DiceRoller
from hexkeeper.game_state import CampaignController, UndoHistory
from hexkeeper.hex_crawl import STANDARD_TERRAINS
from hexkeeper.observability import get_run_log
from hexkeeper.weather import Calendar


# =============================================================================
# DICE FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def clean_run_log():
    """Every test starts with an empty run log."""
    log = get_run_log()
    log.reset()
    log.set_game_time_provider(None)
    yield log
    log.set_game_time_provider(None)


@pytest.fixture
def seeded_dice():
    """Provide a seeded DiceRoller for reproducible tests."""
    DiceRoller.clear_roll_log()
    DiceRoller.set_seed(42)
    yield DiceRoller()
    DiceRoller.clear_roll_log()


@pytest.fixture
def clean_dice():
    """Provide a clean DiceRoller without seed."""
    DiceRoller.clear_roll_log()
    yield DiceRoller()
    DiceRoller.clear_roll_log()


def die_faces(*faces_and_sides):
    """
    Convert (face, sides) pairs into random() values that produce those faces.

    draw(sides) is floor(random() * sides) + 1, so the midpoint of a face's
    interval always lands on it.
    """
    return [(face - 0.5) / sides for face, sides in faces_and_sides]


def fixed_draws(*values):
    """Patch random.random to return the given values in order."""
    return patch("random.random", side_effect=list(values))


# =============================================================================
# CAMPAIGN FIXTURES
# =============================================================================


@pytest.fixture
def default_calendar():
    """The standard twelve-month calendar."""
    return Calendar()


@pytest.fixture
def controller(clean_dice, default_calendar):
    """A fresh campaign at the default start date with the standard terrains."""
    return CampaignController(
        calendar=default_calendar,
        terrains=STANDARD_TERRAINS,
        undo_history=UndoHistory(),
    )
