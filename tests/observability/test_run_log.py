"""
Tests for the RunLog: sequencing, filtering and campaign time stamps.
"""

from hexkeeper.data_models import DiceRoller
from hexkeeper.observability import (
    ActionEvent,
    EventType,
    RollEvent,
    RunLog,
    TimeStepEvent,
    get_run_log,
)


class TestRunLogSurface:

    def test_singleton(self):
        assert RunLog() is get_run_log()

    def test_sequence_numbers_increase(self):
        log = get_run_log()
        log.log_action("travel", "first")
        log.log_action("travel", "second")
        assert [e.sequence_number for e in log.get_events()] == [1, 2]

    def test_reset_restarts_sequence(self):
        log = get_run_log()
        log.log_action("travel", "first")
        log.reset()
        assert log.log_action("travel", "again").sequence_number == 1

    def test_filter_by_type(self):
        log = get_run_log()
        log.log_roll("1d6", [3], 0, 3, "test")
        log.log_action("travel", "moved")
        log.log_time_step("a", "b", hours_advanced=1.5)

        assert [type(e) for e in log.get_events(EventType.ACTION)] == [ActionEvent]
        assert isinstance(log.get_time_steps()[0], TimeStepEvent)
        assert log.counts() == {"roll": 1, "table_lookup": 0, "time_step": 1, "action": 1}

    def test_limit_keeps_most_recent(self):
        log = get_run_log()
        for message in ("one", "two", "three"):
            log.log_action("travel", message)
        assert [e.message for e in log.get_events(limit=2)] == ["two", "three"]
        assert log.get_events(limit=0) == []

    def test_game_time_provider(self):
        log = get_run_log()
        log.set_game_time_provider(lambda: "Year 22, Month 8, Day 22, 06.00h")
        event = log.log_action("travel", "moved")
        assert event.game_time == "Year 22, Month 8, Day 22, 06.00h"
        assert str(event) == "[1] @ Year 22, Month 8, Day 22, 06.00h ACTION travel: moved"

    def test_failing_game_time_provider_is_tolerated(self):
        log = get_run_log()

        def broken():
            raise RuntimeError("no clock")

        log.set_game_time_provider(broken)
        assert log.log_action("travel", "moved").game_time is None

    def test_dice_rolls_are_recorded(self, clean_dice):
        DiceRoller.roll("2d6 × 10", "distance")
        roll = get_run_log().get_rolls()[-1]
        assert isinstance(roll, RollEvent)
        assert roll.notation == "2d6 × 10"
        assert roll.reason == "distance"

    def test_event_text(self):
        log = get_run_log()
        roll = log.log_roll("1d12", [9], 0, 9, "weather")
        lookup = log.log_table_lookup("weather_summer", "Summer Weather", 9, "Fog, Calm, Day: Mild, Night: Mild")
        step = log.log_time_step("a", "b", hours_advanced=2, days_advanced=1, reason="entered Forest")
        assert str(roll) == "[1] ROLL 1d12: [9] = 9 (weather)"
        assert str(lookup) == "[2] TABLE Summer Weather [9]: Fog, Calm, Day: Mild, Night: Mild"
        assert str(step) == "[3] TIME a -> b (+2h, +1d, entered Forest)"
