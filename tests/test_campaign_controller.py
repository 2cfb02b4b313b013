"""
Tests for the CampaignController: travel, daily checks, weather, manual
state updates, the session log and undo.
"""

import pytest

from conftest import die_faces, fixed_draws
from hexkeeper.game_state import (
    CampaignController,
    CampaignStateUpdate,
    ImpassableTerrainError,
    InvalidChanceError,
    InvalidUpdateError,
    LogCategory,
    NothingToUndoError,
    TerrainNotFoundError,
    UndoHistory,
)
from hexkeeper.hex_crawl import ProvisionOutcome, STANDARD_TERRAINS, Terrain
from hexkeeper.observability import get_run_log
from hexkeeper.weather import ClimateZone, MonthUpdate, WeatherKind


def last_entry(controller):
    return controller.get_log(1)[0]


class TestEnterHex:

    def test_enter_road(self, controller):
        result = controller.enter_hex("road", "0101")

        assert result.hours_to_traverse == 1.33
        assert result.clock.hour == 7.33
        assert result.clock.hexes_traveled_today == 1
        assert result.formatted_date == "22 Panagion, 22 P.I."
        assert not result.forced_march
        assert controller.state.current_terrain_id == "road"
        assert controller.state.current_hex_id == "0101"

        entry = last_entry(controller)
        assert entry.category == LogCategory.TRAVEL
        assert entry.message == "Traversed hex 0101 (Road). Travel time: 1.3 hours."
        assert entry.hour == 7.33

    def test_unknown_hex_id(self, controller):
        controller.enter_hex("forest")
        assert last_entry(controller).message == "Traversed hex ??? (Forest). Travel time: 3.0 hours."

    def test_time_step_is_logged(self, controller):
        controller.enter_hex("road", "0101")
        step = get_run_log().get_time_steps()[-1]
        assert step.hours_advanced == 1.33
        assert step.days_advanced == 0
        assert step.reason == "entered Road"

    def test_multi_day_hex_logs_every_day(self, controller):
        controller.add_terrain(Terrain(id="bog", name="Bog", travel_speed_modifier=-0.9))
        controller.set_state(CampaignStateUpdate(movement_rate=30))
        result = controller.enter_hex("bog")

        assert result.hours_to_traverse == 80
        assert (result.clock.day, result.clock.hour) == (25, 14.0)
        assert get_run_log().get_time_steps()[-1].days_advanced == 3

    def test_unknown_terrain(self, controller):
        with pytest.raises(TerrainNotFoundError):
            controller.enter_hex("lava")
        assert not controller.can_undo()
        assert controller.get_log() == []

    def test_impassable_terrain(self, controller):
        controller.add_terrain(Terrain(id="cliff", name="Cliff", travel_speed_modifier=-1))
        with pytest.raises(ImpassableTerrainError):
            controller.enter_hex("cliff")
        assert not controller.can_undo()
        assert controller.clock.hour == 6.0

    def test_road_day_forced_march(self, controller):
        for i in range(6):
            result = controller.enter_hex("road", f"01{i:02d}")
        assert result.clock.hours_traveled_today == pytest.approx(7.98)
        assert not result.forced_march

        result = controller.enter_hex("road")
        assert result.forced_march
        assert controller.status()["forced_march"]

    def test_movement_rate_changes_speed(self, controller):
        controller.set_state(CampaignStateUpdate(movement_rate=60))
        result = controller.enter_hex("road")
        assert result.travel_speed.hexes_per_day == 3
        assert result.hours_to_traverse == 2.67

    def test_overnight_travel(self, controller):
        controller.set_state(CampaignStateUpdate(hour=23.5, hours_traveled_today=4, hexes_traveled_today=2))
        result = controller.enter_hex("forest")
        assert result.clock.day == 23
        assert result.clock.hour == pytest.approx(2.49)
        assert result.clock.hexes_traveled_today == 1
        assert result.formatted_date == "23 Panagion, 22 P.I."


class TestResetDay:

    def test_reset_day(self, controller):
        controller.enter_hex("road")
        controller.reset_day()

        clock = controller.clock
        assert (clock.day, clock.hour) == (23, 6.0)
        assert clock.hours_traveled_today == 0
        assert clock.hexes_traveled_today == 0
        assert last_entry(controller).message == "New day begins: 23 Panagion, 22 P.I."

    def test_reset_day_at_month_end(self, controller):
        controller.set_state(CampaignStateUpdate(day=31))
        controller.reset_day()
        assert (controller.clock.month, controller.clock.day) == (9, 1)


class TestProvisioning:

    def test_requires_a_terrain(self, controller):
        with pytest.raises(TerrainNotFoundError):
            controller.forage()

    def test_defaults_to_current_terrain(self, controller):
        controller.enter_hex("forest")
        with fixed_draws(*die_faces((1, 6), (5, 8))):
            result = controller.hunt()
        assert result.describe() == "Hunting successful! Caught 5 rations (1d8: [5])."
        assert last_entry(controller).category == LogCategory.HUNTING

    def test_auto_forage(self, controller):
        with fixed_draws(*die_faces((3, 6))):
            result = controller.forage("farmland")
        assert result.outcome == ProvisionOutcome.AUTO_SUCCESS
        entry = last_entry(controller)
        assert entry.category == LogCategory.FORAGING
        assert entry.message.startswith("Foraging automatic success! Found 3 rations")

    def test_fishing_failure(self, controller):
        with fixed_draws(*die_faces((5, 6))):
            result = controller.fish("forest")
        assert not result.success
        entry = last_entry(controller)
        assert entry.category == LogCategory.FISHING
        assert entry.message == "Fishing failed (rolled 5, needed 2 or less on d6)."

    def test_not_possible_leaves_no_trace(self, controller):
        result = controller.forage("mountains")
        assert result.outcome == ProvisionOutcome.NOT_POSSIBLE
        assert controller.get_log() == []
        assert not controller.can_undo()

    def test_invalid_chance(self, controller):
        controller.add_terrain(Terrain(id="odd", name="Odd", foraging_chance="often"))
        with pytest.raises(InvalidChanceError):
            controller.forage("odd")
        assert not controller.can_undo()


class TestDirectionCheck:

    def test_passed(self, controller):
        with fixed_draws(*die_faces((3, 6))):
            result = controller.direction_check("forest")
        assert not result.lost
        assert result.roll == 3
        assert result.message == "Direction check passed (rolled 3, needed 2 or less on d6)."
        assert last_entry(controller).category == LogCategory.NAVIGATION

    def test_lost(self, controller):
        with fixed_draws(*die_faces((1, 6))):
            result = controller.direction_check("swamp")
        assert result.lost
        assert result.message == "Lost direction! (rolled 1, needed 3 or less on d6)."

    def test_last_weather_modifier_applies(self, controller):
        with fixed_draws(*die_faces((9, 12))):
            assert controller.roll_weather().weather == WeatherKind.FOG
        with fixed_draws(*die_faces((3, 6))):
            result = controller.direction_check("forest")
        assert result.lost
        assert result.weather_modifier == 1
        assert result.message == "Lost direction! (rolled 3, needed 3 or less on d6, weather +1)."

    def test_explicit_modifier_overrides_weather(self, controller):
        with fixed_draws(*die_faces((9, 12))):
            controller.roll_weather()
        with fixed_draws(*die_faces((3, 6))):
            result = controller.direction_check("forest", weather_modifier=0)
        assert not result.lost

    def test_no_chance_in_terrain(self, controller):
        result = controller.direction_check("road")
        assert not result.lost
        assert result.roll is None
        assert result.message == "No chance of losing direction in this terrain."
        assert controller.get_log() == []

    def test_invalid_chance(self, controller):
        controller.add_terrain(Terrain(id="odd", name="Odd", losing_direction_chance="sometimes"))
        with pytest.raises(InvalidChanceError):
            controller.direction_check("odd")


class TestWanderCheck:

    def test_safe_is_logged_as_travel(self, controller):
        with fixed_draws(*die_faces((5, 6))):
            check = controller.wander_check("road")
        assert not check.encountered
        entry = last_entry(controller)
        assert entry.category == LogCategory.TRAVEL
        assert entry.message == "Manual wandering monster check: safe (rolled 5)."

    def test_encounter_is_logged_as_encounter(self, controller):
        with fixed_draws(*die_faces((1, 6), (3, 6), (4, 6))):
            check = controller.wander_check("road")
        assert check.encountered
        entry = last_entry(controller)
        assert entry.category == LogCategory.ENCOUNTER
        assert entry.message == "Wandering monster! at 70 yards"

    def test_no_chance(self, controller):
        controller.add_terrain(Terrain(id="void", name="Void", wandering_monster_chance=None))
        assert controller.wander_check("void") is None
        assert not controller.can_undo()

    def test_invalid_chance(self, controller):
        controller.add_terrain(Terrain(id="odd", name="Odd", wandering_monster_chance="rarely"))
        with pytest.raises(InvalidChanceError):
            controller.wander_check("odd")


class TestWeather:

    def test_roll_weather_uses_current_season(self, controller):
        with fixed_draws(*die_faces((12, 12))):
            reading = controller.roll_weather()
        assert reading.weather == WeatherKind.STORM
        assert controller.state.last_weather == reading
        entry = last_entry(controller)
        assert entry.category == LogCategory.WEATHER
        assert entry.message == "Weather: Storm, Gale, Day: Mild, Night: Cold (summer, rolled 12)."

    def test_undo_restores_previous_weather(self, controller):
        with fixed_draws(*die_faces((12, 12))):
            controller.roll_weather()
        controller.undo()
        assert controller.state.last_weather is None

    def test_exposure_needs_weather(self, controller):
        assert controller.assess_exposure() is None

    def test_winter_exposure(self, controller):
        controller.set_state(CampaignStateUpdate(month=1))
        with fixed_draws(*die_faces((11, 12))):
            controller.roll_weather()
        assessment = controller.assess_exposure(ClimateZone.TUNDRA)
        assert assessment.at_risk
        assert assessment.hypothermia_frequency == "1/minute"


class TestSetState:

    def test_update_and_log(self, controller):
        controller.set_state(CampaignStateUpdate(day=30, hour=12.5), log_message="Rested in town")
        assert (controller.clock.day, controller.clock.hour) == (30, 12.5)
        entry = last_entry(controller)
        assert entry.category == LogCategory.TIME
        assert entry.message == "Rested in town"

    def test_update_without_message_is_not_logged(self, controller):
        controller.set_state(CampaignStateUpdate(current_hex_id="0505", current_terrain_id="hills"))
        assert controller.current_terrain.name == "Hills"
        assert controller.get_log() == []
        assert controller.can_undo()

    def test_clear_current_hex(self, controller):
        controller.enter_hex("road", "0101")
        controller.set_state(CampaignStateUpdate(clear_current_hex=True))
        assert controller.state.current_hex_id is None
        assert controller.state.current_terrain_id == "road"

    def test_set_and_clear_hex_together(self, controller):
        with pytest.raises(InvalidUpdateError) as exc_info:
            controller.set_state(CampaignStateUpdate(current_hex_id="0101", clear_current_hex=True))
        assert exc_info.value.field_name == "current_hex_id"

    def test_changed_fields_lists_only_supplied_values(self):
        update = CampaignStateUpdate(day=3, movement_rate=90)
        assert update.changed_fields() == {"day": 3, "movement_rate": 90}
        assert CampaignStateUpdate(clear_current_hex=True).changed_fields() == {"current_hex_id": None}

    @pytest.mark.parametrize(
        "update,field_name",
        [
            (CampaignStateUpdate(day=32), "day"),
            (CampaignStateUpdate(month=2, day=30), "day"),
            (CampaignStateUpdate(month=13), "month"),
            (CampaignStateUpdate(year=0), "year"),
            (CampaignStateUpdate(hour=24), "hour"),
            (CampaignStateUpdate(hour=-1), "hour"),
            (CampaignStateUpdate(hours_traveled_today=-0.5), "hours_traveled_today"),
            (CampaignStateUpdate(hexes_traveled_today=1.5), "hexes_traveled_today"),
            (CampaignStateUpdate(movement_rate=0), "movement_rate"),
            (CampaignStateUpdate(current_terrain_id="lava"), "current_terrain_id"),
        ],
    )
    def test_invalid_fields(self, controller, update, field_name):
        before = controller.state
        with pytest.raises(InvalidUpdateError) as exc_info:
            controller.set_state(update)
        assert exc_info.value.field_name == field_name
        assert controller.state is before
        assert not controller.can_undo()

    def test_empty_update(self, controller):
        with pytest.raises(InvalidUpdateError):
            controller.set_state(CampaignStateUpdate())

    def test_day_validated_against_custom_month(self, controller):
        controller.calendar.patch_month(8, MonthUpdate(days=20))
        with pytest.raises(InvalidUpdateError):
            controller.set_state(CampaignStateUpdate(day=25))


class TestLogAndUndo:

    def test_get_log_limit(self, controller):
        controller.enter_hex("road", "0101")
        controller.enter_hex("road", "0102")
        controller.enter_hex("road", "0103")

        assert controller.get_log(0) == []
        assert [e.message.split()[2] for e in controller.get_log(2)] == ["0102", "0103"]
        assert len(controller.get_log()) == 3

    def test_undo_restores_state_and_log(self, controller):
        controller.enter_hex("road", "0101")
        controller.enter_hex("forest", "0102")

        controller.undo()

        assert controller.clock.hour == 7.33
        assert controller.state.current_terrain_id == "road"
        assert [e.message for e in controller.get_log()] == [
            "Traversed hex 0101 (Road). Travel time: 1.3 hours."
        ]

    def test_undo_all_the_way_back(self, controller):
        controller.enter_hex("road")
        controller.reset_day()
        controller.undo()
        controller.undo()
        assert controller.clock.hour == 6.0
        assert controller.clock.day == 22
        assert controller.get_log() == []
        with pytest.raises(NothingToUndoError):
            controller.undo()

    def test_log_ids_are_never_reused(self, controller):
        controller.enter_hex("road")
        controller.undo()
        controller.enter_hex("road")
        assert last_entry(controller).id == 2

    def test_undo_depth_is_bounded(self):
        controller = CampaignController(terrains=STANDARD_TERRAINS, undo_history=UndoHistory(2))
        for _ in range(3):
            controller.enter_hex("road")

        controller.undo()
        controller.undo()
        with pytest.raises(NothingToUndoError):
            controller.undo()
        assert controller.clock.hexes_traveled_today == 1
        assert len(controller.get_log()) == 1

    def test_undo_history_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            UndoHistory(0)

    def test_actions_reach_run_log(self, controller):
        controller.enter_hex("road")
        controller.undo()
        actions = get_run_log().get_actions()
        assert [a.action for a in actions] == ["travel", "undo"]


class TestStatus:

    def test_initial_status(self, controller):
        status = controller.status()
        assert status["date"] == "22 Panagion, 22 P.I."
        assert status["season"] == "summer"
        assert status["terrain"] is None
        assert status["travel_speed"] is None
        assert not status["can_undo"]

    def test_status_after_travel(self, controller):
        controller.enter_hex("road", "0101")
        status = controller.status()
        assert status["terrain"] == "Road"
        assert status["current_hex_id"] == "0101"
        assert status["travel_speed"]["hours_per_hex"] == 1.33
        assert status["can_undo"]
