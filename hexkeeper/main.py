"""
Hexkeeper - Main Entry Point

An interactive command-line tracker for a single party's hex-crawl
campaign: travel time, calendar, weather and daily survival checks.
"""

import argparse
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from hexkeeper import __version__
from hexkeeper.data_models import DiceRoller
from hexkeeper.game_state import (
    CampaignController,
    CampaignError,
    SessionManager,
    UndoHistory,
)
from hexkeeper.game_state.undo_history import DEFAULT_UNDO_DEPTH
from hexkeeper.hex_crawl import STANDARD_TERRAINS
from hexkeeper.observability import get_run_log
from hexkeeper.weather import CalendarValidationError, ClimateZone, DEFAULT_COLD_GEAR


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class TrackerConfig:
    """Configuration for a tracker run."""

    save_dir: Path = field(default_factory=lambda: Path("saves"))
    campaign_name: str = "default"
    seed: Optional[int] = None
    undo_depth: int = DEFAULT_UNDO_DEPTH
    load_path: Optional[Path] = None
    verbose: bool = False

    def __post_init__(self):
        if isinstance(self.save_dir, str):
            self.save_dir = Path(self.save_dir)
        if isinstance(self.load_path, str):
            self.load_path = Path(self.load_path)


def create_campaign(config: TrackerConfig) -> tuple[SessionManager, CampaignController]:
    """
    Load the configured save, or start a new campaign with the standard terrains.
    """
    if config.seed is not None:
        DiceRoller.set_seed(config.seed)

    manager = SessionManager(config.save_dir)
    if config.load_path:
        manager.load_session(config.load_path)
        controller = manager.restore(undo_depth=config.undo_depth)
        logger.info(f"Loaded campaign from {config.load_path}")
    else:
        manager.new_session(config.campaign_name)
        controller = CampaignController(
            terrains=STANDARD_TERRAINS,
            undo_history=UndoHistory(config.undo_depth),
        )
        logger.info(f"Started new campaign: {config.campaign_name}")

    get_run_log().set_game_time_provider(lambda: str(controller.clock))
    return manager, controller


def run_demo_day(controller: CampaignController) -> None:
    """Play through one scripted travel day and print the session log."""
    print("\n--- Demo travel day ---")
    weather = controller.roll_weather()
    print(f"Weather: {weather}")

    for hex_id, terrain_id in [("0101", "road"), ("0102", "road"), ("0203", "forest"), ("0304", "hills")]:
        result = controller.enter_hex(terrain_id, hex_id)
        march = " (forced march!)" if result.forced_march else ""
        print(f"Entered {hex_id} ({result.terrain.name}): {result.hours_to_traverse}h, now {result.clock.hour:05.2f}{march}")

    print(controller.direction_check().message)
    wander = controller.wander_check()
    if wander:
        print(wander.describe())
    print(controller.forage().describe())
    controller.reset_day()

    print("\nSession log:")
    for entry in controller.get_log():
        print(f"  {entry}")


# =============================================================================
# CLI INTERFACE
# =============================================================================

class TrackerCLI:
    """Interactive command-line interface for the tracker."""

    def __init__(self, controller: CampaignController, session_manager: Optional[SessionManager] = None):
        self.controller = controller
        self.session_manager = session_manager
        self.running = False
        self.commands = {
            "status": self.cmd_status,
            "terrains": self.cmd_terrains,
            "enter": self.cmd_enter,
            "forage": self.cmd_forage,
            "hunt": self.cmd_hunt,
            "fish": self.cmd_fish,
            "direction": self.cmd_direction,
            "wander": self.cmd_wander,
            "weather": self.cmd_weather,
            "exposure": self.cmd_exposure,
            "newday": self.cmd_newday,
            "undo": self.cmd_undo,
            "log": self.cmd_log,
            "audit": self.cmd_audit,
            "roll": self.cmd_roll,
            "chance": self.cmd_chance,
            "save": self.cmd_save,
            "help": self.cmd_help,
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
        }

    def run(self) -> None:
        """Run the interactive CLI loop."""
        self.running = True
        print("\n" + "=" * 60)
        print("HEXKEEPER - Interactive Mode")
        print("=" * 60)
        print("Type 'help' for available commands, 'quit' to exit.\n")

        while self.running:
            try:
                user_input = input(f"[{self.controller.formatted_date}]> ").strip()
                if not user_input:
                    continue

                self.process_command(user_input)

            except KeyboardInterrupt:
                print("\nInterrupted. Type 'quit' to exit.")
            except EOFError:
                self.running = False

        print("\nSafe travels!")

    def process_command(self, user_input: str) -> None:
        """Process a user command."""
        parts = user_input.split(maxsplit=1)
        cmd = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        if cmd not in self.commands:
            print(f"Unknown command: {cmd}. Type 'help' for available commands.")
            return
        try:
            self.commands[cmd](args)
        except (CampaignError, CalendarValidationError) as e:
            print(f"Error: {e}")

    def cmd_help(self, args: str) -> None:
        print("""
Available Commands:
  status                 - Show date, time and today's travel
  terrains               - List terrain ids
  enter TERRAIN [HEX]    - Enter a hex (e.g., 'enter forest 0203')
  forage / hunt / fish   - Attempt to find food in the current terrain
  direction [MOD]        - Losing direction check (MOD overrides weather)
  wander                 - Wandering monster check
  weather                - Roll weather for the current season
  exposure [ZONE] [GEAR] - Hypothermia check for the last weather
  newday                 - Advance to the next morning
  undo                   - Undo the last action
  log [N]                - Show the last N log entries (default 10)
  audit [N]              - Show the last N run log events (default 20)
  roll DICE              - Roll dice (e.g., 'roll 2d6 x 10')
  chance X:Y             - Roll an X-in-Y chance (e.g., 'chance 2:6')
  save                   - Save the campaign
  help                   - Show this help
  quit/exit              - Exit
""")

    def cmd_status(self, args: str) -> None:
        print(json.dumps(self.controller.status(), indent=2, ensure_ascii=False))

    def cmd_terrains(self, args: str) -> None:
        for terrain in self.controller.terrains():
            print(f"  {terrain.id:<12} {terrain.name} (speed {terrain.travel_speed_modifier:+})")

    def cmd_enter(self, args: str) -> None:
        parts = args.split()
        if not parts:
            print("Usage: enter TERRAIN_ID [HEX_ID]")
            return
        result = self.controller.enter_hex(parts[0], parts[1] if len(parts) > 1 else None)
        print(f"{result.terrain.name}: {result.hours_to_traverse} hours. Now {result.formatted_date}, {result.clock.hour:05.2f}h")
        if result.forced_march:
            print(f"Forced march! {result.clock.hours_traveled_today} hours traveled today.")

    def cmd_forage(self, args: str) -> None:
        print(self.controller.forage(args.strip() or None).describe())

    def cmd_hunt(self, args: str) -> None:
        print(self.controller.hunt(args.strip() or None).describe())

    def cmd_fish(self, args: str) -> None:
        print(self.controller.fish(args.strip() or None).describe())

    def cmd_direction(self, args: str) -> None:
        modifier = None
        if args.strip():
            try:
                modifier = int(args.strip())
            except ValueError:
                print("Usage: direction [WEATHER_MODIFIER]")
                return
        print(self.controller.direction_check(weather_modifier=modifier).message)

    def cmd_wander(self, args: str) -> None:
        check = self.controller.wander_check(args.strip() or None)
        print(check.describe() if check else "No wandering monsters in this terrain.")

    def cmd_weather(self, args: str) -> None:
        reading = self.controller.roll_weather()
        print(f"{reading} ({reading.season.value}, rolled {reading.roll})")
        for effect in reading.effects:
            print(f"  {effect}")

    def cmd_exposure(self, args: str) -> None:
        parts = args.split(maxsplit=1)
        try:
            zone = ClimateZone(parts[0].lower()) if parts else ClimateZone.BOREAL
        except ValueError:
            print(f"Unknown climate zone. Choose from: {', '.join(z.value for z in ClimateZone)}")
            return
        gear = None
        if len(parts) > 1:
            gear = next((g for g in DEFAULT_COLD_GEAR if g.name.lower() == parts[1].lower()), None)
            if gear is None:
                print(f"Unknown cold gear. Choose from: {', '.join(g.name for g in DEFAULT_COLD_GEAR)}")
                return
        assessment = self.controller.assess_exposure(zone, gear)
        print(assessment.describe() if assessment else "Roll weather first.")

    def cmd_newday(self, args: str) -> None:
        self.controller.reset_day()
        print(f"New day: {self.controller.formatted_date}")

    def cmd_undo(self, args: str) -> None:
        self.controller.undo()
        print(f"Undone. Now {self.controller.formatted_date}, {self.controller.clock.hour:05.2f}h")

    def cmd_log(self, args: str) -> None:
        try:
            limit = int(args) if args.strip() else 10
        except ValueError:
            print("Usage: log [N]")
            return
        for entry in self.controller.get_log(limit):
            print(f"  {entry}")

    def cmd_audit(self, args: str) -> None:
        try:
            limit = int(args) if args.strip() else 20
        except ValueError:
            print("Usage: audit [N]")
            return
        run_log = get_run_log()
        print(", ".join(f"{name}: {count}" for name, count in run_log.counts().items()))
        for event in run_log.get_events(limit=limit):
            print(f"  {event}")

    def cmd_roll(self, args: str) -> None:
        if not args:
            print("Usage: roll DICE (e.g., 'roll 2d6+3', 'roll 4d6 x 10')")
            return
        result = DiceRoller.roll(args.strip(), "manual roll")
        print(f"Rolling {args}: {result}" if result else f"Cannot parse dice expression: {args}")

    def cmd_chance(self, args: str) -> None:
        if not args:
            print("Usage: chance X:Y (e.g., 'chance 2:6')")
            return
        result = DiceRoller.roll_chance(args.strip(), "manual chance")
        print(str(result) if result else f"Cannot parse chance: {args}")

    def cmd_save(self, args: str) -> None:
        if self.session_manager is None:
            print("No session manager configured.")
            return
        self.session_manager.capture(self.controller)
        path = self.session_manager.save_session()
        print(f"Saved to {path}")

    def cmd_quit(self, args: str) -> None:
        self.running = False


# =============================================================================
# ARGUMENTS
# =============================================================================

def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Hexkeeper - a hex-crawl campaign tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hexkeeper                              # Start a new campaign
  hexkeeper --demo --seed 42             # Play a scripted travel day
  hexkeeper --load saves/mine_1a2b.json  # Continue a saved campaign
        """
    )
    parser.add_argument(
        "--save-dir",
        type=Path,
        default=Path("saves"),
        help="Directory for save files (default: saves)",
    )
    parser.add_argument(
        "--campaign",
        type=str,
        default="default",
        help="Name for a new campaign (default: default)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible rolls",
    )
    parser.add_argument(
        "--undo-depth",
        type=int,
        default=DEFAULT_UNDO_DEPTH,
        help=f"Number of actions that can be undone (default: {DEFAULT_UNDO_DEPTH})",
    )
    parser.add_argument(
        "--load",
        type=Path,
        help="Save file to load",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run a scripted travel day and exit",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)
    if args.undo_depth < 1:
        parser.error(f"--undo-depth must be at least 1, got {args.undo_depth}")
    return args


def create_config_from_args(args: argparse.Namespace) -> TrackerConfig:
    """Create TrackerConfig from parsed arguments."""
    return TrackerConfig(
        save_dir=args.save_dir,
        campaign_name=args.campaign,
        seed=args.seed,
        undo_depth=args.undo_depth,
        load_path=args.load,
        verbose=args.verbose,
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main(argv: Optional[Sequence[str]] = None) -> CampaignController:
    """Main entry point for CLI usage."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    print("=" * 60)
    print(f"HEXKEEPER v{__version__}")
    print("=" * 60)

    config = create_config_from_args(args)
    try:
        manager, controller = create_campaign(config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not start campaign: {e}")
        raise SystemExit(f"Error: {e}") from e

    if args.demo:
        run_demo_day(controller)
    else:
        cli = TrackerCLI(controller, manager)
        cli.cmd_status("")
        cli.run()

    return controller


if __name__ == "__main__":
    main()
