#!/usr/bin/env python3
"""
NavSim - Route Navigation Simulator
Entry Point Module
Replays a route fixture through the navigation simulator, either in real
time on the Qt event loop or tick by tick without a timer.
"""
import argparse
import json
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Optional, List, TextIO


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="NavSim - Route Navigation Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python . route.json                       # Replay in real time (100 ms ticks)
  python . route.json --manual              # Step as fast as possible
  python . route.json --start 41.31,69.28   # Start from the closest route point
  python . route.json --trace-file out.jsonl
  python . --check-deps                     # Check dependencies only
        """
    )
    parser.add_argument(
        "route",
        nargs="?",
        help="JSON route fixture (coordinate list or routing response)"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version="NavSim 1.0.0"
    )
    parser.add_argument(
        "--check-deps", "-c",
        action="store_true",
        help="Check dependencies and exit"
    )
    parser.add_argument(
        "--start",
        type=str,
        help="Starting location as LAT,LON (defaults to the first route point)"
    )
    parser.add_argument(
        "--manual", "-m",
        action="store_true",
        help="Advance ticks synchronously instead of using the timer"
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=100000,
        help="Stop after this many ticks in manual mode"
    )
    parser.add_argument("--interval-ms", type=int, help="Tick interval in milliseconds")
    parser.add_argument("--step-distance", type=float, help="Meters advanced per tick")
    parser.add_argument("--speed", type=float, help="Average speed in m/s used for the ETA")
    parser.add_argument("--threshold", type=float, help="Heading change in degrees that counts as a turn")
    parser.add_argument(
        "--trace-file",
        type=str,
        help="Write every navigation snapshot as a JSON line"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        help="Custom directory for log files"
    )
    return parser.parse_args(argv)


def check_dependencies() -> bool:
    """Check if required dependencies are available."""
    # display_name -> (import_name, description)
    required_packages = {
        'PySide6': ('PySide6', 'Qt timers, signals and settings'),
    }
    missing_required = []
    print(f"Python version: {sys.version}")
    print(f"Python executable: {sys.executable}\n")
    for display_name, (import_name, description) in required_packages.items():
        try:
            module = __import__(import_name)
            if import_name == 'PySide6':
                from PySide6 import QtCore  # noqa: F401
            print(f"OK {display_name}: {description} (version: {getattr(module, '__version__', 'unknown')})")
        except ImportError as e:
            missing_required.append(f"{display_name} ({description})")
            print(f"ERROR {display_name}: {description} - MISSING")
            print(f"   Import error: {e}")
    if missing_required:
        print("\nMissing required dependencies:")
        for package in missing_required:
            print(f"   - {package}")
        print("\nTry installing with:")
        print(f"   {sys.executable} -m pip install " + " ".join(p.split()[0] for p in missing_required))
        return False
    return True


def parse_location(text: str):
    """Parse ``LAT,LON`` into a Coordinate."""
    from route_model import Coordinate
    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 2:
        raise ValueError(f"expected LAT,LON but got {text!r}")
    return Coordinate(float(parts[0]), float(parts[1]))


def format_state(state) -> str:
    """One console line for a navigation snapshot."""
    from geo_math import bearing_to_compass, format_distance, format_duration
    guidance = state.current_instruction
    if state.upcoming_maneuver:
        guidance = f"{guidance} | {state.upcoming_maneuver}"
    return (
        f"[{state.tick_count:6d}] {bearing_to_compass(state.car_heading):>3} "
        f"{state.car_heading:6.1f} deg  remaining {format_distance(state.remaining_distance):>8}  "
        f"ETA {format_duration(state.estimated_time_remaining):>6} {state.progress:6.1%}  {guidance}"
    )


class SnapshotPrinter:
    """Prints guidance changes and optionally writes every snapshot as JSON lines."""

    def __init__(self, trace_stream: Optional[TextIO] = None):
        self.trace_stream = trace_stream
        self.snapshots = 0
        self._last_guidance = None

    def handle(self, state):
        self.snapshots += 1
        if self.trace_stream is not None:
            self.trace_stream.write(json.dumps(state.to_dict(), ensure_ascii=False) + "\n")
        guidance = (state.current_instruction, state.maneuver_direction, state.maneuver_index)
        if guidance != self._last_guidance or not state.is_navigating:
            print(format_state(state))
            self._last_guidance = guidance


def run_simulation(args: argparse.Namespace) -> int:
    """Load the route, configure the simulator and replay it."""
    from logger import get_logger
    from nav_settings import SimulatorSettings, SettingsValidationError
    from nav_simulator import InvalidRouteError, NavigationSimulator
    from route_model import Route, RouteFeedError
    logger = get_logger()
    try:
        settings = SimulatorSettings.from_mapping({
            'tick_interval_ms': args.interval_ms,
            'step_distance_m': args.step_distance,
            'average_speed_mps': args.speed,
            'maneuver_threshold_deg': args.threshold,
        })
    except SettingsValidationError as e:
        print("\nInvalid simulator settings:")
        for issue in e.issues:
            print(f"   - {issue.title}: {issue.message}")
        return 2
    try:
        with logger.timer("load route"):
            route = Route.from_feed(args.route)
        if route.is_empty:
            raise InvalidRouteError(f"Route {args.route} has no coordinates")
        start = parse_location(args.start) if args.start else route.start
    except (RouteFeedError, InvalidRouteError, ValueError) as e:
        print(f"\nCannot load route: {e}")
        logger.error("Route could not be loaded", exception=e, route=args.route)
        return 1
    print(f"Route '{route.title}': {len(route)} points, {route.total_distance:.0f} m")
    logger.log_user_action("replay_route", {
        'route': args.route,
        'manual': args.manual,
        'settings': settings.to_dict(),
    })
    trace_stream = open(args.trace_file, "w", encoding="utf-8") if args.trace_file else None
    try:
        printer = SnapshotPrinter(trace_stream)
        if args.manual:
            simulator = NavigationSimulator(settings, timer_driven=False)
            simulator.state_changed.connect(printer.handle)
            simulator.start(route, start)
            while simulator.is_navigating and simulator.state.tick_count < args.max_ticks:
                simulator.manual_step()
            simulator.stop()
        else:
            from PySide6.QtCore import QCoreApplication
            app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
            simulator = NavigationSimulator(settings)
            simulator.state_changed.connect(printer.handle)
            simulator.navigation_stopped.connect(lambda _reason: app.quit())
            simulator.start(route, start)
            if simulator.is_navigating:
                app.exec()
    finally:
        if trace_stream is not None:
            trace_stream.close()
    final = simulator.state
    print(f"\nDrove {final.distance_traveled:.0f} m in {final.tick_count} ticks "
          f"({printer.snapshots} snapshots)")
    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point for NavSim."""
    args = None
    try:
        args = parse_arguments(argv)
        print("\n" + "="*60)
        print("NavSim - Route Navigation Simulator")
        print("="*60 + "\n")
        print("Checking dependencies...")
        deps_ok = check_dependencies()
        if args.check_deps:
            if deps_ok:
                print("\nAll dependencies are satisfied!")
                return 0
            else:
                print("\nSome dependencies are missing!")
                return 1
        if not deps_ok:
            print("\nCannot start simulation due to missing dependencies.")
            return 1
        if not args.route:
            print("\nNo route given. Pass a JSON route fixture, see --help.")
            return 1
        from logger import setup_logger
        logger = setup_logger(
            log_dir=Path(args.log_dir) if args.log_dir else None,
            console_level=logging.DEBUG if args.debug else logging.WARNING,
        )
        if args.debug:
            print("Debug logging enabled\n")
            logger.debug("Debug logging enabled", session_id=logger.session_id)
        return run_simulation(args)
    except KeyboardInterrupt:
        print("\n\nSimulation interrupted by user")
        return 130
    except Exception as e:
        print("\nCritical error running NavSim:")
        print(f"   {type(e).__name__}: {e}")
        if args is not None and args.debug:
            print("\nDebug traceback:")
            traceback.print_exc()
        else:
            print("\nRun with --debug for detailed error information")
        return 1


if __name__ == "__main__":
    # Allow ``python .`` and ``python __main__.py`` from a checkout
    project_dir = str(Path(__file__).resolve().parent)
    if project_dir not in sys.path:
        sys.path.insert(0, project_dir)
    start_time = time.time()
    exit_code = main()
    runtime = time.time() - start_time
    print(f"\nNavSim ran for {runtime:.2f} seconds")
    sys.exit(exit_code)
