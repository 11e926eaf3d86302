#!/usr/bin/env python3
"""
SAILROUTE CLI Tool.

Command-line interface for routing tasks:
- Solve the reference crossing
- Inspect the vessel polar table
- Run the API server

Usage:
    sailroute route-demo --pruning dominance
    python -m api.cli show-polar --polar my_boat.csv
    python -m api.cli serve --port 8000
"""
import argparse
import sys
from typing import Optional

# Ensure imports work
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sailroute.config import PRUNING_MODES, settings


def _load_polar(polar_path: Optional[str]):
    from sailroute.optimization.sailing_polar import PolarDataError, load_polar

    path = polar_path or settings.polar_path
    try:
        return load_polar(path)
    except PolarDataError as e:
        print(f"\nError: {e}")
        sys.exit(1)


def route_demo(
    pruning: Optional[str] = None,
    max_iterations: Optional[int] = None,
    slices: int = 200,
    polar_path: Optional[str] = None,
) -> None:
    """Solve the reference crossing and print the route."""
    from sailroute.optimization.frontier_router import minimum_time_route
    from sailroute.optimization.scenario import build_reference_problem

    polar = _load_polar(polar_path)
    try:
        problem = build_reference_problem(
            slices=slices,
            allow_repeat_visits=settings.allow_repeat_visits,
            time_interval=settings.time_interval_min,
        )
    except ValueError as e:
        # RoutingProblemError included
        print(f"\nError: {e}")
        sys.exit(1)

    pruning = pruning or settings.pruning
    print(f"\nSolving reference crossing {tuple(problem.start)} -> {tuple(problem.finish)} "
          f"({len(problem.timeframe)} slices of {problem.time_interval:g} min, {pruning} pruning, "
          f"polar {polar.name})...")
    result = minimum_time_route(problem, polar, max_iterations=max_iterations, pruning=pruning)

    if not result.found:
        print(f"\nNo route found (sentinel duration {result.duration:g} min).")
        sys.exit(2)

    grid = problem.timeframe[0]
    print("\n" + "=" * 60)
    print("MINIMUM-TIME ROUTE")
    print("=" * 60)
    print(f"\nDuration: {result.duration:.4f} min ({result.steps} steps)")
    print(f"\n{'Step':<6} {'Row':<5} {'Col':<5} {'Lat':>10} {'Lon':>11}")
    print("-" * 40)
    for i, coord in enumerate(result.path):
        pos = grid.position(coord)
        print(f"{i:<6} {coord.row:<5} {coord.col:<5} {pos.lat:>10.4f} {pos.lon:>11.4f}")
    print("=" * 60 + "\n")


def show_polar(polar_path: Optional[str] = None) -> None:
    """Print the polar table."""
    polar = _load_polar(polar_path)
    summary = polar.summary()

    print("\n" + "=" * 80)
    print(f"POLAR: {summary['name']}")
    print("=" * 80)
    header = "TWA\\TWS".ljust(8) + "".join(f"{w:>7g}" for w in polar.winds)
    print(header)
    print("-" * len(header))
    for angle, row in zip(polar.angles, polar.speeds):
        print(f"{angle:<8g}" + "".join(f"{v:>7.2f}" for v in row))
    print(f"\nBoat speed range: {summary['min_speed_kts']:.2f}-{summary['max_speed_kts']:.2f} kts\n")


def serve(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False) -> None:
    """Run the API server."""
    import uvicorn
    from api.config import settings as api_settings

    uvicorn.run(
        "api.main:app",
        host=host or api_settings.api_host,
        port=port or api_settings.api_port,
        reload=reload,
        log_level=api_settings.log_level.lower(),
    )


def main():
    parser = argparse.ArgumentParser(
        description="SAILROUTE CLI Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Solve the reference crossing with dominance pruning:
    python -m api.cli route-demo --pruning dominance

  Solve it over a shorter timeframe:
    python -m api.cli route-demo --slices 50

  Show the bundled polar table:
    python -m api.cli show-polar

  Run the API server:
    python -m api.cli serve --port 8000
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # route-demo
    demo_parser = subparsers.add_parser("route-demo", help="Solve the reference crossing")
    demo_parser.add_argument(
        "--pruning",
        choices=PRUNING_MODES,
        help=f"Frontier pruning mode (default: {settings.pruning})"
    )
    demo_parser.add_argument(
        "--max-iterations",
        type=int,
        help=f"Expansion rounds before giving up (default: {settings.max_iterations})"
    )
    demo_parser.add_argument(
        "--slices",
        type=int,
        default=200,
        help=f"Number of {settings.time_interval_min:g}-minute time slices (default: 200)"
    )
    demo_parser.add_argument("--polar", help="Polar table file (default: bundled keelboat)")

    # show-polar
    polar_parser = subparsers.add_parser("show-polar", help="Print the polar table")
    polar_parser.add_argument("--polar", help="Polar table file (default: bundled keelboat)")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args()
    settings.configure_logging()

    if args.command == "route-demo":
        route_demo(args.pruning, args.max_iterations, args.slices, args.polar)
    elif args.command == "show-polar":
        show_polar(args.polar)
    elif args.command == "serve":
        serve(args.host, args.port, args.reload)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
