"""
Monitor listing tool.

Usage:
zm-monitors --api-url "https://zm.example.com/zm/api" --user admin --zones
"""
import argparse
import sys

from ..errors import PolygonError
from .common import add_connection_arguments, connect, run_main


def _zone_area(zone) -> str:
    try:
        return f"{zone.area:,} px"
    except PolygonError:
        return "invalid polygon"


def print_monitors(registry, with_zones: bool = False) -> None:
    print(f"{'Id':>4}  {'Name':<20} {'Function':<9} {'Enabled':<8} {'Status':<14} {'Zones':>5}")
    print("-" * 66)
    for monitor in registry:
        enabled = "yes" if monitor.enabled else "no"
        print(f"{monitor.id:>4}  {monitor.name:<20} {monitor.function:<9} {enabled:<8} "
              f"{monitor.status or 'Unknown':<14} {len(monitor.zones):>5}")
        if with_zones:
            for zone in monitor.zones:
                print(f"{'':>6}- {zone.id}: {zone.name:<18} {zone.type:<11} {zone.units:<8} {_zone_area(zone)}")


def main(args):
    session, registry = connect(args)
    with session:
        print_monitors(registry, args.zones)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="List monitors and their zones.")
    add_connection_arguments(parser)
    parser.add_argument("--zones", action="store_true", help="Also list each monitor's zones with their area.")
    return parser


def run(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return run_main(main, args)


if __name__ == "__main__":
    sys.exit(run())
