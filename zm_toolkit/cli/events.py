"""
Event search tool.

Lists, counts or downloads the events recorded in a time window, optionally
restricted to some monitors and to events whose notes match a pattern.

Usage:
zm-events --api-url "https://zm.example.com/zm/api" --user admin \
    --since "yesterday 18:00" --until "today 06:00" \
    --monitor Lawn --monitor Patio --notes "person" \
    --images ./staging --concat night.mp4

Prefix monitors with '!' to search every active monitor except those
("--monitor '!Lawn'"), and prefix the notes pattern with '!' to negate it.
"""
import argparse
import sys
from pathlib import Path

from .. import media
from ..paginator import fetch_all_events
from ..query import QueryBuilder, TimeWindow
from ..registry import EntityResolver
from ..settings import EVENT_TIME_FORMAT
from .common import add_connection_arguments, connect, logger, run_main

DEFAULT_SINCE = "1 day ago"


def print_event_table(events, monitor_names) -> None:
    print(f"{'Event':>8}  {'Monitor':<20} {'Start':<19} {'Frames':>7}  Notes")
    print("-" * 80)
    for event in events:
        start = event.start_time.strftime(EVENT_TIME_FORMAT) if event.start_time else "N/A"
        monitor = monitor_names.get(event.monitor_id, str(event.monitor_id))
        print(f"{event.id:>8}  {monitor:<20} {start:<19} {event.frames:>7}  {event.notes}")
    print("-" * 80)
    print(f"{len(events):,} events")


def main(args):
    """Main execution logic for the event tool."""
    # The window is checked before anything touches the network.
    window = TimeWindow.parse(args.since, args.until)
    logger.info(f"Time range: {window.start:{EVENT_TIME_FORMAT}} to {window.end:{EVENT_TIME_FORMAT}}")

    session, registry = connect(args)
    with session:
        query = QueryBuilder(EntityResolver(registry)).build(window, selectors=args.monitor, notes=args.notes)
        events = fetch_all_events(session, query)
        monitor_names = {m.id: m.name for m in registry}

        if args.count:
            print(len(events))
            return 0

        kind = media.VIDEO if args.video else media.IMAGE if args.images else None
        if kind is None:
            print_event_table(events, monitor_names)
            return 0

        dest_dir = Path(args.video or args.images)
        staged = media.stage_event_media(session, events, dest_dir, kind=kind, frame=args.frame,
                                         monitor_names=monitor_names)

    if args.concat:
        media.concat_media(staged, args.concat, kind=kind, fps=args.fps)
    else:
        for path in staged:
            print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search, count and download recorded events.")
    add_connection_arguments(parser)
    parser.add_argument("--since", default=DEFAULT_SINCE,
                        help=f"Start of the window, e.g. '2021-01-01 08:00' or '3 hours ago' (default: {DEFAULT_SINCE}).")
    parser.add_argument("--until", help="End of the window (default: now).")
    parser.add_argument("-m", "--monitor", action="append", default=[],
                        help="Monitor id or name to search; repeatable. Prefix with '!' to exclude instead.")
    parser.add_argument("--notes", help="Regular expression the event notes must match; prefix with '!' to negate.")

    action = parser.add_mutually_exclusive_group()
    action.add_argument("--list", action="store_true", help="Print a table of matching events (default).")
    action.add_argument("--count", action="store_true", help="Print only the number of matching events.")
    action.add_argument("--images", metavar="DIR", help="Download one image per event into DIR.")
    action.add_argument("--video", metavar="DIR", help="Download each event's video into DIR.")

    parser.add_argument("--frame", default=media.DEFAULT_FRAME,
                        help="Frame to download with --images: 'snapshot', 'alarm' or a frame number.")
    parser.add_argument("--concat", metavar="OUT", help="After downloading, join the files into one video with ffmpeg.")
    parser.add_argument("--fps", type=float, default=media.DEFAULT_FPS,
                        help=f"Frames per second when joining images (default: {media.DEFAULT_FPS:g}).")
    return parser


def run(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.concat and not (args.images or args.video):
        parser.error("--concat needs --images or --video")
    return run_main(main, args)


if __name__ == "__main__":
    sys.exit(run())
