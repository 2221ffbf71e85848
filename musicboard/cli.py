import argparse
import logging
import sys
from pathlib import Path

from musicboard import __version__
import musicboard.config as cfg_module
import musicboard.devserver as devserver
import musicboard.store as store
from musicboard.dates import format_date_label, normalize_date, today_iso
from musicboard.generator.build import build_site, empty_message
from musicboard.models import GENRES, FilterState, Selection, load_events, load_venues
from musicboard.pipeline import build_view


def _today_arg(value: str) -> str:
    d = normalize_date(value)
    if d is None:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD or MM/DD/YYYY, got {value!r}")
    return d


def _filter_state(args) -> FilterState:
    selection = None
    if args.venue:
        selection = Selection(kind="venue", id=args.venue)
    elif args.partner:
        selection = Selection(kind="partner", id=args.partner)

    if args.no_genres:
        genres = frozenset()
    elif args.genre:
        genres = frozenset(args.genre)
    else:
        genres = frozenset(GENRES)

    return FilterState(selection=selection, genres=genres, search=args.search or "")


def _list(args, cfg):
    files = cfg_module.get_data_files(cfg)
    events = load_events(store.read_json_array(files.events))
    venues = {v.id: v for v in load_venues(store.read_json_array(files.venues))}

    state = _filter_state(args)
    groups = build_view(events, state, args.today or today_iso())

    if not groups:
        print(empty_message(state))
        return

    for group in groups:
        print(format_date_label(group.date))
        for event in group.events:
            venue = venues.get(event.venue_id) if event.venue_id else None
            venue_name = venue.name if venue and venue.name else "Venue TBA"
            print(f"  {event.time or 'Time TBA':>9}  {event.title} @ {venue_name}")
        print()


def _generate(args, cfg):
    output_dir = cfg_module.get_output_dir(cfg)
    build_site(cfg, output_dir, today=args.today)
    print(f"Site generated in '{output_dir}/'.")


def _dev_writer(args, cfg):
    host, port = cfg_module.get_devserver(cfg)
    devserver.run(cfg_module.get_data_files(cfg), args.host or host, args.port or port)


def main():
    parser = argparse.ArgumentParser(
        prog="mb",
        description="Live music bulletin board",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config", default="config.toml", metavar="PATH",
        help="Path to config.toml (default: config.toml)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # list
    sp_list = subparsers.add_parser("list", help="Print upcoming events grouped by date")
    selector = sp_list.add_mutually_exclusive_group()
    selector.add_argument("--venue", metavar="ID", help="Only events at this venue")
    selector.add_argument("--partner", metavar="ID", help="Only events with this partner")
    genre_group = sp_list.add_mutually_exclusive_group()
    genre_group.add_argument(
        "--genre", action="append", metavar="GENRE",
        help="Only events in this genre (repeatable). Known: " + ", ".join(GENRES),
    )
    genre_group.add_argument("--no-genres", action="store_true", help="Select no genres (shows nothing)")
    sp_list.add_argument("--search", metavar="TEXT", help="Match event titles containing TEXT")
    sp_list.add_argument("--today", type=_today_arg, metavar="DATE", help="Treat DATE as today")

    # generate
    sp_gen = subparsers.add_parser("generate", help="Generate the static website from the data files")
    sp_gen.add_argument("--today", type=_today_arg, metavar="DATE", help="Treat DATE as today")

    # dev-writer
    sp_dev = subparsers.add_parser("dev-writer", help="Run the local data editing service")
    sp_dev.add_argument("--host", metavar="HOST", help="Bind address (default from config)")
    sp_dev.add_argument("--port", type=int, metavar="PORT", help="Port (default from config)")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        cfg = cfg_module.load(Path(args.config))
    except (OSError, ValueError) as exc:
        print(f"Error: could not load config ({exc}).", file=sys.stderr)
        sys.exit(1)

    if args.command == "list":
        _list(args, cfg)
    elif args.command == "generate":
        _generate(args, cfg)
    elif args.command == "dev-writer":
        _dev_writer(args, cfg)


if __name__ == "__main__":
    main()
