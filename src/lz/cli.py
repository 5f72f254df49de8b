"""Command-line entry point for lz."""

import argparse
import logging
import os
import sys

from rich.console import Console
from rich.text import Text

from lz.config import DEFAULT_WATCH_INTERVAL, DisplayOptions, SnapshotOptions, SortKey, ViewOptions
from lz.errors import ConfigurationError, InvalidRoot, LzError
from lz.log import LoggingConfig, configure_logging, level_from_verbosity
from lz.render import render
from lz.snapshot import SnapshotBuilder
from lz.view import ViewModel, build_view_model
from lz.watch import WatchLoop

logger = logging.getLogger(__name__)

COMMANDS = ("interactive", "fastls")
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _sort_key(value: str) -> SortKey:
    try:
        return SortKey.parse(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid sort key: {value!r} (choose from name, size, age)")


def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser.

    Options may appear before or after the subcommand and path.
    """
    p = argparse.ArgumentParser(
        prog="lz",
        description="An advanced ls alternative with interactive browsing.",
        epilog="Subcommands: 'interactive [PATH]' opens the browser, 'fastls' picks a folder "
        "with the native dialog. Use ./interactive to list a directory of that name.",
    )
    p.add_argument("targets", nargs="*", metavar="[interactive|fastls] [PATH]", help="Directory to list (default: .)")

    # --- Visibility and filtering ---
    p.add_argument("-a", "--all", action="store_true", help="Show hidden entries")
    p.add_argument("--filter", metavar="PATTERN", default=None, help="Glob on the relative path; ** spans directories")
    p.add_argument("--only-dirs", action="store_true", help="List directories only")
    p.add_argument("--only-files", action="store_true", help="List non-directories only")
    p.add_argument("-L", "--follow-links", action="store_true", help="Descend into symlinked directories in --tree")

    # --- Layout ---
    p.add_argument("-l", "--long", action="store_true", help="Long listing with kind, size and modification time")
    p.add_argument("--human", action="store_true", help="Human-readable sizes")
    p.add_argument("--tree", action="store_true", help="Recursive tree view")
    p.add_argument("--icons", action="store_true", help="Show icons")
    p.add_argument("--rainbow", action="store_true", help="Color every entry by its path")
    p.add_argument("--json", action="store_true", help="Emit JSON")

    # --- Ordering ---
    p.add_argument(
        "--sort",
        type=_sort_key,
        default=SortKey.NAME,
        metavar="{name,size,age}",
        help="Sort key (age also accepts time, mtime)",
    )
    p.add_argument("-r", "--reverse", action="store_true", help="Reverse the sort order")
    p.add_argument("--no-dirs-first", action="store_true", help="Do not group directories before files")

    # --- Aggregation ---
    p.add_argument("--du", action="store_true", help="Compute recursive directory sizes and print the total")
    p.add_argument("--extensions", action="store_true", help="Print a per-extension size breakdown")

    # --- Refresh ---
    p.add_argument("--watch", action="store_true", help="Refresh the listing periodically")
    p.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_WATCH_INTERVAL,
        metavar="SECONDS",
        help=f"Refresh interval for --watch (default: {DEFAULT_WATCH_INTERVAL:g})",
    )

    # --- Diagnostics ---
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    p.add_argument("--log-file", default=None, metavar="PATH", help="Also write logs to this file")
    return p


def split_targets(parser: argparse.ArgumentParser, targets: list[str]) -> tuple[str | None, str | None]:
    """Separate the optional subcommand from the optional path."""
    command = None
    if targets and targets[0] in COMMANDS:
        command, targets = targets[0], targets[1:]
    if command == "fastls" and targets:
        parser.error("fastls does not take a path")
    if len(targets) > 1:
        parser.error(f"expected at most one path, got {len(targets)}")
    return command, (targets[0] if targets else None)


def options_from_args(args: argparse.Namespace) -> tuple[SnapshotOptions, ViewOptions, DisplayOptions]:
    """Map parsed arguments onto the option objects."""
    snapshot_options = SnapshotOptions(
        recursive=args.tree,
        include_hidden=args.all,
        filter_glob=args.filter,
        only_dirs=args.only_dirs,
        only_files=args.only_files,
        compute_du=args.du,
        follow_links=args.follow_links,
    )
    view_options = ViewOptions(
        sort_key=args.sort,
        reverse=args.reverse,
        dirs_first=not args.no_dirs_first,
        summary=args.du or args.extensions,
    )
    display_options = DisplayOptions(
        long=args.long,
        human=args.human,
        icons=args.icons,
        rainbow=args.rainbow,
        json=args.json,
        du=args.du,
        extensions=args.extensions,
    )
    return snapshot_options, view_options, display_options


def run_listing(
    path: str,
    snapshot_options: SnapshotOptions,
    view_options: ViewOptions,
    display_options: DisplayOptions,
    watch: bool = False,
    interval: float = DEFAULT_WATCH_INTERVAL,
    console: Console | None = None,
    err_console: Console | None = None,
) -> int:
    """List ``path`` once, or every ``interval`` seconds until interrupted."""
    console = console or Console()
    err_console = err_console or Console(stderr=True)

    if not watch:
        view = build_view_model(SnapshotBuilder(), path, snapshot_options, view_options)
        render(view, display_options, console, err_console)
        return EXIT_OK

    def sink(view: ViewModel) -> None:
        if not display_options.json:
            console.clear()
        # One compact JSON document per line while watching
        render(view, display_options, console, err_console, pretty=False)
        console.file.flush()

    loop = WatchLoop(path, sink, snapshot_options, view_options, interval=interval)
    try:
        loop.run()
    except KeyboardInterrupt:
        logger.info("Watch interrupted")
    finally:
        loop.stop()
    return EXIT_OK


def run_interactive(
    path: str,
    snapshot_options: SnapshotOptions,
    view_options: ViewOptions,
    display_options: DisplayOptions,
    watch_interval: float | None = None,
) -> int:
    """Open the browser on ``path``."""
    from lz.app import BrowserApp

    start = os.path.realpath(os.path.abspath(path))
    if not os.path.isdir(start):
        raise InvalidRoot(f"Not a directory: {path}")
    app = BrowserApp(start, snapshot_options, view_options, display_options, watch_interval=watch_interval)
    app.run()
    return EXIT_OK


def _report(err_console: Console, message: str) -> None:
    err_console.print(Text(f"lz: {message}", style="bright_red"), soft_wrap=True)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the lz command."""
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    command, path = split_targets(parser, args.targets)
    err_console = Console(stderr=True)

    try:
        configure_logging(
            LoggingConfig(
                level=level_from_verbosity(args.verbose),
                log_file=args.log_file,
                textual=command == "interactive",
            )
        )
    except OSError as exc:
        _report(err_console, f"Cannot open log file {args.log_file}: {exc.strerror or exc}")
        return EXIT_FAILURE
    snapshot_options, view_options, display_options = options_from_args(args)

    # Configuration problems stop the run before anything is read
    try:
        snapshot_options.validate()
    except ConfigurationError as exc:
        _report(err_console, str(exc))
        return EXIT_CONFIG

    try:
        if command == "interactive":
            interval = args.interval if args.watch else None
            return run_interactive(path or ".", snapshot_options, view_options, display_options, interval)
        if command == "fastls":
            from lz.picker import pick_folder

            path = pick_folder()
            if path is None:
                return EXIT_OK
        return run_listing(
            path or ".",
            snapshot_options,
            view_options,
            display_options,
            watch=args.watch,
            interval=args.interval,
            err_console=err_console,
        )
    except LzError as exc:
        _report(err_console, str(exc))
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
