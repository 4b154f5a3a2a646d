from __future__ import annotations

import argparse
import datetime as dt
import sys
from pathlib import Path

from .aggregate import aggregate_paths
from .branches import STRATEGIES, strategy_for
from .config import load_config, resolve_settings
from .errors import HeatmapError, PatternCompileError, RepositoryError
from .render import render
from .window import compute_window, now_in


class _AppendPattern(argparse.Action):
    """Collect -e and -r in one list so command-line order is kept."""

    def __init__(self, option_strings, dest, kind: str, **kwargs) -> None:
        self.kind = kind
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None) -> None:
        items = list(getattr(namespace, self.dest, None) or [])
        items.append((self.kind, values))
        setattr(namespace, self.dest, items)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-heatmap",
        description="Print a calendar heatmap of commit activity across git repositories.",
    )
    parser.add_argument("-f", "--force", action="store_true", help="Skip repositories that fail instead of aborting.")
    parser.add_argument("-w", "--width", type=int, default=None, help="Window width in weeks (default 80).")
    parser.add_argument(
        "-e",
        "--email",
        dest="patterns",
        action=_AppendPattern,
        kind="email",
        metavar="EMAIL",
        help="Only count commits by this exact author email (repeatable).",
    )
    parser.add_argument(
        "-r",
        "--regex",
        dest="patterns",
        action=_AppendPattern,
        kind="regex",
        metavar="REGEX",
        help="Only count commits whose author email matches this regex (repeatable).",
    )
    parser.add_argument(
        "-W",
        "--first-day-of-week",
        type=int,
        default=None,
        help="First day of the week, 0 = Sunday .. 6 = Saturday (default 1). The window ends on the last day of the "
        "current week; the top row is the day before the first day of the week, and the window's final day "
        "(the last day of the current week) is counted but not drawn.",
    )
    parser.add_argument("-s", "--symbols", type=str, default=None, help="Palette glyphs from low to high intensity (default ░▒▓█).")
    parser.add_argument("-p", "--placeholder", type=str, default=None, help="Glyph for days without commits (default space).")
    parser.add_argument(
        "--branch-strategy",
        choices=sorted(STRATEGIES),
        default=None,
        help="How to pick the branch to walk: 'ordered' tries origin/HEAD, origin/master, master, HEAD; "
        "'remote-head' uses the branch a remote HEAD points at, then master.",
    )
    tz = parser.add_mutually_exclusive_group()
    tz.add_argument("--utc", dest="time_reference", action="store_const", const="utc", help="Bucket commits by UTC day.")
    tz.add_argument(
        "--local-time",
        dest="time_reference",
        action="store_const",
        const="local",
        help="Bucket commits by local day (default).",
    )
    parser.add_argument("-j", "--jobs", type=int, default=None, help="Repositories to read in parallel (default 1).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Report skipped repositories on stderr.")
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON config file with defaults.")
    parser.add_argument("repos", nargs="+", metavar="repo", help="Repository path(s).")
    parser.set_defaults(patterns=[], time_reference=None)
    return parser


def main(argv: list[str] | None = None, *, now: dt.datetime | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else {}
        settings = resolve_settings(args, config)
    except PatternCompileError as e:
        print(str(e), file=sys.stderr)
        return 1
    except HeatmapError as e:
        parser.error(str(e))

    if now is None:
        now = now_in(settings.time_reference)
    window = compute_window(now, settings.render.width_weeks, settings.render.first_day_of_week)

    try:
        grid = aggregate_paths(
            list(settings.repos),
            window=window,
            author_filter=settings.author_filter,
            strategy=strategy_for(settings.branch_strategy),
            reference=settings.time_reference,
            force=settings.force,
            jobs=settings.jobs,
            verbose=settings.verbose,
        )
    except RepositoryError as e:
        print(str(e), file=sys.stderr)
        return 1

    for row in render(grid, window, settings.render):
        print(row)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
