from __future__ import annotations

import argparse
import dataclasses
import json
from pathlib import Path

from .branches import STRATEGIES
from .errors import UsageError
from .identity import AuthorFilter, ExactEmail, FilterPattern, compile_regex
from .models import RenderConfig
from .render import DEFAULT_PLACEHOLDER, DEFAULT_SYMBOLS, split_glyphs
from .window import MAX_WIDTH_WEEKS, TIME_REFERENCES

DEFAULT_WIDTH = 80
DEFAULT_FIRST_DAY_OF_WEEK = 1


@dataclasses.dataclass(frozen=True)
class HeatmapSettings:
    repos: tuple[Path, ...]
    render: RenderConfig
    author_filter: AuthorFilter
    branch_strategy: str = "ordered"
    time_reference: str = "local"
    force: bool = False
    jobs: int = 1
    verbose: bool = False


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise UsageError(f"{config_path}: invalid JSON: {e}") from e
    if not isinstance(config, dict):
        raise UsageError(f"{config_path}: expected a JSON object")
    return config


def _config_int(config: dict, key: str, default: int) -> int:
    value = config.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise UsageError(f"config key {key!r} must be an integer, got {value!r}")
    return value


def _config_str(config: dict, key: str, default: str) -> str:
    value = config.get(key, default)
    if not isinstance(value, str):
        raise UsageError(f"config key {key!r} must be a string, got {value!r}")
    return value


def _config_bool(config: dict, key: str, default: bool) -> bool:
    value = config.get(key, default)
    if not isinstance(value, bool):
        raise UsageError(f"config key {key!r} must be true or false, got {value!r}")
    return value


def _config_str_list(config: dict, key: str) -> list[str]:
    value = config.get(key, []) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise UsageError(f"config key {key!r} must be a list of strings, got {value!r}")
    return list(value)


def _pick(cli_value, fallback):
    return fallback if cli_value is None else cli_value


def build_patterns(pairs: list[tuple[str, str]]) -> list[FilterPattern]:
    """Turn ("email" | "regex", text) pairs into patterns, compiling regexes now."""
    out: list[FilterPattern] = []
    for kind, text in pairs:
        if kind == "email":
            out.append(ExactEmail(text))
        else:
            out.append(compile_regex(text))
    return out


def resolve_settings(args: argparse.Namespace, config: dict) -> HeatmapSettings:
    """
    Merge parsed flags over config values over built-in defaults.

    Raises UsageError for out-of-range values and PatternCompileError for a
    malformed regex, so nothing fails later during aggregation.
    """
    width = _pick(args.width, _config_int(config, "width", DEFAULT_WIDTH))
    if width > MAX_WIDTH_WEEKS:
        raise UsageError(f"width must be at most {MAX_WIDTH_WEEKS} weeks, got {width}")
    first_day = _pick(args.first_day_of_week, _config_int(config, "first_day_of_week", DEFAULT_FIRST_DAY_OF_WEEK))
    if not 0 <= first_day <= 6:
        raise UsageError(f"first day of week must be in 0..6, got {first_day}")

    symbols = _pick(args.symbols, _config_str(config, "symbols", DEFAULT_SYMBOLS))
    palette = split_glyphs(symbols)
    if not palette:
        raise UsageError("symbol palette must contain at least one glyph")
    placeholder = _pick(args.placeholder, _config_str(config, "placeholder", DEFAULT_PLACEHOLDER))

    strategy = _pick(args.branch_strategy, _config_str(config, "branch_strategy", "ordered"))
    if strategy not in STRATEGIES:
        raise UsageError(f"unknown branch strategy {strategy!r} (expected one of: {', '.join(STRATEGIES)})")

    reference = _pick(args.time_reference, _config_str(config, "time_reference", "local"))
    if reference not in TIME_REFERENCES:
        raise UsageError(f"unknown time reference {reference!r} (expected one of: {', '.join(TIME_REFERENCES)})")

    jobs = _pick(args.jobs, _config_int(config, "jobs", 1))
    if jobs < 1:
        raise UsageError(f"jobs must be at least 1, got {jobs}")

    pairs = [("email", e) for e in _config_str_list(config, "emails")]
    pairs += [("regex", r) for r in _config_str_list(config, "regexes")]
    pairs += list(args.patterns or [])

    return HeatmapSettings(
        repos=tuple(Path(p) for p in args.repos),
        render=RenderConfig(width_weeks=width, first_day_of_week=first_day, palette=palette, placeholder=placeholder),
        author_filter=AuthorFilter(tuple(build_patterns(pairs))),
        branch_strategy=strategy,
        time_reference=reference,
        force=bool(args.force) or _config_bool(config, "force", False),
        jobs=jobs,
        verbose=bool(args.verbose),
    )
