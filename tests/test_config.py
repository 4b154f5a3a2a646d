from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from git_heatmap.cli import _build_parser
from git_heatmap.config import load_config, resolve_settings
from git_heatmap.errors import PatternCompileError, UsageError
from git_heatmap.identity import ExactEmail, RegexEmail


def _args(*argv: str) -> argparse.Namespace:
    return _build_parser().parse_args([*argv, "repo"])


def test_defaults() -> None:
    s = resolve_settings(_args(), {})
    assert s.render.width_weeks == 80
    assert s.render.first_day_of_week == 1
    assert s.render.palette == ("░", "▒", "▓", "█")
    assert s.render.placeholder == " "
    assert s.author_filter.patterns == ()
    assert s.branch_strategy == "ordered"
    assert s.time_reference == "local"
    assert s.force is False
    assert s.jobs == 1
    assert s.repos == (Path("repo"),)


def test_patterns_keep_command_line_order() -> None:
    s = resolve_settings(_args("-r", "^bot", "-e", "a@b.com", "-r", "x$"), {"emails": ["cfg@b.com"]})
    kinds = [type(p) for p in s.author_filter.patterns]
    assert kinds == [ExactEmail, RegexEmail, ExactEmail, RegexEmail]
    assert s.author_filter.patterns[0] == ExactEmail("cfg@b.com")
    assert s.author_filter.patterns[1].source == "^bot"


def test_flags_override_config() -> None:
    config = {"width": 10, "first_day_of_week": 0, "branch_strategy": "remote-head", "time_reference": "utc", "jobs": 4}
    s = resolve_settings(_args("-w", "3", "--local-time", "--branch-strategy", "ordered"), config)
    assert s.render.width_weeks == 3
    assert s.render.first_day_of_week == 0
    assert s.branch_strategy == "ordered"
    assert s.time_reference == "local"
    assert s.jobs == 4


def test_invalid_config_values() -> None:
    with pytest.raises(UsageError):
        resolve_settings(_args(), {"width": "wide"})
    with pytest.raises(UsageError):
        resolve_settings(_args(), {"time_reference": "mars"})
    with pytest.raises(UsageError):
        resolve_settings(_args(), {"emails": "a@b.com"})
    with pytest.raises(UsageError):
        resolve_settings(_args("-j", "0"), {})
    with pytest.raises(PatternCompileError):
        resolve_settings(_args(), {"regexes": ["*"]})
    with pytest.raises(UsageError):
        resolve_settings(_args(), {"force": "false"})
    with pytest.raises(UsageError):
        resolve_settings(_args(), {"force": 1})
    with pytest.raises(UsageError):
        resolve_settings(_args("-w", "200000"), {})
    with pytest.raises(UsageError):
        resolve_settings(_args(), {"width": 10**9})
    assert resolve_settings(_args(), {"force": True}).force is True


def test_load_config(tmp_path: Path) -> None:
    assert load_config(tmp_path / "missing.json") == {}
    p = tmp_path / "c.json"
    p.write_text(json.dumps({"width": 12}), encoding="utf-8")
    assert load_config(p) == {"width": 12}
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(UsageError):
        load_config(p)
    p.write_text("{nope", encoding="utf-8")
    with pytest.raises(UsageError):
        load_config(p)
