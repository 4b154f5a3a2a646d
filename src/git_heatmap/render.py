from __future__ import annotations

import datetime as dt
from typing import Iterable

from .models import RenderConfig, StatsGrid
from .window import TimeWindow

DEFAULT_SYMBOLS = "░▒▓█"
DEFAULT_PLACEHOLDER = " "


def utf8_len(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def split_glyphs(packed: str) -> tuple[str, ...]:
    """
    Split a packed symbol string into glyphs, sizing each one from the
    leading byte of its UTF-8 encoding.
    """
    data = packed.encode("utf-8")
    glyphs: list[str] = []
    i = 0
    while i < len(data):
        n = utf8_len(data[i])
        glyphs.append(data[i : i + n].decode("utf-8", errors="replace"))
        i += n
    return tuple(glyphs)


def cell_days(window: TimeWindow, width_weeks: int) -> list[list[dt.date]]:
    """7 rows of `width_weeks` dates; row w, column i is start + w + 7 i days."""
    return [[window.day_at(w + i * 7) for i in range(max(0, width_weeks))] for w in range(7)]


def max_count(grid: StatsGrid, days: Iterable[Iterable[dt.date]]) -> int:
    best = 0
    for row in days:
        for day in row:
            best = max(best, grid.count(day))
    return best


def glyph_for(count: int, peak: int, config: RenderConfig) -> str:
    if count <= 0:
        return config.placeholder
    top = len(config.palette) - 1
    # floor(count / peak * top) in integers, so count == peak lands exactly on `top`.
    idx = min(top, (count * top) // peak)
    return config.palette[idx]


def render(grid: StatsGrid, window: TimeWindow, config: RenderConfig) -> list[str]:
    days = cell_days(window, config.width_weeks)
    peak = max_count(grid, days)
    return ["".join(glyph_for(grid.count(day), peak, config) for day in row) for row in days]


def render_text(grid: StatsGrid, window: TimeWindow, config: RenderConfig) -> str:
    return "".join(row + "\n" for row in render(grid, window, config))
