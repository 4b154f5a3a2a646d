from __future__ import annotations

import dataclasses
import datetime as dt


@dataclasses.dataclass(frozen=True)
class CommitRecord:
    sha: str
    author_email: str
    author_timestamp: int  # seconds since epoch


@dataclasses.dataclass(frozen=True)
class RenderConfig:
    width_weeks: int = 80
    first_day_of_week: int = 1  # 0 = Sunday
    palette: tuple[str, ...] = ("░", "▒", "▓", "█")
    placeholder: str = " "

    def __post_init__(self) -> None:
        if not self.palette:
            raise ValueError("palette needs at least one glyph")
        if not 0 <= self.first_day_of_week <= 6:
            raise ValueError(f"first day of week must be in 0..6, got {self.first_day_of_week}")


class StatsGrid:
    """
    Commit counter indexed by (year_offset, month, day).

    `year_offset` counts back from the window's anchor year (0 = anchor year),
    `month` is 0-based and `day` is the day of month (1..31).
    """

    MONTHS = 12
    DAYS = 32  # index 0 unused

    def __init__(self, anchor_year: int, years: int) -> None:
        if years < 1:
            raise ValueError(f"grid needs at least one year, got {years}")
        self.anchor_year = anchor_year
        self.years = years
        self._cells = [[[0] * self.DAYS for _ in range(self.MONTHS)] for _ in range(years)]

    @classmethod
    def like(cls, other: StatsGrid) -> StatsGrid:
        return cls(other.anchor_year, other.years)

    def _index(self, day: dt.date) -> tuple[int, int, int] | None:
        offset = self.anchor_year - day.year
        if offset < 0 or offset >= self.years:
            return None
        return offset, day.month - 1, day.day

    def get(self, year_offset: int, month: int, day: int) -> int:
        return self._cells[year_offset][month][day]

    def count(self, day: dt.date) -> int:
        idx = self._index(day)
        if idx is None:
            return 0
        y, m, d = idx
        return self._cells[y][m][d]

    def increment(self, day: dt.date, n: int = 1) -> None:
        idx = self._index(day)
        if idx is None:
            raise ValueError(f"{day.isoformat()} is outside the grid years {self.anchor_year - self.years + 1}..{self.anchor_year}")
        y, m, d = idx
        self._cells[y][m][d] += n

    def merge(self, other: StatsGrid) -> None:
        if (other.anchor_year, other.years) != (self.anchor_year, self.years):
            raise ValueError("cannot merge grids of different shape")
        for y in range(self.years):
            for m in range(self.MONTHS):
                row = self._cells[y][m]
                src = other._cells[y][m]
                for d in range(self.DAYS):
                    row[d] += src[d]

    def total(self) -> int:
        return sum(sum(sum(days) for days in months) for months in self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatsGrid):
            return NotImplemented
        return (self.anchor_year, self.years, self._cells) == (other.anchor_year, other.years, other._cells)
