from __future__ import annotations

import dataclasses
import datetime as dt

TIME_REFERENCES = ("local", "utc")
# 100k weeks back from any current date stays well above date.min.
MAX_WIDTH_WEEKS = 100_000


@dataclasses.dataclass(frozen=True)
class TimeWindow:
    start: dt.datetime  # inclusive, 00:00:00
    end: dt.datetime  # inclusive, 23:59:59
    anchor_year: int
    years_spanned: int
    width_weeks: int
    first_day_of_week: int

    def contains(self, when: dt.datetime) -> bool:
        return self.start <= when <= self.end

    def day_at(self, offset: int) -> dt.date:
        return self.start.date() + dt.timedelta(days=offset)


def sunday_based_weekday(day: dt.date) -> int:
    # date.weekday() is Monday = 0; the CLI speaks Sunday = 0.
    return (day.weekday() + 1) % 7


def now_in(reference: str) -> dt.datetime:
    if reference == "utc":
        return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
    return dt.datetime.now()


def from_timestamp(ts: int, reference: str) -> dt.datetime:
    """Naive wall-clock datetime of an epoch timestamp in the given reference."""
    if reference == "utc":
        return dt.datetime.fromtimestamp(ts, dt.timezone.utc).replace(tzinfo=None)
    return dt.datetime.fromtimestamp(ts)


def compute_window(now: dt.datetime, width_weeks: int, first_day_of_week: int) -> TimeWindow:
    if not 0 <= first_day_of_week <= 6:
        raise ValueError(f"first day of week must be in 0..6, got {first_day_of_week}")
    if width_weeks > MAX_WIDTH_WEEKS:
        raise ValueError(f"width must be at most {MAX_WIDTH_WEEKS} weeks, got {width_weeks}")
    today = now.date()
    forward = 6 - (sunday_based_weekday(today) + 7 - first_day_of_week) % 7
    end_day = today + dt.timedelta(days=forward)
    start_day = end_day - dt.timedelta(days=7 * max(0, width_weeks))

    end = dt.datetime.combine(end_day, dt.time(23, 59, 59))
    start = dt.datetime.combine(start_day, dt.time(0, 0, 0))
    return TimeWindow(
        start=start,
        end=end,
        anchor_year=end.year,
        years_spanned=end.year - start.year + 1,
        width_weeks=max(0, width_weeks),
        first_day_of_week=first_day_of_week,
    )
