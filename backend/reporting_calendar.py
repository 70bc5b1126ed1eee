# Reporting calendar - week boundaries and coverage checks for one month
from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

MIN_WEEKS = 4
MAX_WEEKS = 5


class CalendarConfigError(ValueError):
    """Week boundaries or reporting month are unusable. Fatal before ingestion."""


class OutOfRangeError(ValueError):
    """A date falls before the first week boundary and cannot be bucketed."""


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of the given month"""
    # IllegalMonthError for the month, plain ValueError for a year outside date's range
    try:
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)
    except ValueError as exc:
        raise CalendarConfigError(f"Invalid reporting month: {year}-{month}") from exc


class Calendar:
    """
    A reporting month split into 4 or 5 weeks.

    Week i covers [week_starts[i], week_starts[i+1]); the last week is
    unbounded above. Week numbers are 1-based throughout.
    """

    def __init__(
        self,
        week_starts: Sequence[date],
        year: Optional[int] = None,
        month: Optional[int] = None,
    ):
        starts = tuple(week_starts)
        if not MIN_WEEKS <= len(starts) <= MAX_WEEKS:
            raise CalendarConfigError(
                f"Expected {MIN_WEEKS} or {MAX_WEEKS} week boundaries, got {len(starts)}"
            )
        for earlier, later in zip(starts, starts[1:]):
            if not earlier < later:
                raise CalendarConfigError(
                    f"Week boundaries must be strictly increasing: {earlier} then {later}"
                )

        if year is None or month is None:
            year, month = starts[0].year, starts[0].month

        self._starts = starts
        self.month_start, self.month_end = month_bounds(year, month)
        logger.info(
            "Calendar %s..%s with %d weeks starting %s",
            self.month_start, self.month_end, len(starts),
            ", ".join(d.isoformat() for d in starts),
        )

    @property
    def week_starts(self) -> Tuple[date, ...]:
        return self._starts

    @property
    def week_count(self) -> int:
        return len(self._starts)

    @property
    def weeks(self) -> range:
        return range(1, self.week_count + 1)

    def week_start(self, week: int) -> Optional[date]:
        """Boundary for a 1-based week, or None if the calendar doesn't define it."""
        if 1 <= week <= self.week_count:
            return self._starts[week - 1]
        return None

    def week_index_of(self, day: date) -> int:
        """Week number (1..4 or 1..5) containing `day`."""
        if day < self._starts[0]:
            raise OutOfRangeError(
                f"{day.isoformat()} is before the first week boundary {self._starts[0].isoformat()}"
            )
        week = 1
        for boundary in self._starts[1:]:
            if day < boundary:
                break
            week += 1
        return week

    def week_covers_interval(self, start: date, end: Optional[date], week: int) -> bool:
        """True if the enrollment [start, end] (end=None is open) contains the whole week."""
        week_start = self.week_start(week)
        if week_start is None or start > week_start:
            return False
        if end is None:
            return True

        if week < 4:
            return self.week_start(week + 1) <= end
        if week == 4:
            week_5 = self.week_start(5)
            upper = week_5 if week_5 is not None else self.month_end
            return upper <= end
        # Week 5 has no boundary after it; only its start is checked
        return week_start <= end

    def month_covers_interval(self, start: date, end: Optional[date]) -> bool:
        """True if the enrollment spans the entire reporting month."""
        return start <= self.month_start and (end is None or self.month_end <= end)
