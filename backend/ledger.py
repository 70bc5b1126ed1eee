# Per-patient state: enrollment periods and visit counts
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from models import MONTHLY_VISIT_TYPES, EnrollmentPeriod
from reporting_calendar import Calendar


class EnrollmentSet:
    """A patient's enrollment periods, kept sorted by start date."""

    def __init__(self, calendar: Calendar):
        self._calendar = calendar
        self.periods: List[EnrollmentPeriod] = []

    def add_period(self, start: date, end: Optional[date] = None) -> EnrollmentPeriod:
        # Overlaps are kept as-is; coverage is "any period covers"
        period = EnrollmentPeriod(startDate=start, endDate=end)
        self.periods.append(period)
        self.periods.sort(key=lambda p: p.startDate)
        return period

    def enrolled_during_week(self, week: int) -> bool:
        return any(
            self._calendar.week_covers_interval(p.startDate, p.endDate, week)
            for p in self.periods
        )

    def enrolled_during_month(self) -> bool:
        return any(
            self._calendar.month_covers_interval(p.startDate, p.endDate)
            for p in self.periods
        )

    def __len__(self) -> int:
        return len(self.periods)


class VisitLedger:
    """
    Visit counts for one patient.

    Monthly types are counted for the whole month; everything else is
    bucketed into the calendar week the visit falls in.
    """

    def __init__(self, calendar: Calendar):
        self._calendar = calendar
        self._weekly: Dict[int, Dict[str, int]] = {}
        self._monthly: Dict[str, int] = {}

    def record_visit(self, visit_date: date, type_code: str) -> None:
        if type_code in MONTHLY_VISIT_TYPES:
            self._monthly[type_code] = self._monthly.get(type_code, 0) + 1
            return
        # Raises OutOfRangeError for dates before the first week
        week = self._calendar.week_index_of(visit_date)
        counts = self._weekly.setdefault(week, {})
        counts[type_code] = counts.get(type_code, 0) + 1

    def count_for(self, week: int, type_code: str) -> int:
        return self._weekly.get(week, {}).get(type_code, 0)

    def monthly_count_for(self, type_code: str) -> int:
        return self._monthly.get(type_code, 0)

    def weekly_counts(self) -> Dict[int, Dict[str, int]]:
        """Copy of the per-week counts, every calendar week present."""
        return {week: dict(self._weekly.get(week, {})) for week in self._calendar.weeks}

    def monthly_counts(self) -> Dict[str, int]:
        return dict(self._monthly)


class PatientLedger:
    """Everything accumulated for one patient during a run."""

    def __init__(self, name: str, calendar: Calendar):
        self.name = name
        self.calendar = calendar
        self.enrollments = EnrollmentSet(calendar)
        self.visits = VisitLedger(calendar)

    def __repr__(self) -> str:
        return f"PatientLedger(name={self.name!r}, enrollments={len(self.enrollments)})"
