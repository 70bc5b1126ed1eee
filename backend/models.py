# Data models for visit compliance verification
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

# Fixed rule families: at least one visit per enrolled week / enrolled month
WEEKLY_VISIT_TYPES = ("SN", "HA")
MONTHLY_VISIT_TYPES = ("SW", "SC")


@dataclass(frozen=True)
class EnrollmentPeriod:
    """One enrollment span for a patient. endDate=None means ongoing."""
    startDate: date
    endDate: Optional[date] = None

    def describe(self) -> str:
        end = self.endDate.isoformat() if self.endDate else "open"
        return f"Enrolled: {self.startDate.isoformat()} to {end}"


@dataclass(frozen=True)
class VisitRecord:
    """A single row of the visit feed"""
    patientName: str
    visitDate: date
    typeCode: str  # 2 characters, e.g. "SN"


@dataclass(frozen=True)
class EnrollmentRecord:
    """A single row of the enrollment feed"""
    patientName: str
    startDate: date
    endDate: Optional[date] = None


@dataclass
class ViolationReport:
    """A patient that failed at least one visit rule"""
    patientName: str
    reasons: List[str]
    enrollments: List[EnrollmentPeriod] = field(default_factory=list)
    weeklyCounts: Dict[int, Dict[str, int]] = field(default_factory=dict)
    monthlyCounts: Dict[str, int] = field(default_factory=dict)


@dataclass
class ReconciliationResult:
    """Outcome of one reconciliation run"""
    flagged: List[ViolationReport]
    patientCount: int
    orphanEnrollmentCount: int = 0

    @property
    def flaggedCount(self) -> int:
        return len(self.flagged)


def service_type_code(raw: str) -> str:
    """Service cells read like "SN - Skilled Nursing"; the code is the first two characters."""
    return raw.strip()[:2]
