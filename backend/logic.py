# Business logic - minimum visit frequency rules
from __future__ import annotations

from typing import List, Tuple

from ledger import PatientLedger
from models import MONTHLY_VISIT_TYPES, WEEKLY_VISIT_TYPES

# At least one visit of each type per enrolled week / enrolled month
MIN_WEEKLY_VISITS = 1
MIN_MONTHLY_VISITS = 1


def weekly_reason(week: int, type_code: str) -> str:
    return f"Week {week} {type_code} visits"


def monthly_reason(type_code: str) -> str:
    return f"Monthly {type_code} visits"


class ComplianceValidator:
    """
    Applies the weekly (SN, HA) and monthly (SW, SC) rules to one patient.

    Weeks or months the patient was not enrolled for in full are skipped:
    they produce no violation and earn no credit.
    """

    def __init__(self, patient: PatientLedger):
        self.patient = patient

    def validate_weekly_types(self) -> List[str]:
        reasons: List[str] = []
        enrollments = self.patient.enrollments
        visits = self.patient.visits
        for week in self.patient.calendar.weeks:
            if not enrollments.enrolled_during_week(week):
                continue
            for type_code in WEEKLY_VISIT_TYPES:
                if visits.count_for(week, type_code) < MIN_WEEKLY_VISITS:
                    reasons.append(weekly_reason(week, type_code))
        return reasons

    def validate_monthly_types(self) -> List[str]:
        reasons: List[str] = []
        if not self.patient.enrollments.enrolled_during_month():
            return reasons
        for type_code in MONTHLY_VISIT_TYPES:
            if self.patient.visits.monthly_count_for(type_code) < MIN_MONTHLY_VISITS:
                reasons.append(monthly_reason(type_code))
        return reasons

    def evaluate(self) -> Tuple[bool, List[str]]:
        """Returns (is_valid, reasons). Reads counts only, so it is safe to call repeatedly."""
        reasons = self.validate_weekly_types() + self.validate_monthly_types()
        return not reasons, reasons
