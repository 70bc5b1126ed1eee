# Reconciliation run - routes feed rows to patients and collects violations
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from ledger import PatientLedger
from logic import ComplianceValidator
from models import EnrollmentRecord, ReconciliationResult, ViolationReport, VisitRecord
from reporting_calendar import Calendar

logger = logging.getLogger(__name__)

NO_VISIT_DATA = "No Patient Data available in report"
NO_ENROLLMENT_DATA = "No Enrollment Data available"


class NoDataError(Exception):
    """One of the input feeds was empty; nothing can be validated."""


class ReconciliationRun:
    """
    One verification pass over a visit feed and an enrollment feed.

    Patients are created from the visit feed only. Enrollment rows for a
    name that never appeared there are dropped, so a patient enrolled but
    never visited does not show up in the report.
    """

    def __init__(self, calendar: Calendar):
        self.calendar = calendar
        self.patients: Dict[str, PatientLedger] = {}  # first-seen order
        self.orphan_enrollments = 0

    def find(self, name: str) -> Optional[PatientLedger]:
        # Names match exactly after trimming, whichever feed or surface they came from
        return self.patients.get(name.strip())

    def _find_or_create(self, name: str) -> PatientLedger:
        name = name.strip()
        patient = self.patients.get(name)
        if patient is None:
            patient = PatientLedger(name, self.calendar)
            self.patients[name] = patient
        return patient

    def ingest_visit(self, name: str, visit_date: date, type_code: str) -> None:
        # OutOfRangeError propagates: a visit we cannot bucket aborts the run
        self._find_or_create(name).visits.record_visit(visit_date, type_code)

    def ingest_enrollment(self, name: str, start: date, end: Optional[date] = None) -> bool:
        """Attach an enrollment period. Returns False when the patient is unknown."""
        patient = self.find(name)
        if patient is None:
            self.orphan_enrollments += 1
            logger.debug("Dropping enrollment for %r: no visits on record", name)
            return False
        patient.enrollments.add_period(start, end)
        return True

    def ingest_visits(self, rows: Iterable[VisitRecord]) -> int:
        count = 0
        for row in rows:
            self.ingest_visit(row.patientName, row.visitDate, row.typeCode)
            count += 1
        if count == 0:
            logger.warning(NO_VISIT_DATA)
            raise NoDataError(NO_VISIT_DATA)
        logger.info("Ingested %d visit rows for %d patients", count, len(self.patients))
        return count

    def ingest_enrollments(self, rows: Iterable[EnrollmentRecord]) -> int:
        count = 0
        for row in rows:
            self.ingest_enrollment(row.patientName, row.startDate, row.endDate)
            count += 1
        if count == 0:
            logger.warning(NO_ENROLLMENT_DATA)
            raise NoDataError(NO_ENROLLMENT_DATA)
        logger.info(
            "Ingested %d enrollment rows (%d without a matching patient)",
            count, self.orphan_enrollments,
        )
        return count

    def evaluate_all(self) -> ReconciliationResult:
        flagged: List[ViolationReport] = []
        for name, patient in self.patients.items():
            is_valid, reasons = ComplianceValidator(patient).evaluate()
            if is_valid:
                continue
            flagged.append(ViolationReport(
                patientName=name,
                reasons=reasons,
                enrollments=list(patient.enrollments.periods),
                weeklyCounts=patient.visits.weekly_counts(),
                monthlyCounts=patient.visits.monthly_counts(),
            ))
        result = ReconciliationResult(
            flagged=flagged,
            patientCount=len(self.patients),
            orphanEnrollmentCount=self.orphan_enrollments,
        )
        logger.info("%d of %d patients to look into", result.flaggedCount, result.patientCount)
        return result


def run_reconciliation(
    calendar: Calendar,
    visits: Iterable[VisitRecord],
    enrollments: Iterable[EnrollmentRecord],
) -> ReconciliationResult:
    """Visits first (they create patients), then enrollments, then the rules."""
    run = ReconciliationRun(calendar)
    run.ingest_visits(visits)
    run.ingest_enrollments(enrollments)
    return run.evaluate_all()
