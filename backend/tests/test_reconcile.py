"""
End-to-end reconciliation tests: feeds in, flagged patients out
"""
from datetime import date

import pytest

from models import EnrollmentRecord, VisitRecord
from reconcile import NO_ENROLLMENT_DATA, NO_VISIT_DATA, NoDataError, ReconciliationRun, run_reconciliation
from reporting_calendar import OutOfRangeError
from seed import SAMPLE_WEEK_STARTS, seed_data
from tests.conftest import record_full_week_visits


class TestIngestion:
    """Routing visit and enrollment rows to patients"""

    def test_patients_created_lazily_in_first_seen_order(self, march_run):
        march_run.ingest_visit("Zed", date(2012, 3, 2), "SN")
        march_run.ingest_visit("Amy", date(2012, 3, 2), "SN")
        march_run.ingest_visit("Zed", date(2012, 3, 9), "HA")
        assert list(march_run.patients) == ["Zed", "Amy"]
        assert march_run.patients["Zed"].visits.count_for(2, "HA") == 1

    def test_enrollment_attached_to_known_patient(self, march_run):
        march_run.ingest_visit("Amy", date(2012, 3, 2), "SN")
        assert march_run.ingest_enrollment("Amy", date(2012, 3, 1), None) is True
        assert len(march_run.patients["Amy"].enrollments) == 1

    def test_orphan_enrollment_dropped(self, march_run):
        assert march_run.ingest_enrollment("Ghost", date(2012, 3, 1), None) is False
        assert "Ghost" not in march_run.patients
        assert march_run.orphan_enrollments == 1

    def test_names_trimmed_before_lookup(self, march_run):
        """Surrounding whitespace never splits one patient into two"""
        march_run.ingest_visit("Amy ", date(2012, 3, 2), "SN")
        march_run.ingest_visit(" Amy", date(2012, 3, 2), "HA")
        assert list(march_run.patients) == ["Amy"]
        assert march_run.ingest_enrollment("  Amy  ", date(2012, 3, 1), None) is True
        assert march_run.find("Amy\t") is march_run.patients["Amy"]
        assert march_run.orphan_enrollments == 0

    def test_out_of_range_visit_aborts(self, march_run):
        with pytest.raises(OutOfRangeError):
            march_run.ingest_visit("Amy", date(2012, 2, 28), "SN")

    def test_empty_visit_feed(self, march_run):
        with pytest.raises(NoDataError, match=NO_VISIT_DATA):
            march_run.ingest_visits([])

    def test_empty_enrollment_feed(self, march_run):
        march_run.ingest_visits([VisitRecord("Amy", date(2012, 3, 2), "SN")])
        with pytest.raises(NoDataError, match=NO_ENROLLMENT_DATA):
            march_run.ingest_enrollments([])

    def test_bulk_ingestion_accepts_generators(self, march_run):
        rows = (VisitRecord(name, date(2012, 3, 2), "SN") for name in ["Amy", "Bo"])
        assert march_run.ingest_visits(rows) == 2
        assert march_run.patients.keys() == {"Amy", "Bo"}


class TestEvaluateAll:
    """Whole-run evaluation"""

    def test_four_week_scenario(self, march_calendar):
        visits = [
            VisitRecord("A", date(2012, 3, 2), "SN"),
            VisitRecord("A", date(2012, 3, 2), "HA"),
            VisitRecord("A", date(2012, 3, 10), "SN"),
            VisitRecord("A", date(2012, 3, 20), "SW"),
        ]
        enrollments = [EnrollmentRecord("A", date(2012, 3, 1), None)]
        result = run_reconciliation(march_calendar, visits, enrollments)

        assert result.flaggedCount == 1
        assert result.patientCount == 1
        report = result.flagged[0]
        assert report.patientName == "A"
        assert report.reasons == [
            "Week 2 HA visits",
            "Week 3 SN visits",
            "Week 3 HA visits",
            "Week 4 SN visits",
            "Week 4 HA visits",
            "Monthly SC visits",
        ]
        assert report.monthlyCounts == {"SW": 1}
        assert report.weeklyCounts[1] == {"SN": 1, "HA": 1}

    def test_enrollment_without_visits_never_reported(self, march_calendar):
        visits = [VisitRecord("Seen", date(2012, 3, 2), "SN")]
        enrollments = [
            EnrollmentRecord("Seen", date(2012, 4, 1), None),
            EnrollmentRecord("Unseen", date(2012, 1, 1), None),
        ]
        result = run_reconciliation(march_calendar, visits, enrollments)
        assert result.flagged == []
        assert result.patientCount == 1
        assert result.orphanEnrollmentCount == 1

    def test_compliant_patients_omitted(self, march_run, march_calendar):
        record_full_week_visits(march_run, "Good", march_calendar)
        march_run.ingest_visit("Good", date(2012, 3, 3), "SW")
        march_run.ingest_visit("Good", date(2012, 3, 3), "SC")
        march_run.ingest_visit("Bad", date(2012, 3, 3), "SN")
        march_run.ingest_enrollment("Good", date(2012, 1, 1), None)
        march_run.ingest_enrollment("Bad", date(2012, 1, 1), None)

        result = march_run.evaluate_all()
        assert [r.patientName for r in result.flagged] == ["Bad"]
        assert result.patientCount == 2

    def test_flagged_in_first_seen_order(self, march_run):
        for name in ["Cy", "Ann", "Bea"]:
            march_run.ingest_visit(name, date(2012, 3, 2), "SN")
            march_run.ingest_enrollment(name, date(2012, 3, 1), None)
        assert [r.patientName for r in march_run.evaluate_all().flagged] == ["Cy", "Ann", "Bea"]

    def test_evaluate_all_twice_is_identical(self, march_run):
        march_run.ingest_visit("Amy", date(2012, 3, 2), "SN")
        march_run.ingest_enrollment("Amy", date(2012, 3, 1), None)
        first = march_run.evaluate_all()
        second = march_run.evaluate_all()
        assert [r.reasons for r in first.flagged] == [r.reasons for r in second.flagged]

    def test_sample_feeds(self, march_calendar):
        assert list(march_calendar.week_starts) == SAMPLE_WEEK_STARTS
        visits, enrollments = seed_data()
        result = run_reconciliation(march_calendar, visits, enrollments)

        by_name = {r.patientName: r.reasons for r in result.flagged}
        assert set(by_name) == {"Alice Adams", "Carol Chen"}
        assert by_name["Carol Chen"] == ["Week 4 HA visits"]
        assert by_name["Alice Adams"][-1] == "Monthly SC visits"
        assert result.patientCount == 3
        assert result.orphanEnrollmentCount == 1
