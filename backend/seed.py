# Seed data - sample month used by demo mode and tests
from datetime import date, timedelta
from typing import List, Tuple

from models import EnrollmentRecord, VisitRecord

SAMPLE_YEAR = 2012
SAMPLE_MONTH = 3
SAMPLE_WEEK_STARTS = [date(2012, 3, 1), date(2012, 3, 8), date(2012, 3, 15), date(2012, 3, 22)]


def seed_data() -> Tuple[List[VisitRecord], List[EnrollmentRecord]]:
    """
    Sample March 2012 feeds (4 weeks):
    - Alice Adams: enrolled all month, misses HA in week 2, weeks 3-4 entirely, and SC
    - Bob Brown: enrolled all month, every rule satisfied
    - Carol Chen: enrolled from Mar 15 only (weeks 1-2 and the month exempt), no HA in week 4
    - Dan Diaz: enrollment row only, never visited (dropped)
    """
    visits = [
        VisitRecord("Alice Adams", date(2012, 3, 2), "SN"),
        VisitRecord("Alice Adams", date(2012, 3, 2), "HA"),
        VisitRecord("Alice Adams", date(2012, 3, 10), "SN"),
        VisitRecord("Alice Adams", date(2012, 3, 20), "SW"),
    ]
    for week_start in SAMPLE_WEEK_STARTS:
        day = week_start + timedelta(days=1)
        visits.append(VisitRecord("Bob Brown", day, "SN"))
        visits.append(VisitRecord("Bob Brown", day, "HA"))
    visits.append(VisitRecord("Bob Brown", date(2012, 3, 5), "SW"))
    visits.append(VisitRecord("Bob Brown", date(2012, 3, 28), "SC"))

    visits.append(VisitRecord("Carol Chen", date(2012, 3, 16), "SN"))
    visits.append(VisitRecord("Carol Chen", date(2012, 3, 17), "HA"))
    visits.append(VisitRecord("Carol Chen", date(2012, 3, 23), "SN"))

    enrollments = [
        EnrollmentRecord("Alice Adams", date(2012, 3, 1)),
        EnrollmentRecord("Bob Brown", date(2012, 2, 1), date(2012, 4, 30)),
        EnrollmentRecord("Carol Chen", date(2012, 3, 15)),
        EnrollmentRecord("Dan Diaz", date(2012, 1, 1)),
    ]
    return visits, enrollments
