"""
Shared pytest fixtures for visit compliance tests.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from main import app
from reconcile import ReconciliationRun
from reporting_calendar import Calendar

# March 2012, 4 weeks
MARCH_WEEK_STARTS = [date(2012, 3, 1), date(2012, 3, 8), date(2012, 3, 15), date(2012, 3, 22)]
# May 2012, 5 weeks (May 1 is a Tuesday)
MAY_WEEK_STARTS = [
    date(2012, 5, 1), date(2012, 5, 8), date(2012, 5, 15), date(2012, 5, 22), date(2012, 5, 29),
]


@pytest.fixture
def client():
    """FastAPI TestClient."""
    return TestClient(app)


@pytest.fixture
def march_calendar():
    return Calendar(MARCH_WEEK_STARTS, year=2012, month=3)


@pytest.fixture
def may_calendar():
    return Calendar(MAY_WEEK_STARTS, year=2012, month=5)


@pytest.fixture
def march_run(march_calendar):
    """Empty run over the 4-week March calendar."""
    return ReconciliationRun(march_calendar)


def record_full_week_visits(run, name, calendar, types=("SN", "HA")):
    """Helper: one visit of each type on the first day of every calendar week."""
    for week_start in calendar.week_starts:
        for type_code in types:
            run.ingest_visit(name, week_start, type_code)
