# Backend main entry point - visit compliance verification API
import logging
import os
from dotenv import load_dotenv
load_dotenv()  # Load .env so DEMO_MODE / LOG_LEVEL work for local runs
from datetime import date
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from models import EnrollmentRecord, ReconciliationResult, VisitRecord, service_type_code
from reconcile import NoDataError, run_reconciliation
from reporting_calendar import Calendar, CalendarConfigError, OutOfRangeError
from seed import SAMPLE_MONTH, SAMPLE_WEEK_STARTS, SAMPLE_YEAR, seed_data

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Visit Compliance API")


def _is_demo_mode() -> bool:
    """True only when DEMO_MODE env var is explicitly 'true' (case-insensitive)."""
    return os.environ.get("DEMO_MODE", "").lower() == "true"

# Configure CORS - allow local dev and the deployed report frontend
_allowed_origins = [
    "http://localhost:5173",
    "http://localhost:5174",
]
_frontend_url = os.environ.get("FRONTEND_URL", "")
if _frontend_url:
    _allowed_origins.append(_frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request/Response models
class VisitRow(BaseModel):
    name: str
    visitDate: date
    serviceType: str  # "SN", or a longer label starting with the code

class EnrollmentRow(BaseModel):
    name: str
    start: date
    end: Optional[date] = None  # omitted = ongoing

class ReconcileRequest(BaseModel):
    weekStarts: List[date] = Field(min_length=4, max_length=5)
    month: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}$")  # YYYY-MM
    visits: List[VisitRow] = Field(default_factory=list)
    enrollments: List[EnrollmentRow] = Field(default_factory=list)

class EnrollmentSpan(BaseModel):
    start: date
    end: Optional[date]

class FlaggedPatient(BaseModel):
    name: str
    reasons: List[str]
    enrollments: List[EnrollmentSpan]
    weeklyCounts: Dict[int, Dict[str, int]]
    monthlyCounts: Dict[str, int]


def _result_payload(result: ReconciliationResult) -> Dict:
    flagged = [
        FlaggedPatient(
            name=report.patientName,
            reasons=report.reasons,
            enrollments=[EnrollmentSpan(start=p.startDate, end=p.endDate) for p in report.enrollments],
            weeklyCounts=report.weeklyCounts,
            monthlyCounts=report.monthlyCounts,
        )
        for report in result.flagged
    ]
    return {
        "status": "ok",
        "flagged": flagged,
        "flaggedCount": result.flaggedCount,
        "patientCount": result.patientCount,
        "orphanEnrollmentCount": result.orphanEnrollmentCount,
    }


def _reconcile(calendar: Calendar, visits: List[VisitRecord], enrollments: List[EnrollmentRecord]) -> Dict:
    try:
        result = run_reconciliation(calendar, visits, enrollments)
    except NoDataError as exc:
        return {"status": "no_data", "message": str(exc)}
    except OutOfRangeError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _result_payload(result)


@app.get("/")
def read_root():
    return {"message": "Home-Care Visit Compliance API"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.post("/reconcile")
def reconcile(request: ReconcileRequest):
    """
    Verify one reporting month.
    Visits create patients; enrollments for patients without visits are dropped.
    """
    try:
        year, month = (int(part) for part in request.month.split("-")) if request.month else (None, None)
        calendar = Calendar(request.weekStarts, year=year, month=month)
    except CalendarConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    visits = [VisitRecord(v.name, v.visitDate, service_type_code(v.serviceType)) for v in request.visits]
    enrollments = [EnrollmentRecord(e.name, e.start, e.end) for e in request.enrollments]
    return _reconcile(calendar, visits, enrollments)


@app.get("/demo/status")
def demo_status():
    """Returns whether demo mode is enabled. Only for frontend visibility gate."""
    return {"demoMode": _is_demo_mode()}


@app.post("/demo/sample")
def demo_sample():
    """
    Run the built-in March 2012 sample feeds.
    Only available when DEMO_MODE=true.
    """
    if not _is_demo_mode():
        raise HTTPException(status_code=404, detail="Demo sample not available")
    visits, enrollments = seed_data()
    calendar = Calendar(SAMPLE_WEEK_STARTS, year=SAMPLE_YEAR, month=SAMPLE_MONTH)
    return _reconcile(calendar, visits, enrollments)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
