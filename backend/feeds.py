# CSV feed readers for the visit report and the enrollment export
from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from models import EnrollmentRecord, VisitRecord, service_type_code
from reporting_calendar import CalendarConfigError

logger = logging.getLogger(__name__)

# Each row repeats a label cell; the values sit at fixed offsets after it
VISIT_MARKER = "Service Type"
ENROLLMENT_MARKER = "Episode End"

VISIT_DATE_FORMAT = "%Y/%m/%d"       # 2012/03/8
ENROLLMENT_DATE_FORMAT = "%m/%d/%Y"  # 03/08/2012
BOUNDARY_DATE_FORMAT = "%Y/%m/%d"


class FeedFormatError(ValueError):
    """A feed row doesn't have the expected layout or holds an unreadable date."""


def read_rows(path: Union[str, Path]) -> List[List[str]]:
    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            return [row for row in csv.reader(f) if any(cell.strip() for cell in row)]
    except (UnicodeDecodeError, csv.Error) as exc:
        raise FeedFormatError(f"Unreadable feed {path}: {exc}") from exc


def parse_date(value: str, fmt: str) -> date:
    try:
        return datetime.strptime(value.strip(), fmt).date()
    except ValueError as exc:
        raise FeedFormatError(f"Unreadable date {value!r} (expected {fmt})") from exc


def parse_optional_date(value: Optional[str], fmt: str) -> Optional[date]:
    if value is None or not value.strip():
        return None
    return parse_date(value, fmt)


def parse_week_starts(values: Sequence[str]) -> List[date]:
    """Week boundaries as given on the command line (YYYY/MM/DD)."""
    try:
        return [datetime.strptime(v.strip(), BOUNDARY_DATE_FORMAT).date() for v in values]
    except ValueError as exc:
        raise CalendarConfigError(f"Unreadable week boundary: {exc}") from exc


def _marker_index(row: Sequence[str], marker: str) -> int:
    for idx, cell in enumerate(row):
        if cell.strip() == marker:
            return idx
    raise FeedFormatError(f"Column {marker!r} not found in first row")


def visit_columns(first_row: Sequence[str]) -> Tuple[int, int, int]:
    """(name, date, service) column positions for the visit feed"""
    name_idx = _marker_index(first_row, VISIT_MARKER) + 1
    return name_idx, name_idx + 1, name_idx + 2


def enrollment_columns(first_row: Sequence[str]) -> Tuple[int, int, int]:
    """(name, start, end) column positions for the enrollment feed"""
    name_idx = _marker_index(first_row, ENROLLMENT_MARKER) + 3
    start_idx = name_idx + 3
    return name_idx, start_idx, start_idx + 1


def _cell(row: Sequence[str], idx: int, line: int) -> str:
    if idx >= len(row):
        raise FeedFormatError(f"Row {line} has {len(row)} columns, expected at least {idx + 1}")
    return row[idx]


def parse_visit_rows(rows: Sequence[Sequence[str]]) -> List[VisitRecord]:
    if not rows:
        return []
    name_idx, date_idx, service_idx = visit_columns(rows[0])
    records = []
    for line, row in enumerate(rows, start=1):
        records.append(VisitRecord(
            patientName=_cell(row, name_idx, line),
            visitDate=parse_date(_cell(row, date_idx, line), VISIT_DATE_FORMAT),
            typeCode=service_type_code(_cell(row, service_idx, line)),
        ))
    return records


def parse_enrollment_rows(rows: Sequence[Sequence[str]]) -> List[EnrollmentRecord]:
    if not rows:
        return []
    name_idx, start_idx, end_idx = enrollment_columns(rows[0])
    records = []
    for line, row in enumerate(rows, start=1):
        # A short row just means the end date cell was left off
        end_cell = row[end_idx] if end_idx < len(row) else None
        records.append(EnrollmentRecord(
            patientName=_cell(row, name_idx, line),
            startDate=parse_date(_cell(row, start_idx, line), ENROLLMENT_DATE_FORMAT),
            endDate=parse_optional_date(end_cell, ENROLLMENT_DATE_FORMAT),
        ))
    return records


def load_visits(path: Union[str, Path]) -> List[VisitRecord]:
    records = parse_visit_rows(read_rows(path))
    logger.info("Read %d visit rows from %s", len(records), path)
    return records


def load_enrollments(path: Union[str, Path]) -> List[EnrollmentRecord]:
    records = parse_enrollment_rows(read_rows(path))
    logger.info("Read %d enrollment rows from %s", len(records), path)
    return records
