# Command line entry point - verify a month of visits against enrollments
#
# Usage:
#   visit-verifier enrollment_file.csv report_file.csv 2012/03/01 2012/03/8 2012/03/15 2012/03/22
#   visit-verifier enrollment_file.csv report_file.csv 2012/03/01 ... --month 2012-03 > out.txt
import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from feeds import FeedFormatError, load_enrollments, load_visits, parse_week_starts
from models import ReconciliationResult
from reconcile import NoDataError, run_reconciliation
from reporting_calendar import Calendar, CalendarConfigError, OutOfRangeError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_DATA = 2

SEPARATOR = "!" * 55


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_month(value: str) -> Tuple[int, int]:
    """argparse type for --month YYYY-MM"""
    try:
        year, month = value.split("-")
        return int(year), int(month)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="visit-verifier",
        description="Flag patients missing required home-care visits for a reporting month",
    )
    parser.add_argument("enrollment_file", help="Enrollment export (CSV)")
    parser.add_argument("visit_file", help="Visit report (CSV)")
    parser.add_argument("week_starts", nargs="+",
                        help="4 or 5 week start dates, YYYY/MM/DD, ascending")
    parser.add_argument("--month", type=parse_month, default=None,
                        help="Reporting month YYYY-MM (default: month of the first week)")
    parser.add_argument("--log-level", default=None,
                        help="Logging level (default: $LOG_LEVEL or INFO)")
    return parser


def format_report(result: ReconciliationResult) -> List[str]:
    lines: List[str] = []
    for report in result.flagged:
        enrollment_text = " + ".join(p.describe() for p in report.enrollments)
        lines.append("")
        lines.append("")
        lines.append(f"Person to look into : {report.patientName}")
        lines.append(
            f"\t {enrollment_text}; -- week/type counts:{report.weeklyCounts}"
            f" monthly counts:{report.monthlyCounts}"
        )
        lines.append(f"Reasons:{'; '.join(report.reasons)};")
    lines.append(SEPARATOR)
    lines.append("")
    lines.append("")
    lines.append(f"Number of people to look into:{result.flaggedCount};")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        week_starts = parse_week_starts(args.week_starts)
        year, month = args.month if args.month else (None, None)
        calendar = Calendar(week_starts, year=year, month=month)
        result = run_reconciliation(
            calendar,
            load_visits(args.visit_file),
            load_enrollments(args.enrollment_file),
        )
    except NoDataError as exc:
        print(exc)
        return EXIT_NO_DATA
    except (CalendarConfigError, FeedFormatError, OutOfRangeError, OSError) as exc:
        logger.error("Verification aborted: %s", exc)
        return EXIT_ERROR

    print("\n".join(format_report(result)))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
