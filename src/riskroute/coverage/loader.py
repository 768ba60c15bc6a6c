"""Coverage report discovery and loading."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..logging_config import get_logger
from .istanbul import parse_istanbul_json
from .lcov import parse_lcov
from .models import CoverageData, CoverageReport, ReportFormat

logger = get_logger(__name__)

# Searched in this order, first hit wins.
LCOV_LOCATIONS = (
    "coverage/lcov.info",
    "lcov.info",
    "coverage/lcov-report/lcov.info",
)
JSON_LOCATIONS = (
    "coverage/coverage-summary.json",
    "coverage/coverage-final.json",
    ".nyc_output/coverage-summary.json",
)


@dataclass(frozen=True)
class ReportLocation:
    path: Path
    format: ReportFormat


def find_coverage_reports(project_root: Union[str, Path]) -> list[ReportLocation]:
    """List every existing coverage report under *project_root*, in priority order."""
    root = Path(project_root)
    found = []
    for rel in LCOV_LOCATIONS:
        candidate = root / rel
        if candidate.is_file():
            found.append(ReportLocation(candidate, "lcov"))
    for rel in JSON_LOCATIONS:
        candidate = root / rel
        if candidate.is_file():
            fmt: ReportFormat = "istanbul" if ".nyc_output" in rel else "c8"
            found.append(ReportLocation(candidate, fmt))
    return found


def parse_report(content: str, fmt: ReportFormat) -> list[CoverageData]:
    """Dispatch to the parser for *fmt*."""
    if fmt == "lcov":
        return parse_lcov(content)
    return parse_istanbul_json(content)


def load_coverage_data(project_root: Union[str, Path] = ".") -> CoverageReport:
    """Load the highest-priority coverage report under *project_root*.

    A missing report yields format ``"none"``. A report that cannot be read
    or parsed yields an empty record set with its format tag kept; the
    failure is logged, not raised.
    """
    reports = find_coverage_reports(project_root)
    if not reports:
        logger.debug("No coverage report found under %s", project_root)
        return CoverageReport(data=[], format="none", report_path=None)

    report = reports[0]
    logger.info("Using %s coverage report %s", report.format, report.path)
    try:
        content = report.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read coverage report %s: %s", report.path, e)
        data = []
    else:
        data = parse_report(content, report.format)

    logger.debug("Loaded %d coverage records from %s", len(data), report.path)
    return CoverageReport(data=data, format=report.format, report_path=str(report.path))
