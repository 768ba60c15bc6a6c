"""Coverage report loading and coverage gap analysis."""

from .gaps import (
    analyze_coverage_gaps,
    calculate_priority,
    complexity_from_structure,
    determine_gap_type,
    estimate_complexity,
    generate_coverage_summary,
    suggest_agents_for_file,
)
from .istanbul import parse_istanbul_json
from .lcov import parse_lcov
from .loader import ReportLocation, find_coverage_reports, load_coverage_data
from .models import (
    CoverageData,
    CoverageGap,
    CoverageReport,
    CoverageSummary,
    UncoveredBranch,
)

__all__ = [
    "CoverageData",
    "CoverageGap",
    "CoverageReport",
    "CoverageSummary",
    "ReportLocation",
    "UncoveredBranch",
    "analyze_coverage_gaps",
    "calculate_priority",
    "complexity_from_structure",
    "determine_gap_type",
    "estimate_complexity",
    "find_coverage_reports",
    "generate_coverage_summary",
    "load_coverage_data",
    "parse_istanbul_json",
    "parse_lcov",
    "suggest_agents_for_file",
]
