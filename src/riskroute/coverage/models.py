"""Data models for coverage reports and coverage gaps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

BranchKind = Literal["if", "else", "case", "ternary", "logical", "unknown"]
GapType = Literal["critical", "high", "medium", "low"]
ReportFormat = Literal["lcov", "istanbul", "c8", "none"]


@dataclass
class UncoveredBranch:
    line: int
    kind: BranchKind = "unknown"
    column: Optional[int] = None


@dataclass
class CoverageData:
    """Normalized coverage for one source file.

    All four percentages are in [0, 100]. A metric with nothing to measure
    counts as fully covered.
    """

    file_path: str
    line_coverage: float = 0.0
    branch_coverage: float = 0.0
    function_coverage: float = 0.0
    statement_coverage: float = 0.0
    uncovered_lines: list[int] = field(default_factory=list)
    uncovered_branches: list[UncoveredBranch] = field(default_factory=list)
    uncovered_functions: list[str] = field(default_factory=list)
    total_lines: int = 0
    covered_lines: int = 0

    @property
    def mean_coverage(self) -> float:
        return (
            self.line_coverage
            + self.branch_coverage
            + self.function_coverage
            + self.statement_coverage
        ) / 4


@dataclass
class CoverageReport:
    """Result of report discovery: the records plus where they came from."""

    data: list[CoverageData]
    format: ReportFormat  # "none" when no report was found
    report_path: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.format != "none"


@dataclass
class CoverageGap:
    """A file below the coverage threshold, scored for attention."""

    file_path: str
    coverage_percent: float
    gap_type: GapType
    complexity: int  # 1-10
    priority: float  # 0-200
    suggested_agents: list[str]  # <= 4, no duplicates
    uncovered_lines: list[int]  # first 20 only
    reason: str


@dataclass
class CoverageSummary:
    total_files: int
    overall_line_coverage: float
    overall_branch_coverage: float
    overall_function_coverage: float
    overall_statement_coverage: float
    files_below_threshold: int
    coverage_threshold: float
