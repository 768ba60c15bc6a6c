"""Coverage gap analysis.

Turns per-file coverage records into prioritized CoverageGap entries:

    gap_type   - severity band of the file's mean coverage
    complexity - 1-10 estimate from size and structure counts
    priority   - 0-200 attention score
    agents     - up to four agent roles suited to closing the gap
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from ..logging_config import get_logger
from ..structure import FileStructure, RegexStructureAnalyzer, StructureAnalyzer
from .models import CoverageData, CoverageGap, CoverageSummary, GapType

logger = get_logger(__name__)

DEFAULT_THRESHOLD = 80.0

GAP_BASE_PRIORITY: dict[str, int] = {
    "critical": 100,
    "high": 75,
    "medium": 50,
    "low": 25,
}

# Directory/purpose rules, first match wins. Matched against the raw path.
PATH_AGENT_RULES: tuple[tuple[tuple[str, ...], list[str]], ...] = (
    (("/api/", "/routes/"), ["coder", "tester", "security-architect"]),
    (("/auth/", "security"), ["security-architect", "tester", "coder"]),
    (("/utils/", "/helpers/"), ["coder", "tester"]),
    (("/services/",), ["coder", "tester", "architect"]),
)

EXTENSION_AGENTS: dict[str, list[str]] = {
    ".ts": ["coder", "tester", "reviewer"],
    ".tsx": ["coder", "tester", "reviewer"],
    ".js": ["coder", "tester"],
    ".jsx": ["coder", "tester"],
    ".py": ["coder", "tester", "ml-developer"],
    ".go": ["coder", "tester"],
    ".rs": ["coder", "tester", "performance-engineer"],
}
DEFAULT_AGENTS = ["coder", "tester"]

MAX_AGENTS = 4
MAX_REPORTED_LINES = 20

_default_analyzer = RegexStructureAnalyzer()


def complexity_from_structure(structure: FileStructure) -> int:
    """Map structure counts onto the 1-10 complexity scale."""
    complexity = 1

    if structure.line_count > 500:
        complexity += 3
    elif structure.line_count > 200:
        complexity += 2
    elif structure.line_count > 100:
        complexity += 1

    complexity += min(5, structure.control_flow_count // 10)
    complexity += min(3, structure.declaration_count // 5)
    return min(10, complexity)


def estimate_complexity(
    file_path: str,
    project_root: Union[str, Path],
    analyzer: Optional[StructureAnalyzer] = None,
) -> int:
    """Estimate complexity of *file_path* resolved against *project_root*.

    Unreadable or missing files score 1. A plugin analyzer that fails falls
    back to the regex analyzer.
    """
    full_path = Path(project_root) / file_path
    if not full_path.is_file():
        return 1

    structure = None
    if analyzer is not None:
        try:
            structure = analyzer.analyze(full_path)
        except Exception as e:
            logger.warning(
                "Structure analyzer %r failed on %s: %s",
                getattr(analyzer, "name", analyzer),
                full_path,
                e,
            )
    if structure is None:
        structure = _default_analyzer.analyze(full_path)
    if structure is None:
        return 1
    return complexity_from_structure(structure)


def determine_gap_type(coverage: float) -> GapType:
    if coverage < 20:
        return "critical"
    if coverage < 50:
        return "high"
    if coverage < 70:
        return "medium"
    return "low"


def suggest_agents_for_file(data: CoverageData, gap_type: GapType) -> list[str]:
    """Pick up to four agent roles for closing the gap in *data*."""
    file_path = data.file_path
    file_name = os.path.basename(file_path).lower()

    if ".test." in file_name or ".spec." in file_name:
        return ["tester", "reviewer"]

    agents: list[str] = []
    for needles, rule_agents in PATH_AGENT_RULES:
        if any(needle in file_path for needle in needles):
            agents.extend(rule_agents)
            break
    else:
        ext = os.path.splitext(file_path)[1].lower()
        agents.extend(EXTENSION_AGENTS.get(ext, DEFAULT_AGENTS))

    if gap_type == "critical":
        agents.append("reviewer")
    if len(data.uncovered_branches) > 5:
        agents.append("architect")

    return list(dict.fromkeys(agents))[:MAX_AGENTS]


def calculate_priority(data: CoverageData, complexity: int, gap_type: GapType) -> float:
    """Score a gap on a 0-200 scale."""
    priority = float(GAP_BASE_PRIORITY[gap_type])
    priority += complexity * 3

    uncovered_ratio = len(data.uncovered_lines) / max(1, data.total_lines)
    priority += min(20.0, uncovered_ratio * 50)

    if data.branch_coverage < 50:
        priority += 15
    elif data.branch_coverage < 75:
        priority += 8

    file_name = os.path.basename(data.file_path).lower()
    if "service" in file_name or "controller" in file_name:
        priority += 10
    if "auth" in file_name or "security" in file_name:
        priority += 15

    return min(200.0, priority)


def _gap_reason(data: CoverageData, threshold: float) -> str:
    reasons = []
    if data.line_coverage < threshold:
        reasons.append(f"line coverage {data.line_coverage:.1f}%")
    if data.branch_coverage < threshold:
        reasons.append(f"branch coverage {data.branch_coverage:.1f}%")
    if data.uncovered_functions:
        reasons.append(f"{len(data.uncovered_functions)} uncovered functions")
    return ", ".join(reasons) or "Below threshold"


def analyze_coverage_gaps(
    records: Sequence[CoverageData],
    project_root: Union[str, Path] = ".",
    threshold: float = DEFAULT_THRESHOLD,
    analyzer: Optional[StructureAnalyzer] = None,
) -> list[CoverageGap]:
    """Find files whose mean coverage is below *threshold*.

    Returns gaps sorted by priority, highest first. Equal priorities keep
    input order.
    """
    gaps = []
    for data in records:
        mean = data.mean_coverage
        if mean >= threshold:
            continue

        gap_type = determine_gap_type(mean)
        complexity = estimate_complexity(data.file_path, project_root, analyzer)
        gaps.append(
            CoverageGap(
                file_path=data.file_path,
                coverage_percent=mean,
                gap_type=gap_type,
                complexity=complexity,
                priority=calculate_priority(data, complexity, gap_type),
                suggested_agents=suggest_agents_for_file(data, gap_type),
                uncovered_lines=data.uncovered_lines[:MAX_REPORTED_LINES],
                reason=_gap_reason(data, threshold),
            )
        )

    gaps.sort(key=lambda gap: gap.priority, reverse=True)
    logger.debug("Found %d coverage gaps in %d files", len(gaps), len(records))
    return gaps


def generate_coverage_summary(
    records: Sequence[CoverageData],
    threshold: float = DEFAULT_THRESHOLD,
) -> CoverageSummary:
    """Average each coverage metric over *records*."""
    if not records:
        return CoverageSummary(
            total_files=0,
            overall_line_coverage=0.0,
            overall_branch_coverage=0.0,
            overall_function_coverage=0.0,
            overall_statement_coverage=0.0,
            files_below_threshold=0,
            coverage_threshold=threshold,
        )

    # rows: files, columns: line, branch, function, statement
    matrix = np.array(
        [
            [d.line_coverage, d.branch_coverage, d.function_coverage, d.statement_coverage]
            for d in records
        ],
        dtype=float,
    )
    means = matrix.mean(axis=0)
    below = int(np.count_nonzero(matrix.mean(axis=1) < threshold))

    return CoverageSummary(
        total_files=len(records),
        overall_line_coverage=float(means[0]),
        overall_branch_coverage=float(means[1]),
        overall_function_coverage=float(means[2]),
        overall_statement_coverage=float(means[3]),
        files_below_threshold=below,
        coverage_threshold=threshold,
    )
