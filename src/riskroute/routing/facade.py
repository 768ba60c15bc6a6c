"""Task routing facade.

Combines coverage gaps, task keywords and, when installed, a learned router
into one agent recommendation. Every entry point takes a RuntimeContext and
returns a plain dataclass payload for the presentation layer.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ..coverage import (
    CoverageGap,
    CoverageSummary,
    analyze_coverage_gaps,
    generate_coverage_summary,
    load_coverage_data,
)
from ..enhancers import Provenance, RuntimeContext
from ..logging_config import get_logger
from .learned import (
    RouterAlternative,
    RouterDecision,
    RouterTimeoutError,
    RoutingFeedback,
    call_with_timeout,
)

logger = get_logger(__name__)

DEFAULT_AGENT = "coder"
DEFAULT_CONFIDENCE = 0.75
DEFAULT_REASON = "Default routing based on task analysis"
NO_COVERAGE_IMPACT = "No coverage data available"
NO_PRIORITY_GAPS_IMPACT = "No high-priority coverage gaps"

GAP_CONFIDENCE = 0.85
FORCED_CONFIDENCE = 1.0

# Checked in order against the lowercased task, first match wins.
KEYWORD_OVERRIDES = (
    (("test", "coverage"), "tester", 0.9, "Task explicitly mentions testing/coverage"),
    (("security", "auth"), "security-architect", 0.88, "Security-related task detected"),
)

PRIORITIZED_FILES_LIMIT = 10
FOCUS_FILES = 3
_LEADING_DOT_SLASH = re.compile(r"^\.?/")


@dataclass
class RoutingDecision:
    primary_agent: str
    confidence: float
    reason: str
    coverage_impact: str


@dataclass
class CoverageRouteMetrics:
    files_analyzed: int
    total_gaps: int
    critical_gaps: int
    avg_coverage: float


@dataclass
class CoverageRouteResult:
    task: str
    coverage_aware: bool
    gaps: List[CoverageGap]
    routing: RoutingDecision
    suggestions: List[str]
    metrics: CoverageRouteMetrics
    provenance: Provenance = field(default_factory=Provenance)


@dataclass
class CoverageSuggestResult:
    path: str
    suggestions: List[CoverageGap]
    summary: CoverageSummary
    prioritized_files: List[str]
    router_available: bool
    provenance: Provenance = field(default_factory=Provenance)


@dataclass
class CoverageGapsResult:
    gaps: List[CoverageGap]
    summary: CoverageSummary
    agent_assignments: Dict[str, List[str]]
    router_available: bool
    provenance: Provenance = field(default_factory=Provenance)


@dataclass
class TaskRouteResult:
    """Agent chosen for a single task and how it was chosen."""

    task: str
    agent: str
    confidence: float
    reason: str
    method: str  # "heuristic", "learned" or "forced"
    value: Optional[float] = None
    exploration_used: bool = False
    alternatives: List[RouterAlternative] = field(default_factory=list)
    provenance: Provenance = field(default_factory=Provenance)


def decide_route(
    task: str,
    gaps: Sequence[CoverageGap],
    has_coverage: bool,
) -> RoutingDecision:
    """Pick an agent for *task* from coverage gaps and task keywords.

    With no gaps at all the default agent stands. Otherwise the
    highest-priority critical or high gap sets the agent, and task keywords
    are applied last and override it.
    """
    decision = RoutingDecision(
        primary_agent=DEFAULT_AGENT,
        confidence=DEFAULT_CONFIDENCE,
        reason=DEFAULT_REASON,
        coverage_impact=NO_COVERAGE_IMPACT if not has_coverage else NO_PRIORITY_GAPS_IMPACT,
    )
    if not gaps:
        return decision

    urgent = [gap for gap in gaps if gap.gap_type in ("critical", "high")]
    if urgent:
        top = urgent[0]
        decision.primary_agent = top.suggested_agents[0] if top.suggested_agents else "tester"
        decision.confidence = GAP_CONFIDENCE
        decision.reason = f"Critical coverage gap in {top.file_path}"
        decision.coverage_impact = f"{len(urgent)} high-priority files need attention"

    task_lower = task.lower()
    for keywords, agent, confidence, reason in KEYWORD_OVERRIDES:
        if any(keyword in task_lower for keyword in keywords):
            decision.primary_agent = agent
            decision.confidence = confidence
            decision.reason = reason
            break

    return decision


def _route_suggestions(found_report: bool, gaps: Sequence[CoverageGap]) -> List[str]:
    if not found_report:
        return [
            "Run tests with coverage to enable coverage-aware routing",
            "Supported formats: lcov, istanbul (c8), nyc",
        ]
    if not gaps:
        return ["All files meet coverage threshold"]

    focus = ", ".join(os.path.basename(gap.file_path) for gap in gaps[:FOCUS_FILES])
    suggestions = [f"Focus on {focus}"]
    if any(gap.gap_type == "critical" for gap in gaps):
        suggestions.append("Critical coverage gaps detected - prioritize testing")
    return suggestions


def coverage_route(
    task: str,
    context: Optional[RuntimeContext] = None,
    project_root: Union[str, Path] = ".",
    threshold: Optional[float] = None,
) -> CoverageRouteResult:
    """Route *task* using the project's coverage report."""
    context = context or RuntimeContext()
    config = context.config
    threshold = config.coverage_threshold if threshold is None else threshold

    report = load_coverage_data(project_root)
    gaps = (
        analyze_coverage_gaps(
            report.data, project_root, threshold, context.enhancers.structure_analyzer
        )
        if report.data
        else []
    )
    summary = generate_coverage_summary(report.data, threshold)

    return CoverageRouteResult(
        task=task,
        coverage_aware=report.found,
        gaps=gaps[: config.route_gap_limit],
        routing=decide_route(task, gaps, has_coverage=bool(report.data)),
        suggestions=_route_suggestions(report.found, gaps),
        metrics=CoverageRouteMetrics(
            files_analyzed=len(report.data),
            total_gaps=len(gaps),
            critical_gaps=sum(1 for gap in gaps if gap.gap_type == "critical"),
            avg_coverage=summary.overall_line_coverage,
        ),
        provenance=context.provenance(),
    )


def _relative_filter(path: str, project_root: Union[str, Path]) -> str:
    root = os.path.abspath(project_root)
    target = path if os.path.isabs(path) else os.path.join(root, path)
    rel = os.path.relpath(target, root)
    return "" if rel == "." else rel


def coverage_suggest(
    path: str,
    context: Optional[RuntimeContext] = None,
    project_root: Union[str, Path] = ".",
    limit: Optional[int] = None,
    threshold: Optional[float] = None,
) -> CoverageSuggestResult:
    """Coverage gaps for files under *path*, most urgent first."""
    context = context or RuntimeContext()
    config = context.config
    threshold = config.coverage_threshold if threshold is None else threshold
    limit = config.suggest_limit if limit is None else limit

    report = load_coverage_data(project_root)
    rel = _relative_filter(path, project_root)
    selected = [
        d
        for d in report.data
        if _LEADING_DOT_SLASH.sub("", d.file_path).startswith(rel) or path in d.file_path
    ]

    gaps = analyze_coverage_gaps(
        selected, project_root, threshold, context.enhancers.structure_analyzer
    )
    return CoverageSuggestResult(
        path=path,
        suggestions=gaps[:limit],
        summary=generate_coverage_summary(selected, threshold),
        prioritized_files=[gap.file_path for gap in gaps[:PRIORITIZED_FILES_LIMIT]],
        router_available=context.enhancers.router_available,
        provenance=context.provenance(),
    )


def group_gaps_by_agent(gaps: Sequence[CoverageGap]) -> Dict[str, List[str]]:
    """Map each gap's primary agent to its file paths, in gap order."""
    assignments: Dict[str, List[str]] = {}
    for gap in gaps:
        agent = gap.suggested_agents[0] if gap.suggested_agents else "tester"
        assignments.setdefault(agent, []).append(gap.file_path)
    return assignments


def coverage_gaps(
    context: Optional[RuntimeContext] = None,
    project_root: Union[str, Path] = ".",
    threshold: Optional[float] = None,
) -> CoverageGapsResult:
    """Every coverage gap in the project, with agent assignments."""
    context = context or RuntimeContext()
    config = context.config
    threshold = config.coverage_threshold if threshold is None else threshold

    report = load_coverage_data(project_root)
    gaps = analyze_coverage_gaps(
        report.data, project_root, threshold, context.enhancers.structure_analyzer
    )
    return CoverageGapsResult(
        gaps=gaps,
        summary=generate_coverage_summary(report.data, threshold),
        agent_assignments=group_gaps_by_agent(gaps) if config.group_by_agent else {},
        router_available=context.enhancers.router_available,
        provenance=context.provenance(),
    )


def _heuristic_route(task: str, context: RuntimeContext) -> TaskRouteResult:
    decision = decide_route(task, [], has_coverage=False)
    return TaskRouteResult(
        task=task,
        agent=decision.primary_agent,
        confidence=decision.confidence,
        reason=decision.reason,
        method="heuristic",
        provenance=context.provenance("heuristic"),
    )


def _learned_result(task: str, decision: object, context: RuntimeContext) -> TaskRouteResult:
    if not isinstance(decision, RouterDecision):
        raise TypeError(f"router returned {type(decision).__name__}, expected RouterDecision")
    return TaskRouteResult(
        task=task,
        agent=decision.agent_id,
        confidence=decision.confidence,
        reason=f"Learned router ({context.enhancers.router_name})",
        method="learned",
        value=decision.value,
        exploration_used=decision.exploration_used,
        alternatives=list(decision.alternatives),
        provenance=context.provenance("learned"),
    )


def route_task(
    task: str,
    context: Optional[RuntimeContext] = None,
    explore: bool = True,
    force_agent: Optional[str] = None,
) -> TaskRouteResult:
    """Route a single task.

    A forced agent wins outright. Otherwise the learned router is asked, and
    any failure, timeout or malformed answer falls back to the heuristic.
    """
    context = context or RuntimeContext()

    if force_agent:
        return TaskRouteResult(
            task=task,
            agent=force_agent,
            confidence=FORCED_CONFIDENCE,
            reason="Agent forced by caller",
            method="forced",
            provenance=context.provenance("forced"),
        )

    router = context.enhancers.router
    if router is None:
        return _heuristic_route(task, context)

    timeout = context.config.router_timeout_seconds
    try:
        decision = call_with_timeout(router.route, timeout, task, explore)
        return _learned_result(task, decision, context)
    except RouterTimeoutError:
        logger.warning("Learned router did not answer within %.1fs, using heuristic", timeout)
        return _heuristic_route(task, context)
    except Exception as e:
        logger.warning("Learned router failed, using heuristic: %s", e)
        return _heuristic_route(task, context)


def record_feedback(feedback: RoutingFeedback, context: Optional[RuntimeContext] = None) -> bool:
    """Forward task outcome to the learned router. False when none is installed."""
    context = context or RuntimeContext()
    router = context.enhancers.router
    if router is None:
        return False
    try:
        call_with_timeout(
            router.provide_feedback, context.config.router_timeout_seconds, feedback.clamped()
        )
    except Exception as e:
        logger.warning("Learned router rejected feedback for %s: %s", feedback.task_id, e)
        return False
    return True


def reset_router(context: Optional[RuntimeContext] = None) -> bool:
    """Clear the learned router's state. False when none is installed."""
    context = context or RuntimeContext()
    router = context.enhancers.router
    if router is None:
        return False
    try:
        call_with_timeout(router.reset, context.config.router_timeout_seconds)
    except Exception as e:
        logger.warning("Learned router reset failed: %s", e)
        return False
    return True
