"""Agent routing from coverage gaps, task text and an optional learned router."""

from .facade import (
    CoverageGapsResult,
    CoverageRouteMetrics,
    CoverageRouteResult,
    CoverageSuggestResult,
    RoutingDecision,
    TaskRouteResult,
    coverage_gaps,
    coverage_route,
    coverage_suggest,
    decide_route,
    group_gaps_by_agent,
    record_feedback,
    reset_router,
    route_task,
)
from .learned import (
    LearnedRouter,
    RouterAlternative,
    RouterDecision,
    RouterTimeoutError,
    RoutingFeedback,
    call_with_timeout,
)

__all__ = [
    "CoverageGapsResult",
    "CoverageRouteMetrics",
    "CoverageRouteResult",
    "CoverageSuggestResult",
    "LearnedRouter",
    "RouterAlternative",
    "RouterDecision",
    "RouterTimeoutError",
    "RoutingDecision",
    "RoutingFeedback",
    "TaskRouteResult",
    "call_with_timeout",
    "coverage_gaps",
    "coverage_route",
    "coverage_suggest",
    "decide_route",
    "group_gaps_by_agent",
    "record_feedback",
    "reset_router",
    "route_task",
]
