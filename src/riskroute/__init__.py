"""
riskroute - change-risk assessment and coverage-aware task routing

Scores the risk of a git change set, classifies its intent, recommends
reviewers, and uses LCOV / Istanbul coverage reports to decide which files
most need attention and which agent should work on them.
"""

__version__ = "0.1.0"

from .config import RiskRouteConfig, load_config
from .coverage import CoverageData, CoverageGap, load_coverage_data
from .diff import DiffAnalysisResult, analyze_diff
from .enhancers import RuntimeContext
from .routing import coverage_gaps, coverage_route, coverage_suggest, route_task
from .vcs import DiffFile

__all__ = [
    "analyze_diff",  # Main entry point for change sets
    "coverage_route",  # Main entry point for coverage-aware routing
    "coverage_suggest",
    "coverage_gaps",
    "route_task",
    "load_config",
    "load_coverage_data",
    "RiskRouteConfig",
    "RuntimeContext",
    "DiffAnalysisResult",
    "DiffFile",
    "CoverageData",
    "CoverageGap",
]
