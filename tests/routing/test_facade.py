"""Tests for the routing facade."""

import time

import pytest

from riskroute.config import RiskRouteConfig
from riskroute.coverage import CoverageGap
from riskroute.enhancers import EnhancerCapabilities, RuntimeContext
from riskroute.routing import (
    RouterAlternative,
    RouterDecision,
    RoutingFeedback,
    coverage_gaps,
    coverage_route,
    coverage_suggest,
    decide_route,
    group_gaps_by_agent,
    record_feedback,
    reset_router,
    route_task,
)


def _gap(path, gap_type, agents=("coder", "tester"), priority=100.0):
    return CoverageGap(
        file_path=path,
        coverage_percent=10.0,
        gap_type=gap_type,
        complexity=1,
        priority=priority,
        suggested_agents=list(agents),
        uncovered_lines=[],
        reason="",
    )


class RecordingRouter:
    def __init__(self, decision=None, error=None, delay=0.0):
        self.decision = decision or RouterDecision(
            agent_id="reviewer",
            confidence=0.6,
            value=1.5,
            exploration_used=True,
            alternatives=[RouterAlternative("coder", 0.3)],
        )
        self.error = error
        self.delay = delay
        self.feedback = []
        self.resets = 0

    def route(self, task, explore=True):
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.decision

    def provide_feedback(self, feedback):
        if self.error:
            raise self.error
        self.feedback.append(feedback)

    def reset(self):
        if self.error:
            raise self.error
        self.resets += 1


def _context(router=None, **config):
    config.setdefault("use_enhancers", False)
    return RuntimeContext(
        config=RiskRouteConfig(**config),
        enhancers=EnhancerCapabilities(router=router, router_name="fake" if router else None),
    )


class TestDecideRoute:
    def test_default_without_coverage(self):
        decision = decide_route("Implement pagination", [], has_coverage=False)
        assert decision.primary_agent == "coder"
        assert decision.confidence == 0.75
        assert decision.reason == "Default routing based on task analysis"
        assert decision.coverage_impact == "No coverage data available"

    def test_default_with_coverage_but_no_urgent_gaps(self):
        decision = decide_route("Implement pagination", [_gap("a.ts", "low")], has_coverage=True)
        assert decision.primary_agent == "coder"
        assert decision.coverage_impact == "No high-priority coverage gaps"

    def test_first_urgent_gap_sets_agent(self):
        gaps = [
            _gap("src/low.ts", "medium", agents=("architect",)),
            _gap("src/api/users.ts", "high", agents=("security-architect", "coder")),
            _gap("src/b.ts", "critical"),
        ]
        decision = decide_route("Refactor module", gaps, has_coverage=True)
        assert decision.primary_agent == "security-architect"
        assert decision.confidence == 0.85
        assert decision.reason == "Critical coverage gap in src/api/users.ts"
        assert decision.coverage_impact == "2 high-priority files need attention"

    def test_urgent_gap_without_agents_goes_to_tester(self):
        decision = decide_route("x", [_gap("a.ts", "critical", agents=())], has_coverage=True)
        assert decision.primary_agent == "tester"

    def test_keywords_override_gaps(self):
        decision = decide_route("Add unit TESTS", [_gap("a.ts", "critical")], has_coverage=True)
        assert decision.primary_agent == "tester"
        assert decision.confidence == 0.9
        assert decision.reason == "Task explicitly mentions testing/coverage"
        assert decision.coverage_impact == "1 high-priority files need attention"

    def test_keywords_ignored_without_coverage(self):
        decision = decide_route("Fix auth token refresh", [], has_coverage=False)
        assert decision.primary_agent == "coder"
        assert decision.confidence == 0.75
        assert decision.reason == "Default routing based on task analysis"
        assert decision.coverage_impact == "No coverage data available"

    def test_keywords_ignored_without_gaps(self):
        decision = decide_route("write tests for parser", [], has_coverage=True)
        assert decision.primary_agent == "coder"
        assert decision.coverage_impact == "No high-priority coverage gaps"

    def test_security_keyword_with_low_gap(self):
        decision = decide_route("Fix auth token refresh", [_gap("a.ts", "low")], has_coverage=True)
        assert decision.primary_agent == "security-architect"
        assert decision.confidence == 0.88

    def test_testing_keyword_checked_first(self):
        decision = decide_route("test the security layer", [_gap("a.ts", "low")], has_coverage=True)
        assert decision.primary_agent == "tester"


class TestCoverageRoute:
    def test_without_report(self, project_root):
        result = coverage_route("Implement pagination", _context(), project_root)
        assert result.coverage_aware is False
        assert result.gaps == []
        assert result.routing.coverage_impact == "No coverage data available"
        assert result.suggestions == [
            "Run tests with coverage to enable coverage-aware routing",
            "Supported formats: lcov, istanbul (c8), nyc",
        ]
        assert result.metrics.files_analyzed == 0
        assert result.metrics.avg_coverage == 0.0

    def test_with_lcov_report(self, lcov_project):
        result = coverage_route("Implement pagination", _context(), lcov_project)
        assert result.coverage_aware is True
        assert [g.file_path for g in result.gaps] == ["src/services/user_service.ts"]
        assert result.routing.primary_agent == "coder"
        assert result.routing.coverage_impact == "No high-priority coverage gaps"
        assert result.suggestions == ["Focus on user_service.ts"]
        assert result.metrics.files_analyzed == 2
        assert result.metrics.total_gaps == 1
        assert result.metrics.critical_gaps == 0
        assert result.metrics.avg_coverage == pytest.approx(75.0)
        assert result.provenance.router == "heuristic"

    def test_all_files_meet_threshold(self, lcov_project):
        result = coverage_route("x", _context(), lcov_project, threshold=10.0)
        assert result.gaps == []
        assert result.suggestions == ["All files meet coverage threshold"]

    def test_critical_gap_suggestion(self, lcov_project):
        (lcov_project / "coverage" / "lcov.info").write_text(
            "SF:src/core.ts\nDA:1,0\nDA:2,0\nBRDA:1,0,0,0\nFNDA:0,main\nend_of_record\n"
        )
        result = coverage_route("Refactor", _context(), lcov_project)
        assert result.metrics.critical_gaps == 1
        assert result.suggestions == [
            "Focus on core.ts",
            "Critical coverage gaps detected - prioritize testing",
        ]
        assert result.routing.confidence == 0.85

    def test_gap_list_limited(self, project_root):
        body = "".join(f"SF:src/f{i}.ts\nDA:1,0\nend_of_record\n" for i in range(5))
        (project_root / "lcov.info").write_text(body)
        result = coverage_route("x", _context(route_gap_limit=2), project_root)
        assert len(result.gaps) == 2
        assert result.metrics.total_gaps == 5


class TestCoverageSuggest:
    def test_filters_by_relative_path(self, lcov_project):
        result = coverage_suggest("src/services", _context(), lcov_project)
        assert [g.file_path for g in result.suggestions] == ["src/services/user_service.ts"]
        assert result.prioritized_files == ["src/services/user_service.ts"]
        assert result.summary.total_files == 1
        assert result.router_available is False

    def test_leading_dot_slash(self, lcov_project):
        result = coverage_suggest("./src/utils", _context(), lcov_project)
        assert result.suggestions == []
        assert result.summary.total_files == 1

    def test_root_selects_everything(self, lcov_project):
        result = coverage_suggest(".", _context(), lcov_project)
        assert result.summary.total_files == 2

    def test_limit(self, project_root):
        body = "".join(f"SF:src/f{i}.ts\nDA:1,0\nend_of_record\n" for i in range(5))
        (project_root / "lcov.info").write_text(body)
        result = coverage_suggest("src", _context(), project_root, limit=3)
        assert len(result.suggestions) == 3
        assert len(result.prioritized_files) == 5


class TestCoverageGaps:
    def test_assignments(self, lcov_project):
        result = coverage_gaps(_context(), lcov_project)
        assert len(result.gaps) == 1
        assert result.agent_assignments == {"coder": ["src/services/user_service.ts"]}
        assert result.summary.files_below_threshold == 1

    def test_grouping_disabled(self, lcov_project):
        result = coverage_gaps(_context(group_by_agent=False), lcov_project)
        assert result.agent_assignments == {}

    def test_router_availability_reported(self, project_root):
        assert coverage_gaps(_context(RecordingRouter()), project_root).router_available is True

    def test_group_gaps_by_agent_keeps_order(self):
        gaps = [
            _gap("a.ts", "high", agents=("tester",)),
            _gap("b.ts", "high", agents=("coder",)),
            _gap("c.ts", "high", agents=("tester",)),
            _gap("d.ts", "high", agents=()),
        ]
        assert group_gaps_by_agent(gaps) == {"tester": ["a.ts", "c.ts", "d.ts"], "coder": ["b.ts"]}


class TestRouteTask:
    def test_heuristic_without_router(self):
        result = route_task("Write tests for parser", _context())
        assert result.agent == "coder"
        assert result.confidence == 0.75
        assert result.method == "heuristic"
        assert result.provenance.router == "heuristic"

    def test_forced_agent(self):
        result = route_task("anything", _context(RecordingRouter()), force_agent="architect")
        assert result.agent == "architect"
        assert result.confidence == 1.0
        assert result.method == "forced"
        assert result.provenance.router == "forced"

    def test_learned_router(self):
        result = route_task("Implement pagination", _context(RecordingRouter()))
        assert result.agent == "reviewer"
        assert result.confidence == 0.6
        assert result.method == "learned"
        assert result.reason == "Learned router (fake)"
        assert result.value == 1.5
        assert result.exploration_used is True
        assert [a.agent_id for a in result.alternatives] == ["coder"]
        assert result.provenance.router == "learned"

    def test_router_error_falls_back(self):
        result = route_task("Fix auth", _context(RecordingRouter(error=RuntimeError("down"))))
        assert result.method == "heuristic"
        assert result.agent == "coder"
        assert result.provenance.router == "heuristic"

    def test_router_timeout_falls_back(self):
        context = _context(RecordingRouter(delay=0.5), router_timeout_seconds=0.05)
        result = route_task("Implement pagination", context)
        assert result.method == "heuristic"
        assert result.agent == "coder"

    @pytest.mark.parametrize("answer", [None, {"agent_id": "reviewer", "confidence": 0.6}])
    def test_malformed_router_answer_falls_back(self, answer):
        router = RecordingRouter()
        router.route = lambda task, explore=True: answer
        result = route_task("write tests", _context(router))
        assert result.method == "heuristic"
        assert result.agent == "coder"
        assert result.provenance.router == "heuristic"


class TestFeedbackAndReset:
    def test_feedback_forwarded_clamped(self):
        router = RecordingRouter()
        assert record_feedback(RoutingFeedback("t1", "coder", True, 1.4), _context(router)) is True
        assert router.feedback[0].quality == 1.0

    def test_feedback_without_router(self):
        assert record_feedback(RoutingFeedback("t1", "coder", False, 0.2), _context()) is False

    def test_feedback_failure(self):
        router = RecordingRouter(error=RuntimeError("full"))
        assert record_feedback(RoutingFeedback("t1", "coder", True, 0.5), _context(router)) is False

    def test_reset(self):
        router = RecordingRouter()
        assert reset_router(_context(router)) is True
        assert router.resets == 1

    def test_reset_without_router(self):
        assert reset_router(_context()) is False


class TestScenarios:
    """Worked examples of the routing rules."""

    def test_testing_keyword_beats_gap_agent(self):
        gaps = [_gap("src/payment/charge.ts", "high", agents=("security-architect",))]
        decision = decide_route("write unit tests for the payment module", gaps, has_coverage=True)
        assert decision.primary_agent == "tester"
        assert decision.confidence == 0.9

    def test_gaps_without_records(self, project_root):
        result = coverage_gaps(_context(), project_root)
        assert result.gaps == []
        assert result.summary.total_files == 0
        assert result.summary.overall_line_coverage == 0.0
        assert result.summary.overall_branch_coverage == 0.0
        assert result.summary.overall_function_coverage == 0.0
        assert result.summary.overall_statement_coverage == 0.0
        assert result.summary.files_below_threshold == 0
