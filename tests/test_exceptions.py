"""Tests for the riskroute exception hierarchy."""

import pytest

from riskroute.exceptions import (
    ConfigurationError,
    CoverageParseError,
    GitCommandError,
    GitUnavailableError,
    InvalidConfigError,
    InvalidRefError,
    NotARepositoryError,
    RetrievalError,
    RiskRouteError,
)


class TestRiskRouteError:
    """Test base error formatting."""

    def test_message_only(self):
        assert str(RiskRouteError("boom")) == "boom"

    def test_details_appended(self):
        error = RiskRouteError("boom", {"a": "1", "b": "2"})
        assert str(error) == "boom (a=1, b=2)"
        assert error.details == {"a": "1", "b": "2"}


class TestHierarchy:
    """Every error is a RiskRouteError; retrieval errors share a base."""

    @pytest.mark.parametrize(
        "error",
        [
            GitUnavailableError("missing"),
            NotARepositoryError("/tmp/x"),
            InvalidRefError("nope"),
            GitCommandError(["git", "diff"], 2, "bad"),
        ],
    )
    def test_retrieval_errors(self, error):
        assert isinstance(error, RetrievalError)
        assert isinstance(error, RiskRouteError)

    def test_configuration_errors(self):
        assert issubclass(InvalidConfigError, ConfigurationError)
        assert issubclass(ConfigurationError, RiskRouteError)

    def test_coverage_parse_error(self):
        assert issubclass(CoverageParseError, RiskRouteError)
        assert not issubclass(CoverageParseError, RetrievalError)


class TestErrorDetails:
    """Test the structured fields each error carries."""

    def test_invalid_ref(self):
        error = InvalidRefError("main..nope", "fatal: bad revision")
        assert error.ref == "main..nope"
        assert error.details == {"ref": "main..nope", "stderr": "fatal: bad revision"}

    def test_not_a_repository_without_stderr(self):
        error = NotARepositoryError("/srv/app")
        assert error.details == {"path": "/srv/app"}
        assert "Not a git repository: /srv/app" in str(error)

    def test_git_command_error(self):
        error = GitCommandError(["git", "log"], 128, "fatal")
        assert error.command == ["git", "log"]
        assert error.returncode == 128
        assert str(error) == "git command failed: git log (returncode=128, stderr=fatal)"

    def test_invalid_config(self):
        error = InvalidConfigError("suggest_limit", 0, "must be at least 1")
        assert error.key == "suggest_limit"
        assert error.details["reason"] == "must be at least 1"

    def test_coverage_parse_error_source(self):
        error = CoverageParseError("lcov", "bad DA", "src/a.ts")
        assert error.details == {"format": "lcov", "reason": "bad DA", "source": "src/a.ts"}
        assert CoverageParseError("lcov", "bad DA").source is None
