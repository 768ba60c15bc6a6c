"""Exception hierarchy for riskroute."""

from .base import RiskRouteError
from .config import ConfigurationError, InvalidConfigError
from .coverage import CoverageParseError
from .retrieval import (
    GitCommandError,
    GitUnavailableError,
    InvalidRefError,
    NotARepositoryError,
    RetrievalError,
)

__all__ = [
    "RiskRouteError",
    "RetrievalError",
    "GitUnavailableError",
    "NotARepositoryError",
    "InvalidRefError",
    "GitCommandError",
    "ConfigurationError",
    "InvalidConfigError",
    "CoverageParseError",
]
