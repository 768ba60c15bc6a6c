"""Coverage report exceptions.

These never leave the coverage package: the parsers catch them and
degrade to an empty record set.
"""

from typing import Optional

from .base import RiskRouteError


class CoverageParseError(RiskRouteError):
    """Raised when a coverage report cannot be parsed."""

    def __init__(self, fmt: str, reason: str, source: Optional[str] = None):
        details = {"format": fmt, "reason": reason}
        if source:
            details["source"] = source
        super().__init__(f"Failed to parse {fmt} coverage report", details=details)
        self.fmt = fmt
        self.reason = reason
        self.source = source
