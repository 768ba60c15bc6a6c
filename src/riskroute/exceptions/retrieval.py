"""Retrieval exceptions: the version-control queries an analysis cannot run without.

Any of these aborts the analysis. No partial file list is ever returned
alongside them.
"""

from pathlib import Path
from typing import Sequence, Union

from .base import RiskRouteError


class RetrievalError(RiskRouteError):
    """Base class for fatal retrieval failures."""

    pass


class GitUnavailableError(RetrievalError):
    """Raised when the git executable is missing or a git query timed out."""

    def __init__(self, reason: str):
        super().__init__("git is unavailable", details={"reason": reason})
        self.reason = reason


class NotARepositoryError(RetrievalError):
    """Raised when the working directory is not inside a git work tree."""

    def __init__(self, path: Union[str, Path], stderr: str = ""):
        details = {"path": str(path)}
        if stderr:
            details["stderr"] = stderr
        super().__init__(f"Not a git repository: {path}", details=details)
        self.path = path
        self.stderr = stderr


class InvalidRefError(RetrievalError):
    """Raised when git rejects a ref expression."""

    def __init__(self, ref: str, stderr: str = ""):
        details = {"ref": ref}
        if stderr:
            details["stderr"] = stderr
        super().__init__(f"Invalid ref: {ref}", details=details)
        self.ref = ref
        self.stderr = stderr


class GitCommandError(RetrievalError):
    """Raised when a git query exits non-zero for any other reason."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str):
        cmd = " ".join(command)
        super().__init__(
            f"git command failed: {cmd}",
            details={"returncode": str(returncode), "stderr": stderr},
        )
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
