"""Read change sets from git via subprocess.

Two textual queries are combined into DiffFile records:

    git diff --numstat <ref>       additions / deletions / path ("-" marks binary)
    git diff --name-status <ref>   status code per path (R<score> old new for renames)

Records are correlated by exact path. Any git failure is fatal: callers get
a RetrievalError subclass and never a partial list.
"""

import re
import subprocess
from collections import Counter
from pathlib import Path
from typing import Optional, Union

from ..exceptions import (
    GitCommandError,
    GitUnavailableError,
    InvalidRefError,
    NotARepositoryError,
)
from ..logging_config import get_logger
from .models import DiffFile, FileStatus

logger = get_logger(__name__)

# stderr fragments git prints for the failure classes we distinguish
_NOT_A_REPO_MARKERS = ("not a git repository", "cannot change to")
_BAD_REF_MARKERS = (
    "unknown revision",
    "bad revision",
    "ambiguous argument",
    "invalid object name",
    "bad object",
    "invalid revision range",
)

# core.quotePath escapes: \ooo octal bytes plus the usual C escapes
_ESCAPE_RE = re.compile(rb'\\([0-3][0-7]{2}|.)')
_C_ESCAPES = {
    b"a": b"\a",
    b"b": b"\b",
    b"t": b"\t",
    b"n": b"\n",
    b"v": b"\v",
    b"f": b"\f",
    b"r": b"\r",
    b'"': b'"',
    b"\\": b"\\",
}

# "src/{old => new}/file.py" and "old.py => new.py"
_BRACE_RENAME_RE = re.compile(r"^(?P<prefix>.*)\{(?P<old>[^{}]*) => (?P<new>[^{}]*)\}(?P<suffix>.*)$")
_PLAIN_RENAME_RE = re.compile(r"^(?P<old>.+) => (?P<new>.+)$")

MAX_CONTRIBUTORS = 5


class GitDiffAdapter:
    """Turn a ref expression into structured per-file diff records."""

    def __init__(self, repo_path: Union[str, Path] = ".", timeout: int = 30):
        self.repo_path = str(Path(repo_path).resolve())
        self.timeout = timeout

    # ── Raw text queries ─────────────────────────────────────────────────

    def diff_text(self, ref: str = "HEAD~1") -> str:
        """Unified diff text for *ref*."""
        return self._run_diff(ref)

    def diff_stat(self, ref: str = "HEAD~1") -> str:
        """``--stat`` summary text for *ref*."""
        return self._run_diff(ref, "--stat")

    def numstat(self, ref: str = "HEAD~1") -> str:
        return self._run_diff(ref, "--numstat")

    def name_status(self, ref: str = "HEAD~1") -> str:
        return self._run_diff(ref, "--name-status")

    # ── Structured records ───────────────────────────────────────────────

    def diff_files(self, ref: str = "HEAD~1") -> list[DiffFile]:
        """Combine numstat and name-status output into DiffFile records."""
        files = build_diff_files(self.numstat(ref), self.name_status(ref))
        logger.debug("Parsed %d changed file(s) for ref %s", len(files), ref)
        return files

    def file_contributors(self, path: str) -> list[str]:
        """Top contributors to *path* by commit count, most frequent first.

        History is best-effort reviewer context, so failures return an
        empty list instead of raising.
        """
        try:
            raw = self._run(["log", "--format=%an", "--follow", "--", path])
        except (GitUnavailableError, NotARepositoryError, InvalidRefError, GitCommandError) as e:
            logger.debug("Contributor lookup failed for %s: %s", path, e)
            return []
        return rank_contributors(raw)

    # ── Subprocess plumbing ──────────────────────────────────────────────

    def _run_diff(self, ref: str, *flags: str) -> str:
        _check_ref(ref)
        return self._run(["diff", *flags, ref])

    def _run(self, args: list[str]) -> str:
        cmd = ["git", "-C", self.repo_path, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise GitUnavailableError("git executable not found")
        except subprocess.TimeoutExpired:
            raise GitUnavailableError(f"git timed out after {self.timeout}s")

        if result.returncode != 0:
            raise _classify_failure(cmd, args, result.returncode, result.stderr.strip(), self.repo_path)
        return result.stdout


def _check_ref(ref: str) -> None:
    if not ref or not ref.strip():
        raise InvalidRefError(ref, "empty ref expression")
    if ref.startswith("-"):
        raise InvalidRefError(ref, "ref expressions may not start with '-'")


def _classify_failure(
    cmd: list[str], args: list[str], returncode: int, stderr: str, repo_path: str
) -> Exception:
    lowered = stderr.lower()
    if any(marker in lowered for marker in _NOT_A_REPO_MARKERS):
        return NotARepositoryError(repo_path, stderr)
    if any(marker in lowered for marker in _BAD_REF_MARKERS):
        ref = args[-1] if args else ""
        return InvalidRefError(ref, stderr)
    return GitCommandError(cmd, returncode, stderr)


# ---------------------------------------------------------------------------
# Parsers (pure functions over git's text output)
# ---------------------------------------------------------------------------


def _unquote(path: str) -> str:
    """Undo git's C-style quoting, including octal-escaped UTF-8 bytes."""
    if len(path) < 2 or path[0] != '"' or path[-1] != '"':
        return path

    def _replace(match: "re.Match[bytes]") -> bytes:
        code = match.group(1)
        if len(code) == 3:
            return bytes([int(code, 8)])
        return _C_ESCAPES.get(code, code)

    raw = _ESCAPE_RE.sub(_replace, path[1:-1].encode("utf-8"))
    return raw.decode("utf-8", errors="replace")


def split_rename_path(path: str) -> tuple[str, Optional[str]]:
    """Resolve numstat rename notation to ``(new_path, old_path)``.

    Plain paths come back as ``(path, None)``.
    """
    match = _BRACE_RENAME_RE.match(path)
    if match:
        prefix, suffix = match.group("prefix"), match.group("suffix")
        new = f"{prefix}{match.group('new')}{suffix}".replace("//", "/")
        old = f"{prefix}{match.group('old')}{suffix}".replace("//", "/")
        return new, old
    match = _PLAIN_RENAME_RE.match(path)
    if match:
        return match.group("new"), match.group("old")
    return path, None


def parse_name_status(text: str) -> dict[str, tuple[str, Optional[str]]]:
    """Map each new-side path to ``(status_code, old_path)``."""
    statuses: dict[str, tuple[str, Optional[str]]] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) < 2:
            continue
        code = parts[0].strip()
        if len(parts) >= 3:
            # R<score>/C<score>: old path, then new path
            statuses[_unquote(parts[2])] = (code, _unquote(parts[1]))
        else:
            statuses[_unquote(parts[1])] = (code, None)
    return statuses


def _status_from_code(code: str) -> FileStatus:
    if code.startswith("A"):
        return "added"
    if code.startswith("D"):
        return "deleted"
    if code.startswith("R"):
        return "renamed"
    return "modified"


def build_diff_files(numstat_text: str, name_status_text: str) -> list[DiffFile]:
    """Correlate numstat and name-status output by exact path.

    Paths missing from the name-status output default to "modified".
    """
    statuses = parse_name_status(name_status_text)
    files: list[DiffFile] = []

    for line in numstat_text.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) < 3:
            continue

        added_raw, deleted_raw = parts[0].strip(), parts[1].strip()
        path, numstat_old = split_rename_path(_unquote("\t".join(parts[2:])))

        binary = added_raw == "-" and deleted_raw == "-"
        additions = 0 if added_raw == "-" else int(added_raw)
        deletions = 0 if deleted_raw == "-" else int(deleted_raw)

        code, status_old = statuses.get(path, ("M", None))
        status = _status_from_code(code)
        old_path = (status_old or numstat_old) if status == "renamed" else None

        files.append(
            DiffFile(
                path=path,
                status=status,
                additions=additions,
                deletions=deletions,
                hunks=1,
                binary=binary,
                old_path=old_path,
            )
        )

    return files


def rank_contributors(log_text: str, limit: int = MAX_CONTRIBUTORS) -> list[str]:
    """Deduplicate author names, ordered by commit frequency (ties: first seen)."""
    counts = Counter(line.strip() for line in log_text.splitlines() if line.strip())
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [name for name, _count in ranked[:limit]]
