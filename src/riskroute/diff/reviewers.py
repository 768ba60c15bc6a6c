"""Reviewer recommendation from changed paths and file risk."""

from __future__ import annotations

import re
from typing import Dict, List, Sequence

from ..vcs.models import DiffFile
from .models import FileRisk

# Used both as an extension lookup (+1) and as path substrings (+2).
REVIEWER_PATTERNS = (
    (".ts", ("typescript-expert", "coder")),
    (".tsx", ("frontend-expert", "coder", "reviewer")),
    (".py", ("python-expert", "coder")),
    (".go", ("go-expert", "coder")),
    (".rs", ("rust-expert", "coder")),
    (".sql", ("database-expert", "architect")),
    (".sh", ("devops-expert", "security-expert")),
    (".dockerfile", ("devops-expert", "security-expert")),
    (".yaml", ("devops-expert", "architect")),
    (".yml", ("devops-expert", "architect")),
    (".json", ("coder", "architect")),
    ("security", ("security-expert", "architect")),
    ("auth", ("security-expert", "architect")),
    ("payment", ("security-expert", "senior-reviewer")),
)
_EXTENSION_REVIEWERS = dict(REVIEWER_PATTERNS)

EXTENSION_RE = re.compile(r"\.[a-zA-Z0-9]+$")
SECURITY_REASON = re.compile(r"security", re.I)

EXTENSION_WEIGHT = 1
PATH_WEIGHT = 2
RISK_WEIGHT = 3
MAX_REVIEWERS = 5


def suggest_reviewers(files: Sequence[DiffFile], file_risks: Sequence[FileRisk]) -> List[str]:
    """Rank reviewer tags for a change set, best first.

    Equal scores keep the order in which tags were first credited.
    """
    scores: Dict[str, int] = {}

    def credit(reviewer: str, points: int) -> None:
        scores[reviewer] = scores.get(reviewer, 0) + points

    for file in files:
        match = EXTENSION_RE.search(file.path)
        ext = match.group(0) if match else ""
        for reviewer in _EXTENSION_REVIEWERS.get(ext, ()):
            credit(reviewer, EXTENSION_WEIGHT)

        path = file.path.lower()
        for key, reviewers in REVIEWER_PATTERNS:
            if key in path:
                for reviewer in reviewers:
                    credit(reviewer, PATH_WEIGHT)

    for risk in file_risks:
        if risk.risk not in ("high-risk", "critical"):
            continue
        credit("senior-reviewer", RISK_WEIGHT)
        if any(SECURITY_REASON.search(reason) for reason in risk.reasons):
            credit("security-expert", RISK_WEIGHT)

    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return [reviewer for reviewer, _ in ranked[:MAX_REVIEWERS]]
