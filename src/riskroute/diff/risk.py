"""Per-file and whole-change risk scoring.

File scores come from an ordered rule cascade over the path and the change
size. Rules are literal ordered tuples: every matching rule contributes, and
reasons are recorded in evaluation order.
"""

from __future__ import annotations

import re
from typing import Sequence

from ..vcs.models import DiffFile
from .models import DiffRiskAssessment, FileRisk, RiskBreakdown, RiskLevel, TestCoverage

HIGH_RISK_PATTERNS = (
    (
        re.compile(r"auth|authentication|login|password|secret|token|key|credential", re.I),
        "Security-sensitive code",
    ),
    (re.compile(r"payment|billing|checkout|stripe|paypal|transaction", re.I), "Payment processing code"),
    (re.compile(r"database|migration|schema|sql|query", re.I), "Database changes"),
    (re.compile(r"security|permission|access|rbac|acl", re.I), "Security/permission changes"),
    (re.compile(r"config|\.env|environment", re.I), "Configuration changes"),
    (re.compile(r"api/v\d|breaking|deprecat", re.I), "Potential API breaking changes"),
    (re.compile(r"crypto|encrypt|decrypt|hash", re.I), "Cryptography code"),
)

MEDIUM_RISK_PATTERNS = (
    (re.compile(r"core|base|foundation|lib/", re.I), "Core library changes"),
    (re.compile(r"interface|type|contract", re.I), "Interface/contract changes"),
    (re.compile(r"package\.json|yarn\.lock|package-lock", re.I), "Dependency changes"),
    (re.compile(r"ci|cd|workflow|pipeline|\.github", re.I), "CI/CD changes"),
    (re.compile(r"docker|kubernetes|k8s|helm", re.I), "Infrastructure changes"),
)

SAFE_PATTERNS = (
    (re.compile(r"\.md$|readme|docs/", re.I), "Documentation"),
    (re.compile(r"\.test\.|\.spec\.|__tests__", re.I), "Test files"),
    (re.compile(r"\.snap$|snapshot", re.I), "Snapshot files"),
    (re.compile(r"\.css$|\.scss$|\.less$|\.styl", re.I), "Style files"),
    (re.compile(r"comments?|todo|fixme", re.I), "Comment changes"),
)

HIGH_RISK_WEIGHT = 25
MEDIUM_RISK_WEIGHT = 15
SAFE_DISCOUNT = 20
DELETION_WEIGHT = 15
BINARY_WEIGHT = 10
CONCERN_WEIGHT = 10

# Independent sweeps used by the whole-change assessment
SECURITY_SWEEP = re.compile(r"auth|password|secret|token|key|credential|crypto", re.I)
BREAKING_SWEEP = re.compile(r"api/v\d|breaking|deprecat|interface|type", re.I)
TEST_FILE = re.compile(r"\.test\.|\.spec\.|__tests__", re.I)
SOURCE_FILE = re.compile(r"\.(ts|tsx|js|jsx|py|go|rs)$")
TEST_SUFFIX = re.compile(r"\.test\.|\.spec\.", re.I)


def risk_label(score: float) -> RiskLevel:
    """Map a 0-100 score onto its risk label."""
    if score >= 70:
        return "critical"
    if score >= 50:
        return "high-risk"
    if score >= 25:
        return "medium-risk"
    return "low-risk"


def _size_score(total_changes: int) -> tuple[int, str | None]:
    if total_changes > 500:
        return 30, f"Large change ({total_changes} lines)"
    if total_changes > 200:
        return 20, f"Significant change ({total_changes} lines)"
    if total_changes > 50:
        return 10, None
    return 0, None


def assess_file_risk(file: DiffFile) -> FileRisk:
    """Score one changed file."""
    reasons = []
    score, size_reason = _size_score(file.total_changes)
    if size_reason:
        reasons.append(size_reason)

    for pattern, reason in HIGH_RISK_PATTERNS:
        if pattern.search(file.path):
            score += HIGH_RISK_WEIGHT
            reasons.append(reason)

    for pattern, reason in MEDIUM_RISK_PATTERNS:
        if pattern.search(file.path):
            score += MEDIUM_RISK_WEIGHT
            reasons.append(reason)

    for pattern, reason in SAFE_PATTERNS:
        if pattern.search(file.path):
            score = max(0, score - SAFE_DISCOUNT)
            reasons.append(f"{reason} (lower risk)")

    if file.status == "deleted":
        score += DELETION_WEIGHT
        reasons.append("File deletion")

    if file.binary:
        score += BINARY_WEIGHT
        reasons.append("Binary file")

    score = min(100, score)
    return FileRisk(path=file.path, risk=risk_label(score), score=score, reasons=reasons)


def _round_half_up(value: float) -> int:
    # Half-up, unlike round().
    return int(value + 0.5)


def assess_test_coverage(files: Sequence[DiffFile]) -> TestCoverage:
    """Compare changed test files against changed source files."""
    test_files = [f for f in files if TEST_FILE.search(f.path)]
    source_files = [
        f for f in files if SOURCE_FILE.search(f.path) and not TEST_SUFFIX.search(f.path)
    ]
    if not source_files:
        return "unknown"
    return "adequate" if len(test_files) >= len(source_files) * 0.5 else "insufficient"


def assess_overall_risk(
    files: Sequence[DiffFile], file_risks: Sequence[FileRisk]
) -> DiffRiskAssessment:
    """Combine per-file risks into one assessment for the change set."""
    total_changes = sum(f.total_changes for f in files)
    high_risk_files = [r.path for r in file_risks if r.risk in ("high-risk", "critical")]

    security_concerns = [
        f"Security-sensitive file: {f.path}" for f in files if SECURITY_SWEEP.search(f.path)
    ]
    breaking_changes = [
        f"Potential breaking change: {f.path}"
        for f in files
        if BREAKING_SWEEP.search(f.path) and f.deletions > f.additions
    ]

    score = sum(r.score for r in file_risks) / len(file_risks) if file_risks else 0.0

    if len(files) > 20:
        score += 15
    elif len(files) > 10:
        score += 10
    elif len(files) > 5:
        score += 5

    score += len(security_concerns) * CONCERN_WEIGHT
    score += len(breaking_changes) * CONCERN_WEIGHT
    final_score = min(100, _round_half_up(score))

    return DiffRiskAssessment(
        overall=risk_label(final_score),
        score=final_score,
        breakdown=RiskBreakdown(
            file_count=len(files),
            total_changes=total_changes,
            high_risk_files=high_risk_files,
            security_concerns=security_concerns,
            breaking_changes=breaking_changes,
            test_coverage=assess_test_coverage(files),
        ),
    )
