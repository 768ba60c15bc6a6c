"""Whole-change analysis: git diff in, DiffAnalysisResult out."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence, Union

from ..enhancers import RuntimeContext
from ..logging_config import get_logger
from ..vcs import DiffFile, GitDiffAdapter
from .classifier import classify_diff
from .models import DiffAnalysisResult, DiffClassification, DiffRiskAssessment
from .reviewers import suggest_reviewers
from .risk import assess_file_risk, assess_overall_risk

logger = get_logger(__name__)


def generate_summary(
    files: Sequence[DiffFile],
    risk: DiffRiskAssessment,
    classification: DiffClassification,
) -> str:
    """One-paragraph human summary of an analysed change set."""
    parts = [f"{classification.category.capitalize()} change"]
    if classification.subcategory:
        parts.append(f"({classification.subcategory})")

    parts.append(f"affecting {len(files)} file(s).")
    parts.append(f"Risk level: {risk.overall} (score: {risk.score}/100).")

    concerns = len(risk.breakdown.security_concerns)
    if concerns:
        parts.append(f"{concerns} security concern(s) detected.")
    breaking = len(risk.breakdown.breaking_changes)
    if breaking:
        parts.append(f"{breaking} potential breaking change(s).")

    return " ".join(parts)


def analyze_files(
    files: Sequence[DiffFile],
    ref: str,
    context: Optional[RuntimeContext] = None,
) -> DiffAnalysisResult:
    """Run every diff heuristic over an already-collected change set."""
    context = context or RuntimeContext()
    file_risks = [assess_file_risk(f) for f in files]
    risk = assess_overall_risk(files, file_risks)
    classification = classify_diff(files)

    return DiffAnalysisResult(
        ref=ref,
        timestamp=datetime.now(timezone.utc).isoformat(),
        files=list(files),
        risk=risk,
        classification=classification,
        file_risks=file_risks,
        recommended_reviewers=suggest_reviewers(files, file_risks),
        summary=generate_summary(files, risk, classification),
        provenance=context.provenance(),
    )


def analyze_diff(
    ref: Optional[str] = None,
    context: Optional[RuntimeContext] = None,
    repo_path: Union[str, Path] = ".",
) -> DiffAnalysisResult:
    """Analyse the change set *ref* in the repository at *repo_path*.

    Raises:
        RetrievalError: If git cannot produce the change set. Nothing
            partial is returned.
    """
    context = context or RuntimeContext()
    ref = ref or context.config.default_ref

    adapter = GitDiffAdapter(repo_path, timeout=context.config.git_timeout_seconds)
    files = adapter.diff_files(ref)
    logger.debug("Analysing %d changed files for %s", len(files), ref)
    return analyze_files(files, ref, context)
