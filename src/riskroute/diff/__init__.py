"""Change-set risk scoring, classification and reviewer recommendation."""

from .classifier import CATEGORIES, categorize_file, classify_diff
from .engine import analyze_diff, analyze_files, generate_summary
from .models import (
    DiffAnalysisResult,
    DiffClassification,
    DiffRiskAssessment,
    FileRisk,
    RiskBreakdown,
    RiskLevel,
)
from .reviewers import suggest_reviewers
from .risk import assess_file_risk, assess_overall_risk, risk_label

__all__ = [
    "CATEGORIES",
    "DiffAnalysisResult",
    "DiffClassification",
    "DiffRiskAssessment",
    "FileRisk",
    "RiskBreakdown",
    "RiskLevel",
    "analyze_diff",
    "analyze_files",
    "assess_file_risk",
    "assess_overall_risk",
    "categorize_file",
    "classify_diff",
    "generate_summary",
    "risk_label",
    "suggest_reviewers",
]
