"""Data models for change-set risk, classification and the combined analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from ..enhancers import Provenance
from ..vcs.models import DiffFile

RiskLevel = Literal["low-risk", "medium-risk", "high-risk", "critical"]
TestCoverage = Literal["adequate", "insufficient", "unknown"]


@dataclass
class FileRisk:
    """Risk of a single changed file."""

    path: str
    risk: RiskLevel
    score: int  # 0-100
    reasons: List[str] = field(default_factory=list)  # evaluation order, may repeat


@dataclass
class RiskBreakdown:
    file_count: int
    total_changes: int
    high_risk_files: List[str] = field(default_factory=list)
    security_concerns: List[str] = field(default_factory=list)
    breaking_changes: List[str] = field(default_factory=list)
    test_coverage: TestCoverage = "unknown"


@dataclass
class DiffRiskAssessment:
    """Aggregate risk of a whole change set."""

    overall: RiskLevel
    score: int  # 0-100
    breakdown: RiskBreakdown


@dataclass
class DiffClassification:
    category: str
    confidence: float  # 0-1
    reasoning: str
    subcategory: Optional[str] = None


@dataclass
class DiffAnalysisResult:
    """Everything known about one change set, ready for presentation."""

    ref: str
    timestamp: str  # ISO-8601, UTC
    files: List[DiffFile]
    risk: DiffRiskAssessment
    classification: DiffClassification
    file_risks: List[FileRisk]
    recommended_reviewers: List[str]
    summary: str
    provenance: Provenance = field(default_factory=Provenance)
