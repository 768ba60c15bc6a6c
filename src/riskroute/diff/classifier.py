"""Change-set classification.

Each file lands in exactly one category, decided by the first matching
check in ``FILE_CATEGORY_RULES`` and then by its change shape. The
category with the highest count wins; on a tie the category listed first
in ``CATEGORIES`` wins.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Sequence

from ..vcs.models import DiffFile
from .models import DiffClassification

CATEGORIES = (
    "feature",
    "bugfix",
    "refactor",
    "test",
    "docs",
    "config",
    "style",
    "infra",
    "security",
)

# Matched against the lowercased path, first match wins.
FILE_CATEGORY_RULES = (
    (re.compile(r"\.test\.|\.spec\.|__tests__"), "test"),
    (re.compile(r"\.md$|readme|docs/"), "docs"),
    (re.compile(r"\.css$|\.scss$|\.less$|\.styl"), "style"),
    (re.compile(r"config|\.env|\.yaml|\.yml|\.json$"), "config"),
    (re.compile(r"docker|kubernetes|k8s|helm|ci|cd|workflow"), "infra"),
    (re.compile(r"auth|security|permission|crypto"), "security"),
)

# category -> ordered (pattern, subcategory), searched in all paths joined
SUBCATEGORY_RULES = {
    "feature": (
        (re.compile(r"api"), "api"),
        (re.compile(r"ui|component|page"), "frontend"),
        (re.compile(r"model|database"), "backend"),
    ),
    "bugfix": (
        (re.compile(r"security|auth"), "security-fix"),
        (re.compile(r"performance|perf"), "performance-fix"),
    ),
    "infra": (
        (re.compile(r"docker"), "containerization"),
        (re.compile(r"ci|cd|workflow"), "ci-cd"),
        (re.compile(r"kubernetes|k8s"), "kubernetes"),
    ),
}


def categorize_file(file: DiffFile) -> str:
    """Return the single category *file* counts toward."""
    path = file.path.lower()
    for pattern, category in FILE_CATEGORY_RULES:
        if pattern.search(path):
            return category
    if file.deletions > file.additions * 2:
        return "refactor"
    if file.status == "added":
        return "feature"
    return "bugfix"


def count_categories(files: Sequence[DiffFile]) -> Dict[str, int]:
    counts = dict.fromkeys(CATEGORIES, 0)
    for file in files:
        counts[categorize_file(file)] += 1
    return counts


def _subcategory(category: str, files: Sequence[DiffFile]) -> Optional[str]:
    paths = " ".join(f.path.lower() for f in files)
    for pattern, subcategory in SUBCATEGORY_RULES.get(category, ()):
        if pattern.search(paths):
            return subcategory
    return None


def _reasoning(category: str, files: Sequence[DiffFile], counts: Dict[str, int]) -> str:
    parts = [f"{len(files)} file(s) changed."]
    if counts["test"]:
        parts.append(f"{counts['test']} test file(s).")
    if counts["docs"]:
        parts.append(f"{counts['docs']} documentation file(s).")

    added = sum(1 for f in files if f.status == "added")
    deleted = sum(1 for f in files if f.status == "deleted")
    if added:
        parts.append(f"{added} new file(s) added.")
    if deleted:
        parts.append(f"{deleted} file(s) deleted.")

    parts.append(f"Classified as {category} based on change patterns.")
    return " ".join(parts)


def classify_diff(files: Sequence[DiffFile]) -> DiffClassification:
    """Classify the intent of a change set."""
    counts = count_categories(files)

    # Strictly greater: the earliest category keeps a tie.
    category, max_count = "feature", 0
    for name in CATEGORIES:
        if counts[name] > max_count:
            category, max_count = name, counts[name]

    total = sum(counts.values())
    confidence = min(0.95, max_count / total + 0.2) if total > 0 else 0.5

    return DiffClassification(
        category=category,
        subcategory=_subcategory(category, files),
        confidence=confidence,
        reasoning=_reasoning(category, files, counts),
    )
