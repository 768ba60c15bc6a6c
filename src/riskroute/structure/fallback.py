"""Regex-based structure analyzer.

Used when no AST-backed analyzer is installed. Counts are approximate but
deterministic, which is what the complexity heuristic needs.

Supports any text source; the keyword sets cover JavaScript/TypeScript
and Python.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..logging_config import get_logger
from .base import FileStructure

logger = get_logger(__name__)

CONTROL_FLOW_RE = re.compile(
    r"\b(if|elif|else|switch|case|for|while|do|try|catch|except|throw|raise)\b"
)
DECLARATION_RE = re.compile(
    r"\b(class|function|def\s+\w+|const\s+\w+\s*=\s*(async\s+)?\(|=>\s*\{)"
)
FUNCTION_NAME_RE = re.compile(r"\b(?:def|function)\s+([A-Za-z_\$][\w\$]*)")
CLASS_NAME_RE = re.compile(r"\bclass\s+([A-Za-z_\$][\w\$]*)")


@dataclass
class RegexStructureAnalyzer:
    """Regex analyzer that produces FileStructure."""

    name: str = "regex"

    def analyze(self, path: Path) -> Optional[FileStructure]:
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot read %s for structure analysis: %s", path, e)
            return None
        return self.analyze_text(content, str(path))

    def analyze_text(self, content: str, path: str = "") -> FileStructure:
        """Count lines, control-flow keywords and declarations in *content*."""
        return FileStructure(
            path=path,
            line_count=len(content.split("\n")),
            control_flow_count=sum(1 for _ in CONTROL_FLOW_RE.finditer(content)),
            declaration_count=sum(1 for _ in DECLARATION_RE.finditer(content)),
            function_names=tuple(FUNCTION_NAME_RE.findall(content)),
            class_names=tuple(CLASS_NAME_RE.findall(content)),
        )
