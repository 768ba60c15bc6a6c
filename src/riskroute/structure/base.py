"""Code-structure analyzer protocol.

A structure analyzer reports the raw counts the coverage gap analyzer turns
into a complexity score. The regex analyzer in ``fallback`` is always
available; richer analyzers can be plugged in through the
``riskroute.structure_analyzers`` entry-point group.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class FileStructure:
    """Size and shape counts for one source file."""

    path: str
    line_count: int
    control_flow_count: int  # branching / looping / exception keywords
    declaration_count: int  # classes, functions, function-valued bindings
    function_names: tuple[str, ...] = ()
    class_names: tuple[str, ...] = ()


@runtime_checkable
class StructureAnalyzer(Protocol):
    """Anything that can report FileStructure for a file on disk."""

    name: str

    def analyze(self, path: Path) -> Optional[FileStructure]:
        """Return counts for *path*, or None when the file cannot be read."""
        ...
