"""Code-structure analysis used for complexity estimation."""

from .base import FileStructure, StructureAnalyzer
from .fallback import RegexStructureAnalyzer

__all__ = ["FileStructure", "StructureAnalyzer", "RegexStructureAnalyzer"]
