"""Istanbul / c8 JSON coverage parser.

Two shapes are accepted per file entry:

- summary (``coverage-summary.json``): ``lines``/``statements``/
  ``branches``/``functions`` objects carrying ``total``, ``covered``, ``pct``.
- detailed (``coverage-final.json``): hit maps ``s``/``b``/``f`` alongside
  ``statementMap``/``branchMap``/``fnMap`` source positions.

A summary entry takes precedence when both are present.
"""

from __future__ import annotations

import json
from typing import Any

from ..exceptions import CoverageParseError
from ..logging_config import get_logger
from .models import BranchKind, CoverageData, UncoveredBranch

logger = get_logger(__name__)

# Istanbul branch type -> normalized branch kind
BRANCH_KINDS: dict[str, BranchKind] = {
    "if": "if",
    "cond-expr": "ternary",
    "switch": "case",
    "binary-expr": "logical",
}


def _percent(hit: int, found: int) -> float:
    return hit / found * 100 if found > 0 else 100.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _branch_line(info: dict) -> int | None:
    line = info.get("line")
    if line is None:
        line = (info.get("loc") or {}).get("start", {}).get("line")
    return line


def _summary_pct(metric: Any, fallback: float = 100.0) -> float:
    """A summary ``pct``; older istanbul writes "Unknown" for zero totals."""
    if isinstance(metric, dict) and _is_number(metric.get("pct")):
        return float(metric["pct"])
    return fallback


def _apply_summary(data: CoverageData, entry: dict) -> None:
    lines = entry["lines"]
    data.line_coverage = _summary_pct(lines)
    data.statement_coverage = _summary_pct(entry.get("statements"), data.line_coverage)
    data.branch_coverage = _summary_pct(entry.get("branches"))
    data.function_coverage = _summary_pct(entry.get("functions"))
    data.total_lines = int(lines.get("total", 0))
    data.covered_lines = int(lines.get("covered", 0))


def _apply_statements(data: CoverageData, entry: dict) -> None:
    statement_map = entry["statementMap"]
    total = covered = 0
    for stmt_id, hits in entry["s"].items():
        total += 1
        if hits > 0:
            covered += 1
            continue
        line = (statement_map.get(stmt_id) or {}).get("start", {}).get("line")
        if line:
            data.uncovered_lines.append(line)

    data.statement_coverage = _percent(covered, total)
    data.line_coverage = data.statement_coverage
    data.total_lines = total
    data.covered_lines = covered


def _apply_branches(data: CoverageData, entry: dict) -> None:
    branch_map = entry["branchMap"]
    total = covered = 0
    for branch_id, hit_counts in entry["b"].items():
        info = branch_map.get(branch_id)
        for hits in hit_counts:
            total += 1
            if hits > 0:
                covered += 1
            elif info:
                line = _branch_line(info)
                if line is not None:
                    kind = BRANCH_KINDS.get(info.get("type", ""), "unknown")
                    data.uncovered_branches.append(UncoveredBranch(line=line, kind=kind))
    data.branch_coverage = _percent(covered, total)


def _apply_functions(data: CoverageData, entry: dict) -> None:
    fn_map = entry["fnMap"]
    total = covered = 0
    for fn_id, hits in entry["f"].items():
        total += 1
        if hits > 0:
            covered += 1
            continue
        name = (fn_map.get(fn_id) or {}).get("name")
        if name:
            data.uncovered_functions.append(name)
    data.function_coverage = _percent(covered, total)


def _has_maps(entry: dict, hits_key: str, map_key: str) -> bool:
    # Empty maps still count: they measure zero units.
    return isinstance(entry.get(hits_key), dict) and isinstance(entry.get(map_key), dict)


def _parse_entry(key: str, entry: dict) -> CoverageData:
    data = CoverageData(file_path=entry.get("path") or key)

    lines = entry.get("lines")
    if isinstance(lines, dict) and "pct" in lines:
        _apply_summary(data, entry)
        return data

    if _has_maps(entry, "s", "statementMap"):
        _apply_statements(data, entry)
    if _has_maps(entry, "b", "branchMap"):
        _apply_branches(data, entry)
    if _has_maps(entry, "f", "fnMap"):
        _apply_functions(data, entry)

    data.uncovered_lines = sorted(set(data.uncovered_lines))
    return data


def _parse_report(content: str) -> list[CoverageData]:
    try:
        report = json.loads(content)
    except json.JSONDecodeError as e:
        raise CoverageParseError("istanbul", f"invalid JSON: {e}")
    if not isinstance(report, dict):
        raise CoverageParseError("istanbul", "top-level value is not an object")

    files = []
    for key, entry in report.items():
        if key == "total":
            continue
        if not isinstance(entry, dict):
            raise CoverageParseError("istanbul", "file entry is not an object", key)
        try:
            files.append(_parse_entry(key, entry))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise CoverageParseError("istanbul", f"malformed entry: {e}", key)
    return files


def parse_istanbul_json(content: str) -> list[CoverageData]:
    """Parse an Istanbul/c8 JSON report.

    A report that is not JSON, or has a malformed entry, yields an empty
    list; the failure is logged.
    """
    try:
        return _parse_report(content)
    except CoverageParseError as e:
        logger.warning("%s", e)
        return []
