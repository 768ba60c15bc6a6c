"""LCOV tracefile parser.

Only the tags the gap analyzer needs are read:

    SF:<source file>
    DA:<line>,<hits>
    BRDA:<line>,<block>,<branch>,<hits or ->
    FNDA:<hits>,<function name>
    LF:<lines found>
    LH:<lines hit>

Records end at ``end_of_record``. A record without ``SF`` is skipped.
"""

from __future__ import annotations

from ..exceptions import CoverageParseError
from ..logging_config import get_logger
from .models import CoverageData, UncoveredBranch

logger = get_logger(__name__)

RECORD_TERMINATOR = "end_of_record"


def _percent(hit: int, found: int) -> float:
    # Nothing measured counts as fully covered.
    return hit / found * 100 if found > 0 else 100.0


def _to_int(value: str, tag: str, source: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise CoverageParseError("lcov", f"non-numeric {tag} field {value!r}", source)


def _parse_record(lines: list[str]) -> CoverageData | None:
    source = next((line[3:] for line in lines if line.startswith("SF:")), None)
    if source is None:
        return None

    data = CoverageData(file_path=source)
    lines_found = lines_hit = 0
    branches_found = branches_hit = 0
    functions_found = functions_hit = 0

    for line in lines:
        if line.startswith("DA:"):
            parts = line[3:].split(",")
            line_no = _to_int(parts[0], "DA", source)
            hits = _to_int(parts[1], "DA", source) if len(parts) > 1 else 0
            lines_found += 1
            if hits > 0:
                lines_hit += 1
            else:
                data.uncovered_lines.append(line_no)

        elif line.startswith("BRDA:"):
            parts = line[5:].split(",")
            if len(parts) < 4:
                raise CoverageParseError("lcov", f"short BRDA entry {line!r}", source)
            line_no = _to_int(parts[0], "BRDA", source)
            hits = 0 if parts[3] == "-" else _to_int(parts[3], "BRDA", source)
            branches_found += 1
            if hits > 0:
                branches_hit += 1
            else:
                data.uncovered_branches.append(UncoveredBranch(line=line_no))

        elif line.startswith("FNDA:"):
            hits_text, _, name = line[5:].partition(",")
            functions_found += 1
            if _to_int(hits_text, "FNDA", source) > 0:
                functions_hit += 1
            else:
                data.uncovered_functions.append(name)

        elif line.startswith("LF:"):
            data.total_lines = _to_int(line[3:], "LF", source)
        elif line.startswith("LH:"):
            data.covered_lines = _to_int(line[3:], "LH", source)

    data.line_coverage = _percent(lines_hit, lines_found)
    data.branch_coverage = _percent(branches_hit, branches_found)
    data.function_coverage = _percent(functions_hit, functions_found)
    # LCOV has no separate statement counts.
    data.statement_coverage = data.line_coverage
    return data


def _parse_records(content: str) -> list[CoverageData]:
    files = []
    for record in content.split(RECORD_TERMINATOR):
        if not record.strip():
            continue
        lines = [line.strip() for line in record.split("\n")]
        data = _parse_record([line for line in lines if line])
        if data is not None:
            files.append(data)
    return files


def parse_lcov(content: str) -> list[CoverageData]:
    """Parse LCOV text into one CoverageData per ``SF`` record.

    A malformed report yields an empty list; the failure is logged.
    """
    try:
        return _parse_records(content)
    except CoverageParseError as e:
        logger.warning("%s", e)
        return []
