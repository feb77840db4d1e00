"""
CSV export / import of the two-semester record set.

File format (header required):

    semester,code,units,grade
    harmattan,"CSC101","3","A"
    rain,"MTH102","4","B"

The semester label is written bare; the three value fields are always quoted
with embedded quotes doubled. Reading is tolerant: header columns may come in
any order, rows with fewer than four fields are skipped and unknown semester
labels fall back to harmattan.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from grademate.model import HARMATTAN, RAIN, SEMESTERS, CourseRecord, SemesterRecordSet
from grademate.records import ensure_not_empty


logger = logging.getLogger(__name__)

HEADER = "semester,code,units,grade"
REQUIRED_COLUMNS = ("semester", "code", "units", "grade")
EXPORT_FILENAME = "oau-grade-mate-export.csv"

# A quoted value (anything up to a closing quote) or a bare token, each
# followed by a comma or the end of the line.
_TOKEN_RE = re.compile(r'(".*?"|[^",\s]+)(?=\s*,|\s*$)')
_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")


class FormatError(ValueError):
    """Raised when a CSV text cannot be imported at all."""


def _quote(value: str) -> str:
    return '"' + str(value).replace('"', '""') + '"'


def _strip_quotes(token: str) -> str:
    # one leading and one trailing quote, independently
    if token.startswith('"'):
        token = token[1:]
    if token.endswith('"'):
        token = token[:-1]
    return token


def _unquote_field(token: str) -> str:
    if token.startswith('"') and token.endswith('"') and len(token) >= 2:
        return token[1:-1].replace('""', '"')
    return _strip_quotes(token)


def encode_csv(record_set: SemesterRecordSet) -> str:
    """
    Serialize both semesters (harmattan first). Fully blank rows are skipped.
    """
    lines: list[str] = [HEADER]
    for sem in SEMESTERS:
        for record in record_set.get(sem, []):
            if record.is_blank():
                continue
            lines.append(",".join([sem, _quote(record.code), _quote(record.units), _quote(record.grade)]))
    return "\n".join(lines)


def _parse_header(line: str) -> set[str]:
    return {_strip_quotes(tok.strip()).lower() for tok in line.split(",")}


def decode_csv(text: str) -> SemesterRecordSet:
    """
    Parse CSV text into a complete record set (never merged with existing data).

    Raises FormatError if there are no non-empty lines or the header lacks one
    of semester, code, units, grade.
    """
    lines = [line for line in _LINE_SPLIT_RE.split(text) if line.strip()]
    if not lines:
        raise FormatError("CSV file is empty.")

    columns = _parse_header(lines[0])
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise FormatError(
            f"CSV header missing required columns: {', '.join(missing)}. Expected: {HEADER}"
        )

    record_set: SemesterRecordSet = {sem: [] for sem in SEMESTERS}
    for lineno, line in enumerate(lines[1:], start=2):
        tokens = _TOKEN_RE.findall(line)
        if len(tokens) < 4:
            logger.debug("Skipping CSV line %d: expected 4 fields, found %d", lineno, len(tokens))
            continue

        raw = [_unquote_field(tok).strip() for tok in tokens[:4]]
        sem = RAIN if raw[0].lower() == RAIN else HARMATTAN
        record_set[sem].append(CourseRecord(code=raw[1], units=raw[2], grade=raw[3].upper()))

    return ensure_not_empty(record_set)


def export_csv(record_set: SemesterRecordSet, out_path: str | Path) -> int:
    """
    Write the CSV file. Returns the number of exported rows.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    text = encode_csv(record_set)
    out.write_text(text, encoding="utf-8")
    return text.count("\n")


def import_csv(path: str | Path) -> SemesterRecordSet:
    """
    Read and decode a CSV file. A UTF-8 byte-order mark is tolerated.
    """
    text = Path(path).read_text(encoding="utf-8-sig")
    return decode_csv(text)
