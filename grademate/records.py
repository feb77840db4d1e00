"""
Editing operations on the two-semester record set.

Every operation keeps the invariant that a semester is never empty:
removing the last row leaves one blank row behind.
"""

from __future__ import annotations

from grademate.model import COURSE_FIELDS, SEMESTERS, CourseRecord, SemesterRecordSet


def blank_record_set() -> SemesterRecordSet:
    return {sem: [CourseRecord()] for sem in SEMESTERS}


def _check_semester(semester: str) -> None:
    if semester not in SEMESTERS:
        raise ValueError(f"Unknown semester: {semester!r}")


def ensure_not_empty(record_set: SemesterRecordSet) -> SemesterRecordSet:
    """
    Give every semester that has no rows a single blank row.
    Missing semester keys are added the same way.
    """
    for sem in SEMESTERS:
        if not record_set.get(sem):
            record_set[sem] = [CourseRecord()]
    return record_set


def add_course(record_set: SemesterRecordSet, semester: str, record: CourseRecord | None = None) -> int:
    """
    Append a row (blank unless given) and return its 0-based index.
    """
    _check_semester(semester)
    rows = record_set.setdefault(semester, [])
    rows.append(record if record is not None else CourseRecord())
    return len(rows) - 1


def update_course(record_set: SemesterRecordSet, semester: str, index: int, field_name: str, value: str) -> None:
    """
    Replace one raw field of a row. The value is stored as typed.
    """
    _check_semester(semester)
    if field_name not in COURSE_FIELDS:
        raise ValueError(f"Unknown field: {field_name!r} (expected one of {', '.join(COURSE_FIELDS)})")
    rows = record_set[semester]
    if not (0 <= index < len(rows)):
        raise IndexError(f"Row {index + 1} does not exist in {semester}")
    setattr(rows[index], field_name, value)


def delete_course(record_set: SemesterRecordSet, semester: str, index: int) -> CourseRecord:
    """
    Remove a row and return it. The last row of a semester is replaced by a
    blank row instead of leaving the semester empty.
    """
    _check_semester(semester)
    rows = record_set[semester]
    if not (0 <= index < len(rows)):
        raise IndexError(f"Row {index + 1} does not exist in {semester}")
    removed = rows.pop(index)
    if not rows:
        rows.append(CourseRecord())
    return removed
