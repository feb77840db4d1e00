"""
Grade points, semester GPA and cumulative GPA.

Grade scale (5-point):
    A=5, B=4, C=3, D=2, E=1, F=0

A row counts towards a GPA only if it has both units and a grade and the
units parse to a positive finite number. Its weight is that number rounded
half up and clamped into 1..5. Unknown grade letters still count, at zero
points.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from grademate.model import HARMATTAN, RAIN, AggregateResult, CourseRecord, SemesterRecordSet


GRADE_POINTS = {"A": 5, "B": 4, "C": 3, "D": 2, "E": 1, "F": 0}

MIN_UNITS = 1
MAX_UNITS = 5


def grade_point(grade: str) -> int:
    """
    Look up an uppercase letter grade. Anything else is worth 0.
    """
    return GRADE_POINTS.get(grade, 0)


def _round_half_up(x: float) -> int:
    return int(Decimal(str(x)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def effective_units(units: str) -> Optional[int]:
    """
    Return the credit-unit weight of a raw units string, or None if the row
    must be left out (empty, not a number, not finite, or <= 0).

    Rounding happens before clamping, so 0.4 -> 0 -> 1.
    """
    if not units or not str(units).strip():
        return None
    # float() would read "1_0" as 10
    if "_" in units:
        return None
    try:
        value = float(units)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    # anything above the cap rounds to it anyway; keeps huge values within Decimal precision
    return min(max(_round_half_up(min(value, MAX_UNITS)), MIN_UNITS), MAX_UNITS)


def course_contribution(record: CourseRecord) -> Optional[tuple[int, int]]:
    """
    (quality_points, credit_units) contributed by one row, or None if the
    row is excluded.
    """
    if not record.units or not record.grade:
        return None
    units = effective_units(record.units)
    if units is None:
        return None
    return units * grade_point(record.grade.upper()), units


def normalize_and_aggregate(records: Iterable[CourseRecord]) -> AggregateResult:
    qp = 0
    cu = 0
    for record in records:
        contribution = course_contribution(record)
        if contribution is None:
            continue
        qp += contribution[0]
        cu += contribution[1]
    return AggregateResult(quality_points=qp, credit_units=cu, gpa=qp / cu if cu else None)


def combine(a: AggregateResult, b: AggregateResult) -> Optional[float]:
    """
    Cumulative GPA over two semester results, None if neither has units.
    """
    total_cu = a.credit_units + b.credit_units
    if total_cu <= 0:
        return None
    return (a.quality_points + b.quality_points) / total_cu


def semester_results(record_set: SemesterRecordSet) -> tuple[AggregateResult, AggregateResult, Optional[float]]:
    """
    Recompute (harmattan, rain, cgpa) from the current record set.
    """
    harmattan = normalize_and_aggregate(record_set.get(HARMATTAN, []))
    rain = normalize_and_aggregate(record_set.get(RAIN, []))
    return harmattan, rain, combine(harmattan, rain)


def format_gpa(gpa: Optional[float]) -> str:
    return "N/A" if gpa is None else f"{gpa:.2f}"
