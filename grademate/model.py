"""
Central data model definitions used across the project.

This module defines the canonical structure of course rows, semester results
and user preferences so that:
- all modules share the same field names
- the CSV codec, the storage layer and the terminal UI agree on one shape
- course fields stay raw strings until a GPA is computed
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional


HARMATTAN = "harmattan"
RAIN = "rain"
SEMESTERS = (HARMATTAN, RAIN)

# Older saved data used this spelling for the first semester.
LEGACY_HARMATTAN = "hamattan"

THEMES = ("golden", "purple", "both")
VIEWS = ("courses", "settings")

COURSE_FIELDS = ("code", "units", "grade")


@dataclass
class CourseRecord:
    """
    One row of a semester as typed by the user.

    Fields are kept as raw strings (possibly empty or invalid) so a row can
    sit in a half-edited state; they are only interpreted when a GPA is
    computed.
    """

    code: str = ""
    units: str = ""
    grade: str = ""

    def is_blank(self) -> bool:
        return not self.code and not self.units and not self.grade

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


# Mapping semester key -> ordered rows. Never holds an empty list.
SemesterRecordSet = Dict[str, List[CourseRecord]]


@dataclass(frozen=True)
class AggregateResult:
    """
    Quality points, credit units and GPA for one semester.

    gpa is None exactly when credit_units == 0.
    """

    quality_points: int
    credit_units: int
    gpa: Optional[float]


@dataclass
class Preferences:
    remember_data: bool = False
    theme: str = "both"
    view: str = "courses"


@dataclass
class AppState:
    """
    Everything that is persisted in one payload: the records of both
    semesters, the semester being edited and the preferences.
    """

    semesters: SemesterRecordSet = field(
        default_factory=lambda: {sem: [CourseRecord()] for sem in SEMESTERS}
    )
    current_semester: str = HARMATTAN
    preferences: Preferences = field(default_factory=Preferences)
