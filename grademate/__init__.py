"""
OAU Grade Mate: semester GPA / CGPA calculator with CSV exchange and saved state.

The functions below are what a front end needs; the terminal UI in
grademate.cli and grademate.interactive is built only on them.
"""

from grademate.csv_codec import FormatError, decode_csv, encode_csv
from grademate.grading import combine, normalize_and_aggregate
from grademate.storage import clear_payload, load_payload, save_payload

__all__ = [
    "FormatError",
    "clear_payload",
    "combine",
    "decode_csv",
    "encode_csv",
    "load_payload",
    "normalize_and_aggregate",
    "save_payload",
]
