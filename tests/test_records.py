"""
Unit tests for record-set editing.

Invariant: a semester never has zero rows.
"""

import unittest

from grademate.model import HARMATTAN, RAIN, CourseRecord
from grademate.records import add_course, blank_record_set, delete_course, ensure_not_empty, update_course


class TestRecords(unittest.TestCase):
    def test_blank_record_set(self) -> None:
        rs = blank_record_set()
        self.assertEqual(rs, {HARMATTAN: [CourseRecord()], RAIN: [CourseRecord()]})

    def test_add_and_update_keep_raw_values(self) -> None:
        rs = blank_record_set()
        idx = add_course(rs, RAIN)
        self.assertEqual(idx, 1)
        update_course(rs, RAIN, idx, "units", "abc")
        update_course(rs, RAIN, idx, "grade", "q")
        self.assertEqual(rs[RAIN][1], CourseRecord(code="", units="abc", grade="q"))

    def test_delete_last_row_leaves_blank_row(self) -> None:
        rs = {HARMATTAN: [CourseRecord("CSC101", "3", "A")], RAIN: [CourseRecord()]}
        removed = delete_course(rs, HARMATTAN, 0)
        self.assertEqual(removed.code, "CSC101")
        self.assertEqual(rs[HARMATTAN], [CourseRecord()])

    def test_delete_keeps_order(self) -> None:
        rows = [CourseRecord("A1", "1", "A"), CourseRecord("B2", "2", "B"), CourseRecord("C3", "3", "C")]
        rs = {HARMATTAN: rows, RAIN: [CourseRecord()]}
        delete_course(rs, HARMATTAN, 1)
        self.assertEqual([r.code for r in rs[HARMATTAN]], ["A1", "C3"])

    def test_bad_arguments(self) -> None:
        rs = blank_record_set()
        with self.assertRaises(IndexError):
            delete_course(rs, RAIN, 5)
        with self.assertRaises(IndexError):
            update_course(rs, RAIN, -1, "code", "X")
        with self.assertRaises(ValueError):
            update_course(rs, RAIN, 0, "title", "X")
        with self.assertRaises(ValueError):
            add_course(rs, "hamattan")

    def test_ensure_not_empty(self) -> None:
        rs = ensure_not_empty({HARMATTAN: []})
        self.assertEqual(rs[HARMATTAN], [CourseRecord()])
        self.assertEqual(rs[RAIN], [CourseRecord()])


if __name__ == "__main__":
    unittest.main()
