"""
Tests for rendering in interactive mode.

Course fields are free text, so values that look like rich markup must be
printed literally instead of being interpreted.
"""

import io
import unittest
from unittest import mock

from rich.console import Console

import grademate.interactive as interactive
from grademate.model import HARMATTAN, RAIN, AppState, CourseRecord
from grademate.storage import MemoryStore


class TestInteractiveRendering(unittest.TestCase):
    def setUp(self) -> None:
        self.out = io.StringIO()
        self.console = Console(file=self.out, width=120, color_system=None)
        state = AppState(
            semesters={HARMATTAN: [CourseRecord("[/]", "3", "A"), CourseRecord("[bold]X1", "[2]", "b")],
                       RAIN: [CourseRecord()]}
        )
        self.session = interactive.Session(state, MemoryStore(), MemoryStore())

    def test_view_prints_markup_like_codes_literally(self) -> None:
        with mock.patch.object(interactive, "console", self.console):
            interactive._flow_view(self.session)
        text = self.out.getvalue()
        self.assertIn("[/]", text)
        self.assertIn("[bold]X1", text)
        self.assertIn("[2]", text)

    def test_delete_reports_markup_like_code(self) -> None:
        with mock.patch.object(interactive, "console", self.console), \
                mock.patch.object(interactive, "_prompt", return_value="1"):
            interactive._flow_delete(self.session)
        self.assertIn("Deleted: [/]", self.out.getvalue())
        self.assertEqual([r.code for r in self.session.rows], ["[bold]X1"])


if __name__ == "__main__":
    unittest.main()
