"""
CLI (Command Line Interface).

This module provides quick terminal commands, e.g.:

    grademate add CSC101 3 A
    grademate add MTH102 4 B --semester rain
    grademate list
    grademate gpa
    grademate export grades.csv
    grademate import grades.csv
    grademate settings --remember --theme golden
    grademate interactive

Every command loads the saved state, applies one change, saves it again and
exits with a return code (0 = ok, 1 = user error).

Note:
- The interactive UI lives in grademate/interactive.py
- This CLI is intentionally simple and prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from grademate.config import default_stores
from grademate.csv_codec import EXPORT_FILENAME, FormatError, export_csv, import_csv
from grademate.grading import format_gpa, semester_results
from grademate.model import COURSE_FIELDS, SEMESTERS, THEMES, VIEWS, AppState, CourseRecord
from grademate.records import add_course, blank_record_set, delete_course, update_course
from grademate.storage import Store, clear_payload, load_payload, save_payload


def _load_state(durable: Store, ephemeral: Store) -> AppState:
    """
    Saved state if there is any, otherwise a fresh one.
    """
    state = load_payload(durable, ephemeral)
    return state if state is not None else AppState()


def _semester_arg(args: argparse.Namespace, state: AppState) -> str:
    return args.semester or state.current_semester


def _row_index(row: int, rows: list[CourseRecord]) -> Optional[int]:
    """
    Convert a 1-based row number into an index, None if out of range.
    """
    if not (1 <= row <= len(rows)):
        return None
    return row - 1


def _cmd_list(args: argparse.Namespace, state: AppState) -> int:
    """
    Print the rows of one semester with their number.
    """
    sem = _semester_arg(args, state)
    rows = state.semesters[sem]
    print(f"{sem.capitalize()} semester ({len(rows)} rows)")
    for i, r in enumerate(rows, start=1):
        code = r.code or "-"
        units = r.units or "-"
        grade = r.grade or "-"
        print(f"{i:>3}) {code} | {units} units | {grade}")
    return 0


def _cmd_add(args: argparse.Namespace, state: AppState, durable: Store, ephemeral: Store) -> int:
    """
    Append a course row. Values are stored as typed; bad units or grades only
    matter when the GPA is computed.
    """
    sem = _semester_arg(args, state)
    rows = state.semesters[sem]
    record = CourseRecord(code=args.code.strip(), units=args.units.strip(), grade=args.grade.strip().upper())

    # fill the placeholder row instead of appending after it
    if len(rows) == 1 and rows[0].is_blank():
        rows[0] = record
        row = 1
    else:
        row = add_course(state.semesters, sem, record) + 1

    save_payload(state, durable, ephemeral)
    print(f"Added to {sem} (row {row}): {record.code or '-'} | {record.units} units | {record.grade}")
    return 0


def _cmd_edit(args: argparse.Namespace, state: AppState, durable: Store, ephemeral: Store) -> int:
    sem = _semester_arg(args, state)
    idx = _row_index(args.row, state.semesters[sem])
    if idx is None:
        print(f"Row {args.row} does not exist in {sem}.")
        return 1

    value = args.value.strip()
    if args.field == "grade":
        value = value.upper()
    update_course(state.semesters, sem, idx, args.field, value)
    save_payload(state, durable, ephemeral)
    print(f"Updated {sem} row {args.row}: {args.field} = {value!r}")
    return 0


def _cmd_remove(args: argparse.Namespace, state: AppState, durable: Store, ephemeral: Store) -> int:
    """
    Remove a row. The last row of a semester is reset to blank instead.
    """
    sem = _semester_arg(args, state)
    idx = _row_index(args.row, state.semesters[sem])
    if idx is None:
        print(f"Row {args.row} does not exist in {sem}.")
        return 1

    removed = delete_course(state.semesters, sem, idx)
    save_payload(state, durable, ephemeral)
    print(f"Removed from {sem}: {removed.code or '(blank row)'} (rows left: {len(state.semesters[sem])})")
    return 0


def _cmd_gpa(args: argparse.Namespace, state: AppState) -> int:
    """
    Print both semester GPAs and the CGPA.
    """
    harmattan, rain, cgpa = semester_results(state.semesters)
    for sem, res in zip(SEMESTERS, (harmattan, rain)):
        print(
            f"{sem.capitalize():<10} GPA: {format_gpa(res.gpa):>5}  "
            f"(QP {res.quality_points}, CU {res.credit_units})"
        )
    print(f"{'CGPA':<14}: {format_gpa(cgpa):>5}")
    return 0


def _cmd_export(args: argparse.Namespace, state: AppState) -> int:
    """
    Export both semesters to a CSV file.
    """
    out_path = (args.out or "").strip() or EXPORT_FILENAME
    n = export_csv(state.semesters, out_path)
    print(f"Exported {n} rows to: {out_path}")
    return 0


def _cmd_import(args: argparse.Namespace, state: AppState, durable: Store, ephemeral: Store) -> int:
    """
    Replace all rows with the contents of a CSV file. On error the saved data
    is left as it was.
    """
    path = (args.file or "").strip()
    if not path:
        print("Please provide a CSV file.")
        return 1

    try:
        record_set = import_csv(path)
    except FileNotFoundError:
        print(f"File not found: {path}")
        return 1
    except OSError as exc:
        print(f"Could not read {path}: {exc.strerror or exc}")
        return 1
    except (FormatError, UnicodeDecodeError) as exc:
        print(f"Import failed: {exc}")
        return 1

    state.semesters = record_set
    state.preferences.view = "courses"
    save_payload(state, durable, ephemeral)

    counts = ", ".join(
        f"{sem}: {sum(1 for r in record_set[sem] if not r.is_blank())}" for sem in SEMESTERS
    )
    print(f"CSV imported ({counts}). Review your data before exporting.")
    return 0


def _cmd_settings(args: argparse.Namespace, state: AppState, durable: Store, ephemeral: Store) -> int:
    """
    Change preferences; with no options just show them.
    """
    prefs = state.preferences
    changed = False
    if args.remember is not None:
        prefs.remember_data = args.remember
        changed = True
    if args.theme:
        prefs.theme = args.theme
        changed = True
    if args.view:
        prefs.view = args.view
        changed = True
    if args.semester:
        state.current_semester = args.semester
        changed = True

    if changed:
        save_payload(state, durable, ephemeral)

    where = "kept across sessions" if prefs.remember_data else "this session only"
    print(f"Current semester: {state.current_semester}")
    print(f"Remember data:    {'yes' if prefs.remember_data else 'no'} ({where})")
    print(f"Theme:            {prefs.theme}")
    print(f"View:             {prefs.view}")
    return 0


def _cmd_new(args: argparse.Namespace, state: AppState, durable: Store, ephemeral: Store) -> int:
    """
    Start a new calculation: both semesters back to one blank row.
    """
    state.semesters = blank_record_set()
    state.current_semester = SEMESTERS[0]
    save_payload(state, durable, ephemeral)
    print("Started a new calculation.")
    return 0


def _cmd_clear(args: argparse.Namespace, durable: Store, ephemeral: Store) -> int:
    """
    Delete all saved data from both stores.
    """
    if not args.yes:
        print("This removes all saved data. Export a CSV first if you want a backup.")
        print("Run again with --yes to confirm.")
        return 1

    clear_payload(durable, ephemeral)
    print("All saved data cleared.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="grademate", description="OAU Grade Mate CLI (GPA / CGPA calculator)")
    parser.add_argument("--data-dir", default=None, help="Directory for data kept across sessions")
    parser.add_argument("--session-dir", default=None, help="Directory for session-only data")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def semester_option(p: argparse.ArgumentParser) -> None:
        p.add_argument("--semester", choices=SEMESTERS, default=None, help="Semester (default: current)")

    p_list = sub.add_parser("list", help="List course rows of a semester")
    semester_option(p_list)

    p_add = sub.add_parser("add", help="Add a course row")
    p_add.add_argument("code", type=str, help="Course code (e.g. CSC101)")
    p_add.add_argument("units", type=str, help="Credit units (1-5)")
    p_add.add_argument("grade", type=str, help="Letter grade (A-F)")
    semester_option(p_add)

    p_edit = sub.add_parser("edit", help="Change one field of a course row")
    p_edit.add_argument("row", type=int, help="Row number as shown by 'list'")
    p_edit.add_argument("field", choices=COURSE_FIELDS, help="Field to change")
    p_edit.add_argument("value", type=str, help="New value")
    semester_option(p_edit)

    p_remove = sub.add_parser("remove", help="Remove a course row")
    p_remove.add_argument("row", type=int, help="Row number as shown by 'list'")
    semester_option(p_remove)

    sub.add_parser("gpa", help="Show semester GPAs and CGPA")

    p_export = sub.add_parser("export", help="Export all rows to CSV")
    p_export.add_argument("out", nargs="?", default=None, help=f"Output file (default: {EXPORT_FILENAME})")

    p_import = sub.add_parser("import", help="Replace all rows with a CSV file")
    p_import.add_argument("file", type=str, help="CSV file with header semester,code,units,grade")

    p_settings = sub.add_parser("settings", help="Show or change preferences")
    remember = p_settings.add_mutually_exclusive_group()
    remember.add_argument("--remember", dest="remember", action="store_true", default=None,
                          help="Keep data across sessions")
    remember.add_argument("--no-remember", dest="remember", action="store_false",
                          help="Keep data for this session only")
    p_settings.set_defaults(remember=None)
    p_settings.add_argument("--theme", choices=THEMES, default=None, help="Colour theme")
    p_settings.add_argument("--view", choices=VIEWS, default=None, help="Start view for interactive mode")
    semester_option(p_settings)

    sub.add_parser("new", help="Start a new calculation (keeps preferences)")

    p_clear = sub.add_parser("clear", help="Clear all saved data")
    p_clear.add_argument("--yes", action="store_true", help="Confirm clearing")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    durable, ephemeral = default_stores(args.data_dir, args.session_dir)

    if args.command == "clear":
        raise SystemExit(_cmd_clear(args, durable, ephemeral))

    state = _load_state(durable, ephemeral)

    if args.command == "list":
        raise SystemExit(_cmd_list(args, state))
    if args.command == "add":
        raise SystemExit(_cmd_add(args, state, durable, ephemeral))
    if args.command == "edit":
        raise SystemExit(_cmd_edit(args, state, durable, ephemeral))
    if args.command == "remove":
        raise SystemExit(_cmd_remove(args, state, durable, ephemeral))
    if args.command == "gpa":
        raise SystemExit(_cmd_gpa(args, state))
    if args.command == "export":
        raise SystemExit(_cmd_export(args, state))
    if args.command == "import":
        raise SystemExit(_cmd_import(args, state, durable, ephemeral))
    if args.command == "settings":
        raise SystemExit(_cmd_settings(args, state, durable, ephemeral))
    if args.command == "new":
        raise SystemExit(_cmd_new(args, state, durable, ephemeral))

    if args.command == "interactive":
        from grademate.interactive import run_interactive

        run_interactive(state, durable, ephemeral)
        raise SystemExit(0)

    raise SystemExit(2)
