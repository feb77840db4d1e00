from __future__ import annotations

from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from grademate.csv_codec import EXPORT_FILENAME, FormatError, export_csv, import_csv
from grademate.grading import course_contribution, format_gpa, semester_results
from grademate.model import COURSE_FIELDS, HARMATTAN, RAIN, SEMESTERS, THEMES, AppState, CourseRecord
from grademate.records import add_course, blank_record_set, delete_course, update_course
from grademate.storage import Store, clear_payload, save_payload


console = Console()

THEME_STYLES = {
    "golden": "bold gold1",
    "purple": "bold medium_purple",
    "both": "bold gold1 on purple4",
}


class Session:
    """
    The state being edited plus the stores it is saved to after each change.
    """

    def __init__(self, state: AppState, durable: Store, ephemeral: Store) -> None:
        self.state = state
        self.durable = durable
        self.ephemeral = ephemeral

    @property
    def rows(self) -> list[CourseRecord]:
        return self.state.semesters[self.state.current_semester]

    @property
    def accent(self) -> str:
        return THEME_STYLES.get(self.state.preferences.theme, "bold")

    def commit(self) -> None:
        save_payload(self.state, self.durable, self.ephemeral)


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg)


def _confirm(msg: str) -> bool:
    return _prompt(f"{msg} [y/N]: ").strip().lower() == "y"


def _pick_row(session: Session, action: str) -> int | None:
    """
    Ask for a 1-based row number; return the 0-based index or None.
    """
    pick = _prompt(f"Row number to {action} [blank = back]: ").strip()
    if not pick:
        return None
    if not pick.isdigit():
        _println("Not a number.")
        return None
    i = int(pick)
    if not (1 <= i <= len(session.rows)):
        _println("Out of range.")
        return None
    return i - 1


def run_interactive(state: AppState, durable: Store, ephemeral: Store) -> None:
    """
    Interactive menu loop. Every committed change is saved right away.
    """
    session = Session(state, durable, ephemeral)

    if state.preferences.view == "settings":
        _flow_settings(session)

    while True:
        _print_header(session)

        choice = _prompt(
            "\n[1] View courses\n"
            "[2] Add course\n"
            "[3] Edit course\n"
            "[4] Delete course\n"
            "[5] Switch semester\n"
            "[6] Results (GPA / CGPA)\n"
            "[7] Export CSV\n"
            "[8] Import CSV\n"
            "[9] Settings\n"
            "[10] New calculation\n"
            "[11] Clear all data\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_view(session)
        elif choice == "2":
            _flow_add(session)
        elif choice == "3":
            _flow_edit(session)
        elif choice == "4":
            _flow_delete(session)
        elif choice == "5":
            _flow_switch_semester(session)
        elif choice == "6":
            _flow_results(session)
        elif choice == "7":
            _flow_export(session)
        elif choice == "8":
            _flow_import(session)
        elif choice == "9":
            _flow_settings(session)
        elif choice == "10":
            _flow_new_calculation(session)
        elif choice == "11":
            _flow_clear(session)
        else:
            _println("Invalid choice.")


def _print_header(session: Session) -> None:
    harmattan, rain, cgpa = semester_results(session.state.semesters)
    sem = session.state.current_semester
    current = harmattan if sem == HARMATTAN else rain

    _println(f"\n[{session.accent}]=== OAU Grade Mate ===[/]")
    _println(
        f"Semester: {sem.capitalize()} | GPA: {format_gpa(current.gpa)} | "
        f"CGPA: [{session.accent}]{format_gpa(cgpa)}[/]"
    )


def _flow_view(session: Session) -> None:
    sem = session.state.current_semester
    table = Table(title=f"{sem.capitalize()} semester", box=box.SIMPLE, title_style=session.accent)
    table.add_column("#", justify="right")
    table.add_column("Code")
    table.add_column("Units", justify="right")
    table.add_column("Grade", justify="center")
    table.add_column("QP", justify="right")

    for i, r in enumerate(session.rows, start=1):
        contribution = course_contribution(r)
        qp = str(contribution[0]) if contribution else "[dim]-[/]"
        table.add_row(str(i), escape(r.code) if r.code else "[dim](blank)[/]", escape(r.units), escape(r.grade), qp)

    console.print(table)


def _flow_add(session: Session) -> None:
    """
    Add rows until the user leaves the code empty.
    """
    sem = session.state.current_semester
    while True:
        code = _prompt("Course code (e.g. CSC101) [blank = back]: ").strip()
        if not code:
            return
        units = _prompt("Credit units (1-5): ").strip()
        grade = _prompt("Grade (A-F): ").strip().upper()

        record = CourseRecord(code=code, units=units, grade=grade)
        rows = session.rows
        if len(rows) == 1 and rows[0].is_blank():
            rows[0] = record
        else:
            add_course(session.state.semesters, sem, record)
        session.commit()

        if course_contribution(record) is None:
            _println("Added, but this row is not counted until units and grade are valid.")
        else:
            _println(f"Added: {escape(code)}")

        more = _prompt("Add another course? [Y/n]: ").strip().lower()
        if more == "n":
            return


def _flow_edit(session: Session) -> None:
    _flow_view(session)
    idx = _pick_row(session, "edit")
    if idx is None:
        return

    field_name = _prompt(f"Field ({'/'.join(COURSE_FIELDS)}): ").strip().lower()
    if field_name not in COURSE_FIELDS:
        _println("Unknown field.")
        return

    value = _prompt("New value: ").strip()
    if field_name == "grade":
        value = value.upper()
    update_course(session.state.semesters, session.state.current_semester, idx, field_name, value)
    session.commit()
    _println("Updated.")


def _flow_delete(session: Session) -> None:
    _flow_view(session)
    idx = _pick_row(session, "delete")
    if idx is None:
        return

    removed = delete_course(session.state.semesters, session.state.current_semester, idx)
    session.commit()
    _println(f"Deleted: {escape(removed.code) if removed.code else '(blank row)'}")


def _flow_switch_semester(session: Session) -> None:
    state = session.state
    state.current_semester = RAIN if state.current_semester == HARMATTAN else HARMATTAN
    state.preferences.view = "courses"
    session.commit()
    _println(f"Now editing: {state.current_semester.capitalize()}")


def _flow_results(session: Session) -> None:
    harmattan, rain, cgpa = semester_results(session.state.semesters)

    table = Table(title="Results", box=box.SIMPLE, title_style=session.accent)
    table.add_column("Semester")
    table.add_column("Quality points", justify="right")
    table.add_column("Credit units", justify="right")
    table.add_column("GPA", justify="right")
    for sem, res in zip(SEMESTERS, (harmattan, rain)):
        table.add_row(sem.capitalize(), str(res.quality_points), str(res.credit_units), format_gpa(res.gpa))
    table.add_row(
        "[bold]Cumulative[/]",
        str(harmattan.quality_points + rain.quality_points),
        str(harmattan.credit_units + rain.credit_units),
        f"[{session.accent}]{format_gpa(cgpa)}[/]",
    )
    console.print(table)


def _flow_export(session: Session) -> None:
    default_path = Path.cwd() / EXPORT_FILENAME
    out_in = _prompt(f"File name, default is [{EXPORT_FILENAME}]: ").strip()
    out_path = Path(out_in) if out_in else default_path

    if out_path.suffix.lower() != ".csv":
        out_path = out_path.with_suffix(".csv")

    n = export_csv(session.state.semesters, out_path)
    _println(f"\nExported {n} rows.")
    _println(f"Saved to: {escape(str(out_path.resolve()))}")


def _flow_import(session: Session) -> None:
    path_in = _prompt("CSV file to import [blank = back]: ").strip()
    if not path_in:
        return

    try:
        record_set = import_csv(path_in)
    except FileNotFoundError:
        _println(f"File not found: {escape(path_in)}")
        return
    except OSError as exc:
        _println(f"[red]Could not read file:[/] {escape(str(exc))}")
        return
    except (FormatError, UnicodeDecodeError) as exc:
        _println(f"[red]Failed to import CSV:[/] {escape(str(exc))}")
        return

    if not _confirm("Importing replaces all current rows. Continue?"):
        return

    session.state.semesters = record_set
    session.state.preferences.view = "courses"
    session.commit()
    _println("CSV imported successfully. Review your data before exporting or saving.")


def _flow_settings(session: Session) -> None:
    prefs = session.state.preferences
    prefs.view = "settings"
    session.commit()

    while True:
        where = "kept across sessions" if prefs.remember_data else "removed when the session ends"
        _println(f"\n[{session.accent}]Settings[/]")
        _println(f"Remember data: {'on' if prefs.remember_data else 'off'} (data is {where})")
        _println(f"Theme: {prefs.theme}")
        _println("Your data never leaves this computer unless you export and share it.")

        choice = _prompt("\n[1] Toggle remember data\n[2] Change theme\n[0] Back\nSelect: ").strip()
        if choice == "0" or not choice:
            prefs.view = "courses"
            session.commit()
            return
        if choice == "1":
            prefs.remember_data = not prefs.remember_data
            session.commit()
        elif choice == "2":
            theme = _prompt(f"Theme ({'/'.join(THEMES)}): ").strip().lower()
            if theme in THEMES:
                prefs.theme = theme
                session.commit()
            else:
                _println("Unknown theme.")
        else:
            _println("Invalid choice.")


def _flow_new_calculation(session: Session) -> None:
    if not _confirm("Start a new calculation? Current rows will be replaced; export a CSV first if needed."):
        return
    session.state.semesters = blank_record_set()
    session.state.current_semester = HARMATTAN
    session.commit()
    _println("Started a new calculation.")


def _flow_clear(session: Session) -> None:
    if not _confirm("Clear all data? This removes everything saved and cannot be undone."):
        return
    session.state.semesters = blank_record_set()
    session.state.current_semester = HARMATTAN
    clear_payload(session.durable, session.ephemeral)
    _println("All data cleared.")
