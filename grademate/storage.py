"""
Persistent storage for the calculator state.

The whole state (both semesters, the active semester and the preferences)
is written as one JSON payload under one key:

    {"semesters": {"harmattan": [...], "rain": [...]},
     "currentSemester": "harmattan", "rememberData": false,
     "theme": "both", "view": "courses"}

Two stores exist: a durable one (kept across sessions) and an ephemeral one
(session only). "Remember data" picks which one is written; the other copy
is always removed, so at most one payload exists at a time.

Loading is deliberately forgiving: a missing, corrupt or oddly shaped payload
never stops the application, it just means "nothing saved". Older payloads
without the "semesters" wrapper, or using the "hamattan" spelling, are
migrated on read.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from grademate.model import (
    HARMATTAN,
    LEGACY_HARMATTAN,
    RAIN,
    SEMESTERS,
    THEMES,
    VIEWS,
    AppState,
    CourseRecord,
    Preferences,
    SemesterRecordSet,
)


logger = logging.getLogger(__name__)

STORAGE_KEY = "oau-grade-mate-v3"

# Accepted on read for the mixed theme.
THEME_ALIASES = {"combined": "both"}


class Store(ABC):
    """A key-value store holding payload text."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def write(self, key: str, text: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class FileStore(Store):
    """
    Keeps each key as <directory>/<key>.json.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"FileStore({str(self.directory)!r})"


class MemoryStore(Store):
    """In-process store; its contents vanish with the process."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, text: str) -> None:
        self.data[key] = text

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


# ------------------------
# Payload <-> state
# ------------------------

def migrate_legacy_shape(parsed: dict[str, Any]) -> dict[str, Any]:
    """
    Return the semester map of a parsed payload in canonical form.

    - unwraps "semesters" if present, otherwise the payload itself is the map
    - renames "hamattan" to "harmattan" when the new key is missing, empty
      or not a list

    Pure and idempotent: running it on its own output changes nothing.
    """
    semesters = parsed.get("semesters")
    if semesters is None:
        semesters = parsed
    if not isinstance(semesters, dict):
        return {}
    semesters = dict(semesters)
    legacy = semesters.get(LEGACY_HARMATTAN)
    if legacy and not semesters.get(HARMATTAN):
        semesters[HARMATTAN] = semesters.pop(LEGACY_HARMATTAN)
    elif isinstance(legacy, list) and not isinstance(semesters.get(HARMATTAN), list):
        semesters[HARMATTAN] = semesters.pop(LEGACY_HARMATTAN)
    return semesters


def _field_text(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_rows(value: Any) -> list[CourseRecord]:
    if not isinstance(value, list):
        return [CourseRecord()]
    rows: list[CourseRecord] = []
    for item in value:
        if not isinstance(item, dict):
            logger.debug("Ignoring stored course row of type %s", type(item).__name__)
            continue
        rows.append(
            CourseRecord(
                code=_field_text(item.get("code")),
                units=_field_text(item.get("units")),
                grade=_field_text(item.get("grade")),
            )
        )
    return rows or [CourseRecord()]


def build_payload(state: AppState) -> dict[str, Any]:
    return {
        "semesters": {sem: [r.to_dict() for r in state.semesters.get(sem, [])] for sem in SEMESTERS},
        "currentSemester": state.current_semester,
        "rememberData": state.preferences.remember_data,
        "theme": state.preferences.theme,
        "view": state.preferences.view,
    }


def parse_payload(parsed: Any) -> Optional[AppState]:
    """
    Turn a decoded JSON value into an AppState, starting from defaults and
    copying over every recognised field that has the expected type.
    """
    if not isinstance(parsed, dict):
        logger.debug("Stored payload is not an object, ignoring it")
        return None

    semesters = migrate_legacy_shape(parsed)
    record_set: SemesterRecordSet = {sem: _parse_rows(semesters.get(sem)) for sem in SEMESTERS}
    state = AppState(semesters=record_set)

    current = parsed.get("currentSemester")
    if isinstance(current, str):
        state.current_semester = RAIN if current.lower() == RAIN else HARMATTAN

    remember = parsed.get("rememberData")
    if isinstance(remember, bool):
        state.preferences.remember_data = remember

    theme = parsed.get("theme")
    if isinstance(theme, str):
        theme = THEME_ALIASES.get(theme, theme)
        if theme in THEMES:
            state.preferences.theme = theme
        else:
            logger.debug("Ignoring unknown stored theme %r", theme)

    view = parsed.get("view")
    if isinstance(view, str) and view in VIEWS:
        state.preferences.view = view

    return state


# ------------------------
# Load / save / clear
# ------------------------

def load_payload(durable: Store, ephemeral: Store) -> Optional[AppState]:
    """
    Load the saved state, preferring the durable store.

    Returns None if nothing is saved or the payload cannot be read; this
    function never raises for bad data.
    """
    try:
        raw = durable.read(STORAGE_KEY)
        if raw is None:
            raw = ephemeral.read(STORAGE_KEY)
        if raw is None:
            return None
        return parse_payload(json.loads(raw))
    except (
        OSError,
        json.JSONDecodeError,
        UnicodeDecodeError,
        AttributeError,
        TypeError,
        ValueError,
        RecursionError,
    ) as exc:
        logger.debug("Could not load saved data: %s", exc)
        return None


def save_payload(state: AppState, durable: Store, ephemeral: Store) -> None:
    """
    Write the whole state to the store chosen by remember_data and remove
    the copy in the other store.
    """
    text = json.dumps(build_payload(state), ensure_ascii=False)
    if state.preferences.remember_data:
        durable.write(STORAGE_KEY, text)
        ephemeral.remove(STORAGE_KEY)
    else:
        ephemeral.write(STORAGE_KEY, text)
        durable.remove(STORAGE_KEY)


def clear_payload(durable: Store, ephemeral: Store) -> None:
    durable.remove(STORAGE_KEY)
    ephemeral.remove(STORAGE_KEY)
