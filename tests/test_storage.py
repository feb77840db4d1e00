"""
Unit tests for saving and loading the calculator state.

Storage contract:
- remember on  -> durable store written, ephemeral copy removed (and vice versa)
- durable store is read first, then the ephemeral one
- corrupt or oddly shaped payloads load as "nothing saved"
- legacy payloads (no "semesters" wrapper, "hamattan" key) are migrated
"""

import json
import tempfile
import unittest
from pathlib import Path

from grademate.model import HARMATTAN, RAIN, AppState, CourseRecord, Preferences
from grademate.storage import (
    STORAGE_KEY,
    FileStore,
    MemoryStore,
    clear_payload,
    load_payload,
    migrate_legacy_shape,
    save_payload,
)


def sample_state(remember: bool = False) -> AppState:
    return AppState(
        semesters={
            HARMATTAN: [CourseRecord("CSC101", "3", "A"), CourseRecord("MTH102", "", "b")],
            RAIN: [CourseRecord()],
        },
        current_semester=RAIN,
        preferences=Preferences(remember_data=remember, theme="purple", view="settings"),
    )


class TestSaveLoad(unittest.TestCase):
    def setUp(self) -> None:
        self.durable = MemoryStore()
        self.ephemeral = MemoryStore()

    def test_load_nothing_saved(self) -> None:
        self.assertIsNone(load_payload(self.durable, self.ephemeral))

    def test_save_then_load_reproduces_state(self) -> None:
        for remember in (False, True):
            state = sample_state(remember)
            save_payload(state, self.durable, self.ephemeral)
            self.assertEqual(load_payload(self.durable, self.ephemeral), state)

    def test_remember_selects_store(self) -> None:
        save_payload(sample_state(remember=False), self.durable, self.ephemeral)
        self.assertIsNone(self.durable.read(STORAGE_KEY))
        self.assertIsNotNone(self.ephemeral.read(STORAGE_KEY))

        save_payload(sample_state(remember=True), self.durable, self.ephemeral)
        self.assertIsNotNone(self.durable.read(STORAGE_KEY))
        self.assertIsNone(self.ephemeral.read(STORAGE_KEY))

    def test_payload_shape(self) -> None:
        save_payload(sample_state(), self.durable, self.ephemeral)
        data = json.loads(self.ephemeral.read(STORAGE_KEY))
        self.assertEqual(sorted(data), ["currentSemester", "rememberData", "semesters", "theme", "view"])
        self.assertEqual(sorted(data["semesters"]), [HARMATTAN, RAIN])
        self.assertEqual(data["semesters"][HARMATTAN][0], {"code": "CSC101", "units": "3", "grade": "A"})

    def test_durable_is_preferred(self) -> None:
        self.durable.write(STORAGE_KEY, json.dumps({"currentSemester": "rain"}))
        self.ephemeral.write(STORAGE_KEY, json.dumps({"currentSemester": "harmattan"}))
        self.assertEqual(load_payload(self.durable, self.ephemeral).current_semester, RAIN)

    def test_clear_removes_both(self) -> None:
        self.durable.write(STORAGE_KEY, "{}")
        self.ephemeral.write(STORAGE_KEY, "{}")
        clear_payload(self.durable, self.ephemeral)
        self.assertIsNone(load_payload(self.durable, self.ephemeral))


class TestTolerantLoad(unittest.TestCase):
    def load(self, payload) -> AppState:
        durable = MemoryStore()
        durable.write(STORAGE_KEY, payload if isinstance(payload, str) else json.dumps(payload))
        return load_payload(durable, MemoryStore())

    def test_corrupt_text_is_ignored(self) -> None:
        self.assertIsNone(self.load("{not json"))
        self.assertIsNone(self.load("[1, 2, 3]"))
        self.assertIsNone(self.load("null"))

    def test_legacy_flat_misspelled_payload(self) -> None:
        state = self.load({"hamattan": [{"code": "CSC101", "units": "3", "grade": "A"}], "rain": []})
        self.assertEqual(state.semesters[HARMATTAN], [CourseRecord("CSC101", "3", "A")])
        self.assertEqual(state.semesters[RAIN], [CourseRecord()])
        self.assertEqual(state.current_semester, HARMATTAN)

    def test_deeply_nested_payload_is_ignored(self) -> None:
        self.assertIsNone(self.load("[" * 200000 + "]" * 200000))

    def test_legacy_key_used_when_canonical_is_null_or_empty(self) -> None:
        legacy = [{"code": "X", "units": "3", "grade": "A"}]
        for canonical in (None, [], "nope"):
            state = self.load({"harmattan": canonical, "hamattan": legacy, "rain": []})
            self.assertEqual(state.semesters[HARMATTAN], [CourseRecord("X", "3", "A")], canonical)

    def test_canonical_key_wins_over_legacy(self) -> None:
        state = self.load(
            {"semesters": {"harmattan": [{"code": "NEW"}], "hamattan": [{"code": "OLD"}], "rain": []}}
        )
        self.assertEqual([r.code for r in state.semesters[HARMATTAN]], ["NEW"])

    def test_bad_fields_fall_back_to_defaults(self) -> None:
        state = self.load(
            {
                "semesters": {"harmattan": "nope", "rain": [{"code": "X", "units": 3, "grade": None}, 7]},
                "currentSemester": "RAIN",
                "rememberData": "yes",
                "theme": "neon",
                "view": 3,
            }
        )
        self.assertEqual(state.semesters[HARMATTAN], [CourseRecord()])
        self.assertEqual(state.semesters[RAIN], [CourseRecord("X", "3", "")])
        self.assertEqual(state.current_semester, RAIN)
        self.assertEqual(state.preferences, Preferences())

    def test_combined_theme_alias(self) -> None:
        self.assertEqual(self.load({"theme": "combined"}).preferences.theme, "both")

    def test_unknown_semester_name_means_harmattan(self) -> None:
        self.assertEqual(self.load({"currentSemester": "summer"}).current_semester, HARMATTAN)


class TestMigration(unittest.TestCase):
    def test_unwrap_and_rename(self) -> None:
        self.assertEqual(migrate_legacy_shape({"semesters": {"hamattan": [1], "rain": [2]}}),
                         {"harmattan": [1], "rain": [2]})

    def test_idempotent_and_pure(self) -> None:
        parsed = {"hamattan": [1], "rain": [2]}
        once = migrate_legacy_shape(parsed)
        self.assertEqual(migrate_legacy_shape(once), once)
        self.assertIn("hamattan", parsed)

    def test_non_list_canonical_falls_back_to_legacy(self) -> None:
        self.assertEqual(migrate_legacy_shape({"harmattan": {"x": 1}, "hamattan": [1]}), {"harmattan": [1]})


class TestFileStore(unittest.TestCase):
    def test_missing_file_reads_none(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            store = FileStore(Path(d) / "sub")
            self.assertIsNone(store.read(STORAGE_KEY))
            store.remove(STORAGE_KEY)

    def test_save_and_load_roundtrip_on_disk(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            durable = FileStore(Path(d) / "home")
            ephemeral = FileStore(Path(d) / "session")
            state = sample_state(remember=True)
            save_payload(state, durable, ephemeral)

            self.assertTrue((Path(d) / "home" / f"{STORAGE_KEY}.json").exists())
            self.assertFalse((Path(d) / "session" / f"{STORAGE_KEY}.json").exists())
            self.assertEqual(load_payload(durable, ephemeral), state)


if __name__ == "__main__":
    unittest.main()
