"""
Tests for JSON serialization, legacy settings migration and the JSONL
document store.
"""

import json

import pytest

from gzclp_tracker.core.models import (
    ExerciseDefinition,
    ExerciseLog,
    LiftState,
    LiftSubstitution,
    Medal,
    SetLog,
    Workout,
)
from gzclp_tracker.core.progression import create_initial_program_state
from gzclp_tracker.core.units import default_settings
from gzclp_tracker.io.document_store import (
    PROGRAM_STATE,
    SETTINGS,
    SETTINGS_ID,
    WORKOUTS,
    DocumentStore,
    TrackerStore,
)
from gzclp_tracker.io.serializers import (
    ValidationError,
    dict_to_inventory,
    dict_to_lift_state,
    dict_to_program_state,
    dict_to_user_settings,
    dict_to_workout,
    inventory_to_dict,
    is_legacy_settings,
    json_line_to_workout,
    lift_state_to_dict,
    migrate_settings_document,
    parse_reps_string,
    program_state_to_dict,
    user_settings_to_dict,
    validate_date,
    workout_to_dict,
    workout_to_json_line,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _workout(workout_id: str = "w1", date: str = "2026-03-02T18:30:00") -> Workout:
    return Workout(
        id=workout_id,
        date=date,
        type="A1",
        completed=True,
        exercises=[
            ExerciseLog(
                lift_id="squat",
                tier="T1",
                weight=105,
                target_sets=5,
                target_reps=3,
                sets=[SetLog(set_number=i + 1, reps=3, completed=True, is_amrap=i == 4) for i in range(5)],
                original_weight=100,
            )
        ],
        medals=[Medal(type="weight-pr", value=105, lift_id="squat", tier="T1", previous_value=100)],
    )


LEGACY_DOC = {
    "id": "settings",
    "weight_unit": "lbs",
    "bar_weight_lbs": 45,
    "plate_inventory": {"45": 4, "25": 2, "10": 2, "5": 2, "2.5": 2},
    "custom_exercises": [
        {"id": "leg-press", "name": "Leg Press", "replaces_id": "squat", "force_t3_progression": True},
        {"id": "hack-squat", "name": "Hack Squat", "replaces_id": "squat"},
        {"id": "db-bench", "name": "DB Bench", "replaces_id": "bench", "is_dumbbell": True},
    ],
    "t3_library": [
        {"id": "face-pull", "name": "Face Pull"},
        {"id": "leg-press", "name": "Duplicate Leg Press"},
    ],
    "workout_t3s": {"A1": ["face-pull"], "B2": []},
}


# ===========================================================================
# Serializers
# ===========================================================================

class TestValidators:
    def test_dates(self):
        assert validate_date("2026-03-02") == "2026-03-02"
        assert validate_date("2026-03-02T18:30:00") == "2026-03-02T18:30:00"

    @pytest.mark.parametrize("bad", ["", "03/02/2026", "2026-13-40", "yesterday"])
    def test_bad_dates(self, bad):
        with pytest.raises(ValidationError):
            validate_date(bad)


class TestLiftStateSerialization:
    def test_optional_fields_omitted(self):
        d = lift_state_to_dict(LiftState(lift_id="bench", tier="T2", weight=40))
        assert d == {"lift_id": "bench", "tier": "T2", "weight": 40, "stage": 1}

    def test_pending_test_kept(self):
        state = LiftState(
            lift_id="squat", tier="T1", weight=120, stage=3,
            pending_5rm_test=True, best_set_reps=2, best_set_weight=120,
        )
        assert dict_to_lift_state(lift_state_to_dict(state)) == state

    def test_pending_on_t2_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_lift_state({"lift_id": "bench", "tier": "T2", "weight": 40, "pending_5rm_test": True})

    def test_bad_stage_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_lift_state({"lift_id": "bench", "tier": "T1", "weight": 40, "stage": 4})


class TestProgramStateSerialization:
    def test_round_trip(self):
        state = create_initial_program_state(
            {"squat": 100, "bench": 60, "deadlift": 120, "ohp": 40, "lat-pulldown": 30}
        )
        d = program_state_to_dict(state)
        assert d["t3"] == {"lat-pulldown": {"weight": 30.0}}
        assert dict_to_program_state(d) == state

    def test_bare_t3_weight_accepted(self):
        state = dict_to_program_state({"t3": {"lat-pulldown": 35}})
        assert state.t3 == {"lat-pulldown": 35.0}
        assert state.next_workout_type == "A1"

    def test_t3_record_without_weight(self):
        with pytest.raises(ValidationError):
            dict_to_program_state({"t3": {"lat-pulldown": {}}})


class TestWorkoutSerialization:
    def test_round_trip(self):
        workout = _workout()
        assert dict_to_workout(workout_to_dict(workout)) == workout
        assert json_line_to_workout(workout_to_json_line(workout)) == workout

    def test_empty_notes_and_medals_omitted(self):
        d = workout_to_dict(Workout(id="w", date="2026-03-02", type="B1"))
        assert "notes" not in d
        assert "medals" not in d

    def test_invalid_json(self):
        with pytest.raises(ValidationError):
            json_line_to_workout("{not json")

    def test_missing_id(self):
        with pytest.raises(ValidationError):
            dict_to_workout({"date": "2026-03-02", "type": "A1"})

    def test_bad_tier(self):
        d = workout_to_dict(_workout())
        d["exercises"][0]["tier"] = "T4"
        with pytest.raises(ValidationError):
            dict_to_workout(d)


class TestSettingsSerialization:
    def test_inventory_keys(self):
        inventory = {1.25: 2, 20.0: 4, 2.5: 2}
        d = inventory_to_dict(inventory)
        assert list(d) == ["20", "2.5", "1.25"]
        assert dict_to_inventory(d) == inventory

    def test_bad_plate_key(self):
        with pytest.raises(ValidationError):
            dict_to_inventory({"heavy": 2})

    def test_round_trip(self):
        settings = default_settings("lbs")
        settings.exercise_library = [ExerciseDefinition("db-bench", "DB Bench", is_dumbbell=True)]
        settings.lift_substitutions = [LiftSubstitution("bench", "db-bench")]
        assert dict_to_user_settings(user_settings_to_dict(settings)) == settings


class TestParseReps:
    def test_parse(self):
        assert parse_reps_string("3,3,3,3,5") == [3, 3, 3, 3, 5]
        assert parse_reps_string("10, 10, 0") == [10, 10, 0]

    @pytest.mark.parametrize("bad", ["", "  ", "3,,3", "3,x", "-1"])
    def test_invalid(self, bad):
        with pytest.raises(ValidationError):
            parse_reps_string(bad)


# ===========================================================================
# Legacy migration
# ===========================================================================

class TestMigration:
    def test_detects_legacy(self):
        assert is_legacy_settings(LEGACY_DOC)
        assert is_legacy_settings({"bar_weight": 20})  # no schema_version
        assert not is_legacy_settings({"bar_weight": 20, "schema_version": 2})

    def test_fields_folded_in(self):
        doc, migrated = migrate_settings_document(LEGACY_DOC)
        assert migrated
        assert doc["schema_version"] == 2
        assert doc["bar_weight"] == 45
        assert not any(k in doc for k in ("custom_exercises", "t3_library", "workout_t3s", "bar_weight_lbs"))

        assert [e["id"] for e in doc["exercise_library"]] == ["leg-press", "hack-squat", "db-bench", "face-pull"]
        assert doc["exercise_library"][0]["name"] == "Leg Press"

        # First substitution for a lift wins
        assert doc["lift_substitutions"] == [
            {"original_lift_id": "squat", "substitute_id": "leg-press", "force_t3_progression": True},
            {"original_lift_id": "bench", "substitute_id": "db-bench", "force_t3_progression": False},
        ]
        assert doc["additional_t3s"] == [{"workout_type": "A1", "exercise_ids": ["face-pull"]}]

    def test_input_not_modified(self):
        before = json.dumps(LEGACY_DOC, sort_keys=True)
        migrate_settings_document(LEGACY_DOC)
        assert json.dumps(LEGACY_DOC, sort_keys=True) == before

    def test_idempotent(self):
        once, _ = migrate_settings_document(LEGACY_DOC)
        twice, migrated = migrate_settings_document(once)
        assert not migrated
        assert twice == once

    def test_existing_bar_weight_wins(self):
        doc, _ = migrate_settings_document({"bar_weight": 20, "bar_weight_lbs": 45})
        assert doc["bar_weight"] == 20

    def test_list_shaped_workout_t3s(self):
        doc, _ = migrate_settings_document(
            {
                "bar_weight": 20,
                "additional_t3s": [{"workout_type": "A1", "exercise_ids": ["curl"]}],
                "workout_t3s": [
                    {"workout_type": "A1", "exercise_ids": ["face-pull"]},
                    {"workout_type": "B1", "exercise_ids": ["shrug"]},
                ],
            }
        )
        assert doc["additional_t3s"] == [
            {"workout_type": "A1", "exercise_ids": ["curl"]},
            {"workout_type": "B1", "exercise_ids": ["shrug"]},
        ]

    def test_migrated_document_loads(self):
        doc, _ = migrate_settings_document(LEGACY_DOC)
        settings = dict_to_user_settings(doc)
        assert settings.weight_unit == "lbs"
        assert settings.bar_weight == 45
        assert settings.plate_inventory[45.0] == 4


# ===========================================================================
# DocumentStore
# ===========================================================================

class TestDocumentStore:
    def test_missing_collection_is_empty(self, tmp_path):
        store = DocumentStore(tmp_path / "data")
        assert store.get("things", "a") is None
        assert store.query("things") == []

    def test_put_get_replace(self, tmp_path):
        store = DocumentStore(tmp_path / "data")
        store.put("things", {"id": "a", "n": 1})
        store.put("things", {"id": "b", "n": 2})
        store.put("things", {"id": "a", "n": 3})

        assert store.get("things", "a") == {"id": "a", "n": 3}
        assert [d["id"] for d in store.query("things")] == ["a", "b"]
        assert len(store.collection_path("things").read_text().splitlines()) == 2

    def test_put_requires_id(self, tmp_path):
        with pytest.raises(ValidationError):
            DocumentStore(tmp_path).put("things", {"n": 1})

    def test_query_filter_and_order(self, tmp_path):
        store = DocumentStore(tmp_path)
        store.put("things", {"id": "a", "date": "2026-03-05"})
        store.put("things", {"id": "b", "date": "2026-03-01"})
        store.put("things", {"id": "c"})
        store.put("things", {"id": "d", "date": "2026-03-03", "skip": True})

        ordered = store.query("things", predicate=lambda d: not d.get("skip"), order_by="date")
        assert [d["id"] for d in ordered] == ["c", "b", "a"]

    def test_delete_and_clear(self, tmp_path):
        store = DocumentStore(tmp_path)
        store.put("things", {"id": "a"})
        store.put("things", {"id": "b"})
        assert store.delete("things", "a") is True
        assert store.delete("things", "a") is False
        assert [d["id"] for d in store.query("things")] == ["b"]

        store.clear("things")
        assert store.query("things") == []

    def test_malformed_line(self, tmp_path):
        store = DocumentStore(tmp_path)
        store.collection_path("things").write_text('{"id": "a"}\nnot json\n')
        with pytest.raises(ValidationError):
            store.query("things")

    def test_line_without_id(self, tmp_path):
        store = DocumentStore(tmp_path)
        store.collection_path("things").write_text('{"n": 1}\n')
        with pytest.raises(ValidationError):
            store.get("things", "a")

    def test_blank_lines_ignored(self, tmp_path):
        store = DocumentStore(tmp_path)
        store.collection_path("things").write_text('{"id": "a"}\n\n   \n')
        assert store.get("things", "a") == {"id": "a"}


# ===========================================================================
# TrackerStore
# ===========================================================================

class TestTrackerStore:
    def test_defaults_when_empty(self, tmp_path):
        store = TrackerStore(tmp_path)
        assert not store.exists()
        assert store.load_program_state() is None
        assert store.load_workouts() == []
        assert store.load_settings() == default_settings("kg")

    def test_program_state_round_trip(self, tmp_path):
        store = TrackerStore(tmp_path)
        state = create_initial_program_state({"squat": 100, "bench": 60, "deadlift": 120, "ohp": 40})
        store.save_program_state(state)
        assert store.exists()
        assert store.load_program_state() == state

    def test_workouts_sorted_by_date(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.save_workout(_workout("late", "2026-03-09T18:00:00"))
        store.save_workout(_workout("early", "2026-03-02T18:00:00"))
        assert [w.id for w in store.load_workouts()] == ["early", "late"]

    def test_invalid_workout(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.documents.put(WORKOUTS, {"id": "bad", "date": "soon", "type": "A1"})
        with pytest.raises(ValidationError):
            store.load_workouts()

    def test_legacy_settings_migrated_and_persisted(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.documents.put(SETTINGS, dict(LEGACY_DOC))

        settings = store.load_settings()
        assert settings.bar_weight == 45
        assert [s.substitute_id for s in settings.lift_substitutions] == ["leg-press", "db-bench"]

        stored = store.documents.get(SETTINGS, SETTINGS_ID)
        assert stored["schema_version"] == 2
        assert "custom_exercises" not in stored

    def test_update_settings(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.save_settings(default_settings("kg"))
        updated = store.update_settings(bar_weight=15.0)
        assert updated.bar_weight == 15.0
        assert store.load_settings().bar_weight == 15.0

    def test_update_unknown_field(self, tmp_path):
        store = TrackerStore(tmp_path)
        with pytest.raises(ValueError):
            store.update_settings(colour="red")

    def test_reset_keeps_settings(self, tmp_path):
        store = TrackerStore(tmp_path)
        settings = default_settings("lbs")
        store.save_settings(settings)
        store.save_program_state(
            create_initial_program_state({"squat": 135, "bench": 95, "deadlift": 135, "ohp": 65})
        )
        store.save_workout(_workout())

        store.reset()
        assert not store.exists()
        assert store.load_workouts() == []
        assert store.load_settings() == settings
        assert store.documents.query(PROGRAM_STATE) == []
