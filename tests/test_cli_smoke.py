"""
Minimal smoke tests for the gzclp CLI.

Tests basic functionality:
- App runs without errors
- Program initializes into a data directory
- Workouts can be logged and progress the program
- Program adjustments are persisted
- Loading tools print plates and warmups
"""

import tempfile
from dataclasses import replace
from pathlib import Path

import pytest
from typer.testing import CliRunner

from gzclp_tracker.cli.main import app
from gzclp_tracker.cli.views import exercise_loading
from gzclp_tracker.core.models import ExerciseDefinition, ExerciseLog, LiftSubstitution
from gzclp_tracker.core.units import default_settings
from gzclp_tracker.io.document_store import TrackerStore


runner = CliRunner()


@pytest.fixture
def temp_data_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _init(data_dir: Path, *extra: str, answer: str = "n\n"):
    return runner.invoke(app, [
        "init",
        "--data-dir", str(data_dir),
        "--squat", "100",
        "--bench", "60",
        "--deadlift", "120",
        "--ohp", "40",
        *extra,
    ], input=answer)


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "init" in result.output
        assert "log" in result.output

    def test_init_creates_program(self, temp_data_dir):
        """Test init writes settings and program state."""
        result = _init(temp_data_dir)

        assert result.exit_code == 0
        assert (temp_data_dir / "settings.jsonl").exists()
        assert (temp_data_dir / "program_state.jsonl").exists()

        state = TrackerStore(temp_data_dir).load_program_state()
        assert state.t1["squat"].weight == 100
        assert state.t2["squat"].weight == 60
        assert state.next_workout_type == "A1"

    def test_init_asks_before_overwriting(self, temp_data_dir):
        """Test a second init needs confirmation or --force."""
        _init(temp_data_dir)
        runner.invoke(app, ["set-weight", "squat", "T1", "140", "--data-dir", str(temp_data_dir)])

        assert _init(temp_data_dir, answer="n\n").exit_code == 1
        assert TrackerStore(temp_data_dir).load_program_state().t1["squat"].weight == 140

        assert _init(temp_data_dir, answer="y\n").exit_code == 0
        assert TrackerStore(temp_data_dir).load_program_state().t1["squat"].weight == 100

        assert _init(temp_data_dir, "--force").exit_code == 0

    def test_init_rejects_bad_unit(self, temp_data_dir):
        result = runner.invoke(app, ["init", "--data-dir", str(temp_data_dir), "--unit", "stone"])
        assert result.exit_code == 1

    def test_commands_need_a_program(self, temp_data_dir):
        """Test program commands fail cleanly before init."""
        for command in (["status"], ["next"], ["history"], ["stats"], ["log", "--t1", "3,3,3,3,3"]):
            result = runner.invoke(app, [*command, "--data-dir", str(temp_data_dir)])
            assert result.exit_code == 1, command
            assert "gzclp init" in result.output

    def test_status_and_next(self, temp_data_dir):
        _init(temp_data_dir)

        result = runner.invoke(app, ["status", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "Next workout" in result.output

        result = runner.invoke(app, ["next", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "A1" in result.output

    def test_log_progresses_program(self, temp_data_dir):
        """Test log saves the workout and advances the program."""
        _init(temp_data_dir)

        result = runner.invoke(app, [
            "log",
            "--data-dir", str(temp_data_dir),
            "--date", "2026-03-02",
            "--t1", "3,3,3,3,5",
            "--t2", "10,10,10",
            "--t3", "15,15,25",
            "--notes", "good day",
        ])

        assert result.exit_code == 0
        assert "Next workout: A2" in result.output

        store = TrackerStore(temp_data_dir)
        state = store.load_program_state()
        assert state.t1["squat"].weight == 105
        assert state.t2["bench"].weight == 37.25
        assert state.t3["lat-pulldown"] == 25.5
        assert state.next_workout_type == "A2"
        assert state.workout_count == 1

        workouts = store.load_workouts()
        assert len(workouts) == 1
        assert workouts[0].date == "2026-03-02"
        assert workouts[0].notes == "good day"
        assert workouts[0].completed
        assert workouts[0].medals

    def test_log_missing_sets_fail(self, temp_data_dir):
        """Test sets not given are recorded as failed."""
        _init(temp_data_dir)

        result = runner.invoke(app, ["log", "--data-dir", str(temp_data_dir), "--t1", "3,3,3"])
        assert result.exit_code == 0

        state = TrackerStore(temp_data_dir).load_program_state()
        assert state.t1["squat"].stage == 2
        assert state.t1["squat"].weight == 100
        assert state.t2["bench"].stage == 2

    def test_log_trial_weight(self, temp_data_dir):
        _init(temp_data_dir)

        result = runner.invoke(app, [
            "log", "--data-dir", str(temp_data_dir), "--t1-weight", "110", "--t1", "3,3,3,3,3",
        ])
        assert result.exit_code == 0
        assert TrackerStore(temp_data_dir).load_program_state().t1["squat"].weight == 115

    @pytest.mark.parametrize("args", [
        ["--t1", "3,3,3,3,3,3"],
        ["--t1", "3,x,3"],
        ["--t3", "15,15,15", "--t3", "15,15,15"],
        ["--date", "02/03/2026"],
    ])
    def test_log_rejects_bad_input(self, temp_data_dir, args):
        """Test invalid input exits 1 and saves nothing."""
        _init(temp_data_dir)

        result = runner.invoke(app, ["log", "--data-dir", str(temp_data_dir), *args])
        assert result.exit_code == 1

        store = TrackerStore(temp_data_dir)
        assert store.load_workouts() == []
        assert store.load_program_state().workout_count == 0

    def test_history_and_stats(self, temp_data_dir):
        _init(temp_data_dir)

        result = runner.invoke(app, ["stats", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "No workouts recorded yet" in result.output

        runner.invoke(app, [
            "log", "--data-dir", str(temp_data_dir), "--date", "2026-03-02",
            "--t1", "3,3,3,3,5", "--t2", "10,10,10", "--t3", "15,15,20",
        ])

        result = runner.invoke(app, ["history", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "A1" in result.output

        result = runner.invoke(app, ["stats", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0


class TestProgramCommands:
    """Program adjustment commands."""

    def test_set_weight(self, temp_data_dir):
        _init(temp_data_dir)

        result = runner.invoke(app, ["set-weight", "bench", "t2", "50", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        result = runner.invoke(app, ["set-weight", "face-pull", "T3", "20", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0

        state = TrackerStore(temp_data_dir).load_program_state()
        assert state.t2["bench"].weight == 50
        assert state.t3["face-pull"] == 20

    def test_set_weight_rejects_bad_tier(self, temp_data_dir):
        _init(temp_data_dir)
        result = runner.invoke(app, ["set-weight", "bench", "T4", "50", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 1

    def test_estimate_5rm(self, temp_data_dir):
        """Test estimate works without a program (kg defaults)."""
        result = runner.invoke(app, ["estimate-5rm", "100", "5", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "102.5 kg" in result.output

    def test_reset_5rm(self, temp_data_dir):
        _init(temp_data_dir)

        # Nothing to estimate from yet
        result = runner.invoke(app, ["reset-5rm", "squat", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 1

        result = runner.invoke(app, ["reset-5rm", "squat", "--five-rm", "100", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0

        squat = TrackerStore(temp_data_dir).load_program_state().t1["squat"]
        assert squat.weight == 85
        assert squat.stage == 1

    def test_substitute_and_remove(self, temp_data_dir):
        _init(temp_data_dir)

        result = runner.invoke(app, [
            "substitute", "bench", "db-bench",
            "--name", "DB Bench", "--dumbbell", "--force-t3",
            "--data-dir", str(temp_data_dir),
        ])
        assert result.exit_code == 0

        settings = TrackerStore(temp_data_dir).load_settings()
        assert settings.lift_substitutions[0].substitute_id == "db-bench"
        assert settings.lift_substitutions[0].force_t3_progression
        assert settings.exercise_library[0].is_dumbbell

        result = runner.invoke(app, ["substitute", "bench", "--remove", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert TrackerStore(temp_data_dir).load_settings().lift_substitutions == []

    def test_substitute_unknown_lift(self, temp_data_dir):
        result = runner.invoke(app, ["substitute", "curl", "hammer-curl", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 1

    def test_add_t3(self, temp_data_dir):
        _init(temp_data_dir)

        for _ in range(2):
            result = runner.invoke(app, [
                "add-t3", "a1", "face-pull", "--name", "Face Pull", "--data-dir", str(temp_data_dir),
            ])
            assert result.exit_code == 0

        settings = TrackerStore(temp_data_dir).load_settings()
        assert [(a.workout_type, a.exercise_ids) for a in settings.additional_t3s] == [("A1", ["face-pull"])]
        assert [e.name for e in settings.exercise_library] == ["Face Pull"]

        result = runner.invoke(app, ["add-t3", "C1", "face-pull", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 1


class TestToolCommands:
    """Plate and warmup tools."""

    def test_plates(self, temp_data_dir):
        result = runner.invoke(app, ["plates", "60", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "Per side" in result.output

    def test_plates_unreachable(self, temp_data_dir):
        result = runner.invoke(app, ["plates", "500", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "Not loadable" in result.output

    def test_warmup(self, temp_data_dir):
        result = runner.invoke(app, ["warmup", "100", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "85%" in result.output

    def test_warmup_at_bar_weight(self, temp_data_dir):
        result = runner.invoke(app, ["warmup", "20", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "no warmup needed" in result.output


class TestWorkoutPlan:
    """Plate loading shown next to each planned exercise."""

    @staticmethod
    def _ex(lift_id: str, tier: str, weight: float) -> ExerciseLog:
        return ExerciseLog(lift_id=lift_id, tier=tier, weight=weight, target_sets=3, target_reps=10)

    def test_barbell_lift_loads_the_bar(self):
        result = exercise_loading(self._ex("squat", "T1", 100), default_settings("kg"))
        assert result.per_side == [20, 15, 5]  # one pair of each plate
        assert result.achievable

    def test_dumbbell_t3_loads_the_handle(self):
        # 12.5 kg is below the bar but fine on a 2.5 kg handle
        result = exercise_loading(self._ex("dumbbell-row", "T3", 12.5), default_settings("kg"))
        assert result.achievable
        assert result.per_side == [5]
        assert result.total_weight == 12.5

    def test_dumbbell_substitute_loads_the_handle(self):
        settings = replace(
            default_settings("kg"),
            exercise_library=[ExerciseDefinition(id="db-bench", name="DB Bench", is_dumbbell=True)],
            lift_substitutions=[LiftSubstitution("bench", "db-bench")],
        )
        result = exercise_loading(self._ex("bench", "T2", 22.5), settings)
        assert result.achievable
        assert result.per_side == [10]

    def test_machine_t3_has_no_plates(self):
        assert exercise_loading(self._ex("lat-pulldown", "T3", 30), default_settings("kg")) is None

    def test_next_with_dumbbell_t3(self, temp_data_dir):
        _init(temp_data_dir)
        runner.invoke(app, [
            "log", "--data-dir", str(temp_data_dir), "--t1", "3,3,3,3,5", "--t2", "10,10,10", "--t3", "15,15,25",
        ])

        result = runner.invoke(app, ["next", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert "A2" in result.output
