# tests/test_run_pipeline.py
import json
from pathlib import Path

import pytest
import yaml

from scripts.run import main, run_pipeline

ROOT = Path(__file__).resolve().parents[1]


# ----------------------------------------------------------------------------------
# HELPER FACTORIES
# ----------------------------------------------------------------------------------
def write_config(tmp_path: Path, **overrides) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(overrides or {"time_format": "12h"}), encoding="utf-8")
    return path


def write_snapshot(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "day.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clean_day() -> dict:
    """
    @brief
    A day with no findings at all: one bunk, lunch scheduled, nothing shared.
    """
    return {
        "divisions": {"Juniors": {"bunks": ["J1"]}},
        "time_grid": {"Juniors": [{"start_min": 540, "end_min": 600}, {"start_min": 720, "end_min": 780}]},
        "schedule": {"J1": [{"field": "Gym", "_activity": "Hockey"}, {"_activity": "Lunch"}]},
    }


def test_run_pipeline_on_sample_snapshot_writes_artifacts(tmp_path: Path):
    """
    @brief
    End-to-end run over the bundled example snapshot.

    @details
    The example plants two cross-division conflicts, so the run reports the
    schedule invalid and writes the report, findings table and metrics.
    """
    # --- Arrange ---
    cfg_path = ROOT / "config" / "config.yaml"
    input_path = ROOT / "data" / "examples" / "snapshot.json"
    out_dir = tmp_path / "out"

    # --- Act ---
    result = run_pipeline(cfg_path, input_path, out_dir)

    # --- Assert ---
    assert result["valid"] is False
    assert result["num_errors"] == 2
    arts = result["artifacts"]
    assert arts["load_issues"] is None
    for key in ("validation_report", "findings_csv", "metrics"):
        assert arts[key] is not None and Path(arts[key]).exists()

    report = json.loads(Path(arts["validation_report"]).read_text(encoding="utf-8"))
    assert {e["resource"] for e in report["errors"]} == {"Court 1", "Art Room"}


def test_run_pipeline_respects_output_switches(tmp_path: Path):
    # --- Arrange ---
    cfg_path = write_config(
        tmp_path,
        validation={"write_report": False, "export_findings": False},
        metrics={"save_metrics": False},
    )
    input_path = write_snapshot(tmp_path, clean_day())

    # --- Act ---
    result = run_pipeline(cfg_path, input_path, tmp_path / "out")

    # --- Assert ---
    assert result["valid"] is True
    assert all(p is None for p in result["artifacts"].values())


def test_run_pipeline_writes_load_issues_and_still_validates(tmp_path: Path):
    # --- Arrange ---
    day = clean_day()
    day["schedule"]["Ghost"] = [{"field": "Gym"}]
    cfg_path = write_config(tmp_path)
    input_path = write_snapshot(tmp_path, day)

    # --- Act ---
    result = run_pipeline(cfg_path, input_path, tmp_path / "out")

    # --- Assert ---
    assert result["valid"] is True
    assert result["num_load_issues"] == 1
    assert result["artifacts"]["load_issues"].exists()


@pytest.mark.parametrize(
    "snapshot_name, expected",
    [("clean", 0), ("missing", 1)],
)
def test_main_exit_codes(tmp_path: Path, snapshot_name: str, expected: int):
    """
    @brief
    0 for a valid schedule, 1 for a controlled failure.
    """
    # --- Arrange ---
    cfg_path = write_config(tmp_path)
    if snapshot_name == "clean":
        input_path = write_snapshot(tmp_path, clean_day())
    else:
        input_path = tmp_path / "missing.json"

    # --- Act ---
    code = main(
        ["--config", str(cfg_path), "--input", str(input_path), "--output", str(tmp_path / "o")]
    )

    # --- Assert ---
    assert code == expected


def test_main_unexpected_crash_returns_two(monkeypatch, tmp_path: Path):
    from scripts import run

    # --- Arrange ---
    def boom(*_, **__):
        raise RuntimeError("boom")

    monkeypatch.setattr(run, "run_pipeline", boom)

    # --- Act / Assert ---
    assert main(["--output", str(tmp_path)]) == 2
