# tests/dataloader/test_snapshot_loader.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from campcheck.dataloader.snapshot_loader import SnapshotLoader
from campcheck.errors import DataError


# -----------------------------
# HELPER FACTORIES
# -----------------------------
def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def minimal_day() -> dict:
    """
    @brief
    Consistent one-division snapshot in the UI's legacy key spellings.
    """
    return {
        "divisions": {"Juniors": {"bunks": ["J1", "J2"]}},
        "divisionTimes": {
            "Juniors": [{"startMin": 540, "endMin": 600}, {"startMin": 600, "endMin": 660}]
        },
        "scheduleAssignments": {
            "J1": [{"field": "Gym", "_activity": "Hockey"}, None],
            "J2": [{"field": "Lake", "_activity": "Canoe"}, {"continuation": True}],
        },
        "activityProperties": {"Gym": {"sharable": True}},
        "fields": [{"name": "Lake", "sharableWith": {"type": "all"}}],
    }


def kinds(result) -> list[str]:
    return [i["kind"] for i in result.issues]


def test_load_consistent_snapshot_has_no_issues(tmp_path: Path) -> None:
    # --- Arrange ---
    path = write_json(tmp_path / "day.json", minimal_day())

    # --- Act ---
    result = SnapshotLoader().load(path)

    # --- Assert ---
    assert result.success
    assert result.num_bunks == 2 and result.num_divisions == 1
    snap = result.snapshot
    assert snap.time_grid["Juniors"][1].start_min == 600
    assert snap.schedule["J1"][0].resource_name == "Gym"
    assert snap.schedule["J2"][1].is_continuation
    assert "Gym" in snap.policies
    assert snap.field_properties[0].name == "Lake"


def test_consistency_problems_are_recorded_not_raised(tmp_path: Path) -> None:
    """
    @brief
    Roster and grid inconsistencies become issues; loading continues.
    """
    # --- Arrange ---
    day = minimal_day()
    day["divisions"]["Seniors"] = {"bunks": ["J2", "S1"]}
    day["divisionTimes"]["Seniors"] = [{"startMin": 700, "endMin": 650}]
    day["scheduleAssignments"]["J1"].append({"field": "Court"})
    day["scheduleAssignments"]["Ghost"] = [{"field": "Gym"}]
    path = write_json(tmp_path / "day.json", day)

    # --- Act ---
    result = SnapshotLoader().load(path)

    # --- Assert ---
    assert not result.success
    assert kinds(result) == [
        "bunk_in_multiple_divisions",
        "invalid_slot_window",
        "slot_count_mismatch",
        "unrostered_bunk",
    ]
    assert result.issues[0]["bunk"] == "J2"
    assert result.issues[3]["bunk"] == "Ghost"


def test_malformed_pieces_are_recorded_as_issues(tmp_path: Path) -> None:
    """
    @brief
    A clock-string time, a list cell and a bare policy row load as issues.
    """
    # --- Arrange ---
    day = minimal_day()
    day["divisionTimes"]["Juniors"][0]["startMin"] = "9:00"
    day["scheduleAssignments"]["J1"][1] = ["Canoe"]
    day["activityProperties"]["Lake"] = True
    path = write_json(tmp_path / "day.json", day)

    # --- Act ---
    result = SnapshotLoader().load(path)

    # --- Assert ---
    assert kinds(result) == ["malformed_cell", "unresolved_slot_time", "malformed_policy"]
    cell_issue, time_issue, policy_issue = result.issues
    assert (cell_issue["bunk"], cell_issue["slot_index"]) == ("J1", 1)
    assert (time_issue["division"], time_issue["slot_index"]) == ("Juniors", 0)
    assert policy_issue["resource"] == "Lake"
    assert result.snapshot.schedule["J1"][1] is None
    assert not result.snapshot.time_grid["Juniors"][0].is_resolved


def test_missing_file_raises_data_error(tmp_path: Path) -> None:
    with pytest.raises(DataError) as e:
        SnapshotLoader().load(tmp_path / "missing.json")

    assert "not found" in str(e.value)


def test_wrong_extension_raises_data_error(tmp_path: Path) -> None:
    # --- Arrange ---
    path = tmp_path / "day.csv"
    path.write_text("{}", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(DataError):
        SnapshotLoader().load(path)


def test_invalid_json_raises_data_error(tmp_path: Path) -> None:
    # --- Arrange ---
    path = tmp_path / "day.json"
    path.write_text('{"schedule": {', encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(DataError) as e:
        SnapshotLoader().load(path)

    assert "parsing failed" in str(e.value)


def test_non_object_root_raises_data_error(tmp_path: Path) -> None:
    path = write_json(tmp_path / "day.json", [1, 2, 3])

    with pytest.raises(DataError) as e:
        SnapshotLoader().load(path)

    assert "JSON object" in str(e.value)


def test_schema_violation_raises_data_error(tmp_path: Path) -> None:
    # --- Arrange ---
    day = minimal_day()
    day["divisions"] = ["Juniors"]
    path = write_json(tmp_path / "day.json", day)

    # --- Act / Assert ---
    with pytest.raises(DataError) as e:
        SnapshotLoader().load(path)

    assert "Invalid snapshot structure" in str(e.value)


def test_sample_snapshot_loads(tmp_path: Path) -> None:
    """
    @brief
    The bundled example snapshot parses without consistency issues.
    """
    # --- Arrange ---
    path = Path(__file__).resolve().parents[2] / "data" / "examples" / "snapshot.json"

    # --- Act ---
    result = SnapshotLoader().load(path)

    # --- Assert ---
    assert result.success
    assert set(result.snapshot.divisions) == {"Juniors", "Seniors"}
