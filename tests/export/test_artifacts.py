# tests/export/test_artifacts.py
from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from campcheck.errors import DataError
from campcheck.export.artifacts import atomic_write_text, write_json


def test_atomic_write_text_creates_parents_and_replaces(tmp_path: Path) -> None:
    # --- Arrange ---
    target = tmp_path / "out" / "findings.csv"

    # --- Act ---
    atomic_write_text(target, "first", source="test")
    atomic_write_text(target, "second", source="test")

    # --- Assert ---
    assert target.read_text(encoding="utf-8") == "second"
    assert list(target.parent.iterdir()) == [target]


def test_atomic_write_text_failure_keeps_old_file_and_cleans_tmp(
    tmp_path: Path, monkeypatch
) -> None:
    """
    @brief
    Forces os.replace() to fail; the previous artifact survives untouched.
    """
    # --- Arrange ---
    target = tmp_path / "metrics.json"
    target.write_text("previous run", encoding="utf-8")

    def boom_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom_replace)

    # --- Act ---
    with pytest.raises(DataError) as ei:
        atomic_write_text(target, "new run", source="metrics.write_metrics")

    # --- Assert ---
    msg = str(ei.value)
    assert "Atomic write failed" in msg
    assert "metrics.write_metrics" in msg
    assert target.read_text(encoding="utf-8") == "previous run"
    assert list(tmp_path.iterdir()) == [target]


def test_write_json_rejects_unserializable_payload_without_writing(tmp_path: Path) -> None:
    # --- Act ---
    with pytest.raises(DataError) as ei:
        write_json({"bad": object()}, tmp_path / "load_issues.json", source="test")

    # --- Assert ---
    assert "not JSON-serializable" in str(ei.value)
    assert not (tmp_path / "load_issues.json").exists()


def test_write_json_round_trips_unicode_names(tmp_path: Path) -> None:
    path = write_json([{"bunk": "Café 3"}], tmp_path / "load_issues.json", source="test")

    assert json.loads(path.read_text(encoding="utf-8")) == [{"bunk": "Café 3"}]
    assert "Café 3" in path.read_text(encoding="utf-8")
