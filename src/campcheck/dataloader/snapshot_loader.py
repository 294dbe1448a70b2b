# src/campcheck/dataloader/snapshot_loader.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from campcheck.dataloader.types import LoadResult
from campcheck.errors import DataError
from campcheck.schemas.models import ScheduleSnapshot

logger = logging.getLogger(__name__)


class SnapshotLoader:
    """
    JSON day snapshot → LoadResult[ScheduleSnapshot].

    Rules:
      - Format: UTF-8 JSON, top-level object
      - Keys follow ScheduleSnapshot (legacy spellings such as
        `scheduleAssignments`, `divisionTimes`, `activityProperties` accepted)
      - Malformed pieces (dropped by the models, recorded as issues):
          * cell that is not an object              → malformed_cell
          * bunk schedule that is not a list        → malformed_bunk_schedule
          * slot time that is not a whole minute    → unresolved_slot_time
          * slot / division / time grid not usable  → malformed_slot, malformed_division,
                                                      malformed_time_grid
          * policy or league row not an object      → malformed_policy, malformed_league_slot
      - Consistency checks (recorded as issues, loading continues):
          * bunk listed in more than one division   → bunk_in_multiple_divisions
          * schedule length != division slot count  → slot_count_mismatch
          * slot with start_min >= end_min          → invalid_slot_window
          * scheduled bunk absent from all divisions → unrostered_bunk

    Fatal errors (raise DataError immediately):
      - file missing / unreadable / wrong extension
      - invalid JSON or non-object root
      - a top-level section (schedule, divisions, time_grid, ...) of the wrong shape
    """

    def load(self, path: Path) -> LoadResult:
        raw = self._read_json(path)
        dropped: list[dict[str, Any]] = []
        snapshot = self._validate(raw, dropped)
        result = LoadResult(
            snapshot=snapshot,
            issues=[_issue_from_drop(d) for d in dropped] + self._consistency_issues(snapshot),
            num_bunks=len(snapshot.schedule),
            num_divisions=len(snapshot.divisions),
        )
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_json(self, path: Path) -> dict[str, Any]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="SnapshotLoader._read_json",
                suggested_action="Pass a pathlib.Path pointing to the snapshot JSON.",
            )
        if not path.exists():
            raise DataError(
                message=f"Snapshot file not found: {path}",
                source="SnapshotLoader._read_json",
                suggested_action="Verify file path and ensure the snapshot is present.",
            )
        if path.suffix.lower() != ".json":
            raise DataError(
                message=f"Invalid snapshot file extension: {path.suffix}",
                source="SnapshotLoader._read_json",
                suggested_action="Export the day snapshot as a .json file.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataError(
                message=f"Snapshot JSON parsing failed: {e}",
                source="SnapshotLoader._read_json",
                suggested_action="Re-export the snapshot; the file is not valid JSON.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read snapshot: {e}",
                source="SnapshotLoader._read_json",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

        if not isinstance(data, Mapping):
            raise DataError(
                message="Snapshot root must be a JSON object.",
                source="SnapshotLoader._read_json",
                suggested_action="Wrap schedule, divisions and time_grid in one object.",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any], dropped: list[dict[str, Any]]) -> ScheduleSnapshot:
        try:
            return ScheduleSnapshot.model_validate(data, context={"dropped": dropped})
        except ValidationError as e:
            raise DataError(
                message=f"Invalid snapshot structure: {e}",
                source="SnapshotLoader._validate",
                suggested_action="Check that schedule, divisions and time_grid have the expected shapes.",
            ) from e

    def _consistency_issues(self, snapshot: ScheduleSnapshot) -> list[dict[str, Any]]:
        issues: list[dict[str, Any]] = []

        # bunk → first division that lists it
        owner: dict[str, str] = {}
        for div_name, division in snapshot.divisions.items():
            for bunk in division.bunks:
                if bunk in owner and owner[bunk] != div_name:
                    issues.append(
                        _issue(
                            "bunk_in_multiple_divisions",
                            f"Bunk {bunk} is listed in divisions {owner[bunk]} and {div_name}",
                            bunk=bunk,
                            division=div_name,
                        )
                    )
                    continue
                owner.setdefault(bunk, div_name)

        for div_name, slots in snapshot.time_grid.items():
            for idx, slot in enumerate(slots):
                if slot.is_resolved and slot.start_min >= slot.end_min:  # type: ignore[operator]
                    issues.append(
                        _issue(
                            "invalid_slot_window",
                            f"Division {div_name} slot {idx} starts at or after its end",
                            division=div_name,
                            slot_index=idx,
                        )
                    )

        for bunk, entries in snapshot.schedule.items():
            division = owner.get(bunk)
            if division is None:
                issues.append(
                    _issue(
                        "unrostered_bunk",
                        f"Bunk {bunk} has a schedule but belongs to no division",
                        bunk=bunk,
                    )
                )
                continue
            grid = snapshot.time_grid.get(division)
            if entries is None or not grid:
                continue
            if len(entries) != len(grid):
                issues.append(
                    _issue(
                        "slot_count_mismatch",
                        f"Bunk {bunk} has {len(entries)} slots, division {division} has {len(grid)}",
                        bunk=bunk,
                        division=division,
                    )
                )

        return issues

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "Loaded snapshot %s: %d bunks, %d divisions.",
                path,
                result.num_bunks,
                result.num_divisions,
            )
        else:
            logger.warning(
                "Loaded snapshot %s with %d consistency issue(s).", path, len(result.issues)
            )


def _issue(
    kind: str,
    message: str,
    *,
    bunk: str | None = None,
    division: str | None = None,
    slot_index: int | None = None,
) -> dict[str, Any]:
    item: dict[str, Any] = {"kind": kind, "message": message, "bunk": bunk, "division": division}
    if slot_index is not None:
        item["slot_index"] = slot_index
    return item


def _issue_from_drop(drop: dict[str, Any]) -> dict[str, Any]:
    item = _issue(
        drop["kind"],
        drop["message"],
        bunk=drop.get("bunk"),
        division=drop.get("division"),
        slot_index=drop.get("slot_index"),
    )
    if drop.get("resource") is not None:
        item["resource"] = drop["resource"]
    return item


__all__ = ["SnapshotLoader"]
