# src/campcheck/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from campcheck.schemas.models import ScheduleSnapshot


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of loading one day snapshot.

    Fields:
        snapshot: Parsed snapshot, always present once the file is structurally valid.
        issues: Consistency problems that do not block validation. Each item
                contains at least: kind, message, bunk (may be None), division (may be None).
        num_bunks: Number of bunks listed in the schedule.
        num_divisions: Number of divisions in the roster.
    """

    snapshot: ScheduleSnapshot
    issues: list[dict[str, Any]] = field(default_factory=list)
    num_bunks: int = 0
    num_divisions: int = 0

    @property
    def success(self) -> bool:
        """True when no consistency issues were recorded."""
        return not self.issues
