# src/campcheck/validator/usage.py
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from campcheck.lookup import normalize_name
from campcheck.schemas.models import ScheduleEntry, TimeSlot
from campcheck.validator.rules import RuleSet

logger = logging.getLogger(__name__)

Schedule = Mapping[str, Sequence[ScheduleEntry | None] | None]
TimeGrid = Mapping[str, Sequence[TimeSlot]]


@dataclass(frozen=True)
class Usage:
    """
    @brief
    One bunk occupying one resource during one real time window.

    @details
    `resource` is the normalized name used for grouping; `resource_label`
    keeps the name as written in the schedule for messages. Times come from
    the owning division's slot, not the slot index, because divisions with
    offset hours map the same index to different clock times.
    """

    bunk: str
    division: str
    resource: str
    resource_label: str
    slot_index: int
    start_min: int
    end_min: int
    activity: str


def is_analyzable(entry: ScheduleEntry | None) -> bool:
    """True for entries that take part in conflict and repetition analysis."""
    if entry is None or entry.is_continuation:
        return False
    return not (entry.is_league or entry.is_transition_buffer)


def slot_at(div_slots: Sequence[TimeSlot], slot_idx: int) -> TimeSlot | None:
    return div_slots[slot_idx] if 0 <= slot_idx < len(div_slots) else None


def collect_usages(
    schedule: Schedule,
    bunk_index: Mapping[str, str],
    time_grid: TimeGrid,
    rules: RuleSet,
) -> dict[str, list[Usage]]:
    """
    @brief
    Build per-resource usage lists from the whole schedule.

    @details
    For every attributable bunk, each analyzable entry contributes one usage
    keyed by its resource name (falling back to the activity name when no
    resource is recorded). Skipped without error:
      - bunks not listed in any division;
      - empty, continuation, league and transition entries;
      - ignored resources;
      - entries whose slot has no resolvable time bounds.

    @returns
        Mapping normalized resource name → usages in schedule order.
    """
    usages: dict[str, list[Usage]] = {}

    for bunk, slots in schedule.items():
        division = bunk_index.get(str(bunk))
        if division is None:
            if slots:
                logger.debug("Skipping bunk %s: not listed in any division", bunk)
            continue

        div_slots = time_grid.get(division) or []
        for slot_idx, entry in enumerate(slots or []):
            if entry is None or not is_analyzable(entry):
                continue

            # (1) Resource name, falling back to the activity
            label = entry.resource_name if normalize_name(entry.resource_name) else entry.activity_name
            key = normalize_name(label)
            if key is None or rules.is_ignored_resource(key):
                continue

            # (2) Real clock window of this slot for this division
            slot = slot_at(div_slots, slot_idx)
            if slot is None or slot.start_min is None or slot.end_min is None:
                logger.debug(
                    "Skipping %s slot %d on %s: no time bounds for division %s",
                    bunk,
                    slot_idx,
                    key,
                    division,
                )
                continue

            usages.setdefault(key, []).append(
                Usage(
                    bunk=str(bunk),
                    division=division,
                    resource=key,
                    resource_label=str(label).strip(),
                    slot_index=slot_idx,
                    start_min=slot.start_min,
                    end_min=slot.end_min,
                    activity=entry.activity_name or entry.sport or str(label).strip(),
                )
            )

    return usages
