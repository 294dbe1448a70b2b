# src/campcheck/validator/repetition.py
from __future__ import annotations

from collections.abc import Mapping, Sequence

from campcheck.lookup import normalize_name
from campcheck.schemas.findings import Finding, FindingKind
from campcheck.schemas.models import TimeSlot
from campcheck.timefmt import TimeFormat, format_minutes
from campcheck.validator.rules import RuleSet
from campcheck.validator.usage import Schedule, TimeGrid, is_analyzable, slot_at


def _time_label(div_slots: Sequence[TimeSlot], slot_idx: int, fmt: TimeFormat) -> str:
    slot = slot_at(div_slots, slot_idx)
    if slot is None or slot.start_min is None:
        return f"slot {slot_idx}"
    return format_minutes(slot.start_min, fmt)


def _division_label(division: str | None) -> str:
    return f" (Div {division})" if division else ""


def check_activity_repetitions(
    schedule: Schedule,
    bunk_index: Mapping[str, str],
    time_grid: TimeGrid,
    rules: RuleSet,
) -> list[Finding]:
    """
    @brief
    Detect activities a bunk does more than once in the same day.

    @details
    Builds activity → occurrences per bunk from analyzable entries
    (not continuation, league or transition) and reports one error per
    repeated activity. Activities containing an ignored keyword (lunch,
    swim, free play, ...) are routine and skipped. Bunks outside every
    division are still checked; their findings carry no division.
    """
    findings: list[Finding] = []

    for bunk, slots in schedule.items():
        division = bunk_index.get(str(bunk))
        div_slots = (time_grid.get(division) or []) if division else []

        occurrences: dict[str, list[tuple[int, str]]] = {}
        display: dict[str, str] = {}
        for slot_idx, entry in enumerate(slots or []):
            if entry is None or not is_analyzable(entry):
                continue
            key = normalize_name(entry.activity_name)
            if key is None or rules.is_ignored_activity(key):
                continue
            display.setdefault(key, str(entry.activity_name).strip())
            occurrences.setdefault(key, []).append(
                (slot_idx, _time_label(div_slots, slot_idx, rules.time_format))
            )

        for key, occ in occurrences.items():
            if len(occ) < 2:
                continue
            times = [label for _, label in occ]
            findings.append(
                Finding.of(
                    FindingKind.SAME_DAY_REPETITION,
                    f'{bunk}{_division_label(division)} has "{display[key]}" scheduled '
                    f"{len(occ)} times (at: {', '.join(times)})",
                    bunks=[str(bunk)],
                    divisions=[division] if division else [],
                    activity=display[key],
                    count=len(occ),
                    details={"times": times, "slot_indices": [idx for idx, _ in occ]},
                    suggested_action="Replace the repeated activity in one of the slots",
                )
            )

    return findings


def check_resource_reuse(
    schedule: Schedule,
    bunk_index: Mapping[str, str],
    time_grid: TimeGrid,
    rules: RuleSet,
) -> list[Finding]:
    """
    @brief
    Flag resources a bunk visits more than once in the same day.

    @details
    Reuse is a warning, not an error: a bunk may return to the same field
    for a different activity. Only the entry's recorded resource counts
    (no activity fallback), and ignored resources are skipped.
    """
    findings: list[Finding] = []

    for bunk, slots in schedule.items():
        division = bunk_index.get(str(bunk))
        div_slots = (time_grid.get(division) or []) if division else []

        occurrences: dict[str, list[tuple[int, str, str]]] = {}
        display: dict[str, str] = {}
        for slot_idx, entry in enumerate(slots or []):
            if entry is None or not is_analyzable(entry):
                continue
            key = normalize_name(entry.resource_name)
            if key is None or rules.is_ignored_resource(key):
                continue
            label = str(entry.resource_name).strip()
            display.setdefault(key, label)
            activity = entry.activity_name or entry.sport or label
            occurrences.setdefault(key, []).append(
                (slot_idx, _time_label(div_slots, slot_idx, rules.time_format), activity)
            )

        for key, occ in occurrences.items():
            if len(occ) < 2:
                continue
            activities = [activity for _, _, activity in occ]
            different = len({a.strip().lower() for a in activities}) > 1
            at = ", ".join(f"{label} ({activity})" for _, label, activity in occ)
            findings.append(
                Finding.of(
                    FindingKind.RESOURCE_REUSE,
                    f'{bunk}{_division_label(division)} uses "{display[key]}" {len(occ)} times today'
                    f"{' (different activities)' if different else ''}. At: {at}",
                    bunks=[str(bunk)],
                    divisions=[division] if division else [],
                    resource=display[key],
                    count=len(occ),
                    details={
                        "times": [label for _, label, _ in occ],
                        "activities": activities,
                        "slot_indices": [idx for idx, _, _ in occ],
                        "different_activities": different,
                    },
                )
            )

    return findings
