# src/campcheck/validator/coverage.py
from __future__ import annotations

from collections.abc import Mapping, Sequence

from campcheck.schemas.findings import Finding, FindingKind
from campcheck.schemas.models import Division, LeagueSlot, ScheduleEntry
from campcheck.timefmt import TimeFormat, format_window
from campcheck.validator.rules import RuleSet
from campcheck.validator.usage import Schedule, TimeGrid

LeagueAssignments = Mapping[str, Mapping[int, LeagueSlot]]


def is_filled(entry: ScheduleEntry | None) -> bool:
    """
    A cell counts as filled when it has content, is a league game, or
    continues a block that started in an earlier slot.
    """
    if entry is None:
        return False
    return entry.is_continuation or entry.is_league or entry.has_content


def _entry_at(slots: Sequence[ScheduleEntry | None] | None, slot_idx: int) -> ScheduleEntry | None:
    if not slots or slot_idx >= len(slots):
        return None
    return slots[slot_idx]


def _mentions(entry: ScheduleEntry, keyword: str) -> bool:
    for text in (entry.activity_name, entry.resource_name, entry.sport):
        if text and keyword in text.lower():
            return True
    return False


def check_missing_required(
    schedule: Schedule,
    divisions: Mapping[str, Division],
    time_grid: TimeGrid,
    rules: RuleSet,
) -> list[Finding]:
    """
    @brief
    Warn when a scheduled bunk has none of a required activity.

    @details
    Matching is a case-insensitive substring test on the activity, resource
    and sport labels of every non-continuation entry, so "Lunch (Dining Hall)"
    satisfies "lunch". Bunks with nothing scheduled are left to the
    unassigned/empty bunk check, and divisions without time slots are skipped.
    """
    findings: list[Finding] = []
    if not rules.required_activities:
        return findings

    for div_name, division in divisions.items():
        if not time_grid.get(div_name):
            continue

        for bunk in division.bunks:
            slots = schedule.get(bunk) or []
            if not any(is_filled(e) for e in slots):
                continue

            for required in rules.required_activities:
                keyword = required.lower()
                has_activity = any(
                    e is not None and not e.is_continuation and _mentions(e, keyword)
                    for e in slots
                )
                if has_activity:
                    continue
                findings.append(
                    Finding.of(
                        FindingKind.MISSING_ACTIVITY,
                        f"{bunk} (Div {div_name}) may be missing {required}",
                        bunks=[bunk],
                        divisions=[div_name],
                        activity=required,
                        suggested_action=f"Schedule {required} for this bunk",
                    )
                )

    return findings


def check_empty_slots(
    schedule: Schedule,
    divisions: Mapping[str, Division],
    time_grid: TimeGrid,
    league_assignments: LeagueAssignments,
    fmt: TimeFormat = "12h",
) -> list[Finding]:
    """
    @brief
    Warn about division slots where every bunk is unfilled.

    @details
    A slot with recorded league matchups for the division is filled for all
    of its bunks. One warning per (division, slot); a single filled bunk
    silences it.
    """
    findings: list[Finding] = []

    for div_name, division in divisions.items():
        bunks = division.bunks
        div_slots = time_grid.get(div_name) or []
        if not div_slots or not bunks:
            continue

        league_for_div = league_assignments.get(div_name) or {}
        for slot_idx, slot in enumerate(div_slots):
            league_slot = league_for_div.get(slot_idx)
            if league_slot is not None and league_slot.has_matchups:
                continue
            if any(is_filled(_entry_at(schedule.get(b), slot_idx)) for b in bunks):
                continue

            if slot.is_resolved:
                label = format_window(slot.start_min, slot.end_min, fmt)
            else:
                label = f"Slot {slot_idx}"
            findings.append(
                Finding.of(
                    FindingKind.EMPTY_SLOT,
                    f"Division {div_name} slot {slot_idx} ({label}) has all {len(bunks)} bunks empty",
                    bunks=list(bunks),
                    divisions=[div_name],
                    slot_index=slot_idx,
                    start_min=slot.start_min,
                    end_min=slot.end_min,
                    count=len(bunks),
                    suggested_action="Assign an activity for this period",
                )
            )

    return findings


def check_unassigned_bunks(
    schedule: Schedule,
    divisions: Mapping[str, Division],
    time_grid: TimeGrid,
    league_assignments: LeagueAssignments,
) -> list[Finding]:
    """
    @brief
    Warn about bunks with no schedule data or an entirely empty day.

    @details
    "No schedule data": the bunk is missing from the schedule (or mapped to
    None). "Empty bunk": every slot is unfilled and the division has no
    league games recorded that day.
    """
    findings: list[Finding] = []

    for div_name, division in divisions.items():
        div_slots = time_grid.get(div_name) or []
        if not div_slots:
            continue

        league_for_div = league_assignments.get(div_name) or {}
        has_any_league = any(ls.has_matchups for ls in league_for_div.values())

        for bunk in division.bunks:
            slots = schedule.get(bunk)
            if slots is None:
                findings.append(
                    Finding.of(
                        FindingKind.UNASSIGNED_BUNK,
                        f"{bunk} (Div {div_name}) has no schedule data at all",
                        bunks=[bunk],
                        divisions=[div_name],
                        suggested_action="Generate or load a schedule for this bunk",
                    )
                )
                continue

            if has_any_league or any(is_filled(e) for e in slots):
                continue
            findings.append(
                Finding.of(
                    FindingKind.EMPTY_BUNK,
                    f"{bunk} (Div {div_name}) has all {len(div_slots)} slots empty",
                    bunks=[bunk],
                    divisions=[div_name],
                    count=len(div_slots),
                    suggested_action="Fill the bunk's day or remove it from the division",
                )
            )

    return findings
