# src/campcheck/validator/sharing.py
"""
@brief
Sharing policy evaluation for overlap groups.

@details
Two stages per group. Cross-division legality is decided first and, when it
fails, is reported on its own (a not_sharable or same_division breach is not
also counted as a capacity overage). Capacity is then checked per division
among usages that are otherwise allowed to share.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from campcheck.lookup import normalize_name
from campcheck.schemas.findings import Finding, FindingKind
from campcheck.schemas.models import ResourceSharingPolicy, SharingType
from campcheck.timefmt import TimeFormat, format_window
from campcheck.validator.overlap import conflict_groups
from campcheck.validator.usage import Usage


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _bunk_list(group: Sequence[Usage]) -> str:
    return ", ".join(f"{u.bunk} (Div {u.division})" for u in group)


def _window(group: Sequence[Usage]) -> tuple[int, int]:
    return min(u.start_min for u in group), max(u.end_min for u in group)


def _cross_division_finding(
    message: str,
    group: Sequence[Usage],
    divisions: list[str],
    policy: ResourceSharingPolicy,
    details: dict | None = None,
) -> Finding:
    start, end = _window(group)
    return Finding.of(
        FindingKind.CROSS_DIVISION,
        message,
        bunks=_unique(u.bunk for u in group),
        divisions=divisions,
        resource=group[0].resource_label,
        start_min=start,
        end_min=end,
        count=len(group),
        details={
            "sharing_type": str(getattr(policy.sharing_type, "value", policy.sharing_type)),
            "usages": [{"bunk": u.bunk, "division": u.division} for u in group],
            **(details or {}),
        },
        suggested_action="Move one of the divisions to another resource or time",
    )


def evaluate_group(
    group: Sequence[Usage], policy: ResourceSharingPolicy, fmt: TimeFormat = "12h"
) -> list[Finding]:
    """
    @brief
    Apply a resource's sharing policy to one overlap group.

    @details
    Cross-division rules, in order:
      - not_sharable: one error, capacity not evaluated;
      - same_division: one error, capacity not evaluated;
      - custom: error listing divisions outside the allowed list, otherwise
        continue (an empty allowed list places no restriction);
      - all with a finite capacity: error when the whole group exceeds it,
        otherwise continue.
    Then per-division capacity: each division's subset larger than
    `max_capacity` yields one error with that subset's own time window.

    @params
        group : Sequence[Usage]
            Transitively overlapping usages of one resource (size ≥ 2).
        policy : ResourceSharingPolicy
            Resolved policy for the resource.
        fmt : TimeFormat
            Clock style for messages.

    @returns
        Findings for this group (possibly empty).
    """
    if len(group) < 2:
        return []

    resource = group[0].resource_label
    divisions = _unique(u.division for u in group)
    start, end = _window(group)
    window = format_window(start, end, fmt)
    sharing_type = policy.sharing_type

    # (1) Cross-division legality
    if len(divisions) > 1:
        if sharing_type == SharingType.NOT_SHARABLE:
            return [
                _cross_division_finding(
                    f"{resource} is not sharable but used by {len(group)} bunks from different "
                    f"divisions during {window}. Divisions: {', '.join(divisions)} | "
                    f"Bunks: {_bunk_list(group)}",
                    group,
                    divisions,
                    policy,
                )
            ]

        if sharing_type == SharingType.SAME_DIVISION:
            return [
                _cross_division_finding(
                    f"{resource} can only be shared within the same division, but used by "
                    f"divisions {', '.join(divisions)} during {window}. Bunks: {_bunk_list(group)}",
                    group,
                    divisions,
                    policy,
                )
            ]

        if sharing_type == SharingType.CUSTOM and policy.allowed_divisions:
            allowed = {normalize_name(d) for d in policy.allowed_divisions}
            disallowed = [d for d in divisions if normalize_name(d) not in allowed]
            if disallowed:
                return [
                    _cross_division_finding(
                        f"{resource} shared by divisions not in its allowed list during {window}. "
                        f"Allowed: {', '.join(policy.allowed_divisions)} | "
                        f"Found: {', '.join(divisions)} | Bunks: {_bunk_list(group)}",
                        group,
                        divisions,
                        policy,
                        details={
                            "allowed_divisions": list(policy.allowed_divisions),
                            "disallowed_divisions": disallowed,
                        },
                    )
                ]

        if sharing_type == SharingType.ALL and not policy.is_unlimited:
            if len(group) > policy.max_capacity:
                return [
                    Finding.of(
                        FindingKind.CAPACITY,
                        f"{resource} used by {len(group)} bunks across divisions during {window} "
                        f"(Max: {policy.max_capacity}). Bunks: {_bunk_list(group)}",
                        bunks=_unique(u.bunk for u in group),
                        divisions=divisions,
                        resource=resource,
                        start_min=start,
                        end_min=end,
                        count=len(group),
                        limit=policy.max_capacity,
                        details={"scope": "all_divisions"},
                        suggested_action="Move bunks to another resource or time",
                    )
                ]

    # (2) Per-division capacity
    findings: list[Finding] = []
    for division in divisions:
        subset = [u for u in group if u.division == division]
        if len(subset) <= policy.max_capacity:
            continue
        div_start, div_end = _window(subset)
        bunks = _unique(u.bunk for u in subset)
        findings.append(
            Finding.of(
                FindingKind.CAPACITY,
                f"{resource} used by {len(subset)} bunks in Division {division} at "
                f"{format_window(div_start, div_end, fmt)} (Max Capacity: {policy.max_capacity}). "
                f"Bunks: {', '.join(bunks)}",
                bunks=bunks,
                divisions=[division],
                resource=resource,
                start_min=div_start,
                end_min=div_end,
                count=len(subset),
                limit=policy.max_capacity,
                details={"scope": "division"},
                suggested_action="Move bunks to another resource or time",
            )
        )
    return findings


def evaluate_resource(
    usages: Sequence[Usage], policy: ResourceSharingPolicy, fmt: TimeFormat = "12h"
) -> tuple[list[Finding], int]:
    """
    Group one resource's usages and evaluate every conflicting group.

    Returns the findings and the number of groups that had two or more usages.
    """
    groups = conflict_groups(usages)
    findings: list[Finding] = []
    for group in groups:
        findings.extend(evaluate_group(group, policy, fmt))
    return findings, len(groups)
