# tests/validator/test_sharing.py
from __future__ import annotations

from campcheck.schemas.findings import FindingKind
from campcheck.schemas.models import ResourceSharingPolicy, SharingType
from campcheck.validator.sharing import evaluate_group, evaluate_resource
from campcheck.validator.usage import Usage


# -----------------------------
# HELPER FACTORIES
# -----------------------------
def mk_usage(bunk: str, division: str, start: int, end: int, resource: str = "Gym") -> Usage:
    """
    @brief
    Build a Usage of `resource` with an explicit clock window.
    """
    return Usage(
        bunk=bunk,
        division=division,
        resource=resource.lower(),
        resource_label=resource,
        slot_index=0,
        start_min=start,
        end_min=end,
        activity=resource,
    )


def mk_policy(
    sharing_type: SharingType, capacity: int = 1, allowed: list[str] | None = None
) -> ResourceSharingPolicy:
    return ResourceSharingPolicy(
        sharing_type=sharing_type, max_capacity=capacity, allowed_divisions=allowed or []
    )


def kinds(findings) -> list[str]:
    return [f.check for f in findings]


def test_same_division_capacity_overage_within_one_division() -> None:
    """
    @brief
    Two 5th Grade bunks on "Field 1" (same_division, capacity 1) at 11:00-11:30.

    @details
    Expect exactly one capacity error naming both bunks, the division and
    the 11:00-11:30 window.
    """
    # --- Arrange ---
    group = [
        mk_usage("A", "5th Grade", 660, 690, resource="Field 1"),
        mk_usage("B", "5th Grade", 660, 690, resource="Field 1"),
    ]
    policy = mk_policy(SharingType.SAME_DIVISION, capacity=1)

    # --- Act ---
    findings = evaluate_group(group, policy)

    # --- Assert ---
    assert kinds(findings) == [FindingKind.CAPACITY.value]
    f = findings[0]
    assert f.bunks == ["A", "B"]
    assert f.divisions == ["5th Grade"]
    assert (f.start_min, f.end_min) == (660, 690)
    assert f.count == 2 and f.limit == 1
    assert "11:00 AM - 11:30 AM" in f.message


def test_not_sharable_across_divisions_reports_cross_division_only() -> None:
    """
    @brief
    5th Grade "A" 10:00-10:30 and 6th Grade "X" 10:15-10:45 on a not_sharable Gym.

    @details
    One cross-division error; capacity is not evaluated for the group.
    """
    # --- Arrange ---
    group = [mk_usage("A", "5th Grade", 600, 630), mk_usage("X", "6th Grade", 615, 645)]

    # --- Act ---
    findings = evaluate_group(group, mk_policy(SharingType.NOT_SHARABLE))

    # --- Assert ---
    assert kinds(findings) == [FindingKind.CROSS_DIVISION.value]
    assert set(findings[0].divisions) == {"5th Grade", "6th Grade"}
    assert (findings[0].start_min, findings[0].end_min) == (600, 645)


def test_same_division_policy_rejects_mixed_divisions_regardless_of_capacity() -> None:
    # --- Arrange ---
    group = [mk_usage("A", "Juniors", 600, 630), mk_usage("S", "Seniors", 600, 630)]

    # --- Act ---
    findings = evaluate_group(group, mk_policy(SharingType.SAME_DIVISION, capacity=10))

    # --- Assert ---
    assert kinds(findings) == [FindingKind.CROSS_DIVISION.value]


def test_custom_policy_lists_disallowed_divisions() -> None:
    # --- Arrange ---
    group = [
        mk_usage("J1", "Juniors", 600, 630),
        mk_usage("S1", "Seniors", 600, 630),
        mk_usage("M1", "Middlers", 600, 630),
    ]
    policy = mk_policy(SharingType.CUSTOM, capacity=5, allowed=["juniors", "Seniors"])

    # --- Act ---
    findings = evaluate_group(group, policy)

    # --- Assert ---
    assert kinds(findings) == [FindingKind.CROSS_DIVISION.value]
    assert findings[0].details["disallowed_divisions"] == ["Middlers"]


def test_custom_policy_with_allowed_divisions_falls_through_to_capacity() -> None:
    # --- Arrange ---
    group = [
        mk_usage("J1", "Juniors", 600, 630),
        mk_usage("J2", "Juniors", 610, 640),
        mk_usage("S1", "Seniors", 600, 630),
    ]
    policy = mk_policy(SharingType.CUSTOM, capacity=1, allowed=["Juniors", "Seniors"])

    # --- Act ---
    findings = evaluate_group(group, policy)

    # --- Assert ---
    assert kinds(findings) == [FindingKind.CAPACITY.value]
    assert findings[0].divisions == ["Juniors"]
    assert (findings[0].start_min, findings[0].end_min) == (600, 640)


def test_all_policy_flags_group_above_capacity_only() -> None:
    """
    @brief
    `all` with capacity N: a group larger than N errors, N or fewer does not.
    """
    # --- Arrange ---
    policy = mk_policy(SharingType.ALL, capacity=2)
    small = [mk_usage("J1", "Juniors", 600, 630), mk_usage("S1", "Seniors", 600, 630)]
    large = small + [mk_usage("M1", "Middlers", 615, 645)]

    # --- Act ---
    ok = evaluate_group(small, policy)
    too_many = evaluate_group(large, policy)

    # --- Assert ---
    assert ok == []
    assert kinds(too_many) == [FindingKind.CAPACITY.value]
    assert too_many[0].details["scope"] == "all_divisions"
    assert too_many[0].count == 3 and too_many[0].limit == 2


def test_evaluate_resource_reports_chain_as_single_error() -> None:
    """
    @brief
    A(0-30), B(20-50), C(45-70) on a not_sharable resource across divisions.
    """
    # --- Arrange ---
    usages = [
        mk_usage("A", "Juniors", 0, 30),
        mk_usage("B", "Seniors", 20, 50),
        mk_usage("C", "Juniors", 45, 70),
    ]

    # --- Act ---
    findings, n_groups = evaluate_resource(usages, mk_policy(SharingType.NOT_SHARABLE))

    # --- Assert ---
    assert n_groups == 1
    assert len(findings) == 1
    assert findings[0].bunks == ["A", "B", "C"]


def test_single_usage_group_has_no_findings() -> None:
    assert evaluate_group([mk_usage("A", "Juniors", 0, 30)], mk_policy(SharingType.NOT_SHARABLE)) == []
