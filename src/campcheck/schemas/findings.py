"""
@brief
Pydantic models for validation findings and the final report.

@details
A Finding is one error or warning with enough structure (bunks, divisions,
resource, time window, counts) for a caller to render it or assert on it
without parsing the message text. Severity and display category are derived
from the finding kind.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class FindingKind(str, Enum):
    CROSS_DIVISION = "CrossDivision"
    CAPACITY = "Capacity"
    SAME_DAY_REPETITION = "SameDayRepetition"
    RESOURCE_REUSE = "ResourceReuse"
    MISSING_ACTIVITY = "MissingActivity"
    EMPTY_SLOT = "EmptySlot"
    UNASSIGNED_BUNK = "UnassignedBunk"
    EMPTY_BUNK = "EmptyBunk"


class Category(str, Enum):
    """Display grouping only; has no effect on validity."""

    CROSS_DIVISION = "cross_division"
    CAPACITY = "capacity"
    REPETITION = "repetition"
    RESOURCE_REUSE = "resource_reuse"
    MISSING_ACTIVITY = "missing_activity"
    EMPTY_UNASSIGNED = "empty_unassigned"


SEVERITY_BY_KIND: dict[FindingKind, Severity] = {
    FindingKind.CROSS_DIVISION: Severity.ERROR,
    FindingKind.CAPACITY: Severity.ERROR,
    FindingKind.SAME_DAY_REPETITION: Severity.ERROR,
    FindingKind.RESOURCE_REUSE: Severity.WARNING,
    FindingKind.MISSING_ACTIVITY: Severity.WARNING,
    FindingKind.EMPTY_SLOT: Severity.WARNING,
    FindingKind.UNASSIGNED_BUNK: Severity.WARNING,
    FindingKind.EMPTY_BUNK: Severity.WARNING,
}

CATEGORY_BY_KIND: dict[FindingKind, Category] = {
    FindingKind.CROSS_DIVISION: Category.CROSS_DIVISION,
    FindingKind.CAPACITY: Category.CAPACITY,
    FindingKind.SAME_DAY_REPETITION: Category.REPETITION,
    FindingKind.RESOURCE_REUSE: Category.RESOURCE_REUSE,
    FindingKind.MISSING_ACTIVITY: Category.MISSING_ACTIVITY,
    FindingKind.EMPTY_SLOT: Category.EMPTY_UNASSIGNED,
    FindingKind.UNASSIGNED_BUNK: Category.EMPTY_UNASSIGNED,
    FindingKind.EMPTY_BUNK: Category.EMPTY_UNASSIGNED,
}


class Finding(BaseModel):
    """
    @brief
    One error or warning produced by a validation check.

    @details
    `check` names the rule that fired. Optional fields are filled only when
    they apply to that rule: time window for conflicts and empty slots,
    `count`/`limit` for capacity, `details` for rule-specific extras such as
    disallowed divisions or per-occurrence time labels.
    """

    model_config = {"use_enum_values": True}

    check: FindingKind
    severity: Severity
    category: Category
    message: str
    bunks: list[str] = Field(default_factory=list)
    divisions: list[str] = Field(default_factory=list)
    resource: str | None = None
    activity: str | None = None
    start_min: int | None = None
    end_min: int | None = None
    slot_index: int | None = None
    count: int | None = None
    limit: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    suggested_action: str | None = None

    @classmethod
    def of(cls, kind: FindingKind, message: str, **fields: Any) -> Finding:
        """Build a finding whose severity and category follow from `kind`."""
        return cls(
            check=kind,
            severity=SEVERITY_BY_KIND[kind],
            category=CATEGORY_BY_KIND[kind],
            message=message,
            **fields,
        )

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


class ValidationReport(BaseModel):
    """
    @brief
    Result of one validation pass.

    @details
    Errors and warnings keep the order in which checks ran: resource
    conflicts, then repetitions, then coverage. `checks` maps every check
    name to whether it passed; `metrics` carries pass counters.
    """

    timestamp: str
    valid: bool
    errors: list[Finding] = Field(default_factory=list)
    warnings: list[Finding] = Field(default_factory=list)
    checks: dict[str, bool] = Field(default_factory=dict)
    metrics: dict[str, Any] = Field(default_factory=dict)

    def findings(self) -> list[Finding]:
        return [*self.errors, *self.warnings]

    def by_category(self) -> dict[str, list[Finding]]:
        """Group findings for display, in category order, skipping empty groups."""
        grouped: dict[str, list[Finding]] = {c.value: [] for c in Category}
        for finding in self.findings():
            grouped[getattr(finding.category, "value", finding.category)].append(finding)
        return {name: items for name, items in grouped.items() if items}

    def summary(self) -> str:
        n_err, n_warn = len(self.errors), len(self.warnings)
        return (
            f"{n_err} error{'s' if n_err != 1 else ''}, "
            f"{n_warn} warning{'s' if n_warn != 1 else ''}"
        )


__all__ = [
    "CATEGORY_BY_KIND",
    "Category",
    "Finding",
    "FindingKind",
    "SEVERITY_BY_KIND",
    "Severity",
    "ValidationReport",
]
