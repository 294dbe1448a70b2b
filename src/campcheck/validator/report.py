# src/campcheck/validator/report.py
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from campcheck.schemas.findings import Category, Finding, FindingKind, ValidationReport

# Order in which the checks run; also the order of the `checks` map
CHECK_ORDER: tuple[FindingKind, ...] = (
    FindingKind.CROSS_DIVISION,
    FindingKind.CAPACITY,
    FindingKind.SAME_DAY_REPETITION,
    FindingKind.RESOURCE_REUSE,
    FindingKind.MISSING_ACTIVITY,
    FindingKind.EMPTY_SLOT,
    FindingKind.UNASSIGNED_BUNK,
    FindingKind.EMPTY_BUNK,
)


def _value(member: Any) -> Any:
    return getattr(member, "value", member)


class ReportAggregator:
    """
    @brief
    Collects findings from every check and assembles the report.

    @details
    Findings are kept in arrival order, so errors and warnings each preserve
    the order in which checks ran. Category tagging is for display only and
    never changes validity.
    """

    def __init__(self, fail_on_warnings: bool = False) -> None:
        self.fail_on_warnings = fail_on_warnings
        self._findings: list[Finding] = []

    def extend(self, findings: Iterable[Finding]) -> None:
        self._findings.extend(findings)

    def clear(self) -> None:
        self._findings.clear()

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self._findings if f.is_error]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self._findings if not f.is_error]

    def checks(self) -> dict[str, bool]:
        """Check name → True when that check produced no findings."""
        fired = {_value(f.check) for f in self._findings}
        return {kind.value: kind.value not in fired for kind in CHECK_ORDER}

    def category_breakdown(self) -> dict[str, int]:
        """Finding counts per display category, in category order."""
        counts = {c.value: 0 for c in Category}
        for f in self._findings:
            counts[_value(f.category)] += 1
        return counts

    def is_valid(self) -> bool:
        if self.errors:
            return False
        return not (self.fail_on_warnings and self.warnings)

    def build(self, metrics: dict[str, Any] | None = None) -> ValidationReport:
        """
        @brief
        Assemble the ValidationReport.

        @details
        Adds error/warning totals and the category breakdown to the supplied
        pass metrics.
        """
        errors, warnings = self.errors, self.warnings
        merged: dict[str, Any] = dict(metrics or {})
        merged.update(
            {
                "num_errors": len(errors),
                "num_warnings": len(warnings),
                "by_category": self.category_breakdown(),
            }
        )
        return ValidationReport(
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            valid=self.is_valid(),
            errors=errors,
            warnings=warnings,
            checks=self.checks(),
            metrics=merged,
        )
