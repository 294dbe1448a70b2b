# src/campcheck/validator/validator.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from campcheck.errors import DataError, ValidationError
from campcheck.schemas.findings import ValidationReport
from campcheck.schemas.models import Config, ScheduleSnapshot
from campcheck.validator.coverage import (
    check_empty_slots,
    check_missing_required,
    check_unassigned_bunks,
)
from campcheck.validator.division_index import build_bunk_division_index
from campcheck.validator.policy import PolicyTable
from campcheck.validator.repetition import check_activity_repetitions, check_resource_reuse
from campcheck.validator.report import ReportAggregator
from campcheck.validator.rules import RuleSet
from campcheck.validator.sharing import evaluate_resource
from campcheck.validator.usage import collect_usages

logger = logging.getLogger(__name__)


# ---------------------------
# VALIDATOR CLASS (instance core)
# ----------------------------
class ScheduleValidator:
    """
    @brief
    Batch rule evaluator for one day of camp schedule.

    @details
    Runs resource conflict checks (overlap grouping + sharing policy),
    repetition checks and coverage checks over a read-only snapshot.
    Incomplete input never raises: unattributable bunks, unresolved slot
    times and unknown resources are skipped, so a report is always produced.
    All intermediate state lives on the instance and is rebuilt by each
    `run_all_checks()` call.
    """

    # ---------- Constructor ----------
    def __init__(
        self,
        snapshot: ScheduleSnapshot,
        cfg: Config | None = None,
        policy_table: PolicyTable | None = None,
    ) -> None:
        """
        @brief
        Initialize validation context.

        @params
            snapshot : ScheduleSnapshot
                Schedule, roster, time grid, policies and league data.
            cfg : Config | None
                Rule lists and report policy; defaults to Config().
            policy_table : PolicyTable | None
                Prepared policy table; built from the snapshot's policy
                sources when omitted.
        """
        self.snapshot = snapshot
        self.cfg = cfg or Config()
        self.rules = RuleSet.from_config(self.cfg)
        self.policy_table = (
            policy_table if policy_table is not None else PolicyTable.from_snapshot(snapshot)
        )

        # (1) Reverse roster lookup, built once
        self.bunk_index: dict[str, str] = build_bunk_division_index(snapshot.divisions)

        # (2) Accumulators
        self.aggregator = ReportAggregator(fail_on_warnings=self.cfg.validation.fail_on_warnings)
        self.metrics: dict[str, Any] = {}

    # ---------- Public lifecycle API ----------
    def run_all_checks(self) -> None:
        """
        @brief
        Execute the full validation sequence.

        @details
        Order matters for report ordering only: conflicts, then repetitions,
        then coverage.
        """
        self.aggregator.clear()
        self.metrics = self._base_metrics()

        self._check_resource_conflicts()
        self._check_repetitions()
        self._check_coverage()

        logger.info(
            "Validation complete: %d errors, %d warnings",
            len(self.aggregator.errors),
            len(self.aggregator.warnings),
        )

    def build_report(self) -> ValidationReport:
        """Assemble collected findings and pass metrics into a ValidationReport."""
        return self.aggregator.build(self.metrics)

    def save_report(
        self,
        report: ValidationReport,
        out_dir: Path | None = None,
        filename: str = "validation_report.json",
    ) -> Path:
        """
        Writes the report atomically to disk.

        Args:
            report: Validation report.
            out_dir: Target directory (defaults to Config.output_dir).
            filename: Target filename (default 'validation_report.json').

        Returns:
            Path to the written JSON file.
        """
        target_dir = out_dir or Path(self.cfg.output_dir or "data/output")
        final_path = target_dir / filename
        tmp_path = final_path.with_suffix(".tmp")

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(report.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
            tmp_path.replace(final_path)
        except OSError as e:
            raise ValidationError(
                f"Failed to write validation report: {e}",
                source="ScheduleValidator.save_report",
                suggested_action="Check disk permissions and free space.",
            ) from e

        logger.info("Validation report saved: %s", final_path)
        return final_path

    # ---------- Checks ----------
    def _check_resource_conflicts(self) -> None:
        """
        @brief
        Cross-division and capacity violations per resource.

        @details
        Collects time-based usages per resource, groups them transitively by
        overlap and applies each resource's resolved sharing policy.
        """
        usages_by_resource = collect_usages(
            self.snapshot.schedule, self.bunk_index, self.snapshot.time_grid, self.rules
        )

        num_groups = 0
        for usages in usages_by_resource.values():
            if len(usages) < 2:
                continue
            policy = self.policy_table.resolve(usages[0].resource_label)
            findings, groups = evaluate_resource(usages, policy, self.rules.time_format)
            num_groups += groups
            self.aggregator.extend(findings)

        self.metrics.update(
            {
                "num_resources_in_use": len(usages_by_resource),
                "num_usages": sum(len(u) for u in usages_by_resource.values()),
                "num_overlap_groups": num_groups,
            }
        )

    def _check_repetitions(self) -> None:
        schedule, grid = self.snapshot.schedule, self.snapshot.time_grid
        self.aggregator.extend(
            check_activity_repetitions(schedule, self.bunk_index, grid, self.rules)
        )
        self.aggregator.extend(check_resource_reuse(schedule, self.bunk_index, grid, self.rules))

    def _check_coverage(self) -> None:
        snap = self.snapshot
        self.aggregator.extend(
            check_missing_required(snap.schedule, snap.divisions, snap.time_grid, self.rules)
        )
        self.aggregator.extend(
            check_empty_slots(
                snap.schedule,
                snap.divisions,
                snap.time_grid,
                snap.league_assignments,
                self.rules.time_format,
            )
        )
        self.aggregator.extend(
            check_unassigned_bunks(
                snap.schedule, snap.divisions, snap.time_grid, snap.league_assignments
            )
        )

    def _base_metrics(self) -> dict[str, Any]:
        snap = self.snapshot
        rostered = set(self.bunk_index)
        scheduled = {b for b, slots in snap.schedule.items() if slots is not None}
        return {
            "num_divisions": len(snap.divisions),
            "num_bunks": len(rostered),
            "num_scheduled_bunks": len(scheduled & rostered),
            "num_unattributed_bunks": len(scheduled - rostered),
            "num_policies": len(self.policy_table),
        }


# ----------------------------
# THIN FACADES
# ----------------------------
def validate_schedule(
    schedule: Mapping[str, Any],
    divisions: Mapping[str, Any],
    time_grid: Mapping[str, Any],
    policies: PolicyTable | Mapping[str, Any] | None = None,
    config: Config | None = None,
    *,
    league_assignments: Mapping[str, Any] | None = None,
) -> ValidationReport:
    """
    @brief
    Validate one day of schedule and return the report.

    @details
    Pure function over its inputs: no I/O, no mutation. Inputs may be model
    instances or the plain mappings the scheduling UI stores; they are
    coerced into a ScheduleSnapshot first.

    @params
        schedule : Mapping[str, Any]
            Bunk → ordered slot entries (None for empty cells).
        divisions : Mapping[str, Any]
            Division name → {bunks: [...]}.
        time_grid : Mapping[str, Any]
            Division name → ordered slots {start_min, end_min}.
        policies : PolicyTable | Mapping[str, Any] | None
            Resource name → sharing settings, or a prepared PolicyTable.
        config : Config | None
            Rule lists; defaults to Config().
        league_assignments : Mapping[str, Any] | None
            Division → slot index → {matchups: [...]}.

    @returns
        ValidationReport with ordered errors and warnings.

    Malformed pieces inside the mappings (an unusable slot time, a cell that
    is not an object, a bare policy row) are dropped by the snapshot models
    and the check continues; see campcheck.schemas.models.

    @raises
        DataError
            When a top-level argument is not a mapping.
    """
    # (1) Only the top-level shape is fatal
    arguments = {
        "schedule": schedule,
        "divisions": divisions,
        "time_grid": time_grid,
        "policies": policies,
        "league_assignments": league_assignments,
    }
    for name, value in arguments.items():
        if value is None and name in ("policies", "league_assignments"):
            continue
        if name == "policies" and isinstance(value, PolicyTable):
            continue
        if not isinstance(value, Mapping):
            raise DataError(
                f"{name} must be a mapping, got {type(value).__name__}",
                source="validator.validate_schedule",
                suggested_action="Pass mappings shaped like the scheduler's saved day data.",
            )

    # (2) Coerce into a snapshot, dropping malformed pieces
    table = policies if isinstance(policies, PolicyTable) else None
    payload: dict[str, Any] = {
        "schedule": schedule,
        "divisions": divisions,
        "time_grid": time_grid,
        "policies": {} if table is not None else (policies or {}),
        "league_assignments": league_assignments or {},
    }

    try:
        snapshot = ScheduleSnapshot.model_validate(payload)
    except PydanticValidationError as e:
        raise DataError(
            f"Schedule inputs do not match the snapshot structure: {e}",
            source="validator.validate_schedule",
            suggested_action="Pass mappings shaped like the scheduler's saved day data.",
        ) from e

    # (3) Run every check
    return validate_snapshot(snapshot, config, policy_table=table)


def validate_snapshot(
    snapshot: ScheduleSnapshot,
    cfg: Config | None = None,
    *,
    policy_table: PolicyTable | None = None,
    write_report: bool = False,
    out_dir: Path | None = None,
    filename: str = "validation_report.json",
) -> ValidationReport:
    """
    @brief
    High-level convenience wrapper for snapshot validation.

    @details
    Creates a ScheduleValidator, runs every check, builds the report and
    optionally writes it to disk. Always returns the in-memory report.
    """
    # (1) Initialize validator instance with input data
    validator = ScheduleValidator(snapshot, cfg, policy_table=policy_table)

    # (2) Execute full validation workflow
    validator.run_all_checks()

    # (3) Build final structured report
    report = validator.build_report()

    # (4) Optionally persist the report to disk
    if write_report:
        validator.save_report(report, out_dir=out_dir, filename=filename)

    return report
