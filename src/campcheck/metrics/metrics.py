# src/campcheck/metrics/metrics.py
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from campcheck.errors import DataError
from campcheck.export.artifacts import write_json
from campcheck.schemas.findings import Category, Severity, ValidationReport

METRICS_FILENAME = "metrics.json"

_FRAME_COLUMNS = ("check", "severity", "category", "resource", "divisions")


def collect_metrics(report: ValidationReport) -> dict[str, Any]:
    """
    @brief
    Builds a JSON-serializable summary of one validation pass.

    @details
    Tabulates the report's findings with pandas and counts them by severity,
    check, category, division and resource. Engine counters from the report
    (bunks, usages, overlap groups, ...) are carried under "engine".
    A finding naming several divisions counts once for each of them.

    @raises
        DataError
            If `report` is not a ValidationReport.
    """
    if not isinstance(report, ValidationReport):
        raise DataError(
            f"Expected ValidationReport, got {type(report).__name__}",
            source="metrics.collect_metrics",
            suggested_action="Pass the report returned by validate_schedule().",
        )

    # (1) Tabulate findings
    df = _findings_frame(report)

    # (2) Fixed-key breakdowns keep every severity and category present
    by_severity = {s.value: 0 for s in Severity}
    by_category = {c.value: 0 for c in Category}
    by_severity.update(_value_counts(df, "severity"))
    by_category.update(_value_counts(df, "category"))

    # (3) Per-entity breakdowns
    by_division = _value_counts(df.explode("divisions"), "divisions")
    by_resource = _value_counts(df, "resource")

    metrics = {
        "timestamp": _utc_now_iso(),
        "report_timestamp": report.timestamp,
        "valid": bool(report.valid),
        "num_findings": int(len(df)),
        "num_errors": by_severity[Severity.ERROR.value],
        "num_warnings": by_severity[Severity.WARNING.value],
        "by_severity": by_severity,
        "by_category": by_category,
        "by_check": _value_counts(df, "check"),
        "by_division": by_division,
        "by_resource": by_resource,
        "engine": {k: v for k, v in report.metrics.items() if k != "by_category"},
    }

    # (4) Validate serializability before handing off to the writer
    json.dumps(metrics, ensure_ascii=False)
    return metrics


def write_metrics(metrics: dict[str, Any], out_dir: Path) -> Path:
    """
    @brief
    Writes the summary from collect_metrics() to out_dir/metrics.json.

    @details
    Keys are sorted so summaries of successive camp days diff cleanly.
    The previous metrics.json is replaced atomically.

    @raises
        DataError
            If `metrics` is not a dict, is not serializable, or cannot be written.
    """
    if not isinstance(metrics, dict):
        raise DataError(
            f"metrics must be a dict, got {type(metrics).__name__}",
            source="metrics.write_metrics",
            suggested_action="Pass the dict returned by collect_metrics().",
        )
    return write_json(
        metrics, Path(out_dir) / METRICS_FILENAME, source="metrics.write_metrics", sort_keys=True
    )


# ----------------- internal -----------------


def _findings_frame(report: ValidationReport) -> pd.DataFrame:
    rows = [
        {
            "check": _value(f.check),
            "severity": _value(f.severity),
            "category": _value(f.category),
            "resource": f.resource,
            "divisions": list(f.divisions) or [None],
        }
        for f in report.findings()
    ]
    return pd.DataFrame(rows, columns=list(_FRAME_COLUMNS))


def _value_counts(df: pd.DataFrame, column: str) -> dict[str, int]:
    """Counts of non-null values in `column`, sorted by key."""
    if df.empty:
        return {}
    counts = df[column].dropna().astype(str).value_counts()
    return {str(k): int(v) for k, v in sorted(counts.items())}


def _value(member: Any) -> Any:
    return getattr(member, "value", member)


def _utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with Z suffix and no microseconds."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
