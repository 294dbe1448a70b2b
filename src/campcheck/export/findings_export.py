# src/campcheck/export/findings_export.py
from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from campcheck.errors import DataError
from campcheck.export.artifacts import atomic_write_text
from campcheck.schemas.findings import Finding

FINDINGS_COLUMNS = (
    "severity",
    "check",
    "category",
    "message",
    "bunks",
    "divisions",
    "resource",
    "activity",
    "slot_index",
    "start_min",
    "end_min",
    "count",
    "limit",
    "suggested_action",
    "details",
)

_LIST_SEPARATOR = ";"


def _to_records(findings: Any) -> list[Mapping[str, Any]]:
    """
    @brief
    Converts findings into a list of plain mappings.

    @details
    Accepts Finding models or already dumped dicts. A plain dict is rejected
    to prevent accidental iteration over keys.

    @raises
        DataError if input is unsupported or contains foreign items.
    """
    if isinstance(findings, (dict, str)) or not isinstance(findings, Iterable):
        raise DataError(
            "Unsupported findings type.",
            source="export.write_findings_csv",
            suggested_action="Pass report.findings() or a list of finding dicts.",
        )

    out: list[Mapping[str, Any]] = []
    for item in findings:
        if isinstance(item, Finding):
            out.append(item.model_dump(mode="json"))
        elif isinstance(item, Mapping):
            out.append(item)
        else:
            raise DataError(
                f"Each finding must be a Finding or mapping, got {type(item).__name__}",
                source="export.write_findings_csv",
                suggested_action="Pass report.findings() or a list of finding dicts.",
            )
    return out


def _cell(value: Any) -> str:
    """Flatten one finding field into a CSV cell."""
    if value is None:
        return ""
    value = getattr(value, "value", value)
    if isinstance(value, (list, tuple)):
        return _LIST_SEPARATOR.join(str(v) for v in value)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, sort_keys=True) if value else ""
    return str(value)


def write_findings_csv(findings: Any, out_path: Path) -> Path:
    """
    @brief
    Exports validation findings into a flat CSV file.

    @details
    One row per finding, columns in FINDINGS_COLUMNS order. List fields are
    joined with ';', `details` is embedded as JSON. Rows keep report order
    (errors first). The file is written atomically and is readable by
    pandas.read_csv.

    @params
        findings : Any
            Iterable of Finding models or dicts.
        out_path : Path
            Destination CSV file path.

    @returns
        Path to the written CSV file.

    @raises
        DataError for unsupported input or write failures.
    """
    # (1) Normalize input to dict-like records
    records = _to_records(findings)

    # (2) Flatten every field into a string cell
    rows = [{col: _cell(rec.get(col)) for col in FINDINGS_COLUMNS} for rec in records]

    # (3) Render the table in memory
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=FINDINGS_COLUMNS)
    writer.writeheader()
    writer.writerows(rows)

    # (4) Swap it into place
    return atomic_write_text(out_path, buf.getvalue(), source="export.write_findings_csv")
