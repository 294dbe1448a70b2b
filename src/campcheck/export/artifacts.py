# src/campcheck/export/artifacts.py
"""
@brief
Atomic writers for the files a validation run leaves in its output directory.

@details
findings.csv, metrics.json and load_issues.json are all rendered in memory
first and then swapped into place with os.replace. A reader never sees a
half-written artifact, and a failed write leaves the previous run's file
untouched. Failures surface as DataError tagged with the caller's `source`.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from campcheck.errors import DataError


def atomic_write_text(path: Path, text: str, *, source: str) -> Path:
    """
    @brief
    Write `text` to `path` through a temporary file in the same directory.

    @raises
        DataError
            On any OS failure; the temporary file is removed first.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DataError(
            f"Cannot create output directory {path.parent}: {e}",
            source=source,
            suggested_action="Check output directory permissions and disk space.",
        ) from e

    # (1) Temporary file next to the target so the rename stays on one filesystem
    fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except OSError as e:
        # (2) Never leave the temporary file behind
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise DataError(
            f"Atomic write failed for {path}: {e}",
            source=source,
            suggested_action="Check output directory permissions and disk space.",
        ) from e
    return path


def write_json(payload: Any, path: Path, *, source: str, sort_keys: bool = False) -> Path:
    """
    @brief
    Serialize `payload` as indented UTF-8 JSON and write it atomically.

    @details
    Serialization happens before anything touches the disk, so an
    unserializable payload leaves no file behind.
    """
    try:
        text = json.dumps(payload, ensure_ascii=False, sort_keys=sort_keys, indent=2)
    except (TypeError, ValueError) as e:
        raise DataError(
            f"{Path(path).name} payload not JSON-serializable: {e}",
            source=source,
            suggested_action="Ensure values are primitives (str/float/int/bool), lists or dicts.",
        ) from e
    return atomic_write_text(path, text + "\n", source=source)


__all__ = ["atomic_write_text", "write_json"]
