# src/campcheck/dataloader/postload_handler.py
from __future__ import annotations

import logging
from pathlib import Path

from campcheck.dataloader.types import LoadResult
from campcheck.errors import DataError
from campcheck.export.artifacts import write_json
from campcheck.schemas.models import ScheduleSnapshot

logger = logging.getLogger(__name__)


class LoadResultHandler:
    """
    @brief
    Handles the LoadResult after snapshot parsing and writes diagnostics if needed.

    @details
    Consistency issues never block validation: the snapshot is always passed
    downstream. When issues were recorded they are written to
    'load_issues.json' inside output_dir so they can be reviewed next to the
    validation report. A clean load removes the file left by a previous run.
    """

    FILENAME = "load_issues.json"

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    @property
    def issues_path(self) -> Path:
        return self.output_dir / self.FILENAME

    def handle(self, result: LoadResult) -> ScheduleSnapshot:
        """
        @brief
        Returns the snapshot, writing the issue report first when there is one.

        @details
        Any I/O failure while writing the issue report is logged and does
        not stop the run.
        """
        # (1) Clean load: nothing to report; drop a report left by an earlier run
        if result.success:
            try:
                self.issues_path.unlink(missing_ok=True)
            except OSError as e:
                logger.error("PostLoad: failed to remove stale issue report: %s", e)
            logger.info("PostLoad: snapshot ready (%d bunks).", result.num_bunks)
            return result.snapshot

        # (2) Issues present: persist them and continue
        out_path = self.issues_path
        try:
            write_json(result.issues, out_path, source="LoadResultHandler.handle")
            logger.warning(
                "PostLoad: %d snapshot issue(s) recorded. See %s", len(result.issues), out_path
            )
        except DataError as e:
            logger.error("PostLoad: failed to write issue report: %s", e)

        return result.snapshot
