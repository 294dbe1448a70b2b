from campcheck.export.artifacts import atomic_write_text, write_json
from campcheck.export.findings_export import FINDINGS_COLUMNS, write_findings_csv

__all__ = ["FINDINGS_COLUMNS", "atomic_write_text", "write_findings_csv", "write_json"]
