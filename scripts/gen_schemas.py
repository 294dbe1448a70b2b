# scripts/gen_schemas.py
"""
Generate JSON Schemas for campcheck data models.

This script exports JSON Schema files for:
    - ScheduleSnapshot
    - Config
    - ValidationReport

Output directory: schemas/
"""

import json
from pathlib import Path

from campcheck.schemas.findings import ValidationReport
from campcheck.schemas.models import Config, ScheduleSnapshot


def export_schema(model_cls, name: str, out_dir: Path) -> Path:
    """
    @brief
    Exports the JSON schema of a given Pydantic model.

    @details
    Writes "<name>.schema.json" into out_dir (created if missing) with
    UTF-8 encoding and a final newline.

    @returns
        Path to the written schema file.
    """
    # (1) Ensure output directory exists
    out_dir.mkdir(parents=True, exist_ok=True)

    # (2) Compute target path and generate schema data
    schema_path = (out_dir / f"{name}.schema.json").resolve()
    schema = model_cls.model_json_schema()

    # (3) Serialize JSON Schema to file with indentation and final newline
    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    # (4) Print confirmation with relative path for user feedback
    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"✅  Generated {rel}")
    return schema_path


def main() -> None:
    """Write schemas for the snapshot, config and report models into schemas/."""
    out_dir = Path("schemas").resolve()

    export_schema(ScheduleSnapshot, "snapshot", out_dir)
    export_schema(Config, "config", out_dir)
    export_schema(ValidationReport, "validation_report", out_dir)


if __name__ == "__main__":
    main()
