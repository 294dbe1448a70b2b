# src/campcheck/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from campcheck.errors import ConfigError
from campcheck.lookup import normalize_name
from campcheck.schemas.models import Config

# Rule lists whose keywords the checks compare against normalized names
RULE_LISTS: tuple[str, ...] = ("ignored_resources", "ignored_activities", "required_activities")


class ConfigLoader:
    """
    @brief
    Reads config.yaml into a Config the checks can rely on.

    @details
    Beyond schema validation the rule lists are checked as keyword sets:
    a blank keyword would match every activity through the substring rule,
    and a keyword repeated with different casing is almost always a copy
    and paste slip. Both are rejected with a ConfigError naming the list.
    """

    def load(self, path: Path) -> Config:
        """
        @brief
        Load, validate and sanity-check the camp's rule configuration.

        @raises
            ConfigError
                File problems, YAML errors, schema failures, or unusable
                keywords in one of the rule lists.
        """
        # (1) File and YAML
        data = self._read_yaml(path)

        # (2) Schema
        cfg = self._validate(data)

        # (3) Keyword lists
        self._check_rule_lists(cfg)
        return cfg

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        source = "ConfigLoader._read_yaml"

        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Config path type: expected pathlib.Path, got {type(path).__name__}",
                source=source,
                suggested_action="Pass Path('config/config.yaml') or similar.",
            )
        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source=source,
                suggested_action="Create config.yaml (see config/config.yaml) or fix --config.",
            )
        if path.suffix.lower() not in {".yaml", ".yml"}:
            raise ConfigError(
                message=f"Config file extension '{path.suffix}' is not .yaml or .yml",
                source=source,
                suggested_action="Rename the file with a .yaml extension.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source=source,
                suggested_action="Fix the YAML syntax; rule lists are plain '- keyword' items.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source=source,
                suggested_action="Check file permissions.",
            ) from e

        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source=source,
                suggested_action="Populate config.yaml or omit --config to use defaults.",
            )
        if not isinstance(data, Mapping):
            raise ConfigError(
                message=f"Configuration root must be a mapping, got {type(data).__name__}",
                source=source,
                suggested_action="Start config.yaml with keys such as 'ignored_resources:'.",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any]) -> Config:
        try:
            return Config.model_validate(data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names and types in config.yaml. "
                    "Remove unknown keys (extra fields are forbidden)."
                ),
            ) from e

    def _check_rule_lists(self, cfg: Config) -> None:
        """Reject blank or case-insensitively repeated keywords, per list."""
        for list_name in RULE_LISTS:
            seen: dict[str, str] = {}
            for keyword in getattr(cfg, list_name):
                key = normalize_name(keyword)
                if not key:
                    raise ConfigError(
                        message=f"{list_name} contains a blank keyword",
                        source="ConfigLoader._check_rule_lists",
                        suggested_action=f"Remove the empty entry from {list_name}.",
                    )
                if key in seen:
                    raise ConfigError(
                        message=(
                            f"{list_name} lists '{keyword}' more than once "
                            f"(already present as '{seen[key]}')"
                        ),
                        source="ConfigLoader._check_rule_lists",
                        suggested_action=f"Keep one spelling of '{keyword}' in {list_name}.",
                    )
                seen[key] = keyword


__all__ = ["ConfigLoader", "RULE_LISTS"]
