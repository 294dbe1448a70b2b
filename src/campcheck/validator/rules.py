# src/campcheck/validator/rules.py
from __future__ import annotations

from dataclasses import dataclass

from campcheck.lookup import normalize_name
from campcheck.schemas.models import Config
from campcheck.timefmt import TimeFormat


@dataclass(frozen=True)
class RuleSet:
    """
    Rule lists from Config, normalized once per validation pass.

    Fields:
        ignored_resources: normalized resource names dropped at collection time (exact match).
        ignored_activities: normalized keywords; an activity containing any of them is not
                            checked for repetition.
        required_activities: keywords as configured (display form); matched case-insensitively.
        time_format: clock style used in finding messages.
    """

    ignored_resources: frozenset[str]
    ignored_activities: tuple[str, ...]
    required_activities: tuple[str, ...]
    time_format: TimeFormat = "12h"

    @classmethod
    def from_config(cls, cfg: Config) -> RuleSet:
        ignored_resources = frozenset(
            n for n in (normalize_name(r) for r in cfg.ignored_resources) if n
        )
        ignored_activities = tuple(
            n for n in (normalize_name(a) for a in cfg.ignored_activities) if n
        )
        required = tuple(r.strip() for r in cfg.required_activities if r and r.strip())
        return cls(
            ignored_resources=ignored_resources,
            ignored_activities=ignored_activities,
            required_activities=required,
            time_format=cfg.time_format,
        )

    def is_ignored_resource(self, name: str | None) -> bool:
        key = normalize_name(name)
        return key is None or key in self.ignored_resources

    def is_ignored_activity(self, name: str | None) -> bool:
        key = normalize_name(name)
        if key is None:
            return True
        return any(keyword in key for keyword in self.ignored_activities)
