"""
@brief
Pydantic data models for the campcheck schedule validator.

@details
Defines the canonical input and configuration types:
    - TimeSlot, Division, ScheduleEntry, LeagueSlot: one day's schedule snapshot
    - ResourceProperties / SharableWith: raw, loosely typed sharing settings
    - ResourceSharingPolicy: the normalized sharing rule for one resource
    - ScheduleSnapshot: everything the validator reads for a single pass
    - Config: runtime configuration (from config.yaml)

Input models accept the legacy key spellings written by the scheduling UI
(`_activity`, `field`, `continuation`, `sharableWith`, ...) and ignore
unknown keys. Config is strict: unknown keys are rejected.

Below the top-level sections a snapshot never fails validation: an unusable
slot time becomes None, a cell that is not an object becomes an empty cell,
and malformed policy or league rows are dropped. Each drop is logged at
DEBUG and, when the caller passes `context={"dropped": []}`, recorded there.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

UNLIMITED_CAPACITY = 999

DEFAULT_IGNORED_RESOURCES: tuple[str, ...] = (
    "free",
    "no field",
    "no game",
    "unassigned league",
    "lunch",
    "snacks",
    "dismissal",
    "regroup",
    "free play",
    "mincha",
    "davening",
    "lineup",
    "bus",
    "swim",
    "pool",
    "canteen",
    "gameroom",
    "game room",
    "transition",
    "buffer",
)

DEFAULT_IGNORED_ACTIVITIES: tuple[str, ...] = (
    "free",
    "lunch",
    "snacks",
    "dismissal",
    "regroup",
    "free play",
    "mincha",
    "davening",
    "lineup",
    "bus",
    "transition",
    "buffer",
    "canteen",
    "gameroom",
    "game room",
    "swim",
    "pool",
)

DEFAULT_REQUIRED_ACTIVITIES: tuple[str, ...] = ("lunch",)


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration contracts.

    @details
    Forbids unknown fields and preserves exact naming rules.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Export raw enum values
    }


class _LenientBaseModel(BaseModel):
    """
    @brief
    Base model for snapshot data produced by the scheduling UI.

    @details
    Schedule cells and settings records carry many presentation-only keys;
    those are ignored rather than rejected.
    """

    model_config = {
        "extra": "ignore",
        "populate_by_name": True,
        "use_enum_values": True,
    }


def _name_or_none(value: Any) -> str | None:
    # Fields are sometimes stored as {"name": ...} objects
    if isinstance(value, Mapping):
        value = value.get("name")
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _as_int(value: Any) -> int | None:
    """Whole number from int, integral float or digit string; None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_flag(value: Any) -> bool | None:
    """
    @brief
    Strict boolean reading of a UI flag.

    @details
    Only real booleans and the strings "true"/"false" (any case) count.
    Anything else, including 1 and "yes", is unrecognized and returns None.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
    return None


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _record_drop(info: ValidationInfo | None, kind: str, message: str, **where: Any) -> None:
    logger.debug("Snapshot input dropped (%s): %s", kind, message)
    context = info.context if info is not None else None
    if isinstance(context, dict) and isinstance(context.get("dropped"), list):
        context["dropped"].append({"kind": kind, "message": message, **where})


# ------------------------------------------------------------
# Time grid and roster
# ------------------------------------------------------------
class TimeSlot(_LenientBaseModel):
    """
    @brief
    One time window of a division's day.

    @details
    Times are minutes since midnight. A slot missing either bound is
    unresolved; usages on it cannot be placed on the clock and are skipped.
    """

    slot_index: int | None = Field(
        None, validation_alias=AliasChoices("slot_index", "slotIndex", "index")
    )
    start_min: int | None = Field(
        None,
        validation_alias=AliasChoices("start_min", "startMin"),
        description="Start, minutes since midnight",
    )
    end_min: int | None = Field(
        None,
        validation_alias=AliasChoices("end_min", "endMin"),
        description="End, minutes since midnight",
    )

    @field_validator("slot_index", "start_min", "end_min", mode="before")
    @classmethod
    def _coerce_minutes(cls, value: Any) -> int | None:
        minutes = _as_int(value)
        if minutes is None and value is not None:
            logger.debug("Unusable slot time %r treated as unresolved", value)
        return minutes

    @property
    def is_resolved(self) -> bool:
        return self.start_min is not None and self.end_min is not None


class Division(_LenientBaseModel):
    """A named group of bunks sharing an operating window."""

    bunks: list[str] = Field(default_factory=list, description="Ordered bunk identifiers")
    start_min: int | None = Field(None, validation_alias=AliasChoices("start_min", "startMin"))
    end_min: int | None = Field(None, validation_alias=AliasChoices("end_min", "endMin"))

    @field_validator("bunks", mode="before")
    @classmethod
    def _coerce_bunk_ids(cls, value: Any) -> list[str]:
        return [str(b) for b in _as_list(value) if b is not None]

    @field_validator("start_min", "end_min", mode="before")
    @classmethod
    def _coerce_minutes(cls, value: Any) -> int | None:
        return _as_int(value)


# ------------------------------------------------------------
# Schedule cells
# ------------------------------------------------------------
_ENTRY_LEGACY_KEYS: dict[str, tuple[str, ...]] = {
    "resource_name": ("resourceName", "field"),
    "activity_name": ("activityName", "_activity"),
    "is_transition": ("isTransition", "_isTransition"),
    "is_continuation": ("isContinuation", "continuation"),
    "matchups": ("_allMatchups",),
}

_LEAGUE_FLAG_KEYS: tuple[str, ...] = ("is_league_match", "isLeagueMatch", "_isLeague", "_leagueGame")


class ScheduleEntry(_LenientBaseModel):
    """
    @brief
    Assignment of one bunk at one time slot.

    @details
    `resource_name` is the physical place (field, court, room); `activity_name`
    is what the bunk does there and may differ from it. League, transition and
    continuation entries have their own semantics and are excluded from
    conflict analysis.
    """

    resource_name: str | None = None
    activity_name: str | None = None
    sport: str | None = None
    is_league_match: bool = False
    matchups: list[Any] = Field(default_factory=list)
    is_transition: bool = False
    is_continuation: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize_legacy_keys(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data

        out = dict(data)
        for canonical, legacy in _ENTRY_LEGACY_KEYS.items():
            if out.get(canonical) is not None:
                continue
            for key in legacy:
                if out.get(key) is not None:
                    out[canonical] = out[key]
                    break

        # Several legacy flags all mean "this cell is a league game"
        out["is_league_match"] = any(_as_flag(out.get(k)) is True for k in _LEAGUE_FLAG_KEYS)
        return out

    @field_validator("resource_name", "activity_name", "sport", mode="before")
    @classmethod
    def _coerce_names(cls, value: Any) -> str | None:
        return _name_or_none(value)

    @field_validator("is_transition", "is_continuation", mode="before")
    @classmethod
    def _coerce_flags(cls, value: Any) -> bool:
        return _as_flag(value) is True

    @field_validator("matchups", mode="before")
    @classmethod
    def _coerce_matchups(cls, value: Any) -> list[Any]:
        return _as_list(value)

    @property
    def is_league(self) -> bool:
        if self.is_league_match or self.matchups:
            return True
        return bool(self.resource_name and " vs " in self.resource_name)

    @property
    def is_transition_buffer(self) -> bool:
        if self.is_transition or self.resource_name == "Transition":
            return True
        return (self.activity_name or "").strip().lower() == "transition"

    @property
    def has_content(self) -> bool:
        return bool(self.activity_name or self.resource_name or self.sport)

    @property
    def label(self) -> str | None:
        return self.activity_name or self.sport or self.resource_name


class LeagueSlot(_LenientBaseModel):
    """League games recorded for a whole division at one slot."""

    matchups: list[Any] = Field(default_factory=list)

    @field_validator("matchups", mode="before")
    @classmethod
    def _coerce_matchups(cls, value: Any) -> list[Any]:
        return _as_list(value)

    @property
    def has_matchups(self) -> bool:
        return len(self.matchups) > 0


# ------------------------------------------------------------
# Resource sharing settings
# ------------------------------------------------------------
class SharingType(str, Enum):
    NOT_SHARABLE = "not_sharable"
    SAME_DIVISION = "same_division"
    CUSTOM = "custom"
    ALL = "all"


class SharableWith(_LenientBaseModel):
    """Nested sharing block as stored in the field settings."""

    type: str | None = None
    capacity: Any = None
    divisions: list[str] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("divisions", mode="before")
    @classmethod
    def _coerce_divisions(cls, value: Any) -> list[str]:
        return [str(d) for d in _as_list(value) if d is not None]


class ResourceProperties(_LenientBaseModel):
    """
    @brief
    Raw sharing settings for one resource.

    @details
    Three generations of settings coexist: a boolean `sharable`, a nested
    `sharable_with` block, and a flat `capacity`. They are normalized once by
    the policy resolver; nothing downstream reads this model directly.
    """

    name: str | None = None
    sharable: bool | None = None
    sharable_with: SharableWith | None = Field(
        None, validation_alias=AliasChoices("sharable_with", "sharableWith")
    )
    capacity: Any = None

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str | None:
        return _name_or_none(value)

    @field_validator("sharable", mode="before")
    @classmethod
    def _coerce_sharable(cls, value: Any) -> bool | None:
        return _as_flag(value)

    @field_validator("sharable_with", mode="before")
    @classmethod
    def _drop_non_mapping(cls, value: Any) -> Any:
        return value if isinstance(value, (Mapping, SharableWith)) else None


class ResourceSharingPolicy(_StrictBaseModel):
    """
    @brief
    Normalized sharing rule for one resource.

    @details
    `allowed_divisions` is only meaningful for `custom`. A capacity of
    UNLIMITED_CAPACITY or more means no numeric limit.
    """

    sharing_type: SharingType = SharingType.NOT_SHARABLE
    max_capacity: int = Field(1, ge=1)
    allowed_divisions: list[str] = Field(default_factory=list)

    @property
    def is_unlimited(self) -> bool:
        return self.max_capacity >= UNLIMITED_CAPACITY


# ------------------------------------------------------------
# Snapshot
# ------------------------------------------------------------
class ScheduleSnapshot(_LenientBaseModel):
    """
    @brief
    One day of camp schedule plus the settings needed to judge it.

    @details
    `schedule` maps bunk → ordered slot entries (None for an empty cell);
    a bunk mapped to None, or missing, has no schedule data.
    `time_grid` maps division → its own slot times, since divisions may run
    offset hours against the same slot indices.
    Policies may come from three sources (`policies`, `fields`,
    `special_activities`); the first source naming a resource wins.
    """

    schedule: dict[str, list[ScheduleEntry | None] | None] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("schedule", "scheduleAssignments", "assignments"),
    )
    divisions: dict[str, Division] = Field(default_factory=dict)
    time_grid: dict[str, list[TimeSlot]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("time_grid", "timeGrid", "divisionTimes"),
    )
    policies: dict[str, ResourceProperties] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("policies", "activityProperties"),
    )
    field_properties: list[ResourceProperties] = Field(
        default_factory=list,
        validation_alias=AliasChoices("field_properties", "fields"),
    )
    special_activities: list[ResourceProperties] = Field(
        default_factory=list,
        validation_alias=AliasChoices("special_activities", "specialActivities"),
    )
    league_assignments: dict[str, dict[int, LeagueSlot]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("league_assignments", "leagueAssignments"),
    )

    # Sections keep their declared type; bad rows inside one are dropped singly
    @field_validator("schedule", mode="before")
    @classmethod
    def _clean_schedule(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, Mapping):
            return value

        out: dict[str, Any] = {}
        for bunk, cells in value.items():
            bunk = str(bunk)
            if cells is None:
                out[bunk] = None
                continue
            if not isinstance(cells, (list, tuple)):
                _record_drop(
                    info,
                    "malformed_bunk_schedule",
                    f"Schedule for bunk {bunk} is not a list of slots; treated as missing",
                    bunk=bunk,
                )
                out[bunk] = None
                continue

            clean: list[Any] = []
            for idx, item in enumerate(cells):
                if item is None or isinstance(item, (Mapping, ScheduleEntry)):
                    clean.append(item)
                    continue
                _record_drop(
                    info,
                    "malformed_cell",
                    f"Bunk {bunk} slot {idx} is not an object; treated as empty",
                    bunk=bunk,
                    slot_index=idx,
                )
                clean.append(None)
            out[bunk] = clean
        return out

    @field_validator("divisions", mode="before")
    @classmethod
    def _clean_divisions(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, Mapping):
            return value

        out: dict[str, Any] = {}
        for name, division in value.items():
            if isinstance(division, (Mapping, Division)):
                out[str(name)] = division
                continue
            _record_drop(
                info,
                "malformed_division",
                f"Division {name} is not an object; dropped",
                division=str(name),
            )
        return out

    @field_validator("time_grid", mode="before")
    @classmethod
    def _clean_time_grid(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, Mapping):
            return value

        out: dict[str, list[Any]] = {}
        for name, slots in value.items():
            div_name = str(name)
            if not isinstance(slots, (list, tuple)):
                _record_drop(
                    info,
                    "malformed_time_grid",
                    f"Time grid for division {div_name} is not a list of slots; dropped",
                    division=div_name,
                )
                continue

            clean: list[Any] = []
            for idx, slot in enumerate(slots):
                if isinstance(slot, TimeSlot):
                    clean.append(slot)
                elif isinstance(slot, Mapping):
                    clean.append(_clean_slot_times(slot, div_name, idx, info))
                else:
                    # Keep the position so later slot indices stay aligned
                    _record_drop(
                        info,
                        "malformed_slot",
                        f"Division {div_name} slot {idx} is not an object; treated as unresolved",
                        division=div_name,
                        slot_index=idx,
                    )
                    clean.append({})
            out[div_name] = clean
        return out

    @field_validator("policies", mode="before")
    @classmethod
    def _clean_policies(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, Mapping):
            return value

        out: dict[str, Any] = {}
        for name, props in value.items():
            if isinstance(props, (Mapping, ResourceProperties)):
                out[str(name)] = props
                continue
            _record_drop(
                info,
                "malformed_policy",
                f"Sharing settings for {name} are not an object; dropped",
                resource=str(name),
            )
        return out

    @field_validator("field_properties", "special_activities", mode="before")
    @classmethod
    def _clean_property_records(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, (list, tuple)):
            return value

        out: list[Any] = []
        for idx, props in enumerate(value):
            if isinstance(props, (Mapping, ResourceProperties)):
                out.append(props)
                continue
            _record_drop(
                info,
                "malformed_policy",
                f"{info.field_name} record {idx} is not an object; dropped",
            )
        return out

    @field_validator("league_assignments", mode="before")
    @classmethod
    def _clean_league_assignments(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, Mapping):
            return value

        out: dict[str, dict[int, Any]] = {}
        for name, slots in value.items():
            div_name = str(name)
            if not isinstance(slots, Mapping):
                _record_drop(
                    info,
                    "malformed_league_slot",
                    f"League assignments for division {div_name} are not an object; dropped",
                    division=div_name,
                )
                continue

            clean: dict[int, Any] = {}
            for key, slot in slots.items():
                idx = _as_int(key)
                if idx is None or not isinstance(slot, (Mapping, LeagueSlot)):
                    _record_drop(
                        info,
                        "malformed_league_slot",
                        f"League slot {key!r} of division {div_name} is unusable; dropped",
                        division=div_name,
                    )
                    continue
                clean[idx] = slot
            out[div_name] = clean
        return out


_SLOT_TIME_KEYS: dict[str, tuple[str, ...]] = {
    "start_min": ("start_min", "startMin"),
    "end_min": ("end_min", "endMin"),
}


def _clean_slot_times(
    slot: Mapping[str, Any], division: str, idx: int, info: ValidationInfo
) -> dict[str, Any]:
    out = dict(slot)
    for keys in _SLOT_TIME_KEYS.values():
        for key in keys:
            raw = out.get(key)
            if raw is None or _as_int(raw) is not None:
                continue
            _record_drop(
                info,
                "unresolved_slot_time",
                f"Division {division} slot {idx} has unusable {key} {raw!r}; slot left unresolved",
                division=division,
                slot_index=idx,
            )
            out[key] = None
    return out


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class ValidationConfig(BaseModel):
    """
    @brief
    Controls behavior of the report step.

    @details
    Determines whether to write the report and findings CSV, and whether
    warnings should mark the schedule invalid.
    """

    write_report: bool = True
    fail_on_warnings: bool = False
    export_findings: bool = True


class MetricsConfig(BaseModel):
    """Flags for saving metrics.json."""

    save_metrics: bool = True


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.

    @details
    Holds the rule lists the checks consult plus output policy. Defaults
    reproduce the camp's standard lists, so `Config()` is usable as is.
    """

    ignored_resources: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_RESOURCES),
        description="Resource names excluded from conflict and reuse analysis (exact match)",
    )
    ignored_activities: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_ACTIVITIES),
        description="Activity keywords excluded from repetition checks (substring match)",
    )
    required_activities: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REQUIRED_ACTIVITIES),
        description="Keywords every scheduled bunk should have somewhere in its day",
    )
    time_format: Literal["12h", "24h"] = Field("12h", description="Clock style for messages")

    output_dir: str | None = "data/output"
    validation: ValidationConfig = Field(default_factory=ValidationConfig.model_construct)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig.model_construct)


__all__ = [
    "UNLIMITED_CAPACITY",
    "Config",
    "Division",
    "LeagueSlot",
    "ResourceProperties",
    "ResourceSharingPolicy",
    "ScheduleEntry",
    "ScheduleSnapshot",
    "SharableWith",
    "SharingType",
    "TimeSlot",
]
