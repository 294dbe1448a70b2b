# src/campcheck/validator/policy.py
"""
@brief
Resource policy resolution.

@details
Camp settings describe resource sharing in three overlapping ways: a boolean
`sharable`, a nested `sharable_with` block {type, capacity, divisions} and a
flat `capacity`. This module is the only place that reads them; everything
downstream works with a single ResourceSharingPolicy.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from campcheck.lookup import CaseInsensitiveMap, normalize_name
from campcheck.schemas.models import (
    UNLIMITED_CAPACITY,
    ResourceProperties,
    ResourceSharingPolicy,
    ScheduleSnapshot,
    SharingType,
)

logger = logging.getLogger(__name__)

_DEFAULT_CAPACITY: dict[SharingType, int] = {
    SharingType.NOT_SHARABLE: 1,
    SharingType.SAME_DIVISION: 2,
    SharingType.CUSTOM: 1,
    SharingType.ALL: UNLIMITED_CAPACITY,
}

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_capacity(value: Any) -> int | None:
    """
    @brief
    Parse a loosely typed capacity value.

    @details
    Accepts integers, finite floats (truncated) and strings with a leading
    integer ("3", " 4 bunks"). Booleans, non-numeric text and values below 1
    are treated as absent so the caller falls back to the next source.

    @returns
        Positive integer capacity, or None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        parsed = int(value)
    elif isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if match is None:
            return None
        parsed = int(match.group(1))
    else:
        return None
    return parsed if parsed >= 1 else None


def _parse_sharing_type(raw: Any) -> SharingType | None:
    key = normalize_name(raw)
    if key is None:
        return None
    try:
        return SharingType(key)
    except ValueError:
        logger.debug("Unknown sharing type %r ignored", raw)
        return None


def _coerce_properties(raw: Any) -> ResourceProperties | None:
    if isinstance(raw, ResourceProperties):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return ResourceProperties.model_validate(raw)
    except PydanticValidationError as e:
        logger.debug("Unusable resource properties skipped: %s", e)
        return None


def build_policy(resource_name: str | None, props: ResourceProperties | None) -> ResourceSharingPolicy:
    """
    @brief
    Normalize raw resource properties into a sharing policy.

    @details
    Sharing type: nested `sharable_with.type`, else `sharable: true` means
    same_division, else not_sharable. Capacity precedence: nested capacity,
    then flat `capacity`, then the type default (1 not_sharable, 1 custom,
    2 same_division, unlimited for all).

    The flat capacity can lift a not_sharable resource above one occupant.
    That precedence is kept for compatibility with existing settings, but it
    is most likely a settings mistake, so it is logged.
    """
    if props is None:
        return ResourceSharingPolicy(sharing_type=SharingType.NOT_SHARABLE, max_capacity=1)

    nested = props.sharable_with
    sharing_type = _parse_sharing_type(nested.type if nested else None)
    if sharing_type is None:
        sharing_type = SharingType.SAME_DIVISION if props.sharable else SharingType.NOT_SHARABLE

    capacity = (
        parse_capacity(nested.capacity if nested else None)
        or parse_capacity(props.capacity)
        or _DEFAULT_CAPACITY[sharing_type]
    )

    if sharing_type == SharingType.NOT_SHARABLE and capacity > 1:
        logger.warning(
            "Resource %r is not sharable but its capacity setting allows %d bunks; "
            "check the resource settings",
            resource_name,
            capacity,
        )

    allowed = list(nested.divisions) if nested else []
    return ResourceSharingPolicy(
        sharing_type=sharing_type,
        max_capacity=capacity,
        allowed_divisions=allowed,
    )


class PolicyTable:
    """
    @brief
    Case-insensitive table of raw resource properties.

    @details
    Built once per validation pass from one or more configuration sources.
    `resolve()` is the Resource Policy Resolver: exact name first, then
    trimmed case-insensitive match, default not_sharable/1 when nothing matches.
    """

    def __init__(self, properties: Mapping[str, Any] | None = None) -> None:
        pairs: list[tuple[str, ResourceProperties]] = []
        for name, raw in (properties or {}).items():
            props = _coerce_properties(raw)
            if props is not None:
                pairs.append((str(name), props))
        self._table: CaseInsensitiveMap[ResourceProperties] = CaseInsensitiveMap(pairs)

    @classmethod
    def from_sources(
        cls,
        policies: Mapping[str, Any] | None = None,
        *named_sources: Iterable[Any],
    ) -> PolicyTable:
        """
        @brief
        Merge the keyed policy mapping with lists of named settings records.

        @details
        The first source that names a resource wins; later sources only fill
        gaps. Records in `named_sources` must carry a `name`; unnamed ones
        are skipped.
        """
        table = cls(policies)
        for source in named_sources:
            extra: list[tuple[str, ResourceProperties]] = []
            for raw in source or []:
                props = _coerce_properties(raw)
                if props is None or not props.name or not props.name.strip():
                    continue
                extra.append((props.name, props))
            table._table = table._table.merged_with(extra)
        return table

    @classmethod
    def from_snapshot(cls, snapshot: ScheduleSnapshot) -> PolicyTable:
        return cls.from_sources(
            snapshot.policies, snapshot.field_properties, snapshot.special_activities
        )

    def lookup(self, resource_name: Any) -> ResourceProperties | None:
        key = self._table.resolve_key(resource_name)
        return None if key is None else self._table[key]

    def resolve(self, resource_name: Any) -> ResourceSharingPolicy:
        label = resource_name if isinstance(resource_name, str) else normalize_name(resource_name)
        return build_policy(label, self.lookup(resource_name))

    def __contains__(self, resource_name: object) -> bool:
        return resource_name in self._table

    def __len__(self) -> int:
        return len(self._table)


def resolve_policy(resource_name: Any, policy_table: PolicyTable | Mapping[str, Any] | None) -> ResourceSharingPolicy:
    """
    @brief
    Resolve the sharing policy for one resource.

    @details
    Accepts either a prepared PolicyTable or a raw mapping of resource name
    to properties. Never raises: unknown resources and unusable settings
    resolve to not_sharable with capacity 1.
    """
    if policy_table is None:
        return build_policy(normalize_name(resource_name), None)
    if not isinstance(policy_table, PolicyTable):
        policy_table = PolicyTable(policy_table)
    return policy_table.resolve(resource_name)


__all__ = ["PolicyTable", "build_policy", "parse_capacity", "resolve_policy"]
