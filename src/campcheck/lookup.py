# src/campcheck/lookup.py
"""
@brief
Case-normalizing name lookup shared by all validator components.

@details
Resource, activity and policy names arrive from hand-edited camp settings with
inconsistent casing and stray whitespace. Every comparison in the engine goes
through `normalize_name`, and every name-keyed table is a `CaseInsensitiveMap`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Generic, TypeVar

V = TypeVar("V")


def normalize_name(value: Any) -> str | None:
    """
    @brief
    Normalize a free-form name for comparison.

    @details
    Accepts plain strings or objects carrying a `name` (mapping key or
    attribute), as the settings UI stores some fields as objects.
    Returns the trimmed, lower-cased name, or None when nothing usable is present.
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = value.get("name")
    elif not isinstance(value, str):
        value = getattr(value, "name", value)
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


class CaseInsensitiveMap(Mapping[str, V], Generic[V]):
    """
    @brief
    Read-only mapping with exact-then-case-insensitive key resolution.

    @details
    Lookups try the exact key first, then the trimmed lower-cased form.
    Original keys are preserved for iteration so callers can still display
    names as the user typed them. When two keys normalize to the same name,
    case-insensitive lookups resolve to the first one.
    """

    def __init__(self, items: Mapping[str, V] | Iterable[tuple[str, V]] | None = None) -> None:
        self._exact: dict[str, V] = {}
        self._folded: dict[str, str] = {}
        if items is None:
            return
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            self._add(key, value)

    def _add(self, key: str, value: V) -> None:
        if key in self._exact:
            return
        folded = normalize_name(key)
        if folded is None:
            return
        self._exact[key] = value
        self._folded.setdefault(folded, key)

    def resolve_key(self, name: Any) -> str | None:
        """Return the stored key matching `name`, or None."""
        if isinstance(name, str) and name in self._exact:
            return name
        folded = normalize_name(name)
        if folded is None:
            return None
        return self._folded.get(folded)

    def __getitem__(self, name: str) -> V:
        key = self.resolve_key(name)
        if key is None:
            raise KeyError(name)
        return self._exact[key]

    def __contains__(self, name: object) -> bool:
        return self.resolve_key(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._exact)

    def __len__(self) -> int:
        return len(self._exact)

    def merged_with(self, items: Mapping[str, V] | Iterable[tuple[str, V]]) -> CaseInsensitiveMap[V]:
        """Return a new map with `items` added where their names are not present yet."""
        merged: CaseInsensitiveMap[V] = CaseInsensitiveMap(self._exact)
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            if key not in merged:
                merged._add(key, value)
        return merged
