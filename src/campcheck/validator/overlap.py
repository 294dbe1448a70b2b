# src/campcheck/validator/overlap.py
from __future__ import annotations

from collections.abc import Sequence

from campcheck.validator.usage import Usage


class DisjointSet:
    """
    @brief
    Union-find forest over integer nodes 0..size-1.

    @details
    `find` uses path halving, so repeated lookups flatten the trees.
    """

    def __init__(self, size: int) -> None:
        self._parent = list(range(size))

    def find(self, x: int) -> int:
        parent = self._parent
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(self, a: int, b: int) -> bool:
        """Merge the sets of `a` and `b`; return False if already joined."""
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        self._parent[ra] = rb
        return True


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap test: touching windows ([9:00, 9:30) and [9:30, 10:00)) do not overlap."""
    return a_start < b_end and b_start < a_end


def group_overlapping(usages: Sequence[Usage]) -> list[list[Usage]]:
    """
    @brief
    Partition usages of one resource into maximal transitively-overlapping groups.

    @details
    Every pair of directly overlapping usages is unioned, so a chain
    A(0-30), B(20-50), C(45-70) lands in a single group although A and C
    never overlap. Pairwise comparison is quadratic in the usage count, which
    is bounded by the number of bunks using the resource in one day.

    @returns
        All groups, singletons included, ordered by their first member;
        members keep input order.
    """
    n = len(usages)
    forest = DisjointSet(n)

    # (1) Union every directly overlapping pair
    for i in range(n):
        for j in range(i + 1, n):
            if intervals_overlap(
                usages[i].start_min, usages[i].end_min, usages[j].start_min, usages[j].end_min
            ):
                forest.union(i, j)

    # (2) Collect members per root, in first-seen order
    groups: dict[int, list[Usage]] = {}
    for i, usage in enumerate(usages):
        groups.setdefault(forest.find(i), []).append(usage)
    return list(groups.values())


def conflict_groups(usages: Sequence[Usage]) -> list[list[Usage]]:
    """Overlap groups with at least two usages; singletons carry no conflict."""
    return [g for g in group_overlapping(usages) if len(g) >= 2]
