# src/campcheck/validator/division_index.py
from __future__ import annotations

import logging
from collections.abc import Mapping

from campcheck.schemas.models import Division

logger = logging.getLogger(__name__)


def build_bunk_division_index(divisions: Mapping[str, Division]) -> dict[str, str]:
    """
    @brief
    Build the reverse lookup bunk → owning division.

    @details
    Bunks not listed in any division are absent from the result; downstream
    checks treat their entries as unattributable and skip them.
    A bunk listed under two divisions breaks the roster invariant: the later
    division wins and a warning is logged.

    @params
        divisions : Mapping[str, Division]
            Division roster keyed by division name.

    @returns
        Dictionary mapping bunk identifier to division name.
    """
    index: dict[str, str] = {}
    for div_name, division in divisions.items():
        for bunk in division.bunks:
            key = str(bunk)
            previous = index.get(key)
            if previous is not None and previous != div_name:
                logger.warning(
                    "Bunk %s is listed in divisions %s and %s; attributing it to %s",
                    key,
                    previous,
                    div_name,
                    div_name,
                )
            index[key] = div_name
    return index
