"""Deterministic derivation and capacity policy.

No I/O and no document knowledge beyond plain numbers and sequences.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

_T = TypeVar("_T")


def settle_probability(unsold: int, priced: int) -> float:
    """Percentage of votes (0-100) saying the lot did *not* go unsold.

    Returns ``0`` when no votes have been cast.
    """
    total = unsold + priced
    if not total:
        return 0.0
    return 100 - (unsold / total) * 100


def keep_last(items: Sequence[_T], capacity: int) -> list[_T]:
    """Return the newest *capacity* items, evicting the oldest first."""
    if len(items) <= capacity:
        return list(items)
    return list(items[-capacity:])
