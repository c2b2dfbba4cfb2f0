"""Vote lock store: one durable flag per (lot, fingerprint).

Presence of the flag means the fingerprint already voted on the lot.
``has_voted`` followed by ``mark_voted`` is a check-then-act sequence over
independent store calls, so two concurrent requests from the same
fingerprint may both pass the check. The guard is best effort; a store
with conditional puts would be required to make it strict.
"""

from __future__ import annotations

import logging

from pyhammer._constants import lock_key
from pyhammer._storage import KeyValueStore

_logger = logging.getLogger(__name__)

_LOCK_VALUE = "1"


class VoteLockStore:
    """Fingerprint-keyed vote flags.

    Parameters
    ----------
    kv : KeyValueStore
        Backing store.
    ttl : float, optional
        Seconds after which a flag expires, letting the visitor vote again.
        ``None`` keeps flags forever.
    """

    def __init__(self, kv: KeyValueStore, *, ttl: float | None = None) -> None:
        self._kv = kv
        self._ttl = ttl

    async def has_voted(self, lot: str, fingerprint: str) -> bool:
        return await self._kv.get(lock_key(lot, fingerprint)) is not None

    async def mark_voted(self, lot: str, fingerprint: str) -> None:
        await self._kv.put(lock_key(lot, fingerprint), _LOCK_VALUE, ttl=self._ttl)
        _logger.debug("Vote lock set on %s", lot)
