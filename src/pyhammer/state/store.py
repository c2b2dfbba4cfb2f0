"""Persistence protocol for the shared state document.

The document lives under one well-known key of a
:class:`~pyhammer._storage.KeyValueStore`. Every request loads a fresh copy,
transforms it and writes it back; nothing is cached in process.

Read-modify-write is **not atomic**. The store offers plain get/put without
compare-and-swap, so two requests that load the same version will each
write back a document missing the other's update, and the later write
wins. The aggregates are approximate sentiment signals, so this lost-update
race is accepted rather than guarded against. A backend with conditional
writes or atomic counters would be needed to close it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pydantic import ValidationError

from pyhammer._constants import STATE_KEY
from pyhammer._storage import KeyValueStore
from pyhammer.exceptions import HammerStorageError
from pyhammer.models.state import StateDocument

_logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class StateDocumentStore:
    """Load and save the single :class:`StateDocument`."""

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        key: str = STATE_KEY,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._kv = kv
        self._key = key
        self._clock = clock

    async def load(self) -> StateDocument:
        """Return the stored document, or the canonical empty one."""
        raw = await self._kv.get(self._key)
        if raw is None:
            return StateDocument.empty()
        try:
            return StateDocument.model_validate_json(raw)
        except ValidationError as exc:
            raise HammerStorageError(f"Stored document under {self._key!r} is invalid", key=self._key) from exc

    async def save(self, doc: StateDocument) -> StateDocument:
        """Stamp ``updated_at`` and write *doc*; returns the stamped document."""
        stamped = doc.model_copy(update={"updated_at": self._clock()})
        await self._kv.put(self._key, stamped.model_dump_json(by_alias=True))
        _logger.debug("Saved state document %r (updatedAt=%d)", self._key, stamped.updated_at)
        return stamped

    async def mutate(self, transform: Callable[[StateDocument], StateDocument]) -> StateDocument:
        """Load, apply *transform*, save. Subject to the lost-update race above."""
        doc = await self.load()
        return await self.save(transform(doc))
