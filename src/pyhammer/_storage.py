"""Key/value storage substrate.

Everything pyhammer persists goes through :class:`KeyValueStore`: single-key
``get``/``put`` with last-writer-wins semantics and no compare-and-swap.
Concurrent read-modify-write cycles on the same key can therefore lose
updates; callers accept that (see :mod:`pyhammer.state.store`).
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from pyhammer.exceptions import HammerStorageError

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Structural store interface used by the state and lock layers.

    Having a protocol here makes it easy to pass test doubles while keeping
    the shipped backends concrete.
    """

    async def get(self, key: str) -> str | None:
        ...

    async def put(self, key: str, value: str, *, ttl: float | None = None) -> None:
        ...


class MemoryKeyValueStore:
    """In-process store; entries vanish with the process."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float | None]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def put(self, key: str, value: str, *, ttl: float | None = None) -> None:
        expires_at = self._clock() + ttl if ttl is not None else None
        self._entries[key] = (value, expires_at)

    def __len__(self) -> int:
        return len(self._entries)


def _file_name(key: str) -> str:
    encoded = base64.urlsafe_b64encode(key.encode("utf-8")).decode("ascii").rstrip("=")
    return f"{encoded}.json"


class FileKeyValueStore:
    """One JSON file per key under *root*.

    Writes go to a temp file that is atomically renamed over the target, so
    readers never observe a half-written entry. Blocking file I/O runs in a
    worker thread. TTLs are stored as wall-clock deadlines so they survive
    restarts.
    """

    def __init__(self, root: str | os.PathLike[str], *, clock: Callable[[], float] = time.time) -> None:
        self._root = Path(root)
        self._clock = clock

    def _path(self, key: str) -> Path:
        return self._root / _file_name(key)

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise HammerStorageError(f"Reading {key!r} failed: {exc}", key=key) from exc

        try:
            entry = json.loads(text)
        except json.JSONDecodeError as exc:
            raise HammerStorageError(f"Entry for {key!r} is not JSON", key=key) from exc
        if not isinstance(entry, dict) or not isinstance(entry.get("value"), str):
            raise HammerStorageError(f"Entry for {key!r} is malformed", key=key)

        expires_at = entry.get("expiresAt")
        if isinstance(expires_at, (int, float)) and self._clock() >= expires_at:
            return None
        return entry["value"]

    def _write(self, key: str, value: str, ttl: float | None) -> None:
        entry = {
            "value": value,
            "expiresAt": self._clock() + ttl if ttl is not None else None,
        }
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=".tmp-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(entry, handle, ensure_ascii=False, separators=(",", ":"))
                os.replace(tmp_name, self._path(key))
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise HammerStorageError(f"Writing {key!r} failed: {exc}", key=key) from exc

    async def get(self, key: str) -> str | None:
        _logger.debug("GET %s", key.partition(":")[0])
        return await asyncio.to_thread(self._read, key)

    async def put(self, key: str, value: str, *, ttl: float | None = None) -> None:
        _logger.debug("PUT %s (%d bytes)", key.partition(":")[0], len(value))
        await asyncio.to_thread(self._write, key, value, ttl)
