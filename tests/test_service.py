"""End-to-end tests of the vote/comment/read operations against fake stores."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from pyhammer._storage import MemoryKeyValueStore
from pyhammer.config import HammerConfig
from pyhammer.exceptions import HammerAlreadyVotedError, HammerStorageError, HammerValidationError
from pyhammer.models.identity import Identity
from pyhammer.models.requests import CommentRequest, VoteKind, VoteRequest
from pyhammer.service import HammerService

_ADMIN = "auctioneer"


@dataclass
class FlakyKeyValueStore:
    """Memory store that can fail reads or writes for selected key prefixes."""

    inner: MemoryKeyValueStore = field(default_factory=MemoryKeyValueStore)
    fail_get_prefixes: set[str] = field(default_factory=set)
    fail_put_prefixes: set[str] = field(default_factory=set)
    puts: list[str] = field(default_factory=list)

    async def get(self, key: str) -> str | None:
        if any(key.startswith(prefix) for prefix in self.fail_get_prefixes):
            raise HammerStorageError("read failed", key=key)
        return await self.inner.get(key)

    async def put(self, key: str, value: str, *, ttl: float | None = None) -> None:
        if any(key.startswith(prefix) for prefix in self.fail_put_prefixes):
            raise HammerStorageError("write failed", key=key)
        self.puts.append(key)
        await self.inner.put(key, value, ttl=ttl)


class _YieldingKeyValueStore(MemoryKeyValueStore):
    """Memory store that hands control back to the event loop on every call."""

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(0)
        return await super().get(key)

    async def put(self, key: str, value: str, *, ttl: float | None = None) -> None:
        await asyncio.sleep(0)
        await super().put(key, value, ttl=ttl)


class _Clock:
    def __init__(self) -> None:
        self.now = 1_700_000_000_000

    def __call__(self) -> int:
        self.now += 1000
        return self.now


def _service(kv: object | None = None) -> HammerService:
    return HammerService(
        kv if kv is not None else MemoryKeyValueStore(),  # type: ignore[arg-type]
        HammerConfig(privileged_name=_ADMIN),
        clock=_Clock(),
    )


def _identity(fingerprint: str = "fp-1") -> Identity:
    return Identity(token="tok", fingerprint=fingerprint)


def _unsold(lot: str = "lot1", name: str = "bidder") -> VoteRequest:
    return VoteRequest.model_validate({"lot": lot, "type": "UNSOLD", "name": name})


def _priced(price: float, lot: str = "lot1", name: str = "bidder") -> VoteRequest:
    return VoteRequest.model_validate({"lot": lot, "type": "PRICE", "price": price, "name": name})


@pytest.mark.asyncio
async def test_read_state_from_empty_store() -> None:
    state = await _service().read_state()
    assert state.updated_at == 0
    assert state.lots["lot1"].series == []


@pytest.mark.asyncio
async def test_unsold_then_price_series() -> None:
    service = _service()

    await service.cast_vote(_unsold(), _identity("fp-a"))
    state = await service.cast_vote(_priced(1000), _identity("fp-b"))

    lot = state.lots["lot1"]
    assert lot.unsold == 1
    assert lot.prices == [1000]
    assert [point.v for point in lot.series] == [0, 50]
    assert lot.series[0].ts < lot.series[1].ts
    assert state.updated_at > 0
    assert await service.read_state() == state


@pytest.mark.asyncio
async def test_second_vote_same_fingerprint_rejected() -> None:
    service = _service()
    await service.cast_vote(_unsold(), _identity())

    with pytest.raises(HammerAlreadyVotedError) as exc_info:
        await service.cast_vote(_priced(10), _identity())

    assert exc_info.value.code == "ALREADY_VOTED"
    assert exc_info.value.status == 409
    state = await service.read_state()
    assert state.lots["lot1"].prices == []


@pytest.mark.asyncio
async def test_same_fingerprint_may_vote_on_other_lot() -> None:
    service = _service()
    await service.cast_vote(_unsold("lot1"), _identity())

    state = await service.cast_vote(_unsold("lot2"), _identity())

    assert state.lots["lot2"].unsold == 1


@pytest.mark.asyncio
async def test_privileged_name_votes_without_limit() -> None:
    kv = FlakyKeyValueStore()
    service = _service(kv)

    for _ in range(3):
        await service.cast_vote(_unsold(name=_ADMIN), _identity())
    state = await service.cast_vote(_priced(5, lot="lot2", name=_ADMIN), _identity())

    assert state.lots["lot1"].unsold == 3
    assert state.lots["lot2"].prices == [5]
    assert not any(key.startswith("lock:") for key in kv.puts)


@pytest.mark.asyncio
async def test_privileged_votes_do_not_consume_the_fingerprints_lock() -> None:
    service = _service()
    await service.cast_vote(_unsold(name=_ADMIN), _identity())

    state = await service.cast_vote(_unsold(name="bidder"), _identity())

    assert state.lots["lot1"].unsold == 2


@pytest.mark.asyncio
async def test_privileged_match_is_exact() -> None:
    service = _service()
    await service.cast_vote(_unsold(name=_ADMIN + "x"), _identity())

    with pytest.raises(HammerAlreadyVotedError):
        await service.cast_vote(_unsold(name=_ADMIN + "x"), _identity())


@pytest.mark.asyncio
async def test_document_read_failure_propagates_without_lock() -> None:
    kv = FlakyKeyValueStore(fail_get_prefixes={"state"})
    service = _service(kv)

    with pytest.raises(HammerStorageError):
        await service.cast_vote(_unsold(), _identity())

    assert kv.puts == []


@pytest.mark.asyncio
async def test_document_write_failure_propagates_without_lock() -> None:
    kv = FlakyKeyValueStore(fail_put_prefixes={"state"})
    service = _service(kv)

    with pytest.raises(HammerStorageError):
        await service.cast_vote(_unsold(), _identity())

    assert not await service.locks.has_voted("lot1", "fp-1")


@pytest.mark.asyncio
async def test_lock_write_failure_keeps_vote(caplog: pytest.LogCaptureFixture) -> None:
    kv = FlakyKeyValueStore(fail_put_prefixes={"lock:"})
    service = _service(kv)

    state = await service.cast_vote(_unsold(), _identity())

    assert state.lots["lot1"].unsold == 1
    assert "vote lock could not be written" in caplog.text
    # Under-lock: the same fingerprint gets another vote.
    state = await service.cast_vote(_unsold(), _identity())
    assert state.lots["lot1"].unsold == 2


@pytest.mark.asyncio
async def test_post_comment() -> None:
    ids = iter(["aaaaaaaaaaaa", "bbbbbbbbbbbb"])
    service = HammerService(MemoryKeyValueStore(), clock=_Clock(), id_factory=lambda: next(ids))

    await service.post_comment(CommentRequest.model_validate({"lot": "all", "name": "a", "text": "first!"}))
    state = await service.post_comment(CommentRequest.model_validate({"lot": "lot2", "name": "b", "text": "second"}))

    assert [(c.id, c.lot, c.name, c.text) for c in state.comments] == [
        ("aaaaaaaaaaaa", "all", "a", "first!"),
        ("bbbbbbbbbbbb", "lot2", "b", "second"),
    ]
    assert state.comments[0].ts < state.comments[1].ts


def test_parse_uses_configured_moderation() -> None:
    service = HammerService(MemoryKeyValueStore(), HammerConfig(profanity_terms=("bother",), restricted_terms=()))

    vote = service.parse_vote({"lot": "lot1", "type": "UNSOLD", "name": "總統"})
    assert vote.kind is VoteKind.UNSOLD

    with pytest.raises(HammerValidationError) as exc_info:
        service.parse_comment({"lot": "all", "name": "x", "text": "oh bother"})
    assert exc_info.value.code == "COMMENT_DISALLOWED"


@pytest.mark.asyncio
async def test_concurrent_votes_lose_updates() -> None:
    # Every store call yields, so the five requests interleave in lockstep:
    # all load the empty document before any of them saves.
    service = _service(_YieldingKeyValueStore())

    results = await asyncio.gather(
        *(service.cast_vote(_unsold(), _identity(f"fp-{i}")) for i in range(5)),
    )

    assert [result.lots["lot1"].unsold for result in results] == [1] * 5
    final = await service.read_state()
    assert final.lots["lot1"].unsold == 1


@pytest.mark.asyncio
async def test_concurrent_votes_from_one_voter_both_pass_the_lock() -> None:
    service = _service(_YieldingKeyValueStore())

    first, second = await asyncio.gather(
        service.cast_vote(_unsold(), _identity("fp-same")),
        service.cast_vote(_priced(900), _identity("fp-same")),
    )

    assert first.lots["lot1"].unsold == 1
    assert second.lots["lot1"].prices == [900]
    assert await service.locks.has_voted("lot1", "fp-same")
    with pytest.raises(HammerAlreadyVotedError):
        await service.cast_vote(_unsold(), _identity("fp-same"))
