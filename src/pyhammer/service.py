"""Vote, comment and read operations over the shared state document."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pyhammer._crypto import new_comment_id
from pyhammer._storage import KeyValueStore
from pyhammer.config import HammerConfig
from pyhammer.exceptions import HammerAlreadyVotedError, HammerStorageError
from pyhammer.identity import IdentityResolver
from pyhammer.models.identity import Identity
from pyhammer.models.requests import CommentRequest, VoteRequest, validate_request
from pyhammer.models.state import Comment, StateDocument
from pyhammer.moderation import Moderation
from pyhammer.state.aggregate import apply_comment, apply_vote
from pyhammer.state.locks import VoteLockStore
from pyhammer.state.store import StateDocumentStore, now_ms

_logger = logging.getLogger(__name__)


class HammerService:
    """Request-scoped operations; holds no document state between calls.

    Usage::

        service = HammerService(MemoryKeyValueStore(), HammerConfig.from_env())
        vote = service.parse_vote(body)
        identity = service.identity.resolve(cookie_value, remote_addr, user_agent)
        state = await service.cast_vote(vote, identity)
    """

    def __init__(
        self,
        kv: KeyValueStore,
        config: HammerConfig | None = None,
        *,
        moderation: Moderation | None = None,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = new_comment_id,
    ) -> None:
        self._config = config or HammerConfig()
        self._clock = clock
        self._id_factory = id_factory
        self._moderation = moderation or Moderation.from_config(self._config)
        self._documents = StateDocumentStore(kv, key=self._config.state_key, clock=clock)
        self._locks = VoteLockStore(kv, ttl=self._config.lock_ttl)
        self._identity = IdentityResolver(self._config)

    @property
    def config(self) -> HammerConfig:
        return self._config

    @property
    def identity(self) -> IdentityResolver:
        return self._identity

    @property
    def locks(self) -> VoteLockStore:
        return self._locks

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def parse_vote(self, body: Mapping[str, Any] | Any) -> VoteRequest:
        """Validate a vote body; raises :class:`HammerValidationError`."""
        return validate_request(VoteRequest, body, moderation=self._moderation)

    def parse_comment(self, body: Mapping[str, Any] | Any) -> CommentRequest:
        """Validate a comment body; raises :class:`HammerValidationError`."""
        return validate_request(CommentRequest, body, moderation=self._moderation)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def read_state(self) -> StateDocument:
        return await self._documents.load()

    async def cast_vote(self, request: VoteRequest, identity: Identity) -> StateDocument:
        """Record one vote and return the updated document.

        The privileged display name skips both the lock check and the lock
        write. If the lock write fails after the document was saved the vote
        stands and the voter may get one extra vote.

        Raises
        ------
        HammerAlreadyVotedError
            The fingerprint already voted on this lot.
        HammerStorageError
            Loading or saving the document failed; nothing was applied.
        """
        assert request.kind is not None  # noqa: S101
        lot = request.lot
        privileged = self._config.is_privileged(request.name)

        if privileged:
            _logger.info("Privileged vote on %s", lot)
        elif await self._locks.has_voted(lot, identity.fingerprint):
            raise HammerAlreadyVotedError(lot)

        doc = await self._documents.mutate(
            lambda current: apply_vote(current, lot, request.kind, request.price, now=self._clock())
        )

        if not privileged:
            try:
                await self._locks.mark_voted(lot, identity.fingerprint)
            except HammerStorageError:
                _logger.warning("Vote on %s saved but the vote lock could not be written", lot, exc_info=True)

        _logger.info("Accepted %s vote on %s", request.kind.value, lot)
        return doc

    async def post_comment(self, request: CommentRequest) -> StateDocument:
        """Append a comment and return the updated document."""
        comment = Comment(
            id=self._id_factory(),
            ts=self._clock(),
            lot=request.lot,
            name=request.name,
            text=request.text,
        )
        doc = await self._documents.mutate(lambda current: apply_comment(current, comment))
        _logger.info("Accepted comment on %s", request.lot)
        return doc
