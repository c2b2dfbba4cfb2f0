"""pyhammer - Anonymous auction-lot predictions over a shared state document."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyhammer")
except PackageNotFoundError:
    __version__ = "0+local"
from pyhammer._storage import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from pyhammer.config import HammerConfig
from pyhammer.exceptions import (
    HammerAlreadyVotedError,
    HammerConfigError,
    HammerError,
    HammerPolicyError,
    HammerRequestError,
    HammerStorageError,
    HammerValidationError,
)
from pyhammer.identity import IdentityResolver
from pyhammer.models import (
    Comment,
    CommentRequest,
    Identity,
    LotAggregate,
    SeriesPoint,
    StateDocument,
    VoteKind,
    VoteRequest,
)
from pyhammer.moderation import Moderation, ModerationFilter, TermListFilter
from pyhammer.service import HammerService

__all__ = [
    "__version__",
    "Comment",
    "CommentRequest",
    "FileKeyValueStore",
    "HammerAlreadyVotedError",
    "HammerConfig",
    "HammerConfigError",
    "HammerError",
    "HammerPolicyError",
    "HammerRequestError",
    "HammerService",
    "HammerStorageError",
    "HammerValidationError",
    "Identity",
    "IdentityResolver",
    "KeyValueStore",
    "LotAggregate",
    "Moderation",
    "ModerationFilter",
    "MemoryKeyValueStore",
    "SeriesPoint",
    "StateDocument",
    "TermListFilter",
    "VoteKind",
    "VoteRequest",
]
