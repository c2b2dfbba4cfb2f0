"""State/store layer.

This package is the single place where the shared state document is
loaded, transformed and committed, and where vote locks are kept.
"""

from pyhammer.state.aggregate import apply_comment, apply_vote
from pyhammer.state.locks import VoteLockStore
from pyhammer.state.policy import settle_probability
from pyhammer.state.store import StateDocumentStore

__all__ = [
    "StateDocumentStore",
    "VoteLockStore",
    "apply_comment",
    "apply_vote",
    "settle_probability",
]
