"""Data models for the shared state document and inbound requests."""

from pyhammer.models._base import HammerBaseModel
from pyhammer.models.identity import Identity
from pyhammer.models.requests import CommentRequest, VoteKind, VoteRequest, validate_request
from pyhammer.models.state import Comment, LotAggregate, SeriesPoint, StateDocument

__all__ = [
    "Comment",
    "CommentRequest",
    "HammerBaseModel",
    "Identity",
    "LotAggregate",
    "SeriesPoint",
    "StateDocument",
    "VoteKind",
    "VoteRequest",
    "validate_request",
]
