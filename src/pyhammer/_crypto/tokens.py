"""Random identifiers: visitor tokens and comment ids."""

from __future__ import annotations

import re
import secrets

from pyhammer._constants import COMMENT_ID_BYTES, TOKEN_LENGTH

_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]+")


def mint_token(length: int = TOKEN_LENGTH) -> str:
    """Return a fresh URL-safe visitor token of exactly *length* characters."""
    # token_urlsafe yields ~1.3 chars per byte, so *length* bytes is plenty.
    return secrets.token_urlsafe(length)[:length]


def is_valid_token(value: str) -> bool:
    """Whether *value* is a token this service could have issued."""
    return bool(_TOKEN_RE.fullmatch(value))


def new_comment_id() -> str:
    """Random opaque comment id (12 lowercase hex characters)."""
    return secrets.token_hex(COMMENT_ID_BYTES)
