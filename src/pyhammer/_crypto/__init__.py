"""Cryptographic helpers for visitor identity."""

from __future__ import annotations

from pyhammer._crypto.hashing import compute_fingerprint, sha256_hex
from pyhammer._crypto.tokens import is_valid_token, mint_token, new_comment_id

__all__ = [
    "compute_fingerprint",
    "is_valid_token",
    "mint_token",
    "new_comment_id",
    "sha256_hex",
]
