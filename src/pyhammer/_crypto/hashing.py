"""Hash functions for visitor fingerprinting."""

from __future__ import annotations

import hashlib

from pyhammer._constants import FINGERPRINT_SEPARATOR


def sha256_hex(value: str) -> str:
    """Compute SHA-256 of a UTF-8 string, returning lowercase hex.

    Parameters
    ----------
    value : str
        The string to hash.

    Returns
    -------
    str
        64-character lowercase hex digest.
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def compute_fingerprint(remote_addr: str, user_agent: str, token: str) -> str:
    """Derive the one-way visitor fingerprint.

    The inputs are joined as ``<addr>|<agent>|<token>`` before hashing.
    An empty *remote_addr* is accepted; the fingerprint then rests on the
    agent string and token alone.

    Parameters
    ----------
    remote_addr : str
        Caller network address, or ``""`` when unavailable.
    user_agent : str
        Caller-supplied agent string.
    token : str
        Visitor token from the persisted cookie.

    Returns
    -------
    str
        64-character lowercase hex digest.
    """
    return sha256_hex(FINGERPRINT_SEPARATOR.join((remote_addr, user_agent, token)))
