"""Resolved visitor identity."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Identity(BaseModel):
    """Who is calling, as far as duplicate-vote prevention is concerned.

    Parameters
    ----------
    token : str
        Opaque visitor token bound to the caller's cookie.
    fingerprint : str
        One-way digest of network address, agent string and token.
    issued : bool
        ``True`` when ``token`` was minted for this request and must be
        handed back to the caller to persist.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: str
    fingerprint: str
    issued: bool = False

    def __repr__(self) -> str:
        # Never leak the token or fingerprint into logs/tracebacks.
        return f"Identity(issued={self.issued})"

    __str__ = __repr__
