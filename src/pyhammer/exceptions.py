"""Custom exception hierarchy for pyhammer."""

from __future__ import annotations


class HammerError(Exception):
    """Base exception for all pyhammer errors."""


class HammerConfigError(HammerError):
    """Invalid or missing configuration."""


class HammerStorageError(HammerError):
    """Key/value store read or write failure."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class HammerRequestError(HammerError):
    """A request was rejected before any state was mutated.

    ``code`` is the wire error code reported to the caller and
    ``status`` the HTTP status used by the web layer.
    """

    status: int = 400

    def __init__(self, code: str, message: str = "") -> None:
        self.code = code
        super().__init__(message or code)


class HammerValidationError(HammerRequestError):
    """Malformed request or out-of-range / disallowed field value."""


class HammerPolicyError(HammerRequestError):
    """Request was well-formed but refused by policy."""


class HammerAlreadyVotedError(HammerPolicyError):
    """This fingerprint already voted on the lot (code ``ALREADY_VOTED``)."""

    status = 409

    def __init__(self, lot: str) -> None:
        self.lot = lot
        super().__init__("ALREADY_VOTED", f"already voted on {lot}")
