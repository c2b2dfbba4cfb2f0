"""Header redaction for request debug logs.

Cookies carry the visitor token and the forwarding headers carry the
caller's address; together with the agent string those are the inputs of
the visitor fingerprint, so none of them may reach the logs in the clear.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

REDACTED = "<redacted>"

_SENSITIVE_HEADERS: frozenset[str] = frozenset(
    {
        "authorization",
        "cookie",
        "set-cookie",
        "forwarded",
        "cf-connecting-ip",
        "x-forwarded-for",
        "x-real-ip",
    }
)


def redact_headers(
    headers: Mapping[str, str],
    *,
    extra: Iterable[str] = (),
    max_value: int = 256,
) -> dict[str, str]:
    """Return a loggable copy of *headers*.

    Header names are matched case-insensitively against the built-in set and
    *extra* (e.g. a configured client address header). Repeated headers are
    collapsed to their last value. Values longer than *max_value* are cut.
    """
    sensitive = _SENSITIVE_HEADERS | {name.lower() for name in extra}
    redacted: dict[str, str] = {}
    for name, value in headers.items():
        if name.lower() in sensitive:
            redacted[name] = REDACTED
        elif len(value) > max_value:
            redacted[name] = f"{value[:max_value]}…<truncated>"
        else:
            redacted[name] = value
    return redacted
