"""Visitor identity resolution.

A visitor is recognised by a fingerprint over their network address, agent
string and a random token persisted in a cookie. Neither input alone is
trusted: addresses are shared behind NAT, and a cookie is trivially
cleared. This is an anti-spam heuristic, not an authentication boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pyhammer._crypto import compute_fingerprint, is_valid_token, mint_token
from pyhammer.config import HammerConfig
from pyhammer.models.identity import Identity

_logger = logging.getLogger(__name__)


class IdentityResolver:
    """Derive :class:`Identity` values from request metadata.

    Performs no storage I/O; token issuance is only signalled through
    :attr:`Identity.issued`.
    """

    def __init__(
        self,
        config: HammerConfig,
        *,
        token_factory: Callable[[], str] = mint_token,
    ) -> None:
        self._config = config
        self._token_factory = token_factory

    def resolve(self, credential: str | None, remote_addr: str, user_agent: str) -> Identity:
        """Resolve an identity from a previously issued credential, if any.

        An absent or malformed credential causes a new token to be minted;
        the new token is used for this request's fingerprint straight away.
        """
        issued = False
        token = credential.strip() if credential else ""
        if not token or not is_valid_token(token):
            token = self._token_factory()
            issued = True
            _logger.debug("Issued new visitor token")

        if not remote_addr:
            _logger.debug("No client address available; fingerprinting on agent and token only")

        return Identity(
            token=token,
            fingerprint=compute_fingerprint(remote_addr, user_agent, token),
            issued=issued,
        )

    def resolve_headers(self, headers: Mapping[str, str], cookies: Mapping[str, str]) -> Identity:
        """Resolve from HTTP request headers and parsed cookies."""
        return self.resolve(
            cookies.get(self._config.cookie_name),
            headers.get(self._config.client_ip_header, ""),
            headers.get("User-Agent", ""),
        )

    @property
    def cookie_name(self) -> str:
        return self._config.cookie_name

    def cookie_options(self) -> dict[str, Any]:
        """Keyword arguments for ``StreamResponse.set_cookie`` when issuing a token."""
        return {
            "path": "/",
            "max_age": self._config.cookie_max_age,
            "httponly": True,
            "secure": self._config.cookie_secure,
            "samesite": "Lax",
        }
