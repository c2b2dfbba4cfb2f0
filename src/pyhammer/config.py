"""Service configuration for pyhammer."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyhammer._constants import CLIENT_IP_HEADER, COOKIE_MAX_AGE, COOKIE_NAME, STATE_KEY
from pyhammer.exceptions import HammerConfigError
from pyhammer.moderation import DEFAULT_PROFANITY_TERMS, DEFAULT_RESTRICTED_TERMS


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_terms(value: str) -> tuple[str, ...]:
    return tuple(term.strip() for term in value.split(",") if term.strip())


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise HammerConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class HammerConfig:
    """Service configuration.

    Parameters
    ----------
    state_key : str
        Key of the shared state document in the key/value store.
    privileged_name : str or None
        Display name allowed to vote any number of times on any lot.
        Matched exactly; ``None`` disables the escape hatch.
    cookie_name : str
        Name of the cookie carrying the visitor token.
    cookie_max_age : int
        Lifetime of the visitor cookie in seconds (one year).
    cookie_secure : bool
        Whether the visitor cookie is marked ``Secure``.
    client_ip_header : str
        Request header holding the caller's network address. When the
        header is absent the address component of the fingerprint is empty.
    lock_ttl : float or None
        Seconds after which a vote lock expires so the visitor may vote
        again. ``None`` keeps locks forever.
    profanity_terms : tuple of str
        Terms rejected with the profanity codes.
    restricted_terms : tuple of str
        Terms (titles of office) rejected with the disallowed codes.
    """

    state_key: str = STATE_KEY
    privileged_name: str | None = None
    cookie_name: str = COOKIE_NAME
    cookie_max_age: int = COOKIE_MAX_AGE
    cookie_secure: bool = True
    client_ip_header: str = CLIENT_IP_HEADER
    lock_ttl: float | None = None
    profanity_terms: tuple[str, ...] = DEFAULT_PROFANITY_TERMS
    restricted_terms: tuple[str, ...] = DEFAULT_RESTRICTED_TERMS

    def __post_init__(self) -> None:
        if not self.state_key:
            raise HammerConfigError("state_key must be non-empty")
        if not self.cookie_name:
            raise HammerConfigError("cookie_name must be non-empty")
        if self.lock_ttl is not None and self.lock_ttl <= 0:
            raise HammerConfigError("lock_ttl must be positive when set")

    def is_privileged(self, name: str) -> bool:
        """Whether *name* is the configured privileged display name."""
        return self.privileged_name is not None and name == self.privileged_name

    @classmethod
    def from_env(cls, **overrides: Any) -> HammerConfig:
        """Create configuration from environment variables.

        Reads optional ``HAMMER_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        HammerConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "HAMMER_STATE_KEY": "state_key",
            "HAMMER_PRIVILEGED_NAME": "privileged_name",
            "HAMMER_COOKIE_NAME": "cookie_name",
            "HAMMER_CLIENT_IP_HEADER": "client_ip_header",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        max_age_env = env.get("HAMMER_COOKIE_MAX_AGE")
        if max_age_env is not None and "cookie_max_age" not in overrides:
            config_kwargs["cookie_max_age"] = _env_number("HAMMER_COOKIE_MAX_AGE", max_age_env, int)

        if "cookie_secure" not in overrides:
            config_kwargs["cookie_secure"] = _env_bool(env.get("HAMMER_COOKIE_SECURE"), True)

        ttl_env = env.get("HAMMER_LOCK_TTL")
        if ttl_env is not None and "lock_ttl" not in overrides:
            config_kwargs["lock_ttl"] = _env_number("HAMMER_LOCK_TTL", ttl_env, float)

        # Term lists are comma separated
        for env_key, field_name in (
            ("HAMMER_PROFANITY_TERMS", "profanity_terms"),
            ("HAMMER_RESTRICTED_TERMS", "restricted_terms"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_terms(val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
