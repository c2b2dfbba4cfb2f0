"""Moderation of free-text fields.

The core only depends on the :class:`ModerationFilter` protocol. Term lists
are configuration, so they can be swapped or localized without touching the
aggregation logic.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pyhammer.config import HammerConfig

DEFAULT_PROFANITY_TERMS: tuple[str, ...] = (
    "傻",
    "蠢",
    "垃圾",
    "廢物",
    "滾",
    "去死",
    "媽的",
    "他媽",
    "操",
    "屌",
    "婊",
    "畜生",
)

# Titles of office that may not be used as display names or in comments.
DEFAULT_RESTRICTED_TERMS: tuple[str, ...] = (
    "總統",
    "主席",
    "總書記",
    "國家主席",
    "首相",
    "總理",
)


class ModerationFilter(Protocol):
    """Predicate over free text."""

    def is_disallowed(self, text: str) -> bool: ...


class TermListFilter:
    """Substring match against a fixed list of terms.

    Matching is case-sensitive; callers wanting case folding should supply
    terms in the casing they expect to see.
    """

    def __init__(self, terms: Iterable[str]) -> None:
        # Empty terms would match everything.
        self._terms = tuple(term for term in terms if term)

    @property
    def terms(self) -> tuple[str, ...]:
        return self._terms

    def is_disallowed(self, text: str) -> bool:
        return any(term in text for term in self._terms)


@dataclass(frozen=True)
class Moderation:
    """The two filters the request validators consult.

    A ``profanity`` hit on a vote name is reported as ``NAME_PROFANITY``, a
    ``restricted`` hit as ``NAME_DISALLOWED``. Comments do not distinguish
    the two.
    """

    profanity: ModerationFilter
    restricted: ModerationFilter

    @classmethod
    def from_config(cls, config: HammerConfig) -> Moderation:
        return cls(
            profanity=TermListFilter(config.profanity_terms),
            restricted=TermListFilter(config.restricted_terms),
        )

    @classmethod
    def default(cls) -> Moderation:
        return cls(
            profanity=TermListFilter(DEFAULT_PROFANITY_TERMS),
            restricted=TermListFilter(DEFAULT_RESTRICTED_TERMS),
        )

    def is_disallowed(self, text: str) -> bool:
        """Whether *text* hits either filter."""
        return self.profanity.is_disallowed(text) or self.restricted.is_disallowed(text)
