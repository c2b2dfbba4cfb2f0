"""The shared state document and its parts."""

from __future__ import annotations

from pydantic import Field, field_validator

from pyhammer._constants import LOT_IDS
from pyhammer.models._base import HammerBaseModel


class SeriesPoint(HammerBaseModel):
    """Settle probability (0-100) observed at ``ts`` (epoch ms)."""

    ts: int
    v: float


class LotAggregate(HammerBaseModel):
    """Per-lot counters, price reservoir and derived series.

    Parameters
    ----------
    unsold : int
        Votes asserting the lot went unsold.
    prices : list
        Most recent price samples, oldest first. Submitted values are kept
        verbatim, so integral prices stay ``int``.
    series : list of SeriesPoint
        Settle probability after each vote, oldest first.
    """

    unsold: int = Field(default=0, ge=0)
    prices: list[int | float] = Field(default_factory=list)
    series: list[SeriesPoint] = Field(default_factory=list)


class Comment(HammerBaseModel):
    id: str
    ts: int
    lot: str
    name: str
    text: str


class StateDocument(HammerBaseModel):
    """The single shared aggregate record.

    ``lots`` always holds an aggregate for every known lot; documents
    stored without one get a zeroed aggregate on load.
    """

    updated_at: int = 0
    lots: dict[str, LotAggregate] = Field(default_factory=dict, validate_default=True)
    comments: list[Comment] = Field(default_factory=list)

    @field_validator("lots", mode="after")
    @classmethod
    def _fill_missing_lots(cls, value: dict[str, LotAggregate]) -> dict[str, LotAggregate]:
        missing = [lot for lot in LOT_IDS if lot not in value]
        if not missing:
            return value
        return {**value, **{lot: LotAggregate() for lot in missing}}

    @classmethod
    def empty(cls) -> StateDocument:
        """Canonical empty document: zeroed lots, no comments, never saved."""
        return cls()
