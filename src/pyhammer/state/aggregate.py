"""Aggregation engine: pure folds of votes and comments into the document.

Nothing here performs I/O. Each function returns a new
:class:`~pyhammer.models.state.StateDocument`; the input is left untouched,
so no other reader can observe a partially applied update.
"""

from __future__ import annotations

from pyhammer._constants import MAX_COMMENTS, MAX_PRICES, MAX_SERIES
from pyhammer.models.requests import VoteKind
from pyhammer.models.state import Comment, LotAggregate, SeriesPoint, StateDocument
from pyhammer.state.policy import keep_last, settle_probability


def apply_vote(
    doc: StateDocument,
    lot: str,
    kind: VoteKind,
    price: int | float | None = None,
    *,
    now: int,
) -> StateDocument:
    """Fold one vote into *lot* and append a fresh series point.

    Parameters
    ----------
    doc : StateDocument
        Current document.
    lot : str
        Lot identifier; must already exist in ``doc.lots``.
    kind : VoteKind
        ``UNSOLD`` increments the unsold counter, ``PRICE`` appends *price*.
    price : int or float, optional
        Validated price sample, required for ``PRICE`` votes.
    now : int
        Epoch milliseconds stamped on the new series point.

    Returns
    -------
    StateDocument
        The updated document.
    """
    current = doc.lots[lot]
    unsold = current.unsold
    prices = list(current.prices)

    if kind is VoteKind.UNSOLD:
        unsold += 1
    else:
        if price is None:
            raise ValueError("PRICE votes require a price")
        prices = keep_last([*prices, price], MAX_PRICES)

    point = SeriesPoint(ts=now, v=settle_probability(unsold, len(prices)))
    updated = LotAggregate(
        unsold=unsold,
        prices=prices,
        series=keep_last([*current.series, point], MAX_SERIES),
    )
    return doc.model_copy(update={"lots": {**doc.lots, lot: updated}})


def apply_comment(doc: StateDocument, comment: Comment) -> StateDocument:
    """Append *comment*, keeping only the newest comments."""
    comments = keep_last([*doc.comments, comment], MAX_COMMENTS)
    return doc.model_copy(update={"comments": comments})
