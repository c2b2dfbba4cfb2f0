"""Tests for the pure aggregation engine."""

from __future__ import annotations

import pytest

from pyhammer._constants import MAX_COMMENTS, MAX_PRICES, MAX_SERIES
from pyhammer.models.requests import VoteKind
from pyhammer.models.state import Comment, LotAggregate, SeriesPoint, StateDocument
from pyhammer.state.aggregate import apply_comment, apply_vote
from pyhammer.state.policy import keep_last, settle_probability


def _comment(index: int) -> Comment:
    return Comment(id=f"c{index}", ts=index, lot="all", name="bidder", text=f"comment {index}")


class TestSettleProbability:
    def test_no_votes_is_zero(self) -> None:
        assert settle_probability(0, 0) == 0

    def test_only_unsold_is_zero(self) -> None:
        assert settle_probability(3, 0) == 0

    def test_only_prices_is_hundred(self) -> None:
        assert settle_probability(0, 4) == 100

    def test_mixed(self) -> None:
        assert settle_probability(1, 3) == pytest.approx(75.0)


class TestApplyVote:
    def test_unsold_increments_and_appends_point(self) -> None:
        doc = StateDocument.empty()

        updated = apply_vote(doc, "lot1", VoteKind.UNSOLD, now=1000)

        lot = updated.lots["lot1"]
        assert lot.unsold == 1
        assert lot.prices == []
        assert lot.series == [SeriesPoint(ts=1000, v=0)]

    def test_unsold_point_uses_post_increment_counts(self) -> None:
        doc = StateDocument(lots={"lot1": LotAggregate(unsold=1, prices=[10, 20, 30])})

        lot = apply_vote(doc, "lot1", VoteKind.UNSOLD, now=5).lots["lot1"]

        assert lot.unsold == 2
        assert lot.series[-1].v == pytest.approx(100 - 2 / 5 * 100)

    def test_price_appended_at_tail(self) -> None:
        doc = StateDocument(lots={"lot2": LotAggregate(unsold=1, prices=[100])})

        lot = apply_vote(doc, "lot2", VoteKind.PRICE, 123.45, now=7).lots["lot2"]

        assert lot.prices == [100, 123.45]
        assert lot.series[-1].ts == 7
        assert lot.series[-1].v == pytest.approx(100 - 1 / 3 * 100)

    def test_prices_trimmed_oldest_first(self) -> None:
        doc = StateDocument(lots={"lot1": LotAggregate(prices=list(range(1, MAX_PRICES + 1)))})

        lot = apply_vote(doc, "lot1", VoteKind.PRICE, 9999, now=1).lots["lot1"]

        assert len(lot.prices) == MAX_PRICES
        assert lot.prices[0] == 2
        assert lot.prices[-1] == 9999

    def test_series_trimmed_oldest_first(self) -> None:
        series = [SeriesPoint(ts=i, v=0) for i in range(MAX_SERIES)]
        doc = StateDocument(lots={"lot1": LotAggregate(unsold=MAX_SERIES, series=series)})

        lot = apply_vote(doc, "lot1", VoteKind.UNSOLD, now=MAX_SERIES).lots["lot1"]

        assert len(lot.series) == MAX_SERIES
        assert lot.series[0].ts == 1
        assert lot.series[-1].ts == MAX_SERIES

    def test_other_lot_untouched(self) -> None:
        doc = StateDocument.empty()

        updated = apply_vote(doc, "lot1", VoteKind.PRICE, 50, now=1)

        assert updated.lots["lot2"] == LotAggregate()

    def test_input_document_not_mutated(self) -> None:
        doc = StateDocument.empty()

        apply_vote(doc, "lot1", VoteKind.PRICE, 50, now=1)

        assert doc == StateDocument.empty()

    def test_price_vote_without_price_rejected(self) -> None:
        with pytest.raises(ValueError):
            apply_vote(StateDocument.empty(), "lot1", VoteKind.PRICE, now=1)

    def test_unsold_then_price_yields_zero_then_fifty(self) -> None:
        doc = apply_vote(StateDocument.empty(), "lot1", VoteKind.UNSOLD, now=1)
        doc = apply_vote(doc, "lot1", VoteKind.PRICE, 1000, now=2)

        lot = doc.lots["lot1"]
        assert lot.unsold == 1
        assert lot.prices == [1000]
        assert [point.v for point in lot.series] == [0, 50]


class TestApplyComment:
    def test_appends_in_order(self) -> None:
        doc = apply_comment(StateDocument.empty(), _comment(1))
        doc = apply_comment(doc, _comment(2))

        assert [c.id for c in doc.comments] == ["c1", "c2"]

    def test_capped_dropping_oldest(self) -> None:
        doc = StateDocument(comments=[_comment(i) for i in range(MAX_COMMENTS)])

        updated = apply_comment(doc, _comment(MAX_COMMENTS))

        assert len(updated.comments) == MAX_COMMENTS
        assert updated.comments[0].id == "c1"
        assert updated.comments[-1].id == f"c{MAX_COMMENTS}"


def test_keep_last_below_capacity_returns_copy() -> None:
    items = [1, 2, 3]
    kept = keep_last(items, 5)
    assert kept == items
    assert kept is not items
