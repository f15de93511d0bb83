"""Tests for floplab.core.evaluator: hand ranking and ordering."""

from __future__ import annotations

from itertools import combinations, permutations
import random

import pytest

from floplab.core.cards import FULL_DECK, parse_cards
from floplab.core.errors import DuplicateCardError, InvalidArityError
from floplab.core.evaluator import (
    DESCRIPTOR_LENGTHS,
    CombinationTable,
    HandCategory,
    HandEvaluator,
    classify_partial_hand,
    compare_ranks,
    describe_rank,
    evaluate_five,
    evaluate_seven,
    rank_key,
    straight_high,
)


def _cards(text: str):
    return parse_cards(text.split())


# ── evaluate_five ─────────────────────────────────────────────────


CATEGORY_EXAMPLES = [
    ("Th Jh Qh Kh Ah", (8, 14)),
    ("9c 9d 9h 9s 2c", (7, 9, 2)),
    ("Kc Kd Kh 3s 3c", (6, 13, 3)),
    ("2d 7d 9d Jd Ad", (5, 14, 11, 9, 7, 2)),
    ("5c 6d 7h 8s 9c", (4, 9)),
    ("Qc Qd Qs 8h 4c", (3, 12, 8, 4)),
    ("Jc Jd 4h 4s Ac", (2, 11, 4, 14)),
    ("Tc Td 8h 5s 2c", (1, 10, 8, 5, 2)),
    ("Ac Jd 8h 5s 3c", (0, 14, 11, 8, 5, 3)),
]


class TestEvaluateFive:
    @pytest.mark.parametrize(("hand", "expected"), CATEGORY_EXAMPLES)
    def test_categories(self, hand: str, expected: tuple[int, ...]) -> None:
        assert evaluate_five(_cards(hand)) == expected

    @pytest.mark.parametrize(("hand", "expected"), CATEGORY_EXAMPLES)
    def test_descriptor_length_is_fixed_per_category(self, hand: str, expected: tuple[int, ...]) -> None:
        rank = evaluate_five(_cards(hand))
        assert len(rank) == DESCRIPTOR_LENGTHS[HandCategory(rank[0])]

    def test_every_category_has_a_length(self) -> None:
        assert set(DESCRIPTOR_LENGTHS) == set(HandCategory)

    def test_wheel_is_five_high_straight(self) -> None:
        assert evaluate_five(_cards("Ah 2c 3d 4s 5h")) == (HandCategory.STRAIGHT, 5)

    def test_steel_wheel(self) -> None:
        assert evaluate_five(_cards("Ad 2d 3d 4d 5d")) == (HandCategory.STRAIGHT_FLUSH, 5)

    def test_ace_does_not_wrap_around(self) -> None:
        rank = evaluate_five(_cards("Qh Kc Ad 2s 3h"))
        assert rank[0] == HandCategory.HIGH_CARD

    def test_royal_flush_beats_any_quads(self) -> None:
        royal = evaluate_five(_cards("Ts Js Qs Ks As"))
        best_quads = evaluate_five(_cards("Ac Ad Ah As Kc"))
        assert royal == (HandCategory.STRAIGHT_FLUSH, 14)
        assert compare_ranks(royal, best_quads) == 1

    def test_wheel_loses_to_six_high_straight(self) -> None:
        wheel = evaluate_five(_cards("Ah 2c 3d 4s 5h"))
        six_high = evaluate_five(_cards("2h 3c 4d 5s 6h"))
        assert compare_ranks(wheel, six_high) == -1

    def test_order_invariant(self) -> None:
        cards = _cards("Jc Jd 4h 4s Ac")
        expected = evaluate_five(cards)
        for ordering in permutations(cards):
            assert evaluate_five(list(ordering)) == expected

    def test_kicker_breaks_ties(self) -> None:
        king_kicker = evaluate_five(_cards("Ac Ad Kh 7s 2c"))
        queen_kicker = evaluate_five(_cards("Ah As Qh 7d 2d"))
        assert compare_ranks(king_kicker, queen_kicker) == 1

    def test_wrong_size_raises(self) -> None:
        with pytest.raises(InvalidArityError):
            evaluate_five(_cards("Ac Ad Kh 7s"))

    def test_duplicates_raise(self) -> None:
        with pytest.raises(DuplicateCardError):
            evaluate_five(_cards("Ac Ac Kh 7s 2c"))


# ── evaluate_seven ────────────────────────────────────────────────


class TestEvaluateSeven:
    def test_flush_beats_straight_in_same_seven(self) -> None:
        rank = evaluate_seven(_cards("5h 6c 7h 8d 9h Kh 2h"))
        assert rank == (HandCategory.FLUSH, 13, 9, 7, 5, 2)

    def test_two_trips_make_a_full_house(self) -> None:
        assert evaluate_seven(_cards("Kc Kd Kh 2c 2d 2h 9s")) == (HandCategory.FULL_HOUSE, 13, 2)

    def test_best_kickers_chosen(self) -> None:
        assert evaluate_seven(_cards("Ac Ad 2h 3s 9c Jd Kh")) == (HandCategory.ONE_PAIR, 14, 13, 11, 9)

    def test_six_cards(self) -> None:
        assert evaluate_seven(_cards("9c 9d 9h 9s 2c 3d"))[0] == HandCategory.FOUR_OF_A_KIND

    def test_five_cards_matches_evaluate_five(self) -> None:
        cards = _cards("Kc Kd Kh 3s 3c")
        assert evaluate_seven(cards) == evaluate_five(cards)

    def test_straight_on_seven_with_pair(self) -> None:
        assert evaluate_seven(_cards("4c 5d 6h 7s 8c 8d Kh")) == (HandCategory.STRAIGHT, 8)

    def test_arity(self) -> None:
        with pytest.raises(InvalidArityError):
            evaluate_seven(_cards("Ac Ad 2h 3s"))
        with pytest.raises(InvalidArityError):
            evaluate_seven(_cards("Ac Ad 2h 3s 9c Jd Kh Qs"))

    def test_matches_brute_force_max(self) -> None:
        rng = random.Random(5)
        evaluator = HandEvaluator()
        for _ in range(50):
            cards = rng.sample(FULL_DECK, 7)
            brute = max((evaluate_five(list(combo)) for combo in combinations(cards, 5)), key=rank_key)
            assert evaluator.evaluate_seven(cards) == brute

    def test_best_of_rejects_short_input(self) -> None:
        with pytest.raises(InvalidArityError):
            HandEvaluator().best_of(_cards("Ac Ad 2h 3s"))


# ── Comparator ────────────────────────────────────────────────────


class TestCompareRanks:
    def test_zero_padding(self) -> None:
        assert compare_ranks((4, 5), (4, 5, 0)) == 0
        assert compare_ranks((4, 5), (4, 5, 1)) == -1

    def test_category_dominates(self) -> None:
        assert compare_ranks((1, 2, 3, 4, 5), (0, 14, 13, 12, 11, 9)) == 1

    def test_total_order_properties(self) -> None:
        rng = random.Random(17)
        ranks = [evaluate_seven(rng.sample(FULL_DECK, 7)) for _ in range(25)]
        for a in ranks:
            assert compare_ranks(a, a) == 0
            for b in ranks:
                assert compare_ranks(a, b) == -compare_ranks(b, a)
                for c in ranks:
                    if compare_ranks(a, b) >= 0 and compare_ranks(b, c) >= 0:
                        assert compare_ranks(a, c) >= 0


class TestAgainstTreys:
    """Cross-check ordering against the independent ``treys`` evaluator."""

    def test_pairwise_ordering_agrees(self) -> None:
        treys = pytest.importorskip("treys")
        evaluator = treys.Evaluator()
        rng = random.Random(99)

        def treys_score(cards) -> int:
            encoded = [treys.Card.new(str(card)) for card in cards]
            return evaluator.evaluate(encoded[:2], encoded[2:])

        for _ in range(300):
            left, right = rng.sample(FULL_DECK, 7), rng.sample(FULL_DECK, 7)
            ours = compare_ranks(evaluate_seven(left), evaluate_seven(right))
            # treys: lower score is stronger
            theirs = (treys_score(right) > treys_score(left)) - (treys_score(right) < treys_score(left))
            assert ours == theirs


# ── Combination memo ──────────────────────────────────────────────


class TestCombinationTable:
    def test_counts(self) -> None:
        table = CombinationTable()
        assert len(table.get(7, 5)) == 21
        assert len(table.get(6, 5)) == 6
        assert table.get(5, 5) == ((0, 1, 2, 3, 4),)

    def test_memoised_per_key(self) -> None:
        table = CombinationTable()
        first = table.get(7, 5)
        assert table.get(7, 5) is first
        assert (7, 5) in table
        assert (6, 5) not in table
        assert len(table) == 1

    def test_evaluator_fills_its_own_table(self) -> None:
        evaluator = HandEvaluator()
        evaluator.evaluate_seven(_cards("Ac Ad 2h 3s 9c Jd"))
        evaluator.classify_partial_hand(_cards("Ac Ad 2h 3s 9c Jd Kh"))
        assert (6, 5) in evaluator.combinations
        assert (7, 5) in evaluator.combinations


# ── Partial-hand labels ───────────────────────────────────────────


class TestClassifyPartialHand:
    def test_pair_from_two_cards(self) -> None:
        assert classify_partial_hand(_cards("Ah Ad")) == "One Pair"

    def test_trips_from_three_cards(self) -> None:
        assert classify_partial_hand(_cards("7h 7d 7c")) == "Three of a Kind"

    def test_three_distinct_ranks(self) -> None:
        assert classify_partial_hand(_cards("Ah Kd 7c")) == "High Card"

    def test_two_pair_and_quads_below_five(self) -> None:
        assert classify_partial_hand(_cards("Ah Ad 7c 7s")) == "Two Pair"
        assert classify_partial_hand(_cards("9h 9d 9c 9s")) == "Four of a Kind"

    def test_empty(self) -> None:
        assert classify_partial_hand([]) == "High Card"

    def test_full_hands_use_best_five(self) -> None:
        assert classify_partial_hand(_cards("Th Jh Qh Kh Ah")) == "Straight Flush"
        assert classify_partial_hand(_cards("Kc Kd Kh 2c 2d 2h 9s")) == "Full House"
        assert classify_partial_hand(_cards("2c 3d 4h 5s 9c Ah")) == "Straight"

    def test_too_many_cards(self) -> None:
        with pytest.raises(InvalidArityError):
            classify_partial_hand(FULL_DECK[:8])

    def test_duplicates(self) -> None:
        with pytest.raises(DuplicateCardError):
            classify_partial_hand(_cards("Ah Ah"))


# ── Misc helpers ──────────────────────────────────────────────────


def test_straight_high_scans_from_the_top() -> None:
    assert straight_high([14, 13, 12, 11, 10, 9, 8]) == 14
    assert straight_high([2, 3, 4, 5, 6, 14]) == 6
    assert straight_high([14, 2, 3, 4, 5]) == 5
    assert straight_high([2, 3, 4, 5, 7]) is None


def test_describe_rank() -> None:
    assert describe_rank((6, 13, 2)) == "Full House, Kings full of Twos"
    assert describe_rank((8, 14)) == "Straight Flush, Royal"
    assert describe_rank((4, 5)) == "Straight, Five high"
    assert describe_rank((1, 6, 14, 9, 3)) == "One Pair, Sixes"
