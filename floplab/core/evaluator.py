"""Hand evaluation: 5-card classifier, best-of-7 selector and comparator.

A hand rank is a plain tuple of ints (a *descriptor*)::

    (category, tiebreak_1, tiebreak_2, ...)

``category`` is a :class:`HandCategory` value (0 = high card … 8 =
straight flush); the tie-break values follow in descending significance.
Each category always produces the same descriptor length (see
:data:`DESCRIPTOR_LENGTHS`), so the zero-padding in :func:`compare_ranks`
never lines up values with different meanings.

The best-of-N selector enumerates every 5-card subset through a single
memoised :class:`CombinationTable` keyed by ``(n, k)``.
"""

from __future__ import annotations

from collections import Counter
from enum import IntEnum
from functools import cmp_to_key
from itertools import combinations, zip_longest
import threading
from typing import Sequence

from floplab.core.cards import Card, Rank
from floplab.core.errors import DuplicateCardError, InvalidArityError

HandRank = tuple[int, ...]


class HandCategory(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: dict[HandCategory, str] = {
    HandCategory.HIGH_CARD: "High Card",
    HandCategory.ONE_PAIR: "One Pair",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.FLUSH: "Flush",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
}

DESCRIPTOR_LENGTHS: dict[HandCategory, int] = {
    HandCategory.HIGH_CARD: 6,
    HandCategory.ONE_PAIR: 5,
    HandCategory.TWO_PAIR: 4,
    HandCategory.THREE_OF_A_KIND: 4,
    HandCategory.STRAIGHT: 2,
    HandCategory.FLUSH: 6,
    HandCategory.FULL_HOUSE: 3,
    HandCategory.FOUR_OF_A_KIND: 3,
    HandCategory.STRAIGHT_FLUSH: 2,
}
"""Fixed descriptor length (category element included) per category."""

HAND_SIZE = 5
MAX_CARDS = 7
_WHEEL = (14, 5, 4, 3, 2)


# ── Comparator ────────────────────────────────────────────────────


def compare_ranks(a: Sequence[int], b: Sequence[int]) -> int:
    """Lexicographic comparison, missing trailing elements count as 0.

    Returns ``1`` if *a* beats *b*, ``-1`` if it loses, ``0`` on a tie.
    """
    for left, right in zip_longest(a, b, fillvalue=0):
        if left != right:
            return 1 if left > right else -1
    return 0


rank_key = cmp_to_key(compare_ranks)
"""Sort / ``max`` key implementing :func:`compare_ranks`."""


# ── Combination memo ──────────────────────────────────────────────


class CombinationTable:
    """Lazily-filled table of index combinations keyed by ``(n, k)``.

    Each entry is computed once and stored as an immutable tuple of
    tuples, so concurrent readers never see a partially built entry.
    """

    def __init__(self) -> None:
        self._table: dict[tuple[int, int], tuple[tuple[int, ...], ...]] = {}
        self._lock = threading.Lock()

    def get(self, n: int, k: int) -> tuple[tuple[int, ...], ...]:
        key = (n, k)
        cached = self._table.get(key)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._table.get(key)
            if cached is None:
                cached = tuple(combinations(range(n), k))
                self._table[key] = cached
            return cached

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: object) -> bool:
        return key in self._table


# ── Helpers on plain ints ─────────────────────────────────────────


def straight_high(values: Sequence[int]) -> int | None:
    """Highest straight top card among *values*, or ``None``.

    The wheel (A-2-3-4-5) counts as a 5-high straight; that is the only
    place the ace plays low.
    """
    distinct = set(values)
    for high in range(14, 5, -1):
        if all(high - offset in distinct for offset in range(5)):
            return high
    if all(value in distinct for value in _WHEEL):
        return 5
    return None


def _score_five(values: Sequence[int], suits: Sequence[str]) -> HandRank:
    counts = Counter(values)
    is_flush = len(set(suits)) == 1
    high = straight_high(values) if len(counts) == HAND_SIZE else None

    if is_flush and high is not None:
        return (HandCategory.STRAIGHT_FLUSH, high)

    # (count, rank) descending puts groups first, then kickers high to low
    groups = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    ordered = tuple(rank for rank, _ in groups)
    top_count = groups[0][1]

    if top_count == 4:
        return (HandCategory.FOUR_OF_A_KIND, *ordered)
    if top_count == 3 and groups[1][1] == 2:
        return (HandCategory.FULL_HOUSE, *ordered)
    if is_flush:
        return (HandCategory.FLUSH, *sorted(values, reverse=True))
    if high is not None:
        return (HandCategory.STRAIGHT, high)
    if top_count == 3:
        return (HandCategory.THREE_OF_A_KIND, *ordered)
    if top_count == 2 and groups[1][1] == 2:
        return (HandCategory.TWO_PAIR, *ordered)
    if top_count == 2:
        return (HandCategory.ONE_PAIR, *ordered)
    return (HandCategory.HIGH_CARD, *ordered)


def _ensure_distinct(cards: Sequence[Card]) -> None:
    if len(set(cards)) != len(cards):
        repeated = [card for card, count in Counter(cards).items() if count > 1]
        raise DuplicateCardError(repeated)


# ── Evaluator ─────────────────────────────────────────────────────


class HandEvaluator:
    """Classifies 5 to 7 cards into hand-rank descriptors.

    Owns the :class:`CombinationTable` used for best-hand selection.
    """

    def __init__(self, combinations_table: CombinationTable | None = None) -> None:
        self.combinations = combinations_table or CombinationTable()

    def evaluate_five(self, cards: Sequence[Card]) -> HandRank:
        """Rank exactly five distinct cards."""
        if len(cards) != HAND_SIZE:
            raise InvalidArityError("A five-card hand", "exactly 5", len(cards))
        _ensure_distinct(cards)
        return _score_five([card.rank.value for card in cards], [card.suit.value for card in cards])

    def evaluate_seven(self, cards: Sequence[Card]) -> HandRank:
        """Best five-card descriptor among all 5-card subsets of *cards*.

        Accepts 5 to 7 distinct cards (21 subsets for seven).
        """
        if not HAND_SIZE <= len(cards) <= MAX_CARDS:
            raise InvalidArityError("Best-hand selection", "5 to 7", len(cards))
        _ensure_distinct(cards)
        return self.best_of(cards)

    def best_of(self, cards: Sequence[Card]) -> HandRank:
        """Like :meth:`evaluate_seven` without the duplicate check (simulator hot path)."""
        if len(cards) < HAND_SIZE:
            raise InvalidArityError("Best-hand selection", "at least 5", len(cards))
        values = [card.rank.value for card in cards]
        suits = [card.suit.value for card in cards]
        first, *rest = self.combinations.get(len(cards), HAND_SIZE)
        best = _score_five([values[i] for i in first], [suits[i] for i in first])
        for combo in rest:
            rank = _score_five([values[i] for i in combo], [suits[i] for i in combo])
            if compare_ranks(rank, best) > 0:
                best = rank
        return best

    def classify_partial_hand(self, cards: Sequence[Card]) -> str:
        """Human label for 0 to 7 cards (e.g. ``"One Pair"``).

        Below five cards only rank multiplicities are counted; from five
        cards on the best five-card hand is evaluated.
        """
        if len(cards) > MAX_CARDS:
            raise InvalidArityError("A partial hand", "at most 7", len(cards))
        _ensure_distinct(cards)
        if len(cards) >= HAND_SIZE:
            return HandCategory(self.best_of(cards)[0]).label

        multiplicities = sorted(Counter(card.rank for card in cards).values(), reverse=True)
        if not multiplicities:
            return HandCategory.HIGH_CARD.label
        if multiplicities[0] == 4:
            return HandCategory.FOUR_OF_A_KIND.label
        if multiplicities[0] == 3:
            return HandCategory.THREE_OF_A_KIND.label
        if multiplicities[0] == 2 and len(multiplicities) > 1 and multiplicities[1] == 2:
            return HandCategory.TWO_PAIR.label
        if multiplicities[0] == 2:
            return HandCategory.ONE_PAIR.label
        return HandCategory.HIGH_CARD.label


# ── Readable descriptions ─────────────────────────────────────────

_RANK_NAMES: dict[int, str] = {
    2: "Two", 3: "Three", 4: "Four", 5: "Five", 6: "Six", 7: "Seven",
    8: "Eight", 9: "Nine", 10: "Ten", 11: "Jack", 12: "Queen", 13: "King", 14: "Ace",
}


def _plural(value: int) -> str:
    name = _RANK_NAMES[value]
    return "Sixes" if name == "Six" else f"{name}s"


def describe_rank(rank: Sequence[int]) -> str:
    """Render a descriptor, e.g. ``"Full House, Kings full of Twos"``."""
    category = HandCategory(rank[0])
    values = list(rank[1:])
    if category in (HandCategory.STRAIGHT_FLUSH, HandCategory.STRAIGHT):
        if category is HandCategory.STRAIGHT_FLUSH and values[0] == Rank.ACE:
            return "Straight Flush, Royal"
        return f"{category.label}, {_RANK_NAMES[values[0]]} high"
    if category is HandCategory.FOUR_OF_A_KIND:
        return f"Four of a Kind, {_plural(values[0])}"
    if category is HandCategory.FULL_HOUSE:
        return f"Full House, {_plural(values[0])} full of {_plural(values[1])}"
    if category is HandCategory.THREE_OF_A_KIND:
        return f"Three of a Kind, {_plural(values[0])}"
    if category is HandCategory.TWO_PAIR:
        return f"Two Pair, {_plural(values[0])} and {_plural(values[1])}"
    if category is HandCategory.ONE_PAIR:
        return f"One Pair, {_plural(values[0])}"
    return f"{category.label}, {_RANK_NAMES[values[0]]} high"


default_evaluator = HandEvaluator()


def evaluate_five(cards: Sequence[Card]) -> HandRank:
    return default_evaluator.evaluate_five(cards)


def evaluate_seven(cards: Sequence[Card]) -> HandRank:
    return default_evaluator.evaluate_seven(cards)


def classify_partial_hand(cards: Sequence[Card]) -> str:
    return default_evaluator.classify_partial_hand(cards)
