"""Card model and deck builder.

A :class:`Card` is an immutable ``(Rank, Suit)`` pair; exactly 52
distinct values exist.  Ranks carry their ordinal value (``2``–``14``,
ace high) so the evaluator can work on plain integers.

Index encoding: ``index = rank_idx * 4 + suit_idx`` where rank order is
``'23456789TJQKA'`` and suit order is ``'shdc'``.

The canonical deck order used by :func:`build_deck` is suit-major
(spades, hearts, diamonds, clubs), rank-minor (``2`` → ``A``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable

from floplab.core.errors import InvalidCardError


class Rank(IntEnum):
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def symbol(self) -> str:
        return RANK_SYMBOLS[self.value - 2]

    @classmethod
    def from_symbol(cls, symbol: str) -> "Rank":
        index = RANK_SYMBOLS.find(symbol.upper())
        if index < 0 or len(symbol) != 1:
            raise InvalidCardError(symbol)
        return cls(index + 2)


class Suit(str, Enum):
    SPADES = "s"
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"

    @property
    def glyph(self) -> str:
        return _SUIT_GLYPHS[self.value]

    @property
    def color(self) -> str:
        """``"red"`` for hearts/diamonds, ``"black"`` otherwise."""
        return "red" if self in (Suit.HEARTS, Suit.DIAMONDS) else "black"


RANK_SYMBOLS = "23456789TJQKA"
"""Ordered rank characters. Position + 2 is the rank's ordinal value."""

SUIT_SYMBOLS = "shdc"
"""Ordered suit characters (spades, hearts, diamonds, clubs)."""

_SUIT_GLYPHS: dict[str, str] = {"s": "♠", "h": "♥", "d": "♦", "c": "♣"}
_GLYPH_SUITS: dict[str, str] = {glyph: suit for suit, glyph in _SUIT_GLYPHS.items()}

DECK_SIZE = 52


@dataclass(frozen=True, slots=True)
class Card:
    """A single playing card.

    Attributes:
        rank: Card rank (ordinal ``2``–``14``).
        suit: Card suit; only relevant for flush detection.
    """

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank.symbol}{self.suit.value}"

    def __repr__(self) -> str:
        return f"Card({str(self)!r})"

    def pretty(self) -> str:
        """Display form with the suit glyph (e.g. ``'A♥'``)."""
        return f"{self.rank.symbol}{self.suit.glyph}"

    @property
    def index(self) -> int:
        return (self.rank.value - 2) * len(SUIT_SYMBOLS) + SUIT_SYMBOLS.index(self.suit.value)

    @classmethod
    def from_index(cls, index: int) -> "Card":
        if not 0 <= index < DECK_SIZE:
            raise ValueError(f"Card index out of range [0, 51]: {index}")
        rank_idx, suit_idx = divmod(index, len(SUIT_SYMBOLS))
        return cls(Rank(rank_idx + 2), Suit(SUIT_SYMBOLS[suit_idx]))

    @classmethod
    def parse(cls, text: str) -> "Card":
        """Parse ``'Ah'``, ``'10h'``, ``'aH'``, ``' A♥ '`` and similar.

        Raises :class:`InvalidCardError` if *text* is not a card.
        """
        normalized = normalize_card(text)
        if normalized is None:
            raise InvalidCardError(text)
        return cls(Rank.from_symbol(normalized[0]), Suit(normalized[1]))


# ── Normalisation ─────────────────────────────────────────────────


def normalize_card(text: object) -> str | None:
    """Normalise a card string to canonical ``Xs`` format.

    Accepts ``"10h"`` → ``"Th"``, ``"aS"`` → ``"As"``, ``"K♦"`` → ``"Kd"``.
    Returns ``None`` if the input is not a valid card.
    """
    if not isinstance(text, str):
        return None
    cleaned = text.strip().upper().replace("10", "T")
    if len(cleaned) != 2:
        return None
    rank = cleaned[0]
    suit = _GLYPH_SUITS.get(cleaned[1], cleaned[1].lower())
    if rank not in RANK_SYMBOLS or suit not in SUIT_SYMBOLS:
        return None
    return f"{rank}{suit}"


def parse_cards(items: Iterable[str | Card]) -> list[Card]:
    """Parse card strings, passing through values that are already cards."""
    return [item if isinstance(item, Card) else Card.parse(item) for item in items]


def format_cards(cards: Iterable[Card], pretty: bool = False) -> str:
    return " ".join(card.pretty() if pretty else str(card) for card in cards)


# ── Deck builder ──────────────────────────────────────────────────


FULL_DECK: tuple[Card, ...] = tuple(
    Card(rank, suit) for suit in Suit for rank in Rank
)
"""All 52 cards in canonical suit-major, rank-minor order."""


def build_deck(excluded: Iterable[Card] = ()) -> list[Card]:
    """Return every card not in *excluded*, in canonical order.

    Pure: no randomness, *excluded* is not modified.  The result holds
    ``52 - len(set(excluded))`` distinct cards.
    """
    blocked = set(excluded)
    return [card for card in FULL_DECK if card not in blocked]
