"""Trial-local deck with O(1) random draws.

The deck owns a fixed-size array of the cards left after excluding every
known card.  Drawing picks a random live slot, swaps it with the last
live slot and shrinks the live length.  :meth:`TrialDeck.reset` restores
the full live length, which brings back exactly the same set of cards
(only their order differs), so one instance serves every trial of a
worker without reallocating.
"""

from __future__ import annotations

import random
from typing import Iterable

from floplab.core.cards import Card, build_deck
from floplab.core.errors import DeckExhaustedError


class TrialDeck:
    """Remaining cards for one worker's trials.

    Not thread-safe: every worker owns its own instance.
    """

    __slots__ = ("_cards", "_live")

    def __init__(self, excluded: Iterable[Card] = ()) -> None:
        self._cards: list[Card] = build_deck(excluded)
        self._live = len(self._cards)

    def __len__(self) -> int:
        return self._live

    @property
    def capacity(self) -> int:
        return len(self._cards)

    def reset(self) -> None:
        """Make every owned card drawable again."""
        self._live = len(self._cards)

    def draw(self, rng: random.Random) -> Card:
        """Remove and return a uniformly random live card."""
        if self._live <= 0:
            raise DeckExhaustedError("Cannot draw from an empty deck")
        pick = rng.randrange(self._live)
        self._live -= 1
        last = self._live
        cards = self._cards
        cards[pick], cards[last] = cards[last], cards[pick]
        return cards[last]

    def draw_many(self, count: int, rng: random.Random) -> list[Card]:
        return [self.draw(rng) for _ in range(count)]

    def remaining(self) -> list[Card]:
        """Snapshot of the live cards (unordered)."""
        return self._cards[: self._live]
