"""Slot-based card entry model for a single showdown.

Mirrors what a card-entry front end holds: two hero slots, five board
slots and two slots per known opponent.  Every setter checks the new
card against all other slots *before* writing, so a rejected card leaves
the state exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Iterable

from floplab.core.cards import DECK_SIZE, Card
from floplab.core.errors import DuplicateCardError, InvalidArityError
from floplab.core.evaluator import classify_partial_hand
from floplab.core.math_engine import (
    BOARD_SIZE,
    HOLE_CARDS,
    MAX_PLAYERS,
    MIN_PLAYERS,
    EquityRequest,
)

_log = logging.getLogger("floplab.table")

Slot = Card | None


def _compact(slots: Iterable[Slot]) -> list[Card]:
    return [card for card in slots if card is not None]


class TableState:
    """Hero, board and known-opponent slots plus the player count."""

    def __init__(self, num_players: int = 6) -> None:
        self.num_players = self._clamp_players(num_players)
        self.hero: list[Slot] = [None] * HOLE_CARDS
        self.board: list[Slot] = [None] * BOARD_SIZE
        self.opponents: list[list[Slot]] = []

    @staticmethod
    def _clamp_players(count: int) -> int:
        return min(MAX_PLAYERS, max(MIN_PLAYERS, int(count)))

    # ── Card slots ────────────────────────────────────────────────

    def _occupied_except(self, target: list[Slot], index: int) -> set[Card]:
        occupied: set[Card] = set()
        for slots in (self.hero, self.board, *self.opponents):
            for position, card in enumerate(slots):
                if card is not None and not (slots is target and position == index):
                    occupied.add(card)
        return occupied

    def _set(self, slots: list[Slot], index: int, card: Card) -> None:
        if not 0 <= index < len(slots):
            raise IndexError(f"Slot index {index} out of range [0, {len(slots) - 1}]")
        if card in self._occupied_except(slots, index):
            _log.debug("Rejected duplicate %s", card)
            raise DuplicateCardError([card])
        slots[index] = card

    def set_hero_card(self, index: int, card: Card) -> None:
        self._set(self.hero, index, card)

    def set_board_card(self, index: int, card: Card) -> None:
        self._set(self.board, index, card)

    def set_opponent_card(self, hand_index: int, index: int, card: Card) -> None:
        self._set(self.opponents[hand_index], index, card)

    def clear_hero_card(self, index: int) -> None:
        self.hero[index] = None

    def clear_board_card(self, index: int) -> None:
        self.board[index] = None

    def clear_opponent_card(self, hand_index: int, index: int) -> None:
        self.opponents[hand_index][index] = None

    def clear(self) -> None:
        self.hero = [None] * HOLE_CARDS
        self.board = [None] * BOARD_SIZE
        self.opponents = [[None] * HOLE_CARDS for _ in self.opponents]

    # ── Table size ────────────────────────────────────────────────

    def set_num_players(self, count: int) -> None:
        """Clamp to ``[2, 9]`` and drop known opponents that no longer fit."""
        self.num_players = self._clamp_players(count)
        if len(self.opponents) > self.num_players - 1:
            self.set_known_opponents_count(self.num_players - 1)

    def set_known_opponents_count(self, count: int) -> None:
        """Clamp to ``[0, num_players - 1]``; add empty hands or drop trailing ones."""
        target = min(self.num_players - 1, max(0, int(count)))
        while len(self.opponents) < target:
            self.opponents.append([None] * HOLE_CARDS)
        del self.opponents[target:]

    # ── Derived views ─────────────────────────────────────────────

    @property
    def known_opponents_count(self) -> int:
        return len(self.opponents)

    @property
    def used_cards(self) -> int:
        """Assigned cards, shown as ``used / 52``."""
        return len(self.all_cards())

    @property
    def deck_size(self) -> int:
        return DECK_SIZE

    def all_cards(self) -> list[Card]:
        return _compact(self.hero) + _compact(self.board) + [
            card for hand in self.opponents for card in _compact(hand)
        ]

    @property
    def can_calculate(self) -> bool:
        """Hero and every known opponent hold two cards."""
        if len(_compact(self.hero)) != HOLE_CARDS:
            return False
        return all(len(_compact(hand)) == HOLE_CARDS for hand in self.opponents)

    def to_request(self) -> EquityRequest:
        """Build a validated :class:`EquityRequest` from the filled slots."""
        hero = _compact(self.hero)
        if len(hero) != HOLE_CARDS:
            raise InvalidArityError("Hero hand", "exactly 2", len(hero))
        return EquityRequest.build(
            hero,
            _compact(self.board),
            self.num_players,
            [_compact(hand) for hand in self.opponents],
        )

    def hand_label(self) -> str:
        """Current best-hand label for hero plus board."""
        return classify_partial_hand(_compact(self.hero) + _compact(self.board))
