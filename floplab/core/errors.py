"""Error hierarchy for the equity engine.

Input-validation failures all derive from :class:`EquityInputError` (a
``ValueError``) and are raised before any Monte-Carlo trial runs.  The
caller is expected to block the run and surface the message.

:class:`DeckExhaustedError` is different: it signals a broken internal
invariant (drawing from an empty deck) and is never a user error.
"""

from __future__ import annotations

from typing import Iterable


class EquityInputError(ValueError):
    """Base class for every rejected engine input."""


class InvalidCardError(EquityInputError):
    """A card string could not be parsed."""

    def __init__(self, text: object) -> None:
        super().__init__(f"Invalid card: {text!r}")
        self.text = text


class InvalidArityError(EquityInputError):
    """A hand (or the board) does not hold the required number of cards."""

    def __init__(self, owner: str, expected: str, actual: int) -> None:
        super().__init__(f"{owner} must have {expected} card(s), got {actual}")
        self.owner = owner
        self.expected = expected
        self.actual = actual


class DuplicateCardError(EquityInputError):
    """The same card appears more than once across hero, board and opponents."""

    def __init__(self, cards: Iterable[object]) -> None:
        self.cards = tuple(cards)
        listed = ", ".join(str(card) for card in self.cards)
        super().__init__(f"Duplicate card detected: {listed}")


class TooManyOpponentsError(EquityInputError):
    """More known opponent hands than seats left at the table."""

    def __init__(self, known: int, num_players: int) -> None:
        super().__init__(
            f"{known} known opponent hand(s) exceed the {num_players - 1} "
            f"seat(s) available with {num_players} players"
        )
        self.known = known
        self.num_players = num_players


class InvalidPlayerCountError(EquityInputError):
    """Player count outside the supported ``[2, 9]`` range."""

    def __init__(self, num_players: object, minimum: int, maximum: int) -> None:
        super().__init__(f"Player count must be in [{minimum}, {maximum}], got {num_players}")
        self.num_players = num_players


class InvalidIterationCountError(EquityInputError):
    """Non-positive Monte-Carlo iteration count."""

    def __init__(self, iterations: object) -> None:
        super().__init__(f"Iterations must be a positive integer, got {iterations}")
        self.iterations = iterations


class DeckExhaustedError(RuntimeError):
    """Raised when a trial tries to draw from an empty deck."""
