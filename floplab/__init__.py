"""floplab: Texas Hold'em hand evaluation and Monte-Carlo equity."""

from __future__ import annotations

from floplab.core.cards import Card, Rank, Suit, build_deck
from floplab.core.evaluator import (
    HandCategory,
    classify_partial_hand,
    compare_ranks,
    evaluate_five,
    evaluate_seven,
)
from floplab.core.math_engine import EquityRequest, EquityResult, MathEngine, estimate_equity

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "build_deck",
    "HandCategory",
    "classify_partial_hand",
    "compare_ranks",
    "evaluate_five",
    "evaluate_seven",
    "EquityRequest",
    "EquityResult",
    "MathEngine",
    "estimate_equity",
]

__version__ = "0.1.0"
