"""floplab command line.

Usage::

    floplab equity --hero AhKh --players 2
    floplab equity --hero 2c2d --board 2h 2s Ks Qd Jd --players 6 --iterations 1000
    floplab equity --hero AsAd --opponent KcKh --players 3 --workers 4 --seed 7
    floplab classify Ah Ad Kc
    floplab deck --exclude Ah Kd

Environment variables
---------------------
``FLOPLAB_ENGINE_ITERATIONS``   Default trial count (``5000``).
``FLOPLAB_ENGINE_WORKERS``      Worker processes (``1``).
``FLOPLAB_ENGINE_SEED``         Base RNG seed (unset = random).
``FLOPLAB_NO_COLOR``            ``1`` disables ANSI colours.
"""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from floplab.core.cards import build_deck, format_cards, parse_cards
from floplab.core.errors import EquityInputError
from floplab.core.evaluator import classify_partial_hand, describe_rank, evaluate_seven
from floplab.core.math_engine import MathEngine
from floplab.utils.config import EngineConfig
from floplab.utils.logger import FlopLogger

EXIT_INPUT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="floplab", description="Texas Hold'em Monte-Carlo equity calculator.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    equity = sub.add_parser("equity", help="Estimate hero's equity against the field.")
    equity.add_argument("--hero", nargs="+", required=True, help="Hero hole cards, e.g. 'Ah Kh' or 'AhKh'.")
    equity.add_argument("--board", nargs="*", default=[], help="Zero to five community cards.")
    equity.add_argument("--players", type=int, default=2, help="Players at the table, hero included (2-9).")
    equity.add_argument(
        "--opponent",
        action="append",
        default=[],
        metavar="CARDS",
        help="Known opponent hand, e.g. 'QsQd'. Repeat for several opponents.",
    )
    equity.add_argument("--iterations", type=int, default=None, help="Monte-Carlo trials.")
    equity.add_argument("--workers", type=int, default=None, help="Worker processes.")
    equity.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs.")

    classify = sub.add_parser("classify", help="Label the best hand made by 0-7 cards.")
    classify.add_argument("cards", nargs="*")

    deck = sub.add_parser("deck", help="List the cards left after excluding some.")
    deck.add_argument("--exclude", nargs="*", default=[])
    return parser


def _split_cards(tokens: Sequence[str]) -> list[str]:
    """Accept both ``Ah Kh`` and ``AhKh`` forms (and ``10h``)."""
    cards: list[str] = []
    for token in tokens:
        text = token.strip().replace(",", " ")
        for chunk in text.split():
            while chunk:
                size = 3 if chunk.startswith("10") else 2
                cards.append(chunk[:size])
                chunk = chunk[size:]
    return cards


def _cmd_equity(args: argparse.Namespace) -> int:
    log = FlopLogger("Equity")
    hero = parse_cards(_split_cards(args.hero))
    board = parse_cards(_split_cards(args.board))
    opponents = [parse_cards(_split_cards([hand])) for hand in args.opponent]

    engine = MathEngine(EngineConfig())
    result = engine.estimate_equity(
        hero,
        board,
        args.players,
        opponents,
        args.iterations,
        seed=args.seed,
        workers=args.workers,
    )

    log.info(f"Hero {format_cards(hero, pretty=True)} | Board {format_cards(board, pretty=True) or '-'}")
    log.success(f"Equity {result.equity * 100:.2f}% (+/- {result.std_error * 100:.2f}%)")
    log.status(
        f"win {result.win_rate * 100:.2f}% | tie {result.tie_rate * 100:.2f}% | "
        f"{result.iterations:,} iterations | {args.players} players"
    )
    if len(board) >= 3:
        log.status(f"Made hand: {describe_rank(evaluate_seven(hero + board))}")
    else:
        log.status(f"Made hand: {classify_partial_hand(hero + board)}")
    return 0


def _cmd_classify(args: argparse.Namespace) -> int:
    cards = parse_cards(_split_cards(args.cards))
    FlopLogger("Hand").info(classify_partial_hand(cards))
    return 0


def _cmd_deck(args: argparse.Namespace) -> int:
    excluded = parse_cards(_split_cards(args.exclude))
    remaining = build_deck(excluded)
    log = FlopLogger("Deck")
    log.info(f"{len(remaining)} cards")
    log.status(format_cards(remaining))
    return 0


_COMMANDS = {
    "equity": _cmd_equity,
    "classify": _cmd_classify,
    "deck": _cmd_deck,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    try:
        return _COMMANDS[args.command](args)
    except EquityInputError as exc:
        FlopLogger("Equity").error(str(exc))
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
