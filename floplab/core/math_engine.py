"""Monte-Carlo equity engine.

Each trial completes the unknown cards at random and scores one
showdown:

1. Reset the worker's :class:`TrialDeck` (52 minus every known card).
2. Deal two cards to each unknown opponent.
3. Deal the board out to five cards.
4. Rank hero and every opponent with the best-of-7 selector.
5. Credit hero ``1 / winners`` when hero is among the best hands.

``equity = sum(credits) / trials``.

Trials share nothing but the running tally.  With ``workers > 1`` the
trials are split across a :class:`~concurrent.futures.ProcessPoolExecutor`;
every worker owns its deck, its RNG (seeded from a
:class:`numpy.random.SeedSequence` child) and its partial tally, and the
parent sums the tallies once at the end.

Cancellation is cooperative and checked between trials, never mid-trial.
"""

from __future__ import annotations

from concurrent.futures import FIRST_COMPLETED, ProcessPoolExecutor, wait
from dataclasses import dataclass
import logging
from math import sqrt
import multiprocessing
import random
import time
from typing import Iterable, Sequence

import numpy as np

from floplab.core.cards import Card, parse_cards
from floplab.core.deck import TrialDeck
from floplab.core.errors import (
    DuplicateCardError,
    InvalidArityError,
    InvalidIterationCountError,
    InvalidPlayerCountError,
    TooManyOpponentsError,
)
from floplab.core.evaluator import HandEvaluator, compare_ranks, default_evaluator
from floplab.core.protocol import SupportsCancel
from floplab.utils.config import EngineConfig

_log = logging.getLogger("floplab.engine")

MIN_PLAYERS = 2
MAX_PLAYERS = 9
HOLE_CARDS = 2
BOARD_SIZE = 5


def _whole_number(value: object) -> int | None:
    """``value`` as an ``int`` when it is integral, else ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def validate_iterations(iterations: object) -> int:
    """Return *iterations* as a positive ``int`` or raise :class:`InvalidIterationCountError`."""
    total = _whole_number(iterations)
    if total is None or total < 1:
        raise InvalidIterationCountError(iterations)
    return total


# ── Inputs / outputs ──────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class EquityRequest:
    """Validated simulation input.

    Attributes:
        hero:            Hero's two hole cards.
        board:           Zero to five community cards.
        num_players:     Players at the table, hero included.
        known_opponents: Opponent hands whose cards are known.
    """

    hero: tuple[Card, ...]
    board: tuple[Card, ...]
    num_players: int
    known_opponents: tuple[tuple[Card, ...], ...]

    @classmethod
    def build(
        cls,
        hero: Iterable[str | Card],
        board: Iterable[str | Card] = (),
        num_players: int = MIN_PLAYERS,
        known_opponents: Iterable[Iterable[str | Card]] = (),
    ) -> "EquityRequest":
        """Parse and validate inputs; raise before any trial can run."""
        hero_cards = tuple(parse_cards(hero))
        board_cards = tuple(parse_cards(board))
        opponents = tuple(tuple(parse_cards(hand)) for hand in known_opponents)

        if len(hero_cards) != HOLE_CARDS:
            raise InvalidArityError("Hero hand", "exactly 2", len(hero_cards))
        for seat, hand in enumerate(opponents, start=1):
            if len(hand) != HOLE_CARDS:
                raise InvalidArityError(f"Known opponent {seat}", "exactly 2", len(hand))
        if len(board_cards) > BOARD_SIZE:
            raise InvalidArityError("Board", "at most 5", len(board_cards))

        players = _whole_number(num_players)
        if players is None or not MIN_PLAYERS <= players <= MAX_PLAYERS:
            raise InvalidPlayerCountError(num_players, MIN_PLAYERS, MAX_PLAYERS)
        if len(opponents) > players - 1:
            raise TooManyOpponentsError(len(opponents), players)

        seen: set[Card] = set()
        repeated: list[Card] = []
        for card in (*hero_cards, *board_cards, *(card for hand in opponents for card in hand)):
            if card in seen and card not in repeated:
                repeated.append(card)
            seen.add(card)
        if repeated:
            raise DuplicateCardError(repeated)

        return cls(hero=hero_cards, board=board_cards, num_players=players, known_opponents=opponents)

    @property
    def unknown_opponents(self) -> int:
        return max(self.num_players - 1 - len(self.known_opponents), 0)

    @property
    def known_cards(self) -> tuple[Card, ...]:
        return (*self.hero, *self.board, *(card for hand in self.known_opponents for card in hand))


@dataclass(frozen=True, slots=True)
class EquityResult:
    """Outcome of one simulation run.

    Attributes:
        equity:     Mean trial credit in ``[0, 1]`` (ties split).
        iterations: Trials actually completed.
        win_rate:   Fraction of trials hero won outright.
        tie_rate:   Fraction of trials hero split the pot.
        std_error:  Standard error of the per-trial credit.
        cancelled:  ``True`` when the run stopped before all trials.
    """

    equity: float
    iterations: int
    win_rate: float = 0.0
    tie_rate: float = 0.0
    std_error: float = 0.0
    cancelled: bool = False


@dataclass(slots=True)
class _Tally:
    credit: float = 0.0
    credit_sq: float = 0.0
    wins: int = 0
    ties: int = 0
    trials: int = 0

    def add(self, credit: float) -> None:
        self.credit += credit
        self.credit_sq += credit * credit
        self.trials += 1
        if credit == 1.0:
            self.wins += 1
        elif credit > 0.0:
            self.ties += 1

    def merge(self, other: "_Tally") -> None:
        self.credit += other.credit
        self.credit_sq += other.credit_sq
        self.wins += other.wins
        self.ties += other.ties
        self.trials += other.trials

    def to_result(self, cancelled: bool) -> EquityResult:
        n = self.trials
        if n == 0:
            return EquityResult(equity=0.0, iterations=0, cancelled=cancelled)
        mean = self.credit / n
        std_error = 0.0
        if n > 1:
            variance = max(self.credit_sq - n * mean * mean, 0.0) / (n - 1)
            std_error = sqrt(variance / n)
        return EquityResult(
            equity=mean,
            iterations=n,
            win_rate=self.wins / n,
            tie_rate=self.ties / n,
            std_error=std_error,
            cancelled=cancelled,
        )


# ── Trial loop ────────────────────────────────────────────────────


def _run_trial(
    request: EquityRequest,
    deck: TrialDeck,
    rng: random.Random,
    evaluator: HandEvaluator,
) -> float:
    deck.reset()

    opponents: list[Sequence[Card]] = list(request.known_opponents)
    for _ in range(request.unknown_opponents):
        opponents.append((deck.draw(rng), deck.draw(rng)))

    board = list(request.board)
    while len(board) < BOARD_SIZE:
        board.append(deck.draw(rng))

    best = evaluator.best_of([*request.hero, *board])
    winners = 1
    hero_in = True
    for hand in opponents:
        rank = evaluator.best_of([*hand, *board])
        outcome = compare_ranks(rank, best)
        if outcome > 0:
            best = rank
            winners = 1
            hero_in = False
        elif outcome == 0:
            winners += 1

    return 1.0 / winners if hero_in else 0.0


def _run_batch(
    request: EquityRequest,
    trials: int,
    rng: random.Random,
    evaluator: HandEvaluator,
    cancel: SupportsCancel | None = None,
) -> _Tally:
    deck = TrialDeck(request.known_cards)
    tally = _Tally()
    for _ in range(trials):
        if cancel is not None and cancel.is_set():
            break
        tally.add(_run_trial(request, deck, rng, evaluator))
    return tally


def _run_worker_batch(
    request: EquityRequest,
    trials: int,
    seed: int,
    cancel: SupportsCancel | None,
) -> _Tally:
    """Process-pool entry point: owns its RNG, deck and tally."""
    return _run_batch(request, trials, random.Random(seed), default_evaluator, cancel)


def spawn_seeds(seed: int | None, count: int) -> list[int]:
    """Derive *count* independent integer seeds from one base seed."""
    children = np.random.SeedSequence(seed).spawn(count)
    return [int(child.generate_state(1, dtype=np.uint64)[0]) for child in children]


def split_trials(iterations: int, workers: int) -> list[int]:
    base, extra = divmod(iterations, workers)
    return [base + (1 if index < extra else 0) for index in range(workers)]


# ── Engine ────────────────────────────────────────────────────────


class MathEngine:
    """Monte-Carlo equity calculator.

    Stateless between runs: every call builds its own tally, so two
    overlapping runs never write into the same accumulator.
    """

    def __init__(self, config: EngineConfig | None = None, evaluator: HandEvaluator | None = None) -> None:
        self.config = config or EngineConfig()
        self.evaluator = evaluator or default_evaluator

    def estimate_equity(
        self,
        hero: Iterable[str | Card],
        board: Iterable[str | Card] = (),
        num_players: int = MIN_PLAYERS,
        known_opponents: Iterable[Iterable[str | Card]] = (),
        iterations: int | None = None,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        cancel: SupportsCancel | None = None,
        workers: int | None = None,
    ) -> EquityResult:
        """Validate inputs and estimate hero's equity.

        Args:
            hero:            Hero's two hole cards (``Card`` or ``"Ah"``).
            board:           Zero to five community cards.
            num_players:     Players at the table, ``2``–``9``.
            known_opponents: Known opponent hands, two cards each.
            iterations:      Trials to run (default from config, 5000).
            seed:            Base seed for reproducible runs.
            rng:             Explicit random source; forces a sequential run.
            cancel:          Token checked between trials.
            workers:         Worker processes (default from config).

        Returns:
            :class:`EquityResult` over the trials actually completed.

        Raises:
            EquityInputError: on any invalid input, before any trial runs.
        """
        request = EquityRequest.build(hero, board, num_players, known_opponents)
        return self.run(request, iterations, seed=seed, rng=rng, cancel=cancel, workers=workers)

    def run(
        self,
        request: EquityRequest,
        iterations: int | None = None,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        cancel: SupportsCancel | None = None,
        workers: int | None = None,
    ) -> EquityResult:
        """Simulate an already validated :class:`EquityRequest`."""
        total = validate_iterations(self.config.iterations if iterations is None else iterations)
        if seed is None:
            seed = self.config.seed

        worker_count = 1
        if rng is None:
            config = self.config if workers is None else EngineConfig(
                iterations=total,
                workers=workers,
                seed=seed,
                poll_interval=self.config.poll_interval,
                min_batch=self.config.min_batch,
            )
            worker_count = config.effective_workers(total)

        started = time.perf_counter()
        if worker_count <= 1:
            source = rng if rng is not None else random.Random(seed)
            tally = _run_batch(request, total, source, self.evaluator, cancel)
        else:
            tally = self._run_parallel(request, total, worker_count, seed, cancel)

        result = tally.to_result(cancelled=tally.trials < total)
        _log.debug(
            "equity=%.4f trials=%d/%d workers=%d cancelled=%s in %.3fs",
            result.equity,
            result.iterations,
            total,
            worker_count,
            result.cancelled,
            time.perf_counter() - started,
        )
        return result

    def _run_parallel(
        self,
        request: EquityRequest,
        total: int,
        worker_count: int,
        seed: int | None,
        cancel: SupportsCancel | None,
    ) -> _Tally:
        seeds = spawn_seeds(seed, worker_count)
        shares = split_trials(total, worker_count)
        tally = _Tally()

        if cancel is None:
            with ProcessPoolExecutor(max_workers=worker_count) as pool:
                futures = [
                    pool.submit(_run_worker_batch, request, share, worker_seed, None)
                    for share, worker_seed in zip(shares, seeds)
                ]
                for future in futures:
                    tally.merge(future.result())
            return tally

        # Workers cannot see the caller's token; relay it through a manager event.
        with multiprocessing.Manager() as manager:
            shared_cancel = manager.Event()
            with ProcessPoolExecutor(max_workers=worker_count) as pool:
                futures = [
                    pool.submit(_run_worker_batch, request, share, worker_seed, shared_cancel)
                    for share, worker_seed in zip(shares, seeds)
                ]
                pending = set(futures)
                while pending:
                    if cancel.is_set() and not shared_cancel.is_set():
                        _log.info("Cancelling %d worker(s)", len(pending))
                        shared_cancel.set()
                    _, pending = wait(pending, timeout=self.config.poll_interval, return_when=FIRST_COMPLETED)
                for future in futures:
                    tally.merge(future.result())
        return tally


def estimate_equity(
    hero: Iterable[str | Card],
    board: Iterable[str | Card] = (),
    num_players: int = MIN_PLAYERS,
    known_opponents: Iterable[Iterable[str | Card]] = (),
    iterations: int | None = None,
    **kwargs: object,
) -> EquityResult:
    """Module-level shortcut for :meth:`MathEngine.estimate_equity`."""
    return MathEngine().estimate_equity(hero, board, num_players, known_opponents, iterations, **kwargs)  # type: ignore[arg-type]
