"""Background equity recomputation.

Wraps :class:`floplab.core.math_engine.MathEngine` for callers that
recompute on every input change.  Each :meth:`EquityTool.submit` cancels
the previous run's token before queuing a new one, so a stale run stops
at its next trial boundary.  Every run owns its token and its result;
overlapping runs never share an accumulator.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
import logging
import threading
from typing import Iterable

from floplab.core.cards import Card
from floplab.core.math_engine import EquityRequest, EquityResult, MathEngine, validate_iterations

_log = logging.getLogger("floplab.tools.equity")


class EquityTool:
    """Facade over :class:`MathEngine` with supersede-on-submit semantics."""

    def __init__(self, engine: MathEngine | None = None) -> None:
        self.engine = engine or MathEngine()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="floplab-equity")
        self._lock = threading.Lock()
        self._token: threading.Event | None = None
        self._future: Future[EquityResult] | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of runs submitted so far."""
        return self._generation

    def estimate(
        self,
        hero: Iterable[str | Card],
        board: Iterable[str | Card] = (),
        num_players: int = 2,
        known_opponents: Iterable[Iterable[str | Card]] = (),
        iterations: int | None = None,
        seed: int | None = None,
    ) -> EquityResult:
        """Run a simulation synchronously in the calling thread."""
        return self.engine.estimate_equity(
            hero,
            board,
            num_players,
            known_opponents,
            iterations,
            seed=seed,
        )

    def submit(
        self,
        hero: Iterable[str | Card],
        board: Iterable[str | Card] = (),
        num_players: int = 2,
        known_opponents: Iterable[Iterable[str | Card]] = (),
        iterations: int | None = None,
        seed: int | None = None,
    ) -> Future[EquityResult]:
        """Supersede any in-flight run and start a new one in the background.

        Inputs are validated here, so invalid input raises immediately and
        leaves the previous run untouched.
        """
        request = EquityRequest.build(hero, board, num_players, known_opponents)
        return self.submit_request(request, iterations, seed)

    def submit_request(
        self,
        request: EquityRequest,
        iterations: int | None = None,
        seed: int | None = None,
    ) -> Future[EquityResult]:
        """Queue *request*, cancelling the previous run once *iterations* is known to be valid."""
        if iterations is not None:
            iterations = validate_iterations(iterations)
        token = threading.Event()
        with self._lock:
            if self._token is not None and not self._token.is_set():
                _log.debug("Superseding run #%d", self._generation)
                self._token.set()
            self._generation += 1
            self._token = token
            self._future = self._executor.submit(
                self.engine.run, request, iterations, seed=seed, cancel=token
            )
            return self._future

    def cancel(self) -> None:
        """Stop the in-flight run at its next trial boundary."""
        with self._lock:
            if self._token is not None:
                self._token.set()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._future is not None and not self._future.done()

    def shutdown(self, wait: bool = True) -> None:
        self.cancel()
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "EquityTool":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
