"""Runtime configuration for the equity engine.

Defaults are read through :mod:`floplab.utils.settings` at construction
time, so ``FLOPLAB_*`` environment variables (or ``floplab.yaml``) apply
to every new instance.  Override individual fields from code (e.g. in
tests).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from floplab.utils.settings import settings


@dataclass(slots=True)
class EngineConfig:
    """Monte-Carlo engine configuration.

    NOTE: All fields use ``default_factory`` so that environment variables
    are read at **instantiation** time, not at import time.  This keeps
    ``monkeypatch.setenv`` in tests working.

    Attributes:
        iterations:    Default trials per run.
        workers:       Worker processes; ``1`` runs in the calling thread.
        seed:          Base RNG seed, ``None`` for OS entropy.
        poll_interval: Seconds between cancellation checks in the parent
                       of a process-pool run.
        min_batch:     Smallest per-worker share worth a process.
    """

    iterations: int = field(default_factory=lambda: settings.get_int("engine.iterations", 5000))
    workers: int = field(default_factory=lambda: settings.get_int("engine.workers", 1))
    seed: int | None = field(default_factory=lambda: settings.get_optional_int("engine.seed"))
    poll_interval: float = field(default_factory=lambda: settings.get_float("engine.poll_interval", 0.05))
    min_batch: int = field(default_factory=lambda: settings.get_int("engine.min_batch", 250))

    def __post_init__(self) -> None:
        self.iterations = max(1, int(self.iterations))
        self.workers = max(1, int(self.workers))
        self.poll_interval = max(0.001, float(self.poll_interval))
        self.min_batch = max(1, int(self.min_batch))

    def effective_workers(self, iterations: int) -> int:
        """Worker count for *iterations* trials, keeping each share >= ``min_batch``."""
        return max(1, min(self.workers, iterations // self.min_batch))
