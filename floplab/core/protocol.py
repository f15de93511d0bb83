"""Shared protocol for cancellation tokens.

Kept apart from the simulator so token implementations and tests can
type against it without importing the engine.
"""

from __future__ import annotations

from typing import Protocol


class SupportsCancel(Protocol):
    """Anything that can report a cancellation request.

    Implementations:
    * :class:`threading.Event` (in-process runs)
    * ``multiprocessing.Manager().Event()`` proxies (process-pool workers)
    """

    def is_set(self) -> bool:
        """Return ``True`` once the run should stop."""
        ...
