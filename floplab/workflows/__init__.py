from __future__ import annotations

from typing import Any

__all__ = ["TableState"]


def __getattr__(name: str) -> Any:
	if name == "TableState":
		from .table_state import TableState

		return TableState
	raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
