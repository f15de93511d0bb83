from .equity_tool import EquityTool

__all__ = ["EquityTool"]
