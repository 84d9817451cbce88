"""
Data models for the L2 chat client.
"""
from .turn import Role, ToolCall, Turn
from .stats import UsageStats

__all__ = ["Role", "ToolCall", "Turn", "UsageStats"]
