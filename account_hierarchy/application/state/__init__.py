"""Caller-owned tree state containers."""

from .expansion import ExpansionState
from .selection import SelectionState

__all__ = ["ExpansionState", "SelectionState"]
