"""Provide the public `flowstate_kanban` package exports."""

from __future__ import annotations

from .board.engine import BoardEngine

__all__ = ["BoardEngine"]
