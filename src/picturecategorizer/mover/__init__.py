"""Mover module for sorting files into class folders."""

from .mover import FileMover, LabelRejectedError, MoveResult

__all__ = [
    "FileMover",
    "MoveResult",
    "LabelRejectedError",
]
