"""Coordinate helpers mapping between a linear sub-board index and grid cells."""
from __future__ import annotations

from typing import Tuple


def index_of(row: int, col: int, size: int = 3) -> int:
    """Return the row-major index of ``(row, col)`` on a ``size`` x ``size`` grid."""

    return row * size + col


def coords_of(index: int, size: int = 3) -> Tuple[int, int]:
    return divmod(index, size)


__all__ = ["coords_of", "index_of"]
