"""Feature encoding used by the learned value model."""
from __future__ import annotations

from typing import Iterable

import numpy as np

from .game import GameState

FEATURE_SIZE = 254  # 81 cells x 3 one-hot + 9 macro + turn + forced cell

_ONE_HOT = {None: (1.0, 0.0, 0.0), "X": (0.0, 1.0, 0.0), "O": (0.0, 0.0, 1.0)}
_MACRO = {None: 0.0, "X": -1.0, "O": 1.0}


def encode_state(state: GameState) -> np.ndarray:
    """Encode ``state`` into a flat float32 vector of :data:`FEATURE_SIZE` values."""

    features = np.zeros(FEATURE_SIZE, dtype=np.float32)
    offset = 0
    for board in state.micro_boards:
        for row in board:
            for cell in row:
                features[offset : offset + 3] = _ONE_HOT[cell]
                offset += 3

    for row in state.macro_board:
        for cell in row:
            features[offset] = _MACRO[cell]
            offset += 1

    features[offset] = -1.0 if state.current_player == "X" else 1.0
    forced = state.next_forced_cell
    features[offset + 1] = -1.0 if forced is None else forced / 8.0
    return features


def encode_batch(states: Iterable[GameState]) -> np.ndarray:
    return np.stack([encode_state(state) for state in states]).astype(np.float32)


__all__ = ["FEATURE_SIZE", "encode_batch", "encode_state"]
