"""Move enumeration, static evaluation and time budgets shared by the agents."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from .game import DRAW, GameState, Move, check_game_end, forced_sub_board, is_sub_board_playable

Checkpoint = Callable[[], None]


def enumerate_legal_moves(state: GameState) -> List[Move]:
    """Return the legal moves ordered by sub-board, then row, then column."""

    forced = forced_sub_board(state)
    if forced is not None:
        candidates = [forced]
    else:
        candidates = [
            idx for idx in range(state.sub_board_count) if is_sub_board_playable(state, idx)
        ]

    moves: List[Move] = []
    size = state.micro_size
    for sub_idx in candidates:
        board = state.micro_boards[sub_idx]
        for row in range(size):
            for col in range(size):
                if board[row][col] is None:
                    moves.append(Move(sub_idx, row, col))
    return moves


@dataclass
class EvaluationWeights:
    win: float = 1000.0
    macro_cell: float = 100.0
    center: float = 3.0
    corner: float = 2.0
    cell: float = 1.0


DEFAULT_WEIGHTS = EvaluationWeights()


def _sign(mark: Optional[str]) -> int:
    if mark == "O":
        return 1
    if mark == "X":
        return -1
    return 0


def evaluate(state: GameState, weights: EvaluationWeights = DEFAULT_WEIGHTS) -> float:
    """Score ``state`` from O's point of view: positive favours O, negative X."""

    game_end = check_game_end(state)
    if game_end.finished:
        if game_end.winner == DRAW:
            return 0.0
        return _sign(game_end.winner) * weights.win

    score = 0.0
    for row in state.macro_board:
        for cell in row:
            score += _sign(cell) * weights.macro_cell

    last = state.micro_size - 1
    mid = state.micro_size // 2
    corners = ((0, 0), (0, last), (last, 0), (last, last))
    for board in state.micro_boards:
        score += _sign(board[mid][mid]) * weights.center
        for r, c in corners:
            score += _sign(board[r][c]) * weights.corner
        score += sum(_sign(cell) for row in board for cell in row) * weights.cell
    return score


class SearchBudget:
    """Wall-clock budget with a cooperative yield point.

    ``tick`` is called once per unit of search work (a node or an iteration);
    every ``yield_every`` ticks the optional ``checkpoint`` callable runs so a
    host can hand control back to its scheduler.  A ``time_budget_ms`` of
    ``None`` never expires.
    """

    def __init__(
        self,
        time_budget_ms: Optional[float],
        checkpoint: Optional[Checkpoint] = None,
        yield_every: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.time_budget_ms = time_budget_ms
        self.checkpoint = checkpoint
        self.yield_every = max(int(yield_every), 1)
        self.clock = clock
        self.ticks = 0
        self._start = clock()

    def elapsed_ms(self) -> float:
        return (self.clock() - self._start) * 1000.0

    def expired(self) -> bool:
        if self.time_budget_ms is None:
            return False
        return self.elapsed_ms() >= self.time_budget_ms

    def tick(self) -> None:
        self.ticks += 1
        if self.checkpoint is not None and self.ticks % self.yield_every == 0:
            self.checkpoint()


__all__ = [
    "Checkpoint",
    "DEFAULT_WEIGHTS",
    "EvaluationWeights",
    "SearchBudget",
    "enumerate_legal_moves",
    "evaluate",
]
