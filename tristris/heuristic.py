"""Greedy move scorer ("medium" difficulty) and rollout policy for MCTS.

Moves are ranked by a hand-tuned additive heuristic.  When a trained
:class:`~tristris.model.ValueNet` is available the agent ranks moves by the
model's estimate of the resulting position instead.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

import numpy as np

from .engine import apply_move
from .features import encode_batch
from .game import GameState, Move, check_game_end, check_sub_board_win
from .search import Checkpoint, enumerate_legal_moves

logger = logging.getLogger(__name__)


class ValueModel(Protocol):
    def predict_batch(self, features: np.ndarray) -> np.ndarray:
        ...


@dataclass
class HeuristicConfig:
    center: float = 10.0
    corner: float = 5.0
    win: float = 100.0
    block: float = 50.0
    feed_penalty: float = -30.0
    feed_threshold: int = 2
    model_path: Optional[str] = None


def _completes_line(board: Sequence[Sequence[Optional[str]]], row: int, col: int, mark: str) -> bool:
    trial = [list(line) for line in board]
    trial[row][col] = mark
    return check_sub_board_win(trial) == mark


class HeuristicAgent:
    def __init__(
        self,
        config: Optional[HeuristicConfig] = None,
        value_model: Optional[ValueModel] = None,
    ) -> None:
        self.config = config or HeuristicConfig()
        if value_model is None and self.config.model_path:
            from .model import load_value_model

            value_model = load_value_model(self.config.model_path)
        self.value_model = value_model

    def score_move(self, state: GameState, move: Move) -> float:
        """Score ``move`` for the player about to move in ``state``."""

        cfg = self.config
        sub_board, row, col = move
        last = state.micro_size - 1
        mid = state.micro_size // 2
        board = state.micro_boards[sub_board]
        me, opponent = state.current_player, state.opponent

        score = 0.0
        if row == mid and col == mid:
            score += cfg.center
        if row in (0, last) and col in (0, last):
            score += cfg.corner
        if _completes_line(board, row, col, me):
            score += cfg.win
        if _completes_line(board, row, col, opponent):
            score += cfg.block

        after = state.clone()
        result = apply_move(after, sub_board, row, col)
        if result.moved and result.game_end is None and after.next_forced_cell is not None:
            target = after.micro_boards[after.next_forced_cell]
            held = sum(cell == opponent for line in target for cell in line)
            if held >= cfg.feed_threshold:
                score += cfg.feed_penalty
        return score

    def select_move(
        self, state: GameState, checkpoint: Optional[Checkpoint] = None
    ) -> Optional[Move]:
        if check_game_end(state).finished:
            return None
        moves = enumerate_legal_moves(state)
        if not moves:
            return None
        if self.value_model is not None:
            return self._select_by_value(state, moves)
        return self._greedy(state, moves)

    def _greedy(self, state: GameState, moves: List[Move]) -> Move:
        best_move = moves[0]
        best_score = -float("inf")
        for move in moves:
            score = self.score_move(state, move)
            if score > best_score:
                best_score, best_move = score, move
        return best_move

    def _select_by_value(self, state: GameState, moves: List[Move]) -> Move:
        children = []
        for move in moves:
            child = state.clone()
            apply_move(child, *move)
            children.append(child)
        predicted = self.value_model.predict_batch(encode_batch(children))
        values = np.asarray(predicted, dtype=np.float64)
        if state.current_player == "X":
            values = -values
        # np.argmax returns the first maximum, keeping enumeration order on ties.
        best = int(np.argmax(values))
        logger.debug("Value model picked %s (value=%.3f)", moves[best], values[best])
        return moves[best]

    def rollout_move(
        self, state: GameState, rng: random.Random, epsilon: float = 0.3
    ) -> Optional[Move]:
        """Pick a playout move: uniform with probability ``epsilon``, else greedy."""

        moves = enumerate_legal_moves(state)
        if not moves:
            return None
        if rng.random() < epsilon:
            return rng.choice(moves)
        return self._greedy(state, moves)


__all__ = ["HeuristicAgent", "HeuristicConfig", "ValueModel"]
