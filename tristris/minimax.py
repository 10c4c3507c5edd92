"""Depth- and time-bounded alpha-beta minimax ("easy" difficulty)."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from .engine import apply_move
from .game import GameState, Move, check_game_end
from .search import Checkpoint, EvaluationWeights, SearchBudget, enumerate_legal_moves, evaluate

logger = logging.getLogger(__name__)


@dataclass
class MinimaxConfig:
    max_depth: int = 3
    time_budget_ms: Optional[float] = 1000.0
    yield_every: int = 500
    weights: EvaluationWeights = field(default_factory=EvaluationWeights)


class MinimaxAgent:
    """Alpha-beta search where O maximizes :func:`evaluate` and X minimizes it."""

    def __init__(self, config: Optional[MinimaxConfig] = None) -> None:
        self.config = config or MinimaxConfig()

    def select_move(
        self, state: GameState, checkpoint: Optional[Checkpoint] = None
    ) -> Optional[Move]:
        moves = [] if check_game_end(state).finished else enumerate_legal_moves(state)
        if not moves:
            return None

        budget = SearchBudget(
            self.config.time_budget_ms, checkpoint=checkpoint, yield_every=self.config.yield_every
        )
        maximizing = state.current_player == "O"
        alpha, beta = -math.inf, math.inf
        best_move = moves[0]
        best_value = -math.inf if maximizing else math.inf

        for move in moves:
            child = state.clone()
            apply_move(child, *move)
            value = self._minimax(child, self.config.max_depth - 1, alpha, beta, budget)

            if maximizing:
                if value > best_value:
                    best_value, best_move = value, move
                alpha = max(alpha, best_value)
            else:
                if value < best_value:
                    best_value, best_move = value, move
                beta = min(beta, best_value)

            if budget.expired():
                logger.debug("Minimax timed out after %.0f ms", budget.elapsed_ms())
                break

        logger.debug(
            "Minimax picked %s (value=%s) after %d nodes in %.0f ms",
            best_move,
            best_value,
            budget.ticks,
            budget.elapsed_ms(),
        )
        return best_move

    def _minimax(
        self,
        state: GameState,
        depth: int,
        alpha: float,
        beta: float,
        budget: SearchBudget,
    ) -> float:
        budget.tick()
        weights = self.config.weights
        if budget.expired():
            return evaluate(state, weights)
        if depth <= 0 or check_game_end(state).finished:
            return evaluate(state, weights)

        moves = enumerate_legal_moves(state)
        if not moves:
            return evaluate(state, weights)

        if state.current_player == "O":
            max_eval = -math.inf
            for move in moves:
                child = state.clone()
                apply_move(child, *move)
                value = self._minimax(child, depth - 1, alpha, beta, budget)
                max_eval = max(max_eval, value)
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
            return max_eval

        min_eval = math.inf
        for move in moves:
            child = state.clone()
            apply_move(child, *move)
            value = self._minimax(child, depth - 1, alpha, beta, budget)
            min_eval = min(min_eval, value)
            beta = min(beta, value)
            if beta <= alpha:
                break
        return min_eval


__all__ = ["MinimaxAgent", "MinimaxConfig"]
