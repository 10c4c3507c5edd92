"""Time-bounded Monte Carlo Tree Search with UCB1 exploration ("hard" difficulty)."""
from __future__ import annotations

import logging
import math
import random
import weakref
from dataclasses import dataclass, replace
from typing import List, Optional

from .engine import apply_move
from .game import GameState, Move, Player, check_game_end
from .heuristic import HeuristicAgent, HeuristicConfig
from .search import Checkpoint, SearchBudget, enumerate_legal_moves

logger = logging.getLogger(__name__)

ROLLOUT_POLICIES = ("random", "heuristic")


@dataclass
class MCTSConfig:
    time_budget_ms: Optional[float] = 1000.0
    exploration: float = math.sqrt(2)
    rollout_depth: int = 100
    rollout_policy: str = "random"
    rollout_epsilon: float = 0.3
    yield_every: int = 100
    max_iterations: Optional[int] = None
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.rollout_policy not in ROLLOUT_POLICIES:
            raise ValueError(
                f"rollout_policy must be one of {ROLLOUT_POLICIES}, got {self.rollout_policy!r}"
            )
        if self.time_budget_ms is None and self.max_iterations is None:
            raise ValueError("MCTS needs a time_budget_ms or a max_iterations bound")


class Node:
    """A search node owning a private snapshot of its game state.

    ``wins`` is accumulated from the point of view of ``player_just_moved``,
    the player whose move produced this node.
    """

    def __init__(
        self,
        state: GameState,
        player_just_moved: Player,
        parent: Optional["Node"] = None,
        move: Optional[Move] = None,
    ) -> None:
        self.state = state
        self.player_just_moved = player_just_moved
        self._parent = weakref.ref(parent) if parent is not None else None
        self.move = move
        self.children: List[Node] = []
        self.visits = 0
        self.wins = 0.0
        self.terminal = check_game_end(state).finished
        self.untried_moves: List[Move] = [] if self.terminal else enumerate_legal_moves(state)

    @property
    def parent(self) -> Optional["Node"]:
        return self._parent() if self._parent is not None else None

    def is_fully_expanded(self) -> bool:
        return not self.untried_moves

    def ucb1(self, exploration: float) -> float:
        if self.visits == 0:
            return math.inf
        parent = self.parent
        parent_visits = parent.visits if parent is not None else self.visits
        exploitation = self.wins / self.visits
        return exploitation + exploration * math.sqrt(math.log(parent_visits) / self.visits)

    def best_child(self, exploration: float) -> "Node":
        best = self.children[0]
        best_score = best.ucb1(exploration)
        for child in self.children[1:]:
            score = child.ucb1(exploration)
            if score > best_score:
                best, best_score = child, score
        return best

    def expand(self) -> "Node":
        move = self.untried_moves.pop()
        child_state = self.state.clone()
        mover = child_state.current_player
        apply_move(child_state, *move)
        child = Node(child_state, mover, parent=self, move=move)
        self.children.append(child)
        return child


class MCTSAgent:
    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        rollout_config: Optional[HeuristicConfig] = None,
    ) -> None:
        self.config = config or MCTSConfig()
        self._rollout_agent: Optional[HeuristicAgent] = None
        if self.config.rollout_policy == "heuristic":
            # Playouts only use the additive scorer, never the value model.
            scorer = replace(rollout_config or HeuristicConfig(), model_path=None)
            self._rollout_agent = HeuristicAgent(scorer)

    def select_move(
        self, state: GameState, checkpoint: Optional[Checkpoint] = None
    ) -> Optional[Move]:
        cfg = self.config
        root = Node(state.clone(), state.opponent)
        if root.terminal or not root.untried_moves:
            return None

        rng = random.Random(cfg.seed)
        budget = SearchBudget(cfg.time_budget_ms, checkpoint=checkpoint, yield_every=cfg.yield_every)
        iterations = 0
        while True:
            node = root
            while not node.terminal and node.is_fully_expanded():
                node = node.best_child(cfg.exploration)

            if not node.terminal and not node.is_fully_expanded():
                node = node.expand()

            result = self._simulate(node.state, rng)
            self._backpropagate(node, result)

            iterations += 1
            budget.tick()
            if budget.expired():
                break
            if cfg.max_iterations is not None and iterations >= cfg.max_iterations:
                break

        logger.debug("MCTS completed %d iterations in %.0f ms", iterations, budget.elapsed_ms())
        if not root.children:
            return None

        best = root.children[0]
        for child in root.children[1:]:
            if child.visits > best.visits:
                best = child
        return best.move

    def _simulate(self, state: GameState, rng: random.Random) -> float:
        """Play out ``state``: 1.0 if O wins, 0.0 if X wins, 0.5 otherwise."""

        sim = state.clone()
        for _ in range(self.config.rollout_depth):
            game_end = check_game_end(sim)
            if game_end.finished:
                return _outcome(game_end.winner)

            if self._rollout_agent is not None:
                move = self._rollout_agent.rollout_move(sim, rng, self.config.rollout_epsilon)
            else:
                moves = enumerate_legal_moves(sim)
                move = rng.choice(moves) if moves else None
            if move is None:
                return 0.5
            apply_move(sim, *move)

        game_end = check_game_end(sim)
        return _outcome(game_end.winner) if game_end.finished else 0.5

    @staticmethod
    def _backpropagate(node: Optional[Node], result: float) -> None:
        while node is not None:
            node.visits += 1
            node.wins += result if node.player_just_moved == "O" else 1.0 - result
            node = node.parent


def _outcome(winner: Optional[str]) -> float:
    if winner == "O":
        return 1.0
    if winner == "X":
        return 0.0
    return 0.5


__all__ = ["MCTSAgent", "MCTSConfig", "Node"]
