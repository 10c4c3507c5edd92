"""Difficulty selection: maps a difficulty tier onto one of the three agents."""
from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol, Union

from .config import AIConfig
from .game import GameState, Move
from .heuristic import HeuristicAgent
from .mcts import MCTSAgent
from .minimax import MinimaxAgent
from .search import Checkpoint


class AgentError(RuntimeError):
    """Raised when an agent cannot produce a move for a position that is still in play."""


class Agent(Protocol):
    def select_move(
        self, state: GameState, checkpoint: Optional[Checkpoint] = None
    ) -> Optional[Move]:
        ...


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union[str, "Difficulty"]) -> "Difficulty":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(d.value for d in cls)
            raise ValueError(f"Unknown difficulty {value!r}; expected one of {choices}") from None


def create_agent(
    difficulty: Union[str, Difficulty], config: Optional[AIConfig] = None
) -> Agent:
    """Build a fresh agent for ``difficulty``; agents are never shared between calls."""

    config = config or AIConfig()
    tier = Difficulty.parse(difficulty)
    if tier is Difficulty.EASY:
        return MinimaxAgent(config.minimax)
    if tier is Difficulty.MEDIUM:
        return HeuristicAgent(config.heuristic)
    return MCTSAgent(config.mcts, rollout_config=config.heuristic)


def get_ai_move(
    state: GameState,
    difficulty: Union[str, Difficulty],
    config: Optional[AIConfig] = None,
    checkpoint: Optional[Checkpoint] = None,
) -> Optional[Move]:
    return create_agent(difficulty, config).select_move(state, checkpoint=checkpoint)


__all__ = ["Agent", "AgentError", "Difficulty", "create_agent", "get_ai_move"]
