"""TrisTris (Ultimate Tic-Tac-Toe) rules engine and game-playing agents."""
from .ai import Agent, AgentError, Difficulty, create_agent, get_ai_move
from .arena import Arena, ArenaResult
from .config import AIConfig, load_config
from .engine import MoveResult, apply_move, replay_moves
from .game import (
    GameEnd,
    GameState,
    IllegalMoveError,
    InvalidStateError,
    Move,
    check_game_end,
    init_game_state,
    is_move_legal,
    is_sub_board_playable,
    playable_sub_boards,
)
from .heuristic import HeuristicAgent, HeuristicConfig
from .mcts import MCTSAgent, MCTSConfig
from .minimax import MinimaxAgent, MinimaxConfig
from .search import EvaluationWeights, enumerate_legal_moves, evaluate

__all__ = [
    "AIConfig",
    "Agent",
    "AgentError",
    "Arena",
    "ArenaResult",
    "Difficulty",
    "EvaluationWeights",
    "GameEnd",
    "GameState",
    "HeuristicAgent",
    "HeuristicConfig",
    "IllegalMoveError",
    "InvalidStateError",
    "MCTSAgent",
    "MCTSConfig",
    "MinimaxAgent",
    "MinimaxConfig",
    "Move",
    "MoveResult",
    "apply_move",
    "check_game_end",
    "create_agent",
    "enumerate_legal_moves",
    "evaluate",
    "get_ai_move",
    "init_game_state",
    "is_move_legal",
    "is_sub_board_playable",
    "load_config",
    "playable_sub_boards",
    "replay_moves",
]
