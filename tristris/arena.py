"""Evaluation arena pitting two agents against each other."""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

from .ai import Agent, AgentError, Difficulty, create_agent
from .config import load_config
from .engine import apply_move
from .game import DRAW, GameEnd, Player, check_game_end, init_game_state
from .utils import configure_logging, set_random_seed

__all__ = ["Arena", "ArenaResult", "main", "play_game"]

logger = logging.getLogger(__name__)


@dataclass
class ArenaResult:
    wins: int
    losses: int
    draws: int

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def win_rate(self) -> float:
        return self.wins / self.total if self.total else 0.0


def play_game(x_agent: Agent, o_agent: Agent) -> GameEnd:
    """Play one game to completion and return its outcome."""

    state = init_game_state()
    agents: Dict[Player, Agent] = {"X": x_agent, "O": o_agent}
    game_end = check_game_end(state)
    while not game_end.finished:
        player = state.current_player
        move = agents[player].select_move(state)
        if move is None:
            raise AgentError(f"{type(agents[player]).__name__} returned no move for {player}")
        result = apply_move(state, *move)
        if not result.moved:
            raise AgentError(f"{type(agents[player]).__name__} chose illegal move {move}")
        game_end = result.game_end or check_game_end(state)

    logger.debug("Final position:\n%s", state.render_ascii())
    return game_end


@dataclass
class Arena:
    challenger: Agent
    baseline: Agent

    def play_matches(self, num_games: int = 10) -> ArenaResult:
        """Play ``num_games`` games, alternating who moves first."""

        results = ArenaResult(wins=0, losses=0, draws=0)
        for game_index in range(num_games):
            challenger_first = game_index % 2 == 0
            if challenger_first:
                outcome = play_game(self.challenger, self.baseline)
            else:
                outcome = play_game(self.baseline, self.challenger)

            challenger_mark = "X" if challenger_first else "O"
            if outcome.winner == DRAW:
                results.draws += 1
            elif outcome.winner == challenger_mark:
                results.wins += 1
            else:
                results.losses += 1
            logger.info(
                "Game %d/%d: winner=%s (challenger played %s)",
                game_index + 1,
                num_games,
                outcome.winner,
                challenger_mark,
            )
        return results


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Play TrisTris agents against each other")
    parser.add_argument("--first", type=Difficulty.parse, default=Difficulty.HARD)
    parser.add_argument("--second", type=Difficulty.parse, default=Difficulty.EASY)
    parser.add_argument("--games", type=int, default=10)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    config = load_config(args.config)
    if args.seed is not None:
        set_random_seed(args.seed)
        config.mcts = replace(config.mcts, seed=args.seed)
    arena = Arena(
        challenger=create_agent(args.first, config),
        baseline=create_agent(args.second, config),
    )
    result = arena.play_matches(args.games)
    logger.info(
        "%s vs %s: %d wins, %d losses, %d draws (win rate %.2f)",
        args.first.value,
        args.second.value,
        result.wins,
        result.losses,
        result.draws,
        result.win_rate,
    )


if __name__ == "__main__":
    main()
