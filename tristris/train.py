"""Self-play training for the value model used by the medium agent."""
from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
import torch
from torch import nn

from .config import TrainingConfig, load_config
from .engine import apply_move
from .features import encode_state
from .game import DRAW, check_game_end, init_game_state
from .heuristic import HeuristicAgent
from .model import ValueNet
from .utils import configure_logging, set_random_seed

__all__ = ["ReplayBuffer", "ReplaySample", "main", "self_play_game", "train_value_model"]

logger = logging.getLogger(__name__)

_OUTCOME_VALUE = {"O": 1.0, "X": -1.0, DRAW: 0.0}


@dataclass
class ReplaySample:
    features: np.ndarray
    value: float


class ReplayBuffer:
    """A simple FIFO replay buffer of labelled positions."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._data: List[ReplaySample] = []

    def __len__(self) -> int:
        return len(self._data)

    def extend(self, samples: Sequence[ReplaySample]) -> None:
        self._data.extend(samples)
        if len(self._data) > self.capacity:
            self._data = self._data[-self.capacity :]

    def sample(self, batch_size: int, rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
        if len(self._data) < batch_size:
            raise ValueError("Not enough samples in replay buffer")
        indices = rng.choice(len(self._data), size=batch_size, replace=False)
        features = np.stack([self._data[int(i)].features for i in indices])
        values = np.array([self._data[int(i)].value for i in indices], dtype=np.float32)
        return features, values


def self_play_game(
    agent: HeuristicAgent, rng: random.Random, epsilon: float
) -> Tuple[List[ReplaySample], str]:
    """Play one heuristic self-play game and label every position with its outcome."""

    state = init_game_state()
    positions: List[np.ndarray] = [encode_state(state)]
    game_end = check_game_end(state)
    while not game_end.finished:
        move = agent.rollout_move(state, rng, epsilon)
        if move is None:
            break
        result = apply_move(state, *move)
        positions.append(encode_state(state))
        game_end = result.game_end or check_game_end(state)

    winner = game_end.winner or DRAW
    value = _OUTCOME_VALUE[winner]
    return [ReplaySample(features, value) for features in positions], winner


def train_value_model(
    config: TrainingConfig, model: Optional[ValueNet] = None
) -> ValueNet:
    set_random_seed(config.seed)
    torch.manual_seed(config.seed)
    rng = random.Random(config.seed)
    np_rng = np.random.default_rng(config.seed)

    model = model or ValueNet()
    optimizer = torch.optim.AdamW(
        model.parameters(), lr=config.learning_rate, weight_decay=config.weight_decay
    )
    loss_fn = nn.MSELoss()
    agent = HeuristicAgent()
    buffer = ReplayBuffer(config.replay_capacity)
    stats = {"X": 0, "O": 0, DRAW: 0}

    for game_index in range(1, config.games + 1):
        samples, winner = self_play_game(agent, rng, config.epsilon)
        buffer.extend(samples)
        stats[winner] += 1

        if len(buffer) < config.batch_size:
            continue

        model.train()
        losses: List[float] = []
        for _ in range(config.steps_per_game):
            features, values = buffer.sample(config.batch_size, np_rng)
            optimizer.zero_grad()
            prediction = model(torch.from_numpy(features)).squeeze(-1)
            loss = loss_fn(prediction, torch.from_numpy(values))
            loss.backward()
            optimizer.step()
            losses.append(float(loss.item()))

        logger.info(
            "Game %d/%d - winner: %s buffer=%d loss=%.4f",
            game_index,
            config.games,
            winner,
            len(buffer),
            sum(losses) / len(losses),
        )

    model.save(config.checkpoint)
    logger.info("Training completed. Totals: %s; saved to %s", stats, config.checkpoint)
    return model


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Train the TrisTris value model by self-play")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    config = load_config(args.config)
    train_value_model(config.training)


if __name__ == "__main__":
    main()
