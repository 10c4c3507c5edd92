"""YAML configuration for the agents and the training loop."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union

import yaml

from .heuristic import HeuristicConfig
from .mcts import MCTSConfig
from .minimax import MinimaxConfig
from .search import EvaluationWeights

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

T = TypeVar("T")


@dataclass
class TrainingConfig:
    games: int = 200
    epsilon: float = 0.3
    replay_capacity: int = 50_000
    batch_size: int = 128
    steps_per_game: int = 4
    learning_rate: float = 1e-3
    weight_decay: float = 1e-4
    seed: int = 0
    checkpoint: str = "tristris/models/value_net.pt"


@dataclass
class AIConfig:
    minimax: MinimaxConfig = field(default_factory=MinimaxConfig)
    heuristic: HeuristicConfig = field(default_factory=HeuristicConfig)
    mcts: MCTSConfig = field(default_factory=MCTSConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)


def _build(
    cls: Type[T],
    section: Optional[Mapping[str, Any]],
    name: str,
    exclude: Tuple[str, ...] = (),
) -> T:
    section = dict(section or {})
    known = {f.name for f in fields(cls)} - set(exclude)
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown keys in '{name}' section: {', '.join(unknown)}")
    return cls(**section)


def config_from_dict(data: Optional[Mapping[str, Any]]) -> AIConfig:
    data = dict(data or {})
    sections = ("minimax", "heuristic", "mcts", "weights", "training")
    unknown = sorted(set(data) - set(sections))
    if unknown:
        raise ValueError(f"Unknown configuration sections: {', '.join(unknown)}")

    weights = _build(EvaluationWeights, data.get("weights"), "weights")
    minimax = _build(MinimaxConfig, data.get("minimax"), "minimax", exclude=("weights",))
    return AIConfig(
        minimax=replace(minimax, weights=weights),
        heuristic=_build(HeuristicConfig, data.get("heuristic"), "heuristic"),
        mcts=_build(MCTSConfig, data.get("mcts"), "mcts"),
        training=_build(TrainingConfig, data.get("training"), "training"),
    )


def load_config(path: Union[str, Path, None] = None) -> AIConfig:
    source = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    with source.open("r", encoding="utf-8") as fh:
        data: Dict[str, Any] = yaml.safe_load(fh) or {}
    return config_from_dict(data)


__all__ = [
    "AIConfig",
    "DEFAULT_CONFIG_PATH",
    "TrainingConfig",
    "config_from_dict",
    "load_config",
]
