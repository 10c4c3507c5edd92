"""Value network backing the learned variant of the heuristic agent."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
import torch
from torch import nn
import torch.nn.functional as F

from .features import FEATURE_SIZE

__all__ = ["ValueNet", "load_value_model"]

logger = logging.getLogger(__name__)


class ValueNet(nn.Module):
    """Small MLP mapping an encoded state to a value in ``[-1, 1]``.

    Positive values favour O, matching the sign of
    :func:`tristris.search.evaluate`.
    """

    def __init__(
        self,
        input_size: int = FEATURE_SIZE,
        hidden_sizes: Sequence[int] = (128, 64),
    ) -> None:
        super().__init__()
        self.input_size = input_size
        self.hidden_sizes = tuple(hidden_sizes)
        h1, h2 = self.hidden_sizes
        self.fc1 = nn.Linear(input_size, h1)
        self.fc2 = nn.Linear(h1, h2)
        self.value_head = nn.Linear(h2, 1)

    def forward(self, x: torch.Tensor) -> torch.Tensor:  # type: ignore[override]
        out = F.relu(self.fc1(x))
        out = F.relu(self.fc2(out))
        return torch.tanh(self.value_head(out))

    @torch.no_grad()
    def predict(self, features: np.ndarray) -> float:
        """Value of a single encoded state, for inspection and tooling.

        Agents score candidate moves together through :meth:`predict_batch`.
        """

        self.eval()
        tensor = torch.from_numpy(np.asarray(features, dtype=np.float32)).unsqueeze(0)
        return float(self.forward(tensor).item())

    @torch.no_grad()
    def predict_batch(self, features: np.ndarray) -> np.ndarray:
        self.eval()
        tensor = torch.from_numpy(np.asarray(features, dtype=np.float32))
        return self.forward(tensor).squeeze(-1).cpu().numpy()

    def save(self, path: Union[str, Path]) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        torch.save(
            {
                "input_size": self.input_size,
                "hidden_sizes": list(self.hidden_sizes),
                "state_dict": self.state_dict(),
            },
            target,
        )


def load_value_model(path: Union[str, Path]) -> Optional[ValueNet]:
    """Load saved weights, or return ``None`` when no weights exist at ``path``."""

    source = Path(path)
    if not source.exists():
        logger.warning("Value model %s not found, using the heuristic scorer", source)
        return None

    checkpoint = torch.load(source, map_location="cpu")
    model = ValueNet(
        input_size=int(checkpoint.get("input_size", FEATURE_SIZE)),
        hidden_sizes=tuple(checkpoint.get("hidden_sizes", (128, 64))),
    )
    model.load_state_dict(checkpoint["state_dict"])
    model.eval()
    logger.info("Loaded value model from %s", source)
    return model
