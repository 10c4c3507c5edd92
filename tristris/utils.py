"""Helpers shared by the command-line tools."""
from __future__ import annotations

import logging
import random

import numpy as np

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def set_random_seed(seed: int) -> None:
    random.seed(seed)
    np.random.seed(seed % (2**32))


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


__all__ = ["LOG_FORMAT", "configure_logging", "set_random_seed"]
