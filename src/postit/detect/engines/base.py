from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

import numpy as np


class InferenceEngine(ABC):
    """Black-box detector: normalized input tensor -> raw [1, 5, N] head.

    infer() must be synchronous; the pipeline never overlaps two calls.
    """

    @abstractmethod
    def infer(self, tensor: np.ndarray) -> np.ndarray:
        ...

    def close(self) -> None:
        return None


class CallableEngine(InferenceEngine):
    """Wrap any function with the infer() signature (tests, custom runtimes)."""

    def __init__(self, fn: Callable[[np.ndarray], np.ndarray]):
        self._fn = fn

    def infer(self, tensor: np.ndarray) -> np.ndarray:
        return np.asarray(self._fn(tensor), dtype=np.float32)
