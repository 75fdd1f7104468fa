"""Randomness providers for move selection."""

from typing import Protocol

import numpy as np


class RandomSource(Protocol):
    """Protocol for the random draws an agent needs."""

    def uniform(self) -> float:
        """
        Draw a float uniformly from [0, 1).

        Returns:
            Random float in [0, 1)
        """
        ...

    def pick_index(self, n: int) -> int:
        """
        Pick an index uniformly from range(n).

        Args:
            n: Number of candidates (must be positive)

        Returns:
            Random index in [0, n)
        """
        ...


class NumpyRandomSource:
    """RandomSource backed by a numpy Generator."""

    def __init__(self, seed: int | None = None) -> None:
        """
        Initialize the random source.

        Args:
            seed: Random seed for reproducibility (optional)
        """
        self.rng = np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self.rng.random())

    def pick_index(self, n: int) -> int:
        if n <= 0:
            raise ValueError("Cannot pick from an empty candidate list")
        return int(self.rng.integers(n))
