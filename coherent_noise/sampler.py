# coherent_noise/sampler.py

"""
================================================================================
SAMPLER CAPABILITY
================================================================================
The common contract implemented by every noise kernel and every fractal
combinator, so combinators can treat any kernel (or a nested combinator)
uniformly.

Data Contract:
---------------
- Inputs (on initialization):
    - ndims (int): 2, 3 or 4. Fixed for the life of the instance.
    - seed (int | None): Seeds all gradient hashing. If None, a seed is
      generated, which makes the output non-reproducible.
    - logger (logging.Logger | None): Defaults to the module logger.
- Public Methods:
    - sample(*coords): One scalar from exactly `ndims` real coordinates.
    - sample_array(points): Vectorized sampling over an (..., ndims) array.
    - with_seed(seed): A copy with identical configuration and a new seed.
- Side Effects: Construction may log at DEBUG. Sampling never logs.
- Invariants: All validation happens at construction. Once constructed, an
  instance is never mutated, and sample() is deterministic and cannot fail for
  finite coordinates.
================================================================================
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from . import lattice
from .seeds import generate_seed, normalize_seed


class Sampler(ABC):
    """Base class for anything that turns coordinates into a noise value."""

    def __init__(self, ndims: int, seed: int = None, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger(self.__class__.__module__)
        self._ndims = lattice.validate_dimensions(ndims)

        if seed is None:
            self._seed = generate_seed()
            self.logger.debug(f"No seed supplied, generated seed {self._seed}.")
        else:
            self._seed = normalize_seed(seed)

    @property
    def ndims(self) -> int:
        return self._ndims

    @property
    def seed(self) -> int:
        return self._seed

    @abstractmethod
    def sample(self, *coords: float) -> float:
        """Returns the noise value at the given coordinates."""

    @abstractmethod
    def sample_array(self, points) -> np.ndarray:
        """
        Samples every point of an array whose last axis holds the coordinates.

        Args:
            points (array-like): Shape (..., ndims).

        Returns:
            np.ndarray: float64 array of shape (...).
        """

    @abstractmethod
    def with_seed(self, seed: int) -> "Sampler":
        """Returns a new sampler configured like this one but seeded with `seed`."""

    def _flatten_points(self, points) -> tuple[np.ndarray, tuple]:
        """Coerces points to a contiguous (M, ndims) float64 array plus the leading shape."""
        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 0 or points.shape[-1] != self._ndims:
            raise ValueError(
                f"Expected points with a trailing axis of length {self._ndims}, "
                f"got shape {points.shape}."
            )
        flat = np.ascontiguousarray(points.reshape(-1, self._ndims))
        return flat, points.shape[:-1]

    def __repr__(self):
        return f"{self.__class__.__name__}(ndims={self._ndims}, seed={self._seed})"
