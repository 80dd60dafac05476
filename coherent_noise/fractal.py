# coherent_noise/fractal.py

"""
================================================================================
FRACTAL COMPOSITION
================================================================================
This module contains the FractalSampler base class, which owns a sequence of
independently seeded octave sources, and FBM (fractional Brownian motion),
which sums those octaves at geometrically increasing frequency and decreasing
amplitude.

Data Contract:
---------------
- Inputs (on initialization):
    - ndims (int): Dimensionality; every octave source must match it.
    - seed (int | None): Base seed. Octave i is seeded with derive_seed(seed, i).
    - source: A Sampler subclass (instantiated once per octave with
      **source_args) or a Sampler instance (copied once per octave with
      with_seed()).
    - octaves, frequency, lacunarity, persistence: Standard fractal parameters.
    - logger (logging.Logger | None): For construction messages.
- Outputs (from methods):
    - sample() / sample_array(): The octave sum divided by the scale factor,
      which keeps the output in roughly the range of a single octave.
- Side Effects: Logs construction details at DEBUG and suspicious parameters
  at WARNING.
- Invariants: Given the same seed and configuration, the output is
  bit-identical. The scale factor is computed once, at construction.
================================================================================
"""

import logging
import math

import numpy as np

from . import config as DEFAULTS
from .opensimplex2s import OpenSimplex2S
from .sampler import Sampler
from .seeds import derive_seed


class FractalSampler(Sampler):
    """
    Shared construction for multi-octave samplers. Subclasses define how the
    octaves are combined (sample/sample_array) and normalized (scale_factor).
    """

    def __init__(self, ndims: int, seed: int = None, source=OpenSimplex2S,
                 octaves: int = DEFAULTS.DEFAULT_OCTAVES,
                 frequency: float = DEFAULTS.DEFAULT_FREQUENCY,
                 lacunarity: float = DEFAULTS.DEFAULT_LACUNARITY,
                 persistence: float = DEFAULTS.DEFAULT_PERSISTENCE,
                 logger: logging.Logger = None, **source_args):
        super().__init__(ndims, seed, logger)

        # --- 1. Validate Parameters ---
        octaves = self._validate_octaves(octaves)
        frequency = self._validate_real('frequency', frequency)
        lacunarity = self._validate_real('lacunarity', lacunarity)
        persistence = self._validate_real('persistence', persistence)
        if frequency <= 0.0:
            raise ValueError(f"frequency must be positive, got {frequency}.")
        if lacunarity <= 1.0:
            self.logger.warning(
                f"lacunarity={lacunarity} does not increase frequency between octaves."
            )
        if persistence <= 0.0:
            self.logger.warning(
                f"persistence={persistence} is not positive; octave amplitudes will vanish or alternate in sign."
            )

        scale = self.scale_factor(octaves, persistence)
        if scale == 0.0 or not math.isfinite(scale):
            raise ValueError(
                f"persistence={persistence} with {octaves} octaves gives a scale factor of {scale}."
            )

        # --- 2. Build Octave Sources ---
        self._check_source(source, source_args)
        self._source = source
        self._source_args = dict(source_args)
        self._sources = tuple(
            self._make_source(source, derive_seed(self.seed, i), source_args)
            for i in range(octaves)
        )

        # --- 3. Store State (read-only after this point) ---
        self._octaves = octaves
        self._frequency = frequency
        self._lacunarity = lacunarity
        self._persistence = persistence
        self._scale = scale

        self.logger.debug(
            f"{self.__class__.__name__} initialized with seed {self.seed}: {octaves} octaves of "
            f"{self._sources[0].__class__.__name__}, frequency={frequency}, "
            f"lacunarity={lacunarity}, persistence={persistence}, scale={scale}"
        )

    @classmethod
    def from_config(cls, ndims: int, config: dict, logger: logging.Logger = None) -> "FractalSampler":
        """
        Builds a sampler from a configuration dictionary. Missing keys fall back
        to the defaults in config.py. Extra source arguments go under 'source_args'.
        """
        settings = {
            'seed': config.get('seed'),
            'source': config.get('source', OpenSimplex2S),
            'octaves': config.get('octaves', DEFAULTS.DEFAULT_OCTAVES),
            'frequency': config.get('frequency', DEFAULTS.DEFAULT_FREQUENCY),
            'lacunarity': config.get('lacunarity', DEFAULTS.DEFAULT_LACUNARITY),
            'persistence': config.get('persistence', DEFAULTS.DEFAULT_PERSISTENCE),
        }
        return cls(ndims, logger=logger, **settings, **config.get('source_args', {}))

    @staticmethod
    def scale_factor(octaves: int, persistence: float) -> float:
        raise NotImplementedError

    @staticmethod
    def _validate_octaves(octaves) -> int:
        if isinstance(octaves, bool) or not isinstance(octaves, (int, np.integer)):
            raise TypeError(f"octaves must be an integer, got {type(octaves).__name__}.")
        octaves = int(octaves)
        if not DEFAULTS.MIN_OCTAVES <= octaves <= DEFAULTS.MAX_OCTAVES:
            raise ValueError(
                f"octaves must be between {DEFAULTS.MIN_OCTAVES} and {DEFAULTS.MAX_OCTAVES}, got {octaves}."
            )
        return octaves

    @staticmethod
    def _validate_real(name: str, value) -> float:
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"{name} must be finite, got {value}.")
        return value

    def _check_source(self, source, source_args: dict):
        """Fails fast on a source that cannot produce octaves for this sampler."""
        if isinstance(source, type):
            if not issubclass(source, Sampler):
                raise TypeError(f"source type {source.__name__} is not a Sampler.")
        elif isinstance(source, Sampler):
            if source.ndims != self.ndims:
                raise ValueError(
                    f"source has {source.ndims} dimensions but this sampler has {self.ndims}."
                )
            if source_args:
                raise TypeError(
                    f"source arguments {sorted(source_args)} can only be used with a source type, "
                    f"not an instance."
                )
        else:
            raise TypeError(
                f"source must be a Sampler subclass or instance, got {type(source).__name__}."
            )

    def _make_source(self, source, octave_seed: int, source_args: dict) -> Sampler:
        if isinstance(source, Sampler):
            return source.with_seed(octave_seed)
        return source(self.ndims, seed=octave_seed, logger=self.logger, **source_args)

    @property
    def sources(self) -> tuple:
        return self._sources

    @property
    def octaves(self) -> int:
        return self._octaves

    @property
    def frequency(self) -> float:
        return self._frequency

    @property
    def lacunarity(self) -> float:
        return self._lacunarity

    @property
    def persistence(self) -> float:
        return self._persistence

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def settings(self) -> dict:
        """A copy of the consolidated construction parameters."""
        return {
            'seed': self.seed,
            'source': self._source,
            'octaves': self._octaves,
            'frequency': self._frequency,
            'lacunarity': self._lacunarity,
            'persistence': self._persistence,
            'source_args': dict(self._source_args),
        }

    def with_seed(self, seed: int) -> "FractalSampler":
        return self.__class__(
            self.ndims, seed, source=self._source, octaves=self._octaves,
            frequency=self._frequency, lacunarity=self._lacunarity,
            persistence=self._persistence, logger=self.logger, **self._source_args,
        )

    def __repr__(self):
        return (f"{self.__class__.__name__}(ndims={self.ndims}, seed={self.seed}, "
                f"octaves={self._octaves}, frequency={self._frequency}, "
                f"lacunarity={self._lacunarity}, persistence={self._persistence})")


class FBM(FractalSampler):
    """
    Fractional Brownian motion: each octave doubles (by lacunarity) the
    frequency and halves (by persistence) the amplitude of the previous one.
    """

    @staticmethod
    def scale_factor(octaves: int, persistence: float) -> float:
        return sum(persistence ** i for i in range(octaves))

    def sample(self, *coords: float) -> float:
        coords = [float(c) * self._frequency for c in coords]
        amplitude = 1.0
        result = 0.0
        for source in self._sources:
            result += source.sample(*coords) * amplitude
            amplitude *= self._persistence
            coords = [c * self._lacunarity for c in coords]
        return result / self._scale

    def sample_array(self, points) -> np.ndarray:
        flat, shape = self._flatten_points(points)
        flat = flat * self._frequency
        amplitude = 1.0
        result = np.zeros(len(flat))
        for source in self._sources:
            result += source.sample_array(flat) * amplitude
            amplitude *= self._persistence
            flat = flat * self._lacunarity
        return (result / self._scale).reshape(shape)
