# coherent_noise/seeds.py

"""
Seed handling shared by all samplers.

Seeds live in the signed 64-bit range used by the lattice hash. Per-octave
seeds are derived with a SplitMix64 mix of (base seed, octave index), so they
depend on nothing but those two integers and are identical on every platform.
"""

import numpy as np

from . import config as DEFAULTS

_MASK_64 = (1 << 64) - 1
_SIGN_BIT = 1 << 63


def _to_int64(value: int) -> int:
    """Wraps an arbitrary Python int into the signed 64-bit range (two's complement)."""
    value &= _MASK_64
    return value - (1 << 64) if value & _SIGN_BIT else value


def normalize_seed(seed) -> int:
    """Validates a user-supplied seed and wraps it into the signed 64-bit range."""
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise TypeError(f"Seed must be an integer, got {type(seed).__name__}.")
    return _to_int64(int(seed))


def generate_seed() -> int:
    """Draws a fresh seed from OS entropy. Output seeded this way is not reproducible."""
    rng = np.random.default_rng()
    info = np.iinfo(np.int64)
    return int(rng.integers(info.min, info.max, dtype=np.int64, endpoint=True))


def derive_seed(seed: int, index: int) -> int:
    """
    Derives the seed of the octave at `index` from a base seed.

    The mapping is a pure function: the same (seed, index) pair always yields
    the same result, and neighbouring indices give unrelated seeds.
    """
    z = ((seed & _MASK_64) + (index + 1) * DEFAULTS.OCTAVE_SEED_INCREMENT) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    z ^= z >> 31
    return _to_int64(z)
