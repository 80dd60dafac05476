# coherent_noise/gradients.py

"""
================================================================================
GRADIENT TABLES & SEEDED LATTICE HASH
================================================================================
This module builds the process-wide gradient tables once, at import, and
provides the JIT-compiled lookups that hash a (seed, lattice point) pair to a
gradient and dot it with the offset from that lattice point.

Data Contract:
---------------
- Inputs:
    - seed: A signed 64-bit integer.
    - xsvp, ysvp, ...: Integer lattice coordinates already multiplied by their
      axis primes (wrapping int64 arithmetic).
    - dx, dy, ...: The Euclidean offset from the lattice point to the sample.
- Outputs:
    - gradN(): The dot product of the hashed gradient with the offset.
- Side Effects: None. The tables are read-only arrays.
- Invariants: Identical (seed, lattice point) always selects the identical
  gradient. Table indices are reduced with a power-of-two mask, which is the
  same as taking them modulo the table length, so they are always in range.
================================================================================
"""

import itertools

import numpy as np
from numba import njit

from . import config as DEFAULTS
from .lattice import HASH_MULTIPLIER, RSQUARED_3D, RSQUARED_4D, UNSKEW_3D, UNSKEW_4D

# --- Table Sizes ---
N_GRADS_2D_EXPONENT = 7
N_GRADS_3D_EXPONENT = 8
N_GRADS_4D_EXPONENT = 9
N_GRADS_2D = 1 << N_GRADS_2D_EXPONENT
N_GRADS_3D = 1 << N_GRADS_3D_EXPONENT
N_GRADS_4D = 1 << N_GRADS_4D_EXPONENT

# 3D and 4D gradients are padded to a stride of 4 so an index is a multiple of 4.
_STRIDE_2D = 2
_STRIDE_3D = 4
_STRIDE_4D = 4

_SHIFT_2D = 64 - N_GRADS_2D_EXPONENT + 1
_SHIFT_3D = 64 - N_GRADS_3D_EXPONENT + 2
_SHIFT_4D = 64 - N_GRADS_4D_EXPONENT + 2
_MASK_2D = (N_GRADS_2D - 1) << 1
_MASK_3D = (N_GRADS_3D - 1) << 2
_MASK_4D = (N_GRADS_4D - 1) << 2

# Largest raw 2D kernel sum for these directions; dividing by it keeps output
# within roughly [-1, 1].
NORMALIZER_2D = 0.05481866495625118

# 24 unit vectors spaced every 15 degrees, starting at 7.5 degrees.
_DIRECTIONS_2D = np.array([
    [0.38268343236509, 0.923879532511287],
    [0.923879532511287, 0.38268343236509],
    [0.923879532511287, -0.38268343236509],
    [0.38268343236509, -0.923879532511287],
    [-0.38268343236509, -0.923879532511287],
    [-0.923879532511287, -0.38268343236509],
    [-0.923879532511287, 0.38268343236509],
    [-0.38268343236509, 0.923879532511287],
    [0.130526192220052, 0.99144486137381],
    [0.608761429008721, 0.793353340291235],
    [0.793353340291235, 0.608761429008721],
    [0.99144486137381, 0.130526192220051],
    [0.99144486137381, -0.130526192220051],
    [0.793353340291235, -0.60876142900872],
    [0.608761429008721, -0.793353340291235],
    [0.130526192220052, -0.99144486137381],
    [-0.130526192220052, -0.99144486137381],
    [-0.608761429008721, -0.793353340291235],
    [-0.793353340291235, -0.608761429008721],
    [-0.99144486137381, -0.130526192220052],
    [-0.99144486137381, 0.130526192220051],
    [-0.793353340291235, 0.608761429008721],
    [-0.608761429008721, 0.793353340291235],
    [-0.130526192220052, 0.99144486137381],
])


def _unit(directions: np.ndarray) -> np.ndarray:
    return directions / np.linalg.norm(directions, axis=1, keepdims=True)


def directions_3d() -> np.ndarray:
    """
    48 unit directions. For every pair of axes and every sign combination on
    that pair there are two vectors leaning out along the pair (third axis
    -1 / +1) and two vectors lying in the pair's plane.
    """
    lean = 2.22474487139
    major, minor = 3.0862664687972017, 1.1721513422464978

    vectors = []
    for i, j in ((0, 1), (0, 2), (1, 2)):
        k = 3 - i - j
        for si, sj in itertools.product((1.0, -1.0), repeat=2):
            for third in (-1.0, 1.0):
                v = np.zeros(3)
                v[i], v[j], v[k] = si * lean, sj * lean, third
                vectors.append(v)
            for a, b in ((major, minor), (minor, major)):
                v = np.zeros(3)
                v[i], v[j] = si * a, sj * b
                vectors.append(v)
    return _unit(np.array(vectors))


def directions_4d() -> np.ndarray:
    """48 unit directions: signed permutations of (1, 1, 1, 0) and (+-1, +-1, +-1, +-1)."""
    vectors = []
    for zero in range(4):
        for signs in itertools.product((1.0, -1.0), repeat=3):
            v = np.insert(np.array(signs), zero, 0.0)
            vectors.append(v)
    for signs in itertools.product((1.0, -1.0), repeat=4):
        vectors.append(np.array(signs))
    return _unit(np.array(vectors))


def kernel_envelope(directions: np.ndarray, unskew: float, rsquared: float, resolution: int) -> float:
    """
    Estimates the largest possible raw kernel sum for a gradient set.

    One lattice cell is sampled on a regular grid (in skewed space). At each
    point every lattice vertex within reach is assumed to have hashed to the
    direction best aligned with its offset, which bounds the true output.
    """
    ndims = directions.shape[1]
    ticks = (np.arange(resolution) + 0.5) / resolution
    cell = np.stack(np.meshgrid(*([ticks] * ndims), indexing='ij'), axis=-1).reshape(-1, ndims)

    envelope = np.zeros(len(cell))
    # Offsets -1..2 cover every vertex within reach of a point in [0, 1)^N.
    for offset in itertools.product(range(-1, 3), repeat=ndims):
        skewed = cell - np.array(offset, dtype=np.float64)
        delta = skewed + unskew * skewed.sum(axis=1, keepdims=True)
        falloff = np.maximum(rsquared - np.sum(delta * delta, axis=1), 0.0)
        aligned = np.maximum(np.max(delta @ directions.T, axis=1), 0.0)
        envelope += falloff ** 4 * aligned
    return float(np.max(envelope))


def build_table(directions: np.ndarray, count: int, stride: int) -> np.ndarray:
    """Repeats the directions cyclically to `count` entries, pads each to `stride`, flattens."""
    rows = directions[np.arange(count) % len(directions)]
    table = np.zeros((count, stride))
    table[:, :directions.shape[1]] = rows
    table = table.reshape(-1)
    table.flags.writeable = False
    return table


# --- Process-wide Tables (built once at import) ---
NORMALIZER_3D = kernel_envelope(directions_3d(), UNSKEW_3D, RSQUARED_3D, DEFAULTS.ENVELOPE_RESOLUTION_3D)
NORMALIZER_4D = kernel_envelope(directions_4d(), UNSKEW_4D, RSQUARED_4D, DEFAULTS.ENVELOPE_RESOLUTION_4D)

GRADIENTS_2D = build_table(_unit(_DIRECTIONS_2D) / NORMALIZER_2D, N_GRADS_2D, _STRIDE_2D)
GRADIENTS_3D = build_table(directions_3d() / NORMALIZER_3D, N_GRADS_3D, _STRIDE_3D)
GRADIENTS_4D = build_table(directions_4d() / NORMALIZER_4D, N_GRADS_4D, _STRIDE_4D)


@njit
def grad2(seed, xsvp, ysvp, dx, dy):
    h = (seed ^ xsvp ^ ysvp) * HASH_MULTIPLIER
    h ^= h >> _SHIFT_2D
    gi = h & _MASK_2D
    return GRADIENTS_2D[gi] * dx + GRADIENTS_2D[gi | 1] * dy


@njit
def grad3(seed, xsvp, ysvp, zsvp, dx, dy, dz):
    h = (seed ^ xsvp ^ ysvp ^ zsvp) * HASH_MULTIPLIER
    h ^= h >> _SHIFT_3D
    gi = h & _MASK_3D
    return GRADIENTS_3D[gi] * dx + GRADIENTS_3D[gi | 1] * dy + GRADIENTS_3D[gi | 2] * dz


@njit
def grad4(seed, xsvp, ysvp, zsvp, wsvp, dx, dy, dz, dw):
    h = (seed ^ xsvp ^ ysvp ^ zsvp ^ wsvp) * HASH_MULTIPLIER
    h ^= h >> _SHIFT_4D
    gi = h & _MASK_4D
    return (GRADIENTS_4D[gi] * dx + GRADIENTS_4D[gi | 1] * dy
            + GRADIENTS_4D[gi | 2] * dz + GRADIENTS_4D[gi | 3] * dw)
