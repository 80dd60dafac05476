# coherent_noise/lattice.py

"""
================================================================================
SIMPLEX LATTICE CONSTANTS & ORIENTATION TRANSFORMS
================================================================================
This module holds the fixed per-dimension constants of the skewed simplex
lattice, and builds the linear transforms that map raw input coordinates into
skewed lattice space for each orientation variant.

Data Contract:
---------------
- Inputs:
    - ndims: The dimensionality of the lattice (2, 3 or 4).
    - orientation: One of config.ORIENTATIONS.
- Outputs:
    - transform_matrix(): A read-only (ndims, ndims) float64 array M such that
      skewed = M @ coords.
- Side Effects: None.
- Invariants: For a given (ndims, orientation) the matrix is always identical.
  The 'improve' matrix is the skew applied after an orthonormal rotation, so
  both variants sample the same lattice at the same density.
================================================================================
"""

import numpy as np

from . import config as DEFAULTS

# --- Lattice Hashing (Rule 1) ---
# Large odd 64-bit constants. Every axis of an integer lattice point is
# multiplied by its own prime before hashing. All of them fit in a signed
# int64, so they can be used directly as numba compile-time constants.
PRIME_X = 0x5205402B9270C86F
PRIME_Y = 0x598CD327003817B5
PRIME_Z = 0x5BCC226E9FA0BACB
PRIME_W = 0x56CC5227E58F554B
HASH_MULTIPLIER = 0x53A3F72DEEC546F5

# --- Skew / Unskew ---
# Skewing maps Euclidean space onto the hypercubic lattice that tiles into
# simplices; unskewing maps a lattice offset back into Euclidean space.
SKEW_2D = 0.366025403784439
UNSKEW_2D = -0.21132486540518713
SKEW_3D = 1.0 / 3.0
UNSKEW_3D = -1.0 / 6.0
SKEW_4D = 0.309016994374947
UNSKEW_4D = -0.138196601125011

# --- Kernel Radius ---
# The squared support radius equals the squared distance between lattice
# neighbours, N / (N + 1). A vertex's contribution vanishes at its neighbours.
RSQUARED_2D = 2.0 / 3.0
RSQUARED_3D = 3.0 / 4.0
RSQUARED_4D = 4.0 / 5.0

SKEW = {2: SKEW_2D, 3: SKEW_3D, 4: SKEW_4D}
UNSKEW = {2: UNSKEW_2D, 3: UNSKEW_3D, 4: UNSKEW_4D}
RSQUARED = {2: RSQUARED_2D, 3: RSQUARED_3D, 4: RSQUARED_4D}


def validate_dimensions(ndims) -> int:
    """Returns ndims as an int, or raises if it is not a supported dimension."""
    if isinstance(ndims, bool) or not isinstance(ndims, (int, np.integer)):
        raise TypeError(f"Dimension must be an integer, got {type(ndims).__name__}.")
    ndims = int(ndims)
    if ndims not in DEFAULTS.SUPPORTED_DIMENSIONS:
        raise ValueError(
            f"Dimension must be one of {DEFAULTS.SUPPORTED_DIMENSIONS}, got {ndims}."
        )
    return ndims


def validate_orientation(orientation) -> str:
    if orientation not in DEFAULTS.ORIENTATIONS:
        raise ValueError(
            f"Unknown orientation {orientation!r}; expected one of {DEFAULTS.ORIENTATIONS}."
        )
    return orientation


def skew_matrix(ndims: int) -> np.ndarray:
    """The skew transform s = x + SKEW * sum(x), as a matrix."""
    return np.eye(ndims) + SKEW[ndims] * np.ones((ndims, ndims))


def improve_rotation(ndims: int) -> np.ndarray:
    """
    Orthonormal rotation that sends the last input axis down the lattice main
    diagonal (1, ..., 1) / sqrt(N). The leading N - 1 axes end up in the
    hyperplane orthogonal to the diagonal.
    """
    k = 1.0 / np.sqrt(ndims)
    c = -(1.0 - k) / (ndims - 1)
    lead = ndims - 1

    rotation = np.empty((ndims, ndims))
    rotation[:lead, :lead] = np.eye(lead) + c
    rotation[lead, :lead] = -k
    rotation[:, lead] = k
    return rotation


def transform_matrix(ndims: int, orientation: str) -> np.ndarray:
    """
    Builds the matrix mapping raw coordinates into skewed lattice space.
    The result is read-only so it can be shared between samplers.
    """
    ndims = validate_dimensions(ndims)
    orientation = validate_orientation(orientation)

    matrix = skew_matrix(ndims)
    if orientation == 'improve':
        matrix = matrix @ improve_rotation(ndims)

    matrix = np.ascontiguousarray(matrix, dtype=np.float64)
    matrix.flags.writeable = False
    return matrix
