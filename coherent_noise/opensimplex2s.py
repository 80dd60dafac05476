# coherent_noise/opensimplex2s.py

"""
================================================================================
OPENSIMPLEX2S NOISE KERNEL
================================================================================
This module provides smooth (C1-continuous) gradient noise on a skewed simplex
lattice in 2, 3 and 4 dimensions. The kernels are JIT-compiled with Numba;
the OpenSimplex2S class picks the kernel for its dimension once, at
construction.

Data Contract:
---------------
- Inputs:
    - seed: A signed 64-bit integer.
    - m: The (N, N) orientation matrix from lattice.transform_matrix().
    - x, y[, z[, w]]: Real coordinates, or an (M, N) array of them.
- Outputs:
    - A float (or float64 array) approximately in the range [-1, 1].
- Side Effects: None.
- Invariants: The output for a point depends only on (seed, m, point). Which
  vertices are visited is decided by sign tests on the transformed point
  alone, never on evaluation order.
- Limits: Coordinates are floored into int64 lattice cells and lattice hashing
  wraps modulo 2**64. Inputs are expected to stay well inside |x| < 2**53;
  beyond that a float has no fractional part left and the noise degenerates.
================================================================================
"""

import numpy as np
from numba import njit

from . import config as DEFAULTS
from . import lattice
from .gradients import grad2, grad3, grad4
from .lattice import (
    PRIME_W, PRIME_X, PRIME_Y, PRIME_Z,
    RSQUARED_2D, RSQUARED_3D, RSQUARED_4D,
    UNSKEW_2D, UNSKEW_3D, UNSKEW_4D,
)
from .sampler import Sampler

# Unskewed distance along each axis from a vertex to its (1, 1) diagonal neighbour.
_DIAGONAL_2D = 1.0 + 2.0 * UNSKEW_2D


@njit
def _vertex2(seed, xsvp, ysvp, dx, dy):
    a = RSQUARED_2D - dx * dx - dy * dy
    if a <= 0.0:
        return 0.0
    a *= a
    return a * a * grad2(seed, xsvp, ysvp, dx, dy)


@njit
def _noise2_skewed(seed, xs, ys):
    """2D OpenSimplex2S on already skewed coordinates: four vertices per point."""
    xsb = int(np.floor(xs))
    ysb = int(np.floor(ys))
    xi = xs - xsb
    yi = ys - ysb

    xsbp = xsb * PRIME_X
    ysbp = ysb * PRIME_Y

    # Unskewed offset from the base vertex.
    t = (xi + yi) * UNSKEW_2D
    dx0 = xi + t
    dy0 = yi + t

    value = _vertex2(seed, xsbp, ysbp, dx0, dy0)
    value += _vertex2(seed, xsbp + PRIME_X, ysbp + PRIME_Y, dx0 - _DIAGONAL_2D, dy0 - _DIAGONAL_2D)

    us = UNSKEW_2D
    xmyi = xi - yi
    if t < UNSKEW_2D:
        if xi + xmyi > 1.0:
            value += _vertex2(seed, xsbp + PRIME_X + PRIME_X, ysbp + PRIME_Y,
                              dx0 - 3.0 * us - 2.0, dy0 - 3.0 * us - 1.0)
        else:
            value += _vertex2(seed, xsbp, ysbp + PRIME_Y, dx0 - us, dy0 - us - 1.0)
        if yi - xmyi > 1.0:
            value += _vertex2(seed, xsbp + PRIME_X, ysbp + PRIME_Y + PRIME_Y,
                              dx0 - 3.0 * us - 1.0, dy0 - 3.0 * us - 2.0)
        else:
            value += _vertex2(seed, xsbp + PRIME_X, ysbp, dx0 - us - 1.0, dy0 - us)
    else:
        if xi + xmyi < 0.0:
            value += _vertex2(seed, xsbp - PRIME_X, ysbp, dx0 + us + 1.0, dy0 + us)
        else:
            value += _vertex2(seed, xsbp + PRIME_X, ysbp, dx0 - us - 1.0, dy0 - us)
        if yi < xmyi:
            value += _vertex2(seed, xsbp, ysbp - PRIME_Y, dx0 + us, dy0 + us + 1.0)
        else:
            value += _vertex2(seed, xsbp, ysbp + PRIME_Y, dx0 - us, dy0 - us - 1.0)
    return value


@njit
def _noise3_skewed(seed, xs, ys, zs):
    """
    3D kernel on already skewed coordinates.

    Per axis, the half of the cell the point falls in selects three candidate
    lattice rows ({-1, 0, 1} or {0, 1, 2}). Any vertex outside that block is at
    squared distance >= 9/8 from the point, beyond the kernel radius, so the
    sum is identical to summing the whole lattice.
    """
    xsb = int(np.floor(xs))
    ysb = int(np.floor(ys))
    zsb = int(np.floor(zs))
    xi = xs - xsb
    yi = ys - ysb
    zi = zs - zsb

    x0 = -1 if xi < 0.5 else 0
    y0 = -1 if yi < 0.5 else 0
    z0 = -1 if zi < 0.5 else 0

    value = 0.0
    for i in range(x0, x0 + 3):
        sx = xi - i
        xsvp = (xsb + i) * PRIME_X
        for j in range(y0, y0 + 3):
            sy = yi - j
            ysvp = (ysb + j) * PRIME_Y
            for k in range(z0, z0 + 3):
                sz = zi - k
                t = (sx + sy + sz) * UNSKEW_3D
                dx = sx + t
                dy = sy + t
                dz = sz + t
                a = RSQUARED_3D - dx * dx - dy * dy - dz * dz
                if a > 0.0:
                    a *= a
                    value += a * a * grad3(seed, xsvp, ysvp, (zsb + k) * PRIME_Z, dx, dy, dz)
    return value


@njit
def _noise4_skewed(seed, xs, ys, zs, ws):
    """4D kernel on already skewed coordinates; same candidate selection as 3D."""
    xsb = int(np.floor(xs))
    ysb = int(np.floor(ys))
    zsb = int(np.floor(zs))
    wsb = int(np.floor(ws))
    xi = xs - xsb
    yi = ys - ysb
    zi = zs - zsb
    wi = ws - wsb

    x0 = -1 if xi < 0.5 else 0
    y0 = -1 if yi < 0.5 else 0
    z0 = -1 if zi < 0.5 else 0
    w0 = -1 if wi < 0.5 else 0

    value = 0.0
    for i in range(x0, x0 + 3):
        sx = xi - i
        xsvp = (xsb + i) * PRIME_X
        for j in range(y0, y0 + 3):
            sy = yi - j
            ysvp = (ysb + j) * PRIME_Y
            for k in range(z0, z0 + 3):
                sz = zi - k
                zsvp = (zsb + k) * PRIME_Z
                for n in range(w0, w0 + 3):
                    sw = wi - n
                    t = (sx + sy + sz + sw) * UNSKEW_4D
                    dx = sx + t
                    dy = sy + t
                    dz = sz + t
                    dw = sw + t
                    a = RSQUARED_4D - dx * dx - dy * dy - dz * dz - dw * dw
                    if a > 0.0:
                        a *= a
                        value += a * a * grad4(seed, xsvp, ysvp, zsvp, (wsb + n) * PRIME_W,
                                               dx, dy, dz, dw)
    return value


@njit
def _sample2(seed, m, x, y):
    return _noise2_skewed(
        seed,
        m[0, 0] * x + m[0, 1] * y,
        m[1, 0] * x + m[1, 1] * y,
    )


@njit
def _sample3(seed, m, x, y, z):
    return _noise3_skewed(
        seed,
        m[0, 0] * x + m[0, 1] * y + m[0, 2] * z,
        m[1, 0] * x + m[1, 1] * y + m[1, 2] * z,
        m[2, 0] * x + m[2, 1] * y + m[2, 2] * z,
    )


@njit
def _sample4(seed, m, x, y, z, w):
    return _noise4_skewed(
        seed,
        m[0, 0] * x + m[0, 1] * y + m[0, 2] * z + m[0, 3] * w,
        m[1, 0] * x + m[1, 1] * y + m[1, 2] * z + m[1, 3] * w,
        m[2, 0] * x + m[2, 1] * y + m[2, 2] * z + m[2, 3] * w,
        m[3, 0] * x + m[3, 1] * y + m[3, 2] * z + m[3, 3] * w,
    )


@njit(nogil=True)
def _sample2_array(seed, m, points):
    out = np.empty(points.shape[0])
    for i in range(points.shape[0]):
        out[i] = _sample2(seed, m, points[i, 0], points[i, 1])
    return out


@njit(nogil=True)
def _sample3_array(seed, m, points):
    out = np.empty(points.shape[0])
    for i in range(points.shape[0]):
        out[i] = _sample3(seed, m, points[i, 0], points[i, 1], points[i, 2])
    return out


@njit(nogil=True)
def _sample4_array(seed, m, points):
    out = np.empty(points.shape[0])
    for i in range(points.shape[0]):
        out[i] = _sample4(seed, m, points[i, 0], points[i, 1], points[i, 2], points[i, 3])
    return out


# Scalar and batch kernel for each dimension.
_KERNELS = {
    2: (_sample2, _sample2_array),
    3: (_sample3, _sample3_array),
    4: (_sample4, _sample4_array),
}


class OpenSimplex2S(Sampler):
    """
    OpenSimplex2S-style gradient noise in 2, 3 or 4 dimensions.

    Args:
        ndims (int): Number of coordinates per sample.
        seed (int, optional): Hash seed. Generated if omitted.
        orientation (str): 'standard' or 'improve' (see config.ORIENTATIONS).
        logger (logging.Logger, optional): Logger for construction messages.
    """

    def __init__(self, ndims: int, seed: int = None, orientation: str = DEFAULTS.DEFAULT_ORIENTATION,
                 logger=None):
        super().__init__(ndims, seed, logger)
        self._orientation = lattice.validate_orientation(orientation)
        self._matrix = lattice.transform_matrix(self.ndims, self._orientation)
        self._kernel, self._kernel_array = _KERNELS[self.ndims]

    @property
    def orientation(self) -> str:
        return self._orientation

    def sample(self, *coords: float) -> float:
        return self._kernel(self.seed, self._matrix, *[float(c) for c in coords])

    def sample_array(self, points) -> np.ndarray:
        flat, shape = self._flatten_points(points)
        return self._kernel_array(self.seed, self._matrix, flat).reshape(shape)

    def with_seed(self, seed: int) -> "OpenSimplex2S":
        return OpenSimplex2S(self.ndims, seed, orientation=self._orientation, logger=self.logger)

    def __repr__(self):
        return (f"OpenSimplex2S(ndims={self.ndims}, seed={self.seed}, "
                f"orientation={self._orientation!r})")
