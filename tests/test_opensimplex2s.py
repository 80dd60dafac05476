import itertools
import logging
import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from coherent_noise import IMPROVE, STANDARD, OpenSimplex2S, gradients, lattice
from coherent_noise.seeds import _to_int64

PRIMES = (lattice.PRIME_X, lattice.PRIME_Y, lattice.PRIME_Z, lattice.PRIME_W)
TABLES = {
    2: (gradients.GRADIENTS_2D, 2, 58, 254),
    3: (gradients.GRADIENTS_3D, 4, 58, 1020),
    4: (gradients.GRADIENTS_4D, 4, 57, 2044),
}


def _reference_sample(ndims, seed, matrix, coords):
    """
    Sums the falloff contribution of every lattice vertex in a generous block
    around the point, hashing in plain Python integers.
    """
    table, _, shift, mask = TABLES[ndims]
    skewed = [sum(matrix[r, c] * coords[c] for c in range(ndims)) for r in range(ndims)]
    base = [math.floor(s) for s in skewed]
    frac = [s - b for s, b in zip(skewed, base)]
    unskew = lattice.UNSKEW[ndims]
    rsquared = lattice.RSQUARED[ndims]

    value = 0.0
    for offset in itertools.product(range(-2, 4), repeat=ndims):
        s = [f - o for f, o in zip(frac, offset)]
        t = sum(s) * unskew
        d = [c + t for c in s]
        a = rsquared - sum(c * c for c in d)
        if a <= 0.0:
            continue
        h = seed
        for b, o, prime in zip(base, offset, PRIMES):
            h ^= _to_int64((b + o) * prime)
        h = _to_int64(h * lattice.HASH_MULTIPLIER)
        h ^= h >> shift
        gi = h & mask
        value += a ** 4 * sum(table[gi | i] * d[i] for i in range(ndims))
    return value


def _random_points(ndims, count, spread=50.0, seed=0):
    return np.random.default_rng(seed).uniform(-spread, spread, size=(count, ndims))


# --- Construction ---

def test_construction_and_properties():
    noise = OpenSimplex2S(3, seed=11, orientation=IMPROVE)
    assert noise.ndims == 3
    assert noise.seed == 11
    assert noise.orientation == 'improve'
    assert repr(noise) == "OpenSimplex2S(ndims=3, seed=11, orientation='improve')"


def test_default_orientation_is_standard():
    assert OpenSimplex2S(2, seed=1).orientation == STANDARD


def test_missing_seed_is_generated_and_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="coherent_noise.opensimplex2s"):
        noise = OpenSimplex2S(2)
    assert isinstance(noise.seed, int)
    assert "generated seed" in caplog.text


def test_injected_logger_is_used():
    logger = logging.getLogger("terrain.noise")
    assert OpenSimplex2S(2, seed=1, logger=logger).logger is logger


@pytest.mark.parametrize("ndims", [1, 5])
def test_bad_dimension_is_rejected(ndims):
    with pytest.raises(ValueError):
        OpenSimplex2S(ndims, seed=1)


def test_bad_orientation_is_rejected():
    with pytest.raises(ValueError):
        OpenSimplex2S(2, seed=1, orientation='diagonal')


def test_bad_seed_is_rejected():
    with pytest.raises(TypeError):
        OpenSimplex2S(2, seed=1.5)


# --- Agreement with the brute-force reference ---

@pytest.mark.parametrize("ndims", [2, 3, 4])
@pytest.mark.parametrize("orientation", [STANDARD, IMPROVE])
def test_kernel_matches_brute_force_reference(ndims, orientation):
    noise = OpenSimplex2S(ndims, seed=-4242, orientation=orientation)
    matrix = lattice.transform_matrix(ndims, orientation)
    for point in _random_points(ndims, 40, spread=20.0, seed=ndims):
        expected = _reference_sample(ndims, noise.seed, matrix, point)
        assert noise.sample(*point) == pytest.approx(expected, abs=1e-9)


# --- Determinism ---

@pytest.mark.parametrize("ndims", [2, 3, 4])
def test_sampling_is_deterministic(ndims):
    a = OpenSimplex2S(ndims, seed=99)
    b = OpenSimplex2S(ndims, seed=99)
    point = [0.3, 1.7, -2.1, 4.4][:ndims]
    assert a.sample(*point) == a.sample(*point) == b.sample(*point)


def test_with_seed_keeps_configuration():
    noise = OpenSimplex2S(4, seed=1, orientation=IMPROVE)
    copy = noise.with_seed(2)
    assert copy.seed == 2
    assert copy.orientation == IMPROVE
    assert copy.ndims == 4
    assert noise.seed == 1
    assert copy.sample(0.1, 0.2, 0.3, 0.4) == OpenSimplex2S(4, seed=2, orientation=IMPROVE).sample(0.1, 0.2, 0.3, 0.4)


def test_seed_is_wrapped_to_64_bits():
    assert OpenSimplex2S(2, seed=2 ** 64 + 3).sample(1.3, 2.9) == OpenSimplex2S(2, seed=3).sample(1.3, 2.9)


# --- Statistical properties ---

@pytest.mark.parametrize("ndims", [2, 3, 4])
@pytest.mark.parametrize("orientation", [STANDARD, IMPROVE])
def test_output_is_bounded_and_non_degenerate(ndims, orientation):
    noise = OpenSimplex2S(ndims, seed=2024, orientation=orientation)
    values = noise.sample_array(_random_points(ndims, 10_000))
    assert np.all(np.isfinite(values))
    assert np.max(np.abs(values)) <= 1.05
    assert np.std(values) > 0.01


@pytest.mark.parametrize("ndims", [2, 3, 4])
@pytest.mark.parametrize("orientation", [STANDARD, IMPROVE])
def test_output_is_continuous(ndims, orientation):
    noise = OpenSimplex2S(ndims, seed=5, orientation=orientation)
    points = _random_points(ndims, 2_000, spread=10.0, seed=1)
    direction = np.ones(ndims) / np.sqrt(ndims)
    base = noise.sample_array(points)

    coarse = np.abs(noise.sample_array(points + 1e-5 * direction) - base)
    fine = np.abs(noise.sample_array(points + 1e-6 * direction) - base)
    assert np.max(coarse) < 1e-2
    # Differences shrink with the step size (Lipschitz almost everywhere).
    assert np.max(fine) < np.max(coarse) / 5


@pytest.mark.parametrize("ndims", [2, 3, 4])
def test_orientations_differ(ndims):
    points = _random_points(ndims, 200, spread=10.0, seed=3)
    standard = OpenSimplex2S(ndims, seed=8, orientation=STANDARD).sample_array(points)
    improve = OpenSimplex2S(ndims, seed=8, orientation=IMPROVE).sample_array(points)
    assert not np.allclose(standard, improve)


@pytest.mark.parametrize("ndims", [2, 3, 4])
def test_seeds_differ(ndims):
    points = _random_points(ndims, 200, spread=10.0, seed=4) + 0.5
    a = OpenSimplex2S(ndims, seed=1).sample_array(points)
    b = OpenSimplex2S(ndims, seed=2).sample_array(points)
    assert not np.allclose(a, b)


def test_large_coordinates_stay_finite():
    for ndims in (2, 3, 4):
        noise = OpenSimplex2S(ndims, seed=1)
        value = noise.sample(*([1e12 + 0.25] * ndims))
        assert math.isfinite(value)
        value = noise.sample(*([-1e12 - 0.75] * ndims))
        assert math.isfinite(value)


# --- Batch sampling ---

@pytest.mark.parametrize("ndims", [2, 3, 4])
def test_sample_array_matches_scalar_sampling(ndims):
    noise = OpenSimplex2S(ndims, seed=77, orientation=IMPROVE)
    points = _random_points(ndims, 64, spread=5.0, seed=9)
    batch = noise.sample_array(points)
    scalar = np.array([noise.sample(*p) for p in points])
    np.testing.assert_allclose(batch, scalar, rtol=0, atol=1e-15)


def test_sample_array_preserves_leading_shape():
    noise = OpenSimplex2S(2, seed=1)
    xs, ys = np.meshgrid(np.linspace(0, 4, 6), np.linspace(0, 3, 5))
    grid = np.stack([xs, ys], axis=-1)
    values = noise.sample_array(grid)
    assert values.shape == (5, 6)
    assert values[2, 3] == pytest.approx(noise.sample(*grid[2, 3]), abs=1e-15)

    assert noise.sample_array([1.5, 2.5]).shape == ()
    assert noise.sample_array(np.zeros((0, 2))).shape == (0,)


def test_sample_array_accepts_lists_and_non_contiguous_input():
    noise = OpenSimplex2S(3, seed=1)
    points = _random_points(3, 20)
    strided = np.asfortranarray(points)
    np.testing.assert_array_equal(noise.sample_array(strided), noise.sample_array(points))
    np.testing.assert_array_equal(noise.sample_array(points.tolist()), noise.sample_array(points))


@pytest.mark.parametrize("shape", [(10, 3), (3,), ()])
def test_sample_array_rejects_wrong_trailing_axis(shape):
    with pytest.raises(ValueError):
        OpenSimplex2S(2, seed=1).sample_array(np.zeros(shape))


def test_concurrent_sampling_matches_serial():
    noise = OpenSimplex2S(3, seed=31337)
    chunks = [_random_points(3, 5_000, seed=i) for i in range(8)]
    serial = [noise.sample_array(chunk) for chunk in chunks]
    with ThreadPoolExecutor(max_workers=4) as executor:
        threaded = list(executor.map(noise.sample_array, chunks))
    for expected, actual in zip(serial, threaded):
        np.testing.assert_array_equal(actual, expected)
