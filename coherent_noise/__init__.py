# coherent_noise/__init__.py

# Public API of the coherent noise package.

from .fractal import FBM, FractalSampler
from .opensimplex2s import OpenSimplex2S
from .sampler import Sampler
from .seeds import derive_seed, generate_seed

STANDARD = 'standard'
IMPROVE = 'improve'

__all__ = [
    "Sampler",
    "OpenSimplex2S",
    "FractalSampler",
    "FBM",
    "derive_seed",
    "generate_seed",
    "STANDARD",
    "IMPROVE",
]
