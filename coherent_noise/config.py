# coherent_noise/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the noise
samplers. These values are used if they are not explicitly provided when a
sampler is constructed.

DO NOT MODIFY THIS FILE FOR A SPECIFIC USE CASE.
Instead, pass keyword arguments (or a configuration dictionary to
FractalSampler.from_config) when constructing a sampler.
================================================================================
"""

# --- Dimensions ---
# Every sampler works on 2, 3 or 4 dimensional coordinates.
SUPPORTED_DIMENSIONS = (2, 3, 4)

# --- Kernel Orientation ---
# 'standard': isotropic skew of the raw coordinates.
# 'improve': rotates the last axis onto the lattice main diagonal first, which
#            gives more regular sampling across the leading axes (e.g. use the
#            last axis for time or height).
ORIENTATIONS = ('standard', 'improve')
DEFAULT_ORIENTATION = 'standard'

# --- Fractal (FBM) Settings ---
DEFAULT_OCTAVES = 4
MIN_OCTAVES = 1
MAX_OCTAVES = 32
DEFAULT_FREQUENCY = 1.0
DEFAULT_LACUNARITY = 2.0
DEFAULT_PERSISTENCE = 0.5

# --- Seeds ---
# Golden-ratio increment used to space out per-octave seeds before mixing.
OCTAVE_SEED_INCREMENT = 0x9E3779B97F4A7C15

# --- Gradient Normalization ---
# Points per axis used when sampling one lattice cell to find the worst-case
# kernel sum for the 3D and 4D gradient tables. Higher is more accurate but
# slower to import (the 4D cost grows with the 4th power).
ENVELOPE_RESOLUTION_3D = 16
ENVELOPE_RESOLUTION_4D = 10
