# planet_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides functions for generating 3D gradient (improved Perlin)
noise over points on the unit sphere. It is designed to be a pure, stateless
utility; all seeding happens through the permutation table and lattice origin
passed in by the caller.

Data Contract:
---------------
- Inputs:
    - p: A pre-shuffled NumPy permutation table (int array, length 512).
    - origin: A (3,) float array added to every sample before lattice lookup.
    - points: A (N, 3) float array of sample positions.
    - persistence: A (N,) float array, one amplitude decay per point.
    - octaves, lacunarity, frequency: Standard noise parameters.
- Outputs:
    - A (N,) NumPy array. Fractal noise lies in [-1, 1], ridged noise in [0, 1].
- Side Effects: None.
- Invariants: Each output slot depends only on its own input point, so the
  outer loop is a parallel map with no shared accumulator.
================================================================================
"""

import numpy as np
from numba import njit, prange

# The 12 cube-edge gradient directions of improved Perlin noise.
_GRADIENT_VECTORS = np.array([
    [1.0, 1.0, 0.0], [-1.0, 1.0, 0.0], [1.0, -1.0, 0.0], [-1.0, -1.0, 0.0],
    [1.0, 0.0, 1.0], [-1.0, 0.0, 1.0], [1.0, 0.0, -1.0], [-1.0, 0.0, -1.0],
    [0.0, 1.0, 1.0], [0.0, -1.0, 1.0], [0.0, 1.0, -1.0], [0.0, -1.0, -1.0],
])

@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def _gradient(h, x, y, z):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h % 12]
    return g[0] * x + g[1] * y + g[2] * z

@njit
def perlin_noise_3d(p, x, y, z):
    """
    Samples a single octave of 3D gradient noise, clamped to [-1, 1].
    """
    xi = int(np.floor(x))
    yi = int(np.floor(y))
    zi = int(np.floor(z))

    xf = x - xi
    yf = y - yi
    zf = z - zi

    u = _fade(xf)
    v = _fade(yf)
    w = _fade(zf)

    px0 = xi % 256
    px1 = (px0 + 1) % 256
    py0 = yi % 256
    py1 = (py0 + 1) % 256
    pz0 = zi % 256
    pz1 = (pz0 + 1) % 256

    # Numba requires scalar indexing
    idx000 = p[p[p[px0] + py0] + pz0]
    idx010 = p[p[p[px0] + py1] + pz0]
    idx001 = p[p[p[px0] + py0] + pz1]
    idx011 = p[p[p[px0] + py1] + pz1]
    idx100 = p[p[p[px1] + py0] + pz0]
    idx110 = p[p[p[px1] + py1] + pz0]
    idx101 = p[p[p[px1] + py0] + pz1]
    idx111 = p[p[p[px1] + py1] + pz1]

    x00 = _lerp(_gradient(idx000, xf, yf, zf), _gradient(idx100, xf - 1, yf, zf), u)
    x10 = _lerp(_gradient(idx010, xf, yf - 1, zf), _gradient(idx110, xf - 1, yf - 1, zf), u)
    x01 = _lerp(_gradient(idx001, xf, yf, zf - 1), _gradient(idx101, xf - 1, yf, zf - 1), u)
    x11 = _lerp(_gradient(idx011, xf, yf - 1, zf - 1), _gradient(idx111, xf - 1, yf - 1, zf - 1), u)

    y0 = _lerp(x00, x10, v)
    y1 = _lerp(x01, x11, v)
    value = _lerp(y0, y1, w)

    return min(1.0, max(-1.0, value))

@njit(parallel=True)
def fractal_noise_3d(p, origin, points, octaves, persistence, lacunarity, frequency):
    """
    Generate normalized fractal noise for every point.
    The sum is divided by the total amplitude magnitude used, so the result
    stays in [-1, 1] for any octave count. Zero octaves yields 0.
    """
    n = points.shape[0]
    total_noise = np.zeros(n)

    for i in prange(n):
        noise_val = 0.0
        amplitude = 1.0
        freq = frequency
        amplitude_sum = 0.0

        for _ in range(octaves):
            octave_noise = perlin_noise_3d(
                p,
                (points[i, 0] + origin[0]) * freq,
                (points[i, 1] + origin[1]) * freq,
                (points[i, 2] + origin[2]) * freq,
            )
            noise_val += octave_noise * amplitude
            amplitude_sum += abs(amplitude)
            amplitude *= persistence[i]
            freq *= lacunarity

        if amplitude_sum > 0.0:
            total_noise[i] = noise_val / amplitude_sum

    return total_noise

@njit(parallel=True)
def ridged_noise_3d(p, origin, points, octaves, persistence, lacunarity, frequency):
    """
    Generate normalized ridged fractal noise for every point.
    Each octave contributes 1 - |noise|, weighted by the amplitude magnitude,
    so the result stays in [0, 1]. Zero octaves yields 0.
    """
    n = points.shape[0]
    total_noise = np.zeros(n)

    for i in prange(n):
        noise_val = 0.0
        amplitude = 1.0
        freq = frequency
        amplitude_sum = 0.0

        for _ in range(octaves):
            octave_noise = perlin_noise_3d(
                p,
                (points[i, 0] + origin[0]) * freq,
                (points[i, 1] + origin[1]) * freq,
                (points[i, 2] + origin[2]) * freq,
            )
            noise_val += (1.0 - abs(octave_noise)) * abs(amplitude)
            amplitude_sum += abs(amplitude)
            amplitude *= persistence[i]
            freq *= lacunarity

        if amplitude_sum > 0.0:
            total_noise[i] = noise_val / amplitude_sum

    return total_noise

def create_permutation_table(rng: np.random.Generator) -> np.ndarray:
    """Shuffles the lattice indices and doubles the table to avoid wrapping."""
    p = np.arange(256, dtype=np.int64)
    rng.shuffle(p)
    return np.stack([p, p]).flatten()
