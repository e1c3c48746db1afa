# planet_generator/presets.py

"""
================================================================================
BIOME PRESETS
================================================================================
Named BiomeProfiles and a seeded random biome generator. Presets are plain
data; a host that wants a different look builds a new BiomeProfile and calls
TerrainMeshBuilder.build again.
================================================================================
"""

import colorsys

import numpy as np

from . import config as DEFAULTS
from .biome import BiomeProfile, GainRange, NoiseShape, SeaNoiseShape
from .noise_field import TerrainLayers
from .color_gradient import to_hex

FOREST = BiomeProfile(
    name="forest",
    land_gradient=DEFAULTS.LAND_COLOR_STOPS,
    sea_gradient=DEFAULTS.SEA_COLOR_STOPS,
)

BEACH = BiomeProfile(
    name="beach",
    noise=NoiseShape(max=0.03, warp=0.2, power=0.9),
    land_gradient=[
        (-0.5, "#e0d8a8"),
        (0.0, "#ccaa00"),
        (0.5, "#cc7700"),
        (1.0, "#994400"),
    ],
    sea_gradient=[
        (-1.0, "#004a66"),
        (-0.55, "#00a8b8"),
        (-0.1, "#00f2e5"),
    ],
    sea_noise=SeaNoiseShape(min=-0.004, max=0.003, scale=4.0),
)

SNOW_FOREST = BiomeProfile(
    name="snow_forest",
    noise=NoiseShape(max=0.06, octaves=5, power=1.3),
    land_gradient=[
        (-0.5, "#dde8f0"),
        (0.0, "#ffffff"),
        (0.5, "#eeffff"),
        (1.0, "#aaddff"),
    ],
    sea_gradient=[
        (-1.0, "#2a3355"),
        (-0.55, "#5566a0"),
        (-0.1, "#8899cc"),
    ],
)

# Zero octaves: every point sits exactly on the unit sphere.
FLAT = BiomeProfile(
    name="flat",
    noise=NoiseShape(octaves=0, warp=0.0),
)

PRESETS = {
    profile.name: profile
    for profile in (FOREST, BEACH, SNOW_FOREST, FLAT)
}


def get_preset(name: str) -> BiomeProfile:
    """Looks up a preset by name. Raises KeyError listing the known names."""
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"Unknown biome preset '{name}'. Available presets: {', '.join(sorted(PRESETS))}") from None


def _hsl_hex(hue: float, saturation: float, lightness: float) -> str:
    return to_hex(colorsys.hls_to_rgb(hue % 1.0, min(1.0, max(0.0, lightness)), saturation))


def random_profile(seed: int) -> BiomeProfile:
    """
    A randomized biome: land colors around a random hue, sea colors around the
    complementary hue, and randomized noise shape. The same seed always yields
    the same profile.
    """
    rng = np.random.default_rng(int(seed) & DEFAULTS.SEED_MASK)

    hue = rng.random()
    water_hue = (hue + 0.5) % 1.0

    land_stops = []
    for position in (-0.5, 0.0, 0.5, 1.0):
        land_stops.append((position, _hsl_hex(
            hue + rng.uniform(-0.05, 0.05),
            rng.uniform(0.5, 1.0),
            rng.uniform(0.3, 0.6),
        )))

    sea_stops = []
    for position in (-1.0, -0.55, -0.1):
        sea_stops.append((position, _hsl_hex(
            water_hue + rng.uniform(-0.05, 0.05),
            rng.uniform(0.6, 1.0),
            0.2 + position * 0.1 + rng.uniform(0.0, 0.2),
        )))

    octaves = int(rng.integers(2, 6))
    noise = NoiseShape(
        min=DEFAULTS.MIN_ELEVATION,
        max=DEFAULTS.MAX_ELEVATION,
        octaves=octaves,
        lacunarity=rng.uniform(1.5, 2.5),
        gain=GainRange(
            min=rng.uniform(0.1, 0.3),
            max=rng.uniform(0.6, 1.0),
            scale=rng.uniform(1.0, 3.0),
        ),
        warp=rng.uniform(0.1, 0.6),
        scale=rng.uniform(0.8, 1.2),
        power=rng.uniform(0.7, 1.7),
    )
    sea_noise = SeaNoiseShape(
        min=-0.005 - rng.uniform(0.0, 0.005),
        max=rng.uniform(0.002, 0.008),
        scale=rng.uniform(3.0, 7.0),
    )
    # The ridged layer carries the randomized detail; continents and hills keep their defaults.
    layers = TerrainLayers(mountain_octaves=octaves)

    return BiomeProfile(
        name=f"random-{int(seed) & DEFAULTS.SEED_MASK}",
        noise=noise,
        layers=layers,
        land_gradient=land_stops,
        sea_gradient=sea_stops,
        sea_noise=sea_noise,
    )
