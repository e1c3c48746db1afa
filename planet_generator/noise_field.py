# planet_generator/noise_field.py

"""
================================================================================
SEEDED NOISE FIELD
================================================================================
This module provides the NoiseField class, a seeded scalar field over points on
the unit sphere. It owns one pseudo-random stream per channel (height, biome,
moisture, river, temperature) and composes the stateless kernels in `noise` into
fractal, ridged, redistributed and layered terrain values.

Data Contract:
---------------
- Inputs (on initialization):
    - seed (int): Master seed, masked to 32 bits.
    - scale, octaves, persistence, lacunarity, redistribution: Field shape.
- Inputs (on evaluation):
    - A single point (3,) or a batch of points (N, 3).
- Outputs:
    - A float for a single point, or a (N,) NumPy array for a batch.
- Side Effects: None.
- Invariants: Evaluation is a pure function of (point, seed, parameters).
  The field is immutable after construction.
================================================================================
"""

from enum import Enum
from typing import Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from . import config as DEFAULTS
from . import noise


class NoiseChannel(str, Enum):
    """Independent noise streams derived from the master seed."""
    HEIGHT = "height"
    BIOME = "biome"
    MOISTURE = "moisture"
    RIVER = "river"
    TEMPERATURE = "temperature"


_CHANNEL_SEED_OFFSETS = {
    NoiseChannel.HEIGHT: DEFAULTS.HEIGHT_SEED_OFFSET,
    NoiseChannel.BIOME: DEFAULTS.BIOME_SEED_OFFSET,
    NoiseChannel.MOISTURE: DEFAULTS.MOISTURE_SEED_OFFSET,
    NoiseChannel.RIVER: DEFAULTS.RIVER_SEED_OFFSET,
    NoiseChannel.TEMPERATURE: DEFAULTS.TEMPERATURE_SEED_OFFSET,
}

# (scale multiplier, octaves) for every channel except height.
_CHANNEL_SHAPES = {
    NoiseChannel.BIOME: DEFAULTS.BIOME_CHANNEL,
    NoiseChannel.MOISTURE: DEFAULTS.MOISTURE_CHANNEL,
    NoiseChannel.RIVER: DEFAULTS.RIVER_CHANNEL,
    NoiseChannel.TEMPERATURE: DEFAULTS.TEMPERATURE_CHANNEL,
}

# Sample offsets for the three warp components, far enough apart to decorrelate.
_WARP_OFFSETS = np.array([
    [0.0, 0.0, 0.0],
    [5.2, 1.3, 7.1],
    [1.7, 9.2, 3.4],
])


class TerrainLayers(BaseModel):
    """
    Weights, scales, octave counts and persistences of the three composite
    terrain layers. An octave count set to None uses the field's own octave
    count; a persistence set to None uses the persistence passed to `terrain`.
    """
    model_config = ConfigDict(frozen=True)

    continent_scale: float = Field(DEFAULTS.CONTINENT_SCALE, description="Frequency multiplier of the continental layer")
    continent_octaves: Optional[int] = Field(DEFAULTS.CONTINENT_OCTAVES, description="Octaves of the continental layer")
    continent_persistence: Optional[float] = Field(None, description="Amplitude decay of the continental layer")
    continent_weight: float = Field(DEFAULTS.CONTINENT_WEIGHT, description="Weight of the continental layer")

    mountain_scale: float = Field(DEFAULTS.MOUNTAIN_SCALE, description="Frequency multiplier of the ridged mountain layer")
    mountain_octaves: Optional[int] = Field(DEFAULTS.MOUNTAIN_OCTAVES, description="Octaves of the ridged mountain layer")
    mountain_persistence: Optional[float] = Field(None, description="Amplitude decay of the ridged mountain layer")
    mountain_weight: float = Field(DEFAULTS.MOUNTAIN_WEIGHT, description="Weight of the ridged mountain layer")

    hill_scale: float = Field(DEFAULTS.HILL_SCALE, description="Frequency multiplier of the hill layer")
    hill_octaves: Optional[int] = Field(DEFAULTS.HILL_OCTAVES, description="Octaves of the hill layer")
    hill_persistence: Optional[float] = Field(None, description="Amplitude decay of the hill layer")
    hill_weight: float = Field(DEFAULTS.HILL_WEIGHT, description="Weight of the hill layer")


def _as_points(point) -> tuple[np.ndarray, bool]:
    """Returns a contiguous (N, 3) float array and whether the input was a single point."""
    arr = np.asarray(point, dtype=np.float64)
    if arr.ndim == 1:
        return np.ascontiguousarray(arr.reshape(1, 3)), True
    return np.ascontiguousarray(arr.reshape(-1, 3)), False


def _unwrap(values: np.ndarray, single: bool):
    return float(values[0]) if single else values


class NoiseField:
    """
    Seeded fractal noise over the unit sphere.
    Every channel has its own permutation table and lattice origin, so channels
    share spatial structure only through the points they are sampled at.
    """
    def __init__(
        self,
        seed: int = DEFAULTS.DEFAULT_SEED,
        scale: float = DEFAULTS.NOISE_SCALE,
        octaves: int = DEFAULTS.NOISE_OCTAVES,
        persistence: float = DEFAULTS.NOISE_PERSISTENCE,
        lacunarity: float = DEFAULTS.NOISE_LACUNARITY,
        redistribution: float = DEFAULTS.NOISE_REDISTRIBUTION,
    ):
        self._seed = int(seed) & DEFAULTS.SEED_MASK
        self._scale = float(scale)
        self._octaves = int(octaves)
        self._persistence = float(persistence)
        self._lacunarity = float(lacunarity)
        self._redistribution = float(redistribution)

        # Channels are seeded in a fixed order so the streams never depend on
        # which channel is evaluated first.
        self._streams = {}
        for channel in NoiseChannel:
            rng = np.random.default_rng((self._seed + _CHANNEL_SEED_OFFSETS[channel]) & DEFAULTS.SEED_MASK)
            table = noise.create_permutation_table(rng)
            # A fractional origin keeps samples off the integer lattice, where
            # gradient noise is always zero.
            origin = rng.uniform(0.0, 256.0, size=3)
            table.setflags(write=False)
            origin.setflags(write=False)
            self._streams[channel] = (table, origin)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def octaves(self) -> int:
        return self._octaves

    @property
    def persistence(self) -> float:
        return self._persistence

    @property
    def lacunarity(self) -> float:
        return self._lacunarity

    @property
    def redistribution(self) -> float:
        return self._redistribution

    def __repr__(self):
        return (
            f"NoiseField(seed={self._seed}, scale={self._scale}, octaves={self._octaves}, "
            f"persistence={self._persistence}, lacunarity={self._lacunarity}, "
            f"redistribution={self._redistribution})"
        )

    def _persistence_array(self, persistence, count: int) -> np.ndarray:
        if persistence is None:
            persistence = self._persistence
        if np.ndim(persistence) == 0:
            return np.full(count, float(persistence))
        return np.ascontiguousarray(np.asarray(persistence, dtype=np.float64).reshape(count))

    def evaluate(self, point, channel: NoiseChannel = NoiseChannel.HEIGHT):
        """
        Samples a channel at the given point(s). Returns values in [-1, 1].

        The height channel uses the field's own octaves, persistence and
        lacunarity and applies the redistribution exponent. The auxiliary
        channels use fixed per-channel scale multipliers and octave counts.
        """
        channel = NoiseChannel(channel)
        if channel is NoiseChannel.HEIGHT:
            values = self.fractal(point, self._octaves, self._persistence, self._scale, channel=channel)
            return self.redistribute(values, self._redistribution)

        multiplier, octaves = _CHANNEL_SHAPES[channel]
        return self.fractal(point, octaves, self._persistence, self._scale * multiplier, channel=channel)

    def fractal(self, point, octaves: int, persistence=None, scale: float = 1.0,
                lacunarity: Optional[float] = None, channel: NoiseChannel = NoiseChannel.HEIGHT):
        """
        Normalized fractal noise in [-1, 1].

        Args:
            point: A (3,) point or a (N, 3) batch.
            octaves (int): Number of octaves. Zero or fewer yields 0.
            persistence (float or np.ndarray, optional): Amplitude decay per
                octave, either one value or one value per point.
            scale (float): Starting frequency.
            lacunarity (float, optional): Frequency growth per octave.
            channel (NoiseChannel): Which seeded stream to sample.
        """
        points, single = _as_points(point)
        table, origin = self._streams[NoiseChannel(channel)]
        values = noise.fractal_noise_3d(
            table, origin, points,
            int(octaves),
            self._persistence_array(persistence, points.shape[0]),
            float(self._lacunarity if lacunarity is None else lacunarity),
            float(scale),
        )
        return _unwrap(values, single)

    def ridged(self, point, octaves: int, persistence=None, scale: float = 1.0,
               lacunarity: Optional[float] = None, channel: NoiseChannel = NoiseChannel.HEIGHT):
        """Ridged fractal noise (each octave is 1 - |noise|), normalized to [0, 1]."""
        points, single = _as_points(point)
        table, origin = self._streams[NoiseChannel(channel)]
        values = noise.ridged_noise_3d(
            table, origin, points,
            int(octaves),
            self._persistence_array(persistence, points.shape[0]),
            float(self._lacunarity if lacunarity is None else lacunarity),
            float(scale),
        )
        return _unwrap(values, single)

    @staticmethod
    def redistribute(value, exponent: float):
        """
        Power-law reshaping: |x| ** exponent * sign(x).
        Exponents above 1 sharpen extremes, below 1 flatten them. An exponent of
        1 or a non-positive exponent leaves the value unchanged.
        """
        if exponent == 1.0 or exponent <= 0.0:
            return value
        reshaped = np.power(np.abs(value), exponent) * np.sign(value)
        return float(reshaped) if np.ndim(value) == 0 else reshaped

    def terrain(self, point, layers: Optional[TerrainLayers] = None, persistence=None):
        """
        Composite terrain value: a weighted sum of a continental fractal layer,
        a ridged mountain layer and a hill fractal layer, each sampled at its
        own scale (relative to the field scale), octave count and persistence.
        """
        layers = layers or TerrainLayers()

        def octaves_or_default(octaves):
            return self._octaves if octaves is None else octaves

        def persistence_or_default(layer_persistence):
            return persistence if layer_persistence is None else layer_persistence

        continent = self.fractal(
            point, octaves_or_default(layers.continent_octaves),
            persistence_or_default(layers.continent_persistence),
            self._scale * layers.continent_scale,
        )
        mountain = self.ridged(
            point, octaves_or_default(layers.mountain_octaves),
            persistence_or_default(layers.mountain_persistence),
            self._scale * layers.mountain_scale,
        )
        hill = self.fractal(
            point, octaves_or_default(layers.hill_octaves),
            persistence_or_default(layers.hill_persistence),
            self._scale * layers.hill_scale,
        )
        return (
            continent * layers.continent_weight
            + mountain * layers.mountain_weight
            + hill * layers.hill_weight
        )

    @staticmethod
    def terrain_bounds(layers: Optional[TerrainLayers] = None) -> tuple[float, float]:
        """
        Analytic [low, high] range of `terrain` for the given weights.
        Fractal layers span [-1, 1] and the ridged layer spans [0, 1].
        """
        layers = layers or TerrainLayers()
        low = -abs(layers.continent_weight) - abs(layers.hill_weight) + min(0.0, layers.mountain_weight)
        high = abs(layers.continent_weight) + abs(layers.hill_weight) + max(0.0, layers.mountain_weight)
        return low, high

    def warp(self, point, strength: float, scale: float = 1.0, octaves: int = DEFAULTS.WARP_OCTAVES):
        """
        Domain warp: displaces each point by a noise vector scaled by `strength`.
        Returns the same shape as the input.
        """
        points, single = _as_points(point)
        if strength == 0.0:
            return points[0].copy() if single else points.copy()

        displacement = np.empty_like(points)
        for axis in range(3):
            displacement[:, axis] = self.fractal(
                points + _WARP_OFFSETS[axis], octaves, self._persistence, scale,
            )
        warped = points + strength * displacement
        return warped[0] if single else warped

    def biome(self, point):
        """Broad biome regions, normalized to [0, 1]."""
        return self._normalize(self.evaluate(point, NoiseChannel.BIOME))

    def climate(self, point):
        """Returns (temperature, moisture), each normalized to [0, 1]."""
        temperature = self._normalize(self.evaluate(point, NoiseChannel.TEMPERATURE))
        moisture = self._normalize(self.evaluate(point, NoiseChannel.MOISTURE))
        return temperature, moisture

    def river(self, point, elevation):
        """
        River likelihood in [0, 1]. Rivers follow low ground, so the river
        stream is blended with an inverted elevation factor (elevation is the
        normalized height in [0, 1]) and then sharpened into channels.
        """
        stream = self._normalize(self.evaluate(point, NoiseChannel.RIVER))
        elevation_factor = 1.0 - np.clip(elevation, 0.0, 1.0)
        blended = stream * DEFAULTS.RIVER_NOISE_WEIGHT + elevation_factor * DEFAULTS.RIVER_ELEVATION_WEIGHT
        river = np.clip(1.0 - np.power(blended, DEFAULTS.RIVER_FALLOFF_EXPONENT), 0.0, 1.0)
        return float(river) if np.ndim(river) == 0 else river

    @staticmethod
    def _normalize(value):
        return (value + 1.0) * 0.5
