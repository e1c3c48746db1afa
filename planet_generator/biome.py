# planet_generator/biome.py

"""
================================================================================
BIOME PROFILES & EVALUATION
================================================================================
This module contains the declarative BiomeProfile (noise shape + land and sea
color gradients) and the BiomeEvaluator, which combines a seeded NoiseField
with a profile to produce elevation and color for any point on the unit sphere.

Data Contract:
---------------
- Inputs (on initialization):
    - seed (int): Master seed for the NoiseField.
    - profile (BiomeProfile): Immutable noise shape and palettes.
    - logger: Optional logging object for runtime messages.
- Outputs (from methods):
    - BiomeSample for a single point, BiomeSamples (NumPy arrays) for a batch.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and profile, the output is deterministic and
  independent of evaluation order or batch composition. Numeric parameters
  never raise; out-of-range values degrade to flat or clamped output.
================================================================================
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from . import config as DEFAULTS
from .color_gradient import RGB, ColorGradient
from .noise_field import NoiseChannel, NoiseField, TerrainLayers


class GainRange(BaseModel):
    """Per-point persistence range. Noise at `scale` picks a value between min and max."""
    model_config = ConfigDict(frozen=True)

    min: float = Field(DEFAULTS.GAIN_MIN, description="Lowest per-octave amplitude decay")
    max: float = Field(DEFAULTS.GAIN_MAX, description="Highest per-octave amplitude decay")
    scale: float = Field(DEFAULTS.GAIN_SCALE, description="Frequency of the gain modulation noise")


class NoiseShape(BaseModel):
    """Shape of the terrain noise for one biome."""
    model_config = ConfigDict(frozen=True)

    min: float = Field(DEFAULTS.MIN_ELEVATION, description="Elevation of the deepest point (relative to radius 1)")
    max: float = Field(DEFAULTS.MAX_ELEVATION, description="Elevation of the highest point (relative to radius 1)")
    octaves: int = Field(DEFAULTS.BIOME_OCTAVES, description="Octaves of terrain layers without their own count; 0 or fewer yields flat terrain")
    lacunarity: float = Field(DEFAULTS.BIOME_LACUNARITY, description="Frequency growth per octave")
    gain: GainRange = Field(default_factory=GainRange)
    warp: float = Field(DEFAULTS.WARP_STRENGTH, description="Domain warp strength; 0 disables warping")
    scale: float = Field(DEFAULTS.BIOME_SCALE, description="Base frequency of the terrain noise")
    power: float = Field(DEFAULTS.BIOME_POWER, description="Redistribution exponent applied to the terrain")


class SeaNoiseShape(BaseModel):
    """Sea floor detail added below the sea level."""
    model_config = ConfigDict(frozen=True)

    min: float = Field(DEFAULTS.SEA_NOISE_MIN, description="Lowest sea floor offset")
    max: float = Field(DEFAULTS.SEA_NOISE_MAX, description="Highest sea floor offset")
    scale: float = Field(DEFAULTS.SEA_NOISE_SCALE, description="Frequency of the sea floor noise")


def _default_land_gradient() -> ColorGradient:
    return ColorGradient(DEFAULTS.LAND_COLOR_STOPS, frozen=True)


def _default_sea_gradient() -> ColorGradient:
    return ColorGradient(DEFAULTS.SEA_COLOR_STOPS, frozen=True)


class BiomeProfile(BaseModel):
    """
    A named combination of noise shape and two color gradients defining one
    planet's terrain character. Gradients may be given as ColorGradient objects
    or as stop lists such as [[-1.0, "#001a4d"], [0.0, "#1a6fd1"]]; they are
    stored as frozen copies.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field("custom", description="Display name of the biome")
    noise: NoiseShape = Field(default_factory=NoiseShape)
    layers: TerrainLayers = Field(default_factory=TerrainLayers)
    land_gradient: ColorGradient = Field(default_factory=_default_land_gradient)
    sea_gradient: ColorGradient = Field(default_factory=_default_sea_gradient)
    sea_level: float = Field(DEFAULTS.SEA_LEVEL, description="Elevation below which the sea gradient applies")
    sea_noise: SeaNoiseShape = Field(default_factory=SeaNoiseShape)

    @field_validator("land_gradient", "sea_gradient", mode="before")
    @classmethod
    def _coerce_gradient(cls, value):
        if isinstance(value, ColorGradient):
            return value if value.frozen else value.freeze()
        if value is None:
            return ColorGradient(frozen=True)
        return ColorGradient(value, frozen=True)

    @field_serializer("land_gradient", "sea_gradient")
    def _serialize_gradient(self, gradient: ColorGradient):
        return gradient.to_list()


class BiomeType(IntEnum):
    """Surface classification of a point, from elevation, temperature and moisture."""
    OCEAN = 0
    BEACH = 1
    DESERT = 2
    SAVANNA = 3
    RAINFOREST = 4
    GRASSLAND = 5
    FOREST = 6
    SWAMP = 7
    SNOW = 8
    TUNDRA = 9
    MOUNTAINS = 10


def classify_biomes(height, sea_height: float, is_sea, temperature, moisture) -> np.ndarray:
    """
    Vectorized biome classification.

    Args:
        height: Normalized heights in [-1, 1].
        sea_height (float): Normalized height of the sea level.
        is_sea: Boolean mask of submerged points.
        temperature: Lapse-adjusted temperature in [0, 1].
        moisture: Moisture in [0, 1].

    Returns:
        np.ndarray: int8 BiomeType codes, one per point.
    """
    height = np.asarray(height, dtype=np.float64)
    is_sea = np.asarray(is_sea, dtype=bool)
    temperature = np.asarray(temperature, dtype=np.float64)
    moisture = np.asarray(moisture, dtype=np.float64)

    hot = temperature > DEFAULTS.HOT_TEMPERATURE
    warm = temperature > DEFAULTS.WARM_TEMPERATURE
    mild = temperature > DEFAULTS.MILD_TEMPERATURE
    hot_dry, hot_wet = DEFAULTS.HOT_MOISTURE_SPLITS
    warm_dry, warm_wet = DEFAULTS.WARM_MOISTURE_SPLITS

    # np.select takes the first matching condition, so the bands are ordered.
    rules = [
        (is_sea, BiomeType.OCEAN),
        (height < sea_height + DEFAULTS.BEACH_HEIGHT_BAND, BiomeType.BEACH),
        (hot & (moisture < hot_dry), BiomeType.DESERT),
        (hot & (moisture < hot_wet), BiomeType.SAVANNA),
        (hot, BiomeType.RAINFOREST),
        (warm & (moisture < warm_dry), BiomeType.GRASSLAND),
        (warm & (moisture < warm_wet), BiomeType.FOREST),
        (warm, BiomeType.SWAMP),
        (mild & (moisture < DEFAULTS.MILD_MOISTURE_SPLIT), BiomeType.GRASSLAND),
        (mild, BiomeType.FOREST),
        (height > DEFAULTS.SNOW_HEIGHT, BiomeType.SNOW),
        (moisture < DEFAULTS.COLD_MOISTURE_SPLIT, BiomeType.TUNDRA),
    ]
    codes = np.select(
        [condition for condition, _ in rules],
        [int(biome_type) for _, biome_type in rules],
        default=int(BiomeType.MOUNTAINS),
    )
    return codes.astype(np.int8)


@dataclass(frozen=True)
class BiomeSample:
    elevation: float
    color: RGB
    height: float
    biome: float
    moisture: float
    temperature: float
    river: float
    is_sea: bool
    biome_type: BiomeType


@dataclass(frozen=True, eq=False)
class BiomeSamples:
    """Index-aligned per-point outputs of a batch evaluation."""
    elevation: np.ndarray
    colors: np.ndarray
    height: np.ndarray
    biome: np.ndarray
    moisture: np.ndarray
    temperature: np.ndarray
    river: np.ndarray
    is_sea: np.ndarray
    biome_type: np.ndarray

    def __len__(self):
        return self.elevation.shape[0]

    def __getitem__(self, index: int) -> BiomeSample:
        return BiomeSample(
            elevation=float(self.elevation[index]),
            color=tuple(float(c) for c in self.colors[index]),
            height=float(self.height[index]),
            biome=float(self.biome[index]),
            moisture=float(self.moisture[index]),
            temperature=float(self.temperature[index]),
            river=float(self.river[index]),
            is_sea=bool(self.is_sea[index]),
            biome_type=BiomeType(int(self.biome_type[index])),
        )


class BiomeEvaluator:
    """
    Produces elevation, color and auxiliary climate values for points on the
    unit sphere. Holds no mutable state after construction.

    Normalized height is computed analytically: the composite terrain value is
    rescaled using the exact bounds implied by the layer weights, so no running
    min/max is tracked between calls.
    """
    def __init__(self, seed: int = DEFAULTS.DEFAULT_SEED, profile: Optional[BiomeProfile] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            seed (int): Master seed for every noise stream.
            profile (BiomeProfile, optional): The biome to evaluate. Defaults to
                a BiomeProfile with default fields.
            logger (logging.Logger, optional): The logger instance for all output.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.profile = profile if profile is not None else BiomeProfile()

        shape = self.profile.noise
        self.noise = NoiseField(
            seed,
            scale=shape.scale,
            octaves=shape.octaves,
            persistence=(shape.gain.min + shape.gain.max) / 2.0,
            lacunarity=shape.lacunarity,
            redistribution=shape.power,
        )
        self._terrain_low, self._terrain_high = NoiseField.terrain_bounds(self.profile.layers)

        self.logger.debug(
            f"BiomeEvaluator ready: biome='{self.profile.name}', seed={self.noise.seed}, "
            f"octaves={shape.octaves}, elevation range=[{shape.min}, {shape.max}]"
        )

    @property
    def seed(self) -> int:
        return self.noise.seed

    def evaluate(self, point) -> BiomeSample:
        """Evaluates a single SpherePoint."""
        return self.evaluate_many(np.asarray(point, dtype=np.float64).reshape(1, 3))[0]

    def evaluate_many(self, points) -> BiomeSamples:
        """Evaluates a (N, 3) batch of SpherePoints."""
        points = np.ascontiguousarray(np.asarray(points, dtype=np.float64).reshape(-1, 3))
        count = points.shape[0]
        profile = self.profile

        elevation = self._terrain_elevation(points)

        # 1. Sea floor detail, kept at or below the sea level. Flat terrain stays flat.
        is_sea = elevation < profile.sea_level
        if profile.noise.octaves > 0 and np.any(is_sea):
            elevation[is_sea] = self._sea_floor(points[is_sea], elevation[is_sea])

        # 2. Color from the land or sea gradient at the normalized height.
        height = self.normalized_height(elevation)
        colors = np.empty((count, 3))
        colors[~is_sea] = profile.land_gradient.get_many(height[~is_sea])
        colors[is_sea] = profile.sea_gradient.get_many(height[is_sea])

        # 3. Auxiliary channels, always computed.
        biome = self.noise.biome(points)
        temperature, moisture = self.noise.climate(points)
        lapse = np.where(is_sea, 0.0, np.maximum(height, 0.0) * DEFAULTS.TEMPERATURE_LAPSE_RATE)
        temperature = np.clip(temperature - lapse, 0.0, 1.0)
        river = self.noise.river(points, (height + 1.0) * 0.5)
        biome_type = classify_biomes(
            height, float(self.normalized_height(profile.sea_level)), is_sea, temperature, moisture,
        )

        return BiomeSamples(
            elevation=elevation,
            colors=colors,
            height=height,
            biome=np.asarray(biome, dtype=np.float64),
            moisture=np.asarray(moisture, dtype=np.float64),
            temperature=temperature,
            river=np.asarray(river, dtype=np.float64),
            is_sea=is_sea,
            biome_type=biome_type,
        )

    def normalized_height(self, elevation):
        """Rescales elevation from the profile's [min, max] range to [-1, 1]."""
        shape = self.profile.noise
        span = shape.max - shape.min
        if span <= 0.0:
            return np.zeros_like(np.asarray(elevation, dtype=np.float64))
        return np.clip((np.asarray(elevation, dtype=np.float64) - shape.min) / span * 2.0 - 1.0, -1.0, 1.0)

    def _terrain_elevation(self, points: np.ndarray) -> np.ndarray:
        """
        Composite terrain scaled into the profile range. Positive values scale
        towards `max`, negative ones towards `min`, so 0 stays the datum.
        """
        shape = self.profile.noise
        if shape.octaves <= 0:
            return np.zeros(points.shape[0])

        warped = self.noise.warp(points, shape.warp, shape.scale)

        gain = shape.gain
        gain_noise = self.noise.fractal(points, 1, scale=gain.scale)
        persistence = gain.min + (gain.max - gain.min) * (gain_noise + 1.0) * 0.5

        composite = self.noise.terrain(warped, self.profile.layers, persistence)

        span = self._terrain_high - self._terrain_low
        if span <= 0.0:
            return np.zeros(points.shape[0])
        signed = np.clip(2.0 * (composite - self._terrain_low) / span - 1.0, -1.0, 1.0)
        signed = self.noise.redistribute(signed, shape.power)

        return np.where(signed >= 0.0, signed * shape.max, -signed * shape.min)

    def _sea_floor(self, points: np.ndarray, elevation: np.ndarray) -> np.ndarray:
        sea = self.profile.sea_noise
        ripple = self.noise.fractal(
            points, DEFAULTS.SEA_NOISE_OCTAVES, scale=sea.scale, channel=NoiseChannel.HEIGHT,
        )
        offset = sea.min + (sea.max - sea.min) * (ripple + 1.0) * 0.5
        return np.minimum(elevation + offset, self.profile.sea_level)
