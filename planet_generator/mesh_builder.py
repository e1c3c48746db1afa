# planet_generator/mesh_builder.py

"""
================================================================================
TERRAIN MESH BUILDER
================================================================================
This module contains the TerrainMeshBuilder, which turns a host-supplied base
unit-sphere mesh and a BiomeEvaluator into a GeneratedPlanet: a displaced and
colored ground buffer, a water buffer on the same topology and the parameters
of an atmosphere shell.

Data Contract:
---------------
- Inputs (on build):
    - base_vertices: A (N, 3) array of points on (or near) the unit sphere.
    - evaluator (BiomeEvaluator): Supplies elevation and color per point.
    - triangles: A (M, 3) integer array indexing into base_vertices.
- Outputs:
    - GeneratedPlanet. All arrays are freshly allocated, read-only and
      index-aligned 1:1 with base_vertices.
- Side Effects: Logs messages using the provided logger.
- Invariants:
    - The host topology is validated before any work and never altered.
    - Identical inputs produce bit-identical outputs.
================================================================================
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from . import config as DEFAULTS
from .biome import BiomeEvaluator, BiomeSamples, BiomeType
from .color_gradient import RGB, ColorGradient, offset_hsl, parse_color
from .geometry import compute_vertex_normals


class MeshTopologyError(ValueError):
    """Raised when the base mesh cannot be generated on (no vertices, bad shape, bad indices)."""


class Shading(str, Enum):
    SMOOTH = "smooth"
    FLAT = "flat"


class PlanetSettings(BaseModel):
    """Shell and material settings applied on top of a BiomeProfile."""
    model_config = ConfigDict(frozen=True)

    water_scale: float = Field(DEFAULTS.WATER_SCALE, description="Multiplier on the water sphere radius")
    water_level_offset: Optional[float] = Field(
        None, description="Water radius offset; defaults to the profile's sea level",
    )
    water_opacity: float = Field(DEFAULTS.WATER_OPACITY, description="Opacity hint for the water material")
    atmosphere_radius: float = Field(DEFAULTS.ATMOSPHERE_RADIUS, description="Radius of the atmosphere shell")
    atmosphere_opacity: float = Field(DEFAULTS.ATMOSPHERE_OPACITY, description="Opacity of the atmosphere shell")
    atmosphere_color: str = Field(
        DEFAULTS.ATMOSPHERE_COLOR, description="Atmosphere color used when the sea gradient is empty",
    )
    shading: Shading = Field(Shading.SMOOTH, description="Shading hint passed through to the host")


@dataclass(frozen=True, eq=False)
class VertexBuffer:
    positions: np.ndarray
    normals: np.ndarray
    colors: Optional[np.ndarray] = None

    def __len__(self):
        return self.positions.shape[0]


@dataclass(frozen=True)
class AtmosphereShell:
    radius: float
    color: RGB
    opacity: float
    side: str = "back"


@dataclass(frozen=True, eq=False)
class GeneratedPlanet:
    """The output of one build. Superseded, never mutated, when parameters change."""
    ground: VertexBuffer
    water: VertexBuffer
    atmosphere: AtmosphereShell
    triangles: np.ndarray
    water_color: RGB
    water_opacity: float
    water_radius: float
    shading: Shading
    seed: int
    biome: str
    samples: BiomeSamples

    def summary(self) -> dict:
        """Plain statistics of the generated terrain."""
        elevation = self.samples.elevation
        return {
            'seed': self.seed,
            'biome': self.biome,
            'vertices': int(elevation.shape[0]),
            'triangles': int(self.triangles.shape[0]),
            'min_elevation': float(elevation.min()),
            'max_elevation': float(elevation.max()),
            'mean_elevation': float(elevation.mean()),
            'sea_fraction': float(np.mean(self.samples.is_sea)),
            'water_radius': self.water_radius,
            'biome_types': self._biome_type_fractions(),
        }

    def _biome_type_fractions(self) -> dict:
        counts = np.bincount(self.samples.biome_type, minlength=len(BiomeType))
        total = max(1, int(counts.sum()))
        return {
            biome_type.name.lower(): float(counts[biome_type]) / total
            for biome_type in BiomeType
            if counts[biome_type]
        }


def _read_only(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def validate_topology(base_vertices, triangles) -> tuple[np.ndarray, np.ndarray]:
    """
    Checks the host mesh and returns float64 vertices and int64 triangles.

    Raises:
        MeshTopologyError: On zero vertices, a non-(N, 3) vertex array, a
            non-(M, 3) or non-integer triangle array, or any index outside [0, N).
    """
    try:
        vertices = np.array(base_vertices, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MeshTopologyError(f"Base vertices are not numeric: {e}") from e
    if vertices.ndim != 2 or vertices.shape[1] != 3:
        raise MeshTopologyError(f"Base vertices must have shape (N, 3), got {vertices.shape}")
    if vertices.shape[0] == 0:
        raise MeshTopologyError("Base mesh has zero vertices")

    try:
        indices = np.array(triangles if triangles is not None else [])
    except ValueError as e:
        raise MeshTopologyError(f"Triangles are not a regular (M, 3) array: {e}") from e
    if indices.size == 0:
        indices = indices.reshape(0, 3)
    if indices.ndim != 2 or indices.shape[1] != 3:
        raise MeshTopologyError(f"Triangles must have shape (M, 3), got {indices.shape}")
    if indices.dtype.kind not in "iu":
        if indices.dtype.kind != "f" or not np.all(np.isfinite(indices)) or np.any(indices != np.floor(indices)):
            raise MeshTopologyError(f"Triangle indices must be integers, got dtype {indices.dtype}")
    indices = indices.astype(np.int64)

    count = vertices.shape[0]
    out_of_range = (indices < 0) | (indices >= count)
    if np.any(out_of_range):
        bad = int(indices[out_of_range][0])
        raise MeshTopologyError(f"Triangle index {bad} is outside the vertex range [0, {count})")

    return vertices, indices


def _water_color(gradient: ColorGradient) -> RGB:
    stops = gradient.stops
    if len(stops) >= 2:
        return stops[1].color
    if stops:
        return stops[0].color
    return parse_color(DEFAULTS.WATER_COLOR)


def _atmosphere_color(gradient: ColorGradient, fallback: str) -> RGB:
    stops = gradient.stops
    if not stops:
        return parse_color(fallback)
    return offset_hsl(stops[-1].color, *DEFAULTS.ATMOSPHERE_HSL_OFFSET)


class TerrainMeshBuilder:
    """
    Displaces a base unit-sphere mesh by biome elevation.
    The builder holds only its settings; every build returns a new planet.
    """
    def __init__(self, settings: Optional[PlanetSettings] = None, logger: Optional[logging.Logger] = None):
        self.settings = settings if settings is not None else PlanetSettings()
        self.logger = logger or logging.getLogger(__name__)

    def build(self, base_vertices, evaluator: BiomeEvaluator, triangles) -> GeneratedPlanet:
        """
        Generates a planet on the given base mesh.

        Args:
            base_vertices: (N, 3) points of the host's unit-sphere mesh.
            evaluator (BiomeEvaluator): Elevation and color source.
            triangles: (M, 3) vertex indices of the host topology.

        Returns:
            GeneratedPlanet: Ground and water buffers plus atmosphere parameters.
        """
        vertices, indices = validate_topology(base_vertices, triangles)
        profile = evaluator.profile
        settings = self.settings

        self.logger.info(
            f"Building planet: biome='{profile.name}', seed={evaluator.seed}, "
            f"{vertices.shape[0]} vertices, {indices.shape[0]} triangles"
        )
        start_time = time.perf_counter()

        # 1. Project onto the unit sphere. Zero vectors stay at the origin.
        lengths = np.linalg.norm(vertices, axis=1)
        lengths[lengths == 0.0] = 1.0
        points = vertices / lengths[:, np.newaxis]

        # 2. Elevation and color for every vertex.
        samples = evaluator.evaluate_many(points)

        # 3. Ground and water shells.
        ground_positions = points * (1.0 + samples.elevation)[:, np.newaxis]
        ground_normals = compute_vertex_normals(ground_positions, indices)

        offset = profile.sea_level if settings.water_level_offset is None else settings.water_level_offset
        water_radius = (1.0 + offset) * settings.water_scale
        water_positions = points * water_radius
        water_normals = compute_vertex_normals(water_positions, indices)

        atmosphere = AtmosphereShell(
            radius=settings.atmosphere_radius,
            color=_atmosphere_color(profile.sea_gradient, settings.atmosphere_color),
            opacity=settings.atmosphere_opacity,
        )

        for array in (
            samples.elevation, samples.colors, samples.height, samples.biome,
            samples.moisture, samples.temperature, samples.river, samples.is_sea, samples.biome_type,
        ):
            _read_only(array)

        planet = GeneratedPlanet(
            ground=VertexBuffer(
                positions=_read_only(ground_positions),
                normals=_read_only(ground_normals),
                colors=samples.colors,
            ),
            water=VertexBuffer(
                positions=_read_only(water_positions),
                normals=_read_only(water_normals),
            ),
            atmosphere=atmosphere,
            triangles=_read_only(indices),
            water_color=_water_color(profile.sea_gradient),
            water_opacity=settings.water_opacity,
            water_radius=float(water_radius),
            shading=settings.shading,
            seed=evaluator.seed,
            biome=profile.name,
            samples=samples,
        )

        elapsed = time.perf_counter() - start_time
        self.logger.info(f"Planet built in {elapsed:.3f}s ({100.0 * float(np.mean(samples.is_sea)):.1f}% sea).")
        return planet
