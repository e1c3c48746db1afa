# planet_generator/__init__.py

# This file makes 'planet_generator' a Python package and defines its public API.
# Nothing here imports a renderer, so worker processes can import it freely.

from .noise_field import NoiseChannel, NoiseField, TerrainLayers
from .color_gradient import ColorGradient, ColorStop
from .biome import (
    BiomeEvaluator,
    BiomeProfile,
    BiomeSample,
    BiomeSamples,
    BiomeType,
    GainRange,
    NoiseShape,
    SeaNoiseShape,
    classify_biomes,
)
from .mesh_builder import (
    AtmosphereShell,
    GeneratedPlanet,
    MeshTopologyError,
    PlanetSettings,
    Shading,
    TerrainMeshBuilder,
    VertexBuffer,
)
from .geometry import icosphere
from .presets import PRESETS, get_preset, random_profile

__all__ = [
    "NoiseChannel", "NoiseField", "TerrainLayers",
    "ColorGradient", "ColorStop",
    "BiomeEvaluator", "BiomeProfile", "BiomeSample", "BiomeSamples", "BiomeType", "GainRange", "NoiseShape",
    "SeaNoiseShape", "classify_biomes",
    "AtmosphereShell", "GeneratedPlanet", "MeshTopologyError", "PlanetSettings", "Shading",
    "TerrainMeshBuilder", "VertexBuffer",
    "icosphere",
    "PRESETS", "get_preset", "random_profile",
]
