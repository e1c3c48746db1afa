# planet_generator/preview.py

"""
================================================================================
PREVIEW RENDERING
================================================================================
Flat equirectangular (latitude / longitude) previews of a GeneratedPlanet, for
baking thumbnails without a 3D host.

Data Contract:
---------------
- Inputs:
    - planet (GeneratedPlanet): The build result to render.
    - width, height (int): Output size in pixels.
    - mode (str): "terrain" (shaded vertex colors with water) or one of the
      scalar channels "elevation", "temperature", "moisture", "biome", "river",
      or "biome_type" (one flat color per classified biome).
- Outputs:
    - A (height, width, 3) uint8 NumPy array, row 0 at the north pole.
- Side Effects: `save_preview` writes a PNG file.
================================================================================
"""

import os

import numpy as np
from PIL import Image
from scipy.spatial import cKDTree

from . import config as DEFAULTS
from .biome import BiomeType
from .color_gradient import ColorGradient, parse_color
from .mesh_builder import GeneratedPlanet

PREVIEW_MODES = ("terrain", "elevation", "temperature", "moisture", "biome", "river", "biome_type")

# Scalar channel palettes, keyed by preview mode.
_CHANNEL_GRADIENTS = {
    "elevation": ColorGradient([(-1.0, "#000000"), (1.0, "#ffffff")], frozen=True),
    "temperature": ColorGradient([(0.0, "#0000ff"), (0.5, "#ffff00"), (1.0, "#ff0000")], frozen=True),
    "moisture": ColorGradient([(0.0, "#d2b48c"), (1.0, "#0000ff")], frozen=True),
    "biome": ColorGradient([(0.0, "#3b0f70"), (0.5, "#de4968"), (1.0, "#fcfdbf")], frozen=True),
    "river": ColorGradient([(0.0, "#000000"), (1.0, "#4fc3f7")], frozen=True),
}

# One flat color per BiomeType, stacked in code order.
_BIOME_TYPE_COLORS = {
    BiomeType.OCEAN: "#1a4d80",
    BiomeType.BEACH: "#e0d8a8",
    BiomeType.DESERT: "#e6c178",
    BiomeType.SAVANNA: "#ccc880",
    BiomeType.RAINFOREST: "#2e6e41",
    BiomeType.GRASSLAND: "#bfd064",
    BiomeType.FOREST: "#4a873d",
    BiomeType.SWAMP: "#4f5d2f",
    BiomeType.SNOW: "#f2f8ff",
    BiomeType.TUNDRA: "#a09a80",
    BiomeType.MOUNTAINS: "#8b7d6b",
}
_BIOME_TYPE_PALETTE = np.array([parse_color(_BIOME_TYPE_COLORS[biome_type]) for biome_type in BiomeType])


def equirectangular_directions(width: int, height: int) -> np.ndarray:
    """Unit view directions (y up) at the pixel centers of a lat/long grid, shape (H*W, 3)."""
    lat = np.pi / 2.0 - (np.arange(height) + 0.5) / height * np.pi
    lon = (np.arange(width) + 0.5) / width * 2.0 * np.pi - np.pi
    lon_grid, lat_grid = np.meshgrid(lon, lat)
    cos_lat = np.cos(lat_grid)
    directions = np.stack([
        cos_lat * np.cos(lon_grid),
        np.sin(lat_grid),
        cos_lat * np.sin(lon_grid),
    ], axis=-1)
    return directions.reshape(-1, 3)


def render_equirectangular(planet: GeneratedPlanet, width: int = DEFAULTS.PREVIEW_WIDTH,
                           height: int = DEFAULTS.PREVIEW_HEIGHT, mode: str = "terrain") -> np.ndarray:
    """
    Renders a lat/long preview by sampling the nearest ground vertex per pixel.

    Raises:
        ValueError: If the size is not positive or the mode is unknown.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Preview size must be positive, got {width}x{height}")
    if mode not in PREVIEW_MODES:
        raise ValueError(f"Unknown preview mode '{mode}'. Expected one of: {', '.join(PREVIEW_MODES)}")

    directions = equirectangular_directions(width, height)

    positions = np.asarray(planet.ground.positions)
    lengths = np.linalg.norm(positions, axis=1)
    lengths[lengths == 0.0] = 1.0
    tree = cKDTree(positions / lengths[:, np.newaxis])
    _, nearest = tree.query(directions)

    samples = planet.samples
    if mode == "terrain":
        colors = _shaded_terrain(planet, nearest, directions)
    elif mode == "biome_type":
        colors = _BIOME_TYPE_PALETTE[np.asarray(samples.biome_type)[nearest]]
    else:
        values = {
            "elevation": samples.height,
            "temperature": samples.temperature,
            "moisture": samples.moisture,
            "biome": samples.biome,
            "river": samples.river,
        }[mode]
        colors = _CHANNEL_GRADIENTS[mode].get_many(values[nearest])

    image = np.clip(np.round(colors * 255.0), 0, 255).astype(np.uint8)
    return image.reshape(height, width, 3)


def _shaded_terrain(planet: GeneratedPlanet, nearest: np.ndarray, directions: np.ndarray) -> np.ndarray:
    """Lambert-shaded ground colors, with the water color blended over submerged vertices."""
    light = np.asarray(DEFAULTS.PREVIEW_LIGHT_DIRECTION, dtype=np.float64)
    light = light / np.linalg.norm(light)
    ambient = DEFAULTS.PREVIEW_AMBIENT

    colors = np.asarray(planet.ground.colors)[nearest]
    normals = np.asarray(planet.ground.normals)[nearest]

    ground_radius = np.linalg.norm(np.asarray(planet.ground.positions)[nearest], axis=1)
    submerged = planet.water_radius >= ground_radius

    # The water shell is a sphere, so its normal is the view direction.
    normals = np.where(submerged[:, np.newaxis], directions, normals)
    water = np.asarray(planet.water_color, dtype=np.float64)
    opacity = planet.water_opacity
    colors = np.where(submerged[:, np.newaxis], colors * (1.0 - opacity) + water * opacity, colors)

    lambert = np.clip(normals @ light, 0.0, 1.0)
    shade = ambient + (1.0 - ambient) * lambert
    return colors * shade[:, np.newaxis]


def save_preview(color_array: np.ndarray, path: str) -> str:
    """
    Saves a (H, W, 3) uint8 preview as PNG, palettized when it has few colors.
    Returns the storage type used: 'palettized' or 'full'.
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    img = Image.fromarray(np.ascontiguousarray(color_array, dtype=np.uint8))

    colors = img.getcolors(256)
    if colors:
        img.quantize(colors=256).save(path, 'PNG')
        return 'palettized'

    img.save(path, 'PNG')
    return 'full'
