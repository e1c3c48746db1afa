# planet_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the planet
generator. These values are used if they are not explicitly provided by the
user's BiomeProfile or PlanetSettings.

DO NOT MODIFY THIS FILE FOR A SPECIFIC PLANET.
Instead, pass a BiomeProfile / PlanetSettings to the evaluator and builder.
================================================================================
"""

# --- Noise Generation ---
DEFAULT_SEED = 1337
# Seeds are 32-bit unsigned integers; anything wider is masked.
SEED_MASK = 0xFFFFFFFF

# Large constants used to offset the master seed for each noise channel,
# ensuring every stream is unique but deterministic from the master seed.
HEIGHT_SEED_OFFSET = 31337
BIOME_SEED_OFFSET = 42424
MOISTURE_SEED_OFFSET = 12345
RIVER_SEED_OFFSET = 98765
TEMPERATURE_SEED_OFFSET = 12347

# Base field settings (used by NoiseField.evaluate on the height channel).
NOISE_SCALE = 1.0
NOISE_OCTAVES = 6
NOISE_PERSISTENCE = 0.5
NOISE_LACUNARITY = 2.0
NOISE_REDISTRIBUTION = 1.0

# Auxiliary channels: (scale multiplier, octaves).
# Biome regions are broad, rivers are fine-grained.
BIOME_CHANNEL = (0.5, 2)
MOISTURE_CHANNEL = (0.7, 2)
RIVER_CHANNEL = (3.0, 1)
TEMPERATURE_CHANNEL = (0.2, 3)

# River channel shaping.
RIVER_NOISE_WEIGHT = 0.7
RIVER_ELEVATION_WEIGHT = 0.3
RIVER_FALLOFF_EXPONENT = 8.0

# Temperature drop per unit of normalized height above sea level.
TEMPERATURE_LAPSE_RATE = 0.7

# --- Biome Classification ---
# Heights are normalized heights in [-1, 1]; temperature and moisture are in [0, 1].
BEACH_HEIGHT_BAND = 0.01
SNOW_HEIGHT = 0.7
HOT_TEMPERATURE = 0.7
WARM_TEMPERATURE = 0.4
MILD_TEMPERATURE = 0.2
# Moisture splits within each temperature band, driest first.
HOT_MOISTURE_SPLITS = (0.3, 0.6)
WARM_MOISTURE_SPLITS = (0.3, 0.7)
MILD_MOISTURE_SPLIT = 0.5
COLD_MOISTURE_SPLIT = 0.4

# --- Terrain Layers (continent / mountain / hill) ---
# Weights should sum to 1.0 for a predictable elevation range.
CONTINENT_SCALE = 0.5
CONTINENT_WEIGHT = 0.5
MOUNTAIN_SCALE = 1.0
MOUNTAIN_WEIGHT = 0.35
HILL_SCALE = 2.0
HILL_WEIGHT = 0.15
# Octave counts per layer: broad continents, detailed ridges, mid-frequency hills.
CONTINENT_OCTAVES = 2
MOUNTAIN_OCTAVES = 4
HILL_OCTAVES = 3

# --- Biome Noise Shape ---
MIN_ELEVATION = -0.05
MAX_ELEVATION = 0.05
BIOME_OCTAVES = 4
BIOME_LACUNARITY = 2.0
GAIN_MIN = 0.3
GAIN_MAX = 0.6
GAIN_SCALE = 2.0
WARP_STRENGTH = 0.3
BIOME_SCALE = 1.0
BIOME_POWER = 1.0

# Octaves used for the domain warp and the sea floor detail.
WARP_OCTAVES = 2
SEA_NOISE_OCTAVES = 2

# --- Sea ---
SEA_LEVEL = 0.0
SEA_NOISE_MIN = -0.005
SEA_NOISE_MAX = 0.004
SEA_NOISE_SCALE = 5.0

# --- Water & Atmosphere Shells ---
# The water sphere is scaled slightly above its nominal radius so it never
# shares a surface with flat ground in the host renderer.
WATER_SCALE = 1.01
WATER_OPACITY = 0.9
ATMOSPHERE_RADIUS = 1.02
ATMOSPHERE_OPACITY = 0.15
ATMOSPHERE_COLOR = "#88aaff"
# HSL offset applied to the shallowest (last) sea color to derive the atmosphere tint.
ATMOSPHERE_HSL_OFFSET = (0.0, -0.2, 0.2)
# Water color fallback when the sea gradient has fewer than two stops.
WATER_COLOR = "#0066ff"

# --- Base Mesh ---
# Icosphere subdivision level used when the host does not supply a mesh.
DEFAULT_RESOLUTION = 5

# --- Preview Rendering ---
PREVIEW_WIDTH = 512
PREVIEW_HEIGHT = 256
# Direction of the preview light (normalized at use).
PREVIEW_LIGHT_DIRECTION = (1.0, 1.0, 1.0)
PREVIEW_AMBIENT = 0.35

# --- Default Palette (the "forest" look) ---
# Land stops cover normalized heights from the shoreline up; sea stops cover
# the deep ocean up to the coast.
LAND_COLOR_STOPS = [
    (-0.5, "#2f6b1f"),
    (0.0, "#115512"),
    (0.5, "#224411"),
    (1.0, "#006622"),
]
SEA_COLOR_STOPS = [
    (-1.0, "#001a4d"),
    (-0.55, "#0042a5"),
    (-0.1, "#1a6fd1"),
]
