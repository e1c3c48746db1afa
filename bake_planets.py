# bake_planets.py

"""
================================================================================
OFFLINE PLANET BAKER SCRIPT
================================================================================
This script is a command-line tool for generating a batch of planets and
saving flat lat/long previews of each one ("baking"), together with a
manifest.json of per-planet terrain statistics. Meshes themselves are not
persisted; a host regenerates them from the seed and profile.

Usage:
    python bake_planets.py --config path/to/your/config.json
    python bake_planets.py --preset beach --seed 42 --count 8
    python bake_planets.py --random --count 16 --resolution 4
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import multiprocessing
from typing import Optional

from pydantic import BaseModel, Field, ValidationError
from tqdm import tqdm

from planet_generator import config as DEFAULTS
from planet_generator.biome import BiomeEvaluator, BiomeProfile
from planet_generator.geometry import icosphere
from planet_generator.mesh_builder import PlanetSettings, TerrainMeshBuilder
from planet_generator.presets import get_preset, random_profile
from planet_generator.preview import PREVIEW_MODES, render_equirectangular, save_preview


class BakeConfig(BaseModel):
    """Everything a bake needs. Loaded from JSON and/or the command line."""
    seed: int = Field(DEFAULTS.DEFAULT_SEED, description="First seed of the batch")
    count: int = Field(1, ge=1, description="Number of planets, one per consecutive seed")
    seeds: Optional[list[int]] = Field(None, description="Explicit seeds; overrides seed/count")
    preset: str = Field("forest", description="Named biome preset")
    randomize: bool = Field(False, description="Use a seeded random biome per planet instead of the preset")
    profile: Optional[BiomeProfile] = Field(None, description="Inline biome profile; overrides the preset")
    settings: PlanetSettings = Field(default_factory=PlanetSettings)
    resolution: int = Field(DEFAULTS.DEFAULT_RESOLUTION, ge=0, description="Icosphere subdivision level")
    width: int = Field(DEFAULTS.PREVIEW_WIDTH, ge=1, description="Preview width in pixels")
    height: int = Field(DEFAULTS.PREVIEW_HEIGHT, ge=1, description="Preview height in pixels")
    modes: list[str] = Field(default_factory=lambda: ["terrain"], description="Preview modes to bake")
    output_dir: str = Field("baked_planets", description="Root output directory")

    def seed_list(self) -> list[int]:
        if self.seeds:
            return list(self.seeds)
        return [self.seed + i for i in range(self.count)]

    def profile_for(self, seed: int) -> BiomeProfile:
        if self.randomize:
            return random_profile(seed)
        if self.profile is not None:
            return self.profile
        return get_preset(self.preset)


# --- Global variables for worker processes ---
worker_config = None
worker_builder = None
worker_mesh = None

def init_worker(config_data: dict):
    """Initializes the global state for each worker process."""
    global worker_config, worker_builder, worker_mesh

    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_config = BakeConfig.model_validate(config_data)
    worker_builder = TerrainMeshBuilder(worker_config.settings, logger=worker_logger)
    # Every planet in a batch shares one base mesh.
    worker_mesh = icosphere(worker_config.resolution)

def process_planet(seed: int) -> dict:
    """
    Builds and SAVES the previews of a single planet. Returns only its statistics.
    """
    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    profile = worker_config.profile_for(seed)
    evaluator = BiomeEvaluator(seed, profile, logger=worker_logger)
    vertices, triangles = worker_mesh
    planet = worker_builder.build(vertices, evaluator, triangles)

    planet_dir = os.path.join(worker_config.output_dir, f"seed_{planet.seed}")
    result = planet.summary()
    result['previews'] = {}
    for mode in worker_config.modes:
        color_array = render_equirectangular(planet, worker_config.width, worker_config.height, mode)
        file_name = f"{mode}.png"
        storage = save_preview(color_array, os.path.join(planet_dir, file_name))
        result['previews'][mode] = {'file': os.path.join(f"seed_{planet.seed}", file_name), 'storage': storage}
    result['profile'] = profile.model_dump(mode="json")
    return result


def load_config(args: argparse.Namespace, logger: logging.Logger) -> Optional[BakeConfig]:
    """Merges the JSON config file (if any) with command-line overrides."""
    data = {}
    if args.config:
        logger.info(f"Loading configuration from: {args.config}")
        try:
            with open(args.config, 'r') as f:
                data = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            logger.critical(f"Failed to load or parse config file: {e}")
            return None
        if not isinstance(data, dict):
            logger.critical(f"Config file must contain a JSON object, got {type(data).__name__}")
            return None

    overrides = {
        'seed': args.seed,
        'count': args.count,
        'preset': args.preset,
        'resolution': args.resolution,
        'width': args.width,
        'height': args.height,
        'modes': args.modes,
        'output_dir': args.output,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    if args.random:
        data['randomize'] = True

    try:
        bake_config = BakeConfig.model_validate(data)
    except ValidationError as e:
        logger.critical(f"Invalid bake configuration: {e}")
        return None

    unknown_modes = [mode for mode in bake_config.modes if mode not in PREVIEW_MODES]
    if unknown_modes:
        logger.critical(f"Unknown preview mode(s): {', '.join(unknown_modes)}")
        return None
    if not bake_config.randomize and bake_config.profile is None:
        try:
            get_preset(bake_config.preset)
        except KeyError as e:
            logger.critical(e.args[0])
            return None
    return bake_config


# --- Main Baking Function ---
def bake_planets(bake_config: BakeConfig, logger: logging.Logger, workers: Optional[int] = None) -> list[dict]:
    """
    Builds every planet of the batch in parallel and writes their previews and
    the manifest. Returns the manifest entries ordered by seed.
    """
    seeds = bake_config.seed_list()
    vertex_count = 10 * 4 ** bake_config.resolution + 2
    logger.info(
        f"Starting parallel bake of {len(seeds)} planet(s) at resolution {bake_config.resolution} "
        f"({vertex_count} vertices each)..."
    )

    num_workers = workers or max(1, min(len(seeds), multiprocessing.cpu_count() - 1))
    logger.info(f"Using {num_workers} worker processes.")

    start_time = time.perf_counter()
    results = []
    config_data = bake_config.model_dump(mode="json")
    with multiprocessing.Pool(processes=num_workers, initializer=init_worker, initargs=(config_data,)) as pool:
        results_iterator = pool.imap_unordered(process_planet, seeds)
        for result in tqdm(results_iterator, total=len(seeds), desc="Baking Planets"):
            results.append(result)

    # --- Finalization ---
    results.sort(key=lambda entry: entry['seed'])
    os.makedirs(bake_config.output_dir, exist_ok=True)
    manifest_path = os.path.join(bake_config.output_dir, "manifest.json")
    with open(manifest_path, 'w') as f:
        json.dump({'config': config_data, 'planets': results}, f, indent=2)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info("--- Terrain Stats ---")
    for entry in results:
        logger.info(
            f"  - seed {entry['seed']} ({entry['biome']}): elevation [{entry['min_elevation']:.4f}, "
            f"{entry['max_elevation']:.4f}], {100.0 * entry['sea_fraction']:.1f}% sea"
        )
    logger.info(f"Baked previews and manifest.json saved to: {bake_config.output_dir}")
    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline Planet Baker for the Procedural Planet Generator.")
    parser.add_argument("--config", type=str, help="Path to a JSON bake configuration.")
    parser.add_argument("--preset", type=str, help="Name of the biome preset to use.")
    parser.add_argument("--random", action="store_true", help="Use a seeded random biome for every planet.")
    parser.add_argument("--seed", type=int, help="First seed of the batch.")
    parser.add_argument("--count", type=int, help="Number of planets (consecutive seeds).")
    parser.add_argument("--resolution", type=int, help="Icosphere subdivision level.")
    parser.add_argument("--width", type=int, help="Preview width in pixels.")
    parser.add_argument("--height", type=int, help="Preview height in pixels.")
    parser.add_argument("--modes", nargs="+", choices=PREVIEW_MODES, help="Preview modes to bake.")
    parser.add_argument("--output", type=str, help="Output directory.")
    parser.add_argument("--workers", type=int, help="Number of worker processes.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")

    # 2. --- Load Configuration ---
    bake_config = load_config(args, logger)
    if bake_config is None:
        return 1

    # 3. --- Bake ---
    bake_planets(bake_config, logger, workers=args.workers)
    return 0


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
