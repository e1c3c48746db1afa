# tests/test_bake_planets.py

import json
import logging

import pytest

import bake_planets
from bake_planets import BakeConfig, build_parser, load_config
from planet_generator.biome import BiomeProfile


@pytest.fixture
def logger():
    return logging.getLogger("Baker.tests")


def _load(argv, logger):
    return load_config(build_parser().parse_args(argv), logger)


def test_seed_list():
    assert BakeConfig(seed=10, count=3).seed_list() == [10, 11, 12]
    assert BakeConfig(seeds=[5, 1], count=3).seed_list() == [5, 1]


def test_command_line_overrides_config_file(tmp_path, logger):
    config_path = tmp_path / "bake.json"
    config_path.write_text(json.dumps({"seed": 1, "count": 2, "preset": "beach", "resolution": 2}))

    bake_config = _load(["--config", str(config_path), "--seed", "9", "--modes", "terrain", "river"], logger)

    assert bake_config.seed == 9
    assert bake_config.count == 2
    assert bake_config.preset == "beach"
    assert bake_config.modes == ["terrain", "river"]


def test_random_flag_selects_seeded_biomes(logger):
    bake_config = _load(["--random"], logger)

    assert bake_config.randomize
    assert bake_config.profile_for(3) == bake_config.profile_for(3)
    assert bake_config.profile_for(3).name == "random-3"


def test_inline_profile_overrides_preset(tmp_path, logger):
    config_path = tmp_path / "bake.json"
    config_path.write_text(json.dumps({"profile": {"name": "mine", "noise": {"octaves": 2}}}))

    bake_config = _load(["--config", str(config_path)], logger)

    assert bake_config.profile_for(1).name == "mine"


def test_inline_float_colors_reach_the_workers_unchanged():
    profile = BiomeProfile(name="exact", sea_gradient=[(-1.0, (0.013, 0.27, 0.51)), (0.0, (0.2, 0.6, 0.9))])
    bake_config = BakeConfig(profile=profile)

    # Workers rebuild the config from its JSON dump.
    worker_config = BakeConfig.model_validate(json.loads(json.dumps(bake_config.model_dump(mode="json"))))

    assert worker_config.profile_for(1) == profile


@pytest.mark.parametrize("contents", ["{not json", json.dumps({"count": 0}), json.dumps({"modes": ["x-ray"]})])
def test_invalid_config_is_reported(tmp_path, logger, contents):
    config_path = tmp_path / "bake.json"
    config_path.write_text(contents)

    assert _load(["--config", str(config_path)], logger) is None


def test_missing_config_file_is_reported(tmp_path, logger):
    assert _load(["--config", str(tmp_path / "missing.json")], logger) is None


def test_unknown_preset_is_reported(logger):
    assert _load(["--preset", "lava"], logger) is None


def test_main_returns_non_zero_on_bad_config(tmp_path):
    assert bake_planets.main(["--config", str(tmp_path / "missing.json")]) == 1


def test_bake_writes_previews_and_manifest(tmp_path, logger):
    bake_config = BakeConfig(
        seeds=[42, 7],
        resolution=1,
        width=16,
        height=8,
        modes=["terrain", "elevation"],
        output_dir=str(tmp_path / "out"),
    )

    results = bake_planets.bake_planets(bake_config, logger, workers=1)

    assert [entry["seed"] for entry in results] == [7, 42]
    for entry in results:
        assert entry["vertices"] == 42
        for mode in ("terrain", "elevation"):
            assert (tmp_path / "out" / entry["previews"][mode]["file"]).is_file()

    manifest = json.loads((tmp_path / "out" / "manifest.json").read_text())
    assert [planet["seed"] for planet in manifest["planets"]] == [7, 42]
    assert manifest["config"]["resolution"] == 1
