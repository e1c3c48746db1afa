# tests/test_presets.py

import numpy as np
import pytest

from planet_generator.biome import BiomeEvaluator, BiomeProfile
from planet_generator.presets import PRESETS, get_preset, random_profile


def test_known_presets():
    assert set(PRESETS) == {"forest", "beach", "snow_forest", "flat"}
    for name, profile in PRESETS.items():
        assert isinstance(profile, BiomeProfile)
        assert profile.name == name
        assert get_preset(name) is profile


def test_unknown_preset_lists_the_available_names():
    with pytest.raises(KeyError) as excinfo:
        get_preset("lava")

    message = excinfo.value.args[0]
    assert "lava" in message
    for name in PRESETS:
        assert name in message


def test_preset_colors_follow_the_host_palettes():
    beach = get_preset("beach")

    assert [stop[1] for stop in beach.land_gradient.to_list()[1:]] == ["#ccaa00", "#cc7700", "#994400"]
    assert beach.sea_gradient.to_list()[-1] == [-0.1, "#00f2e5"]


def test_flat_preset_has_no_relief(sphere_points):
    samples = BiomeEvaluator(99, get_preset("flat")).evaluate_many(sphere_points[:100])

    assert np.all(samples.elevation == 0.0)


def test_random_profile_is_reproducible():
    assert random_profile(7) == random_profile(7)
    assert random_profile(7) != random_profile(8)


@pytest.mark.parametrize("seed", [0, 1, 42, 2 ** 31])
def test_random_profile_ranges(seed):
    profile = random_profile(seed)
    noise = profile.noise

    assert profile.name == f"random-{seed}"
    assert 2 <= noise.octaves <= 5
    assert 1.5 <= noise.lacunarity <= 2.5
    assert 0.1 <= noise.gain.min <= 0.3
    assert 0.6 <= noise.gain.max <= 1.0
    assert 1.0 <= noise.gain.scale <= 3.0
    assert 0.1 <= noise.warp <= 0.6
    assert 0.8 <= noise.scale <= 1.2
    assert 0.7 <= noise.power <= 1.7
    assert -0.01 <= profile.sea_noise.min <= -0.005
    assert 0.002 <= profile.sea_noise.max <= 0.008
    assert 3.0 <= profile.sea_noise.scale <= 7.0
    assert [stop.position for stop in profile.land_gradient.stops] == [-0.5, 0.0, 0.5, 1.0]
    assert [stop.position for stop in profile.sea_gradient.stops] == [-1.0, -0.55, -0.1]


def test_random_profile_builds_without_error(sphere_points):
    samples = BiomeEvaluator(5, random_profile(5)).evaluate_many(sphere_points[:200])

    assert np.all(np.isfinite(samples.elevation))


def test_random_profile_puts_its_octaves_on_the_ridged_layer():
    profile = random_profile(42)

    assert profile.layers.mountain_octaves == profile.noise.octaves
