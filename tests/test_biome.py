# tests/test_biome.py

import numpy as np
import pytest
from pydantic import ValidationError

from planet_generator.biome import (
    BiomeEvaluator,
    BiomeProfile,
    BiomeType,
    GainRange,
    NoiseShape,
    SeaNoiseShape,
    classify_biomes,
)
from planet_generator.color_gradient import ColorGradient, parse_color


@pytest.fixture(scope="module")
def points(sphere_points):
    return sphere_points[:2000]


def test_evaluation_is_deterministic(points):
    a = BiomeEvaluator(42).evaluate_many(points)
    b = BiomeEvaluator(42).evaluate_many(points)

    for field in ("elevation", "colors", "height", "biome", "moisture", "temperature", "river", "is_sea", "biome_type"):
        np.testing.assert_array_equal(getattr(a, field), getattr(b, field))


def test_different_seeds_give_different_terrain(points):
    a = BiomeEvaluator(42).evaluate_many(points)
    b = BiomeEvaluator(43).evaluate_many(points)

    assert not np.array_equal(a.elevation, b.elevation)


def test_single_point_matches_batch(points):
    evaluator = BiomeEvaluator(8)
    batch = evaluator.evaluate_many(points[:25])

    for i in range(25):
        sample = evaluator.evaluate(points[i])
        assert sample.elevation == batch.elevation[i]
        assert sample.color == tuple(batch.colors[i])
        assert sample.is_sea == bool(batch.is_sea[i])


def test_elevation_stays_within_profile_range(points):
    profile = BiomeProfile()
    samples = BiomeEvaluator(3, profile).evaluate_many(points)

    lowest = profile.noise.min + profile.sea_noise.min
    assert np.all(samples.elevation >= lowest)
    assert np.all(samples.elevation <= profile.noise.max)
    assert np.any(samples.elevation > 0.0)
    assert np.any(samples.elevation < 0.0)


def test_sea_points_are_capped_at_sea_level(points):
    profile = BiomeProfile(sea_level=0.01)
    samples = BiomeEvaluator(3, profile).evaluate_many(points)

    assert np.any(samples.is_sea)
    assert np.all(samples.elevation[samples.is_sea] <= profile.sea_level)
    assert np.all(samples.elevation[~samples.is_sea] >= profile.sea_level)


def test_colors_come_from_the_matching_gradient(points):
    land = ColorGradient([(-1.0, "#ff0000"), (1.0, "#ff0000")])
    sea = ColorGradient([(-1.0, "#0000ff"), (1.0, "#0000ff")])
    profile = BiomeProfile(land_gradient=land, sea_gradient=sea)
    samples = BiomeEvaluator(3, profile).evaluate_many(points)

    np.testing.assert_array_equal(samples.colors[~samples.is_sea], np.tile([1.0, 0.0, 0.0], ((~samples.is_sea).sum(), 1)))
    np.testing.assert_array_equal(samples.colors[samples.is_sea], np.tile([0.0, 0.0, 1.0], (samples.is_sea.sum(), 1)))


def test_zero_octaves_give_flat_terrain(points):
    profile = BiomeProfile(noise=NoiseShape(octaves=0))
    samples = BiomeEvaluator(3, profile).evaluate_many(points)

    assert np.all(samples.elevation == 0.0)
    assert not np.any(samples.is_sea)
    np.testing.assert_allclose(samples.height, 0.0, atol=1e-12)
    expected = np.tile(profile.land_gradient.get(0.0), (points.shape[0], 1))
    np.testing.assert_allclose(samples.colors, expected, atol=1e-12)


@pytest.mark.parametrize("noise", [
    NoiseShape(min=0.0, max=0.0),
    NoiseShape(min=0.1, max=-0.1),
    NoiseShape(lacunarity=0.0, scale=0.0),
    NoiseShape(gain=GainRange(min=0.9, max=0.1, scale=-1.0)),
    NoiseShape(power=-2.0, warp=25.0),
    NoiseShape(octaves=-4),
])
def test_degenerate_parameters_never_raise(points, noise):
    profile = BiomeProfile(noise=noise, sea_noise=SeaNoiseShape(min=0.01, max=-0.01, scale=0.0))
    samples = BiomeEvaluator(1, profile).evaluate_many(points[:200])

    assert len(samples) == 200
    assert np.all(np.isfinite(samples.elevation))
    assert np.all(np.isfinite(samples.colors))
    assert np.all((samples.colors >= 0.0) & (samples.colors <= 1.0))


def test_auxiliary_channels_are_always_computed(points):
    samples = BiomeEvaluator(5).evaluate_many(points)

    for values in (samples.biome, samples.moisture, samples.temperature, samples.river):
        assert values.shape == (points.shape[0],)
        assert np.all(values >= 0.0)
        assert np.all(values <= 1.0)


def test_normalized_height():
    evaluator = BiomeEvaluator(1, BiomeProfile(noise=NoiseShape(min=-0.05, max=0.05)))

    np.testing.assert_allclose(evaluator.normalized_height([-0.05, 0.0, 0.05, 1.0]), [-1.0, 0.0, 1.0, 1.0], atol=1e-12)


def test_profile_is_immutable():
    profile = BiomeProfile()

    with pytest.raises(ValidationError):
        profile.sea_level = 0.5
    with pytest.raises(TypeError):
        profile.land_gradient.add(0.2, "#ffffff")


def test_profile_freezes_a_copy_of_mutable_gradients():
    gradient = ColorGradient([(0.0, "#000000")])
    profile = BiomeProfile(land_gradient=gradient)
    gradient.add(1.0, "#ffffff")

    assert len(profile.land_gradient) == 1
    assert profile.land_gradient.frozen


def test_profile_round_trips_through_json():
    profile = BiomeProfile(
        name="dunes",
        noise=NoiseShape(octaves=3, power=1.4),
        land_gradient=[[0.0, "#ccaa00"], [1.0, "#994400"]],
        sea_level=-0.01,
    )
    data = profile.model_dump(mode="json")

    assert data["land_gradient"] == [[0.0, "#ccaa00"], [1.0, "#994400"]]
    assert BiomeProfile.model_validate(data) == profile


def test_profile_rejects_malformed_types():
    with pytest.raises(ValidationError):
        BiomeProfile(noise={"octaves": "many"})


def test_sample_color_matches_gradient_lookup(points):
    profile = BiomeProfile()
    evaluator = BiomeEvaluator(9, profile)
    sample = evaluator.evaluate(points[0])

    gradient = profile.sea_gradient if sample.is_sea else profile.land_gradient
    assert sample.color == pytest.approx(gradient.get(sample.height))
    assert profile.land_gradient.get(0.0) == pytest.approx(parse_color("#115512"))


def test_zero_octaves_stay_flat_below_a_positive_sea_level(points):
    profile = BiomeProfile(noise=NoiseShape(octaves=0), sea_level=0.01)
    samples = BiomeEvaluator(3, profile).evaluate_many(points)

    assert np.all(samples.elevation == 0.0)
    assert np.all(samples.is_sea)
    assert np.all(samples.biome_type == BiomeType.OCEAN)


@pytest.mark.parametrize("height, is_sea, temperature, moisture, expected", [
    (-0.5, True, 0.9, 0.9, BiomeType.OCEAN),
    (0.005, False, 0.9, 0.9, BiomeType.BEACH),
    (0.5, False, 0.8, 0.1, BiomeType.DESERT),
    (0.5, False, 0.8, 0.5, BiomeType.SAVANNA),
    (0.5, False, 0.8, 0.9, BiomeType.RAINFOREST),
    (0.5, False, 0.7, 0.1, BiomeType.GRASSLAND),
    (0.5, False, 0.5, 0.5, BiomeType.FOREST),
    (0.5, False, 0.5, 0.9, BiomeType.SWAMP),
    (0.5, False, 0.3, 0.2, BiomeType.GRASSLAND),
    (0.5, False, 0.3, 0.8, BiomeType.FOREST),
    (0.9, False, 0.1, 0.5, BiomeType.SNOW),
    (0.5, False, 0.1, 0.2, BiomeType.TUNDRA),
    (0.5, False, 0.1, 0.6, BiomeType.MOUNTAINS),
])
def test_biome_classification_thresholds(height, is_sea, temperature, moisture, expected):
    codes = classify_biomes([height], 0.0, [is_sea], [temperature], [moisture])

    assert codes.dtype == np.int8
    assert BiomeType(int(codes[0])) is expected


def test_beach_band_follows_the_sea_height():
    codes = classify_biomes([0.305, 0.305], np.array([0.3, 0.1]), [False, False], [0.5, 0.5], [0.5, 0.5])

    assert list(codes) == [BiomeType.BEACH, BiomeType.FOREST]


def test_evaluated_biome_types_match_the_sea_mask(points):
    evaluator = BiomeEvaluator(11)
    samples = evaluator.evaluate_many(points)

    assert np.all((samples.biome_type == BiomeType.OCEAN) == samples.is_sea)
    assert np.all((samples.biome_type >= 0) & (samples.biome_type < len(BiomeType)))
    assert isinstance(evaluator.evaluate(points[0]).biome_type, BiomeType)


def test_float_gradient_colors_survive_json_serialization():
    profile = BiomeProfile(land_gradient=[(0.0, (0.1, 0.2, 0.3)), (1.0, "#88aaff")])
    restored = BiomeProfile.model_validate(profile.model_dump(mode="json"))

    assert restored == profile
    assert restored.land_gradient.stops[0].color == (0.1, 0.2, 0.3)
