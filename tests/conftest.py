# tests/conftest.py

import logging

import numpy as np
import pytest

from planet_generator.geometry import icosphere


@pytest.fixture
def logger():
    return logging.getLogger("planet_generator.tests")


@pytest.fixture(scope="session")
def sphere_points():
    """10,000 random points on the unit sphere, fixed across runs."""
    rng = np.random.default_rng(2024)
    points = rng.normal(size=(10_000, 3))
    return points / np.linalg.norm(points, axis=1, keepdims=True)


@pytest.fixture(scope="session")
def small_sphere():
    return icosphere(2)


@pytest.fixture(scope="session")
def icosahedron():
    return icosphere(0)
