"""
Test configuration and fixtures for the aura color engine tests.
"""
import numpy as np
import pytest


def make_solid_image(rgb, size=(100, 100)) -> np.ndarray:
    """Solid RGB uint8 image of the given (width, height)."""
    width, height = size
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :] = rgb
    return img


def make_vertical_stripes(colors, size=(300, 300)) -> np.ndarray:
    """Equal-width vertical stripes, left to right, in RGB."""
    width, height = size
    img = np.zeros((height, width, 3), dtype=np.uint8)
    bounds = np.linspace(0, width, len(colors) + 1).astype(int)
    for color, x0, x1 in zip(colors, bounds[:-1], bounds[1:]):
        img[:, x0:x1] = color
    return img


@pytest.fixture
def solid_image():
    """Factory for solid-color RGB bitmaps."""
    return make_solid_image


@pytest.fixture
def stripes_image():
    """Factory for vertical-stripe RGB bitmaps."""
    return make_vertical_stripes


@pytest.fixture
def rng():
    """Seeded generator for reproducible random draws."""
    return np.random.default_rng(1234)


@pytest.fixture
def seeded_rng_factory():
    """Generator factory that pins k-means seeding for every call."""
    return lambda: np.random.default_rng(7)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from aura_engine.services.observability import reset_metrics
    reset_metrics()
