"""Shared fixtures: small synthetic RGBA buffers."""

import numpy as np
import pytest

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


@pytest.fixture
def solid_image():
    """Factory for a width x height image filled with one RGBA color."""
    def _make(width, height, rgba):
        return np.tile(np.array(rgba, dtype=np.uint8), (height, width, 1))
    return _make


@pytest.fixture
def red_blue_image():
    """4x4 image: top two rows pure red, bottom two rows pure blue."""
    image = np.zeros((4, 4, 4), dtype=np.uint8)
    image[:2] = RED
    image[2:] = BLUE
    return image


@pytest.fixture
def grid_image():
    """8x8 image where every pixel is a different quantized color (64 colors)."""
    image = np.zeros((8, 8, 4), dtype=np.uint8)
    for row in range(8):
        for col in range(8):
            image[row, col] = (row * 32, col * 32, (row + col) * 8, 255)
    return image
