"""Pytest configuration and fixtures."""

import cv2
import numpy as np
import pytest
from PIL import Image

CIRCLE_CENTER = (200, 150)
CIRCLE_RADIUS = 50


def make_circle_photo(width: int = 400, height: int = 300) -> np.ndarray:
    """White RGB image with one solid black circle in the middle."""
    image = np.full((height, width, 3), 255, dtype=np.uint8)
    cv2.circle(image, CIRCLE_CENTER, CIRCLE_RADIUS, (0, 0, 0), -1)
    return image


@pytest.fixture
def circle_photo():
    """400x300 photo of a black circle (radius 50) on white."""
    return make_circle_photo()


@pytest.fixture
def circle_geometry():
    """(center, radius) of the circle in circle_photo."""
    return CIRCLE_CENTER, CIRCLE_RADIUS


@pytest.fixture
def circle_png(tmp_path, circle_photo):
    """Path to the circle photo saved as PNG."""
    path = tmp_path / "circle.png"
    Image.fromarray(circle_photo).save(path)
    return path


@pytest.fixture
def boxed_page():
    """White page with a closed black square outline (interior at 20..79)."""
    page = np.full((100, 100, 3), 255, dtype=np.uint8)
    cv2.rectangle(page, (19, 19), (80, 80), (0, 0, 0), 1)
    return page
