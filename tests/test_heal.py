"""Tests for gap healing."""

import cv2
import numpy as np

from colorpage.heal import heal_gaps


def square(x0, y0, x1, y1):
    return np.array([[[x0, y0]], [[x1, y0]], [[x1, y1]], [[x0, y1]]], dtype=np.int32)


class TestHealGaps:
    """Test cases for heal_gaps function."""

    def test_small_region_is_inpainted(self):
        """A tiny black speck is rebuilt from the surrounding white."""
        page = np.full((40, 40, 3), 255, dtype=np.uint8)
        page[10:15, 10:15] = 0

        healed = heal_gaps(page, [square(10, 10, 14, 14)])

        assert healed[12, 12].min() > 200

    def test_large_region_untouched(self):
        page = np.full((60, 60, 3), 255, dtype=np.uint8)
        page[10:40, 10:40] = 0

        healed = heal_gaps(page, [square(10, 10, 39, 39)])

        np.testing.assert_array_equal(healed, page)

    def test_threshold_is_configurable(self):
        page = np.full((60, 60, 3), 255, dtype=np.uint8)
        page[10:20, 10:20] = 0
        contour = square(10, 10, 19, 19)
        assert cv2.contourArea(contour) == 81.0

        untouched = heal_gaps(page, [contour], area_threshold=50.0)
        healed = heal_gaps(page, [contour], area_threshold=100.0)

        np.testing.assert_array_equal(untouched, page)
        assert not np.array_equal(healed, page)

    def test_input_not_modified(self):
        page = np.full((40, 40, 3), 255, dtype=np.uint8)
        page[10:15, 10:15] = 0
        original = page.copy()

        heal_gaps(page, [square(10, 10, 14, 14)])

        np.testing.assert_array_equal(page, original)

    def test_no_contours(self):
        page = np.full((20, 20, 3), 128, dtype=np.uint8)

        np.testing.assert_array_equal(heal_gaps(page, []), page)
