"""Contour detection, filtering and rasterization helpers."""

from typing import List, Sequence, Tuple

import cv2
import numpy as np

from .types import Contour


def find_contours(mask: np.ndarray) -> Tuple[List[Contour], np.ndarray]:
    """Find all contours of a binary mask with their full hierarchy.

    Args:
        mask: Binary mask (H, W) with True/255 for foreground pixels

    Returns:
        Tuple of (contours, hierarchy). Contours keep OpenCV's (N, 1, 2)
        int32 layout; hierarchy is an (M, 4) array of
        [next, previous, first_child, parent] indices (empty if none).
    """
    if mask.dtype != np.uint8:
        mask = (mask.astype(np.uint8)) * 255

    contours, hierarchy = cv2.findContours(
        mask.copy(),
        cv2.RETR_TREE,
        cv2.CHAIN_APPROX_SIMPLE,
    )

    if hierarchy is None:
        return [], np.empty((0, 4), dtype=np.int32)

    return list(contours), hierarchy[0]


def contour_area(contour: Contour) -> float:
    """Enclosed area of a contour in square pixels."""
    return float(cv2.contourArea(contour))


def filter_contours(contours: Sequence[Contour], min_area: float) -> List[Contour]:
    """Drop contours whose enclosed area is below min_area.

    Args:
        contours: Contours to filter
        min_area: Minimum area (in px^2) to keep

    Returns:
        Contours with area >= min_area, in their original order
    """
    return [c for c in contours if contour_area(c) >= min_area]


def fill_contour_mask(shape: Tuple[int, int], contours: Sequence[Contour]) -> np.ndarray:
    """Rasterize the union of filled contours into a uint8 mask.

    Args:
        shape: (H, W) of the output mask
        contours: Contours to fill

    Returns:
        Mask (H, W) with 255 inside any contour, 0 elsewhere
    """
    mask = np.zeros(shape, dtype=np.uint8)
    for contour in contours:
        cv2.drawContours(mask, [contour], 0, 255, cv2.FILLED)
    return mask


def close_mask(mask: np.ndarray, kernel_size: int) -> np.ndarray:
    """Morphological closing with a square structuring element."""
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (kernel_size, kernel_size))
    return cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel)
