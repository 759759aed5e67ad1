"""Contour simplification using the Douglas-Peucker algorithm."""

from typing import List, Sequence

import cv2

from .types import Contour


def simplify_contour(contour: Contour, epsilon: float = 30.0) -> Contour:
    """Simplify a closed contour with a fixed pixel tolerance.

    Pixel-level contours follow every jag of the threshold mask. A large,
    absolute tolerance reduces them to a handful of straight segments,
    which reads as clean line art rather than a traced bitmap.

    Args:
        contour: Contour points in OpenCV (N, 1, 2) layout
        epsilon: Maximum distance between the original contour and
                 its approximation, in pixels

    Returns:
        Simplified contour in (M, 1, 2) int32 layout
    """
    return cv2.approxPolyDP(contour, epsilon, True)


def simplify_contours(contours: Sequence[Contour], epsilon: float = 30.0) -> List[Contour]:
    """Simplify multiple contours, preserving their order."""
    return [simplify_contour(c, epsilon) for c in contours]
