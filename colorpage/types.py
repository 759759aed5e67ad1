"""Common types, configuration and exceptions for colorpage."""

import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

# Type aliases
ImageArray = np.ndarray
Contour = np.ndarray
Color = Tuple[int, int, int]
Point = Tuple[int, int]
Size = Tuple[int, int]

WHITE: Color = (255, 255, 255)
BLACK: Color = (0, 0, 0)


@dataclass
class OutlineConfig:
    """Configuration for the outline extraction pipeline."""

    # Canvas bound (None = keep the photo's own size)
    canvas_width: Optional[int] = None
    canvas_height: Optional[int] = None

    # Adaptive thresholding
    block_size: int = 15
    threshold_c: float = 10.0

    # Denoising (dilate then erode)
    closing_kernel: int = 30

    # Contour filtering
    min_contour_area: float = 150.0

    # Polygon approximation tolerance in pixels
    approx_epsilon: float = 30.0

    # Contour rendering
    outline_thickness: int = 1000
    smoothing_kernel: int = 5

    # Gap healing
    gap_area: float = 50.0
    inpaint_radius: float = 3.0

    def __post_init__(self):
        """Validate pipeline constants."""
        if self.block_size <= 1 or self.block_size % 2 == 0:
            raise ValueError(f"block_size must be odd and > 1, got {self.block_size}")
        if self.closing_kernel < 1 or self.smoothing_kernel < 1:
            raise ValueError(
                f"kernel sizes must be >= 1, got closing={self.closing_kernel}, "
                f"smoothing={self.smoothing_kernel}"
            )
        if self.outline_thickness < 1:
            raise ValueError(
                f"outline_thickness must be >= 1, got {self.outline_thickness}"
            )
        if self.gap_area > self.min_contour_area:
            warnings.warn(
                f"gap_area ({self.gap_area}) exceeds min_contour_area "
                f"({self.min_contour_area}); every retained contour below the gap "
                "area will be inpainted."
            )

    @property
    def canvas_bound(self) -> Optional[Size]:
        if self.canvas_width is None or self.canvas_height is None:
            return None
        return (self.canvas_width, self.canvas_height)


class ColoringPageError(Exception):
    """Base exception for coloring page errors."""

    pass


class LoadFailed(ColoringPageError):
    """Raised when a source image cannot be read or decoded."""

    pass


class PipelineFailed(ColoringPageError):
    """Raised when a stage of the outline pipeline fails."""

    pass


class GenerateBusy(PipelineFailed):
    """Raised when a generate request arrives while another is running."""

    pass


class FillFailed(ColoringPageError):
    """Raised when a flood fill cannot be performed."""

    pass


class WriteFailed(ColoringPageError):
    """Raised when a page cannot be written to disk."""

    pass


class HistoryError(ColoringPageError):
    """Raised when the history stack is used before it is initialized."""

    pass
