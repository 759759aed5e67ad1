"""Outline extraction pipeline: photo to black-on-white line art."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .contour import close_mask, fill_contour_mask, filter_contours, find_contours
from .geometry import fit_size
from .heal import heal_gaps
from .raster_ingest import ingest_from_array
from .simplify import simplify_contours
from .types import (
    BLACK,
    WHITE,
    ColoringPageError,
    Contour,
    ImageArray,
    OutlineConfig,
    PipelineFailed,
    Size,
)

logger = logging.getLogger(__name__)


@dataclass
class OutlineResult:
    """Everything one extraction produced."""

    page: ImageArray
    threshold_mask: np.ndarray
    cleaned_mask: np.ndarray
    retained_mask: np.ndarray
    contours: List[Contour] = field(default_factory=list)
    size: Size = (0, 0)


class OutlineExtractor:
    """Converts a color photo into a coloring page."""

    def __init__(self, config: Optional[OutlineConfig] = None):
        """Initialize extractor with configuration.

        Args:
            config: Outline configuration. Uses defaults if None.
        """
        self.config = config or OutlineConfig()
        self.debug_stages: List[Tuple[str, np.ndarray]] = []

    def extract(
        self,
        photo: ImageArray,
        bound: Optional[Size] = None,
        debug: bool = False,
    ) -> OutlineResult:
        """Run a photo through the outline pipeline.

        Args:
            photo: Source image (H, W, 3) RGB, or anything
                   ingest_from_array accepts
            bound: (width, height) box the canvas must fit in. Falls back
                   to the configured canvas bound, then to the photo size.
            debug: If True, collect intermediate stage images

        Returns:
            OutlineResult holding the healed page and intermediate masks

        Raises:
            LoadFailed: If the photo array is not a usable image
            PipelineFailed: If any vision stage fails
        """
        image = ingest_from_array(photo)
        self.debug_stages = []

        try:
            # Step 1: Fit the canvas and resize
            resized = self._resize_to_canvas(image, bound)
            height, width = resized.shape[:2]

            if debug:
                self.debug_stages.append(("1_resized", resized))

            # Step 2: Grayscale
            grayscale = cv2.cvtColor(resized, cv2.COLOR_RGB2GRAY)

            if debug:
                self.debug_stages.append(("2_grayscale", grayscale))

            # Step 3: Adaptive threshold (dark strokes become foreground)
            threshold_mask = self._threshold(grayscale)

            if debug:
                self.debug_stages.append(("3_threshold", threshold_mask))

            # Step 4: Denoise by dilating then eroding
            cleaned_mask = self._denoise(threshold_mask)

            if debug:
                self.debug_stages.append(("4_closed", cleaned_mask))

            # Steps 5-7: Contours, area filter, simplification
            contours = self._extract_contours(cleaned_mask)

            # Steps 8-9: Render outlines and keep mask pixels of retained contours
            retained_mask = self._retain_contour_pixels(cleaned_mask, contours)

            if debug:
                preview = cv2.cvtColor(cleaned_mask, cv2.COLOR_GRAY2RGB)
                cv2.drawContours(preview, contours, -1, (255, 0, 0), 2)
                self.debug_stages.append(("5_contours", preview))
                self.debug_stages.append(("6_retained", retained_mask))

            # Step 10: The visible outline is the raw threshold silhouette;
            # contour filtering only feeds gap healing.
            page = self._compose_page(threshold_mask)

            # Step 11: Heal small gaps
            page = heal_gaps(
                page,
                contours,
                area_threshold=self.config.gap_area,
                radius=self.config.inpaint_radius,
            )

            if debug:
                self.debug_stages.append(("7_page", page))

        except ColoringPageError:
            raise
        except Exception as e:
            logger.error(f"Outline extraction failed: {e}")
            raise PipelineFailed(f"Outline extraction failed: {e}") from e

        logger.info(
            f"Extracted outline {width}x{height} with {len(contours)} contour(s)"
        )

        return OutlineResult(
            page=page,
            threshold_mask=threshold_mask,
            cleaned_mask=cleaned_mask,
            retained_mask=retained_mask,
            contours=contours,
            size=(width, height),
        )

    def _resize_to_canvas(self, image: ImageArray, bound: Optional[Size]) -> ImageArray:
        """Resize to the fitted canvas, then to the exact canvas size."""
        src_height, src_width = image.shape[:2]
        bound = bound or self.config.canvas_bound or (src_width, src_height)

        width, height = fit_size(src_width, src_height, bound[0], bound[1])
        if width <= 0 or height <= 0:
            raise PipelineFailed(
                f"Canvas bound {bound[0]}x{bound[1]} yields an empty "
                f"{width}x{height} canvas"
            )

        logger.debug(
            f"Fitting {src_width}x{src_height} into {bound[0]}x{bound[1]} "
            f"-> {width}x{height}"
        )

        resized = cv2.resize(image, (width, height))
        # Exact canvas size; identity when it already matches
        return cv2.resize(resized, (width, height))

    def _threshold(self, grayscale: np.ndarray) -> np.ndarray:
        return cv2.adaptiveThreshold(
            grayscale,
            255,
            cv2.ADAPTIVE_THRESH_MEAN_C,
            cv2.THRESH_BINARY_INV,
            self.config.block_size,
            self.config.threshold_c,
        )

    def _denoise(self, mask: np.ndarray) -> np.ndarray:
        size = self.config.closing_kernel
        kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (size, size))
        dilated = cv2.dilate(mask, kernel)
        return cv2.erode(dilated, kernel)

    def _extract_contours(self, mask: np.ndarray) -> List[Contour]:
        """Find, area-filter and simplify contours of the cleaned mask."""
        contours, _ = find_contours(mask)
        kept = filter_contours(contours, self.config.min_contour_area)

        logger.debug(
            f"Kept {len(kept)} of {len(contours)} contour(s) "
            f">= {self.config.min_contour_area} px^2"
        )

        return simplify_contours(kept, self.config.approx_epsilon)

    def _retain_contour_pixels(
        self, cleaned_mask: np.ndarray, contours: List[Contour]
    ) -> np.ndarray:
        """Intersect the outline rendering with the filled contour mask.

        Each simplified contour is drawn as a heavy antialiased black
        outline onto a copy of the cleaned mask, with a small closing
        after every contour to smooth the joints. The union of the filled
        contours, itself closed, then masks the result so only pixels
        belonging to a retained contour survive.
        """
        smoothing = self.config.smoothing_kernel
        outlines = cleaned_mask.copy()

        for contour in contours:
            cv2.drawContours(
                outlines,
                [contour],
                0,
                0,
                self.config.outline_thickness,
                cv2.LINE_AA,
            )
            outlines = close_mask(outlines, smoothing)

        contour_mask = fill_contour_mask(cleaned_mask.shape, contours)
        contour_mask = close_mask(contour_mask, smoothing)

        return cv2.bitwise_and(outlines, contour_mask)

    def _compose_page(self, threshold_mask: np.ndarray) -> ImageArray:
        height, width = threshold_mask.shape[:2]
        page = np.full((height, width, 3), WHITE, dtype=np.uint8)
        page[threshold_mask > 0] = BLACK
        return page


def extract_outline(
    photo: ImageArray,
    bound: Optional[Size] = None,
    config: Optional[OutlineConfig] = None,
) -> ImageArray:
    """Convert a photo into a coloring page.

    Convenience function for one-off processing.

    Args:
        photo: Source image (H, W, 3) RGB
        bound: Optional (width, height) box for the canvas
        config: Optional configuration object

    Returns:
        Coloring page (H, W, 3) RGB

    Example:
        >>> page = extract_outline(photo, bound=(800, 600))
    """
    return OutlineExtractor(config).extract(photo, bound).page
