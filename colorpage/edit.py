"""Interactive editing: free-hand strokes and bucket fills."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional, Union

import cv2
import numpy as np

from .history import HistoryStack
from .types import BLACK, Color, FillFailed, ImageArray, Point

logger = logging.getLogger(__name__)


class EditMode(Enum):
    """States of the edit engine."""
    IDLE = auto()
    DRAWING = auto()


@dataclass
class PointerDown:
    point: Point


@dataclass
class PointerMove:
    point: Point


@dataclass
class PointerUp:
    point: Point


@dataclass
class DoubleClick:
    point: Point


InputEvent = Union[PointerDown, PointerMove, PointerUp, DoubleClick]


@dataclass
class EditState:
    """Transient input state for the current session."""
    color: Color = BLACK
    fill_enabled: bool = False
    drawing: bool = False
    last_point: Optional[Point] = None
    stroke_dirty: bool = False


class EditEngine:
    """
    State machine applying strokes and fills to the live coloring page.

    The page is obtained through ``get_page`` and replaced through
    ``set_page`` so the engine never holds its own alias of the owner's
    bitmap between calls.
    """

    def __init__(
        self,
        get_page: Callable[[], Optional[ImageArray]],
        set_page: Callable[[ImageArray], None],
        history: HistoryStack,
    ):
        self._get_page = get_page
        self._set_page = set_page
        self.history = history
        self.state = EditState()

    @property
    def mode(self) -> EditMode:
        return EditMode.DRAWING if self.state.drawing else EditMode.IDLE

    def set_color(self, color: Color) -> None:
        self.state.color = tuple(int(c) for c in color)

    def set_fill_enabled(self, enabled: bool) -> None:
        self.state.fill_enabled = bool(enabled)

    def reset(self) -> None:
        """Drop any in-progress stroke (used when a new page is generated)."""
        self.state.drawing = False
        self.state.last_point = None
        self.state.stroke_dirty = False

    def handle(self, event: InputEvent) -> Optional[ImageArray]:
        """
        Dispatch one input event.

        Returns:
            The page after a fill, otherwise None

        Raises:
            FillFailed: If a double-click fill fails
        """
        if isinstance(event, PointerDown):
            self._pointer_down(event.point)
        elif isinstance(event, PointerMove):
            self._pointer_move(event.point)
        elif isinstance(event, PointerUp):
            self._pointer_up()
        elif isinstance(event, DoubleClick):
            if self.state.fill_enabled and self._get_page() is not None:
                return self.fill(event.point)
        else:
            raise TypeError(f"Unknown input event: {event!r}")
        return None

    def _pointer_down(self, point: Point) -> None:
        page = self._get_page()
        if page is None or not _inside(page, point):
            return
        self.state.drawing = True
        self.state.last_point = _as_point(point)
        self.state.stroke_dirty = False

    def _pointer_move(self, point: Point) -> None:
        if not self.state.drawing:
            return
        if self._draw_segment(self.state.last_point, point, self.state.color):
            self.state.last_point = _as_point(point)
            self.state.stroke_dirty = True

    def _pointer_up(self) -> None:
        if not self.state.drawing:
            return
        self.state.drawing = False
        self.state.last_point = None

        # One undo step per completed stroke
        if self.state.stroke_dirty:
            self.history.push(self._get_page())
            self.state.stroke_dirty = False

    def stroke(self, start: Point, end: Point, color: Optional[Color] = None) -> bool:
        """
        Draw a single line segment and record it in the history.

        Args:
            start: Segment start (x, y)
            end: Segment end (x, y)
            color: RGB color, defaults to the active color

        Returns:
            True if the segment was drawn, False if it was a no-op
        """
        page = self._get_page()
        if page is None or not _inside(page, start):
            return False

        color = self.state.color if color is None else color
        if not self._draw_segment(start, end, color):
            return False

        self.history.push(self._get_page())
        return True

    def _draw_segment(self, start: Point, end: Point, color: Color) -> bool:
        """Draw start->end onto the page in place; False if end is off-canvas."""
        page = self._get_page()
        if page is None or not _inside(page, end):
            return False

        cv2.line(page, _as_point(start), _as_point(end), _as_scalar(color), 1)
        return True

    def fill(self, point: Point, color: Optional[Color] = None) -> ImageArray:
        """
        Flood-fill the region around a seed pixel.

        The fill runs on a working copy; only a successful fill replaces
        the page and is pushed to the history.

        Args:
            point: Seed pixel (x, y)
            color: RGB fill color, defaults to the active color

        Returns:
            The filled page

        Raises:
            FillFailed: If there is no page or the fill engine errors
        """
        page = self._get_page()
        if page is None:
            raise FillFailed("No coloring page to fill")

        color = self.state.color if color is None else color
        height, width = page.shape[:2]
        filled = page.copy()
        mask = np.zeros((height + 2, width + 2), dtype=np.uint8)

        try:
            cv2.floodFill(filled, mask, _as_point(point), _as_scalar(color))
        except (cv2.error, TypeError, ValueError, OverflowError) as e:
            logger.error(f"Flood fill at {point} failed: {e}")
            raise FillFailed(f"Failed to perform flood fill: {e}") from e

        self._set_page(filled)
        self.history.push(filled)
        logger.debug(f"Filled region at {point} with {tuple(color)}")
        return filled


def _inside(page: ImageArray, point: Point) -> bool:
    height, width = page.shape[:2]
    x, y = point
    return 0 <= x < width and 0 <= y < height


def _as_point(point: Point) -> Point:
    return (int(point[0]), int(point[1]))


def _as_scalar(color: Color) -> tuple:
    return tuple(int(c) for c in color[:3])
