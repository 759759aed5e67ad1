"""Coloring session: the single owner of the page and its history."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

import numpy as np

from .edit import EditEngine, EditMode, InputEvent
from .export import save_page
from .history import HistoryStack
from .outline import OutlineExtractor, OutlineResult
from .raster_ingest import load_image
from .types import (
    Color,
    GenerateBusy,
    ImageArray,
    OutlineConfig,
    Point,
    Size,
    WriteFailed,
)

logger = logging.getLogger(__name__)

PhotoSource = Union[str, Path, np.ndarray]


class ColoringSession:
    """Holds the one live coloring page plus its undo history.

    The page is replaced wholesale by ``generate`` and mutated only by
    the edit engine. Pages returned to callers are copies. Edits and the
    page/history swap at the end of a generate hold one state lock, so a
    background generate waits for an edit in flight.
    """

    def __init__(
        self,
        config: Optional[OutlineConfig] = None,
        bound: Optional[Size] = None,
        history_depth: Optional[int] = None,
    ):
        """
        Args:
            config: Outline pipeline configuration. Uses defaults if None.
            bound: (width, height) canvas bound for generated pages
            history_depth: Optional cap on undo history entries
        """
        self.config = config or OutlineConfig()
        self.bound = bound
        self.history = HistoryStack(max_depth=history_depth)
        self.extractor = OutlineExtractor(self.config)
        self.engine = EditEngine(self._get_page, self._set_page, self.history)
        self.last_result: Optional[OutlineResult] = None

        self._page: Optional[ImageArray] = None
        self._generate_lock = threading.Lock()
        self._state_lock = threading.RLock()
        self._executor: Optional[ThreadPoolExecutor] = None

    def _get_page(self) -> Optional[ImageArray]:
        return self._page

    def _set_page(self, page: ImageArray) -> None:
        self._page = page

    @property
    def has_page(self) -> bool:
        return self._page is not None

    @property
    def page(self) -> Optional[ImageArray]:
        """Copy of the current page, or None before the first generate."""
        with self._state_lock:
            return None if self._page is None else self._page.copy()

    @property
    def mode(self) -> EditMode:
        return self.engine.mode

    def generate(self, photo: PhotoSource, debug: bool = False) -> ImageArray:
        """
        Build a new coloring page from a photo, replacing any current page.

        Args:
            photo: RGB array or path to a PNG/JPEG file
            debug: Collect intermediate stages on ``self.extractor``

        Returns:
            Copy of the new page

        Raises:
            GenerateBusy: If another generate is already running
            LoadFailed: If the photo can't be loaded
            PipelineFailed: If the outline pipeline fails
        """
        if not self._generate_lock.acquire(blocking=False):
            raise GenerateBusy("A coloring page is already being generated")

        try:
            if isinstance(photo, (str, Path)):
                logger.info(f"Generating coloring page from {photo}")
                photo = load_image(photo)

            result = self.extractor.extract(photo, self.bound, debug=debug)

            # Only a complete result replaces the page and history
            with self._state_lock:
                self.engine.reset()
                self._page = result.page.copy()
                self.history.reset(self._page)
                self.last_result = result
                return self._page.copy()
        finally:
            self._generate_lock.release()

    def submit_generate(self, photo: PhotoSource) -> "Future[ImageArray]":
        """Queue a generate on a background worker.

        Requests run one at a time in submission order.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="colorpage-generate"
            )
        return self._executor.submit(self._generate_queued, photo)

    def _generate_queued(self, photo: PhotoSource) -> ImageArray:
        # The single worker serializes queued requests; a direct generate()
        # running concurrently is still rejected.
        return self.generate(photo)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "ColoringSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def set_color(self, color: Color) -> None:
        self.engine.set_color(color)

    def set_fill_enabled(self, enabled: bool) -> None:
        self.engine.set_fill_enabled(enabled)

    def handle(self, event: InputEvent) -> Optional[ImageArray]:
        """Forward an input event to the edit engine."""
        with self._state_lock:
            page = self.engine.handle(event)
            return None if page is None else page.copy()

    def stroke(self, start: Point, end: Point, color: Optional[Color] = None) -> bool:
        """Draw one line segment; no-op without a page or off-canvas."""
        with self._state_lock:
            return self.engine.stroke(start, end, color)

    def fill(self, point: Point, color: Optional[Color] = None) -> ImageArray:
        """
        Bucket-fill the region at point.

        Raises:
            FillFailed: If there is no page or the fill fails
        """
        with self._state_lock:
            return self.engine.fill(point, color).copy()

    def undo(self) -> ImageArray:
        """Step back one history entry and return a copy of the page.

        While a pointer stroke is held down and has painted, undo only
        discards that stroke and leaves the history untouched.

        Raises:
            HistoryError: If no page has been generated yet
        """
        with self._state_lock:
            state = self.engine.state
            if state.drawing and state.stroke_dirty:
                # Unreleased stroke pixels are not in the history yet
                self._page = self.history.current()
            else:
                self._page = self.history.undo()
            self.engine.reset()
            return self._page.copy()

    def save(
        self,
        path: Union[str, Path],
        fmt: Optional[str] = None,
        page: Optional[ImageArray] = None,
    ) -> Path:
        """
        Save a page (the current one by default).

        Raises:
            WriteFailed: If there is nothing to save or writing fails
        """
        with self._state_lock:
            page = self._page if page is None else page
            if page is None:
                raise WriteFailed("No coloring page to save")
            return save_page(page, path, fmt)
