"""Integration tests for the coloring session."""

import threading
from concurrent.futures import TimeoutError as FutureTimeout

import cv2
import numpy as np
import pytest
from PIL import Image

from colorpage.edit import EditMode, PointerDown, PointerMove, PointerUp
from colorpage.session import ColoringSession
from colorpage.types import (
    FillFailed,
    GenerateBusy,
    HistoryError,
    LoadFailed,
    PipelineFailed,
    WriteFailed,
)

RED = (255, 0, 0)


class TestGenerate:
    """Test page generation."""

    def test_generate_from_array(self, circle_photo):
        session = ColoringSession()

        page = session.generate(circle_photo)

        assert page.shape == (300, 400, 3)
        assert session.has_page
        assert len(session.history) == 1
        assert session.last_result is not None

    def test_generate_from_path(self, circle_png, circle_photo):
        session = ColoringSession()

        from_path = session.generate(circle_png)
        from_array = ColoringSession().generate(circle_photo)

        np.testing.assert_array_equal(from_path, from_array)

    def test_generate_respects_bound(self, circle_photo):
        session = ColoringSession(bound=(200, 200))

        assert session.generate(circle_photo).shape == (150, 200, 3)

    def test_regenerate_resets_history(self, circle_photo):
        session = ColoringSession()
        session.generate(circle_photo)
        session.fill((5, 5), RED)
        assert len(session.history) == 2

        session.generate(circle_photo)

        assert len(session.history) == 1
        assert np.all(session.page[5, 5] == 255)

    def test_missing_file_is_load_failed(self, tmp_path):
        session = ColoringSession()

        with pytest.raises(LoadFailed):
            session.generate(tmp_path / "nonexistent.jpg")

        assert not session.has_page

    def test_failure_keeps_previous_page(self, circle_photo, tmp_path):
        session = ColoringSession()
        session.generate(circle_photo)
        session.fill((5, 5), RED)
        before = session.page

        corrupt = tmp_path / "corrupt.png"
        corrupt.write_bytes(b"not an image")
        with pytest.raises(LoadFailed):
            session.generate(corrupt)

        session.bound = (0, 0)
        with pytest.raises(PipelineFailed):
            session.generate(circle_photo)

        np.testing.assert_array_equal(session.page, before)
        assert len(session.history) == 2

    def test_concurrent_generate_rejected(self, circle_photo):
        session = ColoringSession()
        extract = session.extractor.extract

        def reentrant(photo, bound=None, debug=False):
            return session.generate(photo)

        session.extractor.extract = reentrant
        with pytest.raises(GenerateBusy):
            session.generate(circle_photo)

        # Lock released after the rejection
        session.extractor.extract = extract
        assert session.generate(circle_photo).shape == (300, 400, 3)

    def test_submit_generate(self, circle_photo):
        with ColoringSession() as session:
            first = session.submit_generate(circle_photo)
            second = session.submit_generate(circle_photo)

            np.testing.assert_array_equal(first.result(timeout=60), second.result(timeout=60))
            assert len(session.history) == 1

    def test_background_generate_waits_for_fill(self, circle_photo, monkeypatch):
        """A queued generate never swaps the page under a running fill."""
        session = ColoringSession()
        session.generate(circle_photo)

        entered = threading.Event()
        release = threading.Event()
        flood_fill = cv2.floodFill

        def held_flood_fill(*args, **kwargs):
            entered.set()
            release.wait(30)
            return flood_fill(*args, **kwargs)

        monkeypatch.setattr(cv2, "floodFill", held_flood_fill)

        filler = threading.Thread(target=session.fill, args=((5, 5), RED))
        filler.start()
        assert entered.wait(30)

        small = cv2.resize(circle_photo, (200, 150))
        future = session.submit_generate(small)
        try:
            with pytest.raises(FutureTimeout):
                future.result(timeout=1)
        finally:
            release.set()
            filler.join(30)

        page = future.result(timeout=60)
        session.close()

        assert page.shape == (150, 200, 3)
        assert session.page.shape == (150, 200, 3)
        assert len(session.history) == 1
        assert session.history.current().shape == (150, 200, 3)


class TestEditing:
    """Test editing through the session."""

    def test_generate_fill_undo(self, circle_photo, circle_geometry):
        """Fill paints exactly the circle interior; undo restores the outline."""
        (cx, cy), radius = circle_geometry
        session = ColoringSession()
        outline = session.generate(circle_photo)

        filled = session.fill((cx, cy), RED)

        red = np.all(filled == RED, axis=2)
        ys, xs = np.nonzero(red)
        assert len(xs) > np.pi * (radius - 15) ** 2
        assert np.hypot(xs - cx, ys - cy).max() < radius

        yy, xx = np.mgrid[: filled.shape[0], : filled.shape[1]]
        outside = np.hypot(xx - cx, yy - cy) > radius + 1
        assert np.all(filled[outside] == 255)

        restored = session.undo()
        np.testing.assert_array_equal(restored, outline)
        np.testing.assert_array_equal(session.page, outline)

    def test_undo_is_noop_on_base_page(self, circle_photo):
        session = ColoringSession()
        outline = session.generate(circle_photo)

        np.testing.assert_array_equal(session.undo(), outline)
        assert len(session.history) == 1

    def test_returned_pages_are_copies(self, circle_photo):
        session = ColoringSession()
        page = session.generate(circle_photo)

        page[:] = 0

        assert np.any(session.page != 0)

    def test_event_stroke_then_undo(self, circle_photo):
        session = ColoringSession()
        outline = session.generate(circle_photo)
        session.set_color(RED)

        session.handle(PointerDown((10, 10)))
        session.handle(PointerMove((60, 10)))
        session.handle(PointerUp((60, 10)))

        assert np.all(session.page[10, 10:61] == RED)
        np.testing.assert_array_equal(session.undo(), outline)

    def test_undo_mid_stroke_keeps_previous_edit(self, circle_photo):
        """Undo during an unreleased stroke only discards that stroke."""
        session = ColoringSession()
        outline = session.generate(circle_photo)
        filled = session.fill((5, 5), RED)

        session.handle(PointerDown((10, 10)))
        session.handle(PointerMove((60, 10)))
        assert np.all(session.page[10, 10:61] == 0)

        np.testing.assert_array_equal(session.undo(), filled)
        assert len(session.history) == 2
        assert session.mode == EditMode.IDLE

        # Release after the undo does not record anything
        session.handle(PointerUp((60, 10)))
        assert len(session.history) == 2

        np.testing.assert_array_equal(session.undo(), outline)

    def test_stroke_outside_is_noop(self, circle_photo):
        session = ColoringSession()
        outline = session.generate(circle_photo)

        assert session.stroke((-10, -10), (-50, -50), RED) is False
        assert session.stroke((10, 10), (1000, 10), RED) is False

        assert session.page.tobytes() == outline.tobytes()

    def test_edits_without_page(self):
        session = ColoringSession()

        assert session.stroke((1, 1), (2, 2)) is False
        with pytest.raises(FillFailed):
            session.fill((1, 1))
        with pytest.raises(HistoryError):
            session.undo()

    def test_failed_fill_leaves_page(self, circle_photo):
        session = ColoringSession()
        outline = session.generate(circle_photo)

        with pytest.raises(FillFailed):
            session.fill((-1, 400), RED)

        np.testing.assert_array_equal(session.page, outline)
        assert len(session.history) == 1


class TestSave:
    """Test saving through the session."""

    def test_save_png_roundtrip(self, circle_photo, tmp_path):
        session = ColoringSession()
        page = session.generate(circle_photo)

        path = session.save(tmp_path / "page.png")

        assert path.exists()
        np.testing.assert_array_equal(np.array(Image.open(path)), page)

    def test_save_jpeg(self, circle_photo, tmp_path):
        session = ColoringSession()
        session.generate(circle_photo)

        path = session.save(tmp_path / "page.out", fmt="jpeg")

        with Image.open(path) as img:
            assert img.format == "JPEG"

    def test_save_without_page(self, tmp_path):
        with pytest.raises(WriteFailed):
            ColoringSession().save(tmp_path / "page.png")
