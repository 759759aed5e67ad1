"""colorpage: Photo to coloring-page conversion with interactive recoloring.

Turns a photograph into black-on-white line art using adaptive thresholding,
morphological closing, contour filtering and gap inpainting, then lets the
page be painted with strokes and bucket fills backed by an undo history.
"""

from .types import (
    OutlineConfig,
    ColoringPageError,
    LoadFailed,
    PipelineFailed,
    GenerateBusy,
    FillFailed,
    WriteFailed,
    HistoryError,
)
from .session import ColoringSession

__version__ = "0.1.0"
__all__ = [
    "ColoringSession",
    "OutlineConfig",
    "ColoringPageError",
    "LoadFailed",
    "PipelineFailed",
    "GenerateBusy",
    "FillFailed",
    "WriteFailed",
    "HistoryError",
]
