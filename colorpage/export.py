"""Writing coloring pages to PNG/JPEG files."""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

from .types import ImageArray, WriteFailed

logger = logging.getLogger(__name__)

FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
}


def resolve_format(path: Union[str, Path], fmt: Optional[str] = None) -> str:
    """Resolve the Pillow format name from an explicit format or the suffix.

    Raises:
        WriteFailed: If the format is not PNG or JPEG
    """
    if fmt:
        name = fmt.upper()
        if name == "JPG":
            name = "JPEG"
        if name not in FORMATS.values():
            raise WriteFailed(f"Unsupported format: {fmt} (expected PNG or JPEG)")
        return name

    suffix = Path(path).suffix.lower()
    if suffix not in FORMATS:
        raise WriteFailed(
            f"Cannot infer image format from '{Path(path).name}' "
            f"(expected one of {', '.join(sorted(FORMATS))})"
        )
    return FORMATS[suffix]


def save_page(
    page: ImageArray,
    path: Union[str, Path],
    fmt: Optional[str] = None,
) -> Path:
    """
    Save a coloring page to disk.

    Args:
        page: RGB page (H, W, 3) uint8
        path: Output file path
        fmt: "png" or "jpeg"; inferred from the suffix if None

    Returns:
        Path that was written

    Raises:
        WriteFailed: If the format is unsupported or the file can't be written
    """
    path = Path(path)
    name = resolve_format(path, fmt)

    if page is None or page.ndim != 3 or page.shape[2] != 3:
        raise WriteFailed("Nothing to save: expected an RGB page")

    try:
        Image.fromarray(np.ascontiguousarray(page, dtype=np.uint8)).save(path, format=name)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to save {path}: {e}")
        raise WriteFailed(f"Failed to save the image to {path}: {e}") from e

    logger.info(f"Saved coloring page: {path}")
    return path
