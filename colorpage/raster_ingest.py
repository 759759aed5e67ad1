"""Raster image ingestion for source photos."""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image
from PIL import ImageOps, UnidentifiedImageError

from .types import ImageArray, LoadFailed

logger = logging.getLogger(__name__)


def load_image(path: Union[str, Path]) -> ImageArray:
    """
    Load a PNG/JPEG photo as an RGB uint8 array.

    EXIF orientation is applied and any alpha channel is composited on
    a white background.

    Args:
        path: Path to image file

    Returns:
        RGB image array (H, W, 3) with dtype uint8

    Raises:
        LoadFailed: If the file is missing, unreadable or not an image
    """
    path = Path(path)

    if not path.exists():
        raise LoadFailed(f"Image file not found: {path}")

    if not path.is_file():
        raise LoadFailed(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)

            if img.mode in ("RGBA", "LA") or (
                img.mode == "P" and "transparency" in img.info
            ):
                img = img.convert("RGBA")
                background = Image.new("RGB", img.size, (255, 255, 255))
                background.paste(img, mask=img.split()[3])
                img = background
            elif img.mode != "RGB":
                img = img.convert("RGB")

            image = np.array(img, dtype=np.uint8)

    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise LoadFailed(f"Failed to load image {path}: {e}") from e

    if image.size == 0:
        raise LoadFailed(f"Image is empty: {path}")

    logger.debug(f"Loaded {path}: {image.shape[1]}x{image.shape[0]}")
    return image


def ingest_from_array(image: np.ndarray) -> ImageArray:
    """
    Normalize an in-memory image to an RGB uint8 array.

    Grayscale input is replicated to three channels, RGBA is composited
    on white, and float input in [0, 1] is scaled to [0, 255].

    Args:
        image: Image array (H, W), (H, W, 3) or (H, W, 4)

    Returns:
        RGB image array (H, W, 3) with dtype uint8

    Raises:
        LoadFailed: If the array cannot be interpreted as an image
    """
    image = np.asarray(image)

    if image.ndim == 2:
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise LoadFailed(f"Expected 2D or 3D array, got {image.ndim}D")

    if image.shape[0] == 0 or image.shape[1] == 0:
        raise LoadFailed(f"Image has zero size: {image.shape[1]}x{image.shape[0]}")

    if np.issubdtype(image.dtype, np.floating):
        if image.size and image.max() <= 1.0:
            image = image * 255.0
        image = np.clip(np.rint(image), 0, 255)

    if image.shape[2] == 4:
        alpha = image[..., 3:4].astype(np.float32) / 255.0
        rgb = image[..., :3].astype(np.float32)
        image = np.rint(rgb * alpha + 255.0 * (1.0 - alpha))
    elif image.shape[2] != 3:
        raise LoadFailed(f"Expected 3 or 4 channels, got {image.shape[2]}")

    return np.ascontiguousarray(image.astype(np.uint8))
