"""Canvas sizing that preserves aspect ratio."""

from .types import Size


def fit_size(
    source_width: int, source_height: int, bound_width: int, bound_height: int
) -> Size:
    """Fit a source size inside a bounding box, keeping its aspect ratio.

    The width is first stretched to the bound; if the resulting height
    overflows, the height is clamped and the width recomputed.

    Args:
        source_width: Width of the source image (> 0)
        source_height: Height of the source image (> 0)
        bound_width: Maximum target width
        bound_height: Maximum target height

    Returns:
        Tuple of (target_width, target_height). Zero-size bounds give a
        zero-size result; callers must guard against it.
    """
    aspect_ratio = source_width / source_height

    target_width = int(bound_width)
    target_height = int(target_width / aspect_ratio)

    if target_height > bound_height:
        target_height = int(bound_height)
        target_width = int(target_height * aspect_ratio)

    return target_width, target_height