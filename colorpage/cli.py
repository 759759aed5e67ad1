"""Command-line interface for colorpage."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
from PIL import Image

from .session import ColoringSession
from .types import BLACK, Color, ColoringPageError, OutlineConfig, Point

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Sets up the logging configuration.
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def parse_point(value: str) -> Point:
    """Parse 'X,Y' into a pixel coordinate."""
    try:
        x, y = (int(part.strip()) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid point '{value}' (expected X,Y)")
    return (x, y)


def parse_color(value: str) -> Color:
    """Parse 'R,G,B' or '#rrggbb' into an RGB tuple."""
    try:
        if value.startswith("#") and len(value) == 7:
            rgb = tuple(int(value[i:i + 2], 16) for i in (1, 3, 5))
        else:
            rgb = tuple(int(part.strip()) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid color '{value}'")

    if len(rgb) != 3 or not all(0 <= c <= 255 for c in rgb):
        raise argparse.ArgumentTypeError(
            f"Invalid color '{value}' (expected R,G,B in 0-255 or #rrggbb)"
        )
    return rgb


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="colorpage",
        description="Turn a photo into a line-art coloring page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  colorpage photo.jpg
  colorpage photo.jpg -o page.png --width 1200 --height 900

  # Pre-color regions with the bucket fill
  colorpage photo.jpg --fill 200,150 --fill 40,40 --color "#ff0000"

  # Save intermediate pipeline stages
  colorpage photo.jpg --debug
        """,
    )

    parser.add_argument("input", help="Input image (PNG or JPEG)")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output path (default: <input>_coloring.png)",
    )

    parser.add_argument(
        "--format",
        choices=["png", "jpeg"],
        default=None,
        help="Output format (default: inferred from the output suffix)",
    )

    parser.add_argument("--width", type=int, default=None, help="Maximum canvas width")
    parser.add_argument("--height", type=int, default=None, help="Maximum canvas height")

    parser.add_argument(
        "--fill",
        type=parse_point,
        action="append",
        default=[],
        metavar="X,Y",
        help="Bucket-fill the region at X,Y (repeatable)",
    )

    parser.add_argument(
        "--color",
        type=parse_color,
        default=BLACK,
        help="Fill color as R,G,B or #rrggbb (default: black)",
    )

    parser.add_argument(
        "--min-contour-area",
        type=float,
        default=150.0,
        help="Minimum contour area in pixels (default: 150)",
    )

    parser.add_argument(
        "--debug", action="store_true", help="Save intermediate stage images"
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )

    return parser


def save_debug_stages(session: ColoringSession, output_path: Path) -> List[Path]:
    """Save the extractor's debug stage images next to the output.

    Args:
        session: Session whose last generate ran with debug=True
        output_path: Page output path; stages go to <stem>_debug/

    Returns:
        Paths of the written stage images
    """
    debug_dir = output_path.parent / f"{output_path.stem}_debug"
    debug_dir.mkdir(exist_ok=True)

    written = []
    for stage_name, stage_image in session.extractor.debug_stages:
        debug_file = debug_dir / f"{stage_name}.png"
        Image.fromarray(stage_image.astype(np.uint8)).save(debug_file)
        logger.info(f"Saved debug stage: {debug_file}")
        written.append(debug_file)
    return written


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    setup_logging(verbose=parsed.verbose, debug=parsed.debug)

    if (parsed.width is None) != (parsed.height is None):
        parser.error("--width and --height must be given together")

    input_path = Path(parsed.input)
    if parsed.output:
        output_path = Path(parsed.output)
    else:
        output_path = input_path.with_name(f"{input_path.stem}_coloring.png")

    bound = None
    if parsed.width is not None:
        bound = (parsed.width, parsed.height)

    try:
        config = OutlineConfig(min_contour_area=parsed.min_contour_area)
        session = ColoringSession(config, bound=bound)

        page = session.generate(input_path, debug=parsed.debug)
        print(f"Generated {page.shape[1]}x{page.shape[0]} coloring page from {input_path}")

        for point in parsed.fill:
            session.fill(point, parsed.color)
            print(f"  Filled region at {point[0]},{point[1]}")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        session.save(output_path, parsed.format)
        print(f"  Output saved: {output_path}")

        if parsed.debug:
            save_debug_stages(session, output_path)

        return 0

    except ColoringPageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
