"""Command-line interface for quiltvec."""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import numpy as np

from quiltvec.pipeline import BoundaryExtractor
from quiltvec.regions import DEFAULT_REGION_NAME, RegionEngine
from quiltvec.svg import boundary_to_svg, save_svg
from quiltvec.types import ExtractionConfig, RegionError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="quiltvec",
        description="Trace the fillable outline of a raster pattern image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quiltvec pattern.png -o pattern.svg
  quiltvec pattern.png --fill-method label --debug
  quiltvec pattern.png --session session.json --split-at 120
        """,
    )

    parser.add_argument("input", help="Input image file path")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output SVG file path (default: input name with .svg extension)",
    )

    parser.add_argument(
        "--fill-method",
        choices=["bfs", "label"],
        default="bfs",
        help="Exterior flood fill implementation (default: bfs)",
    )

    parser.add_argument(
        "--name",
        default=DEFAULT_REGION_NAME,
        help=f"Name of the traced region (default: {DEFAULT_REGION_NAME!r})",
    )

    parser.add_argument(
        "--session",
        default=None,
        help="Write the region session as JSON to this path",
    )

    parser.add_argument(
        "--split-at",
        type=float,
        default=None,
        help="Split the traced region vertically at this local x coordinate",
    )

    parser.add_argument(
        "--debug", action="store_true", help="Save intermediate mask stages as PNG"
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    return parser


def save_debug_stages(extractor: BoundaryExtractor, output_path: str) -> None:
    """
    Save debug stage images.

    Args:
        extractor: Extractor instance with debug_stages
        output_path: Base output path for debug images
    """
    from PIL import Image

    base_path = Path(output_path)
    debug_dir = base_path.parent / f"{base_path.stem}_debug"
    debug_dir.mkdir(exist_ok=True)

    for stage_name, stage_image in extractor.debug_stages:
        debug_file = debug_dir / f"{stage_name}.png"

        if stage_image.dtype != np.uint8:
            stage_image = stage_image.astype(np.uint8)

        Image.fromarray(stage_image).save(debug_file)
        print(f"  Saved debug stage: {debug_file}")


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(parsed.input)
    if parsed.output:
        output_path = parsed.output
    else:
        output_path = str(input_path.with_suffix(".svg"))

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    print(f"Processing: {parsed.input}")
    print(f"  Fill method: {parsed.fill_method}")

    extractor = BoundaryExtractor(
        ExtractionConfig(fill_method=parsed.fill_method), debug=parsed.debug
    )
    result = extractor.extract_from_source(input_path)

    if not result.success:
        print(f"Error: boundary extraction failed ({result.error})", file=sys.stderr)
        return 1

    print(f"  Traced {result.occupancy_source} boundary with {result.point_count} points")
    if result.incomplete:
        print("  Warning: boundary is open or truncated", file=sys.stderr)

    svg = boundary_to_svg(result.path_string, result.width, result.height)
    save_svg(svg, output_path)
    print(f"  Output saved: {output_path}")

    if parsed.debug:
        save_debug_stages(extractor, output_path)

    if parsed.session or parsed.split_at is not None:
        engine = RegionEngine()
        region = engine.add_traced_pattern(result, name=parsed.name)
        engine.select_region(region.id)

        if parsed.split_at is not None:
            try:
                outcome = engine.split_region(region.id, parsed.split_at, derive=True)
            except RegionError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
            if outcome.accepted:
                print(f"  Split into {outcome.left.name!r} and {outcome.right.name!r}")
            else:
                print("  Split declined: a side would be narrower than the minimum width")

        if parsed.session:
            session_path = Path(parsed.session)
            session_path.parent.mkdir(parents=True, exist_ok=True)
            session_path.write_text(json.dumps(engine.to_dict(), indent=2), encoding="utf-8")
            print(f"  Session saved: {session_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
