"""SVG path serialization, parsing and measurement."""
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from svgpathtools import parse_path
from svgpathtools.parser import parse_transform
from svgpathtools.path import transform as transform_path

from quiltvec.types import PathData, Point2D

logger = logging.getLogger(__name__)

_VIEWBOX_RE = re.compile(r'viewBox\s*=\s*"([^"]+)"')
_WIDTH_RE = re.compile(r'<svg[^>]*\swidth\s*=\s*"([^"]*?)"', re.IGNORECASE)
_HEIGHT_RE = re.compile(r'<svg[^>]*\sheight\s*=\s*"([^"]*?)"', re.IGNORECASE)
_POLYLINE_CMD_RE = re.compile(r'([MLZmlz])([^MLZmlz]*)')
_NUMBER_SPLIT_RE = re.compile(r'[\s,]+')


def points_to_path(points: Sequence[Point2D]) -> PathData:
    """
    Serialize boundary points as a closed polyline path.

    Emits ``M x0 y0``, then ``L xi yi`` for each later point, then ``Z``.
    Coordinates are the integer pixel positions, untransformed.

    Args:
        points: Ordered boundary points

    Returns:
        Path data string, empty for an empty sequence
    """
    if len(points) == 0:
        return ""

    first = points[0]
    commands = [f"M {first.col} {first.row}"]
    for point in points[1:]:
        commands.append(f"L {point.col} {point.row}")
    commands.append("Z")

    return " ".join(commands)


def path_to_points(path_data: PathData) -> List[Point2D]:
    """
    Parse a polyline path written by :func:`points_to_path`.

    Only absolute ``M``/``L``/``Z`` commands with integer coordinates are
    understood; anything else raises ``ValueError``.
    """
    points = []
    for command, args in _POLYLINE_CMD_RE.findall(path_data.strip()):
        if command.islower():
            raise ValueError(f"Relative command '{command}' is not supported")
        if command == "Z":
            continue

        values = [v for v in _NUMBER_SPLIT_RE.split(args.strip()) if v]
        if len(values) % 2 != 0:
            raise ValueError(f"Odd coordinate count after '{command}'")
        for i in range(0, len(values), 2):
            points.append(Point2D(col=int(values[i]), row=int(values[i + 1])))

    return points


def path_bbox(path_data: PathData, transform: str = "") -> Tuple[float, float, float, float]:
    """
    Axis-aligned bounding box of a rendered path.

    The path is parsed with svgpathtools, mapped through ``transform`` and
    measured in the transformed coordinate space.

    Args:
        path_data: SVG path data
        transform: SVG transform attribute value (may be empty)

    Returns:
        Tuple (x, y, width, height)

    Raises:
        ValueError: If the path has no measurable segments or the transform
            cannot be parsed
    """
    try:
        path = parse_path(path_data)
    except (ValueError, IndexError) as e:
        raise ValueError(f"Path has no measurable segments: {e}") from e

    if len(path) == 0:
        raise ValueError("Path has no measurable segments")

    try:
        matrix = parse_transform(transform)
    except (ValueError, IndexError) as e:
        raise ValueError(f"Unparseable transform {transform!r}: {e}") from e

    if not np.allclose(matrix, np.identity(3)):
        path = transform_path(path, matrix)

    xmin, xmax, ymin, ymax = path.bbox()
    return (float(xmin), float(ymin), float(xmax - xmin), float(ymax - ymin))


def parse_svg_metadata(svg_text: str) -> Dict[str, Optional[Union[str, float]]]:
    """
    Read ``viewBox``, ``width`` and ``height`` from SVG text.

    Missing or unparseable values come back as None.
    """
    metadata = {"viewBox": None, "width": None, "height": None}

    vb_match = _VIEWBOX_RE.search(svg_text)
    if vb_match:
        metadata["viewBox"] = vb_match.group(1)

    for key, pattern in (("width", _WIDTH_RE), ("height", _HEIGHT_RE)):
        match = pattern.search(svg_text)
        if match:
            try:
                metadata[key] = float(match.group(1).replace("px", "").replace("pt", ""))
            except ValueError:
                logger.debug(f"Ignoring non-numeric SVG {key}: {match.group(1)!r}")

    return metadata


def boundary_to_svg(
    path_data: PathData,
    width: int,
    height: int,
    stroke: str = "#3B82F6",
    stroke_width: float = 2.0
) -> str:
    """
    Wrap a boundary path in a standalone SVG document.

    Args:
        path_data: Path data from :func:`points_to_path`
        width: Canvas width in pixels
        height: Canvas height in pixels
        stroke: Outline colour
        stroke_width: Outline width

    Returns:
        SVG string
    """
    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">',
    ]
    if path_data:
        lines.append(
            f'  <path d="{path_data}" fill="none" stroke="{stroke}" '
            f'stroke-width="{stroke_width:g}"/>'
        )
    lines.append("</svg>")
    return "\n".join(lines)


def save_svg(svg: str, output_path: Union[str, Path]) -> None:
    """Write an SVG string to disk, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(svg, encoding="utf-8")
