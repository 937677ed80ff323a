"""Contour tracing over a binary occupancy grid."""
import logging
from typing import Optional

import numpy as np

from quiltvec.types import Mask, Point2D, TraceResult

logger = logging.getLogger(__name__)

# Moore neighbourhood as (d_col, d_row), clockwise from East
DIRECTIONS = (
    (1, 0),    # E
    (1, 1),    # SE
    (0, 1),    # S
    (-1, 1),   # SW
    (-1, 0),   # W
    (-1, -1),  # NW
    (0, -1),   # N
    (1, -1),   # NE
)

# After a move, resume the search this many steps clockwise of the move
# direction, i.e. two steps counter-clockwise
BACKTRACK_OFFSET = 6


def find_start_pixel(mask: Mask) -> Optional[Point2D]:
    """
    Find the first occupied pixel in row-major order.

    Args:
        mask: Boolean occupancy grid (H, W)

    Returns:
        Start pixel, or None if the grid is empty
    """
    if mask.size == 0:
        return None

    flat = np.flatnonzero(mask)
    if len(flat) == 0:
        return None

    row, col = divmod(int(flat[0]), mask.shape[1])
    return Point2D(col=col, row=row)


def trace_boundary(mask: Mask, start: Point2D) -> TraceResult:
    """
    Walk the boundary of the shape containing ``start``.

    Moore-neighbour walk: at each pixel the eight neighbours are scanned
    clockwise beginning at the current search index, and the first occupied
    in-bounds neighbour becomes the next pixel. The search index then backs
    up two steps counter-clockwise from the direction of arrival, which keeps
    the walk on the shape's edge. Points come out in clockwise order.

    The walk stops when it is back at ``start`` after at least two steps
    (closed), when a pixel has no occupied neighbour (open), or when the
    step count exceeds ``rows * cols`` (truncated).

    Args:
        mask: Boolean occupancy grid (H, W)
        start: First pixel of the walk, normally from :func:`find_start_pixel`

    Returns:
        TraceResult with the visited pixels; ``start`` appears once, first
    """
    rows, cols = mask.shape
    max_iterations = rows * cols

    points = []
    current = start
    dir_index = 0  # East
    iterations = 0

    while True:
        points.append(current)

        next_dir = None
        for i in range(8):
            search_dir = (dir_index + i) % 8
            d_col, d_row = DIRECTIONS[search_dir]
            n_col = current.col + d_col
            n_row = current.row + d_row
            if 0 <= n_col < cols and 0 <= n_row < rows and mask[n_row, n_col]:
                next_dir = search_dir
                current = Point2D(col=n_col, row=n_row)
                break

        if next_dir is None:
            logger.debug(f"Trace stopped at {current} with no occupied neighbour")
            return TraceResult(points=points, closed=False)

        dir_index = (next_dir + BACKTRACK_OFFSET) % 8

        iterations += 1
        if iterations > max_iterations:
            logger.warning(f"Boundary trace exceeded {max_iterations} steps")
            return TraceResult(points=points, closed=False, truncated=True)

        if current == start and iterations >= 2:
            return TraceResult(points=points, closed=True)


def trace_mask(mask: Mask) -> Optional[TraceResult]:
    """Trace the first shape in ``mask``; None if the mask is empty."""
    start = find_start_pixel(mask)
    if start is None:
        return None

    result = trace_boundary(mask, start)
    logger.debug(
        f"Traced {len(result.points)} points from ({start.col}, {start.row}), "
        f"closed={result.closed}"
    )
    return result
