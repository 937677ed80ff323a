"""Exterior flood fill, interior mask and occupancy selection."""
import logging
from collections import deque
from typing import Tuple

import numpy as np
from scipy import ndimage

from quiltvec.types import Mask

logger = logging.getLogger(__name__)

# 4-connected neighbourhood as (d_row, d_col)
NEIGHBORS_4 = ((-1, 0), (1, 0), (0, -1), (0, 1))


def _border_cells(height: int, width: int):
    """Yield (row, col) of every border cell once, clockwise from the top-left."""
    for col in range(width):
        yield 0, col
    for row in range(1, height):
        yield row, width - 1
    if height > 1:
        for col in range(width - 2, -1, -1):
            yield height - 1, col
    if width > 1:
        for row in range(height - 2, 0, -1):
            yield row, 0


def flood_fill_exterior_bfs(light: Mask) -> Mask:
    """
    Mark light pixels reachable from the image border.

    Breadth-first search over 4-connected neighbours, seeded from every
    light border cell. A cell is marked when it is enqueued, so each cell
    enters the queue at most once.

    Args:
        light: Boolean mask (H, W) of light pixels

    Returns:
        Exterior mask (H, W)
    """
    height, width = light.shape
    exterior = np.zeros_like(light, dtype=bool)
    queue = deque()

    for row, col in _border_cells(height, width):
        if light[row, col] and not exterior[row, col]:
            exterior[row, col] = True
            queue.append((row, col))

    while queue:
        row, col = queue.popleft()
        for d_row, d_col in NEIGHBORS_4:
            n_row, n_col = row + d_row, col + d_col
            if 0 <= n_row < height and 0 <= n_col < width:
                if light[n_row, n_col] and not exterior[n_row, n_col]:
                    exterior[n_row, n_col] = True
                    queue.append((n_row, n_col))

    return exterior


def flood_fill_exterior_label(light: Mask) -> Mask:
    """
    Mark light pixels reachable from the image border using component labelling.

    Produces the same mask as :func:`flood_fill_exterior_bfs`: the default
    ``ndimage.label`` structure is the 4-connected cross.
    """
    labeled, num_features = ndimage.label(light)
    if num_features == 0:
        return np.zeros_like(light, dtype=bool)

    border_labels = np.unique(np.concatenate([
        labeled[0, :], labeled[-1, :], labeled[:, 0], labeled[:, -1]
    ]))
    border_labels = border_labels[border_labels != 0]

    return np.isin(labeled, border_labels)


def flood_fill_exterior(light: Mask, method: str = "bfs") -> Mask:
    """Dispatch to the configured exterior fill method."""
    method_map = {
        "bfs": flood_fill_exterior_bfs,
        "label": flood_fill_exterior_label,
    }
    if method not in method_map:
        raise ValueError(f"Unknown fill method: {method}")
    return method_map[method](light)


def build_interior_mask(ink: Mask, light: Mask, exterior: Mask) -> Mask:
    """Light pixels that are neither ink nor reachable from the border."""
    return light & ~exterior & ~ink


def resolve_occupancy(interior: Mask, ink: Mask) -> Tuple[Mask, str]:
    """
    Choose the mask to trace.

    The interior mask wins whenever it has at least one pixel; otherwise the
    ink mask (the silhouette of a solid shape) is traced.

    Returns:
        Tuple of (occupancy mask, source name "interior" or "ink")
    """
    if np.any(interior):
        return interior, "interior"
    return ink, "ink"


def compute_masks(ink: Mask, light: Mask, method: str = "bfs") -> Tuple[Mask, Mask]:
    """
    Run the exterior fill and derive the interior mask.

    Returns:
        Tuple of (exterior, interior)
    """
    exterior = flood_fill_exterior(light, method)
    interior = build_interior_mask(ink, light, exterior)

    logger.debug(
        f"Masks: ink={int(np.sum(ink))} light={int(np.sum(light))} "
        f"exterior={int(np.sum(exterior))} interior={int(np.sum(interior))}"
    )
    return exterior, interior
