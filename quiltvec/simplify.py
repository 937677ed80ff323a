"""Point-sequence simplification by adaptive downsampling."""
from typing import Sequence

from quiltvec.types import Point2D, PointSequence


def target_point_count(
    n_points: int,
    min_points: int = 20,
    max_points: int = 200,
    divisor: int = 10
) -> int:
    """Number of samples to aim for: ``n / divisor`` clamped to [min, max]."""
    return min(max_points, max(min_points, n_points // divisor))


def simplify_points(
    points: Sequence[Point2D],
    min_points: int = 20,
    max_points: int = 200,
    divisor: int = 10
) -> PointSequence:
    """
    Downsample a traced boundary to a bounded number of points.

    Keeps every ``step``-th point where ``step = max(1, n // target)``, then
    appends the final input point if sampling skipped it, so the closing
    vertex survives exactly. Sequences of three points or fewer are returned
    unchanged.

    Args:
        points: Ordered boundary points
        min_points: Lower clamp on the target count
        max_points: Upper clamp on the target count
        divisor: Input points per target point

    Returns:
        Simplified point list
    """
    if len(points) <= 3:
        return list(points)

    target = target_point_count(len(points), min_points, max_points, divisor)
    step = max(1, len(points) // target)

    simplified = list(points[::step])

    if simplified[-1] != points[-1]:
        simplified.append(points[-1])

    return simplified
