"""Tests for contour tracing module."""

import numpy as np

from quiltvec.contour import find_start_pixel, trace_boundary, trace_mask
from quiltvec.types import Point2D


def _points(*pairs):
    return [Point2D(col=c, row=r) for c, r in pairs]


class TestFindStartPixel:
    """Test cases for find_start_pixel function."""

    def test_empty_mask(self):
        """Test that an empty mask has no start pixel."""
        assert find_start_pixel(np.zeros((5, 5), dtype=bool)) is None

    def test_row_major_order(self):
        """Test that the topmost row wins, then the leftmost column."""
        mask = np.zeros((6, 6), dtype=bool)
        mask[3, 5] = True
        mask[3, 2] = True
        mask[5, 0] = True

        assert find_start_pixel(mask) == Point2D(col=2, row=3)


class TestTraceBoundary:
    """Test cases for trace_boundary function."""

    def test_square_is_clockwise(self):
        """Test tracing a 3x3 block visits its edge clockwise from the top-left."""
        mask = np.zeros((5, 5), dtype=bool)
        mask[1:4, 1:4] = True

        result = trace_boundary(mask, Point2D(col=1, row=1))

        assert result.closed
        assert not result.truncated
        assert result.points == _points(
            (1, 1), (2, 1), (3, 1), (3, 2), (3, 3), (2, 3), (1, 3), (1, 2)
        )

    def test_start_appears_once(self):
        """Test that the closing return to start is not appended again."""
        mask = np.zeros((10, 10), dtype=bool)
        mask[2:8, 3:9] = True

        result = trace_mask(mask)

        assert result.points[0] == Point2D(col=3, row=2)
        assert result.points.count(Point2D(col=3, row=2)) == 1
        # Perimeter of a 6x6 block
        assert len(result.points) == 20

    def test_two_pixels(self):
        """Test that a two-pixel shape closes after two steps."""
        mask = np.array([[True, True]])

        result = trace_boundary(mask, Point2D(col=0, row=0))

        assert result.closed
        assert result.points == _points((0, 0), (1, 0))

    def test_single_pixel_is_open(self):
        """Test that an isolated pixel gives an open one-point trace."""
        mask = np.zeros((5, 5), dtype=bool)
        mask[2, 2] = True

        result = trace_mask(mask)

        assert not result.closed
        assert result.incomplete
        assert not result.truncated
        assert result.points == _points((2, 2))

    def test_iteration_cap(self):
        """Test that a walk longer than rows * cols is cut off."""
        # Walking out and back along a 1x3 line takes 4 steps, above the cap of 3
        mask = np.ones((1, 3), dtype=bool)

        result = trace_boundary(mask, Point2D(col=0, row=0))

        assert result.truncated
        assert result.incomplete
        assert result.points == _points((0, 0), (1, 0), (2, 0), (1, 0))

    def test_points_stay_on_shape(self):
        """Test that every traced point is an occupied pixel."""
        yy, xx = np.mgrid[0:40, 0:40]
        mask = (xx - 20) ** 2 + (yy - 20) ** 2 < 12 ** 2

        result = trace_mask(mask)

        assert len(result.points) > 1
        assert all(mask[p.row, p.col] for p in result.points)


class TestTraceMask:
    """Test cases for trace_mask function."""

    def test_empty(self):
        """Test that an empty mask gives None."""
        assert trace_mask(np.zeros((4, 4), dtype=bool)) is None
