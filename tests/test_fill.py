"""Tests for exterior flood fill, interior mask and occupancy selection."""

import numpy as np
import pytest

from quiltvec.fill import (
    build_interior_mask,
    compute_masks,
    flood_fill_exterior,
    flood_fill_exterior_bfs,
    flood_fill_exterior_label,
    resolve_occupancy,
)


def _ring_masks(size=20, lo=5, hi=15, thickness=1):
    """Ink square outline on a light background, light inside."""
    ink = np.zeros((size, size), dtype=bool)
    ink[lo:hi, lo:hi] = True
    ink[lo + thickness:hi - thickness, lo + thickness:hi - thickness] = False
    light = ~ink
    return ink, light


class TestFloodFillExterior:
    """Test cases for exterior flood fill."""

    @pytest.mark.parametrize("method", ["bfs", "label"])
    def test_background_is_exterior(self, method):
        """Test that light pixels touching the border are exterior."""
        ink, light = _ring_masks()

        exterior = flood_fill_exterior(light, method)

        assert exterior[0, 0]
        assert exterior[19, 19]
        assert exterior[4, 10]
        # Enclosed light is not reachable
        assert not exterior[10, 10]
        # Ink is never exterior
        assert not exterior[5, 5]

    @pytest.mark.parametrize("method", ["bfs", "label"])
    def test_diagonal_gap_does_not_leak(self, method):
        """Test 4-connectivity: a diagonal-only opening keeps the inside enclosed."""
        light = np.ones((5, 5), dtype=bool)
        # Ink diamond around the centre pixel
        for row, col in [(1, 2), (2, 1), (2, 3), (3, 2)]:
            light[row, col] = False

        exterior = flood_fill_exterior(light, method)

        assert not exterior[2, 2]
        assert exterior[1, 1]

    @pytest.mark.parametrize("method", ["bfs", "label"])
    def test_no_light_pixels(self, method):
        """Test that an empty light mask gives an empty exterior."""
        light = np.zeros((8, 8), dtype=bool)

        exterior = flood_fill_exterior(light, method)

        assert exterior.shape == (8, 8)
        assert not exterior.any()

    def test_single_row_and_column(self):
        """Test degenerate one-pixel-high and one-pixel-wide images."""
        row = np.array([[True, False, True]])
        col = np.array([[True], [True], [False]])

        assert flood_fill_exterior_bfs(row).tolist() == [[True, False, True]]
        assert flood_fill_exterior_bfs(col).tolist() == [[True], [True], [False]]

    def test_methods_agree(self):
        """Test that BFS and labelling produce identical masks on noise."""
        rng = np.random.default_rng(7)
        light = rng.random((40, 30)) > 0.45

        bfs = flood_fill_exterior_bfs(light)
        labelled = flood_fill_exterior_label(light)

        np.testing.assert_array_equal(bfs, labelled)

    def test_unknown_method(self):
        """Test that an unknown method is rejected."""
        with pytest.raises(ValueError):
            flood_fill_exterior(np.ones((3, 3), dtype=bool), "magic")


class TestInteriorMask:
    """Test cases for interior mask and occupancy."""

    def test_interior_is_enclosed_light(self):
        """Test that only light enclosed by ink is interior."""
        ink, light = _ring_masks()

        exterior, interior = compute_masks(ink, light)

        expected = np.zeros((20, 20), dtype=bool)
        expected[6:14, 6:14] = True
        np.testing.assert_array_equal(interior, expected)
        assert not (exterior & interior).any()

    def test_interior_excludes_ink(self):
        """Test the interior formula on hand-built masks."""
        ink = np.array([[True, False], [False, False]])
        light = np.array([[True, True], [True, False]])
        exterior = np.array([[False, True], [False, False]])

        interior = build_interior_mask(ink, light, exterior)

        assert interior.tolist() == [[False, False], [True, False]]

    def test_occupancy_prefers_interior(self):
        """Test that a non-empty interior is chosen over ink."""
        ink, light = _ring_masks()
        _, interior = compute_masks(ink, light)

        occupancy, source = resolve_occupancy(interior, ink)

        assert source == "interior"
        assert occupancy is interior

    def test_occupancy_falls_back_to_ink(self):
        """Test that a solid shape with no interior traces its ink."""
        ink = np.zeros((10, 10), dtype=bool)
        ink[2:8, 2:8] = True
        light = np.zeros((10, 10), dtype=bool)
        _, interior = compute_masks(ink, light)

        occupancy, source = resolve_occupancy(interior, ink)

        assert source == "ink"
        assert occupancy is ink
