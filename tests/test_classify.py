"""Tests for pixel classification."""

import numpy as np

from quiltvec.classify import classify_pixels, luminance
from quiltvec.types import PixelBuffer


def _buffer(pixels):
    """Build a 1-row buffer from a list of RGBA tuples."""
    return PixelBuffer(data=np.array([pixels], dtype=np.uint8))


class TestClassifyPixels:
    """Test cases for classify_pixels function."""

    def test_dark_opaque_is_ink(self):
        """Test that a dark opaque pixel is ink, not light."""
        ink, light = classify_pixels(_buffer([(0, 0, 0, 255)]))

        assert ink[0, 0]
        assert not light[0, 0]

    def test_white_opaque_is_light(self):
        """Test that a white opaque pixel is light, not ink."""
        ink, light = classify_pixels(_buffer([(255, 255, 255, 255)]))

        assert not ink[0, 0]
        assert light[0, 0]

    def test_transparent_is_neither(self):
        """Test that pixels at or below the alpha threshold are ignored."""
        ink, light = classify_pixels(_buffer([(0, 0, 0, 30), (255, 255, 255, 0)]))

        assert not ink.any()
        assert not light.any()

    def test_alpha_just_above_threshold(self):
        """Test that alpha 31 counts as visible."""
        ink, _ = classify_pixels(_buffer([(0, 0, 0, 31)]))

        assert ink[0, 0]

    def test_luminance_threshold(self):
        """Test the ink/light cut at luminance 170."""
        # Grey 169 is below the threshold, grey 171 above it
        ink, light = classify_pixels(_buffer([(169, 169, 169, 255), (171, 171, 171, 255)]))

        assert ink[0, 0] and not light[0, 0]
        assert light[0, 1] and not ink[0, 1]

    def test_green_weighs_most(self):
        """Test Rec. 709 weighting: pure green is light, pure red and blue are ink."""
        ink, light = classify_pixels(
            _buffer([(0, 255, 0, 255), (255, 0, 0, 255), (0, 0, 255, 255)])
        )

        assert light[0, 0]
        assert ink[0, 1]
        assert ink[0, 2]

    def test_masks_are_disjoint(self):
        """Test that no pixel is both ink and light."""
        rng = np.random.default_rng(0)
        data = rng.integers(0, 256, size=(20, 20, 4), dtype=np.uint8)

        ink, light = classify_pixels(PixelBuffer(data=data))

        assert ink.shape == (20, 20)
        assert ink.dtype == bool
        assert not (ink & light).any()


class TestLuminance:
    """Test cases for luminance function."""

    def test_luminance_values(self):
        """Test luminance of primaries and white."""
        lum = luminance(_buffer([(255, 0, 0, 255), (0, 255, 0, 255), (255, 255, 255, 255)]))

        np.testing.assert_allclose(lum[0], [0.2126 * 255, 0.7152 * 255, 255.0])
