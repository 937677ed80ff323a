"""Boundary extraction pipeline orchestrator."""
import logging
import warnings
from typing import List, Optional, Tuple

import cv2
import numpy as np

from quiltvec.types import (
    BoundaryResult,
    BoundaryTraceIncomplete,
    ExtractionConfig,
    ImageDecodeError,
    NoBoundaryFound,
    PixelBuffer,
    RenderContextUnavailable,
    TraceResult,
)
from quiltvec.raster_ingest import ImageSource, load_pixel_buffer
from quiltvec.classify import classify_pixels
from quiltvec.fill import compute_masks, resolve_occupancy
from quiltvec.contour import trace_mask
from quiltvec.simplify import simplify_points
from quiltvec.svg import points_to_path

logger = logging.getLogger(__name__)


class BoundaryExtractor:
    """Traces the fillable outline of a raster pattern image."""

    def __init__(self, config: Optional[ExtractionConfig] = None, debug: bool = False):
        """
        Initialize extractor with configuration.

        Args:
            config: Extraction configuration. Uses defaults if None.
            debug: If True, keep intermediate masks in ``debug_stages``
        """
        self.config = config or ExtractionConfig()
        self.debug = debug
        self.debug_stages: List[Tuple[str, np.ndarray]] = []

    def trace_buffer(self, buffer: PixelBuffer) -> BoundaryResult:
        """
        Run classification, fill, trace, simplification and serialization.

        Args:
            buffer: Decoded RGBA pixels

        Returns:
            BoundaryResult with ``success=True``; ``incomplete`` is set when
            the trace did not close

        Raises:
            NoBoundaryFound: If the occupancy grid is empty
        """
        self.debug_stages = []

        # Step 1: Classify pixels
        ink, light = classify_pixels(buffer)

        # Step 2: Exterior fill and interior mask
        exterior, interior = compute_masks(ink, light, self.config.fill_method)

        # Step 3: Pick the grid to trace
        occupancy, source = resolve_occupancy(interior, ink)

        if self.debug:
            self.debug_stages.append(("1_original", buffer.data.copy()))
            for name, mask in (("2_ink", ink), ("3_light", light), ("4_exterior", exterior),
                               ("5_interior", interior), ("6_occupancy", occupancy)):
                self.debug_stages.append((name, mask.astype(np.uint8) * 255))

        # Step 4: Trace
        trace = trace_mask(occupancy)
        if trace is None:
            raise NoBoundaryFound(
                f"No occupied pixel in {buffer.width}x{buffer.height} image"
            )

        if trace.incomplete:
            self._warn_incomplete(trace)

        # Step 5: Simplify and serialize
        simplified = simplify_points(
            trace.points,
            min_points=self.config.min_target_points,
            max_points=self.config.max_target_points,
            divisor=self.config.points_per_target,
        )
        path_string = points_to_path(simplified)

        if self.debug:
            self.debug_stages.append(("7_contour", self._draw_overlay(buffer, simplified)))

        logger.info(
            f"Traced {source} boundary: {len(trace.points)} points, "
            f"{len(simplified)} after simplification"
        )

        return BoundaryResult(
            path_string=path_string,
            success=True,
            incomplete=trace.incomplete,
            error=BoundaryTraceIncomplete.__name__ if trace.incomplete else None,
            point_count=len(simplified),
            occupancy_source=source,
            width=buffer.width,
            height=buffer.height,
        )

    def extract(self, buffer: PixelBuffer) -> BoundaryResult:
        """Like :meth:`trace_buffer`, but reports an empty grid as ``success=False``."""
        try:
            return self.trace_buffer(buffer)
        except NoBoundaryFound as e:
            logger.warning(f"Boundary extraction failed: {e}")
            return BoundaryResult(path_string="", success=False, error=NoBoundaryFound.__name__)

    def extract_from_source(self, source: ImageSource) -> BoundaryResult:
        """
        Decode an image and extract its boundary.

        Decode and surface failures are reported as ``success=False`` with
        the failure name in ``error``; nothing is raised.
        """
        try:
            buffer = load_pixel_buffer(source)
        except (FileNotFoundError, ImageDecodeError) as e:
            logger.warning(f"Image decode failed: {e}")
            return BoundaryResult(path_string="", success=False, error=ImageDecodeError.__name__)
        except RenderContextUnavailable as e:
            logger.warning(f"Pixel surface unavailable: {e}")
            return BoundaryResult(
                path_string="", success=False, error=RenderContextUnavailable.__name__
            )

        return self.extract(buffer)

    def _warn_incomplete(self, trace: TraceResult) -> None:
        if trace.truncated:
            message = f"Boundary trace hit its iteration cap after {len(trace.points)} points"
        else:
            message = f"Boundary trace is open after {len(trace.points)} points"
        logger.warning(message)
        warnings.warn(message, BoundaryTraceIncomplete, stacklevel=3)

    def _draw_overlay(self, buffer: PixelBuffer, points) -> np.ndarray:
        """Draw the simplified boundary over the source image."""
        overlay = np.ascontiguousarray(buffer.rgb.copy())
        if len(points) > 1:
            pts = np.array([p.as_tuple() for p in points], dtype=np.int32).reshape(-1, 1, 2)
            cv2.polylines(overlay, [pts], True, (59, 130, 246), 1)
        return overlay


def extract_outer_boundary(
    source: ImageSource,
    config: Optional[ExtractionConfig] = None,
) -> BoundaryResult:
    """
    Extract the fillable boundary of an image.

    Convenience function for one-off processing.

    Args:
        source: Image path, encoded bytes or ``data:`` URL
        config: Optional configuration object

    Returns:
        BoundaryResult

    Example:
        >>> result = extract_outer_boundary("pattern.png")
        >>> if result.success:
        ...     print(result.path_string)
    """
    return BoundaryExtractor(config).extract_from_source(source)


def extract_boundary_from_buffer(
    buffer: PixelBuffer,
    config: Optional[ExtractionConfig] = None,
) -> BoundaryResult:
    """Extract the fillable boundary of an already decoded buffer."""
    return BoundaryExtractor(config).extract(buffer)
