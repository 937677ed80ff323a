"""quiltvec: raster pattern outline tracing and region splitting.

Traces the fillable outline of a raster pattern image into a polyline SVG
path and manages the regions cut from it.
"""
from quiltvec.types import (
    BoundaryResult,
    BoundaryTraceIncomplete,
    ClipRect,
    ExtractionConfig,
    FabricTransform,
    ImageDecodeError,
    NoBoundaryFound,
    PixelBuffer,
    Point2D,
    Region,
    RenderContextUnavailable,
    SplitOutcome,
    VectorizationError,
)
from quiltvec.pipeline import BoundaryExtractor, extract_outer_boundary
from quiltvec.regions import RegionEngine

__version__ = "0.1.0"
__all__ = [
    "BoundaryExtractor",
    "BoundaryResult",
    "BoundaryTraceIncomplete",
    "ClipRect",
    "ExtractionConfig",
    "FabricTransform",
    "ImageDecodeError",
    "NoBoundaryFound",
    "PixelBuffer",
    "Point2D",
    "Region",
    "RegionEngine",
    "RenderContextUnavailable",
    "SplitOutcome",
    "VectorizationError",
    "extract_outer_boundary",
]
