"""Core types and exceptions for quiltvec."""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple
import numpy as np

# Type aliases
Mask = np.ndarray
PathData = str


class VectorizationError(Exception):
    """Base exception for boundary extraction errors."""
    pass


class ImageDecodeError(VectorizationError):
    """Exception raised when an image cannot be decoded."""
    pass


class RenderContextUnavailable(VectorizationError):
    """Exception raised when decoded data cannot be read as an RGBA surface."""
    pass


class NoBoundaryFound(VectorizationError):
    """Exception raised when the occupancy grid has no occupied pixel."""
    pass


class BoundaryTraceIncomplete(UserWarning):
    """Warning emitted when a trace stops before returning to its start pixel."""
    pass


class RegionError(Exception):
    """Base exception for region engine errors."""
    pass


class RegionNotFoundError(RegionError, KeyError):
    """Exception raised for an unknown region id."""
    pass


class InvalidClipRect(RegionError, ValueError):
    """Exception raised for a clip rectangle without positive area."""
    pass


class MissingClipRect(RegionError):
    """Exception raised when an operation needs a clip rectangle that was never assigned."""
    pass


@dataclass(frozen=True)
class Point2D:
    """Integer pixel coordinate."""
    col: int
    row: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.col, self.row)


PointSequence = List[Point2D]


@dataclass
class PixelBuffer:
    """Decoded RGBA raster, row-major, one uint8 sample per channel."""
    data: np.ndarray  # (H, W, 4) uint8

    def __post_init__(self):
        if not isinstance(self.data, np.ndarray):
            raise RenderContextUnavailable("Pixel data must be a numpy array")
        if self.data.ndim != 3 or self.data.shape[2] != 4:
            raise RenderContextUnavailable(
                f"Expected (H, W, 4) RGBA samples, got shape {self.data.shape}"
            )
        if self.data.dtype != np.uint8:
            raise RenderContextUnavailable(f"Expected uint8 samples, got {self.data.dtype}")
        if self.data.shape[0] == 0 or self.data.shape[1] == 0:
            raise RenderContextUnavailable("Pixel buffer has no pixels")

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def rgb(self) -> np.ndarray:
        return self.data[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.data[..., 3]


@dataclass
class ExtractionConfig:
    """Configuration for the boundary extraction pipeline."""

    # Exterior flood fill: "bfs" (breadth-first walk) or "label" (component labelling)
    fill_method: str = "bfs"

    # Simplification
    min_target_points: int = 20
    max_target_points: int = 200
    points_per_target: int = 10

    def __post_init__(self):
        if self.fill_method not in ("bfs", "label"):
            raise ValueError(f"fill_method must be 'bfs' or 'label', got {self.fill_method!r}")
        if self.min_target_points < 1:
            raise ValueError(f"min_target_points must be >= 1, got {self.min_target_points}")
        if self.min_target_points > self.max_target_points:
            raise ValueError(
                f"min_target_points ({self.min_target_points}) exceeds "
                f"max_target_points ({self.max_target_points})"
            )
        if self.points_per_target < 1:
            raise ValueError(f"points_per_target must be >= 1, got {self.points_per_target}")


@dataclass
class TraceResult:
    """Ordered boundary points from one contour walk."""
    points: PointSequence = field(default_factory=list)
    closed: bool = False
    truncated: bool = False  # Iteration cap reached

    @property
    def incomplete(self) -> bool:
        return not self.closed


@dataclass
class BoundaryResult:
    """Outcome of a single extraction run."""
    path_string: PathData
    success: bool
    incomplete: bool = False
    error: Optional[str] = None
    point_count: int = 0
    occupancy_source: Optional[str] = None  # "interior" or "ink"
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class ClipRect:
    """Axis-aligned crop box in path-local units."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if not (self.width > 0 and self.height > 0):
            raise InvalidClipRect(
                f"Clip rect needs positive size, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClipRect":
        return cls(
            x=data["x"], y=data["y"], width=data["width"], height=data["height"]
        )


@dataclass
class FabricTransform:
    """Placement of a tiled fabric fill inside a region."""
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0
    rotation: float = 0.0
    flip_x: bool = False
    flip_y: bool = False

    def copy(self) -> "FabricTransform":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "scale": self.scale,
            "rotation": self.rotation,
            "flipX": self.flip_x,
            "flipY": self.flip_y,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FabricTransform":
        return cls(
            x=data.get("x", 0.0),
            y=data.get("y", 0.0),
            scale=data.get("scale", 1.0),
            rotation=data.get("rotation", 0.0),
            flip_x=bool(data.get("flipX", False)),
            flip_y=bool(data.get("flipY", False)),
        )


@dataclass
class Region:
    """Independently fillable area backed by a traced path."""
    id: str
    name: str
    path_data: PathData
    transform: str = ""
    clip_rect: Optional[ClipRect] = None
    fabric_id: Optional[str] = None
    fabric_transform: FabricTransform = field(default_factory=FabricTransform)

    def copy(self) -> "Region":
        """Return a copy that shares no mutable state with this region."""
        return replace(self, fabric_transform=self.fabric_transform.copy())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "pathData": self.path_data,
            "transform": self.transform,
            "clipRect": self.clip_rect.to_dict() if self.clip_rect else None,
            "fabricId": self.fabric_id,
            "fabricTransform": self.fabric_transform.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Region":
        clip = data.get("clipRect")
        return cls(
            id=data["id"],
            name=data["name"],
            path_data=data.get("pathData", ""),
            transform=data.get("transform", ""),
            clip_rect=ClipRect.from_dict(clip) if clip else None,
            fabric_id=data.get("fabricId"),
            fabric_transform=FabricTransform.from_dict(data.get("fabricTransform", {})),
        )


@dataclass
class SplitOutcome:
    """Result of a split request; declined splits leave the source untouched."""
    accepted: bool
    left: Optional[Region] = None
    right: Optional[Region] = None
    reason: Optional[str] = None
