"""Region collection with clip-rect derivation and vertical splitting."""
import logging
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from quiltvec.types import (
    BoundaryResult,
    ClipRect,
    FabricTransform,
    InvalidClipRect,
    MissingClipRect,
    PathData,
    Region,
    RegionError,
    RegionNotFoundError,
    SplitOutcome,
)
from quiltvec.svg import path_bbox

logger = logging.getLogger(__name__)

MIN_SPLIT_WIDTH = 4
DEFAULT_REGION_NAME = "Pattern Boundary"

STATUS_MESSAGES = {
    "empty": "No project loaded",
    "pattern_loaded": "Pattern loaded",
    "fabric_loaded": "Fabric loaded",
    "ready": "Ready",
}

BBoxFunction = Callable[[PathData, str], Tuple[float, float, float, float]]


def _new_uuid() -> str:
    return str(uuid.uuid4())


class RegionEngine:
    """
    Owns the regions of one editing session.

    Regions are only changed through the named operations below, which keep
    three rules true: ids are never reused, a clip rect once assigned is only
    ever replaced, and every clip rect has positive width and height.
    Accessors hand out copies, so callers cannot bypass those operations.
    """

    def __init__(
        self,
        bbox_fn: Optional[BBoxFunction] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize an empty engine.

        Args:
            bbox_fn: Measures ``(path_data, transform)`` and returns
                ``(x, y, width, height)``. Defaults to :func:`quiltvec.svg.path_bbox`.
            id_factory: Produces fresh region ids. Defaults to uuid4 strings.
        """
        self._regions: Dict[str, Region] = {}
        self._issued_ids: Set[str] = set()
        self._selected_id: Optional[str] = None
        self._bbox_fn = bbox_fn or path_bbox
        self._id_factory = id_factory or _new_uuid

    # Queries

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, region_id: str) -> bool:
        return region_id in self._regions

    @property
    def regions(self) -> List[Region]:
        """Snapshot of all regions in display order."""
        return [r.copy() for r in self._regions.values()]

    def get_region(self, region_id: str) -> Region:
        return self._get(region_id).copy()

    @property
    def selected_region_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_region(self) -> Optional[Region]:
        if self._selected_id is None:
            return None
        return self._regions[self._selected_id].copy()

    def has_fabric_assignments(self) -> bool:
        return any(r.fabric_id is not None for r in self._regions.values())

    def editor_state(self, has_pattern: bool, has_fabric: bool) -> str:
        """
        Coarse progress of the session.

        Returns one of "empty", "pattern_loaded", "fabric_loaded", "ready".
        """
        if not has_pattern:
            return "empty"
        if not has_fabric:
            return "pattern_loaded"
        if not self.has_fabric_assignments():
            return "fabric_loaded"
        return "ready"

    def status_message(self, has_pattern: bool, has_fabric: bool) -> str:
        return STATUS_MESSAGES[self.editor_state(has_pattern, has_fabric)]

    # Creation and deletion

    def create_region(
        self,
        path_data: PathData,
        name: str = DEFAULT_REGION_NAME,
        transform: str = "",
        fabric_id: Optional[str] = None,
        clip_rect: Optional[ClipRect] = None,
        fabric_transform: Optional[FabricTransform] = None,
    ) -> Region:
        """Add a region with a fresh id and return a copy of it."""
        region = Region(
            id=self._next_id(),
            name=name,
            path_data=path_data,
            transform=transform,
            clip_rect=clip_rect,
            fabric_id=fabric_id,
            fabric_transform=fabric_transform.copy() if fabric_transform else FabricTransform(),
        )
        self._regions[region.id] = region
        logger.info(f"Created region {region.id} ({region.name!r})")
        return region.copy()

    def add_traced_pattern(
        self, result: BoundaryResult, name: str = DEFAULT_REGION_NAME
    ) -> Optional[Region]:
        """Create a region from an extraction result; None if extraction failed."""
        if not result.success or not result.path_string:
            logger.warning(f"Not creating region from failed extraction ({result.error})")
            return None
        return self.create_region(result.path_string, name=name)

    def delete_region(self, region_id: str) -> Region:
        """
        Remove a region and return it.

        The region's fabric assignment goes with it, and it is deselected if
        it was selected.
        """
        region = self._get(region_id)
        del self._regions[region_id]
        if self._selected_id == region_id:
            self._selected_id = None
        logger.info(f"Deleted region {region_id}")
        return region

    # Update operations

    def select_region(self, region_id: Optional[str]) -> None:
        if region_id is not None:
            self._get(region_id)
        self._selected_id = region_id

    def rename_region(self, region_id: str, name: str) -> Region:
        region = self._get(region_id)
        region.name = name
        return region.copy()

    def set_fabric(self, region_id: str, fabric_id: Optional[str]) -> Region:
        """Assign a fabric to a region, or clear it with None."""
        region = self._get(region_id)
        region.fabric_id = fabric_id
        return region.copy()

    def set_fabric_transform(self, region_id: str, fabric_transform: FabricTransform) -> Region:
        region = self._get(region_id)
        region.fabric_transform = fabric_transform.copy()
        return region.copy()

    def adjust_fabric_transform(self, region_id: str, **changes: Any) -> Region:
        """
        Change individual fabric transform fields, e.g. ``scale=2.0``.

        Raises:
            TypeError: If a field name is not part of FabricTransform
        """
        region = self._get(region_id)
        region.fabric_transform = replace(region.fabric_transform, **changes)
        return region.copy()

    def reset_fabric_transform(self, region_id: str) -> Region:
        return self.set_fabric_transform(region_id, FabricTransform())

    def detach_fabric(self, fabric_id: str) -> int:
        """Clear every reference to a fabric that is being removed; returns the count."""
        count = 0
        for region in self._regions.values():
            if region.fabric_id == fabric_id:
                region.fabric_id = None
                count += 1
        if count:
            logger.info(f"Detached fabric {fabric_id} from {count} region(s)")
        return count

    # Clip rectangles

    def set_clip_rect(self, region_id: str, clip_rect: ClipRect) -> Region:
        """
        Replace a region's clip rect.

        Raises:
            InvalidClipRect: If ``clip_rect`` is None (clip rects cannot be cleared)
        """
        if clip_rect is None:
            raise InvalidClipRect("Clip rect cannot be cleared once assigned")
        region = self._get(region_id)
        region.clip_rect = clip_rect
        return region.copy()

    def derive_clip_rect(self, region_id: str) -> ClipRect:
        """
        Measure the region's path and assign the bounding box as its clip rect.

        Raises:
            InvalidClipRect: If the path has no extent to measure
        """
        region = self._get(region_id)
        clip_rect = self._measure(region)
        region.clip_rect = clip_rect
        logger.debug(f"Derived clip rect for {region_id}: {clip_rect}")
        return clip_rect

    def ensure_clip_rect(self, region_id: str) -> ClipRect:
        """Return the region's clip rect, deriving it first if it has none."""
        region = self._get(region_id)
        if region.clip_rect is not None:
            return region.clip_rect
        return self.derive_clip_rect(region_id)

    # Splitting

    def split_region(
        self,
        region_id: Optional[str],
        x: float,
        y: float = 0.0,
        derive: bool = False,
    ) -> SplitOutcome:
        """
        Cut a region vertically at local ``x`` into two regions.

        The split line is clamped to leave at least ``MIN_SPLIT_WIDTH`` on
        each side of the clip rect. If either side would still be narrower
        than that, the split is declined and nothing changes. Otherwise the
        source region is replaced, in place, by "<name> A" (left) and
        "<name> B" (right). Both share the source's path, transform and
        fabric and each gets its own copy of the fabric transform. The
        right-hand region is then selected.

        Args:
            region_id: Region to split; None splits the selected region
            x: Split position in the region's local coordinates
            y: Vertical position of the pointer (recorded only)
            derive: Derive the clip rect from the path if the region has none

        Returns:
            SplitOutcome; ``accepted`` is False for a declined split

        Raises:
            RegionNotFoundError: If the region doesn't exist or nothing is selected
            MissingClipRect: If the region has no clip rect and ``derive`` is False
        """
        if region_id is None:
            if self._selected_id is None:
                raise RegionNotFoundError("No region selected to split")
            region_id = self._selected_id

        source = self._get(region_id)
        bounds = source.clip_rect
        if bounds is None:
            if not derive:
                raise MissingClipRect(f"Region {region_id} has no clip rect to split")
            bounds = self._measure(source)

        split_x = max(bounds.x + MIN_SPLIT_WIDTH, min(x, bounds.right - MIN_SPLIT_WIDTH))
        left_width = split_x - bounds.x
        right_width = bounds.right - split_x

        if left_width < MIN_SPLIT_WIDTH or right_width < MIN_SPLIT_WIDTH:
            logger.warning(
                f"Declined split of {region_id} at ({x}, {y}): "
                f"widths {left_width} / {right_width} below {MIN_SPLIT_WIDTH}"
            )
            return SplitOutcome(accepted=False, reason="InvalidSplit")

        left = self._derived_region(
            source, f"{source.name} A",
            ClipRect(x=bounds.x, y=bounds.y, width=left_width, height=bounds.height),
        )
        right = self._derived_region(
            source, f"{source.name} B",
            ClipRect(x=split_x, y=bounds.y, width=right_width, height=bounds.height),
        )

        # Replace the source at its position in display order
        replaced = {}
        for rid, region in self._regions.items():
            if rid == source.id:
                replaced[left.id] = left
                replaced[right.id] = right
            else:
                replaced[rid] = region
        self._regions = replaced
        self._selected_id = right.id

        logger.info(f"Split region {source.id} at x={split_x} into {left.id} and {right.id}")
        return SplitOutcome(accepted=True, left=left.copy(), right=right.copy())

    def _derived_region(self, source: Region, name: str, clip_rect: ClipRect) -> Region:
        return Region(
            id=self._next_id(),
            name=name,
            path_data=source.path_data,
            transform=source.transform,
            clip_rect=clip_rect,
            fabric_id=source.fabric_id,
            fabric_transform=source.fabric_transform.copy(),
        )

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regions": [r.to_dict() for r in self._regions.values()],
            "selectedRegionId": self._selected_id,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        bbox_fn: Optional[BBoxFunction] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> "RegionEngine":
        """
        Restore a saved session.

        Raises:
            RegionError: If two regions share an id
            InvalidClipRect: If a stored clip rect has no positive area
        """
        engine = cls(bbox_fn=bbox_fn, id_factory=id_factory)
        for item in data.get("regions", []):
            region = Region.from_dict(item)
            if region.id in engine._issued_ids:
                raise RegionError(f"Duplicate region id {region.id}")
            engine._issued_ids.add(region.id)
            engine._regions[region.id] = region

        selected = data.get("selectedRegionId")
        if selected is not None and selected in engine._regions:
            engine._selected_id = selected
        return engine

    # Internals

    def _measure(self, region: Region) -> ClipRect:
        try:
            x, y, width, height = self._bbox_fn(region.path_data, region.transform)
        except ValueError as e:
            raise InvalidClipRect(f"Cannot measure region {region.id}: {e}") from e
        return ClipRect(x=x, y=y, width=width, height=height)

    def _get(self, region_id: str) -> Region:
        try:
            return self._regions[region_id]
        except KeyError:
            raise RegionNotFoundError(f"Unknown region id: {region_id}") from None

    def _next_id(self) -> str:
        region_id = self._id_factory()
        if region_id in self._issued_ids:
            raise RegionError(f"Region id {region_id} was already issued this session")
        self._issued_ids.add(region_id)
        return region_id
