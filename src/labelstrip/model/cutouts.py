"""
Cutout Region Algebra
=====================
Adjacency queries, the rectangle-merge validator and the RegionSet that owns
the regions of one editing session.

A merge is accepted only when the selection is connected (every region
reachable through shared edges), conserves area (no gaps inside the bounding
box) and has no pairwise overlap. Together these mean the selection tiles
its bounding rectangle exactly.
"""
from __future__ import annotations

from collections import deque
import logging
from typing import Iterable, Iterator, Optional, Sequence, TYPE_CHECKING

from labelstrip.config import AREA_TOLERANCE, EDGE_TOLERANCE
from labelstrip.model.errors import InvalidArgument, InvalidGeometry, MergeFailure
from labelstrip.model.geometry_primitives import bounding_rect, spans_overlap
from labelstrip.model.grid import generate_cells
from labelstrip.model.region import Region, discard, restore

if TYPE_CHECKING:
    from labelstrip.model.grid import Grid

logger = logging.getLogger(__name__)


def is_adjacent(a: Region, b: Region, tolerance: float = EDGE_TOLERANCE) -> bool:
    """
    True if `a` and `b` share an edge.

    One edge pair must be closer than `tolerance` and the rectangles must
    overlap with positive length along the other axis. Touching at a corner
    only is not adjacency. The relation is symmetric.
    """
    ra, rb = a.rect, b.rect
    vertical_overlap = spans_overlap(ra.top, ra.bottom, rb.top, rb.bottom)
    horizontal_overlap = spans_overlap(ra.left, ra.right, rb.left, rb.right)

    return (
        (abs(rb.right - ra.left) < tolerance and vertical_overlap)
        or (abs(ra.right - rb.left) < tolerance and vertical_overlap)
        or (abs(rb.bottom - ra.top) < tolerance and horizontal_overlap)
        or (abs(ra.bottom - rb.top) < tolerance and horizontal_overlap)
    )


def adjacent_regions(
    region: Region,
    all_regions: Iterable[Region],
    tolerance: float = EDGE_TOLERANCE
) -> list[Region]:
    """
    Return every region in `all_regions` sharing an edge with `region`.

    Candidates with the same id as `region` are skipped, so a region is
    never its own neighbour. Order follows `all_regions`.
    """
    return [
        other for other in all_regions
        if other.id != region.id and is_adjacent(region, other, tolerance)
    ]


def _is_connected(regions: Sequence[Region], tolerance: float) -> bool:
    """Breadth-first traversal over the edge-touch graph, from the first region."""
    neighbours: dict[int, list[int]] = {i: [] for i in range(len(regions))}
    for i in range(len(regions)):
        for j in range(i + 1, len(regions)):
            if is_adjacent(regions[i], regions[j], tolerance):
                neighbours[i].append(j)
                neighbours[j].append(i)

    visited = {0}
    queue = deque([0])
    while queue:
        current = queue.popleft()
        for nxt in neighbours[current]:
            if nxt not in visited:
                visited.add(nxt)
                queue.append(nxt)

    return len(visited) == len(regions)


def combine_regions(
    regions: Sequence[Region],
    edge_tolerance: float = EDGE_TOLERANCE,
    area_tolerance: float = AREA_TOLERANCE
) -> Region:
    """
    Merge a selection of regions into a single rectangular region.

    Args:
        regions: The selection, in selection order.
        edge_tolerance: Max gap between edges counted as touching.
        area_tolerance: Slack for the area and overlap checks.

    Returns:
        A new region spanning the bounding box of the selection. It takes the
        id of the first selected region and the union of all merged cell ids.

    Raises:
        InvalidArgument: If the selection is empty.
        InvalidGeometry: If the selection is not connected, leaves gaps in its
            bounding box, or double-covers any area.
    """
    if not regions:
        raise InvalidArgument("cannot combine empty selection")

    first = regions[0]
    if len(regions) == 1:
        return Region(
            id=first.id,
            x=first.x,
            y=first.y,
            width=first.width,
            height=first.height,
            merged_cell_ids=set(first.merged_cell_ids),
        )

    if not _is_connected(regions, edge_tolerance):
        raise InvalidGeometry("regions are not fully connected", MergeFailure.NOT_CONNECTED)

    bounds = bounding_rect(r.rect for r in regions)
    total_area = sum(r.area for r in regions)
    if abs(total_area - bounds.area) > area_tolerance:
        raise InvalidGeometry(
            "selected regions do not form a valid rectangle",
            MergeFailure.NOT_RECTANGLE
        )

    for i in range(len(regions)):
        for j in range(i + 1, len(regions)):
            if regions[i].rect.intersection_area(regions[j].rect) > area_tolerance:
                raise InvalidGeometry(
                    f"regions {regions[i].id} and {regions[j].id} overlap",
                    MergeFailure.OVERLAPPING
                )

    merged_ids: set[int] = set()
    for r in regions:
        merged_ids.update(r.merged_cell_ids)

    return Region(
        id=first.id,
        x=bounds.x,
        y=bounds.y,
        width=bounds.width,
        height=bounds.height,
        merged_cell_ids=merged_ids,
    )


class RegionSet:
    """
    Owns the ordered list of regions for one editing session.

    Regions are looked up by id. Operations given unknown ids skip them
    instead of raising, so rapid UI input never fails half way.
    """

    def __init__(self, regions: Optional[Iterable[Region]] = None) -> None:
        self._regions: list[Region] = list(regions) if regions is not None else []

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def __contains__(self, region_id: object) -> bool:
        return any(r.id == region_id for r in self._regions)

    def regenerate(self, grid: Grid) -> None:
        """Replace every region with a fresh partition of the grid."""
        self._regions = generate_cells(grid)

    def clear(self) -> None:
        self._regions = []

    def get(self, region_id: int) -> Optional[Region]:
        for region in self._regions:
            if region.id == region_id:
                return region
        return None

    def resolve(self, region_ids: Iterable[int]) -> list[Region]:
        """Known regions for the given ids, in the given order, without repeats."""
        seen: set[int] = set()
        resolved: list[Region] = []
        for region_id in region_ids:
            if region_id in seen:
                continue
            seen.add(region_id)
            region = self.get(region_id)
            if region is not None:
                resolved.append(region)
        return resolved

    def active(self) -> list[Region]:
        return [r for r in self._regions if not r.discarded]

    def discarded(self) -> list[Region]:
        return [r for r in self._regions if r.discarded]

    def merge(self, region_ids: Sequence[int]) -> Region:
        """
        Merge the selected regions and replace them with the result.

        The merged region keeps the id of the first selected region, so
        placements that reference it stay valid.
        """
        selection = self.resolve(region_ids)
        try:
            merged = combine_regions(selection)
        except InvalidGeometry as e:
            logger.warning(f"Merge of regions {[r.id for r in selection]} rejected: {e}")
            raise

        consumed = {r.id for r in selection}
        self._regions = [r for r in self._regions if r.id not in consumed]
        self._regions.append(merged)
        logger.debug(f"Merged {sorted(consumed)} into region {merged.id}.")
        return merged

    def discard(self, region_ids: Iterable[int]) -> None:
        for region in self.resolve(region_ids):
            discard(region)

    def restore(self, region_ids: Iterable[int]) -> None:
        for region in self.resolve(region_ids):
            restore(region)

    def adjacent(self, region_id: int) -> list[Region]:
        region = self.get(region_id)
        if region is None:
            return []
        return adjacent_regions(region, self._regions)

    def to_list(self) -> list[dict]:
        return [r.to_dict() for r in self._regions]

    @staticmethod
    def from_list(data: Iterable[dict]) -> RegionSet:
        return RegionSet(Region.from_dict(item) for item in data)
