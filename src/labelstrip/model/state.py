"""
Label Session (Data Model)
==========================
This module defines the central data structure for one editing session.

Why is this file needed?
------------------------
1. State Management: It holds the grid, the cutout regions, the target strip
   and the placements in one place and wires them together explicitly
   (grid -> cutouts -> placements -> render plan).
2. Persistence: This object is what gets serialized when saving a template.
3. Gating: Later stages are only usable once the earlier ones exist, and
   editing an earlier stage invalidates what was built on top of it.

The session is not thread-safe. One caller owns it at a time.

Classes:
    Stage: Workflow stages.
    RenderItem: Geometry of one placement for the export renderer.
    LabelSession: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
import logging
from typing import Iterable, Optional, Sequence

from labelstrip.model import placement as engine
from labelstrip.model.cutouts import RegionSet
from labelstrip.model.grid import Grid, create_grid, update_line
from labelstrip.model.placement import Placement, Rotation
from labelstrip.model.region import Region
from labelstrip.model.strips import Surface

logger = logging.getLogger(__name__)


class Stage(IntEnum):
    """The main stages of the workflow."""
    GRID = 0
    CUTOUTS = 1
    STRIP = 2
    PLACEMENT = 3


@dataclass(frozen=True)
class RenderItem:
    """Everything the exporter needs to draw one placement, in strip units."""
    region_id: int
    x: float
    y: float
    rotation: Rotation
    scale_x: float
    scale_y: float
    width: float
    height: float


@dataclass
class LabelSession:
    """
    Holds the entire state of one label layout.
    Pass this instance to whatever drives the UI or the export.
    """
    name: str = "Untitled Template"
    grid: Optional[Grid] = None
    regions: RegionSet = field(default_factory=RegionSet)
    surface: Optional[Surface] = None
    placements: list[Placement] = field(default_factory=list)

    # --- Gating ---

    def highest_allowed_stage(self) -> Stage:
        """
        The furthest stage a UI should let the user reach.

        Advisory only: the editing methods below do not consult it. Each
        of them is already a no-op (or returns None) when the data it
        needs is missing.
        """
        if self.grid is None:
            return Stage.GRID
        if not self.regions.active():
            return Stage.CUTOUTS
        if self.surface is None:
            return Stage.STRIP
        return Stage.PLACEMENT

    def invalidate_from(self, stage: Stage) -> None:
        """Drop everything built at `stage` or later."""
        if stage <= Stage.GRID:
            self.grid = None
        if stage <= Stage.CUTOUTS:
            self.regions.clear()
        if stage <= Stage.STRIP:
            self.surface = None
        if stage <= Stage.PLACEMENT:
            self.placements = []
        logger.debug(f"Session invalidated from stage {stage.name}.")

    def reset(self) -> None:
        """Clear all data for a new template"""
        self.name = "Untitled Template"
        self.invalidate_from(Stage.GRID)
        logger.info("Session has been reset.")

    # --- Grid & cutouts ---

    def set_canvas(self, width: float, height: float, rows: int, columns: int) -> Grid:
        """Create a fresh grid and partition the canvas into cells."""
        grid = create_grid(width, height, rows, columns)
        self.grid = grid
        self._regenerate()
        return grid

    def move_line(self, is_row: bool, index: int, position: float) -> None:
        """Reposition one grid line. Cells are regenerated, so placements are dropped."""
        if self.grid is None:
            return
        update_line(self.grid, is_row, index, position)
        self._regenerate()

    def _regenerate(self) -> None:
        self.regions.regenerate(self.grid)
        # Cell ids are reassigned, old placements would point at the wrong cells
        self.placements = []
        logger.info(f"Canvas partitioned into {len(self.regions)} cells.")

    def merge(self, region_ids: Sequence[int]) -> Region:
        """Merge a selection; raises InvalidArgument or InvalidGeometry on rejection."""
        merged = self.regions.merge(region_ids)
        # Placements of consumed regions other than the survivor have nothing to draw
        alive = {r.id for r in self.regions}
        self.placements = [p for p in self.placements if p.region_id in alive]
        # The survivor grew to the bounding box, so its placements may now overhang
        if self.surface is not None:
            for p in self.placements:
                if p.region_id == merged.id:
                    engine.clamp_to_surface(p, merged, self.surface)
        return merged

    def discard(self, region_ids: Iterable[int]) -> None:
        self.regions.discard(region_ids)

    def restore(self, region_ids: Iterable[int]) -> None:
        self.regions.restore(region_ids)

    def adjacent(self, region_id: int) -> list[Region]:
        return self.regions.adjacent(region_id)

    # --- Strip ---

    def set_surface(self, surface: Surface) -> None:
        """Switch the target strip and pull every placement back inside it."""
        self.surface = surface
        for p in self.placements:
            region = self.regions.get(p.region_id)
            if region is not None:
                engine.clamp_to_surface(p, region, surface)
        logger.info(f"Strip set to '{surface.name or 'unnamed'}' ({surface.width}x{surface.height}).")

    # --- Placements ---

    def _visible_region(self, region_id: int) -> Optional[Region]:
        """The region behind a placement, or None if it is gone or discarded."""
        region = self.regions.get(region_id)
        if region is None or region.discarded:
            return None
        return region

    def _placement_context(self, index: int) -> Optional[tuple[Placement, Region, Surface]]:
        if self.surface is None or index < 0 or index >= len(self.placements):
            return None
        p = self.placements[index]
        region = self._visible_region(p.region_id)
        if region is None:
            return None
        return p, region, self.surface

    def place(self, region_id: int, x: float = 0.0, y: float = 0.0, fit: bool = True) -> Optional[Placement]:
        """
        Stamp a region onto the strip on top of everything placed so far.
        Returns None when there is no strip or the region is unknown or discarded.
        """
        region = self.regions.get(region_id)
        if self.surface is None or region is None or region.discarded:
            return None

        p = engine.create_placement(region_id, x, y)
        if fit:
            s = engine.fit_scale(region, self.surface)
            p.scale_x = p.scale_y = s
        p.z_index = max((q.z_index for q in self.placements), default=-1) + 1
        engine.clamp_to_surface(p, region, self.surface)

        self.placements.append(p)
        logger.debug(f"Placed region {region_id} at ({p.x:.2f}, {p.y:.2f}).")
        return p

    def move_placement(self, index: int, x: float, y: float) -> None:
        ctx = self._placement_context(index)
        if ctx is not None:
            engine.move(*ctx, x, y)

    def rotate_placement(self, index: int, delta_degrees: float = 90.0) -> None:
        ctx = self._placement_context(index)
        if ctx is not None:
            engine.rotate(*ctx, delta_degrees)

    def scale_placement(self, index: int, scale_x: float, scale_y: float) -> None:
        ctx = self._placement_context(index)
        if ctx is not None:
            engine.scale(*ctx, scale_x, scale_y)

    def remove_placement(self, index: int) -> None:
        if 0 <= index < len(self.placements):
            self.placements.pop(index)

    def placement_at(self, x: float, y: float) -> Optional[Placement]:
        regions_by_id = {r.id: r for r in self.regions.active()}
        return engine.hit_test(self.placements, regions_by_id, x, y)

    def render_plan(self) -> list[RenderItem]:
        """
        Placement geometry ordered bottom to top. Placements of discarded
        regions are left out until the region is restored.
        """
        items: list[RenderItem] = []
        for p in engine.render_order(self.placements):
            region = self._visible_region(p.region_id)
            if region is None:
                continue
            w, h = engine.footprint(p, region)
            items.append(RenderItem(
                region_id=p.region_id,
                x=p.x,
                y=p.y,
                rotation=p.rotation,
                scale_x=p.scale_x,
                scale_y=p.scale_y,
                width=w,
                height=h,
            ))
        return items
