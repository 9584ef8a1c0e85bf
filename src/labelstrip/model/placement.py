"""
Placement Transform Engine
==========================
Positions cutouts on a strip with 90 degree rotations and non-uniform scale.

A placement stores an *anchor origin* (x, y), which is the rotation pivot and
not always the visual top-left corner. With w, h the scaled, unrotated
footprint of the region:

    rotation | visual top-left | visual center
    ---------+-----------------+----------------------
       0     | (x, y)          | (x + w/2, y + h/2)
      90     | (x - h, y)      | (x - h/2, y + w/2)
     180     | (x - w, y - h)  | (x - w/2, y - h/2)
     270     | (x, y - w)      | (x + h/2, y - w/2)

At 90 and 270 degrees the visual bounding box is h wide and w tall.

Every function here is total: given a well-formed placement, region and
surface it never raises.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from labelstrip.config import FIT_MARGIN_MM, MAX_FIT_SCALE, MIN_SCALE
from labelstrip.model.geometry_primitives import Rect
from labelstrip.model.region import Region
from labelstrip.model.strips import Surface

logger = logging.getLogger(__name__)

# Slack for bound checks, absorbs round-off from anchor <-> top-left conversions
_EPS = 1e-9


class Rotation(IntEnum):
    """Clockwise rotation in degrees."""
    R0 = 0
    R90 = 90
    R180 = 180
    R270 = 270

    @property
    def is_quarter_turn(self) -> bool:
        return self in (Rotation.R90, Rotation.R270)


def normalize_rotation(degrees: float) -> Rotation:
    """Snap any angle to the nearest multiple of 90 in [0, 360)."""
    return Rotation((int(round(degrees / 90.0)) * 90) % 360)


@dataclass
class Placement:
    """
    A cutout stamped onto the strip. `region_id` is a lookup key, not
    ownership: several placements may stamp the same region.
    """
    region_id: int
    x: float = 0.0
    y: float = 0.0
    rotation: Rotation = Rotation.R0
    scale_x: float = 1.0
    scale_y: float = 1.0
    z_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region_id": self.region_id,
            "x": self.x,
            "y": self.y,
            "rotation": int(self.rotation),
            "scale_x": self.scale_x,
            "scale_y": self.scale_y,
            "z_index": self.z_index,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Placement:
        return Placement(
            region_id=int(data["region_id"]),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            rotation=normalize_rotation(float(data.get("rotation", 0))),
            scale_x=max(MIN_SCALE, float(data.get("scale_x", 1.0))),
            scale_y=max(MIN_SCALE, float(data.get("scale_y", 1.0))),
            z_index=int(data.get("z_index", 0)),
        )


def create_placement(region_id: int, x: float, y: float) -> Placement:
    return Placement(region_id=region_id, x=x, y=y)


# --- Coordinate conversions ---

def footprint(placement: Placement, region: Region) -> tuple[float, float]:
    """Scaled, unrotated (w, h) of the region."""
    return (region.width * placement.scale_x, region.height * placement.scale_y)


def visual_size(placement: Placement, region: Region) -> tuple[float, float]:
    """Width and height of the visual bounding box after rotation."""
    w, h = footprint(placement, region)
    if placement.rotation.is_quarter_turn:
        return (h, w)
    return (w, h)


def top_left_from_anchor(
    x: float, y: float, rotation: Rotation, w: float, h: float
) -> tuple[float, float]:
    if rotation == Rotation.R90:
        return (x - h, y)
    if rotation == Rotation.R180:
        return (x - w, y - h)
    if rotation == Rotation.R270:
        return (x, y - w)
    return (x, y)


def anchor_from_top_left(
    left: float, top: float, rotation: Rotation, w: float, h: float
) -> tuple[float, float]:
    if rotation == Rotation.R90:
        return (left + h, top)
    if rotation == Rotation.R180:
        return (left + w, top + h)
    if rotation == Rotation.R270:
        return (left, top + w)
    return (left, top)


def center_from_anchor(
    x: float, y: float, rotation: Rotation, w: float, h: float
) -> tuple[float, float]:
    if rotation == Rotation.R90:
        return (x - h / 2, y + w / 2)
    if rotation == Rotation.R180:
        return (x - w / 2, y - h / 2)
    if rotation == Rotation.R270:
        return (x + h / 2, y - w / 2)
    return (x + w / 2, y + h / 2)


def anchor_from_center(
    cx: float, cy: float, rotation: Rotation, w: float, h: float
) -> tuple[float, float]:
    if rotation == Rotation.R90:
        return (cx + h / 2, cy - w / 2)
    if rotation == Rotation.R180:
        return (cx + w / 2, cy + h / 2)
    if rotation == Rotation.R270:
        return (cx - h / 2, cy + w / 2)
    return (cx - w / 2, cy - h / 2)


def visual_top_left(placement: Placement, region: Region) -> tuple[float, float]:
    w, h = footprint(placement, region)
    return top_left_from_anchor(placement.x, placement.y, placement.rotation, w, h)


def visual_center(placement: Placement, region: Region) -> tuple[float, float]:
    w, h = footprint(placement, region)
    return center_from_anchor(placement.x, placement.y, placement.rotation, w, h)


def visual_bounds(placement: Placement, region: Region) -> Rect:
    left, top = visual_top_left(placement, region)
    vw, vh = visual_size(placement, region)
    return Rect(left, top, vw, vh)


# --- Bounds ---

def clamp_to_surface(placement: Placement, region: Region, surface: Surface) -> None:
    """
    Move the placement so its visual box lies inside the surface.

    If the box is larger than the surface along an axis it is pinned to 0
    on that axis. Calling this twice in a row changes nothing the second time.
    """
    w, h = footprint(placement, region)
    vw, vh = visual_size(placement, region)
    left, top = top_left_from_anchor(placement.x, placement.y, placement.rotation, w, h)

    left = min(max(left, 0.0), max(0.0, surface.width - vw))
    top = min(max(top, 0.0), max(0.0, surface.height - vh))

    placement.x, placement.y = anchor_from_top_left(left, top, placement.rotation, w, h)


def is_valid(placement: Placement, region: Region, surface: Surface) -> bool:
    """True if the visual box fits entirely inside the surface."""
    bounds = visual_bounds(placement, region)
    return Rect(0.0, 0.0, surface.width, surface.height).contains(bounds, eps=_EPS)


# --- Edits ---

def move(placement: Placement, region: Region, surface: Surface, x: float, y: float) -> None:
    """Set a new anchor (e.g. while dragging) and keep it on the surface."""
    placement.x = x
    placement.y = y
    clamp_to_surface(placement, region, surface)


def rotate(
    placement: Placement,
    region: Region,
    surface: Surface,
    delta_degrees: float = 90.0
) -> None:
    """
    Rotate by `delta_degrees` (snapped to quarter turns) about the visual
    center, then clamp to the surface.
    """
    w, h = footprint(placement, region)
    cx, cy = center_from_anchor(placement.x, placement.y, placement.rotation, w, h)

    new_rotation = normalize_rotation(int(placement.rotation) + delta_degrees)
    placement.rotation = new_rotation
    placement.x, placement.y = anchor_from_center(cx, cy, new_rotation, w, h)

    clamp_to_surface(placement, region, surface)
    logger.debug(f"Placement of region {placement.region_id} rotated to {int(new_rotation)} deg.")


def scale(
    placement: Placement,
    region: Region,
    surface: Surface,
    scale_x: float,
    scale_y: float
) -> None:
    """Set the scale (floored at MIN_SCALE) and re-clamp the changed footprint."""
    placement.scale_x = max(MIN_SCALE, scale_x)
    placement.scale_y = max(MIN_SCALE, scale_y)
    clamp_to_surface(placement, region, surface)


def fit_scale(
    region: Region,
    surface: Surface,
    rotation: Rotation = Rotation.R0,
    margin: float = FIT_MARGIN_MM
) -> float:
    """
    Largest uniform scale that fits the region on the surface with `margin`
    left free on every side, bounded to [MIN_SCALE, MAX_FIT_SCALE].
    """
    w, h = region.width, region.height
    if rotation.is_quarter_turn:
        w, h = h, w
    if w <= 0 or h <= 0:
        return MAX_FIT_SCALE

    available_w = surface.width - 2 * margin
    available_h = surface.height - 2 * margin
    best = min(available_w / w, available_h / h)
    return max(MIN_SCALE, min(best, MAX_FIT_SCALE))


# --- Queries over many placements ---

def render_order(placements: Iterable[Placement]) -> list[Placement]:
    """Placements sorted bottom to top; equal z_index keeps list order."""
    return sorted(placements, key=lambda p: p.z_index)


def hit_test(
    placements: Iterable[Placement],
    regions_by_id: Mapping[int, Region],
    px: float,
    py: float
) -> Optional[Placement]:
    """
    The topmost placement whose visual box contains (px, py), or None.
    Placements whose region is unknown are skipped.
    """
    for placement in reversed(render_order(placements)):
        region = regions_by_id.get(placement.region_id)
        if region is None:
            continue
        if visual_bounds(placement, region).contains_point(px, py):
            return placement
    return None
