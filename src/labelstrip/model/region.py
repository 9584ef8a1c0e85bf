"""
Region (Cutout) data structure.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from labelstrip.model.geometry_primitives import Rect


@dataclass
class Region:
    """
    A (possibly merged) rectangular area of the source canvas.

    Cells produced by the grid carry their own id in `merged_cell_ids`;
    a merged region carries the union of the ids of every cell it covers.
    """
    id: int
    x: float
    y: float
    width: float
    height: float
    merged_cell_ids: set[int] = field(default_factory=set)
    discarded: bool = False

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "merged_cell_ids": sorted(self.merged_cell_ids),
            "discarded": self.discarded,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Region:
        return Region(
            id=int(data["id"]),
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
            merged_cell_ids={int(i) for i in data.get("merged_cell_ids", [])},
            discarded=bool(data.get("discarded", False)),
        )


def discard(region: Region) -> None:
    """Marks the region as discarded. Idempotent."""
    region.discarded = True


def restore(region: Region) -> None:
    """Brings a discarded region back. Idempotent."""
    region.discarded = False
