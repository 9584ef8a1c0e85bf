"""
Geometric Primitives for the region algebra.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Rect:
    """
    An axis-aligned rectangle in canvas (or surface) space.
    The y axis points down, so `top` is the smaller y value.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains_point(self, px: float, py: float) -> bool:
        return self.left <= px <= self.right and self.top <= py <= self.bottom

    def contains(self, other: Rect, eps: float = 1e-9) -> bool:
        """True if `other` lies entirely inside this rectangle."""
        return (
            other.left >= self.left - eps
            and other.top >= self.top - eps
            and other.right <= self.right + eps
            and other.bottom <= self.bottom + eps
        )

    def intersection_area(self, other: Rect) -> float:
        """Area shared by both rectangles; touching edges give 0."""
        overlap_x = max(0.0, min(self.right, other.right) - max(self.left, other.left))
        overlap_y = max(0.0, min(self.bottom, other.bottom) - max(self.top, other.top))
        return overlap_x * overlap_y

    def to_array(self) -> npt.NDArray[np.float64]:
        """Returns [left, top, right, bottom]."""
        return np.array([self.left, self.top, self.right, self.bottom], dtype=np.float64)


def spans_overlap(a_start: float, a_end: float, b_start: float, b_end: float) -> bool:
    """
    True if the open intervals (a_start, a_end) and (b_start, b_end) share
    more than a single point.
    """
    return not (a_end <= b_start or a_start >= b_end)


def bounding_rect(rects: Iterable[Rect]) -> Rect:
    """
    Smallest rectangle enclosing all given rectangles.

    Args:
        rects: At least one rectangle.

    Returns:
        The bounding box as a Rect.
    """
    bounds = np.array([r.to_array() for r in rects], dtype=np.float64)
    if bounds.size == 0:
        raise ValueError("Cannot compute the bounding box of nothing.")

    min_x, min_y = bounds[:, 0].min(), bounds[:, 1].min()
    max_x, max_y = bounds[:, 2].max(), bounds[:, 3].max()
    return Rect(float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y))
