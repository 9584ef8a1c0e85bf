"""
Label Strips (Output Surfaces)
==============================
Defines the bounded surface that cutouts are placed on, the catalogue of
common label strip sizes and the mm <-> pixel conversions.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, List, Optional

from labelstrip.config import DEFAULT_DPI, MM_PER_INCH
from labelstrip.model.errors import InvalidArgument


def mm_to_pixels(mm: float, dpi: float) -> float:
    """Convert millimetres to pixels (1 inch = 25.4 mm)."""
    return mm * dpi / MM_PER_INCH


def pixels_to_mm(pixels: float, dpi: float) -> float:
    """Convert pixels to millimetres."""
    return pixels * MM_PER_INCH / dpi


@dataclass(frozen=True)
class Surface:
    """
    The target strip. Width and height are physical units (mm);
    `resolution` converts those units to output pixels.
    """
    width: float
    height: float
    resolution: float = DEFAULT_DPI / MM_PER_INCH
    name: str = ""
    is_landscape: bool = False

    @property
    def dpi(self) -> float:
        return self.resolution * MM_PER_INCH

    @property
    def size_px(self) -> tuple[float, float]:
        return (self.to_pixels(self.width), self.to_pixels(self.height))

    def to_pixels(self, value: float) -> float:
        return value * self.resolution

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Surface:
        # Keys written by other versions of the app are ignored
        known = {f.name for f in fields(Surface)}
        return Surface(**{k: v for k, v in data.items() if k in known})


def create_custom_strip(
    width: float,
    height: float,
    is_landscape: bool = False,
    dpi: float = DEFAULT_DPI
) -> Surface:
    """
    Create a user-sized strip.

    Raises:
        InvalidArgument: If the size or the DPI is not positive.
    """
    if width <= 0 or height <= 0:
        raise InvalidArgument(f"Strip dimensions must be positive, got {width}x{height} mm.")
    if dpi <= 0:
        raise InvalidArgument(f"DPI must be positive, got {dpi}.")
    return Surface(
        width=width,
        height=height,
        resolution=dpi / MM_PER_INCH,
        name="Custom",
        is_landscape=is_landscape,
    )


def _preset(name: str, width: float, height: float, is_landscape: bool = False) -> Surface:
    return Surface(width=width, height=height, name=name, is_landscape=is_landscape)


PREDEFINED_STRIPS: List[Surface] = [
    # Continuous rolls (thermal printer widths)
    _preset("62mm Continuous", 62, 297),
    _preset("50.8mm (2\") Continuous", 50.8, 297),
    _preset("38.1mm (1.5\") Continuous", 38.1, 297),
    _preset("25.4mm (1\") Continuous", 25.4, 297),

    # Standard labels
    _preset("62x100mm", 62, 100),
    _preset("62x150mm", 62, 150),
    _preset("50.8x100mm (2\"x4\")", 50.8, 101.6),
    _preset("38.1x88.9mm (1.5\"x3.5\")", 38.1, 88.9),

    # Shipping
    _preset("100x150mm", 100, 150),
    _preset("100x200mm", 100, 200),

    # Small
    _preset("50x70mm", 50, 70),
    _preset("70x50mm", 70, 50, is_landscape=True),
    _preset("40x60mm", 40, 60),

    # Paper
    _preset("A4 (210x297mm)", 210, 297),
    _preset("A4 Landscape", 297, 210, is_landscape=True),
    _preset("A5 (148x210mm)", 148, 210),
    _preset("A6 (105x148mm)", 105, 148),

    _preset("Custom", 100, 150),
]


def get_strip(name: str) -> Optional[Surface]:
    for strip in PREDEFINED_STRIPS:
        if strip.name == name:
            return strip
    return None
