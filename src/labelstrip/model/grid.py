"""
Raster Grid
===========
Partitions a canvas of known size into rows x columns of cells.

The grid is described by two arrays of line positions. Lines are addressed
by index (the index is the identity of a resize handle in the UI), so they
are overwritten in place and never reordered.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, TYPE_CHECKING

import numpy as np

from labelstrip.model.errors import InvalidArgument
from labelstrip.model.region import Region

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass
class Grid:
    rows: int
    columns: int
    canvas_width: float
    canvas_height: float
    row_lines: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(0))
    col_lines: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(0))

    @property
    def cell_count(self) -> int:
        return self.rows * self.columns

    def row_heights(self) -> npt.NDArray[np.float64]:
        return np.diff(self.row_lines)

    def column_widths(self) -> npt.NDArray[np.float64]:
        return np.diff(self.col_lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "columns": self.columns,
            "canvas_width": self.canvas_width,
            "canvas_height": self.canvas_height,
            "row_lines": self.row_lines.tolist(),
            "col_lines": self.col_lines.tolist(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Grid:
        grid = create_grid(
            float(data["canvas_width"]),
            float(data["canvas_height"]),
            int(data["rows"]),
            int(data["columns"]),
        )
        # Saved positions override the even spacing when they match the shape
        row_lines = np.asarray(data.get("row_lines", []), dtype=np.float64)
        col_lines = np.asarray(data.get("col_lines", []), dtype=np.float64)
        if row_lines.shape == grid.row_lines.shape:
            grid.row_lines = row_lines
        if col_lines.shape == grid.col_lines.shape:
            grid.col_lines = col_lines
        return grid


def create_grid(canvas_width: float, canvas_height: float, rows: int, columns: int) -> Grid:
    """
    Create a grid with evenly spaced row and column lines.

    Args:
        canvas_width: Canvas width in pixels.
        canvas_height: Canvas height in pixels.
        rows: Number of rows (> 0).
        columns: Number of columns (> 0).

    Returns:
        A Grid with rows + 1 row lines and columns + 1 column lines.

    Raises:
        InvalidArgument: If any count or dimension is not positive.
    """
    if rows <= 0 or columns <= 0:
        raise InvalidArgument(f"Grid needs at least one row and one column, got {rows}x{columns}.")
    if canvas_width <= 0 or canvas_height <= 0:
        raise InvalidArgument(
            f"Canvas dimensions must be positive, got {canvas_width}x{canvas_height}."
        )

    # lines[i] = i * dimension / count
    row_lines = np.arange(rows + 1, dtype=np.float64) * canvas_height / rows
    col_lines = np.arange(columns + 1, dtype=np.float64) * canvas_width / columns

    logger.debug(f"Created {rows}x{columns} grid over {canvas_width}x{canvas_height} canvas.")
    return Grid(
        rows=rows,
        columns=columns,
        canvas_width=float(canvas_width),
        canvas_height=float(canvas_height),
        row_lines=row_lines,
        col_lines=col_lines,
    )


def update_line(
    grid: Grid,
    is_row: bool,
    index: int,
    position: float,
    keep_ordered: bool = True
) -> None:
    """
    Move one grid line.

    The position is clamped into the canvas. With `keep_ordered` (the default)
    it is additionally clamped between its neighbouring lines, so cells can
    shrink to zero but never turn inside out. Pass `keep_ordered=False` to
    let lines cross freely.

    An out-of-range index is ignored.
    """
    lines = grid.row_lines if is_row else grid.col_lines
    limit = grid.canvas_height if is_row else grid.canvas_width

    if index < 0 or index >= len(lines):
        logger.debug(f"Ignoring move of {'row' if is_row else 'column'} line {index}: out of range.")
        return

    lower, upper = 0.0, limit
    if keep_ordered:
        if index > 0:
            lower = max(lower, float(lines[index - 1]))
        if index < len(lines) - 1:
            upper = min(upper, float(lines[index + 1]))

    lines[index] = float(np.clip(position, lower, upper))


def generate_cells(grid: Grid) -> list[Region]:
    """
    Emit one Region per grid cell in row-major order.

    Ids are sequential from 0 and each cell's `merged_cell_ids` holds its
    own id. Calling this again on an unchanged grid yields the same cells.
    """
    cells: list[Region] = []
    cell_id = 0
    for row in range(grid.rows):
        y = float(grid.row_lines[row])
        height = float(grid.row_lines[row + 1]) - y
        for col in range(grid.columns):
            x = float(grid.col_lines[col])
            width = float(grid.col_lines[col + 1]) - x
            cells.append(Region(
                id=cell_id,
                x=x,
                y=y,
                width=width,
                height=height,
                merged_cell_ids={cell_id},
            ))
            cell_id += 1

    logger.debug(f"Generated {len(cells)} cells.")
    return cells
