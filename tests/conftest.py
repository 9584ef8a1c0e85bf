"""Pytest fixtures for labelstrip tests."""

import pytest

from labelstrip.model.grid import create_grid, generate_cells
from labelstrip.model.region import Region
from labelstrip.model.strips import Surface


def make_region(region_id: int, x: float, y: float, width: float, height: float) -> Region:
    return Region(id=region_id, x=x, y=y, width=width, height=height, merged_cell_ids={region_id})


@pytest.fixture
def grid_3x3():
    """3x3 grid over a 300x300 canvas."""
    return create_grid(300, 300, 3, 3)


@pytest.fixture
def cells_3x3(grid_3x3):
    """The nine 100x100 cells of the 3x3 grid."""
    return generate_cells(grid_3x3)


@pytest.fixture
def surface() -> Surface:
    """A 100x150 strip."""
    return Surface(width=100.0, height=150.0, name="100x150mm")


@pytest.fixture
def small_region() -> Region:
    """A 20x10 cutout."""
    return make_region(0, 0, 0, 20, 10)
