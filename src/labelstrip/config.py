"""
Configuration & Path Management
===============================
This module serves as the central registry for global constants and the
default template location.

Why is this file needed?
------------------------
1. Tolerances: Edge and area comparisons across the region algebra must
   agree on the same slack, otherwise a merge could accept what the
   adjacency query rejects.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find bundled templates when the app is frozen into an .exe.

Exports:
    EDGE_TOLERANCE (float): Max gap between two edges that still "touch".
    AREA_TOLERANCE (float): Slack for area conservation and overlap checks.
    DEFAULT_TEMPLATES_PATH (str): Absolute path to the templates directory.
"""
import sys
import os
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/labelstrip/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Region algebra
EDGE_TOLERANCE: float = 1.0  # canvas units (pixels)
AREA_TOLERANCE: float = 0.1  # squared canvas units

# Placement
MIN_SCALE: float = 0.1
MAX_FIT_SCALE: float = 1.0
FIT_MARGIN_MM: float = 5.0

# Units
MM_PER_INCH: float = 25.4
DEFAULT_DPI: float = 300.0

# Persistence
TEMPLATE_EXTENSION: str = ".h5"
DEFAULT_TEMPLATES_PATH: str = get_resource_path("templates")
