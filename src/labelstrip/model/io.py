"""
Input/Output Manager (HDF5)
Handles saving and loading a LabelSession as a reusable template (.h5 file).
"""
import json
import logging
import os
from datetime import datetime
from importlib.metadata import version, PackageNotFoundError
from typing import Any, Optional

import h5py
import numpy as np

from labelstrip.config import DEFAULT_TEMPLATES_PATH, TEMPLATE_EXTENSION
from labelstrip.model.cutouts import RegionSet
from labelstrip.model.grid import Grid
from labelstrip.model.placement import Placement
from labelstrip.model.state import LabelSession
from labelstrip.model.strips import Surface

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("labelstrip")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# HDF5 attributes are limited to 64KB
_ATTR_LIMIT = 60000


class IOManager:

    @staticmethod
    def save_template(session: LabelSession, filepath: str) -> None:
        logger.info(f"Saving template to: {filepath}")
        try:
            now = datetime.now().isoformat(timespec="seconds")
            created = now
            if os.path.exists(filepath) and h5py.is_hdf5(filepath):
                with h5py.File(filepath, "r") as old:
                    created = str(old.attrs.get("created", now))

            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["name"] = session.name
                f.attrs["created"] = created
                f.attrs["modified"] = now

                # --- 1. GRID ---
                if session.grid is not None:
                    grp_grid = f.create_group("grid")
                    grp_grid.attrs["rows"] = session.grid.rows
                    grp_grid.attrs["columns"] = session.grid.columns
                    grp_grid.attrs["canvas_width"] = session.grid.canvas_width
                    grp_grid.attrs["canvas_height"] = session.grid.canvas_height
                    grp_grid.create_dataset("row_lines", data=session.grid.row_lines)
                    grp_grid.create_dataset("col_lines", data=session.grid.col_lines)

                # --- 2. CUTOUTS ---
                IOManager._write_json(f, "regions", session.regions.to_list())

                # --- 3. STRIP ---
                if session.surface is not None:
                    f.attrs["surface"] = json.dumps(session.surface.to_dict())

                # --- 4. PLACEMENTS ---
                IOManager._write_json(f, "placements", [p.to_dict() for p in session.placements])

            logger.info(f"Template saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save template: {e}")
            raise e

    @staticmethod
    def load_template(session: LabelSession, filepath: str) -> None:
        logger.info(f"Loading template from: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                session.reset()
                session.name = str(f.attrs.get("name", session.name))

                if "grid" in f:
                    grp_grid = f["grid"]
                    session.grid = Grid.from_dict({
                        "rows": int(grp_grid.attrs["rows"]),
                        "columns": int(grp_grid.attrs["columns"]),
                        "canvas_width": float(grp_grid.attrs["canvas_width"]),
                        "canvas_height": float(grp_grid.attrs["canvas_height"]),
                        "row_lines": grp_grid["row_lines"][:],
                        "col_lines": grp_grid["col_lines"][:],
                    })

                regions = IOManager._read_json(f, "regions")
                if regions:
                    session.regions = RegionSet.from_list(regions)
                    logger.debug(f"Loaded {len(session.regions)} regions.")

                if "surface" in f.attrs:
                    session.surface = Surface.from_dict(json.loads(f.attrs["surface"]))

                placements = IOManager._read_json(f, "placements")
                if placements:
                    session.placements = [Placement.from_dict(p) for p in placements]
                    logger.debug(f"Loaded {len(session.placements)} placements.")

            logger.info(f"Template loaded from: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to load template: {e}")
            raise e

    @staticmethod
    def list_templates(directory: str = DEFAULT_TEMPLATES_PATH) -> list[tuple[str, str]]:
        """
        Returns (name, path) of every readable template in `directory`.
        Unreadable files are skipped.
        """
        templates: list[tuple[str, str]] = []
        if not os.path.isdir(directory):
            return templates

        for entry in sorted(os.listdir(directory)):
            if not entry.endswith(TEMPLATE_EXTENSION):
                continue
            path = os.path.join(directory, entry)
            try:
                with h5py.File(path, "r") as f:
                    name = str(f.attrs.get("name", os.path.splitext(entry)[0]))
                templates.append((name, path))
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable template '{path}': {e}")

        return templates

    # --- JSON HELPERS ---

    @staticmethod
    def _write_json(h5_file: h5py.File, key: str, data: Any) -> None:
        """Small payloads go to an attribute, large ones to an opaque dataset."""
        payload = json.dumps(data)
        if len(payload) > _ATTR_LIMIT:
            logger.info(f"'{key}' is large ({len(payload)} bytes), using dataset")
            h5_file.create_dataset(key, data=np.void(payload.encode('utf-8')))
        else:
            h5_file.attrs[f"{key}_json"] = payload

    @staticmethod
    def _read_json(h5_file: h5py.File, key: str) -> Optional[Any]:
        payload = None
        if key in h5_file:
            payload = bytes(h5_file[key][()]).decode('utf-8')
        elif f"{key}_json" in h5_file.attrs:
            payload = h5_file.attrs[f"{key}_json"]
        if payload is None:
            return None
        return json.loads(payload)
