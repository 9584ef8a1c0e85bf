"""
Error taxonomy for the region algebra.
"""
from __future__ import annotations

from enum import StrEnum
from typing import Optional


class MergeFailure(StrEnum):
    """Why a selection could not be merged into one rectangle."""
    NOT_CONNECTED = "not_connected"
    NOT_RECTANGLE = "not_rectangle"
    OVERLAPPING = "overlapping"


class LabelStripError(Exception):
    """Base class for all errors raised by labelstrip."""


class InvalidArgument(LabelStripError, ValueError):
    """Bad grid dimensions, bad strip size or an empty merge selection."""


class InvalidGeometry(LabelStripError, ValueError):
    """
    A selection failed the connectivity, area or overlap check during a merge.

    The message is meant for the end user; `reason` lets the caller branch
    without parsing it.
    """

    def __init__(self, message: str, reason: Optional[MergeFailure] = None) -> None:
        super().__init__(message)
        self.reason = reason
