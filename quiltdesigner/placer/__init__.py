"""Placer — snaps dropped squares and keeps the quilt surface collision-free.

Submodules:
  models        Quilt / Square / Fill dataclasses and the DropResult.
  geometry      Snap, clamp, AABB overlap, shapely-backed diagnostics.
  engine        Drop resolver (bounds check, fast path, nearest-free scan).
  serialization JSON conversion (square_to_dict, quilt_to_dict, ...).
"""

from .models import Membership, Quilt, Fill, Square, DropResult
from .engine import resolve_drop, find_nearest_free_position
from .serialization import quilt_to_dict, square_to_dict, drop_result_to_dict
from .geometry import (
    snap, clamp, fits_in_surface, boxes_overlap, overlaps_any,
    overlapping_pairs, coverage_ratio,
)

__all__ = [
    # Models
    "Membership", "Quilt", "Fill", "Square", "DropResult",
    # Engine
    "resolve_drop", "find_nearest_free_position",
    # Serialization
    "quilt_to_dict", "square_to_dict", "drop_result_to_dict",
    # Geometry
    "snap", "clamp", "fits_in_surface", "boxes_overlap", "overlaps_any",
    "overlapping_pairs", "coverage_ratio",
]
