"""Drop resolver — snap, bounds check, and nearest-free-cell search."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from quiltdesigner.config import QUILT_RULES

from .geometry import clamp, fits_in_surface, max_origin, overlaps_any, snap
from .models import DropResult, Membership, Quilt, Square


log = logging.getLogger(__name__)


def find_nearest_free_position(
    square: Square,
    target_x: float, target_y: float,
    others: list[Square],
    quilt: Quilt,
    *,
    grid_step: float = QUILT_RULES.grid_step_in,
) -> tuple[float, float] | None:
    """Exhaustively scan the grid for the free cell closest to the target.

    Rows are scanned top to bottom (outer ``y``), cells left to right
    (inner ``x``).  Only a strictly smaller distance replaces the best
    cell, so ties go to the first cell in scan order.

    Returns None if no cell is free for this footprint.
    """
    max_x, max_y = max_origin(quilt, square.width, square.height)

    best_pos: tuple[float, float] | None = None
    best_dist = math.inf

    y = 0.0
    while y <= max_y:
        x = 0.0
        while x <= max_x:
            if not overlaps_any(x, y, square.width, square.height,
                                others, exclude_id=square.id):
                dist = math.hypot(x - target_x, y - target_y)
                if dist < best_dist:
                    best_dist = dist
                    best_pos = (x, y)
            x += grid_step
        y += grid_step

    return best_pos


def resolve_drop(
    square: Square,
    proposed_x: float, proposed_y: float,
    others: Iterable[Square],
    quilt: Quilt,
    *,
    grid_step: float = QUILT_RULES.grid_step_in,
    holding_offset: float = QUILT_RULES.holding_offset_in,
) -> DropResult:
    """Decide where a dropped square comes to rest.

    Parameters
    ----------
    square : Square
        The dragged square (its own position is ignored; only id and
        size are used).
    proposed_x, proposed_y : float
        Drop position in inches, relative to the working surface.
    others : iterable of Square
        Squares currently in the surface.  The dragged square itself is
        skipped by id if present.
    quilt : Quilt
        Quilt and buffer configuration.

    Returns
    -------
    DropResult
        Always a committed position.  Drops outside the surface go to
        the holding row; a drop onto a fully packed surface keeps the
        clamped position and is flagged ``degenerate``.
    """
    others = [o for o in others if o.id != square.id and o.in_surface]
    max_x, max_y = max_origin(quilt, square.width, square.height)

    # ── 1. Outside the surface → holding row ───────────────────────

    if not fits_in_surface(proposed_x, proposed_y,
                           square.width, square.height, quilt):
        result = DropResult(
            x=clamp(proposed_x, 0.0, max_x),
            y=quilt.total_height + holding_offset,
            membership=Membership.IN_HOLDING,
        )
        log.info("Parked %s in holding at (%.1f, %.1f)",
                 square.id, result.x, result.y)
        return result

    # ── 2. Snap + clamp, then try the cheap path ───────────────────

    x = clamp(snap(proposed_x, grid_step), 0.0, max_x)
    y = clamp(snap(proposed_y, grid_step), 0.0, max_y)

    if not overlaps_any(x, y, square.width, square.height, others):
        log.info("Placed %s at (%.1f, %.1f)", square.id, x, y)
        return DropResult(x=x, y=y, membership=Membership.IN_SURFACE)

    # ── 3. Collision → nearest free grid cell ──────────────────────

    nearest = find_nearest_free_position(
        square, proposed_x, proposed_y, others, quilt, grid_step=grid_step,
    )
    if nearest is None:
        log.warning(
            "No free %.1f×%.1f cell for %s on the %.1f×%.1f surface; "
            "keeping overlapping position (%.1f, %.1f)",
            square.width, square.height, square.id,
            quilt.total_width, quilt.total_height, x, y,
        )
        return DropResult(
            x=x, y=y, membership=Membership.IN_SURFACE,
            searched=True, degenerate=True,
        )

    log.info("Placed %s at (%.1f, %.1f) after collision at (%.1f, %.1f)",
             square.id, nearest[0], nearest[1], x, y)
    return DropResult(
        x=nearest[0], y=nearest[1],
        membership=Membership.IN_SURFACE, searched=True,
    )
