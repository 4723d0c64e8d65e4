"""Low-level geometry helpers for the placer."""

from __future__ import annotations

import math
from collections.abc import Iterable

from shapely.geometry import box as shapely_box
from shapely.ops import unary_union

from quiltdesigner.config import QUILT_RULES

from .models import Quilt, Square


def snap(v: float, step: float = QUILT_RULES.grid_step_in) -> float:
    """Round *v* to the nearest multiple of *step*, halves rounding up.

    ``round()`` would round halves to even (``snap(0.25) == 0.0``);
    the grid rounds them towards +inf so ``snap(0.25) == 0.5``.
    """
    return math.floor(v / step + 0.5) * step


def clamp(v: float, lo: float, hi: float) -> float:
    """Clamp *v* into ``[lo, hi]``; *lo* wins when the range is empty."""
    return max(lo, min(v, hi))


def max_origin(quilt: Quilt, width: float, height: float) -> tuple[float, float]:
    """Largest (x, y) a ``width × height`` box can take inside the surface."""
    return (quilt.total_width - width, quilt.total_height - height)


def fits_in_surface(
    x: float, y: float, width: float, height: float, quilt: Quilt,
) -> bool:
    """True if the box at (x, y) lies inside the working surface.

    Both edges are inclusive: a square flush with the right or bottom
    edge is in-surface.
    """
    max_x, max_y = max_origin(quilt, width, height)
    return 0 <= x <= max_x and 0 <= y <= max_y


def boxes_overlap(
    ax: float, ay: float, aw: float, ah: float,
    bx: float, by: float, bw: float, bh: float,
) -> bool:
    """Strict interior intersection of two AABBs.  Shared edges are fine."""
    return not (
        ax + aw <= bx
        or bx + bw <= ax
        or ay + ah <= by
        or by + bh <= ay
    )


def overlaps_any(
    x: float, y: float, width: float, height: float,
    others: Iterable[Square],
    exclude_id: str | None = None,
) -> bool:
    """True if the box at (x, y) overlaps any square in *others*."""
    for o in others:
        if o.id == exclude_id:
            continue
        if boxes_overlap(x, y, width, height, o.x, o.y, o.width, o.height):
            return True
    return False


# ── Shapely-backed diagnostics ─────────────────────────────────────


def square_box(sq: Square):
    """Shapely polygon of a square's footprint."""
    return shapely_box(sq.x, sq.y, sq.x + sq.width, sq.y + sq.height)


def surface_box(quilt: Quilt):
    """Shapely polygon of the whole working surface."""
    return shapely_box(0, 0, quilt.total_width, quilt.total_height)


def overlapping_pairs(squares: list[Square]) -> list[tuple[str, str]]:
    """Pairs of square ids whose footprints share interior area.

    Touching squares (zero-area intersection) are not reported.
    """
    boxes = [(sq.id, square_box(sq)) for sq in squares]
    pairs: list[tuple[str, str]] = []
    for i in range(len(boxes)):
        id_a, box_a = boxes[i]
        for j in range(i + 1, len(boxes)):
            id_b, box_b = boxes[j]
            if box_a.intersection(box_b).area > 0:
                pairs.append((id_a, id_b))
    return pairs


def coverage_ratio(squares: list[Square], quilt: Quilt) -> float:
    """Fraction of the working surface covered by *squares* (0..1).

    Overlapping areas count once; area outside the surface is ignored.
    """
    surface = surface_box(quilt)
    if surface.area <= 0 or not squares:
        return 0.0
    covered = unary_union([square_box(sq) for sq in squares]).intersection(surface)
    return covered.area / surface.area
