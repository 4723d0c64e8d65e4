"""
Quilt session — the single state container for one design.

A session owns the quilt configuration, the authoritative list of
squares, and the ephemeral projection of the square currently being
dragged.  Every mutation goes through one of the methods below; the
placer itself is pure and never sees the session.

Unknown square ids are ignored (logged at DEBUG) rather than raised:
UI mutations are lenient by nature and may race a removal.
"""

from __future__ import annotations

import itertools
import logging
import math
import random
from dataclasses import dataclass

from quiltdesigner.config import QUILT_RULES, QuiltRules
from quiltdesigner.placer import (
    DropResult, Fill, Membership, Quilt, Square,
    clamp, coverage_ratio, overlapping_pairs, resolve_drop, snap,
)
from quiltdesigner.validation import (
    require_quilt_dimensions, require_square_dimensions,
)


log = logging.getLogger(__name__)


@dataclass
class DragProjection:
    """Live position of the square being dragged.

    ``x``/``y`` are the snapped pointer position (possibly outside the
    surface); ``preview_x``/``preview_y`` are clamped into the surface
    for display.  Nothing here is committed until ``end_drag``.
    """

    square_id: str
    x: float
    y: float
    preview_x: float
    preview_y: float
    in_surface: bool


class QuiltSession:
    def __init__(
        self,
        quilt: Quilt | None = None,
        *,
        rules: QuiltRules = QUILT_RULES,
        rng: random.Random | None = None,
    ) -> None:
        self.rules = rules
        self.quilt = quilt or Quilt(
            width=rules.default_quilt_width_in,
            height=rules.default_quilt_height_in,
            buffer=rules.default_buffer_in,
        )
        require_quilt_dimensions(self.quilt.width, self.quilt.height, self.quilt.buffer)
        self._squares: list[Square] = []
        self._ids = itertools.count(1)
        self._rng = rng or random.Random()
        self.drag: DragProjection | None = None

    # ── Read accessors ─────────────────────────────────────────────

    @property
    def squares(self) -> list[Square]:
        return list(self._squares)

    @property
    def total_width(self) -> float:
        return self.quilt.total_width

    @property
    def total_height(self) -> float:
        return self.quilt.total_height

    @property
    def holding_y(self) -> float:
        return self.rules.holding_y(self.total_height)

    def get(self, square_id: str) -> Square | None:
        return next((s for s in self._squares if s.id == square_id), None)

    def surface_squares(self) -> list[Square]:
        return [s for s in self._squares if s.membership is Membership.IN_SURFACE]

    def holding_squares(self) -> list[Square]:
        return [s for s in self._squares if s.membership is Membership.IN_HOLDING]

    def overlapping_pairs(self) -> list[tuple[str, str]]:
        """In-surface squares that overlap (after a resize, a full
        surface, or a shrunk quilt)."""
        return overlapping_pairs(self.surface_squares())

    def coverage(self) -> float:
        return coverage_ratio(self.surface_squares(), self.quilt)

    # ── Mutations ──────────────────────────────────────────────────

    def set_quilt_config(self, width: float, height: float, buffer: float = 0.0) -> None:
        """Replace the quilt configuration.

        Placed squares are not moved or re-resolved.  Squares in
        holding are re-anchored to the new holding row.
        """
        require_quilt_dimensions(width, height, buffer)
        self.quilt = Quilt(width=width, height=height, buffer=buffer)
        for sq in self.holding_squares():
            sq.y = self.holding_y
        log.info("Quilt set to %.1f×%.1f in, buffer %.1f in (surface %.1f×%.1f)",
                 width, height, buffer, self.total_width, self.total_height)

    def create_square(
        self,
        fill: str | None,
        width: float,
        height: float,
        name: str = "",
    ) -> Square:
        """Create a square in the holding row.

        *fill* is an image data URL or None; a palette colour is always
        drawn so the square has a fallback fill.
        """
        require_square_dimensions(width, height)
        sq = Square(
            id=f"sq_{next(self._ids)}",
            width=width,
            height=height,
            x=0.0,
            y=self.holding_y,
            membership=Membership.IN_HOLDING,
            fill=Fill(color=self._rng.choice(self.rules.palette), image=fill),
            name=name,
        )
        self._squares.append(sq)
        log.info("Created %s (%.1f×%.1f in)", sq.id, width, height)
        return sq

    def update_position(
        self, square_id: str, x: float, y: float, membership: Membership,
    ) -> None:
        sq = self.get(square_id)
        if sq is None:
            log.debug("update_position: unknown square %s", square_id)
            return
        sq.x, sq.y, sq.membership = x, y, membership

    def update_dimensions(self, square_id: str, width: float, height: float) -> None:
        """Resize a square in place.

        The square is not moved and overlap is not re-resolved, so a
        placed square may end up overlapping its neighbours; see
        ``overlapping_pairs``.
        """
        require_square_dimensions(width, height)
        sq = self.get(square_id)
        if sq is None:
            log.debug("update_dimensions: unknown square %s", square_id)
            return
        sq.width, sq.height = width, height

    def remove_square(self, square_id: str) -> None:
        before = len(self._squares)
        self._squares = [s for s in self._squares if s.id != square_id]
        if len(self._squares) == before:
            log.debug("remove_square: unknown square %s", square_id)
            return
        if self.drag is not None and self.drag.square_id == square_id:
            self.drag = None
        log.info("Removed %s", square_id)

    def resolve_drop(
        self, square_id: str, proposed_x: float, proposed_y: float,
    ) -> DropResult | None:
        """Run the placer for a drop and commit the result.

        The proposed position is snapped to the grid first, so both the
        bounds check and a holding-row x land on half-inch lines.
        Returns None (and changes nothing) for an unknown id.
        """
        sq = self.get(square_id)
        if sq is None:
            log.debug("resolve_drop: unknown square %s", square_id)
            return None
        result = resolve_drop(
            sq, self._snap(proposed_x), self._snap(proposed_y),
            self.surface_squares(), self.quilt,
            grid_step=self.rules.grid_step_in,
            holding_offset=self.rules.holding_offset_in,
        )
        self.update_position(sq.id, result.x, result.y, result.membership)
        return result

    def _snap(self, v: float) -> float:
        # Non-finite values pass through; the bounds check parks them.
        if not math.isfinite(v):
            return v
        return snap(v, self.rules.grid_step_in)

    # ── Drag projection ────────────────────────────────────────────

    def begin_drag(self, square_id: str) -> DragProjection | None:
        sq = self.get(square_id)
        if sq is None:
            log.debug("begin_drag: unknown square %s", square_id)
            return None
        self.drag = DragProjection(
            square_id=sq.id,
            x=sq.x, y=sq.y,
            preview_x=sq.x, preview_y=sq.y,
            in_surface=sq.in_surface,
        )
        return self.drag

    def move_drag(self, x: float, y: float) -> DragProjection | None:
        """Update the projection from a pointer position in inches."""
        if self.drag is None:
            return None
        sq = self.get(self.drag.square_id)
        if sq is None:
            self.drag = None
            return None
        if not (math.isfinite(x) and math.isfinite(y)):
            log.debug("move_drag: ignoring non-finite position (%s, %s)", x, y)
            return self.drag
        sx, sy = self._snap(x), self._snap(y)
        max_x = self.total_width - sq.width
        max_y = self.total_height - sq.height
        self.drag.x, self.drag.y = sx, sy
        self.drag.preview_x = clamp(sx, 0.0, max_x)
        self.drag.preview_y = clamp(sy, 0.0, max_y)
        self.drag.in_surface = 0 <= sx <= max_x and 0 <= sy <= max_y
        return self.drag

    def end_drag(self) -> DropResult | None:
        """Resolve the in-flight drag and commit it."""
        drag, self.drag = self.drag, None
        if drag is None:
            return None
        return self.resolve_drop(drag.square_id, drag.x, drag.y)

    def cancel_drag(self) -> None:
        self.drag = None
