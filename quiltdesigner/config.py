"""Shared constants for the quilt designer.

Both the **placer** (which snaps and searches on a half-inch grid) and
the **session** (which parks new squares in the holding area) read
their parameters from this single source of truth.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuiltRules:
    """Grid, holding-area and default-quilt parameters.

    All distances are in inches.
    """

    grid_step_in: float = 0.5
    """Snap resolution.  Resting squares sit on multiples of this."""

    holding_offset_in: float = 2.0
    """Gap between the bottom of the working surface and the holding row."""

    default_quilt_width_in: float = 60.0
    default_quilt_height_in: float = 48.0
    default_buffer_in: float = 0.0

    default_square_in: float = 12.0
    """Size offered for a new square when the UI does not specify one."""

    pixels_per_inch: int = 20
    """Fixed UI scale; the placer itself never sees pixels."""

    palette: tuple[str, ...] = (
        "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
        "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
    )

    # ── Derived helpers ────────────────────────────────────────────

    def holding_y(self, total_height: float) -> float:
        """Y coordinate of the holding row for a surface of *total_height*."""
        return total_height + self.holding_offset_in


def _env_float(name: str, default: float, *, allow_zero: bool = False) -> float:
    """Read a finite, positive float (or non-negative with *allow_zero*).

    Anything else falls back to *default* with a warning.
    """
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning("Ignoring %s=%r: not a number", name, raw)
        return default
    if not math.isfinite(value) or value < 0 or (value == 0 and not allow_zero):
        log.warning("Ignoring %s=%r: out of range", name, raw)
        return default
    return value


def rules_from_env(base: QuiltRules | None = None) -> QuiltRules:
    """Return *base* with default quilt dimensions overridden from the
    ``QUILT_DEFAULT_WIDTH`` / ``QUILT_DEFAULT_HEIGHT`` /
    ``QUILT_DEFAULT_BUFFER`` environment variables, when set."""
    base = base or QUILT_RULES
    return QuiltRules(
        grid_step_in=base.grid_step_in,
        holding_offset_in=base.holding_offset_in,
        default_quilt_width_in=_env_float("QUILT_DEFAULT_WIDTH", base.default_quilt_width_in),
        default_quilt_height_in=_env_float("QUILT_DEFAULT_HEIGHT", base.default_quilt_height_in),
        default_buffer_in=_env_float("QUILT_DEFAULT_BUFFER", base.default_buffer_in,
                                     allow_zero=True),
        default_square_in=base.default_square_in,
        pixels_per_inch=base.pixels_per_inch,
        palette=base.palette,
    )


# Module-level singleton, importable everywhere.
QUILT_RULES = QuiltRules()
