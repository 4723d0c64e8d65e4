"""Placer dataclasses — quilt, squares, and drop results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Membership(str, Enum):
    """Where a square currently lives."""

    IN_SURFACE = "surface"      # subject to bounds + overlap constraints
    IN_HOLDING = "holding"      # unconstrained overflow row below the surface


@dataclass
class Quilt:
    """Quilt dimensions plus a uniform buffer margin on all four sides.

    Square positions are measured from the top-left of the *working
    surface* (the quilt inflated by the buffer), not of the quilt itself.
    """

    width: float
    height: float
    buffer: float = 0.0

    @property
    def total_width(self) -> float:
        return self.width + 2 * self.buffer

    @property
    def total_height(self) -> float:
        return self.height + 2 * self.buffer


@dataclass
class Fill:
    """Visual fill of a square.

    ``color`` is always assigned at creation; ``image`` (a displayable
    data URL) takes precedence when present.
    """

    color: str
    image: str | None = None

    @property
    def content(self) -> str:
        return self.image or self.color

    @property
    def is_image(self) -> bool:
        return self.image is not None


@dataclass
class Square:
    id: str
    width: float
    height: float
    x: float
    y: float
    membership: Membership
    fill: Fill
    name: str = ""

    @property
    def in_surface(self) -> bool:
        return self.membership is Membership.IN_SURFACE


@dataclass
class DropResult:
    """Resolved position for a dropped square."""

    x: float
    y: float
    membership: Membership
    searched: bool = False      # fallback grid scan ran
    degenerate: bool = False    # surface full; position overlaps something
