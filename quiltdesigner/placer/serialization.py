"""Placer serialization — JSON-safe dicts for the HTTP layer."""

from __future__ import annotations

from .models import DropResult, Quilt, Square


def quilt_to_dict(q: Quilt) -> dict:
    return {
        "width": q.width,
        "height": q.height,
        "buffer": q.buffer,
        "total_width": q.total_width,
        "total_height": q.total_height,
    }


def square_to_dict(sq: Square) -> dict:
    """Serialize a Square to a JSON-safe dict."""
    return {
        "id": sq.id,
        "name": sq.name,
        "width": sq.width,
        "height": sq.height,
        "x": sq.x,
        "y": sq.y,
        "membership": sq.membership.value,
        "fill": {
            "color": sq.fill.color,
            **({"image": sq.fill.image} if sq.fill.image else {}),
        },
    }


def drop_result_to_dict(r: DropResult) -> dict:
    return {
        "x": r.x,
        "y": r.y,
        "membership": r.membership.value,
        "searched": r.searched,
        "degenerate": r.degenerate,
    }
