"""
FastAPI web server — JSON endpoints the quilt UI drives the placer through.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from quiltdesigner.capture import encode_image_fill
from quiltdesigner.config import rules_from_env
from quiltdesigner.placer import drop_result_to_dict, quilt_to_dict, square_to_dict
from quiltdesigner.session import DragProjection, QuiltSession
from quiltdesigner.validation import InvalidDimension, require_square_dimensions


log = logging.getLogger(__name__)

# ── .env loader ────────────────────────────────────────────────────

def _load_env():
    root = Path(__file__).resolve().parents[2]
    for name in (".env", ".env.local"):
        p = root / name
        if p.exists():
            for line in p.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if line and "=" in line and not line.startswith("#"):
                    k, v = line.split("=", 1)
                    k = k.strip()
                    v = v.strip().strip('"').strip("'")
                    if k and k not in os.environ:
                        os.environ[k] = v

_load_env()

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="Quilt Designer")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Session state (persists across requests) ───────────────────────

_session = QuiltSession(rules=rules_from_env())


# ── Models ─────────────────────────────────────────────────────────

class QuiltConfigRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    width: float
    height: float
    buffer: float = 0.0


class CreateSquareRequest(BaseModel):
    width: float | None = None         # defaults to QuiltRules.default_square_in
    height: float | None = None
    name: str = ""
    image_base64: str | None = None     # raw base64 or a data: URL


class ResizeSquareRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    width: float
    height: float


class PositionRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float


class DragStartRequest(BaseModel):
    square_id: str


# ── Helpers ────────────────────────────────────────────────────────

def _state_dict(sess: QuiltSession) -> dict:
    return {
        "quilt": quilt_to_dict(sess.quilt),
        "surface": [square_to_dict(s) for s in sess.surface_squares()],
        "holding": [square_to_dict(s) for s in sess.holding_squares()],
        "coverage": round(sess.coverage(), 4),
        "pixels_per_inch": sess.rules.pixels_per_inch,
    }


def _drag_dict(d: DragProjection) -> dict:
    return {
        "square_id": d.square_id,
        "x": d.x,
        "y": d.y,
        "preview_x": d.preview_x,
        "preview_y": d.preview_y,
        "in_surface": d.in_surface,
    }


def _decode_image(payload: str) -> bytes:
    if payload.startswith("data:"):
        payload = payload.split(",", 1)[-1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(422, f"Image payload is not valid base64: {e}")


# ── Routes ─────────────────────────────────────────────────────────

@app.get("/api/state")
def get_state():
    """Quilt configuration, squares split by membership, and coverage."""
    return _state_dict(_session)


@app.post("/api/reset")
def reset_session():
    """Drop all squares and restore the default quilt."""
    global _session
    _session = QuiltSession(rules=rules_from_env())
    return {"status": "ok"}


@app.put("/api/quilt")
def set_quilt(req: QuiltConfigRequest):
    try:
        _session.set_quilt_config(req.width, req.height, req.buffer)
    except InvalidDimension as e:
        raise HTTPException(422, e.errors)
    return _state_dict(_session)


@app.post("/api/squares")
def create_square(req: CreateSquareRequest):
    """Create a square in the holding row, optionally with a photo fill."""
    width = req.width if req.width is not None else _session.rules.default_square_in
    height = req.height if req.height is not None else _session.rules.default_square_in
    try:
        require_square_dimensions(width, height)
    except InvalidDimension as e:
        raise HTTPException(422, e.errors)

    image = None
    if req.image_base64:
        try:
            image = encode_image_fill(
                _decode_image(req.image_base64), width, height)
        except ValueError as e:
            raise HTTPException(422, str(e))

    sq = _session.create_square(image, width, height, name=req.name)
    return square_to_dict(sq)


@app.patch("/api/squares/{square_id}")
def resize_square(square_id: str, req: ResizeSquareRequest):
    """Resize in place.  Does NOT re-run overlap resolution."""
    try:
        _session.update_dimensions(square_id, req.width, req.height)
    except InvalidDimension as e:
        raise HTTPException(422, e.errors)
    sq = _session.get(square_id)
    if sq is None:
        return {"status": "ignored"}
    return {"status": "ok", "square": square_to_dict(sq)}


@app.delete("/api/squares/{square_id}")
def delete_square(square_id: str):
    known = _session.get(square_id) is not None
    _session.remove_square(square_id)
    return {"status": "ok" if known else "ignored"}


@app.post("/api/squares/{square_id}/drop")
def drop_square(square_id: str, req: PositionRequest):
    """Resolve a drop at (x, y) inches and commit it."""
    result = _session.resolve_drop(square_id, req.x, req.y)
    if result is None:
        return {"status": "ignored"}
    return {"status": "ok", "result": drop_result_to_dict(result)}


@app.post("/api/drag/start")
def drag_start(req: DragStartRequest):
    drag = _session.begin_drag(req.square_id)
    if drag is None:
        return {"status": "ignored"}
    return {"status": "ok", "drag": _drag_dict(drag)}


@app.post("/api/drag/move")
def drag_move(req: PositionRequest):
    drag = _session.move_drag(req.x, req.y)
    if drag is None:
        return {"status": "ignored"}
    return {"status": "ok", "drag": _drag_dict(drag)}


@app.post("/api/drag/end")
def drag_end():
    result = _session.end_drag()
    if result is None:
        return {"status": "ignored"}
    return {"status": "ok", "result": drop_result_to_dict(result)}


@app.post("/api/drag/cancel")
def drag_cancel():
    _session.cancel_drag()
    return {"status": "ok"}


@app.get("/api/diagnostics/overlaps")
def get_overlaps():
    """Placed squares that overlap, e.g. after a resize."""
    return {
        "pairs": [list(p) for p in _session.overlapping_pairs()],
    }


# ── Entry point ────────────────────────────────────────────────────

def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("quiltdesigner.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
