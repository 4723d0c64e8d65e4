"""Image fills and camera readiness.

Turns a captured frame into a fill for a square (centre-cropped to the
square's aspect ratio, downscaled, JPEG data URL) and collapses the
browser's overlapping video readiness callbacks into one signal.
Neither helper touches the placer.
"""

from __future__ import annotations

import base64
import io
import logging
import threading

from PIL import Image, UnidentifiedImageError


log = logging.getLogger(__name__)

DEFAULT_MAX_PX = 480            # long edge of an encoded fill
DEFAULT_READY_TIMEOUT_S = 5.0
READY_EVENTS = ("loadedmetadata", "canplay", "playing")


def crop_to_aspect(img: Image.Image, width: float, height: float) -> Image.Image:
    """Centre-crop *img* to the ``width : height`` aspect ratio."""
    target = width / height
    w, h = img.size
    if w / h > target:
        new_w = max(1, round(h * target))
        left = (w - new_w) // 2
        return img.crop((left, 0, left + new_w, h))
    new_h = max(1, round(w / target))
    top = (h - new_h) // 2
    return img.crop((0, top, w, top + new_h))


def encode_image_fill(
    data: bytes,
    width: float,
    height: float,
    *,
    max_px: int = DEFAULT_MAX_PX,
    quality: int = 85,
) -> str:
    """Decode *data*, crop it to the square's shape and return a data URL.

    Raises ValueError if *data* is not a decodable image.
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Not a readable image: {e}") from e

    img = crop_to_aspect(img.convert("RGB"), width, height)
    img.thumbnail((max_px, max_px))

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    payload = base64.b64encode(buf.getvalue()).decode("ascii")
    log.debug("Encoded %dx%d fill (%d bytes)", img.width, img.height, len(payload))
    return f"data:image/jpeg;base64,{payload}"


class DeviceReadySignal:
    """One-shot "camera is usable" signal.

    Any of the readiness events, or a manual override, sets it.
    ``wait`` is bounded so a device that never reports ready turns into
    a retry prompt instead of a hang.
    """

    def __init__(self, timeout_s: float = DEFAULT_READY_TIMEOUT_S) -> None:
        self.timeout_s = timeout_s
        self.source: str | None = None
        self._event = threading.Event()

    @property
    def is_ready(self) -> bool:
        return self._event.is_set()

    def notify(self, event: str) -> bool:
        """Record a device event. Returns True if it made the device ready."""
        if event not in READY_EVENTS or self._event.is_set():
            return False
        self.source = event
        self._event.set()
        log.info("Capture device ready (%s)", event)
        return True

    def override(self) -> None:
        """User says the preview works; stop waiting."""
        if not self._event.is_set():
            self.source = "override"
            self._event.set()
            log.info("Capture device marked ready by user")

    def wait(self, timeout: float | None = None) -> bool:
        ok = self._event.wait(self.timeout_s if timeout is None else timeout)
        if not ok:
            log.warning("Capture device not ready after %.1fs",
                        self.timeout_s if timeout is None else timeout)
        return ok

    def reset(self) -> None:
        self.source = None
        self._event.clear()
