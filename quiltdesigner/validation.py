"""Input validation for dimensions entered by the user."""

from __future__ import annotations

import math


class InvalidDimension(ValueError):
    """Raised when a width, height or buffer is out of range."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))


def _check_positive(label: str, value: float, errors: list[str]) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        errors.append(f"{label} must be a number, got {value!r}")
    elif not math.isfinite(value):
        errors.append(f"{label} must be finite, got {value}")
    elif value <= 0:
        errors.append(f"{label} must be > 0, got {value}")


def square_dimension_errors(width: float, height: float) -> list[str]:
    """Validate a square's size. Returns error messages (empty = valid)."""
    errors: list[str] = []
    _check_positive("width", width, errors)
    _check_positive("height", height, errors)
    return errors


def quilt_dimension_errors(width: float, height: float, buffer: float) -> list[str]:
    """Validate a quilt configuration. Returns error messages (empty = valid)."""
    errors: list[str] = []
    _check_positive("quilt width", width, errors)
    _check_positive("quilt height", height, errors)
    if not isinstance(buffer, (int, float)) or isinstance(buffer, bool):
        errors.append(f"buffer must be a number, got {buffer!r}")
    elif not math.isfinite(buffer):
        errors.append(f"buffer must be finite, got {buffer}")
    elif buffer < 0:
        errors.append(f"buffer must be >= 0, got {buffer}")
    return errors


def require_square_dimensions(width: float, height: float) -> None:
    errors = square_dimension_errors(width, height)
    if errors:
        raise InvalidDimension(errors)


def require_quilt_dimensions(width: float, height: float, buffer: float) -> None:
    errors = quilt_dimension_errors(width, height, buffer)
    if errors:
        raise InvalidDimension(errors)
