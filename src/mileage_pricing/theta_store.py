"""Binary coefficient file: two big-endian IEEE-754 doubles."""

from __future__ import annotations

import struct
from collections.abc import Callable
from pathlib import Path

from mileage_pricing.exceptions import ThetaFileError
from mileage_pricing.models import Theta

DEFAULT_THETA_PATH = Path("./theta")

_LAYOUT = struct.Struct(">dd")


def encode_theta(theta: Theta) -> bytes:
    return _LAYOUT.pack(theta.intercept, theta.slope)


def decode_theta(payload: bytes) -> Theta:
    """Decode the 16-byte layout: intercept in bytes 0-7, slope in bytes 8-15."""
    if len(payload) != _LAYOUT.size:
        raise ThetaFileError(
            f"Theta payload must be {_LAYOUT.size} bytes (two big endian f64 values), "
            f"got {len(payload)}."
        )
    intercept, slope = _LAYOUT.unpack(payload)
    return Theta(intercept=intercept, slope=slope)


def read_theta(path: Path) -> Theta:
    """Read a coefficient file, raising ThetaFileError on any problem."""
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise ThetaFileError(f"Theta file {path} could not be read: {exc}") from exc
    try:
        return decode_theta(payload)
    except ThetaFileError as exc:
        raise ThetaFileError(f"Theta file {path} is malformed: {exc}") from exc


def load_theta(
    path: Path | None = None,
    log: Callable[[str], None] | None = None,
) -> Theta:
    """Load coefficients, falling back to (0, 0) when the file is unusable."""
    report = log or (lambda _message: None)
    target = path if path is not None else DEFAULT_THETA_PATH
    if path is None and not target.exists():
        report(f"Default theta file {target} not found.")
        report("Setting theta to (0, 0).")
        return Theta()
    try:
        return read_theta(target)
    except ThetaFileError as exc:
        report(str(exc))
        report("Setting theta to (0, 0) due to error.")
        return Theta()


def save_theta(theta: Theta, path: Path | None = None) -> Path:
    """Write coefficients in the 16-byte layout and return the written path."""
    target = path if path is not None else DEFAULT_THETA_PATH
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(encode_theta(theta))
    except OSError as exc:
        raise ThetaFileError(f"Theta file {target} could not be written: {exc}") from exc
    return target
