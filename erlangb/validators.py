from __future__ import annotations

import math
from typing import Optional

from .errors import InvalidArgumentError

OCCUPANCY_EPS = 1e-12


def validate_erlang_inputs(v, a, b, m):
    """Validate the known Erlang B parameters.

    Parameters
    ----------
    v : int or None
        Number of channels.
    a : float or None
        Offered traffic in erlangs.
    b : float or None
        Blocking probability.
    m : float or None
        Mean number of busy channels.

    ``None`` marks a parameter the caller did not supply; it is skipped.

    Returns
    -------
    list of str
        Error messages for parameters outside allowed bounds.
    """
    errors = []

    # Channels
    if v is not None:
        if not math.isfinite(v):
            errors.append("Channels v must be a finite number.")
        elif v != int(v):
            errors.append("Channels v must be a whole number.")
        elif v < 1:
            errors.append("Channels v must be an integer >= 1.")

    # Traffic
    if a is not None and not (math.isfinite(a) and a >= 0):
        errors.append("Traffic intensity a must be a finite number >= 0.")

    # Blocking
    if b is not None and not 0 <= b < 1:
        errors.append("Blocking probability B must lie in [0, 1).")

    # Occupancy
    if m is not None:
        if not (math.isfinite(m) and m >= 0):
            errors.append("Mean busy channels m must be a finite number >= 0.")
        elif v is not None and m >= v - OCCUPANCY_EPS:
            errors.append("Mean busy channels m must be strictly less than channels v.")

    return errors


def parse_channels(text: Optional[str]) -> Optional[int]:
    """Parse a channel count typed into a form; blank input means ``None``."""

    if text is None or not text.strip():
        return None
    try:
        return int(text.strip())
    except ValueError:
        raise InvalidArgumentError(f"Channels must be a whole number, got {text!r}.")


def parse_real(text: Optional[str]) -> Optional[float]:
    """Parse a decimal typed into a form, accepting ``,`` as separator."""

    if text is None or not text.strip():
        return None
    try:
        value = float(text.strip().replace(",", "."))
    except ValueError:
        raise InvalidArgumentError(f"Invalid number {text!r}.")
    if not math.isfinite(value):
        raise InvalidArgumentError(f"Number must be finite, got {text!r}.")
    return value
