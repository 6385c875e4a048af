"""Tunable bounds for the Erlang B solvers."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from .errors import InvalidArgumentError

ENV_PREFIX = "ERLANGB_"


@dataclass(frozen=True)
class SolverSettings:
    """Iteration caps and search bounds used by :func:`erlang_calculator.solve`.

    Notes
    -----
    - ``v_max`` bounds every integer channel scan run by the dispatcher.
    - ``tol`` and ``max_iter`` only apply to the blocking inversion; the
      occupancy solver always runs ``occupancy_iterations`` halvings.
    """

    tol: float = 1e-10
    max_iter: int = 200
    v_max: int = 2000

    # bracket expansion caps
    inverse_doublings: int = 1000
    occupancy_doublings: int = 200
    bracket_ceiling: float = 1e12

    occupancy_iterations: int = 80

    def __post_init__(self):
        if self.tol <= 0:
            raise InvalidArgumentError("tol must be positive")
        for name in ("max_iter", "v_max", "inverse_doublings",
                     "occupancy_doublings", "occupancy_iterations"):
            if getattr(self, name) < 1:
                raise InvalidArgumentError(f"{name} must be at least 1")
        if self.bracket_ceiling <= 1.0:
            raise InvalidArgumentError("bracket_ceiling must exceed 1.0")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SolverSettings":
        """Build settings from ``ERLANGB_<FIELD>`` variables, e.g. ``ERLANGB_V_MAX``."""

        environ = os.environ if environ is None else environ
        overrides = {}
        for field in fields(cls):
            key = ENV_PREFIX + field.name.upper()
            raw = environ.get(key)
            if raw is None or not raw.strip():
                continue
            caster = int if field.type in ("int", int) else float
            try:
                overrides[field.name] = caster(raw.strip())
            except ValueError:
                raise InvalidArgumentError(f"{key}: invalid numeric value {raw!r}")
        return replace(DEFAULT_SETTINGS, **overrides)


DEFAULT_SETTINGS = SolverSettings()
