# coding: utf-8

"""Erlang B trunk calculator with Streamlit UI.

Given any two of the channel count ``v``, offered traffic ``a``, blocking
probability ``B`` and mean number of busy channels ``m``, the functions in
this module derive the remaining two under the Erlang B loss model.  They can
be used from scripts, from :mod:`erlang_cli`, or through the included
Streamlit application.

Examples
--------
>>> from erlang_calculator import erlang_b, inverse_erlang_b, solve
>>> erlang_b(0.65, 3)
0.024001  # approximate blocking probability

>>> solve({"v", "a"}, {"v": 3, "a": 0.65}).formatted()["occupancy"]
'0.634399'

The :func:`run_app` function starts a Streamlit interface for interactive use.
"""

import enum
import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from erlangb.errors import (
    InconsistentResultError,
    InvalidArgumentError,
    InvalidSelectionError,
    NotFoundError,
    UnsolvableError,
)
from erlangb.search import bisect_increasing, expand_bracket, linear_threshold_scan
from erlangb.settings import DEFAULT_SETTINGS
from erlangb.validators import OCCUPANCY_EPS, validate_erlang_inputs

logger = logging.getLogger(__name__)

LOWER_TRAFFIC = 1e-12
CARRIED_SLACK = 1e-9


def _channels(v, minimum=0):
    if not math.isfinite(v) or v != int(v):
        raise InvalidArgumentError(f"channels must be an integer, got {v}")
    v = int(v)
    if v < minimum:
        raise InvalidArgumentError(f"channels must be >= {minimum}, got {v}")
    return v


def _non_negative(value, name):
    value = float(value)
    if not (math.isfinite(value) and value >= 0):
        raise InvalidArgumentError(f"{name} must be a finite non-negative number, got {value}")
    return value


def _check_blocking(b):
    if not 0 <= b < 1:
        raise InvalidArgumentError(f"blocking probability must lie in [0, 1), got {b}")


def erlang_b(a, v):
    """Compute Erlang B blocking probability.

    Uses the recurrence ``B(0) = 1``, ``B(i) = a B(i-1) / (i + a B(i-1))``,
    which keeps every intermediate value in ``[0, 1]`` and so never
    overflows, unlike the factorial ratio.

    Parameters
    ----------
    a : float
        Offered traffic in erlangs, ``a >= 0``.
    v : int
        Number of channels, ``v >= 0``.

    Examples
    --------
    >>> erlang_b(0.65, 3)
    0.024001
    """
    a = _non_negative(a, "traffic")
    v = _channels(v)

    b = 1.0
    for i in range(1, v + 1):
        b = (a * b) / (i + a * b)

    logger.debug("Erlang B: a=%.4f, v=%d, B=%.6f", a, v, b)
    return b


def inverse_erlang_b(v, target_B, tol=1e-10, max_iter=200, max_doublings=1000, ceiling=1e12):
    """Return the offered traffic ``a`` at which ``erlang_b(a, v) == target_B``.

    Blocking grows with traffic, so the upper bound is doubled from 1.0
    until it blocks at least ``target_B`` and the bracket is then bisected.
    Running out of iterations is not an error; the final midpoint is
    returned as the best estimate.
    """
    _check_blocking(target_B)
    v = _channels(v)

    hi = expand_bracket(lambda x: erlang_b(x, v) >= target_B, 1.0, max_doublings, ceiling)
    a = bisect_increasing(
        lambda x: erlang_b(x, v), target_B, LOWER_TRAFFIC, hi, max_iter, tol=tol
    )
    logger.debug("inverse Erlang B: v=%d, B=%.6g -> a=%.6g", v, target_B, a)
    return a


def find_v_for_B(a, target_B, v_max=1000):
    """Minimum channels so blocking <= ``target_B``.

    Blocking never increases with the channel count, so the first hit of
    a scan over ``1..v_max`` is the minimum.
    """
    a = _non_negative(a, "traffic")
    _check_blocking(target_B)

    v = linear_threshold_scan(lambda n: erlang_b(a, n) <= target_B, 1, v_max)
    if v is None:
        raise NotFoundError(
            f"no channel count up to {v_max} keeps blocking <= {target_B} at a={a}"
        )
    return v


def carried_traffic(a, v):
    """Mean number of busy channels ``a (1 - B)``."""
    return a * (1.0 - erlang_b(a, v))


def solve_a_for_occupancy(v, m, max_doublings=200, iterations=80, ceiling=1e12):
    """Offered traffic that keeps on average ``m`` of ``v`` channels busy.

    Carried traffic ``a (1 - B(a, v))`` rises with ``a`` and stays below
    ``v``, so the root is bracketed by doubling and then bisected a fixed
    number of times.
    """
    v = _channels(v, minimum=1)
    m = _non_negative(m, "mean busy channels")

    def occupancy(x):
        return carried_traffic(x, v)

    hi = expand_bracket(lambda x: occupancy(x) >= m, max(1.0, m + 1.0), max_doublings, ceiling)
    if occupancy(hi) < m:
        raise UnsolvableError(
            f"no traffic keeps {m} of {v} channels busy on average (m too large?)"
        )
    a = bisect_increasing(occupancy, m, LOWER_TRAFFIC, hi, iterations)
    logger.debug("occupancy solve: v=%d, m=%.6g -> a=%.6g", v, m, a)
    return a


def find_v_for_occupancy(a, m, v_max=2000):
    """Minimum channels that carry at least ``m`` erlangs of ``a`` offered."""
    a = _non_negative(a, "traffic")
    m = _non_negative(m, "mean busy channels")
    if m > a + OCCUPANCY_EPS:
        raise InvalidArgumentError(
            f"mean busy channels {m} cannot exceed offered traffic {a}"
        )

    v = linear_threshold_scan(lambda n: carried_traffic(a, n) + CARRIED_SLACK >= m, 1, v_max)
    if v is None:
        raise NotFoundError(f"no channel count up to {v_max} carries m={m} at a={a}")
    return v


def find_v_for_blocking_and_occupancy(b, m, v_max=2000):
    """Return ``(v, a)`` for a target blocking ``b`` and occupancy ``m``.

    Offered traffic follows from ``a = m / (1 - b)``. The scan stops at the
    first ``v`` whose blocking is within ``max(1e-6, 1e-4 b)`` of ``b`` or
    below it, i.e. the minimal ``v`` meeting the target up to that slack.
    """
    _check_blocking(b)
    if abs(1.0 - b) < 1e-15:
        raise InvalidArgumentError("1 - B is too small")
    m = _non_negative(m, "mean busy channels")
    a = m / (1.0 - b)
    slack = max(1e-6, 1e-4 * b)

    def meets(n):
        blocking = erlang_b(a, n)
        return abs(blocking - b) <= slack or blocking <= b

    v = linear_threshold_scan(meets, 1, v_max)
    if v is None:
        raise NotFoundError(f"no channel count up to {v_max} matches B={b} and m={m}")
    return v, a


class Parameter(str, enum.Enum):
    """The four quantities of the loss model."""

    CHANNELS = "v"
    TRAFFIC = "a"
    BLOCKING = "b"
    OCCUPANCY = "m"

    @classmethod
    def coerce(cls, tag):
        """Accept a member or its letter in either case."""
        if isinstance(tag, str):
            tag = tag.strip().lower()
        return cls(tag)


P = Parameter


class Combination(enum.Enum):
    """Which two parameters are known."""

    CHANNELS_TRAFFIC = frozenset({P.CHANNELS, P.TRAFFIC})
    CHANNELS_BLOCKING = frozenset({P.CHANNELS, P.BLOCKING})
    CHANNELS_OCCUPANCY = frozenset({P.CHANNELS, P.OCCUPANCY})
    TRAFFIC_BLOCKING = frozenset({P.TRAFFIC, P.BLOCKING})
    TRAFFIC_OCCUPANCY = frozenset({P.TRAFFIC, P.OCCUPANCY})
    BLOCKING_OCCUPANCY = frozenset({P.BLOCKING, P.OCCUPANCY})

    @classmethod
    def from_known(cls, known):
        try:
            tags = frozenset(Parameter.coerce(k) for k in known)
        except ValueError as exc:
            raise InvalidSelectionError(str(exc))
        if len(tags) != 2:
            raise InvalidSelectionError(
                f"exactly two parameters must be known, got {len(tags)}"
            )
        return cls(tags)


@dataclass(frozen=True)
class ErlangResult:
    """All four quantities of one calculation."""

    channels: int
    traffic: float
    blocking: float
    occupancy: float
    combination: Combination

    def formatted(self):
        """Display strings: whole channels, six decimals for the rest."""
        return {
            "channels": str(int(round(self.channels))),
            "traffic": f"{self.traffic:.6f}",
            "blocking": f"{self.blocking:.6f}",
            "occupancy": f"{self.occupancy:.6f}",
        }

    def as_row(self):
        return {
            "channels": self.channels,
            "traffic": self.traffic,
            "blocking": self.blocking,
            "occupancy": self.occupancy,
        }


def _from_channels_traffic(v, a, b, m, settings):
    b = erlang_b(a, v)
    return v, a, b, a * (1.0 - b)


def _from_channels_blocking(v, a, b, m, settings):
    a = inverse_erlang_b(
        v, b, tol=settings.tol, max_iter=settings.max_iter,
        max_doublings=settings.inverse_doublings, ceiling=settings.bracket_ceiling,
    )
    return v, a, b, a * (1.0 - b)


def _from_channels_occupancy(v, a, b, m, settings):
    a = solve_a_for_occupancy(
        v, m, max_doublings=settings.occupancy_doublings,
        iterations=settings.occupancy_iterations, ceiling=settings.bracket_ceiling,
    )
    return v, a, erlang_b(a, v), m


def _from_traffic_blocking(v, a, b, m, settings):
    v = find_v_for_B(a, b, v_max=settings.v_max)
    return v, a, b, a * (1.0 - b)


def _from_traffic_occupancy(v, a, b, m, settings):
    v = find_v_for_occupancy(a, m, v_max=settings.v_max)
    b = erlang_b(a, v)
    return v, a, b, a * (1.0 - b)


def _from_blocking_occupancy(v, a, b, m, settings):
    v, a = find_v_for_blocking_and_occupancy(b, m, v_max=settings.v_max)
    b = erlang_b(a, v)
    return v, a, b, a * (1.0 - b)


_HANDLERS = {
    Combination.CHANNELS_TRAFFIC: _from_channels_traffic,
    Combination.CHANNELS_BLOCKING: _from_channels_blocking,
    Combination.CHANNELS_OCCUPANCY: _from_channels_occupancy,
    Combination.TRAFFIC_BLOCKING: _from_traffic_blocking,
    Combination.TRAFFIC_OCCUPANCY: _from_traffic_occupancy,
    Combination.BLOCKING_OCCUPANCY: _from_blocking_occupancy,
}


def solve(known, values, settings=None):
    """Derive all four quantities from two known ones.

    Parameters
    ----------
    known : iterable
        Exactly two of ``"v"``, ``"a"``, ``"b"``, ``"m"`` (or
        :class:`Parameter` members).
    values : mapping
        Value for each known tag, keyed the same way. Entries for other
        tags are ignored.
    settings : SolverSettings, optional
        Search bounds, :data:`erlangb.settings.DEFAULT_SETTINGS` by default.

    Returns
    -------
    ErlangResult

    Raises
    ------
    InvalidSelectionError
        Not exactly two parameters are known.
    InvalidArgumentError
        A known value is missing or out of range.
    NotFoundError, UnsolvableError
        The search bounds were exhausted.
    InconsistentResultError
        The derived occupancy is not strictly below the channel count.
    """
    combination = Combination.from_known(known)
    settings = settings or DEFAULT_SETTINGS

    lookup = {}
    for key, val in values.items():
        try:
            lookup[Parameter.coerce(key)] = val
        except ValueError:
            logger.debug("ignoring value for unknown parameter %r", key)
    inputs = {}
    for tag in Parameter:
        if tag not in combination.value:
            inputs[tag] = None
            continue
        if lookup.get(tag) is None:
            raise InvalidArgumentError(f"no value supplied for known parameter {tag.value!r}")
        inputs[tag] = lookup[tag]

    v, a, b, m = (inputs[tag] for tag in Parameter)
    errors = validate_erlang_inputs(v, a, b, m)
    if errors:
        raise InvalidArgumentError(" ".join(errors))
    if v is not None:
        v = int(v)

    logger.debug("solving %s with v=%s a=%s b=%s m=%s", combination.name, v, a, b, m)
    v, a, b, m = _HANDLERS[combination](v, a, b, m, settings)

    if m >= v - OCCUPANCY_EPS:
        raise InconsistentResultError(
            f"derived mean busy channels {m:.6f} is not below channels {v}"
        )
    return ErlangResult(channels=v, traffic=a, blocking=b, occupancy=m, combination=combination)


class History:
    """Results of the current session, newest first."""

    COLUMNS = ["channels", "traffic", "blocking", "occupancy"]

    def __init__(self):
        self._results = []

    def record(self, result):
        self._results.insert(0, result)
        return result

    def clear(self):
        self._results.clear()

    def __len__(self):
        return len(self._results)

    def __iter__(self):
        return iter(self._results)

    def to_frame(self):
        return pd.DataFrame([r.as_row() for r in self._results], columns=self.COLUMNS)


class TABLES:
    """Trunk-sizing sensitivity tables."""

    @staticmethod
    def blocking_vs_traffic(traffic_range, channels):
        rows = []
        for a in traffic_range:
            b = erlang_b(a, channels)
            rows.append({'traffic': float(a), 'blocking': b, 'occupancy': a * (1.0 - b)})
        return pd.DataFrame(rows)

    @staticmethod
    def channels_vs_traffic(traffic_range, target_blocking, v_max=DEFAULT_SETTINGS.v_max):
        rows = []
        for a in traffic_range:
            v = find_v_for_B(a, target_blocking, v_max=v_max)
            rows.append({'traffic': float(a), 'channels': v, 'blocking': erlang_b(a, v)})
        return pd.DataFrame(rows)


DEFAULTS = {"v": "3", "a": "0.65", "b": "", "m": ""}
LABELS = {
    "v": "Channels (v)",
    "a": "Traffic intensity, erlangs (a)",
    "b": "Blocking probability (B)",
    "m": "Mean busy channels (m)",
}


def run_app():
    """Launch Streamlit UI with the two-of-four form and session history."""
    import streamlit as st

    from erlangb.errors import ErlangError
    from erlangb.validators import parse_channels, parse_real

    st.title("Erlang B Calculator")
    if "history" not in st.session_state:
        st.session_state.history = History()
    history = st.session_state.history

    st.sidebar.header("Known parameters")
    active = []
    texts = {}
    for tag in ("v", "a", "b", "m"):
        checked = st.sidebar.checkbox(
            f"Use {LABELS[tag]}", value=tag in ("v", "a"), key=f"use_{tag}"
        )
        texts[tag] = st.sidebar.text_input(
            LABELS[tag], value=DEFAULTS[tag], disabled=not checked, key=f"entry_{tag}"
        )
        if checked:
            active.append(tag)

    if st.sidebar.button("Reset"):
        history.clear()
        for tag in DEFAULTS:
            st.session_state.pop(f"entry_{tag}", None)
            st.session_state.pop(f"use_{tag}", None)
        st.rerun()

    if st.sidebar.button("Compute"):
        try:
            values = {
                "v": parse_channels(texts["v"]),
                "a": parse_real(texts["a"]),
                "b": parse_real(texts["b"]),
                "m": parse_real(texts["m"]),
            }
            result = history.record(solve(active, {t: values[t] for t in active}))
        except ErlangError as exc:
            st.error(f"Error: {exc}")
        else:
            shown = result.formatted()
            st.write("### Results")
            st.write(f"Channels: {shown['channels']}")
            st.write(f"Traffic intensity: {shown['traffic']}")
            st.write(f"Blocking: {shown['blocking']}")
            st.write(f"Busy channels: {shown['occupancy']}")

    if len(history):
        st.write("### History")
        st.dataframe(history.to_frame())

    st.sidebar.header("Sensitivity Analysis")
    channels = st.sidebar.number_input("Channels", value=3, min_value=1, step=1)
    sens_start = st.sidebar.number_input("Traffic Range Start", value=0.1, min_value=0.0)
    sens_end = st.sidebar.number_input("Traffic Range End", value=5.0, min_value=0.0)
    sens_points = st.sidebar.number_input("Points", min_value=5, value=20, step=1)
    if st.sidebar.button("Run Sensitivity"):
        tf_range = np.linspace(sens_start, sens_end, int(sens_points))
        df = TABLES.blocking_vs_traffic(tf_range, int(channels))
        st.line_chart(df.set_index("traffic")[["blocking"]])


if __name__ == "__main__":
    run_app()
