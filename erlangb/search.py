"""Monotone search helpers shared by the Erlang B solvers.

All three helpers are pure and bounded: every loop has a hard cap, so a
call always terminates even when the target cannot be met.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def expand_bracket(
    reached: Callable[[float], bool],
    start: float,
    max_doublings: int,
    ceiling: float = 1e12,
) -> float:
    """Double ``start`` until ``reached(hi)`` holds.

    Parameters
    ----------
    reached : callable
        Predicate that becomes true once ``hi`` lies on the far side of the
        target. It must be monotone in its argument.
    start : float
        Initial upper bound.
    max_doublings : int
        Maximum number of predicate checks.
    ceiling : float, optional
        Expansion stops as soon as the bound exceeds this value.

    Returns
    -------
    float
        The expanded bound. If the caps were hit first the returned value has
        not been checked, so callers that need a guarantee must test it again.
    """

    hi = float(start)
    for _ in range(max_doublings):
        if reached(hi):
            return hi
        hi *= 2.0
        if hi > ceiling:
            break
    logger.debug("bracket expansion stopped at hi=%g without confirmation", hi)
    return hi


def bisect_increasing(
    func: Callable[[float], float],
    target: float,
    lo: float,
    hi: float,
    max_iter: int,
    tol: Optional[float] = None,
) -> float:
    """Bisect a non-decreasing ``func`` for ``func(x) == target`` on ``[lo, hi]``.

    With ``tol`` set, the midpoint is returned as soon as it is within
    ``tol`` of the target; otherwise exactly ``max_iter`` halvings are made.
    Exhausting the iterations is not an error: the final midpoint is the
    best available estimate.
    """

    for _ in range(max_iter):
        mid = 0.5 * (lo + hi)
        value = func(mid)
        if tol is not None and abs(value - target) < tol:
            return mid
        if value >= target:
            hi = mid
        else:
            lo = mid
    return 0.5 * (lo + hi)


def linear_threshold_scan(
    predicate: Callable[[int], bool],
    start: int,
    stop: int,
) -> Optional[int]:
    """Return the first integer in ``start..stop`` satisfying ``predicate``.

    ``stop`` is inclusive. ``None`` means the range was exhausted.
    """

    for n in range(start, stop + 1):
        if predicate(n):
            return n
    return None
