import logging
import math

import pytest
from scipy.special import factorial

from erlang_calculator import (
    erlang_b,
    find_v_for_B,
    find_v_for_blocking_and_occupancy,
    find_v_for_occupancy,
    inverse_erlang_b,
    solve_a_for_occupancy,
)
from erlangb.errors import InvalidArgumentError, NotFoundError, UnsolvableError


def _factorial_erlang_b(a, v):
    terms = [(a ** k) / factorial(k) for k in range(v + 1)]
    return terms[-1] / sum(terms)


def test_erlang_b_basic():
    assert abs(erlang_b(5, 10) - 0.01838457) < 1e-6


def test_erlang_b_three_trunks():
    assert erlang_b(0.65, 3) == pytest.approx(0.024001, abs=1e-6)


@pytest.mark.parametrize("a, v", [(0.5, 1), (2.0, 4), (7.5, 12), (30.0, 25)])
def test_erlang_b_matches_factorial_formula(a, v):
    assert erlang_b(a, v) == pytest.approx(_factorial_erlang_b(a, v), rel=1e-9)


def test_erlang_b_large_inputs_stay_finite():
    b = erlang_b(5000.0, 5000)
    assert 0.0 < b < 1.0
    assert not math.isnan(b)


def test_erlang_b_boundaries():
    assert erlang_b(3.2, 0) == 1.0
    assert erlang_b(0.0, 0) == 1.0
    assert erlang_b(0.0, 7) == 0.0


def test_erlang_b_in_unit_interval():
    for v in range(1, 30):
        for a in (0.01, 0.5, 3.0, 40.0):
            assert 0.0 <= erlang_b(a, v) < 1.0


def test_erlang_b_monotonic():
    traffic = [0.1, 0.5, 1.0, 4.0, 9.0, 50.0]
    for v in (1, 3, 10):
        values = [erlang_b(a, v) for a in traffic]
        assert values == sorted(values)
    for a in (0.3, 5.0, 20.0):
        values = [erlang_b(a, v) for v in range(0, 40)]
        assert values == sorted(values, reverse=True)


@pytest.mark.parametrize("a, v", [(-0.1, 3), (1.0, -1), (1.0, 2.5)])
def test_erlang_b_rejects_invalid(a, v):
    with pytest.raises(InvalidArgumentError):
        erlang_b(a, v)


def test_erlang_b_accepts_integral_float_channels():
    assert erlang_b(0.65, 3.0) == erlang_b(0.65, 3)


@pytest.mark.parametrize("v", [1, 3, 10, 50, 100])
@pytest.mark.parametrize("a", [0.05, 1.0, 8.0, 60.0, 300.0, 500.0])
def test_inverse_erlang_b_recovers_traffic(a, v):
    b = erlang_b(a, v)
    recovered = inverse_erlang_b(v, b, tol=b * 1e-9)
    assert erlang_b(recovered, v) == pytest.approx(b, rel=1e-6)
    assert recovered == pytest.approx(a, rel=1e-4)


@pytest.mark.parametrize("v", [1, 3, 10, 50])
def test_inverse_erlang_b_recovers_light_traffic(v):
    b = erlang_b(0.01, v)
    recovered = inverse_erlang_b(v, b, tol=b * 1e-9)
    assert recovered == pytest.approx(0.01, rel=1e-4)


def test_inverse_erlang_b_heavy_traffic_default_tolerance():
    b = erlang_b(500.0, 100)
    assert b > 0.5
    assert inverse_erlang_b(100, b) == pytest.approx(500.0, rel=1e-6)


def test_inverse_erlang_b_three_trunks():
    a = inverse_erlang_b(3, 0.024001, tol=1e-6)
    assert a == pytest.approx(0.65, abs=0.01)


def test_inverse_erlang_b_returns_best_effort_on_exhaustion():
    a = inverse_erlang_b(5, 0.2, tol=1e-300, max_iter=3)
    assert a > 0


@pytest.mark.parametrize("b", [-0.1, 1.0, 1.5])
def test_inverse_erlang_b_rejects_blocking_out_of_range(b):
    with pytest.raises(InvalidArgumentError):
        inverse_erlang_b(3, b)


def test_find_v_for_B_is_minimal():
    a, target = 10.0, 0.01
    v = find_v_for_B(a, target)
    assert erlang_b(a, v) <= target
    assert erlang_b(a, v - 1) > target


@pytest.mark.parametrize("a", [0.65, 4.0, 25.0])
@pytest.mark.parametrize("v0", [2, 5, 17])
def test_find_v_for_B_never_exceeds_source_channels(a, v0):
    assert find_v_for_B(a, erlang_b(a, v0)) <= v0


def test_find_v_for_B_zero_traffic():
    assert find_v_for_B(0.0, 0.0) == 1


def test_find_v_for_B_zero_target_terminates():
    with pytest.raises(NotFoundError):
        find_v_for_B(5.0, 0.0, v_max=50)


def test_find_v_for_B_respects_v_max():
    with pytest.raises(NotFoundError):
        find_v_for_B(100.0, 0.001, v_max=10)


@pytest.mark.parametrize("a, b", [(-1.0, 0.1), (1.0, 1.0), (1.0, -0.2)])
def test_find_v_for_B_rejects_invalid(a, b):
    with pytest.raises(InvalidArgumentError):
        find_v_for_B(a, b)


@pytest.mark.parametrize("v, m", [(1, 0.3), (3, 0.618), (10, 7.5), (50, 45.0)])
def test_solve_a_for_occupancy(v, m):
    a = solve_a_for_occupancy(v, m)
    assert a * (1 - erlang_b(a, v)) == pytest.approx(m, rel=1e-9)


def test_solve_a_for_occupancy_unreachable():
    with pytest.raises(UnsolvableError):
        solve_a_for_occupancy(2, 2.5)


def test_solve_a_for_occupancy_rejects_invalid():
    with pytest.raises(InvalidArgumentError):
        solve_a_for_occupancy(0, 0.5)
    with pytest.raises(InvalidArgumentError):
        solve_a_for_occupancy(3, -0.5)


def test_find_v_for_occupancy():
    v = find_v_for_occupancy(0.65, 0.6)
    assert v == 3
    assert 0.65 * (1 - erlang_b(0.65, 2)) < 0.6


def test_find_v_for_occupancy_rejects_m_above_a():
    with pytest.raises(InvalidArgumentError):
        find_v_for_occupancy(1.0, 2.0)


def test_find_v_for_occupancy_not_found():
    with pytest.raises(NotFoundError):
        find_v_for_occupancy(20.0, 19.9, v_max=5)


def test_find_v_for_blocking_and_occupancy_first_below():
    v, a = find_v_for_blocking_and_occupancy(0.05, 0.618)
    assert a == pytest.approx(0.618 / 0.95)
    assert v == 3
    assert erlang_b(a, v) <= 0.05
    assert erlang_b(a, v - 1) > 0.05


def test_find_v_for_blocking_and_occupancy_accepts_close_match_above_target():
    a = 4.0
    b_exact = erlang_b(a, 6)
    target = b_exact - 0.5e-4 * b_exact
    v, _ = find_v_for_blocking_and_occupancy(target, a * (1 - target))
    assert v == 6


def test_find_v_for_blocking_and_occupancy_rejects_invalid():
    with pytest.raises(InvalidArgumentError):
        find_v_for_blocking_and_occupancy(1.0, 0.5)
    with pytest.raises(InvalidArgumentError):
        find_v_for_blocking_and_occupancy(0.1, -1.0)


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), -float("inf")])
def test_solvers_reject_non_finite_inputs(bad):
    with pytest.raises(InvalidArgumentError):
        erlang_b(bad, 3)
    with pytest.raises(InvalidArgumentError):
        erlang_b(1.0, bad)
    with pytest.raises(InvalidArgumentError):
        inverse_erlang_b(3, bad)
    with pytest.raises(InvalidArgumentError):
        find_v_for_B(bad, 0.01)
    with pytest.raises(InvalidArgumentError):
        solve_a_for_occupancy(3, bad)
    with pytest.raises(InvalidArgumentError):
        find_v_for_occupancy(bad, 0.5)
    with pytest.raises(InvalidArgumentError):
        find_v_for_occupancy(1.0, bad)
    with pytest.raises(InvalidArgumentError):
        find_v_for_blocking_and_occupancy(0.1, bad)


def test_erlang_b_logs_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="erlang_calculator"):
        erlang_b(0.65, 3)
    assert "Erlang B: a=0.6500, v=3, B=0.024001" in caplog.text
