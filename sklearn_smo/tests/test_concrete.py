"""Tests for the pairwise optimizer building blocks of
`sklearn_smo.concrete`."""
import numpy as np
import pytest
from numpy.testing import assert_array_almost_equal, assert_array_equal

from sklearn_smo.common import TrainingContext
from sklearn_smo.concrete import box_bounds, clip, select_bias, \
    PlattPairUpdate, RandomSecondIndex, MaxErrorSecondIndex
from sklearn_smo.kernels import make_kernel


def make_context(X, y, C=10.0, random_state=0) -> TrainingContext:
    return TrainingContext(np.asarray(X, dtype=float),
                           np.asarray(y, dtype=float),
                           make_kernel('linear'), C=C, tol=1e-3,
                           rng=np.random.RandomState(random_state),
                           precompute_gram=True)


def test_box_bounds():
    assert box_bounds(0.3, 0.4, True, 1.0) == pytest.approx((0.0, 0.7))
    assert box_bounds(0.8, 0.6, True, 1.0) == pytest.approx((0.4, 1.0))
    assert box_bounds(0.3, 0.4, False, 1.0) == pytest.approx((0.1, 1.0))
    assert box_bounds(0.6, 0.2, False, 1.0) == pytest.approx((0.0, 0.6))
    # both at zero, equal labels: nothing to trade
    assert box_bounds(0.0, 0.0, True, 1.0) == (0.0, 0.0)


def test_clip():
    assert clip(0.5, 0.0, 1.0) == 0.5
    assert clip(-0.5, 0.0, 1.0) == 0.0
    assert clip(1.5, 0.0, 1.0) == 1.0


def test_select_bias():
    assert select_bias(1.0, 2.0, alpha_i=0.5, alpha_j=0.0, C=1.0) == 1.0
    assert select_bias(1.0, 2.0, alpha_i=0.0, alpha_j=0.5, C=1.0) == 2.0
    assert select_bias(1.0, 2.0, alpha_i=0.5, alpha_j=0.5, C=1.0) == 1.0
    assert select_bias(1.0, 2.0, alpha_i=1.0, alpha_j=0.0, C=1.0) == 1.5


def test_take_step_two_points():
    """Optimal solution of two points at -1 and 1 is `f(x) = x`."""
    context = make_context([[-1.0], [1.0]], [-1, 1])
    assert PlattPairUpdate.take_step(0, 1, context.error(0), context)
    assert_array_almost_equal(context.state.alpha, [0.5, 0.5])
    assert context.state.bias == pytest.approx(0.0)
    assert np.dot(context.state.alpha, context.y) == pytest.approx(0.0)
    assert context.decision(0) == pytest.approx(-1.0)
    assert context.decision(1) == pytest.approx(1.0)

    # optimum reached, no further change
    assert not PlattPairUpdate.take_step(0, 1, context.error(0), context)
    assert_array_almost_equal(context.state.alpha, [0.5, 0.5])


def test_take_step_clipped():
    context = make_context([[-1.0], [1.0]], [-1, 1], C=0.1)
    assert PlattPairUpdate.take_step(0, 1, context.error(0), context)
    assert_array_almost_equal(context.state.alpha, [0.1, 0.1])
    # both multipliers at the bound: mean of both bias candidates
    assert context.state.bias == pytest.approx(0.0)


def test_take_step_rejected():
    # same example
    context = make_context([[-1.0], [1.0]], [-1, 1])
    assert not PlattPairUpdate.take_step(1, 1, context.error(1), context)
    # empty segment, L == H
    context = make_context([[-1.0], [1.0]], [1, 1])
    assert not PlattPairUpdate.take_step(0, 1, context.error(0), context)
    # identical points, eta == 0
    context = make_context([[1.0], [1.0]], [-1, 1])
    assert not PlattPairUpdate.take_step(0, 1, context.error(0), context)
    assert_array_equal(context.state.alpha, [0.0, 0.0])
    assert context.state.bias == 0.0


def test_random_second_index():
    context = make_context(np.arange(5).reshape(-1, 1), [-1, -1, 1, 1, 1])
    chosen = {RandomSecondIndex.select_second_index(2, 0.0, context)
              for _ in range(200)}
    assert chosen == {0, 1, 3, 4}

    # deterministic with a fixed seed
    draws = [[RandomSecondIndex.select_second_index(i, 0.0, ctx)
              for i in range(5)]
             for ctx in (make_context([[0.0]] * 5, [-1, 1, 1, 1, 1], 10.0, 7)
                         for _ in range(2))]
    assert draws[0] == draws[1]


def test_max_error_second_index():
    context = make_context([[0.0], [1.0], [2.0], [3.0]], [-1, -1, 1, 1],
                           C=1.0)
    context.state.alpha[:] = [0.5, 0.5, 0.5, 0.0]
    # f(x) = 0.5 * x, so E = [1.0, 1.5, 0.0, 0.5]
    assert context.error(1) == pytest.approx(1.5)
    assert MaxErrorSecondIndex.select_second_index(3, 0.5, context) == 1
    assert MaxErrorSecondIndex.select_second_index(1, 1.5, context) == 2

    # no unbound multiplier besides i: random fallback
    context.state.alpha[:] = [0.0, 1.0, 0.5, 0.0]
    for _ in range(20):
        assert MaxErrorSecondIndex.select_second_index(2, 0.0, context) != 2
