"""Tests for `sklearn_smo.common`."""
import numpy as np
import pytest
from numpy.testing import assert_array_equal

from sklearn_smo.common import SupportVectorSet, TrainingContext, \
    AbstractSMOImplementation
from sklearn_smo.kernels import make_kernel


@pytest.fixture(params=[True, False], ids=['gram', 'on-demand'])
def context(request) -> TrainingContext:
    X = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 2.0]])
    y = np.array([-1.0, 1.0, 1.0])
    return TrainingContext(X, y, make_kernel('linear'), C=1.0, tol=1e-3,
                           rng=np.random.RandomState(0),
                           precompute_gram=request.param)


def test_support_vector_set_from_training():
    X = np.array([[0.0], [1.0], [2.0], [3.0]])
    y = np.array([-1.0, -1.0, 1.0, 1.0])
    alpha = np.array([0.0, 0.5, 1e-5, 0.5])
    svs = SupportVectorSet.from_training(X, y, alpha, tol=1e-3)
    assert len(svs) == 2
    assert_array_equal(svs.indices, [1, 3])
    assert_array_equal(svs.vectors, [[1.0], [3.0]])
    assert_array_equal(svs.weights(), [-0.5, 0.5])
    assert svs == SupportVectorSet([[1.0], [3.0]], [0.5, 0.5], [-1, 1], [1, 3])
    assert svs != SupportVectorSet([[1.0]], [0.5], [-1], [1])

    empty = SupportVectorSet.from_training(X, y, np.zeros(4), tol=1e-3)
    assert not empty
    assert empty.vectors.shape == (0, 1)


def test_support_vector_set_decision_function():
    svs = SupportVectorSet([[1.0, 0.0], [0.0, 1.0]], [2.0, 1.0], [1, -1],
                           [0, 1])
    kernel = make_kernel('linear')
    # f(x) = 0.5 + 2 * x[0] - 1 * x[1]
    assert_array_equal(
        svs.decision_function(kernel, 0.5, np.array([[0.0, 0.0],
                                                     [1.0, 1.0],
                                                     [0.0, 3.0]])),
        [0.5, 1.5, -2.5])


def test_context_initial_state(context):
    assert_array_equal(context.state.alpha, np.zeros(3))
    assert context.state.bias == 0.0
    assert context.n_samples == 3
    assert context.n_support() == 0
    # all alpha zero: f(x) = bias = 0, E_i = -y_i
    assert [context.error(i) for i in range(3)] == [1.0, -1.0, -1.0]
    assert context.kernel_value(1, 2) == 0.0
    assert context.kernel_value(2, 2) == 4.0


def test_context_decision(context):
    context.state.alpha[:] = [0.5, 0.5, 0.0]
    context.state.bias = -0.25
    # f(x) = -0.25 - 0.5 * <x0, x> + 0.5 * <x1, x>
    assert context.decision(1) == pytest.approx(0.25)
    assert context.decision(2) == pytest.approx(-0.25)
    assert context.error(1) == pytest.approx(-0.75)
    assert context.n_support() == 2


def test_violates_kkt(context):
    violates_kkt = AbstractSMOImplementation.violates_kkt
    # all alpha zero: f(x) = 0, every example lies inside the margin
    assert all(violates_kkt(i, context.error(i), context) for i in range(3))
    # y_1 * E_1 = 1 > tol: outside the margin, alpha_1 = 0 is optimal
    assert not violates_kkt(1, 1.0, context)
    # at the upper bound, it may not grow
    context.state.alpha[1] = context.C
    assert not violates_kkt(1, -1.0, context)
    # at the upper bound, but on the wrong side
    assert violates_kkt(1, 1.0, context)
    # within tolerance
    assert not violates_kkt(2, -1e-4, context)
