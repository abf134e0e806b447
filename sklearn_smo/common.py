"""
Kernel SVM trained by SMO:
Optimizer state, the decision function, and the interface of the pairwise
optimizer (`AbstractSMOImplementation`).
"""

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

import numpy as np

from sklearn_smo.kernels import KernelSpec, evaluate_kernel, gram_matrix


class FitStatus(NamedTuple):
    """Outcome of one training run.

    converged : bool
        True iff the last pass over all examples changed no multiplier. False
        if training stopped because `max_iter` passes were used up.

    n_iter : int
        Number of passes over the training examples.
    """
    converged: bool
    n_iter: int


class OptimizerState:
    """The Lagrange multipliers `alpha` (one per training example) and the
    `bias` of an SMO run. Created zero-initialized by `TrainingContext` and
    mutated only by `AbstractSMOImplementation.take_step`.
    """

    def __init__(self, n_samples: int):
        self.alpha = np.zeros(n_samples)
        self.bias = 0.0

    def __repr__(self):
        return 'OptimizerState(alpha={!r}, bias={!r})'.format(self.alpha,
                                                              self.bias)


class SupportVectorSet:
    """The training examples with non-zero multiplier, which is all that is
    needed for prediction.

    Attributes
    -----
    vectors : np.ndarray of shape (n_support, n_features)

    alphas : np.ndarray of shape (n_support,)
        The multiplier of each support vector, all `> tol` and `<= C`.

    labels : np.ndarray of shape (n_support,)
        The encoded label (-1.0 or +1.0) of each support vector.

    indices : np.ndarray of shape (n_support,) and dtype int
        Row index of each support vector in the training data.
    """

    def __init__(self, vectors, alphas, labels, indices):
        self.vectors = np.asarray(vectors, dtype=float)
        self.alphas = np.asarray(alphas, dtype=float)
        self.labels = np.asarray(labels, dtype=float)
        self.indices = np.asarray(indices, dtype=int)
        assert len(self.vectors) == len(self.alphas) == len(self.labels) \
            == len(self.indices)

    @classmethod
    def from_training(cls, X: np.ndarray, y: np.ndarray, alpha: np.ndarray,
                      tol: float) -> 'SupportVectorSet':
        """Keep those rows of `X` whose multiplier in `alpha` exceeds `tol`."""
        indices = np.flatnonzero(alpha > tol)
        return cls(X[indices], alpha[indices], y[indices], indices)

    def __len__(self):
        return len(self.alphas)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return all((np.array_equal(self.vectors, other.vectors),
                    np.array_equal(self.alphas, other.alphas),
                    np.array_equal(self.labels, other.labels),
                    np.array_equal(self.indices, other.indices)))

    def __repr__(self):
        return 'SupportVectorSet(n_support={}, indices={!r})'.format(
            len(self), self.indices)

    def weights(self) -> np.ndarray:
        """:return: `alpha_i * y_i` for each support vector."""
        return self.alphas * self.labels

    def decision_function(self, kernel: KernelSpec, bias: float,
                          X: np.ndarray) -> np.ndarray:
        """`f(x) = bias + sum_i(alpha_i * y_i * K(sv_i, x))` for each row `x`
        of `X`.

        :return: An array of shape `(n_samples,)`.
        """
        weights = self.weights()
        return np.array([
            bias + sum(w * evaluate_kernel(kernel, sv, x)
                       for w, sv in zip(weights, self.vectors))
            for x in X], dtype=float)


class TrainingContext:
    """State of one SMO training run, i.e. one `SMOEstimator.fit` call.

    Owns the `OptimizerState`; nothing of it is shared with other runs. After
    training, `SMOEstimator` extracts the `SupportVectorSet` and drops the
    context including its copy of the training data.

    Attributes
    -----
    X : np.ndarray of shape (n_samples, n_features)
    y : np.ndarray of shape (n_samples,)
        Labels encoded as -1.0 / +1.0.
    kernel : KernelSpec
    C : float
        Upper bound of every multiplier (box constraint).
    tol : float
        Tolerance of the KKT check and the minimal multiplier change.
    rng : np.random.RandomState
        Randomness for the choice of the second multiplier.
    gram : np.ndarray or None
        The precomputed kernel matrix, or None to evaluate on demand.
    state : OptimizerState
    """

    def __init__(self, X: np.ndarray, y: np.ndarray, kernel: KernelSpec,
                 C: float, tol: float, rng: np.random.RandomState,
                 precompute_gram: bool):
        self.X = X
        self.y = y
        self.kernel = kernel
        self.C = C
        self.tol = tol
        self.rng = rng
        self.gram: Optional[np.ndarray] = \
            gram_matrix(kernel, X) if precompute_gram else None
        self.state = OptimizerState(len(X))

    @property
    def n_samples(self) -> int:
        return len(self.y)

    def kernel_value(self, i: int, j: int) -> float:
        """:return: `K(x_i, x_j)`."""
        if self.gram is not None:
            return self.gram[i, j]
        return evaluate_kernel(self.kernel, self.X[i], self.X[j])

    def decision(self, i: int) -> float:
        """Training-time decision function `f(x_i)`, summing over the
        examples with non-zero multiplier.
        """
        alpha = self.state.alpha
        active = np.flatnonzero(alpha > 0)
        if self.gram is not None:
            column = self.gram[active, i]
        else:
            x_i = self.X[i]
            column = np.array([evaluate_kernel(self.kernel, self.X[k], x_i)
                               for k in active])
        return self.state.bias + float(
            np.dot(alpha[active] * self.y[active], column))

    def error(self, i: int) -> float:
        """:return: `E_i = f(x_i) - y_i`."""
        return self.decision(i) - self.y[i]

    def n_support(self) -> int:
        """:return: Count of multipliers currently exceeding `tol`."""
        return int(np.count_nonzero(self.state.alpha > self.tol))


class AbstractSMOImplementation(ABC):
    """The callbacks needed by `SMOEstimator.smo`; subclasses represent
    concrete variants of the pairwise optimizer, composed from the mixins in
    `sklearn_smo.concrete`.

    All callbacks are classmethods receiving the `TrainingContext` as state.
    """

    @classmethod
    def violates_kkt(cls, i: int, error_i: float,
                     context: TrainingContext) -> bool:
        """:return: True iff multiplier `i` violates the KKT conditions by more
        than `context.tol`, i.e. it is a candidate for an update.
        """
        r_i = context.y[i] * error_i
        alpha_i = context.state.alpha[i]
        return ((r_i < -context.tol and alpha_i < context.C)
                or (r_i > context.tol and alpha_i > 0))

    @classmethod
    @abstractmethod
    def select_second_index(cls, i: int, error_i: float,
                            context: TrainingContext) -> int:
        """:return: The index `j != i` of the multiplier to optimize together
        with multiplier `i`.
        """
        raise NotImplementedError

    @classmethod
    @abstractmethod
    def take_step(cls, i: int, j: int, error_i: float,
                  context: TrainingContext) -> bool:
        """Jointly optimize the multipliers `i` and `j`, updating
        `context.state`.

        :return: True iff the state was changed.
        """
        raise NotImplementedError

    @classmethod
    def end_of_pass(cls, n_iter: int, n_changed: int,
                    context: TrainingContext) -> None:
        """Called after each pass over all examples. `n_iter` counts the
        passes so far, `n_changed` the accepted updates of the last pass.
        """
        pass

    @classmethod
    def post_process(cls, status: FitStatus, context: TrainingContext
                     ) -> None:
        """Called once after the last pass, before the support vectors are
        extracted from `context`.
        """
        pass
