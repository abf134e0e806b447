"""
Kernel SVM trained by SMO:
Building blocks of the pairwise optimizer, to be composed into an
`AbstractSMOImplementation` (see `sklearn_smo.predefined`).

Implemented as Mixins overriding the classmethods of
`AbstractSMOImplementation`.
"""

from typing import Tuple

import numpy as np

from sklearn_smo.common import AbstractSMOImplementation, TrainingContext


def box_bounds(alpha_i: float, alpha_j: float, same_label: bool, C: float
               ) -> Tuple[float, float]:
    """Bounds `(L, H)` for the new value of `alpha_j`, such that both
    multipliers stay in `[0, C]` while `y_i*alpha_i + y_j*alpha_j` stays
    constant.
    """
    if same_label:
        return max(0.0, alpha_i + alpha_j - C), min(C, alpha_i + alpha_j)
    return max(0.0, alpha_j - alpha_i), min(C, C + alpha_j - alpha_i)


def clip(value: float, lower: float, upper: float) -> float:
    """:return: `value` limited to the interval `[lower, upper]`."""
    return min(max(value, lower), upper)


def select_bias(b1: float, b2: float, alpha_i: float, alpha_j: float,
                C: float) -> float:
    """Pick the new bias among the candidates computed from the KKT
    conditions at `i` (`b1`) and `j` (`b2`): a candidate is exact if its
    multiplier is not at a bound, otherwise use their mean.
    """
    if 0 < alpha_i < C:
        return b1
    if 0 < alpha_j < C:
        return b2
    return (b1 + b2) / 2


class PlattPairUpdate(AbstractSMOImplementation):
    """Analytic optimization of a multiplier pair, as in (Platt 1998).

    The pair is left unchanged if the feasible segment is empty (`L >= H`),
    the objective has no positive curvature along it (`eta <= 0`), or the
    change of `alpha_j` would be below `tol`.
    """

    @classmethod
    def take_step(cls, i: int, j: int, error_i: float,
                  context: TrainingContext) -> bool:
        if i == j:
            return False
        state = context.state
        C = context.C
        y_i, y_j = context.y[i], context.y[j]
        alpha_i, alpha_j = state.alpha[i], state.alpha[j]

        L, H = box_bounds(alpha_i, alpha_j, y_i == y_j, C)
        if L >= H:
            return False

        k_ii = context.kernel_value(i, i)
        k_jj = context.kernel_value(j, j)
        k_ij = context.kernel_value(i, j)
        eta = k_ii + k_jj - 2 * k_ij
        if eta <= 0:
            return False

        error_j = context.error(j)
        alpha_j_new = clip(alpha_j + y_j * (error_i - error_j) / eta, L, H)
        if abs(alpha_j_new - alpha_j) < context.tol:
            return False
        # the clipping guarantees the box in exact arithmetic only
        alpha_i_new = clip(alpha_i + y_i * y_j * (alpha_j - alpha_j_new),
                           0.0, C)

        delta_i = y_i * (alpha_i_new - alpha_i)
        delta_j = y_j * (alpha_j_new - alpha_j)
        b1 = state.bias - error_i - delta_i * k_ii - delta_j * k_ij
        b2 = state.bias - error_j - delta_i * k_ij - delta_j * k_jj

        state.alpha[i] = alpha_i_new
        state.alpha[j] = alpha_j_new
        state.bias = select_bias(b1, b2, alpha_i_new, alpha_j_new, C)
        return True


class RandomSecondIndex(AbstractSMOImplementation):
    """Draw the second multiplier uniformly among all others, using
    `context.rng`.

    A simplification of the heuristic in `MaxErrorSecondIndex`: each step is
    cheaper, but more steps are wasted on pairs that make little progress.
    """

    @classmethod
    def select_second_index(cls, i: int, error_i: float,
                            context: TrainingContext) -> int:
        j = context.rng.randint(context.n_samples - 1)
        return j if j < i else j + 1


class MaxErrorSecondIndex(RandomSecondIndex):
    """Second choice heuristic of (Platt 1998): among the multipliers strictly
    inside `(0, C)`, pick the one maximizing `|E_i - E_j|`, i.e. the
    approximate step size. Falls back to `RandomSecondIndex` if no other
    multiplier is unbound.
    """

    @classmethod
    def select_second_index(cls, i: int, error_i: float,
                            context: TrainingContext) -> int:
        alpha = context.state.alpha
        unbound = np.flatnonzero((alpha > 0) & (alpha < context.C))
        unbound = unbound[unbound != i]
        if not len(unbound):
            return super().select_second_index(i, error_i, context)
        step = [abs(error_i - context.error(k)) for k in unbound]
        return int(unbound[np.argmax(step)])
