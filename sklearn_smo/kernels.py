"""
Kernel SVM trained by SMO:
Kernel functions, i.e. similarity of two feature vectors.
"""

import math
from typing import Callable, Dict, NamedTuple, Optional

import numpy as np

LINEAR = 'linear'
POLYNOMIAL = 'polynomial'
RBF = 'rbf'
SIGMOID = 'sigmoid'

KERNEL_ALIASES = {
    LINEAR: LINEAR,
    POLYNOMIAL: POLYNOMIAL,
    'poly': POLYNOMIAL,
    RBF: RBF,
    'gaussian': RBF,
    SIGMOID: SIGMOID,
}

DEFAULT_DEGREE = 3
DEFAULT_COEF0 = {POLYNOMIAL: 1.0, SIGMOID: 0.0}


class KernelSpec(NamedTuple):
    """A kernel family and its parameters.

    Use `make_kernel` to construct one, which checks the parameters and fills
    in the defaults. Parameters the family doesn't use are None.

    Attributes
    -----
    family : str
        One of `LINEAR`, `POLYNOMIAL`, `RBF`, `SIGMOID`.

    gamma : float or None
        Scale of `dot(a, b)` (sigmoid) resp. of `||a - b||^2` (rbf).

    degree : int or None
        Exponent of the polynomial kernel.

    coef0 : float or None
        Additive constant of the polynomial and sigmoid kernels.
    """
    family: str
    gamma: Optional[float] = None
    degree: Optional[int] = None
    coef0: Optional[float] = None

    def __call__(self, a, b) -> float:
        """:return: `evaluate_kernel(self, a, b)`"""
        return evaluate_kernel(self, a, b)

    def is_linear(self) -> bool:
        return self.family == LINEAR

    def __str__(self):
        params = ', '.join('{}={}'.format(name, getattr(self, name))
                           for name in ('gamma', 'degree', 'coef0')
                           if getattr(self, name) is not None)
        return '{}({})'.format(self.family, params)


def make_kernel(name: str,
                gamma: Optional[float] = None,
                degree: Optional[int] = None,
                coef0: Optional[float] = None,
                n_features: Optional[int] = None) -> KernelSpec:
    """Build a `KernelSpec`, applying defaults for unset parameters.

    :param name: Kernel family name, see `KERNEL_ALIASES`.
    :param gamma: Used by rbf and sigmoid. If None, `1 / n_features` for rbf
      (or 1.0 if `n_features` is unknown, too) and 1.0 for sigmoid.
    :param degree: Used by polynomial, default `DEFAULT_DEGREE`.
    :param coef0: Used by polynomial and sigmoid, default from
      `DEFAULT_COEF0`.
    :param n_features: Dimension of the data, for the default `gamma`.
    :raise ValueError: on an unknown kernel name or invalid parameters.
    """
    family = KERNEL_ALIASES.get(name) if isinstance(name, str) else None
    if family is None:
        raise ValueError("Unsupported kernel type: {!r}, expected one of {}"
                         .format(name, sorted(KERNEL_ALIASES)))
    if family == LINEAR:
        return KernelSpec(LINEAR)

    if family in (RBF, SIGMOID):
        if gamma is None:
            gamma = 1.0 / n_features if n_features and family == RBF else 1.0
        check_gamma(gamma)
        gamma = float(gamma)
    else:
        gamma = None
    if family in (POLYNOMIAL, SIGMOID):
        coef0 = float(DEFAULT_COEF0[family] if coef0 is None else coef0)
    else:
        coef0 = None
    if family == POLYNOMIAL:
        degree = DEFAULT_DEGREE if degree is None else degree
        if degree < 1 or int(degree) != degree:
            raise ValueError("degree must be a positive integer, got {!r}"
                             .format(degree))
        degree = int(degree)
    else:
        degree = None
    return KernelSpec(family, gamma=gamma, degree=degree, coef0=coef0)


def check_gamma(gamma) -> None:
    """:raise ValueError: unless `gamma` is a positive finite number."""
    if not (np.isscalar(gamma) and np.isfinite(gamma) and gamma > 0):
        raise ValueError("gamma must be positive, got {!r}".format(gamma))


def _linear(kernel: KernelSpec, a: np.ndarray, b: np.ndarray) -> float:
    return float(np.dot(a, b))


def _polynomial(kernel: KernelSpec, a: np.ndarray, b: np.ndarray) -> float:
    return float((np.dot(a, b) + kernel.coef0) ** kernel.degree)


def _rbf(kernel: KernelSpec, a: np.ndarray, b: np.ndarray) -> float:
    diff = a - b
    return math.exp(-kernel.gamma * float(np.dot(diff, diff)))


def _sigmoid(kernel: KernelSpec, a: np.ndarray, b: np.ndarray) -> float:
    return math.tanh(kernel.gamma * float(np.dot(a, b)) + kernel.coef0)


KERNEL_FUNCTIONS: Dict[str, Callable[[KernelSpec, np.ndarray, np.ndarray],
                                     float]] = {
    LINEAR: _linear,
    POLYNOMIAL: _polynomial,
    RBF: _rbf,
    SIGMOID: _sigmoid,
}


def evaluate_kernel(kernel: KernelSpec, a, b) -> float:
    """Similarity of the feature vectors `a` and `b` under `kernel`.

    - linear: `dot(a, b)`
    - polynomial: `(dot(a, b) + coef0) ** degree`
    - rbf: `exp(-gamma * ||a - b||^2)`
    - sigmoid: `tanh(gamma * dot(a, b) + coef0)`

    All are symmetric, i.e. `evaluate_kernel(k, a, b) ==
    evaluate_kernel(k, b, a)`.

    :raise ValueError: if `a` and `b` differ in length.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise ValueError("Dimension mismatch: cannot compare feature vectors "
                         "of shape {} and {}".format(a.shape, b.shape))
    return KERNEL_FUNCTIONS[kernel.family](kernel, a, b)


def gram_matrix(kernel: KernelSpec, X: np.ndarray) -> np.ndarray:
    """:return: An array of shape `(n_samples, n_samples)` holding the kernel
    value of each pair of rows in `X`.
    """
    X = np.asarray(X, dtype=float)
    n_samples = len(X)
    function = KERNEL_FUNCTIONS[kernel.family]
    gram = np.empty((n_samples, n_samples))
    for i in range(n_samples):
        for j in range(i, n_samples):
            gram[i, j] = gram[j, i] = function(kernel, X[i], X[j])
    return gram
