"""
Kernel SVM trained by SMO: Abstract estimator, running the optimizer passes.
"""

import numbers
import warnings
from typing import List, Type, Union

import numpy as np

from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils import check_X_y, check_array
from sklearn.utils.validation import check_is_fitted, check_random_state

from sklearn_smo.analysis import Prediction, SupportVectorReport, \
    margin_width, predict_with_confidence, support_vector_report
from sklearn_smo.common import \
    AbstractSMOImplementation, FitStatus, SupportVectorSet, TrainingContext
from sklearn_smo.kernels import KERNEL_ALIASES, KernelSpec, check_gamma, \
    make_kernel
from sklearn_smo.util import BinaryLabelEncoder

GRAM_MAX_SAMPLES = 2000


def check_parameters(kernel, C, gamma, degree, coef0, tol, max_iter,
                     precompute_gram, **ignored) -> None:
    """Validate the configuration of a `SMOEstimator`.

    :raise ValueError: on the first invalid parameter.
    """
    if isinstance(kernel, KernelSpec):
        make_kernel(kernel.family, kernel.gamma, kernel.degree, kernel.coef0)
    elif not isinstance(kernel, str) or kernel not in KERNEL_ALIASES:
        raise ValueError("Unsupported kernel type: {!r}, expected one of {}"
                         " or a KernelSpec"
                         .format(kernel, sorted(KERNEL_ALIASES)))
    else:
        make_kernel(kernel, gamma, degree, coef0)
    if not (isinstance(C, numbers.Real) and C > 0):
        raise ValueError("C parameter must be positive, got {!r}".format(C))
    if gamma is not None:
        check_gamma(gamma)
    if not (isinstance(tol, numbers.Real) and tol > 0):
        raise ValueError("tol must be positive, got {!r}".format(tol))
    if not (isinstance(max_iter, numbers.Integral) and max_iter > 0):
        raise ValueError("max_iter must be a positive integer, got {!r}"
                         .format(max_iter))
    if precompute_gram not in (True, False, 'auto'):
        raise ValueError("precompute_gram must be True, False or 'auto', "
                         "got {!r}".format(precompute_gram))


# noinspection PyAttributeOutsideInit
class SMOEstimator(ClassifierMixin, BaseEstimator):
    """Binary kernel Support Vector Machine, trained with a simplified
    Sequential Minimal Optimization (SMO) solver.

    The pairwise optimizer is defined by the class field `Implementation`,
    see :class:`sklearn_smo.predefined.SMOClassifier` for the default.

    Parameters
    -----
    kernel : str or KernelSpec
        One of 'linear', 'polynomial' (alias 'poly'), 'rbf' (alias
        'gaussian'), 'sigmoid'; or a `KernelSpec` which overrides `gamma`,
        `degree` and `coef0`.

    C : float
        Soft-margin box constant, upper bound for every multiplier.

    gamma : float or None
        Kernel parameter of 'rbf' and 'sigmoid'. If None, `1 / n_features` for
        'rbf' and 1.0 for 'sigmoid'.

    degree : int or None
        Degree of the 'polynomial' kernel. If None, 3.

    coef0 : float or None
        Constant term of the 'polynomial' (default 1.0) and 'sigmoid'
        (default 0.0) kernels.

    tol : float
        Tolerance of the KKT checks, the minimal accepted multiplier change,
        and the threshold above which a multiplier marks a support vector.

    max_iter : int
        Maximal number of passes over the training data. Running out of
        passes is not an error, see `fit_status_`.

    random_state : None | int | instance of np.random.RandomState
        RNG used to choose multiplier pairs. Value passed through
        `sklearn.utils.check_random_state`. Fixed by default, so repeated
        fits on the same data yield identical models.

    precompute_gram : bool or 'auto'
        Whether to compute the kernel matrix of the training data once per
        fit, using memory quadratic in the number of samples. 'auto' does so
        below `GRAM_MAX_SAMPLES` samples.

    Attributes
    -----
    classes_ : np.ndarray of shape (2,)
        The class labels in order of discovery in the training data.
        `classes_[0]` is encoded as -1, `classes_[1]` as +1 and predicted
        for decision values `>= 0`.

    n_features_ : int
        The number of features in the training data.

    kernel_ : KernelSpec
        The kernel with all parameters resolved.

    support_set_ : SupportVectorSet
        The support vectors, their multipliers and encoded labels.

    bias_ : float

    fit_status_ : FitStatus
        Whether training converged, and how many passes it took.

    n_training_samples_ : int
        The number of samples in the training data.
    """

    Implementation: Type[AbstractSMOImplementation] = \
        AbstractSMOImplementation

    def __init__(self,
                 kernel: Union[str, KernelSpec] = 'rbf',
                 C: float = 1.0,
                 gamma: float = None,
                 degree: int = None,
                 coef0: float = None,
                 tol: float = 1e-3,
                 max_iter: int = 1000,
                 random_state=1,
                 precompute_gram: Union[bool, str] = 'auto',
                 ):
        check_parameters(kernel=kernel, C=C, gamma=gamma, degree=degree,
                         coef0=coef0, tol=tol, max_iter=max_iter,
                         precompute_gram=precompute_gram)
        self.kernel = kernel
        self.C = C
        self.gamma = gamma
        self.degree = degree
        self.coef0 = coef0
        self.tol = tol
        self.max_iter = max_iter
        self.random_state = random_state
        self.precompute_gram = precompute_gram

    def set_params(self, **params):
        """Set the parameters of this estimator, validating them first. On
        invalid values, nothing is changed.
        """
        merged = self.get_params(deep=False)
        merged.update(params)
        check_parameters(**merged)
        return super().set_params(**params)

    def _make_kernel(self, n_features: int) -> KernelSpec:
        if isinstance(self.kernel, KernelSpec):
            return make_kernel(self.kernel.family, self.kernel.gamma,
                               self.kernel.degree, self.kernel.coef0,
                               n_features)
        return make_kernel(self.kernel, self.gamma, self.degree, self.coef0,
                           n_features)

    def fit(self, X, y):
        """Train on samples `X` with labels `y`.

        :param X: array-like of shape `(n_samples, n_features)`.
        :param y: array-like of shape `(n_samples,)`, exactly two distinct
            labels of any type.
        :raise ValueError: unless `y` contains exactly two classes. Fitted
            attributes are left untouched in that case.
        """
        X, y = check_X_y(X, y, dtype=np.float64)
        encoder = BinaryLabelEncoder().fit(y)
        y_encoded = encoder.transform(y)
        kernel = self._make_kernel(X.shape[1])
        precompute_gram = self.precompute_gram
        if precompute_gram == 'auto':
            precompute_gram = len(X) <= GRAM_MAX_SAMPLES

        context = TrainingContext(X, y_encoded, kernel,
                                  C=float(self.C), tol=float(self.tol),
                                  rng=check_random_state(self.random_state),
                                  precompute_gram=precompute_gram)
        status = self.smo(context)

        self.classes_ = encoder.classes_
        self.n_features_ = X.shape[1]
        self.n_training_samples_ = len(X)
        self.kernel_ = kernel
        self.support_set_ = SupportVectorSet.from_training(
            X, y_encoded, context.state.alpha, context.tol)
        self.bias_ = context.state.bias
        self.fit_status_ = status
        if not len(self.support_set_):
            warnings.warn("Training retained no support vectors, the model "
                          "is untrained and predicts %r for everything."
                          % (self.classes_[1],))
        return self

    def smo(self, context: TrainingContext) -> FitStatus:
        """Main loop of the SMO algorithm: pass over all examples until no
        multiplier changes, or `max_iter` passes are done.
        """

        # resolve methods once for performance
        examine_example = self.examine_example
        end_of_pass = self.Implementation.end_of_pass
        post_process = self.Implementation.post_process

        n_iter = 0
        converged = False
        while n_iter < self.max_iter:
            n_changed = 0
            for i in range(context.n_samples):
                n_changed += examine_example(i, context)
            n_iter += 1
            end_of_pass(n_iter, n_changed, context)
            if n_changed == 0:
                converged = True
                break
        status = FitStatus(converged=converged, n_iter=n_iter)
        post_process(status, context)
        return status

    def examine_example(self, i: int, context: TrainingContext) -> bool:
        """Inner step of the SMO algorithm: if multiplier `i` violates the KKT
        conditions, optimize it jointly with a second one.

        :return: True iff a multiplier pair was updated.
        """
        implementation = self.Implementation
        error_i = context.error(i)
        if not implementation.violates_kkt(i, error_i, context):
            return False
        j = implementation.select_second_index(i, error_i, context)
        return implementation.take_step(i, j, error_i, context)

    def is_trained(self) -> bool:
        """:return: True iff `fit` retained at least one support vector."""
        return bool(getattr(self, 'support_set_', None))

    def _check_features(self, X) -> np.ndarray:
        X: np.ndarray = check_array(X, dtype=np.float64)
        n_features = X.shape[1]
        if self.n_features_ != n_features:
            raise ValueError("Number of features of the model must "
                             "match the input. Model n_features is %s and "
                             "input n_features is %s "
                             % (self.n_features_, n_features))
        return X

    def decision_function(self, X) -> np.ndarray:
        """Evaluate `f(x) = bias + sum_i(alpha_i * y_i * K(sv_i, x))`.

        :return: np.ndarray of shape `(n_samples,)`. Values `>= 0` indicate
          class `classes_[1]`. All zero if the estimator is not trained.
        """
        if not self.is_trained():
            return np.zeros(len(check_array(X, dtype=np.float64)))
        X = self._check_features(X)
        return self.support_set_.decision_function(self.kernel_, self.bias_,
                                                   X)

    def predict(self, X) -> np.ndarray:
        """Predict `classes_[1]` where `decision_function(X) >= 0`,
        `classes_[0]` elsewhere.
        """
        check_is_fitted(self, ['classes_'])
        X = self._check_features(X)
        return np.where(self.decision_function(X) >= 0,
                        self.classes_[1], self.classes_[0])

    def predict_with_confidence(self, X) -> List[Prediction]:
        """See :func:`sklearn_smo.analysis.predict_with_confidence`."""
        return predict_with_confidence(self, X)

    def support_vector_report(self) -> SupportVectorReport:
        """See :func:`sklearn_smo.analysis.support_vector_report`."""
        return support_vector_report(self)

    def margin_width(self) -> float:
        """See :func:`sklearn_smo.analysis.margin_width`."""
        return margin_width(self)

    def export_text(self, feature_names: List[str] = None,
                    decimals: int = 4) -> str:
        """Build a text report of the learned decision function, one line per
        support vector.

        Parameters
        -----
        feature_names : list, optional
            A list of length n_features containing the feature names.
            If None, generic names will be generated.

        decimals : int
            Number of decimals of the printed numbers.
        """
        check_is_fitted(self, ['classes_', 'support_set_'])
        if feature_names:
            if len(feature_names) != self.n_features_:
                raise ValueError(
                    "feature_names must contain %d elements, got %d"
                    % (self.n_features_, len(feature_names)))
        else:
            feature_names = ["feature_{}".format(i + 1)
                             for i in range(self.n_features_)]

        def num(value):
            return '{:.{}f}'.format(value, decimals)

        lines = ['kernel: {!s}'.format(self.kernel_),
                 'f(x) >= 0 => {!s}, else {!s}'.format(self.classes_[1],
                                                       self.classes_[0]),
                 'f(x) = {} + sum(alpha * y * K(sv, x)) over {} support '
                 'vectors:'.format(num(self.bias_), len(self.support_set_))]
        support_set = self.support_set_
        for alpha, label, vector in zip(support_set.alphas,
                                        support_set.labels,
                                        support_set.vectors):
            lines.append('  alpha={} y={:+.0f} ({})'.format(
                num(alpha), label,
                ', '.join('{}={}'.format(name, num(value))
                          for name, value in zip(feature_names, vector))))
        return '\n'.join(lines)
