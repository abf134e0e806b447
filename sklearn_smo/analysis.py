"""
Kernel SVM trained by SMO:
Introspection of a trained estimator: support vectors, margin, confidence.

All functions take a fitted `sklearn_smo.abstract.SMOEstimator`.
"""

from typing import Any, List, NamedTuple

import numpy as np
from scipy.spatial.distance import cdist
from sklearn.utils import check_array

_BELOW_ONE = np.nextafter(1.0, 0.0)


class SupportVector(NamedTuple):
    vector: np.ndarray
    alpha: float
    label: Any


class SupportVectorReport(NamedTuple):
    """Summary of the support vectors of a trained estimator.

    count : int
    fraction : float
        `count` relative to the number of training samples.
    indices : np.ndarray
        Row indices of the support vectors in the training data.
    support_vectors : list of SupportVector
        `(vector, alpha, label)` for each support vector, with `label` from
        the estimators' `classes_`.
    """
    count: int
    fraction: float
    indices: np.ndarray
    support_vectors: List[SupportVector]


class Prediction(NamedTuple):
    """Prediction for one sample, see `predict_with_confidence`."""
    prediction: Any
    decision_value: float
    confidence: float
    distance_from_boundary: float


class DecisionGrid(NamedTuple):
    """Decision values on a regular 2D grid, shaped like `np.meshgrid`."""
    xx: np.ndarray
    yy: np.ndarray
    values: np.ndarray


def support_vector_report(estimator) -> SupportVectorReport:
    """:return: The `SupportVectorReport` of `estimator`; with `count` 0 if
    it is not trained.
    """
    if not estimator.is_trained():
        return SupportVectorReport(0, 0.0, np.array([], dtype=int), [])
    support_set = estimator.support_set_
    labels = np.where(support_set.labels > 0,
                      estimator.classes_[1], estimator.classes_[0])
    return SupportVectorReport(
        count=len(support_set),
        fraction=len(support_set) / estimator.n_training_samples_,
        indices=support_set.indices,
        support_vectors=[SupportVector(vector, alpha, label)
                         for vector, alpha, label in zip(support_set.vectors,
                                                         support_set.alphas,
                                                         labels)])


def margin_width(estimator) -> float:
    """Width of the margin between the two classes.

    For the linear kernel this is `2 / ||w||`, with the weight vector
    `w = sum_i(alpha_i * y_i * sv_i)`, or `inf` if `w` is zero.
    For other kernels, the margin in feature space is not computed; instead
    the smallest euclidean distance between support vectors of different
    classes (in input space) serves as an approximation, 0.0 if one class has
    no support vector.

    :return: 0.0 if `estimator` is not trained.
    """
    if not estimator.is_trained():
        return 0.0
    support_set = estimator.support_set_
    if estimator.kernel_.is_linear():
        w = support_set.weights() @ support_set.vectors
        norm = np.linalg.norm(w)
        return np.inf if norm == 0 else 2.0 / norm

    positive = support_set.labels > 0
    if positive.all() or not positive.any():
        return 0.0
    return float(cdist(support_set.vectors[positive],
                       support_set.vectors[~positive]).min())


def confidence(decision_values) -> np.ndarray:
    """`tanh(|f(x)|)`, as a score in `[0, 1)`.

    Only grows monotonically with the distance from the decision boundary, it
    is not a calibrated probability.
    """
    return np.minimum(np.tanh(np.abs(decision_values)), _BELOW_ONE)


def predict_with_confidence(estimator, X) -> List[Prediction]:
    """:return: A `Prediction` for each sample in `X`."""
    decision_values = estimator.decision_function(X)
    predictions = estimator.predict(X)
    return [Prediction(prediction, float(value), float(conf),
                       float(abs(value)))
            for prediction, value, conf in zip(predictions,
                                               decision_values,
                                               confidence(decision_values))]


def decision_grid(estimator, X, resolution: int = 100,
                  padding: float = 0.1) -> DecisionGrid:
    """Evaluate the decision function of `estimator` on a regular grid over
    the bounding box of `X`, widened by `padding` times its extent.

    :param X: array-like of shape `(n_samples, 2)`.
    :param resolution: Number of grid points along each axis.
    :raise ValueError: if `X` does not have exactly 2 features.
    """
    X = check_array(X, dtype=np.float64)
    if X.shape[1] != 2:
        raise ValueError("decision_grid needs 2-dimensional data, got {} "
                         "features".format(X.shape[1]))
    if resolution < 2:
        raise ValueError("resolution must be at least 2, got {}"
                         .format(resolution))
    low, high = X.min(axis=0), X.max(axis=0)
    extent = (high - low) * padding
    xx, yy = np.meshgrid(
        np.linspace(low[0] - extent[0], high[0] + extent[0], resolution),
        np.linspace(low[1] - extent[1], high[1] + extent[1], resolution))
    values = estimator.decision_function(np.c_[xx.ravel(), yy.ravel()])
    return DecisionGrid(xx, yy, values.reshape(xx.shape))
