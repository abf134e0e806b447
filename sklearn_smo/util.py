"""
Miscellaneous things not depending on anything else from sklearn_smo.
"""

from typing import Sequence, Tuple

import numpy as np

from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted


def discovery_order(y) -> np.ndarray:
    """:return: The distinct values of `y`, ordered by first occurrence."""
    uniques, first_index = np.unique(y, return_index=True)
    return uniques[np.argsort(first_index, kind='stable')]


# noinspection PyAttributeOutsideInit
class BinaryLabelEncoder(TransformerMixin, BaseEstimator):
    """Encode the two labels of a binary problem as -1.0 and +1.0, in order
    of discovery: the label occurring first in `y` becomes -1.0, the other
    +1.0.

    Unlike `sklearn.preprocessing.LabelEncoder`, the labels are not sorted,
    so the encoding of e.g. `['b', 'a', 'a']` maps 'b' to -1.0.

    Attributes
    -----
    classes_ : np.ndarray of shape (2,)
        The original labels, indexed by `(encoded + 1) / 2`.
    """

    def fit(self, y):
        """Learn the labels present in `y`.

        :raise ValueError: unless `y` contains exactly two distinct labels.
        """
        y = np.asarray(y)
        if y.ndim != 1:
            raise ValueError("y must be one-dimensional, got shape {}"
                             .format(y.shape))
        classes = discovery_order(y)
        if len(classes) != 2:
            raise ValueError("Binary classification requires exactly 2 "
                             "distinct classes, got {}: {!s}"
                             .format(len(classes), classes.tolist()))
        self.classes_ = classes
        return self

    def transform(self, y):
        """Transform `y` to -1.0 / +1.0.

        :raise ValueError: if `y` contains unknown labels.
        """
        check_is_fitted(self, 'classes_')
        y = np.asarray(y)
        positive = y == self.classes_[1]
        unknown = ~positive & (y != self.classes_[0])
        if np.any(unknown):
            raise ValueError("y contains previously unseen labels: {!s}"
                             .format(np.unique(y[unknown]).tolist()))
        return np.where(positive, 1.0, -1.0)

    def inverse_transform(self, y_enc):
        """Transform encoded labels back, mapping values `>= 0` to
        `classes_[1]` and negative values to `classes_[0]`.
        """
        check_is_fitted(self, 'classes_')
        return np.where(np.asarray(y_enc) >= 0,
                        self.classes_[1], self.classes_[0])


def split_data_items(data_items: Sequence[Sequence]
                     ) -> Tuple[np.ndarray, np.ndarray]:
    """Split rows of features followed by a class label into `(X, y)`.

    >>> X, y = split_data_items([[1.0, 2.0, 'a'], [3.0, 4.0, 'b']])
    >>> X.tolist(), y.tolist()
    ([[1.0, 2.0], [3.0, 4.0]], ['a', 'b'])
    """
    if not len(data_items):
        raise ValueError("no data items given")
    lengths = {len(item) for item in data_items}
    if len(lengths) != 1:
        raise ValueError("data items differ in length: {}"
                         .format(sorted(lengths)))
    if lengths.pop() < 2:
        raise ValueError("data items need at least one feature and a label")
    X = np.array([item[:-1] for item in data_items], dtype=float)
    y = np.array([item[-1] for item in data_items])
    return X, y
