"""Implementation of a kernel Support Vector Machine, trained with a
simplified Sequential Minimal Optimization (SMO) solver.

Limitations / Assumptions
=====

- binary problems only, exactly two distinct class labels. No one-vs-rest or
  one-vs-one wrapping of multi-class problems.
- class labels are encoded in order of discovery: the label seen first in the
  training data is the "negative" class (-1), the other the "positive" one
  (+1). A decision value of exactly 0 predicts the positive class.
- no sparse input
- no missing values, no NaN, inf, or -inf values in data
- no sample weighting
- kernels evaluated pair by pair in python, so only suited for small datasets
- no incremental training: each `fit` starts from zero multipliers
- training stops after `max_iter` passes without error, the result is an
  approximate solution then. See `SMOEstimator.fit_status_`.
"""

__all__ = ['abstract', 'analysis', 'common', 'concrete', 'extra', 'kernels',
           'predefined', 'tests', 'util']
