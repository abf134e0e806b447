"""
Kernel SVM trained by SMO:
Helpers in addition to the estimators in `predefined.py`: tracing the
optimizer and plotting.
"""

import json
import warnings
from typing import Callable, Dict, IO, MutableSequence, NamedTuple, \
    Optional, Type, Union

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure  # needed only for type hints

from sklearn_smo.abstract import SMOEstimator
from sklearn_smo.analysis import decision_grid
from sklearn_smo.common import \
    AbstractSMOImplementation, FitStatus, TrainingContext


class Trace:
    """Trace of an SMO run, i.e. `SMOEstimator.smo` invocation.

    Attributes
    -----
    - `passes`: Sequence[Trace.Pass]
      One item for each pass over the training examples.

    - `converged`: bool or None
      Whether the last pass changed no multiplier. None until training ended.
    """

    _JSON_DUMP_DESCRIPTION = "sklearn_smo.extra.trace_training dump"
    _JSON_DUMP_VERSION = 1

    class Pass(NamedTuple):
        """State after one pass over the training examples.

        iteration : int
            Number of the pass, starting at 1.
        n_changed : int
            Count of multiplier pairs updated during the pass.
        n_support : int
            Count of multipliers exceeding `tol` after the pass.
        bias : float
        """
        iteration: int
        n_changed: int
        n_support: int
        bias: float

    passes: MutableSequence['Trace.Pass']
    converged: Optional[bool]

    def __init__(self):
        self.passes = []
        self.converged = None

    def append_pass(self, n_iter: int, n_changed: int,
                    context: TrainingContext):
        self.passes.append(Trace.Pass(n_iter, n_changed, context.n_support(),
                                      float(context.state.bias)))

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return NotImplemented

    def plot(self, **kwargs):
        """Plot the trace, see :func:`plot_training_trace`."""
        return plot_training_trace(self, **kwargs)

    def to_json(self):
        """:return: A string containing a JSON representation of the trace."""
        return json.dumps({
            "description": Trace._JSON_DUMP_DESCRIPTION,
            "version": Trace._JSON_DUMP_VERSION,
            "passes": [p._asdict() for p in self.passes],
            "converged": self.converged,
        }, allow_nan=False)

    @staticmethod
    def from_json(dump: Union[str, IO]) -> 'Trace':
        """
        :param dump: A file-like object or string containing JSON.
        :return : The `Trace` dumped previously with `to_json`.
        """
        loader = json.loads if isinstance(dump, str) else json.load
        dec: Dict = loader(dump)

        if dec.get("description") != Trace._JSON_DUMP_DESCRIPTION:
            raise ValueError("No/invalid training trace json: %s" % repr(dec))
        if dec.get("version") != Trace._JSON_DUMP_VERSION:
            raise ValueError("Unsupported training trace version: %s"
                             % dec.get("version"))
        trace = Trace()
        trace.passes = [Trace.Pass(**p) for p in dec['passes']]
        trace.converged = dec['converged']
        return trace


LogTraceCallback = Callable[[Trace], None]


def trace_training(est_cls: Type[SMOEstimator],
                   log_trace_callback: LogTraceCallback,
                   ) -> Type[SMOEstimator]:
    """Decorator for `SMOEstimator` that adds tracing of the optimizer passes.
    Traces can be plotted with `plot_training_trace`.

    After the last pass of each `fit`, the collected trace is submitted to the
    `log_trace_callback` function.

    Usage
    =====
    Define the callback function to receive the trace & display it:

    >>> def callback(trace):
    ...     plot_training_trace(trace).show()

    Then wrap an estimator class:

    >>> MyTracedSMO = trace_training(SMOClassifier, callback)
    """

    class TracedEstimator(est_cls):
        class Implementation(TraceTrainingImplementation,
                             est_cls.Implementation):

            @classmethod
            def post_process(cls, status: FitStatus,
                             context: TrainingContext) -> None:
                super().post_process(status, context)
                # the context, and thus the trace, is dropped after `fit`
                log_trace_callback(context.trace)

    TracedEstimator.__name__ = 'Traced' + est_cls.__name__
    TracedEstimator.__qualname__ = TracedEstimator.__name__
    return TracedEstimator


class TraceTrainingImplementation(AbstractSMOImplementation):
    """Tracing `AbstractSMOImplementation` mixin.

    Stores the `Trace` as attribute `trace` of the `TrainingContext`. Use the
    `trace_training` decorator to apply it.
    """

    @classmethod
    def end_of_pass(cls, n_iter: int, n_changed: int,
                    context: TrainingContext) -> None:
        super().end_of_pass(n_iter, n_changed, context)
        if n_iter == 1:
            context.trace = Trace()
        context.trace.append_pass(n_iter, n_changed, context)

    @classmethod
    def post_process(cls, status: FitStatus, context: TrainingContext
                     ) -> None:
        super().post_process(status, context)
        context.trace.converged = status.converged


def plot_training_trace(trace: Trace,
                        *,
                        title: Optional[str] = None,
                        figure: Optional[Figure] = None) -> Figure:
    """Plot the count of support vectors and of updated pairs per pass.

    :param trace: collected `Trace`, see also `trace_training`.
    :param title: string or None. If not None, set as figure title.
    :param figure: If None, use `plt.figure()` to create a figure, otherwise
      draw into this one.
    :return: The figure.
    """
    if not trace.passes:
        # issue a warning, user can decide handling. See module `warnings`
        warnings.warn("Empty trace collected, useless plot.")
    if figure is None:
        figure = plt.figure()
    count_axes = figure.add_subplot(2, 1, 1)
    bias_axes = figure.add_subplot(2, 1, 2, sharex=count_axes)

    iterations = [p.iteration for p in trace.passes]
    count_axes.plot(iterations, [p.n_support for p in trace.passes],
                    'o-', label='support vectors')
    count_axes.plot(iterations, [p.n_changed for p in trace.passes],
                    '.--', label='updated pairs')
    count_axes.set_ylabel('count')
    count_axes.locator_params(integer=True)
    count_axes.legend(loc='upper right')

    bias_axes.plot(iterations, [p.bias for p in trace.passes], '.-',
                   color='grey')
    bias_axes.set_xlabel('pass')
    bias_axes.set_ylabel('bias')

    if title is not None:
        figure.suptitle("%s: %s" % (title, 'converged' if trace.converged
                                    else 'not converged'))
    return figure


def plot_decision_boundary(estimator: SMOEstimator,
                           X, y,
                           *,
                           resolution: int = 100,
                           title: Optional[str] = None,
                           figure: Optional[Figure] = None) -> Figure:
    """Plot decision values, the boundary `f(x) = 0`, the margins
    `f(x) = ±1`, and the samples `X` with support vectors highlighted.

    :param estimator: A trained `SMOEstimator` on 2-dimensional data.
    :param X: array-like of shape `(n_samples, 2)`, usually the training data.
    :param y: The labels of `X`, from `estimator.classes_`.
    :return: The figure.
    """
    grid = decision_grid(estimator, X, resolution=resolution)
    X = np.asarray(X, dtype=float)
    y = np.asarray(y)
    if figure is None:
        figure = plt.figure()
    ax = figure.add_subplot(1, 1, 1)
    filled = ax.contourf(grid.xx, grid.yy, grid.values, levels=20,
                         cmap='coolwarm', alpha=0.4)
    figure.colorbar(filled, ax=ax, label='f(x)')
    if grid.values.min() < 0 < grid.values.max():
        ax.contour(grid.xx, grid.yy, grid.values, levels=[-1, 0, 1],
                   colors='black', linestyles=['dotted', 'solid', 'dotted'])
    else:
        warnings.warn("Decision function has constant sign on the plotted "
                      "area, no boundary drawn.")

    for label, marker in zip(estimator.classes_, 'ox'):
        mask = y == label
        ax.plot(X[mask, 0], X[mask, 1], marker, linestyle='',
                label=str(label))
    if estimator.is_trained():
        vectors = estimator.support_set_.vectors
        ax.plot(vectors[:, 0], vectors[:, 1], 'o', markersize=12,
                markerfacecolor='none', markeredgecolor='black',
                linestyle='', label='support vectors')
    ax.legend(loc='best')
    if title is not None:
        ax.set_title(title)
    return figure
