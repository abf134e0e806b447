"""
Kernel SVM trained by SMO:
Known instantiations / example configurations of the abstract estimator.
"""

from sklearn_smo.abstract import SMOEstimator
from sklearn_smo.concrete import \
    PlattPairUpdate, RandomSecondIndex, MaxErrorSecondIndex


class SMOClassifier(SMOEstimator):
    """Simplified SMO: the second multiplier of each pair is drawn at random.
    """

    class Implementation(RandomSecondIndex,
                         PlattPairUpdate):
        pass


class PlattSMOClassifier(SMOEstimator):
    """SMO choosing the second multiplier by the maximal step heuristic of
    (Platt 1998), see `MaxErrorSecondIndex`.
    """

    class Implementation(MaxErrorSecondIndex,
                         PlattPairUpdate):
        pass
