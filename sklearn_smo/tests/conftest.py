"""pytest fixtures for the test cases in this directory."""
from typing import Type

import pytest

from sklearn_smo.abstract import SMOEstimator
from sklearn_smo.predefined import SMOClassifier, PlattSMOClassifier

from sklearn_smo.tests.datasets import \
    binary_slight_overlap, linearly_separable_2d, sklearn_make_moons, xor_2d


# pytest plugin, to print the learned model on test failure
@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    default = yield
    report = default.get_result()
    if report.failed and report.user_properties:
        for name, prop in report.user_properties:
            if name == 'model':
                report.longrepr.addsection(name, str(prop))
                break
    return default


@pytest.fixture
def record_model(record_property):
    def _record(estimator: SMOEstimator):
        record_property("model", estimator.export_text())
    return _record


@pytest.fixture(params=[SMOClassifier,
                        PlattSMOClassifier])
def smo_estimator_class(request) -> Type[SMOEstimator]:
    """Fixture running for each of the pre-defined estimator classes from
    `sklearn_smo.predefined`.

    :return: An estimator class.
    """
    return request.param


@pytest.fixture
def smo_estimator(smo_estimator_class):
    """Fixture running for each of the pre-defined estimators from
    `sklearn_smo.predefined`, with a fixed random state.

    :return: An estimator instance.
    """
    return smo_estimator_class(random_state=42)


@pytest.fixture(params=[linearly_separable_2d,
                        xor_2d,
                        binary_slight_overlap,
                        sklearn_make_moons,
                        ])
def blackbox_test(request):
    return request.param()
