import math

import numpy as np
import pytest

from data_structures import PredictionValues
from errors import InsufficientGroupsError
from grouped_variance import VarianceParams
from prediction_strategy import OptimizedPredictionStrategy
from probability_strategy import ProbabilityPredictionStrategy
from sample_data import ClassificationData


class RecordingDebiaser:
    def __init__(self, result=0.5):
        self.result = result
        self.calls = []

    def debias(self, var_between, group_noise, num_good_groups):
        self.calls.append((var_between, group_noise, num_good_groups))
        return self.result


def _grouped_forest(rng, num_classes, n_groups, ci_group_size, n_samples=400):
    data = ClassificationData(
        outcomes=rng.integers(0, num_classes, size=n_samples),
        weights=rng.uniform(0.2, 2.0, size=n_samples),
    )
    leaf_samples = []
    for _ in range(n_groups):
        half = rng.choice(n_samples, size=n_samples // 2, replace=False)
        for _ in range(ci_group_size):
            leaf_samples.append(rng.choice(half, size=15, replace=False).tolist())
    return data, leaf_samples


def test_strategy_satisfies_protocol():
    strategy = ProbabilityPredictionStrategy(num_classes=3)

    assert isinstance(strategy, OptimizedPredictionStrategy)
    assert strategy.prediction_length() == 3
    assert strategy.prediction_value_length() == 3


def test_predict_is_identity():
    strategy = ProbabilityPredictionStrategy(num_classes=3)
    average = np.array([0.2, 0.5, 0.3])

    assert np.array_equal(strategy.predict(average), average)


def test_precompute_matches_leaf_frequencies():
    strategy = ProbabilityPredictionStrategy(num_classes=2)
    data = ClassificationData(outcomes=np.array([0, 1, 1, 1]))
    leaf_values = strategy.precompute_prediction_values([[0, 1], [], [2, 3]], data)

    assert leaf_values.get_num_types() == 2
    assert np.allclose(leaf_values.get_values(0), [0.5, 0.5])
    assert leaf_values.empty(1)
    assert np.allclose(leaf_values.get_values(2), [0.0, 1.0])


def test_compute_variance_on_symmetric_pairs():
    strategy = ProbabilityPredictionStrategy(num_classes=2)
    table = PredictionValues(
        [[0.2, 0.8], [0.8, 0.2], [0.3, 0.7], [0.7, 0.3]],
        num_types=2,
    )
    variance = strategy.compute_variance(np.array([0.5, 0.5]), table, ci_group_size=2)

    assert variance.shape == (2,)
    assert np.all(variance >= 0.0)
    assert np.all(variance <= 0.065)


def test_uniform_leaves_give_zero_variance():
    strategy = ProbabilityPredictionStrategy(num_classes=3)
    table = PredictionValues([[0.1, 0.3, 0.6]] * 6, num_types=3)
    variance = strategy.compute_variance(np.array([0.1, 0.3, 0.6]), table, ci_group_size=2)

    assert np.allclose(variance, 0.0, atol=1e-15)


def test_injected_debiaser_receives_components():
    debiaser = RecordingDebiaser(result=0.25)
    strategy = ProbabilityPredictionStrategy(num_classes=2, debiaser=debiaser)
    table = PredictionValues(
        [[0.2, 0.8], [0.8, 0.2], [0.3, 0.7], [0.7, 0.3], None, [1.0, 0.0]],
        num_types=2,
    )
    variance = strategy.compute_variance(np.array([0.5, 0.5]), table, ci_group_size=2)

    assert np.array_equal(variance, [0.25, 0.25])
    assert len(debiaser.calls) == 2
    for var_between, group_noise, num_good_groups in debiaser.calls:
        assert math.isclose(var_between, 0.0, abs_tol=1e-12)
        assert math.isclose(group_noise, 0.065)
        assert num_good_groups == 2.0


def test_variance_is_non_negative_on_simulated_forest():
    rng = np.random.default_rng(31)
    strategy = ProbabilityPredictionStrategy(num_classes=4)
    data, leaf_samples = _grouped_forest(rng, num_classes=4, n_groups=50, ci_group_size=2)
    leaf_values = strategy.precompute_prediction_values(leaf_samples, data)
    average = leaf_values.values.mean(axis=0)

    variance = strategy.compute_variance(average, leaf_values, ci_group_size=2)

    assert variance.shape == (4,)
    assert np.all(np.isfinite(variance))
    assert np.all(variance >= 0.0)


def test_no_good_groups_surfaces_failure_or_nan():
    table = PredictionValues([None, [0.5, 0.5]], num_types=2)
    average = np.array([0.5, 0.5])

    with pytest.raises(InsufficientGroupsError):
        ProbabilityPredictionStrategy(num_classes=2).compute_variance(average, table, 2)

    lenient = ProbabilityPredictionStrategy(
        num_classes=2,
        variance_params=VarianceParams(no_good_groups_policy="nan"),
    )
    variance = lenient.compute_variance(average, table, 2)
    assert variance.shape == (2,)
    assert np.all(np.isnan(variance))


def test_compute_error_is_unsupported():
    strategy = ProbabilityPredictionStrategy(num_classes=2)
    table = PredictionValues([[0.5, 0.5], [0.4, 0.6]], num_types=2)
    data = ClassificationData(outcomes=np.array([0, 1]))

    error = strategy.compute_error(0, np.array([0.45, 0.55]), table, data)

    assert len(error) == 1
    assert all(math.isnan(value) for value in error[0])


def test_constructor_and_table_checks():
    with pytest.raises(ValueError):
        ProbabilityPredictionStrategy(num_classes=0)

    strategy = ProbabilityPredictionStrategy(num_classes=3)
    table = PredictionValues([[0.5, 0.5], [0.4, 0.6]], num_types=2)
    with pytest.raises(ValueError):
        strategy.compute_variance(np.array([0.45, 0.55]), table, ci_group_size=2)
