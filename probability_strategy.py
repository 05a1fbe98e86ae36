from __future__ import annotations

from collections.abc import Sequence
import logging

import numpy as np

from bayes_debiaser import Debiaser, ObjectiveBayesDebiaser
from data_structures import PredictionValues
from grouped_variance import VarianceParams, compute_variance_components
from leaf_aggregation import AggregationParams, aggregate_class_frequencies
from sample_data import DataAccessor

logger = logging.getLogger(__name__)


class ProbabilityPredictionStrategy:
    """Class-probability predictions with grouped-variance confidence intervals."""

    def __init__(
        self,
        num_classes: int,
        debiaser: Debiaser | None = None,
        variance_params: VarianceParams | None = None,
        aggregation_params: AggregationParams | None = None,
    ) -> None:
        if num_classes < 1:
            raise ValueError("num_classes must be at least 1")

        self.num_classes = int(num_classes)
        self.debiaser = debiaser if debiaser is not None else ObjectiveBayesDebiaser()
        self.variance_params = variance_params or VarianceParams()
        self.aggregation_params = aggregation_params or AggregationParams()

    def prediction_length(self) -> int:
        return self.num_classes

    def predict(self, average: np.ndarray) -> np.ndarray:
        return np.asarray(average, dtype=np.float64)

    def prediction_value_length(self) -> int:
        return self.num_classes

    def precompute_prediction_values(
        self,
        leaf_samples: Sequence[Sequence[int]],
        data: DataAccessor,
    ) -> PredictionValues:
        return aggregate_class_frequencies(
            leaf_samples,
            data,
            self.num_classes,
            params=self.aggregation_params,
        )

    def compute_variance(
        self,
        average: np.ndarray,
        leaf_values: PredictionValues,
        ci_group_size: int,
    ) -> np.ndarray:
        if leaf_values.get_num_types() != self.num_classes:
            raise ValueError(
                f"leaf_values hold {leaf_values.get_num_types()} classes, "
                f"expected {self.num_classes}"
            )

        components = compute_variance_components(
            average,
            leaf_values,
            ci_group_size,
            params=self.variance_params,
        )
        if components.num_good_groups == 0:
            return np.full(self.num_classes, np.nan, dtype=np.float64)

        variance_estimates = np.zeros(self.num_classes, dtype=np.float64)
        for cls in range(self.num_classes):
            variance_estimates[cls] = self.debiaser.debias(
                float(components.var_between[cls]),
                float(components.group_noise[cls]),
                float(components.num_good_groups),
            )

        logger.debug(
            "Variance from %d/%d groups: %s",
            components.num_good_groups,
            components.num_groups,
            variance_estimates,
        )
        return variance_estimates

    def compute_error(
        self,
        sample: int,
        average: np.ndarray,
        leaf_values: PredictionValues,
        data: DataAccessor,
    ) -> list[tuple[float, float]]:
        return [(float("nan"), float("nan"))]
