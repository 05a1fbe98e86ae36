from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np

from data_structures import PredictionValues
from sample_data import DataAccessor


@runtime_checkable
class OptimizedPredictionStrategy(Protocol):
    """Capabilities shared by strategies that precompute per-leaf statistics.

    A forest stores the output of ``precompute_prediction_values`` once and
    hands it back, together with the query's averaged statistics, to
    ``predict`` and ``compute_variance``. Strategies that cannot estimate a
    pointwise error return NaN pairs from ``compute_error``.
    """

    def prediction_length(self) -> int: ...

    def predict(self, average: np.ndarray) -> np.ndarray: ...

    def prediction_value_length(self) -> int: ...

    def precompute_prediction_values(
        self,
        leaf_samples: Sequence[Sequence[int]],
        data: DataAccessor,
    ) -> PredictionValues: ...

    def compute_variance(
        self,
        average: np.ndarray,
        leaf_values: PredictionValues,
        ci_group_size: int,
    ) -> np.ndarray: ...

    def compute_error(
        self,
        sample: int,
        average: np.ndarray,
        leaf_values: PredictionValues,
        data: DataAccessor,
    ) -> list[tuple[float, float]]: ...
