from typing import Protocol

import numpy as np


class DataAccessor(Protocol):
    def get_outcome(self, sample: int) -> int: ...

    def get_weight(self, sample: int) -> float: ...


class ClassificationData:
    """Per-sample class labels and weights for leaf aggregation."""

    def __init__(
        self,
        outcomes: np.ndarray,
        weights: np.ndarray | None = None,
    ) -> None:
        outcomes = np.asarray(outcomes)
        if outcomes.ndim != 1:
            raise ValueError("outcomes must be a 1D array")
        if outcomes.size > 0 and not np.all(np.isfinite(outcomes)):
            raise ValueError("outcomes must be finite")
        if not np.array_equal(outcomes, np.round(outcomes)):
            raise ValueError("outcomes must be integer class labels")
        if np.any(outcomes < 0):
            raise ValueError("outcomes must be non-negative class labels")

        if weights is None:
            weights = np.ones(outcomes.shape[0], dtype=np.float64)
        weights = np.asarray(weights, dtype=np.float64)
        if weights.shape != outcomes.shape:
            raise ValueError("outcomes and weights must have the same shape")
        if not np.all(np.isfinite(weights)):
            raise ValueError("weights must be finite")
        if np.any(weights < 0.0):
            raise ValueError("weights must be non-negative")

        self.outcomes = outcomes.astype(np.int64)
        self.weights = weights
        self.outcomes.flags.writeable = False
        self.weights.flags.writeable = False

    @property
    def num_samples(self) -> int:
        return int(self.outcomes.shape[0])

    @property
    def num_classes(self) -> int:
        if self.outcomes.size == 0:
            return 0
        return int(self.outcomes.max()) + 1

    def get_outcome(self, sample: int) -> int:
        return int(self.outcomes[sample])

    def get_weight(self, sample: int) -> float:
        return float(self.weights[sample])
