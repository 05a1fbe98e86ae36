from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging

import numpy as np

from data_structures import PredictionValues
from sample_data import DataAccessor

logger = logging.getLogger(__name__)


@dataclass
class AggregationParams:
    # Leaves whose total weight is at or below this are treated as empty.
    empty_weight_tolerance: float = 1e-16

    def __post_init__(self) -> None:
        if self.empty_weight_tolerance < 0.0:
            raise ValueError("empty_weight_tolerance must be >= 0")


def aggregate_class_frequencies(
    leaf_samples: Sequence[Sequence[int]],
    data: DataAccessor,
    num_classes: int,
    params: AggregationParams | None = None,
) -> PredictionValues:
    """Weighted class-frequency vector for every leaf.

    Each non-empty leaf maps to a length ``num_classes`` vector summing to 1.
    Leaves with no samples, or with negligible total weight, are recorded as
    empty instead of being normalised.
    """
    params = params or AggregationParams()
    values: list[np.ndarray | None] = [None] * len(leaf_samples)
    num_degenerate = 0

    for leaf, samples in enumerate(leaf_samples):
        if len(samples) == 0:
            continue

        class_weights = np.zeros(num_classes, dtype=np.float64)
        weight_sum = 0.0
        for sample in samples:
            sample_class = data.get_outcome(int(sample))
            if sample_class < 0 or sample_class >= num_classes:
                raise ValueError(
                    f"sample {sample} has class {sample_class}, expected [0, {num_classes})"
                )
            weight = data.get_weight(int(sample))
            class_weights[sample_class] += weight
            weight_sum += weight

        if abs(weight_sum) <= params.empty_weight_tolerance:
            num_degenerate += 1
            continue

        values[leaf] = class_weights / weight_sum

    if num_degenerate:
        logger.debug(
            "%d of %d leaves had negligible weight and were marked empty",
            num_degenerate,
            len(leaf_samples),
        )
    return PredictionValues(values, num_classes)
