from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from data_structures import PredictionValues
from errors import InsufficientGroupsError, PartialGroupError

logger = logging.getLogger(__name__)


@dataclass
class VarianceParams:
    partial_group_policy: str = "raise"  # one of: raise, ignore
    no_good_groups_policy: str = "raise"  # one of: raise, nan

    def __post_init__(self) -> None:
        if self.partial_group_policy not in {"raise", "ignore"}:
            raise ValueError("partial_group_policy must be one of: raise, ignore")
        if self.no_good_groups_policy not in {"raise", "nan"}:
            raise ValueError("no_good_groups_policy must be one of: raise, nan")


@dataclass
class VarianceComponents:
    var_between: np.ndarray
    var_total: np.ndarray
    group_noise: np.ndarray
    num_good_groups: int
    num_groups: int


def compute_variance_components(
    average: np.ndarray,
    leaf_values: PredictionValues,
    ci_group_size: int,
    params: VarianceParams | None = None,
) -> VarianceComponents:
    """Grouped jackknife variance pieces for every class at once.

    Leaves are taken in consecutive runs of ``ci_group_size``. A run with any
    empty leaf is dropped whole. For the remaining runs, ``var_between`` is the
    mean squared group-mean deviation from ``average``, ``var_total`` the mean
    squared leaf deviation, and ``group_noise`` the part of ``var_between``
    explained by within-group spread, ``(var_total - var_between) / (k - 1)``.
    """
    params = params or VarianceParams()
    if ci_group_size < 2:
        raise ValueError("ci_group_size must be at least 2")

    average = np.asarray(average, dtype=np.float64)
    num_types = leaf_values.get_num_types()
    if average.shape != (num_types,):
        raise ValueError(
            f"average must have length {num_types}, got shape {average.shape}"
        )

    num_nodes = leaf_values.get_num_nodes()
    num_groups, remainder = divmod(num_nodes, ci_group_size)
    if remainder:
        if params.partial_group_policy == "raise":
            raise PartialGroupError(
                f"{num_nodes} leaves is not a multiple of ci_group_size={ci_group_size}"
            )
        logger.debug("Ignoring %d trailing leaves of a partial group", remainder)

    used = num_groups * ci_group_size
    values = leaf_values.values[:used].reshape(num_groups, ci_group_size, num_types)
    empty = leaf_values.empty_mask[:used].reshape(num_groups, ci_group_size)
    good = ~empty.any(axis=1)
    num_good_groups = int(good.sum())

    if num_good_groups == 0:
        if params.no_good_groups_policy == "raise":
            raise InsufficientGroupsError(
                f"none of {num_groups} groups has {ci_group_size} non-empty leaves"
            )
        logger.warning(
            "No usable groups among %d; variance is undefined", num_groups
        )
        undefined = np.full(num_types, np.nan, dtype=np.float64)
        return VarianceComponents(
            var_between=undefined,
            var_total=undefined.copy(),
            group_noise=undefined.copy(),
            num_good_groups=0,
            num_groups=num_groups,
        )

    if num_good_groups < num_groups:
        logger.debug(
            "Skipped %d of %d groups containing empty leaves",
            num_groups - num_good_groups,
            num_groups,
        )

    # Shape (good groups, ci_group_size, classes).
    deviations = values[good] - average
    sum_sq = np.sum(deviations * deviations, axis=(0, 1))
    group_means = np.sum(deviations, axis=1) / ci_group_size
    sum_group_sq = np.sum(group_means * group_means, axis=0)

    var_between = sum_group_sq / num_good_groups
    var_total = sum_sq / (num_good_groups * ci_group_size)
    group_noise = (var_total - var_between) / (ci_group_size - 1)

    return VarianceComponents(
        var_between=var_between,
        var_total=var_total,
        group_noise=group_noise,
        num_good_groups=num_good_groups,
        num_groups=num_groups,
    )
