import math
from typing import Protocol

ONE_OVER_SQRT_TWO_PI = 1.0 / math.sqrt(2.0 * math.pi)

# Below this standardized estimate the normal tail ratio is replaced by its
# asymptote; erfc underflows to zero not far past here.
TAIL_RATIO_CUTOFF = -30.0


class Debiaser(Protocol):
    def debias(
        self,
        var_between: float,
        group_noise: float,
        num_good_groups: float,
    ) -> float: ...


class ObjectiveBayesDebiaser:
    """Non-negative correction of a grouped between-variance estimate.

    The naive estimate ``var_between - group_noise`` is unbiased but can go
    negative. Treating it as normal with standard error
    ``max(var_between, group_noise) * sqrt(2 / num_good_groups)`` and putting an
    improper uniform prior on the true variance over ``[0, inf)``, the
    posterior is that normal truncated at zero. Its mean is returned.
    """

    def debias(
        self,
        var_between: float,
        group_noise: float,
        num_good_groups: float,
    ) -> float:
        if num_good_groups <= 0:
            raise ValueError("num_good_groups must be positive")

        initial_estimate = var_between - group_noise
        initial_se = max(var_between, group_noise) * math.sqrt(2.0 / num_good_groups)
        if initial_se <= 0.0:
            return max(initial_estimate, 0.0)

        ratio = initial_estimate / initial_se
        if ratio < TAIL_RATIO_CUTOFF:
            return initial_se / -ratio

        numerator = math.exp(-0.5 * ratio * ratio) * ONE_OVER_SQRT_TWO_PI
        denominator = 0.5 * math.erfc(-ratio / math.sqrt(2.0))
        bayes_correction = initial_se * numerator / denominator
        return max(initial_estimate + bayes_correction, 0.0)
