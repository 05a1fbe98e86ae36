import argparse
import logging
import sys
from pathlib import Path

import numpy as np

# Allow running as: python experiments/quick_probability_ci_eval.py
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from grouped_variance import VarianceParams, compute_variance_components
from probability_strategy import ProbabilityPredictionStrategy
from sample_data import ClassificationData


def simulate_leaves(
    data,
    n_groups,
    ci_group_size,
    leaf_size,
    empty_rate,
    rng,
):
    """Leaf sample sets drawn the way a grouped forest draws them.

    Each group shares one half-sample of the data; every leaf in the group is
    a subsample of that half. A leaf is left empty with probability
    ``empty_rate``.
    """
    n = data.num_samples
    half = n // 2
    leaf_samples = []
    for _ in range(n_groups):
        half_sample = rng.choice(n, size=half, replace=False)
        for _ in range(ci_group_size):
            if rng.uniform() < empty_rate:
                leaf_samples.append([])
                continue
            size = min(leaf_size, half)
            leaf_samples.append(rng.choice(half_sample, size=size, replace=False).tolist())
    return leaf_samples


def average_leaf_values(leaf_values):
    filled = ~leaf_values.empty_mask
    if not np.any(filled):
        raise ValueError("All leaves are empty")
    return leaf_values.values[filled].mean(axis=0)


def run_trial(class_probs, args, rng):
    outcomes = rng.choice(class_probs.size, size=args.n_samples, p=class_probs)
    weights = rng.uniform(0.5, 1.5, size=args.n_samples)
    data = ClassificationData(outcomes, weights)

    strategy = ProbabilityPredictionStrategy(
        num_classes=class_probs.size,
        variance_params=VarianceParams(no_good_groups_policy="nan"),
    )
    leaf_samples = simulate_leaves(
        data,
        n_groups=args.n_groups,
        ci_group_size=args.ci_group_size,
        leaf_size=args.leaf_size,
        empty_rate=args.empty_rate,
        rng=rng,
    )
    leaf_values = strategy.precompute_prediction_values(leaf_samples, data)
    average = average_leaf_values(leaf_values)
    prediction = strategy.predict(average)
    variance = strategy.compute_variance(average, leaf_values, args.ci_group_size)
    components = compute_variance_components(
        average,
        leaf_values,
        args.ci_group_size,
        params=strategy.variance_params,
    )
    return prediction, variance, components


def main():
    parser = argparse.ArgumentParser(
        description="Grouped-variance confidence intervals for forest class probabilities"
    )
    parser.add_argument(
        "--class-probs",
        type=str,
        default="0.6,0.3,0.1",
        help="Comma-separated true class probabilities",
    )
    parser.add_argument("--n-samples", type=int, default=1000)
    parser.add_argument("--n-groups", type=int, default=200)
    parser.add_argument("--ci-group-size", type=int, default=2)
    parser.add_argument("--leaf-size", type=int, default=20)
    parser.add_argument("--empty-rate", type=float, default=0.05)
    parser.add_argument("--n-trials", type=int, default=20)
    parser.add_argument("--random-state", type=int, default=42)
    parser.add_argument("--verbose", action="store_true")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    class_probs = np.array([float(p) for p in args.class_probs.split(",") if p.strip()])
    if class_probs.size == 0 or np.any(class_probs < 0.0):
        raise ValueError("class probabilities must be non-negative")
    class_probs = class_probs / class_probs.sum()

    rng = np.random.default_rng(args.random_state)
    predictions = []
    variances = []
    for trial in range(args.n_trials):
        prediction, variance, components = run_trial(class_probs, args, rng)
        predictions.append(prediction)
        variances.append(variance)
        width = 2.0 * 1.96 * np.sqrt(variance)
        print(
            f"trial={trial}"
            f" good_groups={components.num_good_groups}/{components.num_groups}"
            f" prediction={np.round(prediction, 4).tolist()}"
            f" ci_width={np.round(width, 4).tolist()}"
        )

    predictions = np.asarray(predictions)
    variances = np.asarray(variances)
    print(f"\ntrue={np.round(class_probs, 4).tolist()}")
    print(f"mean estimated variance={np.nanmean(variances, axis=0).tolist()}")
    print(f"empirical variance across trials={predictions.var(axis=0, ddof=1).tolist()}")


if __name__ == "__main__":
    main()
