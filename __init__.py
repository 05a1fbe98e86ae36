"""
Forest probability confidence intervals

Class-probability prediction strategy for randomized tree ensembles. Leaves
are reduced to weighted class-frequency vectors once per forest, and each
query's averaged prediction gets a per-class variance from a grouped
jackknife estimate with an objective-Bayes debiasing step.
"""
