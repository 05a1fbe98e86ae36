"""
Data structures shared by prediction strategies.

PredictionValues holds the per-leaf statistics a strategy precomputes once per
forest and reads back for every query point.
"""
from data_structures.prediction_values import PredictionValues

__all__ = ["PredictionValues"]
