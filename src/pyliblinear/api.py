"""Top-level ``train`` and ``predict`` functions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pyliblinear.config import PredictOptions, TrainOptions, merge_options
from pyliblinear.model import LinearModel
from pyliblinear.predict import Predictions, predict_instances
from pyliblinear.problem import build_problem

__all__ = ["predict", "train"]


def train(
    labels: Iterable[Any],
    matrix: Any,
    options: TrainOptions | None = None,
    **overrides: Any,
) -> LinearModel:
    """Train a linear model.

    Args:
        labels: One label per instance; any hashable values for classifiers,
            numeric targets for regression solvers.
        matrix: Dense array-like or scipy sparse matrix of shape
            (n_samples, n_features).
        options: Training options. Keyword arguments override its fields.
        **overrides: Any ``TrainOptions`` field, e.g. ``solver="L2R_LR"``.

    Returns:
        The trained model. Close it (or use it as a context manager) to
        release native memory deterministically.

    Example:
        >>> model = train([1, 1, 2, 2], [[0], [0], [10], [10]], bias=1.0)  # doctest: +SKIP
        >>> predict(model, [[0], [10]]).labels  # doctest: +SKIP
        [1, 2]
    """
    options = merge_options(TrainOptions, options, overrides)
    problem = build_problem(labels, matrix, options)
    return LinearModel.train(problem, verbose=options.verbose)


def predict(
    model: LinearModel,
    matrix: Any,
    options: PredictOptions | None = None,
    **overrides: Any,
) -> Predictions:
    """Predict labels for every instance of ``matrix``.

    Args:
        model: A trained, open model.
        matrix: Dense or sparse matrix with the training feature count.
        options: Prediction options. Keyword arguments override its fields.
        **overrides: Any ``PredictOptions`` field, e.g.
            ``probability_estimates=True``.
    """
    options = merge_options(PredictOptions, options, overrides)
    return predict_instances(model, matrix, options)
