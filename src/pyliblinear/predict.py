"""Prediction through the native library, one instance per call."""

from __future__ import annotations

import ctypes
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, overload

import numpy as np
from numpy.typing import NDArray

from pyliblinear.config import PredictOptions
from pyliblinear.errors import ConfigurationError, DimensionMismatchError
from pyliblinear.model import LinearModel
from pyliblinear.nodes import encode_instances, matrix_shape
from pyliblinear.solvers import supports_probability

__all__ = ["PredictionResult", "Predictions", "predict_instances"]

_c_double_p = ctypes.POINTER(ctypes.c_double)


@dataclass(frozen=True)
class PredictionResult:
    """Prediction for a single instance.

    Attributes:
        label: Decoded label (or predicted value for regression models).
        scores: Per-class decision values or probabilities ordered by class
            code, when requested.
    """

    label: Any
    scores: NDArray[np.float64] | None = None


@dataclass(frozen=True, eq=False)
class Predictions:
    """Predictions for a batch of instances, in input row order."""

    labels: list[Any]
    scores: NDArray[np.float64] | None = None

    def __len__(self) -> int:
        return len(self.labels)

    @overload
    def __getitem__(self, i: int) -> PredictionResult: ...
    @overload
    def __getitem__(self, i: slice) -> list[PredictionResult]: ...
    def __getitem__(self, i: int | slice) -> PredictionResult | list[PredictionResult]:
        if isinstance(i, slice):
            return [self[j] for j in range(*i.indices(len(self)))]
        scores = self.scores[i] if self.scores is not None else None
        return PredictionResult(self.labels[i], scores)

    def __iter__(self) -> Iterator[PredictionResult]:
        for i in range(len(self)):
            yield self[i]


def predict_instances(model: LinearModel, matrix: Any, options: PredictOptions | None = None) -> Predictions:
    """Predict every instance (row) of ``matrix``.

    Args:
        model: An open trained model.
        matrix: Dense or sparse matrix of shape (n_samples, n_features).
        options: Prediction options.

    Returns:
        Decoded predictions, with scores when requested.

    Raises:
        DimensionMismatchError: If the feature count differs from training.
        ConfigurationError: If probabilities are requested from a solver
            that cannot produce them.
        ModelClosedError: If the model was closed.
    """
    options = options if options is not None else PredictOptions()
    probability = options.probability_estimates

    n_features = matrix_shape(matrix)[1]
    if n_features != model.n_features:
        raise DimensionMismatchError(
            f"Model has {model.n_features} features but {n_features} were provided"
        )
    if probability and not supports_probability(model.solver):
        raise ConfigurationError(
            f"Probability estimates are only available for logistic regression solvers, not {model.solver.name}"
        )

    arena = encode_instances(matrix, bias=model.bias)
    n_rows = arena.n_rows

    # The library writes up to nr_class scores per call
    width = max(model.n_classes, 2)
    buffer = np.zeros((n_rows, width), dtype=np.float64)
    stride = buffer.strides[0]
    base = buffer.ctypes.data
    outputs = np.empty(n_rows, dtype=np.float64)

    verbose = options.verbose if options.verbose is not None else model.verbose
    binding = model.binding
    with binding.session(verbose):
        handle = model.handle
        call = binding.predict_probability if probability else binding.predict_values
        for i in range(n_rows):
            scores = ctypes.cast(base + i * stride, _c_double_p)
            outputs[i] = call(handle, arena.row_pointer(i), scores)

    index = model.label_index
    if index is None:
        labels = outputs.tolist()
    else:
        labels = [index.decode(code) for code in outputs.tolist()]

    want_scores = probability or options.return_scores
    scores_out = buffer[:, : model.score_columns(probability)].copy() if want_scores else None
    return Predictions(labels=labels, scores=scores_out)
