"""pyliblinear - train and apply LIBLINEAR models from Python.

The numerical work is done by the native liblinear library; this package
marshals numpy and scipy data into its structures, manages the lifetime of
the native models and decodes their predictions.

Example:
    >>> import pyliblinear as ll
    >>> with ll.train(["ham", "spam"], [[0.0], [1.0]], bias=1.0) as model:  # doctest: +SKIP
    ...     ll.predict(model, [[0.9]]).labels
    ['spam']
"""

from pyliblinear.api import predict, train
from pyliblinear.binding import SolverBinding, get_binding, load_binding, set_binding
from pyliblinear.config import PredictOptions, TrainOptions
from pyliblinear.errors import (
    ConfigurationError,
    DimensionMismatchError,
    LabelCodeError,
    LinearError,
    ModelClosedError,
    SolverLibraryError,
)
from pyliblinear.labels import LabelIndex
from pyliblinear.model import LinearModel
from pyliblinear.predict import PredictionResult, Predictions
from pyliblinear.solvers import SolverType, default_eps

__all__ = [
    # Main API
    "predict",
    "train",
    # Configuration
    "PredictOptions",
    "SolverType",
    "TrainOptions",
    "default_eps",
    # Models and results
    "LabelIndex",
    "LinearModel",
    "PredictionResult",
    "Predictions",
    # Native library
    "SolverBinding",
    "get_binding",
    "load_binding",
    "set_binding",
    # Errors
    "ConfigurationError",
    "DimensionMismatchError",
    "LabelCodeError",
    "LinearError",
    "ModelClosedError",
    "SolverLibraryError",
]

__version__ = "0.1.0"
