"""Trained model handle.

A ``LinearModel`` is the single owner of a native model and of every buffer
the native model may dereference. The handle is released exactly once, by
``close()``, by leaving a ``with`` block, or as a last resort when the model
is garbage collected; the retained buffers are dropped only after the
native release has returned.
"""

from __future__ import annotations

import weakref
from typing import Any

from pyliblinear.binding import SolverBinding, get_binding
from pyliblinear.errors import ConfigurationError, ModelClosedError
from pyliblinear.labels import LabelIndex
from pyliblinear.problem import TrainingProblem
from pyliblinear.solvers import SolverType, is_regression

__all__ = ["LinearModel"]


def _release(binding: SolverBinding, handle: int, retained: TrainingProblem) -> None:
    # `retained` is only here to outlive the native free
    with binding.session(False):
        binding.free_model_content(handle)


class LinearModel:
    """A trained linear model backed by a native handle.

    Use :func:`pyliblinear.train` to create one. Models are context managers::

        with pyliblinear.train(y, X) as model:
            pyliblinear.predict(model, X_test)
    """

    def __init__(
        self,
        binding: SolverBinding,
        handle: int,
        problem: TrainingProblem,
        *,
        verbose: bool = False,
    ) -> None:
        self._binding = binding
        self._handle = handle
        self._problem: TrainingProblem | None = problem
        self._label_index = problem.label_index
        self._n_classes = problem.n_classes
        self._n_features = problem.n_features
        self._bias = problem.bias
        self._solver = problem.solver
        self.verbose = verbose
        self._finalizer = weakref.finalize(self, _release, binding, handle, problem)

    @classmethod
    def train(
        cls,
        problem: TrainingProblem,
        *,
        binding: SolverBinding | None = None,
        verbose: bool = False,
    ) -> LinearModel:
        """Run the native trainer on an assembled problem.

        Raises:
            ConfigurationError: If the library rejects the parameters.
        """
        binding = binding if binding is not None else get_binding()
        with binding.session(verbose):
            message = binding.check_parameter(problem.problem, problem.parameter)
            if message:
                raise ConfigurationError(message)
            handle = binding.train(problem.problem, problem.parameter)
        return cls(binding, handle, problem, verbose=verbose)

    # -- lifetime -----------------------------------------------------------

    def close(self) -> None:
        """Release the native model. Further calls are no-ops."""
        with self._binding.session(self.verbose):
            self._finalizer()
            self._problem = None

    @property
    def closed(self) -> bool:
        """Whether the native model has been released."""
        return not self._finalizer.alive

    @property
    def handle(self) -> int:
        """Opaque native handle.

        Only valid while holding the binding's session; see ``predict``.

        Raises:
            ModelClosedError: If the model was closed.
        """
        if not self._finalizer.alive:
            raise ModelClosedError("Model has been closed")
        return self._handle

    @property
    def binding(self) -> SolverBinding:
        return self._binding

    def __enter__(self) -> LinearModel:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- metadata -------------------------------------------------------------

    @property
    def solver(self) -> SolverType:
        return self._solver

    @property
    def n_features(self) -> int:
        """Feature count seen at training time, excluding the bias feature."""
        return self._n_features

    @property
    def bias(self) -> float:
        return self._bias

    @property
    def is_regression(self) -> bool:
        return is_regression(self._solver)

    @property
    def label_index(self) -> LabelIndex | None:
        """Label index of a classifier, ``None`` for regression models."""
        return self._label_index

    @property
    def labels(self) -> tuple[Any, ...]:
        """Trained class labels ordered by class code (empty for regression).

        Labels that only appeared as class-weight keys are not classes of the
        model and are left out.
        """
        if self._label_index is None:
            return ()
        return self._label_index.labels[: self._n_classes]

    @property
    def n_classes(self) -> int:
        return self._n_classes

    def score_columns(self, probability: bool = False) -> int:
        """Number of meaningful scores the library writes per instance."""
        if self.is_regression:
            return 1
        if not probability and self.n_classes == 2 and self._solver != SolverType.MCSVM_CS:
            return 1
        return max(self.n_classes, 1)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return (
            f"LinearModel(solver={self._solver.name}, n_features={self._n_features}, "
            f"n_classes={self.n_classes}, bias={self._bias}, {state})"
        )
