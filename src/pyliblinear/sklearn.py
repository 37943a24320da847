"""scikit-learn compatible estimators backed by the native solver."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, cast

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin, RegressorMixin
from sklearn.utils.validation import check_array, check_is_fitted, check_X_y

from pyliblinear.api import predict, train
from pyliblinear.config import TrainOptions
from pyliblinear.errors import ConfigurationError
from pyliblinear.model import LinearModel
from pyliblinear.solvers import SolverType, is_regression, resolve_solver

if TYPE_CHECKING:
    from numpy.typing import NDArray

__all__ = ["LinearClassifier", "LinearRegressor"]


# =============================================================================
# Base Estimator
# =============================================================================


class _LinearEstimatorBase(BaseEstimator, ABC):  # type: ignore[misc]
    """Shared fitting logic. Subclasses choose the task."""

    model_: LinearModel

    def _train_options(self, **extra: Any) -> TrainOptions:
        solver = resolve_solver(self.solver)
        self._validate_solver(solver)
        return TrainOptions(
            solver=solver,
            C=self.C,
            eps=self.eps,
            bias=self.bias,
            verbose=self.verbose,
            **extra,
        )

    @abstractmethod
    def _validate_solver(self, solver: SolverType) -> None:
        """Reject solvers of the wrong task."""
        ...

    def _fit_model(self, X: Any, y: Any, options: TrainOptions) -> None:  # noqa: N803
        X, y = check_X_y(X, y, accept_sparse="csr", dtype=np.float64)  # noqa: N806
        self._release_model()
        self.model_ = train(y, X, options)
        self.n_features_in_ = X.shape[1]

    def _check_X(self, X: Any) -> Any:  # noqa: N802, N803
        check_is_fitted(self, ["model_"])
        return check_array(X, accept_sparse="csr", dtype=np.float64)

    def _release_model(self) -> None:
        model = getattr(self, "model_", None)
        if model is not None:
            model.close()


# =============================================================================
# Classifier
# =============================================================================


class LinearClassifier(ClassifierMixin, _LinearEstimatorBase):
    """Linear classifier (SVC or logistic regression).

    Parameters
    ----------
    solver : SolverType, int or str, default="L2R_L2LOSS_SVC_DUAL"
        Any non-regression solver.
    C : float, default=1.0
        Cost of constraint violation.
    eps : float, optional
        Stopping tolerance; the solver's default when omitted.
    bias : float, default=-1.0
        Value of the appended constant feature; negative disables it.
    class_weight : dict, optional
        Penalty multiplier per class label.
    verbose : bool, default=False
        Print solver diagnostics.

    Attributes
    ----------
    classes_ : ndarray
        Class labels in order of first appearance in ``y``. Score columns
        follow this order.
    model_ : LinearModel
        The underlying native model.
    """

    def __init__(
        self,
        solver: SolverType | int | str = "L2R_L2LOSS_SVC_DUAL",
        C: float = 1.0,  # noqa: N803
        eps: float | None = None,
        bias: float = -1.0,
        class_weight: dict[Any, float] | None = None,
        verbose: bool = False,
    ) -> None:
        self.solver = solver
        self.C = C
        self.eps = eps
        self.bias = bias
        self.class_weight = class_weight
        self.verbose = verbose

    def _validate_solver(self, solver: SolverType) -> None:
        if is_regression(solver):
            raise ConfigurationError(f"{solver.name} is a regression solver; use LinearRegressor")

    def fit(self, X: Any, y: Any) -> LinearClassifier:  # noqa: N803
        """Fit the classifier on ``X`` of shape (n_samples, n_features)."""
        options = self._train_options(weights=self.class_weight)
        self._fit_model(X, y, options)
        self.classes_ = np.asarray(self.model_.labels)
        return self

    def predict(self, X: Any) -> NDArray[Any]:  # noqa: N803
        """Predict class labels."""
        X = self._check_X(X)  # noqa: N806
        return np.asarray(predict(self.model_, X).labels)

    def decision_function(self, X: Any) -> NDArray[np.float64]:  # noqa: N803
        """Raw decision values.

        Two-class models return one column, positive values favouring
        ``classes_[0]``; otherwise one column per class.
        """
        X = self._check_X(X)  # noqa: N806
        scores = cast("NDArray[np.float64]", predict(self.model_, X, return_scores=True).scores)
        return scores.ravel() if scores.shape[1] == 1 else scores

    def predict_proba(self, X: Any) -> NDArray[np.float64]:  # noqa: N803
        """Class probabilities (logistic regression solvers only)."""
        X = self._check_X(X)  # noqa: N806
        return cast("NDArray[np.float64]", predict(self.model_, X, probability_estimates=True).scores)


# =============================================================================
# Regressor
# =============================================================================


class LinearRegressor(RegressorMixin, _LinearEstimatorBase):
    """Linear support vector regression.

    Parameters
    ----------
    solver : SolverType, int or str, default="L2R_L2LOSS_SVR"
        One of the SVR solvers.
    C : float, default=1.0
        Cost of constraint violation.
    eps : float, optional
        Stopping tolerance; the solver's default when omitted.
    p : float, default=0.1
        Epsilon of the epsilon-insensitive loss.
    bias : float, default=-1.0
        Value of the appended constant feature; negative disables it.
    verbose : bool, default=False
        Print solver diagnostics.
    """

    def __init__(
        self,
        solver: SolverType | int | str = "L2R_L2LOSS_SVR",
        C: float = 1.0,  # noqa: N803
        eps: float | None = None,
        p: float = 0.1,
        bias: float = -1.0,
        verbose: bool = False,
    ) -> None:
        self.solver = solver
        self.C = C
        self.eps = eps
        self.p = p
        self.bias = bias
        self.verbose = verbose

    def _validate_solver(self, solver: SolverType) -> None:
        if not is_regression(solver):
            raise ConfigurationError(f"{solver.name} is a classification solver; use LinearClassifier")

    def fit(self, X: Any, y: Any) -> LinearRegressor:  # noqa: N803
        """Fit the regressor on ``X`` of shape (n_samples, n_features)."""
        self._fit_model(X, y, self._train_options(p=self.p))
        return self

    def predict(self, X: Any) -> NDArray[np.float64]:  # noqa: N803
        """Predict target values."""
        X = self._check_X(X)  # noqa: N806
        return np.asarray(predict(self.model_, X).labels, dtype=np.float64)
