"""Option models for training and prediction.

Both models are frozen pydantic models; invalid values surface as
``pydantic.ValidationError`` before any native call is made.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

from pyliblinear.solvers import SolverType, default_eps, resolve_solver

__all__ = ["PredictOptions", "TrainOptions", "merge_options"]


class TrainOptions(BaseModel):
    """Training options.

    Attributes:
        weights: Per-class penalty multipliers, keyed by label.
        solver: Solver variant; accepts a ``SolverType``, tag or name.
        eps: Stopping tolerance. ``None`` picks the solver's default.
        C: Cost of constraint violation.
        p: Epsilon of the SVR epsilon-insensitive loss.
        init_sol: Warm-start weight vector (``L2R_LR``/``L2R_L2LOSS_SVC`` only).
        bias: If non-negative, a constant feature with this value is
            appended to every instance.
        verbose: Forward the solver's diagnostic output to the console.
    """

    model_config = ConfigDict(frozen=True)

    weights: dict[Any, float] | None = None
    solver: SolverType = SolverType.L2R_L2LOSS_SVC_DUAL
    eps: float | None = None
    C: float = 1.0
    p: float = 0.1
    init_sol: tuple[float, ...] | None = None
    bias: float = -1.0
    verbose: bool = False

    @field_validator("solver", mode="before")
    @classmethod
    def validate_solver(cls, v: Any) -> SolverType:
        """Resolve solver names and raw tags."""
        return resolve_solver(v)

    @field_validator("weights", mode="before")
    @classmethod
    def validate_weights(cls, v: Any) -> Any:
        """Accept any mapping."""
        if isinstance(v, Mapping):
            return dict(v)
        return v

    @field_validator("init_sol", mode="before")
    @classmethod
    def validate_init_sol(cls, v: Any) -> Any:
        """Flatten array-likes into a tuple of floats."""
        if v is None:
            return None
        return tuple(np.asarray(v, dtype=np.float64).ravel().tolist())

    @field_validator("eps")
    @classmethod
    def validate_eps(cls, v: float | None) -> float | None:
        """Validate eps is positive when given."""
        if v is not None and not v > 0:
            raise ValueError("eps must be positive")
        return v

    @field_validator("C")
    @classmethod
    def validate_c(cls, v: float) -> float:
        """Validate C is positive."""
        if not v > 0:
            raise ValueError("C must be positive")
        return v

    @field_validator("p")
    @classmethod
    def validate_p(cls, v: float) -> float:
        """Validate p is non-negative."""
        if not v >= 0:
            raise ValueError("p must be non-negative")
        return v

    @property
    def resolved_eps(self) -> float:
        """Tolerance actually handed to the solver."""
        return self.eps if self.eps is not None else default_eps(self.solver)


class PredictOptions(BaseModel):
    """Prediction options.

    Attributes:
        probability_estimates: Return class probabilities (logistic
            regression solvers only).
        return_scores: Return per-class decision values.
        verbose: Diagnostic output; ``None`` reuses the model's setting.
    """

    model_config = ConfigDict(frozen=True)

    probability_estimates: bool = False
    return_scores: bool = False
    verbose: bool | None = None


def merge_options(cls: type[BaseModel], options: BaseModel | None, overrides: Mapping[str, Any]) -> Any:
    """Build a validated ``cls`` from base options plus keyword overrides."""
    if options is None:
        return cls.model_validate(dict(overrides))
    if not overrides:
        return options
    return cls.model_validate({**options.model_dump(), **overrides})
