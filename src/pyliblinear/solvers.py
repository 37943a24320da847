"""Solver variants understood by the native library.

The integer values are the library's own ``solver_type`` tags and are passed
through unchanged.
"""

from __future__ import annotations

import operator
from enum import IntEnum

from pyliblinear.errors import ConfigurationError

__all__ = [
    "SolverType",
    "default_eps",
    "is_regression",
    "resolve_solver",
    "supports_init_sol",
    "supports_probability",
]


class SolverType(IntEnum):
    """Regularized linear model solved by the native library."""

    L2R_LR = 0
    L2R_L2LOSS_SVC_DUAL = 1
    L2R_L2LOSS_SVC = 2
    L2R_L1LOSS_SVC_DUAL = 3
    MCSVM_CS = 4
    L1R_L2LOSS_SVC = 5
    L1R_LR = 6
    L2R_LR_DUAL = 7
    L2R_L2LOSS_SVR = 11
    L2R_L2LOSS_SVR_DUAL = 12
    L2R_L1LOSS_SVR_DUAL = 13


_PRIMAL_EPS = frozenset(
    {
        SolverType.L2R_LR,
        SolverType.L2R_L2LOSS_SVC,
        SolverType.L1R_L2LOSS_SVC,
        SolverType.L1R_LR,
    }
)
_DUAL_EPS = frozenset(
    {
        SolverType.L2R_L2LOSS_SVC_DUAL,
        SolverType.L2R_L1LOSS_SVC_DUAL,
        SolverType.MCSVM_CS,
        SolverType.L2R_LR_DUAL,
        SolverType.L2R_L2LOSS_SVR_DUAL,
        SolverType.L2R_L1LOSS_SVR_DUAL,
    }
)
_REGRESSION = frozenset(
    {
        SolverType.L2R_L2LOSS_SVR,
        SolverType.L2R_L2LOSS_SVR_DUAL,
        SolverType.L2R_L1LOSS_SVR_DUAL,
    }
)
_PROBABILISTIC = frozenset({SolverType.L2R_LR, SolverType.L1R_LR, SolverType.L2R_LR_DUAL})
_WARM_START = frozenset({SolverType.L2R_LR, SolverType.L2R_L2LOSS_SVC})


def default_eps(solver: int) -> float:
    """Stopping tolerance used when the caller does not supply one.

    Args:
        solver: A ``SolverType`` or any raw integer tag.

    Returns:
        0.01 for primal solvers, 0.001 for the primal SVR, 0.1 for dual
        solvers and 0.001 for anything unrecognised.
    """
    if solver in _PRIMAL_EPS:
        return 0.01
    if solver == SolverType.L2R_L2LOSS_SVR:
        return 0.001
    if solver in _DUAL_EPS:
        return 0.1
    return 0.001


def is_regression(solver: int) -> bool:
    """Whether the solver fits a regression (SVR) model."""
    return solver in _REGRESSION


def supports_probability(solver: int) -> bool:
    """Whether the library can produce probability estimates for the solver."""
    return solver in _PROBABILISTIC


def supports_init_sol(solver: int) -> bool:
    """Whether the solver accepts a warm-start vector."""
    return solver in _WARM_START


def resolve_solver(value: SolverType | int | str) -> SolverType:
    """Resolve a solver from an enum member, integer tag or member name.

    Raises:
        ConfigurationError: If the value names no known solver.
    """
    if isinstance(value, SolverType):
        return value
    if isinstance(value, str):
        key = value.strip().upper()
        if key.lstrip("-").isdigit():
            value = int(key)
        else:
            try:
                return SolverType[key]
            except KeyError:
                names = ", ".join(s.name for s in SolverType)
                raise ConfigurationError(f"Unknown solver {value!r}; expected one of: {names}") from None
    if isinstance(value, bool):
        raise ConfigurationError("Solver must be a SolverType, int or str, got bool")
    try:
        tag = operator.index(value)
    except TypeError:
        raise ConfigurationError(f"Solver must be a SolverType, int or str, got {type(value).__name__}") from None
    try:
        return SolverType(tag)
    except ValueError:
        raise ConfigurationError(f"Unknown solver tag {tag}") from None
