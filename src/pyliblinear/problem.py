"""Assembly of the native ``problem`` and ``parameter`` structures.

``TrainingProblem`` owns every buffer the two structures point into. The
native model may keep pointers into them (the parameter block is copied into
the model by value, weight arrays included), so the bundle must stay alive
until the model is released.
"""

from __future__ import annotations

import ctypes
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyliblinear._abi import Parameter, Problem
from pyliblinear.config import TrainOptions
from pyliblinear.errors import ConfigurationError, DimensionMismatchError
from pyliblinear.labels import LabelIndex
from pyliblinear.nodes import NodeArena, encode_instances
from pyliblinear.solvers import SolverType, is_regression, supports_init_sol

__all__ = ["TrainingProblem", "build_problem"]

_c_double_p = ctypes.POINTER(ctypes.c_double)
_c_int_p = ctypes.POINTER(ctypes.c_int)


@dataclass(frozen=True, eq=False)
class TrainingProblem:
    """Native training structures plus the memory they reference."""

    problem: Problem
    parameter: Parameter
    arena: NodeArena
    targets: NDArray[np.float64]
    label_index: LabelIndex | None
    weight_labels: NDArray[np.int32]
    weight_values: NDArray[np.float64]
    init_sol: NDArray[np.float64] | None
    solver: SolverType
    n_classes: int = 0

    @property
    def n_features(self) -> int:
        """Input feature count, excluding the bias feature."""
        return self.arena.n_features

    @property
    def bias(self) -> float:
        return self.arena.bias


def build_problem(labels: Iterable[Any], matrix: Any, options: TrainOptions) -> TrainingProblem:
    """Encode labels and instances and fill the native structures.

    Args:
        labels: One label per instance. For regression solvers these are the
            numeric targets.
        matrix: Dense or sparse matrix of shape (n_samples, n_features).
        options: Validated training options.

    Returns:
        The assembled training problem.

    Raises:
        DimensionMismatchError: If the label count differs from the instance
            count, or the warm-start vector has the wrong length.
        ConfigurationError: If class weights are given to a regression solver
            or a warm start to a solver that cannot use it.
    """
    labels = list(labels)
    solver = options.solver
    arena = encode_instances(matrix, bias=options.bias)

    if arena.n_rows != len(labels):
        raise DimensionMismatchError(
            f"Number of instances in the training matrix ({arena.n_rows}) "
            f"does not match the number of labels ({len(labels)})"
        )

    label_index: LabelIndex | None = None
    n_classes = 0
    weight_labels = np.empty(0, dtype=np.int32)
    weight_values = np.empty(0, dtype=np.float64)
    if is_regression(solver):
        if options.weights:
            raise ConfigurationError(f"Class weights are not supported by regression solver {solver.name}")
        targets = np.asarray(labels, dtype=np.float64).reshape(-1)
    else:
        targets, label_index = LabelIndex.encode(labels)
        # The library counts classes from the targets; weight-only labels are not classes
        n_classes = len(label_index)
        if options.weights:
            weight_labels = label_index.encode_extra(options.weights.keys())
            weight_values = np.fromiter(options.weights.values(), dtype=np.float64)

    n = arena.n_features + (1 if options.bias >= 0 else 0)

    init_sol: NDArray[np.float64] | None = None
    if options.init_sol is not None:
        if not supports_init_sol(solver):
            raise ConfigurationError(
                f"init_sol is only supported by L2R_LR and L2R_L2LOSS_SVC, not {solver.name}"
            )
        init_sol = np.array(options.init_sol, dtype=np.float64)
        if len(init_sol) != n:
            raise DimensionMismatchError(
                f"init_sol has {len(init_sol)} entries but the problem has {n} features"
            )

    problem = Problem(
        l=arena.n_rows,
        n=n,
        y=targets.ctypes.data_as(_c_double_p),
        x=arena.pointer_table(),
        bias=options.bias,
    )
    # Zero-length weight arrays are passed as NULL with nr_weight = 0
    parameter = Parameter(
        solver_type=int(solver),
        eps=options.resolved_eps,
        C=options.C,
        nr_weight=len(weight_labels),
        weight_label=weight_labels.ctypes.data_as(_c_int_p) if len(weight_labels) else None,
        weight=weight_values.ctypes.data_as(_c_double_p) if len(weight_values) else None,
        p=options.p,
        init_sol=init_sol.ctypes.data_as(_c_double_p) if init_sol is not None else None,
    )

    return TrainingProblem(
        problem=problem,
        parameter=parameter,
        arena=arena,
        targets=targets,
        label_index=label_index,
        weight_labels=weight_labels,
        weight_values=weight_values,
        init_sol=init_sol,
        solver=solver,
        n_classes=n_classes,
    )
