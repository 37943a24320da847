"""Pytest configuration for pyliblinear tests.

Most tests run against ``FakeSolver``, a nearest-centroid stand-in that reads
the same ctypes structures the native library reads. Tests marked
``liblinear`` need the real shared library and are skipped unless
``$PYLIBLINEAR_LIBRARY`` points at it.
"""

from __future__ import annotations

import io
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pytest
from rich.console import Console

from pyliblinear.binding import LIBRARY_ENV_VAR, SolverBinding, set_binding


def read_row(row: Any) -> list[tuple[int, float]]:
    """Read a sentinel-terminated ``feature_node*`` into (index, value) pairs."""
    out: list[tuple[int, float]] = []
    j = 0
    while row[j].index != -1:
        out.append((row[j].index, row[j].value))
        j += 1
    return out


def _dense(row: list[tuple[int, float]], n: int) -> np.ndarray:
    x = np.zeros(n)
    for index, value in row:
        if index <= n:
            x[index - 1] = value
    return x


@dataclass
class FakeModel:
    n: int
    regression: bool
    classes: list[float]
    centroids: np.ndarray
    X: np.ndarray
    targets: np.ndarray


@dataclass
class TrainRecord:
    """Snapshot of the structures handed to ``train``."""

    l: int  # noqa: E741
    n: int
    bias: float
    rows: list[list[tuple[int, float]]]
    targets: list[float]
    solver_type: int
    eps: float
    C: float
    p: float
    weights: dict[int, float] = field(default_factory=dict)
    init_sol: list[float] | None = None


class FakeSolver(SolverBinding):
    """In-process nearest-centroid solver speaking the native ABI."""

    _REGRESSION_TAGS = (11, 12, 13)

    def __init__(self) -> None:
        self.output = io.StringIO()
        self.trained: list[TrainRecord] = []
        self.models: dict[int, FakeModel] = {}
        self.freed: list[int] = []
        self.predict_calls = 0
        self.check_message: str | None = None
        self._next_handle = 1
        super().__init__(None, console=Console(file=self.output, force_terminal=False, width=200))

    @staticmethod
    def _declare(library: Any) -> None:
        pass

    def set_print_string_function(self, callback: Any) -> None:
        self.print_callback = callback

    def check_parameter(self, problem: Any, parameter: Any) -> str | None:
        return self.check_message

    def train(self, problem: Any, parameter: Any) -> int:
        rows = [read_row(problem.x[i]) for i in range(problem.l)]
        targets = [problem.y[i] for i in range(problem.l)]
        record = TrainRecord(
            l=problem.l,
            n=problem.n,
            bias=problem.bias,
            rows=rows,
            targets=targets,
            solver_type=parameter.solver_type,
            eps=parameter.eps,
            C=parameter.C,
            p=parameter.p,
            weights={parameter.weight_label[k]: parameter.weight[k] for k in range(parameter.nr_weight)},
            init_sol=[parameter.init_sol[k] for k in range(problem.n)] if parameter.init_sol else None,
        )
        self.trained.append(record)
        self.print_callback(b"fake solver: optimization finished\n")

        X = np.array([_dense(r, problem.n) for r in rows]).reshape(problem.l, problem.n)  # noqa: N806
        y = np.asarray(targets, dtype=np.float64)
        classes = list(dict.fromkeys(targets))
        centroids = np.array([X[y == c].mean(axis=0) for c in classes]).reshape(len(classes), problem.n)

        handle = self._next_handle
        self._next_handle += 1
        self.models[handle] = FakeModel(
            n=problem.n,
            regression=parameter.solver_type in self._REGRESSION_TAGS,
            classes=classes,
            centroids=centroids,
            X=X,
            targets=y,
        )
        return handle

    def _decision(self, handle: int, row: Any) -> tuple[FakeModel, np.ndarray]:
        model = self.models[handle]
        self.predict_calls += 1
        x = _dense(read_row(row), model.n)
        if model.regression:
            return model, ((model.X - x) ** 2).sum(axis=1)
        return model, -((model.centroids - x) ** 2).sum(axis=1)

    def predict_values(self, handle: int, row: Any, scores: Any) -> float:
        model, decision = self._decision(handle, row)
        if model.regression:
            value = float(model.targets[int(np.argmin(decision))])
            scores[0] = value
            return value
        if len(model.classes) == 2:
            scores[0] = float(decision[0] - decision[1])
        else:
            for k, d in enumerate(decision):
                scores[k] = float(d)
        return model.classes[int(np.argmax(decision))]

    def predict_probability(self, handle: int, row: Any, scores: Any) -> float:
        model, decision = self._decision(handle, row)
        prob = np.exp(decision - decision.max())
        prob /= prob.sum()
        for k, v in enumerate(prob):
            scores[k] = float(v)
        return model.classes[int(np.argmax(prob))]

    def free_model_content(self, handle: int) -> None:
        self.freed.append(handle)
        del self.models[handle]


@pytest.fixture
def fake_solver() -> Iterator[FakeSolver]:
    """Install a ``FakeSolver`` as the process-wide binding."""
    solver = FakeSolver()
    previous = set_binding(solver)
    yield solver
    set_binding(previous)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip tests needing the native library when it is not configured."""
    if os.environ.get(LIBRARY_ENV_VAR):
        return
    skip = pytest.mark.skip(reason=f"{LIBRARY_ENV_VAR} not set")
    for item in items:
        if "liblinear" in item.keywords:
            item.add_marker(skip)
