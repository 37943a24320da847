"""CLI for inspecting solvers and evaluating models on LIBSVM-format data."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import numpy as np
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from sklearn.datasets import load_svmlight_file

from pyliblinear.api import predict, train
from pyliblinear.config import TrainOptions
from pyliblinear.errors import LinearError
from pyliblinear.solvers import (
    SolverType,
    default_eps,
    is_regression,
    supports_init_sol,
    supports_probability,
)

app = typer.Typer(
    name="pyliblinear",
    help="Train and evaluate liblinear models.",
    no_args_is_help=True,
)
console = Console()


def _yes_no(flag: bool) -> str:
    return "[green]yes[/green]" if flag else "-"


@app.command()
def solvers() -> None:
    """List solver variants with their default tolerance and capabilities."""
    table = Table(title="Solvers", show_header=True, header_style="bold")
    table.add_column("Solver", style="cyan", no_wrap=True)
    table.add_column("Tag", justify="right")
    table.add_column("Task")
    table.add_column("Default eps", justify="right")
    table.add_column("Probabilities", justify="center")
    table.add_column("Warm start", justify="center")

    for solver in SolverType:
        table.add_row(
            solver.name,
            str(solver.value),
            "regression" if is_regression(solver) else "classification",
            f"{default_eps(solver):g}",
            _yes_no(supports_probability(solver)),
            _yes_no(supports_init_sol(solver)),
        )

    console.print(table)


@app.command()
def evaluate(
    train_file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="Training data in LIBSVM format."),
    ],
    test_file: Annotated[
        Optional[Path],
        typer.Option("--test", "-t", exists=True, dir_okay=False, help="Test data (defaults to the training data)."),
    ] = None,
    solver: Annotated[str, typer.Option("--solver", "-s", help="Solver name or tag.")] = "L2R_L2LOSS_SVC_DUAL",
    cost: Annotated[float, typer.Option("--cost", "-c", help="Cost parameter C.")] = 1.0,
    eps: Annotated[Optional[float], typer.Option("--eps", "-e", help="Stopping tolerance.")] = None,
    p: Annotated[float, typer.Option("--svr-p", "-p", help="SVR epsilon-insensitive loss width.")] = 0.1,
    bias: Annotated[float, typer.Option("--bias", "-B", help="Bias feature value; negative disables it.")] = -1.0,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show solver output.")] = False,
) -> None:
    """Train on TRAIN_FILE and report accuracy (or MSE for regression)."""
    try:
        options = TrainOptions(solver=solver, C=cost, eps=eps, p=p, bias=bias, verbose=verbose)
    except ValidationError as e:
        console.print(f"[red]Invalid options:[/red] {e}")
        raise typer.Exit(1) from e

    try:
        x_train, y_train = load_svmlight_file(str(train_file))
        if test_file is not None:
            x_test, y_test = load_svmlight_file(str(test_file), n_features=x_train.shape[1])
        else:
            x_test, y_test = x_train, y_train

        with train(y_train, x_train, options) as model:
            predictions = predict(model, x_test)
    except (LinearError, ValueError) as e:
        console.print(f"[red]ERROR[/red]: {e}")
        raise typer.Exit(1) from e

    predicted = np.asarray(predictions.labels, dtype=np.float64)

    table = Table(title=f"{options.solver.name} on {train_file.name}", show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Train instances", str(x_train.shape[0]))
    table.add_row("Test instances", str(x_test.shape[0]))
    table.add_row("Features", str(x_train.shape[1]))
    table.add_row("eps", f"{options.resolved_eps:g}")
    if is_regression(options.solver):
        mse = float(np.mean((predicted - y_test) ** 2)) if len(y_test) else float("nan")
        table.add_row("Mean squared error", f"{mse:.6f}")
    else:
        accuracy = float(np.mean(predicted == y_test)) if len(y_test) else float("nan")
        table.add_row("Classes", str(model.n_classes))
        table.add_row("Accuracy", f"{accuracy:.4%}")

    console.print(table)


if __name__ == "__main__":
    app()
