"""Tests for native model lifetime management."""

from __future__ import annotations

import gc

import pytest

import pyliblinear as ll
from pyliblinear.errors import ConfigurationError, ModelClosedError
from pyliblinear.solvers import SolverType

X = [[0.0], [0.0], [10.0], [10.0]]
Y = [1, 1, 2, 2]


class TestTraining:
    """Tests for LinearModel creation."""

    def test_metadata(self, fake_solver) -> None:
        model = ll.train(["neg", "neg", "pos", "pos"], X, bias=1.0)
        assert model.labels == ("neg", "pos")
        assert model.n_classes == 2
        assert model.n_features == 1
        assert model.bias == 1.0
        assert model.solver is SolverType.L2R_L2LOSS_SVC_DUAL
        assert not model.closed
        assert "open" in repr(model)
        model.close()

    def test_rejected_parameters_raise(self, fake_solver) -> None:
        """A complaint from check_parameter aborts before training."""
        fake_solver.check_message = "C <= 0"
        with pytest.raises(ConfigurationError, match="C <= 0"):
            ll.train(Y, X)
        assert fake_solver.trained == []

    def test_verbose_training_output(self, fake_solver) -> None:
        ll.train(Y, X, verbose=True).close()
        assert "optimization finished" in fake_solver.output.getvalue()

    def test_quiet_training_output(self, fake_solver) -> None:
        ll.train(Y, X).close()
        assert fake_solver.output.getvalue() == ""


class TestRelease:
    """Tests for exactly-once release of the native handle."""

    def test_close_releases_once(self, fake_solver) -> None:
        model = ll.train(Y, X)
        handle = model.handle
        model.close()
        model.close()
        assert fake_solver.freed == [handle]
        assert model.closed

    def test_context_manager(self, fake_solver) -> None:
        with ll.train(Y, X) as model:
            handle = model.handle
            assert fake_solver.freed == []
        assert fake_solver.freed == [handle]

    def test_release_on_collection(self, fake_solver) -> None:
        model = ll.train(Y, X)
        handle = model.handle
        del model
        gc.collect()
        assert fake_solver.freed == [handle]

    def test_use_after_close_rejected(self, fake_solver) -> None:
        model = ll.train(Y, X)
        model.close()
        with pytest.raises(ModelClosedError):
            _ = model.handle
        with pytest.raises(ModelClosedError):
            ll.predict(model, [[0.0]])
        assert fake_solver.predict_calls == 0

    def test_metadata_survives_close(self, fake_solver) -> None:
        model = ll.train(Y, X)
        model.close()
        assert model.labels == (1, 2)
        assert "closed" in repr(model)

    def test_independent_models(self, fake_solver) -> None:
        first = ll.train(Y, X)
        second = ll.train(Y, X)
        first.close()
        assert ll.predict(second, [[10.0]]).labels == [2]
        second.close()
        assert sorted(fake_solver.freed) == [1, 2]
