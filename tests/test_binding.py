"""Tests for library resolution and the serialized native call path."""

from __future__ import annotations

import ctypes.util
import threading

import pytest

from pyliblinear import binding as binding_mod
from pyliblinear.binding import LIBRARY_ENV_VAR, find_library, get_binding, load_binding, set_binding
from pyliblinear.errors import SolverLibraryError


class TestFindLibrary:
    """Tests for locating the shared library."""

    def test_env_var_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LIBRARY_ENV_VAR, "/opt/liblinear/liblinear.so")
        assert find_library() == "/opt/liblinear/liblinear.so"

    def test_system_search(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LIBRARY_ENV_VAR, raising=False)
        monkeypatch.setattr(ctypes.util, "find_library", lambda name: f"lib{name}.so.4")
        assert find_library() == "liblinear.so.4"

    def test_not_found(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LIBRARY_ENV_VAR, raising=False)
        monkeypatch.setattr(ctypes.util, "find_library", lambda name: None)
        with pytest.raises(SolverLibraryError, match=LIBRARY_ENV_VAR):
            find_library()

    def test_load_failure(self, tmp_path) -> None:
        with pytest.raises(SolverLibraryError, match="Could not load"):
            load_binding(tmp_path / "missing.so")


class TestProcessBinding:
    """Tests for the cached process-wide binding."""

    def test_set_binding_returns_previous(self, fake_solver) -> None:
        other = type(fake_solver)()
        assert set_binding(other) is fake_solver
        assert get_binding() is other
        assert set_binding(fake_solver) is other

    def test_lazy_load_errors_surface(self, monkeypatch: pytest.MonkeyPatch) -> None:
        previous = set_binding(None)
        try:
            monkeypatch.delenv(LIBRARY_ENV_VAR, raising=False)
            monkeypatch.setattr(ctypes.util, "find_library", lambda name: None)
            with pytest.raises(SolverLibraryError):
                get_binding()
        finally:
            set_binding(previous)


class TestSession:
    """Tests for verbosity and call serialization."""

    def test_verbose_output_forwarded(self, fake_solver) -> None:
        with fake_solver.session(True):
            fake_solver.print_callback(b"iter 1\n")
        assert "iter 1" in fake_solver.output.getvalue()

    def test_quiet_output_dropped(self, fake_solver) -> None:
        with fake_solver.session(False):
            fake_solver.print_callback(b"iter 1\n")
        assert fake_solver.output.getvalue() == ""

    def test_flag_restored(self, fake_solver) -> None:
        with fake_solver.session(True):
            assert fake_solver.verbose is True
            with fake_solver.session(False):
                assert fake_solver.verbose is False
            assert fake_solver.verbose is True
        assert fake_solver.verbose is False

    def test_session_excludes_other_threads(self, fake_solver) -> None:
        """A second thread cannot enter while a session is held."""
        entered = threading.Event()

        def worker() -> None:
            with fake_solver.session(False):
                entered.set()

        with fake_solver.session(True):
            thread = threading.Thread(target=worker)
            thread.start()
            assert not entered.wait(timeout=0.2)
            assert fake_solver.verbose is True
        thread.join(timeout=5)
        assert entered.is_set()

    def test_lock_is_process_wide(self, fake_solver) -> None:
        other = type(fake_solver)()
        entered = threading.Event()

        def worker() -> None:
            with other.session(False):
                entered.set()

        with fake_solver.session(True):
            thread = threading.Thread(target=worker)
            thread.start()
            assert not entered.wait(timeout=0.2)
        thread.join(timeout=5)
        assert entered.is_set()
        assert binding_mod._CALL_LOCK.acquire(blocking=False)
        binding_mod._CALL_LOCK.release()
