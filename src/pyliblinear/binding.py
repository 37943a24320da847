"""Access to the native solver library.

The library is resolved once per process and cached. It reports progress
through a single process-wide print hook, so verbosity is a process-wide
flag; every native call runs inside ``SolverBinding.session`` which holds one
process-wide lock while setting the flag and calling into the library.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from rich.console import Console

from pyliblinear._abi import FeatureNodePtr, Parameter, PrintStringFunc, Problem
from pyliblinear.errors import SolverLibraryError

__all__ = [
    "LIBRARY_ENV_VAR",
    "SolverBinding",
    "find_library",
    "get_binding",
    "load_binding",
    "set_binding",
]

LIBRARY_ENV_VAR = "PYLIBLINEAR_LIBRARY"

_c_double_p = ctypes.POINTER(ctypes.c_double)

# Serializes verbosity changes together with the native call they apply to.
_CALL_LOCK = threading.RLock()

_binding: SolverBinding | None = None
_binding_lock = threading.Lock()


class SolverBinding:
    """Typed entry points of a loaded solver library.

    Args:
        library: The loaded shared library.
        console: Console receiving diagnostic output; defaults to stderr.
    """

    def __init__(self, library: Any, *, console: Console | None = None) -> None:
        self.verbose = False
        self.console = console if console is not None else Console(stderr=True)
        self._lib = library
        self._declare(library)
        # Must stay referenced for as long as the library may call it
        self._print_callback = PrintStringFunc(self._print)
        self.set_print_string_function(self._print_callback)

    @staticmethod
    def _declare(library: Any) -> None:
        library.train.argtypes = [ctypes.POINTER(Problem), ctypes.POINTER(Parameter)]
        library.train.restype = ctypes.c_void_p
        library.check_parameter.argtypes = [ctypes.POINTER(Problem), ctypes.POINTER(Parameter)]
        library.check_parameter.restype = ctypes.c_char_p
        for name in ("predict_values", "predict_probability"):
            fn = getattr(library, name)
            fn.argtypes = [ctypes.c_void_p, FeatureNodePtr, _c_double_p]
            fn.restype = ctypes.c_double
        library.free_model_content.argtypes = [ctypes.c_void_p]
        library.free_model_content.restype = None
        library.set_print_string_function.argtypes = [PrintStringFunc]
        library.set_print_string_function.restype = None

    def _print(self, message: bytes | None) -> None:
        if self.verbose and message:
            self.console.print(message.decode("utf-8", errors="replace"), end="", markup=False, highlight=False)

    @contextmanager
    def session(self, verbose: bool) -> Iterator[SolverBinding]:
        """Hold the native call lock with the verbosity flag set.

        The previous flag value is restored on exit.
        """
        with _CALL_LOCK:
            previous = self.verbose
            self.verbose = verbose
            try:
                yield self
            finally:
                self.verbose = previous

    # -- native entry points; call inside ``session`` --------------------------

    def set_print_string_function(self, callback: Any) -> None:
        self._lib.set_print_string_function(callback)

    def check_parameter(self, problem: Problem, parameter: Parameter) -> str | None:
        """Return the library's complaint about the parameters, if any."""
        message = self._lib.check_parameter(ctypes.byref(problem), ctypes.byref(parameter))
        return message.decode("utf-8", errors="replace") if message else None

    def train(self, problem: Problem, parameter: Parameter) -> int:
        """Train a model and return its opaque handle."""
        handle = self._lib.train(ctypes.byref(problem), ctypes.byref(parameter))
        if not handle:
            raise SolverLibraryError("Native train returned a null model")
        return handle

    def predict_values(self, handle: int, row: Any, scores: Any) -> float:
        return self._lib.predict_values(handle, row, scores)

    def predict_probability(self, handle: int, row: Any, scores: Any) -> float:
        return self._lib.predict_probability(handle, row, scores)

    def free_model_content(self, handle: int) -> None:
        self._lib.free_model_content(handle)


def find_library() -> str:
    """Locate the solver library.

    ``$PYLIBLINEAR_LIBRARY`` wins; otherwise the system search for
    ``liblinear`` is used.

    Raises:
        SolverLibraryError: If nothing is found.
    """
    path = os.environ.get(LIBRARY_ENV_VAR) or ctypes.util.find_library("linear")
    if not path:
        raise SolverLibraryError(
            f"Could not find the liblinear shared library. Install liblinear or set {LIBRARY_ENV_VAR}."
        )
    return path


def load_binding(path: str | os.PathLike[str] | None = None) -> SolverBinding:
    """Load the solver library from ``path`` (or ``find_library()``)."""
    path = os.fspath(path) if path is not None else find_library()
    try:
        library = ctypes.CDLL(path)
    except OSError as e:
        raise SolverLibraryError(f"Could not load solver library {path!r}: {e}") from e
    try:
        return SolverBinding(library)
    except AttributeError as e:
        raise SolverLibraryError(f"{path!r} is missing a required entry point: {e}") from e


def get_binding() -> SolverBinding:
    """Return the process-wide binding, loading the library on first use."""
    global _binding
    if _binding is None:
        with _binding_lock:
            if _binding is None:
                _binding = load_binding()
    return _binding


def set_binding(binding: SolverBinding | None) -> SolverBinding | None:
    """Install ``binding`` as the process-wide binding.

    Passing ``None`` resets to lazy loading. Returns the previous binding.
    """
    global _binding
    with _binding_lock:
        previous, _binding = _binding, binding
    return previous
