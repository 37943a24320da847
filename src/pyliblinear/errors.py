"""Exception types raised by pyliblinear.

Every error is raised synchronously to the caller of ``train``/``predict``;
nothing is retried.
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "DimensionMismatchError",
    "LabelCodeError",
    "LinearError",
    "ModelClosedError",
    "SolverLibraryError",
]


class LinearError(Exception):
    """Base class for all pyliblinear errors."""


class DimensionMismatchError(LinearError, ValueError):
    """Instance or feature counts disagree between inputs."""


class ConfigurationError(LinearError, ValueError):
    """Unsupported option combination (e.g. warm start for a dual solver)."""


class LabelCodeError(LinearError, LookupError):
    """A class code has no label behind it.

    Raised when the solver hands back a code the label index never issued.
    This is an internal invariant violation, not a user input error.
    """


class ModelClosedError(LinearError, RuntimeError):
    """The model's native handle has already been released."""


class SolverLibraryError(LinearError, OSError):
    """The shared solver library could not be located, loaded or called."""
