"""Smoke test for package import."""

import pyliblinear


def test_import() -> None:
    """Package imports and exposes its public API."""
    assert pyliblinear.__version__
    for name in pyliblinear.__all__:
        assert hasattr(pyliblinear, name), name
