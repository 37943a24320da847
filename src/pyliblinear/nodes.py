"""Conversion of feature matrices into the solver's sparse row format.

Each instance becomes a run of ``feature_node`` entries ``(index, value)``
with 1-based, increasing feature indices, terminated by a ``(-1, NaN)``
sentinel. All rows live in one contiguous arena; row pointers are derived
from the arena's base address only after it is completely filled, and the
arena is frozen afterwards so the pointers can never dangle.

Instances are rows of the input matrix, ``(n_samples, n_features)``.
"""

from __future__ import annotations

import ctypes
from dataclasses import dataclass
from typing import Any

import numpy as np
import scipy.sparse
from numpy.typing import NDArray

from pyliblinear._abi import NODE_DTYPE, FeatureNodePtr

__all__ = ["NodeArena", "encode_instances", "matrix_shape"]

SENTINEL_INDEX = -1


@dataclass(frozen=True, eq=False)
class NodeArena:
    """Backing storage and row pointers for a batch of encoded instances.

    Attributes:
        nodes: Read-only structured array with the ``feature_node`` layout.
        offsets: Start of each row in ``nodes``, plus the total node count.
        addresses: Read-only array of row start addresses (``feature_node*``).
        n_features: Feature count of the input, excluding the bias feature.
        bias: Bias value appended to every row, or negative for none.
    """

    nodes: NDArray[Any]
    offsets: NDArray[np.intp]
    addresses: NDArray[np.uintp]
    n_features: int
    bias: float

    @property
    def n_rows(self) -> int:
        """Number of encoded instances."""
        return len(self.addresses)

    def row_pointer(self, i: int) -> Any:
        """``feature_node*`` to the start of row ``i``."""
        return ctypes.cast(int(self.addresses[i]), FeatureNodePtr)

    def pointer_table(self) -> Any:
        """``feature_node**`` over all rows, as stored in ``problem.x``."""
        return self.addresses.ctypes.data_as(ctypes.POINTER(FeatureNodePtr))

    def row(self, i: int) -> tuple[NDArray[np.int32], NDArray[np.float64]]:
        """Return ``(indices, values)`` of row ``i`` without the sentinel."""
        segment = self.nodes[self.offsets[i] : self.offsets[i + 1] - 1]
        return segment["index"].copy(), segment["value"].copy()


def matrix_shape(matrix: Any) -> tuple[int, int]:
    """Return ``(n_samples, n_features)`` of a dense or sparse matrix."""
    if scipy.sparse.issparse(matrix):
        return matrix.shape
    arr = np.asarray(matrix)
    if arr.ndim != 2:
        raise ValueError(f"instances must be a 2D matrix, got {arr.ndim}D")
    return arr.shape


def encode_instances(matrix: Any, bias: float = -1.0) -> NodeArena:
    """Encode a dense or sparse matrix into a frozen node arena.

    Args:
        matrix: Array-like of shape (n_samples, n_features) or any scipy
            sparse matrix/array. NaN values are passed through untouched.
            Sparse rows are emitted in index order with duplicate entries
            summed; the caller's matrix is left as it is.
        bias: If non-negative, a feature ``n_features + 1`` with this value
            is appended to every row.

    Returns:
        The arena holding all rows.

    Raises:
        ValueError: If a dense input is not two-dimensional.
    """
    if scipy.sparse.issparse(matrix):
        nodes, offsets, n_features = _encode_sparse(matrix, bias)
    else:
        nodes, offsets, n_features = _encode_dense(matrix, bias)

    nodes.flags.writeable = False
    addresses = (nodes.ctypes.data + offsets[:-1] * NODE_DTYPE.itemsize).astype(np.uintp)
    addresses.flags.writeable = False
    offsets.flags.writeable = False
    return NodeArena(nodes=nodes, offsets=offsets, addresses=addresses, n_features=n_features, bias=bias)


def _encode_dense(matrix: Any, bias: float) -> tuple[NDArray[Any], NDArray[np.intp], int]:
    X = np.asarray(matrix, dtype=np.float64)  # noqa: N806
    if X.ndim != 2:
        raise ValueError(f"instances must be a 2D matrix, got {X.ndim}D")

    n_rows, n_features = X.shape
    has_bias = bias >= 0
    width = n_features + int(has_bias) + 1

    # One row of `width` nodes per instance, filled column block by column block
    grid = np.empty((n_rows, width), dtype=NODE_DTYPE)
    grid["index"][:, :n_features] = np.arange(1, n_features + 1, dtype=np.int32)
    grid["value"][:, :n_features] = X
    if has_bias:
        grid["index"][:, n_features] = n_features + 1
        grid["value"][:, n_features] = bias
    grid["index"][:, -1] = SENTINEL_INDEX
    grid["value"][:, -1] = np.nan

    offsets = np.arange(n_rows + 1, dtype=np.intp) * width
    return grid.reshape(-1), offsets, n_features


def _encode_sparse(matrix: Any, bias: float) -> tuple[NDArray[Any], NDArray[np.intp], int]:
    csr = matrix.tocsr()
    if not csr.has_canonical_format:
        # tocsr() may return the caller's matrix itself
        csr = csr.copy()
        csr.sum_duplicates()
    n_rows, n_features = csr.shape
    has_bias = bias >= 0

    # Stored entries only; indices are sorted and unique per row
    indptr = csr.indptr.astype(np.intp)
    start = indptr[0]
    indices = csr.indices[start : indptr[-1]]
    data = csr.data[start : indptr[-1]]
    row_nnz = np.diff(indptr)
    row_len = row_nnz + int(has_bias) + 1

    offsets = np.zeros(n_rows + 1, dtype=np.intp)
    np.cumsum(row_len, out=offsets[1:])

    nodes = np.empty(int(offsets[-1]), dtype=NODE_DTYPE)
    entry_row = np.repeat(np.arange(n_rows, dtype=np.intp), row_nnz)
    entry_pos = offsets[entry_row] + (np.arange(len(indices), dtype=np.intp) - (indptr[entry_row] - start))
    nodes["index"][entry_pos] = indices + 1
    nodes["value"][entry_pos] = data

    tail = offsets[:-1] + row_nnz
    if has_bias:
        nodes["index"][tail] = n_features + 1
        nodes["value"][tail] = bias
        tail = tail + 1
    nodes["index"][tail] = SENTINEL_INDEX
    nodes["value"][tail] = np.nan

    return nodes, offsets, n_features
