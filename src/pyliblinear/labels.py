"""Label encoding between caller label values and solver class codes.

The native library identifies classes by the float value of their target.
Labels of any hashable type are mapped to dense codes ``1..K`` in order of
first appearance; the code is the label's 1-based position in
``LabelIndex.labels``.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyliblinear.errors import LabelCodeError

__all__ = ["LabelIndex"]


def _normalize(label: Any) -> Any:
    # numpy scalars hash equal to their Python counterparts; store the latter
    if isinstance(label, np.generic):
        return label.item()
    return label


class LabelIndex:
    """Bidirectional label <-> code mapping.

    Codes are append-only: once issued a code is never reassigned, and
    extending the index never disturbs existing codes.
    """

    __slots__ = ("_codes", "_labels")

    def __init__(self) -> None:
        self._codes: dict[Hashable, int] = {}
        self._labels: list[Any] = []

    @classmethod
    def encode(cls, labels: Iterable[Any]) -> tuple[NDArray[np.float64], LabelIndex]:
        """Encode training labels.

        Args:
            labels: Label sequence, one per training instance.

        Returns:
            Tuple of (float64 code per label, the new index).
        """
        index = cls()
        codes = np.fromiter((index._code_for(label) for label in labels), dtype=np.float64)
        return codes, index

    def encode_extra(self, values: Iterable[Any]) -> NDArray[np.int32]:
        """Encode additional labels, appending any not seen yet."""
        return np.fromiter((self._code_for(value) for value in values), dtype=np.int32)

    def decode(self, code: float) -> Any:
        """Return the label behind a class code.

        Raises:
            LabelCodeError: If no label was ever issued ``code``.
        """
        k = int(code) if np.isfinite(code) else 0
        if k != code or not 1 <= k <= len(self._labels):
            raise LabelCodeError(f"Class code {code!r} is outside the issued range [1, {len(self._labels)}]")
        return self._labels[k - 1]

    def code_of(self, label: Any) -> int:
        """Return the code issued for ``label``.

        Raises:
            KeyError: If the label is unknown.
        """
        return self._codes[_normalize(label)]

    @property
    def labels(self) -> tuple[Any, ...]:
        """Labels ordered by code (position ``k - 1`` holds code ``k``)."""
        return tuple(self._labels)

    def _code_for(self, label: Any) -> int:
        label = _normalize(label)
        code = self._codes.get(label)
        if code is None:
            self._labels.append(label)
            code = self._codes[label] = len(self._labels)
        return code

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label: object) -> bool:
        return _normalize(label) in self._codes

    def __repr__(self) -> str:
        return f"LabelIndex(labels={self._labels!r})"
