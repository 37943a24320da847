"""ctypes mirrors of the native library's structures.

Field order and types must match the library's ``feature_node``, ``problem``
and ``parameter`` structs exactly.
"""

from __future__ import annotations

import ctypes

import numpy as np

__all__ = [
    "NODE_DTYPE",
    "FeatureNode",
    "FeatureNodePtr",
    "Parameter",
    "PrintStringFunc",
    "Problem",
]


class FeatureNode(ctypes.Structure):
    _fields_ = [
        ("index", ctypes.c_int),
        ("value", ctypes.c_double),
    ]


FeatureNodePtr = ctypes.POINTER(FeatureNode)


class Problem(ctypes.Structure):
    _fields_ = [
        ("l", ctypes.c_int),  # instances
        ("n", ctypes.c_int),  # features, including the bias feature
        ("y", ctypes.POINTER(ctypes.c_double)),
        ("x", ctypes.POINTER(FeatureNodePtr)),
        ("bias", ctypes.c_double),
    ]


class Parameter(ctypes.Structure):
    _fields_ = [
        ("solver_type", ctypes.c_int),
        ("eps", ctypes.c_double),
        ("C", ctypes.c_double),
        ("nr_weight", ctypes.c_int),
        ("weight_label", ctypes.POINTER(ctypes.c_int)),
        ("weight", ctypes.POINTER(ctypes.c_double)),
        ("p", ctypes.c_double),
        ("init_sol", ctypes.POINTER(ctypes.c_double)),
    ]


PrintStringFunc = ctypes.CFUNCTYPE(None, ctypes.c_char_p)

# numpy view of a feature_node, so whole rows can be filled with array ops.
NODE_DTYPE = np.dtype([("index", np.int32), ("value", np.float64)], align=True)

assert NODE_DTYPE.itemsize == ctypes.sizeof(FeatureNode)
assert NODE_DTYPE.fields["value"][1] == FeatureNode.value.offset
