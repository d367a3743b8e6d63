# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np

EPS: float = 1e-12

# Coefficients larger than this mean the restricted least-squares
# subproblem has blown up.
BLOWUP: float = 1e12


def scale_tol(a: np.ndarray, tol: float = EPS) -> float:
    """Return an absolute tolerance scaled to the vector magnitude."""
    return tol * max(1.0, float(np.linalg.norm(a)))


def sign(value: float) -> int:
    """Return -1 for negative values and +1 otherwise (zero counts as +1)."""
    return -1 if value < 0 else 1


def as_vector(b, name: str = "b") -> np.ndarray:
    """
    Coerce `b` to a 1-D float64 array.

    Raises
    ------
    TypeError : if `b` is complex.
    ValueError : if `b` is not 1-D (an (m, 1) column is flattened).
    """
    b = np.asarray(b)
    if np.iscomplexobj(b):
        raise TypeError(f"{name} must be real-valued")
    if b.ndim == 2 and b.shape[1] == 1:
        b = b[:, 0]
    if b.ndim != 1:
        raise ValueError(f"{name} must be a vector, got shape {b.shape}")
    return b.astype(float, copy=True)
