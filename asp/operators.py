# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Operator adapter
"""

import logging
from typing import Tuple, Union

import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla

logger = logging.getLogger(__name__)

OperatorLike = Union[np.ndarray, sp.spmatrix, sp.sparray, spla.LinearOperator]


class CountingOperator:
    """
    Wrap a matrix or linear operator A and count the products taken with it.

    Only `A @ v` and `A.T @ v` are ever requested, so A does not need to be
    materialised. Columns are pulled out with a one-hot unit vector that
    belongs to this instance; the unit vector is all zeros between calls.

    Parameters
    ----------
    A : ndarray | scipy.sparse matrix | LinearOperator   (m, n)

    Attributes
    ----------
    nprod_a : int
        Number of forward products A @ v.
    nprod_at : int
        Number of adjoint products A.T @ v.
    """

    def __init__(self, A: OperatorLike):
        if isinstance(A, np.ndarray):
            if A.ndim != 2:
                raise ValueError(f"A must be 2-D, got shape {A.shape}")
            if np.iscomplexobj(A):
                raise TypeError("A must be real-valued")
            A = A.astype(float, copy=False)
        try:
            self._op = spla.aslinearoperator(A)
        except TypeError as e:
            raise TypeError(
                "A must be an ndarray, a scipy.sparse matrix or a LinearOperator"
            ) from e

        self.shape: Tuple[int, int] = self._op.shape
        self.nprod_a = 0
        self.nprod_at = 0
        self._unit = np.zeros(self.shape[1])

    def matvec(self, v: np.ndarray) -> np.ndarray:
        """Forward product A @ v."""
        self.nprod_a += 1
        return np.asarray(self._op.matvec(v), dtype=float).ravel()

    def rmatvec(self, v: np.ndarray) -> np.ndarray:
        """Adjoint product A.T @ v."""
        self.nprod_at += 1
        return np.asarray(self._op.rmatvec(v), dtype=float).ravel()

    def column(self, p: int) -> np.ndarray:
        """
        Return a = A[:, p] as A @ e_p.

        The unit vector is reused across calls to avoid allocating an n-vector
        per column, and is reset to zero before returning.
        """
        self._unit[p] = 1.0
        try:
            a = self.matvec(self._unit)
        finally:
            self._unit[p] = 0.0
        return a
