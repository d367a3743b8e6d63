# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from typing import Optional, Tuple

import numpy as np
from scipy.linalg import solve_triangular

from .utils import EPS, scale_tol

logger = logging.getLogger(__name__)


class LinearDependenceError(np.linalg.LinAlgError):
    """A new column is numerically dependent on the columns already factored."""


def qraddcol(
    S: np.ndarray,
    R: np.ndarray,
    a: np.ndarray,
    k: int,
    piv_tol: float = EPS,
) -> None:
    """
    Append column `a` to the factorization of S[:, :k], in place.

    R[:k, :k] is the upper-triangular factor with R.T @ R = S.T @ S for the
    first k columns of S (the R of a thin QR of S[:, :k], Q is never formed).
    On return S[:, k] = a and R[:k+1, :k+1] factors S[:, :k+1].

    The new column of R is u = R^-T (S.T a). Its diagonal entry is taken as
    the norm of the projection residual a - S z, refined once, rather than
    sqrt(|a|^2 - |u|^2), which cancels badly for nearly dependent columns
    (Björck's corrected update).

    Parameters
    ----------
    S : (m, cap) ndarray
        Design buffer; only the first k columns are read.
    R : (cap, cap) ndarray
        Factor buffer; only R[:k, :k] is read.
    a : (m,) ndarray
        Column to append.
    k : int
        Number of columns currently factored, k < cap.
    piv_tol : float
        Relative pivot tolerance.

    Raises
    ------
    LinearDependenceError : if the new diagonal is not above
        piv_tol * max(1, |a|). S and R are left untouched.
    """
    a = np.asarray(a, dtype=float)
    anorm = float(np.linalg.norm(a))

    if k == 0:
        u = np.zeros(0)
        gamma = anorm
    else:
        Rk = R[:k, :k]
        Sk = S[:, :k]
        # First approximation to min ||Sk z - a||
        u = solve_triangular(Rk, Sk.T @ a, trans="T", check_finite=False)
        z = solve_triangular(Rk, u, check_finite=False)
        r = a - Sk @ z
        # One step of refinement
        du = solve_triangular(Rk, Sk.T @ r, trans="T", check_finite=False)
        z += solve_triangular(Rk, du, check_finite=False)
        u += du
        r = a - Sk @ z
        gamma = float(np.linalg.norm(r))

    if not np.isfinite(gamma) or gamma <= scale_tol(a, piv_tol):
        raise LinearDependenceError(
            f"column {k} is linearly dependent on the active columns "
            f"(diagonal {gamma:.3e}, |a| = {anorm:.3e})"
        )

    S[:, k] = a
    R[:k, k] = u
    R[k, :k] = 0.0
    R[k, k] = gamma


def csne(
    R: np.ndarray, S: np.ndarray, b: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Solve min ||S x - b||_2 by the corrected semi-normal equations.

    R.T R x = S.T b is solved with two triangular solves, followed by one
    step of iterative refinement on the residual. Neither R, S nor b is
    modified.

    Returns
    -------
    x : (k,) ndarray
        Least-squares coefficients.
    r : (m,) ndarray
        Residual b - S x.
    """
    b = np.asarray(b, dtype=float)
    k = R.shape[0]
    if k == 0:
        return np.zeros(0), b.copy()

    x = solve_triangular(R, S.T @ b, trans="T", check_finite=False)
    x = solve_triangular(R, x, check_finite=False)

    r = b - S @ x
    dx = solve_triangular(R, S.T @ r, trans="T", check_finite=False)
    x = x + solve_triangular(R, dx, check_finite=False)
    r = b - S @ x
    return x, r


class QRFactor:
    """
    Growing triangular factor of the active design matrix.

    Both buffers are allocated once at full capacity; `k` is the logical
    length and anything beyond it is scratch.

    Parameters
    ----------
    m : int
        Number of rows of the design matrix.
    capacity : int
        Largest number of columns that will ever be appended.
    """

    def __init__(self, m: int, capacity: int):
        if m < 0 or capacity < 0:
            raise ValueError("m and capacity must be non-negative")
        self._S = np.zeros((m, capacity))
        self._R = np.zeros((capacity, capacity))
        self.k = 0

    @classmethod
    def from_factors(
        cls,
        S: np.ndarray,
        R: np.ndarray,
        capacity: Optional[int] = None,
    ) -> "QRFactor":
        """
        Seed an arena from an existing pair with R.T @ R = S.T @ S.

        Raises
        ------
        ValueError : if the shapes do not agree, R is not upper-triangular
            with a nonzero diagonal, or R does not factor S.T @ S.
        """
        S = np.asarray(S, dtype=float)
        R = np.asarray(R, dtype=float)
        m, k = S.shape
        if R.shape != (k, k):
            raise ValueError(f"R must be ({k}, {k}) to match S, got {R.shape}")
        if not np.allclose(R, np.triu(R)):
            raise ValueError("R must be upper-triangular")
        if k and np.min(np.abs(np.diag(R))) == 0.0:
            raise ValueError("R has a zero on its diagonal")
        R = np.triu(R)
        atol = 1e-8 * max(1.0, float(np.sum(S * S)))
        if not np.allclose(R.T @ R, S.T @ S, rtol=1e-8, atol=atol):
            raise ValueError("R.T @ R does not match S.T @ S")

        capacity = k if capacity is None else capacity
        if capacity < k:
            raise ValueError(f"capacity {capacity} is smaller than {k} columns")
        factor = cls(m, capacity)
        factor._S[:, :k] = S
        factor._R[:k, :k] = R
        factor.k = k
        return factor

    def __len__(self) -> int:
        return self.k

    @property
    def capacity(self) -> int:
        return self._R.shape[0]

    @property
    def S(self) -> np.ndarray:
        """Active columns, (m, k) view."""
        return self._S[:, : self.k]

    @property
    def R(self) -> np.ndarray:
        """Upper-triangular factor, (k, k) view."""
        return self._R[: self.k, : self.k]

    def extend(self, a: np.ndarray, piv_tol: float = EPS) -> None:
        """Append column `a`; raises LinearDependenceError if it is dependent."""
        if self.k == self.capacity:
            raise ValueError(f"factor is full ({self.capacity} columns)")
        qraddcol(self._S, self._R, a, self.k, piv_tol)
        self.k += 1
        logger.debug("factor extended to %d columns, R[k,k]=%.3e",
                     self.k, self._R[self.k - 1, self.k - 1])

    def solve(self, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Least-squares solve over the active columns, see `csne`."""
        return csne(self.R, self.S, b)
