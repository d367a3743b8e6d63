# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Solution path recorded by the pursuit
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import scipy.sparse as sp

from .exits import ExitFlag


@dataclass(frozen=True)
class Checkpoint:
    """
    One point on the sparsity / fit trade-off curve.

    Attributes
    ----------
    iteration : int
        Activation count when the point was taken.
    lam : float
        Largest dual score |A.T r| at that point.
    active : tuple[int, ...]
        Support, in activation order.
    coef : (len(active),) ndarray
        Coefficients over `active`.
    n : int
        Length of the full solution vector.
    """

    iteration: int
    lam: float
    active: Tuple[int, ...]
    coef: np.ndarray
    n: int

    @property
    def solution(self) -> sp.coo_array:
        """Full-length sparse solution, stored entries exactly on `active`."""
        idx = np.asarray(self.active, dtype=np.intp)
        return sp.coo_array((self.coef, (idx,)), shape=(self.n,))

    def toarray(self) -> np.ndarray:
        x = np.zeros(self.n)
        x[list(self.active)] = self.coef
        return x


@dataclass
class OMPTracer:
    """
    History of an OMP run plus its diagnostics.

    Indexing mirrors a list of checkpoints but returns `(solution, lam)`
    pairs, so `x, lam = tracer[-1]` gives the final point.
    """

    n: int
    checkpoints: List[Checkpoint] = field(default_factory=list)
    exit_flag: ExitFlag = ExitFlag.UNKNOWN
    nprod_a: int = 0
    nprod_at: int = 0
    solve_time: float = 0.0
    active: List[int] = field(default_factory=list)
    state: Optional[np.ndarray] = None
    x: Optional[np.ndarray] = None
    r: Optional[np.ndarray] = None

    def record(
        self, iteration: int, lam: float, active: Sequence[int], x: np.ndarray
    ) -> None:
        """Append a snapshot; `active` and `x` are copied."""
        if len(active) != len(x):
            raise ValueError(
                f"{len(active)} active columns but {len(x)} coefficients"
            )
        self.checkpoints.append(
            Checkpoint(
                iteration=int(iteration),
                lam=float(lam),
                active=tuple(int(j) for j in active),
                coef=np.array(x, dtype=float, copy=True),
                n=self.n,
            )
        )

    def __len__(self) -> int:
        return len(self.checkpoints)

    def __getitem__(self, i: int) -> Tuple[sp.coo_array, float]:
        c = self.checkpoints[i]
        return c.solution, c.lam

    def __iter__(self) -> Iterator[Tuple[sp.coo_array, float]]:
        for c in self.checkpoints:
            yield c.solution, c.lam

    @property
    def iteration(self) -> List[int]:
        return [c.iteration for c in self.checkpoints]

    @property
    def lam(self) -> np.ndarray:
        return np.array([c.lam for c in self.checkpoints])

    @property
    def solution(self) -> List[sp.coo_array]:
        return [c.solution for c in self.checkpoints]

    @property
    def message(self) -> str:
        return self.exit_flag.message

    def path(self) -> np.ndarray:
        """Dense (n, len(self)) matrix, one column per checkpoint."""
        X = np.zeros((self.n, len(self)))
        for j, c in enumerate(self.checkpoints):
            X[list(c.active), j] = c.coef
        return X
