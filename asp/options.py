# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

import numpy as np

from .utils import EPS


@dataclass(frozen=True)
class OMPOptions:
    """
    Tolerances, limits and warm-start data for `asp_omp`.

    `itn_max` and `act_max` default to None and are filled in from the
    problem size by `resolve`. `lam_min`, `fea_tol` and `gap_tol` are
    carried for sign-constrained variants and not read by the OMP loop.
    """

    active: Optional[Sequence[int]] = None
    state: Optional[Sequence[int]] = None
    S: Optional[np.ndarray] = None
    R: Optional[np.ndarray] = None
    loglevel: int = 1
    lam_min: float = float(np.sqrt(np.finfo(float).eps))
    itn_max: Optional[int] = None
    fea_tol: float = 5e-5
    opt_tol: float = 1e-5
    gap_tol: float = 1e-6
    piv_tol: float = EPS
    act_max: Optional[int] = None

    def __post_init__(self):
        for name in ("lam_min", "fea_tol", "opt_tol", "gap_tol", "piv_tol"):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite non-negative number")
        if self.itn_max is not None and self.itn_max < 0:
            raise ValueError("itn_max must be non-negative")
        if self.act_max is not None and self.act_max < 0:
            raise ValueError("act_max must be non-negative")
        if (self.S is None) != (self.R is None):
            raise ValueError("S and R must be given together")
        if self.S is not None and self.active is None:
            raise ValueError("S and R are only meaningful with an active set")

    def resolve(self, m: int, n: int) -> "OMPOptions":
        """
        Fill in size-dependent defaults and check warm-start data against
        an m-by-n operator.
        """
        itn_max = 10 * max(m, n) if self.itn_max is None else self.itn_max
        act_max = n if self.act_max is None else self.act_max
        if act_max > n:
            raise ValueError(f"act_max={act_max} exceeds the {n} columns of A")

        active: Optional[List[int]] = None
        if self.active is not None:
            active = [int(j) for j in self.active]
            if any(j < 0 or j >= n for j in active):
                raise ValueError(f"active indices must lie in [0, {n})")
            if len(set(active)) != len(active):
                raise ValueError("active indices must be unique")
            if len(active) > act_max:
                raise ValueError(
                    f"{len(active)} active columns exceed act_max={act_max}"
                )
            if self.S is not None:
                S = np.asarray(self.S)
                if S.shape != (m, len(active)):
                    raise ValueError(
                        f"S must be ({m}, {len(active)}), got {S.shape}"
                    )

        state = None
        if self.state is not None:
            state = np.asarray(self.state, dtype=int).copy()
            if state.shape != (n,):
                raise ValueError(f"state must have length {n}")
            if np.any(np.abs(state) > 1):
                raise ValueError("state entries must be -1, 0 or +1")

        return replace(
            self, itn_max=itn_max, act_max=act_max, active=active, state=state
        )
