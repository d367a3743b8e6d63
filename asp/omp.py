# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Orthogonal matching pursuit over an active set.

Greedily builds a sparse x with A x ≈ b. Each iteration activates the
column most correlated with the residual, appends it to an incrementally
updated triangular factor and re-solves the least-squares problem over the
active columns. Every activation leaves a checkpoint, so the returned
tracer is the path of solutions obtained as λ is relaxed.
"""

import logging
import time
from dataclasses import replace
from typing import List, Optional

import numpy as np

from .exits import ExitFlag
from .operators import CountingOperator, OperatorLike
from .options import OMPOptions
from .qr import LinearDependenceError, QRFactor
from .reporting import log_header, log_iteration, log_trailer
from .tracer import OMPTracer
from .utils import BLOWUP, as_vector, sign

logger = logging.getLogger(__name__)


class _OMPSolver:
    """State of a single pursuit run. Not reusable."""

    def __init__(self, A: OperatorLike, b, lam: float, opts: OMPOptions):
        self.op = CountingOperator(A)
        m, n = self.op.shape

        self.b = as_vector(b)
        if self.b.shape[0] != m:
            raise ValueError(
                f"b has length {self.b.shape[0]} but A has {m} rows"
            )
        lam = float(lam)
        if np.isnan(lam) or lam < 0:
            raise ValueError(f"λ must be a non-negative number, got {lam}")

        self.m, self.n = m, n
        self.lam = lam
        self.opts = opts.resolve(m, n)

        if self.opts.state is None:
            self.state = np.zeros(n, dtype=int)
        else:
            self.state = self.opts.state
        self.active: List[int] = []
        self.inactive = np.ones(n, dtype=bool)
        self.factor = QRFactor(m, self.opts.act_max)

        self.x = np.zeros(0)
        self.r = self.b
        self.z = np.zeros(n)
        self.zmax = 0.0
        self.p = -1
        self.itn = 0
        self.flag = ExitFlag.UNKNOWN
        self.tracer = OMPTracer(n=n)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def _initialize(self) -> None:
        self.z = self.op.rmatvec(self.b)
        self.zmax = float(np.max(np.abs(self.z))) if self.n else 0.0

        if self.m == 0 or np.max(np.abs(self.b)) == 0:
            self.r = np.zeros(self.m)
            self.flag = ExitFlag.RHS_ZERO
        elif self.zmax < self.lam:
            # Solution is unconstrained for λ large.
            self.flag = ExitFlag.UNCONSTRAINED

        if self.flag is ExitFlag.UNKNOWN and self.opts.active:
            self._warm_start(self.opts.active)

    def _warm_start(self, active: List[int]) -> None:
        opts = self.opts
        if opts.S is not None:
            self.factor = QRFactor.from_factors(opts.S, opts.R, capacity=opts.act_max)
            accepted = list(active)
        else:
            accepted = []
            for j in active:
                try:
                    self.factor.extend(self.op.column(j), opts.piv_tol)
                except LinearDependenceError as e:
                    logger.debug("warm start rejected column %d: %s", j, e)
                    self.flag = ExitFlag.SINGULAR_LS
                    break
                accepted.append(j)

        for j in accepted:
            self.active.append(j)
            self.inactive[j] = False
            if opts.state is None:
                self.state[j] = sign(self.z[j])

    # ------------------------------------------------------------------
    # Iteration pieces
    # ------------------------------------------------------------------
    def _update_residual(self) -> bool:
        """
        Re-solve over the active set and refresh r, z and zmax.

        Returns False when the least-squares solution blew up.
        """
        if not self.active:
            self.x = np.zeros(0)
            self.r = self.b
        else:
            x, r = self.factor.solve(self.b)
            self.x, self.r = x, r
            if np.max(np.abs(x)) > BLOWUP or not np.all(np.isfinite(x)):
                return False
            if self.flag is ExitFlag.UNKNOWN:
                self.z = self.op.rmatvec(r)

        scores = np.abs(self.z)[self.inactive]
        self.zmax = float(np.max(scores)) if scores.size else 0.0
        return True

    def _check_exit(self, r_norm: float) -> None:
        opts = self.opts
        if self.flag is not ExitFlag.UNKNOWN:
            # Already set. Don't test the other exits.
            return
        if self.zmax <= self.lam:
            self.flag = ExitFlag.LAMBDA
        elif r_norm <= opts.opt_tol:
            self.flag = ExitFlag.OPTIMAL
        elif self.itn >= opts.itn_max:
            self.flag = ExitFlag.TOO_MANY_ITNS
        elif len(self.active) == opts.act_max:
            self.flag = ExitFlag.ACTMAX

    def _select(self) -> int:
        """Index of the inactive column with the largest |z|, lowest index on ties."""
        scores = np.where(self.inactive, np.abs(self.z), -np.inf)
        return int(np.argmax(scores))

    def _activate(self, p: int) -> bool:
        try:
            self.factor.extend(self.op.column(p), self.opts.piv_tol)
        except LinearDependenceError as e:
            logger.debug("column %d not activated: %s", p, e)
            return False

        self.state[p] = sign(self.z[p])
        self.itn += 1
        # Checkpoint the solution as it stood before this column joined.
        self.tracer.record(self.itn, self.zmax, self.active, self.x)
        self.active.append(p)
        self.inactive[p] = False
        self.p = p
        return True

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self) -> OMPTracer:
        time0 = time.perf_counter()
        verbose = self.opts.loglevel > 0
        if verbose:
            log_header(self.m, self.n, self.lam, self.opts)

        self._initialize()

        while True:
            if not self._update_residual():
                self.flag = ExitFlag.SINGULAR_LS
                break

            r_norm = float(np.linalg.norm(self.r))
            if verbose:
                x_norm = float(np.sum(np.abs(self.x)))
                log_iteration(self.itn, self.p, self.zmax, r_norm, x_norm)

            self._check_exit(r_norm)
            if self.flag is not ExitFlag.UNKNOWN:
                break

            if not self._activate(self._select()):
                self.flag = ExitFlag.SINGULAR_LS
                break

        self.tracer.record(self.itn, self.zmax, self.active, self.x)
        tottime = time.perf_counter() - time0

        tracer = self.tracer
        tracer.exit_flag = self.flag
        tracer.nprod_a = self.op.nprod_a
        tracer.nprod_at = self.op.nprod_at
        tracer.solve_time = tottime
        tracer.active = list(self.active)
        tracer.state = self.state.copy()
        tracer.x = np.array(self.x, copy=True)
        tracer.r = np.array(self.r, copy=True)

        if verbose:
            log_trailer(self.flag, self.op.nprod_a, self.op.nprod_at, tottime)
        return tracer


def asp_omp(
    A: OperatorLike,
    b,
    lam: float,
    options: Optional[OMPOptions] = None,
    **kwargs,
) -> OMPTracer:
    """
    Orthogonal matching pursuit for a sparse solution of A x = b.

    Columns are activated greedily by |A.T r| until no inactive column
    scores above `lam`, the residual is below `opt_tol`, or a limit is hit.

    Parameters
    ----------
    A : (m, n) ndarray | scipy.sparse matrix | LinearOperator
        Only products A @ v and A.T @ v are used.
    b : (m,) array_like
        Right-hand side.
    lam : float
        Threshold on the dual score max |A.T r|, lam >= 0.
    options : OMPOptions, optional
        Base options; keyword arguments override its fields.
    **kwargs
        Any OMPOptions field: active, state, S, R, loglevel, lam_min,
        itn_max, fea_tol, opt_tol, gap_tol, piv_tol, act_max.

    Returns
    -------
    tracer : OMPTracer
        One checkpoint per activation plus a final one, together with the
        exit flag, product counts and solve time.

    Raises
    ------
    ValueError : on mismatched dimensions, negative `lam` or bad options.

    Example
    -------
    >>> import numpy as np
    >>> A = np.eye(3, 4)
    >>> tracer = asp_omp(A, np.array([3.0, 1.0, 0.0]), 0.5, loglevel=0)
    >>> tracer.exit_flag.name, tracer.active
    ('LAMBDA', [0, 1])
    """
    if options is None:
        options = OMPOptions(**kwargs)
    elif kwargs:
        options = replace(options, **kwargs)
    return _OMPSolver(A, b, lam, options).run()
