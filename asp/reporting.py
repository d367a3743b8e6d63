# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Progress log for the pursuit. Purely presentational.
"""

import logging

from .exits import ExitFlag
from .options import OMPOptions

logger = logging.getLogger("asp.omp")

RULE = "-" * 124


def log_header(m: int, n: int, lam: float, opts: OMPOptions) -> None:
    logger.info(RULE)
    logger.info("%-30s : %-10d    %-30s : %-10.4e", "No. rows", m, "λ", lam)
    logger.info(
        "%-30s : %-10d    %-30s : %-10.1e", "No. columns", n, "Optimality tol", opts.opt_tol
    )
    logger.info(
        "%-30s : %-10d    %-30s : %-10.1e",
        "Maximum iterations",
        opts.itn_max,
        "Duality tol",
        opts.gap_tol,
    )
    logger.info(RULE)
    logger.info("%4s  %8s %12s %12s %12s", "Itn", "Var", "λ", "rNorm", "xNorm")


def log_iteration(itn: int, p: int, zmax: float, r_norm: float, x_norm: float) -> None:
    logger.info("%4d  %8d %12.5e %12.5e %12.5e", itn, p, zmax, r_norm, x_norm)


def log_trailer(flag: ExitFlag, nprod_a: int, nprod_at: int, tottime: float) -> None:
    logger.info("EXIT OMP -- %s", flag.message)
    logger.info("%-20s: %8d", "Products with A", nprod_a)
    logger.info("%-20s: %8d", "Products with At", nprod_at)
    logger.info("%-20s: %8.1e", "Solution time (sec)", tottime)
