# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
asp
===

Active-set pursuit: orthogonal matching pursuit for sparse solutions of
underdetermined systems A x = b, where A may be a matrix-free operator.

Public API
~~~~~~~~~~
- Solver
    - `asp_omp`, `OMPOptions`
- Results
    - `OMPTracer`, `Checkpoint`, `ExitFlag`
- Factorization updates
    - `qraddcol`, `csne`, `QRFactor`, `LinearDependenceError`
- Operators
    - `CountingOperator`

Everything else lives in sub-modules and is **not** considered part of the
stable interface.

Example
-------
>>> import numpy as np, asp
>>> A = np.eye(3, 4)
>>> tracer = asp.asp_omp(A, np.array([3.0, 1.0, 0.0]), 0.5, loglevel=0)
>>> tracer.exit_flag
<ExitFlag.LAMBDA: 'Reached minimum value of lambda'>
>>> len(tracer)
3
"""

from importlib.metadata import version as _pkg_version

from .exits import ExitFlag
from .omp import asp_omp
from .operators import CountingOperator
from .options import OMPOptions

# ---------------------------------------------------------------------
# Re-export the high-level functions users are expected to call.
# Each of these names is implemented in one of the internal sub-modules.
# ---------------------------------------------------------------------
from .qr import LinearDependenceError, QRFactor, csne, qraddcol
from .tracer import Checkpoint, OMPTracer

__all__ = [
    "asp_omp",
    "OMPOptions",
    "OMPTracer",
    "Checkpoint",
    "ExitFlag",
    "qraddcol",
    "csne",
    "QRFactor",
    "LinearDependenceError",
    "CountingOperator",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show asp-omp”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version("asp-omp")
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Optional: lightweight default logging config so users see progress
# only if they deliberately enable it.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
