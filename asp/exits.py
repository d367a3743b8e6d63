# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from enum import Enum


class ExitFlag(Enum):
    """Why the pursuit stopped. Each member's value is its report message."""

    OPTIMAL = "Optimal solution found -- full Newton step"
    TOO_MANY_ITNS = "Too many iterations"
    SINGULAR_LS = "Singular least-squares subproblem"
    LAMBDA = "Reached minimum value of lambda"
    RHS_ZERO = "b = 0. The solution is x = 0"
    UNCONSTRAINED = "Unconstrained solution r = b is optimal"
    ACTMAX = "Max no. of active constraints reached"
    UNKNOWN = "unknown exit"

    @property
    def message(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value
