"""Configuration and result types for the WARPd solver."""

import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import torch

from ..core.operators import LinearOperator

__all__ = ["WARPdOptions", "WARPdResult", "OUTPUT_TYPES"]

# output_type -> (ergodic primal output, ergodic dual output)
OUTPUT_TYPES = {
    1: (False, False),
    2: (True, False),
    3: (False, True),
    4: (True, True),
    5: (True, True),
}


@dataclass(frozen=True)
class WARPdOptions:
    """Options for ``solve_warpd``.

    Attributes:
        C1: Sharpness constant multiplying the objective gap. Required.
        C2: Sharpness constant multiplying the feasibility gap. Required.
        store: Record the primal iterate (or its running average) at
            every inner step. Default False.
        output_type: Which iterates each restart returns.
            1: last primal, last dual (default)
            2: averaged primal, last dual
            3: last primal, averaged dual
            4: averaged primal, averaged dual
            5: plain primal-dual iterations. Behaves as 4 with no
               per-restart rescaling (al = 1 for every restart).
        upsilon: Rate at which the target tolerance shrinks, in (0, 1).
            Default exp(-1), which is typically optimal.
        L_A: Upper bound on the norm of the (composite) operator. If None,
            it is estimated by power iteration.
        tau: Proximal step size multiplier; steps are tau / L_A. Default 1.
        display: Print progress of each restart. Default True.
        err_fcn: Optional function of the primal iterate (in the caller's
            units) evaluated at every inner step.
        op_B: Optional analysis operator. Its output is driven into the
            unit L-infinity ball, i.e. adds ||B x||_1 to the objective.
        q: Dimension of the range of op_B. Required (> 0) with op_B.
    """

    C1: float
    C2: float
    store: bool = False
    output_type: int = 1
    upsilon: float = math.exp(-1)
    L_A: Optional[float] = None
    tau: float = 1.0
    display: bool = True
    err_fcn: Optional[Callable[[torch.Tensor], float]] = None
    op_B: Optional[LinearOperator] = None
    q: int = 0

    def __post_init__(self):
        if self.C1 <= 0 or self.C2 <= 0:
            raise ValueError(f"C1 and C2 must be positive, got C1={self.C1}, C2={self.C2}")
        if self.output_type not in OUTPUT_TYPES:
            raise ValueError(
                f"output_type must be one of {sorted(OUTPUT_TYPES)}, got {self.output_type}"
            )
        if not 0.0 < self.upsilon < 1.0:
            raise ValueError(f"upsilon must be in (0, 1), got {self.upsilon}")
        if self.tau <= 0:
            raise ValueError(f"tau must be positive, got {self.tau}")
        if self.L_A is not None and self.L_A <= 0:
            raise ValueError(f"L_A must be positive, got {self.L_A}")
        if int(self.q) != self.q or self.q < 0:
            raise ValueError(f"q must be a non-negative integer, got {self.q}")
        if self.op_B is not None and self.q == 0:
            raise ValueError("q (dimension of the range of op_B) is required with op_B")
        if self.op_B is None and self.q != 0:
            raise ValueError(f"q={self.q} given without op_B")


@dataclass
class WARPdResult:
    """Result from ``solve_warpd``.

    Attributes:
        x: Final primal estimate.
        y: Final dual estimate.
        iterates: Recorded primal iterates, one list of k_iter tensors per
            restart. Empty unless ``store`` was set.
        errors: ``err_fcn`` values in restart-major, step-minor order.
            Empty unless ``err_fcn`` was given.
        metadata: Solver parameters and per-restart diagnostics.
    """

    x: torch.Tensor
    y: torch.Tensor
    iterates: List[List[torch.Tensor]] = field(default_factory=list)
    errors: List[float] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)
