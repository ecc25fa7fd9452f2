"""Restarted primal-dual solvers for basis-pursuit type inverse problems.

The problem is formulated as:
    min_x  J(x) [+ ||B x||_1]   subject to   ||A x - b||_2 <= epsilon

where:
    - b: observed (noisy) measurements
    - A: measurement operator, given as forward/adjoint applications
    - J: regularizer, given through its proximal map
    - B: optional analysis operator

Example:
    >>> import torch
    >>> from warpd.core import IdentityOperator, prox_l1
    >>> from warpd.solvers import WARPdOptions, solve_warpd
    >>>
    >>> # Sparse denoising: A = I, J = ||x||_1
    >>> result = solve_warpd(
    ...     IdentityOperator(), epsilon=0.2, prox_J=prox_l1, b=b_noisy,
    ...     x0=None, y0=None, delta=0.2, n_iter=30, k_iter=100,
    ...     options=WARPdOptions(C1=1.0, C2=1.0, display=False),
    ... )
    >>> x = result.x
"""

from .base import (
    OUTPUT_TYPES,
    WARPdOptions,
    WARPdResult,
)
from .warpd import (
    RestartState,
    inner_iterations,
    solve_warpd,
)

__all__ = [
    # Base types
    "OUTPUT_TYPES",
    "WARPdOptions",
    "WARPdResult",
    # WARPd
    "RestartState",
    "inner_iterations",
    "solve_warpd",
]
