"""warpd - Restarted primal-dual solver for linear inverse problems.

Recovers x from noisy linear measurements b ~ A x by solving

    min_x  J(x) [+ ||B x||_1]   subject to   ||A x - b||_2 <= epsilon

with WARPd, a first-order, matrix-free method that only applies the
operators and the proximal map of J.

The library is organized into two modules:

- **core**: linear operators, proximal maps and operator-norm estimation
- **solvers**: the WARPd restart loop and its inner primal-dual iterations

Example:
    >>> import torch
    >>> from warpd import MatrixOperator, WARPdOptions, prox_l1, solve_warpd
    >>>
    >>> A = MatrixOperator(torch.randn(64, 256, dtype=torch.float64) / 8)
    >>> options = WARPdOptions(C1=1.0, C2=1.0, store=True, display=False)
    >>> result = solve_warpd(
    ...     A, epsilon=0.05, prox_J=prox_l1, b=b,
    ...     x0=None, y0=None, delta=0.05,
    ...     n_iter=30, k_iter=100, options=options,
    ... )
    >>> x_hat = result.x

Reference:
    Colbrook, M.J. (2022). "WARPd: A Linearly Convergent First-Order
    Primal-Dual Algorithm for Inverse Problems with Approximate Sharpness
    Conditions". SIAM Journal on Imaging Sciences 15(3): 1539-1575.
"""

__version__ = "0.1.0"

# =============================================================================
# Core Module - Operators, proximal maps, norm estimation
# =============================================================================
from .core import (
    FORWARD,
    ADJOINT,
    LinearOperator,
    FunctionOperator,
    ModeOperator,
    MatrixOperator,
    IdentityOperator,
    FiniteDifference,
    FFTConvolution,
    FlattenedOperator,
    CompositeOperator,
    as_operator,
    NORM_FLOOR,
    prox_dual,
    prox_l1,
    prox_weighted_l1,
    prox_zero,
    estimate_operator_norm,
)

# =============================================================================
# Solvers Module - WARPd
# =============================================================================
from .solvers import (
    OUTPUT_TYPES,
    WARPdOptions,
    WARPdResult,
    RestartState,
    inner_iterations,
    solve_warpd,
)

__all__ = [
    # Version
    "__version__",
    # Operators
    "FORWARD",
    "ADJOINT",
    "LinearOperator",
    "FunctionOperator",
    "ModeOperator",
    "MatrixOperator",
    "IdentityOperator",
    "FiniteDifference",
    "FFTConvolution",
    "FlattenedOperator",
    "CompositeOperator",
    "as_operator",
    # Proximal maps
    "NORM_FLOOR",
    "prox_dual",
    "prox_l1",
    "prox_weighted_l1",
    "prox_zero",
    # Norm estimation
    "estimate_operator_norm",
    # Solver
    "OUTPUT_TYPES",
    "WARPdOptions",
    "WARPdResult",
    "RestartState",
    "inner_iterations",
    "solve_warpd",
]
