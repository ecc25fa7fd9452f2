"""Building blocks: linear operators, proximal maps and norm estimation."""

from .operators import (
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
)
from .prox import (
    NORM_FLOOR,
    prox_dual,
    prox_l1,
    prox_weighted_l1,
    prox_zero,
)
from .norm import estimate_operator_norm

__all__ = [
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
]
