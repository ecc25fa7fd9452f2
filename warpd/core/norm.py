"""Operator norm estimation by power iteration."""

import math
from typing import Optional, Tuple, Union

import torch

from .operators import LinearOperator
from .prox import NORM_FLOOR

__all__ = ["estimate_operator_norm"]


def estimate_operator_norm(
    K: LinearOperator,
    shape: Union[int, Tuple[int, ...]],
    num_iter: int = 10,
    margin: float = 1.01,
    dtype: torch.dtype = torch.float64,
    device: str = "cpu",
    generator: Optional[torch.Generator] = None,
) -> float:
    """Estimate an upper bound on the spectral norm ||K||.

    Runs power iteration on K^T K from a uniform random unit vector:
        l2 = K^T(K(l))
        L  = margin * sqrt(||l2||)
        l  = l2 / ||l2||

    The iteration count is fixed and there is no convergence check. The
    margin only makes an overestimate likely, it does not guarantee one:
    for operators whose top singular values are close, 10 iterations may
    leave the estimate below ||K||, which breaks the step-size condition
    of primal-dual methods. Pass a known bound instead when one exists.

    Args:
        K: Linear operator.
        shape: Shape of the operator's input (an int for vectors).
        num_iter: Number of power iterations. Default 10.
        margin: Multiplicative safety factor. Default 1.01.
        dtype: dtype of the probe vector.
        device: Device of the probe vector.
        generator: Optional torch.Generator for reproducibility.

    Returns:
        Estimated upper bound on ||K||.
    """
    if isinstance(shape, int):
        shape = (shape,)

    l = torch.rand(shape, dtype=dtype, device=device, generator=generator)
    l = l / torch.linalg.vector_norm(l)

    norm_bound = 1.0
    for _ in range(num_iter):
        l2 = K.adjoint(K.forward(l))
        l2_norm = float(torch.linalg.vector_norm(l2))
        norm_bound = margin * math.sqrt(l2_norm)
        l = l2 / (l2_norm + NORM_FLOOR)

    return norm_bound
