"""Proximal operators.

``prox_dual`` is the dual proximal map used by the WARPd inner iterations.
The remaining functions are ready-made primal proximal maps with the
``prox(x, t)`` signature expected for the regularizer J.

For a function f and step t the proximal map is

    prox_{t f}(x) = argmin_z  f(z) + ||z - x||^2 / (2t)
"""

from typing import Callable, Union

import torch

__all__ = ["NORM_FLOOR", "prox_dual", "prox_l1", "prox_weighted_l1", "prox_zero"]

# Added to norms before dividing by them, so exact zeros do not produce NaN.
NORM_FLOOR = 1e-43


def prox_dual(y: torch.Tensor, rho: float, q: int = 0) -> torch.Tensor:
    """Proximal operator of the dual feasibility term.

    The vector is split into a leading block (measurement residual dual,
    length ``len(y) - q``) and a trailing block (analysis dual, length q).

    Leading block, Euclidean shrinkage (prox of rho * ||.||_2):
        y_lead * max(0, 1 - rho / ||y_lead||_2)

    Trailing block, projection onto the unit L-infinity ball:
        y_i * min(1, 1 / |y_i|)

    Note: rho does not enter the trailing block since it is an indicator.

    Args:
        y: Dual variable. Treated as a flat vector.
        rho: Shrinkage threshold (dual step times tolerance).
        q: Length of the trailing block. 0 means the whole vector is
            shrunk as a single block.

    Returns:
        Tensor with the same shape as ``y``.
    """
    rho = float(rho)
    shape = y.shape
    y = y.reshape(-1)
    split = y.numel() - q

    lead = y[:split]
    n_lead = torch.linalg.vector_norm(lead) + NORM_FLOOR
    lead_out = torch.clamp(1.0 - rho / n_lead, min=0.0) * lead
    if q == 0:
        return lead_out.reshape(shape)

    trail = y[split:]
    trail_out = torch.clamp(1.0 / (trail.abs() + NORM_FLOOR), max=1.0) * trail
    return torch.cat([lead_out, trail_out]).reshape(shape)


def prox_l1(x: torch.Tensor, t: float) -> torch.Tensor:
    """Soft thresholding, the proximal map of t * ||x||_1.

    For complex input the magnitude is shrunk and the phase kept.
    """
    mag = x.abs()
    return x * torch.clamp(1.0 - t / (mag + NORM_FLOOR), min=0.0)


def prox_weighted_l1(
    weights: Union[float, torch.Tensor],
) -> Callable[[torch.Tensor, float], torch.Tensor]:
    """Build the proximal map of t * sum_i w_i |x_i|.

    Args:
        weights: Non-negative weights, scalar or broadcastable to x.

    Returns:
        A ``prox(x, t)`` callable.
    """

    def prox(x: torch.Tensor, t: float) -> torch.Tensor:
        return prox_l1(x, t * weights)

    return prox


def prox_zero(x: torch.Tensor, t: float) -> torch.Tensor:
    """Proximal map of J = 0 (identity)."""
    return x
