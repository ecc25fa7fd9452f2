"""WARPd: weighted, accelerated and restarted primal-dual iterations.

WARPd solves basis-pursuit type problems

    min_x  J(x) + ||B x||_1    subject to    ||A x - b||_2 <= epsilon

where J is a (possibly non-smooth) convex regularizer accessed only through
its proximal map, A is the measurement operator and the analysis term B is
optional. Only operator applications are needed, no factorization.

The scheme has two levels:

    Inner: k_iter primal-dual (Chambolle-Pock) steps on a rescaled problem
        x_{k+1} = prox_{tau1 J}(x_k - tau1 K^T y_k)
        y_{k+1} = prox_dual(y_k + tau2 K(2 x_{k+1} - x_k) - tau2 b, tau2 eps)

    Outer: n_iter restarts. Restart j targets an error eps_j that shrinks
    geometrically, eps_{j+1} = upsilon (delta + eps_j), and rescales the
    problem by

        al = min(1 / (beta k_iter), 1e12)

    so that the fixed step sizes and fixed inner budget stay matched to the
    shrinking target. Under an approximate sharpness condition (constants
    C1, C2) this gives linear convergence down to the noise level delta.

The whole problem is first divided by SCALE = ||b||_2; every quantity
leaving the solver (result, recorded iterates, err_fcn arguments, callback
arguments) is multiplied back by SCALE.

Reference:
    Colbrook, M.J. (2022). "WARPd: A Linearly Convergent First-Order
    Primal-Dual Algorithm for Inverse Problems with Approximate Sharpness
    Conditions". SIAM Journal on Imaging Sciences 15(3): 1539-1575.
"""

import dataclasses
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import torch

from ..core.norm import estimate_operator_norm
from ..core.operators import CompositeOperator, FlattenedOperator, LinearOperator, as_operator
from ..core.prox import prox_dual
from .base import OUTPUT_TYPES, WARPdOptions, WARPdResult

__all__ = ["solve_warpd", "inner_iterations", "RestartState"]

# Upper bound on the per-restart rescaling factor.
MAX_RESCALE = 1e12


@dataclass(frozen=True)
class RestartState:
    """State carried from one restart to the next (rescaled units).

    Attributes:
        psi: Current primal estimate.
        y: Current dual estimate.
        eps: Current target error.
    """

    psi: torch.Tensor
    y: torch.Tensor
    eps: float


def inner_iterations(
    b: torch.Tensor,
    x0: torch.Tensor,
    K: LinearOperator,
    k_iter: int,
    tau1: float,
    tau2: float,
    epsilon: float,
    prox_J: Callable[[torch.Tensor, float], torch.Tensor],
    al: float,
    y0: torch.Tensor,
    options: WARPdOptions,
    q: int,
    output_type: Optional[int] = None,
    scale: float = 1.0,
    callback: Optional[Callable[[int, torch.Tensor], None]] = None,
    offset: int = 0,
) -> Tuple[torch.Tensor, torch.Tensor, List[torch.Tensor], List[float]]:
    """Run k_iter primal-dual steps from (x0, y0).

    Args:
        b: Rescaled measurement vector (already multiplied by al).
        x0: Initial primal iterate (already multiplied by al).
        K: Effective operator.
        k_iter: Number of steps.
        tau1: Primal step size.
        tau2: Dual step size.
        epsilon: Rescaled tolerance (already multiplied by al).
        prox_J: Proximal map of J, called as prox_J(x, t).
        al: Rescaling factor of this restart.
        y0: Initial dual iterate.
        options: Solver options (store, err_fcn and output_type are used).
        q: Length of the analysis block of the dual variable.
        output_type: Overrides ``options.output_type``.
        scale: Factor converting iterate / al into the caller's units,
            applied before ``err_fcn`` and ``callback`` see an iterate.
        callback: Optional function called each step with
            (iteration, primal iterate in the caller's units).
        offset: Added to the step index passed to ``callback``.

    Returns:
        Tuple (x_out, y_out, iterates, errors). ``iterates`` holds one
        snapshot per step (x_{k+1} / al, or the running average / al for
        averaged primal output) when ``options.store`` is set, otherwise it
        is empty. ``errors`` holds ``err_fcn`` of the same snapshots scaled
        by ``scale``.
    """
    if output_type is None:
        output_type = options.output_type
    ergodic_x, ergodic_y = OUTPUT_TYPES[output_type]
    err_fcn = options.err_fcn

    xk = x0
    yk = y0
    x_sum = torch.zeros_like(xk)
    y_sum = torch.zeros_like(yk)

    iterates = [None] * k_iter if options.store else []
    errors = [0.0] * k_iter if err_fcn is not None else []

    for k in range(1, k_iter + 1):
        xkk = prox_J(xk - tau1 * K.adjoint(yk), tau1)
        ykk = prox_dual(yk + tau2 * K.forward(2 * xkk - xk) - tau2 * b, tau2 * epsilon, q)

        x_sum = x_sum + xkk
        y_sum = y_sum + ykk

        if options.store or err_fcn is not None:
            snapshot = x_sum / (al * k) if ergodic_x else xkk / al
            if options.store:
                iterates[k - 1] = snapshot
            if err_fcn is not None:
                errors[k - 1] = float(err_fcn(scale * snapshot))

        if callback is not None:
            callback(offset + k, scale * xkk / al)

        xk = xkk
        yk = ykk

    x_out = x_sum / k_iter if ergodic_x else xk
    y_out = y_sum / k_iter if ergodic_y else yk
    return x_out, y_out, iterates, errors


def _rescaling_factor(
    eps: float, delta: float, k_iter: int, options: WARPdOptions, q: int
) -> float:
    """Per-restart rescaling al = min(1 / (beta k_iter), 1e12)."""
    root = math.sqrt(options.C2**2 + q)
    k_eff = math.ceil(2 * options.C1 * root * options.L_A / (options.tau * options.upsilon))
    beta = options.C1 * (delta + eps) / (root * k_eff)
    return float(min(1.0 / (beta * k_iter), MAX_RESCALE))


def _restart(
    state: RestartState,
    al: float,
    b: torch.Tensor,
    K: LinearOperator,
    epsilon: float,
    delta: float,
    prox_J: Callable[[torch.Tensor, float], torch.Tensor],
    k_iter: int,
    options: WARPdOptions,
    output_type: int,
    scale: float,
    callback: Optional[Callable[[int, torch.Tensor], None]],
    offset: int,
) -> Tuple[RestartState, List[torch.Tensor], List[float]]:
    """Run one restart and return the next state with its records."""
    step = float(options.tau / options.L_A)
    psi_out, y_out, iterates, errors = inner_iterations(
        al * b,
        al * state.psi,
        K,
        k_iter,
        step,
        step,
        al * epsilon,
        prox_J,
        al,
        state.y,
        options,
        options.q,
        output_type=output_type,
        scale=scale,
        callback=callback,
        offset=offset,
    )
    # Undo the global rescale; iterates are already divided by al
    iterates = [it * scale for it in iterates]

    next_state = RestartState(
        psi=psi_out / al,
        y=y_out,
        eps=options.upsilon * (delta + state.eps),
    )
    return next_state, iterates, errors


def solve_warpd(
    A,
    epsilon: float,
    prox_J: Callable[[torch.Tensor, float], torch.Tensor],
    b: torch.Tensor,
    x0: Optional[torch.Tensor],
    y0: Optional[torch.Tensor],
    delta: float,
    n_iter: int,
    k_iter: int,
    options: WARPdOptions,
    callback: Optional[Callable[[int, torch.Tensor], None]] = None,
) -> WARPdResult:
    """Solve a basis-pursuit type problem with WARPd.

    Minimizes J(x) (+ ||B x||_1 when ``options.op_B`` is set) subject to
    ||A x - b||_2 <= epsilon.

    Args:
        A: Measurement operator. Anything ``as_operator`` accepts: a
            LinearOperator, a matrix, a (forward, adjoint) pair or an
            apply(x, mode) callable (mode 1 forward, 0 adjoint).
        epsilon: Constraint radius. Non-negative.
        prox_J: Proximal map of J, called as prox_J(x, t).
        b: Measurements, shaped like the output of A (flattened
            internally; the dual variable is always 1D).
        x0: Initial primal guess. If None, zeros shaped like A^T(b).
        y0: Initial dual guess, of length len(b) + q. If None, zeros.
        delta: Algorithm parameter, typically the noise level. The target
            error stops shrinking at about upsilon * delta / (1 - upsilon).
        n_iter: Number of restarts (outer iterations).
        k_iter: Number of primal-dual steps per restart.
        options: WARPdOptions.
        callback: Optional function called at every primal-dual step with
            (iteration, current primal iterate). It does not affect the
            iterates and may be omitted.

    Returns:
        WARPdResult with the final primal and dual vectors, the recorded
        iterates and error values, and solver metadata.

    Raises:
        ValueError: If n_iter or k_iter is not positive, epsilon or delta is
            negative, b is the zero vector, or the range of
            options.op_B does not have q entries.

    Example:
        ```python
        import torch
        from warpd import WARPdOptions, prox_l1, solve_warpd

        # Sparse recovery from compressed measurements
        A = torch.randn(64, 256, dtype=torch.float64) / 8
        result = solve_warpd(
            A, epsilon=0.1, prox_J=prox_l1, b=b,
            x0=None, y0=None, delta=0.1,
            n_iter=30, k_iter=100,
            options=WARPdOptions(C1=1.0, C2=1.0, display=False),
        )
        x = result.x
        ```
    """
    if n_iter < 1 or k_iter < 1:
        raise ValueError(f"n_iter and k_iter must be positive, got n_iter={n_iter}, k_iter={k_iter}")
    if epsilon < 0 or delta < 0:
        raise ValueError(
            f"epsilon and delta must be non-negative, got epsilon={epsilon}, delta={delta}"
        )

    # The dual variable is flat; b carries the range shape of A
    K = FlattenedOperator(as_operator(A), b.shape)
    q = options.q
    b = b.reshape(-1)
    if x0 is None:
        x0 = torch.zeros_like(K.adjoint(b))

    # Stack the analysis operator below A; its target is the zero vector
    if options.op_B is not None:
        op_B = as_operator(options.op_B)
        K = CompositeOperator(K, op_B, q, shape_B=op_B.forward(x0).shape)
        b = torch.cat([b, torch.zeros(q, dtype=b.dtype, device=b.device)])

    if y0 is None:
        y0 = torch.zeros_like(b)
    y0 = y0.reshape(-1)

    if options.L_A is None:
        if options.display:
            print("Computing the norm of K... ", end="")
        L_A = estimate_operator_norm(K, tuple(x0.shape), dtype=x0.dtype, device=x0.device)
        options = dataclasses.replace(options, L_A=L_A)
        if options.display:
            print(f"upper bound is {L_A:.6e}")

    # Rescale everything by ||b||
    scale = float(torch.linalg.vector_norm(b))
    if scale == 0.0:
        raise ValueError("b must not be the zero vector")
    b = b / scale
    x0 = x0 / scale
    y0 = y0 / scale
    epsilon = float(epsilon) / scale
    delta = float(delta) / scale

    # Plain primal-dual iterations: averaged output, no per-restart rescaling
    plain = options.output_type == 5
    output_type = 4 if plain else options.output_type

    state = RestartState(
        psi=x0, y=y0, eps=options.C2 * float(torch.linalg.vector_norm(b))
    )
    all_iterates = [None] * n_iter if options.store else []
    all_errors = [0.0] * (n_iter * k_iter) if options.err_fcn is not None else []
    al_history = []
    eps_history = []

    if options.display:
        print("WARPd (restarted primal-dual iterations)")
        print(f"  Restarts: {n_iter}, inner iterations: {k_iter}, output type: {options.output_type}")
        print(f"  ||K|| <= {options.L_A:.4e}, step sizes: tau1=tau2={options.tau / options.L_A:.4e}")
        print(f"  Scale ||b||: {scale:.4e}, analysis dimension q: {q}")
        print()
        print(f"{'Restart':>7}  {'al':>12}  {'eps':>12}")
        print("-" * 35)

    for j in range(n_iter):
        al = 1.0 if plain else _rescaling_factor(state.eps, delta, k_iter, options, q)
        al_history.append(al)
        eps_history.append(state.eps * scale)

        if options.display:
            print(f"{j + 1:>7}  {al:>12.4e}  {state.eps * scale:>12.4e}")

        state, iterates, errors = _restart(
            state,
            al,
            b,
            K,
            epsilon,
            delta,
            prox_J,
            k_iter,
            options,
            output_type,
            scale,
            callback,
            offset=j * k_iter,
        )

        if options.store:
            all_iterates[j] = iterates
        if options.err_fcn is not None:
            all_errors[j * k_iter:(j + 1) * k_iter] = errors

    if options.display:
        print("-" * 35)
        print(f"Completed {n_iter} restarts ({n_iter * k_iter} iterations).")

    return WARPdResult(
        x=state.psi * scale,
        y=state.y * scale,
        iterates=all_iterates,
        errors=all_errors,
        metadata={
            "algorithm": "WARPd",
            "L_A": options.L_A,
            "scale": scale,
            "n_iter": n_iter,
            "k_iter": k_iter,
            "output_type": options.output_type,
            "C1": options.C1,
            "C2": options.C2,
            "tau": options.tau,
            "upsilon": options.upsilon,
            "q": q,
            "al_history": al_history,
            "eps_history": eps_history,
        },
    )
