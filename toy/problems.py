"""Small test problems for sparse and piecewise-constant recovery.

These generate the ground truth, the measurement model and noise of a
known Euclidean norm, so that the noise level delta passed to the solver
is exact.

References:
    - E.J. Candes, J. Romberg and T. Tao, "Stable signal recovery from
      incomplete and inaccurate measurements", Comm. Pure Appl. Math. 59
      (2006), pp. 1207-1223.
    - L.I. Rudin, S. Osher and E. Fatemi, "Nonlinear total variation based
      noise removal algorithms", Physica D 60 (1992), pp. 259-268.
"""

from typing import Tuple

import numpy as np


def sparse_signal(
    n: int = 128,
    k: int = 8,
    rng: np.random.Generator = None,
) -> np.ndarray:
    """Generate a k-sparse signal.

    Support is drawn uniformly without replacement. Nonzero entries have
    random sign and magnitude in [1, 2], so they stand clear of the noise.

    Args:
        n: Signal length.
        k: Number of nonzero entries.
        rng: NumPy random generator. If None, uses default.

    Returns:
        (n,) signal with exactly k nonzeros.
    """
    if k > n:
        raise ValueError(f"k must not exceed n, got k={k}, n={n}")
    if rng is None:
        rng = np.random.default_rng()

    x = np.zeros(n)
    support = rng.choice(n, size=k, replace=False)
    signs = rng.choice([-1.0, 1.0], size=k)
    x[support] = signs * rng.uniform(1.0, 2.0, size=k)
    return x


def compressed_sensing(
    m: int = 64,
    n: int = 128,
    k: int = 8,
    rng: np.random.Generator = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Generate a compressed sensing problem.

    The sensing matrix is Gaussian with columns normalized to unit norm.

    Args:
        m: Number of measurements.
        n: Signal length.
        k: Sparsity of the true signal.
        rng: NumPy random generator. If None, uses default.

    Returns:
        A: (m, n) sensing matrix.
        x_true: (n,) k-sparse signal.
        b_exact: (m,) exact data (A @ x_true, no noise).

    Example:
        >>> A, x_true, b_exact = compressed_sensing(m=64, n=128, k=8)
        >>> assert A.shape == (64, 128)
        >>> assert np.allclose(b_exact, A @ x_true)
    """
    if rng is None:
        rng = np.random.default_rng()

    A = rng.standard_normal((m, n))
    A /= np.linalg.norm(A, axis=0, keepdims=True)

    x_true = sparse_signal(n, k, rng)
    b_exact = A @ x_true

    return A, x_true, b_exact


def piecewise_constant(
    n: int = 128,
    num_jumps: int = 4,
    rng: np.random.Generator = None,
) -> np.ndarray:
    """Generate a piecewise-constant signal (sparse finite differences).

    Jump locations are distinct and levels change by at least 0.5 at each
    jump. The signal starts at 0, so its circular difference has at most
    num_jumps + 1 nonzeros (the extra one is the wrap-around back to 0).

    Args:
        n: Signal length.
        num_jumps: Number of interior jumps.
        rng: NumPy random generator. If None, uses default.

    Returns:
        (n,) signal.
    """
    if rng is None:
        rng = np.random.default_rng()

    jumps = np.sort(rng.choice(np.arange(1, n), size=num_jumps, replace=False))
    steps = rng.choice([-1.0, 1.0], size=num_jumps) * rng.uniform(0.5, 1.5, size=num_jumps)

    x = np.zeros(n)
    for position, step in zip(jumps, steps):
        x[position:] += step
    return x


def add_bounded_noise(
    b_exact: np.ndarray,
    noise_norm: float,
    rng: np.random.Generator = None,
) -> np.ndarray:
    """Add Gaussian noise rescaled to an exact Euclidean norm.

    Args:
        b_exact: Exact (noise-free) data.
        noise_norm: Euclidean norm of the added noise.
        rng: NumPy random generator. If None, uses default.

    Returns:
        Noisy data b_exact + e with ||e||_2 = noise_norm.

    Example:
        >>> b_exact = np.array([1.0, 2.0, 3.0])
        >>> b_noisy = add_bounded_noise(b_exact, noise_norm=0.1)
        >>> assert np.isclose(np.linalg.norm(b_noisy - b_exact), 0.1)
    """
    if noise_norm < 0:
        raise ValueError(f"noise_norm must be non-negative, got {noise_norm}")
    if rng is None:
        rng = np.random.default_rng()

    noise = rng.standard_normal(b_exact.shape)
    noise = noise * (noise_norm / np.linalg.norm(noise))

    return b_exact + noise
