"""Test problems for sparse recovery research.

This module provides synthetic problems with known ground truth and noise
of known norm, for algorithm development and comparison.

Example:
    >>> import numpy as np
    >>> import torch
    >>> from toy import compressed_sensing, add_bounded_noise
    >>> from warpd import MatrixOperator, WARPdOptions, prox_l1, solve_warpd
    >>>
    >>> # Generate test problem
    >>> rng = np.random.default_rng(0)
    >>> A, x_true, b_exact = compressed_sensing(m=64, n=128, k=8, rng=rng)
    >>> b_noisy = add_bounded_noise(b_exact, noise_norm=0.05, rng=rng)
    >>>
    >>> # Solve with WARPd
    >>> result = solve_warpd(
    ...     MatrixOperator(A), 0.05, prox_l1, torch.from_numpy(b_noisy),
    ...     None, None, 0.05, n_iter=30, k_iter=100,
    ...     options=WARPdOptions(C1=1.0, C2=1.0, display=False),
    ... )
"""

from .problems import (
    sparse_signal,
    compressed_sensing,
    piecewise_constant,
    add_bounded_noise,
)

__all__ = [
    "sparse_signal",
    "compressed_sensing",
    "piecewise_constant",
    "add_bounded_noise",
]
