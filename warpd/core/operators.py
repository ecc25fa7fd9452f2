"""Linear operators with forward and adjoint application.

Every solver in this package touches the measurement model only through
operator applications, so an operator is anything exposing a ``forward``
and an ``adjoint`` method. The pair must satisfy

    <A(x), y> = <x, A^T(y)>

for all x and y. This is a precondition, it is not checked at runtime.
Use ``tests/test_operators.py::dot_product_test`` to verify a new operator.

For compatibility with code written against a single ``apply(x, mode)``
callable, ``LinearOperator.apply`` accepts mode 1 (forward) and 0 (adjoint).
"""

import math
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple, Union

import numpy as np
import torch

__all__ = [
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
]

FORWARD = 1
ADJOINT = 0


class LinearOperator(ABC):
    """Abstract linear operator.

    Subclasses implement ``forward`` and ``adjoint``. Operators hold no
    iteration state: applying one never changes the result of a later call.
    """

    @abstractmethod
    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """Apply the operator: y = A(x)."""

    @abstractmethod
    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        """Apply the adjoint: x = A^T(y)."""

    def apply(self, x: torch.Tensor, mode: int) -> torch.Tensor:
        """Apply forward (mode=1) or adjoint (mode=0)."""
        if mode == FORWARD:
            return self.forward(x)
        if mode == ADJOINT:
            return self.adjoint(x)
        raise ValueError(f"mode must be {FORWARD} (forward) or {ADJOINT} (adjoint), got {mode}")

    def __call__(self, x: torch.Tensor) -> torch.Tensor:
        return self.forward(x)


class FunctionOperator(LinearOperator):
    """Operator built from a ``(forward, adjoint)`` pair of callables."""

    def __init__(
        self,
        forward: Callable[[torch.Tensor], torch.Tensor],
        adjoint: Callable[[torch.Tensor], torch.Tensor],
    ):
        self._forward = forward
        self._adjoint = adjoint

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self._forward(x)

    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        return self._adjoint(y)


class ModeOperator(LinearOperator):
    """Operator built from a single ``apply(x, mode)`` callable."""

    def __init__(self, apply: Callable[[torch.Tensor, int], torch.Tensor]):
        self._apply = apply

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self._apply(x, FORWARD)

    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        return self._apply(y, ADJOINT)


class MatrixOperator(LinearOperator):
    """Dense matrix operator.

    Attributes:
        matrix: The (m, n) matrix as a tensor.
        shape: Matrix shape (m, n).
    """

    def __init__(
        self,
        matrix: Union[np.ndarray, torch.Tensor],
        device: str = None,
        dtype: torch.dtype = None,
    ):
        if isinstance(matrix, np.ndarray):
            matrix = torch.from_numpy(matrix)
        if matrix.ndim != 2:
            raise ValueError(f"matrix must be 2D, got {matrix.ndim}D")
        self.matrix = matrix.to(device=device, dtype=dtype)
        self.shape = tuple(self.matrix.shape)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.matrix @ x

    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        return self.matrix.mH @ y


class IdentityOperator(LinearOperator):
    """Identity map, self-adjoint."""

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return x

    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        return y


class FiniteDifference(LinearOperator):
    """Forward difference along one axis with circular boundary.

    (D x)[i] = x[i+1] - x[i], so the range has the same size as the input.
    Its norm is at most 2. Both directions use torch.roll, so forward and
    adjoint are exact transposes of each other.
    """

    def __init__(self, dim: int = -1):
        self.dim = dim

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return torch.roll(x, -1, dims=self.dim) - x

    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        # (D^T y)[i] = y[i-1] - y[i]
        return torch.roll(y, 1, dims=self.dim) - y


class FFTConvolution(LinearOperator):
    """Circular n-D convolution computed with the real FFT.

    The kernel is expected with its origin at index 0 along every axis.
    The adjoint is correlation with the same kernel, i.e. multiplication
    by the conjugate transfer function.

    Attributes:
        otf: Transfer function of the kernel (rfftn).
        shape: Spatial shape of kernel and signal.
    """

    def __init__(
        self,
        kernel: Union[np.ndarray, torch.Tensor],
        normalize: bool = True,
        device: str = "cpu",
        dtype: torch.dtype = torch.float64,
    ):
        if isinstance(kernel, np.ndarray):
            kernel = torch.from_numpy(kernel.astype(np.float64))
        kernel = kernel.to(device=device, dtype=dtype)

        if normalize:
            kernel = kernel / kernel.sum()

        self.shape = tuple(kernel.shape)
        self.dims = tuple(range(-len(self.shape), 0))
        self.otf = torch.fft.rfftn(kernel, dim=self.dims)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        x_ft = torch.fft.rfftn(x, dim=self.dims)
        return torch.fft.irfftn(x_ft * self.otf, s=self.shape, dim=self.dims)

    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        y_ft = torch.fft.rfftn(y, dim=self.dims)
        return torch.fft.irfftn(y_ft * torch.conj(self.otf), s=self.shape, dim=self.dims)


class FlattenedOperator(LinearOperator):
    """View an operator's range as a flat vector.

    Forward flattens the output of ``op``. Adjoint reshapes its flat input
    to ``range_shape`` before handing it to ``op``, so operators with an
    n-D range (e.g. FFTConvolution on an image) can work with a 1-D dual
    variable.

    Attributes:
        op: Wrapped operator.
        range_shape: Shape of the output of ``op.forward``.
    """

    def __init__(self, op: LinearOperator, range_shape: Tuple[int, ...]):
        self.op = op
        self.range_shape = tuple(range_shape)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.op.forward(x).reshape(-1)

    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        return self.op.adjoint(y.reshape(self.range_shape))


class CompositeOperator(LinearOperator):
    """Stacked operator K = [A; B] for joint measurement and analysis terms.

    Forward:
        K(x) = [A(x); B(x)]   (flattened and concatenated)
    Adjoint:
        K^T([u; v]) = A^T(u) + B^T(v)

    where v is the trailing block of length q (the dimension of B's range)
    and u is everything before it. When A or B has an n-D range, pass its
    shape as ``shape_A`` / ``shape_B`` so the adjoint hands each block back
    in that shape.

    Attributes:
        A: Measurement operator.
        B: Analysis operator.
        q: Dimension of the range of B.
    """

    def __init__(
        self,
        A: LinearOperator,
        B: LinearOperator,
        q: int,
        shape_A: Optional[Tuple[int, ...]] = None,
        shape_B: Optional[Tuple[int, ...]] = None,
    ):
        if q < 0:
            raise ValueError(f"q must be non-negative, got {q}")
        if shape_B is not None and math.prod(shape_B) != q:
            raise ValueError(f"range of B has {math.prod(shape_B)} entries, expected q={q}")
        self.A = A if shape_A is None else FlattenedOperator(A, shape_A)
        self.B = B if shape_B is None else FlattenedOperator(B, shape_B)
        self.q = q

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return torch.cat([self.A.forward(x).reshape(-1), self.B.forward(x).reshape(-1)])

    def adjoint(self, y: torch.Tensor) -> torch.Tensor:
        split = y.numel() - self.q
        return self.A.adjoint(y[:split]) + self.B.adjoint(y[split:])


def as_operator(
    obj: Union[LinearOperator, torch.Tensor, np.ndarray, Tuple[Callable, Callable], Callable],
) -> LinearOperator:
    """Normalize the supported operator representations to a LinearOperator.

    Accepts:
        - a ``LinearOperator`` (returned unchanged),
        - a 2D tensor or NumPy array (wrapped in ``MatrixOperator``),
        - a ``(forward, adjoint)`` pair of callables,
        - a single ``apply(x, mode)`` callable.

    Raises:
        TypeError: If ``obj`` is none of the above.
    """
    if isinstance(obj, LinearOperator):
        return obj
    if isinstance(obj, (torch.Tensor, np.ndarray)):
        return MatrixOperator(obj)
    if isinstance(obj, (tuple, list)):
        if len(obj) != 2 or not all(callable(f) for f in obj):
            raise TypeError("operator pair must be (forward, adjoint) callables")
        return FunctionOperator(obj[0], obj[1])
    if callable(obj):
        return ModeOperator(obj)
    raise TypeError(f"cannot interpret {type(obj).__name__} as a linear operator")
