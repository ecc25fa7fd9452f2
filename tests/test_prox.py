"""Tests for the proximal operators."""

import pytest
import torch

from warpd.core import prox_dual, prox_l1, prox_weighted_l1, prox_zero


def _random(n, scale=1.0, seed=0):
    gen = torch.Generator().manual_seed(seed)
    return scale * torch.randn(n, dtype=torch.float64, generator=gen)


class TestProxDualLeadingBlock:
    """Euclidean shrinkage of the measurement dual (q = 0)."""

    def test_zero_rho_is_identity(self):
        y = _random(20)
        assert torch.equal(prox_dual(y, 0.0, 0), y)

    @pytest.mark.parametrize("rho", [0.1, 1.0, 3.0, 100.0])
    def test_shrinks_norm_by_rho(self, rho):
        y = _random(20, scale=2.0, seed=1)
        out = prox_dual(y, rho, 0)
        bound = max(0.0, torch.linalg.vector_norm(y).item() - rho)
        assert torch.linalg.vector_norm(out).item() <= bound + 1e-12

    def test_keeps_direction(self):
        y = _random(10, seed=2)
        out = prox_dual(y, 0.5, 0)
        factor = 1.0 - 0.5 / torch.linalg.vector_norm(y).item()
        assert torch.allclose(out, factor * y)

    def test_large_rho_gives_zero(self):
        y = _random(10, seed=3)
        assert torch.all(prox_dual(y, 1e6, 0) == 0)

    def test_zero_input_is_finite(self):
        y = torch.zeros(5, dtype=torch.float64)
        out = prox_dual(y, 1.0, 0)
        assert torch.all(torch.isfinite(out))
        assert torch.all(out == 0)

    def test_preserves_shape(self):
        y = _random(12, seed=4).reshape(3, 4)
        assert prox_dual(y, 0.1, 0).shape == (3, 4)

    def test_complex(self):
        y = torch.complex(_random(8, seed=5), _random(8, seed=6))
        out = prox_dual(y, 0.5, 0)
        bound = torch.linalg.vector_norm(y).item() - 0.5
        assert torch.linalg.vector_norm(out).item() == pytest.approx(bound)


class TestProxDualTrailingBlock:
    """Unit L-infinity ball projection of the analysis dual (q > 0)."""

    def test_box_feasible(self):
        y = _random(30, scale=5.0, seed=7)
        q = 12
        out = prox_dual(y, 0.3, q)
        assert torch.all(out[-q:].abs() <= 1.0 + 1e-12)

    def test_unchanged_inside_box(self):
        lead = _random(10, seed=8)
        trail = torch.tensor([-2.5, -1.0, -0.3, 0.0, 0.7, 1.0, 6.0], dtype=torch.float64)
        out = prox_dual(torch.cat([lead, trail]), 0.3, 7)
        inside = trail.abs() <= 1.0
        assert torch.equal(out[-7:][inside], trail[inside])

    def test_clamps_keep_sign(self):
        y = torch.tensor([1.0, 1.0, 3.0, -4.0, 0.5, 0.0], dtype=torch.float64)
        out = prox_dual(y, 0.0, 4)
        expected = torch.tensor([1.0, 1.0, 1.0, -1.0, 0.5, 0.0], dtype=torch.float64)
        assert torch.allclose(out, expected)

    def test_rho_only_affects_leading_block(self):
        y = torch.tensor([3.0, 4.0, 0.2, -0.7], dtype=torch.float64)
        out = prox_dual(y, 1.0, 2)
        # ||(3, 4)|| = 5, shrunk by 1 -> factor 0.8
        expected = torch.tensor([2.4, 3.2, 0.2, -0.7], dtype=torch.float64)
        assert torch.allclose(out, expected)

    def test_zero_rho_is_identity_inside_box(self):
        lead = _random(10, scale=3.0, seed=9)
        trail = torch.linspace(-1.0, 1.0, 7, dtype=torch.float64)
        y = torch.cat([lead, trail])
        assert torch.allclose(prox_dual(y, 0.0, 7), y)


class TestPrimalProx:
    def test_soft_threshold(self):
        x = torch.tensor([-3.0, -0.5, 0.0, 0.5, 2.0], dtype=torch.float64)
        expected = torch.tensor([-2.0, 0.0, 0.0, 0.0, 1.0], dtype=torch.float64)
        assert torch.allclose(prox_l1(x, 1.0), expected)

    def test_soft_threshold_complex_keeps_phase(self):
        x = torch.tensor([3.0 + 4.0j], dtype=torch.complex128)
        out = prox_l1(x, 1.0)
        assert torch.allclose(out, torch.tensor([2.4 + 3.2j], dtype=torch.complex128))

    def test_weighted(self):
        x = torch.tensor([2.0, 2.0], dtype=torch.float64)
        prox = prox_weighted_l1(torch.tensor([0.5, 3.0], dtype=torch.float64))
        assert torch.allclose(prox(x, 1.0), torch.tensor([1.5, 0.0], dtype=torch.float64))

    def test_zero(self):
        x = _random(4)
        assert prox_zero(x, 10.0) is x
