"""Tests for the synthetic test problems."""

import numpy as np
import pytest

from toy import add_bounded_noise, compressed_sensing, piecewise_constant, sparse_signal


class TestSparseSignal:
    def test_sparsity(self):
        x = sparse_signal(n=50, k=7, rng=np.random.default_rng(0))
        assert x.shape == (50,)
        assert np.count_nonzero(x) == 7
        nonzero = np.abs(x[x != 0])
        assert np.all((nonzero >= 1.0) & (nonzero <= 2.0))

    def test_k_too_large(self):
        with pytest.raises(ValueError):
            sparse_signal(n=4, k=5)


class TestCompressedSensing:
    def test_shapes_and_data(self):
        A, x_true, b_exact = compressed_sensing(m=20, n=40, k=3, rng=np.random.default_rng(1))
        assert A.shape == (20, 40)
        assert x_true.shape == (40,)
        assert np.allclose(b_exact, A @ x_true)
        assert np.allclose(np.linalg.norm(A, axis=0), 1.0)


class TestPiecewiseConstant:
    def test_number_of_jumps(self):
        x = piecewise_constant(n=64, num_jumps=3, rng=np.random.default_rng(2))
        assert x[0] == 0.0
        assert np.count_nonzero(np.diff(x)) == 3


class TestAddBoundedNoise:
    @pytest.mark.parametrize("noise_norm", [0.0, 0.01, 2.5])
    def test_exact_norm(self, noise_norm):
        b = np.arange(10, dtype=float)
        noisy = add_bounded_noise(b, noise_norm, rng=np.random.default_rng(3))
        assert np.linalg.norm(noisy - b) == pytest.approx(noise_norm, abs=1e-12)

    def test_negative_norm(self):
        with pytest.raises(ValueError):
            add_bounded_noise(np.ones(3), -1.0)
