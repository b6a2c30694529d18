"""
Tests for the radix-2 FFT on both implementation paths.
"""

import pytest
import numpy as np

from scimath import fft
from scimath.errors import DimensionMismatch, InvalidLength


class TestForward:
    """Test the forward transform."""

    def test_impulse(self, path):
        """Test a unit impulse has a flat spectrum."""
        re, im = fft.fft([1.0, 0.0, 0.0, 0.0])
        np.testing.assert_allclose(re, [1.0, 1.0, 1.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(im, [0.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_matches_numpy(self, path, rng):
        """Test against numpy's complex FFT (exp(-i) convention)."""
        re = rng.standard_normal(16)
        im = rng.standard_normal(16)
        out_re, out_im = fft.fft(re, im)
        expected = np.fft.fft(re + 1j * im)
        np.testing.assert_allclose(out_re, expected.real, atol=1e-10)
        np.testing.assert_allclose(out_im, expected.imag, atol=1e-10)

    def test_length_one(self, path):
        """Test a single sample is its own transform."""
        re, im = fft.fft([3.0], [-1.0])
        assert re.tolist() == [3.0]
        assert im.tolist() == [-1.0]

    def test_parseval(self, path, rng):
        """Test energy is preserved up to the 1/N factor."""
        x = rng.standard_normal(128)
        re, im = fft.fft(x)
        assert np.sum(x ** 2) == pytest.approx(np.sum(re ** 2 + im ** 2) / 128, rel=1e-10)

    def test_inputs_not_mutated(self, path):
        """Test the out-of-place API leaves its inputs alone."""
        re = np.array([1.0, 2.0, 3.0, 4.0])
        im = np.zeros(4)
        fft.fft(re, im)
        np.testing.assert_array_equal(re, [1.0, 2.0, 3.0, 4.0])
        np.testing.assert_array_equal(im, np.zeros(4))


class TestRoundTrip:
    """Test forward then inverse reproduces the input."""

    @pytest.mark.parametrize("n", [1, 2, 8, 64, 1024])
    def test_round_trip(self, path, rng, n):
        """Test ifft(fft(x)) == x within 1e-9."""
        re = rng.standard_normal(n)
        im = rng.standard_normal(n)
        back_re, back_im = fft.ifft(*fft.fft(re, im))
        assert np.max(np.abs(back_re - re)) < 1e-9
        assert np.max(np.abs(back_im - im)) < 1e-9

    def test_in_place(self, path, rng):
        """Test fft_inplace overwrites and inverts."""
        re = rng.standard_normal(32)
        im = np.zeros(32)
        original = re.copy()
        fft.fft_inplace(re, im)
        assert not np.allclose(re, original)
        fft.fft_inplace(re, im, inverse=True)
        np.testing.assert_allclose(re, original, atol=1e-9)
        np.testing.assert_allclose(im, 0.0, atol=1e-9)


class TestRealFFT:
    """Test the real-input transform."""

    @pytest.mark.parametrize("n", [1, 2, 4, 32, 256])
    def test_matches_numpy(self, path, rng, n):
        """Test bins 0..N/2 against numpy.fft.rfft."""
        x = rng.standard_normal(n)
        re, im = fft.rfft(x)
        expected = np.fft.rfft(x)
        assert re.size == n // 2 + 1
        np.testing.assert_allclose(re, expected.real, atol=1e-10)
        np.testing.assert_allclose(im, expected.imag, atol=1e-10)

    def test_matches_full_transform(self, path, rng):
        """Test rfft equals the first half of the complex transform."""
        x = rng.standard_normal(64)
        re, im = fft.rfft(x)
        full_re, full_im = fft.fft(x)
        np.testing.assert_allclose(re, full_re[:33], atol=1e-10)
        np.testing.assert_allclose(im, full_im[:33], atol=1e-10)


class TestValidation:
    """Test length checks."""

    @pytest.mark.parametrize("n", [0, 3, 6, 100])
    def test_not_power_of_two(self, n):
        """Test non power-of-two lengths are rejected."""
        with pytest.raises(InvalidLength):
            fft.fft(np.ones(n))
        with pytest.raises(InvalidLength):
            fft.rfft(np.ones(n))

    def test_mismatched_parts(self):
        """Test re and im must agree in length."""
        with pytest.raises(DimensionMismatch):
            fft.fft(np.ones(4), np.ones(8))
