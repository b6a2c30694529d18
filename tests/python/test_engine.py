"""
Tests for the handle-based engine facade.
"""

import pytest
import numpy as np

from scimath import Engine, VectorArena
from scimath.errors import DimensionMismatch, InvalidHandle, InvalidLength, SingularMatrix


class TestEngineMemory:
    """Test vector lifecycle through the engine."""

    def test_create_and_read(self, engine):
        """Test zero-filled creation."""
        h = engine.create_vector(4)
        np.testing.assert_array_equal(engine.read(h), np.zeros(4))

    def test_create_batch(self, engine):
        """Test batch creation."""
        handles = engine.create_batch(3, 2)
        assert len(set(handles)) == 3

    def test_write_and_read(self, engine):
        """Test writes are visible on read."""
        h = engine.create_vector(3)
        engine.write(h, [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(engine.read(h), [1.0, 2.0, 3.0])

    def test_load_bytes(self, engine):
        """Test raw byte loading."""
        raw = np.array([1.0, 2.0], dtype=np.float32).tobytes()
        h = engine.load_bytes(raw, kind='float32')
        np.testing.assert_array_equal(engine.read(h), [1.0, 2.0])

    def test_get_pointer(self, engine):
        """Test (address, length) of a live vector."""
        h = engine.load([1.0, 2.0, 3.0])
        address, length = engine.get_pointer(h)
        assert address != 0
        assert length == 3

    def test_released_handle(self, engine):
        """Test operations on a released handle raise InvalidHandle."""
        h = engine.load([1.0, 2.0])
        engine.release(h)
        with pytest.raises(InvalidHandle):
            engine.get_pointer(h)
        with pytest.raises(InvalidHandle):
            engine.mean(h)

    def test_pointer_view_epoch(self, engine):
        """Test pointer views go stale after an allocation."""
        h = engine.load([1.0])
        view = engine.pointer_view(h)
        assert view.is_valid
        engine.create_vector(1)
        assert not view.is_valid

    def test_columns(self, engine):
        """Test named column lookup."""
        h = engine.load([1.0, 2.0])
        engine.set_column("signal", h)
        assert engine.get_column_id("signal") == h
        with pytest.raises(InvalidHandle):
            engine.get_column_id("other")

    def test_shared_arena(self):
        """Test engines can share an arena."""
        arena = VectorArena()
        h = Engine(arena).load([5.0])
        assert Engine(arena).mean(h) == 5.0

    def test_memory_stats(self, engine):
        """Test vector and byte counts."""
        engine.create_vector(4)
        engine.create_vector(2, kind='float32')
        assert engine.memory_stats() == {"vectors": 2, "nbytes": 40}


class TestEngineOperations:
    """Test operations addressed by handle."""

    def test_fft_in_place(self, engine):
        """Test the (re, im) pair is transformed in place."""
        re = engine.load([1.0, 0.0, 0.0, 0.0])
        im = engine.create_vector(4)
        engine.fft(re, im)
        np.testing.assert_allclose(engine.read(re), [1.0, 1.0, 1.0, 1.0], atol=1e-12)
        engine.fft(re, im, inverse=True)
        np.testing.assert_allclose(engine.read(re), [1.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_fft_bad_length(self, engine):
        """Test non power-of-two handles."""
        re = engine.create_vector(6)
        im = engine.create_vector(6)
        with pytest.raises(InvalidLength):
            engine.fft(re, im)

    def test_rfft(self, engine, rng):
        """Test real FFT into N/2 + 1 outputs."""
        data = rng.standard_normal(16)
        h = engine.load(data)
        out_re = engine.create_vector(9)
        out_im = engine.create_vector(9)
        engine.rfft(h, out_re, out_im)
        expected = np.fft.rfft(data)
        np.testing.assert_allclose(engine.read(out_re), expected.real, atol=1e-10)
        np.testing.assert_allclose(engine.read(out_im), expected.imag, atol=1e-10)

    def test_smooth(self, engine):
        """Test Savitzky-Golay into an output handle."""
        h = engine.load([10, 10, 10, 100, 10, 10, 10])
        out = engine.create_vector(7)
        engine.smooth(h, out, 5)
        assert 10.0 < engine.read(out)[3] < 100.0

    def test_output_too_small(self, engine):
        """Test outputs must hold the result."""
        h = engine.load(np.arange(8.0))
        out = engine.create_vector(4)
        with pytest.raises(DimensionMismatch):
            engine.moving_average(h, out, 3)

    def test_detect_peaks(self, engine):
        """Test peak indices by handle."""
        h = engine.load([0, 1, 3, 1, 0.5, 2, 0])
        assert engine.detect_peaks(h, 1.5).tolist() == [2, 5]

    def test_butterworth_and_deconvolve(self, engine):
        """Test filter and deconvolution outputs land in their handles."""
        h = engine.load(np.ones(64))
        out = engine.create_vector(64)
        engine.butterworth_lowpass(h, out, 5.0, 100.0)
        assert engine.read(out)[-1] == pytest.approx(1.0, abs=1e-3)

        kernel = engine.load([1.0])
        engine.deconvolve(h, kernel, out, 2)
        np.testing.assert_allclose(engine.read(out), np.ones(64))

    def test_remove_baseline(self, engine):
        """Test baseline removal by handle."""
        x = np.arange(10.0)
        hy = engine.load(1.0 + 2.0 * x)
        hx = engine.load(x)
        out = engine.create_vector(10)
        engine.remove_baseline(hy, hx, out, 1)
        np.testing.assert_allclose(engine.read(out), 0.0, atol=1e-9)

    def test_statistics(self, engine):
        """Test reductions by handle."""
        h = engine.load([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
        assert engine.mean(h) == 5.0
        assert engine.median(h) == 4.5
        assert engine.mode(h) == 4.0
        assert engine.variance(h) == pytest.approx(32.0 / 7.0)
        assert engine.standard_deviation(h) == pytest.approx(np.sqrt(32.0 / 7.0))
        assert isinstance(engine.skewness(h), float)
        assert isinstance(engine.kurtosis(h), float)
        assert isinstance(engine.snr(h), float)

    def test_float32_vector(self, engine):
        """Test single-precision storage works with every reader."""
        h = engine.load([1.0, 2.0, 3.0], kind='float32')
        assert engine.mean(h) == 2.0

    def test_calculus(self, engine):
        """Test derivative and Simpson integral by handle."""
        h = engine.load(np.arange(10.0) * 3.0)
        out = engine.create_vector(10)
        engine.derivative(h, out)
        np.testing.assert_allclose(engine.read(out), 3.0)
        assert engine.integrate(engine.load([0.0, 1.0, 4.0])) == pytest.approx(8.0 / 3.0)

    def test_linear_algebra(self, engine):
        """Test handle-based linear algebra."""
        a = engine.load([1, 2, 3, 4])
        b = engine.load([1, 0, 0, 1])
        product = engine.matrix_multiply(a, 2, 2, b, 2, 2)
        np.testing.assert_array_equal(engine.read(product), [1, 2, 3, 4])
        np.testing.assert_array_equal(engine.read(engine.transpose(a, 2, 2)), [1, 3, 2, 4])
        assert engine.trace(a, 2) == 5.0
        assert engine.determinant(a, 2) == pytest.approx(-2.0)
        assert engine.dot(a, b) == 5.0
        inv = engine.invert_2x2(a)
        np.testing.assert_allclose(engine.read(inv), [-2.0, 1.0, 1.5, -0.5])
        inv3 = engine.invert_3x3(engine.load([2, 0, 0, 0, 4, 0, 0, 0, 8]))
        np.testing.assert_allclose(engine.read(inv3), [0.5, 0, 0, 0, 0.25, 0, 0, 0, 0.125])

    def test_normalize(self, engine):
        """Test normalization into an output handle."""
        h = engine.load([3.0, 4.0])
        out = engine.create_vector(2)
        engine.normalize(h, out)
        np.testing.assert_allclose(engine.read(out), [0.6, 0.8])

    def test_solve(self, engine):
        """Test solving from flat arrays."""
        np.testing.assert_allclose(engine.solve_linear_system([2, 1, 1, 3], [5, 10], 2),
                                   [1.0, 3.0])
        with pytest.raises(SingularMatrix):
            engine.solve_linear_system([1, 1, 1, 1], [1, 2], 2)

    def test_fits(self, engine):
        """Test fitting by handle."""
        x = np.linspace(1.0, 5.0, 9)
        hx = engine.load(x)
        line = engine.fit_linear(hx, engine.load(2.0 * x + 1.0))
        assert line.slope == pytest.approx(2.0)
        quad = engine.fit_polynomial(hx, engine.load(x ** 2), 2)
        np.testing.assert_allclose(quad.parameters, [0.0, 0.0, 1.0], atol=1e-8)
        expo = engine.fit_exponential(hx, engine.load(np.exp(x)))
        np.testing.assert_allclose(expo.parameters, [1.0, 1.0], rtol=1e-9)
        log = engine.fit_logarithmic(hx, engine.load(2.0 * np.log(x)))
        np.testing.assert_allclose(log.parameters, [0.0, 2.0], atol=1e-9)
        gauss = engine.fit_gaussian(hx, engine.load(np.exp(-(x - 3.0) ** 2 / 2.0)),
                                    (1.0, 3.0, 1.0))
        np.testing.assert_allclose(gauss.parameters, [1.0, 3.0, 1.0], atol=1e-6)

    def test_genetic_algorithm(self, engine):
        """Test the optimizer through the engine."""
        best = engine.genetic_algorithm(lambda v: float(v @ v), [-10, 10, -10, 10], rng=0)
        assert np.all(np.abs(best) < 4.0)

    def test_init_thread_pool(self, engine):
        """Test explicit pool setup returns a worker count."""
        assert engine.init_thread_pool(1) == 1
