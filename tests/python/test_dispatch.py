"""
Tests for path selection, configuration and the thread pool.
"""

import logging

import pytest
import numpy as np

import scimath
from scimath import stats
from scimath._config import (
    DEFAULT_THRESHOLDS,
    DispatchConfig,
    DispatchMode,
    ParallelConfig,
    config,
    set_dispatch,
    set_parallel,
)
from scimath._dispatch import (
    KernelRegistry,
    Path,
    dispatch,
    forced,
    get_registry,
    resolve,
    select,
)
from scimath._kernel import _pool
from scimath.errors import SCIMATH_ERROR_INTERNAL, SciMathError


class TestSelect:
    """Test size-based path selection."""

    def test_threshold_boundary(self):
        """Test sizes at the threshold stay portable."""
        with config.local(dispatch=DispatchConfig(mode=DispatchMode.AUTO)):
            limit = DEFAULT_THRESHOLDS["mean"]
            assert select("mean", limit) == Path.PORTABLE
            assert select("mean", limit + 1) == Path.ACCELERATED

    def test_unknown_operation_uses_default(self):
        """Test operations without an entry use default_threshold."""
        cfg = DispatchConfig(mode=DispatchMode.AUTO, default_threshold=10)
        with config.local(dispatch=cfg):
            assert select("not_an_op", 10) == Path.PORTABLE
            assert select("not_an_op", 11) == Path.ACCELERATED

    def test_runtime_threshold(self):
        """Test thresholds can be tuned per operation."""
        cfg = DispatchConfig(mode=DispatchMode.AUTO, thresholds={"mean": 0})
        with config.local(dispatch=cfg):
            assert select("mean", 1) == Path.ACCELERATED

    def test_forced_modes(self):
        """Test forced modes ignore the size."""
        with config.local(dispatch=DispatchConfig(mode=DispatchMode.ACCELERATED)):
            assert select("mean", 0) == Path.ACCELERATED
        with config.local(dispatch=DispatchConfig(mode=DispatchMode.PORTABLE)):
            assert select("mean", 10 ** 9) == Path.PORTABLE

    def test_forced_context(self):
        """Test forced() applies and restores."""
        before = config.dispatch.mode
        with forced(Path.PORTABLE) as p:
            assert p == Path.PORTABLE
            assert select("fft", 10 ** 6) == Path.PORTABLE
            with forced(Path.ACCELERATED):
                assert select("fft", 1) == Path.ACCELERATED
            assert select("fft", 10 ** 6) == Path.PORTABLE
        assert config.dispatch.mode == before

    def test_set_dispatch(self):
        """Test the global convenience setter."""
        set_dispatch(DispatchMode.AUTO, mean=5)
        assert config.dispatch.threshold("mean") == 5
        assert config.dispatch.threshold("fft") == DEFAULT_THRESHOLDS["fft"]
        assert select("mean", 6) == Path.ACCELERATED


class TestRegistry:
    """Test implementation registration."""

    def test_both_paths_complete(self):
        """Test every operation is implemented on both paths."""
        registry = get_registry()
        fast = registry.operations(Path.ACCELERATED)
        slow = registry.operations(Path.PORTABLE)
        assert fast == slow
        for op in ("mean", "dot", "fft", "solve", "detect_peaks", "fit_linear",
                   "genetic_algorithm", "poly_eval", "derivative"):
            assert op in fast

    def test_registry_basics(self):
        """Test a standalone registry."""
        registry = KernelRegistry()
        registry.register(Path.PORTABLE, "op", len)
        assert registry.has_handler(Path.PORTABLE, "op")
        assert not registry.has_handler(Path.ACCELERATED, "op")
        assert registry.get_handler(Path.PORTABLE, "op") is len
        assert registry.get_handler(Path.ACCELERATED, "op") is None

    def test_resolve_missing(self):
        """Test unregistered operations raise an internal error."""
        with pytest.raises(SciMathError) as exc_info:
            resolve("missing_op", Path.ACCELERATED)
        assert exc_info.value.code == SCIMATH_ERROR_INTERNAL

    def test_dispatch_runs_selected_path(self, monkeypatch):
        """Test dispatch calls the implementation for the chosen path."""
        handlers = get_registry()._handlers
        monkeypatch.setitem(handlers[Path.ACCELERATED], "echo", lambda x: ("fast", x))
        monkeypatch.setitem(handlers[Path.PORTABLE], "echo", lambda x: ("slow", x))
        cfg = DispatchConfig(mode=DispatchMode.AUTO, thresholds={"echo": 10})
        with config.local(dispatch=cfg):
            assert dispatch("echo", 5, 1) == ("slow", 1)
            assert dispatch("echo", 50, 2) == ("fast", 2)


class TestConfig:
    """Test configuration sections and environment variables."""

    def test_env_dispatch_mode(self, monkeypatch):
        """Test SCIMATH_DISPATCH."""
        monkeypatch.setenv("SCIMATH_DISPATCH", "portable")
        assert DispatchConfig().mode == DispatchMode.PORTABLE
        monkeypatch.setenv("SCIMATH_DISPATCH", "Accelerated")
        assert DispatchConfig().mode == DispatchMode.ACCELERATED

    def test_env_dispatch_invalid(self, monkeypatch, caplog):
        """Test unknown values fall back to AUTO with a warning."""
        monkeypatch.setenv("SCIMATH_DISPATCH", "turbo")
        with caplog.at_level(logging.WARNING, logger="scimath.config"):
            assert DispatchConfig().mode == DispatchMode.AUTO
        assert "turbo" in caplog.text

    def test_env_threads(self, monkeypatch):
        """Test SCIMATH_NUM_THREADS and SCIMATH_NO_THREADS."""
        monkeypatch.setenv("SCIMATH_NUM_THREADS", "4")
        monkeypatch.setenv("SCIMATH_NO_THREADS", "1")
        cfg = ParallelConfig()
        assert cfg.num_threads == 4
        assert cfg.enabled is False

    def test_env_reset(self, monkeypatch):
        """Test reset re-reads the environment."""
        monkeypatch.setenv("SCIMATH_DISPATCH", "portable")
        config.reset()
        assert select("mean", 10 ** 6) == Path.PORTABLE

    def test_local_restores(self):
        """Test nested local contexts unwind in order."""
        outer = DispatchConfig(mode=DispatchMode.PORTABLE)
        inner = DispatchConfig(mode=DispatchMode.ACCELERATED)
        with config.local(dispatch=outer):
            with config.local(dispatch=inner):
                assert config.dispatch is inner
            assert config.dispatch is outer

    def test_local_unknown_section(self):
        """Test unknown sections are rejected."""
        with pytest.raises(TypeError):
            config.local(turbo=True)

    def test_on_change(self):
        """Test callbacks fire on global changes."""
        seen = []
        config.on_change("numeric", seen.append)
        try:
            config.numeric = scimath.NumericConfig(singular_epsilon=1e-9)
        finally:
            config._callbacks["numeric"].remove(seen.append)
        assert len(seen) == 1
        assert seen[0].singular_epsilon == 1e-9
        assert config.epsilon == 1e-9

    def test_failing_callback_is_logged(self, caplog):
        """Test a failing callback does not break the setter."""
        def broken(_value):
            raise RuntimeError("callback failure")

        config.on_change("dispatch", broken)
        try:
            with caplog.at_level(logging.WARNING, logger="scimath.config"):
                config.dispatch = DispatchConfig(mode=DispatchMode.PORTABLE)
        finally:
            config._callbacks["dispatch"].remove(broken)
        assert config.dispatch.mode == DispatchMode.PORTABLE
        assert "callback" in caplog.text.lower()

    def test_to_dict(self):
        """Test serialization."""
        with forced(Path.PORTABLE):
            data = config.to_dict()
        assert data["dispatch"]["mode"] == "PORTABLE"
        assert data["numeric"]["singular_epsilon"] == 1e-12
        assert data["parallel"]["min_elements_per_thread"] == 65536

    def test_epsilon_drives_solver(self):
        """Test the singular epsilon reaches the solver."""
        near_singular = [1.0, 1.0, 1.0, 1.0 + 1e-10]
        with config.local(numeric=scimath.NumericConfig(singular_epsilon=1e-6)):
            with pytest.raises(scimath.SingularMatrix):
                scimath.linalg.solve_linear_system(near_singular, [1.0, 2.0], 2)
        x = scimath.linalg.solve_linear_system(near_singular, [1.0, 2.0], 2)
        assert x.shape == (2,)


class TestThreadPool:
    """Test the accelerated-path worker pool."""

    def test_init_and_shutdown(self):
        """Test explicit pool sizing."""
        set_parallel(enabled=True)
        assert scimath.init_thread_pool(2) == 2
        assert _pool.pool_size() == 2
        scimath.shutdown_thread_pool()
        assert _pool.pool_size() == 1

    def test_disabled_pool(self):
        """Test a disabled configuration stays sequential."""
        set_parallel(enabled=False)
        assert scimath.init_thread_pool(4) == 1
        assert _pool.pool_size() == 1

    def test_chunk_bounds(self):
        """Test chunks cover the range without gaps."""
        set_parallel(enabled=True)
        scimath.init_thread_pool(2)
        cfg = ParallelConfig(enabled=True, num_threads=2, min_elements_per_thread=10)
        with config.local(parallel=cfg):
            assert _pool.chunk_bounds(25) == [(0, 13), (13, 25)]
            assert _pool.chunk_bounds(15) == [(0, 15)]

    def test_parallel_map_order(self):
        """Test results keep submission order."""
        set_parallel(enabled=True)
        scimath.init_thread_pool(3)
        out = _pool.parallel_map(lambda a, b: a * b, [(i, 2) for i in range(10)])
        assert out == [i * 2 for i in range(10)]

    def test_parallel_map_propagates(self):
        """Test worker exceptions reach the caller."""
        set_parallel(enabled=True)
        scimath.init_thread_pool(2)

        def fail(i):
            if i == 3:
                raise ValueError("worker failure")
            return i

        with pytest.raises(ValueError):
            _pool.parallel_map(fail, [(i,) for i in range(5)])

    def test_pooled_reduction_matches(self, rng):
        """Test chunked reductions agree with a single pass."""
        set_parallel(enabled=True)
        scimath.init_thread_pool(4)
        data = rng.standard_normal(50000)
        cfg = ParallelConfig(enabled=True, num_threads=4, min_elements_per_thread=1000)
        with config.local(parallel=cfg), forced(Path.ACCELERATED):
            assert stats.mean(data) == pytest.approx(float(np.mean(data)), rel=1e-12)
            assert scimath.linalg.dot(data, data) == pytest.approx(float(data @ data),
                                                                   rel=1e-12)
