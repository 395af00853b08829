"""Tests for the process-pool executor."""

import psutil
import pytest

from mining_outlook.parallel_executor import CPUProfile, ParallelExecutor


# Module-level test functions for pickling
def _test_process_with_config(item, **kwargs):
    """Process item with configuration."""
    multiplier = kwargs.get("multiplier", 1)
    offset = kwargs.get("offset", 0)
    return item * multiplier + offset


def _test_failing_function(x):
    """Function that fails on specific input for error testing."""
    if x == 5:
        raise RuntimeError("Test error")
    return x


class _PickleCounter:
    """Shared argument that counts how often the parent process pickles it."""

    count = 0

    def __init__(self, multiplier):
        self.multiplier = multiplier

    def __getstate__(self):
        type(self).count += 1
        return self.__dict__


def _test_scale_by_counter(item, counter):
    return item * counter.multiplier


class TestCPUProfile:
    """Test CPU detection."""

    def test_detect(self):
        profile = CPUProfile.detect()
        assert profile.n_cores >= 1

    def test_default_workers_use_physical_cores(self):
        executor = ParallelExecutor(n_workers=None)
        assert executor.n_workers == (psutil.cpu_count(logical=False) or 1)


class TestParallelExecutor:
    """Test sequential and parallel mapping."""

    def test_sequential(self):
        executor = ParallelExecutor(n_workers=1)
        results = executor.map(_test_process_with_config, range(5), shared={"multiplier": 3})
        assert results == [0, 3, 6, 9, 12]

    def test_parallel_preserves_order(self):
        executor = ParallelExecutor(n_workers=2)
        results = executor.map(
            _test_process_with_config, range(20), shared={"multiplier": 2, "offset": 1}
        )
        assert results == [2 * i + 1 for i in range(20)]

    def test_progress_bar(self):
        executor = ParallelExecutor(n_workers=1, show_progress=True)
        assert executor.map(_test_process_with_config, [1, 2], desc="Test") == [1, 2]

    def test_errors_propagate(self):
        executor = ParallelExecutor(n_workers=2)
        with pytest.raises(RuntimeError, match="Test error"):
            executor.map(_test_failing_function, range(10))

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ParallelExecutor(n_workers=0)

    def test_shared_sent_once_per_worker(self):
        """Test shared arguments travel with the pool start-up, not with each item."""
        _PickleCounter.count = 0
        executor = ParallelExecutor(n_workers=2)
        results = executor.map(
            _test_scale_by_counter, range(20), shared={"counter": _PickleCounter(3)}
        )
        assert results == [3 * i for i in range(20)]
        assert _PickleCounter.count <= 2
