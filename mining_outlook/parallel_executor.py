"""Process-pool execution of independent work items.

Environment generation is split into trial blocks and scenario sweeps into
decision vectors; both are embarrassingly parallel. Each work item owns its
inputs (a disjoint row range, or one decision vector) and returns a fresh
result, so no mutable state is shared between workers. Results always come
back in submission order, which keeps the assembled tables identical to a
sequential run.

Read-only arguments common to every item (``shared``) are sent to each
worker process once, when the pool starts, rather than with every item. A
sweep over dozens of decision vectors therefore serialises the environments
once per worker.

Example:
    >>> executor = ParallelExecutor(n_workers=4)
    >>> results = executor.map(work_function, work_items, shared={"year_count": 5})
"""

from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import psutil
from tqdm import tqdm

logger = logging.getLogger(__name__)

# Per-process copy of the shared arguments, set by the pool initializer.
_worker_shared: Dict[str, Any] = {}


@dataclass
class CPUProfile:
    """CPU resources used to size the worker pool."""

    n_cores: int

    @classmethod
    def detect(cls) -> "CPUProfile":
        """Detect current CPU profile.

        Returns:
            CPUProfile: Current system CPU profile
        """
        return cls(n_cores=psutil.cpu_count(logical=False) or 1)


def _init_worker(shared: Dict[str, Any]) -> None:
    global _worker_shared
    _worker_shared = shared


def _call_with_worker_shared(function: Callable, item: Any) -> Any:
    return function(item, **_worker_shared)


class ParallelExecutor:
    """Run a function over work items, sequentially or in worker processes.

    Args:
        n_workers: Number of worker processes. ``None`` uses the physical
            core count; ``1`` runs in the calling process.
        show_progress: Display a tqdm progress bar.
    """

    def __init__(self, n_workers: Optional[int] = 1, show_progress: bool = False):
        if n_workers is None:
            n_workers = CPUProfile.detect().n_cores
        if n_workers < 1:
            raise ValueError(f"n_workers must be at least 1, got {n_workers}")
        self.n_workers = n_workers
        self.show_progress = show_progress

    def map(
        self,
        function: Callable,
        items: Sequence[Any],
        shared: Optional[Dict[str, Any]] = None,
        desc: Optional[str] = None,
    ) -> List[Any]:
        """Apply ``function(item, **shared)`` to every item.

        ``function`` must be a module-level callable so it can be pickled.
        ``shared`` is pickled once per worker process, items once each.
        Exceptions raised by a work item propagate to the caller.

        Args:
            function: Work function.
            items: Work items.
            shared: Read-only keyword arguments passed to every call.
            desc: Progress-bar label.

        Returns:
            Results in the order of ``items``.
        """
        shared = shared or {}
        items = list(items)
        if self.n_workers == 1 or len(items) <= 1:
            iterator = tqdm(items, desc=desc) if self.show_progress else items
            return [function(item, **shared) for item in iterator]

        n_workers = min(self.n_workers, len(items))
        logger.info(f"Dispatching {len(items)} work items to {n_workers} workers")
        results: List[Any] = [None] * len(items)
        with ProcessPoolExecutor(
            max_workers=n_workers, initializer=_init_worker, initargs=(shared,)
        ) as executor:
            futures = {
                executor.submit(_call_with_worker_shared, function, item): index
                for index, item in enumerate(items)
            }
            pbar = tqdm(total=len(items), desc=desc) if self.show_progress else None
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
                    if pbar is not None:
                        pbar.update(1)
            finally:
                if pbar is not None:
                    pbar.close()
        return results
