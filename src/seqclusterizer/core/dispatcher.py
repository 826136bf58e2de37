"""
Pull-based distribution of query indices across workers.

Query cost shrinks with the index (fewer later records to compare) and
grows with body length, so indices are claimed one at a time from a
shared cursor instead of being partitioned up front.

Workers only score queries; every result is handed back to the calling
thread, which is the single writer of shared record state.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import multiprocessing.util as mp_util
import queue
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from contextlib import AbstractContextManager
from typing import Any, Literal, TypeVar

from seqclusterizer.core.constants import WORKERS_MAX
from seqclusterizer.core.exceptions import WorkerCountError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A context manager that yields a callable scoring one index
WorkerFactory = Callable[[], AbstractContextManager[Callable[[int], T]]]

_DONE = object()


class WorkCursor:
    """
    Shared, monotonically advancing cursor over ``0..total-1``.

    Example:
        >>> cursor = WorkCursor(2)
        >>> cursor.claim(), cursor.claim(), cursor.claim()
        (0, 1, None)
    """

    def __init__(self, total: int) -> None:
        self._total = total
        self._next = 0
        self._stopped = False
        self._lock = threading.Lock()

    def claim(self) -> int | None:
        """Atomically fetch and increment; None once every index is claimed or stopped."""
        with self._lock:
            if self._stopped or self._next >= self._total:
                return None
            index = self._next
            self._next += 1
            return index

    def stop(self) -> None:
        """Hand out no further indices."""
        with self._lock:
            self._stopped = True

    @property
    def claimed(self) -> int:
        with self._lock:
            return self._next


# Per-process worker state for the process backend
_process_worker: Any = None
_process_context: AbstractContextManager[Any] | None = None


def _init_process_worker(worker: AbstractContextManager[Callable[[int], Any]]) -> None:
    global _process_worker, _process_context
    _process_context = worker
    _process_worker = worker.__enter__()
    # Runs when the pool process exits after pool.close(); not on terminate()
    mp_util.Finalize(None, _close_process_worker, exitpriority=10)


def _close_process_worker() -> None:
    global _process_worker, _process_context
    if _process_context is None:
        return
    context = _process_context
    _process_worker = None
    _process_context = None
    context.__exit__(None, None, None)


def _run_process_task(index: int) -> Any:
    return _process_worker(index)


class WorkDispatcher:
    """
    Runs a scoring function over every index exactly once.

    Modes:
        - workers == 0: one worker consumes indices strictly in order.
        - backend "thread": a fixed thread pool; each thread claims indices
          from a WorkCursor and queues its results.
        - backend "process": a fixed process pool; indices are pulled one at
          a time through the pool's task queue. The worker factory must
          produce picklable workers.

    Results are passed to ``reduce`` on the calling thread only.

    Example:
        >>> dispatcher = WorkDispatcher(workers=4)
        >>> dispatcher.run(len(table), make_worker, assigner.apply)
    """

    def __init__(
        self,
        workers: int = 0,
        backend: Literal["thread", "process"] = "thread",
    ) -> None:
        if workers < 0 or workers > WORKERS_MAX:
            raise WorkerCountError(workers, WORKERS_MAX)
        if backend not in ("thread", "process"):
            msg = f"Unknown worker backend: {backend!r}"
            raise ValueError(msg)
        self.workers = workers
        self.backend = backend

    @property
    def is_sequential(self) -> bool:
        return self.workers == 0

    def run(
        self,
        total: int,
        make_worker: WorkerFactory[T],
        reduce: Callable[[T], None],
        progress: Callable[[int, int], None] | None = None,
    ) -> int:
        """
        Score indices ``0..total-1`` and reduce every result.

        Args:
            total: Number of indices to process.
            make_worker: Factory for per-worker scoring contexts.
            reduce: Called once per result, on the calling thread.
            progress: Optional callback(completed, total).

        Returns:
            Number of results reduced.
        """
        if total == 0:
            return 0
        if self.is_sequential:
            return self._run_sequential(total, make_worker, reduce, progress)
        if self.backend == "process":
            return self._run_processes(total, make_worker, reduce, progress)
        return self._run_threads(total, make_worker, reduce, progress)

    def _run_sequential(
        self,
        total: int,
        make_worker: WorkerFactory[T],
        reduce: Callable[[T], None],
        progress: Callable[[int, int], None] | None,
    ) -> int:
        completed = 0
        with make_worker() as score:
            for index in range(total):
                reduce(score(index))
                completed += 1
                if progress:
                    progress(completed, total)
        return completed

    def _run_threads(
        self,
        total: int,
        make_worker: WorkerFactory[T],
        reduce: Callable[[T], None],
        progress: Callable[[int, int], None] | None,
    ) -> int:
        cursor = WorkCursor(total)
        results: queue.Queue[Any] = queue.Queue()

        def work() -> None:
            try:
                with make_worker() as score:
                    while (index := cursor.claim()) is not None:
                        results.put(score(index))
            except BaseException:
                cursor.stop()
                raise
            finally:
                results.put(_DONE)

        logger.info("Starting %d threads", self.workers)
        completed = 0
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(work) for _ in range(self.workers)]
            finished = 0
            try:
                while finished < self.workers:
                    item = results.get()
                    if item is _DONE:
                        finished += 1
                        continue
                    reduce(item)
                    completed += 1
                    if progress:
                        progress(completed, total)
            except BaseException:
                # Workers finish their current index and exit
                cursor.stop()
                raise
            # Re-raise the first worker failure, if any
            for future in futures:
                future.result()
        return completed

    def _run_processes(
        self,
        total: int,
        make_worker: WorkerFactory[T],
        reduce: Callable[[T], None],
        progress: Callable[[int, int], None] | None,
    ) -> int:
        worker = make_worker()
        logger.info("Starting %d processes", self.workers)
        completed = 0
        with mp.Pool(
            processes=self.workers,
            initializer=_init_process_worker,
            initargs=(worker,),
        ) as pool:
            for result in pool.imap_unordered(_run_process_task, range(total), chunksize=1):
                reduce(result)
                completed += 1
                if progress:
                    progress(completed, total)
            # Let workers exit normally so their handles are closed
            pool.close()
            pool.join()
        return completed
