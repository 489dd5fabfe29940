# slot_reels/infrastructure/concurrency/thread_pool.py
import concurrent.futures
import logging
from typing import Callable, TypeVar

T = TypeVar("T")


class ThreadPool:
    """
    Long-lived pool of worker threads for background tasks.
    Tasks are submitted without waiting; callers keep the futures.
    """
    def __init__(self, max_workers: int = None, thread_name_prefix: str = "worker"):
        self.max_workers = max_workers
        self.thread_name_prefix = thread_name_prefix
        self.logger = logging.getLogger("infrastructure.thread_pool")
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix
        )
        self._shutdown = False

    def submit(self, task: Callable[[], T]) -> concurrent.futures.Future:
        """Submit a single task and return its future."""
        if self._shutdown:
            raise RuntimeError(f"Thread pool '{self.thread_name_prefix}' has been shut down")
        return self._executor.submit(task)

    def shutdown(self, wait: bool = True):
        if self._shutdown:
            return
        self._shutdown = True
        self.logger.debug(f"Shutting down thread pool '{self.thread_name_prefix}' (wait={wait})")
        self._executor.shutdown(wait=wait)

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown
