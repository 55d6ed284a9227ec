"""
Module: persistence.write_queue

Purpose:
    Background dispatch of persistence jobs so that submitting an attempt
    returns as soon as grading finishes, while the store is written on a
    worker thread.

Key Classes:
    - PersistenceQueue: Thread pool-based async job queue

Dependencies:
    - concurrent.futures: Thread pool execution

Used By:
    - session.attempt_session.AttemptSession
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PersistenceQueue:
    """
    Thread pool-based async queue for persistence jobs.
    
    Usage:
        queue = PersistenceQueue(max_workers=2)
        try:
            future = queue.submit(persist_attempt, gateway, attempt)
            ...
            queue.wait_all()  # Wait for all writes at end
        finally:
            queue.shutdown()
    
    In synchronous mode jobs run on the caller's thread and an already
    completed Future is returned, so callers handle both modes alike.
    
    Attributes:
        max_workers: Maximum concurrent persistence threads.
    """
    
    def __init__(self, max_workers: int = 2, synchronous: bool = False):
        """
        Initialize the queue.
        
        Args:
            max_workers: Maximum concurrent persistence threads.
            synchronous: Run jobs inline instead of on the pool.
        """
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        if not synchronous:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="exam-persist"
            )
        self._futures: List[Future] = []
    
    @property
    def is_synchronous(self) -> bool:
        return self._executor is None
    
    def submit(self, job: Callable[..., T], *args, **kwargs) -> Future:
        """
        Queue a persistence job.
        
        Returns:
            Future resolving to the job's return value.
        """
        if self._executor is None:
            future: Future = Future()
            try:
                future.set_result(job(*args, **kwargs))
            except Exception as e:
                logger.error(f"Persistence job failed: {e}")
                future.set_exception(e)
            return future
        
        future = self._executor.submit(job, *args, **kwargs)
        self._futures.append(future)
        return future
    
    def wait_all(self, timeout: Optional[float] = None) -> int:
        """
        Wait for all queued jobs to complete.
        
        Args:
            timeout: Max seconds to wait per job (None = indefinite).
            
        Returns:
            Number of jobs that completed without raising.
        """
        completed = 0
        pending, self._futures = self._futures, []
        for future in pending:
            try:
                future.result(timeout=timeout)
                completed += 1
            except Exception as e:
                logger.error(f"Persistence job failed: {e}")
        return completed
    
    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting jobs and release the worker threads.
        
        Args:
            wait: Block until outstanding jobs finish. With wait=False
                  queued jobs still run to completion in the background.
        """
        if wait:
            self.wait_all()
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
    
    def __enter__(self) -> "PersistenceQueue":
        return self
    
    def __exit__(self, *args) -> None:
        self.shutdown()
