"""Per-root serialization of filesystem operations.

Every operation against a wiki root runs on that root's ``OperationQueue``:
one at a time, in submission order. Operations on different roots do not
wait for each other.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from threading import Lock
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OperationQueue:
    """FIFO execution lane for one root."""

    def __init__(self, name: str = ""):
        """
        Initialize the queue.

        Args:
            name: Identity of the root served, for logging
        """
        self.name = name
        # asyncio.Lock wakes its waiters in FIFO order
        self._lock = asyncio.Lock()
        self._pending = 0
        # Jobs whose callers stopped waiting still need a strong reference
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of jobs queued or running."""
        return self._pending

    async def run(self, job: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``job`` once every previously submitted job has finished.

        Once submitted, a job runs to completion and holds the lane until
        it does, even if the caller is cancelled while waiting for it.

        Args:
            job: Zero-argument coroutine function

        Returns:
            Whatever ``job`` returns; its exceptions propagate unchanged
        """
        self._pending += 1
        if self.pending > 1:
            logger.debug(
                f"Queued operation on {self.name} behind {self.pending - 1} others"
            )
        task = asyncio.ensure_future(self._run_locked(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return await asyncio.shield(task)

    async def _run_locked(self, job: Callable[[], Awaitable[T]]) -> T:
        try:
            async with self._lock:
                return await job()
        finally:
            self._pending -= 1

    def __repr__(self) -> str:
        return f"OperationQueue({self.name!r}, pending={self.pending})"


class QueueRegistry:
    """Maps root identities to their queues.

    Queues are created on first access and kept for the registry's lifetime.
    The lock only guards the mapping; the queues serialize the I/O.
    """

    def __init__(self) -> None:
        self._queues: dict[str, OperationQueue] = {}
        self._lock = Lock()

    def get(self, root_id: str) -> OperationQueue:
        """Get or create the queue for a root."""
        with self._lock:
            queue = self._queues.get(root_id)
            if queue is None:
                logger.debug(f"Creating operation queue for {root_id}")
                queue = self._queues[root_id] = OperationQueue(root_id)
            return queue
