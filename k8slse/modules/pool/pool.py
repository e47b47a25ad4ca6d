"""
Bounded worker pool used by both pipeline stages.

One feeder thread puts the input items on a bounded queue, a fixed number
of worker threads turn items into results, and the calling thread acts as
the single collector that drains the result queue. Items and results only
ever cross threads through the two queues.
"""

import logging
import threading
from queue import Queue
from typing import Callable, Generic, Optional, Sequence, TypeVar

logger = logging.getLogger("k8slse.pool")

T = TypeVar("T")
R = TypeVar("R")

# End of stream marker for both queues
_DONE = object()


def pool_size(ceiling: int, items: int) -> int:
    """Number of workers for a stage: one per item, never above the ceiling."""
    return max(0, min(ceiling, items))


class WorkerPool(Generic[T, R]):
    """Feeder, workers and collector connected by bounded queues."""

    def __init__(
        self,
        name: str,
        worker: Callable[[T], Optional[R]],
        workers: int,
        queue_size: int,
        on_error: Optional[Callable[[T, Exception], None]] = None,
    ):
        """
        Initialize pool.

        Args:
            name: Stage name used for thread names and logs
            worker: Turns one item into a result, or None for "no result"
            workers: Concurrency ceiling
            queue_size: Bound of the input and output queues
            on_error: Called with the item when worker raises
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.name = name
        self.worker = worker
        self.workers = workers
        self.queue_size = max(1, queue_size)
        self.on_error = on_error

    def run(self, items: Sequence[T], collect: Callable[[R], None]) -> int:
        """
        Process every item and hand each result to collect.

        collect is only ever called from the calling thread. Returns once
        every worker has finished and the result queue is drained.

        Returns:
            Number of workers that were started
        """
        count = pool_size(self.workers, len(items))
        if count == 0:
            return 0

        inbox: Queue = Queue(maxsize=self.queue_size)
        outbox: Queue = Queue(maxsize=self.queue_size)

        def feed() -> None:
            for item in items:
                inbox.put(item)
            for _ in range(count):
                inbox.put(_DONE)

        def work() -> None:
            while True:
                item = inbox.get()
                if item is _DONE:
                    return
                try:
                    result = self.worker(item)
                except Exception as e:
                    logger.exception(f"[{self.name}] worker failed on {item}: {e}")
                    if self.on_error is not None:
                        self.on_error(item, e)
                    continue
                if result is not None:
                    outbox.put(result)

        workers = [
            threading.Thread(target=work, name=f"k8slse-{self.name}-{i}", daemon=True)
            for i in range(count)
        ]

        def close_outbox() -> None:
            for thread in workers:
                thread.join()
            outbox.put(_DONE)

        feeder = threading.Thread(target=feed, name=f"k8slse-{self.name}-feeder", daemon=True)
        closer = threading.Thread(target=close_outbox, name=f"k8slse-{self.name}-closer", daemon=True)

        logger.debug(f"[{self.name}] starting {count} workers for {len(items)} items")
        feeder.start()
        for thread in workers:
            thread.start()
        closer.start()

        while True:
            result = outbox.get()
            if result is _DONE:
                break
            collect(result)

        feeder.join()
        closer.join()
        return count
