"""
Pool Module - Black Box Interface

Purpose: Fan work out over a bounded set of worker threads
Interface: WorkerPool.run(items, collect), pool_size()
Hidden: Feeder thread, bounded queues, end-of-stream handling
"""

from .pool import WorkerPool, pool_size

__all__ = ["WorkerPool", "pool_size"]
