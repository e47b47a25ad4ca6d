"""
Status Module - Black Box Interface

Purpose: Serialize human readable status and progress output
Interface: StatusSink.send(), flush(), close()
Hidden: Writer thread, message queue, output stream

Can be replaced with any object providing the same three methods.
"""

from .sink import MemoryStatusSink, QueuedStatusSink, StatusSink

__all__ = ["MemoryStatusSink", "QueuedStatusSink", "StatusSink"]
