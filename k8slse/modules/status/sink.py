"""
Status sinks.

Every pipeline stage reports progress by handing a message to a sink. The
queued sink owns the status stream: one consumer thread writes messages in
the order they were received, so concurrent workers never interleave
partial lines.
"""

import logging
import sys
import threading
from queue import Queue
from typing import List, Optional, Protocol, TextIO

logger = logging.getLogger("k8slse.status")

_STOP = object()


class StatusSink(Protocol):
    """Fire-and-forget channel for user facing status messages."""

    def send(self, message: str) -> None:
        ...

    def flush(self) -> None:
        ...

    def close(self) -> None:
        ...


class QueuedStatusSink:
    """Sink backed by a bounded queue and a single writer thread."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        quiet: bool = False,
        maxsize: int = 64,
    ):
        """
        Initialize sink and start its writer thread.

        Args:
            stream: Destination text stream (stderr by default)
            quiet: Discard every message instead of writing it
            maxsize: Bound of the message queue
        """
        self.stream = stream if stream is not None else sys.stderr
        self.quiet = quiet
        self._queue: Queue = Queue(maxsize=maxsize)
        self._lock = threading.Lock()
        self._closed = False
        self._writer = threading.Thread(
            target=self._drain, name="k8slse-status", daemon=True
        )
        self._writer.start()

    def send(self, message: str) -> None:
        """Queue a message. Messages sent after close() are dropped."""
        if self.quiet:
            return
        with self._lock:
            if self._closed:
                logger.debug(f"Status message after close dropped: {message!r}")
                return
            self._queue.put(message)

    def flush(self) -> None:
        """Block until every message sent so far has been written."""
        self._queue.join()

    def close(self) -> None:
        """Stop intake, write whatever is still queued and stop the writer."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._writer.join()

    def _drain(self) -> None:
        while True:
            message = self._queue.get()
            try:
                if message is _STOP:
                    return
                self.stream.write(message)
                self.stream.flush()
            except (OSError, ValueError) as e:
                # Broken or closed stream; keep draining so producers never block
                logger.error(f"Failed to write status message: {e}")
            finally:
                self._queue.task_done()

    def __enter__(self) -> "QueuedStatusSink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class MemoryStatusSink:
    """Sink that records messages in order. Used by tests and embedders."""

    def __init__(self):
        self._lock = threading.Lock()
        self.messages: List[str] = []
        self.closed = False

    def send(self, message: str) -> None:
        with self._lock:
            self.messages.append(message)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    @property
    def text(self) -> str:
        with self._lock:
            return "".join(self.messages)
