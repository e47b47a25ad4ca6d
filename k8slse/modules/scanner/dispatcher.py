"""
Scan Dispatcher.

Feeds the audit script over stdin into the detected shell of every
testable container, concurrently. Containers whose exec fails are logged
and dropped; they are never retried.
"""

import logging
import threading
from typing import Callable, List, Optional, Sequence

from k8slse.models import CapabilityResult, ExecResult, ExecStatus, OutputFormat, ScanResult
from k8slse.modules.executor import RemoteExecutor
from k8slse.modules.pool import WorkerPool
from k8slse.modules.status import StatusSink

logger = logging.getLogger("k8slse.scanner")

# Arguments making the shell read the script from stdin and hand "-c"
# (no colours) to the script itself.
TEXT_MODE_ARGS = ["-s", "--", "-c"]


def normalize_script(script: bytes) -> bytes:
    """Strip carriage returns so a script checked out on Windows still runs."""
    return script.replace(b"\r\n", b"\n").replace(b"\r", b"")


def shell_invocation(shell: str, output_format: OutputFormat) -> List[str]:
    """Command that runs the script for the requested output format."""
    if OutputFormat(output_format) == OutputFormat.TEXT:
        return [shell] + TEXT_MODE_ARGS
    return [shell]


class ScanDispatcher:
    """Runs the audit script in every testable container."""

    def __init__(
        self,
        executor: RemoteExecutor,
        script: bytes,
        output_format: OutputFormat,
        workers: int,
        queue_size: int,
        sink: StatusSink,
    ):
        """
        Initialize dispatcher.

        Args:
            executor: Remote executor running the script
            script: Audit script; line endings are normalized once here
            output_format: Requested report format
            workers: Concurrency ceiling for the scan pool
            queue_size: Bound of the pool queues
            sink: Status sink for failed scans
        """
        self.executor = executor
        self.script = normalize_script(script)
        self.output_format = OutputFormat(output_format)
        self.workers = workers
        self.queue_size = queue_size
        self.sink = sink
        self._lock = threading.Lock()
        self.failures = 0

    def _failed(self, capability: CapabilityResult, reason: str) -> None:
        with self._lock:
            self.failures += 1
        logger.warning(f"[{capability.ref}] Scan failed: {reason}")
        self.sink.send(f"\n[-][{capability.ref}] Scan failed: {reason}\n")

    def scan_one(self, capability: CapabilityResult) -> Optional[ScanResult]:
        """Run the script in one container. None when the exec failed."""
        command = shell_invocation(capability.shell, self.output_format)
        # Each exec gets its own stdin pipe fed from the immutable script
        try:
            result: ExecResult = self.executor.execute(capability.ref, command, stdin=self.script)
        except Exception as e:
            logger.exception(f"[{capability.ref}] Scan raised: {e}")
            result = ExecResult(status=ExecStatus.TRANSPORT_ERROR, return_code=-1, error=str(e))

        if not result.success:
            self._failed(capability, result.error_text)
            return None
        return ScanResult(ref=capability.ref, raw_output=result.stdout)

    def run(
        self, testable: Sequence[CapabilityResult], collect: Callable[[ScanResult], None]
    ) -> int:
        """
        Scan all containers; collect receives each ScanResult on the calling thread.

        Returns:
            Number of failed scans
        """
        pool: WorkerPool[CapabilityResult, ScanResult] = WorkerPool(
            name="scan",
            worker=self.scan_one,
            workers=self.workers,
            queue_size=self.queue_size,
        )
        pool.run(testable, collect)
        return self.failures
