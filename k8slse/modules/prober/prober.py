"""
Capability Prober.

Decides for every container whether the audit script can run in it: a
shell must answer a version probe and every required utility probe must
succeed. Containers are probed concurrently; a failing probe only ever
makes its own container nontestable.
"""

import logging
import shlex
from typing import List, Optional, Sequence

from k8slse.models import (
    CapabilityResult,
    Classification,
    ContainerRef,
    ExecResult,
    ExecStatus,
)
from k8slse.modules.executor import RemoteExecutor
from k8slse.modules.pool import WorkerPool
from k8slse.modules.status import StatusSink

logger = logging.getLogger("k8slse.prober")

# Failures that say something about the cluster rather than the container
_TRANSPORT_FAILURES = (ExecStatus.TRANSPORT_ERROR, ExecStatus.TIMEOUT)


class CapabilityProber:
    """Probes containers for a shell and the required utilities."""

    def __init__(
        self,
        executor: RemoteExecutor,
        shells: Sequence[str],
        utilities: Sequence[str],
        workers: int,
        queue_size: int,
        sink: Optional[StatusSink] = None,
    ):
        """
        Initialize prober.

        Args:
            executor: Remote executor used for every probe
            shells: Candidate shells in priority order
            utilities: Utility probe commands, checked in order
            workers: Concurrency ceiling for the probe pool
            queue_size: Bound of the pool queues
            sink: Optional status sink for transport problems
        """
        self.executor = executor
        self.shells = list(shells)
        self.utilities = [shlex.split(u) for u in utilities]
        self.workers = workers
        self.queue_size = queue_size
        self.sink = sink

    def _execute(self, ref: ContainerRef, command: List[str]) -> ExecResult:
        try:
            result = self.executor.execute(ref, command)
        except Exception as e:
            logger.exception(f"[{ref}] probe {' '.join(command)!r} raised: {e}")
            result = ExecResult(status=ExecStatus.TRANSPORT_ERROR, return_code=-1, error=str(e))

        if result.status in _TRANSPORT_FAILURES:
            logger.warning(f"[{ref}] probe {' '.join(command)!r} failed: {result.error_text}")
            if self.sink is not None:
                self.sink.send(f"[-][{ref}] Probe {' '.join(command)!r} failed: {result.error_text}\n")
        return result

    def find_shell(self, ref: ContainerRef) -> str:
        """Return the first candidate shell that answers --version, or ''."""
        for shell in self.shells:
            if self._execute(ref, [shell, "--version"]).success:
                return shell
        return ""

    def has_utilities(self, ref: ContainerRef) -> bool:
        """True when every utility probe succeeds. Stops at the first miss."""
        for command in self.utilities:
            result = self._execute(ref, command)
            if not result.success:
                logger.debug(
                    f"[{ref}] utility probe {' '.join(command)!r} not satisfied ({result.status.value})"
                )
                return False
        return True

    def probe(self, ref: ContainerRef) -> CapabilityResult:
        """Probe a single container."""
        shell = self.find_shell(ref)
        if not shell:
            logger.debug(f"[{ref}] no usable shell among {self.shells}")
            return CapabilityResult(ref=ref, shell="", testable=False)
        return CapabilityResult(ref=ref, shell=shell, testable=self.has_utilities(ref))

    def _probe_safely(self, ref: ContainerRef) -> CapabilityResult:
        # Every ref must come out of the pool so the classification stays a partition
        try:
            return self.probe(ref)
        except Exception as e:
            logger.exception(f"[{ref}] probing failed: {e}")
            return CapabilityResult(ref=ref, shell="", testable=False)

    def classify(
        self, refs: Sequence[ContainerRef], into: Optional[Classification] = None
    ) -> Classification:
        """
        Probe all refs concurrently and split them into testable/nontestable.

        With no utility probes configured nothing is probed and the returned
        classification is empty.
        """
        classification = into if into is not None else Classification()
        if not self.utilities:
            logger.info("No utility probes configured, skipping capability probing")
            return classification

        pool: WorkerPool[ContainerRef, CapabilityResult] = WorkerPool(
            name="probe",
            worker=self._probe_safely,
            workers=self.workers,
            queue_size=self.queue_size,
        )
        pool.run(refs, classification.add)
        return classification
