"""
Scan pipeline orchestration.

probe -> classify -> confirm -> scan -> write, with a hard barrier between
probing and scanning. Every run gets a fresh RunContext.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from k8slse.models import Classification, ContainerRef, RunSummary
from k8slse.modules.config.settings import ScanSettings
from k8slse.modules.executor import RemoteExecutor
from k8slse.modules.prober import CapabilityProber
from k8slse.modules.report import ReportWriter
from k8slse.modules.scanner import ScanDispatcher
from k8slse.modules.status import StatusSink

from .context import RunContext
from .errors import NoContainersFoundError, NothingToTestError, UserCancelledError
from .gate import ConfirmationGate, render_classification

logger = logging.getLogger("k8slse.pipeline")


class ScanPipeline:
    """Two stage probe-then-scan pipeline."""

    def __init__(
        self,
        settings: ScanSettings,
        executor: RemoteExecutor,
        sink: StatusSink,
        gate: Optional[ConfirmationGate] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.executor = executor
        self.sink = sink
        self.gate = gate or ConfirmationGate(sink)
        self.clock = clock

    def new_context(self) -> RunContext:
        return RunContext(
            settings=self.settings,
            executor=self.executor,
            sink=self.sink,
            clock=self.clock,
        )

    def classify(self, ctx: RunContext, containers: Sequence[ContainerRef]) -> Classification:
        """Stage 1: probe every container and fill ctx.classification."""
        ctx.log("[*] Identifying containers that can be tested\n")
        prober = CapabilityProber(
            executor=ctx.executor,
            shells=ctx.settings.shells,
            utilities=ctx.settings.utilities,
            workers=ctx.settings.workers,
            queue_size=ctx.settings.queue_size,
            sink=ctx.sink,
        )
        prober.classify(containers, into=ctx.classification)
        logger.info(
            f"Probed {ctx.classification.total} containers: "
            f"{len(ctx.classification.testable)} testable, {len(ctx.classification.nontestable)} not testable"
        )
        ctx.log(f"[+] Found {ctx.classification.total} containers\n")
        return ctx.classification

    def confirm(self, ctx: RunContext) -> None:
        """Show the classification and, unless quiet, wait for the operator."""
        ctx.log(render_classification(ctx.classification))
        if ctx.settings.quiet:
            return
        if not self.gate.ask():
            logger.info("Scan declined at the confirmation prompt")
            raise UserCancelledError("Action cancelled.")
        ctx.log("Proceeding with testing...\n")

    def scan(self, ctx: RunContext) -> RunSummary:
        """Stage 2: run the audit script and write one report per container."""
        testable = ctx.classification.testable
        writer = ReportWriter(
            directory=ctx.settings.directory,
            output_format=ctx.settings.output_format,
            sink=ctx.sink,
            clock=ctx.clock,
        )
        dispatcher = ScanDispatcher(
            executor=ctx.executor,
            script=ctx.settings.script,
            output_format=ctx.settings.output_format,
            workers=ctx.settings.workers,
            queue_size=ctx.settings.queue_size,
            sink=ctx.sink,
        )

        ctx.log(f"[*] Scanning {len(testable)} containers\n")
        failures = dispatcher.run(testable, writer.collect)
        writer.finish()

        summary = ctx.summary
        summary.reports = list(writer.written)
        summary.processed = writer.processed
        summary.write_failures = writer.failures
        summary.scan_failures = failures
        logger.info(
            f"Scan finished: {len(summary.reports)} reports, {failures} failed scans, {writer.failures} unsaved reports"
        )
        ctx.log(
            f"[+] Saved {len(summary.reports)} reports to {ctx.settings.directory}"
            f" ({failures} scans failed, {writer.failures} reports not saved)\n"
        )
        return summary

    def run(self, containers: Sequence[ContainerRef]) -> RunSummary:
        """
        Run the whole pipeline for the given containers.

        Raises:
            NoContainersFoundError: containers is empty
            NothingToTestError: no container qualified for scanning
            UserCancelledError: the operator answered N
        """
        if not containers:
            raise NoContainersFoundError("[-] No pods/containers found")

        # A container listed twice is still probed and scanned once
        unique: List[ContainerRef] = list(dict.fromkeys(containers))
        ctx = self.new_context()

        self.classify(ctx, unique)
        if not ctx.classification.testable:
            ctx.log(render_classification(ctx.classification))
            raise NothingToTestError("[-] Did not find any containers that can be tested")

        self.confirm(ctx)
        return self.scan(ctx)
