"""
Report Writer.

Runs only on the scan stage's collector thread, so file creation and the
processed counter are never touched concurrently.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from k8slse.models import ContainerRef, OutputFormat, ScanResult
from k8slse.modules.status import StatusSink

from .formats import render_report

logger = logging.getLogger("k8slse.report")

TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"

# Suffixes tried when a report with the same name already exists
MAX_NAME_ATTEMPTS = 1000


class ReportWriter:
    """Persists one report file per scanned container."""

    def __init__(
        self,
        directory: Path,
        output_format: OutputFormat,
        sink: StatusSink,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.directory = Path(directory)
        self.output_format = OutputFormat(output_format)
        self.sink = sink
        self.clock = clock
        self.processed = 0
        self.failures = 0
        self.written: List[Path] = []

    def report_name(self, ref: ContainerRef, timestamp: datetime, attempt: int = 0) -> str:
        """<pod>-<container>-<YYYY-MM-DD-HHMMSS>[-<attempt>].<ext>"""
        stem = f"{ref.pod}-{ref.container}-{timestamp.strftime(TIMESTAMP_FORMAT)}"
        if attempt:
            stem = f"{stem}-{attempt}"
        return f"{stem}.{self.output_format.extension}"

    def _create(self, ref: ContainerRef, timestamp: datetime) -> Tuple[Path, int]:
        for attempt in range(MAX_NAME_ATTEMPTS):
            path = self.directory / self.report_name(ref, timestamp, attempt)
            try:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
            except FileExistsError:
                continue
            return path, fd
        raise FileExistsError(
            f"No free report name for {ref} after {MAX_NAME_ATTEMPTS} attempts"
        )

    def save(self, result: ScanResult) -> Path:
        """
        Render and write one report.

        Raises:
            OSError: the file could not be created or written
        """
        content = render_report(result.raw_output, self.output_format)
        path, fd = self._create(result.ref, self.clock())
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        return path

    def collect(self, result: ScanResult) -> Optional[Path]:
        """Write a report, report failures, and advance the progress counter."""
        path = None
        try:
            path = self.save(result)
        except OSError as e:
            self.failures += 1
            logger.error(f"[{result.ref}] Failed to save report: {e}")
            self.sink.send(f"\n[-][{result.ref}] Failed to save report: {e}\n")
            self.sink.send(result.raw_output.decode("utf-8", errors="replace") + "\n")
        else:
            logger.debug(f"[{result.ref}] Report written to {path}")
            self.written.append(path)

        self.processed += 1
        self.sink.send(f"\rAnalyzed {self.processed} containers")
        return path

    def finish(self) -> None:
        """End the transient progress line."""
        self.sink.send("\n")
