"""Per-run state threaded through every stage."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from k8slse.models import Classification, RunSummary
from k8slse.modules.config.settings import ScanSettings
from k8slse.modules.executor import RemoteExecutor
from k8slse.modules.status import StatusSink


@dataclass
class RunContext:
    """
    State of one pipeline run.

    classification is written only by the probe stage's collector and
    summary only by the scan stage's collector, so neither needs a lock.
    """

    settings: ScanSettings
    executor: RemoteExecutor
    sink: StatusSink
    clock: Callable[[], datetime] = datetime.now
    classification: Classification = field(default_factory=Classification)
    summary: RunSummary = field(init=False)

    def __post_init__(self):
        self.summary = RunSummary(classification=self.classification)

    def log(self, message: str) -> None:
        """Send a status line."""
        self.sink.send(message)
