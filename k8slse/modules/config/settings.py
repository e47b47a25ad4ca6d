"""Resolved per-run settings handed to the scan pipeline."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from k8slse.models import OutputFormat

from .profile import DEFAULT_SHELLS, DEFAULT_UTILITIES


def default_queue_size() -> int:
    """Bound for the queues between pipeline stages."""
    return (os.cpu_count() or 1) * 2


@dataclass
class ScanSettings:
    """Everything one pipeline run needs besides its collaborators."""

    script: bytes
    output_format: OutputFormat = OutputFormat.ANSI
    directory: Path = field(default_factory=Path.cwd)
    quiet: bool = False
    workers: int = 16
    shells: List[str] = field(default_factory=lambda: list(DEFAULT_SHELLS))
    utilities: List[str] = field(default_factory=lambda: list(DEFAULT_UTILITIES))
    queue_size: Optional[int] = None

    def __post_init__(self):
        self.output_format = OutputFormat(self.output_format)
        self.directory = Path(self.directory)
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if not self.shells:
            raise ValueError("at least one candidate shell is required")
        if self.queue_size is None:
            self.queue_size = default_queue_size()
