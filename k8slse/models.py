"""
k8slse shared data models.

These models define the structure of all data passed between
components in the k8slse system.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

# Enums


class ExecStatus(str, Enum):
    """Status class of a single remote exec."""

    SUCCESS = "success"
    COMMAND_NOT_FOUND = "command_not_found"
    CANNOT_EXECUTE = "cannot_execute"
    FAILED = "failed"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"


class OutputFormat(str, Enum):
    """Report output formats. The value doubles as the file extension."""

    TEXT = "text"
    ANSI = "ansi"
    HTML = "html"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def choices(cls) -> List[str]:
        return [f.value for f in cls]


# Pipeline data


@dataclass(frozen=True)
class ContainerRef:
    """Identity of one container within one pod."""

    pod: str
    container: str

    def __str__(self) -> str:
        return f"{self.pod}/{self.container}"


@dataclass
class ExecResult:
    """Outcome of running one command in one container."""

    status: ExecStatus
    stdout: bytes = b""
    stderr: bytes = b""
    return_code: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ExecStatus.SUCCESS

    @property
    def error_text(self) -> str:
        """Best human readable explanation of a failed exec."""
        if self.error:
            return self.error
        text = self.stderr.decode("utf-8", errors="replace").strip()
        return text or f"{self.status.value} (exit code {self.return_code})"


@dataclass(frozen=True)
class CapabilityResult:
    """What the prober learned about one container."""

    ref: ContainerRef
    shell: str = ""
    testable: bool = False


@dataclass(frozen=True)
class ScanResult:
    """Raw audit script output captured from one container."""

    ref: ContainerRef
    raw_output: bytes


@dataclass
class Classification:
    """Probed containers split into the ones that can and cannot be tested."""

    testable: List[CapabilityResult] = field(default_factory=list)
    nontestable: List[CapabilityResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.testable) + len(self.nontestable)

    def add(self, result: CapabilityResult) -> None:
        if result.testable:
            self.testable.append(result)
        else:
            self.nontestable.append(result)


@dataclass
class RunSummary:
    """Outcome of one complete scan run."""

    classification: Classification
    reports: List[Path] = field(default_factory=list)
    processed: int = 0
    scan_failures: int = 0
    write_failures: int = 0
