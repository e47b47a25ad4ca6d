"""
Pipeline Module - Black Box Interface

Purpose: Coordinate probing, confirmation, scanning and report writing
Interface: ScanPipeline.run(containers) -> RunSummary
Hidden: Worker pools, queues, per-run context, stage barrier

Run level failures surface as PipelineError subclasses.
"""

from .context import RunContext
from .errors import (
    NoContainersFoundError,
    NothingToTestError,
    PipelineError,
    UserCancelledError,
)
from .gate import ConfirmationGate, render_classification
from .runner import ScanPipeline

__all__ = [
    "ConfirmationGate",
    "NoContainersFoundError",
    "NothingToTestError",
    "PipelineError",
    "RunContext",
    "ScanPipeline",
    "UserCancelledError",
    "render_classification",
]
