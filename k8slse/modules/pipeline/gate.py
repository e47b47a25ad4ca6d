"""
Confirmation Gate.

Shows the operator what will and will not be scanned and waits for an
explicit Y/N before anything runs inside the containers.
"""

import io
import logging
from typing import Callable, Optional, Sequence

import click
from rich import box
from rich.console import Console
from rich.table import Table

from k8slse.models import CapabilityResult, Classification
from k8slse.modules.status import StatusSink

logger = logging.getLogger("k8slse.pipeline.gate")

PROMPT = "\nDo you wish to proceed with testing? (Y/N): "
INVALID_INPUT = "Invalid input. Please enter 'Y' or 'N'.\n"


def render_containers(results: Sequence[CapabilityResult]) -> str:
    """Pod/container table as plain text."""
    table = Table(box=box.SIMPLE, show_edge=False, pad_edge=False)
    table.add_column("Pod")
    table.add_column("Container")
    table.add_column("Shell")
    for result in results:
        table.add_row(result.ref.pod, result.ref.container, result.shell or "-")

    buf = io.StringIO()
    Console(file=buf, width=200, color_system=None).print(table)
    return buf.getvalue()


def render_classification(classification: Classification) -> str:
    """Both container lists with their headings."""
    parts = []
    if classification.testable:
        parts.append(
            f"[+] Following {len(classification.testable)} containers can be tested:\n"
        )
        parts.append(render_containers(classification.testable) + "\n")
    if classification.nontestable:
        parts.append(
            f"[-] Following {len(classification.nontestable)} containers cannot be tested:\n"
        )
        parts.append(render_containers(classification.nontestable) + "\n")
    return "".join(parts)


def _click_reader(prompt: str) -> str:
    return click.prompt(prompt, default="", show_default=False, prompt_suffix="", err=True)


class ConfirmationGate:
    """Interactive Y/N confirmation written through the status sink."""

    def __init__(self, sink: StatusSink, reader: Optional[Callable[[str], str]] = None):
        """
        Initialize gate.

        Args:
            sink: Status sink; flushed before every prompt
            reader: Reads one answer for a prompt (click.prompt by default)
        """
        self.sink = sink
        self.reader = reader or _click_reader

    def ask(self, prompt: str = PROMPT) -> bool:
        """Prompt until the answer is Y or N. End of input counts as N."""
        while True:
            # Queued status lines must not land in the middle of the prompt
            self.sink.flush()
            try:
                answer = self.reader(prompt)
            except (EOFError, click.Abort):
                logger.info("No answer at the confirmation prompt, treating as N")
                self.sink.send("\n")
                return False

            answer = answer.strip().upper()
            if answer == "Y":
                return True
            if answer == "N":
                return False
            self.sink.send(INVALID_INPUT)
