"""
Shared pytest fixtures for k8slse tests.

This module provides common fixtures including:
- KubectlMocker: Mock kubectl subprocess calls with canned responses
- FakeExecutor: Scripted in-memory remote executor for pipeline tests
- Status sink and settings helpers
"""

import logging
import os
import sys
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Pattern, Tuple, Union
from unittest.mock import MagicMock, patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from k8slse.models import ContainerRef, ExecResult, ExecStatus
from k8slse.modules.config import ScanSettings
from k8slse.modules.status import MemoryStatusSink


# =============================================================================
# Kubectl Mocking Infrastructure
# =============================================================================

@dataclass
class KubectlResponse:
    """Represents a mocked kubectl command response."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    def to_completed_process(self, text: bool) -> MagicMock:
        """Convert to a subprocess.CompletedProcess-like mock."""
        result = MagicMock()
        if text:
            result.stdout = self.stdout
            result.stderr = self.stderr
        else:
            result.stdout = self.stdout.encode("utf-8")
            result.stderr = self.stderr.encode("utf-8")
        result.returncode = self.returncode
        return result


@dataclass
class KubectlCall:
    """Record of a kubectl call made during testing."""
    command: List[str]
    full_command_str: str
    input: Optional[bytes] = None
    matched_pattern: Optional[str] = None
    response: Optional[KubectlResponse] = None


class KubectlMocker:
    """
    Mock kubectl subprocess calls with pattern-matched responses.

    Usage:
        def test_shell_probe(kubectl_mocker):
            kubectl_mocker.register("exec web -c app -- sh --version", KubectlResponse())
            result = executor.execute(ContainerRef("web", "app"), ["sh", "--version"])
            assert kubectl_mocker.was_called_with("sh --version")
    """

    def __init__(self):
        self._responses: List[Tuple[Union[str, Pattern], KubectlResponse, int]] = []
        self._call_history: List[KubectlCall] = []
        self._lock = threading.Lock()
        self._default_response = KubectlResponse(
            stderr="Error: mock not configured for this command",
            returncode=1
        )

    def register(
        self,
        pattern: Union[str, Pattern],
        response: KubectlResponse,
        priority: int = 0
    ) -> "KubectlMocker":
        """Register a response for commands matching the pattern (substring or regex)."""
        self._responses.append((pattern, response, priority))
        # Sort by priority (highest first)
        self._responses.sort(key=lambda x: x[2], reverse=True)
        return self

    def set_default_response(self, response: KubectlResponse) -> "KubectlMocker":
        """Set the default response for unmatched commands."""
        self._default_response = response
        return self

    def mock_run(self, cmd: List[str], input=None, text: bool = False, **kwargs) -> MagicMock:
        """Side effect replacing subprocess.run."""
        cmd_str = " ".join(cmd)
        if cmd[0] != "kubectl":
            raise RuntimeError(f"Non-kubectl command blocked: {cmd_str}")

        kubectl_args = " ".join(cmd[1:])
        matched_pattern = None
        response = self._default_response

        for pattern, resp, _ in self._responses:
            if isinstance(pattern, str):
                if pattern in kubectl_args:
                    matched_pattern = pattern
                    response = resp
                    break
            elif pattern.search(kubectl_args):
                matched_pattern = pattern.pattern
                response = resp
                break

        with self._lock:
            self._call_history.append(KubectlCall(
                command=list(cmd),
                full_command_str=cmd_str,
                input=input,
                matched_pattern=matched_pattern,
                response=response,
            ))

        return response.to_completed_process(text)

    @property
    def calls(self) -> List[KubectlCall]:
        return list(self._call_history)

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    def was_called_with(self, pattern: str) -> bool:
        return any(pattern in call.full_command_str for call in self._call_history)

    def get_calls_matching(self, pattern: str) -> List[KubectlCall]:
        return [c for c in self._call_history if pattern in c.full_command_str]


@pytest.fixture
def kubectl_mocker():
    """KubectlMocker with subprocess.run patched."""
    mocker = KubectlMocker()
    with patch("subprocess.run", side_effect=mocker.mock_run):
        yield mocker


# =============================================================================
# Scripted Remote Executor
# =============================================================================

class FakeExecutor:
    """
    In-memory RemoteExecutor.

    Commands are matched on (pod, container, "joined command"). Anything not
    scripted behaves like a missing binary.
    """

    def __init__(self):
        self._responses: Dict[Tuple[str, str, str], ExecResult] = {}
        self._lock = threading.Lock()
        self.calls: List[Tuple[ContainerRef, str, Optional[bytes]]] = []
        self.default = ExecResult(
            status=ExecStatus.COMMAND_NOT_FOUND,
            stderr=b"OCI runtime exec failed: executable file not found in $PATH",
            return_code=126,
        )

    def on(
        self,
        pod: str,
        container: str,
        command: str,
        status: ExecStatus = ExecStatus.SUCCESS,
        stdout: bytes = b"",
        stderr: bytes = b"",
    ) -> "FakeExecutor":
        code = 0 if status == ExecStatus.SUCCESS else 1
        self._responses[(pod, container, command)] = ExecResult(
            status=status, stdout=stdout, stderr=stderr, return_code=code
        )
        return self

    def container(
        self,
        pod: str,
        container: str,
        shell: Optional[str] = "sh",
        utilities: Iterable[str] = (),
        script_output: Optional[bytes] = None,
    ) -> "FakeExecutor":
        """Script a container with a shell and a set of present utilities."""
        if shell:
            self.on(pod, container, f"{shell} --version")
            for command in (shell, f"{shell} -s -- -c"):
                self.on(pod, container, command, stdout=script_output or b"report\n")
        for utility in utilities:
            self.on(pod, container, utility)
        return self

    def execute(self, ref: ContainerRef, command: List[str], stdin: Optional[bytes] = None) -> ExecResult:
        joined = " ".join(command)
        with self._lock:
            self.calls.append((ref, joined, stdin))
        return self._responses.get((ref.pod, ref.container, joined), self.default)

    def commands_for(self, ref: ContainerRef) -> List[str]:
        with self._lock:
            return [cmd for r, cmd, _ in self.calls if r == ref]


@pytest.fixture
def fake_executor():
    return FakeExecutor()


# =============================================================================
# Pipeline helpers
# =============================================================================

FIXED_TIME = datetime(2024, 5, 17, 13, 45, 9)


@pytest.fixture
def memory_sink():
    return MemoryStatusSink()


@pytest.fixture
def make_settings(tmp_path):
    """Factory for ScanSettings writing into tmp_path."""

    def _make(**overrides) -> ScanSettings:
        values = dict(
            script=b"echo audit\n",
            directory=tmp_path,
            quiet=True,
            workers=4,
            utilities=["stat /usr/bin/find", "stat /bin/cat"],
            queue_size=2,
        )
        values.update(overrides)
        return ScanSettings(**values)

    return _make


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME


class ScriptedReader:
    """Answers confirmation prompts from a list; raises EOFError when exhausted."""

    def __init__(self, answers: Iterable[str]):
        self.answers = list(answers)
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "kubectl_mock: Tests using mocked kubectl subprocess calls"
    )


@pytest.fixture(autouse=True)
def restore_k8slse_logger():
    """Undo configure_logging() calls made by CLI tests so caplog keeps working."""
    log = logging.getLogger("k8slse")
    root = logging.getLogger()
    handlers, level, propagate = list(log.handlers), log.level, log.propagate
    root_handlers = list(root.handlers)
    yield
    log.handlers = handlers
    log.setLevel(level)
    log.propagate = propagate
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler and handler not in root_handlers:
            root.removeHandler(handler)
