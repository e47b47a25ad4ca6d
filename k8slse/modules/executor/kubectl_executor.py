"""
kubectl based remote executor.

Runs one command inside one container through `kubectl exec` and folds
whatever happened into an ExecStatus, so callers never have to deal with
subprocess errors themselves.
"""

import logging
import subprocess
from typing import List, Optional, Protocol

from k8slse.models import ContainerRef, ExecResult, ExecStatus

logger = logging.getLogger("k8slse.executor")

# Prefixes of the container runtime message when exec cannot start the binary
RUNTIME_START_MARKERS = (
    "oci runtime exec failed",
    "unable to start container process",
)
NOT_FOUND_MARKERS = (
    "executable file not found",
    "no such file or directory",
)
# Printed by kubectl when the remote process started and exited non-zero
TERMINATED_MARKER = "command terminated with exit code"

EXIT_CANNOT_EXECUTE = 126
EXIT_NOT_FOUND = 127


class RemoteExecutor(Protocol):
    """Anything that can run a command in a container."""

    def execute(
        self, ref: ContainerRef, command: List[str], stdin: Optional[bytes] = None
    ) -> ExecResult:
        """Run command in the container; never raises for per-call failures."""
        ...


def kubectl_base_args(
    kubectl: str = "kubectl",
    kubeconfig: Optional[str] = None,
    context: Optional[str] = None,
    namespace: Optional[str] = None,
) -> List[str]:
    """Build the kubectl prefix shared by every invocation."""
    args = [kubectl]
    if kubeconfig:
        args += ["--kubeconfig", kubeconfig]
    if context:
        args += ["--context", context]
    if namespace:
        args += ["-n", namespace]
    return args


def classify_exec(return_code: int, stderr: bytes) -> ExecStatus:
    """
    Map a finished kubectl exec onto a status class.

    Runtime messages are checked before exit codes because kubectl reports
    a failed exec start with a generic exit status.
    """
    if return_code == 0:
        return ExecStatus.SUCCESS

    text = stderr.decode("utf-8", errors="replace").lower()

    if any(marker in text for marker in RUNTIME_START_MARKERS):
        if any(marker in text for marker in NOT_FOUND_MARKERS):
            return ExecStatus.COMMAND_NOT_FOUND
        return ExecStatus.CANNOT_EXECUTE
    if "executable file not found" in text:
        return ExecStatus.COMMAND_NOT_FOUND
    if return_code == EXIT_NOT_FOUND:
        return ExecStatus.COMMAND_NOT_FOUND
    if return_code == EXIT_CANNOT_EXECUTE:
        return ExecStatus.CANNOT_EXECUTE
    if TERMINATED_MARKER in text:
        return ExecStatus.FAILED
    return ExecStatus.TRANSPORT_ERROR


class KubectlExecutor:
    """Executor that shells out to kubectl exec."""

    def __init__(
        self,
        namespace: str,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        kubectl: str = "kubectl",
        timeout: int = 300,
    ):
        """
        Initialize executor.

        Args:
            namespace: Namespace of every pod this executor talks to
            kubeconfig: Optional kubeconfig path
            context: Optional kubeconfig context
            kubectl: kubectl binary name or path
            timeout: Seconds before a single exec is abandoned
        """
        self.namespace = namespace
        self.timeout = timeout
        self._base = kubectl_base_args(kubectl, kubeconfig, context, namespace)

    def build_command(
        self, ref: ContainerRef, command: List[str], interactive: bool = False
    ) -> List[str]:
        """Full kubectl argv for running command in ref."""
        cmd = self._base + ["exec"]
        if interactive:
            cmd.append("-i")
        cmd += [ref.pod, "-c", ref.container, "--"] + list(command)
        return cmd

    def execute(
        self, ref: ContainerRef, command: List[str], stdin: Optional[bytes] = None
    ) -> ExecResult:
        """
        Execute command in the container.

        Args:
            ref: Target container
            command: Command and arguments, run without a shell
            stdin: Bytes written to the remote stdin, if any

        Returns:
            ExecResult with status class and captured output
        """
        cmd = self.build_command(ref, command, interactive=stdin is not None)
        logger.debug(f"[{ref}] Running: {' '.join(command)}")

        try:
            process = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"[{ref}] {' '.join(command)!r} timed out after {self.timeout}s")
            return ExecResult(
                status=ExecStatus.TIMEOUT,
                return_code=-1,
                error=f"Command timed out after {self.timeout}s",
            )
        except OSError as e:
            # kubectl itself missing or not runnable
            logger.error(f"[{ref}] Could not run kubectl: {e}")
            return ExecResult(
                status=ExecStatus.TRANSPORT_ERROR,
                return_code=-1,
                error=str(e),
            )

        status = classify_exec(process.returncode, process.stderr or b"")
        if status != ExecStatus.SUCCESS:
            logger.debug(
                f"[{ref}] {' '.join(command)!r} finished with {status.value} "
                f"(exit code {process.returncode})"
            )

        return ExecResult(
            status=status,
            stdout=process.stdout or b"",
            stderr=process.stderr or b"",
            return_code=process.returncode,
        )
