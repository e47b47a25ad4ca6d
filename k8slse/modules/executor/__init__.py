"""
Executor Module - Black Box Interface

Purpose: Run one command inside one container
Interface: RemoteExecutor.execute(ref, command, stdin) -> ExecResult
Hidden: kubectl invocation, exit code and runtime message interpretation

Can be replaced with a different transport (Kubernetes API streams, SSH).
"""

from .kubectl_executor import (
    KubectlExecutor,
    RemoteExecutor,
    classify_exec,
    kubectl_base_args,
)

__all__ = ["KubectlExecutor", "RemoteExecutor", "classify_exec", "kubectl_base_args"]
