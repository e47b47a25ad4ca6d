"""
kubectl based container inventory.

Lists the pods of a namespace and turns them into ContainerRefs. Pods that
are replicas of the same workload are interchangeable for an audit, so only
one pod per Deployment/StatefulSet/DaemonSet is kept unless pods are named
explicitly.
"""

import io
import json
import logging
import subprocess
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from k8slse.models import ContainerRef
from k8slse.modules.executor import kubectl_base_args

logger = logging.getLogger("k8slse.inventory")

RUNNING = "Running"


class InventoryError(Exception):
    """The cluster could not be asked for pods, or the selection is invalid."""


def split_option(option: Optional[str]) -> List[str]:
    """Comma separated CLI value to a list, dropping blanks."""
    if not option:
        return []
    return [item.strip() for item in option.split(",") if item.strip()]


def is_running(pod: Dict[str, Any]) -> bool:
    return pod.get("status", {}).get("phase") == RUNNING


def pod_name(pod: Dict[str, Any]) -> str:
    return pod.get("metadata", {}).get("name", "")


def pod_containers(pod: Dict[str, Any]) -> List[str]:
    return [c["name"] for c in pod.get("spec", {}).get("containers", []) if c.get("name")]


def workload_key(pod: Dict[str, Any]) -> str:
    """
    Identify the workload a pod belongs to.

    ReplicaSet owners are folded into their Deployment by dropping the
    pod-template-hash suffix. Pods without a controller are their own
    workload.
    """
    metadata = pod.get("metadata", {})
    owners = metadata.get("ownerReferences") or []
    owner = next((o for o in owners if o.get("controller")), owners[0] if owners else None)
    if owner is None:
        return f"Pod/{metadata.get('name', '')}"

    kind = owner.get("kind", "")
    name = owner.get("name", "")
    if kind == "ReplicaSet":
        template_hash = metadata.get("labels", {}).get("pod-template-hash")
        if template_hash and name.endswith(f"-{template_hash}"):
            return f"Deployment/{name[: -len(template_hash) - 1]}"
    return f"{kind}/{name}"


def render_listing(pods: Sequence[Dict[str, Any]]) -> str:
    """Table of pods and their containers."""
    table = Table(show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Pod")
    table.add_column("Container")
    for pod in pods:
        table.add_row("", pod_name(pod), "", style="bold")
        for idx, container in enumerate(pod_containers(pod), start=1):
            table.add_row(str(idx), pod_name(pod), container)

    buf = io.StringIO()
    Console(file=buf, width=200, color_system=None).print(table)
    return buf.getvalue()


class KubectlInventory:
    """Pod and container discovery through kubectl get."""

    def __init__(
        self,
        namespace: str,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        kubectl: str = "kubectl",
        timeout: int = 60,
    ):
        self.namespace = namespace
        self.timeout = timeout
        self._base = kubectl_base_args(kubectl, kubeconfig, context, namespace)

    def _get_json(self, args: List[str]) -> Dict[str, Any]:
        cmd = self._base + ["get"] + args + ["-o", "json"]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            process = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            raise InventoryError(f"kubectl get {' '.join(args)} timed out after {self.timeout}s")
        except OSError as e:
            raise InventoryError(f"Could not run kubectl: {e}") from e

        if process.returncode != 0:
            raise InventoryError((process.stderr or "").strip() or f"kubectl exited with {process.returncode}")
        try:
            return json.loads(process.stdout)
        except json.JSONDecodeError as e:
            raise InventoryError(f"Unexpected kubectl output: {e}") from e

    def get_pod(self, name: str) -> Dict[str, Any]:
        return self._get_json(["pod", name])

    def get_pods(self, names: Sequence[str] = ()) -> List[Dict[str, Any]]:
        """The named pods, or every pod of the namespace when names is empty."""
        if names:
            return [self.get_pod(name) for name in names]
        return self._get_json(["pods"]).get("items", [])

    def unique_pods(self) -> List[Dict[str, Any]]:
        """Running pods, first pod per workload."""
        seen = set()
        unique = []
        for pod in self.get_pods():
            if not is_running(pod):
                continue
            key = workload_key(pod)
            if key in seen:
                logger.debug(f"Skipping {pod_name(pod)}, {key} already covered")
                continue
            seen.add(key)
            unique.append(pod)
        return unique

    def listing(self, pods: Sequence[str] = ()) -> List[Dict[str, Any]]:
        """Pods for the --list view: the named ones, or the unique pods."""
        if pods:
            return self.get_pods(pods)
        return self.unique_pods()

    def get_containers(
        self, pods: Sequence[str] = (), containers: Sequence[str] = ()
    ) -> List[ContainerRef]:
        """
        Resolve the pod/container selection into ContainerRefs.

        Raises:
            InventoryError: containers given for more than one pod, or kubectl failed
        """
        if containers and len(pods) != 1:
            raise InventoryError(
                "List of containers to be tested can be provided only for a single pod"
            )

        if containers:
            return [ContainerRef(pods[0], container) for container in containers]

        if pods:
            selected = []
            for pod in self.get_pods(pods):
                if not is_running(pod):
                    logger.info(f"Skipping pod {pod_name(pod)}, it is not running")
                    continue
                selected.append(pod)
        else:
            selected = self.unique_pods()

        return [
            ContainerRef(pod_name(pod), container)
            for pod in selected
            for container in pod_containers(pod)
        ]
