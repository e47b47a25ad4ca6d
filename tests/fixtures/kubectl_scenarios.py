"""
Canned kubectl responses for inventory tests.

Builders produce the JSON documents `kubectl get pods -o json` returns, so
inventory logic can be exercised without a cluster.

Usage:
    def test_unique_pods(kubectl_mocker):
        kubectl_mocker.register("get pods", pod_list_response([...]))
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Ensure tests directory is in path for imports
TESTS_DIR = Path(__file__).parent.parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from conftest import KubectlResponse


def pod(
    name: str,
    containers: List[str],
    phase: str = "Running",
    owner_kind: Optional[str] = None,
    owner_name: Optional[str] = None,
    template_hash: Optional[str] = None,
) -> Dict[str, Any]:
    """A minimal Pod object."""
    metadata: Dict[str, Any] = {"name": name, "namespace": "default", "labels": {}}
    if owner_kind:
        metadata["ownerReferences"] = [
            {"kind": owner_kind, "name": owner_name, "controller": True}
        ]
    if template_hash:
        metadata["labels"]["pod-template-hash"] = template_hash
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": metadata,
        "spec": {"containers": [{"name": c, "image": f"{c}:latest"} for c in containers]},
        "status": {"phase": phase},
    }


def deployment_pod(deployment: str, suffix: str, containers: List[str], template_hash: str = "7d4b9c") -> Dict[str, Any]:
    """A pod owned by the ReplicaSet of a Deployment."""
    return pod(
        f"{deployment}-{template_hash}-{suffix}",
        containers,
        owner_kind="ReplicaSet",
        owner_name=f"{deployment}-{template_hash}",
        template_hash=template_hash,
    )


def pod_list_response(pods: List[Dict[str, Any]]) -> KubectlResponse:
    return KubectlResponse(stdout=json.dumps({"apiVersion": "v1", "kind": "List", "items": pods}))


def pod_response(pod_obj: Dict[str, Any]) -> KubectlResponse:
    return KubectlResponse(stdout=json.dumps(pod_obj))


def not_found_response(name: str) -> KubectlResponse:
    return KubectlResponse(
        stderr=f'Error from server (NotFound): pods "{name}" not found',
        returncode=1,
    )


# Namespace with two replicas of one deployment, a statefulset pod, a bare
# pod and a pod that already completed.
MIXED_NAMESPACE = [
    deployment_pod("web", "abcde", ["nginx", "sidecar"]),
    deployment_pod("web", "fghij", ["nginx", "sidecar"]),
    pod("db-0", ["postgres"], owner_kind="StatefulSet", owner_name="db"),
    pod("debug", ["toolbox"]),
    pod("migrate-xyz", ["migrate"], phase="Succeeded", owner_kind="Job", owner_name="migrate"),
]
