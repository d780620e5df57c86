"""
manifest.py: renders a build plan into Kubernetes manifests

Every call builds fresh dictionaries and dumps them, there is no shared
template object between calls.
"""
from typing import Any, Dict, List
import yaml
from .models import BuildPlan


def _pod(plan: BuildPlan) -> Dict[str, Any]:
    volume_mounts = [
        {"name": "var", "mountPath": "/var"},
        {"name": "run", "mountPath": "/run"},
        {"name": "modules", "mountPath": "/lib/modules", "readOnly": True},
    ]
    volumes: List[Dict[str, Any]] = [
        {"name": "var", "emptyDir": {}},
        {"name": "run", "emptyDir": {}},
        {"name": "modules", "hostPath": {"path": "/lib/modules"}},
    ]
    for i, mount in enumerate(plan.node.mounts):
        volume_name = f"extra-mount-{i}"
        volume_mounts.append({
            "name": volume_name,
            "mountPath": mount.container_path,
            "readOnly": mount.readonly,
        })
        volumes.append({"name": volume_name, "hostPath": {"path": mount.host_path}})

    return {
        "kind": "Pod",
        "apiVersion": "v1",
        "metadata": {"name": plan.name, "labels": plan.labels},
        "spec": {
            "hostname": plan.name,
            "containers": [{
                "name": plan.name,
                "image": plan.node.image,
                "tty": True,
                "stdin": True,
                "securityContext": {"privileged": True},
                "volumeMounts": volume_mounts,
            }],
            "volumes": volumes,
        },
    }


def _service_ports(plan: BuildPlan) -> List[Dict[str, Any]]:
    # one service port per container port, whatever the listen address
    ports = []
    seen = set()
    for p in plan.node.ports:
        if p.container_port in seen:
            continue
        seen.add(p.container_port)
        ports.append({
            "name": f"port-{p.container_port}",
            "protocol": "TCP",
            "port": p.container_port,
            "targetPort": p.container_port,
        })
    return ports


def _service(plan: BuildPlan) -> Dict[str, Any]:
    spec: Dict[str, Any] = {"selector": plan.labels, "type": "NodePort"}
    ports = _service_ports(plan)
    if ports:
        spec["ports"] = ports
    return {
        "kind": "Service",
        "apiVersion": "v1",
        "metadata": {"name": plan.name, "labels": plan.labels},
        "spec": spec,
    }


def render_node_manifest(plan: BuildPlan) -> str:
    """
    render_node_manifest: returns the pod and service of the node as a
    two document YAML stream
    """
    return yaml.safe_dump_all(
        [_pod(plan), _service(plan)], default_flow_style=False, sort_keys=False
    )
