"""
config.py: module for loading cluster configuration files

The file format follows kind's cluster config:

    kind: Cluster
    name: dev
    nodes:
    - role: control-plane
      extraPortMappings:
      - containerPort: 80
        hostPort: 8080
    - role: worker
      image: kindest/node:v1.27.3
      extraMounts:
      - hostPath: ./data
        containerPath: /data
        readOnly: true
"""
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from .errors import ConfigError
from .models import ClusterSpec, NodeSpec, MountSpec, PortMapping, NodeRole

DEFAULT_CLUSTER_NAME = "kind"

# Used when the file (or the command line) declares no nodes
DEFAULT_CLUSTER_CONFIG = {
    "name": DEFAULT_CLUSTER_NAME,
    "nodes": [{"role": NodeRole.CONTROL_PLANE.value}],
}


def _mount(data: Dict[str, Any]) -> MountSpec:
    try:
        return MountSpec(
            host_path=str(data["hostPath"]),
            container_path=str(data["containerPath"]),
            readonly=bool(data.get("readOnly", False)),
        )
    except (KeyError, TypeError) as e:
        raise ConfigError(f"invalid extraMounts entry {data!r}: missing {e}") from e


def _port(data: Dict[str, Any]) -> PortMapping:
    try:
        return PortMapping(
            container_port=int(data["containerPort"]),
            host_port=int(data.get("hostPort", 0)),
            listen_address=str(data.get("listenAddress", "0.0.0.0")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"invalid extraPortMappings entry {data!r}: {e}") from e


def _node(data: Any, default_image: str) -> NodeSpec:
    if not isinstance(data, dict):
        raise ConfigError(f"invalid node entry: {data!r}")
    # role is validated by the planner so the error names it the same way
    return NodeSpec(
        role=str(data.get("role", NodeRole.CONTROL_PLANE.value)),
        image=str(data.get("image") or default_image),
        mounts=[_mount(m) for m in data.get("extraMounts") or []],
        ports=[_port(p) for p in data.get("extraPortMappings") or []],
    )


def cluster_spec_from_dict(data: Dict[str, Any], default_image: str,
                           name: Optional[str] = None) -> ClusterSpec:
    """
    cluster_spec_from_dict: builds a ClusterSpec from parsed config data,
    name overrides the name in the data
    """
    if not isinstance(data, dict):
        raise ConfigError("cluster config must be a mapping")
    nodes = data.get("nodes") or DEFAULT_CLUSTER_CONFIG["nodes"]
    if not isinstance(nodes, list):
        raise ConfigError("'nodes' must be a list")
    return ClusterSpec(
        name=name or str(data.get("name") or DEFAULT_CLUSTER_NAME),
        nodes=[_node(n, default_image) for n in nodes],
    )


class ClusterConfig:
    """
    ClusterConfig: loads the cluster definition from a YAML file, or the
    single control-plane default when no file is given
    """
    def __init__(self, path: Optional[Path] = None):
        self.path = path

    def load(self, default_image: str, name: Optional[str] = None) -> ClusterSpec:
        """
        load: loads and validates the cluster config file
        """
        if self.path is None:
            return cluster_spec_from_dict(DEFAULT_CLUSTER_CONFIG, default_image, name)
        try:
            data = yaml.safe_load(Path(self.path).read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load cluster config {self.path}: {e}") from e
        return cluster_spec_from_dict(data, default_image, name)
