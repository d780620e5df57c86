from dataclasses import dataclass, field
from typing import Tuple
from enum import Enum

# Label keys attached to every pod and service podlab creates
CLUSTER_LABEL_KEY = "podlab.io/cluster"
ROLE_LABEL_KEY = "podlab.io/role"

# Port the API server listens on inside a control-plane node
APISERVER_INTERNAL_PORT = 6443


def label_for_jsonpath(label: str) -> str:
    """Escape a label key for use as a kubectl jsonpath member name."""
    return label.replace(".", "\\.")


class NodeRole(Enum):
    CONTROL_PLANE = "control-plane"
    WORKER = "worker"


@dataclass(frozen=True)
class MountSpec:
    """A host directory exposed inside the node."""
    host_path: str
    container_path: str
    readonly: bool = False


@dataclass(frozen=True)
class PortMapping:
    """Port forwarded from the host (listen_address:host_port) to the node."""
    container_port: int
    host_port: int = 0
    listen_address: str = "0.0.0.0"


@dataclass(frozen=True)
class NodeSpec:
    """
    Immutable declaration of a desired node.
    Role is kept as the raw string from the cluster spec; the planner rejects
    anything that is not a NodeRole value.
    """
    role: str
    image: str
    mounts: Tuple[MountSpec, ...] = ()
    ports: Tuple[PortMapping, ...] = ()

    def __post_init__(self):
        if not self.image:
            raise ValueError("Node image is required.")
        # Accept lists from callers, store tuples
        object.__setattr__(self, 'mounts', tuple(self.mounts))
        object.__setattr__(self, 'ports', tuple(self.ports))


@dataclass(frozen=True)
class ClusterSpec:
    name: str
    nodes: Tuple[NodeSpec, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'nodes', tuple(self.nodes))


@dataclass(frozen=True)
class BuildPlan:
    """
    Fully resolved description of one node, ready to be submitted.
    name is unique within the cluster; node is a planner-owned copy.
    """
    name: str
    node: NodeSpec
    cluster: str

    @property
    def role(self) -> str:
        return self.node.role

    @property
    def labels(self):
        return {
            CLUSTER_LABEL_KEY: self.cluster,
            ROLE_LABEL_KEY: self.node.role,
        }
