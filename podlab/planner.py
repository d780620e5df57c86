"""
planner.py: turns a cluster spec into per-node build plans
"""
import dataclasses
import os
from typing import Callable, Dict, List
from .models import (ClusterSpec, NodeSpec, NodeRole, BuildPlan, PortMapping,
                     APISERVER_INTERNAL_PORT)
from .errors import InvalidMountPath, UnknownRole

APISERVER_PORT_MAPPING = PortMapping(
    listen_address="0.0.0.0",
    host_port=APISERVER_INTERNAL_PORT,
    container_port=APISERVER_INTERNAL_PORT,
)

_KNOWN_ROLES = {role.value for role in NodeRole}


def make_node_namer(cluster: str) -> Callable[[str], str]:
    """
    make_node_namer: returns a function handing out names per role,
    <cluster>-<role> for the first node of a role, then <cluster>-<role>2, ...
    """
    counters: Dict[str, int] = {}

    def namer(role: str) -> str:
        counters[role] = counters.get(role, 0) + 1
        suffix = "" if counters[role] == 1 else str(counters[role])
        return f"{cluster}-{role}{suffix}"

    return namer


def resolve_host_path(host_path: str) -> str:
    """
    resolve_host_path: returns host_path as an absolute path, relative paths
    are taken from the current working directory
    """
    if not host_path:
        raise InvalidMountPath(host_path, ValueError("empty path"))
    try:
        return os.path.abspath(os.path.expanduser(host_path))
    except (OSError, ValueError) as e:
        raise InvalidMountPath(host_path, e) from e


def with_apiserver_port(ports):
    """
    with_apiserver_port: appends the API server mapping unless an identical
    mapping is already present
    """
    if APISERVER_PORT_MAPPING in ports:
        return tuple(ports)
    return tuple(ports) + (APISERVER_PORT_MAPPING,)


def plan_node(name: str, cluster: str, node: NodeSpec) -> BuildPlan:
    """
    plan_node: builds the plan of a single node whose role is already known,
    node itself is left untouched
    """
    mounts = tuple(
        dataclasses.replace(m, host_path=resolve_host_path(m.host_path))
        for m in node.mounts
    )
    ports = node.ports
    if node.role == NodeRole.CONTROL_PLANE.value:
        ports = with_apiserver_port(ports)

    return BuildPlan(
        name=name,
        node=dataclasses.replace(node, mounts=mounts, ports=ports),
        cluster=cluster,
    )


def build_plans(cluster: str, spec: ClusterSpec) -> List[BuildPlan]:
    """
    Build one plan per node of the spec, in spec order.
    :param cluster: Cluster name, used as the name prefix and cluster label
    :param spec: Cluster specification, never modified
    :return: List of build plans
    Raises UnknownRole or InvalidMountPath; nothing is returned in that case.
    """
    namer = make_node_namer(cluster)
    plans = []
    for node in spec.nodes:
        # validate the role before it consumes a name
        if node.role not in _KNOWN_ROLES:
            raise UnknownRole(node.role)
        plans.append(plan_node(namer(node.role), cluster, node))
    return plans
