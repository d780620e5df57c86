"""
podlab: provisions kind-style clusters whose nodes are pods on an existing
Kubernetes cluster
"""
from .models import ClusterSpec, NodeSpec, MountSpec, PortMapping, BuildPlan, NodeRole
from .planner import build_plans
from .provider import Provider

__version__ = "0.1.0"

__all__ = [
    'ClusterSpec', 'NodeSpec', 'MountSpec', 'PortMapping', 'BuildPlan', 'NodeRole',
    'build_plans', 'Provider',
]
