"""
provider.py: creates, lists and deletes clusters of pod-backed nodes
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from .action_executor import ActionExecutor
from .app_config import ProvisionSettings
from .backends.base import SubstrateBackend
from .backends.kubectl import KubectlBackend
from .errors import SubstrateCommandError, EndpointError
from .models import BuildPlan, ClusterSpec
from .nodes import Node
from .planner import build_plans
from .provisioner import ResourceProvisioner
from .readiness import ReadinessPoller
from .registry import NodeRegistry
from .utils import Status, strip_ansi

logger = logging.getLogger(__name__)

_ENDPOINT_PREFIXES = (
    "Kubernetes control plane is running at ",
    "Kubernetes master is running at ",
)


class Provider:
    """
    Provider: entry point for cluster lifecycle operations. One caller drives
    one cluster at a time; the backend is shared by all node threads.
    """

    def __init__(self, backend: SubstrateBackend, settings: Optional[ProvisionSettings] = None):
        self.backend = backend
        self.settings = settings or ProvisionSettings()
        self.provisioner = ResourceProvisioner(backend)
        self.poller = ReadinessPoller(
            backend,
            interval=self.settings.poll_interval,
            stability_threshold=self.settings.stability_threshold,
            fatal_statuses=self.settings.fatal_statuses,
        )
        self.registry = NodeRegistry(backend, grace_period=self.settings.delete_grace_period)
        self.executor = ActionExecutor()

    @classmethod
    def from_settings(cls, settings: ProvisionSettings) -> "Provider":
        return cls(KubectlBackend(settings.kubectl, settings.namespace), settings)

    def provision(self, cluster: str, spec: ClusterSpec, status: Optional[Status] = None,
                  dry_run: bool = False, timeout: Optional[float] = None) -> bool:
        """
        Create every node of the spec and wait until all are ready.
        :param cluster: Cluster name
        :param spec: Cluster specification
        :param status: Status line printer (a new one when omitted)
        :param dry_run: Only print the planned actions
        :param timeout: Seconds all nodes share to become ready
        :return: True if nodes were created, False for a dry run
        Planning errors are raised before any node is submitted.
        """
        status = status or Status()
        status.start(f"Preparing nodes {'📦' * len(spec.nodes)}")
        ok = False
        try:
            plans = build_plans(cluster, spec)
            applied = self.provision_all(plans, dry_run=dry_run, timeout=timeout)
            ok = True
            return applied
        finally:
            status.end(ok)

    def provision_all(self, plans: List[BuildPlan], dry_run: bool = False,
                      timeout: Optional[float] = None) -> bool:
        """
        Run create + wait for every plan concurrently, raising the first failure.
        """
        seconds = timeout if timeout is not None else self.settings.provision_timeout
        deadline = datetime.now() + timedelta(seconds=seconds)
        return self.executor.execute_actions(self.build_create_actions(plans, deadline), dry_run)

    def build_create_actions(self, plans: List[BuildPlan], deadline: datetime) -> List[Dict[str, Any]]:
        """
        Build one action per plan; each action carries its own plan in args.
        """
        return [
            {
                "desc": f"Create {plan.role} node '{plan.name}' from '{plan.node.image}'",
                "func": self.create_node,
                "args": (plan, deadline),
            }
            for plan in plans
        ]

    def create_node(self, plan: BuildPlan, deadline: datetime) -> None:
        """create_node: submits one node and waits until it is ready"""
        self.provisioner.create(plan)
        self.poller.wait_until_ready(plan.name, deadline)
        logger.info(f"Node {plan.name} is ready")

    def list_clusters(self) -> List[str]:
        return self.registry.list_clusters()

    def list_nodes(self, cluster: str) -> List[Node]:
        return self.registry.list_nodes(cluster)

    def delete_nodes(self, nodes: List[Node]) -> None:
        self.registry.delete_nodes(nodes)

    def node(self, name: str) -> Node:
        return Node(name, self.backend)

    def get_api_server_endpoint(self, cluster: str) -> str:
        """
        get_api_server_endpoint: returns the API server URL of the substrate
        cluster hosting the nodes
        """
        try:
            lines = self.backend.cluster_info()
        except SubstrateCommandError as e:
            raise EndpointError(f"failed to get api server endpoint for {cluster}: {e}") from e
        first = strip_ansi(lines[0]).strip() if lines else ""
        for prefix in _ENDPOINT_PREFIXES:
            if first.startswith(prefix):
                return first[len(prefix):].strip()
        raise EndpointError(
            f"failed to get api server endpoint for {cluster} from cluster-info: {first!r}"
        )
