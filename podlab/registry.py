"""
registry.py: list and delete operations scoped by the cluster label
"""
import logging
from typing import List
from .backends.base import SubstrateBackend
from .errors import SubstrateCommandError, ListError, DeleteError
from .models import CLUSTER_LABEL_KEY, label_for_jsonpath
from .nodes import Node

logger = logging.getLogger(__name__)


def _jsonpath_per_item(field: str) -> str:
    # one value per line
    return "jsonpath={range .items[*]}" + field + '{"\\n"}{end}'


class NodeRegistry:
    """
    NodeRegistry: finds the nodes and clusters podlab created and removes them
    """

    def __init__(self, backend: SubstrateBackend, grace_period: int = 1):
        self.backend = backend
        self.grace_period = grace_period

    def list_clusters(self) -> List[str]:
        """
        list_clusters: returns the distinct cluster names carried by any pod
        """
        output = _jsonpath_per_item(f"{{.metadata.labels.{label_for_jsonpath(CLUSTER_LABEL_KEY)}}}")
        try:
            lines = self.backend.list_lines("pod", CLUSTER_LABEL_KEY, output)
        except SubstrateCommandError as e:
            raise ListError(f"failed to list clusters: {e}") from e
        return sorted({line.strip() for line in lines if line.strip()})

    def list_nodes(self, cluster: str) -> List[Node]:
        """
        list_nodes: returns the nodes of the cluster, running or not
        """
        try:
            lines = self.backend.list_lines(
                "pod", f"{CLUSTER_LABEL_KEY}={cluster}", _jsonpath_per_item("{.metadata.name}")
            )
        except SubstrateCommandError as e:
            raise ListError(f"failed to list nodes of cluster {cluster}: {e}") from e
        return [Node(name.strip(), self.backend) for name in lines if name.strip()]

    def delete_nodes(self, nodes: List[Node]) -> None:
        """
        Request deletion of the nodes' pods and services.
        Returns once deletion is requested, not once the resources are gone.
        Both deletions are attempted; a failure of either raises DeleteError and
        nothing already deleted is restored.
        :param nodes: Nodes previously returned by list_nodes()
        """
        if not nodes:
            return
        names = [str(n) for n in nodes]
        failures = []
        for kind, plural in (("pod", "pods"), ("service", "services")):
            try:
                self.backend.delete(kind, names, grace_period=self.grace_period, wait=False)
            except SubstrateCommandError as e:
                logger.warning(f"failed to delete {plural} {names}: {e}")
                failures.append(f"failed to delete {plural}: {e}")
        if failures:
            raise DeleteError("; ".join(failures))
