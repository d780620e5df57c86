from abc import ABC, abstractmethod
from typing import List, Optional

class SubstrateBackend(ABC):
    """
    Abstract interface to the orchestration substrate that hosts the nodes.
    Implementations must be safe to call from several threads at once; podlab
    adds no locking around them.
    All methods raise SubstrateCommandError when the substrate call fails.
    """

    @abstractmethod
    def apply(self, descriptor: str) -> None:
        """
        Submit a rendered descriptor for creation.
        Returns once the request is accepted, not once the resources run.
        """
        pass

    @abstractmethod
    def get_status(self, name: str) -> List[str]:
        """
        Return the whitespace separated fields of the node's status line.
        Field index 2 is the status token (e.g. 'Running').
        """
        pass

    @abstractmethod
    def delete(self, kind: str, names: List[str], grace_period: int = 1, wait: bool = False) -> None:
        """Request deletion of the named resources of the given kind."""
        pass

    @abstractmethod
    def list_lines(self, kind: str, selector: str, output: str) -> List[str]:
        """
        List resources matching a label selector, projected through an
        output format, one value per returned line.
        """
        pass

    @abstractmethod
    def get_field(self, name: str, jsonpath: str) -> List[str]:
        """Read a jsonpath projection of a single node resource."""
        pass

    @abstractmethod
    def exec(self, name: str, command: str, args: List[str], stdin: Optional[str] = None) -> str:
        """Run a command inside the node and return its stdout."""
        pass

    @abstractmethod
    def cluster_info(self) -> List[str]:
        """Return the substrate's cluster summary lines."""
        pass
