"""
nodes.py: handle on a single provisioned node
"""
from typing import Optional, Tuple
from .backends.base import SubstrateBackend
from .errors import SubstrateCommandError, NodeCommandError
from .models import ROLE_LABEL_KEY, label_for_jsonpath


class Node:
    """
    Node: names a node resource in the substrate without owning it; the
    resource may be gone by the time a method is called.
    """

    def __init__(self, name: str, backend: SubstrateBackend):
        self.name = name
        self.backend = backend

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"Node({self.name!r})"

    def _single_line(self, jsonpath: str, what: str) -> str:
        try:
            lines = self.backend.get_field(self.name, jsonpath)
        except SubstrateCommandError as e:
            raise NodeCommandError(f"failed to get {what} for node {self.name}: {e}", node=self.name) from e
        if len(lines) != 1:
            raise NodeCommandError(
                f"failed to get {what} for node {self.name}: output lines {len(lines)} != 1",
                node=self.name,
            )
        return lines[0].strip()

    def role(self) -> str:
        """role: returns the role label of the node"""
        return self._single_line(f"{{.metadata.labels.{label_for_jsonpath(ROLE_LABEL_KEY)}}}", "role")

    def ip(self) -> Tuple[str, str]:
        """ip: returns (ipv4, ipv6) of the node, pods only report ipv4 here"""
        return self._single_line("{.status.podIP}", "IP"), ""

    def command(self, command: str, *args: str, stdin: Optional[str] = None) -> str:
        """
        command: runs a command inside the node and returns its stdout
        """
        try:
            return self.backend.exec(self.name, command, list(args), stdin=stdin)
        except SubstrateCommandError as e:
            raise NodeCommandError(f"command {command!r} failed on node {self.name}: {e}", node=self.name) from e
