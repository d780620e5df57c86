"""
errors.py: exception types raised by podlab

Everything derives from PodlabError, a RuntimeError, so command handlers can
keep catching RuntimeError and print a single line for the user.
"""
from datetime import datetime
from typing import List, Optional


class PodlabError(RuntimeError):
    """Base error type for all podlab failures."""

    def __init__(self, message: str, node: Optional[str] = None):
        super().__init__(message)
        self.node = node


class ConfigError(PodlabError):
    """Raised when configuration or a cluster spec file cannot be used."""


class SubstrateCommandError(PodlabError):
    """
    SubstrateCommandError: a backend command failed to run or exited non-zero.
    Carries the command line and whatever the tool wrote to stderr.
    """

    def __init__(self, cmd: List[str], returncode: Optional[int], stderr: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        reason = self.stderr or f"exit status {returncode}"
        super().__init__(f"command '{' '.join(self.cmd)}' failed: {reason}")


# planning

class InvalidMountPath(PodlabError):
    def __init__(self, host_path: str, cause: Exception):
        self.host_path = host_path
        super().__init__(
            f"unable to resolve absolute path for hostPath: {host_path!r}: {cause}"
        )


class UnknownRole(PodlabError):
    def __init__(self, role: str):
        self.role = role
        super().__init__(f"unknown node role: {role!r}")


# creation and readiness

class SubmissionError(PodlabError):
    def __init__(self, node: str, cause: Exception):
        super().__init__(f"failed to submit node {node}: {cause}", node=node)


class StatusQueryError(PodlabError):
    def __init__(self, node: str, cause: Exception):
        super().__init__(f"failed to query status of node {node}: {cause}", node=node)


class MalformedStatus(PodlabError):
    def __init__(self, node: str, output: str):
        self.output = output
        super().__init__(
            f"node {node} status returned unexpected result: {output!r}", node=node
        )


class NodeCrashed(PodlabError):
    def __init__(self, node: str, status: str):
        self.status = status
        super().__init__(f"node {node} is crashing ({status})", node=node)


class DeadlineExceeded(PodlabError):
    def __init__(self, node: str, deadline: datetime):
        self.deadline = deadline
        super().__init__(
            f"waiting for node {node} reached deadline: {deadline.isoformat()}",
            node=node,
        )


# registry

class ListError(PodlabError):
    pass


class DeleteError(PodlabError):
    pass


class EndpointError(PodlabError):
    pass


class NodeCommandError(PodlabError):
    pass
