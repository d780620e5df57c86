import subprocess
import logging
from typing import List, Optional
from .base import SubstrateBackend
from ..errors import SubstrateCommandError
from ..utils import run, output_lines

logger = logging.getLogger(__name__)

class KubectlBackend(SubstrateBackend):
    """
    Drives a Kubernetes cluster through the kubectl CLI.
    Nodes are pods, their exposed ports are NodePort services of the same name.
    """

    def __init__(self, kubectl: str = "kubectl", namespace: Optional[str] = None):
        self.kubectl = kubectl
        self.namespace = namespace

    def _cmd(self, *args: str) -> List[str]:
        cmd = [self.kubectl]
        if self.namespace:
            cmd.extend(["--namespace", self.namespace])
        cmd.extend(args)
        return cmd

    def _lines(self, cmd: List[str], input: Optional[str] = None) -> List[str]:
        logger.debug(f"running: {' '.join(cmd)}")
        try:
            return output_lines(cmd, input=input)
        except subprocess.CalledProcessError as e:
            raise SubstrateCommandError(cmd, e.returncode, e.stderr) from e
        except OSError as e:
            raise SubstrateCommandError(cmd, None, str(e)) from e

    def apply(self, descriptor: str) -> None:
        self._lines(self._cmd("apply", "-f", "-"), input=descriptor)

    def get_status(self, name: str) -> List[str]:
        lines = self._lines(self._cmd("get", "pod", name, "--no-headers"))
        return " ".join(lines).split()

    def delete(self, kind: str, names: List[str], grace_period: int = 1, wait: bool = False) -> None:
        cmd = self._cmd(
            "delete", kind,
            f"--grace-period={grace_period}",
            f"--wait={'true' if wait else 'false'}",
        )
        cmd.extend(names)
        self._lines(cmd)

    def list_lines(self, kind: str, selector: str, output: str) -> List[str]:
        return self._lines(self._cmd("get", kind, "-l", selector, "-o", output))

    def get_field(self, name: str, jsonpath: str) -> List[str]:
        return self._lines(self._cmd("get", "pod", name, "-o", f"jsonpath={jsonpath}"))

    def exec(self, name: str, command: str, args: List[str], stdin: Optional[str] = None) -> str:
        cmd = self._cmd("exec")
        if stdin is not None:
            # interactive so we can supply input
            cmd.append("-i")
        cmd.extend([name, "--", command])
        cmd.extend(args)
        logger.debug(f"running: {' '.join(cmd)}")
        try:
            result = run(cmd, check=True, silent=True, input=stdin)
        except subprocess.CalledProcessError as e:
            raise SubstrateCommandError(cmd, e.returncode, e.stderr) from e
        except OSError as e:
            raise SubstrateCommandError(cmd, None, str(e)) from e
        return result.stdout

    def cluster_info(self) -> List[str]:
        # cluster-info is not namespaced
        return self._lines([self.kubectl, "cluster-info"])
