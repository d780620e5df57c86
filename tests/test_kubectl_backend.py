"""Tests for the kubectl backend. All kubectl calls are mocked."""
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from podlab.backends.kubectl import KubectlBackend
from podlab.errors import SubstrateCommandError


def _ok(stdout=""):
    return MagicMock(returncode=0, stdout=stdout, stderr="")


class TestKubectlBackend:
    @patch("podlab.utils.subprocess.run")
    def test_apply_pipes_descriptor(self, mock_run):
        mock_run.return_value = _ok("pod/x created\n")

        KubectlBackend().apply("kind: Pod\n")

        args, kwargs = mock_run.call_args
        assert args[0] == ["kubectl", "apply", "-f", "-"]
        assert kwargs["input"] == "kind: Pod\n"

    @patch("podlab.utils.subprocess.run")
    def test_namespace_flag(self, mock_run):
        mock_run.return_value = _ok("x 1/1 Running 0 5s\n")

        KubectlBackend("kc", namespace="lab").get_status("x")

        assert mock_run.call_args[0][0] == ["kc", "--namespace", "lab", "get", "pod", "x", "--no-headers"]

    @patch("podlab.utils.subprocess.run")
    def test_get_status_fields(self, mock_run):
        mock_run.return_value = _ok("dev-worker   0/1   ContainerCreating   0   3s\n")
        assert KubectlBackend().get_status("dev-worker") == [
            "dev-worker", "0/1", "ContainerCreating", "0", "3s",
        ]

    @patch("podlab.utils.subprocess.run")
    def test_get_status_empty_output(self, mock_run):
        mock_run.return_value = _ok("")
        assert KubectlBackend().get_status("dev-worker") == []

    @patch("podlab.utils.subprocess.run")
    def test_failure_wrapped(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["kubectl"], output="", stderr='Error from server (NotFound): pods "x" not found\n'
        )

        with pytest.raises(SubstrateCommandError) as exc_info:
            KubectlBackend().get_status("x")

        assert exc_info.value.returncode == 1
        assert "NotFound" in exc_info.value.stderr

    @patch("podlab.utils.subprocess.run")
    def test_missing_binary_wrapped(self, mock_run):
        mock_run.side_effect = FileNotFoundError("kubectl")
        with pytest.raises(SubstrateCommandError):
            KubectlBackend().cluster_info()

    @patch("podlab.utils.subprocess.run")
    def test_delete_is_non_blocking(self, mock_run):
        mock_run.return_value = _ok()

        KubectlBackend().delete("pod", ["a", "b"], grace_period=1, wait=False)

        assert mock_run.call_args[0][0] == [
            "kubectl", "delete", "pod", "--grace-period=1", "--wait=false", "a", "b",
        ]

    @patch("podlab.utils.subprocess.run")
    def test_list_lines(self, mock_run):
        mock_run.return_value = _ok("a\n\nb\n")

        lines = KubectlBackend().list_lines("pod", "podlab.io/cluster=dev", "jsonpath={.items[*].metadata.name}")

        assert lines == ["a", "b"]
        assert mock_run.call_args[0][0][1:5] == ["get", "pod", "-l", "podlab.io/cluster=dev"]

    @patch("podlab.utils.subprocess.run")
    def test_exec_with_stdin(self, mock_run):
        mock_run.return_value = _ok("done\n")

        out = KubectlBackend().exec("dev-worker", "sh", ["-c", "cat"], stdin="hello")

        assert out == "done\n"
        assert mock_run.call_args[0][0] == ["kubectl", "exec", "-i", "dev-worker", "--", "sh", "-c", "cat"]
        assert mock_run.call_args[1]["input"] == "hello"

    @patch("podlab.utils.subprocess.run")
    def test_cluster_info_ignores_namespace(self, mock_run):
        mock_run.return_value = _ok("Kubernetes control plane is running at https://x\n")
        KubectlBackend(namespace="lab").cluster_info()
        assert mock_run.call_args[0][0] == ["kubectl", "cluster-info"]
