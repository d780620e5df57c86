"""Shared pytest fixtures for podlab tests."""
import threading
from typing import Dict, List, Optional

import pytest

from podlab.backends.base import SubstrateBackend
from podlab.errors import SubstrateCommandError


class FakeBackend(SubstrateBackend):
    """
    In-memory substrate. Status reads walk a per-node script of status
    tokens; once the script is exhausted the last token repeats.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self.applied: List[str] = []
        self.status_scripts: Dict[str, List[str]] = {}
        self.status_calls: Dict[str, int] = {}
        self.status_error: Optional[Exception] = None
        self.apply_error: Optional[Exception] = None
        self.delete_errors: Dict[str, Exception] = {}
        self.deletes: List[tuple] = []
        self.list_calls: List[tuple] = []
        self.lines: List[str] = []
        self.list_error: Optional[Exception] = None
        self.fields: Dict[str, List[str]] = {}
        self.exec_calls: List[tuple] = []
        self.info_lines: List[str] = []

    def script(self, name: str, statuses: List[str]):
        self.status_scripts[name] = list(statuses)

    def calls(self, name: str) -> int:
        with self.lock:
            return self.status_calls.get(name, 0)

    def apply(self, descriptor: str) -> None:
        if self.apply_error is not None:
            raise self.apply_error
        with self.lock:
            self.applied.append(descriptor)

    def get_status(self, name: str) -> List[str]:
        with self.lock:
            n = self.status_calls.get(name, 0)
            self.status_calls[name] = n + 1
        if self.status_error is not None:
            raise self.status_error
        script = self.status_scripts.get(name, ["Pending"])
        token = script[min(n, len(script) - 1)]
        if token == "":
            return [name]
        return [name, "1/1", token, "0", "1s"]

    def delete(self, kind, names, grace_period=1, wait=False):
        self.deletes.append((kind, list(names), grace_period, wait))
        if kind in self.delete_errors:
            raise self.delete_errors[kind]

    def list_lines(self, kind, selector, output):
        self.list_calls.append((kind, selector, output))
        if self.list_error is not None:
            raise self.list_error
        return list(self.lines)

    def get_field(self, name, jsonpath):
        return list(self.fields.get(jsonpath, []))

    def exec(self, name, command, args, stdin=None):
        self.exec_calls.append((name, command, list(args), stdin))
        return "ok\n"

    def cluster_info(self):
        return list(self.info_lines)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def command_error():
    return SubstrateCommandError(["kubectl", "get"], 1, "connection refused")
