"""
readiness.py: waits for a freshly created node to be stably running

The substrate has no blocking "wait until ready" call, so a background thread
polls the node status at a fixed interval and hands the outcome back over a
one slot queue. The caller waits on that queue until the deadline, then sets
the shared expired flag which stops the polling thread at its next tick.
"""
import logging
import queue
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Iterable, Optional
from .backends.base import SubstrateBackend
from .errors import (PodlabError, StatusQueryError, MalformedStatus, NodeCrashed,
                     DeadlineExceeded)

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0
STABILITY_THRESHOLD = 10
RUNNING_STATUS = "Running"
FATAL_STATUSES: FrozenSet[str] = frozenset({
    "CrashLoopBackOff",
    "ErrImagePull",
    "ImagePullBackOff",
    "InvalidImageName",
    "CreateContainerConfigError",
    "CreateContainerError",
    "RunContainerError",
})

# index of the STATUS column in `kubectl get pod <name> --no-headers`
STATUS_FIELD = 2


class PollPhase(Enum):
    UNKNOWN = "unknown"
    TRANSITIONAL = "transitional"
    STABLE_RUNNING = "stable-running"
    FATAL = "fatal"
    DEADLINE_EXCEEDED = "deadline-exceeded"


@dataclass
class PollState:
    """Last observed status token and the run of consecutive Running reads."""
    status: str = ""
    running_count: int = 0
    phase: PollPhase = PollPhase.UNKNOWN

    def observe(self, status: str, threshold: int, fatal_statuses: Iterable[str]) -> PollPhase:
        self.status = status
        if status == RUNNING_STATUS:
            self.running_count += 1
            if self.running_count >= threshold:
                self.phase = PollPhase.STABLE_RUNNING
            else:
                self.phase = PollPhase.TRANSITIONAL
        elif status in fatal_statuses:
            self.phase = PollPhase.FATAL
        else:
            # still starting, a crash-looping pod can report Running briefly
            self.running_count = 0
            self.phase = PollPhase.TRANSITIONAL
        return self.phase


class ReadinessPoller:
    """
    ReadinessPoller: polls one node at a time until it is stable, failed, or
    out of time. Safe to use from several provisioning threads at once.
    """

    def __init__(self, backend: SubstrateBackend, interval: float = POLL_INTERVAL,
                 stability_threshold: int = STABILITY_THRESHOLD,
                 fatal_statuses: Optional[Iterable[str]] = None):
        if interval <= 0:
            raise ValueError("poll interval must be > 0")
        if stability_threshold < 1:
            raise ValueError("stability threshold must be >= 1")
        self.backend = backend
        self.interval = interval
        self.stability_threshold = stability_threshold
        self.fatal_statuses = frozenset(fatal_statuses) if fatal_statuses is not None else FATAL_STATUSES

    def wait_until_ready(self, name: str, deadline: datetime) -> None:
        """
        Block until node `name` is stably running.
        :param name: Node name
        :param deadline: Wall clock time after which the wait fails
        Raises StatusQueryError, MalformedStatus, NodeCrashed or DeadlineExceeded.
        """
        logger.debug(f"deadline for node {name} is {deadline}")
        done: "queue.Queue[Optional[PodlabError]]" = queue.Queue(maxsize=1)
        expired = threading.Event()
        poller = threading.Thread(
            target=self._poll, args=(name, done, expired),
            name=f"readiness-{name}", daemon=True,
        )
        poller.start()

        while True:
            remaining = (deadline - datetime.now(deadline.tzinfo)).total_seconds()
            if remaining <= 0:
                expired.set()
                raise DeadlineExceeded(name, deadline)
            try:
                failure = done.get(timeout=remaining)
            except queue.Empty:
                # re-check the clock, the queue may wake slightly early
                continue
            if failure is not None:
                raise failure
            return

    def _poll(self, name: str, done: queue.Queue, expired: threading.Event) -> None:
        state = PollState()
        # first query happens one interval after the start, like a ticker
        while not expired.wait(self.interval):
            logger.debug(f"will check if node {name} is running")
            try:
                fields = self.backend.get_status(name)
            except Exception as e:
                state.phase = PollPhase.FATAL
                done.put(StatusQueryError(name, e))
                return
            logger.debug(f"status fields for node {name} are {fields}")

            if len(fields) <= STATUS_FIELD:
                state.phase = PollPhase.FATAL
                done.put(MalformedStatus(name, " ".join(fields)))
                return

            phase = state.observe(fields[STATUS_FIELD], self.stability_threshold, self.fatal_statuses)
            if phase is PollPhase.STABLE_RUNNING:
                logger.debug(f"node {name} is running ({state.running_count} consecutive checks)")
                done.put(None)
                return
            if phase is PollPhase.FATAL:
                done.put(NodeCrashed(name, state.status))
                return

        state.phase = PollPhase.DEADLINE_EXCEEDED
        logger.debug(f"stopped polling node {name}: deadline passed (last status {state.status!r})")
