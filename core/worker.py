"""
core/worker.py
Thread worker: probes one strided slice of the port domain.

  • socket.create_connection bounded by a fixed per-probe timeout
  • every failure (refused, timeout, unreachable, reset) means "not open"
  • running out of descriptors or buffers locally is raised, never "not open"
  • open ports go straight into the sink the coordinator owns
  • no retries; the only early exit is the abort event (spawn failure or a
    failed worker)
"""

from __future__ import annotations

import errno
import socket
import threading
from typing import Callable, Optional

from core.partition import WorkerAssignment
from utils.constants import DEFAULT_TIMEOUT_MS, WorkerState


Probe = Callable[[str, int, float], bool]

# Failures of the scanning host itself, not of the probed port
LOCAL_EXHAUSTION = (errno.EMFILE, errno.ENFILE, errno.ENOBUFS, errno.ENOMEM)


def is_local_exhaustion(exc: BaseException) -> bool:
    return isinstance(exc, OSError) and exc.errno in LOCAL_EXHAUSTION


def tcp_probe(host: str, port: int, timeout_s: float) -> bool:
    """One bounded-time TCP connect to host:port. True if it was accepted."""
    try:
        sock = socket.create_connection((host, port), timeout=timeout_s)
    except OSError as exc:
        if is_local_exhaustion(exc):
            raise
        return False
    sock.close()
    return True


class Worker:
    """
    Probes every port of its assignment, in order, exactly once.

    `sink` needs only a thread-safe put(); the coordinator hands in a
    queue.SimpleQueue. `state` ends in WorkerState.DONE whatever happens.
    """

    def __init__(
        self,
        assignment: WorkerAssignment,
        host: str,
        sink,
        timeout_s: float = DEFAULT_TIMEOUT_MS / 1000.0,
        probe: Probe = tcp_probe,
        abort: Optional[threading.Event] = None,
    ):
        self.assignment = assignment
        self.state = WorkerState.IDLE
        self.probed = 0
        self.found = 0
        self.error: Optional[BaseException] = None

        self._host = host
        self._sink = sink
        self._timeout_s = timeout_s
        self._probe = probe
        self._abort = abort

    @property
    def index(self) -> int:
        return self.assignment.index

    def run(self) -> None:
        """Thread body. Exceptions are kept on self.error for the coordinator."""
        try:
            self._scan()
        except Exception as exc:
            self.error = exc
            # no report will be built; stop the other workers
            if self._abort is not None:
                self._abort.set()
        finally:
            self.state = WorkerState.DONE

    def _scan(self) -> None:
        self.state = WorkerState.SCANNING
        for port in self.assignment:
            if self._abort is not None and self._abort.is_set():
                return

            self.state = WorkerState.PROBING
            is_open = self._probe(self._host, port, self._timeout_s)
            self.state = WorkerState.SCANNING
            self.probed += 1

            if is_open:
                self._sink.put(port)
                self.found += 1
