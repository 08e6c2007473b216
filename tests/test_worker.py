"""
tests/test_worker.py
Unit tests for core/worker.py: probe loop, lifecycle, real TCP probe.
Run: pytest tests/test_worker.py -v
"""

import sys
import os
import errno
import queue
import socket
import threading
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import patch

from core.partition import WorkerAssignment
from core.worker import Worker, tcp_probe
from utils.constants import WorkerState


def drain(q):
    out = []
    while not q.empty():
        out.append(q.get_nowait())
    return out


# ─── Real sockets ──────────────────────────────────────────────────────────────

@pytest.fixture
def listener():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(16)
    yield srv.getsockname()[1]
    srv.close()


@pytest.fixture
def closed_port():
    # Bound but not listening: the port stays reserved and refuses connects
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    yield s.getsockname()[1]
    s.close()


class TestTcpProbe:

    def test_listening_port_is_open(self, listener):
        assert tcp_probe("127.0.0.1", listener, 1.0) is True

    def test_refused_port_is_closed(self, closed_port):
        assert tcp_probe("127.0.0.1", closed_port, 1.0) is False

    def test_unreachable_is_closed(self):
        # RFC 5737 TEST-NET-1 never answers
        assert tcp_probe("192.0.2.1", 80, 0.05) is False

    def test_descriptor_exhaustion_is_raised(self):
        emfile = OSError(errno.EMFILE, "Too many open files")
        with patch("core.worker.socket.create_connection", side_effect=emfile):
            with pytest.raises(OSError) as info:
                tcp_probe("127.0.0.1", 80, 0.5)
        assert info.value.errno == errno.EMFILE

    def test_no_buffer_space_is_raised(self):
        enobufs = OSError(errno.ENOBUFS, "No buffer space available")
        with patch("core.worker.socket.create_connection", side_effect=enobufs):
            with pytest.raises(OSError):
                tcp_probe("127.0.0.1", 80, 0.5)


class TestWorkerWithRealSocket:

    def test_reports_listening_port(self, listener):
        sink = queue.SimpleQueue()
        a = WorkerAssignment(index=0, stride=1, start_port=listener, max_port=listener)
        w = Worker(a, "127.0.0.1", sink, timeout_s=1.0)
        w.run()
        assert drain(sink) == [listener]
        assert w.state is WorkerState.DONE


# ─── Fake probe ────────────────────────────────────────────────────────────────

class TestWorkerLoop:

    def _probe_log(self, open_ports):
        calls = []

        def probe(host, port, timeout_s):
            calls.append((host, port, timeout_s))
            return port in open_ports

        return probe, calls

    def test_probes_every_assigned_port_once_in_order(self):
        probe, calls = self._probe_log(set())
        a = WorkerAssignment(index=2, stride=10, start_port=3, max_port=100)
        Worker(a, "10.0.0.1", queue.SimpleQueue(), 0.2, probe).run()
        assert [p for _, p, _ in calls] == list(range(3, 101, 10))

    def test_same_timeout_for_every_probe(self):
        probe, calls = self._probe_log(set())
        a = WorkerAssignment(index=0, stride=3, start_port=1, max_port=30)
        Worker(a, "10.0.0.1", queue.SimpleQueue(), 0.25, probe).run()
        assert {t for _, _, t in calls} == {0.25}

    def test_only_open_ports_reach_sink(self):
        probe, _ = self._probe_log({5, 25, 45})
        sink = queue.SimpleQueue()
        a = WorkerAssignment(index=4, stride=10, start_port=5, max_port=100)
        w = Worker(a, "10.0.0.1", sink, 0.2, probe)
        w.run()
        assert drain(sink) == [5, 25, 45]
        assert w.found == 3
        assert w.probed == 10

    def test_empty_assignment_finishes(self):
        probe, calls = self._probe_log(set())
        a = WorkerAssignment(index=9, stride=10, start_port=10, max_port=5)
        w = Worker(a, "10.0.0.1", queue.SimpleQueue(), 0.2, probe)
        w.run()
        assert calls == []
        assert w.state is WorkerState.DONE

    def test_starts_idle(self):
        a = WorkerAssignment(index=0, stride=1, start_port=1, max_port=1)
        assert Worker(a, "10.0.0.1", queue.SimpleQueue()).state is WorkerState.IDLE

    def test_abort_event_stops_loop(self):
        abort = threading.Event()
        abort.set()
        probe, calls = self._probe_log(set())
        a = WorkerAssignment(index=0, stride=1, start_port=1, max_port=100)
        w = Worker(a, "10.0.0.1", queue.SimpleQueue(), 0.2, probe, abort)
        w.run()
        assert calls == []
        assert w.state is WorkerState.DONE

    def test_unexpected_error_kept_for_coordinator(self):
        def broken(host, port, timeout_s):
            raise ValueError("boom")

        a = WorkerAssignment(index=0, stride=1, start_port=1, max_port=10)
        w = Worker(a, "10.0.0.1", queue.SimpleQueue(), 0.2, broken)
        w.run()
        assert isinstance(w.error, ValueError)
        assert w.state is WorkerState.DONE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
