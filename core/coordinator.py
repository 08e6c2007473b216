"""
core/coordinator.py
Threaded scan coordinator.

  1. partition the port domain into worker_count strides (before any thread)
  2. spawn one thread per stride, all sharing one unbounded sink
  3. join every thread: nothing is read from the sink before this barrier
  4. drain, sort ascending, return a ScanReport

All-or-nothing: if a worker thread cannot be started, or a worker dies on
an unexpected exception, the scan raises ScanAbortedError and no report
is produced.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Callable, List, Optional

from core.partition import partition
from core.report import ScanReport, build_report, collect
from core.worker import Probe, Worker, tcp_probe
from utils.constants import DEFAULT_TIMEOUT_MS, DEFAULT_WORKERS, PORT_MAX
from utils.validators import validate_timeout_ms

log = logging.getLogger("stridescan.coordinator")


class ScanAbortedError(RuntimeError):
    """Raised when a scan cannot run to completion; no report exists."""


class ScanCoordinator:
    """
    Scan every TCP port of one target with a fixed pool of worker threads.

    Args:
        timeout_ms: per-probe connect timeout, identical for every worker
        probe: callable(host, port, timeout_s) -> bool
        progress_cb: receives lifecycle messages (never individual ports)
        max_port: upper end of the scanned domain
    """

    def __init__(
        self,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        probe: Probe = tcp_probe,
        progress_cb: Optional[Callable[[str], None]] = None,
        max_port: int = PORT_MAX,
    ):
        ok, err = validate_timeout_ms(timeout_ms)
        if not ok:
            raise ValueError(err)
        self._timeout_s = timeout_ms / 1000.0
        self._probe = probe
        self._cb = progress_cb or (lambda _: None)
        self._max_port = max_port

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def start(self, target, worker_count: int = DEFAULT_WORKERS) -> ScanReport:
        """Run the whole scan and return the ascending report."""
        assignments = partition(worker_count, self._max_port)
        host = str(target)
        sink: queue.SimpleQueue = queue.SimpleQueue()
        abort = threading.Event()

        workers = [
            Worker(a, host, sink, self._timeout_s, self._probe, abort)
            for a in assignments
        ]

        t0 = time.monotonic()
        threads = self._spawn(workers, abort)
        self._cb(f"[*] {host}: {len(threads)} workers scanning ports 1-{self._max_port}")

        # ── Join barrier ──────────────────────────────────────────────────────
        for t in threads:
            t.join()
        elapsed = time.monotonic() - t0

        failed = [w for w in workers if w.error is not None]
        if failed:
            first = failed[0]
            raise ScanAbortedError(
                f"{len(failed)} worker(s) failed; first was worker "
                f"{first.index}: {first.error!r}"
            ) from first.error

        report = build_report(
            target=host,
            ports=collect(sink),
            worker_count=worker_count,
            timeout_s=self._timeout_s,
            elapsed_s=elapsed,
            probed=sum(w.probed for w in workers),
        )
        log.debug(
            "%s: %d probes by %d workers in %.2fs",
            host, report.probed, worker_count, elapsed,
        )
        self._cb(f"[✓] {host} done: {report.count} open in {elapsed:.2f}s")
        return report

    def _spawn(self, workers: List[Worker], abort: threading.Event) -> List[threading.Thread]:
        threads: List[threading.Thread] = []
        for w in workers:
            t = threading.Thread(
                target=w.run,
                name=f"stridescan-worker-{w.index}",
                daemon=True,
            )
            try:
                t.start()
            except RuntimeError as exc:
                # can't start new thread: stop the ones already running
                abort.set()
                for started in threads:
                    started.join()
                raise ScanAbortedError(
                    f"could not start worker {w.index + 1} of {len(workers)}: {exc}"
                ) from exc
            threads.append(t)
        log.debug("spawned %d worker threads", len(threads))
        return threads
