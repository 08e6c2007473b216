"""
core/async_engine.py
Asyncio scan coordinator, externally equivalent to core/coordinator.py.

  • one task per stride instead of one thread
  • asyncio.open_connection bounded by asyncio.wait_for as the probe
  • asyncio.Queue as the sink, asyncio.gather as the join barrier
  • same partition, same report, same all-or-nothing failure policy
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional

from core.coordinator import ScanAbortedError
from core.partition import WorkerAssignment, partition
from core.worker import is_local_exhaustion
from core.report import ScanReport, build_report, collect
from utils.constants import DEFAULT_TIMEOUT_MS, DEFAULT_WORKERS, PORT_MAX, WorkerState
from utils.validators import validate_timeout_ms

log = logging.getLogger("stridescan.async_engine")

AsyncProbe = Callable[[str, int, float], Awaitable[bool]]


async def async_tcp_probe(host: str, port: int, timeout_s: float) -> bool:
    """Attempt one TCP connection to host:port within timeout_s."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout_s,
        )
    except asyncio.TimeoutError:
        return False
    except OSError as exc:
        if is_local_exhaustion(exc):
            raise
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


class AsyncWorker:
    """Coroutine counterpart of core.worker.Worker."""

    def __init__(
        self,
        assignment: WorkerAssignment,
        host: str,
        sink: asyncio.Queue,
        timeout_s: float,
        probe: AsyncProbe = async_tcp_probe,
    ):
        self.assignment = assignment
        self.state = WorkerState.IDLE
        self.probed = 0
        self.found = 0

        self._host = host
        self._sink = sink
        self._timeout_s = timeout_s
        self._probe = probe

    async def run(self) -> None:
        self.state = WorkerState.SCANNING
        try:
            for port in self.assignment:
                self.state = WorkerState.PROBING
                is_open = await self._probe(self._host, port, self._timeout_s)
                self.state = WorkerState.SCANNING
                self.probed += 1

                if is_open:
                    self._sink.put_nowait(port)
                    self.found += 1
        finally:
            self.state = WorkerState.DONE


class AsyncScanCoordinator:
    """
    Same contract as ScanCoordinator.start(), run on an event loop.

    Usage:
        report = await AsyncScanCoordinator(timeout_ms=250).start("10.0.0.1", 100)
    """

    def __init__(
        self,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        probe: AsyncProbe = async_tcp_probe,
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

    async def start(self, target, worker_count: int = DEFAULT_WORKERS) -> ScanReport:
        assignments = partition(worker_count, self._max_port)
        host = str(target)
        sink: asyncio.Queue = asyncio.Queue()

        workers: List[AsyncWorker] = [
            AsyncWorker(a, host, sink, self._timeout_s, self._probe)
            for a in assignments
        ]

        t0 = time.monotonic()
        tasks = [
            asyncio.ensure_future(w.run()) for w in workers
        ]
        self._cb(f"[*] {host}: {len(tasks)} tasks scanning ports 1-{self._max_port}")

        # ── Join barrier ──────────────────────────────────────────────────────
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        elapsed = time.monotonic() - t0

        errors = [o for o in outcomes if isinstance(o, BaseException)]
        if errors:
            raise ScanAbortedError(
                f"{len(errors)} worker(s) failed; first error: {errors[0]!r}"
            ) from errors[0]

        report = build_report(
            target=host,
            ports=collect(sink),
            worker_count=worker_count,
            timeout_s=self._timeout_s,
            elapsed_s=elapsed,
            probed=sum(w.probed for w in workers),
        )
        log.debug(
            "%s: %d probes by %d tasks in %.2fs",
            host, report.probed, worker_count, elapsed,
        )
        self._cb(f"[✓] {host} done: {report.count} open in {elapsed:.2f}s")
        return report
