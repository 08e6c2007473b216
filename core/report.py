"""
core/report.py
Result aggregation: drain the sink after the join barrier, sort, report.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, List, Tuple


@dataclass(frozen=True)
class ScanReport:
    target:       str
    open_ports:   Tuple[int, ...]
    worker_count: int
    timeout_s:    float
    elapsed_s:    float = 0.0
    probed:       int = 0

    @property
    def count(self) -> int:
        return len(self.open_ports)

    def lines(self) -> List[str]:
        """One human-readable line per open port, then the total."""
        out = [f"{port} is open" for port in self.open_ports]
        noun = "port" if self.count == 1 else "ports"
        out.append(f"{self.count} open {noun} on {self.target}")
        return out

    def to_dict(self) -> dict:
        data = asdict(self)
        data["open_ports"] = list(self.open_ports)
        data["count"] = self.count
        return data


def collect(sink) -> List[int]:
    """
    Drain every port from the sink and return them ascending.

    Only valid once all producers have finished; works for queue.SimpleQueue
    and asyncio.Queue alike.
    """
    ports: List[int] = []
    while not sink.empty():
        ports.append(sink.get_nowait())
    return sorted(ports)


def build_report(
    target: str,
    ports: Iterable[int],
    worker_count: int,
    timeout_s: float,
    elapsed_s: float = 0.0,
    probed: int = 0,
) -> ScanReport:
    return ScanReport(
        target=target,
        open_ports=tuple(sorted(ports)),
        worker_count=worker_count,
        timeout_s=timeout_s,
        elapsed_s=elapsed_s,
        probed=probed,
    )
