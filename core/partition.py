"""
core/partition.py
Stride partitioning of the TCP port domain.

Worker i of N owns ports {i+1, i+1+N, i+1+2N, ...} <= max_port.
Every port in [PORT_MIN, max_port] belongs to exactly one worker, and the
load is balanced without precomputed block boundaries.

  partition(3, max_port=10)
    → worker 0: 1, 4, 7, 10
      worker 1: 2, 5, 8
      worker 2: 3, 6, 9
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

from utils.constants import PORT_MIN, PORT_MAX
from utils.validators import validate_worker_count


@dataclass(frozen=True)
class WorkerAssignment:
    """Immutable slice of the port domain owned by one worker."""

    index:      int
    stride:     int
    start_port: int
    max_port:   int = PORT_MAX

    def ports(self) -> range:
        # Empty when start_port > max_port (more workers than ports)
        return range(self.start_port, self.max_port + 1, self.stride)

    def __iter__(self) -> Iterator[int]:
        return iter(self.ports())

    def __len__(self) -> int:
        return len(self.ports())


def partition(worker_count: int, max_port: int = PORT_MAX) -> List[WorkerAssignment]:
    """
    Split [PORT_MIN, max_port] into worker_count strided assignments.

    Raises ValueError for a non-positive worker count or a max_port outside
    the port domain.
    """
    ok, err = validate_worker_count(worker_count)
    if not ok:
        raise ValueError(err)
    if not PORT_MIN <= max_port <= PORT_MAX:
        raise ValueError(f"max_port {max_port} out of valid range [{PORT_MIN}-{PORT_MAX}]")

    return [
        WorkerAssignment(
            index=i,
            stride=worker_count,
            start_port=PORT_MIN + i,
            max_port=max_port,
        )
        for i in range(worker_count)
    ]
