"""
StrideScan Core — Public API

from core import ScanCoordinator, partition
"""
from core.partition    import WorkerAssignment, partition
from core.worker       import Worker, tcp_probe
from core.report       import ScanReport, build_report, collect
from core.coordinator  import ScanCoordinator, ScanAbortedError
from core.async_engine import AsyncScanCoordinator, AsyncWorker, async_tcp_probe

__all__ = [
    "WorkerAssignment", "partition",
    "Worker", "tcp_probe",
    "ScanReport", "build_report", "collect",
    "ScanCoordinator", "ScanAbortedError",
    "AsyncScanCoordinator", "AsyncWorker", "async_tcp_probe",
]
