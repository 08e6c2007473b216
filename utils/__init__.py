"""StrideScan Utils"""
from utils.logger     import get_logger, set_level, log
from utils.validators import validate_target, validate_worker_count, validate_timeout_ms
from utils.constants  import WorkerState, Engine, PORT_MIN, PORT_MAX, DEFAULT_WORKERS
__all__ = ["get_logger", "set_level", "log",
           "validate_target", "validate_worker_count", "validate_timeout_ms",
           "WorkerState", "Engine", "PORT_MIN", "PORT_MAX", "DEFAULT_WORKERS"]
