"""
StrideScan Constants & Enums
"""

from enum import Enum


# ─── Worker lifecycle ─────────────────────────────────────────────────────────
class WorkerState(str, Enum):
    IDLE     = "idle"
    SCANNING = "scanning"    # advanced to the next port of its stride
    PROBING  = "probing"     # inside the bounded connect call
    DONE     = "done"        # terminal; the only state the join observes


# ─── Engines ──────────────────────────────────────────────────────────────────
class Engine(str, Enum):
    THREADS = "threads"     # one OS thread per worker
    ASYNC   = "async"       # one asyncio task per worker


# ─── Port domain ──────────────────────────────────────────────────────────────
PORT_MIN = 1
PORT_MAX = 65535

# ─── Scan defaults ────────────────────────────────────────────────────────────
DEFAULT_WORKERS    = 50
DEFAULT_TIMEOUT_MS = 500.0
DEFAULT_ENGINE     = Engine.THREADS
DEFAULT_CONFIG     = "config.yaml"

# ─── Layering Contract (enforced by tests/test_layering.py) ──────────────────
# core  → may import: utils
# utils → may import: nothing project-local
# NEVER: core or utils import main
