#!/usr/bin/env python3
"""
StrideScan — Concurrent TCP Port Scanner
main.py — CLI entry point

Usage:
  python3 main.py 192.168.1.1
  python3 main.py -j 200 192.168.1.1
  python3 main.py -j 500 --timeout 250 --engine async 10.0.0.5
  python3 main.py --json ::1
  python3 main.py -h
"""

from __future__ import annotations

import argparse
import asyncio
import ipaddress
import json
import sys
from dataclasses import dataclass

import yaml

from core.async_engine import AsyncScanCoordinator
from core.coordinator import ScanAbortedError, ScanCoordinator
from core.report import ScanReport
from utils.constants import (
    DEFAULT_CONFIG, DEFAULT_ENGINE, DEFAULT_TIMEOUT_MS, DEFAULT_WORKERS, Engine,
)
from utils.logger import get_logger, set_level
from utils.validators import validate_target, validate_timeout_ms, validate_worker_count

log = get_logger("stridescan")

VERSION = "1.0.0"


class ConfigError(ValueError):
    """Raised when the YAML config file is unreadable or has bad values."""


@dataclass(frozen=True)
class Settings:
    workers:    int
    timeout_ms: float
    engine:     Engine


# ─── Config ───────────────────────────────────────────────────────────────────

def load_config(path: str | None) -> dict:
    """
    Read the `scan:` section of a YAML config file.

    A missing default config.yaml is fine; a missing file named explicitly
    with --config is an error.
    """
    explicit = path is not None
    path = path or DEFAULT_CONFIG
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    scan = raw.get("scan", {}) or {}
    if not isinstance(scan, dict):
        raise ConfigError(f"'scan' section of {path} must be a mapping")
    return scan


def resolve_settings(args: argparse.Namespace, cfg: dict) -> Settings:
    """CLI flags win over config values, config values over built-in defaults."""
    workers = args.threads if args.threads is not None else cfg.get("workers", DEFAULT_WORKERS)
    ok, err = validate_worker_count(workers)
    if not ok:
        raise ConfigError(f"workers: {err}")

    timeout_ms = args.timeout if args.timeout is not None else cfg.get("timeout_ms", DEFAULT_TIMEOUT_MS)
    ok, err = validate_timeout_ms(timeout_ms)
    if not ok:
        raise ConfigError(f"timeout_ms: {err}")

    engine_name = args.engine or cfg.get("engine", DEFAULT_ENGINE.value)
    try:
        engine = Engine(engine_name)
    except ValueError:
        raise ConfigError(
            f"engine: unknown engine {engine_name!r}, "
            f"choose from {[e.value for e in Engine]}"
        )

    return Settings(workers=workers, timeout_ms=float(timeout_ms), engine=engine)


# ─── Argument types ───────────────────────────────────────────────────────────

def _target(value: str):
    ok, err = validate_target(value)
    if not ok:
        raise argparse.ArgumentTypeError(err)
    return ipaddress.ip_address(value.strip())


def _worker_count(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid threads value: {value!r}")
    ok, err = validate_worker_count(n)
    if not ok:
        raise argparse.ArgumentTypeError(err)
    return n


def _timeout_ms(value: str) -> float:
    try:
        ms = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid timeout value: {value!r}")
    ok, err = validate_timeout_ms(ms)
    if not ok:
        raise argparse.ArgumentTypeError(err)
    return ms


# ─── Scan runner ──────────────────────────────────────────────────────────────

def run_scan(target, settings: Settings, quiet: bool = False) -> ScanReport:
    """Run one full scan with the selected engine. Raises ScanAbortedError."""
    def cb(msg: str):
        if not quiet:
            log.info(msg)

    log.debug(f"Target   : {target}")
    log.debug(f"Workers  : {settings.workers}")
    log.debug(f"Timeout  : {settings.timeout_ms:g}ms")
    log.debug(f"Engine   : {settings.engine.value}")

    if settings.engine is Engine.ASYNC:
        engine = AsyncScanCoordinator(timeout_ms=settings.timeout_ms, progress_cb=cb)
        if sys.platform == "win32":
            # uvloop is not installed on Windows (see pyproject.toml)
            return asyncio.run(engine.start(target, settings.workers))
        import uvloop
        return uvloop.run(engine.start(target, settings.workers))

    engine = ScanCoordinator(timeout_ms=settings.timeout_ms, progress_cb=cb)
    return engine.start(target, settings.workers)


def print_report(report: ScanReport, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(report.to_dict(), indent=2))
        return
    print()
    for line in report.lines():
        print(line)


# ─── CLI ──────────────────────────────────────────────────────────────────────

def build_cli() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="stridescan",
        description="StrideScan — concurrent TCP port scanner (ports 1-65535)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s 192.168.1.1
  %(prog)s -j 200 192.168.1.1
  %(prog)s -j 500 --timeout 250 --engine async 10.0.0.5
""",
    )
    ap.add_argument("target",       metavar="TARGET",  type=_target,
                    help="IPv4 or IPv6 address to scan")
    ap.add_argument("-j", "--threads", metavar="N",    type=_worker_count, default=None,
                    help=f"Number of concurrent workers (default: {DEFAULT_WORKERS})")
    ap.add_argument("--timeout",    metavar="MS",      type=_timeout_ms, default=None,
                    help=f"Per-port connect timeout in ms (default: {DEFAULT_TIMEOUT_MS:g})")
    ap.add_argument("--engine",     choices=[e.value for e in Engine], default=None,
                    help=f"Worker implementation (default: {DEFAULT_ENGINE.value})")
    ap.add_argument("--json",       action="store_true", help="Print the report as JSON")
    ap.add_argument("--config",     metavar="FILE",    default=None,
                    help=f"YAML config file (default: {DEFAULT_CONFIG} if present)")
    ap.add_argument("--log-level",  metavar="LEVEL",   default="INFO",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    ap.add_argument("--quiet",      action="store_true", help="Suppress progress output")
    ap.add_argument("--version",    action="version",  version=f"StrideScan {VERSION}")
    return ap


def main(argv=None) -> int:
    ap   = build_cli()
    args = ap.parse_args(argv)
    set_level(args.log_level)

    try:
        settings = resolve_settings(args, load_config(args.config))
    except ConfigError as exc:
        log.error(f"Config error: {exc}")
        return 1

    try:
        report = run_scan(args.target, settings, quiet=args.quiet)
    except ScanAbortedError as exc:
        log.error(f"Scan aborted: {exc}")
        return 1
    except KeyboardInterrupt:
        print("\n  [!] Interrupted by user")
        return 130

    print_report(report, as_json=args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
