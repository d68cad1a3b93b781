#!/usr/bin/env python3
"""
KubeSphere Quota Sync - Main entry point.

Reads workspace quotas from every placed cluster and publishes one Kafka
event per (workspace, cluster). Runs once by default; --interval keeps
running on a schedule.
"""

from __future__ import annotations

import argparse
import signal
from typing import List, Optional

from ..collectors.base import CollectorError
from ..data.publisher import PublishError
from .config import Config, ConfigError, load_secrets
from .synchronizer import Synchronizer
from .workers import SyncWorker, run_once


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line overrides on top of the loaded config."""
    if args.secret_dir:
        config.secret_dir = args.secret_dir
    if args.interval is not None:
        config.interval = args.interval
    if args.timeout is not None:
        config.http.timeout = args.timeout
    if args.insecure is not None:
        config.http.insecure = args.insecure
    if args.ca_bundle:
        config.http.ca_bundle = args.ca_bundle
    if args.storage_class:
        config.quota.fallback_storage_class = args.storage_class
    return config


def run_sync(config: Config) -> int:
    """Run once and map the outcome to a process exit code."""
    try:
        secrets = load_secrets(config.secret_dir)
        result = run_once(lambda: Synchronizer.from_config(config, secrets))
    except ConfigError as e:
        print(f"[main] Configuration error: {e}", flush=True)
        return 1
    except CollectorError as e:
        print(f"[main] {type(e).__name__} ({e.kind.value}): {e}", flush=True)
        return 1
    except PublishError as e:
        print(f"[main] PublishError: {e}", flush=True)
        return 1

    if result.malformed:
        pairs = ", ".join(f"{s.workspace}/{s.cluster}" for s in result.malformed)
        print(f"[main] Unparseable quota responses for: {pairs}", flush=True)
        return 1
    return 0


def run_periodic(config: Config) -> int:
    """Run on a schedule until SIGINT/SIGTERM."""
    try:
        secrets = load_secrets(config.secret_dir)
    except ConfigError as e:
        print(f"[main] Configuration error: {e}", flush=True)
        return 1

    worker = SyncWorker(lambda: Synchronizer.from_config(config, secrets), config.interval)

    def _handle_signal(signum, frame):
        print(f"[main] Received signal {signum}, stopping after the current run", flush=True)
        worker.stop()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)
    worker.run()
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Publish KubeSphere workspace quotas to Kafka",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", type=str, help="Path to config YAML file")
    parser.add_argument(
        "--secret-dir",
        type=str,
        help="Directory holding host/user/passwd/kafkaAddr/kafkaTopic files",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Run every N seconds instead of once",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="HTTP timeout for control-plane requests",
    )

    # TLS options
    parser.add_argument(
        "--insecure",
        dest="insecure",
        action="store_true",
        default=None,
        help="Skip TLS verification",
    )
    parser.add_argument(
        "--secure",
        dest="insecure",
        action="store_false",
        help="Require TLS verification",
    )
    parser.add_argument(
        "--ca-bundle",
        type=str,
        help="Path to a custom CA bundle",
    )

    parser.add_argument(
        "--storage-class",
        type=str,
        help="Storage class for the zero-usage fallback quota key",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the quota-sync command."""
    args = parse_args(argv)
    try:
        config = apply_overrides(Config.load(args.config), args)
    except ConfigError as e:
        print(f"[main] Configuration error: {e}", flush=True)
        return 1

    if config.interval and config.interval > 0:
        return run_periodic(config)
    return run_sync(config)


if __name__ == "__main__":
    raise SystemExit(main())
