"""Sync runtime - configuration, run orchestration, and entry point."""

from .config import Config, ConfigError, Secrets, load_secrets
from .synchronizer import Synchronizer, SyncState
from .workers import SyncWorker, run_once

__all__ = [
    "Config",
    "ConfigError",
    "Secrets",
    "load_secrets",
    "Synchronizer",
    "SyncState",
    "SyncWorker",
    "run_once",
]
