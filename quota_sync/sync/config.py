"""Configuration management for the quota synchronizer.

Two sources:
- Secret files (host, user, passwd, kafkaAddr, kafkaTopic), one value per
  file, usually a mounted Kubernetes secret at /etc/config
- Optional YAML settings for timeouts, TLS, Kafka producer tuning and the
  quota fallback
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..data.normalization import DEFAULT_STORAGE_CLASS

DEFAULT_SECRET_DIR = "/etc/config"

# Secret file name -> Secrets attribute
SECRET_FILES = {
    "host": "host",
    "user": "user",
    "passwd": "password",
    "kafkaAddr": "kafka_addr",
    "kafkaTopic": "kafka_topic",
}


class ConfigError(Exception):
    """Raised when a required secret or the settings file cannot be read."""


@dataclass
class Secrets:
    """Credentials and endpoints read from the secret directory."""

    host: str
    user: str
    password: str
    kafka_addr: str
    kafka_topic: str

    @property
    def kafka_brokers(self) -> List[str]:
        """Broker addresses from the comma-separated list."""
        return [addr.strip() for addr in self.kafka_addr.split(",") if addr.strip()]

    def describe(self) -> Dict[str, str]:
        """Loggable view; never includes the password."""
        return {
            "host": self.host,
            "user": self.user,
            "kafkaAddr": self.kafka_addr,
            "kafkaTopic": self.kafka_topic,
        }


def load_secrets(secret_dir: Optional[str] = None) -> Secrets:
    """Read all secret files.

    Checks in order:
    1. Provided directory
    2. QUOTA_SYNC_SECRET_DIR env var
    3. /etc/config

    Newlines are stripped from every value.

    Raises:
        ConfigError: If any secret file is missing or unreadable.
    """
    directory = Path(secret_dir or os.environ.get("QUOTA_SYNC_SECRET_DIR") or DEFAULT_SECRET_DIR)

    values: Dict[str, str] = {}
    for filename, attr in SECRET_FILES.items():
        path = directory / filename
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read secret file {path}: {e}") from e
        values[attr] = content.replace("\r", "").replace("\n", "")

    secrets = Secrets(**values)
    if not secrets.host:
        raise ConfigError(f"Secret file {directory / 'host'} is empty")
    if not secrets.kafka_brokers:
        raise ConfigError(f"Secret file {directory / 'kafkaAddr'} has no broker addresses")
    if not secrets.kafka_topic:
        raise ConfigError(f"Secret file {directory / 'kafkaTopic'} is empty")

    for key, value in secrets.describe().items():
        print(f"[config] {key}: {value}", flush=True)
    return secrets


@dataclass
class HttpConfig:
    """Control-plane HTTP settings."""

    timeout: int = 10  # seconds
    insecure: bool = False
    ca_bundle: Optional[str] = None


@dataclass
class KafkaConfig:
    """Kafka producer settings."""

    acks: Any = "all"
    retries: int = 3
    retry_backoff_ms: int = 500
    send_timeout: int = 30  # seconds
    client_id: str = "kubesphere-quota-sync"


@dataclass
class QuotaConfig:
    """Quota normalization settings."""

    fallback_storage_class: str = DEFAULT_STORAGE_CLASS


@dataclass
class Config:
    """Main configuration container."""

    http: HttpConfig = field(default_factory=HttpConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    quota: QuotaConfig = field(default_factory=QuotaConfig)

    secret_dir: Optional[str] = None
    interval: int = 0  # seconds between runs; 0 runs once

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        http_data = data.get("http", {}) or {}
        http = HttpConfig(
            timeout=http_data.get("timeout", 10),
            insecure=http_data.get("insecure", False),
            ca_bundle=http_data.get("ca_bundle"),
        )

        kafka_data = data.get("kafka", {}) or {}
        kafka = KafkaConfig(
            acks=kafka_data.get("acks", "all"),
            retries=kafka_data.get("retries", 3),
            retry_backoff_ms=kafka_data.get("retry_backoff_ms", 500),
            send_timeout=kafka_data.get("send_timeout", 30),
            client_id=kafka_data.get("client_id", "kubesphere-quota-sync"),
        )

        quota_data = data.get("quota", {}) or {}
        quota = QuotaConfig(
            fallback_storage_class=quota_data.get("fallback_storage_class", DEFAULT_STORAGE_CLASS),
        )

        return cls(
            http=http,
            kafka=kafka,
            quota=quota,
            secret_dir=data.get("secret_dir"),
            interval=data.get("interval", 0),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load config from YAML file."""
        if not path.exists():
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load config from path or defaults.

        Checks in order:
        1. Provided path
        2. QUOTA_SYNC_CONFIG env var
        3. ./configs/config.yaml
        4. ./config.yaml
        5. Default config
        """
        paths_to_try = []

        if config_path:
            paths_to_try.append(Path(config_path))

        if env_path := os.environ.get("QUOTA_SYNC_CONFIG"):
            paths_to_try.append(Path(env_path))

        paths_to_try.extend([
            Path("./configs/config.yaml"),
            Path("./config.yaml"),
        ])

        for path in paths_to_try:
            if path.exists():
                return cls.from_yaml(path)

        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "http": {
                "timeout": self.http.timeout,
                "insecure": self.http.insecure,
                "ca_bundle": self.http.ca_bundle,
            },
            "kafka": {
                "acks": self.kafka.acks,
                "retries": self.kafka.retries,
                "retry_backoff_ms": self.kafka.retry_backoff_ms,
                "send_timeout": self.kafka.send_timeout,
                "client_id": self.kafka.client_id,
            },
            "quota": {
                "fallback_storage_class": self.quota.fallback_storage_class,
            },
            "secret_dir": self.secret_dir,
            "interval": self.interval,
        }
