"""Control-plane collectors - authentication, workspaces, and quotas."""

from .auth import Authenticator
from .base import (
    AuthError,
    BaseCollector,
    CollectorError,
    EnumError,
    FailureKind,
    FetchError,
)
from .http import HttpClient, TransportError
from .quota import QuotaFetcher
from .workspaces import WorkspaceEnumerator

__all__ = [
    "Authenticator",
    "AuthError",
    "BaseCollector",
    "CollectorError",
    "EnumError",
    "FailureKind",
    "FetchError",
    "HttpClient",
    "TransportError",
    "QuotaFetcher",
    "WorkspaceEnumerator",
]
