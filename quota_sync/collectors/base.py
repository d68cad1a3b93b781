"""Base collector interface for KubeSphere control-plane calls."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Type

from .http import HttpClient, TransportError


class FailureKind(str, Enum):
    """Why a control-plane call failed."""

    TRANSPORT = "TRANSPORT"  # Request could not be sent or no response arrived
    BAD_STATUS = "BAD_STATUS"  # Response status was not 200
    MALFORMED = "MALFORMED"  # Body could not be decoded into the expected shape


class CollectorError(Exception):
    """Exception raised when a collector fails to collect data."""

    def __init__(
        self,
        collector_name: str,
        message: str,
        cause: Optional[Exception] = None,
        kind: FailureKind = FailureKind.MALFORMED,
        status_code: Optional[int] = None,
    ):
        self.collector_name = collector_name
        self.cause = cause
        self.kind = kind
        self.status_code = status_code
        super().__init__(f"[{collector_name}] {message}")


class AuthError(CollectorError):
    """Token exchange failed."""


class EnumError(CollectorError):
    """Workspace listing failed."""


class FetchError(CollectorError):
    """Quota retrieval failed for one (workspace, cluster) pair."""


class BaseCollector(ABC):
    """Abstract base class for control-plane collectors.

    Holds the shared HTTP client and turns transport, status and decode
    problems into the collector's own error type.
    """

    error_cls: Type[CollectorError] = CollectorError

    def __init__(self, http: HttpClient):
        self.http = http

    @property
    @abstractmethod
    def name(self) -> str:
        """Short, lowercase identifier used in logs and errors (e.g. 'quota')."""
        pass

    def _fail(
        self,
        kind: FailureKind,
        message: str,
        cause: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ) -> CollectorError:
        return self.error_cls(self.name, message, cause, kind=kind, status_code=status_code)

    def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Any = None,
    ) -> bytes:
        """Send one request and return the body of a 200 response.

        Raises:
            CollectorError: (as ``error_cls``) on transport failure or non-200 status.
        """
        try:
            status_code, body = self.http.request(method, url, data=data, headers=headers)
        except TransportError as e:
            raise self._fail(FailureKind.TRANSPORT, f"Request to {url} failed: {e}", e)

        if status_code != 200:
            raise self._fail(
                FailureKind.BAD_STATUS,
                f"Unexpected status {status_code} from {method} {url}",
                status_code=status_code,
            )
        return body

    def _get_json(self, url: str, token: str) -> Dict[str, Any]:
        """Authenticated GET returning a decoded JSON object."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": token,
        }
        body = self._send("GET", url, headers)
        return self._decode_object(body, url)

    def _decode_object(self, body: bytes, url: str) -> Dict[str, Any]:
        try:
            data = json.loads(body)
        except (ValueError, TypeError) as e:
            raise self._fail(FailureKind.MALFORMED, f"Invalid JSON from {url}: {e}", e)
        if not isinstance(data, dict):
            raise self._fail(
                FailureKind.MALFORMED,
                f"Expected a JSON object from {url}, got {type(data).__name__}",
            )
        return data
