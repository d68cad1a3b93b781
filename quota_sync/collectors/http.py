"""Single-request HTTP helper used by every control-plane call.

Performs exactly one request per call. Status codes are returned as-is and
never interpreted here; only transport problems (connection refused, DNS,
timeouts, TLS) raise.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import requests
import urllib3
from requests.adapters import HTTPAdapter

DEFAULT_TIMEOUT = 10  # seconds


class TransportError(Exception):
    """Raised when a request could not be sent or no response was received."""

    def __init__(self, method: str, url: str, cause: Optional[Exception] = None):
        self.method = method
        self.url = url
        self.cause = cause
        super().__init__(f"{method} {url}: {cause}")


class HttpClient:
    """Timeout-bounded HTTP client with optional insecure TLS.

    The underlying ``requests.Session`` is reused for connection pooling but
    never retries.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        insecure: bool = False,
        ca_bundle: Optional[str] = None,
    ):
        self.timeout = timeout
        self.insecure = insecure
        self.ca_bundle = ca_bundle
        self._session: Optional[requests.Session] = None

        if insecure:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def _get_session(self) -> requests.Session:
        if self._session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                max_retries=0,
                pool_connections=2,
                pool_maxsize=4,
            )
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.headers.update({"User-Agent": "kubesphere-quota-sync/1.0"})
            self._session = session
        return self._session

    def _verify(self) -> Union[bool, str]:
        if self.insecure:
            return False
        if self.ca_bundle:
            return self.ca_bundle
        return True

    def request(
        self,
        method: str,
        url: str,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Tuple[int, bytes]:
        """Perform one request.

        Args:
            method: HTTP method, e.g. 'GET' or 'POST'
            url: Absolute URL
            data: Request body (bytes, str, or a dict to form-encode)
            headers: Extra request headers

        Returns:
            Tuple of (status_code, response body bytes)

        Raises:
            TransportError: On connection, DNS, TLS or timeout failure.
        """
        try:
            resp = self._get_session().request(
                method,
                url,
                data=data,
                headers=headers or {},
                timeout=self.timeout,
                verify=self._verify(),
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(method, url, e)

        return resp.status_code, resp.content

    def close(self) -> None:
        """Close the session and release pooled connections."""
        if self._session is not None:
            self._session.close()
            self._session = None
