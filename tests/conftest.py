"""Pytest configuration and shared fixtures."""

import json
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
from unittest.mock import MagicMock

from quota_sync.collectors.http import TransportError
from quota_sync.data.models import Session

BASE_URL = "http://ks-console.example:30880"

TOKEN_URL = f"{BASE_URL}/oauth/token"
WORKSPACES_URL = f"{BASE_URL}/apis/tenant.kubesphere.io/v1alpha2/workspacetemplates"


def quota_url(workspace: str, cluster: str) -> str:
    return (
        f"{BASE_URL}/kapis/clusters/{cluster}/tenant.kubesphere.io/v1alpha2/"
        f"workspaces/{workspace}/resourcequotas/{workspace}"
    )


class FakeHttpClient:
    """Stands in for HttpClient; answers by (method, url) and records calls.

    Responses are (status, body) tuples; body may be bytes, str, or a
    JSON-serializable object. An Exception instance is raised instead.
    """

    def __init__(self, responses: Optional[Dict[Tuple[str, str], Any]] = None):
        self.responses = dict(responses or {})
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def add(self, method: str, url: str, status: int = 200, body: Any = None) -> None:
        self.responses[(method, url)] = (status, body)

    def fail(self, method: str, url: str, cause: Optional[Exception] = None) -> None:
        self.responses[(method, url)] = TransportError(method, url, cause or ConnectionError("refused"))

    def request(self, method, url, data=None, headers=None):
        self.calls.append({"method": method, "url": url, "data": data, "headers": headers or {}})
        response = self.responses.get((method, url))
        if response is None:
            return 404, b'{"kind": "Status", "code": 404}'
        if isinstance(response, Exception):
            raise response
        status, body = response
        return status, _encode(body)

    def urls(self) -> List[str]:
        return [call["url"] for call in self.calls]

    def close(self) -> None:
        self.closed = True


def _encode(body: Union[bytes, str, Any]) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body).encode("utf-8")


def workspace_template(name: str, clusters: List[str]) -> Dict[str, Any]:
    return {
        "apiVersion": "tenant.kubesphere.io/v1alpha2",
        "kind": "WorkspaceTemplate",
        "metadata": {"name": name},
        "spec": {
            "placement": {"clusters": [{"name": c} for c in clusters]},
            "template": {"spec": {"manager": "admin"}},
        },
    }


def resource_quota(
    name: str,
    spec_hard: Dict[str, str],
    total: Optional[Dict[str, Dict[str, str]]] = None,
) -> Dict[str, Any]:
    quota: Dict[str, Any] = {
        "apiVersion": "quota.kubesphere.io/v1alpha2",
        "kind": "ResourceQuota",
        "metadata": {"name": name},
        "spec": {
            "quota": {"hard": spec_hard},
            "selector": {"kubesphere.io/workspace": name},
        },
    }
    if total is not None:
        quota["status"] = {"total": total, "namespaces": []}
    return quota


@pytest.fixture
def fake_http():
    return FakeHttpClient()


@pytest.fixture
def session():
    return Session(base_url=BASE_URL, token="Bearer test-token", publisher=MagicMock())


@pytest.fixture
def token_body():
    """Sample /oauth/token response."""
    return {
        "access_token": "eyJhbGciOiJIUzI1NiJ9.test",
        "token_type": "Bearer",
        "refresh_token": "eyJhbGciOiJIUzI1NiJ9.refresh",
        "expires_in": 7200,
    }


@pytest.fixture
def workspace_list_body():
    """Sample workspace template list with one unplaced workspace."""
    return {
        "apiVersion": "tenant.kubesphere.io/v1alpha2",
        "kind": "WorkspaceTemplateList",
        "items": [
            workspace_template("ws-a", ["c1", "c2"]),
            workspace_template("ws-empty", []),
            workspace_template("system-workspace", ["host"]),
        ],
    }


@pytest.fixture
def live_quota_body():
    """Quota with aggregated status.total from the member cluster."""
    return resource_quota(
        "ws-a",
        {"limits.cpu": "8", "limits.memory": "16Gi"},
        total={
            "hard": {"limits.cpu": "8", "limits.memory": "16384Mi"},
            "used": {"limits.cpu": "1500m", "limits.memory": "2Gi"},
        },
    )


@pytest.fixture
def pending_quota_body():
    """Quota that has not been aggregated yet (no status)."""
    return resource_quota(
        "ws-a",
        {"requests.cpu": "2", "limits.cpu": "4", "requests.memory": "4096Mi"},
    )


@pytest.fixture
def secret_dir(tmp_path):
    """Directory of secret files as mounted from a Kubernetes secret."""
    values = {
        "host": BASE_URL + "\n",
        "user": "admin\n",
        "passwd": "P@88w0rd\n",
        "kafkaAddr": "kafka-0:9092,kafka-1:9092\n",
        "kafkaTopic": "billing-quota\n",
    }
    for name, value in values.items():
        (tmp_path / name).write_text(value, encoding="utf-8")
    return tmp_path
