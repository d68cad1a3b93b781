"""Tests for the single-request HTTP client."""

import pytest
import requests
from unittest.mock import MagicMock, patch

from quota_sync.collectors.http import HttpClient, TransportError


def _response(status=200, content=b"{}"):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    return resp


class TestHttpClient:
    @patch("requests.Session.request")
    def test_returns_status_and_body(self, mock_request):
        mock_request.return_value = _response(200, b'{"ok": true}')
        client = HttpClient(timeout=5)

        status, body = client.request("GET", "http://ks/apis", headers={"Authorization": "Bearer t"})

        assert status == 200
        assert body == b'{"ok": true}'
        args, kwargs = mock_request.call_args
        assert args == ("GET", "http://ks/apis")
        assert kwargs["timeout"] == 5
        assert kwargs["verify"] is True
        assert kwargs["headers"] == {"Authorization": "Bearer t"}

    @patch("requests.Session.request")
    def test_does_not_interpret_status(self, mock_request):
        mock_request.return_value = _response(500, b"boom")
        status, body = HttpClient().request("GET", "http://ks/x")
        assert status == 500
        assert body == b"boom"

    @patch("requests.Session.request")
    def test_connection_error_raises_transport_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(TransportError) as exc_info:
            HttpClient().request("POST", "http://ks/oauth/token")
        assert exc_info.value.method == "POST"
        assert exc_info.value.url == "http://ks/oauth/token"
        assert isinstance(exc_info.value.cause, requests.exceptions.ConnectionError)

    @patch("requests.Session.request")
    def test_timeout_raises_transport_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.ReadTimeout("slow")
        with pytest.raises(TransportError):
            HttpClient(timeout=1).request("GET", "http://ks/x")

    @patch("requests.Session.request")
    def test_called_once_without_retry(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(TransportError):
            HttpClient().request("GET", "http://ks/x")
        assert mock_request.call_count == 1

    @patch("requests.Session.request")
    def test_insecure_disables_verification(self, mock_request):
        mock_request.return_value = _response()
        HttpClient(insecure=True).request("GET", "https://ks/x")
        assert mock_request.call_args.kwargs["verify"] is False

    @patch("requests.Session.request")
    def test_ca_bundle_used_for_verification(self, mock_request):
        mock_request.return_value = _response()
        HttpClient(ca_bundle="/etc/ssl/ks.pem").request("GET", "https://ks/x")
        assert mock_request.call_args.kwargs["verify"] == "/etc/ssl/ks.pem"

    @patch("requests.Session.request")
    def test_insecure_wins_over_ca_bundle(self, mock_request):
        mock_request.return_value = _response()
        HttpClient(insecure=True, ca_bundle="/etc/ssl/ks.pem").request("GET", "https://ks/x")
        assert mock_request.call_args.kwargs["verify"] is False

    def test_adapter_has_no_retries(self):
        client = HttpClient()
        adapter = client._get_session().get_adapter("https://ks")
        assert adapter.max_retries.total == 0

    def test_close_resets_session(self):
        client = HttpClient()
        first = client._get_session()
        client.close()
        assert client._session is None
        assert client._get_session() is not first

