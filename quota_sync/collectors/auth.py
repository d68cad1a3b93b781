"""KubeSphere OAuth password-grant authenticator.

Exchanges the operator's username/password for a bearer token once per run.
The token is never refreshed; it is used for the whole run.
"""

from __future__ import annotations

from ..data.models import TokenResponse
from .base import AuthError, BaseCollector, FailureKind

TOKEN_PATH = "oauth/token"
CLIENT_ID = "kubesphere"
CLIENT_SECRET = "kubesphere"


class Authenticator(BaseCollector):
    """Obtains a bearer token from the control plane's token endpoint."""

    error_cls = AuthError

    @property
    def name(self) -> str:
        return "auth"

    def authenticate(self, base_url: str, username: str, password: str) -> str:
        """Exchange credentials for a token.

        Returns:
            Authorization header value, "Bearer <access_token>"

        Raises:
            AuthError: On transport failure, non-200 status, or a malformed body.
        """
        url = f"{base_url.rstrip('/')}/{TOKEN_PATH}"
        form = {
            "username": username,
            "password": password,
            "client_id": CLIENT_ID,
            "client_secret": CLIENT_SECRET,
            "grant_type": "password",
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            body = self._send("POST", url, headers, data=form)
            token = self._parse_token(body, url)
        except AuthError as e:
            print(f"[auth] Token request for user '{username}' failed: {e}", flush=True)
            raise

        print(f"[auth] Obtained {token.token_type or 'bearer'} token for user '{username}'", flush=True)
        return token.bearer

    def _parse_token(self, body: bytes, url: str) -> TokenResponse:
        data = self._decode_object(body, url)
        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise self._fail(FailureKind.MALFORMED, f"No access_token in response from {url}")
        return TokenResponse(
            access_token=access_token,
            token_type=str(data.get("token_type") or ""),
            refresh_token=str(data.get("refresh_token") or ""),
        )
