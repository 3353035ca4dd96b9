"""Fake appliance answering the api endpoints used by the library."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Any

from yarl import URL

from fbx.json import dumps as json_dumps
from fbx.json import loads as json_loads

_LOGGER = logging.getLogger(__name__)

MOCK_HOST = "mafreebox.freebox.fr"
MOCK_APP_ID = "fbx.testapp"
MOCK_APP_TOKEN = "dyNYgfK0Ya6FWGqq83sBHa7TwzWo+pg4fDFUJHShcjVYzTfaRrZzm93p7OTAfH/0"  # noqa: S105
MOCK_CHALLENGE = "VzhbtpR4r8CLaJle2QgJBEkyd8JPb0zL"
MOCK_TRACK_ID = 42
MOCK_PERMISSIONS = {
    "settings": True,
    "contacts": True,
    "calls": True,
    "explorer": True,
    "downloader": True,
    "parental": False,
    "pvr": True,
}
MOCK_API_VERSION = {
    "uid": "23b86ec8091013d668829fe12791fdab",
    "device_name": "Freebox Server",
    "api_version": "8.0",
    "api_base_url": "/api/",
    "device_type": "FreeboxServer7,1",
    "api_domain": "abcdefgh.fbxos.fr",
    "https_available": True,
    "https_port": 36123,
    "box_model": "fbxgw7-r1/full",
    "box_model_name": "Freebox v7 (r1)",
}

AUTH_REQUIRED = {
    "success": False,
    "msg": "Vous devez vous connecter pour accéder à cette fonction",
    "error_code": "auth_required",
}
INVALID_TOKEN = {
    "success": False,
    "msg": "Erreur d'authentification de l'application",
    "error_code": "invalid_token",
}


def expected_password(app_token: str, challenge: str) -> str:
    return hmac.new(app_token.encode(), challenge.encode(), hashlib.sha1).hexdigest()


@dataclass
class MockRequest:
    method: str
    url: URL
    headers: dict[str, str]
    body: Any = None
    raw: Any = field(default=None, repr=False)


class MockFreebox:
    """Appliance answering aiohttp.ClientSession.request calls."""

    class _mock_response:
        def __init__(self, status: int, body: Any):
            self.status = status
            self._body = body

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_t, exc_v, exc_tb):
            pass

        async def read(self) -> bytes:
            if isinstance(self._body, bytes):
                return self._body
            return json_dumps(self._body).encode()

    def __init__(
        self,
        host: str = MOCK_HOST,
        *,
        port: int = 443,
        app_id: str = MOCK_APP_ID,
        app_token: str = MOCK_APP_TOKEN,
        challenge: str = MOCK_CHALLENGE,
        authorization_statuses: list[str] | None = None,
    ):
        self.host = host
        self.port = port
        self.app_id = app_id
        self.app_token = app_token
        self.challenge = challenge
        self.authorization_statuses = authorization_statuses or ["pending", "granted"]

        #: Token the appliance currently accepts
        self.session_token: str | None = None
        self.tokens_issued = 0
        self.requests: list[MockRequest] = []
        self._responses: dict[str, list[tuple[int, Any]]] = {}
        self._always: dict[str, tuple[int, Any]] = {}

    def respond(self, path: str, status: int, body: Any) -> None:
        """Queue a response for the next request to path."""
        self._responses.setdefault(self._api_path(path), []).append((status, body))

    def always_respond(self, path: str, status: int, body: Any) -> None:
        """Answer every request to path with the same response."""
        self._always[self._api_path(path)] = (status, body)

    def expire_session(self) -> None:
        """Stop accepting the current session token."""
        self.session_token = None

    def calls(self, path: str) -> list[MockRequest]:
        """Return the requests received for path."""
        path = self._api_path(path)
        return [request for request in self.requests if request.url.path == path]

    @staticmethod
    def _api_path(path: str) -> str:
        return path if path.startswith("/") else f"/api/{path}"

    async def request(self, method, url, *, data=None, headers=None, **_):
        # Let concurrent requests interleave like real io would
        await asyncio.sleep(0)
        url = URL(str(url))
        body = json_loads(data) if data else None
        request = MockRequest(method, url, dict(headers or {}), body, data)
        self.requests.append(request)
        _LOGGER.debug("Request %s %s", method, url)
        assert url.host == self.host
        assert url.port == self.port
        return self._mock_response(*self._handle(request))

    def _handle(self, request: MockRequest) -> tuple[int, Any]:
        path = request.url.path
        if queued := self._responses.get(path):
            return queued.pop(0)
        if path in self._always:
            return self._always[path]

        if path == "/api/v8/login":
            return 200, {
                "success": True,
                "result": {
                    "logged_in": False,
                    "challenge": self.challenge,
                    "password_salt": "PJUtYsTA1plO6QFBlBMOabFo4XAyTaC1",
                },
            }
        if path == "/api/v8/login/session":
            return self._login_session(request)
        if path == "/api/v8/api_version":
            return 200, MOCK_API_VERSION
        if path == "/api/v8/login/authorize" and request.method == "POST":
            return 200, {
                "success": True,
                "result": {"app_token": self.app_token, "track_id": MOCK_TRACK_ID},
            }
        if path == f"/api/v8/login/authorize/{MOCK_TRACK_ID}":
            status = self.authorization_statuses.pop(0)
            return 200, {
                "success": True,
                "result": {"status": status, "challenge": self.challenge},
            }

        token = next(
            (v for k, v in request.headers.items() if k.lower() == "x-fbx-app-auth"),
            None,
        )
        if self.session_token is None or token != self.session_token:
            return 403, AUTH_REQUIRED
        return 200, {
            "success": True,
            "result": {
                "path": path,
                "method": request.method,
                "body": request.body,
            },
        }

    def _login_session(self, request: MockRequest) -> tuple[int, Any]:
        assert request.method == "POST"
        body = request.body or {}
        password = expected_password(self.app_token, self.challenge)
        if body.get("app_id") != self.app_id or body.get("password") != password:
            return 403, INVALID_TOKEN

        self.tokens_issued += 1
        self.session_token = f"session-token-{self.tokens_issued}"
        return 200, {
            "success": True,
            "result": {
                "session_token": self.session_token,
                "challenge": self.challenge,
                "permissions": MOCK_PERMISSIONS,
            },
        }
