"""Client for the appliance api.

Requests are sent with the token of the current session. When the
appliance answers ``auth_required`` the client opens a new session and
replays the request once:

>>> from fbx import ClientConfig, FreeboxClient
>>> config = ClientConfig(app_id="fbx.example", app_token="the_app_token")
>>> async with FreeboxClient(config) as client:
>>>     res = await client.request("v8/system")
>>>     print(res.result["firmware_version"])
4.8.9
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from functools import partial
from typing import Any, Self

from yarl import URL

from .auth import ChallengeAuthenticator, is_session_url
from .clientconfig import ClientConfig
from .exceptions import ApiErrorCode, FbxException
from .httpclient import HttpClient
from .json import loads as json_loads
from .request import ApiRequest
from .result import ApiErrorBody, ApiResult
from .session import SessionState

_LOGGER = logging.getLogger(__name__)

AUTH_HEADER = "X-Fbx-App-Auth"
CONTENT_TYPE_HEADER = "Content-Type"
DEFAULT_CONTENT_TYPE = "application/json"


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key in headers)


class FreeboxClient:
    """Authenticated client for one appliance."""

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._session = SessionState()
        self._http_client = HttpClient(
            config.api_domain,
            timeout=config.timeout,
            http_client=config.http_client,
        )
        self._authenticator = ChallengeAuthenticator(
            config, self._session, partial(self._fetch, reauthenticate=False)
        )
        self._auth_lock = asyncio.Lock()
        if config.verbose:
            _LOGGER.debug("Client initialized for %s", config.api_domain)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} {self._config.app_id} "
            f"at {self._config.api_domain}:{self._config.https_port}>"
        )

    @property
    def config(self) -> ClientConfig:
        """Return the client configuration."""
        return self._config

    @property
    def session(self) -> SessionState:
        """Return the session state."""
        return self._session

    @property
    def device_info(self) -> ApiResult | None:
        """Return the device info fetched on the last authentication."""
        return self._session.device_info

    def resolve_url(self, url: str) -> URL:
        """Return the absolute url for a path relative to the api base url."""
        if url.startswith("http"):
            return URL(url)
        if url.startswith("/"):
            url = url[1:]
        return URL(f"{self._config.base_url}{url}")

    async def request(
        self,
        url: str,
        *,
        method: str = "GET",
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        parse_json: bool = True,
    ) -> ApiResult:
        """Send a request to the api, see :meth:`fetch`."""
        return await self.fetch(
            ApiRequest(
                url,
                method=method,
                body=body,
                headers=headers or {},
                parse_json=parse_json,
            )
        )

    async def fetch(self, request: ApiRequest) -> ApiResult:
        """Send a request to the api.

        The session token is added unless the request carries its own auth
        header. A request failing with ``auth_required`` is replayed once
        after opening a new session. Failures are returned, not raised.
        """
        return await self._fetch(request, reauthenticate=True)

    async def authenticate(self) -> ApiResult:
        """Open a new session."""
        async with self._auth_lock:
            return await self._authenticator.authenticate()

    async def close(self) -> None:
        """Forget the session and close the http client."""
        self._session.reset()
        await self._http_client.close()

    async def _fetch(self, request: ApiRequest, *, reauthenticate: bool) -> ApiResult:
        url = self.resolve_url(request.url)
        _LOGGER.debug("Fetch %s %s", request.method, url)

        headers = dict(request.headers)
        if not _has_header(headers, CONTENT_TYPE_HEADER):
            headers[CONTENT_TYPE_HEADER] = DEFAULT_CONTENT_TYPE

        session_token = self._session.session_token
        if session_token is not None and not _has_header(headers, AUTH_HEADER):
            headers[AUTH_HEADER] = session_token
            if self._config.verbose:
                _LOGGER.debug("Added token to request: %s", session_token)

        try:
            status, body = await self._http_client.request(
                request.method, url, data=request.data, headers=headers
            )
        except FbxException as ex:
            _LOGGER.debug("Unable to fetch %s: %s", url, ex)
            return ApiResult.failure(str(ex))

        _LOGGER.debug("Fetched %s: %s", url, status)

        if 200 <= status < 300:
            if not request.parse_json:
                return ApiResult(success=True, raw=body, status=status)
            try:
                payload = json_loads(body)
            except ValueError as ex:
                return ApiResult.failure(
                    f"Unable to parse response: {ex}", status=status
                )
            return ApiResult.from_payload(payload, status=status)

        try:
            payload = json_loads(body)
        except ValueError:
            payload = {}
        error = ApiErrorBody.from_json(payload)
        _LOGGER.debug("Fetch error: %s %s", error.error_code, error.msg)

        failure = ApiResult.failure(
            error.msg or f"{self._config.api_domain} responded with status {status}",
            error_code=error.error_code,
            json=payload,
            status=status,
        )
        # Never re-authenticate on a failure of the authentication itself
        if is_session_url(url.path):
            return failure
        if error.error_code != ApiErrorCode.AUTH_REQUIRED or not reauthenticate:
            return failure

        _LOGGER.debug("Re-authenticating")
        auth = await self._reauthenticate(session_token)
        if not auth.success:
            return auth

        _LOGGER.debug("Re-fetching %s", url)
        return await self._fetch(request, reauthenticate=False)

    async def _reauthenticate(self, stale_token: str | None) -> ApiResult:
        """Open a new session unless a concurrent request already did."""
        async with self._auth_lock:
            session_token = self._session.session_token
            if session_token is not None and session_token != stale_token:
                _LOGGER.debug("Session already renewed by another request")
                return ApiResult(success=True)
            return await self._authenticator.authenticate()
