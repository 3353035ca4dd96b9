"""Challenge-response authentication against the appliance.

The appliance hands out a challenge on ``login``. The session password is
the HMAC-SHA1 of that challenge keyed with the app token obtained when
pairing. Posting it to ``login/session`` opens a session whose token
authorizes the following requests.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from cryptography.hazmat.primitives import hashes, hmac

from .clientconfig import ClientConfig
from .request import ApiRequest
from .result import ApiResult
from .session import SessionState

_LOGGER = logging.getLogger(__name__)

API_VERSION = "v8"
LOGIN_PATH = f"{API_VERSION}/login"
SESSION_PATH = f"{API_VERSION}/login/session"
API_VERSION_PATH = f"{API_VERSION}/api_version"


def password_for_challenge(app_token: str, challenge: str) -> str:
    """Return the session password for a challenge, as lowercase hex."""
    h = hmac.HMAC(app_token.encode(), hashes.SHA1())  # noqa: S303
    h.update(challenge.encode())
    return h.finalize().hex()


def is_session_url(url: str) -> bool:
    """Return true if the url targets the session creation endpoint."""
    return url.split("?", 1)[0].rstrip("/").endswith("login/session")


class ChallengeAuthenticator:
    """Open sessions with the challenge-response handshake."""

    def __init__(
        self,
        config: ClientConfig,
        session: SessionState,
        fetch: Callable[[ApiRequest], Awaitable[ApiResult]],
    ) -> None:
        self._config = config
        self._session = session
        self._fetch = fetch

    async def authenticate(self) -> ApiResult:
        """Open a new session and store its token.

        Returns the result of the session creation, or the failure of the
        challenge request.
        """
        challenge = await self._fetch(ApiRequest(LOGIN_PATH))
        if not challenge.success:
            _LOGGER.debug("Unable to get challenge: %s", challenge.msg)
            return challenge

        result = challenge.result if isinstance(challenge.result, dict) else {}
        challenge_value = result.get("challenge")
        if not isinstance(challenge_value, str) or not challenge_value:
            return ApiResult.failure(
                "No challenge in login response",
                json=challenge.json,
                status=challenge.status,
            )

        password = password_for_challenge(self._config.app_token, challenge_value)
        if self._config.verbose:
            _LOGGER.debug(
                "Password for challenge %s: %s", challenge_value, password
            )

        auth = await self._fetch(
            ApiRequest(
                SESSION_PATH,
                method="POST",
                body={"app_id": self._config.app_id, "password": password},
            )
        )
        if not auth.success:
            _LOGGER.debug("Unable to open session: %s", auth.msg)
            return auth

        result = auth.result if isinstance(auth.result, dict) else {}
        session_token = result.get("session_token")
        if not isinstance(session_token, str) or not session_token:
            return ApiResult.failure(
                "No session token in session response",
                json=auth.json,
                status=auth.status,
            )

        self._session.session_token = session_token
        self._session.permissions = result.get("permissions") or {}
        if self._config.verbose:
            _LOGGER.debug("Authenticated with session token %s", session_token)
        else:
            _LOGGER.debug("Authenticated successfully")

        # Best effort, a failure is cached as is
        device_info = await self._fetch(ApiRequest(API_VERSION_PATH))
        _LOGGER.debug("Got device info: %s", device_info.result or device_info.msg)
        self._session.device_info = device_info

        return auth
