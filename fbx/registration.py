"""Pairing of an application with the appliance.

Registering asks the appliance for an app token. The request has to be
approved on the appliance display, so registration polls the
authorization status until the user grants or denies it:

>>> from fbx import ClientConfig, FreeboxClient, register
>>> registration = await register(
>>>     app_id="fbx.example",
>>>     app_name="Example",
>>>     app_version="1.0.0",
>>>     device_name="Laptop",
>>> )
>>> client = FreeboxClient(ClientConfig.from_registration(registration))
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from aiohttp import ClientSession

from .auth import API_VERSION
from .clientconfig import DEFAULT_API_BASE_URL, DEFAULT_API_DOMAIN, DEFAULT_HTTPS_PORT
from .discover import Discover
from .exceptions import (
    FbxException,
    RegistrationError,
    RegistrationFailure,
    UnparsableResponseError,
)
from .httpclient import HttpClient
from .json import dumps as json_dumps
from .json import loads as json_loads

_LOGGER = logging.getLogger(__name__)

AUTHORIZE_PATH = f"{API_VERSION}/login/authorize"
POLL_INTERVAL_SECONDS = 2

STATUS_PENDING = "pending"
STATUS_GRANTED = "granted"


@dataclass
class AppRegistration:
    """Credentials obtained by pairing an application."""

    app_token: str = field(repr=False)
    app_id: str
    api_domain: str = DEFAULT_API_DOMAIN
    https_port: int = DEFAULT_HTTPS_PORT

    def to_dict(self) -> dict[str, Any]:
        """Return the credentials with camelCase keys."""
        return {
            "appToken": self.app_token,
            "appId": self.app_id,
            "apiDomain": self.api_domain,
            "httpsPort": self.https_port,
        }


def _decode(body: bytes) -> dict[str, Any] | None:
    try:
        payload = json_loads(body)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


async def register(
    app_id: str,
    app_name: str,
    app_version: str,
    device_name: str,
    *,
    api_domain: str = DEFAULT_API_DOMAIN,
    port: int = DEFAULT_HTTPS_PORT,
    poll_interval: float = POLL_INTERVAL_SECONDS,
    timeout: int | None = Discover.DEFAULT_TIMEOUT,
    http_client: ClientSession | None = None,
) -> AppRegistration:
    """Register an application and wait for the user to approve it.

    :raises RegistrationError: if no app token was granted, the ``reason``
        attribute tells at which step
    """
    try:
        info = await Discover.discover(
            api_domain, port=port, timeout=timeout, http_client=http_client
        )
    except UnparsableResponseError as ex:
        raise RegistrationError(
            f"Unable to handle the response of {api_domain}: {ex}",
            reason=RegistrationFailure.Unparsable,
        ) from ex
    except FbxException as ex:
        raise RegistrationError(
            f"Unable to reach {api_domain}, "
            "is this host on the same network as the appliance?",
            reason=RegistrationFailure.Unreachable,
        ) from ex

    if not info.api_base_url or not info.box_model:
        raise RegistrationError(
            f"Unable to get the device info of {api_domain}",
            reason=RegistrationFailure.CannotGetInfos,
        )

    base_url = f"https://{api_domain}:{port}{DEFAULT_API_BASE_URL}{AUTHORIZE_PATH}"
    client = HttpClient(api_domain, timeout=timeout, http_client=http_client)
    try:
        _LOGGER.info(
            "A message will be displayed on the appliance to authorize %s", app_name
        )
        try:
            _, body = await client.request(
                "POST",
                base_url,
                data=json_dumps(
                    {
                        "app_id": app_id,
                        "app_name": app_name,
                        "app_version": app_version,
                        "device_name": device_name,
                    }
                ),
                headers={"Content-Type": "application/json"},
            )
        except FbxException as ex:
            raise RegistrationError(
                f"Unable to ask for authorization: {ex}",
                reason=RegistrationFailure.Unreachable,
            ) from ex

        authorize = _decode(body)
        if not authorize or not authorize.get("success"):
            msg = authorize.get("msg") if authorize else body
            raise RegistrationError(
                f"Unable to ask for authorization: {msg!r}",
                reason=RegistrationFailure.CannotAskAuthorization,
            )

        result = authorize.get("result") or {}
        app_token = result.get("app_token")
        if not app_token:
            raise RegistrationError(
                "No app token in the authorization response",
                reason=RegistrationFailure.CannotGetToken,
            )
        track_id = result.get("track_id")

        status = STATUS_PENDING
        while status == STATUS_PENDING:
            await asyncio.sleep(poll_interval)
            status = await _get_status(client, f"{base_url}/{track_id}")
            _LOGGER.debug("Authorization status: %s", status)
    finally:
        await client.close()

    if status != STATUS_GRANTED:
        raise RegistrationError(
            f"Access was not granted: {status}",
            reason=RegistrationFailure.AccessNotGrantedByUser,
        )

    _LOGGER.info("Authorization granted for %s", app_id)
    return AppRegistration(
        app_token=app_token,
        app_id=app_id,
        api_domain=info.api_domain or api_domain,
        https_port=info.https_port or port,
    )


async def _get_status(client: HttpClient, url: str) -> str:
    try:
        status_code, body = await client.request("GET", url)
    except FbxException as ex:
        raise RegistrationError(
            f"Unable to check the authorization: {ex}",
            reason=RegistrationFailure.Unreachable,
        ) from ex
    if status_code != 200:
        raise RegistrationError(
            f"Unable to check the authorization, status code {status_code}",
            reason=RegistrationFailure.Unreachable,
        )

    payload = _decode(body)
    if not payload or not payload.get("success"):
        msg = payload.get("msg") if payload else body
        raise RegistrationError(
            f"Unable to check the authorization: {msg!r}",
            reason=RegistrationFailure.CannotCheckAuthorization,
        )
    return str((payload.get("result") or {}).get("status"))
