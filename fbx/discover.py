"""Discovery of the appliance on the local network.

The appliance answers on a well-known domain name. Its ``api_version``
endpoint needs no authentication and describes the device and its api:

>>> from fbx import Discover
>>> info = await Discover.discover()
>>> print(info.box_model_name)
Freebox v7 (r1)
>>> print(info.api_base_url)
/api/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from aiohttp import ClientSession
from mashumaro.config import BaseConfig

from .auth import API_VERSION_PATH
from .clientconfig import DEFAULT_API_BASE_URL, DEFAULT_API_DOMAIN, DEFAULT_HTTPS_PORT
from .exceptions import FbxException, UnparsableResponseError, UnreachableError
from .httpclient import HttpClient
from .json import DataClassJSONMixin
from .json import loads as json_loads

_LOGGER = logging.getLogger(__name__)


@dataclass
class DeviceInfo(DataClassJSONMixin):
    """Device info returned by the api_version endpoint."""

    class Config(BaseConfig):
        """Serialization config."""

        omit_none = True

    uid: str | None = None
    device_name: str | None = None
    api_version: str | None = None
    api_base_url: str | None = None
    device_type: str | None = None
    api_domain: str | None = None
    https_available: bool | None = None
    https_port: int | None = None
    box_model: str | None = None
    box_model_name: str | None = None


class Discover:
    """Class for discovering the appliance."""

    DEFAULT_TIMEOUT = 5

    @staticmethod
    async def discover(
        api_domain: str = DEFAULT_API_DOMAIN,
        *,
        port: int = DEFAULT_HTTPS_PORT,
        timeout: int | None = DEFAULT_TIMEOUT,
        http_client: ClientSession | None = None,
    ) -> DeviceInfo:
        """Query the appliance at api_domain and return its device info.

        :raises UnreachableError: if the appliance cannot be reached
        :raises UnparsableResponseError: if the response is not valid JSON
        """
        client = HttpClient(api_domain, timeout=timeout, http_client=http_client)
        url = f"https://{api_domain}:{port}{DEFAULT_API_BASE_URL}{API_VERSION_PATH}"
        try:
            status, body = await client.request("GET", url)
        finally:
            await client.close()

        if status != 200:
            raise UnreachableError(
                f"{api_domain} responded with an unexpected status code {status}"
            )

        try:
            payload = json_loads(body)
        except ValueError as ex:
            raise UnparsableResponseError(
                f"Unable to parse device info from {api_domain}: {ex}"
            ) from ex
        if not isinstance(payload, dict):
            raise UnparsableResponseError(
                f"Unexpected device info from {api_domain}: {payload!r}"
            )

        _LOGGER.debug("Discovered %s: %s", api_domain, payload)
        return DeviceInfo.from_dict(payload)

    @staticmethod
    async def is_reachable(
        api_domain: str = DEFAULT_API_DOMAIN,
        *,
        port: int = DEFAULT_HTTPS_PORT,
        timeout: int | None = DEFAULT_TIMEOUT,
        http_client: ClientSession | None = None,
    ) -> bool:
        """Return true if the appliance answers at api_domain."""
        try:
            await Discover.discover(
                api_domain, port=port, timeout=timeout, http_client=http_client
            )
        except FbxException as ex:
            _LOGGER.debug("%s is not reachable: %s", api_domain, ex)
            return False
        return True
