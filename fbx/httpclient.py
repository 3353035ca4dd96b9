"""Module for HttpClient class."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp
from yarl import URL

from .exceptions import (
    FbxException,
    TimeoutError,
    UnreachableError,
)

_LOGGER = logging.getLogger(__name__)


class HttpClient:
    """HttpClient Class.

    Performs single requests against the appliance. The appliance serves a
    self-signed certificate so certificate validation is disabled.
    """

    def __init__(
        self,
        host: str,
        *,
        timeout: int | None = None,
        http_client: aiohttp.ClientSession | None = None,
    ) -> None:
        self._host = host
        self._timeout = timeout
        self._http_client = http_client
        self._client_session: aiohttp.ClientSession | None = None

    @property
    def client(self) -> aiohttp.ClientSession:
        """Return the underlying http client."""
        if self._http_client and issubclass(
            self._http_client.__class__, aiohttp.ClientSession
        ):
            return self._http_client

        if not self._client_session:
            self._client_session = aiohttp.ClientSession()
        return self._client_session

    async def request(
        self,
        method: str,
        url: URL | str,
        *,
        data: bytes | str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[int, bytes]:
        """Send an http request to the appliance.

        Returns the status code and the raw body.
        """
        _LOGGER.debug("%s %s", method, url)
        kwargs: dict[str, Any] = {}
        if self._timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self._timeout)

        try:
            resp = await self.client.request(
                method,
                url,
                data=data,
                headers=headers,
                ssl=False,
                **kwargs,
            )
            async with resp:
                response_data = await resp.read()
        except (aiohttp.ServerTimeoutError, asyncio.TimeoutError) as ex:
            raise TimeoutError(
                "Unable to query the appliance, "
                + f"timed out: {self._host}: {ex}"
            ) from ex
        except aiohttp.ClientError as ex:
            raise UnreachableError(
                f"Unable to reach the appliance: {self._host}: {ex}"
            ) from ex
        except Exception as ex:
            raise FbxException(
                f"Unable to query the appliance: {self._host}: {ex}"
            ) from ex

        if resp.status >= 400:
            _LOGGER.debug(
                "Appliance %s responded with status code %s: %r",
                self._host,
                resp.status,
                response_data,
            )

        return resp.status, response_data

    async def close(self) -> None:
        """Close the ClientSession if it is owned by this client."""
        client = self._client_session
        self._client_session = None
        if client:
            await client.close()
