"""Configuration for connecting to the appliance api.

The app id and app token are obtained once with :func:`fbx.registration.register`
and can be stored for later use:

>>> from fbx import ClientConfig, FreeboxClient
>>> config = ClientConfig(app_id="fbx.example", app_token="the_app_token")
>>> config_dict = config.to_dict()
>>> print(config_dict)
{'app_id': 'fbx.example', 'app_token': 'the_app_token', \
'api_domain': 'mafreebox.freebox.fr', 'https_port': 443, 'api_base_url': '/api/', \
'verbose': False}

>>> client = FreeboxClient(ClientConfig.from_dict(config_dict))
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Self

from aiohttp import ClientSession
from mashumaro import field_options
from mashumaro.config import BaseConfig
from mashumaro.types import SerializationStrategy

from .exceptions import ConfigurationError
from .json import DataClassJSONMixin

if TYPE_CHECKING:
    from .registration import AppRegistration

_LOGGER = logging.getLogger(__name__)

DEFAULT_API_DOMAIN = "mafreebox.freebox.fr"
DEFAULT_HTTPS_PORT = 443
DEFAULT_API_BASE_URL = "/api/"

# Keys of the pairing output, camelCase first
_REGISTRATION_KEYS = {
    "app_token": ("appToken", "app_token"),
    "app_id": ("appId", "app_id"),
    "api_domain": ("apiDomain", "api_domain"),
    "https_port": ("httpsPort", "https_port"),
}


class _DoNotSerialize(SerializationStrategy):
    def serialize(self, value: Any) -> None:
        return None

    def deserialize(self, value: Any) -> None:
        return None


class _ClientConfigBaseMixin(DataClassJSONMixin):
    """Base class for serialization mixin."""

    class Config(BaseConfig):
        """Serialization config."""

        omit_none = True


@dataclass(frozen=True)
class ClientConfig(_ClientConfigBaseMixin):
    """Class to represent parameters that determine how to reach the appliance."""

    #: Identifier of the registered application
    app_id: str = ""
    #: Long-lived app token returned by the pairing flow
    app_token: str = field(default="", repr=False)
    #: Domain name or IP address of the appliance
    api_domain: str = DEFAULT_API_DOMAIN
    #: HTTPS port of the appliance api
    https_port: int = DEFAULT_HTTPS_PORT
    #: Path prefix of the api, as reported by the api_version endpoint
    api_base_url: str = DEFAULT_API_BASE_URL
    #: Log secrets (session token, derived password) in debug output
    verbose: bool = False
    #: Total timeout for a request, None uses the aiohttp default
    timeout: int | None = None

    # compare=False will be excluded from object comparison.
    #: Set a custom http_client for the client to use.
    http_client: ClientSession | None = field(
        default=None,
        compare=False,
        repr=False,
        metadata=field_options(serialization_strategy=_DoNotSerialize()),
    )

    def __post_init__(self) -> None:
        if not self.app_id:
            raise ConfigurationError("app_id is missing")
        if not self.app_token:
            raise ConfigurationError("app_token is missing")
        if not self.api_base_url.endswith("/"):
            object.__setattr__(self, "api_base_url", self.api_base_url + "/")

    def __pre_serialize__(self) -> Self:
        return replace(self, http_client=None)

    @property
    def base_url(self) -> str:
        """Return the absolute url requests are resolved against."""
        return f"https://{self.api_domain}:{self.https_port}{self.api_base_url}"

    @classmethod
    def from_registration(
        cls,
        registration: AppRegistration | Mapping[str, Any],
        **kwargs: Any,
    ) -> ClientConfig:
        """Create a config from the output of the pairing flow.

        Accepts an :class:`~fbx.registration.AppRegistration` or the dict form
        ``{appToken, appId, apiDomain, httpsPort}``. Extra keyword arguments
        are passed to the constructor.
        """
        if not isinstance(registration, Mapping):
            registration = registration.to_dict()

        values: dict[str, Any] = {}
        for name, keys in _REGISTRATION_KEYS.items():
            for key in keys:
                if registration.get(key) is not None:
                    values[name] = registration[key]
                    break

        _LOGGER.debug("Creating config for %s", values.get("api_domain"))
        return cls(**{**values, **kwargs})
