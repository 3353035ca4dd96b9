"""Python interface for the Freebox appliance api.

Requests go through :class:`FreeboxClient`, which opens and renews the
session on its own::

>>> from fbx import ClientConfig, FreeboxClient
>>> client = FreeboxClient(ClientConfig(app_id="fbx.example", app_token="..."))
>>> res = await client.request("v8/system")
>>> print(res.success)
True

Api failures are returned as :class:`ApiResult` instances rather than raised,
:meth:`ApiResult.unwrap` raises them as `ApiError`.
"""

from importlib.metadata import version

from fbx.auth import ChallengeAuthenticator, password_for_challenge
from fbx.client import FreeboxClient
from fbx.clientconfig import ClientConfig
from fbx.discover import DeviceInfo, Discover
from fbx.exceptions import (
    ApiError,
    ApiErrorCode,
    AuthenticationError,
    ConfigurationError,
    FbxException,
    RegistrationError,
    RegistrationFailure,
    TimeoutError,
    UnparsableResponseError,
    UnreachableError,
)
from fbx.registration import AppRegistration, register
from fbx.request import ApiRequest
from fbx.result import ApiResult
from fbx.session import SessionState

__version__ = version("python-fbx")


__all__ = [
    "FreeboxClient",
    "ClientConfig",
    "ChallengeAuthenticator",
    "password_for_challenge",
    "SessionState",
    "ApiRequest",
    "ApiResult",
    "Discover",
    "DeviceInfo",
    "register",
    "AppRegistration",
    "FbxException",
    "ConfigurationError",
    "UnreachableError",
    "TimeoutError",
    "UnparsableResponseError",
    "ApiError",
    "ApiErrorCode",
    "AuthenticationError",
    "RegistrationError",
    "RegistrationFailure",
]
