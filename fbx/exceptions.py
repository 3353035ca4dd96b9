"""python-fbx exceptions."""

from __future__ import annotations

from asyncio import TimeoutError as _asyncioTimeoutError
from enum import Enum
from typing import Any


class FbxException(Exception):
    """Base exception for library errors."""


class ConfigurationError(FbxException):
    """Exception for invalid client configuration."""


class UnreachableError(FbxException):
    """Connection exception for appliance errors."""


class TimeoutError(UnreachableError, _asyncioTimeoutError):
    """Timeout exception for appliance errors."""

    def __repr__(self) -> str:
        return FbxException.__repr__(self)

    def __str__(self) -> str:
        return FbxException.__str__(self)


class UnparsableResponseError(FbxException):
    """Exception for responses that are not valid JSON."""


class ApiErrorCode(str, Enum):
    """Error codes returned by the appliance in failure bodies."""

    def __str__(self) -> str:
        return self.value

    AUTH_REQUIRED = "auth_required"
    INVALID_TOKEN = "invalid_token"
    PENDING_TOKEN = "pending_token"
    INSUFFICIENT_RIGHTS = "insufficient_rights"
    DENIED_FROM_EXTERNAL_IP = "denied_from_external_ip"
    INVALID_REQUEST = "invalid_request"
    RATELIMITED = "ratelimited"
    NEW_APPS_DENIED = "new_apps_denied"
    APPS_DENIED = "apps_denied"
    INTERNAL_ERROR = "internal_error"
    INVALID_SESSION = "invalid_session"


AUTHENTICATION_ERRORS = [
    ApiErrorCode.AUTH_REQUIRED,
    ApiErrorCode.INVALID_TOKEN,
    ApiErrorCode.PENDING_TOKEN,
    ApiErrorCode.INVALID_SESSION,
    ApiErrorCode.NEW_APPS_DENIED,
    ApiErrorCode.APPS_DENIED,
]


class ApiError(FbxException):
    """Base exception for failures reported by the appliance api."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.error_code: str | None = kwargs.get("error_code")
        self.status: int | None = kwargs.get("status")
        super().__init__(*args)

    def __repr__(self) -> str:
        err_code = repr(self.error_code) if self.error_code else ""
        return f"{self.__class__.__name__}({err_code})"

    def __str__(self) -> str:
        err_code = f" (error_code={self.error_code})" if self.error_code else ""
        return super().__str__() + err_code


class AuthenticationError(ApiError):
    """Exception for appliance authentication errors."""


class RegistrationFailure(Enum):
    """Reasons for the pairing flow to fail."""

    Unreachable = "UNREACHABLE"
    Unparsable = "UNPARSABLE"
    CannotGetInfos = "CANNOT_GET_INFOS"
    CannotAskAuthorization = "CANNOT_ASK_AUTHORIZATION"
    CannotGetToken = "CANNOT_GET_TOKEN"
    CannotCheckAuthorization = "CANNOT_CHECK_AUTHORIZATION"
    AccessNotGrantedByUser = "ACCESS_NOT_GRANTED_BY_USER"


class RegistrationError(FbxException):
    """Exception raised when the pairing flow does not yield an app token."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.reason: RegistrationFailure | None = kwargs.get("reason")
        super().__init__(*args)

    def __str__(self) -> str:
        reason = f" ({self.reason.value})" if self.reason else ""
        return super().__str__() + reason
