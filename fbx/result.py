"""Results of api calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .exceptions import AUTHENTICATION_ERRORS, ApiError, AuthenticationError

DEFAULT_FAILURE_MSG = "Request failed"


@dataclass(frozen=True)
class ApiErrorBody:
    """Fields read from a failure body.

    Fields missing from the body are ``None``, never a default value.
    """

    error_code: str | None = None
    msg: str | None = None

    @classmethod
    def from_json(cls, payload: Any) -> ApiErrorBody:
        """Read the error fields from a decoded body of any shape."""
        if not isinstance(payload, dict):
            return cls()
        error_code = payload.get("error_code")
        msg = payload.get("msg")
        return cls(
            error_code=str(error_code) if error_code is not None else None,
            msg=str(msg) if msg else None,
        )


@dataclass(frozen=True)
class ApiResult:
    """Outcome of an api call, either a success or a failure.

    A failure always carries a human readable ``msg``.
    """

    success: bool
    #: The ``result`` member of the payload, or the whole payload
    result: Any = None
    msg: str | None = None
    error_code: str | None = None
    #: The decoded body, when there is one
    json: Any = None
    #: HTTP status code, None when the appliance was not reached
    status: int | None = None
    #: The undecoded body for requests sent with ``parse_json=False``
    raw: bytes | None = None

    def __post_init__(self) -> None:
        if not self.success and not self.msg:
            object.__setattr__(self, "msg", DEFAULT_FAILURE_MSG)

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def failure(
        cls,
        msg: str | None,
        *,
        error_code: str | None = None,
        json: Any = None,
        status: int | None = None,
    ) -> ApiResult:
        """Return a failure result."""
        return cls(
            success=False, msg=msg, error_code=error_code, json=json, status=status
        )

    @classmethod
    def from_payload(cls, payload: Any, *, status: int | None = None) -> ApiResult:
        """Return a result for a decoded body received with a success status.

        Payloads without a ``success`` member, like the api_version one, are
        successes carrying the whole payload.
        """
        if not isinstance(payload, dict) or "success" not in payload:
            return cls(success=True, result=payload, json=payload, status=status)

        if payload["success"]:
            return cls(
                success=True, result=payload.get("result"), json=payload, status=status
            )

        error = ApiErrorBody.from_json(payload)
        return cls.failure(
            error.msg, error_code=error.error_code, json=payload, status=status
        )

    def unwrap(self) -> Any:
        """Return the result or raise the failure as an exception."""
        if self.success:
            return self.result
        if self.error_code in AUTHENTICATION_ERRORS:
            raise AuthenticationError(
                self.msg, error_code=self.error_code, status=self.status
            )
        raise ApiError(self.msg, error_code=self.error_code, status=self.status)
