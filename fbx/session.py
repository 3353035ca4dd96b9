"""Session state of a client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .result import ApiResult


@dataclass
class SessionState:
    """State of the session held by one client instance.

    Only the authenticator writes to it. Staleness of the token is not
    tracked, it is discovered when a request fails with ``auth_required``.
    """

    #: Session token sent in the auth header, None until logged in
    session_token: str | None = field(default=None, repr=False)
    #: Permissions granted to the app for this session
    permissions: dict[str, Any] = field(default_factory=dict)
    #: Last result of the api_version request, possibly a failure
    device_info: ApiResult | None = None

    def reset(self) -> None:
        """Forget the session."""
        self.session_token = None
        self.permissions = {}
        self.device_info = None
