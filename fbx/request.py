"""Descriptor of a request sent through the client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .json import dumps as json_dumps


@dataclass(frozen=True)
class ApiRequest:
    """A request to the appliance api.

    Instances are immutable. The client builds its own headers from a copy,
    so the same request can be replayed unchanged after re-authentication.
    """

    #: Path relative to the api base url (e.g. ``v8/system``) or absolute url
    url: str
    method: str = "GET"
    #: dicts and lists are sent as JSON, str and bytes verbatim
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)
    #: Decode the response body as JSON
    parse_json: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def data(self) -> bytes | str | None:
        """Return the body as sent on the wire."""
        if self.body is None or isinstance(self.body, bytes | str):
            return self.body
        return json_dumps(self.body)
