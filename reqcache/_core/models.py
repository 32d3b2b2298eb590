from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

from reqcache._core._headers import Headers, HeaderSource
from reqcache._utils import normalize_method


class SupportsHeaders(Protocol):
    """Anything carrying a header multi-map, e.g. a cached ``Response`` or an ``httpx.Response``."""

    @property
    def headers(self) -> HeaderSource: ...


@dataclass(frozen=True)
class Request:
    method: str
    url: str
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    proxy: Optional[str] = None
    version: str = "HTTP/1.1"
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", normalize_method(self.method))
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))


@dataclass(frozen=True)
class Response:
    status_code: int
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))
