from __future__ import annotations

from dataclasses import dataclass, field

from reqcache._exceptions import ConfigurationError
from reqcache._utils import normalize_method

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"]

__all__ = ("CacheOptions", "HTTP_METHODS")


def _validated_methods(methods: list[str], option_name: str) -> list[str]:
    normalized = []

    for method in methods:
        method = normalize_method(method)
        if method not in HTTP_METHODS:
            raise ConfigurationError(
                f"`{option_name}` contains the unsupported HTTP method `{method}`.\n"
                f"Please use the methods from this list: {HTTP_METHODS}"
            )
        normalized.append(method)

    return normalized


@dataclass
class CacheOptions:
    """
    Configuration for how requests are classified for cache participation.

    Attributes:
    ----------
    cacheable_methods : list[str]
        Methods whose responses may be served from or written to a cache.

        RFC 9110 Section 9.2.3: Methods and Caching
        https://www.rfc-editor.org/rfc/rfc9110#section-9.2.3

        Default: ["GET", "HEAD"]

    invalidating_methods : list[str]
        Unsafe methods that invalidate the stored entries for the target URI.

        RFC 9111 Section 4.4: Invalidating Stored Responses
        https://www.rfc-editor.org/rfc/rfc9111.html#section-4.4

        Default: ["POST", "PUT", "DELETE", "PATCH"]

    Notes:
    -----
    Each list replaces its default instead of extending it, and an empty list
    is accepted. `invalidating_methods=[]` therefore means no method
    invalidates the cache, and only a `no-store` directive still does. The
    usual guarantees for GET, HEAD and the unsafe methods hold only while the
    defaults are kept.

    Examples:
    --------
    >>> options = CacheOptions(cacheable_methods=["get"])
    >>> options.cacheable_methods
    ['GET']
    """

    cacheable_methods: list[str] = field(default_factory=lambda: ["GET", "HEAD"])
    """Methods that may be answered from a cache."""

    invalidating_methods: list[str] = field(default_factory=lambda: ["POST", "PUT", "DELETE", "PATCH"])
    """Methods that invalidate cached state for the target resource."""

    def __post_init__(self) -> None:
        self.cacheable_methods = _validated_methods(self.cacheable_methods, "cacheable_methods")
        self.invalidating_methods = _validated_methods(self.invalidating_methods, "invalidating_methods")

        overlapping = sorted(set(self.cacheable_methods) & set(self.invalidating_methods))
        if overlapping:
            raise ConfigurationError(
                f"The methods {overlapping} cannot be both cacheable and invalidating."
            )
