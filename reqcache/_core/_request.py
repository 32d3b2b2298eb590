from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, Optional, Union

from reqcache._core._headers import CacheControl, Headers
from reqcache._core._options import CacheOptions
from reqcache._core.models import Request, SupportsHeaders
from reqcache._exceptions import ConstructionError
from reqcache._utils import get_safe_url

logger = logging.getLogger("reqcache.request")

__all__ = ("CacheAwareRequest", "coerce")

# Held only by `CacheAwareRequest.coerce`, so a wrapper cannot be built around another wrapper by accident.
_COERCE_KEY = object()


class CacheAwareRequest:
    """
    Wraps a `Request` with the request-side caching rules of RFC 9111.

    Attribute access that has nothing to do with caching is forwarded to the
    wrapped request, so the wrapper can be passed anywhere the request itself
    is expected. Instances are created with `CacheAwareRequest.coerce`.

    The parsed `Cache-Control` header is computed on first use and kept for
    the lifetime of the wrapper. Derived requests, such as the one returned by
    `conditional_on_changes_to`, are always new instances.

    Examples:
    --------
    >>> request = CacheAwareRequest.coerce(Request(method="GET", url="https://example.com/"))
    >>> request.cacheable()
    True
    >>> CacheAwareRequest.coerce(request) is request
    True
    """

    def __init__(
        self,
        request: Request,
        options: Optional[CacheOptions] = None,
        *,
        _key: object = None,
    ) -> None:
        if _key is not _COERCE_KEY:
            raise ConstructionError(
                f"{type(self).__name__} cannot be instantiated directly, "
                f"use `{type(self).__name__}.coerce(request)` instead."
            )

        self._request = request
        self._options = options if options is not None else CacheOptions()
        self._cache_control: Optional[CacheControl] = None

        # Advisory lifecycle timestamps, written by the caller once the request is dispatched
        self.sent_at: Optional[float] = None
        self.requested_at: Optional[float] = None
        self.received_at: Optional[float] = None

    @classmethod
    def coerce(
        cls,
        request: Union[Request, "CacheAwareRequest"],
        options: Optional[CacheOptions] = None,
    ) -> "CacheAwareRequest":
        """
        Returns `request` itself if it is already cache-aware, otherwise wraps it.

        `options` only applies when a new wrapper is created; an existing
        wrapper keeps the options it was created with.
        """
        if isinstance(request, CacheAwareRequest):
            return request
        return cls(request, options, _key=_COERCE_KEY)

    @property
    def request(self) -> Request:
        return self._request

    @property
    def options(self) -> CacheOptions:
        return self._options

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def url(self) -> str:
        return self._request.url

    @property
    def headers(self) -> Headers:
        return self._request.headers

    @property
    def body(self) -> bytes:
        return self._request.body

    @property
    def proxy(self) -> Optional[str]:
        return self._request.proxy

    @property
    def version(self) -> str:
        return self._request.version

    @property
    def cache_control(self) -> CacheControl:
        if self._cache_control is None:
            self._cache_control = CacheControl(self._request.headers)
        return self._cache_control

    def cacheable(self) -> bool:
        """
        Determines whether a response to this request may be served from or stored in a cache.

        Only the configured safe methods (GET and HEAD by default) are
        cacheable, and a `no-store` directive on the request overrides that.
        """
        if self.method not in self._options.cacheable_methods:
            logger.debug(
                (
                    f"Considering the request for {get_safe_url(self.url)} "
                    f"as not cacheable since its method ({self.method}) is not in the list of cacheable methods."
                )
            )
            return False

        if self.cache_control.no_store:
            logger.debug(
                (
                    f"Considering the request for {get_safe_url(self.url)} "
                    "as not cacheable since it contains the no-store directive."
                )
            )
            return False

        logger.debug(f"Considering the request for {get_safe_url(self.url)} as cacheable.")
        return True

    def invalidates_cache(self) -> bool:
        """
        Determines whether this request invalidates the stored entries for its target resource.

        See also (https://www.rfc-editor.org/rfc/rfc9111.html#name-invalidating-stored-respons)
        """
        if self.method in self._options.invalidating_methods:
            logger.debug(
                (
                    f"Considering the request for {get_safe_url(self.url)} "
                    f"as invalidating the cache since its method ({self.method}) is unsafe."
                )
            )
            return True

        if self.cache_control.no_store:
            logger.debug(
                (
                    f"Considering the request for {get_safe_url(self.url)} "
                    "as invalidating the cache since it contains the no-store directive."
                )
            )
            return True

        logger.debug(
            (
                f"Considering the request for {get_safe_url(self.url)} "
                f"as not invalidating the cache since its method ({self.method}) is not in the list of invalidating methods."
            )
        )
        return False

    def skips_cache(self) -> bool:
        """
        Determines whether a stored response must be revalidated with the origin before it is used.

        `max-age=0`, `must-revalidate` and `no-cache` each force revalidation,
        even when the stored response is still fresh. A request without
        `max-age` does not.
        """
        cache_control = self.cache_control

        if cache_control.max_age == 0:
            reason = "it contains the max-age=0 directive"
        elif cache_control.must_revalidate:
            reason = "it contains the must-revalidate directive"
        elif cache_control.no_cache:
            reason = "it contains the no-cache directive"
        else:
            logger.debug(
                f"Not skipping the cache for the request to {get_safe_url(self.url)} since it contains no revalidation directive."
            )
            return False

        logger.debug(f"Skipping the cache for the request to {get_safe_url(self.url)} since {reason}.")
        return True

    def conditional_on_changes_to(self, cached_response: SupportsHeaders) -> "CacheAwareRequest":
        """
        Builds a new request that only fetches the resource if it changed since `cached_response`.

        The new request keeps the method, url, body, proxy and version of this
        one. Its headers are this request's headers followed by the validator
        headers taken from `cached_response`. When this request forces
        revalidation, its Cache-Control is replaced by `max-age=0`. A response
        without validators yields a request with no additional validators.

        See also (https://www.rfc-editor.org/rfc/rfc9111.html#name-sending-a-validation-reques)
        """
        conditional_request = replace(self._request, headers=self._conditional_headers_for(cached_response))
        return type(self).coerce(conditional_request, self._options)

    def mark_sent(self, at: Optional[float] = None) -> None:
        self.sent_at = time.time() if at is None else at

    def _conditional_headers_for(self, cached_response: SupportsHeaders) -> Headers:
        validators = Headers()

        for etag in cached_response.headers.get_list("ETag"):
            validators.add("If-None-Match", etag)

        for last_modified in cached_response.headers.get_list("Last-Modified"):
            validators.add("If-Modified-Since", last_modified)

        headers = self.headers.merge(validators)
        forces_revalidation = self.cache_control.forces_revalidation

        if forces_revalidation:
            headers["Cache-Control"] = "max-age=0"

        if logger.isEnabledFor(logging.DEBUG):
            safe_url = get_safe_url(self.url)
            if not validators:
                logger.debug(f"The cached response for {safe_url} carries no validators to make the request conditional.")
            for key, value in validators.multi_items():
                logger.debug(f"Adding the '{key}' header with the value of '{value}' to the request for {safe_url}.")
            if forces_revalidation:
                logger.debug(f"Setting the 'Cache-Control' header to 'max-age=0' on the request for {safe_url}.")

        return headers

    def __getattr__(self, name: str) -> Any:
        request = self.__dict__.get("_request")
        if request is None:
            raise AttributeError(name)
        try:
            return getattr(request, name)
        except AttributeError:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'") from None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} [{self.method} {get_safe_url(self.url)}]>"


def coerce(
    request: Union[Request, CacheAwareRequest],
    options: Optional[CacheOptions] = None,
) -> CacheAwareRequest:
    return CacheAwareRequest.coerce(request, options)
