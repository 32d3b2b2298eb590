from __future__ import annotations

from typing import Optional, Union, overload

import httpx

from reqcache._core._headers import Headers
from reqcache._core._options import CacheOptions
from reqcache._core._request import CacheAwareRequest
from reqcache._core.models import Request, Response

__all__ = ("httpx_to_internal", "internal_to_httpx", "coerce_httpx")


@overload
def internal_to_httpx(
    value: Union[Request, CacheAwareRequest],
) -> httpx.Request: ...


@overload
def internal_to_httpx(
    value: Response,
) -> httpx.Response: ...


def internal_to_httpx(
    value: Union[Request, CacheAwareRequest, Response],
) -> Union[httpx.Request, httpx.Response]:
    """
    Convert internal Request/Response (or a cache-aware request) to httpx.Request/httpx.Response.
    """
    if isinstance(value, CacheAwareRequest):
        value = value.request

    if isinstance(value, Request):
        return httpx.Request(
            method=value.method,
            url=value.url,
            headers=value.headers.multi_items(),
            content=value.body or None,
            extensions=dict(value.metadata),
        )
    return httpx.Response(
        status_code=value.status_code,
        headers=value.headers.multi_items(),
        content=value.body,
        extensions=dict(value.metadata),
    )


@overload
def httpx_to_internal(
    value: httpx.Request,
) -> Request: ...


@overload
def httpx_to_internal(
    value: httpx.Response,
) -> Response: ...


def httpx_to_internal(
    value: Union[httpx.Request, httpx.Response],
) -> Union[Request, Response]:
    """
    Convert httpx.Request/httpx.Response to internal Request/Response.

    Repeated header lines are kept as separate values. The body is read
    if it has not been read yet.
    """
    try:
        content = value.content
    except (httpx.RequestNotRead, httpx.ResponseNotRead):
        content = value.read()

    headers = Headers(value.headers.multi_items())

    if isinstance(value, httpx.Request):
        return Request(
            method=value.method,
            url=str(value.url),
            headers=headers,
            body=content,
            metadata=dict(value.extensions),
        )
    return Response(
        status_code=value.status_code,
        headers=headers,
        body=content,
        metadata=dict(value.extensions),
    )


def coerce_httpx(request: httpx.Request, options: Optional[CacheOptions] = None) -> CacheAwareRequest:
    return CacheAwareRequest.coerce(httpx_to_internal(request), options)
