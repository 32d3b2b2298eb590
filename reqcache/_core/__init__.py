from reqcache._core._headers import (
    CacheControl as CacheControl,
    Headers as Headers,
    parse_cache_control as parse_cache_control,
)
from reqcache._core._options import CacheOptions as CacheOptions
from reqcache._core._request import CacheAwareRequest as CacheAwareRequest, coerce as coerce
from reqcache._core.models import (
    Request as Request,
    Response as Response,
    SupportsHeaders as SupportsHeaders,
)

__all__ = (
    "CacheAwareRequest",
    "coerce",
    "CacheOptions",
    ## Models
    "Request",
    "Response",
    "SupportsHeaders",
    ## Headers
    "Headers",
    "CacheControl",
    "parse_cache_control",
)
