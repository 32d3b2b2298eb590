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
from reqcache._exceptions import (
    ConfigurationError as ConfigurationError,
    ConstructionError as ConstructionError,
    ReqcacheError as ReqcacheError,
)

__all__ = (
    ## Request classification
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
    ## Errors
    "ReqcacheError",
    "ConstructionError",
    "ConfigurationError",
)
