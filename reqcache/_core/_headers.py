from __future__ import annotations

import string
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Protocol,
    Tuple,
    Union,
)

__all__ = (
    "HeaderSource",
    "Headers",
    "CacheControl",
    "parse_cache_control",
)

HeaderTypes = Union[
    "Headers",
    Mapping[str, Union[str, List[str]]],
    Iterable[Tuple[str, str]],
    None,
]

# RFC 7230 Section 3.2.6
TCHAR = frozenset("!#$%&'*+-.^_`|~" + string.digits + string.ascii_letters)
OWS = " \t"

# 2^31 - 1, the largest delta-seconds value a cache has to understand (RFC 9111 Section 1.2.2)
MAX_DELTA_SECONDS = 2147483647

DELTA_SECONDS_DIRECTIVES = (
    "max-age",
    "max-stale",
    "min-fresh",
    "s-maxage",
    "stale-if-error",
    "stale-while-revalidate",
)

KNOWN_DIRECTIVES = DELTA_SECONDS_DIRECTIVES + (
    "immutable",
    "must-revalidate",
    "must-understand",
    "no-cache",
    "no-store",
    "no-transform",
    "only-if-cached",
    "private",
    "proxy-revalidate",
    "public",
)


class HeaderSource(Protocol):
    def get_list(self, key: str) -> List[str]: ...


class Headers(MutableMapping[str, str]):
    """
    Ordered, case-insensitive HTTP header multi-map.

    Every ``(name, value)`` line is kept in the order it was added, so
    repeated fields such as several ``ETag`` values survive untouched.
    Mapping access joins repeated values with ``", "``; use ``get_list``
    to read them individually.
    """

    def __init__(self, headers: HeaderTypes = None) -> None:
        self._items: List[Tuple[str, str]] = []

        if headers is None:
            return

        if isinstance(headers, Headers):
            self._items = list(headers._items)
        elif isinstance(headers, Mapping):
            for key, value in headers.items():
                if isinstance(value, str):
                    self._items.append((key, value))
                else:
                    self._items.extend((key, item) for item in value)
        else:
            self._items = [(key, value) for key, value in headers]

    def get_list(self, key: str) -> List[str]:
        lowered = key.lower()
        return [value for name, value in self._items if name.lower() == lowered]

    def add(self, key: str, value: str) -> None:
        self._items.append((key, value))

    def merge(self, other: HeaderTypes) -> "Headers":
        """Return a new multi-map holding these lines followed by the lines of ``other``."""
        merged = Headers(self)
        merged._items.extend(Headers(other)._items)
        return merged

    def multi_items(self) -> List[Tuple[str, str]]:
        return list(self._items)

    def __getitem__(self, key: str) -> str:
        values = self.get_list(key)
        if not values:
            raise KeyError(key)
        return ", ".join(values)

    def __setitem__(self, key: str, value: str) -> None:
        lowered = key.lower()
        self._items = [(name, item) for name, item in self._items if name.lower() != lowered]
        self._items.append((key, value))

    def __delitem__(self, key: str) -> None:
        lowered = key.lower()
        remaining = [(name, item) for name, item in self._items if name.lower() != lowered]
        if len(remaining) == len(self._items):
            raise KeyError(key)
        self._items = remaining

    def __iter__(self) -> Iterator[str]:
        return iter(self._grouped())

    def __len__(self) -> int:
        return len(self._grouped())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    def __eq__(self, other_headers: Any) -> bool:
        return isinstance(other_headers, Headers) and self._grouped() == other_headers._grouped()

    def _grouped(self) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = {}
        for name, value in self._items:
            grouped.setdefault(name.lower(), []).append(value)
        return grouped


def _skip_ows(value: str, index: int) -> int:
    while index < len(value) and value[index] in OWS:
        index += 1
    return index


def _read_token_value(value: str, index: int) -> int:
    while index < len(value) and value[index] not in OWS and value[index] != ",":
        index += 1
    return index


def _read_quoted(value: str, index: int) -> Optional[Tuple[str, int]]:
    """
    Read the quoted-string that opens at ``value[index]``.

    Returns the unescaped text and the index just past the closing quote,
    or None when the string is never terminated.
    """
    chars: List[str] = []
    index += 1

    while index < len(value):
        char = value[index]
        if char == '"':
            return "".join(chars), index + 1
        if char == "\\":
            if index + 1 == len(value):
                return None
            chars.append(value[index + 1])
            index += 2
            continue
        chars.append(char)
        index += 1

    return None


def iter_directives(value: str) -> Iterator[Tuple[str, Optional[str]]]:
    """
    Split a Cache-Control field value into ``(name, value)`` pairs.

    Names are lower-cased and valueless directives yield ``None``. Unquoted
    values end at whitespace or a comma, so a missing comma does not hide the
    next directive. Characters that cannot start a directive are skipped one
    at a time, and a quoted-string that is never closed drops only the
    directive it belongs to.
    """
    index = 0
    length = len(value)

    while index < length:
        while index < length and (value[index] in OWS or value[index] == ","):
            index += 1
        if index >= length:
            break

        start = index
        while index < length and value[index] in TCHAR:
            index += 1

        if index == start:
            index += 1
            continue

        name = value[start:index].lower()
        index = _skip_ows(value, index)

        if index >= length or value[index] != "=":
            yield name, None
            continue

        index = _skip_ows(value, index + 1)

        if index < length and value[index] == '"':
            quoted = _read_quoted(value, index)
            if quoted is None:
                # Resume right after the opening quote.
                index += 1
                continue
            directive_value, index = quoted
            yield name, directive_value
        else:
            end = _read_token_value(value, index)
            yield name, value[index:end]
            index = end


def parse_delta_seconds(value: Optional[str]) -> Optional[int]:
    if value is None or not value.isdigit() or not value.isascii():
        return None
    return min(int(value), MAX_DELTA_SECONDS)


class CacheControl:
    """
    Request-side view of the ``Cache-Control`` directives carried by a header mapping.

    The directive list is parsed the first time a property is read and kept
    for the lifetime of the instance. Malformed or missing directives read
    as absent; nothing here raises.

    Directive names are matched case-insensitively. When a directive is
    repeated, the last occurrence wins.

    See also:
        https://www.rfc-editor.org/rfc/rfc9111.html#section-5.2.1
    """

    def __init__(self, headers: HeaderSource, field_name: str = "Cache-Control") -> None:
        self._headers = headers
        self._field_name = field_name
        self._directives: Optional[Dict[str, Optional[str]]] = None

    def _parsed(self) -> Dict[str, Optional[str]]:
        if self._directives is None:
            directives: Dict[str, Optional[str]] = {}
            for name, value in iter_directives(", ".join(self._headers.get_list(self._field_name))):
                directives[name] = value
            self._directives = directives
        return self._directives

    def _present(self, directive: str) -> bool:
        return directive in self._parsed()

    @property
    def directives(self) -> Dict[str, Optional[str]]:
        return dict(self._parsed())

    @property
    def extensions(self) -> List[str]:
        return [
            name if value is None else f"{name}={value}"
            for name, value in self._parsed().items()
            if name not in KNOWN_DIRECTIVES
        ]

    @property
    def no_store(self) -> bool:
        return self._present("no-store")

    @property
    def no_cache(self) -> bool:
        return self._present("no-cache")

    @property
    def must_revalidate(self) -> bool:
        return self._present("must-revalidate")

    @property
    def forces_revalidation(self) -> bool:
        """True when the origin has to confirm any stored response before it is reused."""
        return self.must_revalidate or self.no_cache

    @property
    def max_age(self) -> Optional[int]:
        return parse_delta_seconds(self._parsed().get("max-age"))

    @property
    def max_stale(self) -> Optional[int]:
        directives = self._parsed()
        if "max-stale" not in directives:
            return None
        # A bare max-stale accepts a stale response of any age
        if directives["max-stale"] is None:
            return MAX_DELTA_SECONDS
        return parse_delta_seconds(directives["max-stale"])

    @property
    def min_fresh(self) -> Optional[int]:
        return parse_delta_seconds(self._parsed().get("min-fresh"))

    @property
    def only_if_cached(self) -> bool:
        return self._present("only-if-cached")

    @property
    def no_transform(self) -> bool:
        return self._present("no-transform")

    def __repr__(self) -> str:
        fields = ", ".join(name if value is None else f"{name}={value}" for name, value in self._parsed().items())
        return f"<{type(self).__name__} {fields}>" if fields else f"<{type(self).__name__}>"


def parse_cache_control(value: Optional[str]) -> CacheControl:
    """
    Parse a single Cache-Control field value.

    Examples:
        >>> cc = parse_cache_control("max-age=0, No-Cache")
        >>> cc.max_age
        0
        >>> cc.no_cache
        True
        >>> parse_cache_control(None).max_age is None
        True
    """
    return CacheControl(Headers({} if value is None else {"Cache-Control": value}))
