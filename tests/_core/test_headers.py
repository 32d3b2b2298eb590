"""
Tests for the header multi-map and the Cache-Control parser.

Cache-Control parsing follows RFC 9111 Section 5.2
https://www.rfc-editor.org/rfc/rfc9111.html#section-5.2
"""

import pytest

from reqcache import CacheControl, Headers, parse_cache_control
from reqcache._core._headers import iter_directives

# =============================================================================
# Headers
# =============================================================================


def test_headers_are_case_insensitive() -> None:
    headers = Headers({"Content-Type": "text/plain"})

    assert headers["content-type"] == "text/plain"
    assert "CONTENT-TYPE" in headers


def test_headers_keep_repeated_values() -> None:
    headers = Headers([("ETag", '"a"'), ("Accept", "*/*"), ("etag", '"b"')])

    assert headers.get_list("ETag") == ['"a"', '"b"']
    assert headers["etag"] == '"a", "b"'
    assert len(headers) == 2


def test_headers_from_mapping_with_lists() -> None:
    headers = Headers({"ETag": ['"a"', '"b"'], "Accept": "*/*"})

    assert headers.multi_items() == [("ETag", '"a"'), ("ETag", '"b"'), ("Accept", "*/*")]


def test_get_list_for_missing_header_is_empty() -> None:
    assert Headers().get_list("ETag") == []


def test_add_appends_a_line() -> None:
    headers = Headers({"If-None-Match": '"a"'})
    headers.add("If-None-Match", '"b"')

    assert headers.get_list("if-none-match") == ['"a"', '"b"']


def test_setitem_replaces_every_value() -> None:
    headers = Headers([("Accept", "text/html"), ("Accept", "application/json")])
    headers["accept"] = "*/*"

    assert headers.get_list("Accept") == ["*/*"]


def test_delitem() -> None:
    headers = Headers([("Accept", "text/html"), ("Accept", "application/json"), ("Host", "example.com")])
    del headers["ACCEPT"]

    assert headers.multi_items() == [("Host", "example.com")]

    with pytest.raises(KeyError):
        del headers["Accept"]


def test_getitem_missing_header_raises() -> None:
    with pytest.raises(KeyError):
        Headers()["ETag"]


def test_merge_returns_new_headers_and_keeps_duplicates() -> None:
    original = Headers({"Cache-Control": "no-cache", "Accept": "*/*"})
    additions = Headers([("If-None-Match", '"a"'), ("If-None-Match", '"b"'), ("Accept", "text/html")])

    merged = original.merge(additions)

    assert merged is not original
    assert merged.multi_items() == [
        ("Cache-Control", "no-cache"),
        ("Accept", "*/*"),
        ("If-None-Match", '"a"'),
        ("If-None-Match", '"b"'),
        ("Accept", "text/html"),
    ]
    assert original.multi_items() == [("Cache-Control", "no-cache"), ("Accept", "*/*")]


def test_headers_equality_ignores_name_case() -> None:
    assert Headers({"ETag": '"a"'}) == Headers({"etag": '"a"'})
    assert Headers({"ETag": '"a"'}) != Headers({"etag": '"b"'})
    assert Headers({"ETag": '"a"'}) != {"ETag": '"a"'}


# =============================================================================
# Directive tokenizer
# =============================================================================


class TestIterDirectives:
    def test_names_are_lowercased(self) -> None:
        assert list(iter_directives("No-Store, MAX-AGE=10")) == [("no-store", None), ("max-age", "10")]

    def test_empty_members_and_whitespace_are_skipped(self) -> None:
        assert list(iter_directives(" ,, no-cache ,\t,public ")) == [("no-cache", None), ("public", None)]

    def test_quoted_value_may_contain_commas(self) -> None:
        assert list(iter_directives('no-cache="Set-Cookie, Authorization", max-age=5')) == [
            ("no-cache", "Set-Cookie, Authorization"),
            ("max-age", "5"),
        ]

    def test_escaped_quote_inside_quoted_value(self) -> None:
        assert list(iter_directives('ext="a\\"b"')) == [("ext", 'a"b')]

    def test_unterminated_quote_drops_only_its_directive(self) -> None:
        assert list(iter_directives('public, ext="abc, no-store')) == [
            ("public", None),
            ("abc", None),
            ("no-store", None),
        ]

    def test_unquoted_value_ends_at_whitespace(self) -> None:
        assert list(iter_directives("max-age=5 no-cache")) == [("max-age", "5"), ("no-cache", None)]

    def test_unquoted_value_ends_at_a_comma(self) -> None:
        assert list(iter_directives("max-age=5,no-store")) == [("max-age", "5"), ("no-store", None)]

    def test_garbage_is_skipped(self) -> None:
        assert list(iter_directives("@@@, no-store")) == [("no-store", None)]

    def test_missing_comma_between_names(self) -> None:
        assert list(iter_directives("no-store junk, public")) == [("no-store", None), ("junk", None), ("public", None)]

    def test_garbage_glued_to_a_name(self) -> None:
        assert list(iter_directives("@@no-store")) == [("no-store", None)]

    def test_empty_value(self) -> None:
        assert list(iter_directives("max-age=, public")) == [("max-age", ""), ("public", None)]


# =============================================================================
# CacheControl
# =============================================================================


class TestCacheControlPredicates:
    """The predicates the request classification depends on."""

    def test_absent_header(self) -> None:
        cc = CacheControl(Headers())

        assert cc.no_store is False
        assert cc.no_cache is False
        assert cc.must_revalidate is False
        assert cc.forces_revalidation is False
        assert cc.max_age is None

    def test_empty_header(self) -> None:
        cc = parse_cache_control("")

        assert cc.directives == {}
        assert cc.max_age is None

    def test_no_store(self) -> None:
        assert parse_cache_control("no-store").no_store is True

    def test_directive_names_are_case_insensitive(self) -> None:
        cc = parse_cache_control("No-Store, MUST-REVALIDATE, No-Cache")

        assert cc.no_store is True
        assert cc.must_revalidate is True
        assert cc.no_cache is True

    def test_no_cache_with_field_names_is_still_no_cache(self) -> None:
        assert parse_cache_control('no-cache="Set-Cookie"').no_cache is True

    def test_missing_comma_keeps_both_directives(self) -> None:
        cc = parse_cache_control("max-age=5 no-cache")

        assert cc.max_age == 5
        assert cc.no_cache is True

    def test_unterminated_field_names_do_not_hide_no_store(self) -> None:
        cc = parse_cache_control('no-cache="x, no-store')

        assert cc.no_store is True
        assert cc.no_cache is False

    def test_similar_names_do_not_match(self) -> None:
        cc = parse_cache_control("no-stores, x-no-cache")

        assert cc.no_store is False
        assert cc.no_cache is False
        assert cc.extensions == ["no-stores", "x-no-cache"]

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("must-revalidate", True),
            ("no-cache", True),
            ("no-cache, must-revalidate", True),
            ("max-age=0", False),
            ("no-store", False),
        ],
    )
    def test_forces_revalidation(self, value: str, expected: bool) -> None:
        assert parse_cache_control(value).forces_revalidation is expected

    def test_multiple_header_lines_are_combined(self) -> None:
        cc = CacheControl(Headers([("Cache-Control", "max-age=60"), ("cache-control", "no-store")]))

        assert cc.max_age == 60
        assert cc.no_store is True

    def test_custom_field_name(self) -> None:
        cc = CacheControl(Headers({"Surrogate-Control": "no-store"}), field_name="Surrogate-Control")

        assert cc.no_store is True


class TestMaxAge:
    """max-age request directive [RFC9111, Section 5.2.1.1]."""

    def test_valid(self) -> None:
        assert parse_cache_control("max-age=3600").max_age == 3600

    def test_zero(self) -> None:
        assert parse_cache_control("max-age=0").max_age == 0

    def test_quoted(self) -> None:
        assert parse_cache_control('max-age="10"').max_age == 10

    def test_whitespace_around_value(self) -> None:
        assert parse_cache_control("max-age = 10 , public").max_age == 10

    def test_overflow_is_capped(self) -> None:
        assert parse_cache_control("max-age=9999999999999").max_age == 2147483647

    @pytest.mark.parametrize("value", ["max-age", "max-age=", "max-age=abc", "max-age=-1", "max-age=+5", "max-age=1.5"])
    def test_malformed_is_absent(self, value: str) -> None:
        assert parse_cache_control(value).max_age is None

    def test_last_occurrence_wins(self) -> None:
        assert parse_cache_control("max-age=0, max-age=60").max_age == 60


class TestOtherRequestDirectives:
    def test_max_stale_with_value(self) -> None:
        assert parse_cache_control("max-stale=600").max_stale == 600

    def test_max_stale_without_value_accepts_any_staleness(self) -> None:
        assert parse_cache_control("max-stale").max_stale == 2147483647

    def test_max_stale_absent(self) -> None:
        assert parse_cache_control("no-cache").max_stale is None

    def test_min_fresh(self) -> None:
        assert parse_cache_control("min-fresh=30").min_fresh == 30

    def test_only_if_cached_and_no_transform(self) -> None:
        cc = parse_cache_control("only-if-cached, no-transform")

        assert cc.only_if_cached is True
        assert cc.no_transform is True

    def test_extensions(self) -> None:
        assert parse_cache_control("community=UCI, foo, max-age=5").extensions == ["community=UCI", "foo"]


def test_directives_are_parsed_once() -> None:
    headers = Headers({"Cache-Control": "max-age=10"})
    cc = CacheControl(headers)

    assert cc.max_age == 10

    headers["Cache-Control"] = "max-age=20"

    assert cc.max_age == 10
    assert CacheControl(headers).max_age == 20


def test_cache_control_repr() -> None:
    assert repr(parse_cache_control("max-age=0, no-cache")) == "<CacheControl max-age=0, no-cache>"
    assert repr(parse_cache_control(None)) == "<CacheControl>"
