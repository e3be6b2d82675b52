# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for URL joining, fragment merging and body classification."""

import io

import httpx
import pytest
from pydantic import BaseModel

from fetchcall.forms import MultipartForm
from fetchcall.utils import (
    BodyInfo,
    adapt_callable,
    get_body_info,
    join_url,
    merge_headers,
    merge_query_params,
)


class TestJoinUrl:
    @pytest.mark.parametrize(
        "base, path",
        [
            ("http://h/a/", "b"),
            ("http://h/a", "b"),
            ("http://h/a/", "/b"),
            ("http://h/a", "/b"),
        ],
    )
    def test_single_separator(self, base, path):
        assert str(join_url(base, path)) == "http://h/a/b"

    def test_empty_path_yields_root(self):
        assert str(join_url("http://h", "")) == "http://h/"
        assert str(join_url("http://h/", "")) == "http://h/"

    def test_empty_path_keeps_base_path(self):
        assert str(join_url("http://h/api/v1/", "")) == "http://h/api/v1"

    def test_path_without_leading_slash_appends(self):
        assert str(join_url("http://h/api", "users/1")) == "http://h/api/users/1"

    def test_port_is_preserved(self):
        assert str(join_url("http://h:8080/", "/x")) == "http://h:8080/x"

    def test_absolute_path_replaces_base(self):
        url = join_url("http://h/api", "https://other.org/x")
        assert str(url) == "https://other.org/x"

    def test_query_in_path_is_kept(self):
        url = join_url("http://h/a?base=1", "b?y=2")
        assert str(url) == "http://h/a/b?y=2"

    def test_accepts_httpx_url(self):
        assert str(join_url(httpx.URL("http://h/a"), "b")) == "http://h/a/b"

    def test_encoded_slash_stays_in_its_segment(self):
        url = join_url("http://h/api", "/files/a%2Fb")
        assert url.raw_path == b"/api/files/a%2Fb"
        assert str(url) == "http://h/api/files/a%2Fb"

    def test_encoded_question_mark_is_not_a_query(self):
        url = join_url("http://h", "/q/what%3F")
        assert url.raw_path == b"/q/what%3F"
        assert url.query == b""

    def test_encoded_base_path_is_kept(self):
        url = join_url("http://h/a%20b/", "c?x=%2F")
        assert url.raw_path == b"/a%20b/c?x=%2F"


class TestMergeQueryParams:
    def test_sets_are_concatenated_in_order(self):
        merged = merge_query_params([{"foo": "bar"}, {"baz": "x"}])
        assert merged == [("foo", "bar"), ("baz", "x")]

    def test_duplicate_keys_across_sets_are_kept(self):
        merged = merge_query_params([{"a": "1"}, {"a": "2"}])
        assert merged == [("a", "1"), ("a", "2")]

    def test_pair_list_and_query_params(self):
        merged = merge_query_params(
            [[("a", "1"), ("a", "2")], httpx.QueryParams({"b": "3"}), "c=4"]
        )
        assert merged == [("a", "1"), ("a", "2"), ("b", "3"), ("c", "4")]

    def test_interleaved_pairs_keep_their_order(self):
        merged = merge_query_params([[("a", "1"), ("b", "2"), ("a", "3")]])
        assert merged == [("a", "1"), ("b", "2"), ("a", "3")]

    def test_value_conversion(self):
        merged = merge_query_params([{"n": 5, "flag": True, "tags": ["x", "y"]}])
        assert merged == [
            ("n", "5"),
            ("flag", "true"),
            ("tags", "x"),
            ("tags", "y"),
        ]

    def test_no_sets(self):
        assert merge_query_params([]) == []


class TestMergeHeaders:
    def test_mapping_last_write_wins_case_insensitively(self):
        headers = merge_headers([{"X-Token": "1"}, {"x-token": "2"}])
        assert headers.get_list("x-token") == ["2"]

    def test_pair_list_duplicates_survive(self):
        headers = merge_headers([[("accept", "a"), ("accept", "b")]])
        assert headers.get_list("Accept") == ["a", "b"]

    def test_pair_list_replaces_earlier_sets(self):
        headers = merge_headers(
            [{"accept": "old"}, [("Accept", "b"), ("accept", "c")]]
        )
        assert headers.get_list("accept") == ["b", "c"]

    def test_mapping_replaces_earlier_pair_list(self):
        headers = merge_headers([[("x", "1"), ("x", "2")], {"X": "3"}])
        assert headers.get_list("x") == ["3"]

    def test_httpx_headers_source(self):
        source = httpx.Headers([("x-id", "1"), ("x-id", "2")])
        headers = merge_headers([{"x-id": "0"}, source])
        assert headers.get_list("x-id") == ["1", "2"]

    def test_values_are_stringified_and_none_skipped(self):
        headers = merge_headers([{"x-count": 3, "x-skip": None}])
        assert headers["x-count"] == "3"
        assert "x-skip" not in headers

    def test_none_values_are_skipped_in_pair_lists(self):
        headers = merge_headers(
            [{"x-keep": "1"}, [("x-skip", None), ("x-keep", None), ("x-id", 2)]]
        )
        assert "x-skip" not in headers
        assert headers.get_list("x-keep") == ["1"]
        assert headers["x-id"] == "2"

    def test_unrelated_keys_keep_order(self):
        headers = merge_headers([{"a": "1"}, {"b": "2"}])
        assert list(headers.keys()) == ["a", "b"]


class Item(BaseModel):
    name: str
    count: int = 0


class TestGetBodyInfo:
    def test_none_is_no_body(self):
        assert get_body_info(None) == BodyInfo()

    def test_text(self):
        info = get_body_info("hello")
        assert info == BodyInfo("text", "hello", "text/plain")

    @pytest.mark.parametrize("value", [b"raw", bytearray(b"raw"), memoryview(b"raw")])
    def test_binary(self, value):
        info = get_body_info(value)
        assert info.kind == "bytes"
        assert info.payload == b"raw"
        assert info.content_type is None

    def test_file_like_is_stream(self):
        source = io.BytesIO(b"data")
        info = get_body_info(source)
        assert info.kind == "stream"
        assert info.payload is source

    def test_generator_is_stream(self):
        info = get_body_info(chunk for chunk in [b"a", b"b"])
        assert info.kind == "stream"
        assert info.content_type is None

    def test_async_generator_is_stream(self):
        async def chunks():
            yield b"a"

        assert get_body_info(chunks()).kind == "stream"

    def test_urlencoded_form(self):
        form = httpx.QueryParams({"a": "1"})
        info = get_body_info(form)
        assert info == BodyInfo("urlencoded", form)

    def test_multipart_form(self):
        form = MultipartForm().add("a", "1")
        info = get_body_info(form)
        assert info.kind == "multipart"
        assert info.content_type is None

    def test_multipart_form_recognised_structurally(self):
        class ForeignForm:
            __body_kind__ = "multipart/form-data"

            def to_httpx_files(self):
                return []

        assert get_body_info(ForeignForm()).kind == "multipart"

    def test_tag_without_interface_falls_back_to_json(self):
        class Impostor:
            __body_kind__ = "multipart/form-data"

        with pytest.raises(TypeError):
            get_body_info(Impostor())

    def test_json_default(self):
        info = get_body_info({"people": [{"name": "Rune"}]})
        assert info.kind == "json"
        assert info.payload == b'{"people":[{"name":"Rune"}]}'
        assert info.content_type == "application/json"

    def test_json_list_and_scalars(self):
        assert get_body_info([1, 2]).payload == b"[1,2]"
        assert get_body_info(5).payload == b"5"
        assert get_body_info(False).payload == b"false"

    def test_unsupported_object_raises_type_error(self):
        with pytest.raises(TypeError, match="not JSON serializable"):
            get_body_info(object())

    def test_pydantic_model_is_json(self):
        info = get_body_info(Item(name="x", count=2))
        assert info.payload == b'{"name":"x","count":2}'


class TestAdaptCallable:
    def test_full_arity_is_unchanged(self):
        def mapper(data, args):
            return data, args

        assert adapt_callable(mapper, 2) is mapper

    def test_extra_arguments_are_dropped(self):
        adapted = adapt_callable(lambda data: data * 2, 2)
        assert adapted(2, {"ignored": True}) == 4

    def test_zero_argument_resolver(self):
        adapted = adapt_callable(lambda: "/path", 1)
        assert adapted({"any": "args"}) == "/path"

    def test_var_positional_gets_everything(self):
        adapted = adapt_callable(lambda *a: a, 2)
        assert adapted(1, 2) == (1, 2)

    def test_method_descriptor(self):
        adapted = adapt_callable(str.upper, 2)
        assert adapted("abc", None) == "ABC"
