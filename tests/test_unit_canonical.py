"""Unit tests for JSON canonicalization helpers."""

import json

import pytest

from gateway_audit.core.canonical import (
    canonical_json_size,
    canonicalize_json,
    to_canonical_json_pretty,
    to_canonical_json_string,
)


class TestCanonicalJson:
    @pytest.mark.anyio
    async def test_keys_are_sorted_recursively(self):
        result = canonicalize_json({"z": 1, "a": {"c": 2, "b": [{"y": 1, "x": 2}]}})
        assert list(result) == ["a", "z"]
        assert list(result["a"]) == ["b", "c"]
        assert list(result["a"]["b"][0]) == ["x", "y"]

    @pytest.mark.anyio
    async def test_compact_string(self):
        assert (
            to_canonical_json_string({"type": "object", "required": ["id"]})
            == '{"required":["id"],"type":"object"}'
        )

    @pytest.mark.anyio
    async def test_pretty_string_round_trips(self):
        obj = {"b": [1, 2], "a": "ü"}
        text = to_canonical_json_pretty(obj)
        assert json.loads(text) == obj
        assert text.index('"a"') < text.index('"b"')

    @pytest.mark.anyio
    async def test_size_is_independent_of_key_order(self):
        assert canonical_json_size({"a": 1, "b": 2}) == canonical_json_size({"b": 2, "a": 1})

    @pytest.mark.anyio
    async def test_size_counts_utf8_bytes(self):
        assert canonical_json_size({"a": "ü"}) == len('{"a":"ü"}'.encode())
