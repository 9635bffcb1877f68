"""Unit tests for the nested query string serializer."""

import pytest

from bearerclient.params import serialize_params


class TestSerializeParams:
    """Tests for serialize_params."""

    @pytest.mark.parametrize("params", [None, {}])
    def test_empty(self, params):
        """Test no params serialize to an empty string."""
        assert serialize_params(params) == ""

    def test_flat(self):
        """Test flat mappings keep insertion order."""
        assert serialize_params({"page": 2, "q": "open"}) == "page=2&q=open"

    def test_encodes_like_encode_uri_component(self):
        """Test spaces and reserved characters are percent-encoded."""
        assert serialize_params({"q": "a b&c=d", "s": "it's(ok)!"}) == (
            "q=a%20b%26c%3Dd&s=it's(ok)!"
        )

    def test_nested_mapping(self):
        """Test nested mappings use bracket notation."""
        params = {"filter": {"status": "open", "owner": {"id": 7}}}

        assert serialize_params(params) == (
            "filter%5Bstatus%5D=open&filter%5Bowner%5D%5Bid%5D=7"
        )

    def test_list_of_scalars(self):
        """Test lists of scalars repeat the key with empty brackets."""
        assert serialize_params({"ids": [1, 2]}) == "ids%5B%5D=1&ids%5B%5D=2"

    def test_list_of_mappings(self):
        """Test lists of containers keep their index."""
        params = {"items": [{"id": 1}, {"id": 2}]}

        assert serialize_params(params) == (
            "items%5B0%5D%5Bid%5D=1&items%5B1%5D%5Bid%5D=2"
        )

    def test_scalar_conversions(self):
        """Test None, booleans and whole floats."""
        params = {"a": None, "b": True, "c": False, "d": 2.0, "e": 2.5}

        assert serialize_params(params) == "a=&b=true&c=false&d=2&e=2.5"

    def test_callable_values(self):
        """Test callables are invoked for their value."""
        assert serialize_params({"token": lambda: "abc"}) == "token=abc"
