"""
Query string serialization for nested request params.

Rails-style APIs expect nested params the way jQuery's `$.param` writes them:

    {"filter": {"status": "open"}, "ids": [1, 2]}
    -> filter%5Bstatus%5D=open&ids%5B%5D=1&ids%5B%5D=2

httpx only understands flat mappings, so `HttpTransport` runs params through
`serialize_params` and appends the result to the URL itself.
"""

from collections.abc import Mapping
from typing import Any, Callable
from urllib.parse import quote

ParamsSerializer = Callable[[Mapping[str, Any]], str]

# Characters encodeURIComponent leaves alone
_SAFE = "-_.!~*'()"


def _encode(value: str) -> str:
    return quote(value, safe=_SAFE)


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _build(prefix: str, value: Any, pairs: list[str]) -> None:
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            if prefix.endswith("[]"):
                _build_scalar(prefix, item, pairs)
            else:
                # Nested containers keep their index so the server can group them
                key = str(index) if _is_container(item) else ""
                _build(f"{prefix}[{key}]", item, pairs)
    elif isinstance(value, Mapping):
        for key, item in value.items():
            _build(f"{prefix}[{key}]", item, pairs)
    else:
        _build_scalar(prefix, value, pairs)


def _build_scalar(name: str, value: Any, pairs: list[str]) -> None:
    if callable(value):
        value = value()
    pairs.append(f"{_encode(name)}={_encode(_scalar(value))}")


def serialize_params(params: Mapping[str, Any] | None) -> str:
    """
    Serialize a (possibly nested) params mapping into a query string.

    Args:
        params: Mapping of names to scalars, mappings, lists or tuples.
            `None` values serialize as empty strings, booleans as
            `true`/`false`, and callables are invoked for their value.

    Returns:
        The encoded query string without a leading `?`. Empty for no params.
    """
    if not params:
        return ""

    pairs: list[str] = []
    for key, value in params.items():
        _build(str(key), value, pairs)
    return "&".join(pairs)
