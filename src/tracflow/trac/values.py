"""Typed projections of untyped XML-RPC values.

``xmlrpc.client.loads`` hands back plain Python objects whose shape depends
entirely on the server. Everything that reads a response goes through the
functions here so that a wrong shape surfaces as a ``DecodeError`` instead of
an ``AttributeError`` or ``KeyError`` deep inside the caller.

Missing keys and wrong kinds are treated differently:

- ``lookup_or_empty`` maps an absent key to ``""`` but rejects a present
  value of the wrong kind.
- ``optional_string`` is lenient about both.
- ``optional_string_list`` is lenient about the container and strict about
  its elements.
"""

from __future__ import annotations

import xmlrpc.client
from collections.abc import Mapping
from typing import Any

from tracflow.trac.exceptions import DecodeError

# Python type -> XML-RPC element name, for error messages
_KINDS: tuple[tuple[type, str], ...] = (
    (bool, "boolean"),  # before int: bool is an int subclass
    (int, "int"),
    (float, "double"),
    (str, "string"),
    (list, "array"),
    (tuple, "array"),
    (dict, "struct"),
    (xmlrpc.client.DateTime, "dateTime.iso8601"),
    (xmlrpc.client.Binary, "base64"),
    (type(None), "nil"),
)


def kind_of(value: Any) -> str:
    """Name the XML-RPC kind of a decoded value."""
    for python_type, kind in _KINDS:
        if isinstance(value, python_type):
            return kind
    return type(value).__name__


def _mismatch(expected: str, value: Any, context: str | None) -> DecodeError:
    where = f" for {context}" if context else ""
    return DecodeError(f"Expected {expected}{where}, got {kind_of(value)}")


def as_string(value: Any, context: str | None = None) -> str:
    """Project a value to ``str``.

    Raises:
        DecodeError: If the value is not a string.
    """
    if not isinstance(value, str):
        raise _mismatch("string", value, context)
    return value


def as_int(value: Any, context: str | None = None) -> int:
    """Project a value to ``int``. Booleans are rejected.

    Raises:
        DecodeError: If the value is not an XML-RPC int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise _mismatch("int", value, context)
    return value


def as_array(value: Any, context: str | None = None) -> list[Any]:
    """Project a value to ``list``.

    Raises:
        DecodeError: If the value is not an array.
    """
    if not isinstance(value, (list, tuple)):
        raise _mismatch("array", value, context)
    return list(value)


def as_struct(value: Any, context: str | None = None) -> dict[str, Any]:
    """Project a value to ``dict``.

    Raises:
        DecodeError: If the value is not a struct.
    """
    if not isinstance(value, dict):
        raise _mismatch("struct", value, context)
    return value


def lookup_or_empty(mapping: Mapping[str, Any], key: str) -> str:
    """Return the string at ``key``, or ``""`` if the key is absent.

    Raises:
        DecodeError: If the key is present but its value is not a string.
    """
    if key not in mapping:
        return ""
    return as_string(mapping[key], context=f"'{key}'")


def optional_string(mapping: Mapping[str, Any], key: str) -> str | None:
    """Return a non-empty string at ``key``, otherwise None."""
    value = mapping.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def optional_string_list(mapping: Mapping[str, Any], key: str) -> list[str] | None:
    """Return the array at ``key`` as a list of strings, or None if not an array.

    Raises:
        DecodeError: If the array holds anything other than strings.
    """
    value = mapping.get(key)
    if not isinstance(value, (list, tuple)):
        return None
    return [as_string(item, context=f"'{key}' entry") for item in value]
