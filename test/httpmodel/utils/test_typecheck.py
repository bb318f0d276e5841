from collections.abc import Mapping
from collections.abc import Sequence
from types import MappingProxyType
from typing import Any
from typing import Optional
from typing import Union

import pytest

from httpmodel.stream import Stream
from httpmodel.utils import typecheck


def test_check_option_type():
    typecheck.check_option_type("foo", 42, int)
    typecheck.check_option_type("foo", 42, float)
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", 42, str)
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", None, str)
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", b"foo", str)


def test_check_class():
    typecheck.check_option_type("body", Stream.from_bytes(), Stream)
    with pytest.raises(TypeError, match="body"):
        typecheck.check_option_type("body", b"", Stream)


def test_check_union():
    typecheck.check_option_type("foo", 42, Union[int, str])
    typecheck.check_option_type("foo", "42", Union[int, str])
    typecheck.check_option_type("foo", None, str | None)
    typecheck.check_option_type("foo", None, Optional[int])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", [], Union[int, str])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", 1.5, str | None)


def test_check_tuple():
    typecheck.check_option_type("foo", (42, "42"), tuple[int, str])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", None, tuple[int, str])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", (), tuple[int, str])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", (42, 42), tuple[int, str])


def test_check_variadic_tuple():
    typecheck.check_option_type("foo", (), tuple[str, ...])
    typecheck.check_option_type("foo", ("a", "b"), tuple[str, ...])
    with pytest.raises(TypeError, match=r"foo\[1\]"):
        typecheck.check_option_type("foo", ("a", 1), tuple[str, ...])


def test_check_sequence():
    typecheck.check_option_type("foo", [10], Sequence[int])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", ["foo"], Sequence[int])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", [b"foo"], Sequence[str])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", "foo", Sequence[str])


def test_check_mapping():
    typecheck.check_option_type("foo", {"a": 1}, Mapping[str, Any])
    typecheck.check_option_type("foo", MappingProxyType({"a": "b"}), Mapping[str, str])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", [("a", 1)], Mapping[str, Any])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", {1: 1}, Mapping[str, Any])
    with pytest.raises(TypeError):
        typecheck.check_option_type("foo", {"a": 1}, Mapping[str, str])


def test_check_any():
    typecheck.check_option_type("foo", 42, Any)
    typecheck.check_option_type("foo", object(), Any)
    typecheck.check_option_type("foo", None, Any)
