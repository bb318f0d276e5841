import binascii

import pytest

from httpmodel.net.http import auth


def test_parse_http_basic_auth():
    input = auth.mkauth("test", "test")
    assert auth.parse_http_basic_auth(input) == ("basic", "test", "test")
    input = auth.mkauth("test", "with:colon")
    assert auth.parse_http_basic_auth(input) == ("basic", "test", "with:colon")
    assert auth.parse_http_basic_auth("Basic dGVzdDo=") == ("Basic", "test", "")


@pytest.mark.parametrize(
    "input",
    [
        "",
        "foo bar",
        "basic abc",
        "basic a b",
        "basic " + binascii.b2a_base64(b"foo").decode("ascii"),
    ],
)
def test_parse_http_basic_auth_error(input):
    with pytest.raises(ValueError):
        auth.parse_http_basic_auth(input)
