from __future__ import annotations

import re
import urllib.parse
from collections.abc import Sequence
from typing import NamedTuple

from httpmodel.exceptions import MalformedURI

# RFC 3986, appendix B. This matches every string; whatever cannot be a URI
# is rejected afterwards.
_uri_re = re.compile(
    r"^(?:(?P<scheme>[^:/?#]+):)?"
    r"(?://(?P<authority>[^/?#]*))?"
    r"(?P<path>[^?#]*)"
    r"(?:\?(?P<query>[^#]*))?"
    r"(?:#(?P<fragment>.*))?$",
    re.DOTALL,
)

# This regex extracts & splits the host header into host and port.
# Handles the edge case of IPv6 addresses containing colons.
# https://bugzilla.mozilla.org/show_bug.cgi?id=45891
_authority_re = re.compile(r"^(?P<host>[^:\[\]]*|\[[^\]]+\])(?::(?P<port>\d*))?$")

# Whitespace and control characters are never part of a URI.
_forbidden_re = re.compile(r"[\x00-\x20\x7f]")

_scheme_re = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


class SplitResult(NamedTuple):
    scheme: str
    user_info: str
    host: str
    port: int | None
    path: str
    query: str
    fragment: str
    has_authority: bool


def split(uri: str) -> SplitResult:
    """
    Decompose a URI string into its components without validating them
    beyond what is needed to tell them apart.

    Raises:
        MalformedURI, if the string cannot be decomposed.
    """
    if not isinstance(uri, str):
        raise MalformedURI(repr(uri), "not a string")
    if _forbidden_re.search(uri):
        raise MalformedURI(uri, "contains whitespace or control characters")

    m = _uri_re.match(uri)
    assert m
    scheme = m.group("scheme") or ""
    if scheme and not _scheme_re.match(scheme):
        raise MalformedURI(uri, "invalid scheme syntax")

    authority = m.group("authority")
    if authority is not None:
        user_info, host, port = parse_authority(authority, uri)
    else:
        user_info, host, port = "", "", None

    return SplitResult(
        scheme=scheme,
        user_info=user_info,
        host=host,
        port=port,
        path=m.group("path"),
        query=m.group("query") or "",
        fragment=m.group("fragment") or "",
        has_authority=authority is not None,
    )


def parse_authority(authority: str, uri: str | None = None) -> tuple[str, str, int | None]:
    """
    Split an authority into a (user info, host, port) tuple.
    The port is not range-checked here.

    Raises:
        MalformedURI, if the authority does not have the shape [userinfo@]host[:port].
    """
    user_info, _, hostport = authority.rpartition("@")
    m = _authority_re.match(hostport)
    if not m:
        raise MalformedURI(uri if uri is not None else authority, "invalid authority")
    port: int | None = None
    if m.group("port"):
        port = int(m.group("port"))
    return user_info, m.group("host"), port


def default_port(scheme: str) -> int | None:
    return {
        "http": 80,
        "https": 443,
    }.get(scheme.lower(), None)


def hostport(scheme: str, host: str, port: int | None) -> str:
    """
    Returns the host component, with a port specification if needed.
    """
    if port is None or default_port(scheme) == port:
        return host
    else:
        return "%s:%d" % (host, port)


def build_authority(scheme: str, user_info: str, host: str, port: int | None) -> str:
    """
    Returns `[userinfo@]host[:port]`, or an empty string if there is no host.
    The port is left out if it is the default port for the scheme.
    """
    if not host:
        return ""
    authority = hostport(scheme, host, port)
    if user_info:
        authority = f"{user_info}@{authority}"
    return authority


def unparse(
    scheme: str, authority: str, path: str, query: str = "", fragment: str = ""
) -> str:
    """
    Returns a URI string, constructed from the specified components.
    """
    uri = ""
    if scheme:
        uri += f"{scheme}:"
    if authority:
        uri += f"//{authority}"
        if path and not path.startswith("/"):
            path = "/" + path
    uri += path
    if query:
        uri += f"?{query}"
    if fragment:
        uri += f"#{fragment}"
    return uri


def encode(s: Sequence[tuple[str, str]]) -> str:
    """
    Takes a list of (key, value) tuples and returns a urlencoded string.
    """
    return urllib.parse.urlencode(s, False, errors="surrogateescape")


def decode(s: str) -> list[tuple[str, str]]:
    """
    Takes a urlencoded string and returns a list of surrogate-escaped (key, value) tuples.
    """
    return urllib.parse.parse_qsl(s, keep_blank_values=True, errors="surrogateescape")


def quote(b: str, safe: str = "/") -> str:
    """
    Returns:
        An ascii-encodable str.
    """
    return urllib.parse.quote(b, safe=safe, errors="surrogateescape")


def unquote(s: str) -> str:
    """
    Args:
        s: A surrogate-escaped str
    Returns:
        A surrogate-escaped str
    """
    return urllib.parse.unquote(s, errors="surrogateescape")
