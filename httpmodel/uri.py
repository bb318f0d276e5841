from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import NamedTuple

from httpmodel.exceptions import InvalidURIComponent
from httpmodel.net import check
from httpmodel.net.http import url

DEFAULT_SCHEMES: tuple[str, ...] = ("", "http", "https")

COMPONENT_TYPES = {
    "scheme": str,
    "user_info": str,
    "host": str,
    "port": int,
    "path": str,
    "query": str,
    "fragment": str,
}


class URIParts(NamedTuple):
    scheme: str
    user_info: str
    host: str
    port: int | None
    path: str
    query: str
    fragment: str


class URI:
    """
    An immutable URI.

    Create a URI from a string:
    >>> u = URI("https://user:pw@Example.com:8443/a/b?x=1#top")
    >>> u.host, u.port, u.path
    ("example.com", 8443, "/a/b")

    Every `with_*` method returns a new URI and leaves the original untouched:
    >>> u.with_port(443).authority
    "user:pw@example.com"

    The string passed to the constructor is kept as the string form of the URI.
    Derived URIs rebuild their string form from the components.

    Validation is done by the `is_valid_*` methods, which subclasses may override.
    """

    __slots__ = (
        "_scheme",
        "_user_info",
        "_host",
        "_port",
        "_path",
        "_query",
        "_fragment",
        "_schemes",
        "_uri",
    )

    def __init__(self, uri: str = "", *, allowed_schemes: Iterable[str] | None = None):
        self._schemes = _schemes(allowed_schemes)
        parts = url.split(uri)

        self._scheme = self._check("scheme", parts.scheme.lower())
        self._user_info = self._check("user_info", parts.user_info)
        self._host = self._check("host", parts.host.lower())
        self._port = self._check("port", parts.port)
        self._path = self._check("path", parts.path)
        self._query = self._check("query", parts.query)
        self._fragment = self._check("fragment", parts.fragment)
        self._uri: str | None = uri

    @classmethod
    def from_parts(
        cls,
        scheme: str = "",
        user_info: str = "",
        host: str = "",
        port: int | None = None,
        path: str = "",
        query: str = "",
        fragment: str = "",
        *,
        allowed_schemes: Iterable[str] | None = None,
    ) -> URI:
        """
        Create a URI from discrete components. Each component is validated.
        """
        inst = cls.__new__(cls)
        inst._schemes = _schemes(allowed_schemes)
        inst._scheme = inst._check("scheme", _lower(scheme))
        inst._user_info = inst._check("user_info", user_info)
        inst._host = inst._check("host", _lower(host))
        inst._port = inst._check("port", port)
        inst._path = inst._check("path", path)
        inst._query = inst._check("query", _strip(query, "?"))
        inst._fragment = inst._check("fragment", _strip(fragment, "#"))
        inst._uri = None
        return inst

    def _check(self, component: str, value):
        if value is None and component == "port":
            return None
        if not isinstance(value, COMPONENT_TYPES[component]):
            raise InvalidURIComponent(component, value)
        if not getattr(self, f"is_valid_{component}")(value):
            raise InvalidURIComponent(component, value)
        return value

    def _replace(self, component: str, value) -> URI:
        new = copy.copy(self)
        setattr(new, f"_{component}", value)
        new._uri = None
        return new

    # Validators

    def is_valid_scheme(self, scheme: str) -> bool:
        if scheme in self._schemes:
            return True
        return "*" in self._schemes and check.is_valid_scheme(scheme)

    def is_valid_user_info(self, user_info: str) -> bool:
        return not any(c in user_info for c in "/?#@")

    def is_valid_host(self, host: str) -> bool:
        return not host or check.is_valid_host(host)

    def is_valid_port(self, port: int) -> bool:
        return check.is_valid_port(port)

    def is_valid_path(self, path: str) -> bool:
        """
        Checked after the host is set: without a host, a path starting with "//"
        would be read back as an authority (RFC 3986, section 3.3).
        """
        if "#" in path or "?" in path:
            return False
        return bool(self._host) or not path.startswith("//")

    def is_valid_query(self, query: str) -> bool:
        return "#" not in query

    def is_valid_fragment(self, fragment: str) -> bool:
        return "#" not in fragment

    @property
    def allowed_schemes(self) -> frozenset[str]:
        return self._schemes

    # Components

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def user_info(self) -> str:
        return self._user_info

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int | None:
        """
        The port, or `None` if no port is set or it is the default port of the scheme.
        """
        if self._port is not None and url.default_port(self._scheme) == self._port:
            return None
        return self._port

    @property
    def path(self) -> str:
        return self._path

    @property
    def query(self) -> str:
        return self._query

    @property
    def fragment(self) -> str:
        return self._fragment

    @property
    def authority(self) -> str:
        """
        `[userinfo@]host[:port]`, or an empty string if the URI has no host.
        """
        return url.build_authority(self._scheme, self._user_info, self._host, self._port)

    @property
    def parts(self) -> URIParts:
        """
        The raw components. In contrast to `URI.port`, a default port is retained here.
        """
        return URIParts(
            self._scheme,
            self._user_info,
            self._host,
            self._port,
            self._path,
            self._query,
            self._fragment,
        )

    # Derivation

    def with_scheme(self, scheme: str) -> URI:
        return self._replace("scheme", self._check("scheme", _lower(scheme)))

    def with_user_info(self, user: str, password: str | None = None) -> URI:
        user_info = user
        if password is not None:
            if not isinstance(user, str) or not isinstance(password, str):
                raise InvalidURIComponent("user_info", (user, password))
            user_info = f"{user}:{password}"
        return self._replace("user_info", self._check("user_info", user_info))

    def with_host(self, host: str) -> URI:
        new = self._replace("host", self._check("host", _lower(host)))
        new._check("path", new._path)
        return new

    def with_port(self, port: int | None) -> URI:
        return self._replace("port", self._check("port", port))

    def with_path(self, path: str) -> URI:
        return self._replace("path", self._check("path", path))

    def with_query(self, query: str) -> URI:
        return self._replace("query", self._check("query", _strip(query, "?")))

    def with_fragment(self, fragment: str) -> URI:
        return self._replace("fragment", self._check("fragment", _strip(fragment, "#")))

    # String form

    def __str__(self) -> str:
        if self._uri is None:
            self._uri = url.unparse(
                self._scheme,
                self.authority,
                self._path,
                self._query,
                self._fragment,
            )
        return self._uri

    def __repr__(self) -> str:
        return f"URI({str(self)!r})"

    def _key(self) -> tuple:
        return (
            self._scheme,
            self._user_info,
            self._host,
            self.port,
            self._path,
            self._query,
            self._fragment,
        )

    def __eq__(self, other) -> bool:
        if isinstance(other, URI):
            return self._key() == other._key()
        return False

    def __hash__(self) -> int:
        return hash(self._key())

    @staticmethod
    def encode(s: str) -> str:
        """Percent-encode everything except unreserved characters."""
        return url.quote(s, safe="")

    @staticmethod
    def decode(s: str) -> str:
        return url.unquote(s)


def _schemes(allowed_schemes: Iterable[str] | None) -> frozenset[str]:
    return frozenset(DEFAULT_SCHEMES if allowed_schemes is None else allowed_schemes)


def _lower(value):
    return value.lower() if isinstance(value, str) else value


def _strip(value, prefix: str):
    return value.removeprefix(prefix) if isinstance(value, str) else value
