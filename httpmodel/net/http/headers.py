from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from httpmodel.coretypes import multidict
from httpmodel.exceptions import InvalidHeaderValue
from httpmodel.net.http import cookies

# Header names that look like a status line are a leftover of raw header blocks.
# They are kept in front when sorting and dropped when a response is prepared.
STATUS_LINE_RE = re.compile(r"^HTTP/1\.[01] \d{3}.*$", re.IGNORECASE)


def _values(name: str, value) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        if all(isinstance(v, str) for v in value):
            return tuple(value)
    raise InvalidHeaderValue(name, value)


def _check_field(name: str, value: str) -> None:
    if not isinstance(name, str):
        raise TypeError(f"Header names must be str, not {type(name).__name__}.")
    if not isinstance(value, str):
        raise InvalidHeaderValue(name, value)
    # A line break would start a new header line on the wire.
    if "\r" in name or "\n" in name or "\r" in value or "\n" in value:
        raise InvalidHeaderValue(name, value)


class HeaderStore(multidict._MultiDict):
    """
    Case-insensitive, ordered header storage. Each header name maps to a tuple of values.

    Create headers from (name, value) tuples or keyword arguments:
    >>> h = HeaderStore([("Host", "example.com")], content_type="text/html")

    Names are compared case-insensitively, but keep the spelling they were set with:
    >>> h.get_header("HOST")
    ["example.com"]
    >>> list(h)
    ["Host", "content-type"]

    HeaderStores are immutable. Every `with_*` method returns a new store:
    >>> h2 = h.with_header("host", "example.org")
    >>> h.get_header_line("Host"), h2.get_header_line("Host")
    ("example.com", "example.org")

    The values of the `Set-Cookie` header are also available as parsed cookies:
    >>> h.with_header("Set-Cookie", "id=1").cookies
    (Cookie(name="id", value="1", ...),)
    """

    def __init__(self, fields: Iterable[tuple[str, str]] = (), **headers):
        """
        *Args:*
         - *fields:* (optional) list of ``(name, value)`` header tuples. All names and values must be str.
         - *\\*\\*headers:* Additional headers, added after `fields`.
           For convenience, underscores in header names will be transformed to dashes -
           this behaviour does not extend to other methods.
        """
        fields = list(fields)
        fields.extend((name.replace("_", "-"), value) for name, value in headers.items())
        for name, value in fields:
            _check_field(name, value)
        super().__init__(fields)
        self._cookies = self._parse_cookies()

    @classmethod
    def _from_entries(cls, entries) -> HeaderStore:
        """
        Every derived store passes through here, so that values are checked and
        `cookies` always matches the `Set-Cookie` header. Empty entries are dropped.
        """
        entries = [(name, tuple(values)) for name, values in entries if values]
        for name, values in entries:
            for value in values:
                _check_field(name, value)
        inst = super()._from_entries(entries)
        inst._cookies = inst._parse_cookies()
        return inst

    def _parse_cookies(self) -> tuple[cookies.Cookie, ...]:
        return tuple(cookies.parse_set_cookie(line) for line in self.get_all("Set-Cookie"))

    @staticmethod
    def _reduce_values(values) -> str:
        # Headers can be folded
        return ", ".join(values)

    @staticmethod
    def _kconv(key) -> str:
        # Headers are case-insensitive
        if not isinstance(key, str):
            raise TypeError(f"Header names must be str, not {type(key).__name__}.")
        return key.lower()

    def __eq__(self, other):
        if isinstance(other, HeaderStore):
            return self._entries == other._entries
        return False

    def __hash__(self):
        return hash(self._entries)

    @property
    def cookies(self) -> tuple[cookies.Cookie, ...]:
        """
        The cookies parsed from the `Set-Cookie` values, in order.
        """
        return self._cookies

    def has_header(self, name: str) -> bool:
        return name in self

    def get_header(self, name: str) -> list[str]:
        """
        All values of a header, or an empty list if it is not set.
        """
        return list(self.get_all(name))

    def get_header_line(self, name: str) -> str:
        """
        All values of a header joined with a comma, or an empty string if it is not set.
        """
        return ",".join(self.get_all(name))

    def with_header(self, name: str, value: str | Sequence[str]) -> HeaderStore:
        """
        Replace all values of a header. The header keeps its position.

        Raises:
            InvalidHeaderValue, if value is neither a str nor a sequence of str.
        """
        values = _values(name, value)
        if not values:
            return self.without_header(name)
        return self.with_all(name, values)

    def with_added_header(self, name: str, value: str | Sequence[str]) -> HeaderStore:
        """
        Append values to a header. Values the header already has are skipped.

        Raises:
            InvalidHeaderValue, if value is neither a str nor a sequence of str.
        """
        values = _values(name, value)
        existing = self.get_all(name)
        added = []
        for v in values:
            if v not in existing and v not in added:
                added.append(v)
        if not added:
            return self
        return self.with_added(name, added)

    def without_header(self, name: str) -> HeaderStore:
        return self.without(name)

    def with_cookie(self, cookie: cookies.Cookie | Iterable[cookies.Cookie]) -> HeaderStore:
        """
        Replace the `Set-Cookie` header with the given cookie or cookies.
        """
        return self.with_header("Set-Cookie", _format_cookies(cookie))

    def with_added_cookie(self, cookie: cookies.Cookie | Iterable[cookies.Cookie]) -> HeaderStore:
        return self.with_added_header("Set-Cookie", _format_cookies(cookie))

    def sorted(self) -> HeaderStore:
        """
        A copy with the headers ordered by `sort_headers`.
        """
        return self._from_entries(sort_headers(self._entries))

    def lines(self) -> list[str]:
        """
        One `Name: value` line per value. Status-line shaped names are emitted verbatim.
        """
        ret = []
        for name, values in self._entries:
            if STATUS_LINE_RE.match(name):
                ret.append(name)
                continue
            for value in values:
                ret.append(f"{name}: {value}")
        return ret

    def __bytes__(self) -> bytes:
        lines = self.lines()
        if lines:
            return "\r\n".join(lines).encode("utf-8", "surrogateescape") + b"\r\n"
        else:
            return b""


def _format_cookies(cookie) -> list[str]:
    if isinstance(cookie, cookies.Cookie):
        cookie = [cookie]
    lines = []
    for c in cookie:
        if not isinstance(c, cookies.Cookie):
            raise TypeError(f"Expected a Cookie, not {type(c).__name__}.")
        lines.extend(cookies.format_set_cookie(c))
    return lines


def cache_control(headers: HeaderStore) -> str:
    """
    The canonical Cache-Control value for a response with the given headers.

    >>> cache_control(HeaderStore())
    "no-cache"
    >>> cache_control(HeaderStore(etag='"abc"'))
    "private, must-revalidate"
    >>> cache_control(HeaderStore(cache_control="max-age=60"))
    "max-age=60, private"
    """
    if not any(
        headers.has_header(name)
        for name in ("Cache-Control", "Etag", "Last-Modified", "Expires")
    ):
        return "no-cache"
    if not headers.has_header("Cache-Control"):
        return "private, must-revalidate"

    directives = [
        d.strip()
        for value in headers.get_all("Cache-Control")
        for d in value.split(",")
        if d.strip()
    ]
    directives.sort(key=lambda d: d.partition("=")[0].strip().lower())
    line = ", ".join(directives)
    if not any(
        word in d
        for d in directives
        for word in ("public", "private", "s-maxage")
    ):
        line = line + ", private" if line else "private"
    return line


def sort_headers(entries: Iterable[tuple]) -> list[tuple]:
    """
    Sort (name, values) entries by name. Names shaped like a status line go first,
    in their original order.
    """
    entries = list(entries)
    status = [e for e in entries if STATUS_LINE_RE.match(e[0])]
    rest = [e for e in entries if not STATUS_LINE_RE.match(e[0])]
    rest.sort(key=lambda e: e[0].lower())
    return status + rest
