"""
Cookies as immutable values, and the codec between them and Set-Cookie lines.

A Set-Cookie line is read as `name=value` followed by `;`-separated attributes.
Only `expires`, `path`, `domain`, `secure` and `httponly` are understood, anything
else is dropped. Names and values are percent-encoded on output and decoded on
input. Expiry dates use the fixed form `Ddd, dd-Mon-yyyy HH:MM:SS GMT`.

Array cookies carry a mapping as their value and are written as one
`name[key]=value` line per key.
"""
from __future__ import annotations

import calendar
import dataclasses
import datetime
import email.utils
import logging
import re
import time
from collections.abc import Mapping
from types import MappingProxyType
from typing import Union

from httpmodel.net.http import url

logger = logging.getLogger(__name__)

WEEKS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTHS = [
    None,
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

_expires_re = re.compile(
    r"^(?:%s), (\d{2})-(%s)-(\d{4}) (\d{2}):(\d{2}):(\d{2}) GMT$"
    % ("|".join(WEEKS), "|".join(MONTHS[1:]))
)

CookieValue = Union[str, Mapping[str, str]]


def format_expires(ts: int) -> str:
    """
    Format a timestamp as a cookie expiry date.

    >>> format_expires(0)
    "Thu, 01-Jan-1970 00:00:00 GMT"
    """
    year, month, day, hh, mm, ss, wd, y_, z_ = time.gmtime(ts)
    return "%s, %02d-%3s-%04d %02d:%02d:%02d GMT" % (
        WEEKS[wd],
        day, MONTHS[month], year,
        hh, mm, ss
    )


def parse_expires(s: str) -> int:
    """
    Parse a cookie expiry date. Returns 0 if the date cannot be parsed.
    """
    m = _expires_re.match(s.strip())
    if not m:
        logger.debug("Unparseable cookie expiry date: %r", s)
        return 0
    day, month, year, hh, mm, ss = m.groups()
    try:
        dt = datetime.datetime(
            int(year), MONTHS.index(month), int(day), int(hh), int(mm), int(ss)
        )
        return calendar.timegm(dt.timetuple())
    except ValueError:
        logger.debug("Unparseable cookie expiry date: %r", s)
        return 0


def to_timestamp(value) -> int:
    """
    Convert an expiry given as a timestamp, datetime, timedelta (relative to now),
    numeric string or date string to an integer timestamp. Anything else is 0.
    """
    if value is None or value == "":
        return 0
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        return int(value.timestamp())
    if isinstance(value, datetime.timedelta):
        return int(time.time() + value.total_seconds())
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            pass
        ts = parse_expires(value)
        if ts:
            return ts
        e = email.utils.parsedate_tz(value)
        if e:
            return int(email.utils.mktime_tz(e))
        return 0
    return 0


def normalize_domain(domain: str) -> str:
    """
    Returns the domain lowercased with a single leading dot, without a `www.` prefix
    and without a port. An empty domain stays empty.

    >>> normalize_domain("www.Example.com:8080")
    ".example.com"
    """
    if not domain:
        return ""
    domain = domain.strip().lower().lstrip(".")
    domain = domain.removeprefix("www.")
    domain, _, _ = domain.partition(":")
    return "." + domain


@dataclasses.dataclass(frozen=True)
class Cookie:
    """
    An immutable cookie.

    >>> c = Cookie("id", "42", domain="www.Example.com:8080", secure=True)
    >>> c.domain
    ".example.com"
    >>> c.with_value("43").value
    "43"
    """

    name: str
    value: CookieValue = ""
    expires: int = 0
    """Expiry timestamp, 0 for a session cookie."""
    path: str = "/"
    domain: str = ""
    secure: bool = False
    httponly: bool = False

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise TypeError(f"Cookie name must be a str, not {type(self.name).__name__}.")
        value = self.value
        if isinstance(value, Mapping):
            if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
                raise TypeError("Array cookie keys and values must be str.")
            value = MappingProxyType(dict(value))
        elif not isinstance(value, str):
            raise TypeError(
                f"Cookie value must be a str or a mapping, not {type(value).__name__}."
            )
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "expires", to_timestamp(self.expires))
        object.__setattr__(self, "path", self.path or "/")
        object.__setattr__(self, "domain", normalize_domain(self.domain))
        object.__setattr__(self, "secure", bool(self.secure))
        object.__setattr__(self, "httponly", bool(self.httponly))

    @property
    def is_array(self) -> bool:
        return isinstance(self.value, Mapping)

    def is_expired(self, now: float | None = None) -> bool:
        """
        Session cookies never expire.
        """
        if not self.expires:
            return False
        if now is None:
            now = time.time()
        return self.expires <= now

    def with_name(self, name: str) -> Cookie:
        return dataclasses.replace(self, name=name)

    def with_value(self, value: CookieValue) -> Cookie:
        return dataclasses.replace(self, value=value)

    def with_expires(self, expires) -> Cookie:
        return dataclasses.replace(self, expires=expires)

    def with_path(self, path: str) -> Cookie:
        return dataclasses.replace(self, path=path)

    def with_domain(self, domain: str) -> Cookie:
        return dataclasses.replace(self, domain=domain)

    def with_secure(self, secure: bool) -> Cookie:
        return dataclasses.replace(self, secure=secure)

    def with_httponly(self, httponly: bool) -> Cookie:
        return dataclasses.replace(self, httponly=httponly)

    def __str__(self) -> str:
        if self.is_array:
            raise ValueError(
                "The cookie contains multiple values and cannot be formatted as a single line."
            )
        return format_set_cookie(self)[0]


def parse_set_cookie(line: str) -> Cookie:
    """
    Parse a Set-Cookie header value into a Cookie.
    """
    first, *segments = line.split(";")
    name, _, value = first.partition("=")
    attrs = dict(
        expires=0,
        path="",
        domain="",
        secure=False,
        httponly=False,
    )
    for segment in segments:
        key, _, val = segment.partition("=")
        key = key.strip().lower()
        if key == "expires":
            attrs["expires"] = parse_expires(val)
        elif key in ("path", "domain"):
            attrs[key] = val.strip()
        elif key in ("secure", "httponly"):
            attrs[key] = True
        elif key:
            logger.debug("Ignoring unknown cookie attribute %r in %r", key, line)
    return Cookie(name.strip(), url.unquote(value.strip()), **attrs)


def format_set_cookie(cookie: Cookie) -> list[str]:
    """
    Format a Cookie as Set-Cookie header values, one per line.
    An array cookie yields one line per key.
    """
    name = url.quote(cookie.name, safe="")
    if cookie.is_array:
        pairs = [
            (f"{name}[{key}]", url.quote(value, safe=""))
            for key, value in cookie.value.items()
        ]
    else:
        pairs = [(name, url.quote(cookie.value, safe=""))]

    lines = []
    for key, value in pairs:
        line = f"{key}="
        if value:
            line += value
            if cookie.expires != 0:
                line += "; expires=" + format_expires(cookie.expires)
        else:
            line += "null; expires=" + format_expires(int(time.time()) - 3600)
        if cookie.path:
            line += f"; path={cookie.path}"
        if cookie.domain:
            line += f"; domain={cookie.domain}"
        if cookie.secure:
            line += "; secure"
        if cookie.httponly:
            line += "; httponly"
        lines.append(line)
    return lines


def _read_until(s, start, term):
    """
        Read until one of the characters in term is reached.
    """
    if start == len(s):
        return "", start + 1
    for i in range(start, len(s)):
        if s[i] in term:
            return s[start:i], i
    return s[start:i + 1], i + 1


def _read_quoted_string(s, start):
    """
        start: offset to the first quote of the string to be read

        Backslash escapes are honoured.
    """
    escaping = False
    ret = []
    # Skip the first quote
    i = start  # initialize in case the loop doesn't run.
    for i in range(start + 1, len(s)):
        if escaping:
            ret.append(s[i])
            escaping = False
        elif s[i] == '"':
            break
        elif s[i] == "\\":
            escaping = True
        else:
            ret.append(s[i])
    return "".join(ret), i + 1


def _read_value(s, start, delims):
    if start >= len(s):
        return "", start
    elif s[start] == '"':
        return _read_quoted_string(s, start)
    else:
        return _read_until(s, start, delims)


def parse_cookie_header(line: str) -> list[tuple[str, str]]:
    """
    Parse a Cookie request header value.
    Returns a list of (name, value) tuples. Values are percent-decoded.

    >>> parse_cookie_header('a=1; b="x y"')
    [("a", "1"), ("b", "x y")]
    """
    pairs = []
    off = 0
    while off < len(line):
        lhs, off = _read_until(line, off, ";=")
        lhs = lhs.strip()
        rhs = ""
        if off < len(line) and line[off] == "=":
            rhs, off = _read_value(line, off + 1, ";")
        if lhs or rhs:
            pairs.append((lhs, url.unquote(rhs.strip())))
        off += 1
    return pairs
