import re
from collections.abc import Iterable

from httpmodel.http import Response
from httpmodel.net.http.headers import HeaderStore
from httpmodel.stream import Stream

_response_line_re = re.compile(
    r"^HTTP/(?P<version>1\.[01]) (?P<status>\d{3})(?: (?P<reason>.*))?$"
)


def _read_response_line(line: str) -> tuple[str, int, str]:
    m = _response_line_re.match(line)
    if not m:
        raise ValueError(f"Bad HTTP response line: {line!r}")
    return m.group("version"), int(m.group("status")), (m.group("reason") or "").strip()


def _read_headers(lines: Iterable[str]) -> HeaderStore:
    """
    Read a set of headers.

    Returns:
        A HeaderStore

    Raises:
        ValueError, if a line is not a header line.
    """
    ret: list[tuple[str, str]] = []
    for line in lines:
        if line and line[0] in " \t":
            if not ret:
                raise ValueError("Invalid headers")
            # continued header
            ret[-1] = (ret[-1][0], ret[-1][1] + " " + line.strip())
        else:
            name, sep, value = line.partition(":")
            name = name.strip()
            if not sep or not name:
                raise ValueError(f"Invalid header line: {line!r}")
            ret.append((name, value.strip()))
    return HeaderStore(ret)


def read_response_head(lines: list[str]) -> Response:
    """
    Parse an HTTP response head (response line + headers) from a list of lines

    Returns:
        The HTTP response object, with an empty body

    Raises:
        ValueError: The input is malformed.
    """
    if not lines:
        raise ValueError("Empty response")
    version, status_code, reason = _read_response_line(lines[0])
    headers = _read_headers(lines[1:])
    return Response(
        status_code,
        headers,
        protocol_version=version,
        reason=reason,
    )


def read_response(data: str | bytes) -> Response:
    """
    Parse a complete HTTP/1 response: a status line, `Name: value` header lines,
    a blank line and the body. Lines may end in CRLF or LF.

    >>> r = read_response("HTTP/1.1 404 Not Found\\r\\nContent-Type: text/plain\\r\\n\\r\\nnope")
    >>> r.status_code, r.content
    (404, b"nope")

    Raises:
        ValueError: The input is malformed.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", "surrogateescape")
    elif not isinstance(data, str):
        raise TypeError(f"Expected str or bytes, but got {type(data).__name__}.")

    newline = "\r\n" if "\r\n" in data else "\n"
    head, sep, body = data.partition(newline * 2)
    lines = head.rstrip("\r\n").split(newline)
    if not lines[0]:
        raise ValueError("Empty response")

    response = read_response_head(lines)
    if body:
        response = response.with_body(Stream.from_bytes(body.encode("utf-8", "surrogateescape")))
    return response
