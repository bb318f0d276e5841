"""
Build a ServerRequest from a WSGI environ, the inverse of what a WSGI server
does when it hands a request to an application.
"""
import logging
import urllib.parse
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any

from httpmodel.http import PROTOCOL_VERSIONS
from httpmodel.http import ServerRequest
from httpmodel.net.http import url
from httpmodel.stream import Stream
from httpmodel.uri import URI

logger = logging.getLogger(__name__)

# Characters that may appear unescaped in a path segment (RFC 3986, section 3.3).
_path_safe = "/:@!$&'()*+,;="


def header_name(key: str) -> str | None:
    """
    The header name for an environ key, or None if the key does not hold a header.

    >>> header_name("HTTP_X_REQUESTED_WITH")
    "X-Requested-With"
    """
    if key.startswith("HTTP_"):
        if key in ("HTTP_CONTENT_TYPE", "HTTP_CONTENT_LENGTH"):
            return None
        return key[5:].replace("_", "-").title()
    elif key.startswith("CONTENT_"):
        name = key[8:]
        return "Content-" + (name if name == "MD5" else name.title())
    return None


def headers_from_environ(environ: Mapping[str, Any]) -> list[tuple[str, str]]:
    headers = []
    for key, value in environ.items():
        name = header_name(key)
        if name and isinstance(value, str) and value != "":
            headers.append((name, value))
    return headers


def _is_trusted_host(host: str, trusted_hosts: Iterable[str]) -> bool:
    host = host.lower()
    for trusted in trusted_hosts:
        trusted = trusted.lower()
        if host == trusted:
            return True
        # ".example.com" also matches subdomains.
        if trusted.startswith(".") and (host.endswith(trusted) or host == trusted[1:]):
            return True
    return False


def _host_and_port(
    environ: Mapping[str, Any], trusted_hosts: Iterable[str]
) -> tuple[str, int | None, bool]:
    """
    The host and port of the request, and whether they were taken from the Host header.
    """
    trusted_hosts = list(trusted_hosts)
    host_header = environ.get("HTTP_HOST")
    if host_header:
        try:
            _, host, port = url.parse_authority(host_header)
        except ValueError:
            logger.warning("Ignoring malformed Host header: %r", host_header)
        else:
            if not trusted_hosts or _is_trusted_host(host, trusted_hosts):
                return host, port, True
            logger.warning("Ignoring untrusted Host header: %r", host_header)

    host = environ.get("SERVER_NAME", "")
    port_str = environ.get("SERVER_PORT", "")
    port = int(port_str) if str(port_str).isdigit() else None
    return host, port, False


def _protocol_version(server_protocol: str) -> str:
    version = server_protocol.upper().removeprefix("HTTP/")
    if version in PROTOCOL_VERSIONS:
        return version
    logger.debug("Unknown SERVER_PROTOCOL %r, assuming HTTP/1.1", server_protocol)
    return "1.1"


def server_request_from_environ(
    environ: Mapping[str, Any],
    *,
    trusted_proxies: Iterable[str] = (),
    trusted_hosts: Iterable[str] = (),
    allowed_schemes: Iterable[str] | None = None,
) -> ServerRequest:
    """
    Create a ServerRequest from a WSGI environ.

    The URI is rebuilt from `wsgi.url_scheme`, the Host header (or `SERVER_NAME` and
    `SERVER_PORT`), `SCRIPT_NAME`, `PATH_INFO` and `QUERY_STRING`. If `trusted_hosts`
    is not empty, a Host header that is not in it is ignored and replaced by one
    derived from the URI.

    Raises:
        ValueError, if the environ describes an invalid request.
    """
    scheme = environ.get("wsgi.url_scheme", "http")
    host, port, host_accepted = _host_and_port(environ, trusted_hosts)
    # PEP 3333: PATH_INFO holds the raw bytes decoded as latin-1.
    raw_path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
    path = urllib.parse.quote(raw_path.encode("latin-1", "replace"), safe=_path_safe)
    uri = URI.from_parts(
        scheme=scheme,
        host=host,
        port=port,
        path=path or "/",
        query=environ.get("QUERY_STRING", ""),
        allowed_schemes=allowed_schemes,
    )

    wsgi_input = environ.get("wsgi.input")
    body = Stream(wsgi_input) if wsgi_input is not None else Stream.from_bytes()

    headers = headers_from_environ(environ)
    if not host_accepted:
        # The Host header is rebuilt from the URI.
        headers = [(name, value) for name, value in headers if name != "Host"]

    return ServerRequest(
        environ.get("REQUEST_METHOD", "GET"),
        uri,
        headers,
        body,
        _protocol_version(environ.get("SERVER_PROTOCOL", "HTTP/1.1")),
        server_params=environ,
        trusted_proxies=trusted_proxies,
    )
