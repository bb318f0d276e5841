import copy
import ipaddress
import logging
import re
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from httpmodel.coretypes.multidict import MultiDict
from httpmodel.net.http import auth
from httpmodel.net.http import cookies
from httpmodel.net.http import status_codes
from httpmodel.net.http import url
from httpmodel.net.http.headers import STATUS_LINE_RE
from httpmodel.net.http.headers import HeaderStore
from httpmodel.net.http.headers import cache_control
from httpmodel.stream import Stream
from httpmodel.uploads import UploadedFile
from httpmodel.uri import URI
from httpmodel.utils import typecheck

logger = logging.getLogger(__name__)

PROTOCOL_VERSIONS = ("1.0", "1.1", "2", "2.0", "3")

METHODS = (
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "CONNECT",
    "OPTIONS",
    "TRACE",
    "PATCH",
)

_msie_re = re.compile(r"MSIE (\d+)", re.IGNORECASE)

_missing = object()

# Headers that may carry the original client address, in order of preference.
FORWARDED_FOR_HEADERS = (
    "Client-IP",
    "X-Forwarded-For",
    "X-Forwarded",
    "X-Cluster-Client-IP",
    "Forwarded-For",
    "Forwarded",
)


def _headers(headers) -> HeaderStore:
    if isinstance(headers, HeaderStore):
        return headers
    elif isinstance(headers, Mapping):
        h = HeaderStore()
        for name, value in headers.items():
            h = h.with_added_header(name, value)
        return h
    elif isinstance(headers, Iterable):
        return HeaderStore(headers)
    else:
        raise TypeError(
            "Expected headers to be a HeaderStore, a mapping or an iterable, but is {}.".format(
                type(headers).__name__
            )
        )


def _body(body) -> Stream:
    if body is None:
        return Stream.from_bytes()
    elif isinstance(body, Stream):
        return body
    elif isinstance(body, (bytes, bytearray)):
        return Stream.from_bytes(bytes(body))
    elif isinstance(body, str):
        return Stream.from_bytes(body.encode("utf-8"))
    else:
        raise TypeError(f"Expected body to be a Stream, bytes or str, but is {type(body).__name__}.")


def _protocol_version(version: str) -> str:
    if version not in PROTOCOL_VERSIONS:
        raise ValueError(f"Unsupported protocol version: {version!r}")
    return version


def _multidict(value) -> MultiDict:
    if isinstance(value, MultiDict):
        return value
    if isinstance(value, (Mapping, Iterable)) and not isinstance(value, str):
        return MultiDict(value)
    raise TypeError(f"Expected a mapping or a list of pairs, but got {type(value).__name__}.")


@dataclass(frozen=True)
class MessageData:
    protocol_version: str
    headers: HeaderStore
    body: Stream

    # noinspection PyUnreachableCode
    if __debug__:

        def __post_init__(self):
            for field in fields(self):
                val = getattr(self, field.name)
                typecheck.check_option_type(field.name, val, field.type)


@dataclass(frozen=True)
class RequestData(MessageData):
    method: str
    uri: URI
    request_target: str | None


@dataclass(frozen=True)
class ResponseData(MessageData):
    status_code: int
    reason: str
    charset: str


@dataclass(frozen=True)
class ServerRequestData(RequestData):
    server_params: Mapping[str, Any]
    cookie_params: MultiDict
    query_params: MultiDict
    uploaded_files: Mapping[str, Any]
    parsed_body: Any
    attributes: Mapping[str, Any]
    trusted_proxies: tuple[str, ...]


class Message:
    """
    Base class for `Request` and `Response`.

    Messages are immutable: every `with_*` method returns a new message and leaves the
    receiver untouched. The body stream is shared between a message and the messages
    derived from it.
    """

    data: MessageData

    def _derive(self, **changes) -> "Message":
        new = copy.copy(self)
        new.data = replace(self.data, **changes)
        return new

    def __eq__(self, other):
        if isinstance(other, Message) and type(self) is type(other):
            return self.data == other.data
        return False

    __hash__ = None  # type: ignore

    @property
    def protocol_version(self) -> str:
        """
        HTTP version number, for example `1.1`.
        """
        return self.data.protocol_version

    def with_protocol_version(self, version: str) -> "Message":
        return self._derive(protocol_version=_protocol_version(version))

    @property
    def is_http10(self) -> bool:
        return self.data.protocol_version == "1.0"

    @property
    def is_http11(self) -> bool:
        return self.data.protocol_version == "1.1"

    @property
    def is_http2(self) -> bool:
        return self.data.protocol_version in ("2", "2.0")

    @property
    def is_http3(self) -> bool:
        return self.data.protocol_version == "3"

    # Headers

    @property
    def headers(self) -> HeaderStore:
        """
        The HTTP headers.
        """
        return self.data.headers

    def with_headers(self, headers) -> "Message":
        return self._derive(headers=_headers(headers))

    @property
    def cookies(self) -> tuple[cookies.Cookie, ...]:
        """
        The cookies set by the `Set-Cookie` header.
        """
        return self.data.headers.cookies

    def has_header(self, name: str) -> bool:
        return self.data.headers.has_header(name)

    def get_header(self, name: str) -> list[str]:
        return self.data.headers.get_header(name)

    def get_header_line(self, name: str) -> str:
        return self.data.headers.get_header_line(name)

    def with_header(self, name: str, value: str | Sequence[str]) -> "Message":
        return self._derive(headers=self.data.headers.with_header(name, value))

    def with_added_header(self, name: str, value: str | Sequence[str]) -> "Message":
        return self._derive(headers=self.data.headers.with_added_header(name, value))

    def without_header(self, name: str) -> "Message":
        return self._derive(headers=self.data.headers.without_header(name))

    def with_cookie(self, cookie) -> "Message":
        return self._derive(headers=self.data.headers.with_cookie(cookie))

    def with_added_cookie(self, cookie) -> "Message":
        return self._derive(headers=self.data.headers.with_added_cookie(cookie))

    # Body

    @property
    def body(self) -> Stream:
        return self.data.body

    def with_body(self, body: Stream) -> "Message":
        if not isinstance(body, Stream):
            raise TypeError(f"Expected body to be a Stream, but is {type(body).__name__}.")
        return self._derive(body=body)

    @property
    def content(self) -> bytes:
        """
        *Read-only:* The complete body. This rewinds the body stream if it is seekable.
        """
        return bytes(self.data.body)


class Request(Message):
    """
    An HTTP request.

    >>> r = Request("post", "https://example.com/items?page=2")
    >>> r.method, r.request_target, r.get_header_line("Host")
    ("POST", "/items?page=2", "example.com")
    """

    data: RequestData

    def __init__(
        self,
        method: str = "GET",
        uri: URI | str = "",
        headers: HeaderStore | Mapping[str, str | Sequence[str]] | Iterable[tuple[str, str]] = (),
        body: Stream | bytes | str | None = None,
        protocol_version: str = "1.1",
        request_target: str | None = None,
        *,
        allowed_schemes: Iterable[str] | None = None,
    ):
        uri = self._uri(uri, allowed_schemes)
        headers = _headers(headers)
        if uri.host and not headers.has_header("Host"):
            headers = _with_host(headers, uri)
        if request_target is not None:
            _check_request_target(request_target)

        self.data = RequestData(
            protocol_version=_protocol_version(protocol_version),
            headers=headers,
            body=_body(body),
            method=_method(method),
            uri=uri,
            request_target=request_target,
        )

    @staticmethod
    def _uri(uri, allowed_schemes=None) -> URI:
        if isinstance(uri, URI):
            return uri
        elif isinstance(uri, str):
            return URI(uri, allowed_schemes=allowed_schemes)
        else:
            raise TypeError(f"Expected uri to be a URI or str, but is {type(uri).__name__}.")

    def __repr__(self) -> str:
        return f"Request({self.method} {self.uri})"

    @property
    def method(self) -> str:
        """
        HTTP request method, e.g. "GET".
        """
        return self.data.method

    def with_method(self, method: str) -> "Request":
        return self._derive(method=_method(method))

    @property
    def is_get(self) -> bool:
        return self.data.method == "GET"

    @property
    def is_head(self) -> bool:
        return self.data.method == "HEAD"

    @property
    def is_post(self) -> bool:
        return self.data.method == "POST"

    @property
    def is_put(self) -> bool:
        return self.data.method == "PUT"

    @property
    def is_patch(self) -> bool:
        return self.data.method == "PATCH"

    @property
    def is_delete(self) -> bool:
        return self.data.method == "DELETE"

    @property
    def is_connect(self) -> bool:
        return self.data.method == "CONNECT"

    @property
    def is_options(self) -> bool:
        return self.data.method == "OPTIONS"

    @property
    def is_trace(self) -> bool:
        return self.data.method == "TRACE"

    @property
    def uri(self) -> URI:
        return self.data.uri

    def with_uri(self, uri: URI | str, preserve_host: bool = False) -> "Request":
        """
        Replace the target URI.

        The Host header is updated from the new URI, unless the URI has no host, or
        `preserve_host` is set and the request already has a Host header.
        """
        uri = self._uri(uri, self.data.uri.allowed_schemes)
        headers = self.data.headers
        if uri.host and not (preserve_host and headers.get_header_line("Host")):
            headers = _with_host(headers, uri)
        return self._derive(uri=uri, headers=headers)

    @property
    def request_target(self) -> str:
        """
        The request target as it appears in the request line: the explicitly set target,
        or the path and query of the URI, or "/".
        """
        if self.data.request_target is not None:
            return self.data.request_target
        target = self.data.uri.path
        if self.data.uri.query:
            target += "?" + self.data.uri.query
        return target or "/"

    def with_request_target(self, request_target: str) -> "Request":
        _check_request_target(request_target)
        return self._derive(request_target=request_target)


def _method(method: str) -> str:
    if not isinstance(method, str):
        raise TypeError(f"Expected method to be a str, but is {type(method).__name__}.")
    method = method.upper()
    if method not in METHODS:
        raise ValueError(f"Unsupported HTTP method: {method!r}")
    return method


def _check_request_target(request_target: str) -> None:
    if not isinstance(request_target, str):
        raise TypeError(
            f"Expected request target to be a str, but is {type(request_target).__name__}."
        )
    if not request_target or re.search(r"\s", request_target):
        raise ValueError(f"Invalid request target: {request_target!r}")


def _with_host(headers: HeaderStore, uri: URI) -> HeaderStore:
    host = url.hostport(uri.scheme, uri.host, uri.port)
    if headers.has_header("Host"):
        return headers.with_header("Host", host)
    # A new Host header goes first.
    return HeaderStore([("Host", host)] + list(headers.fields))


class Response(Message):
    """
    An HTTP response.

    >>> r = Response(404)
    >>> r.status_line
    "HTTP/1.1 404 Not Found"
    >>> r.prepare().get_header_line("Content-Type")
    "text/html; charset=UTF-8"
    """

    data: ResponseData

    def __init__(
        self,
        status_code: int = 200,
        headers: HeaderStore | Mapping[str, str | Sequence[str]] | Iterable[tuple[str, str]] = (),
        body: Stream | bytes | str | None = None,
        protocol_version: str = "1.1",
        reason: str = "",
        charset: str = "UTF-8",
    ):
        status_code = _status_code(status_code)
        if not isinstance(charset, str):
            raise TypeError(f"Expected charset to be a str, but is {type(charset).__name__}.")
        self.data = ResponseData(
            protocol_version=_protocol_version(protocol_version),
            headers=_headers(headers),
            body=_body(body),
            status_code=status_code,
            reason=reason or status_codes.RESPONSES.get(status_code, ""),
            charset=charset,
        )

    def __repr__(self) -> str:
        ct = self.data.headers.get_header_line("Content-Type") or "unknown content type"
        return f"Response({self.status_code}, {ct})"

    @property
    def status_code(self) -> int:
        """
        HTTP Status Code, e.g. ``200``.
        """
        return self.data.status_code

    @property
    def reason(self) -> str:
        """
        HTTP reason phrase, for example "Not Found".
        Defaults to the standard phrase of the status code.
        """
        return self.data.reason

    def with_status(self, code: int, reason: str = "") -> "Response":
        code = _status_code(code)
        return self._derive(
            status_code=code,
            reason=reason or status_codes.RESPONSES.get(code, ""),
        )

    @property
    def charset(self) -> str:
        return self.data.charset

    def with_charset(self, charset: str) -> "Response":
        if not isinstance(charset, str):
            raise TypeError(f"Expected charset to be a str, but is {type(charset).__name__}.")
        return self._derive(charset=charset)

    @property
    def status_line(self) -> str:
        return f"HTTP/{self.protocol_version} {self.status_code} {self.reason}".strip()

    @property
    def is_ok(self) -> bool:
        return self.status_code == status_codes.OK

    @property
    def is_not_found(self) -> bool:
        return self.status_code == status_codes.NOT_FOUND

    @property
    def is_forbidden(self) -> bool:
        return self.status_code == status_codes.FORBIDDEN

    @property
    def is_informational(self) -> bool:
        return 100 <= self.status_code < 200

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_redirection(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600

    @property
    def is_empty(self) -> bool:
        return self.status_code in (status_codes.NO_CONTENT, status_codes.NOT_MODIFIED)

    def prepare(self, request: Request | None = None) -> "Response":
        """
        Return a copy of this response that is ready to be sent in reply to `request`.

         - A 200 response with a Location header becomes a 302.
         - Responses that may have a body get a Content-Type, and text types get a charset.
           204 and 304 responses get an empty body.
         - Header names that look like a status line are dropped.
         - Cache-Control is set to its canonical value. It is removed for attachment
           downloads to Internet Explorer before version 9 over HTTPS, which cannot
           save those otherwise. On HTTP/1.1, `no-cache` also sets Expires and Pragma.
         - Headers are sorted.
        """
        new = self
        headers = self.data.headers

        if new.is_ok and headers.has_header("Location"):
            new = new.with_status(status_codes.FOUND)

        body = self.data.body
        if not new.is_empty:
            content_type = headers.get_header_line("Content-Type")
            if not content_type:
                headers = headers.with_header(
                    "Content-Type", f"text/html; charset={new.charset}"
                )
            elif (
                content_type.startswith("text/")
                and "charset" not in content_type
                and new.charset
            ):
                headers = headers.with_header(
                    "Content-Type", f"{content_type}; charset={new.charset}"
                )
        else:
            body = Stream.from_bytes()

        for name in list(headers):
            if STATUS_LINE_RE.match(name):
                headers = headers.without_header(name)

        cc = cache_control(headers)
        if _is_old_msie_attachment_over_https(headers, request):
            headers = headers.without_header("Cache-Control")
        else:
            headers = headers.with_header("Cache-Control", cc)
            directives = [d.strip().lower() for d in cc.split(",")]
            if new.is_http11 and "no-cache" in directives:
                headers = headers.with_header("Expires", "-1")
                headers = headers.with_header("Pragma", "no-cache")

        return new._derive(headers=headers.sorted(), body=body)

    def sorted_header_lines(self) -> list[str]:
        """
        `Name: value` lines with the canonical Cache-Control, sorted by name.
        Header names shaped like a status line are emitted verbatim and first.
        """
        headers = self.data.headers
        headers = headers.with_header("Cache-Control", cache_control(headers))
        return headers.sorted().lines()


def _status_code(code: int) -> int:
    if isinstance(code, bool) or not isinstance(code, int):
        raise TypeError(f"Expected status code to be an int, but is {type(code).__name__}.")
    if not 100 <= code <= 599:
        raise ValueError(f"Invalid status code: {code}")
    return code


def _is_old_msie_attachment_over_https(headers: HeaderStore, request: Request | None) -> bool:
    if request is None:
        return False
    if "attachment" not in headers.get_header_line("Content-Disposition").lower():
        return False
    if isinstance(request, ServerRequest):
        secure = request.is_secure
        user_agent = request.get_header_line("User-Agent") or request.get_server_param(
            "HTTP_USER_AGENT", ""
        )
    else:
        secure = request.uri.scheme == "https"
        user_agent = request.get_header_line("User-Agent")
    m = _msie_re.search(user_agent)
    return secure and m is not None and int(m.group(1)) < 9


def _check_uploaded_files(files) -> None:
    if isinstance(files, UploadedFile):
        return
    if isinstance(files, Mapping):
        children = files.values()
    elif isinstance(files, Sequence) and not isinstance(files, (str, bytes)):
        children = files
    else:
        raise ValueError("Invalid structure is provided in uploaded files.")
    for child in children:
        _check_uploaded_files(child)


def _check_parsed_body(data) -> None:
    if isinstance(data, (str, bytes, bytearray, int, float)):
        raise TypeError(
            f"Unsupported type for parsed body: {type(data).__name__}. "
            "Expected None, a mapping or an object."
        )


def _is_public_ip(address: str) -> bool:
    try:
        return ipaddress.ip_address(address).is_global
    except ValueError:
        return False


def _forwarded_address(element: str) -> str:
    # Forwarded: for=192.0.2.60;proto=http;by=203.0.113.43
    for pair in element.split(";"):
        key, _, value = pair.strip().partition("=")
        if key.lower() == "for":
            return value.strip('"')
    return element.strip()


class ServerRequest(Request):
    """
    A request as seen by the server that received it: it carries the server environment,
    the parsed cookies, query and body, uploaded files and arbitrary attributes
    added by the application.

    Forwarding headers are only believed if the peer (`REMOTE_ADDR`) is in `trusted_proxies`.
    Entries are addresses or networks:

    >>> r = ServerRequest(
    ...     "GET", "http://example.com/",
    ...     headers={"X-Forwarded-For": "93.184.216.34"},
    ...     server_params={"REMOTE_ADDR": "10.0.0.1"},
    ...     trusted_proxies=["10.0.0.0/8"],
    ... )
    >>> r.client_ip
    "93.184.216.34"
    """

    data: ServerRequestData

    def __init__(
        self,
        method: str = "GET",
        uri: URI | str = "",
        headers: HeaderStore | Mapping[str, str | Sequence[str]] | Iterable[tuple[str, str]] = (),
        body: Stream | bytes | str | None = None,
        protocol_version: str = "1.1",
        request_target: str | None = None,
        *,
        server_params: Mapping[str, Any] | None = None,
        cookie_params: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
        query_params: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
        uploaded_files: Mapping[str, Any] | None = None,
        parsed_body: Any = None,
        attributes: Mapping[str, Any] | None = None,
        trusted_proxies: Iterable[str] = (),
        allowed_schemes: Iterable[str] | None = None,
    ):
        req = Request(
            method,
            uri,
            headers,
            body,
            protocol_version,
            request_target,
            allowed_schemes=allowed_schemes,
        )

        if query_params is None:
            query_params = url.decode(req.uri.query)
        if cookie_params is None:
            cookie_params = [
                pair
                for line in req.get_header("Cookie")
                for pair in cookies.parse_cookie_header(line)
            ]
        if uploaded_files is None:
            uploaded_files = {}
        _check_uploaded_files(uploaded_files)
        if not isinstance(uploaded_files, Mapping):
            raise ValueError("Invalid structure is provided in uploaded files.")
        _check_parsed_body(parsed_body)

        trusted = tuple(trusted_proxies)
        for proxy in trusted:
            # raises ValueError for entries that are neither an address nor a network.
            ipaddress.ip_network(proxy, strict=False)

        self.data = ServerRequestData(
            protocol_version=req.data.protocol_version,
            headers=req.data.headers,
            body=req.data.body,
            method=req.data.method,
            uri=req.data.uri,
            request_target=req.data.request_target,
            server_params=MappingProxyType(dict(server_params or {})),
            cookie_params=_multidict(cookie_params),
            query_params=_multidict(query_params),
            uploaded_files=MappingProxyType(dict(uploaded_files)),
            parsed_body=parsed_body,
            attributes=MappingProxyType(dict(attributes or {})),
            trusted_proxies=trusted,
        )

    @property
    def server_params(self) -> Mapping[str, Any]:
        """
        *Read-only:* The server environment, e.g. the WSGI environ.
        """
        return self.data.server_params

    def has_server_param(self, name: str) -> bool:
        return name in self.data.server_params

    def get_server_param(self, name: str, default=None):
        return self.data.server_params.get(name, default)

    @property
    def cookie_params(self) -> MultiDict:
        return self.data.cookie_params

    def has_cookie_param(self, name: str) -> bool:
        return name in self.data.cookie_params

    def get_cookie_param(self, name: str, default=None):
        return self.data.cookie_params.get(name, default)

    def with_cookie_params(self, cookie_params) -> "ServerRequest":
        return self._derive(cookie_params=_multidict(cookie_params))

    @property
    def query_params(self) -> MultiDict:
        return self.data.query_params

    def with_query_params(self, query_params) -> "ServerRequest":
        """
        Replace the query parameters. The URI is not changed.
        """
        return self._derive(query_params=_multidict(query_params))

    def has_query_param(self, name: str) -> bool:
        return name in self.data.query_params

    def get_query_param(self, name: str, default=None):
        """
        The first value of a query parameter. Use `query_params.get_all` for all of them.
        """
        return self.data.query_params.get(name, default)

    @property
    def uploaded_files(self) -> Mapping[str, Any]:
        """
        A tree of `UploadedFile` instances: mappings and lists with files as leaves.
        """
        return self.data.uploaded_files

    def has_uploaded_file(self, name: str) -> bool:
        return name in self.data.uploaded_files

    def get_uploaded_file(self, name: str):
        """
        The `UploadedFile` (or subtree of files) for a form field, or None.
        """
        return self.data.uploaded_files.get(name)

    def with_uploaded_files(self, uploaded_files: Mapping[str, Any]) -> "ServerRequest":
        """
        Raises:
            ValueError, if a leaf of the tree is not an UploadedFile.
        """
        _check_uploaded_files(uploaded_files)
        if not isinstance(uploaded_files, Mapping):
            raise ValueError("Invalid structure is provided in uploaded files.")
        return self._derive(uploaded_files=MappingProxyType(dict(uploaded_files)))

    @property
    def parsed_body(self) -> Any:
        """
        The deserialized body: `None`, a mapping or an object.
        """
        return self.data.parsed_body

    def with_parsed_body(self, data) -> "ServerRequest":
        _check_parsed_body(data)
        return self._derive(parsed_body=data)

    def has_post_param(self, name: str) -> bool:
        return self.get_post_param(name, _missing) is not _missing

    def get_post_param(self, name: str, default=None):
        """
        A key of a mapping body or an attribute of an object body.
        """
        body = self.data.parsed_body
        if body is None:
            return default
        if isinstance(body, Mapping):
            return body.get(name, default)
        if isinstance(body, Sequence):
            return default
        return getattr(body, name, default)

    @property
    def attributes(self) -> Mapping[str, Any]:
        return self.data.attributes

    def has_attribute(self, name: str) -> bool:
        return name in self.data.attributes

    def get_attribute(self, name: str, default=None):
        return self.data.attributes.get(name, default)

    def with_attribute(self, name: str, value) -> "ServerRequest":
        attributes = dict(self.data.attributes)
        attributes[name] = value
        return self._derive(attributes=MappingProxyType(attributes))

    def without_attribute(self, name: str) -> "ServerRequest":
        if name not in self.data.attributes:
            return self
        attributes = dict(self.data.attributes)
        del attributes[name]
        return self._derive(attributes=MappingProxyType(attributes))

    # Environment

    @property
    def trusted_proxies(self) -> tuple[str, ...]:
        return self.data.trusted_proxies

    @property
    def is_from_trusted_proxy(self) -> bool:
        remote_addr = self.get_server_param("REMOTE_ADDR")
        if not remote_addr or not self.data.trusted_proxies:
            return False
        try:
            peer = ipaddress.ip_address(remote_addr)
        except ValueError:
            return False
        return any(
            peer in ipaddress.ip_network(proxy, strict=False)
            for proxy in self.data.trusted_proxies
        )

    @property
    def is_secure(self) -> bool:
        """
        True if the request was made over HTTPS, either directly or to a trusted proxy
        that says so in `X-Forwarded-Proto`.
        """
        https = self.get_server_param("HTTPS")
        if https and str(https).lower() != "off":
            return True
        if self.data.uri.scheme == "https":
            return True
        if self.is_from_trusted_proxy:
            return self.get_header_line("X-Forwarded-Proto").strip().lower() == "https"
        return False

    @property
    def client_ip(self) -> str | None:
        """
        The address of the client. If the peer is a trusted proxy, this is the first
        public address found in the forwarding headers. Otherwise it is `REMOTE_ADDR`.
        """
        if self.is_from_trusted_proxy:
            for name in FORWARDED_FOR_HEADERS:
                for element in self.get_header_line(name).split(","):
                    address = _forwarded_address(element)
                    if _is_public_ip(address):
                        return address
        return self.get_server_param("REMOTE_ADDR")

    @property
    def is_ajax(self) -> bool:
        return self.get_header_line("X-Requested-With").upper() == "XMLHTTPREQUEST"

    @property
    def base_path(self) -> str:
        """
        The path the application is mounted at, taken from `SCRIPT_NAME`, without a
        trailing slash. If `REQUEST_URI` is known and does not start with it (the
        request was rewritten), trailing segments are dropped until it does.
        """
        base = str(self.get_server_param("SCRIPT_NAME") or "").rstrip("/")
        request_uri = str(self.get_server_param("REQUEST_URI") or "")
        request_path = request_uri.partition("?")[0]
        if base and request_path and not _is_path_prefix(base, request_path):
            segments = base.strip("/").split("/")
            while segments and not _is_path_prefix("/" + "/".join(segments), request_path):
                segments.pop()
            base = "/" + "/".join(segments) if segments else ""
        return base

    @property
    def base_url(self) -> str:
        """
        The URL of the application: scheme, authority and `base_path`.
        Without a host, this is just `base_path`.

        >>> ServerRequest(
        ...     "GET", "http://example.com/app/users/1",
        ...     server_params={"SCRIPT_NAME": "/app"},
        ... ).base_url
        "http://example.com/app"
        """
        authority = self.data.uri.authority
        if not authority:
            return self.base_path
        scheme = "https" if self.is_secure else (self.data.uri.scheme or "http")
        return f"{scheme}://{authority}{self.base_path}"

    @property
    def path_info(self) -> str:
        """
        The path of the URI below `base_path`, always starting with a slash.
        """
        path = self.data.uri.path
        base = self.base_path
        if base and _is_path_prefix(base, path):
            path = path[len(base):]
        return "/" + path.lstrip("/")

    @property
    def credentials(self) -> tuple[str, str | None] | None:
        """
        The (user, password) the client authenticated with, from the user info of the URI,
        a Basic `Authorization` header or the `REMOTE_USER` set by the server, in that order.
        The password is None if it is not known. Returns None if there are no credentials.
        """
        if self.data.uri.user_info:
            user, sep, password = self.data.uri.user_info.partition(":")
            return user, password if sep else None
        authorization = self.get_header_line("Authorization")
        if authorization:
            try:
                _, user, password = auth.parse_http_basic_auth(authorization)
            except ValueError:
                logger.debug("Ignoring unparseable Authorization header")
            else:
                return user, password
        remote_user = self.get_server_param("REMOTE_USER")
        if remote_user:
            return str(remote_user), None
        return None

    @property
    def user(self) -> str | None:
        creds = self.credentials
        return creds[0] if creds else None

    @property
    def password(self) -> str | None:
        creds = self.credentials
        return creds[1] if creds else None


def _is_path_prefix(prefix: str, path: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")
