from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from httpmodel import optmanager
from httpmodel.http import Request
from httpmodel.http import Response
from httpmodel.http import ServerRequest
from httpmodel.net import wsgi
from httpmodel.net.http import http1
from httpmodel.options import CONF_PATHS
from httpmodel.options import Options
from httpmodel.stream import Stream
from httpmodel.uploads import UploadedFile
from httpmodel.uri import URI


class MessageFactory:
    """
    Creates messages, URIs, streams and uploaded files with the settings of an `Options`
    instance. The options are read on every call, so later changes take effect.

    >>> factory = MessageFactory(Options(trusted_proxies=["10.0.0.0/8"]))
    >>> factory.create_request(uri="http://example.com/").method
    "GET"
    """

    def __init__(self, options: Options | None = None) -> None:
        self.options = options if options is not None else Options()

    @classmethod
    def from_paths(cls, *paths: str | os.PathLike) -> MessageFactory:
        """
        A factory whose options are loaded from YAML files, later files taking precedence.
        Without arguments, the per-user configuration files are read if they exist.
        """
        opts = Options()
        optmanager.load_paths(opts, *(paths or CONF_PATHS))
        return cls(opts)

    def __repr__(self):
        return f"MessageFactory({self.options!r})"

    # URIs

    def create_uri(self, uri: str = "") -> URI:
        return URI(uri, allowed_schemes=self.options.allowed_schemes)

    def create_uri_from_parts(self, **components) -> URI:
        return URI.from_parts(allowed_schemes=self.options.allowed_schemes, **components)

    # Messages

    def create_request(
        self,
        method: str | None = None,
        uri: URI | str = "",
        headers=(),
        body=None,
    ) -> Request:
        return Request(
            method or self.options.default_method,
            uri,
            headers,
            body,
            self.options.protocol_version,
            allowed_schemes=self.options.allowed_schemes,
        )

    def create_response(
        self,
        status_code: int = 200,
        reason: str = "",
        headers=(),
        body=None,
    ) -> Response:
        return Response(
            status_code,
            headers,
            body,
            self.options.protocol_version,
            reason=reason,
            charset=self.options.charset,
        )

    def create_server_request(
        self,
        method: str | None = None,
        uri: URI | str = "",
        server_params: Mapping[str, Any] | None = None,
        headers=(),
        body=None,
        **kwargs,
    ) -> ServerRequest:
        return ServerRequest(
            method or self.options.default_method,
            uri,
            headers,
            body,
            self.options.protocol_version,
            server_params=server_params,
            trusted_proxies=self.options.trusted_proxies,
            allowed_schemes=self.options.allowed_schemes,
            **kwargs,
        )

    def server_request_from_environ(self, environ: Mapping[str, Any]) -> ServerRequest:
        return wsgi.server_request_from_environ(
            environ,
            trusted_proxies=self.options.trusted_proxies,
            trusted_hosts=self.options.trusted_hosts,
            allowed_schemes=self.options.allowed_schemes,
        )

    def read_response(self, data: str | bytes) -> Response:
        """
        Parse an HTTP/1 response. The charset of the result is the configured one.
        """
        return http1.read_response(data).with_charset(self.options.charset)

    # Bodies

    def create_stream(self, content: bytes | str = b"") -> Stream:
        if isinstance(content, str):
            content = content.encode("utf-8")
        return Stream.from_bytes(content)

    def create_stream_from_file(self, path: str | os.PathLike, mode: str = "rb") -> Stream:
        return Stream.open(path, mode)

    def create_stream_from_resource(self, fileobj) -> Stream:
        return Stream(fileobj)

    def create_uploaded_file(
        self,
        stream_or_path,
        size: int | None = None,
        error: int = 0,
        client_filename: str | None = None,
        client_media_type: str | None = None,
    ) -> UploadedFile:
        if size is None and isinstance(stream_or_path, Stream):
            size = stream_or_path.size
        return UploadedFile(stream_or_path, size, error, client_filename, client_media_type)
