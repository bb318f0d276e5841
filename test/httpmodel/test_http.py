import pytest

from httpmodel.http import Request
from httpmodel.http import Response
from httpmodel.net.http.cookies import Cookie
from httpmodel.net.http.headers import HeaderStore
from httpmodel.stream import Stream
from httpmodel.test.tutils import treq
from httpmodel.test.tutils import tresp
from httpmodel.uri import URI

MSIE8 = "Mozilla/4.0 (compatible; MSIE 8.0; Windows NT 6.1)"


class TestMessage:
    def test_protocol_version(self):
        r = treq()
        assert r.protocol_version == "1.1"
        assert r.is_http11
        r2 = r.with_protocol_version("1.0")
        assert r2.is_http10
        assert r.is_http11
        assert r.with_protocol_version("2").is_http2
        assert r.with_protocol_version("2.0").is_http2
        assert r.with_protocol_version("3").is_http3
        with pytest.raises(ValueError):
            r.with_protocol_version("1.2")

    def test_headers(self):
        r = treq()
        assert r.has_header("HEADER")
        assert r.get_header("header") == ["qvalue"]
        assert r.get_header_line("Content-Length") == "7"

        r2 = r.with_header("Header", "other")
        assert r2.get_header("header") == ["other"]
        assert r.get_header("header") == ["qvalue"]

        r3 = r.with_added_header("header", ["qvalue", "more"])
        assert r3.get_header("header") == ["qvalue", "more"]

        assert not r.without_header("header").has_header("header")
        assert r.has_header("header")

        r4 = r.with_headers({"X": "1"})
        assert list(r4.headers) == ["X"]
        r5 = r.with_headers([("Y", "2")])
        assert r5.get_header_line("y") == "2"
        with pytest.raises(TypeError):
            r.with_headers(42)

    def test_cookies(self):
        resp = tresp().with_cookie(Cookie("id", "1"))
        assert resp.cookies == (Cookie("id", "1"),)
        resp = resp.with_added_cookie(Cookie("other", "2"))
        assert [c.name for c in resp.cookies] == ["id", "other"]
        assert resp.without_header("set-cookie").cookies == ()

    def test_body(self):
        r = treq()
        assert r.content == b"content"
        assert r.content == b"content"
        s = Stream.from_bytes(b"new")
        r2 = r.with_body(s)
        assert r2.body is s
        assert r.content == b"content"
        with pytest.raises(TypeError):
            r.with_body(b"bytes")

    def test_body_shared(self):
        r = treq()
        assert r.with_header("X", "1").body is r.body

    def test_eq(self):
        r = treq()
        assert r == r.with_method("get")
        assert r != r.with_method("POST")
        assert r != tresp()
        with pytest.raises(TypeError):
            hash(r)


class TestRequest:
    def test_defaults(self):
        r = Request()
        assert r.method == "GET"
        assert r.uri == URI("")
        assert r.protocol_version == "1.1"
        assert r.request_target == "/"
        assert len(r.headers) == 0
        assert r.content == b""

    def test_body_types(self):
        assert Request(body="ü").content == "ü".encode()
        assert Request(body=bytearray(b"x")).content == b"x"
        with pytest.raises(TypeError):
            Request(body=42)

    def test_host_header(self):
        r = Request("GET", "http://example.com:8080/x", [("Accept", "*/*")])
        assert list(r.headers) == ["Host", "Accept"]
        assert r.get_header_line("Host") == "example.com:8080"

        r = Request("GET", "https://example.com:443/")
        assert r.get_header_line("Host") == "example.com"

        r = Request("GET", "http://example.com/", {"Host": "other.com"})
        assert r.get_header_line("Host") == "other.com"

        assert not Request("GET", "/relative").has_header("Host")

    def test_method(self):
        r = Request("post", "/")
        assert r.method == "POST"
        assert r.is_post
        assert not r.is_get
        assert r.with_method("head").is_head
        with pytest.raises(ValueError):
            r.with_method("FOO")
        with pytest.raises(TypeError):
            Request(42)

    @pytest.mark.parametrize(
        "method, predicate",
        [
            ("PUT", "is_put"),
            ("PATCH", "is_patch"),
            ("DELETE", "is_delete"),
            ("CONNECT", "is_connect"),
            ("OPTIONS", "is_options"),
            ("TRACE", "is_trace"),
        ],
    )
    def test_method_predicates(self, method, predicate):
        r = Request(method, "/")
        assert getattr(r, predicate)
        assert not getattr(r.with_method("GET"), predicate)

    def test_uri(self):
        r = Request("GET", URI("http://example.com/a"))
        assert r.uri.path == "/a"
        with pytest.raises(TypeError):
            Request("GET", 42)
        with pytest.raises(ValueError):
            Request("GET", "ftp://example.com/")

    def test_allowed_schemes(self):
        r = Request("GET", "ftp://example.com/", allowed_schemes=["ftp"])
        assert r.uri.scheme == "ftp"
        assert r.with_uri("ftp://example.org/").get_header_line("Host") == "example.org"

    def test_with_uri(self):
        r = Request("GET", "http://example.com/")
        r2 = r.with_uri("http://example.org:8080/x")
        assert r2.get_header_line("Host") == "example.org:8080"
        assert r2.uri.path == "/x"
        assert r.get_header_line("Host") == "example.com"

        r3 = r.with_uri("http://example.org/", preserve_host=True)
        assert r3.get_header_line("Host") == "example.com"
        assert r3.uri.host == "example.org"

        r4 = Request("GET", "/x").with_uri("http://example.org/", preserve_host=True)
        assert r4.get_header_line("Host") == "example.org"

        r5 = r.with_uri("/other")
        assert r5.get_header_line("Host") == "example.com"

    def test_request_target(self):
        r = Request("GET", "http://example.com/a?b=1")
        assert r.request_target == "/a?b=1"
        assert r.with_request_target("*").request_target == "*"
        assert Request("GET", "http://example.com").request_target == "/"
        with pytest.raises(ValueError):
            r.with_request_target("/a b")
        with pytest.raises(ValueError):
            r.with_request_target("")
        with pytest.raises(TypeError):
            r.with_request_target(None)

    def test_repr(self):
        assert repr(Request("GET", "http://example.com/")) == "Request(GET http://example.com/)"


class TestResponse:
    def test_defaults(self):
        r = Response()
        assert r.status_code == 200
        assert r.reason == "OK"
        assert r.charset == "UTF-8"
        assert r.status_line == "HTTP/1.1 200 OK"
        assert r.is_ok
        assert r.is_success

    def test_status(self):
        r = Response(404)
        assert r.reason == "Not Found"
        assert r.is_not_found
        assert r.is_client_error
        r2 = r.with_status(403)
        assert r2.reason == "Forbidden"
        assert r2.is_forbidden
        assert r.with_status(599, "Custom").status_line == "HTTP/1.1 599 Custom"
        assert Response(299).status_line == "HTTP/1.1 299"
        assert Response(101).is_informational
        assert Response(301).is_redirection
        assert Response(503).is_server_error
        assert Response(204).is_empty
        assert Response(304).is_empty

    @pytest.mark.parametrize("code", [99, 600, -1])
    def test_status_out_of_range(self, code):
        with pytest.raises(ValueError):
            Response(code)
        with pytest.raises(ValueError):
            Response().with_status(code)

    @pytest.mark.parametrize("code", ["200", 200.0, True, None])
    def test_status_type(self, code):
        with pytest.raises(TypeError):
            Response(code)

    def test_charset(self):
        r = Response().with_charset("ISO-8859-1")
        assert r.charset == "ISO-8859-1"
        with pytest.raises(TypeError):
            r.with_charset(None)

    def test_repr(self):
        assert repr(Response()) == "Response(200, unknown content type)"
        assert repr(Response(headers={"Content-Type": "text/plain"})) == "Response(200, text/plain)"

    def test_sorted_header_lines(self):
        r = Response(headers=[("X-B", "1"), ("a", "2")])
        assert r.sorted_header_lines() == ["a: 2", "Cache-Control: no-cache", "X-B: 1"]
        assert not r.has_header("Cache-Control")


class TestPrepare:
    def test_defaults(self):
        r = Response(404).prepare()
        assert r.headers.lines() == [
            "Cache-Control: no-cache",
            "Content-Type: text/html; charset=UTF-8",
            "Expires: -1",
            "Pragma: no-cache",
        ]

    def test_immutable(self):
        r = Response(404)
        r.prepare()
        assert len(r.headers) == 0

    def test_location_redirect(self):
        r = Response(headers={"Location": "/x"}).prepare()
        assert r.status_code == 302
        assert r.reason == "Found"
        r = Response(201, headers={"Location": "/x"}).prepare()
        assert r.status_code == 201

    def test_content_type(self):
        r = Response(headers={"Content-Type": "text/plain"}).prepare()
        assert r.get_header_line("Content-Type") == "text/plain; charset=UTF-8"
        r = Response(headers={"Content-Type": "text/plain; charset=latin1"}).prepare()
        assert r.get_header_line("Content-Type") == "text/plain; charset=latin1"
        r = Response(headers={"Content-Type": "application/json"}).prepare()
        assert r.get_header_line("Content-Type") == "application/json"
        r = Response(charset="ISO-8859-1").prepare()
        assert r.get_header_line("Content-Type") == "text/html; charset=ISO-8859-1"

    @pytest.mark.parametrize("code", [204, 304])
    def test_empty(self, code):
        r = Response(code, body=b"ignored").prepare()
        assert r.content == b""
        assert not r.has_header("Content-Type")

    def test_status_line_headers_dropped(self):
        r = Response(headers=[("HTTP/1.1 200 OK", ""), ("X", "1")]).prepare()
        assert list(r.headers) == ["Cache-Control", "Content-Type", "Expires", "Pragma", "X"]

    def test_cache_control(self):
        r = Response(headers={"Cache-Control": "max-age=60"}).prepare()
        assert r.get_header_line("Cache-Control") == "max-age=60, private"
        assert not r.has_header("Expires")
        assert not r.has_header("Pragma")

        r = Response(headers={"Etag": '"abc"'}).prepare()
        assert r.get_header_line("Cache-Control") == "private, must-revalidate"

    def test_http10_no_pragma(self):
        r = Response(protocol_version="1.0").prepare()
        assert r.get_header_line("Cache-Control") == "no-cache"
        assert not r.has_header("Pragma")
        assert not r.has_header("Expires")

    def test_old_msie_attachment_over_https(self):
        resp = Response(headers={"Content-Disposition": "attachment; filename=a.pdf"})
        req = Request("GET", "https://example.com/a.pdf", {"User-Agent": MSIE8})
        r = resp.prepare(req)
        assert not r.has_header("Cache-Control")
        assert not r.has_header("Pragma")

        plain = Request("GET", "http://example.com/a.pdf", {"User-Agent": MSIE8})
        assert resp.prepare(plain).get_header_line("Cache-Control") == "no-cache"

        modern = Request("GET", "https://example.com/a.pdf", {"User-Agent": "MSIE 10.0"})
        assert resp.prepare(modern).has_header("Cache-Control")

    def test_headers_sorted(self):
        r = Response(headers=[("Z", "1"), ("a", "2")]).prepare()
        names = list(r.headers)
        assert names == sorted(names, key=str.lower)


def test_tutils():
    assert isinstance(treq().headers, HeaderStore)
    assert treq().get_header_line("Host") == "address:22"
    assert tresp().content == b"message"
