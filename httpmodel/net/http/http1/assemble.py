def assemble_response(response):
    """
    Serialize a response into bytes: status line, sorted headers, blank line, body.
    """
    head = assemble_response_head(response)
    return head + bytes(response.body)


def assemble_response_head(response):
    first_line = _assemble_response_line(response)
    headers = _assemble_response_headers(response)
    return b"%s\r\n%s\r\n" % (first_line, headers)


def _assemble_response_line(response):
    return response.status_line.encode("utf-8", "surrogateescape")


def _assemble_response_headers(response):
    lines = response.sorted_header_lines()
    if not lines:
        return b""
    return "\r\n".join(lines).encode("utf-8", "surrogateescape") + b"\r\n"
