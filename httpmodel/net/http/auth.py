import binascii


def mkauth(username: str, password: str, scheme: str = "basic") -> str:
    """
    Craft a basic auth string
    """
    v = binascii.b2a_base64((username + ":" + password).encode("utf8")).decode("ascii")
    return scheme + " " + v.strip()


def parse_http_basic_auth(s: str) -> tuple[str, str, str]:
    """
    Parse a basic auth header value into (scheme, user, password).
    The password may contain colons.

    Raises:
        ValueError, if the input is invalid.
    """
    parts = s.split()
    if len(parts) != 2:
        raise ValueError("Malformed authorization header")
    scheme, authinfo = parts
    if scheme.lower() != "basic":
        raise ValueError("Unknown scheme")
    try:
        decoded = binascii.a2b_base64(authinfo.encode()).decode("utf8", "replace")
    except binascii.Error as e:
        raise ValueError(str(e))
    user, sep, password = decoded.partition(":")
    if not sep:
        raise ValueError("Missing password separator")
    return scheme, user, password
