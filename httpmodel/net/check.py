import ipaddress
import re
from typing import AnyStr

# A DNS label. Underscores are allowed, since they show up in real host names.
_label_valid = re.compile(rb"[A-Z\d\-_]{1,63}$", re.IGNORECASE)

# RFC 3986, section 3.1
_scheme_valid = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


def _is_ip_address(host: bytes) -> bool:
    if host.startswith(b"[") and host.endswith(b"]"):
        host = host[1:-1]
        try:
            return ipaddress.ip_address(host.decode("ascii")).version == 6
        except ValueError:
            return False
    try:
        ipaddress.ip_address(host.decode("ascii"))
    except ValueError:
        return False
    return True


def _is_dns_name(host: bytes) -> bool:
    try:
        host.decode("idna")
    except ValueError:
        return False
    # RFC 1035: 255 bytes or less.
    if len(host) > 255:
        return False
    labels = host.split(b".")
    if len(labels) > 1 and labels[-1] == b"":
        labels.pop()
    return all(_label_valid.match(label) for label in labels)


def is_valid_host(host: AnyStr) -> bool:
    """
    Checks if the passed host is a valid DNS host name or an IP address, as it
    appears in the authority of a URI: IPv6 addresses may be enclosed in brackets.
    International domain names are accepted in their unicode form.
    """
    if isinstance(host, str):
        try:
            host = host.encode("idna")
        except UnicodeError:
            if not host.startswith("["):
                return False
            host = host.encode("ascii", "replace")
    if not host:
        return False
    return _is_ip_address(host) or _is_dns_name(host)


def is_valid_port(port: int) -> bool:
    # Port 0 is reserved.
    if isinstance(port, bool) or not isinstance(port, int):
        return False
    return 1 <= port <= 65535


def is_valid_scheme(scheme: str) -> bool:
    return bool(_scheme_valid.match(scheme))
