from collections.abc import Sequence

from httpmodel import optmanager

CONF_PATHS = ("~/.httpmodel/config.yaml", "~/.httpmodel/config.yml")


class Options(optmanager.OptManager):
    def __init__(self, **kwargs) -> None:
        super().__init__()
        self.add_option(
            "allowed_schemes",
            Sequence[str],
            ["", "http", "https"],
            """
            URI schemes accepted when parsing or building URIs. The empty string
            allows relative references, "*" allows any syntactically valid scheme.
            """,
        )
        self.add_option(
            "trusted_proxies",
            Sequence[str],
            [],
            """
            Addresses or networks (e.g. "10.0.0.0/8") of reverse proxies whose
            forwarding headers are believed when determining the client address
            and whether a request was made over HTTPS.
            """,
        )
        self.add_option(
            "trusted_hosts",
            Sequence[str],
            [],
            """
            Host names accepted in the Host header of incoming requests. A leading
            dot also matches subdomains. If empty, every Host header is accepted.
            """,
        )
        self.add_option(
            "charset",
            str,
            "UTF-8",
            "Charset added to text content types of prepared responses.",
        )
        self.add_option(
            "protocol_version",
            str,
            "1.1",
            "HTTP version of newly created messages.",
            choices=("1.0", "1.1", "2", "3"),
        )
        self.add_option(
            "default_method",
            str,
            "GET",
            "Method of newly created requests that do not name one.",
        )
        self.update(**kwargs)
