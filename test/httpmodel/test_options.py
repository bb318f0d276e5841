import pytest

from httpmodel import exceptions
from httpmodel import optmanager
from httpmodel import options


def test_defaults():
    opts = options.Options()
    assert opts.allowed_schemes == ["", "http", "https"]
    assert opts.trusted_proxies == []
    assert opts.trusted_hosts == []
    assert opts.charset == "UTF-8"
    assert opts.protocol_version == "1.1"
    assert opts.default_method == "GET"


def test_kwargs():
    opts = options.Options(charset="ISO-8859-1", trusted_proxies=["10.0.0.0/8"])
    assert opts.charset == "ISO-8859-1"
    assert opts.trusted_proxies == ["10.0.0.0/8"]
    with pytest.raises(exceptions.OptionsError):
        options.Options(nonexistent=True)


def test_protocol_version_choices():
    opts = options.Options()
    opts.protocol_version = "2"
    with pytest.raises(exceptions.OptionsError):
        opts.protocol_version = "1.2"
    assert opts.protocol_version == "2"


def test_set_specs():
    opts = options.Options()
    opts.set("trusted_proxies=10.0.0.1", "trusted_proxies=10.0.0.2", "charset=latin1")
    assert opts.trusted_proxies == ["10.0.0.1", "10.0.0.2"]
    assert opts.charset == "latin1"


def test_yaml():
    opts = options.Options()
    optmanager.load(
        opts,
        """
        allowed_schemes: ["", "http", "https", "ws"]
        trusted_hosts:
          - .example.com
        default_method: POST
        """,
    )
    assert opts.allowed_schemes == ["", "http", "https", "ws"]
    assert opts.trusted_hosts == [".example.com"]
    assert opts.default_method == "POST"
    with pytest.raises(exceptions.OptionsError):
        optmanager.load(opts, "trusted_proxies: 10.0.0.1")
