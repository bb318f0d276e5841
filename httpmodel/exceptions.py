"""
We use builtin exceptions wherever possible and specialize them where a
caller needs to tell failures apart:

- URI failures are `ValueError` subclasses that say whether the whole string
  could not be decomposed (`MalformedURI`) or a single component failed its
  validator (`InvalidURIComponent`).
- Header failures name the offending header.
- Stream failures are `OSError` subclasses, matching what file objects raise.

Every constructor and `with_*` method is all-or-nothing: if one of these is
raised, no object was created and the receiver is unchanged.
"""


class HttpModelException(Exception):
    """
    Base class for exceptions that are specific to httpmodel
    and have no builtin counterpart.
    """

    def __init__(self, message=None):
        super().__init__(message)


class OptionsError(HttpModelException):
    pass


class MalformedURI(ValueError):
    """
    The input string cannot be decomposed into URI components.
    """

    def __init__(self, uri: str, reason: str = ""):
        self.uri = uri
        msg = f"Malformed URI: {uri!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class InvalidURIComponent(ValueError):
    """
    A single URI component failed validation.
    """

    def __init__(self, component: str, value):
        self.component = component
        self.value = value
        super().__init__(f"Invalid URI {component}: {value!r}")


class InvalidHeaderValue(ValueError):
    def __init__(self, name: str, value=None):
        self.name = name
        self.value = value
        super().__init__(f"Invalid header value for {name!r}: {value!r}")


class StreamError(OSError):
    pass


class StreamNotReadable(StreamError):
    pass


class StreamNotWritable(StreamError):
    pass


class StreamNotSeekable(StreamError):
    pass


class UploadedFileError(RuntimeError):
    pass
