from __future__ import annotations

import io
import os
from typing import IO, Any

from httpmodel import exceptions


class Stream:
    """
    A message body: a thin wrapper around a binary file object.

    >>> s = Stream.from_bytes(b"hello")
    >>> s.read(2), s.get_contents()
    (b"he", b"llo")
    >>> bytes(s)
    b"hello"

    The stream does not buffer anything itself. Whoever creates a stream owns it;
    messages only hold a reference and never close it.
    """

    def __init__(self, fileobj: IO[bytes]):
        if not (hasattr(fileobj, "read") or hasattr(fileobj, "write")):
            raise TypeError(f"Expected a file object, got {type(fileobj).__name__}.")
        self._fileobj: IO[bytes] | None = fileobj
        self._eof = False

    @classmethod
    def from_bytes(cls, content: bytes = b"") -> Stream:
        """
        An in-memory stream that can be read, written and seeked. The position is at the start.
        """
        return cls(io.BytesIO(content))

    @classmethod
    def open(cls, path: str | os.PathLike, mode: str = "rb") -> Stream:
        if "b" not in mode:
            mode += "b"
        return cls(open(path, mode))

    def _file(self) -> IO[bytes]:
        if self._fileobj is None:
            raise exceptions.StreamError("Stream is detached.")
        return self._fileobj

    @property
    def closed(self) -> bool:
        return self._fileobj is None or getattr(self._fileobj, "closed", False)

    def close(self) -> None:
        if self._fileobj is None:
            return
        fileobj = self.detach()
        fileobj.close()

    def detach(self) -> IO[bytes] | None:
        """
        Separate the underlying file object from the stream and return it.
        The stream is unusable afterwards.
        """
        fileobj, self._fileobj = self._fileobj, None
        return fileobj

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # Capabilities

    def _can(self, capability: str, method: str) -> bool:
        if self.closed:
            return False
        check = getattr(self._fileobj, capability, None)
        if check is not None:
            return check()
        # Minimal file-likes such as some WSGI inputs only have the methods.
        return hasattr(self._fileobj, method)

    def is_readable(self) -> bool:
        return self._can("readable", "read")

    def is_writable(self) -> bool:
        return self._can("writable", "write")

    def is_seekable(self) -> bool:
        return self._can("seekable", "seek")

    @property
    def size(self) -> int | None:
        """
        The size in bytes, or `None` if it cannot be determined.
        """
        if not self.is_seekable():
            return None
        f = self._fileobj
        if isinstance(f, io.BytesIO):
            return f.getbuffer().nbytes
        try:
            if self.is_writable():
                f.flush()
            return os.fstat(f.fileno()).st_size
        except (AttributeError, OSError, ValueError):
            pass
        pos = f.tell()
        try:
            return f.seek(0, io.SEEK_END)
        finally:
            f.seek(pos)

    def get_metadata(self, key: str | None = None) -> Any:
        f = self._file()
        metadata = {
            "mode": getattr(f, "mode", "rb+" if isinstance(f, io.BytesIO) else None),
            "seekable": self.is_seekable(),
            "uri": getattr(f, "name", None),
        }
        if key is None:
            return metadata
        return metadata.get(key)

    # Position

    def tell(self) -> int:
        return self._file().tell()

    def eof(self) -> bool:
        if self.closed:
            return True
        if self.is_seekable():
            size = self.size
            if size is not None:
                return self.tell() >= size
        return self._eof

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if not self.is_seekable():
            raise exceptions.StreamNotSeekable("Stream is not seekable.")
        self._eof = False
        return self._file().seek(offset, whence)

    def rewind(self) -> None:
        self.seek(0)

    # I/O

    def read(self, n: int = -1) -> bytes:
        if not self.is_readable():
            raise exceptions.StreamNotReadable("Stream is not readable.")
        data = self._fileobj.read(n)
        if n < 0 or not data or len(data) < n:
            self._eof = True
        return data

    def write(self, data: bytes | str) -> int:
        """
        Write data at the current position and return the number of bytes written.
        str is encoded as UTF-8.
        """
        if not self.is_writable():
            raise exceptions.StreamNotWritable("Stream is not writable.")
        if isinstance(data, str):
            data = data.encode("utf-8")
        return self._fileobj.write(data)

    def get_contents(self) -> bytes:
        """
        The remaining contents, from the current position to the end.
        """
        return self.read()

    def __bytes__(self) -> bytes:
        """
        The whole contents, or b"" for a stream that is not readable.
        Read errors propagate.
        """
        if not self.is_readable():
            return b""
        if self.is_seekable():
            self.rewind()
        return self.get_contents()

    def __repr__(self):
        if self.closed:
            return "Stream(detached)"
        return f"Stream({self._fileobj!r})"
