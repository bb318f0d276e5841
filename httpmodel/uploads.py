from __future__ import annotations

import enum
import logging
import os
import shutil
from collections.abc import Mapping, Sequence

from httpmodel.exceptions import UploadedFileError
from httpmodel.stream import Stream

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


class UploadError(enum.IntEnum):
    """
    The error codes of a multipart file upload, with the values PHP uses for them.
    """

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


class UploadedFile:
    """
    A file received through a multipart upload, backed either by a path on disk or by a Stream.

    >>> f = UploadedFile(Stream.from_bytes(b"data"), 4, UploadError.OK, "a.txt", "text/plain")
    >>> f.move_to("/tmp/a.txt")
    >>> f.moved
    True

    The file can be moved once. Its stream is unavailable after that, and also if the upload failed.
    """

    def __init__(
        self,
        stream_or_path,
        size: int | None,
        error: int = UploadError.OK,
        client_filename: str | None = None,
        client_media_type: str | None = None,
    ):
        try:
            self.error = UploadError(error)
        except ValueError:
            raise ValueError(f"Invalid upload error code: {error!r}") from None
        if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
            raise TypeError(f"Upload size must be an int, not {type(size).__name__}.")

        self._path: str | None = None
        self._stream: Stream | None = None
        if self.error == UploadError.OK:
            if isinstance(stream_or_path, (str, os.PathLike)):
                self._path = os.fspath(stream_or_path)
            elif isinstance(stream_or_path, Stream):
                self._stream = stream_or_path
            elif hasattr(stream_or_path, "read"):
                self._stream = Stream(stream_or_path)
            else:
                raise TypeError("Invalid stream or file.")

        self.size = size
        self.client_filename = client_filename
        self.client_media_type = client_media_type
        self.moved = False

    @classmethod
    def create(cls, spec: Mapping):
        """
        Build uploaded files from a multipart-style spec with the keys
        `tmp_name`, `size`, `error`, `name` and `type`.

        If `tmp_name` is a mapping or a list, every key holds a mapping or list of the same
        shape and the result is a dict or list of files. Returns `None` for an empty spec.
        """
        if not spec:
            return None
        tmp_name = spec["tmp_name"]
        if isinstance(tmp_name, Mapping):
            keys = list(tmp_name.keys())
        elif isinstance(tmp_name, Sequence) and not isinstance(tmp_name, str):
            keys = list(range(len(tmp_name)))
        else:
            return cls(
                tmp_name,
                spec.get("size"),
                spec.get("error", UploadError.OK),
                spec.get("name"),
                spec.get("type"),
            )

        def field(name, key, default=None):
            values = spec.get(name)
            if values is None:
                return default
            return values[key]

        files = {
            key: cls(
                tmp_name[key],
                field("size", key),
                field("error", key, UploadError.OK),
                field("name", key),
                field("type", key),
            )
            for key in keys
        }
        if isinstance(tmp_name, Mapping):
            return files
        return [files[k] for k in keys]

    @property
    def stream(self) -> Stream:
        """
        Raises:
            UploadedFileError, if the upload failed or the file was moved.
        """
        if self.error != UploadError.OK:
            raise UploadedFileError("Cannot retrieve stream due to upload error.")
        if self.moved:
            raise UploadedFileError("Cannot retrieve stream after it has already been moved.")
        if self._stream is None:
            self._stream = Stream.open(self._path, "rb")
        return self._stream

    def move_to(self, target_path: str | os.PathLike) -> None:
        """
        Move the file to target_path.

        Raises:
            ValueError, if target_path is empty.
            UploadedFileError, if the upload failed, the file was already moved,
            or it cannot be written to target_path.
        """
        if not target_path:
            raise ValueError("Target path is empty.")
        if self.error != UploadError.OK:
            raise UploadedFileError("Cannot move file due to upload error.")
        if self.moved:
            raise UploadedFileError("Cannot move file because it has already been moved.")

        try:
            if self._path is not None and self._stream is None:
                shutil.move(self._path, target_path)
            else:
                stream = self.stream
                if stream.is_seekable():
                    stream.rewind()
                with open(target_path, "wb") as f:
                    while not stream.eof():
                        chunk = stream.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        f.write(chunk)
        except OSError as e:
            raise UploadedFileError(f"Error occurred while moving uploaded file: {e}") from e

        logger.debug("Moved uploaded file %r to %r", self.client_filename, os.fspath(target_path))
        self.moved = True

    def __repr__(self):
        return (
            f"UploadedFile({self.client_filename!r}, size={self.size!r}, "
            f"error={self.error.name})"
        )
