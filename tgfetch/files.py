"""File uploads for multipart Bot API requests."""

from __future__ import annotations

import os
from typing import IO, Any, Optional, Tuple, Union


class InputFile:
    """Contents of a file to be uploaded with ``multipart/form-data``.

    Wraps raw bytes, an open binary file object, or a filesystem path.

    Usage::

        InputFile(b"...", filename="photo.jpg", content_type="image/jpeg")
        InputFile.from_path("cert.pem")
    """

    def __init__(
        self,
        content: Union[bytes, bytearray, IO[bytes]],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> None:
        self.content = content
        self.filename = filename or _guess_filename(content)
        self.content_type = content_type

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike], content_type: Optional[str] = None) -> "InputFile":
        """Read the file at *path* into memory and wrap it."""
        with open(path, "rb") as fh:
            data = fh.read()
        return cls(data, filename=os.path.basename(os.fspath(path)), content_type=content_type)

    def to_requests_file(self) -> Tuple[Any, ...]:
        """Return the tuple form accepted by the ``files=`` argument of :mod:`requests`."""
        content = bytes(self.content) if isinstance(self.content, bytearray) else self.content
        if self.content_type:
            return (self.filename, content, self.content_type)
        return (self.filename, content)

    def __repr__(self) -> str:
        return f"InputFile(filename={self.filename!r}, content_type={self.content_type!r})"


def _guess_filename(content: Any) -> str:
    name = getattr(content, "name", None)
    if isinstance(name, str) and name:
        return os.path.basename(name)
    return "file"


def is_file_like(value: Any) -> bool:
    """True if *value* must be sent as a multipart file part."""
    if isinstance(value, (InputFile, bytes, bytearray)):
        return True
    return callable(getattr(value, "read", None))


def as_input_file(value: Any) -> InputFile:
    """Coerce a file-like parameter value into an :class:`InputFile`."""
    if isinstance(value, InputFile):
        return value
    return InputFile(value)
