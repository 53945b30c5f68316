from __future__ import annotations

import io
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import InvalidArgument


MAX_FILE_SIZE = 8 << 20


def _check_size(size: int) -> None:
    if size > MAX_FILE_SIZE:
        raise InvalidArgument("File may not exceed the maximum file length of 8MB!")


@dataclass
class File:
    """An attachment source.

    Path-backed files are opened only while their bytes are read. Stream-backed
    files rewind to the position they had when wrapped, so every read returns
    the same bytes.
    """

    fp: Optional[BinaryIO]
    filename: str
    content_type: Optional[str] = "application/octet-stream"
    path: Optional[Path] = None
    start: Optional[int] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.fp is not None and self.start is None and self.fp.seekable():
            self.start = self.fp.tell()

    @classmethod
    def from_path(cls, path: str | os.PathLike, *, filename: Optional[str] = None) -> "File":
        p = Path(path)
        if not p.is_file() or not os.access(p, os.R_OK):
            raise InvalidArgument("Provided file either does not exist or cannot be read from!")
        _check_size(p.stat().st_size)
        return cls(fp=None, filename=filename or p.name, path=p)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview, filename: str) -> "File":
        _check_size(len(data))
        return cls(fp=io.BytesIO(bytes(data)), filename=filename)

    @classmethod
    def from_stream(cls, fp: BinaryIO, filename: str) -> "File":
        if fp.seekable():
            start = fp.tell()
            remaining = fp.seek(0, io.SEEK_END) - start
            fp.seek(start)
            _check_size(remaining)
        return cls(fp=fp, filename=filename)

    def read(self) -> bytes:
        if self.path is not None:
            with self.path.open("rb") as fp:
                return fp.read()
        if self.start is not None:
            self.fp.seek(self.start)
            return self.fp.read()

        # Non-seekable streams are drained once and kept in memory.
        data = self.fp.read()
        _check_size(len(data))
        self.fp = io.BytesIO(data)
        self.start = 0
        return data

    def to_part(self, body, index: int) -> None:
        body.add(
            f"file{index}",
            self.read(),
            filename=self.filename,
            content_type=self.content_type,
        )
