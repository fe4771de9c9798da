"""File-like sources the validator can read from.

The validator needs a name, a size, a declared MIME type and the first
few bytes. Anything providing those (a web framework's upload object, a
file on disk, a buffer) can be adapted to the UploadedFile protocol.
"""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class UploadedFile(Protocol):
    name: str
    size: int
    mime_type: str

    async def read_head(self, n: int) -> bytes:
        """Return up to the first `n` bytes of the file."""
        ...


@dataclass
class InMemoryUpload:
    name: str
    content: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    async def read_head(self, n: int) -> bytes:
        return self.content[:n]


class LocalUpload:
    """An upload backed by a file on disk.

    The MIME type is guessed from the filename when not given, the way a
    browser would fill in File.type.
    """

    def __init__(self, path: Path, mime_type: str | None = None) -> None:
        self.path = path
        self.name = path.name
        self.size = path.stat().st_size
        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or ""
        self.mime_type = mime_type

    async def read_head(self, n: int) -> bytes:
        return await asyncio.to_thread(self._read, n)

    def _read(self, n: int) -> bytes:
        with self.path.open("rb") as fh:
            return fh.read(n)
