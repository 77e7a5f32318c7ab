"""Resettable, hashed buffering of inbound request bodies."""

import hashlib
import tempfile
from typing import AsyncIterable, AsyncIterator, Optional

CHUNK_SIZE = 65536  # 64KB chunks
DEFAULT_MAX_MEMORY_BYTES = 16 * 1024 * 1024


class BodyTooLargeError(ValueError):
    """Exception raised when an inbound body exceeds the configured limit."""
    pass


class SpooledBody:
    """A byte source that can be replayed from offset 0 any number of times.

    Bytes are kept in memory up to ``max_memory_bytes`` and spill to a
    temporary file beyond that. The SHA-1 digest and size are computed while
    writing; once :meth:`seal` is called the content can no longer change.
    """

    def __init__(self, max_memory_bytes: int = DEFAULT_MAX_MEMORY_BYTES):
        self._file = tempfile.SpooledTemporaryFile(max_size=max_memory_bytes)
        self._hash = hashlib.sha1()
        self._size = 0
        self._sealed = False

    @classmethod
    async def from_stream(
        cls,
        stream: AsyncIterable[bytes],
        max_bytes: Optional[int] = None,
        max_memory_bytes: int = DEFAULT_MAX_MEMORY_BYTES,
    ) -> "SpooledBody":
        """Drain ``stream`` into a new sealed body.

        Raises:
            BodyTooLargeError: If more than ``max_bytes`` are received
        """
        body = cls(max_memory_bytes=max_memory_bytes)
        try:
            async for chunk in stream:
                if max_bytes is not None and body.size + len(chunk) > max_bytes:
                    raise BodyTooLargeError(f"body exceeds {max_bytes} bytes")
                body.write(chunk)
        except BaseException:
            body.close()
            raise
        body.seal()
        return body

    @property
    def size(self) -> int:
        return self._size

    @property
    def sha1(self) -> str:
        """Hex SHA-1 of everything written so far."""
        return self._hash.hexdigest()

    @property
    def sealed(self) -> bool:
        return self._sealed

    def write(self, chunk: bytes) -> None:
        if self._sealed:
            raise ValueError("cannot write to a sealed body")
        if not chunk:
            return
        self._file.write(chunk)
        self._hash.update(chunk)
        self._size += len(chunk)

    def seal(self) -> None:
        self._sealed = True
        self.reset()

    def reset(self) -> None:
        """Rewind to the first byte."""
        self._file.seek(0)

    def read(self, size: int = -1) -> bytes:
        return self._file.read(size)

    async def chunks(self, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yield the body from the current position in ``chunk_size`` pieces."""
        while chunk := self._file.read(chunk_size):
            yield chunk

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "SpooledBody":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
