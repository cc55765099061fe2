"""Buffered input streams fed by a chunk-producing reader."""

from __future__ import annotations

from typing import Callable, Optional

EOZ = -1
"""Value returned at end of stream."""

Reader = Callable[[], Optional[bytes]]


class ZStream:
    """A byte stream that pulls its data from a reader, one chunk at a time.

    The reader is called with no arguments and returns the next chunk of
    bytes; ``None`` or an empty chunk marks the end of the stream.
    """

    def __init__(self, reader: Reader) -> None:
        self._reader = reader
        self._buffer = b""
        self._pos = 0

    @property
    def _remaining(self) -> int:
        return len(self._buffer) - self._pos

    def fill(self) -> int:
        """Fetch a new chunk and return its first byte, consuming it.

        Returns ``EOZ`` when the reader has nothing more to give.
        """
        chunk = self._reader()
        if not chunk:
            return EOZ
        self._buffer = bytes(chunk)
        self._pos = 1
        return self._buffer[0]

    def lookahead(self) -> int:
        """Return the next byte without consuming it, or ``EOZ``."""
        if self._remaining == 0:
            if self.fill() == EOZ:
                return EOZ
            self._pos -= 1  # fill consumed the first byte; put it back
        return self._buffer[self._pos]

    def getc(self) -> int:
        """Consume and return the next byte, or ``EOZ`` at end of stream."""
        if self._remaining > 0:
            byte = self._buffer[self._pos]
            self._pos += 1
            return byte
        return self.fill()

    def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes; fewer are returned only at end of stream."""
        if n < 0:
            raise ValueError("cannot read a negative number of bytes")
        parts = []
        while n:
            if self.lookahead() == EOZ:
                break
            m = min(n, self._remaining)
            parts.append(self._buffer[self._pos:self._pos + m])
            self._pos += m
            n -= m
        return b"".join(parts)


def from_bytes(data: bytes, chunk_size: Optional[int] = None) -> ZStream:
    """Make a stream over ``data``, delivered in chunks of ``chunk_size``."""
    if chunk_size is not None and chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    payload = bytes(data)
    size = chunk_size or max(len(payload), 1)
    chunks = iter([payload[i:i + size] for i in range(0, len(payload), size)])
    return ZStream(lambda: next(chunks, None))