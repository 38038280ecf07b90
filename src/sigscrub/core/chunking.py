from __future__ import annotations

from typing import BinaryIO, Iterator

CR = b"\r"


def iter_chunks(stream: BinaryIO, delimiter: bytes = CR, block_size: int = 64 * 1024) -> Iterator[bytes]:
    """
    Split a binary stream into chunks ending with *delimiter* (kept),
    plus a final unterminated chunk if the stream doesn't end with one.
    A stream without any delimiter comes back as a single chunk.
    """
    pending = b""
    while True:
        block = stream.read(block_size)
        if not block:
            break
        pending += block

        start = 0
        while True:
            idx = pending.find(delimiter, start)
            if idx == -1:
                break
            end = idx + len(delimiter)
            yield pending[start:end]
            start = end
        pending = pending[start:]

    if pending:
        yield pending
