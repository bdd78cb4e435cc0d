"""Threaded LZ4 compression into a stream of independently framed chunks.

Every chunk of input becomes one complete LZ4 frame (linked blocks, stored
content size, content checksum) preceded by a 12-byte skippable-frame
header::

    LE32 0x184D2A50   skippable frame magic
    LE32 4            header payload length
    LE32 n            size of the LZ4 frame that follows
"""

from __future__ import annotations

import struct
from typing import BinaryIO

import lz4.frame

from mtcompress.brotli_mt import _check_range, _compress_chunks, _in_memory
from mtcompress.errors import ErrorCode, MTError
from mtcompress.pipeline import Counters

THREAD_MAX = 128
LEVEL_MIN = 1
LEVEL_MAX = 12
MAGICNUMBER = 0x184D2204
MAGIC_SKIPPABLE = 0x184D2A50
DEFAULT_COMPRESS_INPUTSIZE = 4 * 1024 * 1024

HEADER = struct.Struct("<III")
_LIBRARY = "lz4mt"


class LZ4Compressor:
    """Compresses a stream on several threads, one LZ4 frame per chunk."""

    def __init__(self, threads: int = 1, level: int = 1, inputsize: int = 0) -> None:
        _check_range(threads, 1, THREAD_MAX, _LIBRARY)
        _check_range(level, LEVEL_MIN, LEVEL_MAX, _LIBRARY)
        self.threads = threads
        self.level = level
        self.inputsize = inputsize or DEFAULT_COMPRESS_INPUTSIZE
        self.stats = Counters()

    def _frame(self, chunk: bytes) -> bytes:
        try:
            body = lz4.frame.compress(
                chunk,
                compression_level=self.level,
                block_linked=True,
                content_checksum=True,
                store_size=True,
            )
        except RuntimeError as exc:
            raise MTError(
                ErrorCode.COMPRESSION_LIBRARY, _LIBRARY, detail=str(exc) or None
            ) from exc
        return HEADER.pack(MAGIC_SKIPPABLE, 4, len(body)) + body

    def compress(self, source: BinaryIO, sink: BinaryIO) -> Counters:
        """Compress everything read from ``source`` and write it to ``sink``."""
        return _compress_chunks(self, source, sink, self._frame, _LIBRARY)


def compress(data: bytes, threads: int = 4, level: int = 1) -> bytes:
    """Compress ``data`` in memory and return the framed stream."""
    return _in_memory(LZ4Compressor(threads, level).compress, data)