"""Threaded decompression of framed LZ4 streams.

Two kinds of input are accepted:

* streams written by the threaded compressor, where every LZ4 frame is
  preceded by a 12-byte skippable-frame header and frames are decoded in
  parallel;
* plain LZ4 frame streams, which are decoded on the calling thread in
  chunks of ``inputsize`` bytes.
"""

from __future__ import annotations

from typing import BinaryIO

import lz4.frame

from mtcompress.brotli_mt import _check_range, _decode_frames, _in_memory, _read, _read_magic
from mtcompress.errors import ErrorCode, MTError
from mtcompress.lz4_compress import HEADER, MAGIC_SKIPPABLE, MAGICNUMBER, THREAD_MAX
from mtcompress.pipeline import Counters

DEFAULT_DECOMPRESS_INPUTSIZE = 1024 + 1024 * 4

_LIBRARY = "lz4mt"


def _library_error(exc: Exception) -> MTError:
    return MTError(ErrorCode.COMPRESSION_LIBRARY, _LIBRARY, detail=str(exc) or None)


def _parse_header(header: bytes) -> int:
    skippable, length, size = HEADER.unpack(header)
    if skippable != MAGIC_SKIPPABLE or length != 4:
        raise MTError(ErrorCode.DATA_ERROR, _LIBRARY)
    return size


def _decode_frame(body: bytes) -> bytes:
    decoder = lz4.frame.LZ4FrameDecompressor()
    try:
        data = decoder.decompress(body)
    except RuntimeError as exc:
        raise _library_error(exc) from exc
    if not decoder.eof:
        raise MTError(ErrorCode.FRAME_DECOMPRESS, _LIBRARY)
    return data


class LZ4Decompressor:
    """Decompresses framed or plain LZ4 streams, using threads where possible."""

    def __init__(self, threads: int = 1, inputsize: int = 0) -> None:
        _check_range(threads, 1, THREAD_MAX, _LIBRARY)
        self.threads = threads
        self.inputsize = inputsize or DEFAULT_DECOMPRESS_INPUTSIZE
        self.stats = Counters()

    def decompress(self, source: BinaryIO, sink: BinaryIO) -> Counters:
        """Decompress the stream from ``source`` into ``sink``."""
        magic, value = _read_magic(source, _LIBRARY)
        if value == MAGIC_SKIPPABLE:
            return _decode_frames(
                self, magic, source, sink, HEADER.size, _parse_header, _decode_frame, _LIBRARY
            )
        if value != MAGICNUMBER:
            raise MTError(ErrorCode.DATA_ERROR, _LIBRARY)
        return self._stream(magic, source, sink)

    def _stream(self, magic: bytes, source: BinaryIO, sink: BinaryIO) -> Counters:
        counters = Counters(insize=len(magic))
        decoder = lz4.frame.LZ4FrameDecompressor()
        pending = magic
        try:
            while True:
                while pending:
                    if decoder.eof:
                        decoder = lz4.frame.LZ4FrameDecompressor()
                    try:
                        out = decoder.decompress(pending)
                    except RuntimeError as exc:
                        raise _library_error(exc) from exc
                    if out:
                        try:
                            sink.write(out)
                        except OSError as exc:
                            raise MTError(ErrorCode.WRITE_FAIL, _LIBRARY) from exc
                        counters.outsize += len(out)
                    pending = (decoder.unused_data or b"") if decoder.eof else b""
                chunk = _read(source, self.inputsize, _LIBRARY)
                if not chunk:
                    break
                counters.insize += len(chunk)
                pending = chunk
        finally:
            self.stats = Counters(counters.insize, counters.outsize, 0)
        return self.stats


def decompress(data: bytes, threads: int = 4) -> bytes:
    """Decompress an LZ4 stream held in memory."""
    return _in_memory(LZ4Decompressor(threads).decompress, data)