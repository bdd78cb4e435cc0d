"""Threaded Brotli compression into a stream of independently framed chunks.

Every chunk of input becomes one Brotli stream preceded by a 16-byte
skippable-frame header::

    LE32 0x184D2A50   skippable frame magic
    LE32 8            header payload length
    LE32 n            size of the compressed chunk
    LE16 0x5242       "BR"
    LE16 hint         number of 64 KiB blocks needed to decompress

The private helpers here drive the read/work/ordered-write cycle and are
shared by the other framed formats of the package.
"""

from __future__ import annotations

import io
import struct
import threading
from typing import BinaryIO, Callable

import brotli

from mtcompress.errors import ErrorCode, MTError
from mtcompress.pipeline import Counters, OrderedWriter, run_workers

THREAD_MAX = 128
LEVEL_MIN = 0
LEVEL_MAX = 11
MAGIC_SKIPPABLE = 0x184D2A50
MAGICNUMBER = 0x5242
MAX_WINDOW_BITS = 24
DEFAULT_DECOMPRESS_INPUTSIZE = 64 * 1024

_HEADER = struct.Struct("<IIIHH")
_LIBRARY = "brotli"


def _read(source: BinaryIO, size: int, library: str = _LIBRARY) -> bytes:
    """Read up to ``size`` bytes, stopping short only at end of input."""
    parts: list[bytes] = []
    remaining = size
    try:
        while remaining > 0:
            chunk = source.read(remaining)
            if not chunk:
                break
            parts.append(chunk)
            remaining -= len(chunk)
    except OSError as exc:
        raise MTError(ErrorCode.READ_FAIL, library) from exc
    return b"".join(parts)


def _check_range(value: int, low: int, high: int, library: str) -> None:
    if not low <= value <= high:
        raise MTError(ErrorCode.COMPRESSION_PARAMETER_UNSUPPORTED, library)


def _read_magic(source: BinaryIO, library: str) -> tuple[bytes, int]:
    """Read the leading four bytes and return them with their LE32 value."""
    magic = _read(source, 4, library)
    if len(magic) != 4:
        raise MTError(ErrorCode.DATA_ERROR, library)
    return magic, struct.unpack("<I", magic)[0]


def _compress_chunks(
    owner, source: BinaryIO, sink: BinaryIO, encode: Callable[[bytes], bytes], library: str
) -> Counters:
    """Split ``source`` into ``owner.inputsize`` chunks and encode them in parallel."""
    counters = Counters()
    read_lock = threading.Lock()
    writer = OrderedWriter(sink.write)

    def work() -> None:
        while True:
            with read_lock:
                chunk = _read(source, owner.inputsize, library)
                if not chunk and counters.frames > 0:
                    return
                counters.insize += len(chunk)
                frame = counters.frames
                counters.frames += 1
            writer.submit(frame, encode(chunk))

    try:
        run_workers(work, owner.threads)
    finally:
        owner.stats = Counters(counters.insize, writer.outsize, writer.written)
    return owner.stats


def _decode_frames(
    owner,
    magic: bytes,
    source: BinaryIO,
    sink: BinaryIO,
    header_size: int,
    parse: Callable[[bytes], int],
    decode: Callable[[bytes], bytes],
    library: str,
) -> Counters:
    """Decode skippable-framed chunks in parallel; ``magic`` was already read."""
    counters = Counters()
    read_lock = threading.Lock()
    writer = OrderedWriter(sink.write)

    def next_frame() -> tuple[int, bytes] | None:
        with read_lock:
            prefix = magic if counters.frames == 0 else b""
            header = prefix + _read(source, header_size - len(prefix), library)
            if not header:
                return None
            if len(header) != header_size:
                raise MTError(ErrorCode.READ_FAIL, library)
            size = parse(header)
            counters.insize += header_size
            body = _read(source, size, library)
            if len(body) != size:
                raise MTError(ErrorCode.DATA_ERROR, library)
            counters.insize += size
            frame = counters.frames
            counters.frames += 1
            return frame, body

    def work() -> None:
        while (item := next_frame()) is not None:
            frame, body = item
            writer.submit(frame, decode(body))

    try:
        run_workers(work, owner.threads)
    finally:
        owner.stats = Counters(counters.insize, writer.outsize, writer.written)
    return owner.stats


def _in_memory(run: Callable[[BinaryIO, BinaryIO], object], data: bytes) -> bytes:
    out = io.BytesIO()
    run(io.BytesIO(data), out)
    return out.getvalue()


def _parse_header(header: bytes) -> int:
    skippable, length, size, marker, _hint = _HEADER.unpack(header)
    if skippable != MAGIC_SKIPPABLE or length != 8 or marker != MAGICNUMBER:
        raise MTError(ErrorCode.DATA_ERROR, _LIBRARY)
    return size


def _decode_body(body: bytes) -> bytes:
    try:
        return brotli.decompress(body)
    except brotli.error as exc:
        raise MTError(ErrorCode.FRAME_DECOMPRESS, _LIBRARY) from exc


class BrotliCompressor:
    """Compresses a stream on several threads, one Brotli stream per chunk."""

    def __init__(self, threads: int = 1, level: int = 3, inputsize: int = 0) -> None:
        _check_range(threads, 1, THREAD_MAX, _LIBRARY)
        _check_range(level, LEVEL_MIN, LEVEL_MAX, _LIBRARY)
        self.threads = threads
        self.level = level
        self.inputsize = inputsize or 1024 * 1024 * (level or 1)
        self.stats = Counters()

    def _hint(self, size: int) -> int:
        if self.inputsize > size:
            hint = (size >> 16) + 1
        else:
            hint = self.inputsize >> 16
        return hint & 0xFFFF

    def _encode(self, chunk: bytes) -> bytes:
        try:
            body = brotli.compress(
                chunk,
                mode=brotli.MODE_GENERIC,
                quality=self.level,
                lgwin=MAX_WINDOW_BITS,
            )
        except brotli.error as exc:
            raise MTError(ErrorCode.FRAME_COMPRESS, _LIBRARY) from exc
        header = _HEADER.pack(MAGIC_SKIPPABLE, 8, len(body), MAGICNUMBER, self._hint(len(chunk)))
        return header + body

    def compress(self, source: BinaryIO, sink: BinaryIO) -> Counters:
        """Compress everything read from ``source`` and write it to ``sink``."""
        return _compress_chunks(self, source, sink, self._encode, _LIBRARY)


class BrotliDecompressor:
    """Decompresses a framed Brotli stream on several threads."""

    def __init__(self, threads: int = 1, inputsize: int = 0) -> None:
        _check_range(threads, 1, THREAD_MAX, _LIBRARY)
        self.threads = threads
        self.inputsize = inputsize or DEFAULT_DECOMPRESS_INPUTSIZE
        self.stats = Counters()

    def decompress(self, source: BinaryIO, sink: BinaryIO) -> Counters:
        """Decompress the framed stream from ``source`` into ``sink``."""
        magic, value = _read_magic(source, _LIBRARY)
        if value != MAGIC_SKIPPABLE:
            raise MTError(ErrorCode.DATA_ERROR, _LIBRARY)
        return _decode_frames(
            self, magic, source, sink, _HEADER.size, _parse_header, _decode_body, _LIBRARY
        )


def compress(data: bytes, threads: int = 4, level: int = 3) -> bytes:
    """Compress ``data`` in memory and return the framed stream."""
    return _in_memory(BrotliCompressor(threads, level).compress, data)


def decompress(data: bytes, threads: int = 4) -> bytes:
    """Decompress a framed Brotli stream held in memory."""
    return _in_memory(BrotliDecompressor(threads).decompress, data)