import io
import struct

import lz4.frame
import pytest

from mtcompress.errors import ErrorCode, MTError
from mtcompress.lz4_compress import LZ4Compressor, compress
from mtcompress.lz4_decompress import LZ4Decompressor, decompress


def _sample(size: int) -> bytes:
    words = b"alpha beta gamma delta epsilon zeta eta theta "
    data = (words * (size // len(words) + 1))[:size]
    return bytes((b + i // 97) % 256 for i, b in enumerate(data))


def _framed(data: bytes, inputsize: int = 4096, threads: int = 1) -> bytes:
    out = io.BytesIO()
    LZ4Compressor(threads, 1, inputsize).compress(io.BytesIO(data), out)
    return out.getvalue()


def _patched(stream: bytes, start: int, value: bytes) -> bytes:
    broken = bytearray(stream)
    broken[start:start + len(value)] = value
    return bytes(broken)


class _FailingSink:
    def write(self, data):
        raise OSError("disk full")


@pytest.mark.parametrize("threads", [1, 2, 4, 8])
def test_round_trip_framed(threads):
    data = _sample(50_000)
    assert decompress(_framed(data, threads=3), threads=threads) == data


def test_round_trip_module_helpers():
    data = _sample(10_000)
    assert decompress(compress(data)) == data


def test_empty_input_round_trip():
    assert decompress(compress(b""), threads=2) == b""


def test_framed_stats():
    data = _sample(20_000)
    stream = _framed(data)
    out = io.BytesIO()
    stats = LZ4Decompressor(2).decompress(io.BytesIO(stream), out)
    assert out.getvalue() == data
    assert (stats.frames, stats.outsize, stats.insize) == (5, len(data), len(stream))


def test_plain_lz4_stream_single_threaded_path():
    data = _sample(30_000)
    stream = lz4.frame.compress(data)
    out = io.BytesIO()
    stats = LZ4Decompressor(4, 1000).decompress(io.BytesIO(stream), out)
    assert out.getvalue() == data
    assert (stats.insize, stats.outsize, stats.frames) == (len(stream), len(data), 0)


def test_concatenated_plain_frames():
    first, second = _sample(3000), _sample(7000)[::-1]
    stream = lz4.frame.compress(first) + lz4.frame.compress(second)
    assert decompress(stream, threads=1) == first + second


def _incomplete_frame() -> bytes:
    body = lz4.frame.compress(_sample(1000), content_checksum=True, store_size=True)[:-4]
    return struct.pack("<III", 0x184D2A50, 4, len(body)) + body


def _bad_later_magic() -> bytes:
    stream = _framed(_sample(100))
    return stream + _patched(stream, 0, bytes([stream[0] ^ 0xFF]))


@pytest.mark.parametrize(
    "make_stream, threads, code",
    [
        (lambda: b"\x50\x2a", 4, ErrorCode.DATA_ERROR),
        (lambda: b"\x00\x01\x02\x03rest of data", 4, ErrorCode.DATA_ERROR),
        (lambda: _framed(_sample(100))[:8], 1, ErrorCode.READ_FAIL),
        (lambda: (lambda s: s + s[:5])(_framed(_sample(100))), 1, ErrorCode.READ_FAIL),
        (lambda: _framed(_sample(5000), 8192)[:-3], 1, ErrorCode.DATA_ERROR),
        (lambda: _patched(_framed(_sample(100)), 4, struct.pack("<I", 8)), 1, ErrorCode.DATA_ERROR),
        (_bad_later_magic, 1, ErrorCode.DATA_ERROR),
        (
            lambda: (lambda s: _patched(s, 12, bytes([s[12] ^ 0xFF])))(_framed(_sample(1000))),
            2,
            ErrorCode.COMPRESSION_LIBRARY,
        ),
        (_incomplete_frame, 1, ErrorCode.FRAME_DECOMPRESS),
    ],
)
def test_malformed_streams(make_stream, threads, code):
    with pytest.raises(MTError) as info:
        decompress(make_stream(), threads=threads)
    assert info.value.code is code


@pytest.mark.parametrize("threads", [0, 129])
def test_thread_count_out_of_range(threads):
    with pytest.raises(MTError) as info:
        LZ4Decompressor(threads)
    assert info.value.code is ErrorCode.COMPRESSION_PARAMETER_UNSUPPORTED


def test_default_inputsize():
    assert LZ4Decompressor(1).inputsize == 1024 + 1024 * 4


@pytest.mark.parametrize(
    "make_stream",
    [lambda: _framed(_sample(1000)), lambda: lz4.frame.compress(_sample(1000))],
)
def test_write_failure(make_stream):
    with pytest.raises(MTError) as info:
        LZ4Decompressor(1).decompress(io.BytesIO(make_stream()), _FailingSink())
    assert info.value.code is ErrorCode.WRITE_FAIL