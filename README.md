# mtcompress

Multi-threaded compression and decompression for Brotli and LZ4.

The input is split into chunks. Each chunk is compressed on its own by a
worker thread and preceded by a small skippable-frame header that records
the size of the compressed chunk. Frames are written out in their original
order, whatever order the workers finish in. Because every frame stands
alone, decompression runs in parallel as well.

## Installation

```
pip install mtcompress
```

## Quick use

In-memory helpers:

```python
from mtcompress import brotli_mt, lz4_compress, lz4_decompress

packed = brotli_mt.compress(b"hello world" * 1000, threads=4, level=5)
assert brotli_mt.decompress(packed, threads=4) == b"hello world" * 1000

packed = lz4_compress.compress(b"abc" * 10000, threads=2, level=1)
assert lz4_decompress.decompress(packed, threads=2) == b"abc" * 10000
```

The helpers default to four threads; `brotli_mt.compress` uses level 3 and
`lz4_compress.compress` level 1 unless told otherwise.

## Streaming

The compressor and decompressor classes read from a binary source and write
to a binary sink, such as an open file or an `io.BytesIO`:

```python
from mtcompress.brotli_mt import BrotliCompressor, BrotliDecompressor

with open("data.bin", "rb") as src, open("data.brot", "wb") as dst:
    stats = BrotliCompressor(threads=4, level=5, inputsize=0).compress(src, dst)
    print(stats.insize, stats.outsize, stats.frames)

with open("data.brot", "rb") as src, open("data.out", "wb") as dst:
    BrotliDecompressor(threads=4, inputsize=0).decompress(src, dst)
```

`mtcompress.lz4_compress.LZ4Compressor` and
`mtcompress.lz4_decompress.LZ4Decompressor` work the same way.

Each `compress` and `decompress` call returns a
`mtcompress.pipeline.Counters` with the bytes read (`insize`), bytes written
(`outsize`) and frames written (`frames`); the same object is kept on the
instance as `stats`, and is updated even when the run fails.

An `inputsize` of `0` picks the default chunk size:

- Brotli compression: 1 MiB times the level (1 MiB at level 0)
- LZ4 compression: 4 MiB
- LZ4 decompression of plain LZ4 streams: 5 KiB read at a time

The LZ4 decompressor also reads plain LZ4 frame streams that have no
skippable-frame headers. Those are decoded on the calling thread, and their
`frames` count stays at 0.

Empty input still produces one (empty) frame, so it round-trips.

## Frame layout

Brotli frames carry a 16-byte header: the skippable magic `0x184D2A50`, the
payload length `8`, the compressed size, the marker `0x5242` and the number
of 64 KiB blocks needed to decompress, all little-endian. LZ4 frames carry a
12-byte header: the same magic, the payload length `4` and the compressed
size, followed by a complete LZ4 frame with stored content size and content
checksum.

## Limits

- threads: 1 to 128
- Brotli levels: 0 to 11
- LZ4 levels: 1 to 12

## Building blocks

`mtcompress.pipeline.OrderedWriter` passes numbered chunks to a sink strictly
in order, holding back any that arrive early; `pending()` tells how many are
waiting. `mtcompress.pipeline.run_workers(worker, threads)` runs a function
on a number of threads (on the calling thread when there is one) and
re-raises a worker's error once all have finished.

## Errors

Failures raise `mtcompress.errors.MTError`. Its `code` attribute holds an
`mtcompress.errors.ErrorCode`: malformed input (`DATA_ERROR`), a failing
read (`READ_FAIL`) or write (`WRITE_FAIL`), a thread count or level out of
range (`COMPRESSION_PARAMETER_UNSUPPORTED`), a frame that could not be
compressed or decompressed, or a failure reported by the LZ4 library.
`error_message(code, library)` gives the message text for a code, and
`callback_error(rv)` maps a failing callback result (-1, -2, -3) to a code.

## What this package does not do

It offers Brotli and LZ4 only, as a library. There is no command-line
program, and no support for other codecs.