"""Multi-threaded Brotli and LZ4 compression using independent skippable frames."""

__version__ = "0.1.0"
__all__ = ["errors", "pipeline", "brotli_mt", "lz4_compress", "lz4_decompress"]